"""
Directory-listing parser selection.

Parsing the listing lines belongs to the transfer layer; this module only
decides which rule set a session uses once it is connected.
"""

import enum
import logging

from .servers.detection import ServerOS

logger = logging.getLogger(__name__)


class ParserKind(enum.Enum):
    AUTO = "auto"
    MACHINE = "machine"
    CUSTOM = "custom"
    UNIX = "unix"
    WINDOWS = "windows"
    VMS = "vms"
    IBM_ZOS = "ibm_zos"
    IBM_OS400 = "ibm_os400"
    NONSTOP = "nonstop"


OS_PARSERS = {
    ServerOS.UNIX: ParserKind.UNIX,
    ServerOS.SUN_OS: ParserKind.UNIX,
    ServerOS.WINDOWS: ParserKind.WINDOWS,
    ServerOS.VMS: ParserKind.VMS,
    ServerOS.IBM_ZOS: ParserKind.IBM_ZOS,
    ServerOS.IBM_OS400: ParserKind.IBM_OS400,
}


class ListingParser:
    def __init__(self):
        self.server_os = ServerOS.UNKNOWN
        self.kind = ParserKind.AUTO
        self.effective_kind = ParserKind.UNIX

    def init(self, server_os: ServerOS, kind: ParserKind):
        """Select the rule set. Unknown OS falls back to the generic Unix rules."""
        self.server_os = server_os or ServerOS.UNKNOWN
        self.kind = kind
        if kind is ParserKind.AUTO:
            self.effective_kind = OS_PARSERS.get(self.server_os, ParserKind.UNIX)
        else:
            self.effective_kind = kind
        logger.info(f"Listing parser: {self.kind.value} -> {self.effective_kind.value} (os={self.server_os.value})")
