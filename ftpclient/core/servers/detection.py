"""Server vendor and operating system detection."""

import enum
import logging

logger = logging.getLogger(__name__)


class ServerType(enum.Enum):
    UNKNOWN = "unknown"
    PROFTPD = "proftpd"
    PURE_FTPD = "pure-ftpd"
    VSFTPD = "vsftpd"
    FILEZILLA = "filezilla"
    WINDOWS_IIS = "windows-iis"
    IBM_ZOS = "ibm-zos"
    IBM_OS400 = "ibm-os400"
    OPENVMS = "openvms"


class ServerOS(enum.Enum):
    UNKNOWN = "unknown"
    UNIX = "unix"
    SUN_OS = "sunos"
    WINDOWS = "windows"
    VMS = "vms"
    IBM_ZOS = "ibm-zos"
    IBM_OS400 = "ibm-os400"


# Checked in order, first match wins.
GREETING_MARKERS = (
    ("Pure-FTPd", ServerType.PURE_FTPD),
    ("vsFTPd", ServerType.VSFTPD),
    ("ProFTPD", ServerType.PROFTPD),
    ("FileZilla Server", ServerType.FILEZILLA),
    ("Microsoft FTP Service", ServerType.WINDOWS_IIS),
    ("IBM FTP CS", ServerType.IBM_ZOS),
    ("OpenVMS", ServerType.OPENVMS),
)

SYST_MARKERS = (
    ("z/OS", ServerType.IBM_ZOS),
    ("OS/400", ServerType.IBM_OS400),
    ("OpenVMS", ServerType.OPENVMS),
    ("emulated by FileZilla", ServerType.FILEZILLA),
    ("Windows_NT", ServerType.WINDOWS_IIS),
)

SYST_OS_MARKERS = (
    ("WINDOWS", ServerOS.WINDOWS),
    ("SUNOS", ServerOS.SUN_OS),
    ("UNIX", ServerOS.UNIX),
    ("VMS", ServerOS.VMS),
    ("Z/OS", ServerOS.IBM_ZOS),
    ("MVS", ServerOS.IBM_ZOS),
    ("OS/400", ServerOS.IBM_OS400),
)


def detect_by_greeting(text: str) -> ServerType:
    """Cheap guess from the welcome banner."""
    for marker, server_type in GREETING_MARKERS:
        if marker in (text or ""):
            logger.info(f"Server detected from greeting: {server_type.value}")
            return server_type
    return ServerType.UNKNOWN


def detect_by_syst(system_type: str) -> ServerType:
    for marker, server_type in SYST_MARKERS:
        if marker in (system_type or ""):
            logger.info(f"Server detected from SYST: {server_type.value}")
            return server_type
    return ServerType.UNKNOWN


def detect_os(system_type: str) -> ServerOS:
    upper = (system_type or "").upper()
    for marker, server_os in SYST_OS_MARKERS:
        if marker in upper:
            return server_os
    return ServerOS.UNKNOWN
