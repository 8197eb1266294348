from ..capabilities import Capability
from ..listing import ParserKind
from .base import ServerHandler
from .detection import ServerType


class WindowsIisServer(ServerHandler):
    """Microsoft FTP Service. Lists in MS-DOS style unless MLSD is on."""

    server_type = ServerType.WINDOWS_IIS

    def default_capabilities(self):
        return {
            Capability.SIZE,
            Capability.MDTM,
            Capability.REST,
            Capability.EPSV,
            Capability.EPRT,
            Capability.UTF8,
        }

    def get_parser(self):
        return ParserKind.WINDOWS
