from ..capabilities import Capability
from ..listing import ParserKind
from .base import ServerHandler
from .detection import ServerType


class VsFtpdServer(ServerHandler):
    server_type = ServerType.VSFTPD

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
        # vsftpd always answers LIST in 'ls -l' format
        return ParserKind.UNIX
