from ..capabilities import Capability
from ..listing import ParserKind
from .base import ServerHandler
from .detection import ServerType


class OpenVmsServer(ServerHandler):
    server_type = ServerType.OPENVMS

    def default_capabilities(self):
        return {Capability.SIZE, Capability.MDTM}

    def get_parser(self):
        return ParserKind.VMS
