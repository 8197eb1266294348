from ..capabilities import Capability
from .base import ServerHandler
from .detection import ServerType


class PureFtpdServer(ServerHandler):
    server_type = ServerType.PURE_FTPD

    def default_capabilities(self):
        return {
            Capability.MLSD,
            Capability.SIZE,
            Capability.MDTM,
            Capability.REST,
            Capability.UTF8,
            Capability.EPSV,
        }
