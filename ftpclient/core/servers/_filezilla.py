from ..capabilities import Capability, HashAlgorithm
from .base import ServerHandler
from .detection import ServerType


class FileZillaServer(ServerHandler):
    server_type = ServerType.FILEZILLA

    def default_capabilities(self):
        return {
            Capability.MLSD,
            Capability.SIZE,
            Capability.MDTM,
            Capability.REST,
            Capability.UTF8,
            Capability.EPSV,
            Capability.HASH,
        }

    def default_hash_algorithms(self):
        return HashAlgorithm.SHA1 | HashAlgorithm.SHA256 | HashAlgorithm.SHA512 | HashAlgorithm.MD5
