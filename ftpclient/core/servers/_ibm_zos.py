from ..listing import ParserKind
from .base import ServerHandler
from .detection import ServerType


class IbmZosServer(ServerHandler):
    server_type = ServerType.IBM_ZOS

    def get_parser(self):
        return ParserKind.IBM_ZOS

    def is_absolute_path(self, path: str) -> bool:
        # data set names are absolute when quoted
        return path.startswith("/") or path.startswith("'")
