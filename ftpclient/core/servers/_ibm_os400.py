import logging

from ..listing import ParserKind
from .base import ServerHandler
from .detection import ServerType

logger = logging.getLogger(__name__)


class IbmOs400Server(ServerHandler):
    server_type = ServerType.IBM_OS400

    def get_parser(self):
        return ParserKind.IBM_OS400

    async def after_connected(self, session):
        # NAMEFMT 1 switches to integrated file system ('/QSYS.LIB/...') names
        reply = await session._execute_async("SITE NAMEFMT 1")
        if not reply.success:
            logger.warning(f"SITE NAMEFMT 1 refused: {reply.code} {reply.message}")
