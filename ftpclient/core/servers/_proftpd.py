import logging

from ..capabilities import Capability
from .base import ServerHandler
from .detection import ServerType

logger = logging.getLogger(__name__)


class ProFtpdServer(ServerHandler):
    """ProFTPD, with mod_site_misc for one-shot recursive MKD."""

    server_type = ServerType.PROFTPD

    def default_capabilities(self):
        return {Capability.SIZE, Capability.MDTM, Capability.REST}

    async def create_directory(self, session, path: str, force: bool) -> bool:
        # SITE MKDIR creates every missing parent in one round trip
        if not force or not self.is_absolute_path(path):
            return False
        if Capability.SITE_MKDIR not in session.capabilities:
            return False
        reply = await session._execute_async(f"SITE MKDIR {path}")
        if not reply.success:
            logger.debug(f"SITE MKDIR refused ({reply.code}), falling back to MKD")
        return reply.success
