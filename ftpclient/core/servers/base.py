import logging
from typing import Set

from ..capabilities import Capability, HashAlgorithm
from ..listing import ParserKind
from ..paths import is_absolute

logger = logging.getLogger(__name__)


class ServerHandler:
    """Quirks and defaults of one FTP server implementation.

    Handlers never hold connection state; every hook receives the session
    it acts on.
    """

    server_type = None

    def default_capabilities(self) -> Set[Capability]:
        """Capabilities assumed when the server does not answer FEAT."""
        return set()

    def default_hash_algorithms(self) -> HashAlgorithm:
        return HashAlgorithm.NONE

    def get_parser(self) -> ParserKind:
        return ParserKind.AUTO

    async def create_directory(self, session, path: str, force: bool) -> bool:
        """Server-specific directory creation. False means 'not handled'."""
        return False

    async def before_connected(self, session):
        pass

    async def after_connected(self, session):
        pass

    def is_absolute_path(self, path: str) -> bool:
        return is_absolute(path)

    def __repr__(self):
        return f"{type(self).__name__}()"
