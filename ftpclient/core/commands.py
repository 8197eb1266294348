import asyncio
import logging
from datetime import datetime, timezone

from .errors import StateError
from .parser import Parser, Reply

logger = logging.getLogger(__name__)


def mask_command(command: str) -> str:
    """Hide the password of a PASS command for logs and history."""
    if command.upper().startswith("PASS "):
        return "PASS ****"
    return command


class ClientCommandHandler:
    """The execute primitive: one command, one (possibly multi-line) reply.

    Every exchange is appended to ``history``.
    """

    def __init__(self, connection, parser: Parser = None, status=None):
        self.conn = connection
        self.parser = parser or Parser()
        self.status = status
        # history as list of dicts: {"time":..., "command":..., "raw":..., "parsed":..., "error":bool}
        self.history = []

    async def execute(self, command: str) -> Reply:
        if self.conn is None or not self.conn.is_connected:
            raise StateError("No connection established.")
        if self.status is not None and self.status.stale_data_check_allowed:
            await self.conn.read_stale_data()

        exchange = asyncio.ensure_future(self._exchange(command))
        try:
            return await asyncio.shield(exchange)
        except asyncio.CancelledError:
            # the reply must still be consumed or every later command desyncs
            logger.debug(f"Cancelled during {mask_command(command)}, waiting for its reply")
            while not exchange.done():
                try:
                    await asyncio.wait({exchange})
                except asyncio.CancelledError:
                    logger.debug(f"Cancelled again during {mask_command(command)}, still waiting")
            if not exchange.cancelled() and exchange.exception() is not None:
                logger.warning(f"{mask_command(command)} failed after cancellation: {exchange.exception()}")
            raise

    async def _exchange(self, command: str) -> Reply:
        shown = mask_command(command)
        logger.debug(f"→ SEND: {shown}")
        await self.conn.send_command(command)
        raw, parsed = await self.read_reply()
        self._record(shown, raw, parsed)
        return parsed

    async def read_reply(self):
        lines = []
        while not self.parser.is_complete(lines):
            lines.append(await self.conn.read_line())
        raw = "\n".join(lines)
        logger.debug(f"← RECV: {raw}")
        return raw, self.parser.parse_data(raw)

    async def read_banner(self) -> Reply:
        """Read the unsolicited greeting sent after the TCP connect."""
        raw, parsed = await self.read_reply()
        self._record("(greeting)", raw, parsed)
        return parsed

    def _record(self, command: str, raw: str, parsed: Reply):
        self.history.append({
            "time": datetime.now(timezone.utc),
            "command": command,
            "raw": raw,
            "parsed": parsed,
            "error": parsed.type in ("error", "unknown")
        })

    # Helpers for UI
    def get_history(self):
        """Return a copy of the history list."""
        return list(self.history)

    def clear_history(self):
        self.history.clear()
