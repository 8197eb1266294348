# tests/test_commands.py
import asyncio
from unittest.mock import AsyncMock, Mock

import pytest

from ftpclient.core.commands import ClientCommandHandler, mask_command
from ftpclient.core.errors import StateError
from ftpclient.core.session import ConnectionStatus


def scripted_connection(*lines):
    conn = Mock()
    conn.is_connected = True
    conn.send_command = AsyncMock()
    conn.read_line = AsyncMock(side_effect=list(lines))
    conn.read_stale_data = AsyncMock(return_value=b"")
    return conn


class SlowConnection:
    """Holds the reply back until the test releases it."""

    is_connected = True

    def __init__(self, reply):
        self.reply = reply
        self.sent = asyncio.Event()
        self.release = asyncio.Event()
        self.pending = []

    async def send_command(self, command):
        self.pending.extend(self.reply.split("\n"))
        self.sent.set()

    async def read_line(self):
        await self.release.wait()
        return self.pending.pop(0)

    async def read_stale_data(self, timeout=0.0):
        return b""


def test_mask_command():
    assert mask_command("PASS hunter2") == "PASS ****"
    assert mask_command("pass hunter2") == "PASS ****"
    assert mask_command("USER alice") == "USER alice"


@pytest.mark.asyncio
async def test_execute_reads_multiline_reply():
    conn = scripted_connection("211-Features:", " SIZE", " MDTM", "211 End")
    handler = ClientCommandHandler(conn)

    reply = await handler.execute("FEAT")

    conn.send_command.assert_awaited_once_with("FEAT")
    assert reply.code == "211"
    assert reply.info_lines == ["Features:", "SIZE", "MDTM"]
    assert conn.read_line.await_count == 4


@pytest.mark.asyncio
async def test_history_masks_password():
    handler = ClientCommandHandler(scripted_connection("230 Logged in"))

    await handler.execute("PASS s3cret")

    entry = handler.get_history()[-1]
    assert entry["command"] == "PASS ****"
    assert entry["raw"] == "230 Logged in"
    assert entry["error"] is False


@pytest.mark.asyncio
async def test_history_flags_errors_and_clears():
    handler = ClientCommandHandler(scripted_connection("550 Nope"))

    await handler.execute("CWD /missing")

    assert handler.get_history()[-1]["error"] is True
    handler.clear_history()
    assert handler.get_history() == []


@pytest.mark.asyncio
async def test_stale_data_drained_only_when_allowed():
    conn = scripted_connection("200 NOOP ok", "200 NOOP ok")
    status = ConnectionStatus()
    handler = ClientCommandHandler(conn, status=status)

    await handler.execute("NOOP")
    conn.read_stale_data.assert_not_awaited()

    status.stale_data_check_allowed = True
    await handler.execute("NOOP")
    conn.read_stale_data.assert_awaited_once()


@pytest.mark.asyncio
async def test_execute_without_connection():
    with pytest.raises(StateError):
        await ClientCommandHandler(None).execute("NOOP")


@pytest.mark.asyncio
async def test_cancelled_execute_still_consumes_reply():
    conn = SlowConnection("200 NOOP ok")
    handler = ClientCommandHandler(conn)

    task = asyncio.create_task(handler.execute("NOOP"))
    await conn.sent.wait()
    task.cancel()
    await asyncio.sleep(0)
    conn.release.set()

    with pytest.raises(asyncio.CancelledError):
        await task

    # the reply was read, so the channel stays in step
    assert conn.pending == []
    assert handler.get_history()[-1]["command"] == "NOOP"


@pytest.mark.asyncio
async def test_repeated_cancel_still_consumes_multiline_reply():
    conn = SlowConnection("211-Features:\n SIZE\n MDTM\n211 End")
    handler = ClientCommandHandler(conn)

    task = asyncio.create_task(handler.execute("FEAT"))
    await conn.sent.wait()
    task.cancel()
    await asyncio.sleep(0)
    task.cancel()
    await asyncio.sleep(0)
    conn.release.set()

    with pytest.raises(asyncio.CancelledError):
        await task

    assert conn.pending == []
    entry = handler.get_history()[-1]
    assert entry["command"] == "FEAT"
    assert entry["parsed"].info_lines == ["Features:", "SIZE", "MDTM"]
