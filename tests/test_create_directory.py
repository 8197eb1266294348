# tests/test_create_directory.py
from unittest.mock import AsyncMock

import pytest

from conftest import DirectoryTree, FakeServer, make_session

from ftpclient.core import ClientSession, ProtocolError, SessionConfig, StateError


@pytest.fixture
def tree():
    return DirectoryTree()


@pytest.fixture
def tree_server(tree):
    return FakeServer(responder=tree)


@pytest.fixture
def connected(tree_server):
    session = make_session(tree_server)
    session.connect()
    return session


# ================================================================
# RECURSIVE CREATION
# ================================================================
def test_root_is_never_created(connected, tree_server):
    before = list(tree_server.commands)

    assert connected.create_directory("/") is False
    assert connected.create_directory("./") is False
    assert tree_server.commands == before


def test_root_needs_no_connection(session):
    assert session.create_directory("/") is False


def test_missing_parents_are_created_first(connected, tree_server, tree):
    assert connected.create_directory("/a/b/c") is True

    assert tree_server.sent("MKD") == ["MKD /a", "MKD /a/b", "MKD /a/b/c"]
    assert {"/a", "/a/b", "/a/b/c"} <= tree.dirs


def test_existing_parent_is_left_alone():
    tree = DirectoryTree("/a")
    server = FakeServer(responder=tree)
    session = make_session(server)
    session.connect()

    assert session.create_directory("/a/b") is True

    assert server.sent("MKD") == ["MKD /a/b"]
    # the probe returns to the original working directory
    assert server.sent("CWD") == ["CWD /a", "CWD /"]


def test_trailing_slash_and_backslashes_are_normalised(connected, tree_server):
    connected.create_directory("/a/")
    connected.create_directory("\\a\\b")

    assert tree_server.sent("MKD") == ["MKD /a", "MKD /a/b"]


def test_without_force_only_the_leaf_is_sent(connected, tree_server):
    before = len(tree_server.commands)

    assert connected.create_directory("/a/b", force=False) is True

    assert tree_server.commands[before:] == ["MKD /a/b"]


# ================================================================
# ALREADY EXISTS
# ================================================================
def test_550_means_already_exists():
    server = FakeServer(responder=DirectoryTree("/a"))
    session = make_session(server)
    session.connect()

    assert session.create_directory("/a") is False


def test_known_phrase_means_already_exists():
    server = FakeServer(responder=DirectoryTree("/a", exists_reply="521 Directory already exists"))
    session = make_session(server)
    session.connect()

    assert session.create_directory("/a") is False


def test_second_call_is_idempotent(connected, tree_server):
    assert connected.create_directory("/a/b") is True
    assert connected.create_directory("/a/b") is False

    assert tree_server.sent("MKD") == ["MKD /a", "MKD /a/b", "MKD /a/b"]


def test_other_failures_raise():
    server = FakeServer(replies={"MKD": "553 Requested action not taken."})
    session = make_session(server)
    session.connect()

    with pytest.raises(ProtocolError) as excinfo:
        session.create_directory("/x")

    assert excinfo.value.reply.code == "553"
    assert "Requested action not taken" in excinfo.value.reply.message


# ================================================================
# COLLABORATORS
# ================================================================
def test_injected_existence_check(tree_server):
    exists = AsyncMock(return_value=True)
    session = ClientSession(SessionConfig(host="ftp.example.com"),
                            connection_factory=tree_server.connection_factory,
                            directory_exists=exists)
    session.connect()

    assert session.create_directory("/a/b") is True

    exists.assert_awaited_once_with("/a")
    assert tree_server.sent("MKD") == ["MKD /a/b"]
    assert tree_server.sent("CWD") == []


def test_proftpd_site_mkdir_short_circuits():
    server = FakeServer(
        greeting="220 ProFTPD 1.3.8 Server ready.",
        replies={"FEAT": "211-Features:\n SITE MKDIR\n211 End",
                 "SITE": "200 SITE MKDIR command successful"},
    )
    session = make_session(server)
    session.connect()

    assert session.create_directory("/a/b/c") is True

    assert server.sent("SITE") == ["SITE MKDIR /a/b/c"]
    assert server.sent("MKD") == []


def test_proftpd_falls_back_to_mkd():
    server = FakeServer(
        greeting="220 ProFTPD 1.3.8 Server ready.",
        replies={"FEAT": "211-Features:\n SITE MKDIR\n211 End", "SITE": "500 SITE not understood"},
        responder=DirectoryTree(),
    )
    session = make_session(server)
    session.connect()

    assert session.create_directory("/a") is True

    assert server.sent("MKD") == ["MKD /a"]


# ================================================================
# STATE
# ================================================================
def test_requires_connection(session):
    with pytest.raises(StateError):
        session.create_directory("/a")


def test_closed_session(connected):
    connected.close()

    with pytest.raises(StateError):
        connected.create_directory("/a")


def test_directory_exists(connected, tree_server):
    assert connected.directory_exists("/") is True
    assert connected.directory_exists("/nope") is False
    connected.create_directory("/a")
    assert connected.directory_exists("/a") is True


@pytest.mark.asyncio
async def test_async_surface(tree_server):
    session = make_session(tree_server)
    await session.connect_async()

    assert await session.create_directory_async("/a/b") is True
    assert await session.create_directory_async("/a/b") is False
    assert await session.directory_exists_async("/a") is True

    assert tree_server.sent("MKD") == ["MKD /a", "MKD /a/b", "MKD /a/b"]
