# tests/conftest.py
import pytest

from ftpclient.core import ClientSession, Credentials, EncryptionMode, SessionConfig


BASIC_REPLIES = {
    "AUTH TLS": "234 AUTH TLS successful",
    "PBSZ 0": "200 PBSZ=0 successful.",
    "PROT P": "200 Protection set to Private.",
    "USER": "331 Password required",
    "PASS": "230 Logged in",
    "FEAT": "211-Features:\n MDTM\n SIZE\n UTF8\n REST STREAM\n211 End",
    "OPTS UTF8 ON": "200 Always in UTF8 mode.",
    "SYST": "215 UNIX Type: L8",
    "CCC": "200 Clear Command Channel OK.",
    "HOST": "220 Host accepted",
    "PWD": '257 "/" is current directory',
    "QUIT": "221 Goodbye.",
}


class FakeConnection:
    """Stands in for ControlConnectionManager; replies come from a FakeServer."""

    supports_downgrade = True

    def __init__(self, server):
        self.server = server
        self.open = False
        self.encrypted = False
        self.encoding = "ascii"
        self.pending = []

    @property
    def is_connected(self):
        return self.open

    @property
    def is_encrypted(self):
        return self.encrypted

    async def connect(self):
        self.server.events.append(("connect",))
        self.open = True
        for greeting in self.server.greetings:
            self.pending.extend(greeting.split("\n"))

    async def disconnect(self):
        self.server.events.append(("disconnect",))
        self.open = False

    async def activate_encryption(self, context, server_hostname):
        self.server.events.append(("tls", server_hostname))
        self.encrypted = True

    async def deactivate_encryption(self):
        self.server.events.append(("tls-off",))
        self.encrypted = False

    async def send_command(self, command):
        self.server.events.append(("send", command))
        self.pending.extend(self.server.reply_for(command).split("\n"))

    async def read_line(self):
        if not self.pending:
            raise ConnectionResetError("no scripted reply left")
        return self.pending.pop(0)

    async def read_stale_data(self, timeout=0.0):
        if timeout:
            self.server.events.append(("drain", timeout))
        return b""


class FakeServer:
    """Scripted FTP server: replies by exact command, then by verb."""

    def __init__(self, greeting="220 FTP server ready.", replies=None, responder=None):
        self.greetings = [greeting] if isinstance(greeting, str) else list(greeting)
        self.replies = dict(BASIC_REPLIES)
        self.replies.update(replies or {})
        self.responder = responder
        self.events = []
        self.connections = []

    def connection_factory(self, config):
        conn = FakeConnection(self)
        self.connections.append(conn)
        return conn

    def reply_for(self, command):
        if self.responder is not None:
            reply = self.responder(command)
            if reply is not None:
                return reply
        if command in self.replies:
            return self.replies[command]
        return self.replies.get(command.split(" ")[0], "502 Command not implemented.")

    @property
    def commands(self):
        return [event[1] for event in self.events if event[0] == "send"]

    def sent(self, verb):
        return [command for command in self.commands if command.split(" ")[0] == verb]


class DirectoryTree:
    """Answers PWD/CWD/MKD against a set of absolute directory paths."""

    def __init__(self, *existing, exists_reply="550 Directory already exists"):
        self.dirs = {"/"} | set(existing)
        self.cwd = "/"
        self.exists_reply = exists_reply

    def __call__(self, command):
        verb, _, arg = command.partition(" ")
        if verb == "PWD":
            return f'257 "{self.cwd}" is current directory'
        if verb == "CWD":
            if arg in self.dirs:
                self.cwd = arg
                return "250 Directory changed"
            return "550 No such directory"
        if verb == "MKD":
            if arg in self.dirs:
                return self.exists_reply
            self.dirs.add(arg)
            return f'257 "{arg}" created'
        return None


def make_session(server, **config):
    config.setdefault("host", "ftp.example.com")
    return ClientSession(SessionConfig(**config), connection_factory=server.connection_factory)


@pytest.fixture
def server():
    return FakeServer()


@pytest.fixture
def credentials():
    return Credentials("alice", "s3cret")


@pytest.fixture
def session(server):
    return make_session(server)


@pytest.fixture
def explicit_session(server, credentials):
    return make_session(server, encryption_mode=EncryptionMode.EXPLICIT, credentials=credentials)
