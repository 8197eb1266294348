"""
FTP/FTPS client session.

Connection bootstrap and recursive directory creation are written once as
coroutines. The blocking methods run the same coroutines to completion
under a re-entrant lock, so both surfaces send the same commands and end
in the same state.
"""

import asyncio
import codecs
import logging
import threading
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional, Set

from .capabilities import Capability, HashAlgorithm, parse_features
from .commands import ClientCommandHandler
from .config import EncryptionMode, SessionConfig
from .connection import ControlConnectionManager
from .errors import AuthenticationError, ConfigError, ProtocolError, SecurityError, StateError
from .listing import ListingParser, ParserKind
from .parser import Parser, Reply
from .paths import get_directory_name, get_ftp_path, is_root_directory
from .servers.detection import ServerOS, ServerType, detect_by_greeting, detect_by_syst, detect_os
from .servers.dispatch import get_server_handler
from .servers.messages import FOLDER_EXISTS, is_known_error

logger = logging.getLogger(__name__)

# Seconds to wait for leftovers of the TLS framing after CCC
CCC_DRAIN_TIMEOUT = 0.5


@dataclass
class ConnectionStatus:
    tls_upgrade_failed: bool = False
    utf8_opts_accepted: bool = False
    stale_data_check_allowed: bool = False

    def reset(self):
        self.tls_upgrade_failed = False
        self.utf8_opts_accepted = False
        self.stale_data_check_allowed = False


def _same_encoding(name: str, other: str) -> bool:
    return codecs.lookup(name).name == codecs.lookup(other).name


def parse_pwd(reply: Reply) -> Optional[str]:
    """Extract the directory from ``257 "/some/dir" is current directory``."""
    message = reply.message
    start = message.find('"')
    end = message.rfind('"')
    if start < 0 or end <= start:
        return None
    return message[start + 1:end].replace('""', '"')


class ClientSession:
    """Estado de sesión de un cliente FTP: una conexión de control."""

    def __init__(self, config: SessionConfig = None, connection_factory=None, server_handler=None,
                 authenticator: Callable[["ClientSession"], Awaitable] = None,
                 directory_exists: Callable[[str], Awaitable[bool]] = None):
        self.config = config or SessionConfig()
        self.connection_factory = connection_factory or self._default_connection
        self.authenticator = authenticator
        self.directory_exists_check = directory_exists

        # Lock del API bloqueante; re-entrante para la recursión de MKD
        self.lock = threading.RLock()
        self._async_lock: Optional[asyncio.Lock] = None
        self._async_lock_loop = None

        self.conn = None
        self.status = ConnectionStatus()
        self.commands = ClientCommandHandler(None, Parser(), self.status)

        self.capabilities: Set[Capability] = set()
        self.hash_algorithms = HashAlgorithm.NONE
        self._server_handler = server_handler
        self._handler_pinned = server_handler is not None
        self.server_type = ServerType.UNKNOWN
        self.server_os = ServerOS.UNKNOWN
        self.system_type: Optional[str] = None
        self.greeting: Optional[Reply] = None
        self.text_encoding = self.config.text_encoding
        self.listing_parser = ListingParser()
        self.force_set_data_type = False

        self.is_clone = False
        self._inherited_hash_algorithms = HashAlgorithm.NONE
        self.is_ready = False
        self.closed = False

    @staticmethod
    def _default_connection(config: SessionConfig) -> ControlConnectionManager:
        return ControlConnectionManager(
            config.host,
            config.port_or_default,
            timeout=config.connect_timeout,
            read_timeout=config.read_timeout,
            ip_versions=config.ip_versions,
            keep_alive=config.keep_alive,
        )

    # ----------------- negotiated state -----------------
    @property
    def server_handler(self):
        return self._server_handler

    @server_handler.setter
    def server_handler(self, handler):
        """Install a handler by hand. It survives reconnects until cleared with None."""
        self._server_handler = handler
        self._handler_pinned = handler is not None

    @property
    def is_connected(self) -> bool:
        return self.conn is not None and self.conn.is_connected

    @property
    def is_encrypted(self) -> bool:
        return self.is_connected and self.conn.is_encrypted

    def has_feature(self, capability: Capability) -> bool:
        return capability in self.capabilities

    def load_profile(self, profile):
        """Replace the configuration with a SessionConfig or a profile mapping."""
        if not isinstance(profile, SessionConfig):
            profile = SessionConfig.from_profile(profile)
        self.config = profile
        self.text_encoding = profile.text_encoding

    def clone(self) -> "ClientSession":
        """New session for the same server that skips FEAT on connect."""
        clone = ClientSession(
            self.config.copy(),
            connection_factory=self.connection_factory,
            server_handler=self._server_handler if self._handler_pinned else None,
            authenticator=self.authenticator,
            directory_exists=self.directory_exists_check,
        )
        clone.is_clone = True
        clone.capabilities = set(self.capabilities)
        clone._inherited_hash_algorithms = self.hash_algorithms
        return clone

    # ----------------- blocking surface -----------------
    @staticmethod
    def _run_blocking(coro):
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            return asyncio.run(coro)
        coro.close()
        raise RuntimeError("Blocking call inside a running event loop, use the *_async methods.")

    def connect(self, profile=None):
        with self.lock:
            self._run_blocking(self._connect(profile))

    def disconnect(self):
        with self.lock:
            self._run_blocking(self._disconnect())

    def close(self):
        with self.lock:
            self._run_blocking(self._close())

    def execute(self, command: str) -> Reply:
        with self.lock:
            return self._run_blocking(self.commands.execute(command))

    def directory_exists(self, path: str) -> bool:
        with self.lock:
            return self._run_blocking(self._directory_exists(path))

    def create_directory(self, path: str, force: bool = True) -> bool:
        with self.lock:
            return self._run_blocking(self._create_directory(path, force))

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    # ----------------- coroutine surface -----------------
    def _get_async_lock(self) -> asyncio.Lock:
        # one lock per event loop, a session may outlive several asyncio.run calls
        loop = asyncio.get_running_loop()
        if self._async_lock is None or self._async_lock_loop is not loop:
            self._async_lock = asyncio.Lock()
            self._async_lock_loop = loop
        return self._async_lock

    async def connect_async(self, profile=None):
        async with self._get_async_lock():
            await self._connect(profile)

    async def disconnect_async(self):
        async with self._get_async_lock():
            await self._disconnect()

    async def close_async(self):
        async with self._get_async_lock():
            await self._close()

    async def execute_async(self, command: str) -> Reply:
        """Raw command on the control channel, serialized with the other coroutines."""
        async with self._get_async_lock():
            return await self._execute_async(command)

    async def _execute_async(self, command: str) -> Reply:
        # Unlocked: used by the bootstrap, the directory creator and the
        # server handlers while the session lock is already held.
        return await self.commands.execute(command)

    async def directory_exists_async(self, path: str) -> bool:
        async with self._get_async_lock():
            return await self._directory_exists(path)

    async def create_directory_async(self, path: str, force: bool = True) -> bool:
        async with self._get_async_lock():
            return await self._create_directory(path, force)

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.close_async()

    # ----------------- bootstrap -----------------
    async def _connect(self, profile=None):
        if profile is not None:
            self.load_profile(profile)
        if self.closed:
            raise StateError("This session has been closed. It is no longer accessible.")

        if self.is_connected:
            logger.info("Already connected, disconnecting before reconnect")
            await self._disconnect()

        config = self.config
        if not config.host:
            logger.error("✗ Connect called without a host")
            raise ConfigError("No host has been specified")

        self._reset_negotiation()

        self.conn = self.connection_factory(config)
        self.conn.encoding = self.text_encoding
        self.commands.conn = self.conn
        await self.conn.connect()

        if config.encryption_mode is EncryptionMode.IMPLICIT:
            await self.conn.activate_encryption(config.create_ssl_context(), config.host)

        self.greeting = await self._handshake()
        self.server_type = detect_by_greeting(self.greeting.text)
        if self._server_handler is not None:
            await self._server_handler.before_connected(self)

        if config.send_host:
            reply = await self._execute_async(f"HOST {config.send_host_domain or config.host}")
            if not reply.success:
                logger.error(f"✗ HOST refused: {reply.code} {reply.message}")
                raise ProtocolError(reply, "HOST command failed.")

        if config.encryption_mode in (EncryptionMode.EXPLICIT, EncryptionMode.AUTO):
            await self._upgrade_to_tls()

        if config.credentials is not None:
            await self._authenticate()

        if self.conn.is_encrypted and config.data_connection_encryption:
            for command in ("PBSZ 0", "PROT P"):
                reply = await self._execute_async(command)
                if not reply.success:
                    logger.error(f"✗ {command} refused: {reply.code} {reply.message}")
                    raise ProtocolError(reply)

        assume_capabilities = await self._discover_capabilities()
        await self._negotiate_encoding()

        reply = await self._execute_async("SYST")
        if reply.success:
            self.system_type = reply.message
            if self.server_type is ServerType.UNKNOWN:
                self.server_type = detect_by_syst(self.system_type)
            self.server_os = detect_os(self.system_type)

        if self._server_handler is None:
            self._server_handler = get_server_handler(self.server_type)
        logger.info(f"Server: {self.server_type.value}, OS: {self.server_os.value}, handler: {self._server_handler}")

        if assume_capabilities:
            self._assume_capabilities()

        if self.conn.is_encrypted and config.plain_text_encryption:
            await self._clear_command_channel()

        kind = config.listing_parser
        if kind is not ParserKind.CUSTOM:
            kind = self._server_handler.get_parser() if self._server_handler is not None else ParserKind.AUTO
            if Capability.MLSD in self.capabilities:
                kind = ParserKind.MACHINE
        self.listing_parser.init(self.server_os, kind)

        # a new connection forgets any TYPE sent on the previous one
        self.force_set_data_type = True

        if self._server_handler is not None:
            await self._server_handler.after_connected(self)

        self.status.stale_data_check_allowed = True
        self.is_ready = True
        logger.info(f"✓ Session ready on {config.host} (encrypted={self.conn.is_encrypted})")

    def _reset_negotiation(self):
        self.status.reset()
        self.is_ready = False
        self.hash_algorithms = HashAlgorithm.NONE
        if not self._handler_pinned:
            self._server_handler = None
        self.server_type = ServerType.UNKNOWN
        self.server_os = ServerOS.UNKNOWN
        self.system_type = None
        self.greeting = None
        self.text_encoding = self.config.text_encoding

    async def _handshake(self) -> Reply:
        reply = await self.commands.read_banner()
        if reply.code == "120":
            logger.info(f"Server not ready yet: {reply.message}")
            reply = await self.commands.read_banner()
        if not reply.success:
            logger.error(f"✗ Server refused the connection: {reply.code} {reply.message}")
            raise ProtocolError(reply)
        logger.info(f"Banner: {reply.code} {reply.message}")
        return reply

    async def _upgrade_to_tls(self):
        reply = await self._execute_async("AUTH TLS")
        if reply.success:
            await self.conn.activate_encryption(self.config.create_ssl_context(), self.config.host)
            return
        self.status.tls_upgrade_failed = True
        if self.config.encryption_mode is EncryptionMode.EXPLICIT:
            logger.error(f"✗ AUTH TLS refused: {reply.code} {reply.message}")
            raise SecurityError("AUTH TLS command failed.", reply)
        logger.warning(f"AUTH TLS refused ({reply.code}), continuing without encryption")

    async def _authenticate(self):
        if self.authenticator is not None:
            await self.authenticator(self)
            return
        credentials = self.config.credentials
        reply = await self._execute_async(f"USER {credentials.username}")
        if reply.success and reply.code.startswith("3"):
            reply = await self._execute_async(f"PASS {credentials.password}")
        if reply.code == "332" and credentials.account:
            reply = await self._execute_async(f"ACCT {credentials.account}")
        if not reply.code.startswith("2"):
            logger.error(f"✗ Login refused for {credentials.username}: {reply.code} {reply.message}")
            raise AuthenticationError(reply)
        logger.info(f"✓ Logged in as {credentials.username}")

    async def _discover_capabilities(self) -> bool:
        """FEAT. Returns True when the handler defaults must be assumed instead."""
        if not self.is_clone and self.config.check_capabilities:
            self.capabilities.clear()
        elif self.capabilities:
            self.hash_algorithms = self._inherited_hash_algorithms

        if self.capabilities or not self.config.check_capabilities:
            return False

        reply = await self._execute_async("FEAT")
        if reply.success and reply.info_lines:
            capabilities, algorithms = parse_features(reply.info_lines)
            self.capabilities.update(capabilities)
            self.hash_algorithms |= algorithms
            return False
        logger.warning(f"FEAT not available ({reply.code}), assuming server defaults")
        return True

    def _assume_capabilities(self):
        if self._server_handler is None:
            return
        self.capabilities.update(self._server_handler.default_capabilities())
        self.hash_algorithms |= self._server_handler.default_hash_algorithms()

    async def _negotiate_encoding(self):
        if (self.config.text_encoding_auto_utf and _same_encoding(self.text_encoding, "ascii")
                and Capability.UTF8 in self.capabilities):
            self.text_encoding = "utf-8"
            self.conn.encoding = self.text_encoding
        logger.info(f"Text encoding: {self.text_encoding}")

        if _same_encoding(self.text_encoding, "utf-8"):
            # servers disagree on whether this is needed, a refusal is harmless
            reply = await self._execute_async("OPTS UTF8 ON")
            if reply.success:
                self.status.utf8_opts_accepted = True
            else:
                logger.warning(f"OPTS UTF8 ON refused: {reply.code} {reply.message}")

    async def _clear_command_channel(self):
        if not self.conn.supports_downgrade:
            logger.warning("CCC requested but the transport cannot drop TLS, keeping encryption")
            return
        reply = await self._execute_async("CCC")
        if not reply.success:
            logger.error(f"✗ CCC refused: {reply.code} {reply.message}")
            raise SecurityError(
                "Failed to disable encryption with CCC command. Perhaps your server does "
                "not support it or is not configured to allow it.", reply)
        await self.conn.deactivate_encryption()
        await self.conn.read_stale_data(CCC_DRAIN_TIMEOUT)

    # ----------------- teardown -----------------
    async def _disconnect(self):
        self.is_ready = False
        self.status.stale_data_check_allowed = False
        if self.conn is None:
            return
        if self.conn.is_connected:
            try:
                await self.commands.execute("QUIT")
            except OSError as e:
                logger.warning(f"QUIT failed: {e}")
            await self.conn.disconnect()

    async def _close(self):
        await self._disconnect()
        self.closed = True

    # ----------------- directories -----------------
    def _check_connected(self):
        if self.closed:
            raise StateError("This session has been closed. It is no longer accessible.")
        if not self.is_connected:
            raise StateError("Not connected. Connect first.")
        # a failed bootstrap leaves the channel half negotiated
        if not self.is_ready:
            raise StateError("Session is not ready. Connect again.")

    async def _directory_exists(self, path: str) -> bool:
        path = get_ftp_path(path)
        if is_root_directory(path):
            return True
        if self.directory_exists_check is not None:
            return await self.directory_exists_check(path)

        self._check_connected()
        reply = await self._execute_async("PWD")
        cwd = parse_pwd(reply) if reply.success else None
        reply = await self._execute_async(f"CWD {path}")
        if not reply.success:
            return False
        if cwd is not None:
            back = await self._execute_async(f"CWD {cwd}")
            if not back.success:
                logger.warning(f"Could not return to {cwd}: {back.code} {back.message}")
        return True

    async def _create_directory(self, path: str, force: bool) -> bool:
        path = get_ftp_path(path)
        logger.debug(f"CreateDirectory({path!r}, force={force})")

        # cannot create root or working directory
        if is_root_directory(path):
            return False

        self._check_connected()

        if self._server_handler is not None:
            if await self._server_handler.create_directory(self, path, force):
                return True

        if force:
            parent = get_directory_name(path)
            if not await self._directory_exists(parent):
                logger.debug(f"Create non-existent parent directory: {parent}")
                await self._create_directory(parent, True)

        reply = await self._execute_async(f"MKD {path}")
        if reply.success:
            logger.info(f"✓ Created {path}")
            return True

        # if the error indicates the directory already exists, its not an error
        if reply.code == "550" or (reply.code.startswith("5") and is_known_error(reply.message, FOLDER_EXISTS)):
            logger.debug(f"{path} already exists: {reply.code} {reply.message}")
            return False

        logger.error(f"✗ MKD {path} failed: {reply.code} {reply.message}")
        raise ProtocolError(reply)

    def __str__(self):
        return f"ClientSession(host={self.config.host}, server={self.server_type.value}, ready={self.is_ready})"
