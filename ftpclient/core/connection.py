import asyncio
import logging
import select
import socket
import ssl
from typing import Optional

from .config import IpVersion

logger = logging.getLogger(__name__)


class ControlConnectionManager:
    """TCP control connection with in-place TLS upgrade (AUTH TLS / implicit)
    and downgrade (CCC).

    Socket calls are blocking and run in worker threads so the same object
    serves the coroutine API and the blocking adapter built on top of it.
    """

    # SSLSocket.unwrap() gives back the plain socket after CCC
    supports_downgrade = True

    def __init__(self, host: str, port: int, timeout: float = 10.0, read_timeout: float = None,
                 ip_versions: IpVersion = IpVersion.ANY, keep_alive: bool = False,
                 encoding: str = "ascii"):
        self.host = host
        self.port = port
        self.socket: Optional[socket.socket] = None
        self.timeout = timeout
        self.read_timeout = read_timeout if read_timeout is not None else timeout
        self.ip_versions = ip_versions
        self.keep_alive = keep_alive
        self.encoding = encoding
        self._buffer = b""

    @property
    def is_connected(self) -> bool:
        return self.socket is not None

    @property
    def is_encrypted(self) -> bool:
        return isinstance(self.socket, ssl.SSLSocket)

    async def connect(self):
        if self.socket is not None:
            raise RuntimeError("Connection already established.")
        try:
            logger.info(f"Connecting to {self.host}:{self.port} (timeout={self.timeout}s)")
            self.socket = await asyncio.to_thread(self._open_socket)
            logger.info(f"✓ Connected to {self.host}:{self.port}")
        except (socket.timeout, ConnectionRefusedError, OSError) as e:
            logger.error(f"✗ Failed to connect to {self.host}:{self.port} - {e}")
            self.socket = None
            raise ConnectionError(f"Failed to connect to {self.host}:{self.port} - {e}") from e

    def _open_socket(self) -> socket.socket:
        families = []
        if IpVersion.IPV4 in self.ip_versions:
            families.append(socket.AF_INET)
        if IpVersion.IPV6 in self.ip_versions:
            families.append(socket.AF_INET6)

        addresses = [
            info for info in socket.getaddrinfo(self.host, self.port, 0, socket.SOCK_STREAM)
            if info[0] in families
        ]
        if not addresses:
            raise OSError(f"No address of {self.host} matches {self.ip_versions}")

        last_error = None
        for family, type_, proto, _, address in addresses:
            sock = socket.socket(family, type_, proto)
            sock.settimeout(self.timeout)
            try:
                sock.connect(address)
            except OSError as e:
                logger.debug(f"Connect to {address} failed: {e}")
                sock.close()
                last_error = e
                continue
            sock.settimeout(self.read_timeout)
            if self.keep_alive:
                sock.setsockopt(socket.SOL_SOCKET, socket.SO_KEEPALIVE, 1)
            return sock
        raise last_error

    async def disconnect(self):
        if self.socket:
            try:
                logger.info(f"Closing connection to {self.host}:{self.port}")
                self.socket.shutdown(socket.SHUT_RDWR)
            except OSError as e:
                logger.debug(f"Shutdown of {self.host}:{self.port} failed: {e}")
            self.socket.close()
            logger.info(f"✓ Disconnected from {self.host}:{self.port}")
        self.socket = None
        self._buffer = b""

    async def activate_encryption(self, context: ssl.SSLContext, server_hostname: str):
        """Run the TLS handshake over the connected socket."""
        if self.socket is None:
            raise RuntimeError("No connection established.")
        self.socket = await asyncio.to_thread(
            context.wrap_socket, self.socket, server_hostname=server_hostname)
        self._buffer = b""
        logger.info(f"✓ TLS active ({self.socket.version()}, {self.socket.cipher()[0]})")

    async def deactivate_encryption(self):
        """Send close_notify and continue on the plain socket."""
        if not self.is_encrypted:
            return
        self.socket = await asyncio.to_thread(self.socket.unwrap)
        self.socket.settimeout(self.read_timeout)
        logger.info("✓ TLS removed from control connection")

    async def send_command(self, command: str):
        if self.socket is None:
            raise RuntimeError("No connection established.")
        if not command.endswith('\r\n'):
            command += '\r\n'
        await asyncio.to_thread(self.socket.sendall, command.encode(self.encoding))

    async def read_line(self) -> str:
        if self.socket is None:
            raise RuntimeError("No connection established.")
        while b"\n" not in self._buffer:
            data = await asyncio.to_thread(self.socket.recv, 4096)
            if not data:
                raise ConnectionResetError(f"Connection closed by {self.host}:{self.port}")
            self._buffer += data
        line, _, self._buffer = self._buffer.partition(b"\n")
        return line.rstrip(b"\r").decode(self.encoding, errors="replace")

    async def read_stale_data(self, timeout: float = 0.0) -> bytes:
        """Discard anything the server sent that no command asked for."""
        stale = self._buffer
        self._buffer = b""
        if self.socket is not None:
            stale += await asyncio.to_thread(self._drain, timeout)
        if stale:
            logger.warning(f"Discarded {len(stale)} bytes of stale data: {stale[:80]!r}")
        return stale

    def _drain(self, timeout: float) -> bytes:
        chunks = []
        while True:
            if not (self.is_encrypted and self.socket.pending()):
                readable, _, _ = select.select([self.socket], [], [], timeout)
                if not readable:
                    break
            try:
                data = self.socket.recv(4096)
            except (socket.timeout, ssl.SSLWantReadError):
                break
            if not data:
                break
            chunks.append(data)
        return b"".join(chunks)
