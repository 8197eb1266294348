"""
Core FTP Client logic.
Includes the control connection, the command handler, reply parser,
server detection and the session bootstrap.
"""

from .capabilities import Capability, HashAlgorithm
from .commands import ClientCommandHandler
from .config import Credentials, EncryptionMode, IpVersion, SessionConfig
from .connection import ControlConnectionManager
from .errors import (
    AuthenticationError,
    ConfigError,
    FTPError,
    ProtocolError,
    SecurityError,
    StateError,
)
from .listing import ListingParser, ParserKind
from .parser import Parser, Reply
from .session import ClientSession, ConnectionStatus

__all__ = [
    "Capability",
    "HashAlgorithm",
    "ClientCommandHandler",
    "Credentials",
    "EncryptionMode",
    "IpVersion",
    "SessionConfig",
    "ControlConnectionManager",
    "AuthenticationError",
    "ConfigError",
    "FTPError",
    "ProtocolError",
    "SecurityError",
    "StateError",
    "ListingParser",
    "ParserKind",
    "Parser",
    "Reply",
    "ClientSession",
    "ConnectionStatus",
]
