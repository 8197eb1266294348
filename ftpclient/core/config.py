import enum
import logging
import os
import ssl
from dataclasses import dataclass, field, fields, replace
from typing import Mapping, Optional

from .listing import ParserKind

logger = logging.getLogger(__name__)


class EncryptionMode(enum.Enum):
    NONE = "none"
    IMPLICIT = "implicit"
    EXPLICIT = "explicit"
    AUTO = "auto"


class IpVersion(enum.Flag):
    IPV4 = 1
    IPV6 = 2
    ANY = IPV4 | IPV6


@dataclass
class Credentials:
    username: str
    password: str = ""
    account: Optional[str] = None

    def __repr__(self):
        return f"Credentials(username={self.username!r}, password='****')"


@dataclass
class SessionConfig:
    host: Optional[str] = None
    port: int = 0
    encryption_mode: EncryptionMode = EncryptionMode.NONE
    credentials: Optional[Credentials] = None

    # HOST <domain> (RFC 7151) for virtual hosts
    send_host: bool = False
    send_host_domain: Optional[str] = None

    # PBSZ 0 / PROT P once the control channel is encrypted
    data_connection_encryption: bool = True
    # CCC once authenticated, for NAT/firewall friendly sessions
    plain_text_encryption: bool = False

    check_capabilities: bool = True
    text_encoding: str = "ascii"
    text_encoding_auto_utf: bool = True
    listing_parser: ParserKind = ParserKind.AUTO

    connect_timeout: float = 15.0
    read_timeout: float = 15.0
    ip_versions: IpVersion = IpVersion.ANY
    keep_alive: bool = False

    validate_certificate: bool = True
    ssl_context: Optional[ssl.SSLContext] = field(default=None, repr=False)

    @property
    def port_or_default(self) -> int:
        if self.port:
            return self.port
        return 990 if self.encryption_mode is EncryptionMode.IMPLICIT else 21

    def create_ssl_context(self) -> ssl.SSLContext:
        if self.ssl_context is not None:
            return self.ssl_context
        context = ssl.create_default_context()
        if not self.validate_certificate:
            context.check_hostname = False
            context.verify_mode = ssl.CERT_NONE
        return context

    def copy(self, **changes) -> "SessionConfig":
        return replace(self, **changes)

    @classmethod
    def from_profile(cls, profile: Mapping) -> "SessionConfig":
        """Build a config from a plain mapping (e.g. a saved profile).

        Enum fields accept their string values; ``username``/``password``/
        ``account`` keys are folded into ``credentials``.
        """
        known = {f.name for f in fields(cls)}
        values = {}
        for key, value in profile.items():
            if key in ("username", "password", "account"):
                continue
            if key not in known:
                logger.warning(f"Ignoring unknown profile key: {key}")
                continue
            values[key] = value

        if "encryption_mode" in values and not isinstance(values["encryption_mode"], EncryptionMode):
            values["encryption_mode"] = EncryptionMode(str(values["encryption_mode"]).lower())
        if "listing_parser" in values and not isinstance(values["listing_parser"], ParserKind):
            values["listing_parser"] = ParserKind(str(values["listing_parser"]).lower())
        if "ip_versions" in values and not isinstance(values["ip_versions"], IpVersion):
            values["ip_versions"] = IpVersion[str(values["ip_versions"]).upper()]
        if "port" in values:
            values["port"] = int(values["port"])

        if profile.get("username"):
            values["credentials"] = Credentials(
                profile["username"], profile.get("password", ""), profile.get("account"))
        return cls(**values)

    @classmethod
    def from_env(cls, prefix: str = "FTP_") -> "SessionConfig":
        """Read FTP_HOST, FTP_PORT, FTP_USER, FTP_PASSWORD, FTP_ENCRYPTION..."""
        def flag(name, default):
            raw = os.getenv(prefix + name)
            if raw is None:
                return default
            return raw.lower() in ('1', 'true', 'yes')

        profile = {
            "host": os.getenv(prefix + "HOST"),
            "port": os.getenv(prefix + "PORT", "0"),
            "encryption_mode": os.getenv(prefix + "ENCRYPTION", "none"),
            "username": os.getenv(prefix + "USER"),
            "password": os.getenv(prefix + "PASSWORD", ""),
            "send_host": flag("SEND_HOST", False),
            "plain_text_encryption": flag("CCC", False),
            "validate_certificate": flag("VALIDATE_CERT", True),
        }
        return cls.from_profile(profile)
