"""Exceptions raised by the FTP client core."""


class FTPError(Exception):
    """Base class for every error raised by the client."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ConfigError(FTPError):
    """The session configuration cannot be used (e.g. no host)."""


class ProtocolError(FTPError):
    """The server rejected a command that has to succeed.

    The full reply is kept on ``reply`` so callers can inspect the code,
    the message and the information lines.
    """

    def __init__(self, reply, message: str = None):
        self.reply = reply
        if message is None:
            message = f"{reply.code} {reply.message}"
        super().__init__(message)

    @property
    def code(self) -> str:
        return self.reply.code


class SecurityError(FTPError):
    """A mandatory TLS upgrade or downgrade of the control channel failed."""

    def __init__(self, message: str, reply=None):
        self.reply = reply
        super().__init__(message)


class StateError(FTPError):
    """Operation attempted on a session that is closed or not connected."""


class AuthenticationError(ProtocolError):
    """USER/PASS/ACCT was refused."""
