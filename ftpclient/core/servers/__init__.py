"""
Server vendor detection and per-vendor handlers.
"""

__all__ = ["ServerType", "ServerOS", "ServerHandler", "SERVER_HANDLERS", "FOLDER_EXISTS", "is_known_error",
           "get_server_handler", "detect_by_greeting", "detect_by_syst", "detect_os"]


def __getattr__(name: str):
    if name in ("ServerType", "ServerOS", "detect_by_greeting", "detect_by_syst", "detect_os"):
        from . import detection
        return getattr(detection, name)
    if name == "ServerHandler":
        from .base import ServerHandler
        return ServerHandler
    if name in ("SERVER_HANDLERS", "get_server_handler"):
        from . import dispatch
        return getattr(dispatch, name)
    if name in ("FOLDER_EXISTS", "is_known_error"):
        from . import messages
        return getattr(messages, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


def __dir__():
    return __all__
