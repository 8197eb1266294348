import logging

from .detection import ServerType
from ._filezilla import FileZillaServer
from ._ibm_os400 import IbmOs400Server
from ._ibm_zos import IbmZosServer
from ._openvms import OpenVmsServer
from ._proftpd import ProFtpdServer
from ._pureftpd import PureFtpdServer
from ._vsftpd import VsFtpdServer
from ._windows_iis import WindowsIisServer

logger = logging.getLogger(__name__)

# Diccionario de handlers
SERVER_HANDLERS = {
    ServerType.PROFTPD: ProFtpdServer,
    ServerType.PURE_FTPD: PureFtpdServer,
    ServerType.VSFTPD: VsFtpdServer,
    ServerType.FILEZILLA: FileZillaServer,
    ServerType.WINDOWS_IIS: WindowsIisServer,
    ServerType.IBM_ZOS: IbmZosServer,
    ServerType.IBM_OS400: IbmOs400Server,
    ServerType.OPENVMS: OpenVmsServer,
}


def get_server_handler(server_type: ServerType):
    """Build the handler for a detected server, or None for unknown servers."""
    handler_class = SERVER_HANDLERS.get(server_type)
    if handler_class is None:
        logger.debug(f"No handler for server type {server_type}")
        return None
    return handler_class()
