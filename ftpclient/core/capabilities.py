"""
Server capabilities as advertised by FEAT (RFC 2389).

Unknown FEAT lines are ignored so new server features never break the
connect.
"""

import enum
import logging
from typing import Iterable, Set, Tuple

logger = logging.getLogger(__name__)


class Capability(enum.Enum):
    MLSD = "MLSD"
    SIZE = "SIZE"
    MDTM = "MDTM"
    REST = "REST"
    UTF8 = "UTF8"
    PRET = "PRET"
    MFMT = "MFMT"
    MFCT = "MFCT"
    MFF = "MFF"
    STAT = "STAT"
    HASH = "HASH"
    MD5 = "MD5"
    XMD5 = "XMD5"
    XCRC = "XCRC"
    XSHA1 = "XSHA1"
    XSHA256 = "XSHA256"
    XSHA512 = "XSHA512"
    EPSV = "EPSV"
    EPRT = "EPRT"
    CPSV = "CPSV"
    NOOP = "NOOP"
    CLNT = "CLNT"
    SSCN = "SSCN"
    SITE_MKDIR = "SITE MKDIR"
    SITE_RMDIR = "SITE RMDIR"
    SITE_UTIME = "SITE UTIME"
    SITE_SYMLINK = "SITE SYMLINK"
    AVBL = "AVBL"
    THMB = "THMB"
    RMDA = "RMDA"
    DSIZ = "DSIZ"
    HOST = "HOST"
    CCC = "CCC"
    MODE_Z = "MODE Z"
    LANG = "LANG"
    MMD5 = "MMD5"


class HashAlgorithm(enum.Flag):
    NONE = 0
    SHA1 = enum.auto()
    SHA256 = enum.auto()
    SHA512 = enum.auto()
    MD5 = enum.auto()
    CRC = enum.auto()


HASH_NAMES = {
    "SHA-1": HashAlgorithm.SHA1,
    "SHA-256": HashAlgorithm.SHA256,
    "SHA-512": HashAlgorithm.SHA512,
    "MD5": HashAlgorithm.MD5,
    "CRC": HashAlgorithm.CRC,
}

# Prefix of a FEAT line -> capability. Longest prefixes first so that
# "MFF" does not shadow "MFMT" and "SITE MKDIR" wins over anything shorter.
FEATURE_PREFIXES = (
    ("SITE SYMLINK", Capability.SITE_SYMLINK),
    ("SITE MKDIR", Capability.SITE_MKDIR),
    ("SITE RMDIR", Capability.SITE_RMDIR),
    ("SITE UTIME", Capability.SITE_UTIME),
    ("REST STREAM", Capability.REST),
    ("XSHA256", Capability.XSHA256),
    ("XSHA512", Capability.XSHA512),
    ("XSHA1", Capability.XSHA1),
    ("MODE Z", Capability.MODE_Z),
    ("MLST", Capability.MLSD),
    ("MLSD", Capability.MLSD),
    ("SIZE", Capability.SIZE),
    ("MDTM", Capability.MDTM),
    ("UTF8", Capability.UTF8),
    ("PRET", Capability.PRET),
    ("MFMT", Capability.MFMT),
    ("MFCT", Capability.MFCT),
    ("MFF", Capability.MFF),
    ("STAT", Capability.STAT),
    ("HASH", Capability.HASH),
    ("MMD5", Capability.MMD5),
    ("XMD5", Capability.XMD5),
    ("XCRC", Capability.XCRC),
    ("MD5", Capability.MD5),
    ("EPSV", Capability.EPSV),
    ("EPRT", Capability.EPRT),
    ("CPSV", Capability.CPSV),
    ("NOOP", Capability.NOOP),
    ("CLNT", Capability.CLNT),
    ("SSCN", Capability.SSCN),
    ("AVBL", Capability.AVBL),
    ("THMB", Capability.THMB),
    ("RMDA", Capability.RMDA),
    ("DSIZ", Capability.DSIZ),
    ("HOST", Capability.HOST),
    ("CCC", Capability.CCC),
    ("LANG", Capability.LANG),
)


def parse_feature(line: str):
    """Map one FEAT line to its capability, or None when unknown."""
    feature = line.strip().upper()
    for prefix, capability in FEATURE_PREFIXES:
        if feature == prefix or feature.startswith(prefix + " ") or feature.startswith(prefix + ";"):
            return capability
    return None


def parse_hash_algorithms(line: str) -> HashAlgorithm:
    """Parse ``HASH SHA-1;SHA-256*;MD5`` into flags. ``*`` marks the active one."""
    algorithms = HashAlgorithm.NONE
    _, _, names = line.strip().partition(" ")
    for name in names.split(";"):
        name = name.strip().rstrip("*").upper()
        if name in HASH_NAMES:
            algorithms |= HASH_NAMES[name]
    return algorithms


def parse_features(info_lines: Iterable[str]) -> Tuple[Set[Capability], HashAlgorithm]:
    """Parse the information lines of a FEAT reply."""
    capabilities = set()
    algorithms = HashAlgorithm.NONE
    for line in info_lines:
        capability = parse_feature(line)
        if capability is None:
            continue
        capabilities.add(capability)
        if capability is Capability.HASH:
            algorithms |= parse_hash_algorithms(line)
    logger.debug(f"FEAT parsed: {sorted(c.value for c in capabilities)} hash={algorithms}")
    return capabilities, algorithms
