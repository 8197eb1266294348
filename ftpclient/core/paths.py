"""Helpers for remote FTP paths (always '/' separated)."""

import re

ROOT_PATHS = ("/", ".", "./")


def get_ftp_path(path: str) -> str:
    """Normalize a remote path: '/' separators, no repeated or trailing '/'."""
    if path is None or not path.strip():
        return "./"
    path = re.sub(r"/+", "/", path.replace("\\", "/"))
    if path != "/":
        path = path.rstrip("/")
    return path or "/"


def is_root_directory(path: str) -> bool:
    """Root and the current working directory always exist."""
    return path in ROOT_PATHS


def is_absolute(path: str) -> bool:
    return path.startswith("/")


def get_directory_name(path: str) -> str:
    """Parent of ``path``. Relative single segments resolve to './'."""
    path = get_ftp_path(path)
    if is_root_directory(path):
        return path
    index = path.rfind("/")
    if index < 0:
        return "./"
    if index == 0:
        return "/"
    return path[:index]
