"""Vendor reply texts that carry meaning beyond their reply code."""

# MKD failures that only mean the directory is already there
FOLDER_EXISTS = (
    "exist on server",
    "exists on server",
    "file exist",
    "directory exist",
    "folder exist",
    "already exist",
    "directory not empty",
)


def is_known_error(message: str, known: tuple) -> bool:
    message = (message or "").lower()
    return any(text in message for text in known)
