import logging
from typing import List

logger = logging.getLogger(__name__)

RESPONSE_TYPES = {
    '1': 'preliminary',
    '2': 'success',
    '3': 'missing_info',
    '4': 'error',
    '5': 'error'
}


class Reply:
    """Result of one command round trip on the control channel."""

    def __init__(self, code: str, message: str, type: str, info_lines: List[str] = None):
        self.code = code
        self.message = message
        self.type = type
        self.info_lines = info_lines or []

    @property
    def success(self) -> bool:
        return self.code[:1] in ('1', '2', '3')

    @property
    def text(self) -> str:
        """Message and information lines joined, used for banner heuristics."""
        return '\n'.join(self.info_lines + [self.message])

    def __repr__(self):
        return f"Reply(code={self.code!r}, message={self.message!r}, info_lines={len(self.info_lines)})"


class Parser:

    def is_complete(self, lines: List[str]) -> bool:
        """Tell whether the lines read so far form a whole reply.

        A multi-line reply starts with ``xyz-`` and ends on the first line
        that starts with the same code followed by a space (RFC 959 4.2).
        """
        if not lines:
            return False
        first = lines[0]
        code = first[:3]
        if not code.isdigit() or first[3:4] != '-':
            return True
        if len(lines) == 1:
            return False
        last = lines[-1]
        return last[:3] == code and last[3:4] in (' ', '')

    def parse_data(self, data: str) -> Reply:
        # Ensure data is clean (no leading/trailing whitespace)
        lines = [line.rstrip('\r') for line in data.strip().split('\n')]
        final = lines[-1].strip()

        # Extract code: must be 3 digits at the start
        code = final[:3]

        # Validate that code is actually 3 digits
        if not code.isdigit() or len(code) != 3:
            logger.error(f"Invalid FTP response format: {data} (code={code})")
            return Reply("000", final, "unknown", lines[:-1])

        # Extract message: everything after code + space (or just after code if no space)
        message = final[4:] if len(final) > 3 and final[3] == ' ' else final[3:]

        info_lines = []
        for line in lines[:-1]:
            if line[:3] == code and line[3:4] == '-':
                line = line[4:]
            info_lines.append(line.strip())

        reply = Reply(code, message, RESPONSE_TYPES.get(code[0], 'unknown'), info_lines)
        logger.debug(f"Parsed response: code={code}, type={reply.type}, message={message[:50]}")
        return reply
