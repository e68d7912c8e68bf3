from __future__ import annotations

import logging
import re
from typing import Pattern

# 16 bytes rendered as hex; shorter runs (addresses, sizes) stay readable.
MIN_REDACTED_HEX_CHARS = 32


class NoLocalsFilter(logging.Filter):
    """
    Collapse exc_info into "Type: message" so no traceback frame (and no
    buffer content held in a local) reaches a handler.
    """

    def filter(self, record: logging.LogRecord) -> bool:  # noqa: D401
        if record.exc_info:
            etype, evalue, _tb = record.exc_info
            if etype is not None:
                record.msg = f"{record.getMessage()} | {etype.__name__}: {evalue}"
                record.args = None
            record.exc_info = None
            record.exc_text = None
        return True


class RedactingFormatter(logging.Formatter):
    """
    Formatter that strips byte content from rendered records:
      - hex runs of MIN_REDACTED_HEX_CHARS or more → [hex_redacted]
      - bytes/bytearray reprs (b'...', bytearray(b'...')) → [bytes_redacted]
      - key=value pairs for secret-looking keys → key=[redacted]
    """

    _HEX_RE: Pattern[str] = re.compile(r"\b[0-9a-fA-F]{%d,}\b" % MIN_REDACTED_HEX_CHARS)
    _BYTES_RE: Pattern[str] = re.compile(r"(?:bytearray\()?b(['\"])(?:\\.|(?!\1).)*\1\)?")
    _KEYVAL_RE: Pattern[str] = re.compile(
        r"(?i)\b(secret|token|key|nonce|seed|password)\s*[=:]\s*([^\s,;]+)"
    )

    def __init__(self, fmt: str, datefmt: str | None = None, enable_colors: bool = False):
        super().__init__(fmt=fmt, datefmt=datefmt)
        self._colors = enable_colors

    def redact(self, msg: str) -> str:
        msg = self._BYTES_RE.sub("[bytes_redacted]", msg)
        msg = self._HEX_RE.sub("[hex_redacted]", msg)
        msg = self._KEYVAL_RE.sub(lambda m: f"{m.group(1)}=[redacted]", msg)
        return msg

    def format(self, record: logging.LogRecord) -> str:
        out = self.redact(super().format(record))
        if not self._colors:
            return out
        if record.levelno >= logging.ERROR:
            return f"\x1b[31m{out}\x1b[0m"
        if record.levelno >= logging.WARNING:
            return f"\x1b[33m{out}\x1b[0m"
        return f"\x1b[90m{out}\x1b[0m"


__all__ = ["NoLocalsFilter", "RedactingFormatter", "MIN_REDACTED_HEX_CHARS"]
