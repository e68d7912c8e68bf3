"""
Central logger for ByteGuard.

- One package logger, ``byteguard``, built once at import.
- Every handler formats through RedactingFormatter, so a buffer rendered by
  mistake never lands in a log verbatim.
- Tracebacks are reduced to type+message (NoLocalsFilter).
- Optional rotating log file (0600) when BYTEGUARD_LOG_FILE is set.

Public API: ``logger``, ``log_best_effort``
"""

from __future__ import annotations

import contextlib
import logging
import os
import sys
from logging import Logger
from logging.handlers import RotatingFileHandler
from typing import IO

from .config import LOG_LEVEL, LOG_PATH
from .redactlog import NoLocalsFilter, RedactingFormatter

LOGGER_NAME = "byteguard"


class SecureRotatingFileHandler(RotatingFileHandler):
    """RotatingFileHandler that keeps the log and its backups at 0600 (POSIX)."""

    def _set_secure_mode(self, path: str) -> None:
        if os.name != "nt":
            with contextlib.suppress(OSError):
                os.chmod(path, 0o600)

    def _open(self):
        stream = super()._open()
        self._set_secure_mode(self.baseFilename)
        return stream

    def doRollover(self) -> None:
        super().doRollover()
        if os.name == "nt":
            return
        self._set_secure_mode(self.baseFilename)
        for idx in range(1, self.backupCount + 1):
            candidate = self.rotation_filename(f"{self.baseFilename}.{idx}")
            if os.path.exists(candidate):
                self._set_secure_mode(candidate)


def stream_handler(stream: IO[str]) -> logging.StreamHandler:
    """Redacting, traceback-free handler writing to ``stream``."""
    sh = logging.StreamHandler(stream)
    sh.setFormatter(
        RedactingFormatter(
            fmt="%(asctime)s [%(levelname)s] %(message)s (%(pathname)s:%(lineno)d)",
            datefmt="%H:%M:%S",
            enable_colors=stream.isatty(),
        )
    )
    # Handler-level: logger filters skip records from child loggers.
    sh.addFilter(NoLocalsFilter())
    return sh


def _build_logger() -> Logger:
    lg = logging.getLogger(LOGGER_NAME)
    lg.setLevel(LOG_LEVEL)

    if lg.handlers:
        return lg

    if LOG_PATH is not None:
        with contextlib.suppress(OSError):
            LOG_PATH.parent.mkdir(parents=True, exist_ok=True)
        fh = SecureRotatingFileHandler(
            LOG_PATH,
            maxBytes=5 * 1024 * 1024,
            backupCount=3,
            encoding="utf-8",
            delay=True,
        )
        fh.setFormatter(
            RedactingFormatter(
                fmt="%(asctime)s [%(levelname)s] %(message)s (%(pathname)s:%(lineno)d in %(funcName)s)",
                datefmt="%Y-%m-%d %H:%M:%S%z",
            )
        )
        fh.addFilter(NoLocalsFilter())
        lg.addHandler(fh)

    if LOG_LEVEL <= logging.DEBUG:
        lg.addHandler(stream_handler(sys.stderr))

    return lg


def log_best_effort(channel: str, exc: BaseException, *, message: str | None = None) -> None:
    """Log a probing failure (library lookup, symbol binding) without interrupting flow."""
    msg = message or "Best-effort failure"
    logging.getLogger(channel).debug("%s: %s", msg, exc, exc_info=exc)


logger: Logger = _build_logger()

__all__ = ["logger", "log_best_effort", "stream_handler", "LOGGER_NAME", "SecureRotatingFileHandler"]
