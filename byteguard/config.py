"""
Central ByteGuard settings.

Everything here is read once, at import time, from the environment. Nothing is
re-read per call: the zero backend in particular is a load-time choice.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Final

# ───── limits ──────────────────────────────────────────────────────────
MAX_RANDOM_BYTES: Final[int] = 1024 * 1024  # 1 MiB cap for pseudo-random fill
UINT64_MAX_BYTES: Final[int] = 8
UINT64_MAX: Final[int] = (1 << 64) - 1
RANDOM_SEED_BYTES: Final[int] = 32  # libsodium randombytes_SEEDBYTES

# ───── logging ─────────────────────────────────────────────────────────
_LEVEL_NAME = os.getenv("BYTEGUARD_LOG_LEVEL", "WARNING").upper()
LOG_LEVEL: Final[int] = getattr(logging, _LEVEL_NAME, logging.WARNING)

_log_file = os.getenv("BYTEGUARD_LOG_FILE", "").strip()
LOG_PATH: Path | None = Path(_log_file).expanduser() if _log_file else None

# ───── secure memory ───────────────────────────────────────────────────
ZERO_BACKEND_NAMES: Final[tuple[str, ...]] = ("sodium", "rtl", "explicit_bzero", "memset_s", "multipass")

_forced = os.getenv("BYTEGUARD_ZERO_BACKEND", "").strip().lower()
FORCED_ZERO_BACKEND: str | None = _forced or None

SECUREMEM_STRICT: Final[bool] = str(os.getenv("BYTEGUARD_SECUREMEM_STRICT", "0")).lower() in {
    "1",
    "true",
    "yes",
    "on",
}


__all__ = [
    "MAX_RANDOM_BYTES",
    "UINT64_MAX_BYTES",
    "UINT64_MAX",
    "RANDOM_SEED_BYTES",
    "LOG_LEVEL",
    "LOG_PATH",
    "ZERO_BACKEND_NAMES",
    "FORCED_ZERO_BACKEND",
    "SECUREMEM_STRICT",
]
