"""byteguard: secure byte buffers.

Exports:
- ByteBuffer and PadDirection
- the raw bitwise helpers (xor_bytes, xor_byte, complement and their ``*_into`` forms)
- secure erasure (secure_zero, secure_zero_bytearray, EraseOptions, VERIFIED_ERASE)
- the error taxonomy
"""

from __future__ import annotations

import os

if os.name == "nt":
    dll_dir = os.environ.get("SODIUM_DLL_DIR", r"C:\libsodium\bin")
    if dll_dir and os.path.isdir(dll_dir):
        os.add_dll_directory(dll_dir)

from .bitwise import (  # noqa: E402
    complement,
    complement_into,
    xor_byte,
    xor_byte_into,
    xor_bytes,
    xor_into,
)
from .byte_buffer import ByteBuffer  # noqa: E402
from .errors import (  # noqa: E402
    ByteGuardError,
    ErasureVerificationError,
    ErrorKind,
    InvalidArgumentError,
    OutOfRangeError,
)
from .padding import PadDirection  # noqa: E402
from .securemem import (  # noqa: E402
    VERIFIED_ERASE,
    EraseOptions,
    active_backend,
    ensure_securemem_ready,
    secure_zero,
    secure_zero_bytearray,
    verify_zeroed,
)

ensure_securemem_ready()

__version__ = "0.1.0"

__all__ = [
    "ByteBuffer",
    "PadDirection",
    "xor_bytes",
    "xor_byte",
    "complement",
    "xor_into",
    "xor_byte_into",
    "complement_into",
    "EraseOptions",
    "VERIFIED_ERASE",
    "secure_zero",
    "secure_zero_bytearray",
    "verify_zeroed",
    "active_backend",
    "ensure_securemem_ready",
    "ErrorKind",
    "ByteGuardError",
    "InvalidArgumentError",
    "OutOfRangeError",
    "ErasureVerificationError",
]
