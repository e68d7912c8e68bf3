"""
Text and integer codecs used by ByteBuffer.

Hex is lowercase, two digits per byte, most-significant byte first. Integers are
unsigned 64-bit values in minimal big-endian form.
"""

from __future__ import annotations

from typing import Union

from .config import UINT64_MAX, UINT64_MAX_BYTES
from .errors import InvalidArgumentError

BytesLike = Union[bytes, bytearray, memoryview]

_HEX_DIGITS = frozenset("0123456789abcdefABCDEF")

UINT64_TOO_LARGE = "Byte array is larger than 64-bit and cannot be represented as such"


def to_hex(data: BytesLike) -> str:
    return data.hex()


def from_hex(text: str) -> bytearray:
    """
    Decode a hex digit string.

    Odd-length input is accepted: the trailing lone digit becomes the low
    nibble of the last byte ("...5" -> 0x05, not 0x50).

    Raises:
        InvalidArgumentError: on any character that is not a hex digit.
    """
    if not isinstance(text, str):
        raise InvalidArgumentError(f"hex input must be str, got {type(text).__name__}")
    for pos, ch in enumerate(text):
        if ch not in _HEX_DIGITS:
            raise InvalidArgumentError(f"Invalid hex character {ch!r} at position {pos}")

    even = len(text) - (len(text) % 2)
    out = bytearray.fromhex(text[:even])
    if even != len(text):
        out.append(int(text[-1], 16))
    return out


def uint64_to_bytes(value: int) -> bytearray:
    """Minimal big-endian encoding; 0 encodes as a single zero byte."""
    if not isinstance(value, int) or isinstance(value, bool):
        raise InvalidArgumentError(f"expected int, got {type(value).__name__}")
    if value < 0 or value > UINT64_MAX:
        raise InvalidArgumentError(f"value {value} is outside the unsigned 64-bit range")
    length = max(1, (value.bit_length() + 7) // 8)
    return bytearray(value.to_bytes(length, "big"))


def bytes_to_uint64(data: BytesLike) -> int:
    if len(data) > UINT64_MAX_BYTES:
        raise InvalidArgumentError(UINT64_TOO_LARGE)
    return int.from_bytes(data, "big")


__all__ = ["BytesLike", "to_hex", "from_hex", "uint64_to_bytes", "bytes_to_uint64", "UINT64_TOO_LARGE"]
