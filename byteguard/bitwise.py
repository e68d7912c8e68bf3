"""
Right-aligned bitwise algebra over byte sequences.

Operands of different length are aligned at their last (least significant)
byte and the shorter one is zero-extended on the left, exactly like XOR of two
unsigned big-endian integers:

    xor_bytes(b"\\xaa\\xbb", b"\\x11\\x22\\x33") == bytearray(b"\\x11\\x88\\x88")

A single byte is a one-byte operand, so it only ever meets the LAST byte of the
other side. Every entry point (copying, in-place via ByteBuffer, raw ``*_into``)
follows that one rule.

The ``*_into`` variants never allocate result storage. They write into a
caller-sized writable buffer and silently do nothing when that buffer is too
small; callers must size it to at least the result width beforehand.
"""

from __future__ import annotations

from typing import Union

from .errors import InvalidArgumentError

BytesLike = Union[bytes, bytearray, memoryview]


def _check_byte(value: int) -> int:
    if not isinstance(value, int) or isinstance(value, bool) or not 0 <= value <= 0xFF:
        raise InvalidArgumentError(f"expected a byte value in 0..255, got {value!r}")
    return value


def _writable(out) -> memoryview:
    mv = memoryview(out)
    if mv.readonly:
        raise InvalidArgumentError("output buffer is read-only")
    if mv.format != "B" or mv.ndim != 1:
        try:
            mv = mv.cast("B")
        except (TypeError, ValueError) as exc:
            raise InvalidArgumentError(f"output buffer must be a byte buffer, got format {mv.format!r}") from exc
    return mv


def _xor_aligned(first: BytesLike, second: BytesLike, out: memoryview, width: int) -> None:
    # out[:width] must already be zero
    offset = width - len(first)
    for i, byte in enumerate(first):
        out[offset + i] ^= byte
    offset = width - len(second)
    for i, byte in enumerate(second):
        out[offset + i] ^= byte


def xor_bytes(first: BytesLike, second: BytesLike) -> bytearray:
    """XOR two sequences; the result is ``max(len(first), len(second))`` long."""
    width = max(len(first), len(second))
    result = bytearray(width)
    with memoryview(result) as out:
        _xor_aligned(first, second, out, width)
    return result


def xor_byte(data: BytesLike, value: int) -> bytearray:
    """XOR ``value`` into the last byte only. An empty ``data`` yields ``[value]``."""
    return xor_bytes(data, bytes((_check_byte(value),)))


def xor_in_place(target: bytearray, operand: BytesLike) -> None:
    """
    ``target ^= operand`` with right alignment. A longer operand widens
    ``target`` on the left (zero-extension of its most significant side), so the
    receiver ends up ``max(len(target), len(operand))`` long. ``operand`` is
    never modified unless it is ``target`` itself.
    """
    width = max(len(target), len(operand))
    if width > len(target):
        target[0:0] = bytes(width - len(target))
    offset = width - len(operand)
    for i, byte in enumerate(operand):
        target[offset + i] ^= byte


def xor_byte_in_place(target: bytearray, value: int) -> None:
    """``target ^= value``: only the last byte changes; an empty target becomes ``[value]``."""
    xor_in_place(target, bytes((_check_byte(value),)))


def complement(data: BytesLike) -> bytearray:
    """
    One's complement of every byte.

    Raises:
        InvalidArgumentError: if ``data`` is empty.
    """
    if len(data) == 0:
        raise InvalidArgumentError("Cannot process an empty byte array")
    return bytearray(~byte & 0xFF for byte in data)


def xor_into(first: BytesLike, second: BytesLike, out) -> None:
    """
    Allocation-free ``xor_bytes``: the result lands in ``out[:width]`` where
    ``width = max(len(first), len(second))``; any extra room in ``out`` is
    zeroed. No-op when ``len(out) < width``.
    """
    mv = _writable(out)
    width = max(len(first), len(second))
    if len(mv) < width:
        return
    mv[:] = bytes(len(mv))
    _xor_aligned(first, second, mv, width)


def xor_byte_into(data: BytesLike, value: int, out) -> None:
    """Allocation-free ``xor_byte``. No-op when ``out`` is shorter than ``max(len(data), 1)``."""
    xor_into(data, bytes((_check_byte(value),)), out)


def complement_into(data: BytesLike, out) -> None:
    """Write ``~data`` into ``out[:len(data)]``. No-op when ``out`` is too short."""
    mv = _writable(out)
    if len(mv) < len(data):
        return
    for i, byte in enumerate(data):
        mv[i] = ~byte & 0xFF


__all__ = [
    "xor_bytes",
    "xor_byte",
    "xor_in_place",
    "xor_byte_in_place",
    "complement",
    "xor_into",
    "xor_byte_into",
    "complement_into",
]
