"""
Length changes that respect byte significance.

``PadDirection`` names the end of the sequence where zeros are inserted when it
grows; the same end is trimmed when it shrinks, so growing and then shrinking
back with one direction always restores the original bytes.

    MSB_PAD   b"\\x01\\x02\\x03" -> 5 bytes -> b"\\x00\\x00\\x01\\x02\\x03"
              b"\\x01\\x02\\x03\\x04\\x05" -> 3 bytes -> b"\\x03\\x04\\x05"
    LSB_PAD   b"\\x01\\x02\\x03" -> 5 bytes -> b"\\x01\\x02\\x03\\x00\\x00"
              b"\\x01\\x02\\x03\\x04\\x05" -> 3 bytes -> b"\\x01\\x02\\x03"

LSB_PAD is the default, matching plain append/truncate on a bytearray.
"""

from __future__ import annotations

from enum import IntEnum
from typing import Union

from .errors import InvalidArgumentError
from .securemem import VERIFIED_ERASE, secure_zero_bytearray
from .security_warning import Severity, warn

BytesLike = Union[bytes, bytearray, memoryview]


class PadDirection(IntEnum):
    MSB_PAD = 1
    LSB_PAD = 2
    DEFAULT_PAD = 2


def as_direction(direction: PadDirection | int) -> PadDirection:
    if isinstance(direction, bool):
        raise InvalidArgumentError(f"unknown pad direction {direction!r}")
    try:
        return PadDirection(direction)
    except ValueError as exc:
        raise InvalidArgumentError(f"unknown pad direction {direction!r}") from exc


def _check_size(size: int) -> int:
    if not isinstance(size, int) or isinstance(size, bool) or size < 0:
        raise InvalidArgumentError(f"size must be a non-negative int, got {size!r}")
    return size


def padded_copy(source: BytesLike, size: int, direction: PadDirection | int = PadDirection.DEFAULT_PAD) -> bytearray:
    """New storage of exactly ``size`` bytes holding the significant part of ``source``."""
    size = _check_size(size)
    direction = as_direction(direction)
    out = bytearray(size)
    with memoryview(source) as src:
        keep = min(len(src), size)
        if direction is PadDirection.MSB_PAD:
            out[size - keep:] = src[len(src) - keep:]
        else:
            out[:keep] = src[:keep]
    return out


def resize_in_place(buf: bytearray, size: int, direction: PadDirection | int = PadDirection.DEFAULT_PAD) -> None:
    """Ordinary truncate / zero-extend. Dropped bytes are not erased."""
    size = _check_size(size)
    direction = as_direction(direction)
    current = len(buf)
    if size == current:
        return
    if direction is PadDirection.MSB_PAD:
        if size > current:
            buf[0:0] = bytes(size - current)
        else:
            del buf[: current - size]
    elif size > current:
        buf.extend(bytes(size - current))
    else:
        del buf[size:]


def resize_storage(
    buf: bytearray,
    new_size: int,
    direction: PadDirection | int = PadDirection.DEFAULT_PAD,
    *,
    purge_before: bool = True,
    warn_on_shrink: bool = True,
) -> bytearray:
    """
    Resize ``buf`` and return the storage the owner must keep.

    Without ``purge_before`` the bytearray is resized in place and returned.
    With it, the significant bytes are copied into fresh storage, ``buf`` is
    securely erased (verified) and released, and the copy is returned. A
    purging shrink with ``warn_on_shrink`` logs an advisory before anything is
    touched. Growth never warns.
    """
    new_size = _check_size(new_size)
    direction = as_direction(direction)

    if not purge_before:
        resize_in_place(buf, new_size, direction)
        return buf

    if warn_on_shrink and new_size < len(buf):
        warn(
            f"attempting to shrink a byte array buffer from {len(buf)} to {new_size} bytes; "
            "this could lead to data remnance",
            Severity.HIGH,
        )

    replacement = padded_copy(buf, new_size, direction)
    secure_zero_bytearray(buf, VERIFIED_ERASE)
    return replacement


__all__ = ["PadDirection", "as_direction", "padded_copy", "resize_in_place", "resize_storage"]
