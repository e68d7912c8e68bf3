# byte_buffer.py
"""Owned byte sequence for sensitive values: right-aligned algebra, padded resize, verified wipe."""
from __future__ import annotations

from collections.abc import Iterable, Iterator
from typing import Final, Union

import nacl.utils

from .bitwise import _check_byte, complement, xor_byte, xor_byte_in_place, xor_bytes, xor_in_place
from .codec import bytes_to_uint64, from_hex, to_hex, uint64_to_bytes
from .config import MAX_RANDOM_BYTES, RANDOM_SEED_BYTES
from .errors import InvalidArgumentError, OutOfRangeError
from .padding import PadDirection, _check_size, padded_copy, resize_storage
from .securemem import VERIFIED_ERASE, EraseOptions, secure_zero_bytearray

BytesLike = Union[bytes, bytearray, memoryview]
ByteSource = Union["ByteBuffer", BytesLike, Iterable[int]]


def _coerce(data: ByteSource) -> bytearray:
    """Copy ``data`` into fresh storage."""
    if isinstance(data, ByteBuffer):
        return bytearray(data._bytes)
    if isinstance(data, (bytes, bytearray, memoryview)):
        return bytearray(data)
    if isinstance(data, str):
        raise InvalidArgumentError("str is ambiguous here; use ByteBuffer.from_hex() or ByteBuffer.from_string()")
    if isinstance(data, int):
        raise InvalidArgumentError(
            "int is ambiguous here; use ByteBuffer.from_byte(), from_fill() or from_uint64()"
        )
    try:
        return bytearray(data)
    except (TypeError, ValueError) as exc:
        raise InvalidArgumentError(f"cannot build a byte sequence from {type(data).__name__}: {exc}") from exc


def _operand(other: object) -> BytesLike | None:
    """Borrow the bytes of ``other`` without copying; None when unsupported."""
    if isinstance(other, ByteBuffer):
        return other._bytes
    if isinstance(other, (bytes, bytearray, memoryview)):
        return other
    return None


class ByteBuffer:
    """
    Owned, contiguous, mutable byte sequence. Byte 0 is the most significant
    byte whenever the content is read as a number.

    Features:
    - XOR / complement with right alignment (``^``, ``^=``, ``~``); shorter
      operands are zero-extended on the left, a single byte meets the last byte
    - length-then-content equality
    - bounds-checked indexing (negative indices are out of range too)
    - resize that keeps the significant end and, by default, securely erases
      the storage it replaces
    - ``secure_wipe()``: zero, verify, release; the object stays usable
    - context manager that wipes on exit
    - ``repr``/``str`` never show the content

    Not thread-safe: one buffer per task, or serialize access externally.

    Usage:
        key = ByteBuffer.from_hex("00112233")
        mixed = key ^ nonce          # new buffer, operands untouched
        key ^= 0x01                  # last byte only
        key.resize(8, PadDirection.MSB_PAD)
        key.secure_wipe()            # len(key) == 0

        with ByteBuffer(secret) as sb:
            use(sb.view())
        # wiped here
    """

    __slots__ = ("_bytes", "__weakref__")

    MAX_RANDOM_BYTES: Final[int] = MAX_RANDOM_BYTES

    def __init__(self, data: ByteSource = b"") -> None:
        """
        Args:
            data: bytes-like object, another ByteBuffer, or an iterable of ints
                in 0..255. Always copied.

        Raises:
            InvalidArgumentError: for str/int input or out-of-range items.
        """
        self._bytes = _coerce(data)

    @classmethod
    def _adopt(cls, storage: bytearray) -> ByteBuffer:
        obj = cls.__new__(cls)
        obj._bytes = storage
        return obj

    # ───── construction ───────────────────────────────────────────────
    @classmethod
    def from_fill(cls, size: int, value: int = 0) -> ByteBuffer:
        return cls._adopt(bytearray([_check_byte(value)]) * _check_size(size))

    @classmethod
    def from_byte(cls, value: int) -> ByteBuffer:
        return cls.from_fill(1, value)

    @classmethod
    def from_buffer(
        cls,
        other: ByteSource,
        size: int,
        direction: PadDirection | int = PadDirection.DEFAULT_PAD,
    ) -> ByteBuffer:
        """
        Copy of ``other`` with exactly ``size`` bytes; ``direction`` picks the
        end that gets zero-filled (growth) or trimmed (shrink). ``other`` is
        left unchanged.
        """
        source = _operand(other)
        if source is None:
            source = _coerce(other)
        return cls._adopt(padded_copy(source, size, direction))

    @classmethod
    def from_uint64(cls, value: int) -> ByteBuffer:
        """Minimal big-endian form; 0 gives a single zero byte."""
        return cls._adopt(uint64_to_bytes(value))

    @classmethod
    def from_hex(cls, text: str) -> ByteBuffer:
        """Odd-length text is fine: the last lone digit is the low nibble of the last byte."""
        return cls._adopt(from_hex(text))

    @classmethod
    def from_string(cls, text: str | bytes) -> ByteBuffer:
        """
        Raw bytes of ``text`` (UTF-8 for str).

        Note: the encoded intermediate is an immutable ``bytes`` object and
        cannot be wiped.
        """
        if isinstance(text, str):
            return cls._adopt(bytearray(text.encode("utf-8")))
        if isinstance(text, (bytes, bytearray, memoryview)):
            return cls._adopt(bytearray(text))
        raise InvalidArgumentError(f"from_string expects str or bytes, got {type(text).__name__}")

    @classmethod
    def from_random(cls, size: int, *, seed: BytesLike | None = None) -> ByteBuffer:
        """
        Buffer filled from libsodium's ``randombytes``.

        With a 32-byte ``seed`` the output is reproducible
        (``randombytes_buf_deterministic``). Either way this is a convenience
        fill for tests and padding, not a key generator.

        Raises:
            InvalidArgumentError: negative size, size above MAX_RANDOM_BYTES
                (1 MiB), or a seed that is not 32 bytes.
        """
        if _check_size(size) > MAX_RANDOM_BYTES:
            raise InvalidArgumentError("Requested random bytes exceed maximum allowed size (1 MB)")
        if size == 0:
            return cls()
        if seed is None:
            return cls._adopt(bytearray(nacl.utils.random(size)))
        if len(seed) != RANDOM_SEED_BYTES:
            raise InvalidArgumentError(f"seed must be {RANDOM_SEED_BYTES} bytes, got {len(seed)}")
        return cls._adopt(bytearray(nacl.utils.randombytes_deterministic(size, bytes(seed))))

    @classmethod
    def concat_all(cls, *buffers: ByteSource) -> ByteBuffer:
        storage = bytearray()
        for item in buffers:
            source = _operand(item)
            storage += source if source is not None else _coerce(item)
        return cls._adopt(storage)

    # ───── algebra ────────────────────────────────────────────────────
    def xor_with(self, other: ByteSource | int) -> ByteBuffer:
        """New buffer ``self ^ other``; neither side is modified."""
        if isinstance(other, int):
            return self._adopt(xor_byte(self._bytes, other))
        source = _operand(other)
        if source is None:
            source = _coerce(other)
        return self._adopt(xor_bytes(self._bytes, source))

    def xor_assign(self, other: ByteSource | int) -> ByteBuffer:
        """In-place ``self ^= other``; grows on the left if ``other`` is longer."""
        if isinstance(other, int):
            xor_byte_in_place(self._bytes, other)
            return self
        source = _operand(other)
        if source is None:
            source = _coerce(other)
        xor_in_place(self._bytes, source)
        return self

    def complement(self) -> ByteBuffer:
        """
        New buffer with every bit flipped.

        Raises:
            InvalidArgumentError: when the buffer is empty (typically a buffer
                that was already wiped).
        """
        return self._adopt(complement(self._bytes))

    def equals(self, other: ByteSource) -> bool:
        source = _operand(other)
        if source is None:
            return False
        return len(self._bytes) == len(source) and self._bytes == source

    def __xor__(self, other: object) -> ByteBuffer:
        if isinstance(other, int) or _operand(other) is not None:
            return self.xor_with(other)  # type: ignore[arg-type]
        return NotImplemented

    __rxor__ = __xor__

    def __ixor__(self, other: object) -> ByteBuffer:
        if isinstance(other, int) or _operand(other) is not None:
            return self.xor_assign(other)  # type: ignore[arg-type]
        return NotImplemented

    def __invert__(self) -> ByteBuffer:
        return self.complement()

    def __eq__(self, other: object) -> bool:
        if _operand(other) is None:
            return NotImplemented
        return self.equals(other)  # type: ignore[arg-type]

    __hash__ = None  # type: ignore[assignment]

    # ───── concatenation ──────────────────────────────────────────────
    def concat(self, other: ByteSource) -> ByteBuffer:
        """Append ``other`` to this buffer; returns self for chaining."""
        source = _operand(other)
        if source is None:
            source = _coerce(other)
        elif source is self._bytes:
            source = bytes(source)
        self._bytes += source
        return self

    def concat_copy(self, other: ByteSource) -> ByteBuffer:
        return self.copy().concat(other)

    def __add__(self, other: object) -> ByteBuffer:
        if _operand(other) is None:
            return NotImplemented
        return self.concat_copy(other)  # type: ignore[arg-type]

    def __iadd__(self, other: object) -> ByteBuffer:
        if _operand(other) is None:
            return NotImplemented
        return self.concat(other)  # type: ignore[arg-type]

    # ───── access ─────────────────────────────────────────────────────
    def _checked_index(self, index: int) -> int:
        if isinstance(index, bool) or not isinstance(index, int):
            raise TypeError(f"ByteBuffer indices must be integers, not {type(index).__name__}")
        if index < 0 or index >= len(self._bytes):
            raise OutOfRangeError(f"index {index} out of range for ByteBuffer of length {len(self._bytes)}")
        return index

    def at(self, index: int) -> int:
        return self._bytes[self._checked_index(index)]

    def set_at(self, index: int, value: int) -> None:
        self._bytes[self._checked_index(index)] = _check_byte(value)

    def __getitem__(self, index: int) -> int:
        return self.at(index)

    def __setitem__(self, index: int, value: int) -> None:
        self.set_at(index, value)

    def __len__(self) -> int:
        return len(self._bytes)

    def __bool__(self) -> bool:
        return bool(self._bytes)

    def __iter__(self) -> Iterator[int]:
        return iter(self._bytes)

    def view(self) -> memoryview:
        """
        Read-only view of the storage, no copy.

        Release it (``with buf.view() as mv:``) before resizing or wiping; a live
        view pins the storage and those operations raise BufferError.
        """
        return memoryview(self._bytes).toreadonly()

    def to_bytes(self) -> bytes:
        """Immutable copy. It cannot be wiped; prefer ``view()``."""
        return bytes(self._bytes)

    __bytes__ = to_bytes

    # ───── length management ──────────────────────────────────────────
    def resize(
        self,
        new_size: int,
        direction: PadDirection | int = PadDirection.DEFAULT_PAD,
        *,
        purge_before_resize: bool = True,
        warn_on_shrink: bool = True,
    ) -> None:
        """
        Change the length to exactly ``new_size``.

        Args:
            new_size: target length.
            direction: MSB_PAD zero-fills/trims at index 0, LSB_PAD (default)
                at the end.
            purge_before_resize: copy into new storage and securely erase the
                old one (default). When False the storage is resized in place
                and dropped bytes are not erased.
            warn_on_shrink: with purging on, log a SECURITY WARNING before a
                shrink.
        """
        self._bytes = resize_storage(
            self._bytes,
            new_size,
            direction,
            purge_before=purge_before_resize,
            warn_on_shrink=warn_on_shrink,
        )

    def clear(self, secure: bool = True) -> None:
        """Empty the buffer; with ``secure`` (default) this is ``secure_wipe()``."""
        if secure:
            self.secure_wipe()
        else:
            self._bytes.clear()

    def secure_wipe(self, options: EraseOptions | None = None) -> bool:
        """
        Zero the storage, verify it (by default), then release it.

        Returns:
            The verification result; True for an empty buffer.

        Raises:
            ErasureVerificationError: verification failed and the options
                escalate (the default).
        """
        verified = secure_zero_bytearray(self._bytes, options or VERIFIED_ERASE)
        self._bytes = bytearray()
        return verified

    def assign(self, data: ByteSource) -> ByteBuffer:
        """Replace the content with a copy of ``data``."""
        self._bytes = _coerce(data)
        return self

    def take(self) -> ByteBuffer:
        """Move the storage into a new buffer and leave this one empty."""
        moved = self._adopt(self._bytes)
        self._bytes = bytearray()
        return moved

    def copy(self) -> ByteBuffer:
        return self._adopt(bytearray(self._bytes))

    def __copy__(self) -> ByteBuffer:
        return self.copy()

    def __deepcopy__(self, memo: dict) -> ByteBuffer:
        return self.copy()

    # ───── conversions ────────────────────────────────────────────────
    def to_uint64(self) -> int:
        """
        Big-endian value of the content.

        Raises:
            InvalidArgumentError: more than 8 bytes.
        """
        return bytes_to_uint64(self._bytes)

    def hex(self) -> str:
        """Lowercase, two digits per byte, no separators."""
        return to_hex(self._bytes)

    # ───── lifecycle ──────────────────────────────────────────────────
    def __enter__(self) -> ByteBuffer:
        return self

    def __exit__(self, exc_type: type, exc_val: Exception, exc_tb: object) -> None:
        self.secure_wipe()

    def __repr__(self) -> str:
        return f"<ByteBuffer len={len(self._bytes)}>"

    __str__ = __repr__


__all__ = ["ByteBuffer", "ByteSource"]
