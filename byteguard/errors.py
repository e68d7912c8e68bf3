"""
Error taxonomy for ByteGuard.

Every failure carries an ``ErrorKind`` so callers can branch on ``exc.kind``
instead of on the concrete class. The concrete classes also derive from the
matching builtin (ValueError, IndexError, RuntimeError) so ordinary ``except``
clauses keep working.
"""

from __future__ import annotations

from enum import Enum


class ErrorKind(Enum):
    INVALID_ARGUMENT = "invalid_argument"
    OUT_OF_RANGE = "out_of_range"
    ERASURE_VERIFICATION = "erasure_verification"


class ByteGuardError(Exception):
    kind: ErrorKind


class InvalidArgumentError(ByteGuardError, ValueError):
    """Bad input: empty complement, oversized uint64 source, random cap, bad hex."""

    kind = ErrorKind.INVALID_ARGUMENT


class OutOfRangeError(ByteGuardError, IndexError):
    """Indexed access outside the current length."""

    kind = ErrorKind.OUT_OF_RANGE


class ErasureVerificationError(ByteGuardError, RuntimeError):
    """Post-erase scan found a nonzero byte and escalation was requested."""

    kind = ErrorKind.ERASURE_VERIFICATION

    def __init__(self, message: str, *, address: int | None = None, size: int | None = None):
        super().__init__(message)
        self.address = address
        self.size = size


__all__ = [
    "ErrorKind",
    "ByteGuardError",
    "InvalidArgumentError",
    "OutOfRangeError",
    "ErasureVerificationError",
]
