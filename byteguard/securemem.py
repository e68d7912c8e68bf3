"""
Verifiable secure erasure.

The zeroing primitive is picked once, when this module is imported, and kept in
``_BACKEND``; individual calls never re-probe the platform. Preference order:

1. ``sodium``          libsodium ``sodium_memzero`` (loaded through ctypes)
2. ``rtl``             Windows ``RtlSecureZeroMemory`` when the symbol is exported
3. ``explicit_bzero``  libc ``explicit_bzero`` (glibc >= 2.25, BSD)
4. ``memset_s``        C11 Annex K ``memset_s`` (macOS)
5. ``multipass``       ``memset`` 0x00 / 0xFF / 0x00 with a full fence after each pass

``BYTEGUARD_ZERO_BACKEND`` can force one of these names at import time.

Python cannot promise that no other copy of a secret exists (immutable
``bytes``, interned objects, freed-but-unscrubbed arenas). What this module does
promise is that the storage it is handed is overwritten through a call the
interpreter cannot elide, and, on request, that a full scan afterwards found
only zeros.
"""

from __future__ import annotations

import ctypes
import ctypes.util
import os
import sys
import threading
from dataclasses import dataclass
from typing import Callable

from .config import FORCED_ZERO_BACKEND, SECUREMEM_STRICT, ZERO_BACKEND_NAMES
from .errors import ErasureVerificationError, InvalidArgumentError
from .logger import log_best_effort
from .logger import logger as _log

ZeroFn = Callable[[int, int], None]

_LIBC_CANDIDATES = ("libc.so.6", "libc.so.7", "libc.dylib", "libSystem.dylib")
_FENCE_LOCK = threading.Lock()
_READY_LOGGED = False


@dataclass(frozen=True)
class ZeroBackend:
    name: str
    zero: ZeroFn
    # False only for the multipass fallback, which has no platform guarantee behind it.
    hardened: bool = True


@dataclass(frozen=True)
class EraseOptions:
    """Flags for a single erase call."""

    verify_after_erase: bool = False
    throw_on_verification_failure: bool = True


# What ByteBuffer.secure_wipe uses: verify and escalate.
VERIFIED_ERASE = EraseOptions(verify_after_erase=True, throw_on_verification_failure=True)


# ───── backend probes ──────────────────────────────────────────────────
def _load_libsodium() -> ctypes.CDLL | None:
    """
    Locate libsodium. Order:
    1) SODIUM_DLL_DIR (Windows, registered with os.add_dll_directory)
    2) ctypes.util.find_library("sodium")
    3) common sonames
    """
    names: list[str] = []
    if sys.platform == "win32":
        env_dir = os.environ.get("SODIUM_DLL_DIR")
        if env_dir and os.path.isdir(env_dir):
            try:
                os.add_dll_directory(env_dir)
            except OSError as exc:
                log_best_effort(__name__, exc, message=f"securemem: cannot add DLL dir {env_dir}")
        names.append("libsodium.dll")
    found = ctypes.util.find_library("sodium")
    if found:
        names.insert(0, found)
    names.extend(["libsodium.so.26", "libsodium.so.23", "libsodium.dylib"])

    for name in names:
        try:
            lib = ctypes.CDLL(name)
            lib.sodium_init.restype = ctypes.c_int
            if lib.sodium_init() < 0:
                _log.debug("securemem: sodium_init() failed for %s", name)
                continue
            lib.sodium_memzero.argtypes = [ctypes.c_void_p, ctypes.c_size_t]
            lib.sodium_memzero.restype = None
            return lib
        except (OSError, AttributeError) as exc:
            log_best_effort(__name__, exc, message=f"securemem: libsodium not usable from {name}")
    return None


def _probe_sodium() -> ZeroBackend | None:
    lib = _load_libsodium()
    if lib is None:
        return None
    fn = lib.sodium_memzero

    def _zero(address: int, size: int) -> None:
        fn(ctypes.c_void_p(address), ctypes.c_size_t(size))

    return ZeroBackend("sodium", _zero)


def _probe_rtl() -> ZeroBackend | None:
    if sys.platform != "win32":
        return None
    try:
        fn = ctypes.windll.kernel32.RtlSecureZeroMemory  # type: ignore[attr-defined]
    except (AttributeError, OSError) as exc:
        log_best_effort(__name__, exc, message="securemem: RtlSecureZeroMemory not exported")
        return None
    fn.argtypes = (ctypes.c_void_p, ctypes.c_size_t)
    fn.restype = ctypes.c_void_p

    def _zero(address: int, size: int) -> None:
        fn(address, size)

    return ZeroBackend("rtl", _zero)


def _open_libc() -> list[ctypes.CDLL]:
    names: list[str] = []
    found = ctypes.util.find_library("c")
    if found:
        names.append(found)
    names.extend(n for n in _LIBC_CANDIDATES if n not in names)

    libs = []
    for name in names:
        try:
            libs.append(ctypes.CDLL(name))
        except OSError:
            continue
    return libs


def _probe_explicit_bzero() -> ZeroBackend | None:
    for libc in _open_libc():
        if hasattr(libc, "explicit_bzero"):
            bzero = libc.explicit_bzero
            bzero.argtypes = (ctypes.c_void_p, ctypes.c_size_t)
            bzero.restype = None

            def _zero(address: int, size: int, _fn=bzero) -> None:
                _fn(address, size)

            return ZeroBackend("explicit_bzero", _zero)
    return None


def _probe_memset_s() -> ZeroBackend | None:
    for libc in _open_libc():
        if hasattr(libc, "memset_s"):
            memset_s = libc.memset_s
            memset_s.argtypes = (ctypes.c_void_p, ctypes.c_size_t, ctypes.c_int, ctypes.c_size_t)
            memset_s.restype = ctypes.c_int

            def _zero(address: int, size: int, _fn=memset_s) -> None:
                _fn(address, size, 0, size)

            return ZeroBackend("memset_s", _zero)
    return None


def _fence() -> None:
    # Acquire/release of a lock is a full memory barrier in every threading backend.
    with _FENCE_LOCK:
        pass


def _multipass_zero(address: int, size: int) -> None:
    for pattern in (0x00, 0xFF, 0x00):
        ctypes.memset(address, pattern, size)
        _fence()


def _probe_multipass() -> ZeroBackend:
    return ZeroBackend("multipass", _multipass_zero, hardened=False)


_PROBES: dict[str, Callable[[], ZeroBackend | None]] = {
    "sodium": _probe_sodium,
    "rtl": _probe_rtl,
    "explicit_bzero": _probe_explicit_bzero,
    "memset_s": _probe_memset_s,
    "multipass": _probe_multipass,
}


def _select_backend(forced: str | None) -> ZeroBackend:
    if forced:
        if forced not in _PROBES:
            _log.warning("securemem: unknown zero backend %r; choosing automatically", forced)
        else:
            backend = _PROBES[forced]()
            if backend is not None:
                return backend
            _log.warning("securemem: zero backend %r unavailable; choosing automatically", forced)
    for name in ZERO_BACKEND_NAMES:
        backend = _PROBES[name]()
        if backend is not None:
            return backend
    return _probe_multipass()


_BACKEND: ZeroBackend = _select_backend(FORCED_ZERO_BACKEND)


def active_backend() -> ZeroBackend:
    return _BACKEND


def ensure_securemem_ready(strict: bool | None = None) -> ZeroBackend:
    """
    Report the selected zero backend once.
    With strict=True, refuse to run on the multipass fallback alone.
    """
    global _READY_LOGGED
    if strict is None:
        strict = SECUREMEM_STRICT
    backend = _BACKEND
    if not backend.hardened and strict:
        _log.error("securemem: no platform zeroing primitive; only the multipass fallback is available")
        raise RuntimeError("no platform zeroing primitive available (multipass fallback only)")
    if not _READY_LOGGED:
        if backend.hardened:
            _log.info("securemem: zero backend %s", backend.name)
        else:
            _log.warning("securemem: downgraded to multipass fallback (no platform primitive)")
        _READY_LOGGED = True
    return backend


# ───── verification ────────────────────────────────────────────────────
def verify_zeroed(address: int, size: int) -> bool:
    """
    True when all ``size`` bytes at ``address`` are zero.

    Every byte is read and OR-accumulated; there is no early exit, so the scan
    takes the same time wherever (or whether) a nonzero byte sits.
    """
    if size <= 0:
        return True
    acc = 0
    for byte in (ctypes.c_ubyte * size).from_address(address):
        acc |= byte
    return acc == 0


def _zero_and_check(address: int, size: int, options: EraseOptions, label: str) -> bool:
    _BACKEND.zero(address, size)
    if not options.verify_after_erase:
        return True
    if verify_zeroed(address, size):
        return True
    message = (
        f"Secure erasure verification failed for {label} at address {address:#x} "
        f"of size {size} bytes"
    )
    if options.throw_on_verification_failure:
        _log.error("securemem: %s (backend=%s)", message, _BACKEND.name)
        raise ErasureVerificationError(message, address=address, size=size)
    _log.warning("securemem: %s (backend=%s)", message, _BACKEND.name)
    return False


# ───── public erase operations ─────────────────────────────────────────
_PLAIN_DATA = (ctypes._SimpleCData, ctypes.Structure, ctypes.Union, ctypes.Array)
# Pointer-valued simple types only hold an address; zeroing them leaves the pointee alone.
_INDIRECT = (ctypes.c_char_p, ctypes.c_wchar_p, ctypes.c_void_p)


def secure_zero(obj: ctypes._CData, options: EraseOptions | None = None) -> bool:
    """
    Zero a fixed-layout ctypes value (scalar, Structure, Union or Array) in place.

    Returns the verification result, which is always True when
    ``options.verify_after_erase`` is off.

    Raises:
        InvalidArgumentError: for anything that is not plain fixed-layout data.
        ErasureVerificationError: verification failed and escalation is on.
    """
    if not isinstance(obj, _PLAIN_DATA) or isinstance(obj, _INDIRECT):
        raise InvalidArgumentError(
            f"secure_zero needs a fixed-layout ctypes value, got {type(obj).__name__}"
        )
    return _zero_and_check(ctypes.addressof(obj), ctypes.sizeof(obj), options or EraseOptions(), "object")


def _zero_bytearray_storage(buf: bytearray, options: EraseOptions) -> bool:
    # The ctypes view pins the buffer; it must be gone before the bytearray is resized.
    anchor = (ctypes.c_ubyte * len(buf)).from_buffer(buf)
    try:
        return _zero_and_check(ctypes.addressof(anchor), len(buf), options, "bytearray")
    finally:
        del anchor


def secure_zero_bytearray(buf: bytearray, options: EraseOptions | None = None) -> bool:
    """
    Zero a bytearray's storage, verify it if asked, then release it.

    Verification runs before the release: a freed block cannot be inspected.
    The release truncates ``buf`` to length 0, which hands the allocation back
    to the allocator; callers that own ``buf`` through an attribute should also
    rebind that attribute to a fresh ``bytearray()``.

    Raises:
        InvalidArgumentError: ``buf`` is not a bytearray.
        ErasureVerificationError: verification failed and escalation is on.
        BufferError: ``buf`` still has exported views, so it cannot be released
            (its contents are already zeroed at that point).
    """
    if not isinstance(buf, bytearray):
        raise InvalidArgumentError(f"secure_zero_bytearray needs a bytearray, got {type(buf).__name__}")
    if not buf:
        return True
    verified = _zero_bytearray_storage(buf, options or EraseOptions())
    buf.clear()
    return verified


__all__ = [
    "ZeroBackend",
    "EraseOptions",
    "VERIFIED_ERASE",
    "active_backend",
    "ensure_securemem_ready",
    "verify_zeroed",
    "secure_zero",
    "secure_zero_bytearray",
]
