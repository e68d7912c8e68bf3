import sys
import os
import ctypes
import logging
import pytest

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from byteguard import securemem
from byteguard.errors import ErasureVerificationError, ErrorKind, InvalidArgumentError
from byteguard.securemem import (
    VERIFIED_ERASE,
    EraseOptions,
    ZeroBackend,
    active_backend,
    ensure_securemem_ready,
    secure_zero,
    secure_zero_bytearray,
    verify_zeroed,
)


@pytest.fixture
def broken_backend(monkeypatch):
    """Backend that silently writes nothing, so every verification fails."""
    backend = ZeroBackend("noop", lambda address, size: None)
    monkeypatch.setattr(securemem, "_BACKEND", backend)
    return backend


class _Pair(ctypes.Structure):
    _fields_ = [("a", ctypes.c_uint32), ("b", ctypes.c_uint8 * 4)]


def test_backend_is_selected_once():
    backend = active_backend()
    assert backend.name in ("sodium", "rtl", "explicit_bzero", "memset_s", "multipass")
    assert active_backend() is backend


def test_select_backend_falls_back_on_unknown_name():
    backend = securemem._select_backend("no-such-backend")
    assert backend.name in ("sodium", "rtl", "explicit_bzero", "memset_s", "multipass")


def test_multipass_backend_zeroes():
    backend = securemem._probe_multipass()
    assert backend.hardened is False
    buf = (ctypes.c_ubyte * 8)(*range(1, 9))
    backend.zero(ctypes.addressof(buf), len(buf))
    assert bytes(buf) == bytes(8)


def test_strict_mode_refuses_multipass(monkeypatch):
    monkeypatch.setattr(securemem, "_BACKEND", securemem._probe_multipass())
    with pytest.raises(RuntimeError, match="multipass"):
        ensure_securemem_ready(strict=True)


def test_non_strict_mode_accepts_any_backend():
    assert ensure_securemem_ready(strict=False) is active_backend()


def test_verify_zeroed_scans_whole_region():
    buf = (ctypes.c_ubyte * 16)()
    assert verify_zeroed(ctypes.addressof(buf), 16)
    buf[15] = 1
    assert not verify_zeroed(ctypes.addressof(buf), 16)
    assert verify_zeroed(ctypes.addressof(buf), 0)


def test_secure_zero_structure_with_verification():
    pair = _Pair(0xDEADBEEF, (ctypes.c_uint8 * 4)(1, 2, 3, 4))
    assert secure_zero(pair, VERIFIED_ERASE) is True
    assert pair.a == 0
    assert list(pair.b) == [0, 0, 0, 0]


def test_secure_zero_scalar_and_array():
    value = ctypes.c_uint64(0xFFFFFFFFFFFFFFFF)
    secure_zero(value)
    assert value.value == 0

    arr = ctypes.create_string_buffer(b"hello", 5)
    secure_zero(arr, EraseOptions(verify_after_erase=True))
    assert arr.raw == bytes(5)


@pytest.mark.parametrize("bad", [b"bytes", bytearray(b"x"), "text", 42, ctypes.c_char_p(b"x"), ctypes.c_void_p(1)])
def test_secure_zero_rejects_non_plain_data(bad):
    with pytest.raises(InvalidArgumentError):
        secure_zero(bad)


def test_secure_zero_bytearray_zeroes_then_releases():
    buf = bytearray(b"\x01\x02\x03\x04\x05")
    assert secure_zero_bytearray(buf, VERIFIED_ERASE) is True
    assert len(buf) == 0


def test_secure_zero_bytearray_empty_is_trivially_verified():
    assert secure_zero_bytearray(bytearray(), VERIFIED_ERASE) is True


def test_secure_zero_bytearray_rejects_other_types():
    with pytest.raises(InvalidArgumentError):
        secure_zero_bytearray(b"immutable")


def test_verification_failure_raises_with_details(broken_backend, caplog):
    """With escalation on, a nonzero byte after erasure raises and is logged as an error."""
    buf = bytearray(b"\x01\x02\x03")
    with caplog.at_level(logging.ERROR, logger="byteguard"):
        with pytest.raises(ErasureVerificationError, match="Secure erasure verification failed") as excinfo:
            secure_zero_bytearray(buf, VERIFIED_ERASE)
    err = excinfo.value
    assert err.kind is ErrorKind.ERASURE_VERIFICATION
    assert err.size == 3
    assert err.address is not None
    assert "of size 3 bytes" in str(err)
    assert any("Secure erasure verification failed" in r.getMessage() for r in caplog.records)


def test_verification_failure_returns_false_without_escalation(broken_backend, caplog):
    buf = bytearray(b"\x01\x02\x03")
    options = EraseOptions(verify_after_erase=True, throw_on_verification_failure=False)
    with caplog.at_level(logging.WARNING, logger="byteguard"):
        assert secure_zero_bytearray(buf, options) is False
    assert any(r.levelno == logging.WARNING for r in caplog.records)


def test_no_verification_means_no_failure(broken_backend):
    buf = bytearray(b"\x01\x02\x03")
    assert secure_zero_bytearray(buf) is True
    assert len(buf) == 0


def test_erase_options_defaults():
    opts = EraseOptions()
    assert opts.verify_after_erase is False
    assert opts.throw_on_verification_failure is True


def test_forcing_multipass_selects_it():
    backend = securemem._select_backend("multipass")
    assert backend.name == "multipass"
    assert backend.hardened is False


@pytest.mark.skipif(sys.platform == "win32", reason="RtlSecureZeroMemory may exist on Windows")
def test_forcing_unavailable_backend_warns_and_falls_back(caplog):
    with caplog.at_level(logging.WARNING, logger="byteguard"):
        backend = securemem._select_backend("rtl")
    assert backend.name != "rtl"
    assert any("'rtl' unavailable" in r.getMessage() for r in caplog.records)


@pytest.mark.parametrize("name", ["sodium", "rtl", "explicit_bzero", "memset_s", "multipass"])
def test_each_probe_reports_its_own_primitive(name):
    """A probe either finds nothing or names the primitive it actually bound."""
    backend = securemem._PROBES[name]()
    assert backend is None or backend.name == name
