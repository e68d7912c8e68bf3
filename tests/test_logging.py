import sys
import os
import io
import logging
import stat
import pytest

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from byteguard.logger import LOGGER_NAME, SecureRotatingFileHandler, log_best_effort, logger, stream_handler
from byteguard.redactlog import NoLocalsFilter, RedactingFormatter
from byteguard.security_warning import Severity, warn, warn_high


@pytest.fixture
def formatter():
    return RedactingFormatter(fmt="%(message)s")


def _record(msg, *args, exc_info=None):
    return logging.LogRecord(LOGGER_NAME, logging.WARNING, __file__, 1, msg, args, exc_info)


def test_logger_is_the_package_logger():
    assert logger.name == LOGGER_NAME
    assert logger.propagate


def test_redacts_long_hex_runs(formatter):
    secret = "ab" * 16
    out = formatter.format(_record("value %s", secret))
    assert secret not in out
    assert "[hex_redacted]" in out


def test_keeps_short_hex_and_addresses(formatter):
    out = formatter.format(_record("at address 0x7f00deadbeef of size 5 bytes"))
    assert "0x7f00deadbeef" in out


def test_redacts_bytes_reprs(formatter):
    out = formatter.format(_record("got %r and %r", b"\x01secret", bytearray(b"abc")))
    assert "secret" not in out
    assert "abc" not in out
    assert out.count("[bytes_redacted]") == 2


def test_redacts_secret_key_values(formatter):
    out = formatter.format(_record("key=hunter2 seed: 1234 size=5"))
    assert "hunter2" not in out
    assert "1234" not in out
    assert "size=5" in out


def test_no_locals_filter_drops_traceback():
    try:
        raise ValueError("bad input")
    except ValueError:
        record = _record("failed", exc_info=sys.exc_info())
    assert NoLocalsFilter().filter(record)
    assert record.exc_info is None
    assert record.getMessage() == "failed | ValueError: bad input"


def test_security_warning_prefix(caplog):
    with caplog.at_level(logging.WARNING, logger=LOGGER_NAME):
        warn("something odd")
        warn_high("something worse")
        warn("unknown severity", "nope")
    messages = [r.getMessage() for r in caplog.records]
    assert "SECURITY WARNING [MEDIUM] something odd" in messages
    assert "SECURITY WARNING [HIGH] something worse" in messages
    assert "SECURITY WARNING [MEDIUM] unknown severity" in messages
    assert Severity["CRITICAL"].value == "CRITICAL"


@pytest.mark.skipif(os.name == "nt", reason="POSIX permissions")
def test_rotating_file_handler_is_private(tmp_path):
    path = tmp_path / "byteguard.log"
    handler = SecureRotatingFileHandler(path, maxBytes=64, backupCount=2, encoding="utf-8")
    handler.setFormatter(RedactingFormatter(fmt="%(message)s"))
    try:
        for i in range(10):
            handler.emit(_record("line %d padding padding padding", i))
    finally:
        handler.close()
    assert stat.S_IMODE(path.stat().st_mode) == 0o600
    backup = tmp_path / "byteguard.log.1"
    assert backup.exists()
    assert stat.S_IMODE(backup.stat().st_mode) == 0o600


def test_child_channel_tracebacks_are_collapsed():
    """Best-effort records from a child logger reach the handler without a traceback."""
    out = io.StringIO()
    handler = stream_handler(out)
    previous = logger.level
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG)
    try:
        try:
            raise OSError("library missing")
        except OSError as exc:
            log_best_effort(f"{LOGGER_NAME}.securemem", exc, message="lookup failed")
    finally:
        logger.removeHandler(handler)
        logger.setLevel(previous)
    text = out.getvalue()
    assert "lookup failed: library missing | OSError: library missing" in text
    assert "Traceback" not in text
