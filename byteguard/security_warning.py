"""
Central channel for security advisories (non-fatal).
"""
from enum import Enum

from .logger import logger


class Severity(Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"


def warn(message: str, sev: "Severity | str" = Severity.MEDIUM) -> None:
    if isinstance(sev, str):
        try:
            sev = Severity[sev.upper()]
        except KeyError:
            sev = Severity.MEDIUM
    logger.warning("SECURITY WARNING [%s] %s", sev.value, message)


def warn_high(msg: str) -> None:
    warn(msg, Severity.HIGH)
