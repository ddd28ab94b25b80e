"""Logging helpers: configuration, structured context and timing."""
from __future__ import annotations

import logging
import os
import re
import time
from typing import Any, Dict, Optional
from urllib.parse import urlsplit, urlunsplit

from ..constants import Constants

_SENSITIVE_QUERY = re.compile(r"(?i)(token|key|secret|password)=([^&]+)")


def configure_logging(level: Optional[str] = None) -> None:
    """Configure root logging from an explicit level or the environment.

    Args:
        level: Level name (e.g. "DEBUG"); defaults to VBA_BLOCKS_LOG_LEVEL or INFO.
    """
    name = (level or os.environ.get(Constants.ENV_LOG_LEVEL) or "INFO").upper()
    numeric = getattr(logging, name, None)
    if not isinstance(numeric, int):
        numeric = logging.INFO
    logging.basicConfig(format=Constants.LOG_FORMAT, level=numeric, force=True)


def is_debug_enabled(logger: logging.Logger) -> bool:
    """Return True when DEBUG records from logger would be emitted."""
    return logger.isEnabledFor(logging.DEBUG)


def extra_context(**fields: Any) -> Dict[str, Any]:
    """Build an `extra=` mapping, dropping fields whose value is None."""
    return {key: value for key, value in fields.items() if value is not None}


def redact(text: str) -> str:
    """Mask secret-looking query parameters."""
    return _SENSITIVE_QUERY.sub(r"\1=[REDACTED]", text)


def safe_url(url: str) -> str:
    """Strip user credentials and secret query values from a URL for logging."""
    try:
        parts = urlsplit(url)
    except ValueError:
        return redact(url)
    netloc = parts.netloc
    if "@" in netloc:
        netloc = "[REDACTED]@" + netloc.rsplit("@", 1)[1]
    return redact(urlunsplit((parts.scheme, netloc, parts.path, parts.query, parts.fragment)))


class Timer:
    """Context manager measuring elapsed wall time."""

    def __init__(self):
        self._start = 0.0
        self._end: Optional[float] = None

    def __enter__(self) -> "Timer":
        self._start = time.perf_counter()
        return self

    def __exit__(self, *exc_info) -> None:
        self._end = time.perf_counter()

    def duration_ms(self) -> int:
        """Milliseconds since entering, or total duration once exited."""
        end = self._end if self._end is not None else time.perf_counter()
        return int((end - self._start) * 1000)
