"""JSON logging for the status service, with request and snapshot context."""

from __future__ import annotations

import logging
import os
from collections import deque
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, Iterator, Optional

from pythonjsonlogger import jsonlogger

_CONFIGURED = False
_LOG_BUFFER: deque[dict[str, Any]] = deque(maxlen=200)

# Fields bound for the current request or render; copied onto every record.
_log_context: ContextVar[dict[str, Any]] = ContextVar("scope_status_log_context", default={})

# Record attributes worth keeping in the /logs buffer besides the message.
_BUFFERED_FIELDS = ("request", "snapshot_id", "stage", "reason", "returncode")


@contextmanager
def log_context(**fields: Any) -> Iterator[None]:
    """Attach ``fields`` to every record logged inside the block."""

    token = _log_context.set({**_log_context.get(), **fields})
    try:
        yield
    finally:
        _log_context.reset(token)


class _ContextFilter(logging.Filter):
    def __init__(self, service_name: str) -> None:
        super().__init__()
        self.service_name = service_name

    def filter(self, record: logging.LogRecord) -> bool:
        record.service = self.service_name
        for key, value in _log_context.get().items():
            # Explicit ``extra=`` values win over bound context.
            if not hasattr(record, key):
                setattr(record, key, value)
        return True


class _BufferHandler(logging.Handler):
    def emit(self, record: logging.LogRecord) -> None:
        try:
            timestamp = datetime.fromtimestamp(record.created, tz=timezone.utc)
            entry: dict[str, Any] = {
                "time": timestamp.isoformat().replace("+00:00", "Z"),
                "level": record.levelname,
                "name": record.name,
                "message": record.getMessage(),
            }
            for key in _BUFFERED_FIELDS:
                value = getattr(record, key, None)
                if value is not None:
                    entry[key] = value
            _LOG_BUFFER.appendleft(entry)
        except Exception:
            self.handleError(record)


def setup_logging(service_name: Optional[str] = None) -> None:
    """Route root logging to stderr as JSON and into the in-memory buffer."""

    global _CONFIGURED
    if _CONFIGURED:
        return

    log_level = os.getenv("LOG_LEVEL", "INFO").upper()
    context_filter = _ContextFilter(service_name or os.getenv("SERVICE_NAME", "scope-status"))

    stream = logging.StreamHandler()
    stream.setFormatter(jsonlogger.JsonFormatter("%(asctime)s %(levelname)s %(name)s %(message)s %(service)s"))
    stream.addFilter(context_filter)
    buffer = _BufferHandler()
    buffer.addFilter(context_filter)

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(stream)
    root.addHandler(buffer)
    root.setLevel(log_level)
    logging.captureWarnings(True)
    _CONFIGURED = True


def get_log_buffer(limit: int = 100) -> list[dict[str, Any]]:
    return list(_LOG_BUFFER)[:limit]


__all__ = ["setup_logging", "get_log_buffer", "log_context"]
