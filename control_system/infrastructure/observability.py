"""Structured Logging — JSON formatter, in-memory log ring buffer and setup.

Invariants:
    - All logs include timestamp, level, logger name, and message
    - Extra fields (step, error_code, repos, path) surfaced when present
    - LogBuffer keeps at most `capacity` messages; the oldest is evicted first
    - LogBuffer push/get/clear are guarded by one short-held lock

Design Decisions:
    - LogBuffer injected, not global: the logging handler and the log viewer
      share one handle created at startup
    - When a buffer is given, stderr gets nothing (the terminal UI owns the screen)
"""

import json
import logging
import threading
from collections import deque
from dataclasses import dataclass
from datetime import datetime, timezone

MAX_LOG_MESSAGES = 100

_EXTRA_KEYS = (
    "step", "error_code", "category", "path", "repos", "events",
    "remaining", "username", "command",
)


class JSONFormatter(logging.Formatter):
    """Format logs as JSON for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        log = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key in _EXTRA_KEYS:
            val = record.__dict__.get(key)
            if val is not None:
                log[key] = val
        if record.exc_info:
            log["exception"] = self.formatException(record.exc_info)
        return json.dumps(log, ensure_ascii=False, default=str)


@dataclass(frozen=True)
class LogMessage:
    level: str
    message: str


class LogBuffer:
    """Bounded, append-only ring of log messages shared across threads."""

    def __init__(self, capacity: int = MAX_LOG_MESSAGES):
        self._messages: deque[LogMessage] = deque(maxlen=capacity)
        self._lock = threading.Lock()

    def push(self, level: str, message: str) -> None:
        with self._lock:
            self._messages.append(LogMessage(level, message))

    def get_messages(self) -> list[LogMessage]:
        with self._lock:
            return list(self._messages)

    def clear(self) -> None:
        with self._lock:
            self._messages.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._messages)


class LogBufferHandler(logging.Handler):
    """Logging sink that appends formatted records to a LogBuffer."""

    def __init__(self, buffer: LogBuffer, level: int = logging.NOTSET):
        super().__init__(level)
        self.buffer = buffer

    def emit(self, record: logging.LogRecord) -> None:
        try:
            text = self.format(record).strip()
        except Exception:
            self.handleError(record)
            return
        if text:
            self.buffer.push(record.levelname, text)


def setup_logging(
    level: str = "INFO", fmt: str = "text", buffer: LogBuffer | None = None,
) -> logging.Handler:
    """Configure root logging once at startup. Returns the installed handler."""
    handler: logging.Handler
    if buffer is not None:
        handler = LogBufferHandler(buffer)
    else:
        handler = logging.StreamHandler()
    if fmt == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(
            "%(asctime)s %(levelname)s %(name)s — %(message)s",
            datefmt="%H:%M:%S",
        ))
    logging.root.addHandler(handler)
    logging.root.setLevel(getattr(logging, level.upper(), logging.INFO))
    # httpx logs every request at INFO; keep the viewer readable
    logging.getLogger("httpx").setLevel(logging.WARNING)
    return handler
