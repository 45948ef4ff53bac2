"""Logging setup: one stdout handler, plain text in dev, JSON lines in prod.

Plain lines look like::

    2026-03-01T12:00:00.123+0000 WARNING  inspira.services.coupon_service  Coupon rejected  code=REACT20 course=course-1 reason=wrong_scope  [coupon_service.py:66]

Only WARNING and above carry the ``[file:line]`` suffix; the happy path
stays short.

With LOG_JSON=true each record is one JSON object.  The request fields set
by RequestContextMiddleware and the learner fields the services pass via
``extra=`` (student_id, course_id, lesson_id) are promoted to top-level
keys.

Every record that reaches the handler is stamped with the current request
ID, including records from services that never see the request.
"""

from __future__ import annotations

import datetime
import json
import logging
import sys
from contextvars import ContextVar

request_id_var: ContextVar[str] = ContextVar("request_id", default="-")

_THIRD_PARTY = (
    "uvicorn",
    "uvicorn.access",
    "uvicorn.error",
    "httpcore",
    "httpx",
    "sqlalchemy.engine",
)


class _RequestIdFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        if getattr(record, "request_id", None) is None:
            record.request_id = request_id_var.get()  # type: ignore[attr-defined]
        return True


def _iso_millis(created: float) -> str:
    stamp = datetime.datetime.fromtimestamp(created, tz=datetime.UTC)
    return stamp.strftime("%Y-%m-%dT%H:%M:%S.") + f"{stamp.microsecond // 1000:03d}+0000"


class _ContainerFormatter(logging.Formatter):
    _PLAIN = "%(asctime)s %(levelname)-8s %(name)s  %(message)s"
    _LOCATED = _PLAIN + "  [%(filename)s:%(lineno)d]"

    def __init__(self) -> None:
        super().__init__(self._PLAIN)
        self._located = logging.Formatter(self._LOCATED)
        self._located.formatTime = self.formatTime  # type: ignore[method-assign]

    def formatTime(self, record: logging.LogRecord, datefmt: str | None = None) -> str:
        return _iso_millis(record.created)

    def format(self, record: logging.LogRecord) -> str:
        if record.levelno >= logging.WARNING:
            return self._located.format(record)
        return super().format(record)


class _JsonFormatter(logging.Formatter):
    _PROMOTED = (
        "request_id",
        "method",
        "path",
        "user_id",
        "status_code",
        "duration_ms",
        "student_id",
        "course_id",
        "lesson_id",
    )

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, object] = {
            "timestamp": _iso_millis(record.created),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        entry.update(
            (key, getattr(record, key))
            for key in self._PROMOTED
            if getattr(record, key, None) is not None
        )
        if record.exc_info and record.exc_info[0] is not None:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str, ensure_ascii=False)


def setup_logging(level_name: str, *, json_format: bool = False) -> None:
    """Replace the root handlers with a single stdout handler.

    Unknown level names fall back to INFO.  Chatty third-party loggers are
    held at WARNING unless the root level is stricter.
    """
    level = logging.getLevelName(level_name.upper())
    if not isinstance(level, int):
        level = logging.INFO

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(_JsonFormatter() if json_format else _ContainerFormatter())
    handler.addFilter(_RequestIdFilter())

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)

    for name in _THIRD_PARTY:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))
