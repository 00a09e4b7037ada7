"""JSON logging for StyleMe with request correlation and privacy scrubbing.

Every record is rendered as one JSON object. Extras passed through
``log_event`` are scrubbed first: device positions, place names and the free
text users type into wardrobe items or calendar events never reach the log
stream verbatim.
"""

from __future__ import annotations

import contextlib
import contextvars
import dataclasses
import json
import logging
import os
import re
import uuid
from typing import Any, Dict, Iterator

CORRELATION_ID = contextvars.ContextVar("correlation_id", default=None)

# Attributes every LogRecord carries; anything else on a record is an extra.
_RECORD_ATTRIBUTES = frozenset(vars(logging.LogRecord("", 0, "", 0, "", None, None))) | {
    "message",
    "asctime",
    "taskName",
}

_POSITION_FIELDS = {"latitude", "longitude", "coordinate", "location"}
_PLACE_FIELDS = {"location_name", "city"}
_USER_TEXT_FIELDS = {"name", "image", "image_url", "title", "description"}
_PRIVATE_FIELDS = frozenset(_POSITION_FIELDS | _PLACE_FIELDS | _USER_TEXT_FIELDS)

_EMAIL_PATTERN = re.compile(r"[\w.\-]+@[\w.\-]+")
_MASK = "[redacted]"


class JsonFormatter(logging.Formatter):
    """Render a record as JSON: level, logger, event, correlation id and extras."""

    def format(self, record: logging.LogRecord) -> str:  # noqa: D401
        message = super().format(record)
        payload: Dict[str, Any] = {
            "timestamp": self.formatTime(record, datefmt="%Y-%m-%dT%H:%M:%S%z"),
            "level": record.levelname,
            "logger": record.name,
            "message": message,
            "event": getattr(record, "event", message),
            "correlation_id": getattr(record, "correlation_id", None) or CORRELATION_ID.get(),
        }
        extras = {
            key: value
            for key, value in vars(record).items()
            if key not in _RECORD_ATTRIBUTES and key not in payload
        }
        payload.update(redact_for_log(extras))
        return json.dumps(payload)


def configure_logging(level: int | str | None = None) -> None:
    """Replace root handlers with one JSON stream handler (level from ``LOG_LEVEL``)."""

    handler = logging.StreamHandler()
    handler.setFormatter(JsonFormatter())
    logging.root.handlers.clear()
    logging.basicConfig(level=level or os.getenv("LOG_LEVEL", "INFO"), handlers=[handler])


def _mask_text(value: str) -> str:
    if _EMAIL_PATTERN.search(value):
        return _EMAIL_PATTERN.sub("[redacted-email]", value)
    if value.lower().startswith("http"):
        return "[redacted-url]"
    return value


def redact_for_log(payload: Any) -> Any:
    """Return a log-safe copy of ``payload``.

    Values under private keys (positions, place names, wardrobe and calendar
    text) are masked wholesale; emails and URLs inside other strings are masked
    in place. Dataclasses such as :class:`~models.weather.Coordinate` are
    expanded to dicts first so their fields go through the same rules.
    """

    if dataclasses.is_dataclass(payload) and not isinstance(payload, type):
        payload = dataclasses.asdict(payload)
    if payload is None or isinstance(payload, (bool, int, float)):
        return payload
    if isinstance(payload, str):
        return _mask_text(payload)
    if isinstance(payload, dict):
        return {
            key: _MASK if key in _PRIVATE_FIELDS else redact_for_log(value)
            for key, value in payload.items()
        }
    if isinstance(payload, (list, tuple)):
        return [redact_for_log(item) for item in payload]
    return str(payload)


def get_logger(name: str) -> logging.Logger:
    """Logger for ``name``; installs the JSON handler if nothing is configured yet."""

    if not logging.getLogger().handlers:
        configure_logging()
    return logging.getLogger(name)


def ensure_correlation_id(correlation_id: str | None = None) -> str:
    """Bind ``correlation_id`` if given, else reuse the bound id or mint one."""

    if correlation_id:
        CORRELATION_ID.set(correlation_id)
        return correlation_id
    bound = CORRELATION_ID.get()
    if bound:
        return bound
    minted = uuid.uuid4().hex
    CORRELATION_ID.set(minted)
    return minted


@contextlib.contextmanager
def correlation_context(correlation_id: str | None = None) -> Iterator[str]:
    """Scope a correlation id to the ``with`` block and restore the previous one."""

    token = CORRELATION_ID.set(correlation_id or ensure_correlation_id())
    try:
        yield CORRELATION_ID.get()
    finally:
        CORRELATION_ID.reset(token)


def log_event(logger: logging.Logger, level: int, event: str, **fields: Any) -> None:
    """Log ``event`` with scrubbed ``fields`` attached as record extras."""

    correlation_id = ensure_correlation_id(fields.pop("correlation_id", None))
    exc_info = fields.pop("exc_info", None)
    extra = {"event": event, "correlation_id": correlation_id}
    extra.update(redact_for_log(fields))
    logger.log(level, event, exc_info=exc_info, extra=extra)


@contextlib.contextmanager
def operation_context(name: str, correlation_id: str | None = None) -> Iterator[str]:
    """Scope a correlation id around one named agent or app operation."""

    with correlation_context(correlation_id) as scoped_id:
        logging.getLogger(__name__).debug("operation started", extra={"operation": name})
        yield scoped_id


__all__ = [
    "JsonFormatter",
    "configure_logging",
    "correlation_context",
    "ensure_correlation_id",
    "get_logger",
    "log_event",
    "redact_for_log",
    "operation_context",
]
