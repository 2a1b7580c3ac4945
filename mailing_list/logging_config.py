from __future__ import annotations

import json
import logging
from contextvars import ContextVar
from datetime import UTC, datetime
from typing import Any

request_id_ctx_var: ContextVar[str | None] = ContextVar("request_id", default=None)

_RESERVED_RECORD_KEYS = {
    "name",
    "msg",
    "args",
    "levelname",
    "levelno",
    "pathname",
    "filename",
    "module",
    "exc_info",
    "exc_text",
    "stack_info",
    "lineno",
    "funcName",
    "created",
    "msecs",
    "relativeCreated",
    "thread",
    "threadName",
    "processName",
    "process",
    "taskName",
}


class RequestIdFilter(logging.Filter):
    """Attach request_id from contextvars to every log record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = request_id_ctx_var.get() or "-"
        return True


MAX_TEXT_LENGTH = 5000
MAX_DICT_ITEMS = 100
MAX_LIST_ITEMS = 200


def _truncate_text(value: str) -> str:
    return value[:MAX_TEXT_LENGTH] if len(value) > MAX_TEXT_LENGTH else value


def _json_safe_dict(value: dict[Any, Any]) -> dict[str, Any]:
    safe: dict[str, Any] = {}
    for idx, (key, item) in enumerate(value.items()):
        if idx >= MAX_DICT_ITEMS:
            safe["..."] = "truncated"
            break
        safe[str(key)] = _json_safe(item)
    return safe


def _json_safe_iterable(value: list[Any] | tuple[Any, ...] | set[Any]) -> list[Any]:
    items: list[Any] = []
    for idx, item in enumerate(value):
        if idx >= MAX_LIST_ITEMS:
            items.append("...truncated")
            break
        items.append(_json_safe(item))
    return items


def _json_safe(value: Any) -> Any:
    if value is None or isinstance(value, (int, float, bool)):
        return value
    if isinstance(value, str):
        return _truncate_text(value)
    if isinstance(value, dict):
        return _json_safe_dict(value)
    if isinstance(value, (list, tuple, set)):
        return _json_safe_iterable(value)
    return _truncate_text(str(value))


class JsonFormatter(logging.Formatter):
    """Minimal JSON formatter for structured logs."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": _truncate_text(record.getMessage()),
            "request_id": getattr(record, "request_id", "-"),
        }
        for key, value in record.__dict__.items():
            if key in _RESERVED_RECORD_KEYS or key in payload or key.startswith("_"):
                continue
            payload[key] = _json_safe(value)
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False)


def configure_logging(level: str = "INFO", json_logs: bool = False) -> None:
    """Configure root logger with a request-id aware formatter."""
    handler = logging.StreamHandler()
    handler.addFilter(RequestIdFilter())
    if json_logs:
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(
            logging.Formatter("%(asctime)s [%(levelname)s] %(name)s [%(request_id)s] %(message)s")
        )

    logging.basicConfig(level=level.upper(), handlers=[handler], force=True)
