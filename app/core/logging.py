from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict

from app.core.context import get_event_id
from app.config import get_settings

# Lifecycle attributes callers attach with `extra=`; rendered after the message.
LIFECYCLE_FIELDS = ("kind", "status", "tx_hash", "user_op_hash")

QUIET_LOGGERS = ("uvicorn.access", "urllib3", "web3")


def record_time(record: logging.LogRecord) -> str:
    return datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat()


def lifecycle_context(record: logging.LogRecord) -> Dict[str, Any]:
    ctx: Dict[str, Any] = {"event_id": getattr(record, "event_id", None) or "-"}
    for name in LIFECYCLE_FIELDS:
        value = getattr(record, name, None)
        if value is not None:
            ctx[name] = value
    return ctx


class EventIdFilter(logging.Filter):
    """Stamps the in-flight event id on every record passing the handler."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not getattr(record, "event_id", None):
            record.event_id = get_event_id() or "-"
        return True


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        line: Dict[str, Any] = {
            "ts": record_time(record),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        line.update(lifecycle_context(record))
        if record.exc_info:
            line["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(line, ensure_ascii=False, default=str)


class TextFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        ctx = " ".join(f"{k}={v}" for k, v in lifecycle_context(record).items())
        text = f"{record_time(record)} {record.levelname:<7} {record.name}: {record.getMessage()} [{ctx}]"
        if record.exc_info:
            text += "\n" + self.formatException(record.exc_info)
        return text


def configure_logging(*, level: str | None = None, json_lines: bool | None = None) -> logging.Handler:
    """
    Route the root logger to stdout. Arguments override LOG_LEVEL / LOG_JSON.
    Calling again replaces the handler installed by the previous call.
    """
    settings = get_settings()
    level_name = (level or settings.log_level).upper()
    use_json = settings.log_json if json_lines is None else json_lines

    root = logging.getLogger()
    for existing in list(root.handlers):
        if getattr(existing, "_intent_reconciler", False):
            root.removeHandler(existing)
    root.setLevel(getattr(logging, level_name, logging.INFO))

    handler = logging.StreamHandler(sys.stdout)
    handler._intent_reconciler = True
    handler.addFilter(EventIdFilter())
    handler.setFormatter(JsonFormatter() if use_json else TextFormatter())
    root.addHandler(handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    return handler
