from __future__ import annotations

import json
import logging

from app.core.context import event_context
from app.core.logging import EventIdFilter, JsonFormatter, TextFormatter, configure_logging


def _record(**extra) -> logging.LogRecord:
    record = logging.makeLogRecord(
        {"name": "app.services.reconciler", "levelname": "INFO", "msg": "%s -> %s", "args": ("transfer", "success")}
    )
    record.__dict__.update(extra)
    return record


def test_filter_stamps_current_event_id():
    record = _record()
    with event_context("ev-42"):
        assert EventIdFilter().filter(record) is True
    assert record.event_id == "ev-42"


def test_filter_without_event_uses_placeholder():
    record = _record()
    EventIdFilter().filter(record)
    assert record.event_id == "-"


def test_json_line_carries_lifecycle_fields():
    record = _record(event_id="ev-1", kind="transfer", status="success", tx_hash="0xHASH")

    line = json.loads(JsonFormatter().format(record))

    assert line["msg"] == "transfer -> success"
    assert line["event_id"] == "ev-1"
    assert (line["kind"], line["status"], line["tx_hash"]) == ("transfer", "success", "0xHASH")
    assert "user_op_hash" not in line


def test_text_line_appends_context():
    record = _record(event_id="ev-1", kind="reward", user_op_hash="0xOP")

    text = TextFormatter().format(record)

    assert "app.services.reconciler: transfer -> success" in text
    assert text.endswith("[event_id=ev-1 kind=reward user_op_hash=0xOP]")


def test_configure_logging_replaces_its_own_handler():
    root = logging.getLogger()
    before, level = list(root.handlers), root.level
    try:
        first = configure_logging(level="debug", json_lines=True)
        second = configure_logging(level="warning", json_lines=False)

        assert first not in root.handlers
        assert second in root.handlers
        assert isinstance(second.formatter, TextFormatter)
        assert root.level == logging.WARNING
        assert logging.getLogger("urllib3").level == logging.WARNING
    finally:
        root.handlers[:] = before
        root.setLevel(level)
