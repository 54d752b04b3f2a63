from __future__ import annotations

from datetime import datetime, timezone
from unittest.mock import MagicMock, patch

import requests

from app.config import get_settings
from app.services.notifications import AnalyticsDispatcher, Notification, Notifier, WorkflowDispatcher

TS = datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)


def _ok():
    resp = MagicMock()
    resp.raise_for_status.return_value = None
    return resp


def test_workflow_post_adds_api_key(monkeypatch):
    monkeypatch.setenv("FLOWXO_WEBHOOK_API_KEY", "flow-key")
    get_settings.cache_clear()

    with patch("app.services.notifications.requests.post", return_value=_ok()) as post:
        WorkflowDispatcher().post("https://hooks.test/tx", {"transactionHash": "0xH"})

    assert post.call_args.args[0] == "https://hooks.test/tx"
    assert post.call_args.kwargs["json"] == {"transactionHash": "0xH", "apiKey": "flow-key"}


def test_analytics_track_payload(monkeypatch):
    monkeypatch.setenv("SEGMENT_KEY", "seg")
    get_settings.cache_clear()

    with patch("app.services.notifications.requests.post", return_value=_ok()) as post:
        AnalyticsDispatcher().track("alice", "Transfer", {"tokenAmount": "1"}, TS)

    assert post.call_args.args[0] == "https://api.segment.io/v1/track"
    assert post.call_args.kwargs["json"] == {
        "userId": "alice",
        "event": "Transfer",
        "properties": {"tokenAmount": "1"},
        "timestamp": TS.isoformat(),
    }
    assert post.call_args.kwargs["headers"] == {"Authorization": "Bearer seg"}


def test_notifier_sends_both(monkeypatch):
    monkeypatch.setenv("SEGMENT_KEY", "seg")
    get_settings.cache_clear()
    notification = Notification(
        webhook_url="https://hooks.test/swap",
        webhook_payload={"eventId": "e"},
        analytics_user_id="alice",
        analytics_event="Swap",
        analytics_properties={"eventId": "e"},
        timestamp=TS,
    )

    with patch("app.services.notifications.requests.post", return_value=_ok()) as post:
        Notifier().notify(notification)

    urls = [c.args[0] for c in post.call_args_list]
    assert urls == ["https://hooks.test/swap", "https://api.segment.io/v1/track"]
    assert post.call_args_list[0].kwargs["json"]["dateAdded"] == TS.isoformat()


def test_notifier_skips_analytics_without_key():
    notification = Notification(analytics_user_id="alice", analytics_event="Transfer")

    with patch("app.services.notifications.requests.post") as post:
        Notifier().notify(notification)

    post.assert_not_called()


def test_notifier_swallows_failures(monkeypatch):
    monkeypatch.setenv("SEGMENT_KEY", "seg")
    get_settings.cache_clear()
    notification = Notification(
        webhook_url="https://hooks.test/tx",
        analytics_user_id="alice",
        analytics_event="Transfer",
    )

    with patch("app.services.notifications.requests.post", side_effect=requests.ConnectionError("down")) as post:
        Notifier().notify(notification)
        Notifier().identify("alice", {"userName": "A"}, TS)

    assert post.call_count == 3


def test_identify_payload(monkeypatch):
    monkeypatch.setenv("SEGMENT_KEY", "seg")
    get_settings.cache_clear()

    with patch("app.services.notifications.requests.post", return_value=_ok()) as post:
        Notifier().identify("alice", {"patchwallet": "0xw"}, TS)

    assert post.call_args.args[0] == "https://api.segment.io/v1/identify"
    assert post.call_args.kwargs["json"]["traits"] == {"patchwallet": "0xw"}
