from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

import requests

from app.config import Settings, get_settings

logger = logging.getLogger(__name__)

NOTIFY_TIMEOUT_S = 100


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


@dataclass
class Notification:
    """What to send after a record transitions into SUCCESS."""

    webhook_url: str | None = None
    webhook_payload: dict[str, Any] = field(default_factory=dict)
    analytics_user_id: str | None = None
    analytics_event: str | None = None
    analytics_properties: dict[str, Any] = field(default_factory=dict)
    timestamp: datetime | None = None


class WorkflowDispatcher:
    """FlowXO-style webhook: snapshot plus the shared API key."""

    def __init__(self, settings: Settings | None = None):
        self.settings = settings or get_settings()

    def post(self, url: str, payload: dict[str, Any]) -> None:
        body = dict(payload)
        body["apiKey"] = self.settings.flowxo_webhook_api_key
        resp = requests.post(url, json=body, timeout=NOTIFY_TIMEOUT_S)
        resp.raise_for_status()


class AnalyticsDispatcher:
    """Segment track/identify calls."""

    def __init__(self, settings: Settings | None = None):
        self.settings = settings or get_settings()

    @property
    def enabled(self) -> bool:
        return bool(self.settings.segment_key)

    def _headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.settings.segment_key}"}

    def track(self, user_id: str, event: str, properties: dict[str, Any], timestamp: datetime | None = None) -> None:
        resp = requests.post(
            self.settings.segment_track_url,
            json={
                "userId": user_id,
                "event": event,
                "properties": properties,
                "timestamp": _iso(timestamp),
            },
            headers=self._headers(),
            timeout=NOTIFY_TIMEOUT_S,
        )
        resp.raise_for_status()

    def identify(self, user_id: str, traits: dict[str, Any], timestamp: datetime | None = None) -> None:
        resp = requests.post(
            self.settings.segment_identify_url,
            json={
                "userId": user_id,
                "traits": traits,
                "timestamp": _iso(timestamp),
            },
            headers=self._headers(),
            timeout=NOTIFY_TIMEOUT_S,
        )
        resp.raise_for_status()


class Notifier:
    """
    Fire-and-forget fan-out to the workflow webhook and analytics sink.
    Failures are logged and never raised.
    """

    def __init__(
        self,
        workflow: WorkflowDispatcher | None = None,
        analytics: AnalyticsDispatcher | None = None,
    ):
        self.workflow = workflow or WorkflowDispatcher()
        self.analytics = analytics or AnalyticsDispatcher()

    def notify(self, notification: Notification) -> None:
        if notification.webhook_url:
            payload = dict(notification.webhook_payload)
            payload.setdefault("dateAdded", _iso(notification.timestamp))
            try:
                self.workflow.post(notification.webhook_url, payload)
            except Exception:
                logger.exception("workflow webhook failed url=%s", notification.webhook_url)

        if notification.analytics_event and notification.analytics_user_id and self.analytics.enabled:
            try:
                self.analytics.track(
                    notification.analytics_user_id,
                    notification.analytics_event,
                    notification.analytics_properties,
                    notification.timestamp,
                )
            except Exception:
                logger.exception("analytics track failed event=%s", notification.analytics_event)

    def identify(self, user_id: str, traits: dict[str, Any], timestamp: datetime | None = None) -> None:
        if not self.analytics.enabled:
            return
        try:
            self.analytics.identify(user_id, traits, timestamp)
        except Exception:
            logger.exception("analytics identify failed user=%s", user_id)
