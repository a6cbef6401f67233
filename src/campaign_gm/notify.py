"""Delivery of outbox events to connected viewers."""

from __future__ import annotations

import logging
from typing import Callable

import requests
from blinker import Signal

from campaign_gm.config import get_notify_url
from campaign_gm.core.events import DomainEvent, Outbox

logger = logging.getLogger(__name__)


class EventDispatcher:
    """Fans drained outbox events out to subscribers through blinker signals.

    Delivery is fire-and-forget: a failing subscriber is logged and the
    remaining subscribers still receive the event.
    """

    def __init__(self) -> None:
        self._signal = Signal("campaign-event")

    def subscribe(self, receiver: Callable[[DomainEvent], None]) -> None:
        def _forward(sender, event: DomainEvent) -> None:
            try:
                receiver(event)
            except Exception:
                logger.exception("Notifier %r failed for %s", receiver, event.name)

        self._signal.connect(_forward, weak=False)

    def publish(self, event: DomainEvent) -> None:
        self._signal.send(self, event=event)

    def dispatch(self, outbox: Outbox) -> int:
        """Drain ``outbox`` and publish every event; return how many were sent."""
        events = outbox.drain()
        for event in events:
            self.publish(event)
        return len(events)


class LoggingNotifier:
    def __call__(self, event: DomainEvent) -> None:
        logger.info("event %s %s", event.name, event.payload())


class WebhookNotifier:
    """POSTs each event as JSON to a configured URL."""

    def __init__(
        self,
        url: str,
        *,
        timeout_s: float = 5.0,
        session: requests.Session | None = None,
    ) -> None:
        self.url = url
        self.timeout_s = timeout_s
        self._session = session or requests.Session()
        self._session.headers.update({"User-Agent": "campaign_gm/0.1"})

    def __call__(self, event: DomainEvent) -> None:
        body = {"event": event.name, "payload": event.payload()}
        try:
            response = self._session.post(self.url, json=body, timeout=self.timeout_s)
            response.raise_for_status()
        except requests.RequestException as exc:
            logger.warning("Webhook delivery of %s to %s failed: %s", event.name, self.url, exc)


def build_dispatcher(notify_url: str | None = None) -> EventDispatcher:
    """Return a dispatcher with the logging notifier and, if set, the webhook."""
    dispatcher = EventDispatcher()
    dispatcher.subscribe(LoggingNotifier())
    url = notify_url if notify_url is not None else get_notify_url()
    if url:
        dispatcher.subscribe(WebhookNotifier(url))
    return dispatcher
