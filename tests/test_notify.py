from __future__ import annotations

from pathlib import Path
import sys

import pytest
import requests

sys.path.append(str(Path(__file__).resolve().parents[1] / "src"))

from campaign_gm.auth import check_master_secret
from campaign_gm.core.events import EffectExpired, EquipmentChanged, Outbox
from campaign_gm.errors import PermissionDeniedError
from campaign_gm.notify import EventDispatcher, WebhookNotifier, build_dispatcher


class _FakeResponse:
    def raise_for_status(self) -> None:
        return None


class _FakeSession:
    def __init__(self, fail: bool = False) -> None:
        self.headers: dict[str, str] = {}
        self.calls: list[tuple[str, dict, float]] = []
        self.fail = fail

    def post(self, url: str, json: dict, timeout: float) -> _FakeResponse:
        self.calls.append((url, json, timeout))
        if self.fail:
            raise requests.ConnectionError("viewer offline")
        return _FakeResponse()


def test_dispatch_reaches_every_receiver() -> None:
    received: list[str] = []

    def _broken(event) -> None:
        raise RuntimeError("boom")

    dispatcher = EventDispatcher()
    dispatcher.subscribe(_broken)
    dispatcher.subscribe(lambda event: received.append(event.name))

    outbox = Outbox()
    outbox.add(EquipmentChanged(player_id=1, item_id=2, is_equipped=True))
    outbox.add(EffectExpired(player_id=1, instance_id=3, effect_id=4, kind="turn"))

    assert dispatcher.dispatch(outbox) == 2
    assert received == ["equipment:changed", "effect:expired"]
    assert len(outbox) == 0
    assert dispatcher.dispatch(outbox) == 0


def test_webhook_posts_event_payload() -> None:
    session = _FakeSession()
    notifier = WebhookNotifier("http://viewer.local/events", timeout_s=2.0, session=session)

    notifier(EquipmentChanged(player_id=5, item_id=9, is_equipped=False))

    url, body, timeout = session.calls[0]
    assert url == "http://viewer.local/events"
    assert timeout == 2.0
    assert body == {
        "event": "equipment:changed",
        "payload": {"player_id": 5, "item_id": 9, "is_equipped": False},
    }
    assert session.headers["User-Agent"].startswith("campaign_gm/")


def test_webhook_failure_is_not_raised() -> None:
    session = _FakeSession(fail=True)
    notifier = WebhookNotifier("http://viewer.local/events", session=session)

    notifier(EffectExpired(player_id=1, instance_id=1, effect_id=1, kind="day"))

    assert len(session.calls) == 1


def test_build_dispatcher_without_webhook(monkeypatch) -> None:
    monkeypatch.delenv("CAMPAIGN_GM_NOTIFY_URL", raising=False)
    dispatcher = build_dispatcher()
    outbox = Outbox()
    outbox.add(EquipmentChanged(player_id=1, item_id=1, is_equipped=True))

    assert dispatcher.dispatch(outbox) == 1


def test_master_secret_check(monkeypatch) -> None:
    monkeypatch.delenv("CAMPAIGN_GM_MASTER_SECRET", raising=False)
    check_master_secret(None)

    check_master_secret("hunter2", expected="hunter2")
    with pytest.raises(PermissionDeniedError):
        check_master_secret("wrong", expected="hunter2")
    with pytest.raises(PermissionDeniedError):
        check_master_secret(None, expected="hunter2")

    monkeypatch.setenv("CAMPAIGN_GM_MASTER_SECRET", "from-env")
    check_master_secret("from-env")
    with pytest.raises(PermissionDeniedError):
        check_master_secret("hunter2")
