"""Domain events recorded by mutations and drained by notifiers."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from threading import Lock
from typing import Any


@dataclass(frozen=True, slots=True)
class DomainEvent:
    player_id: int

    name = "event"

    def payload(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True, slots=True)
class PlayerCreated(DomainEvent):
    player_name: str

    name = "player:created"


@dataclass(frozen=True, slots=True)
class PlayerUpdated(DomainEvent):
    changed: tuple[str, ...]
    version: int

    name = "player:updated"


@dataclass(frozen=True, slots=True)
class PlayerDeleted(DomainEvent):
    player_name: str

    name = "player:deleted"


@dataclass(frozen=True, slots=True)
class EffectApplied(DomainEvent):
    instance_id: int
    effect_id: int
    source_type: str
    source_id: int | None = None

    name = "effect:applied"


@dataclass(frozen=True, slots=True)
class EffectExpired(DomainEvent):
    instance_id: int
    effect_id: int
    kind: str

    name = "effect:expired"


@dataclass(frozen=True, slots=True)
class EffectRemoved(DomainEvent):
    instance_id: int
    effect_id: int
    source_type: str
    source_id: int | None = None

    name = "effect:removed"


@dataclass(frozen=True, slots=True)
class EquipmentChanged(DomainEvent):
    item_id: int
    is_equipped: bool

    name = "equipment:changed"


class Outbox:
    """Thread-safe queue of domain events awaiting delivery."""

    def __init__(self) -> None:
        self._events: list[DomainEvent] = []
        self._lock = Lock()

    def add(self, event: DomainEvent) -> None:
        with self._lock:
            self._events.append(event)

    def drain(self) -> list[DomainEvent]:
        with self._lock:
            events, self._events = self._events, []
        return events

    def __len__(self) -> int:
        with self._lock:
            return len(self._events)


def emit(outbox: Outbox | None, event: DomainEvent) -> None:
    """Record ``event`` when the caller collects events."""
    if outbox is not None:
        outbox.add(event)
