"""Turn/day advancement of active effect counters."""

from __future__ import annotations

from dataclasses import replace
from enum import Enum
from typing import Iterable

from campaign_gm.core.effects import ActiveEffectInstance


class TickKind(str, Enum):
    TURN = "turn"
    DAY = "day"


def _counter_field(kind: TickKind) -> str:
    if kind is TickKind.TURN:
        return "remaining_turns"
    return "remaining_days"


def tick(
    kind: TickKind | str,
    instances: Iterable[ActiveEffectInstance],
) -> tuple[list[ActiveEffectInstance], list[ActiveEffectInstance]]:
    """Advance one turn or day and split instances into (retained, expired).

    Only the counter matching ``kind`` moves. An instance expires as soon as
    that counter would reach zero even if the other counter still has time
    left. Counters already at or below zero count as expired. Inputs are not
    mutated; decremented instances are returned as new values.
    """
    counter = _counter_field(TickKind(kind))
    retained: list[ActiveEffectInstance] = []
    expired: list[ActiveEffectInstance] = []
    for instance in instances:
        remaining = getattr(instance, counter)
        if remaining is None:
            retained.append(instance)
        elif remaining > 1:
            retained.append(replace(instance, **{counter: remaining - 1}))
        else:
            expired.append(replace(instance, **{counter: 0}))
    return retained, expired
