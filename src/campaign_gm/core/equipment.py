"""Inventory entries and the equipped subset used by stat resolution."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Iterable

from campaign_gm.core.effects import EffectDefinition


@dataclass(frozen=True, slots=True)
class PlayerItemLink:
    """One inventory entry; at most one exists per (player, item) pair."""

    id: int | None
    player_id: int
    item_id: int
    quantity: int = 1
    is_equipped: bool = False
    item_name: str | None = None
    passive_effect: EffectDefinition | None = None


def set_equipped(link: PlayerItemLink, equipped: bool) -> PlayerItemLink:
    """Return the link with its equipped flag set.

    No active effect instance is created here: the item's passive effect is
    picked up by the resolver the next time stats are computed.
    """
    if link.is_equipped == bool(equipped):
        return link
    return replace(link, is_equipped=bool(equipped))


def equipped_passives(links: Iterable[PlayerItemLink]) -> list[EffectDefinition]:
    """Return the passive definitions of equipped entries that carry one."""
    return [
        link.passive_effect
        for link in links
        if link.is_equipped and link.passive_effect is not None
    ]
