"""Aggregate verification over the campaign database."""

from __future__ import annotations

from typing import Any

from sqlalchemy import func
from sqlmodel import Session, select

from campaign_gm.models.ability import Ability, PlayerAbility
from campaign_gm.models.active_effect import PlayerActiveEffect
from campaign_gm.models.effect import Effect
from campaign_gm.models.item import Item, PlayerItem
from campaign_gm.models.player import Player
from campaign_gm.verify.active_effects import verify_active_effects
from campaign_gm.verify.effects import verify_effects
from campaign_gm.verify.players import verify_inventory, verify_players

_COUNTED = {
    "players": Player,
    "effects": Effect,
    "abilities": Ability,
    "items": Item,
    "player_abilities": PlayerAbility,
    "player_items": PlayerItem,
    "player_active_effects": PlayerActiveEffect,
}


def check_counts(session: Session) -> dict[str, int]:
    """Return row counts for every campaign table."""
    return {
        label: session.exec(select(func.count()).select_from(model)).one()
        for label, model in _COUNTED.items()
    }


def run_all_checks(session: Session) -> tuple[bool, dict[str, Any]]:
    """Run all verification checks and return (ok, report)."""
    errors: list[str] = []
    warnings: list[str] = []
    for check in (verify_effects, verify_players, verify_inventory, verify_active_effects):
        result = check(session)
        errors.extend(result["errors"])
        warnings.extend(result["warnings"])

    report = {
        "counts": check_counts(session),
        "errors": errors,
        "warnings": warnings,
    }
    return not errors, report
