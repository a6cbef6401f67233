"""Verification checks for active effect instances."""

from __future__ import annotations

from sqlalchemy import or_
from sqlmodel import Session, select

from campaign_gm.models.ability import Ability
from campaign_gm.models.active_effect import PlayerActiveEffect
from campaign_gm.models.effect import Effect
from campaign_gm.models.item import Item


def verify_active_effects(session: Session) -> dict[str, list[str]]:
    """Verify counters, definitions and source provenance of active effects."""
    errors: list[str] = []
    warnings: list[str] = []

    stale = session.exec(
        select(PlayerActiveEffect).where(
            or_(
                PlayerActiveEffect.remaining_turns <= 0,
                PlayerActiveEffect.remaining_days <= 0,
            )
        )
    ).all()
    for row in stale:
        warnings.append(
            "Active effect already expired: "
            f"id={row.id} remaining_turns={row.remaining_turns} "
            f"remaining_days={row.remaining_days}"
        )

    missing_effect = session.exec(
        select(PlayerActiveEffect)
        .outerjoin(Effect, Effect.id == PlayerActiveEffect.effect_id)
        .where(Effect.id.is_(None))
    ).all()
    for row in missing_effect:
        errors.append(
            f"Active effect missing definition: id={row.id} effect_id={row.effect_id}"
        )

    orphaned_ability = session.exec(
        select(PlayerActiveEffect)
        .outerjoin(Ability, Ability.id == PlayerActiveEffect.source_id)
        .where(PlayerActiveEffect.source_type == "ability", Ability.id.is_(None))
    ).all()
    orphaned_item = session.exec(
        select(PlayerActiveEffect)
        .outerjoin(Item, Item.id == PlayerActiveEffect.source_id)
        .where(PlayerActiveEffect.source_type == "item", Item.id.is_(None))
    ).all()
    for row in [*orphaned_ability, *orphaned_item]:
        warnings.append(
            "Active effect source no longer exists: "
            f"id={row.id} source_type={row.source_type} source_id={row.source_id}"
        )

    admin_with_source = session.exec(
        select(PlayerActiveEffect).where(
            PlayerActiveEffect.source_type == "admin",
            PlayerActiveEffect.source_id.is_not(None),
        )
    ).all()
    for row in admin_with_source:
        warnings.append(
            f"Admin effect carries a source id: id={row.id} source_id={row.source_id}"
        )

    return {"errors": errors, "warnings": warnings}
