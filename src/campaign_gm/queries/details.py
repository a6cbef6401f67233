"""Player detail payloads for dashboards and the CLI."""

from __future__ import annotations

from typing import Any

from sqlalchemy.orm import aliased
from sqlmodel import Session, select

from campaign_gm.db.repository import SqlRepository
from campaign_gm.models.ability import Ability, PlayerAbility
from campaign_gm.models.effect import Effect
from campaign_gm.models.item import Item, PlayerItem
from campaign_gm.models.player import Player

_PLAYER_FIELDS = (
    "id",
    "name",
    "gender",
    "health",
    "max_health",
    "armor",
    "strength",
    "agility",
    "intelligence",
    "physique",
    "wisdom",
    "charisma",
    "history",
    "in_battle",
    "is_online",
    "is_card_shown",
    "version",
)


def _effect_payload(effect: Effect | None) -> dict[str, Any] | None:
    if effect is None:
        return None
    return {
        "id": effect.id,
        "name": effect.name,
        "description": effect.description,
        "attribute": effect.attribute,
        "modifier": effect.modifier,
        "is_permanent": effect.is_permanent,
        "duration_turns": effect.duration_turns,
        "duration_days": effect.duration_days,
    }


def get_players(session: Session) -> list[dict[str, Any]]:
    """Return every player's base fields, ordered by id."""
    players = session.exec(select(Player).order_by(Player.id)).all()
    return [{name: getattr(player, name) for name in _PLAYER_FIELDS} for player in players]


def get_player_abilities(session: Session, player_id: int) -> list[dict[str, Any]]:
    """Return the player's active abilities with their effect details."""
    rows = session.exec(
        select(Ability, PlayerAbility, Effect)
        .join(PlayerAbility, PlayerAbility.ability_id == Ability.id)
        .outerjoin(Effect, Effect.id == Ability.effect_id)
        .where(PlayerAbility.player_id == player_id, PlayerAbility.is_active == True)  # noqa: E712
        .order_by(Ability.name, Ability.id)
    ).all()
    return [
        {
            "id": ability.id,
            "name": ability.name,
            "description": ability.description,
            "ability_type": ability.ability_type,
            "cooldown_turns": ability.cooldown_turns,
            "cooldown_days": ability.cooldown_days,
            "is_active": link.is_active,
            "effect": _effect_payload(effect),
        }
        for ability, link, effect in rows
    ]


def get_player_items(session: Session, player_id: int) -> list[dict[str, Any]]:
    """Return inventory entries with active and passive effect details."""
    active = aliased(Effect)
    passive = aliased(Effect)
    rows = session.exec(
        select(PlayerItem, Item, active, passive)
        .join(Item, Item.id == PlayerItem.item_id)
        .outerjoin(active, active.id == Item.active_effect_id)
        .outerjoin(passive, passive.id == Item.passive_effect_id)
        .where(PlayerItem.player_id == player_id)
        .order_by(Item.name, Item.id)
    ).all()
    return [
        {
            "id": item.id,
            "name": item.name,
            "description": item.description,
            "rarity": item.rarity,
            "quantity": link.quantity,
            "is_equipped": link.is_equipped,
            "active_effect": _effect_payload(active_effect),
            "passive_effect": _effect_payload(passive_effect),
        }
        for link, item, active_effect, passive_effect in rows
    ]


def get_player_details(session: Session, player_id: int) -> dict[str, Any]:
    """Return base fields, final stats, abilities, items and active effects."""
    repo = SqlRepository(session)
    player = repo.get_player(player_id)
    snapshot = repo.get_player_snapshot(player_id)
    final_stats = snapshot.resolve()

    abilities = get_player_abilities(session, player_id)
    items = get_player_items(session, player_id)
    active_effects = [
        {
            "id": instance.id,
            "effect_id": instance.effect_id,
            "name": instance.definition.name if instance.definition else None,
            "attribute": (
                instance.definition.attribute.value
                if instance.definition and instance.definition.attribute
                else None
            ),
            "modifier": instance.definition.modifier if instance.definition else 0,
            "source_type": instance.source_type.value,
            "source_id": instance.source_id,
            "remaining_turns": instance.remaining_turns,
            "remaining_days": instance.remaining_days,
        }
        for instance in snapshot.active_effects
    ]

    player_payload = {name: getattr(player, name) for name in _PLAYER_FIELDS}
    player_payload["final_stats"] = final_stats.as_dict()
    return {
        "player": player_payload,
        "abilities": abilities,
        "items": items,
        "active_effects": active_effects,
        "summary": {
            "total_abilities": len(abilities),
            "total_items": sum(entry["quantity"] for entry in items),
            "active_effects_count": len(active_effects),
            "equipped_items_count": sum(1 for entry in items if entry["is_equipped"]),
        },
    }
