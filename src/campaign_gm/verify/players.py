"""Verification checks for players and their inventories."""

from __future__ import annotations

from sqlalchemy import func
from sqlmodel import Session, select

from campaign_gm.models.item import PlayerItem
from campaign_gm.models.player import Player


def verify_players(session: Session) -> dict[str, list[str]]:
    """Verify the health limit holds for every player."""
    errors: list[str] = []
    warnings: list[str] = []

    over_limit = session.exec(
        select(Player).where(Player.health > Player.max_health)
    ).all()
    for player in over_limit:
        errors.append(
            "Player health above max: "
            f"id={player.id} health={player.health} max_health={player.max_health}"
        )

    downed = session.exec(select(Player).where(Player.health <= 0)).all()
    for player in downed:
        warnings.append(f"Player at or below zero health: id={player.id} health={player.health}")

    return {"errors": errors, "warnings": warnings}


def verify_inventory(session: Session) -> dict[str, list[str]]:
    """Verify inventory uniqueness and quantities."""
    errors: list[str] = []
    warnings: list[str] = []

    duplicates = session.exec(
        select(PlayerItem.player_id, PlayerItem.item_id, func.count(PlayerItem.id))
        .group_by(PlayerItem.player_id, PlayerItem.item_id)
        .having(func.count(PlayerItem.id) > 1)
    ).all()
    for player_id, item_id, count in duplicates:
        errors.append(
            "Duplicate inventory entry: "
            f"player_id={player_id} item_id={item_id} count={count}"
        )

    empty = session.exec(select(PlayerItem).where(PlayerItem.quantity < 1)).all()
    for link in empty:
        errors.append(
            "Inventory entry with non-positive quantity: "
            f"id={link.id} player_id={link.player_id} quantity={link.quantity}"
        )

    return {"errors": errors, "warnings": warnings}
