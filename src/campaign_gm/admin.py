"""Administrative create/update actions for players and definitions."""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm.exc import StaleDataError
from sqlmodel import Session, SQLModel, select

from campaign_gm.core.events import (
    Outbox,
    PlayerCreated,
    PlayerDeleted,
    PlayerUpdated,
    emit,
)
from campaign_gm.errors import ConflictError, InvalidDefinitionError, NotFoundError
from campaign_gm.locks import player_locks
from campaign_gm.models.ability import Ability, PlayerAbility
from campaign_gm.models.effect import Effect
from campaign_gm.models.item import Item, PlayerItem
from campaign_gm.models.player import Player
from campaign_gm.validation import (
    PLAYER_UPDATABLE_FIELDS,
    validate_ability,
    validate_effect,
    validate_item,
    validate_player,
)

logger = logging.getLogger(__name__)


def _commit_new(session: Session, row: SQLModel, label: str) -> None:
    session.add(row)
    try:
        session.commit()
    except IntegrityError as exc:
        session.rollback()
        raise ConflictError(f"{label} already exists or violates a constraint.") from exc
    session.refresh(row)


def _require(session: Session, model: type[SQLModel], row_id: int, label: str):
    row = session.exec(select(model).where(model.id == row_id)).one_or_none()
    if row is None:
        raise NotFoundError(label, row_id)
    return row


def _require_effect(session: Session, effect_id: int | None) -> None:
    if effect_id is not None:
        _require(session, Effect, effect_id, "Effect")


def create_player(
    session: Session,
    *,
    name: str,
    gender: str = "male",
    health: int = 50,
    max_health: int = 50,
    armor: int = 10,
    strength: int = 0,
    agility: int = 0,
    intelligence: int = 0,
    physique: int = 0,
    wisdom: int = 0,
    charisma: int = 0,
    history: str | None = None,
    is_online: bool = False,
    is_card_shown: bool = True,
    outbox: Outbox | None = None,
) -> Player:
    """Create a player after checking stats and the health limit."""
    values = validate_player(
        {
            "name": name,
            "gender": gender,
            "health": health,
            "max_health": max_health,
            "armor": armor,
            "strength": strength,
            "agility": agility,
            "intelligence": intelligence,
            "physique": physique,
            "wisdom": wisdom,
            "charisma": charisma,
        },
        creating=True,
    )
    player = Player(
        **values,
        history=history or "",
        in_battle=False,
        is_online=bool(is_online),
        is_card_shown=bool(is_card_shown),
    )
    _commit_new(session, player, f"Player '{values['name']}'")
    logger.info("Created player %s: %s", player.id, player.name)
    emit(outbox, PlayerCreated(player_id=player.id, player_name=player.name))
    return player


def update_player(
    session: Session,
    player_id: int,
    changes: dict[str, Any],
    *,
    expected_version: int | None = None,
    outbox: Outbox | None = None,
) -> Player:
    """Apply a partial update, keeping health <= max_health.

    The UPDATE only matches the version that was read, so a concurrent writer
    in another process makes this call fail with ``ConflictError`` instead of
    being overwritten. ``expected_version`` additionally pins the version the
    caller last saw.
    """
    unknown = sorted(set(changes) - set(PLAYER_UPDATABLE_FIELDS))
    if unknown:
        raise InvalidDefinitionError(f"Cannot update fields: {', '.join(unknown)}")
    if not changes:
        raise InvalidDefinitionError("No fields to update.")

    with player_locks.hold(player_id):
        player = _require(session, Player, player_id, "Player")
        if expected_version is not None and player.version != expected_version:
            raise ConflictError(
                f"Player {player_id} changed concurrently "
                f"(expected version {expected_version}, found {player.version})."
            )
        merged = {field: getattr(player, field) for field in PLAYER_UPDATABLE_FIELDS}
        merged.update(changes)
        validated = validate_player(merged, creating=False)
        for field in changes:
            setattr(player, field, validated[field])
        session.add(player)
        try:
            session.commit()
        except StaleDataError as exc:
            session.rollback()
            raise ConflictError(
                f"Player {player_id} changed concurrently; reload and retry."
            ) from exc
        except IntegrityError as exc:
            session.rollback()
            raise ConflictError(f"Player update rejected: {exc.orig}") from exc
        session.refresh(player)
    logger.info("Updated player %s fields: %s", player_id, ", ".join(sorted(changes)))
    emit(
        outbox,
        PlayerUpdated(
            player_id=player_id, changed=tuple(sorted(changes)), version=player.version
        ),
    )
    return player


def delete_player(
    session: Session, player_id: int, *, outbox: Outbox | None = None
) -> None:
    with player_locks.hold(player_id):
        player = _require(session, Player, player_id, "Player")
        name = player.name
        session.delete(player)
        try:
            session.commit()
        except StaleDataError as exc:
            session.rollback()
            raise ConflictError(
                f"Player {player_id} changed concurrently; reload and retry."
            ) from exc
    logger.info("Deleted player %s", player_id)
    emit(outbox, PlayerDeleted(player_id=player_id, player_name=name))


def create_effect(
    session: Session,
    *,
    name: str,
    attribute: str | None = None,
    modifier: int = 0,
    is_permanent: bool = False,
    duration_turns: int | None = None,
    duration_days: int | None = None,
    description: str | None = None,
) -> Effect:
    """Create an effect definition; definitions are immutable afterwards."""
    values = validate_effect(
        name=name,
        attribute=attribute,
        modifier=modifier,
        is_permanent=is_permanent,
        duration_turns=duration_turns,
        duration_days=duration_days,
    )
    effect = Effect(**values, description=description)
    _commit_new(session, effect, f"Effect '{values['name']}'")
    logger.info("Created effect %s: %s", effect.id, effect.name)
    return effect


def create_ability(
    session: Session,
    *,
    name: str,
    ability_type: str = "active",
    cooldown_turns: int = 0,
    cooldown_days: int = 0,
    effect_id: int | None = None,
    description: str | None = None,
) -> Ability:
    values = validate_ability(
        name=name,
        ability_type=ability_type,
        cooldown_turns=cooldown_turns,
        cooldown_days=cooldown_days,
    )
    _require_effect(session, effect_id)
    ability = Ability(**values, effect_id=effect_id, description=description)
    _commit_new(session, ability, f"Ability '{values['name']}'")
    logger.info("Created ability %s: %s", ability.id, ability.name)
    return ability


def create_item(
    session: Session,
    *,
    name: str,
    rarity: str = "common",
    base_quantity: int = 1,
    active_effect_id: int | None = None,
    passive_effect_id: int | None = None,
    description: str | None = None,
) -> Item:
    values = validate_item(name=name, rarity=rarity, base_quantity=base_quantity)
    _require_effect(session, active_effect_id)
    _require_effect(session, passive_effect_id)
    item = Item(
        **values,
        active_effect_id=active_effect_id,
        passive_effect_id=passive_effect_id,
        description=description,
    )
    _commit_new(session, item, f"Item '{values['name']}'")
    logger.info("Created item %s: %s", item.id, item.name)
    return item


def learn_ability(
    session: Session, *, player_id: int, ability_id: int, is_active: bool = True
) -> PlayerAbility:
    """Link an ability to a player, or update the flag of an existing link."""
    with player_locks.hold(player_id):
        _require(session, Player, player_id, "Player")
        _require(session, Ability, ability_id, "Ability")
        link = session.exec(
            select(PlayerAbility).where(
                PlayerAbility.player_id == player_id,
                PlayerAbility.ability_id == ability_id,
            )
        ).one_or_none()
        if link is None:
            link = PlayerAbility(
                player_id=player_id, ability_id=ability_id, is_active=is_active
            )
        else:
            link.is_active = is_active
        session.add(link)
        session.commit()
        session.refresh(link)
    return link


def grant_item(
    session: Session, *, player_id: int, item_id: int, quantity: int | None = None
) -> PlayerItem:
    """Add an item to a player's inventory.

    Quantities accumulate on the existing (player, item) entry. Without an
    explicit quantity the item's ``base_quantity`` is granted.
    """
    with player_locks.hold(player_id):
        _require(session, Player, player_id, "Player")
        item = _require(session, Item, item_id, "Item")
        amount = item.base_quantity if quantity is None else quantity
        if not isinstance(amount, int) or amount < 1:
            raise InvalidDefinitionError("Quantity must be a positive integer.", "quantity")
        link = session.exec(
            select(PlayerItem).where(
                PlayerItem.player_id == player_id,
                PlayerItem.item_id == item_id,
            )
        ).one_or_none()
        if link is None:
            link = PlayerItem(player_id=player_id, item_id=item_id, quantity=amount)
        else:
            link.quantity += amount
        session.add(link)
        session.commit()
        session.refresh(link)
    logger.info(
        "Player %s now holds item %s x%s", player_id, item_id, link.quantity
    )
    return link
