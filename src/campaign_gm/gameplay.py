"""Effect application, equipment changes and time advancement."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from sqlalchemy.orm.exc import StaleDataError
from sqlmodel import Session, select

from campaign_gm.core.effects import ActiveEffectInstance, SourceType, new_instance
from campaign_gm.core.equipment import PlayerItemLink
from campaign_gm.core.events import (
    EffectApplied,
    EffectExpired,
    EffectRemoved,
    EquipmentChanged,
    Outbox,
    emit,
)
from campaign_gm.core.stats import FinalAttributes
from campaign_gm.core.ticker import TickKind, tick
from campaign_gm.db.repository import Repository, SqlRepository, effect_to_definition
from campaign_gm.errors import (
    ConflictError,
    InvalidDefinitionError,
    NotFoundError,
    PermissionDeniedError,
)
from campaign_gm.locks import player_locks
from campaign_gm.models.ability import Ability, PlayerAbility
from campaign_gm.models.effect import Effect
from campaign_gm.models.item import Item

logger = logging.getLogger(__name__)

TICK_ATTEMPTS = 3


@dataclass
class TickReport:
    kind: TickKind
    players: int = 0
    decremented: int = 0
    expired: list[ActiveEffectInstance] = field(default_factory=list)


def _check_source(
    repo: SqlRepository,
    player_id: int,
    source_type: SourceType,
    source_id: int | None,
) -> None:
    session = repo.session
    if source_type is SourceType.ADMIN:
        return
    if source_id is None:
        raise InvalidDefinitionError(
            f"source_id is required for {source_type.value} effects.", "source_id"
        )
    if source_type is SourceType.ABILITY:
        link = session.exec(
            select(PlayerAbility).where(
                PlayerAbility.player_id == player_id,
                PlayerAbility.ability_id == source_id,
            )
        ).one_or_none()
        if link is None:
            raise PermissionDeniedError(
                f"Player {player_id} has not learned ability {source_id}."
            )
        if not link.is_active:
            raise PermissionDeniedError(
                f"Ability {source_id} is inactive for player {player_id}."
            )
    elif repo.get_inventory_row(player_id, source_id) is None:
        raise PermissionDeniedError(
            f"Player {player_id} does not own item {source_id}."
        )


def _apply(
    repo: SqlRepository,
    *,
    player_id: int,
    effect_id: int,
    source_type: SourceType,
    source_id: int | None,
) -> ActiveEffectInstance:
    effect = repo.session.exec(select(Effect).where(Effect.id == effect_id)).one_or_none()
    if effect is None:
        raise NotFoundError("Effect", effect_id)
    instance = new_instance(
        effect_to_definition(effect),
        player_id=player_id,
        source_type=source_type,
        source_id=source_id,
    )
    return repo.upsert_active_effect(instance)


def apply_effect(
    session: Session,
    *,
    player_id: int,
    effect_id: int,
    source_type: SourceType | str = SourceType.ADMIN,
    source_id: int | None = None,
    outbox: Outbox | None = None,
) -> ActiveEffectInstance:
    """Apply an effect to a player as a new active instance.

    Ability-sourced effects require the player's ability link to be active;
    item-sourced effects require the player to own the item.
    """
    source_type = SourceType(source_type)
    with player_locks.hold(player_id):
        repo = SqlRepository(session)
        repo.get_player(player_id)
        _check_source(repo, player_id, source_type, source_id)
        instance = _apply(
            repo,
            player_id=player_id,
            effect_id=effect_id,
            source_type=source_type,
            source_id=source_id,
        )
        session.commit()
    logger.info(
        "Applied effect %s to player %s from %s",
        effect_id,
        player_id,
        instance.source_label(),
    )
    emit(
        outbox,
        EffectApplied(
            player_id=player_id,
            instance_id=instance.id,
            effect_id=instance.effect_id,
            source_type=instance.source_type.value,
            source_id=instance.source_id,
        ),
    )
    return instance


def trigger_ability(
    session: Session,
    *,
    player_id: int,
    ability_id: int,
    outbox: Outbox | None = None,
) -> ActiveEffectInstance:
    """Apply the effect linked to an ability the player has active."""
    ability = session.exec(select(Ability).where(Ability.id == ability_id)).one_or_none()
    if ability is None:
        raise NotFoundError("Ability", ability_id)
    if ability.effect_id is None:
        raise InvalidDefinitionError(f"Ability {ability_id} has no effect.", "effect_id")
    return apply_effect(
        session,
        player_id=player_id,
        effect_id=ability.effect_id,
        source_type=SourceType.ABILITY,
        source_id=ability_id,
        outbox=outbox,
    )


def use_item(
    session: Session,
    *,
    player_id: int,
    item_id: int,
    outbox: Outbox | None = None,
) -> tuple[ActiveEffectInstance | None, int]:
    """Consume one unit of an item, applying its on-use effect if it has one.

    Returns the created instance (or None) and the quantity left; the
    inventory entry is removed when the last unit is used.
    """
    with player_locks.hold(player_id):
        repo = SqlRepository(session)
        repo.get_player(player_id)
        row = repo.get_inventory_row(player_id, item_id)
        if row is None:
            raise PermissionDeniedError(
                f"Player {player_id} does not own item {item_id}."
            )
        item = session.exec(select(Item).where(Item.id == item_id)).one()
        instance = None
        if item.active_effect_id is not None:
            instance = _apply(
                repo,
                player_id=player_id,
                effect_id=item.active_effect_id,
                source_type=SourceType.ITEM,
                source_id=item_id,
            )
        remaining = row.quantity - 1
        if remaining > 0:
            row.quantity = remaining
            session.add(row)
        else:
            session.delete(row)
        session.commit()
    logger.info("Player %s used item %s (%s left)", player_id, item_id, remaining)
    if instance is not None:
        emit(
            outbox,
            EffectApplied(
                player_id=player_id,
                instance_id=instance.id,
                effect_id=instance.effect_id,
                source_type=instance.source_type.value,
                source_id=instance.source_id,
            ),
        )
    return instance, remaining


def equip_item(
    session: Session,
    *,
    player_id: int,
    item_id: int,
    equipped: bool = True,
    outbox: Outbox | None = None,
) -> PlayerItemLink:
    """Toggle the equipped flag of an inventory entry.

    The passive effect is not stored as an instance; it is read again by the
    resolver on the next stats computation.
    """
    with player_locks.hold(player_id):
        repo = SqlRepository(session)
        row = repo.get_inventory_row(player_id, item_id)
        was_equipped = bool(row.is_equipped) if row is not None else None
        link = repo.set_item_equipped(player_id, item_id, equipped)
        session.commit()
    if was_equipped != link.is_equipped:
        logger.info(
            "Player %s %s item %s",
            player_id,
            "equipped" if link.is_equipped else "unequipped",
            item_id,
        )
        emit(
            outbox,
            EquipmentChanged(
                player_id=player_id, item_id=item_id, is_equipped=link.is_equipped
            ),
        )
    return link


def _tick_player(
    repo: Repository, kind: TickKind, player_id: int
) -> tuple[int, list[ActiveEffectInstance]]:
    instances = repo.list_active_effects(player_id)
    before = {instance.id: instance for instance in instances}
    retained, expired = tick(kind, instances)
    decremented = 0
    for instance in retained:
        if instance != before[instance.id]:
            repo.upsert_active_effect(instance)
            decremented += 1
    # Rows already gone were expired by a concurrent tick.
    removed = [instance for instance in expired if repo.remove_active_effect(instance.id)]
    return decremented, removed


def _tick_with_retry(
    session: Session, repo: Repository, kind: TickKind, player_id: int
) -> tuple[int, list[ActiveEffectInstance]]:
    for attempt in range(1, TICK_ATTEMPTS + 1):
        try:
            result = _tick_player(repo, kind, player_id)
            session.commit()
            return result
        except StaleDataError:
            session.rollback()
            logger.warning(
                "Effects of player %s changed during %s tick (attempt %s/%s)",
                player_id,
                kind.value,
                attempt,
                TICK_ATTEMPTS,
            )
    raise ConflictError(
        f"Effects of player {player_id} kept changing during the {kind.value} tick."
    )


def advance_time(
    session: Session,
    kind: TickKind | str,
    *,
    player_id: int | None = None,
    outbox: Outbox | None = None,
) -> TickReport:
    """Advance one turn or day for one player, or for every affected player.

    Counter writes only match the row version that was read. When another
    process ticks the same player in between, the player's tick is re-read
    and applied again on top of the other result, so no tick is lost.
    """
    kind = TickKind(kind)
    repo: Repository = SqlRepository(session)
    if player_id is None:
        player_ids = repo.list_player_ids_with_effects()
    else:
        repo.get_player(player_id)
        player_ids = [player_id]

    report = TickReport(kind=kind)
    for current_id in player_ids:
        with player_locks.hold(current_id):
            decremented, expired = _tick_with_retry(session, repo, kind, current_id)
        report.players += 1
        report.decremented += decremented
        report.expired.extend(expired)
        for instance in expired:
            logger.info(
                "Effect %s expired on player %s after %s tick",
                instance.effect_id,
                current_id,
                kind.value,
            )
            emit(
                outbox,
                EffectExpired(
                    player_id=current_id,
                    instance_id=instance.id,
                    effect_id=instance.effect_id,
                    kind=kind.value,
                ),
            )
    return report


def remove_effects_from_source(
    session: Session,
    source_type: SourceType | str,
    source_id: int,
    *,
    outbox: Outbox | None = None,
) -> list[ActiveEffectInstance]:
    """Remove every active instance granted by one ability or item."""
    source_type = SourceType(source_type)
    if source_type is SourceType.ADMIN:
        raise InvalidDefinitionError("Admin effects have no source to remove.", "source_type")
    repo = SqlRepository(session)
    removed: list[ActiveEffectInstance] = []
    for instance in repo.find_by_source(source_type, source_id):
        with player_locks.hold(instance.player_id):
            if repo.remove_active_effect(instance.id):
                removed.append(instance)
            session.commit()
    for instance in removed:
        emit(
            outbox,
            EffectRemoved(
                player_id=instance.player_id,
                instance_id=instance.id,
                effect_id=instance.effect_id,
                source_type=source_type.value,
                source_id=source_id,
            ),
        )
    if removed:
        logger.info(
            "Removed %s effect(s) granted by %s %s",
            len(removed),
            source_type.value,
            source_id,
        )
    return removed


def delete_ability(
    session: Session, ability_id: int, *, outbox: Outbox | None = None
) -> list[ActiveEffectInstance]:
    """Delete an ability together with the effects it granted."""
    ability = session.exec(select(Ability).where(Ability.id == ability_id)).one_or_none()
    if ability is None:
        raise NotFoundError("Ability", ability_id)
    removed = remove_effects_from_source(
        session, SourceType.ABILITY, ability_id, outbox=outbox
    )
    session.delete(ability)
    session.commit()
    logger.info("Deleted ability %s", ability_id)
    return removed


def delete_item(
    session: Session, item_id: int, *, outbox: Outbox | None = None
) -> list[ActiveEffectInstance]:
    """Delete an item together with the effects it granted."""
    item = session.exec(select(Item).where(Item.id == item_id)).one_or_none()
    if item is None:
        raise NotFoundError("Item", item_id)
    removed = remove_effects_from_source(session, SourceType.ITEM, item_id, outbox=outbox)
    session.delete(item)
    session.commit()
    logger.info("Deleted item %s", item_id)
    return removed


def player_stats(session: Session, player_id: int) -> FinalAttributes:
    """Compute a player's effective stats from a fresh snapshot."""
    return SqlRepository(session).get_player_snapshot(player_id).resolve()
