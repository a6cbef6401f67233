"""Repository bridging SQLModel rows and the resolution core."""

from __future__ import annotations

import logging
from typing import Protocol

from sqlalchemy.orm import aliased
from sqlalchemy.orm.exc import StaleDataError
from sqlmodel import Session, select

from campaign_gm.core.attributes import StatAttribute
from campaign_gm.core.effects import ActiveEffectInstance, EffectDefinition, SourceType
from campaign_gm.core.equipment import PlayerItemLink, set_equipped
from campaign_gm.core.snapshot import PlayerSnapshot
from campaign_gm.core.stats import PlayerAttributes
from campaign_gm.errors import NotFoundError
from campaign_gm.models.active_effect import PlayerActiveEffect
from campaign_gm.models.effect import Effect
from campaign_gm.models.item import Item, PlayerItem
from campaign_gm.models.player import Player

logger = logging.getLogger(__name__)


class Repository(Protocol):
    def get_player(self, player_id: int) -> Player: ...

    def list_active_effects(
        self, player_id: int | None = None
    ) -> list[ActiveEffectInstance]: ...

    def list_player_ids_with_effects(self) -> list[int]: ...

    def get_player_snapshot(self, player_id: int) -> PlayerSnapshot: ...

    def upsert_active_effect(
        self, instance: ActiveEffectInstance
    ) -> ActiveEffectInstance: ...

    def remove_active_effect(self, instance_id: int) -> bool: ...

    def set_item_equipped(
        self, player_id: int, item_id: int, equipped: bool
    ) -> PlayerItemLink: ...


def effect_to_definition(effect: Effect | None) -> EffectDefinition | None:
    if effect is None:
        return None
    return EffectDefinition(
        id=effect.id,
        name=effect.name,
        attribute=StatAttribute.parse(effect.attribute),
        modifier=effect.modifier or 0,
        is_permanent=bool(effect.is_permanent),
        duration_turns=effect.duration_turns,
        duration_days=effect.duration_days,
        description=effect.description,
    )


def row_to_instance(
    row: PlayerActiveEffect, effect: Effect | None
) -> ActiveEffectInstance:
    return ActiveEffectInstance(
        id=row.id,
        player_id=row.player_id,
        effect_id=row.effect_id,
        source_type=SourceType(row.source_type),
        source_id=row.source_id,
        remaining_turns=row.remaining_turns,
        remaining_days=row.remaining_days,
        definition=effect_to_definition(effect),
    )


def row_to_link(link: PlayerItem, item: Item, passive: Effect | None) -> PlayerItemLink:
    return PlayerItemLink(
        id=link.id,
        player_id=link.player_id,
        item_id=link.item_id,
        quantity=link.quantity,
        is_equipped=bool(link.is_equipped),
        item_name=item.name,
        passive_effect=effect_to_definition(passive),
    )


class SqlRepository:
    """Repository over a SQLModel session.

    Writes are flushed, never committed; the calling service owns the
    transaction.
    """

    def __init__(self, session: Session) -> None:
        self.session = session

    def get_player(self, player_id: int) -> Player:
        player = self.session.exec(
            select(Player).where(Player.id == player_id)
        ).one_or_none()
        if player is None:
            raise NotFoundError("Player", player_id)
        return player

    def list_active_effects(
        self, player_id: int | None = None
    ) -> list[ActiveEffectInstance]:
        statement = select(PlayerActiveEffect, Effect).outerjoin(
            Effect, Effect.id == PlayerActiveEffect.effect_id
        )
        if player_id is not None:
            statement = statement.where(PlayerActiveEffect.player_id == player_id)
        rows = self.session.exec(statement.order_by(PlayerActiveEffect.id)).all()
        return [row_to_instance(row, effect) for row, effect in rows]

    def list_inventory(self, player_id: int) -> list[PlayerItemLink]:
        passive = aliased(Effect)
        rows = self.session.exec(
            select(PlayerItem, Item, passive)
            .join(Item, Item.id == PlayerItem.item_id)
            .outerjoin(passive, passive.id == Item.passive_effect_id)
            .where(PlayerItem.player_id == player_id)
            .order_by(PlayerItem.id)
        ).all()
        return [row_to_link(link, item, effect) for link, item, effect in rows]

    def list_player_ids_with_effects(self) -> list[int]:
        rows = self.session.exec(
            select(PlayerActiveEffect.player_id)
            .distinct()
            .order_by(PlayerActiveEffect.player_id)
        ).all()
        return list(rows)

    def get_player_snapshot(self, player_id: int) -> PlayerSnapshot:
        """Read base stats, active effects and inventory in one session."""
        player = self.get_player(player_id)
        return PlayerSnapshot(
            player_id=player.id,
            name=player.name,
            base=PlayerAttributes.from_object(player),
            active_effects=tuple(self.list_active_effects(player_id)),
            inventory=tuple(self.list_inventory(player_id)),
        )

    def upsert_active_effect(
        self, instance: ActiveEffectInstance
    ) -> ActiveEffectInstance:
        if instance.id is not None:
            row = self.session.exec(
                select(PlayerActiveEffect).where(PlayerActiveEffect.id == instance.id)
            ).one_or_none()
            if row is None:
                raise StaleDataError(f"Active effect {instance.id} no longer exists.")
        else:
            row = PlayerActiveEffect(
                player_id=instance.player_id,
                effect_id=instance.effect_id,
                source_type=instance.source_type.value,
                source_id=instance.source_id,
            )
        row.remaining_turns = instance.remaining_turns
        row.remaining_days = instance.remaining_days
        self.session.add(row)
        self.session.flush()
        effect = self.session.exec(
            select(Effect).where(Effect.id == row.effect_id)
        ).one_or_none()
        return row_to_instance(row, effect)

    def remove_active_effect(self, instance_id: int) -> bool:
        row = self.session.exec(
            select(PlayerActiveEffect).where(PlayerActiveEffect.id == instance_id)
        ).one_or_none()
        if row is None:
            logger.debug("Active effect %s already removed", instance_id)
            return False
        self.session.delete(row)
        self.session.flush()
        return True

    def find_by_source(
        self, source_type: SourceType, source_id: int
    ) -> list[ActiveEffectInstance]:
        rows = self.session.exec(
            select(PlayerActiveEffect, Effect)
            .outerjoin(Effect, Effect.id == PlayerActiveEffect.effect_id)
            .where(
                PlayerActiveEffect.source_type == source_type.value,
                PlayerActiveEffect.source_id == source_id,
            )
            .order_by(PlayerActiveEffect.id)
        ).all()
        return [row_to_instance(row, effect) for row, effect in rows]

    def get_inventory_row(self, player_id: int, item_id: int) -> PlayerItem | None:
        return self.session.exec(
            select(PlayerItem).where(
                PlayerItem.player_id == player_id,
                PlayerItem.item_id == item_id,
            )
        ).one_or_none()

    def set_item_equipped(
        self, player_id: int, item_id: int, equipped: bool
    ) -> PlayerItemLink:
        row = self.get_inventory_row(player_id, item_id)
        if row is None:
            raise NotFoundError("Inventory item", f"player={player_id} item={item_id}")
        item = self.session.exec(select(Item).where(Item.id == item_id)).one()
        passive = None
        if item.passive_effect_id is not None:
            passive = self.session.exec(
                select(Effect).where(Effect.id == item.passive_effect_id)
            ).one_or_none()
        link = set_equipped(row_to_link(row, item, passive), equipped)
        if row.is_equipped != link.is_equipped:
            row.is_equipped = link.is_equipped
            self.session.add(row)
            self.session.flush()
        return link
