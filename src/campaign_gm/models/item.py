"""Item and inventory models."""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlmodel import Field, SQLModel


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class Rarity(str, Enum):
    """Item rarity, lowest first."""

    COMMON = "common"
    UNCOMMON = "uncommon"
    RARE = "rare"
    EPIC = "epic"
    LEGENDARY = "legendary"
    MYTHICAL = "mythical"
    STORY = "story"


_RARITY_VALUES = ", ".join(f"'{rarity.value}'" for rarity in Rarity)


class Item(SQLModel, table=True):
    """Item definition with optional on-use and while-equipped effects."""

    __tablename__ = "items"
    __table_args__ = (
        CheckConstraint(f"rarity IN ({_RARITY_VALUES})", name="ck_items_rarity"),
        Index("ix_items_name", "name"),
        Index("ix_items_rarity", "rarity"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(sa_column=Column(String(100), nullable=False))
    description: Optional[str] = Field(
        default=None, sa_column=Column(Text, nullable=True)
    )
    rarity: str = Field(
        default=Rarity.COMMON.value,
        sa_column=Column(String(20), nullable=False, default=Rarity.COMMON.value),
    )
    base_quantity: int = Field(
        default=1, sa_column=Column(Integer, nullable=False, default=1)
    )
    active_effect_id: Optional[int] = Field(
        default=None,
        sa_column=Column(
            Integer, ForeignKey("effects.id", ondelete="SET NULL"), nullable=True
        ),
    )
    passive_effect_id: Optional[int] = Field(
        default=None,
        sa_column=Column(
            Integer, ForeignKey("effects.id", ondelete="SET NULL"), nullable=True
        ),
    )

    created_at: datetime = Field(
        sa_column=Column(DateTime(timezone=True), default=_utc_now, nullable=False)
    )
    updated_at: datetime = Field(
        sa_column=Column(
            DateTime(timezone=True),
            default=_utc_now,
            onupdate=_utc_now,
            nullable=False,
        )
    )


class PlayerItem(SQLModel, table=True):
    """Inventory entry linking a player to an item."""

    __tablename__ = "player_items"
    __table_args__ = (
        UniqueConstraint("player_id", "item_id", name="uq_player_items_player_item"),
        CheckConstraint("quantity >= 1", name="ck_player_items_quantity"),
        Index("ix_player_items_player", "player_id"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    player_id: int = Field(
        sa_column=Column(
            Integer, ForeignKey("players.id", ondelete="CASCADE"), nullable=False
        )
    )
    item_id: int = Field(
        sa_column=Column(
            Integer, ForeignKey("items.id", ondelete="CASCADE"), nullable=False
        )
    )
    quantity: int = Field(default=1, sa_column=Column(Integer, nullable=False, default=1))
    is_equipped: bool = Field(
        default=False, sa_column=Column(Boolean, nullable=False, default=False)
    )
    obtained_at: datetime = Field(
        sa_column=Column(DateTime(timezone=True), default=_utc_now, nullable=False)
    )
