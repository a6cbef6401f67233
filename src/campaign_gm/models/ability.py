"""Ability models."""

from __future__ import annotations

from datetime import datetime, timezone
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


ABILITY_TYPES = ("active", "passive")


class Ability(SQLModel, table=True):
    """Ability definition, optionally linked to the effect it grants."""

    __tablename__ = "abilities"
    __table_args__ = (
        UniqueConstraint("name", name="uq_abilities_name"),
        CheckConstraint(
            "ability_type IN ('active', 'passive')", name="ck_abilities_type"
        ),
        CheckConstraint(
            "cooldown_turns >= 0 AND cooldown_days >= 0",
            name="ck_abilities_cooldown",
        ),
        Index("ix_abilities_type", "ability_type"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(sa_column=Column(String(100), nullable=False))
    description: Optional[str] = Field(
        default=None, sa_column=Column(Text, nullable=True)
    )
    ability_type: str = Field(
        default="active",
        sa_column=Column(String(10), nullable=False, default="active"),
    )
    cooldown_turns: int = Field(
        default=0, sa_column=Column(Integer, nullable=False, default=0)
    )
    cooldown_days: int = Field(
        default=0, sa_column=Column(Integer, nullable=False, default=0)
    )
    effect_id: Optional[int] = Field(
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


class PlayerAbility(SQLModel, table=True):
    """Ability learned by a player; ``is_active`` gates its effect."""

    __tablename__ = "player_abilities"
    __table_args__ = (Index("ix_player_abilities_player", "player_id"),)

    player_id: int = Field(
        sa_column=Column(
            Integer,
            ForeignKey("players.id", ondelete="CASCADE"),
            primary_key=True,
        )
    )
    ability_id: int = Field(
        sa_column=Column(
            Integer,
            ForeignKey("abilities.id", ondelete="CASCADE"),
            primary_key=True,
        )
    )
    is_active: bool = Field(
        default=True, sa_column=Column(Boolean, nullable=False, default=True)
    )
    obtained_at: datetime = Field(
        sa_column=Column(DateTime(timezone=True), default=_utc_now, nullable=False)
    )
