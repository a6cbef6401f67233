"""Active effect storage model."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, Index, Integer, String
from sqlmodel import Field, SQLModel


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


_version_column = Column("version", Integer, nullable=False, default=1)


class PlayerActiveEffect(SQLModel, table=True):
    """An effect currently applied to a player, with its countdowns."""

    __tablename__ = "player_active_effects"
    __table_args__ = (
        CheckConstraint(
            "source_type IN ('ability', 'item', 'admin')",
            name="ck_player_active_effects_source_type",
        ),
        Index("ix_player_active_effects_player", "player_id"),
        Index("ix_player_active_effects_player_effect", "player_id", "effect_id"),
        Index("ix_player_active_effects_source", "source_type", "source_id"),
    )
    __mapper_args__ = {"version_id_col": _version_column}

    id: Optional[int] = Field(default=None, primary_key=True)
    player_id: int = Field(
        sa_column=Column(
            Integer, ForeignKey("players.id", ondelete="CASCADE"), nullable=False
        )
    )
    effect_id: int = Field(
        sa_column=Column(
            Integer, ForeignKey("effects.id", ondelete="CASCADE"), nullable=False
        )
    )
    source_type: str = Field(
        default="admin", sa_column=Column(String(10), nullable=False, default="admin")
    )
    source_id: Optional[int] = Field(
        default=None, sa_column=Column(Integer, nullable=True)
    )
    remaining_turns: Optional[int] = Field(
        default=None, sa_column=Column(Integer, nullable=True)
    )
    remaining_days: Optional[int] = Field(
        default=None, sa_column=Column(Integer, nullable=True)
    )
    version: int = Field(default=1, sa_column=_version_column)
    applied_at: datetime = Field(
        sa_column=Column(DateTime(timezone=True), default=_utc_now, nullable=False)
    )
