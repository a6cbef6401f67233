"""Player storage model."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlmodel import Field, SQLModel


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


GENDERS = ("male", "female")

_version_column = Column("version", Integer, nullable=False, default=1)


class Player(SQLModel, table=True):
    """Represents a player character with base attributes."""

    __tablename__ = "players"
    __table_args__ = (
        UniqueConstraint("name", name="uq_players_name"),
        CheckConstraint("health <= max_health", name="ck_players_health_limit"),
        CheckConstraint("gender IN ('male', 'female')", name="ck_players_gender"),
    )
    __mapper_args__ = {"version_id_col": _version_column}

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(sa_column=Column(String(50), nullable=False))
    gender: str = Field(
        default="male", sa_column=Column(String(10), nullable=False, default="male")
    )

    health: int = Field(default=50, sa_column=Column(Integer, nullable=False, default=50))
    max_health: int = Field(
        default=50, sa_column=Column(Integer, nullable=False, default=50)
    )
    armor: int = Field(default=10, sa_column=Column(Integer, nullable=False, default=10))
    strength: int = Field(default=0, sa_column=Column(Integer, nullable=False, default=0))
    agility: int = Field(default=0, sa_column=Column(Integer, nullable=False, default=0))
    intelligence: int = Field(
        default=0, sa_column=Column(Integer, nullable=False, default=0)
    )
    physique: int = Field(default=0, sa_column=Column(Integer, nullable=False, default=0))
    wisdom: int = Field(default=0, sa_column=Column(Integer, nullable=False, default=0))
    charisma: int = Field(default=0, sa_column=Column(Integer, nullable=False, default=0))

    history: Optional[str] = Field(default=None, sa_column=Column(Text, nullable=True))
    in_battle: bool = Field(
        default=False, sa_column=Column(Boolean, nullable=False, default=False)
    )
    is_online: bool = Field(
        default=False, sa_column=Column(Boolean, nullable=False, default=False)
    )
    is_card_shown: bool = Field(
        default=True, sa_column=Column(Boolean, nullable=False, default=True)
    )
    version: int = Field(default=1, sa_column=_version_column)

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
