"""Effect definition model."""

from __future__ import annotations

from typing import Optional

from sqlalchemy import Boolean, CheckConstraint, Column, Integer, String, Text, UniqueConstraint
from sqlmodel import Field, SQLModel

from campaign_gm.core.attributes import STAT_NAMES

_ATTRIBUTE_VALUES = ", ".join(f"'{name}'" for name in STAT_NAMES)


class Effect(SQLModel, table=True):
    """Stat modifier template. Rows are never updated after creation."""

    __tablename__ = "effects"
    __table_args__ = (
        UniqueConstraint("name", name="uq_effects_name"),
        CheckConstraint(
            f"attribute IS NULL OR attribute IN ({_ATTRIBUTE_VALUES})",
            name="ck_effects_attribute",
        ),
        CheckConstraint(
            "modifier BETWEEN -100 AND 100", name="ck_effects_modifier_range"
        ),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(sa_column=Column(String(100), nullable=False))
    description: Optional[str] = Field(
        default=None, sa_column=Column(Text, nullable=True)
    )
    attribute: Optional[str] = Field(
        default=None, sa_column=Column(String(20), nullable=True)
    )
    modifier: int = Field(default=0, sa_column=Column(Integer, nullable=False, default=0))
    duration_turns: Optional[int] = Field(
        default=None, sa_column=Column(Integer, nullable=True)
    )
    duration_days: Optional[int] = Field(
        default=None, sa_column=Column(Integer, nullable=True)
    )
    is_permanent: bool = Field(
        default=False, sa_column=Column(Boolean, nullable=False, default=False)
    )
