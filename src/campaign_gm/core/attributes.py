"""Closed set of numeric player attributes."""

from __future__ import annotations

from enum import Enum


class StatAttribute(str, Enum):
    """Attribute an effect can modify.

    Effects without a stat (narrative or cosmetic effects) carry ``None``
    instead of a member of this enum.
    """

    HEALTH = "health"
    MAX_HEALTH = "max_health"
    ARMOR = "armor"
    STRENGTH = "strength"
    AGILITY = "agility"
    INTELLIGENCE = "intelligence"
    PHYSIQUE = "physique"
    WISDOM = "wisdom"
    CHARISMA = "charisma"

    @classmethod
    def parse(cls, value: "str | StatAttribute | None") -> "StatAttribute | None":
        """Return the matching attribute, or None for empty/unknown keys."""
        if value is None or isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return None


STAT_ATTRIBUTES: tuple[StatAttribute, ...] = tuple(StatAttribute)
STAT_NAMES: tuple[str, ...] = tuple(attribute.value for attribute in StatAttribute)
