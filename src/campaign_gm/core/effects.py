"""Effect definitions and the per-player instances built from them."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from campaign_gm.core.attributes import StatAttribute


class SourceType(str, Enum):
    ABILITY = "ability"
    ITEM = "item"
    ADMIN = "admin"


@dataclass(frozen=True, slots=True)
class EffectDefinition:
    """Immutable stat modifier template with its duration policy."""

    id: int | None
    name: str
    attribute: StatAttribute | None = None
    modifier: int = 0
    is_permanent: bool = False
    duration_turns: int | None = None
    duration_days: int | None = None
    description: str | None = None

    @property
    def is_stat_effect(self) -> bool:
        return self.attribute is not None and self.modifier != 0

    def initial_counters(self) -> tuple[int | None, int | None]:
        """Return (remaining_turns, remaining_days) for a fresh instance."""
        if self.is_permanent:
            return None, None
        return self.duration_turns, self.duration_days


@dataclass(frozen=True, slots=True)
class ActiveEffectInstance:
    """An effect definition currently applied to one player.

    ``definition`` is None when the referenced effect row no longer exists;
    such an instance contributes nothing to resolution. An instance with
    both counters absent never expires.
    """

    id: int | None
    player_id: int
    effect_id: int
    source_type: SourceType = SourceType.ADMIN
    source_id: int | None = None
    remaining_turns: int | None = None
    remaining_days: int | None = None
    definition: EffectDefinition | None = None

    @property
    def is_indefinite(self) -> bool:
        return self.remaining_turns is None and self.remaining_days is None

    def source_label(self) -> str:
        if self.source_id is None:
            return self.source_type.value
        return f"{self.source_type.value}:{self.source_id}"


def new_instance(
    definition: EffectDefinition,
    *,
    player_id: int,
    source_type: SourceType = SourceType.ADMIN,
    source_id: int | None = None,
) -> ActiveEffectInstance:
    """Bind a definition to a player with counters taken from its duration."""
    if definition.id is None:
        raise ValueError("Effect definition must be stored before it is applied.")
    if source_type is SourceType.ADMIN:
        source_id = None
    remaining_turns, remaining_days = definition.initial_counters()
    return ActiveEffectInstance(
        id=None,
        player_id=player_id,
        effect_id=definition.id,
        source_type=source_type,
        source_id=source_id,
        remaining_turns=remaining_turns,
        remaining_days=remaining_days,
        definition=definition,
    )
