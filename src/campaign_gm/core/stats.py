"""Effective-stats computation."""

from __future__ import annotations

import logging
from dataclasses import dataclass, fields
from typing import Any, Iterable, Iterator

from campaign_gm.core.attributes import STAT_ATTRIBUTES, StatAttribute
from campaign_gm.core.effects import ActiveEffectInstance, EffectDefinition
from campaign_gm.core.equipment import PlayerItemLink, equipped_passives

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class PlayerAttributes:
    health: int = 50
    max_health: int = 50
    armor: int = 10
    strength: int = 0
    agility: int = 0
    intelligence: int = 0
    physique: int = 0
    wisdom: int = 0
    charisma: int = 0

    @classmethod
    def from_object(cls, source: Any) -> "PlayerAttributes":
        return cls(**{name: int(getattr(source, name)) for name in _field_names(cls)})

    def get(self, attribute: StatAttribute) -> int:
        return getattr(self, attribute.value)

    def as_dict(self) -> dict[str, int]:
        return {attribute.value: self.get(attribute) for attribute in STAT_ATTRIBUTES}


@dataclass(frozen=True, slots=True)
class FinalAttributes(PlayerAttributes):
    """Attributes after every active and equipped contribution is applied."""


def _field_names(cls: type) -> list[str]:
    return [entry.name for entry in fields(cls)]


def _stat_delta(
    definition: EffectDefinition | None,
) -> tuple[StatAttribute, int, str] | None:
    if definition is None or not definition.is_stat_effect:
        return None
    attribute = StatAttribute.parse(definition.attribute)
    if attribute is None:
        return None
    return attribute, int(definition.modifier), definition.name


def _stat_deltas(
    active_effects: Iterable[ActiveEffectInstance],
    equipped: Iterable[EffectDefinition | None],
) -> Iterator[tuple[StatAttribute, int, str]]:
    for instance in active_effects:
        definition = instance.definition
        if definition is None:
            logger.debug(
                "Skipping active effect %s with missing definition %s",
                instance.id,
                instance.effect_id,
            )
            continue
        delta = _stat_delta(definition)
        if delta is not None:
            yield delta
    for definition in equipped:
        delta = _stat_delta(definition)
        if delta is not None:
            yield delta


def resolve(
    base: PlayerAttributes,
    active_effects: Iterable[ActiveEffectInstance],
    equipped_passives: Iterable[EffectDefinition | None],
) -> FinalAttributes:
    """Combine base attributes with active and equipped passive effects.

    Modifiers are summed onto the base value of their attribute. No range
    clamping is applied, so health may end up negative or above max_health.
    Instances without a definition and effects without a stat are ignored.
    """
    totals = {attribute: base.get(attribute) for attribute in STAT_ATTRIBUTES}
    for attribute, modifier, _ in _stat_deltas(active_effects, equipped_passives):
        totals[attribute] += modifier
    return FinalAttributes(
        **{attribute.value: value for attribute, value in totals.items()}
    )


def resolve_links(
    base: PlayerAttributes,
    active_effects: Iterable[ActiveEffectInstance],
    inventory: Iterable[PlayerItemLink],
) -> FinalAttributes:
    """Resolve against a whole inventory, counting only equipped entries."""
    return resolve(base, active_effects, equipped_passives(inventory))


def contributions(
    active_effects: Iterable[ActiveEffectInstance],
    equipped_passives: Iterable[EffectDefinition | None],
) -> dict[StatAttribute, list[tuple[str, int]]]:
    """Return (effect name, modifier) pairs grouped by the attribute they touch."""
    breakdown: dict[StatAttribute, list[tuple[str, int]]] = {
        attribute: [] for attribute in STAT_ATTRIBUTES
    }
    for attribute, modifier, name in _stat_deltas(active_effects, equipped_passives):
        breakdown[attribute].append((name, modifier))
    return breakdown
