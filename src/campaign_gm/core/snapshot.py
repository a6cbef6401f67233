"""Point-in-time view of one player used for stat resolution."""

from __future__ import annotations

from dataclasses import dataclass, field

from campaign_gm.core.effects import ActiveEffectInstance, EffectDefinition
from campaign_gm.core.equipment import PlayerItemLink, equipped_passives
from campaign_gm.core.stats import (
    FinalAttributes,
    PlayerAttributes,
    contributions,
    resolve,
)


@dataclass(frozen=True, slots=True)
class PlayerSnapshot:
    """Base attributes, active effects and inventory read at one instant."""

    player_id: int
    name: str
    base: PlayerAttributes
    active_effects: tuple[ActiveEffectInstance, ...] = field(default_factory=tuple)
    inventory: tuple[PlayerItemLink, ...] = field(default_factory=tuple)

    @property
    def equipment(self) -> list[PlayerItemLink]:
        return [link for link in self.inventory if link.is_equipped]

    def passive_effects(self) -> list[EffectDefinition]:
        return equipped_passives(self.inventory)

    def resolve(self) -> FinalAttributes:
        return resolve(self.base, self.active_effects, self.passive_effects())

    def breakdown(self):
        return contributions(self.active_effects, self.passive_effects())
