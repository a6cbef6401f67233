"""Effect resolution core: pure functions over player snapshots."""

from campaign_gm.core.attributes import STAT_ATTRIBUTES, StatAttribute
from campaign_gm.core.effects import (
    ActiveEffectInstance,
    EffectDefinition,
    SourceType,
    new_instance,
)
from campaign_gm.core.equipment import PlayerItemLink, equipped_passives, set_equipped
from campaign_gm.core.events import (
    DomainEvent,
    EffectApplied,
    EffectExpired,
    EffectRemoved,
    EquipmentChanged,
    Outbox,
    PlayerCreated,
    PlayerDeleted,
    PlayerUpdated,
    emit,
)
from campaign_gm.core.snapshot import PlayerSnapshot
from campaign_gm.core.stats import (
    FinalAttributes,
    PlayerAttributes,
    contributions,
    resolve,
    resolve_links,
)
from campaign_gm.core.ticker import TickKind, tick

__all__ = [
    "ActiveEffectInstance",
    "DomainEvent",
    "EffectApplied",
    "EffectDefinition",
    "EffectExpired",
    "EffectRemoved",
    "EquipmentChanged",
    "FinalAttributes",
    "Outbox",
    "PlayerCreated",
    "PlayerDeleted",
    "PlayerUpdated",
    "PlayerAttributes",
    "PlayerItemLink",
    "PlayerSnapshot",
    "STAT_ATTRIBUTES",
    "SourceType",
    "StatAttribute",
    "TickKind",
    "contributions",
    "emit",
    "equipped_passives",
    "new_instance",
    "resolve",
    "resolve_links",
    "set_equipped",
    "tick",
]
