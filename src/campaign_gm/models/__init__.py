"""Data models for campaign_gm."""

from campaign_gm.models.ability import Ability, PlayerAbility
from campaign_gm.models.active_effect import PlayerActiveEffect
from campaign_gm.models.effect import Effect
from campaign_gm.models.item import Item, PlayerItem, Rarity
from campaign_gm.models.player import Player

__all__ = [
    "Ability",
    "Effect",
    "Item",
    "Player",
    "PlayerAbility",
    "PlayerActiveEffect",
    "PlayerItem",
    "Rarity",
]
