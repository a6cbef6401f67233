"""Query helpers for derived read APIs."""

from campaign_gm.queries.details import (
    get_player_abilities,
    get_player_details,
    get_player_items,
    get_players,
)

__all__ = [
    "get_player_abilities",
    "get_player_details",
    "get_player_items",
    "get_players",
]
