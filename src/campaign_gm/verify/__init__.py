"""Verification utilities."""

from campaign_gm.verify.active_effects import verify_active_effects
from campaign_gm.verify.checks import check_counts, run_all_checks
from campaign_gm.verify.effects import verify_effects
from campaign_gm.verify.players import verify_inventory, verify_players

__all__ = [
    "check_counts",
    "run_all_checks",
    "verify_active_effects",
    "verify_effects",
    "verify_inventory",
    "verify_players",
]
