"""Configuration helpers for campaign_gm."""

from __future__ import annotations

import os
from pathlib import Path

DEFAULT_DB_PATH = Path("data/sqlite/campaign.db")
DB_PATH_ENV_VAR = "CAMPAIGN_GM_DB_PATH"
MASTER_SECRET_ENV_VAR = "CAMPAIGN_GM_MASTER_SECRET"
NOTIFY_URL_ENV_VAR = "CAMPAIGN_GM_NOTIFY_URL"
LOG_LEVEL_ENV_VAR = "CAMPAIGN_GM_LOG_LEVEL"
DEFAULT_LOG_LEVEL = "INFO"


def get_db_path() -> str:
    """Return the absolute database path, honoring environment overrides."""
    env_value = os.getenv(DB_PATH_ENV_VAR)
    if env_value:
        return str(Path(env_value).expanduser().resolve())
    return str(DEFAULT_DB_PATH.resolve())


def get_master_secret() -> str | None:
    """Return the shared game-master secret, or None when access is open."""
    env_value = os.getenv(MASTER_SECRET_ENV_VAR)
    return env_value or None


def get_notify_url() -> str | None:
    """Return the webhook URL that receives domain events, if configured."""
    env_value = os.getenv(NOTIFY_URL_ENV_VAR)
    if env_value:
        return env_value.rstrip("/")
    return None


def get_log_level() -> str:
    env_value = os.getenv(LOG_LEVEL_ENV_VAR)
    if env_value:
        return env_value.upper()
    return DEFAULT_LOG_LEVEL
