"""Static shared-secret check for game-master actions."""

from __future__ import annotations

import secrets

from campaign_gm.config import get_master_secret
from campaign_gm.errors import PermissionDeniedError


def check_master_secret(provided: str | None, expected: str | None = None) -> None:
    """Raise unless ``provided`` matches the configured secret.

    When no secret is configured every caller is accepted.
    """
    if expected is None:
        expected = get_master_secret()
    if expected is None:
        return
    if provided is None or not secrets.compare_digest(
        provided.encode("utf-8"), expected.encode("utf-8")
    ):
        raise PermissionDeniedError("Invalid game master secret.")
