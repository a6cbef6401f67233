"""Custom exceptions for campaign_gm."""

from __future__ import annotations


class CampaignError(Exception):
    """Base error for administrative actions."""


class InvalidDefinitionError(CampaignError):
    """Raised when submitted player/effect/ability/item data breaks a rule."""

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field


class NotFoundError(CampaignError):
    """Raised when a referenced record does not exist."""

    def __init__(self, entity: str, entity_id: int | str) -> None:
        super().__init__(f"{entity} not found: {entity_id}")
        self.entity = entity
        self.entity_id = entity_id


class ConflictError(CampaignError):
    """Raised on unique-name collisions and stale concurrent updates."""


class PermissionDeniedError(CampaignError):
    """Raised when the shared secret or an ownership/activation gate fails."""
