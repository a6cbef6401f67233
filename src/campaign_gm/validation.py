"""Input rules for administrative creation and update actions."""

from __future__ import annotations

from typing import Any, Mapping

from campaign_gm.core.attributes import StatAttribute
from campaign_gm.errors import InvalidDefinitionError
from campaign_gm.models.ability import ABILITY_TYPES
from campaign_gm.models.item import Rarity
from campaign_gm.models.player import GENDERS

MODIFIER_MIN = -100
MODIFIER_MAX = 100
EFFECT_NAME_MAX = 100
ITEM_NAME_MAX = 100
ABILITY_NAME_MAX = 100
PLAYER_NAME_MAX = 50

PLAYER_STAT_FIELDS = (
    "health",
    "max_health",
    "armor",
    "strength",
    "agility",
    "intelligence",
    "physique",
    "wisdom",
    "charisma",
)
PLAYER_UPDATABLE_FIELDS = PLAYER_STAT_FIELDS + (
    "name",
    "gender",
    "history",
    "in_battle",
    "is_online",
    "is_card_shown",
)


def _require_name(value: Any, limit: int, label: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise InvalidDefinitionError(f"{label} name is required.", "name")
    name = value.strip()
    if len(name) > limit:
        raise InvalidDefinitionError(
            f"{label} name must be at most {limit} characters.", "name"
        )
    return name


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def effect_rule_violations(
    *,
    modifier: Any,
    is_permanent: bool,
    duration_turns: Any,
    duration_days: Any,
    attribute: Any = None,
) -> list[tuple[str, str]]:
    """Return (field, message) pairs for every broken effect rule."""
    problems: list[tuple[str, str]] = []
    if attribute is not None and StatAttribute.parse(attribute) is None:
        problems.append(("attribute", f"Unknown attribute: {attribute}"))
    if not _is_int(modifier):
        problems.append(("modifier", "Modifier must be an integer."))
    elif not MODIFIER_MIN <= modifier <= MODIFIER_MAX:
        problems.append(
            (
                "modifier",
                f"Modifier must be between {MODIFIER_MIN} and {MODIFIER_MAX}.",
            )
        )
    for field, value in (
        ("duration_turns", duration_turns),
        ("duration_days", duration_days),
    ):
        if value is not None and (not _is_int(value) or value <= 0):
            problems.append((field, f"{field} must be a positive integer."))
    if is_permanent:
        if duration_turns is not None or duration_days is not None:
            problems.append(
                ("is_permanent", "Permanent effects cannot have a duration.")
            )
    elif duration_turns is None and duration_days is None:
        problems.append(
            ("duration", "Temporary effects need duration_turns or duration_days.")
        )
    return problems


def validate_effect(
    *,
    name: Any,
    attribute: Any,
    modifier: Any,
    is_permanent: bool,
    duration_turns: Any,
    duration_days: Any,
) -> dict[str, Any]:
    """Validate effect input and return normalized column values."""
    clean_name = _require_name(name, EFFECT_NAME_MAX, "Effect")
    problems = effect_rule_violations(
        modifier=modifier,
        is_permanent=bool(is_permanent),
        duration_turns=duration_turns,
        duration_days=duration_days,
        attribute=attribute,
    )
    if problems:
        field, message = problems[0]
        raise InvalidDefinitionError(message, field)
    parsed = StatAttribute.parse(attribute)
    return {
        "name": clean_name,
        "attribute": parsed.value if parsed is not None else None,
        "modifier": modifier,
        "is_permanent": bool(is_permanent),
        "duration_turns": duration_turns,
        "duration_days": duration_days,
    }


def validate_ability(
    *, name: Any, ability_type: Any, cooldown_turns: Any, cooldown_days: Any
) -> dict[str, Any]:
    clean_name = _require_name(name, ABILITY_NAME_MAX, "Ability")
    if ability_type not in ABILITY_TYPES:
        raise InvalidDefinitionError(
            f"Ability type must be one of: {', '.join(ABILITY_TYPES)}.",
            "ability_type",
        )
    for field, value in (
        ("cooldown_turns", cooldown_turns),
        ("cooldown_days", cooldown_days),
    ):
        if not _is_int(value) or value < 0:
            raise InvalidDefinitionError(
                f"{field} must be a non-negative integer.", field
            )
    return {
        "name": clean_name,
        "ability_type": ability_type,
        "cooldown_turns": cooldown_turns,
        "cooldown_days": cooldown_days,
    }


def validate_item(*, name: Any, rarity: Any, base_quantity: Any) -> dict[str, Any]:
    clean_name = _require_name(name, ITEM_NAME_MAX, "Item")
    try:
        parsed_rarity = Rarity(rarity)
    except ValueError as exc:
        raise InvalidDefinitionError(f"Unknown rarity: {rarity}", "rarity") from exc
    if not _is_int(base_quantity) or base_quantity < 1:
        raise InvalidDefinitionError(
            "base_quantity must be a positive integer.", "base_quantity"
        )
    return {
        "name": clean_name,
        "rarity": parsed_rarity.value,
        "base_quantity": base_quantity,
    }


def validate_player_stats(values: Mapping[str, Any], *, creating: bool) -> None:
    """Check stat types and the health limit on a full set of player values."""
    for field in PLAYER_STAT_FIELDS:
        if field in values and not _is_int(values[field]):
            raise InvalidDefinitionError(f"{field} must be an integer.", field)
    if creating:
        if values["health"] <= 0:
            raise InvalidDefinitionError("Health must be positive.", "health")
        if values["max_health"] <= 0:
            raise InvalidDefinitionError("Max health must be positive.", "max_health")
    if values["health"] > values["max_health"]:
        raise InvalidDefinitionError(
            "Health cannot exceed max health.", "health"
        )


def validate_player(values: Mapping[str, Any], *, creating: bool) -> dict[str, Any]:
    """Validate a merged player record and return it with a trimmed name."""
    clean = dict(values)
    clean["name"] = _require_name(values.get("name"), PLAYER_NAME_MAX, "Player")
    if clean.get("gender") not in GENDERS:
        raise InvalidDefinitionError(
            'Gender must be "male" or "female".', "gender"
        )
    validate_player_stats(clean, creating=creating)
    return clean
