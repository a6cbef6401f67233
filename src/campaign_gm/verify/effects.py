"""Verification checks for effect definitions."""

from __future__ import annotations

from sqlmodel import Session, select

from campaign_gm.models.effect import Effect
from campaign_gm.validation import effect_rule_violations


def verify_effects(session: Session) -> dict[str, list[str]]:
    """Verify stored effects still satisfy the definition rules."""
    errors: list[str] = []
    warnings: list[str] = []

    for effect in session.exec(select(Effect).order_by(Effect.id)).all():
        problems = effect_rule_violations(
            modifier=effect.modifier,
            is_permanent=bool(effect.is_permanent),
            duration_turns=effect.duration_turns,
            duration_days=effect.duration_days,
            attribute=effect.attribute,
        )
        for field, message in problems:
            errors.append(
                f"Invalid effect: id={effect.id} name={effect.name} {field}: {message}"
            )
        if effect.attribute is not None and not effect.modifier:
            warnings.append(
                f"Effect modifies {effect.attribute} by zero: id={effect.id} name={effect.name}"
            )

    return {"errors": errors, "warnings": warnings}
