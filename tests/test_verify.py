from __future__ import annotations

from pathlib import Path
import sys

sys.path.append(str(Path(__file__).resolve().parents[1] / "src"))

from sqlmodel import Session

from campaign_gm.admin import (
    create_ability,
    create_effect,
    create_item,
    create_player,
    grant_item,
    learn_ability,
)
from campaign_gm.db.engine import create_db_and_tables, get_engine
from campaign_gm.gameplay import apply_effect, equip_item, trigger_ability
from campaign_gm.models.active_effect import PlayerActiveEffect
from campaign_gm.models.effect import Effect
from campaign_gm.models.player import Player
from campaign_gm.verify import (
    run_all_checks,
    verify_active_effects,
    verify_effects,
    verify_players,
)


def test_verify_clean_campaign(tmp_path: Path) -> None:
    engine = get_engine(str(tmp_path / "clean.db"))
    create_db_and_tables(engine)

    with Session(engine) as session:
        player = create_player(session, name="Oswin")
        haste = create_effect(
            session, name="Haste", attribute="agility", modifier=2, duration_turns=2
        )
        sprint = create_ability(session, name="Sprint", effect_id=haste.id)
        boots = create_item(session, name="Boots", passive_effect_id=haste.id)
        learn_ability(session, player_id=player.id, ability_id=sprint.id)
        grant_item(session, player_id=player.id, item_id=boots.id)
        equip_item(session, player_id=player.id, item_id=boots.id)
        trigger_ability(session, player_id=player.id, ability_id=sprint.id)

        ok, report = run_all_checks(session)

    assert ok is True
    assert report["errors"] == []
    assert report["warnings"] == []
    assert report["counts"]["players"] == 1
    assert report["counts"]["player_items"] == 1
    assert report["counts"]["player_active_effects"] == 1


def test_verify_flags_bad_rows(tmp_path: Path) -> None:
    engine = get_engine(str(tmp_path / "dirty.db"))
    create_db_and_tables(engine)

    with Session(engine) as session:
        player = create_player(session, name="Runa")
        bad_effect = Effect(
            name="Eternal Blink",
            attribute="agility",
            modifier=1,
            is_permanent=True,
            duration_turns=3,
        )
        flat_effect = Effect(name="Flat", attribute="charisma", modifier=0, duration_days=1)
        downed = Player(name="Fallen", health=0)
        session.add_all([bad_effect, flat_effect, downed])
        session.commit()

        session.add_all(
            [
                PlayerActiveEffect(
                    player_id=player.id,
                    effect_id=flat_effect.id,
                    remaining_days=0,
                ),
                PlayerActiveEffect(
                    player_id=player.id,
                    effect_id=flat_effect.id,
                    source_type="ability",
                    source_id=404,
                    remaining_days=1,
                ),
                PlayerActiveEffect(
                    player_id=player.id,
                    effect_id=flat_effect.id,
                    source_type="admin",
                    source_id=7,
                    remaining_days=1,
                ),
            ]
        )
        session.commit()

        effects_report = verify_effects(session)
        players_report = verify_players(session)
        active_report = verify_active_effects(session)
        ok, report = run_all_checks(session)

    assert len(effects_report["errors"]) == 1
    assert "Eternal Blink" in effects_report["errors"][0]
    assert any("Flat" in warning for warning in effects_report["warnings"])

    assert players_report["errors"] == []
    assert any("Player at or below zero health" in w for w in players_report["warnings"])

    assert active_report["errors"] == []
    warnings = "\n".join(active_report["warnings"])
    assert "already expired" in warnings
    assert "source_id=404" in warnings
    assert "Admin effect carries a source id" in warnings

    assert ok is False
    assert len(report["errors"]) == 1


def test_verify_counts_admin_effects_as_clean(tmp_path: Path) -> None:
    engine = get_engine(str(tmp_path / "admin.db"))
    create_db_and_tables(engine)

    with Session(engine) as session:
        player = create_player(session, name="Pell")
        blessing = create_effect(
            session, name="Blessing", attribute="wisdom", modifier=1, is_permanent=True
        )
        apply_effect(session, player_id=player.id, effect_id=blessing.id)

        result = verify_active_effects(session)

    assert result == {"errors": [], "warnings": []}
