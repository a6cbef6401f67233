from __future__ import annotations

from pathlib import Path
import sys

from sqlmodel import Session

sys.path.append(str(Path(__file__).resolve().parents[1] / "src"))

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
from campaign_gm.queries import (
    get_player_abilities,
    get_player_details,
    get_player_items,
    get_players,
)


def test_player_details_payload(tmp_path: Path) -> None:
    engine = get_engine(str(tmp_path / "details.db"))
    create_db_and_tables(engine)

    with Session(engine) as session:
        player = create_player(session, name="Ilse", strength=2, wisdom=1)
        ward = create_effect(
            session, name="Ward", attribute="armor", modifier=2, is_permanent=True
        )
        focus = create_effect(
            session, name="Focus", attribute="wisdom", modifier=3, duration_turns=2
        )
        hex_ = create_effect(
            session, name="Hex", attribute="strength", modifier=-1, duration_days=1
        )
        meditate = create_ability(session, name="Meditate", effect_id=focus.id)
        dormant = create_ability(session, name="Dormant")
        shield = create_item(session, name="Shield", passive_effect_id=ward.id)
        arrows = create_item(session, name="Arrows", base_quantity=20)

        learn_ability(session, player_id=player.id, ability_id=meditate.id)
        learn_ability(
            session, player_id=player.id, ability_id=dormant.id, is_active=False
        )
        grant_item(session, player_id=player.id, item_id=shield.id)
        grant_item(session, player_id=player.id, item_id=arrows.id)
        equip_item(session, player_id=player.id, item_id=shield.id)
        trigger_ability(session, player_id=player.id, ability_id=meditate.id)
        apply_effect(session, player_id=player.id, effect_id=hex_.id)

        details = get_player_details(session, player.id)
        abilities = get_player_abilities(session, player.id)
        items = get_player_items(session, player.id)
        listing = get_players(session)

    assert details["player"]["name"] == "Ilse"
    assert [(entry["name"], entry["version"]) for entry in listing] == [("Ilse", 1)]
    assert details["player"]["armor"] == 10
    assert details["player"]["final_stats"]["armor"] == 12
    assert details["player"]["final_stats"]["wisdom"] == 4
    assert details["player"]["final_stats"]["strength"] == 1
    assert details["player"]["final_stats"]["health"] == 50

    assert [entry["name"] for entry in abilities] == ["Meditate"]
    assert abilities[0]["effect"]["name"] == "Focus"
    assert [entry["name"] for entry in items] == ["Arrows", "Shield"]
    assert items[1]["passive_effect"]["attribute"] == "armor"
    assert items[0]["passive_effect"] is None

    by_name = {entry["name"]: entry for entry in details["active_effects"]}
    assert by_name["Focus"]["source_type"] == "ability"
    assert by_name["Focus"]["remaining_turns"] == 2
    assert by_name["Hex"]["source_type"] == "admin"
    assert by_name["Hex"]["remaining_days"] == 1

    assert details["summary"] == {
        "total_abilities": 1,
        "total_items": 21,
        "active_effects_count": 2,
        "equipped_items_count": 1,
    }
