from __future__ import annotations

from pathlib import Path
import sys

import pytest
from sqlmodel import Session, select

sys.path.append(str(Path(__file__).resolve().parents[1] / "src"))

from campaign_gm.admin import (
    create_ability,
    create_effect,
    create_item,
    create_player,
    delete_player,
    grant_item,
    learn_ability,
    update_player,
)
from campaign_gm.core.events import Outbox, PlayerCreated, PlayerDeleted, PlayerUpdated
from campaign_gm.db.engine import create_db_and_tables, get_engine
from campaign_gm.errors import ConflictError, InvalidDefinitionError, NotFoundError
from campaign_gm.models.item import PlayerItem
from campaign_gm.models.player import Player


def _session(tmp_path: Path, name: str) -> Session:
    engine = get_engine(str(tmp_path / name))
    create_db_and_tables(engine)
    return Session(engine)


def test_player_crud(tmp_path: Path) -> None:
    with _session(tmp_path, "players.db") as session:
        player = create_player(session, name="  Arden  ", strength=2, history="Sellsword")

        stored = session.exec(select(Player).where(Player.id == player.id)).one()
        assert stored.name == "Arden"
        assert stored.health == 50
        assert stored.max_health == 50
        assert stored.armor == 10
        assert stored.strength == 2
        assert stored.is_card_shown is True
        assert stored.version == 1

        updated = update_player(session, player.id, {"health": 20, "wisdom": 3})
        assert updated.health == 20
        assert updated.wisdom == 3
        assert updated.version == 2

        delete_player(session, player.id)
        assert session.exec(select(Player)).all() == []


def test_player_rules(tmp_path: Path) -> None:
    with _session(tmp_path, "player-rules.db") as session:
        with pytest.raises(InvalidDefinitionError):
            create_player(session, name="")
        with pytest.raises(InvalidDefinitionError):
            create_player(session, name="x" * 51)
        with pytest.raises(InvalidDefinitionError):
            create_player(session, name="Bram", health=60, max_health=50)
        with pytest.raises(InvalidDefinitionError):
            create_player(session, name="Bram", health=0)
        with pytest.raises(InvalidDefinitionError):
            create_player(session, name="Bram", gender="other")

        player = create_player(session, name="Bram")
        with pytest.raises(ConflictError):
            create_player(session, name="Bram")

        with pytest.raises(InvalidDefinitionError):
            update_player(session, player.id, {"health": 51})
        with pytest.raises(InvalidDefinitionError):
            update_player(session, player.id, {"max_health": 10})
        with pytest.raises(InvalidDefinitionError):
            update_player(session, player.id, {"id": 4})

        lowered = update_player(session, player.id, {"max_health": 30, "health": 25})
        assert (lowered.health, lowered.max_health) == (25, 30)

        with pytest.raises(NotFoundError):
            update_player(session, 999, {"health": 1})


def test_stale_version_is_rejected(tmp_path: Path) -> None:
    with _session(tmp_path, "player-version.db") as session:
        player = create_player(session, name="Cass")
        first_version = player.version

        update_player(session, player.id, {"health": 40}, expected_version=first_version)
        with pytest.raises(ConflictError):
            update_player(session, player.id, {"health": 30}, expected_version=first_version)

        stored = session.exec(select(Player).where(Player.id == player.id)).one()
        assert stored.health == 40


def test_concurrent_writers_cannot_both_commit(tmp_path: Path) -> None:
    engine = get_engine(str(tmp_path / "player-race.db"))
    create_db_and_tables(engine)
    with Session(engine) as setup:
        player_id = create_player(setup, name="Corin").id

    with Session(engine) as first, Session(engine) as second:
        # Both writers have read version 1 before either commits.
        first.get(Player, player_id)
        second.get(Player, player_id)

        updated = update_player(first, player_id, {"health": 10}, expected_version=1)
        assert updated.version == 2
        with pytest.raises(ConflictError):
            update_player(second, player_id, {"health": 20}, expected_version=1)

    with Session(engine) as third:
        third.get(Player, player_id)
        with Session(engine) as fourth:
            update_player(fourth, player_id, {"armor": 12})
        with pytest.raises(ConflictError):
            update_player(third, player_id, {"armor": 14})

    with Session(engine) as check:
        stored = check.get(Player, player_id)
        assert stored.health == 10
        assert stored.armor == 12
        assert stored.version == 3


def test_player_actions_record_events(tmp_path: Path) -> None:
    outbox = Outbox()
    with _session(tmp_path, "player-events.db") as session:
        player_id = create_player(session, name="Wren", outbox=outbox).id
        update_player(session, player_id, {"health": 40, "armor": 12}, outbox=outbox)
        with pytest.raises(InvalidDefinitionError):
            update_player(session, player_id, {"health": 90}, outbox=outbox)
        delete_player(session, player_id, outbox=outbox)

    events = outbox.drain()
    assert [event.name for event in events] == [
        "player:created",
        "player:updated",
        "player:deleted",
    ]
    assert isinstance(events[0], PlayerCreated)
    assert events[0].player_name == "Wren"
    assert isinstance(events[1], PlayerUpdated)
    assert events[1].changed == ("armor", "health")
    assert events[1].version == 2
    assert isinstance(events[2], PlayerDeleted)
    assert events[2].payload() == {"player_id": player_id, "player_name": "Wren"}


def test_grant_item_accumulates_quantity(tmp_path: Path) -> None:
    with _session(tmp_path, "inventory.db") as session:
        player = create_player(session, name="Dara")
        arrows = create_item(session, name="Arrows", base_quantity=20)

        grant_item(session, player_id=player.id, item_id=arrows.id)
        link = grant_item(session, player_id=player.id, item_id=arrows.id, quantity=5)

        links = session.exec(
            select(PlayerItem).where(PlayerItem.player_id == player.id)
        ).all()
        assert len(links) == 1
        assert link.quantity == 25

        with pytest.raises(InvalidDefinitionError):
            grant_item(session, player_id=player.id, item_id=arrows.id, quantity=0)
        with pytest.raises(NotFoundError):
            grant_item(session, player_id=player.id, item_id=999)


def test_definition_rules(tmp_path: Path) -> None:
    with _session(tmp_path, "definitions.db") as session:
        with pytest.raises(InvalidDefinitionError):
            create_effect(session, name="Too strong", attribute="strength", modifier=101, duration_turns=1)
        with pytest.raises(InvalidDefinitionError):
            create_effect(session, name="Forever-ish", modifier=1, is_permanent=True, duration_days=2)
        with pytest.raises(InvalidDefinitionError):
            create_effect(session, name="Untimed", attribute="armor", modifier=1)
        with pytest.raises(InvalidDefinitionError):
            create_effect(session, name="Luck", attribute="luck", modifier=1, is_permanent=True)

        blessing = create_effect(
            session, name="Blessing", attribute="wisdom", modifier=2, is_permanent=True
        )
        assert blessing.duration_turns is None and blessing.duration_days is None
        with pytest.raises(ConflictError):
            create_effect(session, name="Blessing", modifier=0, is_permanent=True)

        with pytest.raises(InvalidDefinitionError):
            create_ability(session, name="Pray", cooldown_turns=-1)
        with pytest.raises(NotFoundError):
            create_ability(session, name="Pray", effect_id=999)
        pray = create_ability(session, name="Pray", effect_id=blessing.id, cooldown_days=1)
        assert pray.ability_type == "active"

        with pytest.raises(InvalidDefinitionError):
            create_item(session, name="Relic", rarity="divine")
        relic = create_item(session, name="Relic", rarity="story", passive_effect_id=blessing.id)
        assert relic.rarity == "story"

        player = create_player(session, name="Eryn")
        link = learn_ability(session, player_id=player.id, ability_id=pray.id)
        assert link.is_active is True
        link = learn_ability(
            session, player_id=player.id, ability_id=pray.id, is_active=False
        )
        assert link.is_active is False
