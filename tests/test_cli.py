from __future__ import annotations

import json
from pathlib import Path
import sys

import pytest

sys.path.append(str(Path(__file__).resolve().parents[1] / "src"))

from campaign_gm import cli
from campaign_gm.cli import main
from campaign_gm.notify import EventDispatcher


@pytest.fixture
def campaign_db(tmp_path: Path, monkeypatch) -> Path:
    db_path = tmp_path / "cli" / "campaign.db"
    monkeypatch.setenv("CAMPAIGN_GM_DB_PATH", str(db_path))
    monkeypatch.delenv("CAMPAIGN_GM_MASTER_SECRET", raising=False)
    monkeypatch.delenv("CAMPAIGN_GM_NOTIFY_URL", raising=False)
    return db_path


def test_cli_session_flow(campaign_db: Path, capsys) -> None:
    main(["init-db"])
    assert campaign_db.exists()

    main(["create-player", "--name", "Hale", "--strength", "2"])
    main(
        [
            "create-effect",
            "--name",
            "Might",
            "--attribute",
            "strength",
            "--modifier",
            "3",
            "--turns",
            "1",
        ]
    )
    main(["create-effect", "--name", "Grip", "--attribute", "strength", "--modifier", "1", "--permanent"])
    main(["create-item", "--name", "Gauntlets", "--passive-effect-id", "2"])
    main(["grant-item", "--player-id", "1", "--item-id", "1"])
    main(["equip", "--player-id", "1", "--item-id", "1"])
    main(["apply-effect", "--player-id", "1", "--effect-id", "1"])
    capsys.readouterr()

    main(["show-player", "--id", "1", "--json"])
    details = json.loads(capsys.readouterr().out)
    assert details["player"]["final_stats"]["strength"] == 6
    assert details["summary"]["equipped_items_count"] == 1

    main(["advance", "turn"])
    out = capsys.readouterr().out
    assert "Advanced one turn for 1 player(s)" in out
    assert "- expired: 1" in out

    main(["show-player", "--id", "1"])
    out = capsys.readouterr().out
    assert "- strength: 2 -> 3 [Grip +1]" in out

    main(["verify"])
    assert "No errors detected." in capsys.readouterr().out


def test_cli_update_player_with_version(campaign_db: Path, capsys) -> None:
    main(["create-player", "--name", "Vell"])
    main(["update-player", "--id", "1", "health=40", "history=Exiled"])
    assert "version 2" in capsys.readouterr().out

    with pytest.raises(SystemExit) as excinfo:
        main(["update-player", "--id", "1", "armor=12", "--expected-version", "1"])
    assert excinfo.value.code == 1
    assert "changed concurrently" in capsys.readouterr().err


def test_cli_reports_domain_errors(campaign_db: Path, capsys) -> None:
    with pytest.raises(SystemExit) as excinfo:
        main(["create-effect", "--name", "Broken", "--modifier", "150", "--turns", "1"])
    assert excinfo.value.code == 1
    assert "Error:" in capsys.readouterr().err

    with pytest.raises(SystemExit):
        main(["show-player", "--id", "42"])
    assert "Player not found: 42" in capsys.readouterr().err


def test_cli_requires_secret_for_mutations(campaign_db: Path, capsys, monkeypatch) -> None:
    monkeypatch.setenv("CAMPAIGN_GM_MASTER_SECRET", "dragon")

    main(["init-db"])
    with pytest.raises(SystemExit):
        main(["create-player", "--name", "Sly"])
    assert "Invalid game master secret" in capsys.readouterr().err

    main(["--secret", "dragon", "create-player", "--name", "Sly"])
    assert "Created player 1: Sly" in capsys.readouterr().out


def test_cli_lists_and_deletes_players(campaign_db: Path, capsys, monkeypatch) -> None:
    received: list[str] = []
    dispatcher = EventDispatcher()
    dispatcher.subscribe(lambda event: received.append(event.name))
    monkeypatch.setattr(cli, "build_dispatcher", lambda: dispatcher)

    main(["list-players"])
    assert "No players." in capsys.readouterr().out

    main(["create-player", "--name", "Ash"])
    main(["create-player", "--name", "Birch", "--health", "30"])
    main(["update-player", "--id", "2", "is_online=yes"])
    capsys.readouterr()

    main(["list-players"])
    out = capsys.readouterr().out
    assert "- 1: Ash (male) health=50/50 version=1" in out
    assert "- 2: Birch (male) health=30/50 version=2 [online]" in out

    main(["delete-player", "--id", "1"])
    assert "Deleted player 1" in capsys.readouterr().out
    main(["list-players"])
    assert "Ash" not in capsys.readouterr().out

    with pytest.raises(SystemExit):
        main(["delete-player", "--id", "1"])
    assert "Player not found: 1" in capsys.readouterr().err

    assert received == [
        "player:created",
        "player:created",
        "player:updated",
        "player:deleted",
    ]
