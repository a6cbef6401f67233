"""Command-line interface for campaign_gm."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import Any

from sqlalchemy import inspect
from sqlmodel import Session, select

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
from campaign_gm.auth import check_master_secret
from campaign_gm.config import get_db_path, get_log_level
from campaign_gm.core.events import Outbox
from campaign_gm.db.engine import create_db_and_tables, get_engine
from campaign_gm.db.repository import SqlRepository
from campaign_gm.errors import CampaignError, InvalidDefinitionError
from campaign_gm.gameplay import (
    advance_time,
    apply_effect,
    delete_ability,
    delete_item,
    equip_item,
    remove_effects_from_source,
    trigger_ability,
    use_item,
)
from campaign_gm.models.effect import Effect
from campaign_gm.models.item import Rarity
from campaign_gm.notify import build_dispatcher
from campaign_gm.queries import get_player_details, get_players
from campaign_gm.validation import PLAYER_STAT_FIELDS, PLAYER_UPDATABLE_FIELDS
from campaign_gm.verify.checks import run_all_checks

READ_ONLY_COMMANDS = {
    "init-db",
    "info",
    "list-players",
    "show-player",
    "list-effects",
    "verify",
}


def _session() -> Session:
    engine = get_engine()
    create_db_and_tables(engine)
    return Session(engine)


def _init_db() -> None:
    engine = get_engine()
    create_db_and_tables(engine)
    print(f"Database initialized at {get_db_path()}")


def _info() -> None:
    engine = get_engine()
    create_db_and_tables(engine)
    inspector = inspect(engine)
    print(f"Database path: {get_db_path()}")
    print("Tables:")
    for table in inspector.get_table_names():
        print(f"- {table}")


def _create_player(args: argparse.Namespace, outbox: Outbox) -> None:
    stats = {field: getattr(args, field) for field in PLAYER_STAT_FIELDS}
    with _session() as session:
        player = create_player(
            session,
            name=args.name,
            gender=args.gender,
            history=args.history,
            outbox=outbox,
            **stats,
        )
        print(f"Created player {player.id}: {player.name}")


def _parse_assignment(raw: str) -> tuple[str, Any]:
    field, sep, value = raw.partition("=")
    if not sep:
        raise InvalidDefinitionError(f"Expected field=value, got: {raw}")
    field = field.strip()
    if field not in PLAYER_UPDATABLE_FIELDS:
        raise InvalidDefinitionError(f"Cannot update field: {field}", field)
    if field in PLAYER_STAT_FIELDS:
        try:
            return field, int(value)
        except ValueError as exc:
            raise InvalidDefinitionError(f"{field} must be an integer.", field) from exc
    if field in ("in_battle", "is_online", "is_card_shown"):
        return field, value.strip().lower() in ("1", "true", "yes", "on")
    return field, value


def _update_player(
    player_id: int, assignments: list[str], version: int | None, outbox: Outbox
) -> None:
    changes = dict(_parse_assignment(raw) for raw in assignments)
    with _session() as session:
        player = update_player(
            session, player_id, changes, expected_version=version, outbox=outbox
        )
        print(f"Updated player {player.id} (version {player.version})")


def _delete_player(player_id: int, outbox: Outbox) -> None:
    with _session() as session:
        delete_player(session, player_id, outbox=outbox)
    print(f"Deleted player {player_id}")


def _list_players() -> None:
    with _session() as session:
        players = get_players(session)
    if not players:
        print("No players.")
        return
    for player in players:
        flags = []
        if player["in_battle"]:
            flags.append("in battle")
        if player["is_online"]:
            flags.append("online")
        suffix = f" [{', '.join(flags)}]" if flags else ""
        print(
            f"- {player['id']}: {player['name']} ({player['gender']}) "
            f"health={player['health']}/{player['max_health']} "
            f"version={player['version']}{suffix}"
        )


def _show_player(player_id: int, as_json: bool) -> None:
    with _session() as session:
        details = get_player_details(session, player_id)
        breakdown = SqlRepository(session).get_player_snapshot(player_id).breakdown()

    if as_json:
        print(json.dumps(details, indent=2, sort_keys=True, default=str))
        return

    player = details["player"]
    final = player["final_stats"]
    print(f"Player {player['id']}: {player['name']} ({player['gender']})")
    print("Stats (base -> final):")
    for attribute, entries in breakdown.items():
        name = attribute.value
        line = f"- {name}: {player[name]} -> {final[name]}"
        if entries:
            parts = ", ".join(f"{label} {modifier:+d}" for label, modifier in entries)
            line += f" [{parts}]"
        print(line)
    if details["abilities"]:
        print("Abilities:")
        for entry in details["abilities"]:
            effect = entry["effect"]["name"] if entry["effect"] else "none"
            print(f"- {entry['name']} ({entry['ability_type']}) effect={effect}")
    if details["items"]:
        print("Inventory:")
        for entry in details["items"]:
            flag = " [equipped]" if entry["is_equipped"] else ""
            print(f"- {entry['name']} x{entry['quantity']} ({entry['rarity']}){flag}")
    if details["active_effects"]:
        print("Active effects:")
        for entry in details["active_effects"]:
            turns = entry["remaining_turns"]
            days = entry["remaining_days"]
            print(
                f"- {entry['name'] or 'missing effect'} from {entry['source_type']} "
                f"turns={turns if turns is not None else '-'} "
                f"days={days if days is not None else '-'}"
            )
    summary = details["summary"]
    print(
        "Summary: "
        f"abilities={summary['total_abilities']} items={summary['total_items']} "
        f"effects={summary['active_effects_count']} "
        f"equipped={summary['equipped_items_count']}"
    )


def _create_effect(args: argparse.Namespace) -> None:
    with _session() as session:
        effect = create_effect(
            session,
            name=args.name,
            attribute=args.attribute,
            modifier=args.modifier,
            is_permanent=args.permanent,
            duration_turns=args.turns,
            duration_days=args.days,
            description=args.description,
        )
        print(f"Created effect {effect.id}: {effect.name}")


def _list_effects() -> None:
    with _session() as session:
        effects = session.exec(select(Effect).order_by(Effect.name)).all()
    for effect in effects:
        if effect.is_permanent:
            duration = "permanent"
        else:
            duration = f"turns={effect.duration_turns or '-'} days={effect.duration_days or '-'}"
        print(
            f"- {effect.id}: {effect.name} "
            f"{effect.attribute or 'no-stat'} {effect.modifier:+d} {duration}"
        )


def _create_ability(args: argparse.Namespace) -> None:
    with _session() as session:
        ability = create_ability(
            session,
            name=args.name,
            ability_type=args.ability_type,
            cooldown_turns=args.cooldown_turns,
            cooldown_days=args.cooldown_days,
            effect_id=args.effect_id,
            description=args.description,
        )
        print(f"Created ability {ability.id}: {ability.name}")


def _create_item(args: argparse.Namespace) -> None:
    with _session() as session:
        item = create_item(
            session,
            name=args.name,
            rarity=args.rarity,
            base_quantity=args.base_quantity,
            active_effect_id=args.active_effect_id,
            passive_effect_id=args.passive_effect_id,
            description=args.description,
        )
        print(f"Created item {item.id}: {item.name}")


def _learn_ability(player_id: int, ability_id: int, inactive: bool) -> None:
    with _session() as session:
        link = learn_ability(
            session, player_id=player_id, ability_id=ability_id, is_active=not inactive
        )
        state = "active" if link.is_active else "inactive"
        print(f"Player {player_id} ability {ability_id} is {state}")


def _grant_item(player_id: int, item_id: int, quantity: int | None) -> None:
    with _session() as session:
        link = grant_item(
            session, player_id=player_id, item_id=item_id, quantity=quantity
        )
        print(f"Player {player_id} holds item {item_id} x{link.quantity}")


def _equip(player_id: int, item_id: int, equipped: bool, outbox: Outbox) -> None:
    with _session() as session:
        link = equip_item(
            session,
            player_id=player_id,
            item_id=item_id,
            equipped=equipped,
            outbox=outbox,
        )
    state = "equipped" if link.is_equipped else "unequipped"
    print(f"Item {item_id} {state} for player {player_id}")


def _apply_effect(args: argparse.Namespace, outbox: Outbox) -> None:
    with _session() as session:
        instance = apply_effect(
            session,
            player_id=args.player_id,
            effect_id=args.effect_id,
            source_type=args.source_type,
            source_id=args.source_id,
            outbox=outbox,
        )
    print(f"Applied effect {instance.effect_id} as active effect {instance.id}")


def _trigger_ability(player_id: int, ability_id: int, outbox: Outbox) -> None:
    with _session() as session:
        instance = trigger_ability(
            session, player_id=player_id, ability_id=ability_id, outbox=outbox
        )
    print(f"Ability {ability_id} applied effect {instance.effect_id}")


def _use_item(player_id: int, item_id: int, outbox: Outbox) -> None:
    with _session() as session:
        instance, remaining = use_item(
            session, player_id=player_id, item_id=item_id, outbox=outbox
        )
    if instance is not None:
        print(f"Item {item_id} applied effect {instance.effect_id}")
    print(f"Remaining quantity: {remaining}")


def _advance(kind: str, player_id: int | None, outbox: Outbox) -> None:
    with _session() as session:
        report = advance_time(session, kind, player_id=player_id, outbox=outbox)
    print(f"Advanced one {report.kind.value} for {report.players} player(s)")
    print(f"- decremented: {report.decremented}")
    print(f"- expired: {len(report.expired)}")
    for instance in report.expired:
        print(f"  - player {instance.player_id} effect {instance.effect_id}")


def _remove_source(source_type: str, source_id: int, outbox: Outbox) -> None:
    with _session() as session:
        removed = remove_effects_from_source(
            session, source_type, source_id, outbox=outbox
        )
    print(f"Removed {len(removed)} active effect(s) from {source_type} {source_id}")


def _delete_ability(ability_id: int, outbox: Outbox) -> None:
    with _session() as session:
        removed = delete_ability(session, ability_id, outbox=outbox)
    print(f"Deleted ability {ability_id}; removed {len(removed)} active effect(s)")


def _delete_item(item_id: int, outbox: Outbox) -> None:
    with _session() as session:
        removed = delete_item(session, item_id, outbox=outbox)
    print(f"Deleted item {item_id}; removed {len(removed)} active effect(s)")


def _verify() -> None:
    with _session() as session:
        ok, report = run_all_checks(session)

    print("Counts:")
    for label, count in report["counts"].items():
        print(f"- {label}: {count}")

    warnings = report.get("warnings", [])
    if warnings:
        print("Warnings:")
        for warning in warnings:
            print(f"- {warning}")

    errors = report.get("errors", [])
    if errors:
        print("Errors:")
        for error in errors:
            print(f"- {error}")
        raise SystemExit(1)
    print("No errors detected.")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="campaign_gm CLI")
    parser.add_argument("--secret", help="Game master shared secret")
    parser.add_argument("--log-level", default=None, help="Override log level")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("init-db", help="Initialize the database schema")
    subparsers.add_parser("info", help="Show database path and table names")

    create_player_parser = subparsers.add_parser(
        "create-player", help="Create a player with base attributes"
    )
    create_player_parser.add_argument("--name", required=True)
    create_player_parser.add_argument(
        "--gender", choices=("male", "female"), default="male"
    )
    create_player_parser.add_argument("--history")
    for field, default in (
        ("health", 50),
        ("max_health", 50),
        ("armor", 10),
        ("strength", 0),
        ("agility", 0),
        ("intelligence", 0),
        ("physique", 0),
        ("wisdom", 0),
        ("charisma", 0),
    ):
        create_player_parser.add_argument(
            f"--{field.replace('_', '-')}", dest=field, type=int, default=default
        )

    update_player_parser = subparsers.add_parser(
        "update-player", help="Update player fields (field=value)"
    )
    update_player_parser.add_argument("--id", type=int, required=True)
    update_player_parser.add_argument("assignments", nargs="+")
    update_player_parser.add_argument(
        "--expected-version", type=int, help="Reject the update if the player changed"
    )

    delete_player_parser = subparsers.add_parser(
        "delete-player", help="Delete a player with inventory and effects"
    )
    delete_player_parser.add_argument("--id", type=int, required=True)

    subparsers.add_parser("list-players", help="List players with base health")

    show_player_parser = subparsers.add_parser(
        "show-player", help="Show a player with effective stats"
    )
    show_player_parser.add_argument("--id", type=int, required=True)
    show_player_parser.add_argument("--json", action="store_true")

    create_effect_parser = subparsers.add_parser(
        "create-effect", help="Create an effect definition"
    )
    create_effect_parser.add_argument("--name", required=True)
    create_effect_parser.add_argument("--attribute", choices=PLAYER_STAT_FIELDS)
    create_effect_parser.add_argument("--modifier", type=int, default=0)
    create_effect_parser.add_argument("--permanent", action="store_true")
    create_effect_parser.add_argument("--turns", type=int)
    create_effect_parser.add_argument("--days", type=int)
    create_effect_parser.add_argument("--description")

    subparsers.add_parser("list-effects", help="List effect definitions")

    create_ability_parser = subparsers.add_parser(
        "create-ability", help="Create an ability definition"
    )
    create_ability_parser.add_argument("--name", required=True)
    create_ability_parser.add_argument(
        "--type", dest="ability_type", choices=("active", "passive"), default="active"
    )
    create_ability_parser.add_argument("--cooldown-turns", type=int, default=0)
    create_ability_parser.add_argument("--cooldown-days", type=int, default=0)
    create_ability_parser.add_argument("--effect-id", type=int)
    create_ability_parser.add_argument("--description")

    create_item_parser = subparsers.add_parser(
        "create-item", help="Create an item definition"
    )
    create_item_parser.add_argument("--name", required=True)
    create_item_parser.add_argument(
        "--rarity", choices=[rarity.value for rarity in Rarity], default="common"
    )
    create_item_parser.add_argument("--base-quantity", type=int, default=1)
    create_item_parser.add_argument("--active-effect-id", type=int)
    create_item_parser.add_argument("--passive-effect-id", type=int)
    create_item_parser.add_argument("--description")

    learn_ability_parser = subparsers.add_parser(
        "learn-ability", help="Link an ability to a player"
    )
    learn_ability_parser.add_argument("--player-id", type=int, required=True)
    learn_ability_parser.add_argument("--ability-id", type=int, required=True)
    learn_ability_parser.add_argument("--inactive", action="store_true")

    grant_item_parser = subparsers.add_parser(
        "grant-item", help="Give an item to a player"
    )
    grant_item_parser.add_argument("--player-id", type=int, required=True)
    grant_item_parser.add_argument("--item-id", type=int, required=True)
    grant_item_parser.add_argument("--quantity", type=int)

    for name, help_text in (("equip", "Equip an item"), ("unequip", "Unequip an item")):
        equip_parser = subparsers.add_parser(name, help=help_text)
        equip_parser.add_argument("--player-id", type=int, required=True)
        equip_parser.add_argument("--item-id", type=int, required=True)

    apply_effect_parser = subparsers.add_parser(
        "apply-effect", help="Apply an effect to a player"
    )
    apply_effect_parser.add_argument("--player-id", type=int, required=True)
    apply_effect_parser.add_argument("--effect-id", type=int, required=True)
    apply_effect_parser.add_argument(
        "--source-type", choices=("ability", "item", "admin"), default="admin"
    )
    apply_effect_parser.add_argument("--source-id", type=int)

    trigger_parser = subparsers.add_parser(
        "trigger-ability", help="Apply the effect of a player's ability"
    )
    trigger_parser.add_argument("--player-id", type=int, required=True)
    trigger_parser.add_argument("--ability-id", type=int, required=True)

    use_item_parser = subparsers.add_parser(
        "use-item", help="Consume one unit of an item"
    )
    use_item_parser.add_argument("--player-id", type=int, required=True)
    use_item_parser.add_argument("--item-id", type=int, required=True)

    advance_parser = subparsers.add_parser(
        "advance", help="Advance one turn or day and expire effects"
    )
    advance_parser.add_argument("kind", choices=("turn", "day"))
    advance_parser.add_argument("--player-id", type=int)

    remove_source_parser = subparsers.add_parser(
        "remove-source", help="Remove active effects granted by an ability or item"
    )
    remove_source_parser.add_argument("source_type", choices=("ability", "item"))
    remove_source_parser.add_argument("source_id", type=int)

    delete_ability_parser = subparsers.add_parser(
        "delete-ability", help="Delete an ability and the effects it granted"
    )
    delete_ability_parser.add_argument("--id", type=int, required=True)

    delete_item_parser = subparsers.add_parser(
        "delete-item", help="Delete an item and the effects it granted"
    )
    delete_item_parser.add_argument("--id", type=int, required=True)

    subparsers.add_parser("verify", help="Run verification checks")

    return parser


def _run(args: argparse.Namespace, outbox: Outbox) -> None:
    if args.command == "init-db":
        _init_db()
    elif args.command == "info":
        _info()
    elif args.command == "create-player":
        _create_player(args, outbox)
    elif args.command == "update-player":
        _update_player(args.id, args.assignments, args.expected_version, outbox)
    elif args.command == "delete-player":
        _delete_player(args.id, outbox)
    elif args.command == "list-players":
        _list_players()
    elif args.command == "show-player":
        _show_player(args.id, args.json)
    elif args.command == "create-effect":
        _create_effect(args)
    elif args.command == "list-effects":
        _list_effects()
    elif args.command == "create-ability":
        _create_ability(args)
    elif args.command == "create-item":
        _create_item(args)
    elif args.command == "learn-ability":
        _learn_ability(args.player_id, args.ability_id, args.inactive)
    elif args.command == "grant-item":
        _grant_item(args.player_id, args.item_id, args.quantity)
    elif args.command == "equip":
        _equip(args.player_id, args.item_id, True, outbox)
    elif args.command == "unequip":
        _equip(args.player_id, args.item_id, False, outbox)
    elif args.command == "apply-effect":
        _apply_effect(args, outbox)
    elif args.command == "trigger-ability":
        _trigger_ability(args.player_id, args.ability_id, outbox)
    elif args.command == "use-item":
        _use_item(args.player_id, args.item_id, outbox)
    elif args.command == "advance":
        _advance(args.kind, args.player_id, outbox)
    elif args.command == "remove-source":
        _remove_source(args.source_type, args.source_id, outbox)
    elif args.command == "delete-ability":
        _delete_ability(args.id, outbox)
    elif args.command == "delete-item":
        _delete_item(args.id, outbox)
    elif args.command == "verify":
        _verify()
    else:
        raise InvalidDefinitionError(f"Unknown command: {args.command}")


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=(args.log_level or get_log_level()).upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    outbox = Outbox()
    try:
        if args.command not in READ_ONLY_COMMANDS:
            check_master_secret(args.secret)
        _run(args, outbox)
    except CampaignError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc
    finally:
        build_dispatcher().dispatch(outbox)


if __name__ == "__main__":
    main()
