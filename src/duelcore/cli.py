from __future__ import annotations

import argparse
import json
import logging
import sys

from duelcore.engine.ai import AISpec, ai_take_turn
from duelcore.engine.match import new_match
from duelcore.engine.serialize import snapshot
from duelcore.paths import get_paths
from duelcore.services.content import ContentError, ContentService


def _simulate(args: argparse.Namespace) -> int:
    decks = None
    if args.deck:
        paths = get_paths()
        try:
            catalog = ContentService(paths.data_dir, paths.schema_dir).load_catalog()
            deck = catalog.build_deck(args.deck)
        except ContentError as e:
            print(e, file=sys.stderr)
            return 1
        decks = {"p1": deck, "p2": deck}

    state = new_match("p1", "p2", seed=args.seed, decks=decks)
    spec = AISpec(difficulty=args.difficulty)
    turns = 0
    while state.in_progress and turns < args.max_turns:
        assert state.active_player_id is not None
        ai_take_turn(state, state.active_player_id, spec)
        turns += 1

    json.dump(snapshot(state), sys.stdout, indent=2 if args.pretty else None)
    sys.stdout.write("\n")
    return 0


def _validate_content(args: argparse.Namespace) -> int:
    paths = get_paths()
    try:
        ContentService(paths.data_dir, paths.schema_dir).validate_all()
    except ContentError as e:
        print(e, file=sys.stderr)
        return 1
    print("Content OK.")
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="duelcore")
    parser.add_argument("--log-level", default="WARNING")
    sub = parser.add_subparsers(dest="command", required=True)

    sim = sub.add_parser("simulate", help="Play an AI-vs-AI match and print the final snapshot.")
    sim.add_argument("--seed", type=int, default=None)
    sim.add_argument("--deck", default=None, help="Named decklist from the bundled content.")
    sim.add_argument("--difficulty", type=int, default=2)
    sim.add_argument("--max-turns", type=int, default=200)
    sim.add_argument("--pretty", action="store_true")
    sim.set_defaults(func=_simulate)

    val = sub.add_parser("validate-content", help="Validate the bundled card content.")
    val.set_defaults(func=_validate_content)

    args = parser.parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, str(args.log_level).upper(), logging.WARNING),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )
    return int(args.func(args))


if __name__ == "__main__":
    raise SystemExit(main())
