# ruff: noqa: T201

from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import replace
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from battlesync.app import decode_preset, dump_snapshot, encode_preset, replay_feed
from battlesync.config import configure_logging, get_sync_config

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

log = logging.getLogger(__name__)


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Synchronise battle state from client feeds")
    subparsers = parser.add_subparsers(dest="command", required=True)

    sync = subparsers.add_parser("sync", help="Replay a JSON-lines battle feed")
    sync.add_argument("feed", type=str, help="Path to a JSON-lines file of battle snapshots")
    sync.add_argument(
        "--format",
        dest="battle_format",
        type=str,
        required=True,
        help="Battle format id, e.g. gen9ou",
    )
    sync.add_argument(
        "--max-combatants",
        type=int,
        default=None,
        help="Maximum number of combatants kept per side (defaults to config)",
    )
    sync.add_argument(
        "--offline",
        action="store_true",
        help="Skip downloading reference data; move enrichment degrades",
    )

    preset = subparsers.add_parser("preset", help="Roster preset codec")
    preset_sub = preset.add_subparsers(dest="preset_command", required=True)
    encode = preset_sub.add_parser("encode", help="Dehydrate a preset given as JSON")
    encode.add_argument("payload", type=str, help="Preset JSON")
    decode = preset_sub.add_parser("decode", help="Hydrate a dehydrated preset into JSON")
    decode.add_argument("text", type=str, help="Dehydrated preset")

    return parser.parse_args(list(argv))


def _validate(args: argparse.Namespace) -> None:
    if args.command == "sync" and args.max_combatants is not None and args.max_combatants <= 0:
        raise ValueError("--max-combatants must be a positive integer")


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    configure_logging()
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    try:
        parsed_args = _parse_args(args_list)
        _validate(parsed_args)
    except ValueError:
        log.exception("CLI validation error")
        sys.exit(2)

    try:
        if parsed_args.command == "sync":
            config = get_sync_config()
            if parsed_args.max_combatants is not None:
                config = replace(config, max_combatants=parsed_args.max_combatants)
            state = replay_feed(
                parsed_args.feed,
                format_=parsed_args.battle_format,
                config=config,
                offline=parsed_args.offline,
            )
            print(dump_snapshot(state))
        elif parsed_args.command == "preset" and parsed_args.preset_command == "encode":
            encoded = encode_preset(parsed_args.payload)
            if encoded is None:
                raise ValueError("Preset needs an identity key and a species forme")  # noqa: TRY301
            print(encoded)
        elif parsed_args.command == "preset" and parsed_args.preset_command == "decode":
            print(decode_preset(parsed_args.text))
        else:
            raise ValueError(f"Unsupported command: {parsed_args.command}")  # noqa: TRY301

    except Exception:
        log.exception("Fatal error during %s", parsed_args.command)
        sys.exit(1)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
