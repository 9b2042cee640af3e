"""Command line front end: validate, re-serialize and encode mix files.

Usage:
    trafficmix check mix.json
    trafficmix dump mix.toml
    trafficmix encode mix.toml mix.msgpack
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from collections.abc import Sequence
from pathlib import Path

from trafficmix import codec
from trafficmix.config import load_config
from trafficmix.document import dump_document
from trafficmix.errors import MixConfigError
from trafficmix.headers import describe

log = logging.getLogger("trafficmix.cli")


def _check(args: argparse.Namespace) -> int:
    config = load_config(args.path)
    for position, entry in enumerate(config, start=1):
        name = entry.name or f"#{position}"
        print(f"{name} x{entry.quantity}: {describe(entry.packet)}")
    print(f"{len(config)} entries, {config.total_quantity} packets per round")
    return 0


def _dump(args: argparse.Namespace) -> int:
    config = load_config(args.path)
    print(json.dumps(dump_document(config), indent=2))
    return 0


def _encode(args: argparse.Namespace) -> int:
    config = load_config(args.path)
    data = codec.encode(config)
    args.out.write_bytes(data)
    log.info("Wrote %d bytes to %s", len(data), args.out)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="trafficmix", description="Traffic mix file tools")
    parser.add_argument("-v", "--verbose", action="store_true", help="log parser details")
    commands = parser.add_subparsers(dest="command", required=True)

    check = commands.add_parser("check", help="validate a mix file and summarize its entries")
    check.add_argument("path", type=Path, nargs="?", default=None)
    check.set_defaults(handler=_check)

    dump = commands.add_parser("dump", help="print the normalized document as JSON")
    dump.add_argument("path", type=Path, nargs="?", default=None)
    dump.set_defaults(handler=_dump)

    encode = commands.add_parser("encode", help="write the msgpack form of a mix file")
    encode.add_argument("path", type=Path)
    encode.add_argument("out", type=Path)
    encode.set_defaults(handler=_encode)

    return parser


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(name)s | %(message)s",
    )
    try:
        return args.handler(args)
    except MixConfigError as exc:
        print(f"invalid mix: {exc}", file=sys.stderr)
        return 1
    except (OSError, ValueError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2
