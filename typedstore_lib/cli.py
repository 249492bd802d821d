"""Command line inspection of a typed store.

Works on raw keys so no entity classes need to be importable::

    python typedstore.py members Customer
    python typedstore.py show Customer 1
    python typedstore.py --config ./typedstore.yml show Session abc --cache
"""
from __future__ import annotations
import argparse
import sys
from pathlib import Path
from typing import Iterable, Optional

from typedstore_lib.client.context import DbContext
from typedstore_lib.config.loader import StoreConfig, config_template, load_config
from typedstore_lib.logging_config import configure_logging
from typedstore_lib.storage.keyspace import entry_key_for, index_key_for


def get_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="typedstore", description="Inspect a typed key-value store")
    p.add_argument("--config", type=Path, default=None, help="Path to the YAML config file")
    p.add_argument("--print-template", action="store_true", help="Print the default YAML template to stdout and exit")
    sub = p.add_subparsers(dest="command")

    sub.add_parser("ping", help="Connect to the backend and report")

    members = sub.add_parser("members", help="List identifiers in a type index")
    members.add_argument("type_name")

    urns = sub.add_parser("urns", help="List entry keys for a type")
    urns.add_argument("type_name")

    show = sub.add_parser("show", help="Print the stored payload of one entity")
    show.add_argument("type_name")
    show.add_argument("id")
    show.add_argument("--cache", action="store_true", help="Read the raw cache key instead of the entry key")
    return p


def run(args: argparse.Namespace, cfg: StoreConfig, out=None, context: Optional[DbContext] = None) -> int:
    """Execute a parsed command against the configured backend.

    A caller-supplied `context` is used as-is and left open.
    """
    out = out or sys.stdout
    ctx = context or DbContext(cfg.connection, backend=cfg.backend)
    try:
        return _dispatch(args, ctx.database(), cfg, out)
    finally:
        if context is None:
            ctx.close()


def _dispatch(args: argparse.Namespace, db, cfg: StoreConfig, out) -> int:
    if args.command == "ping":
        # the context may hand out an unreachable handle when abortConnect=false
        try:
            db.ping()
        except Exception as e:
            sys.stderr.write(f"FAILED {cfg.connection.endpoint}: {e}\n")
            return 1
        out.write(f"OK {cfg.connection.endpoint}\n")
        return 0
    if args.command == "members":
        for member in sorted(db.set_members(index_key_for(args.type_name))):
            out.write(member + "\n")
        return 0
    if args.command == "urns":
        for member in sorted(db.set_members(index_key_for(args.type_name))):
            out.write(entry_key_for(args.type_name, member) + "\n")
        return 0
    if args.command == "show":
        key = args.id if args.cache else entry_key_for(args.type_name, args.id)
        value = db.get(key)
        if value is None:
            sys.stderr.write(f"{key} not found\n")
            return 1
        out.write(value + "\n")
        return 0
    raise ValueError(f"unknown command {args.command!r}")


def main(argv: Optional[Iterable[str]] = None) -> int:
    parser = get_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)
    if args.print_template:
        sys.stdout.write(config_template())
        return 0
    if not args.command:
        parser.print_help()
        return 2

    try:
        cfg = load_config(args.config)
    except ValueError as e:
        sys.stderr.write(f"Failed to load config: {e}\n")
        return 2
    configure_logging(args.config, cfg.log_level)
    return run(args, cfg)
