from __future__ import annotations

import argparse
import logging
import sys
import time
from dataclasses import replace

import polars as pl
from pydantic import ValidationError

from .core.errors import ReconcileError, SchemaError
from .db import Database
from .store.config import StoreSettings
from .store.errors import StoreError

logger = logging.getLogger("loradb.cli")

_RX_COLUMNS = ["frid", "datetime", "devaddr", "mac", "fcnt", "port", "data"]


def _add_common(p: argparse.ArgumentParser) -> None:
    p.add_argument("--root", type=str, default="", help="Store root directory (overrides config).")
    p.add_argument("--config", type=str, default="", help="Path to a TOML config file.")
    p.add_argument(
        "--log-level",
        type=str,
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level.",
    )


def _open(args: argparse.Namespace) -> Database:
    """Configure logging and open the Database named by the common options."""
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    settings = StoreSettings.load(args.config or None)
    if args.root:
        settings = replace(settings, root_dir=args.root)
    return Database.open(settings)


def _cmd_ensure(argv: list[str]) -> int:
    p = argparse.ArgumentParser(prog="ensure", description="Create or reconcile every table.")
    _add_common(p)
    args = p.parse_args(argv)

    db = _open(args)
    db.ensure_tables()
    print(f"[INFO] Tables ready under {db.settings.root_dir}")
    return 0


def _cmd_trim(argv: list[str]) -> int:
    p = argparse.ArgumentParser(prog="trim", description="Expire old rxframes of every device.")
    _add_common(p)
    p.add_argument(
        "--every",
        type=float,
        default=0.0,
        help="Repeat the pass every SECONDS (default: run once).",
    )
    args = p.parse_args(argv)

    db = _open(args)
    while True:
        summary = db.trim_tables()
        print(
            f"[INFO] Trimmed {summary.devices} devices: {summary.expired} rxframes expired, "
            f"{len(summary.failed)} failed"
        )
        if args.every <= 0:
            return 1 if summary.failed else 0
        time.sleep(args.every)


def _cmd_rxframes(argv: list[str]) -> int:
    p = argparse.ArgumentParser(prog="rxframes", description="Show the rxframes window of a device.")
    _add_common(p)
    p.add_argument("devaddr", type=str, help="Device address (hex).")
    p.add_argument("--n", type=int, default=0, help="Rows to display (default: all).")
    args = p.parse_args(argv)

    db = _open(args)
    frames = db.get_rxframes(args.devaddr)
    df = pl.DataFrame(
        [f.model_dump(mode="json", include=set(_RX_COLUMNS)) for f in frames],
        schema={
            "frid": pl.Int64,
            "datetime": pl.Utf8,
            "devaddr": pl.Utf8,
            "mac": pl.Utf8,
            "fcnt": pl.Int64,
            "port": pl.Int64,
            "data": pl.Utf8,
        },
    ).select(_RX_COLUMNS)
    print(df.tail(args.n) if args.n > 0 else df)
    return 0


def _cmd_purge_txframes(argv: list[str]) -> int:
    p = argparse.ArgumentParser(
        prog="purge-txframes", description="Delete every queued downlink of a device."
    )
    _add_common(p)
    p.add_argument("devaddr", type=str, help="Device address (hex).")
    args = p.parse_args(argv)

    db = _open(args)
    count = db.purge_txframes(args.devaddr)
    print(f"[INFO] Purged {count} txframes of {args.devaddr}")
    return 0


_COMMANDS = {
    "ensure": _cmd_ensure,
    "trim": _cmd_trim,
    "rxframes": _cmd_rxframes,
    "purge-txframes": _cmd_purge_txframes,
}


def build_argparser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="loradb", description="LoRaWAN server database maintenance.")
    sub = p.add_subparsers(dest="cmd", required=True)
    for name in _COMMANDS:
        sub.add_parser(name)
    return p


def main(argv: list[str] | None = None) -> None:
    argv = list(sys.argv[1:] if argv is None else argv)
    if not argv:
        build_argparser().print_help()
        return
    cmd, rest = argv[0], argv[1:]
    handler = _COMMANDS.get(cmd)
    if handler is None:
        print(f"Unknown command: {cmd}", file=sys.stderr)
        raise SystemExit(2)
    try:
        code = handler(rest)
    except (StoreError, ReconcileError, SchemaError, ValidationError) as exc:
        logger.error("%s failed: %s", cmd, exc)
        print(f"[ERROR] {exc}", file=sys.stderr)
        code = 1
    except KeyboardInterrupt:
        code = 130
    raise SystemExit(code)


if __name__ == "__main__":
    main()
