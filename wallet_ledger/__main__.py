#!/usr/bin/env python3
"""Main entry point for the Wallet Ledger service"""

from typing import List, Optional
import argparse
import sys

import uvicorn

from .api import create_app
from .config import get_config
from .engine import TransferEngine
from .errors import LedgerError
from .logging_config import setup_logging
from .seed import seed_ledger
from .storage import create_storage


def build_parser() -> argparse.ArgumentParser:
    config = get_config()
    parser = argparse.ArgumentParser(
        prog="wallet-ledger", description="Wallet ledger transfer service"
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    serve = subparsers.add_parser("serve", help="Run the HTTP API")
    serve.add_argument("--host", default=config.api_host, help="Bind address")
    serve.add_argument("--port", type=int, default=config.api_port, help="Bind port")
    serve.add_argument("--db", default=config.database_url, help="Database URL")

    seed = subparsers.add_parser("seed", help="Register the demo accounts")
    seed.add_argument("--db", default=config.database_url, help="Database URL")

    return parser


def open_storage(database_url: str):
    config = get_config()
    return create_storage(
        database_url,
        lock_timeout=config.lock_timeout_seconds,
        pool_min=config.database_pool_min,
        pool_max=config.database_pool_max,
    )


def serve(args: argparse.Namespace) -> int:
    storage = open_storage(args.db)
    app = create_app(TransferEngine.from_storage(storage))

    print("💰 Wallet Ledger")
    print(f"💻 Starting on http://{args.host}:{args.port}")
    print(f"🔌 API docs: http://{args.host}:{args.port}/docs")
    print("🛑 Press Ctrl+C to stop")

    try:
        uvicorn.run(app, host=args.host, port=args.port, access_log=False)
    finally:
        storage.close()
    return 0


def seed(args: argparse.Namespace) -> int:
    storage = open_storage(args.db)
    try:
        created = seed_ledger(storage)
    finally:
        storage.close()
    print(f"Seeded {len(created)} demo account(s)")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Parse arguments and run the selected command"""
    config = get_config()
    setup_logging(config.log_level, config.log_format)

    args = build_parser().parse_args(argv)
    commands = {"serve": serve, "seed": seed}
    try:
        return commands[args.command](args)
    except LedgerError as e:
        print(f"❌ {e.message}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
