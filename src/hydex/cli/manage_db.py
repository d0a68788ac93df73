"""CLI entrypoint for creating or resetting the document store."""

from __future__ import annotations

import argparse

from dotenv import load_dotenv

load_dotenv()

from hydex.cli.common import print_json, report_error
from hydex.config import HydexSettings, configure_logging
from hydex.errors import HydexError
from hydex.storage.repository import DocumentRepository


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Initialize, reset or optimize the hydex document store")
    parser.add_argument("--db-path", default=None, help="SQLite database path (defaults to HYDEX_DB_PATH)")
    subparsers = parser.add_subparsers(dest="command", required=True)
    subparsers.add_parser("init", help="Create tables, FTS index and triggers if missing")
    reset_parser = subparsers.add_parser("reset", help="Drop every index and document, then recreate the schema")
    reset_parser.add_argument("--yes", action="store_true", help="Confirm deletion of all stored documents")
    subparsers.add_parser("optimize", help="Merge FTS index segments after bulk inserts or deletes")
    args = parser.parse_args(argv)

    try:
        settings = HydexSettings.from_env()
    except HydexError as exc:
        return report_error(exc)
    configure_logging(settings.log_level)

    db_path = args.db_path or str(settings.db_path)
    if args.command == "reset" and not args.yes:
        return report_error("reset deletes every document; pass --yes to confirm", db_path=db_path)

    with DocumentRepository(db_path) as repo:
        if args.command == "reset":
            repo.reset()
        elif args.command == "optimize":
            repo.optimize()
        state = repo.get_store_state()

    print_json(
        {
            "db_path": db_path,
            "command": args.command,
            "status": "ok",
            "dimension": state.dimension if state else None,
            "model": state.model if state else None,
        }
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
