"""CLI entrypoint for removing documents, destroying indexes and counting them."""

from __future__ import annotations

import argparse

from dotenv import load_dotenv

load_dotenv()

from hydex.cli.common import print_json, report_error
from hydex.config import HydexSettings, configure_logging
from hydex.errors import HydexError
from hydex.namespace import resolve_namespace
from hydex.storage.repository import DocumentRepository


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Remove documents from, destroy, or count an index")
    parser.add_argument("--db-path", default=None, help="SQLite database path (defaults to HYDEX_DB_PATH)")
    subparsers = parser.add_subparsers(dest="command", required=True)

    remove_parser = subparsers.add_parser("remove", help="Delete one document by id")
    remove_parser.add_argument("--id", dest="document_id", required=True, help="Document id")
    remove_parser.add_argument("--index", default=None, help="Restrict deletion to this index")

    destroy_parser = subparsers.add_parser("destroy", help="Delete every document of an index")
    destroy_parser.add_argument("--index", default=None, help="Index name; 'default' when omitted")
    destroy_parser.add_argument("--yes", action="store_true", help="Confirm deletion")

    count_parser = subparsers.add_parser("count", help="Count documents in an index")
    count_parser.add_argument("--index", default=None, help="Index name; 'default' when omitted")
    args = parser.parse_args(argv)

    try:
        settings = HydexSettings.from_env()
        configure_logging(settings.log_level)
        db_path = args.db_path or str(settings.db_path)

        if args.command == "remove":
            namespace = resolve_namespace(args.index) if args.index is not None else None
            with DocumentRepository(db_path) as repo:
                removed = repo.delete_by_id(args.document_id, namespace=namespace)
            print_json({"command": "remove", "id": args.document_id, "index": namespace, "removed": removed})
            return 0

        namespace = resolve_namespace(args.index)
        if args.command == "destroy":
            if not args.yes:
                return report_error("destroy deletes every document in the index; pass --yes to confirm", index=namespace)
            with DocumentRepository(db_path) as repo:
                deleted = repo.delete_namespace(namespace)
            print_json({"command": "destroy", "index": namespace, "deleted": deleted})
            return 0

        with DocumentRepository(db_path) as repo:
            total = repo.count(namespace)
    except HydexError as exc:
        return report_error(exc, command=args.command)

    print_json({"command": "count", "index": namespace, "count": total})
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
