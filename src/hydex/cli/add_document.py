"""CLI entrypoint for embedding and storing one document in an index."""

from __future__ import annotations

import argparse
import asyncio
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

from hydex.cli.common import print_json, report_error
from hydex.config import HydexSettings, configure_logging
from hydex.errors import HydexError
from hydex.hybrid.query import HybridQueryService


async def _add(content: str, *, index: str | None, language: str | None, db_path: str | None) -> str:
    async with HybridQueryService.from_env(db_path=db_path) as service:
        return await service.add(content, namespace=index, language=language)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Add a document to a hybrid search index")
    parser.add_argument("--db-path", default=None, help="SQLite database path (defaults to HYDEX_DB_PATH)")
    parser.add_argument("--index", default=None, help="Index (namespace) name; 'default' when omitted")
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--content", default=None, help="Document text")
    source.add_argument("--file", type=Path, default=None, help="UTF-8 text file to read the document from")
    parser.add_argument("--language", default=None, help="Lexical profile: simple, en, id or auto")
    args = parser.parse_args(argv)

    if args.file is not None:
        try:
            content = args.file.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            return report_error(f"Cannot read {args.file}: {exc}", file=str(args.file))
    else:
        content = args.content

    try:
        settings = HydexSettings.from_env()
        configure_logging(settings.log_level)
        document_id = asyncio.run(_add(content, index=args.index, language=args.language, db_path=args.db_path))
    except HydexError as exc:
        return report_error(exc, index=args.index)

    print_json({"index": args.index or "default", "id": document_id})
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
