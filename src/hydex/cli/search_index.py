"""CLI entrypoint for vector, hybrid and reranked search inside one index."""

from __future__ import annotations

import argparse
import asyncio

from dotenv import load_dotenv

load_dotenv()

from hydex.cli.common import print_json, report_error
from hydex.config import HydexSettings, configure_logging
from hydex.errors import HydexError
from hydex.hybrid.query import HybridQueryService
from hydex.models import (
    DEFAULT_RERANK_BREADTH,
    DEFAULT_SEARCH_LIMIT,
    DEFAULT_TEXT_WEIGHT,
    DEFAULT_VECTOR_WEIGHT,
    FusionWeights,
    ScoredCandidate,
    SearchMode,
    SearchRequest,
)


async def _search(request: SearchRequest, *, db_path: str | None) -> list[ScoredCandidate]:
    async with HybridQueryService.from_env(db_path=db_path) as service:
        return await service.search(request)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Search one index with vector, hybrid or reranked hybrid scoring")
    parser.add_argument("--db-path", default=None, help="SQLite database path (defaults to HYDEX_DB_PATH)")
    parser.add_argument("--index", default=None, help="Index (namespace) name; 'default' when omitted")
    parser.add_argument("--query", required=True, help="Query text")
    parser.add_argument("--limit", type=int, default=DEFAULT_SEARCH_LIMIT, help="Maximum number of returned results")
    parser.add_argument(
        "--mode",
        choices=[mode.value for mode in SearchMode],
        default=SearchMode.HYBRID.value,
        help="Scoring mode",
    )
    parser.add_argument("--vector-weight", type=float, default=DEFAULT_VECTOR_WEIGHT, help="Weight of cosine similarity")
    parser.add_argument("--text-weight", type=float, default=DEFAULT_TEXT_WEIGHT, help="Weight of lexical relevance")
    parser.add_argument(
        "--rerank-breadth",
        type=int,
        default=DEFAULT_RERANK_BREADTH,
        help="Hybrid candidates sent to the reranker in hybrid_rerank mode",
    )
    parser.add_argument("--language", default=None, help="Lexical profile: simple, en, id or auto")
    args = parser.parse_args(argv)

    try:
        settings = HydexSettings.from_env()
        configure_logging(settings.log_level)
        request = SearchRequest(
            query=args.query,
            namespace=args.index,
            language=args.language,
            limit=args.limit,
            mode=SearchMode(args.mode),
            weights=FusionWeights(vector_weight=args.vector_weight, text_weight=args.text_weight),
            rerank_breadth=args.rerank_breadth,
        )
        results = asyncio.run(_search(request, db_path=args.db_path))
    except HydexError as exc:
        return report_error(exc, index=args.index, query=args.query, mode=args.mode)

    payload = {
        "index": args.index or "default",
        "query": args.query,
        "mode": args.mode,
        "limit": args.limit,
        "results": [candidate.to_dict() for candidate in results],
    }
    print_json(payload)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
