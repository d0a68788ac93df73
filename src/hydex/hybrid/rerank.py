"""Merge an external reranker's ordering back into hybrid candidates."""

from __future__ import annotations

from dataclasses import dataclass, replace
from functools import cmp_to_key
import logging
import math
from typing import Protocol, Sequence

from hydex.errors import InvalidRequestError, MalformedResponse
from hydex.models import ScoredCandidate


RERANK_TIE_EPSILON = 1e-6

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class RerankResult:
    index: int
    relevance_score: float


class Reranker(Protocol):
    async def rerank(self, query: str, documents: Sequence[str]) -> list[RerankResult]:
        ...


def _retrieval_signal(candidate: ScoredCandidate) -> float:
    if candidate.hybrid_score is not None:
        return float(candidate.hybrid_score)
    return float(candidate.cosine_sim or 0.0)


def _compare_reranked(left: ScoredCandidate, right: ScoredCandidate) -> int:
    left_score = float(left.rerank_score or 0.0)
    right_score = float(right.rerank_score or 0.0)
    if abs(left_score - right_score) >= RERANK_TIE_EPSILON:
        return -1 if left_score > right_score else 1

    left_signal = _retrieval_signal(left)
    right_signal = _retrieval_signal(right)
    if left_signal != right_signal:
        return -1 if left_signal > right_signal else 1
    return 0


def order_reranked(candidates: Sequence[ScoredCandidate]) -> list[ScoredCandidate]:
    """Sort by rerank score; scores within ``RERANK_TIE_EPSILON`` fall back to hybrid/cosine."""

    return sorted(candidates, key=cmp_to_key(_compare_reranked))


def merge_rerank_results(
    candidates: Sequence[ScoredCandidate],
    results: Sequence[RerankResult],
) -> list[ScoredCandidate]:
    """Attach each result's score to the candidate at its index position."""

    merged: list[ScoredCandidate] = []
    seen: set[int] = set()
    for result in results:
        if not 0 <= result.index < len(candidates):
            raise MalformedResponse(
                f"Rerank result index {result.index} out of range for {len(candidates)} candidates",
                stage="rerank",
            )
        if result.index in seen:
            raise MalformedResponse(f"Rerank result index {result.index} returned twice", stage="rerank")
        if not math.isfinite(result.relevance_score):
            raise MalformedResponse(f"Rerank score for index {result.index} is not finite", stage="rerank")
        seen.add(result.index)
        merged.append(replace(candidates[result.index], rerank_score=float(result.relevance_score)))

    return order_reranked(merged)


class RerankMergeStage:
    """Submits hybrid candidates to a reranker and merges the returned scores."""

    def __init__(self, reranker: Reranker) -> None:
        self._reranker = reranker

    async def run(
        self,
        *,
        query: str,
        candidates: Sequence[ScoredCandidate],
        limit: int,
    ) -> list[ScoredCandidate]:
        if limit <= 0:
            raise InvalidRequestError("limit must be positive", stage="rerank")
        if not candidates:
            return []

        results = await self._reranker.rerank(query, [candidate.content for candidate in candidates])
        merged = merge_rerank_results(candidates, results)
        logger.debug("Reranked %d candidates, %d scored, keeping %d", len(candidates), len(merged), limit)
        return merged[:limit]
