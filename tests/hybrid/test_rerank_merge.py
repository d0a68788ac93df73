from __future__ import annotations

import asyncio
from typing import Sequence

import pytest

from hydex.errors import InvalidRequestError, MalformedResponse
from hydex.hybrid.rerank import RerankMergeStage, RerankResult, merge_rerank_results, order_reranked
from hydex.models import ScoredCandidate


def _candidate(
    document_id: str,
    *,
    hybrid: float | None = None,
    cosine: float | None = None,
    rerank: float | None = None,
) -> ScoredCandidate:
    return ScoredCandidate(
        document_id=document_id,
        namespace="default",
        content=f"text {document_id}",
        language="simple",
        cosine_sim=cosine,
        lexical_score=0.0,
        hybrid_score=hybrid,
        rerank_score=rerank,
    )


class _StubReranker:
    def __init__(self, scores: dict[int, float] | None = None, *, results: list[RerankResult] | None = None) -> None:
        self._scores = scores or {}
        self._results = results
        self.calls: list[tuple[str, list[str]]] = []

    async def rerank(self, query: str, documents: Sequence[str]) -> list[RerankResult]:
        self.calls.append((query, list(documents)))
        if self._results is not None:
            return self._results
        return [RerankResult(index=index, relevance_score=score) for index, score in self._scores.items()]


def test_merge_matches_results_by_index_and_keeps_hybrid_metadata() -> None:
    candidates = [_candidate("a", hybrid=0.9, cosine=0.8), _candidate("b", hybrid=0.4, cosine=0.3)]

    merged = merge_rerank_results(
        candidates,
        [RerankResult(index=1, relevance_score=0.95), RerankResult(index=0, relevance_score=0.10)],
    )

    assert [candidate.document_id for candidate in merged] == ["b", "a"]
    assert merged[0].rerank_score == pytest.approx(0.95)
    assert merged[0].hybrid_score == pytest.approx(0.4)
    assert merged[0].cosine_sim == pytest.approx(0.3)


def test_near_equal_rerank_scores_fall_back_to_hybrid_score() -> None:
    ordered = order_reranked(
        [
            _candidate("weaker", hybrid=0.2, rerank=0.5000004),
            _candidate("stronger", hybrid=0.8, rerank=0.5),
        ]
    )

    assert [candidate.document_id for candidate in ordered] == ["stronger", "weaker"]


def test_tie_break_uses_cosine_when_hybrid_score_is_absent() -> None:
    ordered = order_reranked(
        [
            _candidate("far", cosine=0.1, rerank=0.7),
            _candidate("near", cosine=0.9, rerank=0.7 + 5e-7),
        ]
    )

    assert [candidate.document_id for candidate in ordered] == ["near", "far"]


def test_rerank_scores_beyond_epsilon_win_over_hybrid_score() -> None:
    ordered = order_reranked(
        [
            _candidate("hybrid-best", hybrid=0.99, rerank=0.40),
            _candidate("rerank-best", hybrid=0.01, rerank=0.41),
        ]
    )

    assert [candidate.document_id for candidate in ordered] == ["rerank-best", "hybrid-best"]


def test_empty_candidates_short_circuit_without_calling_reranker() -> None:
    reranker = _StubReranker({0: 1.0})

    result = asyncio.run(RerankMergeStage(reranker).run(query="q", candidates=[], limit=5))

    assert result == []
    assert reranker.calls == []


def test_merge_stage_truncates_to_requested_limit() -> None:
    candidates = [_candidate(f"doc-{index}", hybrid=1.0 - index / 100) for index in range(50)]
    reranker = _StubReranker({index: index / 50 for index in range(50)})

    result = asyncio.run(RerankMergeStage(reranker).run(query="pressing", candidates=candidates, limit=5))

    assert len(result) == 5
    assert [candidate.document_id for candidate in result] == ["doc-49", "doc-48", "doc-47", "doc-46", "doc-45"]
    assert reranker.calls[0][0] == "pressing"
    assert len(reranker.calls[0][1]) == 50


def test_out_of_range_index_is_malformed() -> None:
    with pytest.raises(MalformedResponse, match="out of range"):
        merge_rerank_results([_candidate("a", hybrid=0.5)], [RerankResult(index=3, relevance_score=0.9)])


def test_duplicate_index_is_malformed() -> None:
    with pytest.raises(MalformedResponse, match="twice"):
        merge_rerank_results(
            [_candidate("a", hybrid=0.5), _candidate("b", hybrid=0.4)],
            [RerankResult(index=0, relevance_score=0.9), RerankResult(index=0, relevance_score=0.8)],
        )


def test_non_finite_rerank_score_is_malformed() -> None:
    with pytest.raises(MalformedResponse) as error:
        merge_rerank_results([_candidate("a", hybrid=0.5)], [RerankResult(index=0, relevance_score=float("nan"))])

    assert error.value.stage == "rerank"


def test_non_positive_limit_is_a_typed_error() -> None:
    with pytest.raises(InvalidRequestError) as error:
        asyncio.run(RerankMergeStage(_StubReranker()).run(query="q", candidates=[_candidate("a", hybrid=0.5)], limit=0))

    assert error.value.stage == "rerank"
