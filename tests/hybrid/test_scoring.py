from __future__ import annotations

import math

import pytest

from hydex.errors import InvalidRequestError
from hydex.hybrid.scoring import fuse_candidates, normalize_scores
from hydex.models import FusionWeights, ScoredCandidate


def _candidate(document_id: str, *, cosine: float | None, lexical: float | None) -> ScoredCandidate:
    return ScoredCandidate(
        document_id=document_id,
        namespace="default",
        content=f"content of {document_id}",
        language="simple",
        cosine_sim=cosine,
        lexical_score=lexical,
    )


def test_normalized_maximum_is_one() -> None:
    normalized = normalize_scores([0.2, 0.8, 0.4])

    assert max(normalized) == pytest.approx(1.0)
    assert normalized == pytest.approx([0.25, 1.0, 0.5])


def test_all_zero_batch_normalizes_to_zeros_without_nan() -> None:
    normalized = normalize_scores([0.0, 0.0, 0.0])

    assert normalized == [0.0, 0.0, 0.0]
    assert not any(math.isnan(value) for value in normalized)


def test_empty_batch_normalizes_to_empty_list() -> None:
    assert normalize_scores([]) == []


def test_missing_and_non_finite_scores_count_as_zero() -> None:
    normalized = normalize_scores([None, float("nan"), float("inf"), 2.0])

    assert normalized == [0.0, 0.0, 0.0, 1.0]


def test_non_positive_maximum_yields_zeros() -> None:
    assert normalize_scores([-0.5, -0.1]) == [0.0, 0.0]


def test_fusion_applies_weighted_sum_of_normalized_scores() -> None:
    fused = fuse_candidates(
        [
            _candidate("a", cosine=0.9, lexical=0.0),
            _candidate("b", cosine=0.45, lexical=4.0),
        ]
    )

    by_id = {candidate.document_id: candidate for candidate in fused}
    assert by_id["a"].cosine_norm == pytest.approx(1.0)
    assert by_id["a"].hybrid_score == pytest.approx(0.7)
    assert by_id["b"].lexical_norm == pytest.approx(1.0)
    assert by_id["b"].hybrid_score == pytest.approx(0.7 * 0.5 + 0.3)
    assert [candidate.document_id for candidate in fused] == ["a", "b"]


def test_fusion_keeps_raw_scores_and_respects_custom_weights() -> None:
    fused = fuse_candidates(
        [
            _candidate("a", cosine=0.9, lexical=0.0),
            _candidate("b", cosine=0.1, lexical=3.0),
        ],
        FusionWeights(vector_weight=0.2, text_weight=0.8),
    )

    assert [candidate.document_id for candidate in fused] == ["b", "a"]
    assert fused[0].cosine_sim == pytest.approx(0.1)
    assert fused[0].lexical_score == pytest.approx(3.0)


def test_fusion_is_monotonic_in_cosine_similarity() -> None:
    baseline = fuse_candidates(
        [
            _candidate("low", cosine=0.5, lexical=1.0),
            _candidate("twin", cosine=0.5, lexical=1.0),
        ]
    )
    boosted = fuse_candidates(
        [
            _candidate("low", cosine=0.5, lexical=1.0),
            _candidate("twin", cosine=0.6, lexical=1.0),
        ]
    )

    assert [candidate.document_id for candidate in baseline] == ["low", "twin"]
    assert [candidate.document_id for candidate in boosted] == ["twin", "low"]


def test_fusion_ordering_is_stable_on_equal_hybrid_scores() -> None:
    fused = fuse_candidates(
        [
            _candidate("first", cosine=0.3, lexical=0.0),
            _candidate("second", cosine=0.3, lexical=0.0),
            _candidate("third", cosine=0.6, lexical=0.0),
        ]
    )

    assert [candidate.document_id for candidate in fused] == ["third", "first", "second"]


def test_empty_candidate_set_fuses_to_empty_list() -> None:
    assert fuse_candidates([]) == []


@pytest.mark.parametrize("weights", [{"vector_weight": -0.1}, {"text_weight": float("nan")}])
def test_invalid_weights_are_rejected(weights: dict[str, float]) -> None:
    with pytest.raises(InvalidRequestError, match="weight"):
        FusionWeights(**weights)
