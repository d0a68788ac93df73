"""Score normalization and fusion utilities for hybrid search."""

from __future__ import annotations

from dataclasses import replace
import math
from typing import Iterable, Sequence

from hydex.models import DEFAULT_FUSION_WEIGHTS, FusionWeights, ScoredCandidate


def _finite_or_zero(value: float | None) -> float:
    if value is None:
        return 0.0
    number = float(value)
    return number if math.isfinite(number) else 0.0


def normalize_scores(values: Iterable[float | None]) -> list[float]:
    """Divide every score by the batch maximum.

    Missing or non-finite scores count as 0. When the maximum is not
    positive every normalized value is 0, so no NaN or inf reaches ordering.
    """

    raw_values = [_finite_or_zero(value) for value in values]
    if not raw_values:
        return []

    maximum = max(raw_values)
    if maximum <= 0.0:
        return [0.0] * len(raw_values)
    return [value / maximum for value in raw_values]


def fuse_candidates(
    candidates: Sequence[ScoredCandidate],
    weights: FusionWeights = DEFAULT_FUSION_WEIGHTS,
) -> list[ScoredCandidate]:
    """Annotate candidates with normalized and hybrid scores, best first.

    ``hybrid = vector_weight * norm(cosine) + text_weight * norm(lexical)``.
    The sort is stable, so equal hybrid scores keep their input order.
    """

    cosine_norm = normalize_scores(candidate.cosine_sim for candidate in candidates)
    lexical_norm = normalize_scores(candidate.lexical_score for candidate in candidates)

    fused = [
        replace(
            candidate,
            cosine_norm=cosine_value,
            lexical_norm=lexical_value,
            hybrid_score=weights.vector_weight * cosine_value + weights.text_weight * lexical_value,
        )
        for candidate, cosine_value, lexical_value in zip(candidates, cosine_norm, lexical_norm)
    ]
    return sorted(fused, key=lambda candidate: -float(candidate.hybrid_score or 0.0))
