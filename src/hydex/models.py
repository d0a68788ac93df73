"""Request and result types shared by the scoring pipeline."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
import math

from hydex.errors import InvalidRequestError


DEFAULT_VECTOR_WEIGHT = 0.7
DEFAULT_TEXT_WEIGHT = 0.3
DEFAULT_SEARCH_LIMIT = 10
DEFAULT_RERANK_BREADTH = 50


class SearchMode(str, Enum):
    VECTOR_ONLY = "vector"
    HYBRID = "hybrid"
    HYBRID_WITH_RERANK = "hybrid_rerank"


@dataclass(frozen=True, slots=True)
class FusionWeights:
    """Relative weights of the vector and lexical signals in the hybrid score."""

    vector_weight: float = DEFAULT_VECTOR_WEIGHT
    text_weight: float = DEFAULT_TEXT_WEIGHT

    def __post_init__(self) -> None:
        for name in ("vector_weight", "text_weight"):
            value = getattr(self, name)
            if not isinstance(value, (int, float)) or not math.isfinite(value):
                raise InvalidRequestError(f"{name} must be a finite number", stage="fusion")
            if value < 0.0:
                raise InvalidRequestError(f"{name} cannot be negative", stage="fusion")


DEFAULT_FUSION_WEIGHTS = FusionWeights()


@dataclass(frozen=True, slots=True)
class SearchRequest:
    query: str
    namespace: str | None = None
    language: str | None = None
    limit: int = DEFAULT_SEARCH_LIMIT
    mode: SearchMode = SearchMode.HYBRID
    weights: FusionWeights = DEFAULT_FUSION_WEIGHTS
    rerank_breadth: int = DEFAULT_RERANK_BREADTH

    def __post_init__(self) -> None:
        try:
            object.__setattr__(self, "mode", SearchMode(self.mode))
        except ValueError:
            supported = ", ".join(mode.value for mode in SearchMode)
            raise InvalidRequestError(f"Unsupported search mode '{self.mode}'. Supported: {supported}") from None
        if self.limit < 1:
            raise InvalidRequestError("limit must be positive")
        if self.rerank_breadth < 1:
            raise InvalidRequestError("rerank_breadth must be positive")
        if self.mode is SearchMode.HYBRID_WITH_RERANK and self.limit > self.rerank_breadth:
            raise InvalidRequestError(
                f"limit ({self.limit}) cannot exceed rerank_breadth ({self.rerank_breadth})",
                stage="rerank",
            )


@dataclass(frozen=True, slots=True)
class ScoredCandidate:
    """One document's scores for a single query; never persisted."""

    document_id: str
    namespace: str
    content: str
    language: str
    cosine_sim: float | None = None
    lexical_score: float | None = None
    cosine_norm: float | None = None
    lexical_norm: float | None = None
    hybrid_score: float | None = None
    rerank_score: float | None = None
    created_at: str | None = None
    updated_at: str | None = None

    def to_dict(self) -> dict[str, str | float | None]:
        return {
            "id": self.document_id,
            "namespace": self.namespace,
            "language": self.language,
            "raw_content": self.content,
            "cosine_sim": self.cosine_sim,
            "ts_score": self.lexical_score,
            "hybrid_score": self.hybrid_score,
            "rerank_score": self.rerank_score,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }
