"""Hybrid search fusion, rerank merge and query orchestration."""

from .query import HybridQueryService
from .rerank import RERANK_TIE_EPSILON, RerankMergeStage, RerankResult, Reranker, merge_rerank_results, order_reranked
from .scoring import fuse_candidates, normalize_scores

__all__ = [
    "HybridQueryService",
    "RERANK_TIE_EPSILON",
    "RerankMergeStage",
    "RerankResult",
    "Reranker",
    "fuse_candidates",
    "merge_rerank_results",
    "normalize_scores",
    "order_reranked",
]
