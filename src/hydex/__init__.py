"""Hybrid vector and lexical search over namespaced document indexes."""

from .client import HybridClient, HybridIndex, create_client
from .errors import (
    CollaboratorTimeout,
    CollaboratorUnavailable,
    ConfigurationError,
    EmbeddingProviderError,
    EmbeddingUnavailable,
    HydexError,
    InvalidRequestError,
    MalformedResponse,
    RerankProviderError,
    RerankUnavailable,
)
from .models import FusionWeights, ScoredCandidate, SearchMode, SearchRequest

__all__ = [
    "CollaboratorTimeout",
    "CollaboratorUnavailable",
    "ConfigurationError",
    "EmbeddingProviderError",
    "EmbeddingUnavailable",
    "FusionWeights",
    "HybridClient",
    "HybridIndex",
    "HydexError",
    "InvalidRequestError",
    "MalformedResponse",
    "RerankProviderError",
    "RerankUnavailable",
    "ScoredCandidate",
    "SearchMode",
    "SearchRequest",
    "create_client",
]
