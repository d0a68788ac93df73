"""Runtime configuration for the reranking collaborator."""

from __future__ import annotations

from dataclasses import dataclass
import os
from typing import Mapping

from hydex.errors import ConfigurationError, RerankUnavailable


DEFAULT_VOYAGE_BASE_URL = "https://api.voyageai.com/v1"
DEFAULT_RERANK_MODEL = "rerank-2"


@dataclass(frozen=True, slots=True)
class RerankSettings:
    """Validated Voyage AI rerank settings."""

    api_key: str
    model: str = DEFAULT_RERANK_MODEL
    base_url: str = DEFAULT_VOYAGE_BASE_URL

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "RerankSettings":
        source: Mapping[str, str] = os.environ if environ is None else environ

        api_key = source.get("VOYAGE_API_KEY", "").strip()
        model = source.get("RERANK_MODEL", DEFAULT_RERANK_MODEL).strip() or DEFAULT_RERANK_MODEL
        base_url = source.get("VOYAGE_BASE_URL", DEFAULT_VOYAGE_BASE_URL).strip()

        if not api_key:
            raise RerankUnavailable("Missing required rerank environment variable: VOYAGE_API_KEY", stage="rerank")

        if not base_url:
            raise ConfigurationError("VOYAGE_BASE_URL cannot be empty", stage="rerank")
        if not (base_url.startswith("http://") or base_url.startswith("https://")):
            raise ConfigurationError("VOYAGE_BASE_URL must start with http:// or https://", stage="rerank")

        return cls(api_key=api_key, model=model, base_url=base_url.rstrip("/"))
