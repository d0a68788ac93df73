"""Runtime configuration for the embedding collaborator."""

from __future__ import annotations

from dataclasses import dataclass
import os
from typing import Mapping

from hydex.errors import ConfigurationError, EmbeddingUnavailable


DEFAULT_OPENAI_BASE_URL = "https://api.openai.com/v1"
DEFAULT_EMBED_MODEL = "text-embedding-3-small"


@dataclass(frozen=True, slots=True)
class EmbeddingSettings:
    """Validated OpenAI-compatible embeddings settings."""

    api_key: str
    model: str = DEFAULT_EMBED_MODEL
    base_url: str = DEFAULT_OPENAI_BASE_URL

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "EmbeddingSettings":
        source: Mapping[str, str] = os.environ if environ is None else environ

        api_key = source.get("OPENAI_API_KEY", "").strip()
        model = source.get("EMBED_MODEL", DEFAULT_EMBED_MODEL).strip() or DEFAULT_EMBED_MODEL
        base_url = source.get("OPENAI_BASE_URL", DEFAULT_OPENAI_BASE_URL).strip()

        if not api_key:
            raise EmbeddingUnavailable("Missing required embedding environment variable: OPENAI_API_KEY", stage="embedding")

        if not base_url:
            raise ConfigurationError("OPENAI_BASE_URL cannot be empty", stage="embedding")
        if not (base_url.startswith("http://") or base_url.startswith("https://")):
            raise ConfigurationError("OPENAI_BASE_URL must start with http:// or https://", stage="embedding")

        return cls(api_key=api_key, model=model, base_url=base_url.rstrip("/"))
