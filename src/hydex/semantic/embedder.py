"""OpenAI-compatible embedding client used for documents and queries."""

from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Callable, Sequence

import numpy as np

from hydex.errors import CollaboratorTimeout, EmbeddingProviderError, EmbeddingUnavailable, MalformedResponse
from hydex.retry import call_with_retries, status_code_of
from hydex.semantic.config import EmbeddingSettings


STAGE = "embedding"


def _build_default_client(settings: EmbeddingSettings) -> Any:
    try:
        from openai import AsyncOpenAI
    except Exception as exc:  # pragma: no cover - environment-dependent
        raise EmbeddingUnavailable(f"OpenAI SDK unavailable for embeddings client: {exc}", stage=STAGE) from exc

    return AsyncOpenAI(api_key=settings.api_key, base_url=settings.base_url, max_retries=0)


def _extract_vectors(response: Any, *, expected_count: int, model: str) -> np.ndarray:
    data = getattr(response, "data", None)
    if data is None and isinstance(response, dict):
        data = response.get("data")
    if not isinstance(data, list):
        raise MalformedResponse(f"Embeddings response missing list 'data' (model={model})", stage=STAGE)
    if len(data) != expected_count:
        raise MalformedResponse(
            f"Embeddings response count mismatch: expected {expected_count}, got {len(data)} (model={model})",
            stage=STAGE,
        )

    vectors: list[list[float]] = []
    dimension: int | None = None

    for item in data:
        embedding = getattr(item, "embedding", None)
        if embedding is None and isinstance(item, dict):
            embedding = item.get("embedding")
        if not isinstance(embedding, (list, tuple)) or len(embedding) == 0:
            raise MalformedResponse(f"Embedding row missing numeric vector (model={model})", stage=STAGE)

        try:
            numeric = [float(value) for value in embedding]
        except (TypeError, ValueError) as exc:
            raise MalformedResponse(f"Embedding row has non-numeric values (model={model})", stage=STAGE) from exc
        if dimension is None:
            dimension = len(numeric)
        elif len(numeric) != dimension:
            raise MalformedResponse(
                f"Embedding dimension mismatch: expected {dimension}, got {len(numeric)} (model={model})",
                stage=STAGE,
            )

        vectors.append(numeric)

    return np.asarray(vectors, dtype=np.float32)


class OpenAIEmbedder:
    """Embeddings wrapper with response validation and retry semantics."""

    def __init__(
        self,
        settings: EmbeddingSettings,
        *,
        client: Any | None = None,
        max_retries: int = 2,
        retry_base_seconds: float = 0.25,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        if max_retries < 0:
            raise ValueError("max_retries cannot be negative")
        if retry_base_seconds < 0:
            raise ValueError("retry_base_seconds cannot be negative")

        self._settings = settings
        self._client = client or _build_default_client(settings)
        self._max_retries = max_retries
        self._retry_base_seconds = retry_base_seconds
        self._sleep = sleep

    @property
    def model(self) -> str:
        return self._settings.model

    async def embed_query(self, query: str) -> np.ndarray:
        query_text = query.strip()
        if not query_text:
            raise ValueError("query cannot be empty")
        vectors = await self.embed_texts([query_text])
        return vectors[0]

    async def embed_texts(self, texts: Sequence[str]) -> np.ndarray:
        payload = [text.strip() for text in texts if text and text.strip()]
        if not payload:
            raise ValueError("texts cannot be empty")

        try:
            response = await call_with_retries(
                lambda: self._client.embeddings.create(model=self._settings.model, input=payload),
                max_retries=self._max_retries,
                retry_base_seconds=self._retry_base_seconds,
                sleep=self._sleep,
                description=f"Embedding request (model={self._settings.model})",
            )
        except Exception as exc:
            if type(exc).__name__ == "APITimeoutError" or isinstance(exc, TimeoutError):
                raise CollaboratorTimeout(
                    f"Embedding request timed out: {exc} (model={self._settings.model})",
                    stage=STAGE,
                ) from exc
            raise EmbeddingProviderError(
                f"Embedding request failed: {exc} (model={self._settings.model})",
                stage=STAGE,
                status_code=status_code_of(exc),
            ) from exc

        return _extract_vectors(response, expected_count=len(payload), model=self._settings.model)

    async def aclose(self) -> None:
        close = getattr(self._client, "close", None)
        if close is not None:
            await close()
