"""Voyage AI rerank client."""

from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Callable, Sequence

import httpx

from hydex.errors import CollaboratorTimeout, MalformedResponse, RerankProviderError
from hydex.hybrid.rerank import RerankResult
from hydex.retry import call_with_retries, status_code_of
from hydex.rerank.config import RerankSettings


STAGE = "rerank"
DEFAULT_HTTP_TIMEOUT_SECONDS = 30.0


def _parse_results(payload: Any, *, model: str) -> list[RerankResult]:
    if not isinstance(payload, dict):
        raise MalformedResponse(f"Rerank response is not a JSON object (model={model})", stage=STAGE)

    items = payload.get("data")
    if items is None:
        items = payload.get("results")
    if not isinstance(items, list):
        raise MalformedResponse(f"Rerank response missing result array (model={model})", stage=STAGE)

    results: list[RerankResult] = []
    for item in items:
        if not isinstance(item, dict):
            raise MalformedResponse(f"Rerank result row is not an object (model={model})", stage=STAGE)
        index = item.get("index")
        score = item.get("relevance_score")
        if not isinstance(index, int) or isinstance(index, bool):
            raise MalformedResponse(f"Rerank result row missing integer 'index' (model={model})", stage=STAGE)
        if not isinstance(score, (int, float)) or isinstance(score, bool):
            raise MalformedResponse(
                f"Rerank result row missing numeric 'relevance_score' (model={model})",
                stage=STAGE,
            )
        results.append(RerankResult(index=index, relevance_score=float(score)))
    return results


class VoyageReranker:
    """Cross-encoder reranking over the Voyage AI HTTP API."""

    def __init__(
        self,
        settings: RerankSettings,
        *,
        client: httpx.AsyncClient | None = None,
        max_retries: int = 2,
        retry_base_seconds: float = 0.25,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        timeout_seconds: float = DEFAULT_HTTP_TIMEOUT_SECONDS,
    ) -> None:
        if max_retries < 0:
            raise ValueError("max_retries cannot be negative")
        if retry_base_seconds < 0:
            raise ValueError("retry_base_seconds cannot be negative")

        self._settings = settings
        self._client = client or httpx.AsyncClient(timeout=timeout_seconds)
        self._max_retries = max_retries
        self._retry_base_seconds = retry_base_seconds
        self._sleep = sleep

    @property
    def model(self) -> str:
        return self._settings.model

    async def rerank(self, query: str, documents: Sequence[str]) -> list[RerankResult]:
        if not documents:
            return []

        body = {
            "query": query,
            "documents": list(documents),
            "model": self._settings.model,
            "top_k": len(documents),
        }

        try:
            response = await call_with_retries(
                lambda: self._post(body),
                max_retries=self._max_retries,
                retry_base_seconds=self._retry_base_seconds,
                sleep=self._sleep,
                description=f"Rerank request (model={self._settings.model})",
            )
        except httpx.TimeoutException as exc:
            raise CollaboratorTimeout(
                f"Rerank request timed out: {exc} (model={self._settings.model})",
                stage=STAGE,
            ) from exc
        except httpx.HTTPStatusError as exc:
            raise RerankProviderError(
                f"Rerank request failed with HTTP {exc.response.status_code}: {exc.response.text} "
                f"(model={self._settings.model})",
                stage=STAGE,
                status_code=exc.response.status_code,
            ) from exc
        except httpx.HTTPError as exc:
            raise RerankProviderError(
                f"Rerank request failed: {exc} (model={self._settings.model})",
                stage=STAGE,
                status_code=status_code_of(exc),
            ) from exc

        try:
            payload = response.json()
        except ValueError as exc:
            raise MalformedResponse(f"Rerank response is not valid JSON (model={self._settings.model})", stage=STAGE) from exc
        return _parse_results(payload, model=self._settings.model)

    async def _post(self, body: dict[str, object]) -> httpx.Response:
        response = await self._client.post(
            f"{self._settings.base_url}/rerank",
            json=body,
            headers={"Authorization": f"Bearer {self._settings.api_key}"},
        )
        response.raise_for_status()
        return response

    async def aclose(self) -> None:
        await self._client.aclose()
