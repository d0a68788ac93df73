"""Index-scoped client facade over the hybrid query service."""

from __future__ import annotations

from pathlib import Path
from typing import Mapping

from hydex.hybrid.query import HybridQueryService
from hydex.models import (
    DEFAULT_FUSION_WEIGHTS,
    DEFAULT_RERANK_BREADTH,
    DEFAULT_SEARCH_LIMIT,
    FusionWeights,
    ScoredCandidate,
    SearchMode,
    SearchRequest,
)
from hydex.namespace import DEFAULT_NAMESPACE, resolve_namespace


class HybridIndex:
    """All operations of one named index; the name is the namespace."""

    def __init__(self, service: HybridQueryService, name: str) -> None:
        self._service = service
        self._name = name

    @property
    def name(self) -> str:
        return self._name

    async def add(self, content: str, *, language: str | None = None) -> str:
        return await self._service.add(content, namespace=self._name, language=language)

    async def remove(self, document_id: str) -> bool:
        return await self._service.remove(document_id, namespace=self._name)

    async def search(
        self,
        query: str,
        *,
        limit: int = DEFAULT_SEARCH_LIMIT,
        reranking: bool = False,
        vector_only: bool = False,
        weights: FusionWeights | None = None,
        rerank_breadth: int = DEFAULT_RERANK_BREADTH,
        language: str | None = None,
    ) -> list[ScoredCandidate]:
        if vector_only:
            mode = SearchMode.VECTOR_ONLY
        elif reranking:
            mode = SearchMode.HYBRID_WITH_RERANK
        else:
            mode = SearchMode.HYBRID

        request = SearchRequest(
            query=query,
            namespace=self._name,
            language=language,
            limit=limit,
            mode=mode,
            weights=weights or DEFAULT_FUSION_WEIGHTS,
            rerank_breadth=rerank_breadth,
        )
        return await self._service.search(request)

    async def destroy(self) -> int:
        return await self._service.destroy_namespace(self._name)

    async def count(self) -> int:
        return await self._service.count(self._name)


class HybridClient:
    def __init__(self, service: HybridQueryService) -> None:
        self._service = service

    @property
    def service(self) -> HybridQueryService:
        return self._service

    def index(self, name: str | None = None) -> HybridIndex:
        return HybridIndex(self._service, resolve_namespace(name or DEFAULT_NAMESPACE))

    async def aclose(self) -> None:
        await self._service.aclose()

    async def __aenter__(self) -> "HybridClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()


def create_client(
    environ: Mapping[str, str] | None = None,
    *,
    db_path: str | Path | None = None,
) -> HybridClient:
    """Build a client from environment settings; reranking is enabled when VOYAGE_API_KEY is set."""

    return HybridClient(HybridQueryService.from_env(environ, db_path=db_path))
