"""Query orchestration across embedding, storage scoring, fusion and reranking."""

from __future__ import annotations

import asyncio
import logging
import os
from pathlib import Path
from typing import Any, Awaitable, Callable, Mapping, Protocol, Sequence, TypeVar

import numpy as np

from hydex.config import DEFAULT_TIMEOUT_SECONDS, HydexSettings
from hydex.errors import (
    CollaboratorTimeout,
    HydexError,
    InvalidRequestError,
    MalformedResponse,
    RerankUnavailable,
)
from hydex.hybrid.rerank import RerankMergeStage, Reranker
from hydex.hybrid.scoring import fuse_candidates
from hydex.models import FusionWeights, ScoredCandidate, SearchMode, SearchRequest
from hydex.namespace import NamespaceScope, resolve_namespace
from hydex.storage.repository import DocumentRepository, RawScoreRow


T = TypeVar("T")

logger = logging.getLogger(__name__)


class _QueryEmbedder(Protocol):
    @property
    def model(self) -> str:
        ...

    async def embed_query(self, query: str) -> np.ndarray:
        ...


class _DocumentStore(Protocol):
    def insert(
        self,
        *,
        namespace: str,
        content: str,
        vector: np.ndarray | Sequence[float],
        language: str = ...,
        model: str | None = None,
    ) -> str:
        ...

    def delete_by_id(self, document_id: str, *, namespace: str | None = None) -> bool:
        ...

    def delete_namespace(self, namespace: str) -> int:
        ...

    def count(self, namespace: str) -> int:
        ...

    def lexical_scores(self, namespace: str, query_text: str, *, language: str = ...) -> dict[str, float]:
        ...

    def vector_scores(
        self,
        namespace: str,
        query_vector: np.ndarray | Sequence[float],
        *,
        limit: int | None = None,
    ) -> list[RawScoreRow]:
        ...

    def close(self) -> None:
        ...


def _first_failure(group: BaseExceptionGroup) -> BaseException:
    error: BaseException = group
    while isinstance(error, BaseExceptionGroup):
        error = error.exceptions[0]
    return error


def _to_candidate(row: RawScoreRow, *, lexical_score: float | None = None) -> ScoredCandidate:
    return ScoredCandidate(
        document_id=row.document_id,
        namespace=row.namespace,
        content=row.raw_content,
        language=row.language,
        cosine_sim=row.cosine_sim,
        lexical_score=lexical_score,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def _ensure_namespace(rows: Sequence[RawScoreRow], namespace: str) -> None:
    for row in rows:
        if row.namespace != namespace:
            raise MalformedResponse(
                f"Storage returned document {row.document_id} from index '{row.namespace}' "
                f"for a query on index '{namespace}'",
                stage="vector_scores",
            )


class HybridQueryService:
    """Runs vector, hybrid and hybrid+rerank searches inside one namespace."""

    def __init__(
        self,
        *,
        store: _DocumentStore,
        embedder: _QueryEmbedder,
        reranker: Reranker | None = None,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        owns_resources: bool = False,
    ) -> None:
        if timeout_seconds <= 0:
            raise ValueError("timeout_seconds must be positive")

        self._store = store
        self._embedder = embedder
        self._reranker = reranker
        self._timeout_seconds = timeout_seconds
        self._owns_resources = owns_resources

    @classmethod
    def from_env(
        cls,
        environ: Mapping[str, str] | None = None,
        *,
        db_path: str | Path | None = None,
    ) -> "HybridQueryService":
        from hydex.rerank.config import RerankSettings
        from hydex.rerank.voyage import VoyageReranker
        from hydex.semantic.config import EmbeddingSettings
        from hydex.semantic.embedder import OpenAIEmbedder

        source: Mapping[str, str] = os.environ if environ is None else environ
        settings = HydexSettings.from_env(source)
        embedder = OpenAIEmbedder(EmbeddingSettings.from_env(source))

        # reranking is optional; requests that need it fail with RerankUnavailable
        reranker = None
        if source.get("VOYAGE_API_KEY", "").strip():
            reranker = VoyageReranker(RerankSettings.from_env(source), timeout_seconds=settings.timeout_seconds)

        store = DocumentRepository(db_path or settings.db_path)
        return cls(
            store=store,
            embedder=embedder,
            reranker=reranker,
            timeout_seconds=settings.timeout_seconds,
            owns_resources=True,
        )

    async def aclose(self) -> None:
        if not self._owns_resources:
            return
        for resource in (self._embedder, self._reranker):
            close: Callable[[], Awaitable[Any]] | None = getattr(resource, "aclose", None)
            if close is not None:
                await close()
        self._store.close()

    async def __aenter__(self) -> "HybridQueryService":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def search(self, request: SearchRequest) -> list[ScoredCandidate]:
        scope = NamespaceScope.resolve(request.namespace, request.language, text=request.query)
        query_text = request.query.strip()
        if not query_text:
            return []

        if request.mode is SearchMode.VECTOR_ONLY:
            return await self._search_vector(scope, query_text, limit=request.limit)

        if request.mode is SearchMode.HYBRID:
            return await self._search_hybrid(scope, query_text, request.weights, limit=request.limit)

        if self._reranker is None:
            raise RerankUnavailable("Reranking requested but no reranker is configured (set VOYAGE_API_KEY)", stage="rerank")

        candidates = await self._search_hybrid(scope, query_text, request.weights, limit=request.rerank_breadth)
        merge_stage = RerankMergeStage(self._reranker)
        return await self._call("rerank", merge_stage.run(query=query_text, candidates=candidates, limit=request.limit))

    async def add(self, content: str, *, namespace: str | None = None, language: str | None = None) -> str:
        if not content or not content.strip():
            raise InvalidRequestError("content cannot be empty", stage="insert")
        scope = NamespaceScope.resolve(namespace, language, text=content)

        vector = await self._call("embedding", self._embedder.embed_query(content))
        document_id = await self._in_thread(
            "insert",
            self._store.insert,
            namespace=scope.namespace,
            content=content,
            vector=vector,
            language=scope.language,
            model=self._embedder.model,
        )
        logger.info("Added document %s to index '%s' (language=%s)", document_id, scope.namespace, scope.language)
        return document_id

    async def remove(self, document_id: str, *, namespace: str | None = None) -> bool:
        """Delete one document; an omitted namespace deletes by id in any index."""

        if not document_id or not document_id.strip():
            raise InvalidRequestError("document id cannot be empty", stage="delete")
        scoped = resolve_namespace(namespace) if namespace is not None else None
        removed = await self._in_thread("delete", self._store.delete_by_id, document_id.strip(), namespace=scoped)
        logger.info("Removed document %s from index '%s': %s", document_id, scoped or "*", removed)
        return removed

    async def destroy_namespace(self, namespace: str | None) -> int:
        scoped = resolve_namespace(namespace)
        deleted = await self._in_thread("delete", self._store.delete_namespace, scoped)
        logger.info("Destroyed index '%s': %d document(s) deleted", scoped, deleted)
        return deleted

    async def count(self, namespace: str | None = None) -> int:
        return await self._in_thread("count", self._store.count, resolve_namespace(namespace))

    async def _search_vector(self, scope: NamespaceScope, query_text: str, *, limit: int) -> list[ScoredCandidate]:
        query_vector = await self._call("embedding", self._embedder.embed_query(query_text))
        rows = await self._in_thread("vector_scores", self._store.vector_scores, scope.namespace, query_vector, limit=limit)
        _ensure_namespace(rows, scope.namespace)
        logger.debug("Vector search on index '%s' returned %d row(s)", scope.namespace, len(rows))
        return [_to_candidate(row) for row in rows]

    async def _search_hybrid(
        self,
        scope: NamespaceScope,
        query_text: str,
        weights: FusionWeights,
        *,
        limit: int,
    ) -> list[ScoredCandidate]:
        try:
            async with asyncio.TaskGroup() as group:
                embedding_task = group.create_task(self._call("embedding", self._embedder.embed_query(query_text)))
                lexical_task = group.create_task(
                    self._in_thread(
                        "lexical_scores",
                        self._store.lexical_scores,
                        scope.namespace,
                        query_text,
                        language=scope.language,
                    )
                )
        except BaseExceptionGroup as group_error:
            raise _first_failure(group_error)

        lexical = lexical_task.result()
        rows = await self._in_thread("vector_scores", self._store.vector_scores, scope.namespace, embedding_task.result())
        _ensure_namespace(rows, scope.namespace)

        candidates = [_to_candidate(row, lexical_score=lexical.get(row.document_id, 0.0)) for row in rows]
        fused = fuse_candidates(candidates, weights)
        logger.debug(
            "Hybrid search on index '%s': %d candidate(s), %d lexical match(es)",
            scope.namespace,
            len(fused),
            len(lexical),
        )
        return fused[:limit]

    async def _call(self, stage: str, awaitable: Awaitable[T]) -> T:
        try:
            return await asyncio.wait_for(awaitable, timeout=self._timeout_seconds)
        except asyncio.TimeoutError as exc:
            raise CollaboratorTimeout(
                f"{stage} did not finish within {self._timeout_seconds:g}s",
                stage=stage,
                timeout_seconds=self._timeout_seconds,
            ) from exc
        except HydexError as exc:
            if exc.stage is None:
                exc.stage = stage
            raise
        except Exception as exc:
            exc.add_note(f"stage={stage}")
            raise

    async def _in_thread(self, stage: str, func: Callable[..., T], *args: Any, **kwargs: Any) -> T:
        return await self._call(stage, asyncio.to_thread(func, *args, **kwargs))
