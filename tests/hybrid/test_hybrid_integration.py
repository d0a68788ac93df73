"""End-to-end namespace isolation through the client facade."""

from __future__ import annotations

import asyncio
from pathlib import Path

import numpy as np

from hydex.client import HybridClient
from hydex.hybrid.query import HybridQueryService
from hydex.storage.repository import DocumentRepository


ENGLISH_TECH_DOCS = [
    "Kubernetes schedules containers across a cluster of nodes",
    "PostgreSQL uses write ahead logging for durability",
    "Rust ownership rules prevent data races at compile time",
    "Python asyncio runs coroutines on a single event loop",
    "Redis keeps its dataset in memory with optional persistence",
    "Git stores snapshots of the repository as content addressed objects",
    "TLS handshakes negotiate cipher suites and exchange keys",
    "Linux cgroups limit memory and CPU usage of process groups",
    "GraphQL lets clients request exactly the fields they need",
    "SQLite FTS5 provides full text search with bm25 ranking",
]

INDONESIAN_SPORTS_DOCS = [
    "Tim sepak bola itu menerapkan pressing tinggi sepanjang laga",
    "Pelatih sepak bola menekankan pressing dan transisi cepat",
    "Bulu tangkis Indonesia meraih medali emas di turnamen",
    "Pemain sepak bola muda berlatih pressing setiap pagi",
    "Liga bola basket nasional dimulai bulan depan",
]

MIXED_DOCS = [
    "Sepak bola pressing drills for youth coaches",
    "Catatan latihan pressing untuk tim sepak bola",
]

QUERY = "sepak bola pressing"


class _VocabularyEmbedder:
    """Deterministic bag-of-words vectors, one slot per distinct token."""

    model = "vocabulary-embedding"

    def __init__(self, dimension: int = 256) -> None:
        self._dimension = dimension
        self._vocabulary: dict[str, int] = {}

    async def embed_query(self, query: str) -> np.ndarray:
        vector = np.zeros(self._dimension, dtype=np.float32)
        for token in query.lower().split():
            slot = self._vocabulary.setdefault(token, len(self._vocabulary))
            vector[slot % self._dimension] += 1.0
        return vector


def _client(tmp_path: Path) -> tuple[HybridClient, DocumentRepository]:
    repo = DocumentRepository(tmp_path / "hydex.db")
    service = HybridQueryService(store=repo, embedder=_VocabularyEmbedder())
    return HybridClient(service), repo


async def _seed(client: HybridClient) -> dict[str, set[str]]:
    ids: dict[str, set[str]] = {"A": set(), "B": set(), "C": set()}
    for text in ENGLISH_TECH_DOCS:
        ids["A"].add(await client.index("A").add(text, language="en"))
    for text in INDONESIAN_SPORTS_DOCS:
        ids["B"].add(await client.index("B").add(text, language="id"))
    for text in MIXED_DOCS:
        ids["C"].add(await client.index("C").add(text, language="auto"))
    return ids


def test_query_on_one_namespace_never_returns_another_namespace(tmp_path: Path) -> None:
    client, repo = _client(tmp_path)

    async def scenario():
        ids = await _seed(client)
        in_b = await client.index("B").search(QUERY, limit=10)
        in_a = await client.index("A").search(QUERY, limit=10)
        return ids, in_b, in_a

    ids, in_b, in_a = asyncio.run(scenario())
    repo.close()

    assert in_b
    assert {candidate.namespace for candidate in in_b} == {"B"}
    assert {candidate.document_id for candidate in in_b} <= ids["B"]
    assert in_b[0].lexical_score > 0.0
    assert "pressing" in in_b[0].content

    assert all(candidate.namespace == "A" for candidate in in_a)
    assert not {candidate.document_id for candidate in in_a} & (ids["B"] | ids["C"])
    assert all(candidate.lexical_score == 0.0 for candidate in in_a)


def test_vector_only_search_is_namespace_scoped(tmp_path: Path) -> None:
    client, repo = _client(tmp_path)

    async def scenario():
        ids = await _seed(client)
        return ids, await client.index("C").search(QUERY, limit=10, vector_only=True)

    ids, results = asyncio.run(scenario())
    repo.close()

    assert {candidate.document_id for candidate in results} == ids["C"]
    assert all(candidate.hybrid_score is None for candidate in results)


def test_destroying_a_namespace_leaves_other_namespaces_searchable(tmp_path: Path) -> None:
    client, repo = _client(tmp_path)

    async def scenario():
        await _seed(client)
        before = await client.index("A").search("event loop coroutines", limit=10)
        deleted = await client.index("A").destroy()
        after = await client.index("A").search("event loop coroutines", limit=10)
        in_b = await client.index("B").search(QUERY, limit=10)
        in_c = await client.index("C").search(QUERY, limit=10)
        return before, deleted, after, in_b, in_c, await client.index("A").count()

    before, deleted, after, in_b, in_c, remaining = asyncio.run(scenario())
    repo.close()

    assert before
    assert deleted == len(ENGLISH_TECH_DOCS)
    assert after == []
    assert remaining == 0
    assert len(in_b) == len(INDONESIAN_SPORTS_DOCS)
    assert {candidate.namespace for candidate in in_c} == {"C"}


def test_removing_one_document_only_affects_its_own_index(tmp_path: Path) -> None:
    client, repo = _client(tmp_path)

    async def scenario():
        ids = await _seed(client)
        target = sorted(ids["B"])[0]
        removed_from_a = await client.index("A").remove(target)
        removed_from_b = await client.index("B").remove(target)
        return removed_from_a, removed_from_b, await client.index("B").count()

    removed_from_a, removed_from_b, count_b = asyncio.run(scenario())
    repo.close()

    assert removed_from_a is False
    assert removed_from_b is True
    assert count_b == len(INDONESIAN_SPORTS_DOCS) - 1
