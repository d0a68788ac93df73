from __future__ import annotations

import json

from hydex.cli.search_index import main as search_index_main
from hydex.errors import RerankUnavailable
from hydex.hybrid.query import HybridQueryService
from hydex.models import ScoredCandidate, SearchMode, SearchRequest


class _StubService:
    def __init__(self, results: list[ScoredCandidate], error: Exception | None = None) -> None:
        self._results = results
        self._error = error
        self.requests: list[SearchRequest] = []
        self.closed = False

    async def __aenter__(self) -> "_StubService":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        self.closed = True

    async def search(self, request: SearchRequest) -> list[ScoredCandidate]:
        self.requests.append(request)
        if self._error is not None:
            raise self._error
        return self._results[: request.limit]


def _candidate(document_id: str, score: float) -> ScoredCandidate:
    return ScoredCandidate(
        document_id=document_id,
        namespace="B",
        content=f"pressing drill {document_id}",
        language="indonesian",
        cosine_sim=score,
        lexical_score=1.2,
        cosine_norm=score,
        lexical_norm=1.0,
        hybrid_score=score,
    )


def _install(monkeypatch, stub: _StubService) -> list[object]:
    db_paths: list[object] = []

    def fake_from_env(cls, environ=None, *, db_path=None):
        db_paths.append(db_path)
        return stub

    monkeypatch.setattr(HybridQueryService, "from_env", classmethod(fake_from_env))
    return db_paths


def test_search_cli_returns_machine_readable_output(monkeypatch, capsys) -> None:
    stub = _StubService([_candidate("a", 0.91), _candidate("b", 0.73)])
    db_paths = _install(monkeypatch, stub)

    exit_code = search_index_main(
        ["--db-path", "tmp/hydex.db", "--index", "B", "--query", "sepak bola pressing", "--limit", "5"]
    )
    payload = json.loads(capsys.readouterr().out)

    assert exit_code == 0
    assert db_paths == ["tmp/hydex.db"]
    assert stub.closed is True
    assert payload["index"] == "B"
    assert payload["mode"] == "hybrid"
    assert payload["limit"] == 5
    assert [row["id"] for row in payload["results"]] == ["a", "b"]
    assert payload["results"][0]["ts_score"] == 1.2


def test_search_cli_passes_mode_weights_and_language(monkeypatch, capsys) -> None:
    stub = _StubService([])
    _install(monkeypatch, stub)

    exit_code = search_index_main(
        [
            "--query",
            "pressing",
            "--mode",
            "hybrid_rerank",
            "--limit",
            "3",
            "--rerank-breadth",
            "12",
            "--vector-weight",
            "0.6",
            "--text-weight",
            "0.4",
            "--language",
            "id",
        ]
    )
    capsys.readouterr()

    request = stub.requests[0]
    assert exit_code == 0
    assert request.mode is SearchMode.HYBRID_WITH_RERANK
    assert request.rerank_breadth == 12
    assert request.weights.vector_weight == 0.6
    assert request.weights.text_weight == 0.4
    assert request.language == "id"
    assert request.namespace is None


def test_search_cli_rejects_invalid_weights(monkeypatch, capsys) -> None:
    stub = _StubService([])
    _install(monkeypatch, stub)

    exit_code = search_index_main(["--query", "q", "--vector-weight", "-1"])
    payload = json.loads(capsys.readouterr().out)

    assert exit_code == 2
    assert payload["kind"] == "InvalidRequestError"
    assert payload["stage"] == "fusion"
    assert stub.requests == []


def test_search_cli_reports_typed_failures(monkeypatch, capsys) -> None:
    stub = _StubService([], error=RerankUnavailable("no reranker configured", stage="rerank"))
    _install(monkeypatch, stub)

    exit_code = search_index_main(["--query", "q", "--mode", "hybrid_rerank", "--limit", "2"])
    payload = json.loads(capsys.readouterr().out)

    assert exit_code == 2
    assert payload["error"] == "no reranker configured"
    assert payload["kind"] == "RerankUnavailable"
    assert payload["stage"] == "rerank"
