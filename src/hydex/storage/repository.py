"""Namespace-scoped document persistence and raw score retrieval."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
import sqlite3
import threading
from typing import Sequence
import uuid

import numpy as np

from hydex.errors import InvalidRequestError
from hydex.storage.normalize import SIMPLE_PROFILE, normalize_text
from hydex.storage.query import score_lexical
from hydex.storage.schema import apply_runtime_pragmas, drop_schema, ensure_schema, optimize_fts
from hydex.storage.vectors import cosine_similarities, decode_vectors, encode_vector, to_query_array


@dataclass(slots=True)
class DocumentRow:
    document_id: str
    namespace: str
    language: str
    raw_content: str
    created_at: str
    updated_at: str


@dataclass(slots=True)
class RawScoreRow:
    document_id: str
    namespace: str
    language: str
    raw_content: str
    cosine_sim: float
    lexical_score: float | None
    created_at: str
    updated_at: str


@dataclass(slots=True)
class StoreState:
    dimension: int
    model: str | None


class DocumentRepository:
    """Thin transactional layer over the SQLite document store.

    The connection is shared across worker threads, so every statement runs
    under one lock.
    """

    def __init__(self, db_path: str | Path) -> None:
        self._db_path = Path(db_path)
        self._connection = sqlite3.connect(str(self._db_path), check_same_thread=False)
        self._connection.row_factory = sqlite3.Row
        self._lock = threading.RLock()
        apply_runtime_pragmas(self._connection)
        ensure_schema(self._connection)

    @property
    def connection(self) -> sqlite3.Connection:
        return self._connection

    def close(self) -> None:
        with self._lock:
            self._connection.close()

    def __enter__(self) -> "DocumentRepository":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def reset(self) -> None:
        """Drop and recreate the schema, deleting every document."""

        with self._lock:
            drop_schema(self._connection)
            ensure_schema(self._connection)

    def optimize(self) -> None:
        with self._lock:
            optimize_fts(self._connection)

    def get_store_state(self) -> StoreState | None:
        with self._lock:
            row = self._connection.execute("SELECT dimension, model FROM store_state WHERE id = 1").fetchone()
        if row is None:
            return None
        return StoreState(dimension=int(row["dimension"]), model=row["model"])

    def insert(
        self,
        *,
        namespace: str,
        content: str,
        vector: np.ndarray | Sequence[float],
        language: str = SIMPLE_PROFILE,
        model: str | None = None,
    ) -> str:
        """Store one document and return its generated id."""

        if not content.strip():
            raise InvalidRequestError("content cannot be empty", stage="insert")
        try:
            query_array = to_query_array(vector)
        except ValueError as exc:
            raise InvalidRequestError(str(exc), stage="insert") from exc
        dimension = int(query_array.shape[0])
        lexical_text = normalize_text(content, language=language)
        document_id = uuid.uuid4().hex

        with self._lock, self._connection:
            row = self._connection.execute("SELECT dimension FROM store_state WHERE id = 1").fetchone()
            if row is None:
                self._connection.execute(
                    "INSERT INTO store_state(id, dimension, model) VALUES(1, ?, ?)",
                    (dimension, model),
                )
            elif int(row["dimension"]) != dimension:
                raise InvalidRequestError(
                    f"Embedding dimension mismatch: store uses {row['dimension']}, got {dimension}",
                    stage="insert",
                )

            self._connection.execute(
                """
                INSERT INTO documents(
                    id, namespace, language, raw_content, lexical_text, token_count, embedding, dimension
                )
                VALUES(?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    document_id,
                    namespace,
                    language,
                    content,
                    lexical_text,
                    len(lexical_text.split()),
                    encode_vector(query_array),
                    dimension,
                ),
            )

        return document_id

    def get_document(self, document_id: str, *, namespace: str | None = None) -> DocumentRow | None:
        sql = """
            SELECT id, namespace, language, raw_content, created_at, updated_at
            FROM documents
            WHERE id = ?
        """
        params: tuple[object, ...] = (document_id,)
        if namespace is not None:
            sql += " AND namespace = ?"
            params = (document_id, namespace)

        with self._lock:
            row = self._connection.execute(sql, params).fetchone()
        if row is None:
            return None
        return DocumentRow(
            document_id=row["id"],
            namespace=row["namespace"],
            language=row["language"],
            raw_content=row["raw_content"],
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )

    def delete_by_id(self, document_id: str, *, namespace: str | None = None) -> bool:
        """Delete one document; scoped to *namespace* when given."""

        with self._lock, self._connection:
            if namespace is None:
                cursor = self._connection.execute("DELETE FROM documents WHERE id = ?", (document_id,))
            else:
                cursor = self._connection.execute(
                    "DELETE FROM documents WHERE id = ? AND namespace = ?",
                    (document_id, namespace),
                )
            return int(cursor.rowcount) > 0

    def delete_namespace(self, namespace: str) -> int:
        with self._lock, self._connection:
            cursor = self._connection.execute("DELETE FROM documents WHERE namespace = ?", (namespace,))
            return int(cursor.rowcount)

    def count(self, namespace: str) -> int:
        with self._lock:
            row = self._connection.execute(
                "SELECT COUNT(*) AS total FROM documents WHERE namespace = ?",
                (namespace,),
            ).fetchone()
        return int(row["total"])

    def lexical_scores(self, namespace: str, query_text: str, *, language: str = SIMPLE_PROFILE) -> dict[str, float]:
        with self._lock:
            return score_lexical(self._connection, namespace=namespace, query=query_text, language=language)

    def vector_scores(
        self,
        namespace: str,
        query_vector: np.ndarray | Sequence[float],
        *,
        limit: int | None = None,
    ) -> list[RawScoreRow]:
        """Cosine similarity of every document in *namespace*, best first."""

        if limit is not None and limit <= 0:
            raise InvalidRequestError("limit must be positive", stage="vector_scores")

        with self._lock:
            rows = self._connection.execute(
                """
                SELECT id, namespace, language, raw_content, embedding, dimension, created_at, updated_at
                FROM documents
                WHERE namespace = ?
                ORDER BY seq ASC
                """,
                (namespace,),
            ).fetchall()
        if not rows:
            return []

        dimension = int(rows[0]["dimension"])
        try:
            query = to_query_array(query_vector, dimension=dimension)
        except ValueError as exc:
            raise InvalidRequestError(str(exc), stage="vector_scores") from exc
        matrix = decode_vectors([row["embedding"] for row in rows], dimension=dimension)
        scores = cosine_similarities(matrix, query)

        # stable on insertion order for equal scores
        order = np.argsort(-scores, kind="stable")
        if limit is not None:
            order = order[:limit]

        return [
            RawScoreRow(
                document_id=rows[index]["id"],
                namespace=rows[index]["namespace"],
                language=rows[index]["language"],
                raw_content=rows[index]["raw_content"],
                cosine_sim=float(scores[index]),
                lexical_score=None,
                created_at=rows[index]["created_at"],
                updated_at=rows[index]["updated_at"],
            )
            for index in order.tolist()
        ]

    def raw_scores(
        self,
        namespace: str,
        query_vector: np.ndarray | Sequence[float],
        query_text: str | None = None,
        language: str | None = None,
    ) -> list[RawScoreRow]:
        """Vector scores for the namespace, with lexical scores when *query_text* is given."""

        rows = self.vector_scores(namespace, query_vector)
        if query_text is None:
            return rows

        lexical = self.lexical_scores(namespace, query_text, language=language or SIMPLE_PROFILE)
        for row in rows:
            row.lexical_score = lexical.get(row.document_id, 0.0)
        return rows
