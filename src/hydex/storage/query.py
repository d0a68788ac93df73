"""FTS5 match builder and namespace-scoped BM25 lexical scoring."""

from __future__ import annotations

from collections import Counter
import math
import sqlite3
from typing import Sequence

from hydex.storage.normalize import normalize_query, stopwords_for


BM25_K1 = 1.2
BM25_B = 0.75


def _quoted(value: str) -> str:
    return '"' + value.replace('"', '""') + '"'


def query_terms(query: str, *, language: str) -> list[str]:
    """Distinct query terms after the request profile's normalization, in query order."""

    return list(dict.fromkeys(normalize_query(query, language=language).split()))


def build_match_expression(terms: Sequence[str]) -> str:
    """AND of every term as a quoted FTS5 phrase."""

    if not terms:
        return ""
    return " AND ".join(f"lexical_text:{_quoted(term)}" for term in dict.fromkeys(terms))


def _inverse_document_frequency(total: int, document_frequency: int) -> float:
    # log(1 + x) stays positive for a term present in every document
    return math.log(1.0 + (total - document_frequency + 0.5) / (document_frequency + 0.5))


def _namespace_statistics(connection: sqlite3.Connection, namespace: str) -> tuple[int, float]:
    row = connection.execute(
        """
        SELECT COUNT(*) AS total, COALESCE(AVG(token_count), 0.0) AS average_length
        FROM documents
        WHERE namespace = ?
        """,
        (namespace,),
    ).fetchone()
    return int(row["total"]), float(row["average_length"])


def _document_frequency(connection: sqlite3.Connection, namespace: str, term: str) -> int:
    row = connection.execute(
        """
        SELECT COUNT(*) AS total
        FROM documents_fts
        JOIN documents d ON d.seq = documents_fts.rowid
        WHERE documents_fts MATCH ?
          AND d.namespace = ?
        """,
        (build_match_expression([term]), namespace),
    ).fetchone()
    return int(row["total"])


def _bm25(
    term_counts: Counter[str],
    length: int,
    *,
    terms: Sequence[str],
    idf: dict[str, float],
    average_length: float,
) -> float:
    length_ratio = length / average_length if average_length > 0 else 1.0
    score = 0.0
    for term in terms:
        frequency = term_counts.get(term, 0)
        if frequency == 0:
            continue
        denominator = frequency + BM25_K1 * (1.0 - BM25_B + BM25_B * length_ratio)
        score += idf[term] * frequency * (BM25_K1 + 1.0) / denominator
    return score


def score_lexical(
    connection: sqlite3.Connection,
    *,
    namespace: str,
    query: str,
    language: str,
) -> dict[str, float]:
    """Return ``{document_id: lexical_score}`` for matching documents of one namespace.

    Candidates come from an FTS5 AND-match restricted to the namespace. The
    query keeps the request profile's terms minus each document profile's
    stopwords, since stored text had those removed at insert time.

    Scores are Okapi BM25 whose document count, document frequencies and
    average length are all taken from the namespace alone, so documents in
    other namespaces never change them. Higher is better; documents without
    a match are absent.
    """

    terms = query_terms(query, language=language)
    if not terms:
        return {}

    total, average_length = _namespace_statistics(connection, namespace)
    if total == 0:
        return {}

    profiles = [
        row["language"]
        for row in connection.execute(
            "SELECT DISTINCT language FROM documents WHERE namespace = ? ORDER BY language",
            (namespace,),
        ).fetchall()
    ]

    idf: dict[str, float] = {}
    scores: dict[str, float] = {}
    for profile in profiles:
        stopwords = stopwords_for(profile)
        profile_terms = [term for term in terms if term not in stopwords]
        if not profile_terms:
            continue

        for term in profile_terms:
            if term not in idf:
                idf[term] = _inverse_document_frequency(total, _document_frequency(connection, namespace, term))

        rows = connection.execute(
            """
            SELECT d.id AS document_id, d.lexical_text, d.token_count
            FROM documents_fts
            JOIN documents d ON d.seq = documents_fts.rowid
            WHERE documents_fts MATCH ?
              AND d.namespace = ?
              AND d.language = ?
            ORDER BY d.seq ASC
            """,
            (build_match_expression(profile_terms), namespace, profile),
        ).fetchall()

        for row in rows:
            score = _bm25(
                Counter(row["lexical_text"].split()),
                int(row["token_count"]),
                terms=profile_terms,
                idf=idf,
                average_length=average_length,
            )
            scores[row["document_id"]] = max(0.0, score)

    return scores
