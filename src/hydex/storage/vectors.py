"""Embedding serialization and cosine scoring over stored vectors."""

from __future__ import annotations

from typing import Sequence

import numpy as np


def to_query_array(query_vector: np.ndarray | Sequence[float], *, dimension: int | None = None) -> np.ndarray:
    array = np.asarray(query_vector, dtype=np.float32)
    if array.ndim != 1:
        raise ValueError("query_vector must be a 1D array")
    if array.shape[0] == 0:
        raise ValueError("query_vector cannot be empty")
    if dimension is not None and array.shape[0] != dimension:
        raise ValueError(f"query dimension mismatch: expected {dimension}, got {array.shape[0]}")
    return np.ascontiguousarray(array)


def encode_vector(vector: np.ndarray | Sequence[float]) -> bytes:
    return to_query_array(vector).tobytes()


def decode_vectors(blobs: Sequence[bytes], *, dimension: int) -> np.ndarray:
    if not blobs:
        return np.empty((0, dimension), dtype=np.float32)
    matrix = np.frombuffer(b"".join(blobs), dtype=np.float32)
    return matrix.reshape(len(blobs), dimension)


def cosine_similarities(matrix: np.ndarray, query_vector: np.ndarray) -> np.ndarray:
    """Cosine similarity of every row against the query; zero-norm rows score 0."""

    if matrix.shape[0] == 0:
        return np.empty(0, dtype=np.float32)

    row_norms = np.linalg.norm(matrix, axis=1)
    query_norm = float(np.linalg.norm(query_vector))
    denominators = row_norms * query_norm
    dots = matrix @ query_vector
    scores = np.zeros_like(dots)
    np.divide(dots, denominators, out=scores, where=denominators > 0)
    return scores
