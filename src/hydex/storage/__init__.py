"""SQLite document storage with FTS5 lexical scoring and cosine vector scoring."""

from .repository import DocumentRepository, DocumentRow, RawScoreRow, StoreState

__all__ = ["DocumentRepository", "DocumentRow", "RawScoreRow", "StoreState"]
