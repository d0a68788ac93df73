"""Lexical profiles: tokenization and stopword rules per document language."""

from __future__ import annotations

import re
import unicodedata

from razdel import tokenize


SIMPLE_PROFILE = "simple"
ENGLISH_PROFILE = "english"
INDONESIAN_PROFILE = "indonesian"

_WORD_RE = re.compile(r"[^\W_]+", re.UNICODE)

_ENGLISH_STOPWORDS = frozenset(
    {
        "a",
        "about",
        "an",
        "and",
        "are",
        "as",
        "at",
        "be",
        "been",
        "but",
        "by",
        "can",
        "do",
        "does",
        "for",
        "from",
        "has",
        "have",
        "how",
        "i",
        "if",
        "in",
        "into",
        "is",
        "it",
        "its",
        "of",
        "on",
        "or",
        "so",
        "that",
        "the",
        "their",
        "then",
        "there",
        "these",
        "this",
        "to",
        "was",
        "we",
        "were",
        "what",
        "when",
        "which",
        "who",
        "will",
        "with",
        "you",
    }
)

_INDONESIAN_STOPWORDS = frozenset(
    {
        "ada",
        "adalah",
        "agar",
        "akan",
        "aku",
        "anda",
        "atau",
        "bagi",
        "bahwa",
        "dalam",
        "dan",
        "dari",
        "dengan",
        "di",
        "dia",
        "ini",
        "itu",
        "jika",
        "juga",
        "kami",
        "karena",
        "ke",
        "kita",
        "lebih",
        "mereka",
        "oleh",
        "pada",
        "saat",
        "sangat",
        "saya",
        "sebagai",
        "secara",
        "sudah",
        "telah",
        "tersebut",
        "untuk",
        "yang",
    }
)

_STOPWORDS: dict[str, frozenset[str]] = {
    SIMPLE_PROFILE: frozenset(),
    ENGLISH_PROFILE: _ENGLISH_STOPWORDS,
    INDONESIAN_PROFILE: _INDONESIAN_STOPWORDS,
}

SUPPORTED_PROFILES = frozenset(_STOPWORDS)


def _fold_diacritics(text: str) -> str:
    decomposed = unicodedata.normalize("NFKD", text)
    return "".join(char for char in decomposed if not unicodedata.combining(char))


def tokenize_text(text: str) -> list[str]:
    """Lowercase alphanumeric tokens with diacritics folded, punctuation dropped.

    Tokens follow the FTS5 ``unicode61`` rules, so a stored token is also
    one FTS5 term.
    """
    tokens: list[str] = []
    for token in tokenize(_fold_diacritics(text.lower())):
        tokens.extend(_WORD_RE.findall(token.text))
    return tokens


def stopwords_for(language: str) -> frozenset[str]:
    try:
        return _STOPWORDS[language]
    except KeyError:
        raise ValueError(f"Unsupported lexical profile: {language}") from None


def normalize_text(text: str, *, language: str = SIMPLE_PROFILE) -> str:
    """Return space-joined lexical tokens for the given profile.

    Parameters
    ----------
    text:
        The raw text to normalize.
    language:
        One of ``'simple'``, ``'english'``, ``'indonesian'``. The ``simple``
        profile keeps every token, the others drop their stopwords.
    """
    stopwords = stopwords_for(language)
    return " ".join(token for token in tokenize_text(text) if token not in stopwords)


def normalize_query(query: str, *, language: str = SIMPLE_PROFILE) -> str:
    """Normalize a search query using the profile's rules."""
    return normalize_text(query, language=language)
