"""Namespace and language scoping for every storage read and write."""

from __future__ import annotations

from dataclasses import dataclass
import re

from hydex.errors import InvalidRequestError
from hydex.storage.language_detection import detect_language
from hydex.storage.normalize import (
    ENGLISH_PROFILE,
    INDONESIAN_PROFILE,
    SIMPLE_PROFILE,
)


DEFAULT_NAMESPACE = "default"
NEUTRAL_LANGUAGE = SIMPLE_PROFILE
AUTO_LANGUAGE = "auto"

_NAMESPACE_RE = re.compile(r"[A-Za-z0-9][A-Za-z0-9_.:-]{0,127}")
_LANGUAGE_ALIASES = {
    "simple": SIMPLE_PROFILE,
    "en": ENGLISH_PROFILE,
    "english": ENGLISH_PROFILE,
    "id": INDONESIAN_PROFILE,
    "indonesian": INDONESIAN_PROFILE,
}


def resolve_namespace(namespace: str | None) -> str:
    """Return the validated namespace, or ``"default"`` when omitted."""

    if namespace is None or not namespace.strip():
        return DEFAULT_NAMESPACE

    value = namespace.strip()
    if not _NAMESPACE_RE.fullmatch(value):
        raise InvalidRequestError(
            f"Invalid index name '{value}': use letters, digits, '_', '.', ':' or '-' (max 128 chars)"
        )
    return value


def resolve_language(language: str | None, *, text: str | None = None) -> str:
    """Map a language tag to a lexical profile; ``"auto"`` detects it from *text*."""

    if language is None or not language.strip():
        return NEUTRAL_LANGUAGE

    tag = language.strip().lower()
    if tag == AUTO_LANGUAGE:
        return detect_language(text or "")

    profile = _LANGUAGE_ALIASES.get(tag)
    if profile is None:
        supported = ", ".join(sorted(_LANGUAGE_ALIASES))
        raise InvalidRequestError(f"Unsupported language '{language}'. Supported: {supported}, auto")
    return profile


@dataclass(frozen=True, slots=True)
class NamespaceScope:
    namespace: str
    language: str

    @classmethod
    def resolve(
        cls,
        namespace: str | None,
        language: str | None = None,
        *,
        text: str | None = None,
    ) -> "NamespaceScope":
        return cls(namespace=resolve_namespace(namespace), language=resolve_language(language, text=text))
