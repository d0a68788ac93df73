"""Language detection for ``language="auto"`` document and query tags."""

from __future__ import annotations

from functools import lru_cache

from hydex.storage.normalize import ENGLISH_PROFILE, INDONESIAN_PROFILE, SIMPLE_PROFILE


_LINGUA_TO_PROFILE: dict[str, str] = {
    "ENGLISH": ENGLISH_PROFILE,
    "INDONESIAN": INDONESIAN_PROFILE,
}


@lru_cache(maxsize=1)
def _get_detector():
    from lingua import Language, LanguageDetectorBuilder

    return (
        LanguageDetectorBuilder.from_languages(
            Language.ENGLISH,
            Language.INDONESIAN,
        )
        .with_minimum_relative_distance(0.1)
        .build()
    )


def detect_language(text: str, *, sample_chars: int = 3000) -> str:
    """Return the lexical profile name for *text*.

    Uses up to *sample_chars* characters from the start of *text* for
    speed.  Falls back to ``"simple"`` when detection is inconclusive.
    """
    if not text:
        return SIMPLE_PROFILE

    sample = text[:sample_chars].strip()
    if not sample:
        return SIMPLE_PROFILE

    detector = _get_detector()
    result = detector.detect_language_of(sample)
    if result is None:
        return SIMPLE_PROFILE

    return _LINGUA_TO_PROFILE.get(result.name.upper(), SIMPLE_PROFILE)
