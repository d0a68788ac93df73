"""Typed failures raised by the scoring pipeline and its collaborators."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True, eq=False)
class HydexError(RuntimeError):
    """Base error; ``stage`` names the pipeline step that failed."""

    message: str
    stage: str | None = None

    def __str__(self) -> str:
        if self.stage:
            return f"{self.message} (stage={self.stage})"
        return self.message


@dataclass(slots=True, eq=False)
class ConfigurationError(HydexError):
    """A collaborator is missing a required credential or setting."""


@dataclass(slots=True, eq=False)
class EmbeddingUnavailable(ConfigurationError):
    pass


@dataclass(slots=True, eq=False)
class RerankUnavailable(ConfigurationError):
    pass


@dataclass(slots=True, eq=False)
class CollaboratorUnavailable(HydexError):
    """Network failure, timeout or 5xx/429 reply from an external service."""

    status_code: int | None = None


@dataclass(slots=True, eq=False)
class EmbeddingProviderError(CollaboratorUnavailable):
    pass


@dataclass(slots=True, eq=False)
class RerankProviderError(CollaboratorUnavailable):
    pass


@dataclass(slots=True, eq=False)
class CollaboratorTimeout(CollaboratorUnavailable):
    timeout_seconds: float | None = None


@dataclass(slots=True, eq=False)
class MalformedResponse(HydexError):
    """A collaborator answered with a payload that violates its contract."""


@dataclass(slots=True, eq=False)
class InvalidRequestError(HydexError):
    """Caller input failed validation (namespace, limits, weights, ...)."""
