"""Runtime configuration for the hydex store and search service."""

from __future__ import annotations

from dataclasses import dataclass
import logging
import os
from pathlib import Path
from typing import Mapping

from hydex.errors import ConfigurationError


DEFAULT_DB_PATH = ".hydex.db"
DEFAULT_TIMEOUT_SECONDS = 30.0
DEFAULT_LOG_LEVEL = "INFO"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


@dataclass(frozen=True, slots=True)
class HydexSettings:
    """Validated settings shared by the client facade and CLI entrypoints."""

    db_path: Path
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    log_level: str = DEFAULT_LOG_LEVEL

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "HydexSettings":
        source: Mapping[str, str] = os.environ if environ is None else environ

        db_path_raw = source.get("HYDEX_DB_PATH", DEFAULT_DB_PATH).strip()
        if not db_path_raw:
            raise ConfigurationError("HYDEX_DB_PATH cannot be empty")

        timeout_raw = source.get("HYDEX_TIMEOUT_SECONDS", str(DEFAULT_TIMEOUT_SECONDS)).strip()
        try:
            timeout_seconds = float(timeout_raw)
        except ValueError as exc:
            raise ConfigurationError(f"HYDEX_TIMEOUT_SECONDS must be a number, got '{timeout_raw}'") from exc
        if timeout_seconds <= 0:
            raise ConfigurationError("HYDEX_TIMEOUT_SECONDS must be positive")

        log_level = source.get("HYDEX_LOG_LEVEL", DEFAULT_LOG_LEVEL).strip().upper() or DEFAULT_LOG_LEVEL
        if not isinstance(logging.getLevelName(log_level), int):
            raise ConfigurationError(f"HYDEX_LOG_LEVEL is not a logging level: {log_level}")

        return cls(db_path=Path(db_path_raw), timeout_seconds=timeout_seconds, log_level=log_level)


def configure_logging(level: str = DEFAULT_LOG_LEVEL) -> None:
    """Send log records to stderr so stdout stays reserved for JSON payloads."""

    logging.basicConfig(format=LOG_FORMAT, level=level)
