"""Retry policy shared by the HTTP collaborator clients."""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, TypeVar


_RETRYABLE_STATUS_CODES = {429, 500, 502, 503, 504}

T = TypeVar("T")

logger = logging.getLogger(__name__)


def status_code_of(exc: BaseException) -> int | None:
    status_code = getattr(exc, "status_code", None)
    if status_code is None:
        response = getattr(exc, "response", None)
        status_code = getattr(response, "status_code", None)
    return status_code if isinstance(status_code, int) else None


def is_retryable(exc: BaseException) -> bool:
    if status_code_of(exc) in _RETRYABLE_STATUS_CODES:
        return True

    if isinstance(exc, (TimeoutError, ConnectionError)):
        return True

    return type(exc).__name__ in {
        "RateLimitError",
        "APITimeoutError",
        "APIConnectionError",
        "InternalServerError",
        "ConnectTimeout",
        "ReadTimeout",
        "WriteTimeout",
        "PoolTimeout",
        "ConnectError",
        "RemoteProtocolError",
    }


async def call_with_retries(
    operation: Callable[[], Awaitable[T]],
    *,
    max_retries: int,
    retry_base_seconds: float,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    description: str = "request",
) -> T:
    """Await *operation*, retrying transient failures with exponential backoff.

    The last error is re-raised unchanged once attempts run out or the error
    is not transient.
    """

    attempt = 0
    while True:
        try:
            return await operation()
        except Exception as exc:
            if attempt >= max_retries or not is_retryable(exc):
                raise
            delay = retry_base_seconds * (2**attempt)
            logger.warning("%s failed (attempt %d), retrying in %.2fs: %s", description, attempt + 1, delay, exc)
            await sleep(delay)
            attempt += 1
