"""Output helpers shared by the CLI entrypoints."""

from __future__ import annotations

import json

from hydex.errors import HydexError


def print_json(payload: dict[str, object]) -> None:
    print(json.dumps(payload, ensure_ascii=True, indent=2))


def report_error(exc: HydexError | str, **context: object) -> int:
    if isinstance(exc, HydexError):
        payload: dict[str, object] = {"error": exc.message, "kind": type(exc).__name__, "stage": exc.stage}
    else:
        payload = {"error": exc}
    payload.update(context)
    print_json(payload)
    return 2
