# src/resolver/bulk.py — v1
"""Concurrent fan-out with per-item isolation.

A key whose lookup raises is logged and left out of the result map; it never
aborts its siblings. Callers must read a missing entry as "unresolved", which
is different from a present entry with ``source == "fallback"``.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Iterable, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def resolve_many(
    keys: Iterable[str],
    resolve_one: Callable[[str], Awaitable[T]],
) -> dict[str, T]:
    """Resolve every key concurrently.

    Duplicate keys are resolved once. Result order follows first appearance.
    """
    unique = list(dict.fromkeys(keys))
    if not unique:
        return {}

    outcomes = await asyncio.gather(
        *(resolve_one(key) for key in unique), return_exceptions=True
    )

    results: dict[str, T] = {}
    failed = 0
    for key, outcome in zip(unique, outcomes):
        if isinstance(outcome, BaseException):
            failed += 1
            logger.warning("Failed to process %s: %s", key, outcome)
            continue
        results[key] = outcome

    logger.info(
        "Bulk complete: %d/%d resolved, %d failed",
        len(results), len(unique), failed,
    )
    return results
