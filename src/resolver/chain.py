# src/resolver/chain.py — v1
"""Source chain resolver.

Strategies run strictly in declared order; provider order is quality order.
Each attempt (fetch + validation) races the caller's timeout on its own, so
one slow provider costs at most one timeout window before the chain moves
on. The first validated candidate wins; the remaining sources are never
invoked. Exhaustion returns None and the caller falls back.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Sequence, TypeVar

from markmedia.core.errors import AttemptTimeoutError, SourceError
from markmedia.core.models import ChainOutcome, NormalizedKey
from markmedia.http.client import HttpClient
from markmedia.logging.context import set_source_context
from markmedia.sources.base_source import BaseSource

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def race_timeout(aw: Awaitable[T], timeout_ms: int, source: str) -> T:
    """First of (attempt, timer).

    The losing attempt is not cancelled: it keeps running and its eventual
    result or error is discarded.

    Raises:
        AttemptTimeoutError: If the attempt has not settled in time.
    """
    task = asyncio.ensure_future(aw)
    done, _ = await asyncio.wait({task}, timeout=timeout_ms / 1000.0)
    if task not in done:
        task.add_done_callback(_discard_result)
        raise AttemptTimeoutError(source, timeout_ms)
    return task.result()


def _discard_result(task: asyncio.Future) -> None:
    if not task.cancelled():
        task.exception()


class SourceChainResolver:
    """Ordered, short-circuiting list of source strategies."""

    def __init__(self, sources: Sequence[BaseSource], http: HttpClient) -> None:
        self._sources = list(sources)
        self._http = http

    @property
    def sources(self) -> list[BaseSource]:
        return list(self._sources)

    @property
    def enabled_sources(self) -> list[str]:
        return [s.name for s in self._sources if s.enabled]

    async def resolve(
        self, key: NormalizedKey, options: Any, timeout_ms: int
    ) -> ChainOutcome | None:
        """Try each enabled source in order until one validates.

        Returns:
            The first validated outcome, or None when every source failed.
        """
        for index, source in enumerate(self._sources):
            if not source.enabled:
                logger.debug("Skipping disabled source %s", source.name)
                continue

            set_source_context(source.name)
            try:
                url = await race_timeout(
                    self._attempt(source, key, options, timeout_ms),
                    timeout_ms,
                    source.name,
                )
            except SourceError as e:
                logger.warning(
                    "Source %d (%s) failed for %s: %s",
                    index, source.name, key.value, e.reason,
                )
                continue
            except Exception as e:
                logger.warning(
                    "Source %d (%s) raised for %s: %s",
                    index, source.name, key.value, e,
                )
                continue
            finally:
                set_source_context(None)

            logger.info("Resolved %s via %s", key.value, source.name)
            return ChainOutcome(url=url, source=source.name)

        logger.info("Source chain exhausted for %s", key.value)
        return None

    async def _attempt(
        self, source: BaseSource, key: NormalizedKey, options: Any, timeout_ms: int
    ) -> str:
        candidate = await source.fetch(key, options)
        if not candidate:
            raise SourceError(source.name, "empty candidate")
        if source.prevalidated or candidate.startswith("data:image/"):
            return candidate
        if not await self._http.is_image(candidate, timeout_ms):
            raise SourceError(source.name, f"candidate is not an image: {candidate}")
        return candidate
