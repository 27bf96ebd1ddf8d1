# src/resolver/gate.py — v1
"""Deduplicating request gate.

Guarantees at most one outstanding resolution per cache key and a minimum
spacing between new resolutions for the same origin.

Decision order for ``acquire``:
  1. IN_FLIGHT    — a resolution for this cache key is running; share it.
  2. RATE_LIMITED — the origin was hit less than ``min_interval_ms`` ago;
                    the caller answers immediately with a fallback.
  3. PROCEED      — a future is registered for the key and the origin is
                    stamped before ``acquire`` returns.

``acquire`` is synchronous: check and register happen without yielding to
the event loop, so two callers can never both observe "no entry" and both
proceed.
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class GateState(str, Enum):
    IN_FLIGHT = "in_flight"
    RATE_LIMITED = "rate_limited"
    PROCEED = "proceed"


@dataclass
class GateDecision:
    """Outcome of ``RequestGate.acquire``.

    ``future`` is the shared pending result for IN_FLIGHT and PROCEED and
    None for RATE_LIMITED.
    """

    state: GateState
    future: asyncio.Future | None = None


class RequestGate:
    """Process-local in-flight map plus per-origin rate-limit timestamps."""

    def __init__(
        self,
        min_interval_ms: int = 1000,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._min_interval_s = min_interval_ms / 1000.0
        self._clock = clock
        self._in_flight: dict[str, asyncio.Future] = {}
        self._last_request: dict[str, float] = {}

    @property
    def in_flight_keys(self) -> list[str]:
        return list(self._in_flight)

    @property
    def tracked_origins(self) -> list[str]:
        return list(self._last_request)

    def acquire(self, cache_key: str, origin: str) -> GateDecision:
        """Check-and-register for one lookup."""
        existing = self._in_flight.get(cache_key)
        if existing is not None:
            return GateDecision(GateState.IN_FLIGHT, existing)

        now = self._clock()
        self._prune(now)
        last = self._last_request.get(origin)
        if last is not None and now - last < self._min_interval_s:
            logger.debug("Rate limited %s (%.0fms since last)", origin, (now - last) * 1000)
            return GateDecision(GateState.RATE_LIMITED)

        future = asyncio.get_running_loop().create_future()
        self._in_flight[cache_key] = future
        self._last_request[origin] = now
        return GateDecision(GateState.PROCEED, future)

    def release(self, cache_key: str, future: asyncio.Future) -> None:
        """Drop the in-flight entry if it still belongs to ``future``."""
        if self._in_flight.get(cache_key) is future:
            del self._in_flight[cache_key]

    async def run(
        self,
        cache_key: str,
        origin: str,
        resolve: Callable[[], Awaitable[T]],
        on_rate_limited: Callable[[], T],
    ) -> T:
        """Resolve through the gate.

        The resolution runs as its own task; callers await a shielded view
        of the shared future, so a cancelled caller never cancels work other
        callers are waiting on.
        """
        decision = self.acquire(cache_key, origin)
        future = decision.future
        if future is None:
            return on_rate_limited()

        if decision.state is GateState.PROCEED:
            task = asyncio.ensure_future(resolve())
            task.add_done_callback(lambda t: self._settle(cache_key, future, t))
        return await asyncio.shield(future)

    def reset(self) -> None:
        """Forget all in-flight and rate-limit state."""
        self._in_flight.clear()
        self._last_request.clear()

    def _settle(
        self, cache_key: str, future: asyncio.Future, task: asyncio.Task[Any]
    ) -> None:
        self.release(cache_key, future)
        if future.done():
            return
        if task.cancelled():
            future.cancel()
            return
        error = task.exception()
        if error is not None:
            future.set_exception(error)
        else:
            future.set_result(task.result())

    def _prune(self, now: float) -> None:
        """Drop timestamps that can no longer rate-limit anything."""
        stale = [
            origin
            for origin, stamp in self._last_request.items()
            if now - stamp >= self._min_interval_s
        ]
        for origin in stale:
            del self._last_request[origin]
