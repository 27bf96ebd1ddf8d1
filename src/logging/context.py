# src/logging/context.py — v1
"""Contextual logging support — attach resource kind and cache key to log records.

Each lookup runs in its own asyncio task, which copies the current context,
so values set during one resolution never leak into a sibling lookup.
"""

from __future__ import annotations

import contextvars
from dataclasses import dataclass
from typing import Any

_resource_kind: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "resource_kind", default=None
)
_cache_key: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "cache_key", default=None
)
_source: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "source", default=None
)


@dataclass
class LogContext:
    """Immutable snapshot of current logging context."""

    resource_kind: str | None = None
    cache_key: str | None = None
    source: str | None = None

    def as_dict(self) -> dict[str, Any]:
        """Return non-None fields as dict for JSON log injection."""
        return {k: v for k, v in self.__dict__.items() if v is not None}


def get_context() -> LogContext:
    """Snapshot current context variables."""
    return LogContext(
        resource_kind=_resource_kind.get(),
        cache_key=_cache_key.get(),
        source=_source.get(),
    )


def set_lookup_context(resource_kind: str, cache_key: str) -> None:
    """Set lookup-level context (called once per resolution)."""
    _resource_kind.set(resource_kind)
    _cache_key.set(cache_key)
    _source.set(None)


def set_source_context(source: str | None) -> None:
    """Set the source strategy currently being attempted."""
    _source.set(source)


def clear_context() -> None:
    """Reset all context variables."""
    _resource_kind.set(None)
    _cache_key.set(None)
    _source.set(None)
