# src/core/errors.py — v1
"""Exception hierarchy for the resource cache layer.

Only InvalidInputError and ResourceUnavailableError ever reach callers;
SourceError is internal to the source chain and always recovered there.
"""

from __future__ import annotations


class MarkMediaError(Exception):
    """Base class for all markmedia errors."""


class InvalidInputError(MarkMediaError, ValueError):
    """Lookup key is unusable even after normalization."""

    def __init__(self, raw: str, reason: str) -> None:
        self.raw = raw
        self.reason = reason
        super().__init__(f"Invalid lookup key {raw!r}: {reason}")


class SourceError(MarkMediaError):
    """One source strategy failed to produce a deliverable image."""

    def __init__(self, source: str, reason: str) -> None:
        self.source = source
        self.reason = reason
        super().__init__(f"Source '{source}' failed: {reason}")


class AttemptTimeoutError(SourceError):
    """A source attempt did not settle within its timeout window."""

    def __init__(self, source: str, timeout_ms: int) -> None:
        self.timeout_ms = timeout_ms
        super().__init__(source, f"timed out after {timeout_ms}ms")


class ResourceUnavailableError(MarkMediaError):
    """Every source failed and the caller disabled the generic fallback."""

    def __init__(self, lookup_key: str) -> None:
        self.lookup_key = lookup_key
        super().__init__(f"No favicon found for domain: {lookup_key}")
