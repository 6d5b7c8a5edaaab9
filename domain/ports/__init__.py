from __future__ import annotations

from abc import abstractmethod
from datetime import datetime
from typing import Any, Protocol, runtime_checkable


class CacheBackendError(Exception):
    """Transient failure of a script cache backend; safe to retry."""


@runtime_checkable
class ScriptCachePort(Protocol):
    """
    Key -> script store with expiry.

    ``get`` returns only non-expired scripts. ``put`` upserts and resets the
    expiry. Implementations raise ``CacheBackendError`` on I/O failure.
    """

    @abstractmethod
    async def get(self, cache_key: str) -> str | None:
        ...

    @abstractmethod
    async def put(self, cache_key: str, script: str, source_html: str) -> None:
        ...


@runtime_checkable
class CacheMaintenancePort(Protocol):
    """Housekeeping for a cache backend whose expired rows linger."""

    async def purge_expired(self) -> int:
        ...


@runtime_checkable
class LLMClientPort(Protocol):
    """Thin abstraction over an LLM text completion API."""

    async def complete(
        self,
        prompt: str,
        *,
        max_tokens: int | None = None,
        temperature: float | None = None,
    ) -> str:
        ...


@runtime_checkable
class PageFetcherPort(Protocol):
    """Returns the raw markup of a page, as rendered by a browser."""

    async def fetch_html(self, url: str) -> str:
        ...


@runtime_checkable
class ClockPort(Protocol):
    """Time source for deterministic and easily testable code."""

    def now(self) -> datetime:
        ...


@runtime_checkable
class LoggerPort(Protocol):
    """Structured, testable logging abstraction."""

    def info(self, message: str, **fields: Any) -> None:
        ...

    def warning(self, message: str, **fields: Any) -> None:
        ...

    def error(self, message: str, **fields: Any) -> None:
        ...


__all__ = [
    "CacheBackendError",
    "ScriptCachePort",
    "CacheMaintenancePort",
    "LLMClientPort",
    "PageFetcherPort",
    "ClockPort",
    "LoggerPort",
]
