from __future__ import annotations

import asyncio
from typing import Awaitable, Callable

from domain.ports import LoggerPort, ScriptCachePort
from domain.services.retry import SleepFn, linear_backoff, retry_async
from domain.services.validation import validate_script

CACHE_ATTEMPTS = 3


class ScriptCache:
    """
    Cache-aside front for a ``ScriptCachePort`` backend.

    Transient backend errors are retried with linear backoff. Once the
    attempts are used up a read degrades to a miss and a write to a no-op;
    neither ever raises to the caller.
    """

    def __init__(
        self,
        backend: ScriptCachePort,
        *,
        logger: LoggerPort,
        attempts: int = CACHE_ATTEMPTS,
        backoff: Callable[[int], float] = linear_backoff(0.1),
        sleep: SleepFn = asyncio.sleep,
    ) -> None:
        self._backend = backend
        self._logger = logger
        self._attempts = attempts
        self._backoff = backoff
        self._sleep = sleep

    async def get(self, cache_key: str) -> str | None:
        try:
            script = await self._retry(lambda: self._backend.get(cache_key), "cache_get")
        except Exception as exc:
            self._logger.error("Cache read failed, treating as miss", cache_key=cache_key, error=str(exc))
            return None
        if script is None:
            self._logger.info("Cache miss", cache_key=cache_key)
        else:
            self._logger.info("Cache hit", cache_key=cache_key)
        return script

    async def put(self, cache_key: str, script: str, source_html: str) -> bool:
        """Store ``script``; returns whether it was persisted."""
        if not validate_script(script):
            self._logger.info("Script not cacheable, skipping write", cache_key=cache_key)
            return False
        try:
            await self._retry(
                lambda: self._backend.put(cache_key, script, source_html),
                "cache_put",
            )
        except Exception as exc:
            self._logger.error("Cache write failed, continuing without cache", cache_key=cache_key, error=str(exc))
            return False
        return True

    def _retry(self, operation: Callable[[], Awaitable], name: str) -> Awaitable:
        return retry_async(
            operation,
            attempts=self._attempts,
            backoff=self._backoff,
            sleep=self._sleep,
            logger=self._logger,
            operation_name=name,
        )
