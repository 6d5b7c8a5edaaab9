from __future__ import annotations

import asyncio
from typing import Any

from domain.models import UserProfile
from domain.ports import LoggerPort
from domain.services.cache_key import derive_cache_key
from domain.services.script_cache import ScriptCache
from domain.services.script_synthesizer import (
    BASIC_NAVIGATION_SCRIPT,
    EMERGENCY_FALLBACK_SCRIPT,
    ScriptSynthesizer,
)
from domain.services.validation import validate_script


class ScriptOrchestrator:
    """
    Produces a DSL script for a page and a user.

    Never raises and never returns an empty script: failures degrade to the
    basic navigation or emergency fallback scripts. Concurrent calls that
    miss the cache with the same key share one synthesis run.
    """

    def __init__(
        self,
        *,
        synthesizer: ScriptSynthesizer,
        logger: LoggerPort,
        cache: ScriptCache | None = None,
    ) -> None:
        self._synthesizer = synthesizer
        self._logger = logger
        self._cache = cache
        self._in_flight: dict[str, asyncio.Future[str]] = {}

    async def synthesize(self, html: Any, user_data: Any = None) -> str:
        if not isinstance(html, str) or not html.strip():
            self._logger.info("Blank HTML, using basic navigation")
            return BASIC_NAVIGATION_SCRIPT

        profile = user_data if isinstance(user_data, UserProfile) else UserProfile.from_user_data(user_data)
        cache_key = derive_cache_key(html, profile)

        if self._cache is not None:
            cached = await self._cache.get(cache_key)
            if cached is not None:
                return cached

        pending = self._in_flight.get(cache_key)
        if pending is None:
            pending = asyncio.ensure_future(self._generate(cache_key, html, profile))
            self._in_flight[cache_key] = pending
            pending.add_done_callback(lambda done: self._forget(cache_key, done))
        else:
            self._logger.info("Joining in-flight synthesis", cache_key=cache_key)
        return await asyncio.shield(pending)

    async def _generate(self, cache_key: str, html: str, profile: UserProfile) -> str:
        try:
            result = await self._synthesizer.synthesize(html, profile)
        except Exception as exc:
            self._logger.error(
                "Script synthesis failed, using emergency fallback",
                cache_key=cache_key,
                error=f"{type(exc).__name__}: {exc}",
            )
            return EMERGENCY_FALLBACK_SCRIPT

        script = result.script if result.script.strip() else BASIC_NAVIGATION_SCRIPT

        if self._cache is not None and validate_script(script):
            await self._cache.put(cache_key, script, html)
        return script

    def _forget(self, cache_key: str, done: asyncio.Future[str]) -> None:
        if self._in_flight.get(cache_key) is done:
            del self._in_flight[cache_key]
