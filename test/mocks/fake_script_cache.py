from __future__ import annotations

from datetime import timedelta

from domain import CacheBackendError, ClockPort, ScriptCachePort


class InMemoryScriptCache:
    """Dict-backed script cache honouring expiry against an injected clock."""

    def __init__(self, clock: ClockPort, ttl: timedelta = timedelta(hours=1)) -> None:
        self._clock = clock
        self._ttl = ttl
        self.rows: dict[str, tuple[str, str, object]] = {}
        self.get_calls = 0
        self.put_calls = 0

    async def get(self, cache_key: str) -> str | None:
        self.get_calls += 1
        row = self.rows.get(cache_key)
        if row is None:
            return None
        script, _html, expires_at = row
        if expires_at <= self._clock.now():  # type: ignore[operator]
            return None
        return script

    async def put(self, cache_key: str, script: str, source_html: str) -> None:
        self.put_calls += 1
        self.rows[cache_key] = (script, source_html, self._clock.now() + self._ttl)

    async def purge_expired(self) -> int:
        now = self._clock.now()
        expired = [k for k, (_s, _h, exp) in self.rows.items() if exp <= now]  # type: ignore[operator]
        for key in expired:
            del self.rows[key]
        return len(expired)


class FlakyScriptCache:
    """Fails the first ``failures`` calls of each operation, then delegates."""

    def __init__(self, inner: ScriptCachePort, *, failures: int) -> None:
        self._inner = inner
        self._get_failures = failures
        self._put_failures = failures
        self.get_attempts = 0
        self.put_attempts = 0

    async def get(self, cache_key: str) -> str | None:
        self.get_attempts += 1
        if self._get_failures > 0:
            self._get_failures -= 1
            raise CacheBackendError("database is locked")
        return await self._inner.get(cache_key)

    async def put(self, cache_key: str, script: str, source_html: str) -> None:
        self.put_attempts += 1
        if self._put_failures > 0:
            self._put_failures -= 1
            raise CacheBackendError("database is locked")
        await self._inner.put(cache_key, script, source_html)
