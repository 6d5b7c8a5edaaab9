from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from domain.models import DslRequest, DslResponse
from domain.ports import CacheMaintenancePort, PageFetcherPort
from domain.services import ScriptOrchestrator, check_dsl_syntax


@dataclass(frozen=True)
class SyntaxReport:
    valid: bool
    errors: list[str]


class DslFacade:
    """
    Request/response boundary in front of the orchestrator.

    Accepts the ``{"html": ..., "user_data": ...}`` payload and answers with
    ``{"script": ...}``; malformed payloads are tolerated.
    """

    def __init__(
        self,
        *,
        orchestrator: ScriptOrchestrator,
        cache_backend: CacheMaintenancePort | None = None,
        page_fetcher: PageFetcherPort | None = None,
    ) -> None:
        self._orchestrator = orchestrator
        self._cache_backend = cache_backend
        self._page_fetcher = page_fetcher

    async def generate(self, payload: Any) -> dict[str, str]:
        request = DslRequest.from_payload(payload)
        script = await self._orchestrator.synthesize(request.html, request.user_data)
        return DslResponse(script=script).to_payload()

    async def generate_for_url(self, url: str, user_data: Any = None) -> dict[str, str]:
        if self._page_fetcher is None:
            raise RuntimeError("No page fetcher configured")
        html = await self._page_fetcher.fetch_html(url)
        return await self.generate({"html": html, "user_data": user_data})

    @staticmethod
    def check_script(script: str) -> SyntaxReport:
        errors = check_dsl_syntax(script)
        return SyntaxReport(valid=not errors, errors=errors)

    async def purge_expired_cache(self) -> int:
        if self._cache_backend is None:
            return 0
        return await self._cache_backend.purge_expired()
