from __future__ import annotations

import asyncio
from datetime import datetime, timedelta, timezone

import pytest

from app import DslFacade
from domain.services import BASIC_NAVIGATION_SCRIPT, ScriptOrchestrator, ScriptSynthesizer
from test.fixtures import page_html
from test.mocks import FakePageFetcher, FixedClock, InMemoryLogger, InMemoryScriptCache

LOGIN_DATA = {"username": "john.doe", "password": "secret123"}


def _facade(*, pages: dict[str, str] | None = None, backend: InMemoryScriptCache | None = None) -> DslFacade:
    logger = InMemoryLogger()
    orchestrator = ScriptOrchestrator(synthesizer=ScriptSynthesizer(logger=logger), logger=logger)
    fetcher = FakePageFetcher(pages) if pages is not None else None
    return DslFacade(orchestrator=orchestrator, cache_backend=backend, page_fetcher=fetcher)


def test_generate_returns_script_payload() -> None:
    response = asyncio.run(_facade().generate({"html": page_html("login.html"), "user_data": LOGIN_DATA}))
    assert set(response) == {"script"}
    assert 'click "#submit"' in response["script"]


@pytest.mark.parametrize("payload", [None, [], {"html": None}, {"user_data": LOGIN_DATA}])
def test_generate_tolerates_malformed_payloads(payload: object) -> None:
    assert asyncio.run(_facade().generate(payload)) == {"script": BASIC_NAVIGATION_SCRIPT}


def test_generate_for_url_fetches_page_first() -> None:
    facade = _facade(pages={"https://jobs.example/login": page_html("login.html")})
    response = asyncio.run(facade.generate_for_url("https://jobs.example/login", LOGIN_DATA))
    assert 'type "#username" "john.doe"' in response["script"]


def test_generate_for_url_requires_fetcher() -> None:
    with pytest.raises(RuntimeError):
        asyncio.run(_facade().generate_for_url("https://jobs.example/login"))


def test_check_script_reports_errors() -> None:
    report = DslFacade.check_script('wait 1\nclik "#a"')
    assert not report.valid
    assert report.errors == ["line 2: unknown command 'clik'"]
    assert DslFacade.check_script(BASIC_NAVIGATION_SCRIPT).valid


def test_purge_expired_cache() -> None:
    clock = FixedClock(datetime(2025, 1, 1, tzinfo=timezone.utc))
    backend = InMemoryScriptCache(clock)
    asyncio.run(backend.put("dsl_old", "wait 1", "<form>"))
    clock.advance(timedelta(hours=2))
    asyncio.run(backend.put("dsl_new", "wait 1", "<form>"))

    assert asyncio.run(_facade(backend=backend).purge_expired_cache()) == 1
    assert set(backend.rows) == {"dsl_new"}
    assert asyncio.run(_facade().purge_expired_cache()) == 0
