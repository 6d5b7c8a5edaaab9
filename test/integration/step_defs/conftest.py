"""Shared step definitions for the script synthesis and caching scenarios."""

from __future__ import annotations

import asyncio
import sqlite3
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any

import pytest
from pytest_bdd import given, parsers, then, when

from domain.models import UserProfile
from domain.services import (
    BASIC_NAVIGATION_SCRIPT,
    ScriptCache,
    ScriptOrchestrator,
    ScriptSynthesizer,
    check_dsl_syntax,
    derive_cache_key,
)
from infra.llm import LLMClientError
from infra.persistence import SQLiteScriptCache
from test.fixtures import page_html
from test.mocks import FixedClock, InMemoryLogger, ScriptedLLMClient


async def _no_sleep(_delay: float) -> None:
    return None


@dataclass
class DslWorld:
    db_path: str
    clock: FixedClock
    logger: InMemoryLogger = field(default_factory=InMemoryLogger)
    html: str = ""
    user_data: Any = None
    llm: ScriptedLLMClient | None = None
    backend: SQLiteScriptCache | None = None
    orchestrator: ScriptOrchestrator | None = None
    script: str = ""
    expected_lines: list[str] = field(default_factory=list)

    def cache_backend(self) -> SQLiteScriptCache:
        if self.backend is None:
            self.backend = SQLiteScriptCache(self.db_path, clock=self.clock)
        return self.backend

    def request_script(self) -> str:
        if self.orchestrator is None:
            self.orchestrator = ScriptOrchestrator(
                synthesizer=ScriptSynthesizer(logger=self.logger, llm=self.llm),
                logger=self.logger,
                cache=ScriptCache(self.cache_backend(), logger=self.logger, sleep=_no_sleep),
            )
        self.script = asyncio.run(self.orchestrator.synthesize(self.html, self.user_data))
        return self.script


@pytest.fixture()
def world(tmp_path: Path) -> DslWorld:
    return DslWorld(
        db_path=str(tmp_path / "dsl_cache.db"),
        clock=FixedClock(datetime(2025, 6, 1, 9, 0, tzinfo=timezone.utc)),
    )


# -- given ------------------------------------------------------------------


@given(parsers.parse('the page "{name}"'))
def given_page(world: DslWorld, name: str) -> None:
    world.html = page_html(name)


@given("a blank page")
def given_blank_page(world: DslWorld) -> None:
    world.html = "   \n"


@given(parsers.parse('the user "{username}" with password "{password}"'))
def given_login_user(world: DslWorld, username: str, password: str) -> None:
    world.user_data = {"username": username, "password": password}


@given(parsers.parse('the user with email "{email}"'))
def given_email_user(world: DslWorld, email: str) -> None:
    world.user_data = {"email": email}


@given("no user data")
def given_no_user_data(world: DslWorld) -> None:
    world.user_data = None


@given(parsers.parse("a language model that replies '{reply}'"))
def given_llm_reply(world: DslWorld, reply: str) -> None:
    world.llm = ScriptedLLMClient(reply)


@given("a language model that is unavailable")
def given_llm_down(world: DslWorld) -> None:
    world.llm = ScriptedLLMClient(error=LLMClientError("LLM API unreachable: timed out"))


@given("the cache database is broken")
def given_broken_cache(world: DslWorld) -> None:
    asyncio.run(world.cache_backend().purge_expired())
    conn = sqlite3.connect(world.db_path)
    try:
        conn.execute("DROP TABLE dsl_scripts_cache")
        conn.commit()
    finally:
        conn.close()


# -- when -------------------------------------------------------------------


@when("a script is requested")
def when_script_requested(world: DslWorld) -> None:
    world.request_script()


@when(parsers.parse('the user "{username}" with password "{password}" requests a script'))
def when_other_user_requests(world: DslWorld, username: str, password: str) -> None:
    world.user_data = {"username": username, "password": password}
    world.request_script()


@when(parsers.parse("the cached script is replaced with '{script}'"))
def when_cache_replaced(world: DslWorld, script: str) -> None:
    key = derive_cache_key(world.html, UserProfile.from_user_data(world.user_data))
    asyncio.run(world.cache_backend().put(key, script, world.html))


@when(parsers.parse("{minutes:d} minutes pass"))
def when_time_passes(world: DslWorld, minutes: int) -> None:
    world.clock.advance(timedelta(minutes=minutes))


# -- then -------------------------------------------------------------------


@then(parsers.parse("the script contains the line '{line}'"))
def then_contains_line(world: DslWorld, line: str) -> None:
    assert line in world.script.splitlines(), f"{line!r} not in:\n{world.script}"
    world.expected_lines.append(line)


@then("those lines appear in that order")
def then_lines_in_order(world: DslWorld) -> None:
    lines = world.script.splitlines()
    positions = [lines.index(line) for line in world.expected_lines]
    assert positions == sorted(positions)


@then("the script follows the DSL grammar")
def then_follows_grammar(world: DslWorld) -> None:
    assert check_dsl_syntax(world.script) == []


@then("the script is the basic navigation fallback")
def then_basic_navigation(world: DslWorld) -> None:
    assert world.script == BASIC_NAVIGATION_SCRIPT


@then(parsers.parse("the script is exactly '{script}'"))
def then_script_exactly(world: DslWorld, script: str) -> None:
    assert world.script == script


@then("a cache error was logged")
def then_cache_error_logged(world: DslWorld) -> None:
    assert "Cache read failed, treating as miss" in world.logger.messages("error")
