from __future__ import annotations

import os
from datetime import datetime, timezone
from typing import Generator

import pytest

from infra.persistence import SQLiteScriptCache
from test.mocks import FixedClock


@pytest.fixture()
def clock() -> FixedClock:
    return FixedClock(datetime(2025, 6, 1, 9, 30, tzinfo=timezone.utc))


@pytest.fixture()
def sqlite_cache(tmp_path: str, clock: FixedClock) -> Generator[SQLiteScriptCache, None, None]:
    """A script cache backed by a fresh SQLite file."""
    yield SQLiteScriptCache(os.path.join(tmp_path, "dsl_cache.db"), clock=clock)
