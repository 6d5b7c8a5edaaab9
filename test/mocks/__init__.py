"""
Reusable fakes and in-memory implementations for tests.
"""

from .fake_page_fetcher import FakePageFetcher
from .fake_runtime import FixedClock, InMemoryLogger
from .fake_script_cache import FlakyScriptCache, InMemoryScriptCache
from .scripted_llm_client import ScriptedLLMClient

__all__ = [
    "FakePageFetcher",
    "FixedClock",
    "InMemoryLogger",
    "InMemoryScriptCache",
    "FlakyScriptCache",
    "ScriptedLLMClient",
]
