"""Infrastructure adapters – concrete implementations of domain ports."""

from .browser import PlaywrightPageFetcher
from .config import FileSystemConfigProvider
from .llm import LLMClientError, OpenAIChatClient
from .persistence import SQLiteScriptCache
from .runtime import StructuredLogger, SystemClock

__all__ = [
    "PlaywrightPageFetcher",
    "FileSystemConfigProvider",
    "LLMClientError",
    "OpenAIChatClient",
    "SQLiteScriptCache",
    "StructuredLogger",
    "SystemClock",
]
