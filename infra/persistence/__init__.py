"""SQLite-backed persistence adapters for domain repository ports."""

from .sqlite_script_cache import CACHE_TTL, MEMORY_DB, SQLiteScriptCache

__all__ = [
    "CACHE_TTL",
    "MEMORY_DB",
    "SQLiteScriptCache",
]
