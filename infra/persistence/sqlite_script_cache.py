from __future__ import annotations

import asyncio
import sqlite3
import threading
from datetime import timedelta

from domain.models import CacheEntry
from domain.ports import CacheBackendError, ClockPort

from ._datetime import dt_to_iso, iso_to_dt

CACHE_TTL = timedelta(hours=1)
MEMORY_DB = ":memory:"


class SQLiteScriptCache:
    """
    SQLite-backed implementation of ``ScriptCachePort``.

    Every operation runs in a worker thread so the event loop is never
    blocked. File databases get a fresh connection per operation; an
    in-memory database keeps one shared connection, since its contents live
    only as long as that connection. The schema is created on first use, so
    an unopenable path surfaces as ``CacheBackendError`` from the operation
    rather than from the constructor. Expired rows stay in the table until
    ``purge_expired``.
    """

    _SCHEMA_SQL = """\
    CREATE TABLE IF NOT EXISTS dsl_scripts_cache (
        cache_key      TEXT PRIMARY KEY,
        script_content TEXT NOT NULL,
        html_content   TEXT NOT NULL,
        created_at     TEXT NOT NULL,
        expires_at     TEXT NOT NULL
    );
    CREATE INDEX IF NOT EXISTS idx_dsl_scripts_cache_expires_at
        ON dsl_scripts_cache (expires_at);
    """

    def __init__(
        self,
        db_path: str,
        *,
        clock: ClockPort,
        ttl: timedelta = CACHE_TTL,
        timeout: float = 5.0,
    ) -> None:
        self._db_path = db_path
        self._clock = clock
        self._ttl = ttl
        self._timeout = timeout
        self._schema_ready = False
        self._lock = threading.Lock()
        self._shared_conn: sqlite3.Connection | None = None

    async def get(self, cache_key: str) -> str | None:
        return await asyncio.to_thread(self._run, self._select_script, cache_key)

    async def put(self, cache_key: str, script: str, source_html: str) -> None:
        await asyncio.to_thread(self._run, self._upsert, cache_key, script, source_html)

    async def get_entry(self, cache_key: str) -> CacheEntry | None:
        """Row for ``cache_key`` regardless of expiry."""
        return await asyncio.to_thread(self._run, self._select_entry, cache_key)

    async def purge_expired(self) -> int:
        return await asyncio.to_thread(self._run, self._delete_expired)

    def close(self) -> None:
        with self._lock:
            if self._shared_conn is not None:
                self._shared_conn.close()
                self._shared_conn = None
                self._schema_ready = False

    # -- helpers ------------------------------------------------------------

    def _run(self, operation, *args):
        with self._lock:
            conn = self._connect()
            try:
                with conn:
                    if not self._schema_ready:
                        conn.executescript(self._SCHEMA_SQL)
                        self._schema_ready = True
                    return operation(conn, *args)
            except sqlite3.Error as exc:
                raise CacheBackendError(str(exc)) from exc
            finally:
                if conn is not self._shared_conn:
                    conn.close()

    def _connect(self) -> sqlite3.Connection:
        if self._shared_conn is not None:
            return self._shared_conn
        try:
            conn = sqlite3.connect(self._db_path, timeout=self._timeout, check_same_thread=False)
        except sqlite3.Error as exc:
            raise CacheBackendError(f"cannot open {self._db_path}: {exc}") from exc
        if self._db_path == MEMORY_DB:
            self._shared_conn = conn
        return conn

    def _select_script(self, conn: sqlite3.Connection, cache_key: str) -> str | None:
        row = conn.execute(
            "SELECT script_content FROM dsl_scripts_cache "
            "WHERE cache_key = ? AND expires_at > ?",
            (cache_key, dt_to_iso(self._clock.now())),
        ).fetchone()
        if row is None:
            return None
        return str(row[0])

    def _select_entry(self, conn: sqlite3.Connection, cache_key: str) -> CacheEntry | None:
        row = conn.execute(
            "SELECT cache_key, script_content, html_content, created_at, expires_at "
            "FROM dsl_scripts_cache WHERE cache_key = ?",
            (cache_key,),
        ).fetchone()
        if row is None:
            return None
        return self._row_to_entry(row)

    def _upsert(
        self,
        conn: sqlite3.Connection,
        cache_key: str,
        script: str,
        source_html: str,
    ) -> None:
        now = self._clock.now()
        conn.execute(
            "INSERT INTO dsl_scripts_cache "
            "(cache_key, script_content, html_content, created_at, expires_at) "
            "VALUES (?, ?, ?, ?, ?) "
            "ON CONFLICT(cache_key) DO UPDATE SET "
            "script_content = excluded.script_content, "
            "html_content = excluded.html_content, "
            "created_at = excluded.created_at, "
            "expires_at = excluded.expires_at",
            (cache_key, script, source_html, dt_to_iso(now), dt_to_iso(now + self._ttl)),
        )

    def _delete_expired(self, conn: sqlite3.Connection) -> int:
        cursor = conn.execute(
            "DELETE FROM dsl_scripts_cache WHERE expires_at <= ?",
            (dt_to_iso(self._clock.now()),),
        )
        return cursor.rowcount

    @staticmethod
    def _row_to_entry(row: tuple[object, ...]) -> CacheEntry:
        created_at = iso_to_dt(str(row[3]))
        expires_at = iso_to_dt(str(row[4]))
        assert created_at is not None and expires_at is not None
        return CacheEntry(
            cache_key=str(row[0]),
            script=str(row[1]),
            source_html=str(row[2]),
            created_at=created_at,
            expires_at=expires_at,
        )