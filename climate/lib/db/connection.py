"""SQLite access for the reading store, built on aiosqlite.

get_db() hands out a Database in one of two ways. The standalone ingestion
process calls init_db() at startup and then every get_db() shares that one
long-lived connection. The web server never calls init_db(): each get_db()
borrows a connection from a pool bounded by DB_POOL_SIZE and gives it back
afterwards. close_db() tears down whichever is open.

Rows come back as plain dicts keyed by column name. SQL lives in
climate/lib/sql and is read once per template.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator, Sequence
from contextlib import asynccontextmanager
from functools import cache
from pathlib import Path
from typing import Any, cast

import aiosqlite

from climate.lib.config import get_settings
from climate.lib.db.types import SQLParams
from climate.lib.exceptions import DatabaseNotConnectedError
from climate.lib.utils import register_sqlite_adapters
from climate.logging import get_logger

_logger = get_logger("lib.db")

_SQL_DIR = Path(__file__).resolve().parent.parent / "sql"

register_sqlite_adapters()


@cache
def load_template(name: str) -> str:
    """Return the text of a SQL template from climate/lib/sql.

    Raises:
        FileNotFoundError: If no template has that name.
    """
    path = _SQL_DIR / name
    if not path.exists():
        raise FileNotFoundError(f"SQL template not found: {path}")
    return path.read_text()


def _row_as_dict(
    cursor: aiosqlite.Cursor, row: tuple[Any, ...]
) -> dict[str, Any]:
    columns = [col[0] for col in cursor.description or ()]
    return dict(zip(columns, row, strict=True))


class Database:
    """One aiosqlite connection with auto-commit and explicit transactions."""

    def __init__(self, db_path: str | None = None):
        self._db_path = db_path or get_settings().db_path
        self._connection: aiosqlite.Connection | None = None
        self._in_transaction = False

    @property
    def _conn(self) -> aiosqlite.Connection:
        if self._connection is None:
            raise DatabaseNotConnectedError()
        return self._connection

    async def connect(self) -> None:
        if self._connection is not None:
            return
        conn = await aiosqlite.connect(
            self._db_path, timeout=get_settings().db_timeout_sec
        )
        conn.row_factory = _row_as_dict  # type: ignore[assignment]
        self._connection = conn

    async def close(self) -> None:
        conn, self._connection = self._connection, None
        if conn is not None:
            await conn.close()

    async def __aenter__(self) -> Database:
        await self.connect()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object,
    ) -> None:
        await self.close()

    async def _commit(self) -> None:
        if not self._in_transaction:
            await self._conn.commit()

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[None]:
        """Group statements so they commit together or not at all."""
        conn = self._conn
        await conn.execute("BEGIN")
        self._in_transaction = True
        try:
            yield
        except BaseException:
            await conn.rollback()
            raise
        else:
            await conn.commit()
        finally:
            self._in_transaction = False

    async def execute(self, sql: str, params: SQLParams = ()) -> int:
        """Run one statement and return the number of affected rows.

        Outside a transaction the statement is committed on success and
        rolled back on failure, which leaves the connection reusable after
        a constraint violation.
        """
        conn = self._conn
        try:
            cursor = await conn.execute(sql, params)
        except aiosqlite.Error:
            if not self._in_transaction:
                await conn.rollback()
            raise
        await self._commit()
        return cursor.rowcount

    async def executemany(
        self, sql: str, params_seq: Sequence[SQLParams]
    ) -> None:
        await self._conn.executemany(sql, params_seq)
        await self._commit()

    async def executescript(self, sql: str) -> None:
        await self._conn.executescript(sql)

    async def execute_pragma(self, pragma: str) -> None:
        await self._conn.execute(pragma)

    async def fetchone(
        self, sql: str, params: SQLParams = ()
    ) -> dict[str, Any] | None:
        async with self._conn.execute(sql, params) as cursor:
            return cast(dict[str, Any] | None, await cursor.fetchone())

    async def fetchall(
        self, sql: str, params: SQLParams = ()
    ) -> list[dict[str, Any]]:
        async with self._conn.execute(sql, params) as cursor:
            return cast(list[dict[str, Any]], await cursor.fetchall())


class ConnectionPool:
    """Reusable connections for request handlers.

    At most max_size connections (DB_POOL_SIZE by default) are checked out
    at once; further callers wait. Idle connections are kept for reuse.
    """

    def __init__(self, max_size: int | None = None) -> None:
        self._max_size = max_size
        self._connections: list[Database] = []
        self._semaphore: asyncio.Semaphore | None = None

    def _get_semaphore(self) -> asyncio.Semaphore:
        # Created lazily so it binds to the loop that first uses the pool
        if self._semaphore is None:
            self._semaphore = asyncio.Semaphore(
                self._max_size or get_settings().db_pool_size
            )
        return self._semaphore

    @asynccontextmanager
    async def acquire(self) -> AsyncIterator[Database]:
        async with self._get_semaphore():
            db = self._connections.pop() if self._connections else Database()
            try:
                if db._connection is None:
                    await db.connect()
                yield db
            except Exception:
                # Reconnect on next checkout rather than reuse a suspect connection
                await db.close()
                raise
            finally:
                self._connections.append(db)

    async def close(self) -> None:
        """Close idle connections. The pool can be used again afterwards."""
        idle, self._connections = self._connections, []
        self._semaphore = None
        for db in idle:
            await db.close()
        if idle:
            _logger.info("Closed %d pooled connections", len(idle))


_persistent: Database | None = None
_pool = ConnectionPool()


@asynccontextmanager
async def get_db() -> AsyncIterator[Database]:
    """Yield the persistent connection if init_db() ran, else a pooled one."""
    if _persistent is not None:
        yield _persistent
        return
    async with _pool.acquire() as db:
        yield db


async def create_schema(db: Database) -> None:
    """Create the reading table and its unique timestamp index."""
    await db.execute_pragma("PRAGMA journal_mode=WAL")
    await db.executescript(load_template("init_reading_table.sql"))
    await db.executescript(load_template("idx_reading.sql"))


async def init_db() -> None:
    """Open the persistent connection and make sure the schema exists."""
    global _persistent
    if _persistent is None:
        _persistent = Database()
        await _persistent.connect()
        _logger.info(
            "Opened persistent database connection: %s", get_settings().db_path
        )
    await create_schema(_persistent)


async def close_db() -> None:
    """Close the persistent connection and every pooled connection."""
    global _persistent
    if _persistent is not None:
        await _persistent.close()
        _persistent = None
        _logger.info("Closed persistent database connection")
    await _pool.close()
