"""Async PostgreSQL connection pool and query execution.

Connections use psycopg's raw cursor so queries carry PostgreSQL-native
``$1, $2, ...`` placeholders, and rows come back as dicts keyed by column name.
"""
import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import Any, AsyncGenerator, Optional, Sequence, Union

import psycopg
from psycopg import sql
from psycopg.rows import dict_row
from psycopg_pool import AsyncConnectionPool

from postgres_mcp.config import BridgeConfig

logger = logging.getLogger(__name__)

Query = Union[str, sql.Composable]


@dataclass(frozen=True)
class FieldInfo:
    """A result-set column: its name and the driver's type OID."""

    name: str
    type_id: int

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "dataTypeID": self.type_id}


@dataclass
class QueryResult:
    rows: list[dict[str, Any]] = field(default_factory=list)
    row_count: int = 0
    fields: list[FieldInfo] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "rows": self.rows,
            "rowCount": self.row_count,
            "fields": [f.to_dict() for f in self.fields],
        }


class PooledConnection:
    """A checked-out connection. Valid only inside ``PostgresPool.connection()``."""

    def __init__(self, conn: psycopg.AsyncConnection):
        self._conn = conn

    async def execute(
        self,
        query: Query,
        params: Optional[Sequence[Any]] = None,
        tool_name: Optional[str] = None,
    ) -> QueryResult:
        """Run one statement and return every row it produced."""
        if tool_name:
            tag = f"/* postgres_mcp:{tool_name} */ "
            if isinstance(query, sql.Composable):
                query = sql.SQL(tag) + query
            else:
                query = tag + query
        async with self._conn.cursor() as cur:
            await cur.execute(query, list(params) if params else None)
            if cur.description is None:
                return QueryResult(row_count=max(cur.rowcount, 0))
            rows = [dict(row) for row in await cur.fetchall()]
            fields = [FieldInfo(col.name, col.type_code) for col in cur.description]
            row_count = cur.rowcount if cur.rowcount >= 0 else len(rows)
            return QueryResult(rows=rows, row_count=row_count, fields=fields)


class PostgresPool:
    """Manages the async connection pool shared by all tool calls."""

    def __init__(self, cfg: BridgeConfig):
        self._config = cfg
        self._pool: Optional[AsyncConnectionPool] = None

    async def initialize(self):
        """Open the pool and wait until ``pool_min_size`` connections are ready.

        Raises ``psycopg_pool.PoolTimeout`` if the database cannot be reached
        within the configured connection timeout.
        """
        self._pool = AsyncConnectionPool(
            conninfo=self._config.conninfo(),
            min_size=self._config.pool_min_size,
            max_size=self._config.pool_max_size,
            open=False,
            kwargs={
                "row_factory": dict_row,
                "autocommit": True,
                "cursor_factory": psycopg.AsyncRawCursor,
            },
            check=AsyncConnectionPool.check_connection,
            timeout=self._config.connect_timeout_seconds,
            max_idle=self._config.idle_timeout_seconds,
            name="postgres_mcp",
        )
        await self._pool.open(wait=True, timeout=self._config.connect_timeout_seconds)
        logger.info(
            f"PostgreSQL connection pool initialized "
            f"({self._config.host}:{self._config.port}/{self._config.database}, "
            f"max_size={self._config.pool_max_size})"
        )

    async def close(self):
        if self._pool:
            await self._pool.close()
            self._pool = None
            logger.info("PostgreSQL connection pool closed")

    @asynccontextmanager
    async def connection(self) -> AsyncGenerator[PooledConnection, None]:
        """Check out a connection; it is returned to the pool on every exit path."""
        if not self._pool:
            raise RuntimeError("Pool not initialized. Call initialize() first.")
        async with self._pool.connection() as conn:
            yield PooledConnection(conn)

    async def check_connection(self) -> dict[str, Any]:
        """Return server version, database and user for the startup check."""
        async with self.connection() as conn:
            result = await conn.execute(
                "SELECT version() AS version, current_database() AS database, "
                "current_user AS username"
            )
            return result.rows[0] if result.rows else {}
