"""SQLite adapter using stdlib sqlite3."""

from __future__ import annotations

import re
import sqlite3
from typing import Any

from row_orm.adapters.protocol import ListPoolMixin
from row_orm.core.connection import ConnectionConfig

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


class SqliteAdapter(ListPoolMixin):
    """Synchronous SQLite adapter."""

    @property
    def paramstyle(self) -> str:
        return "named"

    def create_pool(self, config: ConnectionConfig) -> list[sqlite3.Connection]:
        """Create a 'pool' (list of connections) for SQLite."""
        pool: list[sqlite3.Connection] = []
        for _ in range(config.pool_size):
            conn = sqlite3.connect(config.database, **config.extra)
            conn.row_factory = sqlite3.Row
            conn.execute("PRAGMA journal_mode=WAL")
            pool.append(conn)
        return pool

    def execute(
        self,
        connection: sqlite3.Connection,
        sql: str,
        params: dict[str, Any] | None = None,
    ) -> sqlite3.Cursor:
        """Execute SQL and return a cursor."""
        return connection.execute(sql, params or {})

    def describe(self, connection: sqlite3.Connection, table: str) -> list[tuple[str, str]]:
        """Read column names and declared types with PRAGMA table_info."""
        # PRAGMA does not accept bound parameters
        if not _IDENTIFIER.match(table):
            raise ValueError(f"Invalid table name: {table!r}")
        cursor = connection.execute(f"PRAGMA table_info({table})")
        return [(row[1], row[2] or "") for row in cursor.fetchall()]
