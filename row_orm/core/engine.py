"""Statement execution engine.

The Engine prepares statements, normalizes placeholders to the adapter's
paramstyle, runs SQL on pooled connections and reflects table schemas.
"""

from __future__ import annotations

import logging
from typing import Any

from row_orm.core.connection import ConnectionConfig, ConnectionManager
from row_orm.core.params import normalize_params
from row_orm.database.statement import Statement
from row_orm.database.types import column_type

logger = logging.getLogger(__name__)


class Engine:
    """Synchronous statement execution engine."""

    def __init__(self, connection_manager: ConnectionManager) -> None:
        self._connection_manager = connection_manager
        self._paramstyle = connection_manager.adapter.paramstyle

    @classmethod
    def from_config(cls, config: ConnectionConfig) -> Engine:
        """Create an Engine from a ConnectionConfig.

        Args:
            config: ConnectionConfig instance

        Returns:
            Engine instance
        """
        return cls(ConnectionManager(config))

    @property
    def connection_manager(self) -> ConnectionManager:
        return self._connection_manager

    @property
    def paramstyle(self) -> str:
        return self._paramstyle

    def prepare(self, sql: str) -> Statement:
        """Create a statement for *sql*; values are bound on the statement."""
        return Statement(self, sql)

    def run(self, sql: str, params: dict[str, Any] | None = None, *, commit: bool = False) -> Any:
        """Execute *sql* on a pooled connection and return the driver cursor.

        Driver exceptions are propagated unchanged.
        """
        sql = normalize_params(sql, self._paramstyle)
        logger.debug(f"SQL: {sql} | Params: {params}")
        with self._connection_manager.get_connection() as conn:
            cursor = self._connection_manager.adapter.execute(conn, sql, params)
            if commit:
                conn.commit()
        return cursor

    def execute(self, sql: str, params: dict[str, Any] | None = None) -> Statement:
        """Execute a write or DDL statement and commit it."""
        statement = self.prepare(sql)
        for name, value in (params or {}).items():
            statement.bind_value(name, value)
        return statement.execute(commit=True)

    def fetch_all(self, sql: str, params: dict[str, Any] | None = None) -> list[dict[str, Any]]:
        """Execute a read statement and return every row as a dict."""
        statement = self.prepare(sql)
        for name, value in (params or {}).items():
            statement.bind_value(name, value)
        return statement.execute().fetch_all()

    def describe(self, table: str) -> dict[str, dict[str, str]]:
        """Reflect *table* into an ordered ``column -> {"type": ...}`` schema."""
        with self._connection_manager.get_connection() as conn:
            columns = self._connection_manager.adapter.describe(conn, table)
        logger.debug(f"Reflected {len(columns)} columns for table '{table}'")
        return {name: {"type": column_type(sql_type)} for name, sql_type in columns}

    def close(self) -> None:
        """Close every pooled connection."""
        self._connection_manager.close_pool()
