"""MySQL adapter using mysql-connector-python."""

from __future__ import annotations

from typing import Any

from row_orm.adapters.protocol import ListPoolMixin
from row_orm.core.connection import ConnectionConfig

_DESCRIBE_SQL = (
    "SELECT column_name, data_type FROM information_schema.columns "
    "WHERE table_name = %(table)s AND table_schema = DATABASE() "
    "ORDER BY ordinal_position"
)


class MysqlAdapter(ListPoolMixin):
    """Synchronous MySQL adapter returning dictionary rows."""

    @property
    def paramstyle(self) -> str:
        return "pyformat"

    def create_pool(self, config: ConnectionConfig) -> list[Any]:
        """Create a pool (list of connections) for MySQL."""
        import mysql.connector

        return [
            mysql.connector.connect(
                host=config.host,
                port=config.port,
                user=config.user,
                password=config.password,
                database=config.database,
                **config.extra,
            )
            for _ in range(config.pool_size)
        ]

    def execute(
        self,
        connection: Any,
        sql: str,
        params: dict[str, Any] | None = None,
    ) -> Any:
        """Execute SQL and return a cursor with dictionary results."""
        cursor = connection.cursor(dictionary=True)
        cursor.execute(sql, params or {})
        return cursor

    def describe(self, connection: Any, table: str) -> list[tuple[str, str]]:
        cursor = self.execute(connection, _DESCRIBE_SQL, {"table": table})
        # information_schema column names come back upper-cased on some servers
        return [
            (row.get("column_name") or row["COLUMN_NAME"], row.get("data_type") or row["DATA_TYPE"])
            for row in cursor.fetchall()
        ]
