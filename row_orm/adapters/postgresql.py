"""PostgreSQL adapter using psycopg (v3+)."""

from __future__ import annotations

from typing import Any

from row_orm.adapters.protocol import ListPoolMixin
from row_orm.core.connection import ConnectionConfig

_DESCRIBE_SQL = (
    "SELECT column_name, data_type FROM information_schema.columns "
    "WHERE table_name = %(table)s AND table_schema = current_schema() "
    "ORDER BY ordinal_position"
)


def _build_conninfo(config: ConnectionConfig) -> str:
    """Build a libpq connection string from config fields."""
    parts: list[str] = []
    if config.host is not None:
        parts.append(f"host={config.host}")
    if config.port is not None:
        parts.append(f"port={config.port}")
    if config.user is not None:
        parts.append(f"user={config.user}")
    if config.password is not None:
        parts.append(f"password={config.password}")
    parts.append(f"dbname={config.database}")
    return " ".join(parts)


class PostgresqlAdapter(ListPoolMixin):
    """Synchronous PostgreSQL adapter."""

    @property
    def paramstyle(self) -> str:
        return "pyformat"

    def create_pool(self, config: ConnectionConfig) -> list[Any]:
        import psycopg
        import psycopg.rows

        conninfo = _build_conninfo(config)
        return [
            psycopg.connect(conninfo, row_factory=psycopg.rows.dict_row)
            for _ in range(config.pool_size)
        ]

    def execute(
        self,
        connection: Any,
        sql: str,
        params: dict[str, Any] | None = None,
    ) -> Any:
        return connection.execute(sql, params)

    def describe(self, connection: Any, table: str) -> list[tuple[str, str]]:
        cursor = connection.execute(_DESCRIBE_SQL, {"table": table})
        return [(row["column_name"], row["data_type"]) for row in cursor.fetchall()]
