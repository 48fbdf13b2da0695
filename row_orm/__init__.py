"""row_orm - a small table/association ORM with eager loading over SQL."""

from __future__ import annotations

from row_orm.core.connection import ConnectionConfig, ConnectionManager
from row_orm.core.engine import Engine
from row_orm.core.enums import DatabaseBackend, JoinType
from row_orm.core.exceptions import (
    AdapterError,
    ConfigurationError,
    ConnectionError,  # noqa: A004
    ContainmentError,
    EngineNotSetError,
    ExecutionError,
    MissingForeignKeyError,
    MisuseError,
    PoolError,
    RegistryError,
    RepositoryNotSetError,
    RowOrmError,
    SchemaError,
    StatementError,
    TableNotFoundError,
    UnknownAssociationError,
)
from row_orm.orm.association import Association, BelongsTo, HasMany, HasOne
from row_orm.orm.query import Query
from row_orm.orm.registry import TableRegistry
from row_orm.orm.result_set import ResultSet
from row_orm.orm.table import Table

__all__ = [
    # Connection
    "ConnectionConfig",
    "ConnectionManager",
    # Engine
    "Engine",
    # Tables
    "Table",
    "TableRegistry",
    # Associations
    "Association",
    "BelongsTo",
    "HasOne",
    "HasMany",
    # Queries
    "Query",
    "ResultSet",
    # Enums
    "DatabaseBackend",
    "JoinType",
    # Exceptions
    "RowOrmError",
    "ConfigurationError",
    "ContainmentError",
    "UnknownAssociationError",
    "MissingForeignKeyError",
    "SchemaError",
    "RegistryError",
    "TableNotFoundError",
    "ExecutionError",
    "StatementError",
    "MisuseError",
    "RepositoryNotSetError",
    "EngineNotSetError",
    "AdapterError",
    "ConnectionError",
    "PoolError",
]
