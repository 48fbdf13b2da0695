"""row_orm exception hierarchy.

Configuration and misuse errors are raised by row_orm itself. Exceptions
raised by the database driver while preparing, executing or fetching a
statement are propagated unchanged.
"""

from __future__ import annotations


class RowOrmError(Exception):
    """Base exception for all row_orm errors."""


# --- Configuration ---


class ConfigurationError(RowOrmError):
    """Base for caller configuration errors. These are never retried."""


class ContainmentError(ConfigurationError):
    """Raised when a containment spec has an invalid shape or option value."""

    def __init__(self, detail: str) -> None:
        super().__init__(f"Invalid containment: {detail}")


class UnknownAssociationError(ConfigurationError):
    """Raised when a containment names an association the table does not declare."""

    def __init__(self, table_alias: str, association_name: str) -> None:
        self.table_alias = table_alias
        self.association_name = association_name
        super().__init__(f"Table '{table_alias}' is not associated with '{association_name}'")


class MissingForeignKeyError(ConfigurationError):
    """Raised when an eager-loaded association's fields omit its link column."""

    def __init__(self, qualified_field: str) -> None:
        self.qualified_field = qualified_field
        super().__init__(f'You are required to select the "{qualified_field}" field')


class SchemaError(ConfigurationError):
    """Raised when a table has no schema and no engine to reflect one from."""

    def __init__(self, table_alias: str) -> None:
        self.table_alias = table_alias
        super().__init__(
            f"Table '{table_alias}' has no schema and no engine to reflect it from"
        )


# --- Registry ---


class RegistryError(RowOrmError):
    """Base for table registry errors."""


class TableNotFoundError(RegistryError):
    """Raised when an alias is not registered."""

    def __init__(self, alias: str) -> None:
        self.alias = alias
        super().__init__(f"Table not found: '{alias}'")


# --- Execution ---


class ExecutionError(RowOrmError):
    """Base for statement execution errors raised by row_orm."""


class StatementError(ExecutionError):
    """Raised on invalid statement state transitions."""


# --- Misuse ---


class MisuseError(RowOrmError):
    """Base for programmer misuse of the query API."""


class RepositoryNotSetError(MisuseError):
    """Raised when a query needs a bound table and none was set."""

    def __init__(self, action: str) -> None:
        self.action = action
        super().__init__(f"Cannot {action}: no repository table bound to the query")


class EngineNotSetError(MisuseError):
    """Raised when a query is executed without an engine."""

    def __init__(self) -> None:
        super().__init__("Cannot execute a query that has no engine")


# --- Adapter ---


class AdapterError(RowOrmError):
    """Base for adapter errors."""


class ConnectionError(AdapterError):  # noqa: A001
    """Raised on connection failures."""


class PoolError(AdapterError):
    """Raised on connection pool failures."""
