"""Enumerations shared across row_orm."""

from __future__ import annotations

from enum import Enum


class DatabaseBackend(Enum):
    """Supported database backends."""

    SQLITE = "sqlite"
    POSTGRESQL = "postgresql"
    MYSQL = "mysql"


class JoinType(str, Enum):
    """SQL join types an association can be attached with."""

    LEFT = "LEFT"
    INNER = "INNER"
    RIGHT = "RIGHT"

    @classmethod
    def parse(cls, value: str | JoinType) -> JoinType:
        """Accept a member or a case-insensitive name such as ``"left"``."""
        if isinstance(value, cls):
            return value
        return cls(str(value).strip().upper())
