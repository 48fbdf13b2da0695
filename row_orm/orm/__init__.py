"""Table registry, associations and the ORM query."""

from __future__ import annotations

from row_orm.orm.association import Association, BelongsTo, HasMany, HasOne
from row_orm.orm.containment import ContainConfig, ContainNode, ContainSpec
from row_orm.orm.query import Query
from row_orm.orm.registry import TableRegistry, default_registry
from row_orm.orm.result_set import ResultSet
from row_orm.orm.table import Table

__all__ = [
    "Table",
    "TableRegistry",
    "default_registry",
    "Association",
    "BelongsTo",
    "HasOne",
    "HasMany",
    "ContainConfig",
    "ContainSpec",
    "ContainNode",
    "Query",
    "ResultSet",
]
