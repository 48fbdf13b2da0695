"""SQL building blocks: query builder, expressions, statements and types."""

from __future__ import annotations

from row_orm.database.expressions import ValueBinder
from row_orm.database.query import Query
from row_orm.database.statement import BufferedStatement, ResultPipeline, Statement
from row_orm.database.types import TypeMap

__all__ = [
    "Query",
    "ValueBinder",
    "Statement",
    "BufferedStatement",
    "ResultPipeline",
    "TypeMap",
]
