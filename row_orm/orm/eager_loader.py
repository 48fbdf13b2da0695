"""Eager loading of non-joinable associations.

After the main statement executes, its rows are buffered and scanned once to
collect the parent keys each deferred association needs. Every association
then runs one follow-up query and contributes a merge stage to the result
pipeline, in declaration order.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

from row_orm.database.statement import ResultPipeline
from row_orm.orm.plan import DeferredEntry

if TYPE_CHECKING:
    from row_orm.core.engine import Engine

logger = logging.getLogger(__name__)


class EagerLoader:
    """Loads deferred associations into a result pipeline.

    Args:
        deferred: Deferred entries, in declaration order.
        engine: Engine for follow-up queries on tables without one.
    """

    def __init__(self, deferred: Sequence[DeferredEntry], engine: Engine | None = None) -> None:
        self._deferred = tuple(deferred)
        self._engine = engine

    @property
    def deferred(self) -> tuple[DeferredEntry, ...]:
        return self._deferred

    def collect_keys(self, pipeline: ResultPipeline) -> dict[str, list[Any]]:
        """Read every key column the deferred associations need, skipping NULLs.

        Keys are ``<alias>__<column>``; values keep row order and duplicates.
        """
        keys: dict[str, list[Any]] = {entry.key_column: [] for entry in self._deferred}
        for row in pipeline:
            for column, values in keys.items():
                value = row.get(column)
                if value is not None:
                    values.append(value)
        return keys

    def load(self, pipeline: ResultPipeline) -> ResultPipeline:
        pipeline.buffer()
        keys = self.collect_keys(pipeline)
        pipeline.rewind()

        for entry in self._deferred:
            parent_keys = keys[entry.key_column]
            logger.debug(
                f"Eager loading '{entry.association.name}' from '{entry.source_alias}' "
                f"with {len(parent_keys)} parent keys"
            )
            merge = entry.association.eager_loader(
                parent_keys,
                entry.node.config,
                source_alias=entry.source_alias,
                contain=entry.node.spec.children,
                engine=self._engine,
            )
            pipeline.add_stage(merge)
        return pipeline
