"""Containment plan data classes.

Frozen dataclasses describing how each containment of a query is fetched:
joined into the main statement or loaded by a follow-up query.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from row_orm.orm.association.base import Association
from row_orm.orm.containment import ContainConfig, ContainNode


@dataclass(frozen=True)
class JoinEntry:
    """An association joined into the main statement."""

    association: Association
    config: ContainConfig
    source_alias: str
    path: tuple[str, ...]  # property names from the root row to this entity

    @property
    def alias(self) -> str:
        return self.association.name


@dataclass(frozen=True)
class DeferredEntry:
    """An association loaded after the main statement by its own query."""

    node: ContainNode
    source_alias: str  # SQL alias owning the parent key column
    path: tuple[str, ...]  # property path of the parent entity

    @property
    def association(self) -> Association:
        return self.node.instance

    @property
    def key_column(self) -> str:
        return f"{self.source_alias}__{self.node.instance.parent_key(self.node.config)}"


@dataclass(frozen=True)
class ContainPlan:
    """Compiled containment plan for one query."""

    joins: tuple[JoinEntry, ...] = field(default_factory=tuple)
    deferred: tuple[DeferredEntry, ...] = field(default_factory=tuple)

    @property
    def requires_eager_loading(self) -> bool:
        return bool(self.deferred)
