"""HasOne - one target row holds the foreign key of the source row."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from row_orm.core.enums import JoinType
from row_orm.orm.association.base import Association
from row_orm.orm.containment import ContainConfig
from row_orm.orm.inflector import underscore


class HasOne(Association):
    """One-to-one association, joined into the source query with an INNER join.

    The default foreign key is a column on the target named after the
    source alias: a ``client`` has one ``order`` through ``order.client_id``.
    """

    default_join_type = JoinType.INNER
    _can_be_joined = True

    def _default_foreign_key(self) -> str:
        return f"{underscore(self.source().alias)}_id"

    def _join_condition(self, source_alias: str, foreign_key: str) -> str:
        return f"{source_alias}.{self.source().primary_key} = {self._name}.{foreign_key}"

    def parent_key(self, config: ContainConfig | Mapping[str, Any] | None = None) -> str:
        return self.source().primary_key

    def link_key(self, config: ContainConfig | Mapping[str, Any] | None = None) -> str:
        return self._resolved_foreign_key(ContainConfig.coerce(config))
