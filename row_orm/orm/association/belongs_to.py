"""BelongsTo - the source row holds the foreign key of one target row."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from row_orm.orm.association.base import Association
from row_orm.orm.containment import ContainConfig
from row_orm.orm.inflector import underscore


class BelongsTo(Association):
    """Many-to-one association, joined into the source query.

    The default foreign key is a column on the source named after the
    association: ``orderType`` links through ``order_type_id``.
    """

    _can_be_joined = True

    def _default_foreign_key(self) -> str:
        return f"{underscore(self._name)}_id"

    def _join_condition(self, source_alias: str, foreign_key: str) -> str:
        return f"{self._name}.{self.target().primary_key} = {source_alias}.{foreign_key}"

    def parent_key(self, config: ContainConfig | Mapping[str, Any] | None = None) -> str:
        return self._resolved_foreign_key(ContainConfig.coerce(config))

    def link_key(self, config: ContainConfig | Mapping[str, Any] | None = None) -> str:
        return self.target().primary_key
