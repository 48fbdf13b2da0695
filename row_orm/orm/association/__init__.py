"""Association kinds."""

from __future__ import annotations

from row_orm.orm.association.base import Association
from row_orm.orm.association.belongs_to import BelongsTo
from row_orm.orm.association.has_many import HasMany
from row_orm.orm.association.has_one import HasOne

__all__ = ["Association", "BelongsTo", "HasOne", "HasMany"]
