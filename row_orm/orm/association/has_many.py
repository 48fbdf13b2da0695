"""HasMany - many target rows hold the foreign key of the source row."""

from __future__ import annotations

from row_orm.core.enums import JoinType
from row_orm.orm.association.has_one import HasOne


class HasMany(HasOne):
    """One-to-many association.

    Keys and join conditions are those of :class:`HasOne`, but the target
    rows are never joined: they are fetched by a follow-up query and nested
    as a list under the association property.
    """

    default_join_type = JoinType.LEFT
    one_to_many = True
    _can_be_joined = False
