"""Statements and result pipelines.

``Statement`` wraps one driver cursor. ``BufferedStatement`` materializes the
rows of another statement once and can replay them. ``ResultPipeline`` is the
value the query hands to its consumer: a row source plus an ordered list of
row-transform stages applied lazily as rows are pulled.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from typing import TYPE_CHECKING, Any, Protocol

from row_orm.core.exceptions import StatementError
from row_orm.core.params import param_name
from row_orm.database.types import to_database

if TYPE_CHECKING:
    from row_orm.core.engine import Engine

Row = dict[str, Any]
RowStage = Callable[[Row], Row]


class RowSource(Protocol):
    def fetch(self) -> Row | None: ...

    def rewind(self) -> None: ...


def _row_to_dict(columns: list[str], row: Any) -> Row:
    """Convert a driver row to a dict.

    Handles both tuple-like rows and dict-like rows from different adapters.
    """
    if isinstance(row, dict):
        return dict(row)
    return dict(zip(columns, row, strict=True))


class Statement:
    """A prepared SQL statement executed through an :class:`Engine`.

    Values are bound with :meth:`bind_value` before :meth:`execute`; rows are
    then pulled one at a time with :meth:`fetch`. A plain statement streams
    straight from the driver cursor and cannot be rewound.
    """

    def __init__(self, engine: Engine, sql: str) -> None:
        self._engine = engine
        self._sql = sql
        self._params: dict[str, Any] = {}
        self._cursor: Any = None
        self._columns: list[str] = []

    @property
    def sql(self) -> str:
        return self._sql

    @property
    def params(self) -> dict[str, Any]:
        return dict(self._params)

    @property
    def executed(self) -> bool:
        return self._cursor is not None

    @property
    def column_names(self) -> list[str]:
        return list(self._columns)

    @property
    def row_count(self) -> int:
        if self._cursor is None:
            return 0
        return int(self._cursor.rowcount)

    def bind_value(self, param: str, value: Any, type_name: str | None = None) -> None:
        """Bind *value* to the ``:param`` placeholder, converted for *type_name*."""
        self._params[param_name(param)] = to_database(value, type_name)

    def execute(self, *, commit: bool = False) -> Statement:
        self._cursor = self._engine.run(self._sql, self._params, commit=commit)
        description = self._cursor.description
        self._columns = [desc[0] for desc in description] if description else []
        return self

    def fetch(self) -> Row | None:
        """Fetch the next row as a dict, or None once exhausted."""
        if self._cursor is None:
            raise StatementError("Cannot fetch from a statement that has not been executed")
        if not self._columns:
            return None
        row = self._cursor.fetchone()
        if row is None:
            return None
        return _row_to_dict(self._columns, row)

    def fetch_all(self) -> list[Row]:
        return list(self)

    def rewind(self) -> None:
        raise StatementError("Driver statements cannot be rewound; buffer them first")

    def __iter__(self) -> Iterator[Row]:
        while True:
            row = self.fetch()
            if row is None:
                return
            yield row


class BufferedStatement:
    """Materialize-once, replay-many wrapper over another row source.

    Rows are pulled from the wrapped statement on demand and kept; after
    :meth:`rewind` they are replayed from memory. Each fetch returns a copy
    so downstream stages never alter the buffer.
    """

    def __init__(self, statement: RowSource) -> None:
        self._statement = statement
        self._buffer: list[Row] = []
        self._index = 0
        self._exhausted = False

    @property
    def statement(self) -> RowSource:
        return self._statement

    def fetch(self) -> Row | None:
        if self._index < len(self._buffer):
            row = self._buffer[self._index]
            self._index += 1
            return dict(row)
        if self._exhausted:
            return None
        row = self._statement.fetch()
        if row is None:
            self._exhausted = True
            return None
        self._buffer.append(row)
        self._index += 1
        return dict(row)

    def fetch_all(self) -> list[Row]:
        return list(self)

    def rewind(self) -> None:
        self._index = 0

    def __len__(self) -> int:
        """Number of rows buffered so far."""
        return len(self._buffer)

    def __iter__(self) -> Iterator[Row]:
        while True:
            row = self.fetch()
            if row is None:
                return
            yield row


class ResultPipeline:
    """A row source followed by an ordered list of row-transform stages.

    With no stages and no buffering this is a pass-through over the driver
    statement. :meth:`buffer` promotes the source to a
    :class:`BufferedStatement` so it can be walked more than once.
    """

    def __init__(self, statement: RowSource) -> None:
        self._source = statement
        self._stages: list[RowStage] = []

    @property
    def source(self) -> RowSource:
        return self._source

    @property
    def stages(self) -> tuple[RowStage, ...]:
        return tuple(self._stages)

    @property
    def buffered(self) -> bool:
        return isinstance(self._source, BufferedStatement)

    def buffer(self) -> ResultPipeline:
        if not self.buffered:
            self._source = BufferedStatement(self._source)
        return self

    def add_stage(self, stage: RowStage) -> ResultPipeline:
        self._stages.append(stage)
        return self

    def fetch(self) -> Row | None:
        row = self._source.fetch()
        if row is None:
            return None
        for stage in self._stages:
            row = stage(row)
        return row

    def fetch_all(self) -> list[Row]:
        return list(self)

    def rewind(self) -> None:
        self._source.rewind()

    def __iter__(self) -> Iterator[Row]:
        while True:
            row = self.fetch()
            if row is None:
                return
            yield row
