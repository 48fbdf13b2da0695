"""Unit tests for Table."""

from __future__ import annotations

from unittest import mock

import pytest

from row_orm.core.exceptions import SchemaError, UnknownAssociationError
from row_orm.orm.association import BelongsTo, HasMany, HasOne
from row_orm.orm.query import Query
from row_orm.orm.registry import TableRegistry
from row_orm.orm.table import Table


class TestTableAttributes:
    def test_defaults(self, registry: TableRegistry) -> None:
        table = Table("orderType", registry=registry)
        assert table.table == "order_types"
        assert table.primary_key == "id"
        assert table.engine is None

    def test_explicit_table_and_primary_key(self, registry: TableRegistry) -> None:
        table = Table("stuff", table="things", primary_key="uuid", registry=registry)
        assert table.table == "things"
        assert table.primary_key == "uuid"


class TestSchema:
    def test_short_form(self, registry: TableRegistry) -> None:
        table = Table("client", schema={"id": "integer", "name": "string"}, registry=registry)
        assert table.schema() == {"id": {"type": "integer"}, "name": {"type": "string"}}
        assert table.columns() == ["id", "name"]

    def test_long_form(self, registry: TableRegistry) -> None:
        table = Table("client", schema={"id": {"type": "integer"}}, registry=registry)
        assert table.schema() == {"id": {"type": "integer"}}

    def test_set_schema(self, registry: TableRegistry) -> None:
        table = Table("client", registry=registry)
        table.schema({"id": "integer"})
        assert table.columns() == ["id"]

    def test_missing_schema_without_engine_raises(self, registry: TableRegistry) -> None:
        table = Table("client", registry=registry)
        assert not table.has_schema()
        with pytest.raises(SchemaError, match="client"):
            table.schema()

    def test_schema_reflected_once(self, registry: TableRegistry) -> None:
        engine = mock.Mock()
        engine.describe.return_value = {"id": {"type": "integer"}}
        table = Table("client", engine=engine, registry=registry)
        assert table.has_schema()
        assert not table.has_schema(reflect=False)
        assert table.schema() == {"id": {"type": "integer"}}
        table.schema()
        engine.describe.assert_called_once_with("clients")

    def test_schema_copy_is_detached(self, registry: TableRegistry) -> None:
        table = Table("client", schema={"id": "integer"}, registry=registry)
        table.schema()["id"]["type"] = "string"
        assert table.schema()["id"]["type"] == "integer"

    def test_aliased_types(self, registry: TableRegistry) -> None:
        table = Table("client", schema={"id": "integer"}, registry=registry)
        assert table.aliased_types() == {"client.id": "integer", "client__id": "integer"}
        assert table.aliased_types("c") == {"c.id": "integer", "c__id": "integer"}


class TestAssociations:
    def test_declare_associations(self, registry: TableRegistry) -> None:
        table = registry.build("client")
        order = table.has_one("order")
        company = table.belongs_to("company")
        articles = table.has_many("article", property="articles")

        assert isinstance(order, HasOne)
        assert isinstance(company, BelongsTo)
        assert isinstance(articles, HasMany)
        assert table.association("order") is order
        assert order.source() is table
        assert list(table.associations()) == ["order", "company", "article"]

    def test_unknown_association_raises(self, registry: TableRegistry) -> None:
        table = registry.build("client")
        with pytest.raises(UnknownAssociationError) as exc_info:
            table.association("nope")
        assert exc_info.value.table_alias == "client"
        assert exc_info.value.association_name == "nope"

    def test_initialize_hook(self, registry: TableRegistry) -> None:
        class Clients(Table):
            def initialize(self) -> None:
                self.belongs_to("company")

        table = registry.build("client", table_class=Clients)
        assert table.has_association("company")


class TestQuery:
    def test_query_bound_to_table(self, registry: TableRegistry) -> None:
        engine = mock.Mock()
        table = registry.build("client", engine=engine)
        query = table.query()
        assert isinstance(query, Query)
        assert query.repository() is table
        assert query.engine is engine
