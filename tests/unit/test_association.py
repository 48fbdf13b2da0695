"""Unit tests for associations."""

from __future__ import annotations

from unittest import mock

import pytest

from row_orm.core.exceptions import ContainmentError, MissingForeignKeyError
from row_orm.orm.association import Association, BelongsTo, HasMany, HasOne
from row_orm.orm.query import Query
from row_orm.orm.registry import TableRegistry


@pytest.fixture
def tables(registry: TableRegistry) -> TableRegistry:
    registry.build("foo", schema={"id": "integer", "client_id": "integer"})
    registry.build("client", schema={"id": "integer", "name": "string"})
    registry.build("order", schema={"id": "integer", "total": "float", "client_id": "integer"})
    return registry


class TestOptions:
    def test_defaults(self) -> None:
        association = BelongsTo("client")
        assert association.name == "client"
        assert association.class_name == "client"
        assert association.property == "client"
        assert association.join_type == "LEFT"
        assert association.dependent is False
        assert association.conditions is None

    def test_recognized_options(self) -> None:
        association = HasMany(
            "article",
            class_name="posts",
            property="articles",
            conditions={"published": True},
            dependent=True,
            join_type="inner",
        )
        assert association.class_name == "posts"
        assert association.property == "articles"
        assert association.conditions == {"published": True}
        assert association.dependent is True
        assert association.join_type == "INNER"

    def test_unrecognized_options_go_to_hook(self) -> None:
        seen = {}

        class Counting(BelongsTo):
            def _init_options(self, options: dict) -> None:
                seen.update(options)

        Counting("client", counter_cache=True, foreign_key="customer_id")
        assert seen == {"counter_cache": True}

    def test_empty_property_falls_back_to_name(self) -> None:
        association = HasOne("order", property="")
        assert association.property == "order"
        association.property = ""
        assert association.property == "order"

    def test_invalid_join_type(self) -> None:
        with pytest.raises(ValueError):
            BelongsTo("client", join_type="SIDEWAYS")

    def test_setters(self) -> None:
        association = BelongsTo("client")
        association.foreign_key = "customer_id"
        association.join_type = "right"
        association.conditions = ["client.active = 1"]
        association.dependent = True
        assert association.foreign_key == "customer_id"
        assert association.join_type == "RIGHT"
        assert association.conditions == ["client.active = 1"]
        assert association.dependent is True


class TestKinds:
    def test_can_be_joined(self) -> None:
        assert BelongsTo("a").can_be_joined()
        assert HasOne("a").can_be_joined()
        assert not HasMany("a").can_be_joined()

    def test_default_join_types(self) -> None:
        assert BelongsTo("a").join_type == "LEFT"
        assert HasOne("a").join_type == "INNER"
        assert HasMany("a").join_type == "LEFT"

    def test_belongs_to_foreign_key(self) -> None:
        assert BelongsTo("orderType").foreign_key == "order_type_id"

    def test_has_one_foreign_key_uses_source_alias(self, tables: TableRegistry) -> None:
        association = tables.get("client").has_one("order")
        assert association.foreign_key == "client_id"

    def test_has_many_foreign_key_uses_source_alias(self, tables: TableRegistry) -> None:
        association = tables.get("client").has_many("order")
        assert association.foreign_key == "client_id"

    def test_base_kind_is_abstract(self) -> None:
        with pytest.raises(NotImplementedError):
            Association("x").foreign_key  # noqa: B018


class TestTarget:
    def test_target_resolved_through_source_registry(self, tables: TableRegistry) -> None:
        association = tables.get("foo").belongs_to("client")
        assert association.target() is tables.get("client")

    def test_target_built_on_demand(self, tables: TableRegistry) -> None:
        association = tables.get("foo").belongs_to("category")
        target = association.target()
        assert target.alias == "category"
        assert target.table == "categories"
        assert tables.get("category") is target

    def test_target_uses_class_name(self, tables: TableRegistry) -> None:
        association = tables.get("foo").belongs_to("customer", class_name="client")
        target = association.target()
        assert target.alias == "customer"
        assert target.table == "clients"

    def test_explicit_target(self, tables: TableRegistry) -> None:
        client = tables.get("client")
        association = BelongsTo("owner", target_table=client)
        assert association.target() is client

    def test_target_inherits_source_engine(self, registry: TableRegistry) -> None:
        engine = mock.Mock()
        source = registry.build("author", engine=engine)
        association = source.has_many("article")
        assert association.target().engine is engine

    def test_target_keeps_own_engine(self, registry: TableRegistry) -> None:
        own = mock.Mock()
        registry.build("article", engine=own)
        source = registry.build("author", engine=mock.Mock())
        assert source.has_many("article").target().engine is own


class TestAttachTo:
    def test_belongs_to_join(self, tables: TableRegistry) -> None:
        foo = tables.get("foo")
        query = Query().repository(foo)
        foo.belongs_to("client").attach_to(query)
        assert query.clause("join") == {
            "client": {
                "table": "clients",
                "type": "LEFT",
                "conditions": ["client.id = foo.client_id"],
            }
        }
        assert query.clause("select") == {
            "client__id": "client.id",
            "client__name": "client.name",
        }

    def test_has_one_join(self, tables: TableRegistry) -> None:
        client = tables.get("client")
        query = Query().repository(client)
        client.has_one("order").attach_to(query, include_fields=False)
        assert query.clause("join")["order"] == {
            "table": "orders",
            "type": "INNER",
            "conditions": ["client.id = order.client_id"],
        }
        assert query.clause("select") == {}

    def test_conditions_order(self, tables: TableRegistry) -> None:
        foo = tables.get("foo")
        query = Query().repository(foo)
        association = foo.belongs_to("client", conditions={"active": True})
        association.attach_to(query, {"conditions": ["client.name IS NOT NULL"], "fields": False})
        assert query.clause("join")["client"]["conditions"] == [
            {"client.active": True},
            "client.name IS NOT NULL",
            "client.id = foo.client_id",
        ]
        assert query.clause("select") == {}

    def test_foreign_key_override(self, tables: TableRegistry) -> None:
        foo = tables.get("foo")
        query = Query().repository(foo)
        foo.belongs_to("client").attach_to(query, {"foreign_key": "customer_id", "fields": ["name"]})
        assert query.clause("join")["client"]["conditions"] == ["client.id = foo.customer_id"]
        assert query.clause("select") == {"client__name": "client.name"}

    def test_source_alias_override(self, tables: TableRegistry) -> None:
        client = tables.get("client")
        query = Query().repository(client)
        client.has_one("order").attach_to(query, source_alias="c", include_fields=False)
        assert query.clause("join")["order"]["conditions"] == ["c.id = order.client_id"]

    def test_attach_registers_types(self, tables: TableRegistry) -> None:
        foo = tables.get("foo")
        query = Query().repository(foo)
        foo.belongs_to("client").attach_to(query)
        assert query.default_types()["client__id"] == "integer"

    def test_invalid_config(self, tables: TableRegistry) -> None:
        foo = tables.get("foo")
        with pytest.raises(ContainmentError, match="fields"):
            foo.belongs_to("client").attach_to(Query().repository(foo), {"fields": True})


class TestValidateFields:
    def test_missing_link_column(self, tables: TableRegistry) -> None:
        association = tables.get("client").has_many("article")
        with pytest.raises(MissingForeignKeyError) as exc_info:
            association.validate_fields({"fields": ["title"]})
        assert str(exc_info.value) == 'You are required to select the "article.client_id" field'

    @pytest.mark.parametrize("field", ["client_id", "article.client_id"])
    def test_link_column_present(self, tables: TableRegistry, field: str) -> None:
        association = tables.get("client").has_many("article")
        association.validate_fields({"fields": ["title", field]})

    def test_no_fields_override(self, tables: TableRegistry) -> None:
        association = tables.get("client").has_many("article")
        association.validate_fields(None)
        association.validate_fields({"fields": False})


class TestEagerLoaderKeys:
    def test_parent_and_link_keys(self, tables: TableRegistry) -> None:
        has_many = tables.get("client").has_many("order")
        assert has_many.parent_key() == "id"
        assert has_many.link_key() == "client_id"
        assert has_many.link_key({"foreign_key": "buyer_id"}) == "buyer_id"

        belongs_to = tables.get("foo").belongs_to("client")
        assert belongs_to.parent_key() == "client_id"
        assert belongs_to.link_key() == "id"

    def test_empty_keys_issue_no_query(self, tables: TableRegistry) -> None:
        association = tables.get("client").has_many("order")
        merge = association.eager_loader([])
        row = {"client__id": 1}
        assert merge(row) is row
        assert row == {"client__id": 1}

    def test_fields_checked_before_loading(self, tables: TableRegistry) -> None:
        association = tables.get("client").has_many("order")
        with pytest.raises(MissingForeignKeyError):
            association.eager_loader([], {"fields": ["total"]})
