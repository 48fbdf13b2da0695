"""Unit tests for condition and ordering expressions."""

from __future__ import annotations

import pytest

from row_orm.database.expressions import (
    ValueBinder,
    compile_conditions,
    compile_order,
    normalize_order,
    qualify_conditions,
    qualify_field,
    qualify_order,
    split_operator,
)


class TestValueBinder:
    def test_placeholders_are_sequential(self) -> None:
        binder = ValueBinder()
        assert binder.bind(1) == ":c0"
        assert binder.bind("x", "string") == ":c1"
        assert binder.bindings() == {":c0": (1, None), ":c1": ("x", "string")}
        assert len(binder) == 2

    def test_reset(self) -> None:
        binder = ValueBinder()
        binder.bind(1)
        binder.reset()
        assert binder.bind(2) == ":c0"

    def test_attach_to(self) -> None:
        class FakeStatement:
            def __init__(self) -> None:
                self.bound: list[tuple] = []

            def bind_value(self, param, value, type_name=None) -> None:
                self.bound.append((param, value, type_name))

        binder = ValueBinder()
        binder.bind(5, "integer")
        statement = FakeStatement()
        binder.attach_to(statement)
        assert statement.bound == [(":c0", 5, "integer")]


class TestSplitOperator:
    @pytest.mark.parametrize(
        ("key", "expected"),
        [
            ("id", ("id", "=")),
            ("id >", ("id", ">")),
            ("article.author_id IN", ("article.author_id", "IN")),
            ("id not in", ("id", "NOT IN")),
            ("name LIKE", ("name", "LIKE")),
            ("deleted IS NOT", ("deleted", "IS NOT")),
        ],
    )
    def test_split(self, key: str, expected: tuple[str, str]) -> None:
        assert split_operator(key) == expected


class TestCompileConditions:
    def test_none_and_empty(self) -> None:
        binder = ValueBinder()
        assert compile_conditions(None, binder) == ""
        assert compile_conditions([], binder) == ""
        assert compile_conditions("  ", binder) == ""

    def test_raw_string(self) -> None:
        assert compile_conditions("client.id = foo.client_id", ValueBinder()) == "client.id = foo.client_id"

    def test_mapping_binds_values(self) -> None:
        binder = ValueBinder()
        sql = compile_conditions({"id": 2, "name !=": "x"}, binder)
        assert sql == "id = :c0 AND name != :c1"
        assert binder.bindings() == {":c0": (2, None), ":c1": ("x", None)}

    def test_types_applied(self) -> None:
        binder = ValueBinder()
        compile_conditions({"article.id": "2"}, binder, {"article.id": "integer"})
        assert binder.bindings() == {":c0": ("2", "integer")}

    def test_in(self) -> None:
        binder = ValueBinder()
        assert compile_conditions({"id IN": [1, 2]}, binder) == "id IN (:c0, :c1)"

    def test_list_value_becomes_in(self) -> None:
        assert compile_conditions({"id": [1, 2]}, ValueBinder()) == "id IN (:c0, :c1)"

    def test_empty_in(self) -> None:
        assert compile_conditions({"id IN": []}, ValueBinder()) == "1 = 0"
        assert compile_conditions({"id NOT IN": []}, ValueBinder()) == "1 = 1"

    def test_null(self) -> None:
        binder = ValueBinder()
        assert compile_conditions({"deleted": None, "name !=": None}, binder) == (
            "deleted IS NULL AND name IS NOT NULL"
        )
        assert len(binder) == 0

    def test_or_group(self) -> None:
        sql = compile_conditions({"OR": [{"id": 1}, {"id": 2, "name": "x"}]}, ValueBinder())
        assert sql == "(id = :c0 OR (id = :c1 AND name = :c2))"

    def test_or_mapping(self) -> None:
        sql = compile_conditions({"OR": {"id": 1, "name": "x"}}, ValueBinder())
        assert sql == "(id = :c0 OR name = :c1)"

    def test_not_group(self) -> None:
        sql = compile_conditions({"NOT": {"id": 1}}, ValueBinder())
        assert sql == "NOT (id = :c0)"

    def test_list_combines_with_and(self) -> None:
        sql = compile_conditions(["a = b", {"id": 1}], ValueBinder())
        assert sql == "a = b AND id = :c0"

    def test_unsupported(self) -> None:
        with pytest.raises(TypeError):
            compile_conditions(42, ValueBinder())  # type: ignore[arg-type]


class TestQualify:
    def test_qualify_field(self) -> None:
        assert qualify_field("id", "article") == "article.id"
        assert qualify_field("author.id", "article") == "author.id"
        assert qualify_field("COUNT(*)", "article") == "COUNT(*)"

    def test_qualify_conditions(self) -> None:
        assert qualify_conditions({"id": 2, "title LIKE": "a%"}, "article") == {
            "article.id": 2,
            "article.title LIKE": "a%",
        }

    def test_qualify_nested_groups(self) -> None:
        assert qualify_conditions({"OR": [{"id": 1}, "x = 1"]}, "a") == {"OR": [{"a.id": 1}, "x = 1"]}

    def test_qualify_leaves_strings(self) -> None:
        assert qualify_conditions("id = 1", "a") == "id = 1"
        assert qualify_conditions(None, "a") is None


class TestOrder:
    def test_normalize(self) -> None:
        assert normalize_order("id") == [("id", None)]
        assert normalize_order(["id", "title"]) == [("id", None), ("title", None)]
        assert normalize_order({"id": "desc"}) == [("id", "DESC")]

    def test_invalid_direction(self) -> None:
        with pytest.raises(ValueError, match="sort direction"):
            normalize_order({"id": "UP"})

    def test_qualify_keeps_shape(self) -> None:
        assert qualify_order({"id": "DESC"}, "article") == {"article.id": "DESC"}
        assert qualify_order("id", "article") == ["article.id"]

    def test_compile(self) -> None:
        assert compile_order([("a.id", "DESC"), ("a.title", None)]) == "a.id DESC, a.title"
