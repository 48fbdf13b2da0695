"""Shared test fixtures."""

from __future__ import annotations

from collections.abc import Iterator

import pytest

from row_orm.core.connection import ConnectionConfig
from row_orm.core.engine import Engine
from row_orm.orm.registry import TableRegistry, default_registry


@pytest.fixture
def sqlite_config() -> ConnectionConfig:
    """SQLite in-memory connection config.

    A single pooled connection, so every statement sees the same database.
    """
    return ConnectionConfig(driver="sqlite", database=":memory:", pool_size=1)


@pytest.fixture
def engine(sqlite_config: ConnectionConfig) -> Iterator[Engine]:
    eng = Engine.from_config(sqlite_config)
    yield eng
    eng.close()


@pytest.fixture
def registry() -> TableRegistry:
    """A fresh, isolated table registry."""
    return TableRegistry()


@pytest.fixture(autouse=True)
def clear_default_registry() -> Iterator[None]:
    default_registry.clear()
    yield
    default_registry.clear()


@pytest.fixture
def blog(engine: Engine) -> Engine:
    """Authors and articles tables with the reference data set."""
    engine.execute("CREATE TABLE authors (id INTEGER PRIMARY KEY, name VARCHAR(255))")
    engine.execute(
        "CREATE TABLE articles (id INTEGER PRIMARY KEY, title VARCHAR(255), body TEXT, author_id INTEGER)"
    )
    for author_id, name in ((1, "Chuck Norris"), (2, "Bruce Lee")):
        engine.execute("INSERT INTO authors (id, name) VALUES (:id, :name)", {"id": author_id, "name": name})
    for article_id, title, body, author_id in (
        (1, "a title", "a body", 1),
        (2, "another title", "another body", 2),
    ):
        engine.execute(
            "INSERT INTO articles (id, title, body, author_id) VALUES (:id, :title, :body, :author_id)",
            {"id": article_id, "title": title, "body": body, "author_id": author_id},
        )
    return engine


@pytest.fixture
def store(registry: TableRegistry):
    """Tables for join planning, rooted at ``foo``.

    foo -> client (belongs to) -> order (has one) -> orderType (belongs to)
                                                  -> stuff (has one) -> stuffType (belongs to)
                               -> company (belongs to) -> category (belongs to)
    """
    foo = registry.build("foo", schema={"id": "integer"})
    client = registry.build("client", schema={"id": "integer", "name": "string", "phone": "string"})
    order = registry.build("order", schema={"id": "integer", "total": "string", "placed": "datetime"})
    company = registry.build("company", table="organizations", schema={"id": "integer", "name": "string"})
    registry.build("orderType", schema={"id": "integer", "name": "string"})
    stuff = registry.build("stuff", table="things", schema={"id": "integer", "name": "string"})
    registry.build("stuffType", schema={"id": "integer", "name": "string"})
    registry.build("category", schema={"id": "integer", "name": "string"})

    foo.belongs_to("client")
    client.has_one("order")
    client.belongs_to("company")
    order.belongs_to("orderType")
    order.has_one("stuff")
    stuff.belongs_to("stuffType")
    company.belongs_to("category")
    return foo


@pytest.fixture
def store_contain() -> dict:
    return {
        "client": {
            "order": ["orderType", {"stuff": ["stuffType"]}],
            "company": {"foreign_key": "organization_id", "category": None},
        }
    }
