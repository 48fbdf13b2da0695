"""Unit tests for naming conventions."""

from __future__ import annotations

import pytest

from row_orm.orm.inflector import pluralize, tableize, underscore


class TestUnderscore:
    @pytest.mark.parametrize(
        ("word", "expected"),
        [
            ("client", "client"),
            ("orderType", "order_type"),
            ("StuffType", "stuff_type"),
            ("HTTPRequest", "http_request"),
            ("order-type", "order_type"),
        ],
    )
    def test_underscore(self, word: str, expected: str) -> None:
        assert underscore(word) == expected


class TestPluralize:
    def test_regular(self) -> None:
        assert pluralize("client") == "clients"

    def test_consonant_y(self) -> None:
        assert pluralize("category") == "categories"

    def test_vowel_y(self) -> None:
        assert pluralize("day") == "days"

    def test_sibilant(self) -> None:
        assert pluralize("box") == "boxes"

    def test_irregular(self) -> None:
        assert pluralize("person") == "people"


class TestTableize:
    def test_camel_case_alias(self) -> None:
        assert tableize("orderType") == "order_types"

    def test_only_last_word_pluralized(self) -> None:
        assert tableize("stuffType") == "stuff_types"

    def test_single_word(self) -> None:
        assert tableize("author") == "authors"
        assert tableize("category") == "categories"
