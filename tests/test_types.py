"""Tests for value helpers."""

from __future__ import annotations

from typing import Any

import pytest

from jsontype import TypeTag, export_literal, runtime_type_name, stringify


class TestRuntimeTypeName:
    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            (None, TypeTag.NULL),
            (True, TypeTag.BOOLEAN),
            (False, TypeTag.BOOLEAN),
            (0, TypeTag.INTEGER),
            (1.5, TypeTag.FLOAT),
            (1.0, TypeTag.FLOAT),
            ("", TypeTag.STRING),
            ([], TypeTag.ARRAY),
            ({"a": 1}, TypeTag.ARRAY),
            ((1, 2), TypeTag.ARRAY),
        ],
    )
    def test_value_union(self, value: Any, expected: TypeTag) -> None:
        assert runtime_type_name(value) == expected

    def test_foreign_type(self) -> None:
        assert runtime_type_name(b"raw") == "bytes"


class TestStringify:
    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            (None, ""),
            (True, "1"),
            (False, ""),
            ("text", "text"),
            (11, "11"),
            (-3, "-3"),
            (11.0, "11"),
            (0.5, "0.5"),
            (1e25, "1.0E+25"),
            (999999999999999.0, "999999999999999"),
            (1e15, "1.0E+15"),
            (-1234567890123456.0, "-1.234567890123456E+15"),
            (1000000000000000.5, "1.0000000000000005E+15"),
            (1.5e-7, "1.5E-7"),
            (float("nan"), "NAN"),
            (float("-inf"), "-INF"),
            ([1, "a"], '[1,"a"]'),
            ({"a": None}, '{"a":null}'),
        ],
    )
    def test_string_form(self, value: Any, expected: str) -> None:
        assert stringify(value) == expected


class TestExportLiteral:
    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            (None, "NULL"),
            (True, "true"),
            (False, "false"),
            (42, "42"),
            (11.0, "11.0"),
            (1e15, "1.0E+15"),
            (2.5e15, "2.5E+15"),
            (0.25, "0.25"),
            ("davert", "'davert'"),
            ("it's", "'it\\'s'"),
            ("C:\\tmp", "'C:\\\\tmp'"),
        ],
    )
    def test_scalars(self, value: Any, expected: str) -> None:
        assert export_literal(value) == expected

    def test_empty_container(self) -> None:
        assert export_literal([]) == "array (\n)"

    def test_nested_container(self) -> None:
        expected = "array (\n  'a' => 1,\n  'b' => \n  array (\n    0 => 'x',\n  ),\n)"
        assert export_literal({"a": 1, "b": ["x"]}) == expected
