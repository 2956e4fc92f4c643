"""Tests for the value model and its coercions."""

import math

import pytest

from franka._errors import InvalidExpressionError
from franka._values import (
    ValueKind,
    classify,
    format_display_value,
    is_variable_reference,
    parse_number,
    strict_equals,
    to_index,
    to_str,
    truthy,
    variable_name,
)


class TestClassify:
    @pytest.mark.parametrize(
        ("value", "kind"),
        [
            (None, ValueKind.NULL),
            (True, ValueKind.BOOLEAN),
            (False, ValueKind.BOOLEAN),
            (0, ValueKind.NUMBER),
            (1.5, ValueKind.NUMBER),
            ("", ValueKind.STRING),
            ("text", ValueKind.STRING),
            ("a$b", ValueKind.STRING),
            ("$x", ValueKind.VARIABLE),
            ([], ValueKind.ARRAY),
            ((1,), ValueKind.ARRAY),
            ({}, ValueKind.OPERATION),
            ({"concat": []}, ValueKind.OPERATION),
        ],
    )
    def test_exactly_one_kind(self, value, kind: ValueKind):
        assert classify(value) is kind

    def test_references_disabled(self):
        assert classify("$x", references=False) is ValueKind.STRING

    @pytest.mark.parametrize("value", [{1, 2}, object()])
    def test_invalid(self, value):
        with pytest.raises(InvalidExpressionError):
            classify(value)

    def test_variable_helpers(self):
        assert is_variable_reference("$name")
        assert not is_variable_reference("name")
        assert not is_variable_reference(1)
        assert variable_name("$name") == "name"
        assert variable_name("$") == ""


class TestToStr:
    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            (None, "null"),
            (True, "true"),
            (False, "false"),
            (3, "3"),
            (3.0, "3"),
            (-0.5, "-0.5"),
            (1e21, "1e+21"),
            (1e-7, "1e-7"),
            (math.nan, "NaN"),
            (math.inf, "Infinity"),
            (-math.inf, "-Infinity"),
            ("$x", "$x"),
            ([1, None, "a"], "1,,a"),
            ([[1, 2], 3], "1,2,3"),
            ({"a": 1}, "[object Object]"),
        ],
    )
    def test_to_str(self, value, expected: str):
        assert to_str(value) == expected


class TestTruthy:
    @pytest.mark.parametrize("value", [False, None, 0, 0.0, math.nan, ""])
    def test_falsy(self, value):
        assert truthy(value) is False

    @pytest.mark.parametrize("value", [True, 1, -1, 0.1, "0", "false", " ", [], {}, [0]])
    def test_truthy(self, value):
        assert truthy(value) is True


class TestToIndex:
    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            (3, 3),
            (-2, -2),
            (2.9, 2),
            (-2.9, -2),
            (True, 1),
            (None, 0),
            ("4", 4),
            (" 2 ", 2),
            ("", 0),
            ("abc", 0),
            (math.nan, 0),
            ([1], 0),
            ("1_000", 0),
            ("inf", 0),
            ("nan", 0),
            ("1e1", 10),
            (".5", 0),
            ("0x10", 16),
            ("0b11", 3),
            ("-Infinity", -(2**63)),
        ],
    )
    def test_to_index(self, value, expected: int):
        assert to_index(value) == expected

    @pytest.mark.parametrize("text", ["1_000", "infinity", "nan", "1.2.3", "0x", "12px"])
    def test_parse_number_rejects_non_numbers(self, text: str):
        assert math.isnan(parse_number(text))

    @pytest.mark.parametrize(
        ("text", "expected"),
        [("  42 ", 42.0), ("+3.", 3.0), ("-1.5e2", -150.0), ("0o17", 15), ("", 0)],
    )
    def test_parse_number(self, text: str, expected: float):
        assert parse_number(text) == expected


class TestStrictEquals:
    @pytest.mark.parametrize(
        ("left", "right", "expected"),
        [
            ("a", "a", True),
            ("A", "a", False),
            (1, 1.0, True),
            (1, "1", False),
            (True, 1, False),
            (False, 0, False),
            (None, None, True),
            ([1, [2]], [1, [2]], True),
            ([1, [2]], [1, [3]], False),
            ({"a": 1}, {"a": 1}, True),
            ({"a": 1}, {"a": True}, False),
            ({"a": 1}, {"b": 1}, False),
        ],
    )
    def test_strict_equals(self, left, right, expected: bool):
        assert strict_equals(left, right) is expected


class TestFormatDisplayValue:
    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            (None, "null"),
            ("hi", '"hi"'),
            ('say "hi"', '"say \\"hi\\""'),
            ("héllo", '"héllo"'),
            (True, "true"),
            (4.0, "4"),
            ([1, 2, 3], "[3 items]"),
            ([], "[0 items]"),
            ({"a": 1}, "{...}"),
        ],
    )
    def test_format(self, value, expected: str):
        assert format_display_value(value) == expected
