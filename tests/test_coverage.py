"""Tests for the coverage-instrumented evaluator."""

from typing import Any

import pytest

from franka._eval_engine import (
    PLACEHOLDER,
    CoverageResult,
    EvalOptions,
    evaluate,
    evaluate_leniently,
    evaluate_with_coverage,
)
from franka._path import AttributePart, NodePath


class TestCoverageRecording:
    def test_taken_branch_is_covered(self) -> None:
        expr = {"if": {"condition": True, "then": "A", "else": "B"}}

        result = evaluate_with_coverage(expr)

        assert result.value == "A"
        assert 'root.if.then#"A"' in result.coverage
        assert 'root.if.else#"B"' not in result.coverage

    def test_every_visited_node_is_recorded(self) -> None:
        expr = {"if": {"condition": True, "then": "A", "else": "B"}}

        result = evaluate_with_coverage(expr)

        assert result.coverage == frozenset(
            {
                "root#{if}",
                "root.if.condition#true",
                'root.if.then#"A"',
            },
        )

    def test_sequence_elements(self) -> None:
        result = evaluate_with_coverage({"concat": ["a", "$x"]}, {"x": "b"})

        assert result.value == "ab"
        assert result.coverage == frozenset(
            {
                "root#{concat}",
                'root.concat[0]#"a"',
                'root.concat[1]#"$x"',
            },
        )

    def test_values_payload_routes(self) -> None:
        result = evaluate_with_coverage({"and": {"values": [True, 1]}})

        assert 'root.and.values[0]#true' in result.coverage
        assert "root.and.values[1]#1" in result.coverage

    def test_let_bindings_and_body(self) -> None:
        expr = {"let": {"a": {"uppercase": "x"}, "in": "$a"}}

        result = evaluate_with_coverage(expr)

        assert result.value == "X"
        assert "root.let.a#{uppercase}" in result.coverage
        assert 'root.let.a.uppercase#"x"' in result.coverage
        assert 'root.let.in#"$a"' in result.coverage

    def test_array_elements(self) -> None:
        result = evaluate_with_coverage([1, [2]])

        assert result.coverage == frozenset({"root#array(2)", "root[0]#1", "root[1]#array(1)", "root[1][0]#2"})

    def test_is_covered(self) -> None:
        result = evaluate_with_coverage({"not": False})

        assert result.is_covered(NodePath(parts=(AttributePart("not"),)), False)
        assert not result.is_covered(NodePath(parts=(AttributePart("not"),)), True)

    def test_same_sub_expression_at_two_routes(self) -> None:
        result = evaluate_with_coverage({"concat": ["$x", "$x"]}, {"x": "y"})

        assert 'root.concat[0]#"$x"' in result.coverage
        assert 'root.concat[1]#"$x"' in result.coverage

    def test_nodes_visited_once_per_evaluation(self) -> None:
        expr = {"equals": {"left": {"length": "abc"}, "right": 3}}

        result = evaluate_with_coverage(expr)

        assert result.value is True
        assert result.coverage == frozenset(
            {
                "root#{equals}",
                "root.equals.left#{length}",
                'root.equals.left.length#"abc"',
                "root.equals.right#3",
            },
        )


class TestPlaceholderSubstitution:
    def test_undefined_variable_at_root(self) -> None:
        result = evaluate_with_coverage("$missing")

        assert result.value == PLACEHOLDER
        assert not result.success
        assert result.errors == (('root#"$missing"', "Undefined variable: missing"),)

    def test_failure_does_not_stop_siblings(self) -> None:
        result = evaluate_with_coverage({"concat": ["a", "$missing", "c"]})

        assert result.value == "a<error>c"
        assert 'root.concat[2]#"c"' in result.coverage
        assert [pid for pid, _ in result.errors] == ['root.concat[1]#"$missing"']

    def test_unknown_operation_is_recorded_but_not_descended(self) -> None:
        result = evaluate_with_coverage({"concat": ["x", {"nope": {"uppercase": "y"}}]})

        assert result.value == "x<error>"
        assert "root.concat[1]#{nope}" in result.coverage
        assert not any(pid.startswith("root.concat[1].") for pid in result.coverage)
        assert result.errors[0][1] == "Unknown operation: nope"

    def test_malformed_payload(self) -> None:
        result = evaluate_with_coverage({"concat": ["<", {"substring": {"value": "abc"}}, ">"]})

        assert result.value == "<<error>>"
        assert "missing required field 'start'" in result.errors[0][1]

    def test_placeholder_flows_into_parent(self) -> None:
        result = evaluate_with_coverage({"length": "$missing"})

        assert result.value == len(PLACEHOLDER)

    def test_custom_placeholder(self) -> None:
        result = evaluate_with_coverage("$missing", options=EvalOptions(placeholder="?"))

        assert result.value == "?"

    def test_depth_exceeded_becomes_placeholder(self) -> None:
        expr: Any = "x"
        for _ in range(10):
            expr = [expr]

        result = evaluate_with_coverage(expr, options=EvalOptions(max_depth=3))

        assert result.value == [[[[PLACEHOLDER]]]]
        assert "Evaluation depth exceeded" in result.errors[0][1]

    def test_untaken_branch_is_not_evaluated(self) -> None:
        expr = {"if": {"condition": False, "then": "$missing", "else": "ok"}}

        result = evaluate_with_coverage(expr)

        assert result.value == "ok"
        assert result.success

    def test_failing_condition_selects_then_branch(self) -> None:
        # The placeholder is a non-empty string and therefore truthy
        expr = {"if": {"condition": "$missing", "then": "A", "else": "B"}}

        result = evaluate_with_coverage(expr)

        assert result.value == "A"
        assert len(result.errors) == 1

    def test_non_string_operation_key(self) -> None:
        result = evaluate_with_coverage({"concat": ["a", {1: "b"}]})

        assert result.value == "a<error>"
        assert "root.concat[1]#{1}" in result.coverage
        assert result.errors[0][1] == "Unknown operation: 1"

    def test_mixed_key_types(self) -> None:
        result = evaluate_with_coverage([{True: 1, "x": 2}])

        assert result.value == [PLACEHOLDER]
        assert "root[0]#{True,x}" in result.coverage

    def test_evaluate_leniently(self) -> None:
        assert evaluate_leniently({"concat": ["$missing", "!"]}) == "<error>!"


class TestAgreementWithStrictEvaluator:
    @pytest.mark.parametrize(
        ("expr", "env"),
        [
            ({"concat": ["a", {"uppercase": "$b"}]}, {"b": "c"}),
            ({"let": {"a": 1, "b": "$a", "in": ["$a", "$b"]}}, {}),
            ({"if": {"condition": {"not": "$f"}, "then": "yes", "else": "no"}}, {"f": False}),
            ({"equals": {"left": {"length": "abc"}, "right": 3}}, {}),
            ({"substring": {"value": "hello", "start": 1, "end": 3}}, {}),
            ({"or": [False, {"and": [True, "$t"]}]}, {"t": 1}),
        ],
    )
    def test_same_value_without_failures(self, expr: Any, env: dict[str, Any]) -> None:
        result = evaluate_with_coverage(expr, env)

        assert result.success
        assert result.value == evaluate(expr, env)

    def test_result_is_immutable(self) -> None:
        result = evaluate_with_coverage("x")

        assert isinstance(result, CoverageResult)
        assert isinstance(result.coverage, frozenset)
        assert isinstance(result.errors, tuple)
