"""Reduction rules shared by the strict and the coverage evaluators."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from franka._ast import (
    AndOp,
    ConcatOp,
    EqualsOp,
    GetOp,
    IfOp,
    LengthOp,
    LetOp,
    LowercaseOp,
    NotOp,
    OrOp,
    SubstringOp,
    UppercaseOp,
    parse_operation,
)
from franka._env import Environment, as_environment
from franka._errors import EvaluationDepthExceededError
from franka._path import ItemPart, NodePath
from franka._values import ValueKind, classify, strict_equals, to_index, to_str, truthy

if TYPE_CHECKING:
    from collections.abc import Mapping

    from franka._ast import Child, Operation

logger = logging.getLogger(__name__)

DEFAULT_MAX_DEPTH = 128
PLACEHOLDER = "<error>"


@dataclass(frozen=True, slots=True)
class EvalOptions:
    """Options shared by every evaluation mode.

    Attributes:
        max_depth: Maximum nesting depth of the expression tree.
        placeholder: Value substituted for failing nodes by the coverage evaluator.

    """

    max_depth: int = DEFAULT_MAX_DEPTH
    placeholder: Any = PLACEHOLDER


class Reducer:
    """Recursive reduction of an expression tree.

    Subclasses decide what happens at each node boundary by overriding
    :meth:`visit`; the reduction rules themselves live only here.
    """

    def __init__(self, options: EvalOptions | None = None) -> None:
        self.options = options if options is not None else EvalOptions()

    def visit(self, node: Any, path: NodePath, env: Environment, depth: int) -> Any:
        return self.reduce(node, path, env, depth)

    def reduce(self, node: Any, path: NodePath, env: Environment, depth: int) -> Any:
        if depth > self.options.max_depth:
            raise EvaluationDepthExceededError(self.options.max_depth)

        match classify(node):
            case ValueKind.NULL | ValueKind.BOOLEAN | ValueKind.NUMBER | ValueKind.STRING:
                return node
            case ValueKind.VARIABLE:
                return env.resolve(node)
            case ValueKind.ARRAY:
                return [self.visit(item, path.join((ItemPart(i),)), env, depth + 1) for i, item in enumerate(node)]
            case ValueKind.OPERATION:
                operation = parse_operation(node)
                if operation is None:
                    return node
                logger.debug(f"Applying '{operation.name}' at {path}")
                return self.apply(operation, path, env, depth)

    def _child(self, child: Child, path: NodePath, env: Environment, depth: int) -> Any:
        return self.visit(child.node, path.join(child.parts), env, depth + 1)

    def apply(self, operation: Operation, path: NodePath, env: Environment, depth: int) -> Any:  # noqa: C901, PLR0911
        def ev(child: Child, scope: Environment = env) -> Any:
            return self._child(child, path, scope, depth)

        match operation:
            case GetOp(variable):
                return env.lookup(variable)
            case LetOp(bindings, body):
                scope = env
                for binding in bindings:
                    value = ev(binding, scope)
                    logger.debug(f"  Binding '{binding.label}' = {value!r}")
                    scope = scope.extend(binding.label, value)
                return ev(body, scope)
            case ConcatOp(values):
                return "".join("" if (v := ev(c)) is None else to_str(v) for c in values)
            case UppercaseOp(value):
                return to_str(ev(value)).upper()
            case LowercaseOp(value):
                return to_str(ev(value)).lower()
            case LengthOp(value):
                return len(to_str(ev(value)))
            case SubstringOp(value, start, end):
                text = to_str(ev(value))
                if end is None:
                    return _substring(text, ev(start))
                return _substring(text, ev(start), ev(end))
            case AndOp(values):
                results = [ev(c) for c in values]
                return all(truthy(v) for v in results)
            case OrOp(values):
                results = [ev(c) for c in values]
                return any(truthy(v) for v in results)
            case NotOp(value):
                return not truthy(ev(value))
            case EqualsOp(left, right):
                return strict_equals(ev(left), ev(right))
            case IfOp(condition, then, otherwise):
                branch = then if truthy(ev(condition)) else otherwise
                return ev(branch) if branch is not None else None
            case _:
                msg = f"Unsupported operation: {operation!r}"
                raise TypeError(msg)


def _substring(text: str, start: Any, *end: Any) -> str:
    """Zero-based substring with clamped bounds, swapped when ``start > end``.

    Without an ``end`` the substring runs to the end of ``text``.
    """
    length = len(text)
    lo = min(max(to_index(start), 0), length)
    hi = min(max(to_index(end[0]), 0), length) if end else length
    if lo > hi:
        lo, hi = hi, lo
    return text[lo:hi]


class Evaluator(Reducer):
    """Strict evaluator: any failure propagates to the caller."""

    def evaluate(self, expression: Any, env: Mapping[str, Any] | None = None) -> Any:
        return self.visit(expression, NodePath(), as_environment(env), 0)


def evaluate(expression: Any, env: Mapping[str, Any] | None = None, *, options: EvalOptions | None = None) -> Any:
    """Evaluate an expression tree.

    Args:
        expression: The expression tree.
        env: Initial variable bindings.
        options: Evaluation options.

    Returns:
        The computed value.

    Raises:
        FrankaError: On an undefined variable, unknown operation, malformed
            operation payload or excessive nesting.

    """
    return Evaluator(options).evaluate(expression, env)
