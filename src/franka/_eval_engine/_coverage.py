"""Coverage-instrumented evaluation.

Runs the same reduction rules as the strict evaluator, but records the path
identifier of every visited node and never lets a failure escape: a failing
node is replaced by a placeholder and evaluation of its siblings and
ancestors carries on.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from franka._env import Environment, as_environment
from franka._errors import FrankaError
from franka._path import NodePath, path_id

from ._engine import EvalOptions, Reducer

if TYPE_CHECKING:
    from collections.abc import Mapping

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class CoverageResult:
    """Result of a coverage evaluation pass.

    Attributes:
        value: The computed value, possibly containing placeholders.
        coverage: Path identifiers of every visited node.
        errors: List of (path_id, error_message) for nodes replaced by a placeholder.

    """

    value: Any
    coverage: frozenset[str] = frozenset()
    errors: tuple[tuple[str, str], ...] = ()

    @property
    def success(self) -> bool:
        """Check if evaluation completed without substituting any placeholder."""
        return len(self.errors) == 0

    def is_covered(self, path: NodePath, node: Any) -> bool:
        return path_id(path, node) in self.coverage


class CoverageEvaluator(Reducer):
    """Lenient evaluator recording the nodes it visits."""

    def __init__(self, options: EvalOptions | None = None) -> None:
        super().__init__(options)
        self.coverage: set[str] = set()
        self.errors: list[tuple[str, str]] = []

    def visit(self, node: Any, path: NodePath, env: Environment, depth: int) -> Any:
        identifier = path_id(path, node)
        self.coverage.add(identifier)
        try:
            return self.reduce(node, path, env, depth)
        except FrankaError as e:
            logger.debug(f"Substituting placeholder at {path}: {e.message}")
            self.errors.append((identifier, e.message))
            return self.options.placeholder

    def evaluate(self, expression: Any, env: Mapping[str, Any] | None = None) -> CoverageResult:
        value = self.visit(expression, NodePath(), as_environment(env), 0)
        return CoverageResult(value=value, coverage=frozenset(self.coverage), errors=tuple(self.errors))


def evaluate_with_coverage(
    expression: Any,
    env: Mapping[str, Any] | None = None,
    *,
    options: EvalOptions | None = None,
) -> CoverageResult:
    """Evaluate an expression tree leniently while recording coverage.

    Never raises for malformed expressions: failing nodes evaluate to
    ``options.placeholder``.

    Args:
        expression: The expression tree.
        env: Initial variable bindings.
        options: Evaluation options.

    Returns:
        The computed value together with the set of visited path identifiers.

    """
    return CoverageEvaluator(options).evaluate(expression, env)


def evaluate_leniently(expression: Any, env: Mapping[str, Any] | None = None, *, options: EvalOptions | None = None) -> Any:
    """Evaluate with placeholder substitution, discarding coverage."""
    return CoverageEvaluator(options).evaluate(expression, env).value

