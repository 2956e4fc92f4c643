"""Display trees for expressions, optionally annotated with coverage.

A display tree mirrors the expression tree: every node carries a label, an
inferred type tag, a formatted value and, when a coverage set is supplied,
whether the node was visited by the coverage evaluator. Routes and path
identifiers are computed exactly as the evaluators compute them, so
coverage from one pass can be matched against a freshly built tree.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from franka._ast import GetOp, IfOp, LetOp, parse_operation
from franka._env import Environment, as_environment
from franka._errors import FrankaError
from franka._path import ItemPart, NodePath, path_id
from franka._values import ValueKind, classify, format_display_value

from ._coverage import evaluate_leniently
from ._engine import EvalOptions

if TYPE_CHECKING:
    from collections.abc import Collection, Generator, Mapping

    from franka._ast import Operation

ROOT_LABEL = "root"


@dataclass(frozen=True, slots=True)
class DisplayNode:
    """A node in the display tree.

    Attributes:
        label: Role of the node within its parent (``root`` for the root),
            followed by the operation name for operation nodes.
        type: Inferred type tag (``string``, ``array``, ``operation``, ``let-in``...).
        value: Human-formatted value of the node.
        path: Route from the root of the expression tree.
        path_id: Path identifier used to match coverage.
        covered: Whether the node was visited; None when no coverage was supplied.
        children: Child nodes.

    """

    label: str
    type: str
    value: str
    path: NodePath
    path_id: str
    covered: bool | None = None
    children: tuple[DisplayNode, ...] = ()

    @property
    def is_leaf(self) -> bool:
        return len(self.children) == 0

    def iter_nodes(self) -> Generator[DisplayNode]:
        """Iterate over this node and all its descendants, depth first."""
        yield self
        for child in self.children:
            yield from child.iter_nodes()

    def get_child(self, label: str) -> DisplayNode | None:
        """Get a direct child by its role label (the part before ``:``)."""
        for child in self.children:
            if child.label.split(":", 1)[0] == label:
                return child
        return None

    def find(self, path: NodePath) -> DisplayNode | None:
        for node in self.iter_nodes():
            if node.path == path:
                return node
        return None


@dataclass(frozen=True, slots=True)
class CoverageSummary:
    total: int
    covered: int

    @property
    def percentage(self) -> int:
        if self.total == 0:
            return 0
        return math.floor(self.covered * 100 / self.total + 0.5)


def coverage_summary(root: DisplayNode) -> CoverageSummary:
    """Count covered nodes in a display tree."""
    total = 0
    covered = 0
    for node in root.iter_nodes():
        total += 1
        if node.covered:
            covered += 1
    return CoverageSummary(total=total, covered=covered)


def _operation_type(operation: Operation) -> str:
    match operation:
        case LetOp():
            return "let-in"
        case IfOp():
            return "conditional"
        case GetOp():
            return ValueKind.VARIABLE.value
        case _:
            return ValueKind.OPERATION.value


class _TreeBuilder:
    def __init__(self, coverage: Collection[str] | None, options: EvalOptions | None) -> None:
        self.coverage = coverage
        self.options = options if options is not None else EvalOptions()

    def _value(self, node: Any, env: Environment) -> Any:
        return evaluate_leniently(node, env, options=self.options)

    def build(self, node: Any, path: NodePath, env: Environment, role: str, depth: int = 0) -> DisplayNode:
        identifier = path_id(path, node)
        covered = None if self.coverage is None else identifier in self.coverage
        label = role
        children: tuple[DisplayNode, ...] = ()

        try:
            kind = classify(node)
        except FrankaError:
            kind = None
        if kind is None or depth > self.options.max_depth:
            return DisplayNode(role, "invalid", str(self.options.placeholder), path, identifier, covered)

        type_tag = kind.value
        if kind is ValueKind.ARRAY:
            children = tuple(
                self.build(item, path.join((ItemPart(i),)), env, f"[{i}]", depth + 1) for i, item in enumerate(node)
            )
        elif kind is ValueKind.OPERATION:
            try:
                operation = parse_operation(node)
            except FrankaError:
                operation = None
                type_tag = "invalid"
            else:
                type_tag = "object" if operation is None else _operation_type(operation)
            if operation is not None:
                label = f"{role}: {operation.name}" if role != ROOT_LABEL else operation.name
                children = self._operation_children(operation, path, env, depth)

        return DisplayNode(
            label=label,
            type=type_tag,
            value=format_display_value(self._value(node, env)),
            path=path,
            path_id=identifier,
            covered=covered,
            children=children,
        )

    def _operation_children(
        self,
        operation: Operation,
        path: NodePath,
        env: Environment,
        depth: int,
    ) -> tuple[DisplayNode, ...]:
        if isinstance(operation, LetOp):
            # Each binding sees the bindings before it; the body sees all of them
            nodes: list[DisplayNode] = []
            scope = env
            for binding in operation.bindings:
                nodes.append(self.build(binding.node, path.join(binding.parts), scope, binding.label, depth + 1))
                scope = scope.extend(binding.label, self._value(binding.node, scope))
            body = operation.body
            nodes.append(self.build(body.node, path.join(body.parts), scope, body.label, depth + 1))
            return tuple(nodes)
        return tuple(self.build(c.node, path.join(c.parts), env, c.label, depth + 1) for c in operation.children())


def build_display_tree(
    expression: Any,
    env: Mapping[str, Any] | None = None,
    coverage: Collection[str] | None = None,
    *,
    options: EvalOptions | None = None,
) -> DisplayNode:
    """Build the display tree of an expression.

    Args:
        expression: The expression tree.
        env: Variable bindings used to compute the displayed values.
        coverage: Path identifiers recorded by a coverage pass over the same
            expression. When given, every node is flagged covered or not.
        options: Evaluation options used to compute the displayed values.

    Returns:
        The root DisplayNode.

    """
    builder = _TreeBuilder(coverage, options)
    return builder.build(expression, NodePath(), as_environment(env), ROOT_LABEL)
