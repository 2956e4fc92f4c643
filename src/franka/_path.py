"""Traversal routes and path identifiers for expression tree nodes.

A path identifier combines the route from the root of the expression tree to
a node with the structural signature of the node itself. Both the coverage
evaluator and the display-tree builder compute identifiers with
:func:`path_id`, so coverage recorded in one pass can be matched against a
freshly rebuilt tree of the same expression.
"""

from __future__ import annotations

import json
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any, ClassVar, TypeAlias


class PartBase:
    pass


@dataclass(slots=True, frozen=True)
class AttributePart(PartBase):
    name: str


@dataclass(slots=True, frozen=True)
class ItemPart(PartBase):
    index: int


Parts: TypeAlias = tuple[PartBase, ...]


@dataclass(slots=True, frozen=True)
class NodePath:
    parts: Parts = ()

    ROOT: ClassVar[str] = "root"

    def __str__(self) -> str:
        result = self.ROOT
        for part in self.parts:
            match part:
                case AttributePart(name):
                    result += f".{name}"
                case ItemPart(index):
                    result += f"[{index}]"
                case _:
                    msg = f"Unknown part type: {type(part)}"
                    raise TypeError(msg)
        return result

    def join(self, parts: Parts) -> NodePath:
        return NodePath(parts=self.parts + parts)


def node_signature(node: Any) -> str:
    """Structural signature of a node, independent of its evaluated result."""
    if isinstance(node, Mapping):
        return "{" + ",".join(sorted(str(key) for key in node)) + "}"
    if isinstance(node, Sequence) and not isinstance(node, str):
        return f"array({len(node)})"
    try:
        return json.dumps(node, ensure_ascii=False)
    except (TypeError, ValueError):
        # Not JSON-encodable; still needs a stable identifier
        return repr(node)


def path_id(path: NodePath, node: Any) -> str:
    return f"{path}#{node_signature(node)}"

