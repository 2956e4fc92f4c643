"""Typed operation variants and the parser that builds them from raw mappings.

Parsing is shallow: :func:`parse_operation` validates the shape of a single
operation mapping and normalizes its payload, but the child expressions are
kept as raw values inside :class:`Child` and are only parsed when an
evaluator reduces them. An untaken ``if`` branch is therefore never parsed,
let alone evaluated.

Besides the canonical syntax, two legacy forms are accepted and produce the
same variants:

- ``{"get": "name"}`` as a variable reference,
- ``{"if": cond, "then": a, "else": b}`` and ``{"let": {...}, "in": body}``
  with the branches as sibling keys.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any, ClassVar

from ._errors import MalformedOperationArgsError, UnknownOperationError
from ._path import AttributePart, ItemPart, Parts

logger = logging.getLogger(__name__)

LET_BODY_KEY = "in"


@dataclass(slots=True, frozen=True)
class Child:
    """A raw sub-expression together with its route relative to the operation node."""

    parts: Parts
    node: Any
    label: str


class Operation:
    name: ClassVar[str]

    def children(self) -> tuple[Child, ...]:
        """Sub-expressions in display order."""
        raise NotImplementedError


@dataclass(slots=True, frozen=True)
class GetOp(Operation):
    variable: str

    name: ClassVar[str] = "get"

    def children(self) -> tuple[Child, ...]:
        return ()


@dataclass(slots=True, frozen=True)
class LetOp(Operation):
    bindings: tuple[Child, ...]
    body: Child

    name: ClassVar[str] = "let"

    def children(self) -> tuple[Child, ...]:
        return (*self.bindings, self.body)


@dataclass(slots=True, frozen=True)
class ConcatOp(Operation):
    values: tuple[Child, ...]

    name: ClassVar[str] = "concat"

    def children(self) -> tuple[Child, ...]:
        return self.values


@dataclass(slots=True, frozen=True)
class UppercaseOp(Operation):
    value: Child

    name: ClassVar[str] = "uppercase"

    def children(self) -> tuple[Child, ...]:
        return (self.value,)


@dataclass(slots=True, frozen=True)
class LowercaseOp(Operation):
    value: Child

    name: ClassVar[str] = "lowercase"

    def children(self) -> tuple[Child, ...]:
        return (self.value,)


@dataclass(slots=True, frozen=True)
class LengthOp(Operation):
    value: Child

    name: ClassVar[str] = "length"

    def children(self) -> tuple[Child, ...]:
        return (self.value,)


@dataclass(slots=True, frozen=True)
class SubstringOp(Operation):
    value: Child
    start: Child
    end: Child | None = None

    name: ClassVar[str] = "substring"

    def children(self) -> tuple[Child, ...]:
        if self.end is None:
            return (self.value, self.start)
        return (self.value, self.start, self.end)


@dataclass(slots=True, frozen=True)
class AndOp(Operation):
    values: tuple[Child, ...]

    name: ClassVar[str] = "and"

    def children(self) -> tuple[Child, ...]:
        return self.values


@dataclass(slots=True, frozen=True)
class OrOp(Operation):
    values: tuple[Child, ...]

    name: ClassVar[str] = "or"

    def children(self) -> tuple[Child, ...]:
        return self.values


@dataclass(slots=True, frozen=True)
class NotOp(Operation):
    value: Child

    name: ClassVar[str] = "not"

    def children(self) -> tuple[Child, ...]:
        return (self.value,)


@dataclass(slots=True, frozen=True)
class EqualsOp(Operation):
    left: Child
    right: Child

    name: ClassVar[str] = "equals"

    def children(self) -> tuple[Child, ...]:
        return (self.left, self.right)


@dataclass(slots=True, frozen=True)
class IfOp(Operation):
    condition: Child
    then: Child | None = None
    otherwise: Child | None = None

    name: ClassVar[str] = "if"

    def children(self) -> tuple[Child, ...]:
        return tuple(c for c in (self.condition, self.then, self.otherwise) if c is not None)


# --- Payload normalization ---


def _is_sequence(payload: Any) -> bool:
    return isinstance(payload, Sequence) and not isinstance(payload, str)


def _sequence_payload(operation: str, payload: Any) -> tuple[Child, ...]:
    """Accept ``[a, b]`` or ``{"values": [a, b]}``."""
    prefix: Parts = (AttributePart(operation),)
    if _is_sequence(payload):
        items = payload
    elif isinstance(payload, Mapping) and "values" in payload:
        items = payload["values"]
        prefix = (*prefix, AttributePart("values"))
        if not _is_sequence(items):
            raise MalformedOperationArgsError(operation, "'values' must be a sequence")
    else:
        raise MalformedOperationArgsError(operation, "expected a sequence or an object with a 'values' field")
    return tuple(Child((*prefix, ItemPart(i)), item, f"item {i}") for i, item in enumerate(items))


def _value_payload(operation: str, payload: Any) -> Child:
    """Accept a bare value or ``{"value": v}``."""
    if isinstance(payload, Mapping) and "value" in payload:
        return Child((AttributePart(operation), AttributePart("value")), payload["value"], "value")
    return Child((AttributePart(operation),), payload, "value")


def _required(operation: str, payload: Mapping[str, Any], key: str) -> Child:
    if key not in payload:
        raise MalformedOperationArgsError(operation, f"missing required field '{key}'")
    return Child((AttributePart(operation), AttributePart(key)), payload[key], key)


def _optional(operation: str, payload: Mapping[str, Any], key: str) -> Child | None:
    if key not in payload:
        return None
    return _required(operation, payload, key)


def _object_payload(operation: str, payload: Any, fields: str) -> Mapping[str, Any]:
    if not isinstance(payload, Mapping):
        raise MalformedOperationArgsError(operation, f"expected an object with {fields}")
    return payload


# --- Per-operation parsers ---


def _parse_get(payload: Any) -> GetOp:
    if not isinstance(payload, str):
        raise MalformedOperationArgsError("get", "expected a variable name")
    return GetOp(variable=payload)


def _parse_let(payload: Any) -> LetOp:
    bindings = _object_payload("let", payload, "bindings and an 'in' expression")
    if LET_BODY_KEY not in bindings:
        raise MalformedOperationArgsError("let", "missing 'in' expression")
    return LetOp(
        bindings=tuple(
            Child((AttributePart("let"), AttributePart(str(key))), value, str(key))
            for key, value in bindings.items()
            if key != LET_BODY_KEY
        ),
        body=Child((AttributePart("let"), AttributePart(LET_BODY_KEY)), bindings[LET_BODY_KEY], LET_BODY_KEY),
    )


def _parse_substring(payload: Any) -> SubstringOp:
    args = _object_payload("substring", payload, "'value' and 'start' fields")
    return SubstringOp(
        value=_required("substring", args, "value"),
        start=_required("substring", args, "start"),
        end=_optional("substring", args, "end"),
    )


def _parse_equals(payload: Any) -> EqualsOp:
    args = _object_payload("equals", payload, "'left' and 'right' fields")
    return EqualsOp(left=_required("equals", args, "left"), right=_required("equals", args, "right"))


def _parse_if(payload: Any) -> IfOp:
    args = _object_payload("if", payload, "a 'condition' field")
    return IfOp(
        condition=_required("if", args, "condition"),
        then=_optional("if", args, "then"),
        otherwise=_optional("if", args, "else"),
    )


_PARSERS: dict[str, Callable[[Any], Operation]] = {
    "get": _parse_get,
    "let": _parse_let,
    "concat": lambda payload: ConcatOp(values=_sequence_payload("concat", payload)),
    "uppercase": lambda payload: UppercaseOp(value=_value_payload("uppercase", payload)),
    "lowercase": lambda payload: LowercaseOp(value=_value_payload("lowercase", payload)),
    "length": lambda payload: LengthOp(value=_value_payload("length", payload)),
    "substring": _parse_substring,
    "and": lambda payload: AndOp(values=_sequence_payload("and", payload)),
    "or": lambda payload: OrOp(values=_sequence_payload("or", payload)),
    "not": lambda payload: NotOp(value=_value_payload("not", payload)),
    "equals": _parse_equals,
    "if": _parse_if,
}

OPERATION_NAMES = frozenset(_PARSERS)


# --- Legacy sibling-key forms ---


def _parse_flat_if(node: Mapping[str, Any]) -> IfOp:
    def sibling(key: str, label: str) -> Child | None:
        if key not in node:
            return None
        return Child((AttributePart(key),), node[key], label)

    return IfOp(
        condition=Child((AttributePart("if"),), node["if"], "condition"),
        then=sibling("then", "then"),
        otherwise=sibling("else", "else"),
    )


def _parse_flat_let(node: Mapping[str, Any]) -> LetOp:
    bindings = node["let"]
    if not isinstance(bindings, Mapping):
        raise MalformedOperationArgsError("let", "expected an object of bindings")
    return LetOp(
        bindings=tuple(
            Child((AttributePart("let"), AttributePart(str(key))), value, str(key))
            for key, value in bindings.items()
            if key != LET_BODY_KEY
        ),
        body=Child((AttributePart(LET_BODY_KEY),), node[LET_BODY_KEY], LET_BODY_KEY),
    )


def parse_operation(node: Mapping[str, Any]) -> Operation | None:
    """Parse one operation mapping into its typed variant.

    Args:
        node: The operation mapping. Its first key names the operation.

    Returns:
        The typed operation, or None for the empty mapping (which evaluates
        to itself).

    Raises:
        UnknownOperationError: If the key is not a recognized operation.
        MalformedOperationArgsError: If the payload has the wrong shape.

    """
    if not node:
        return None

    name = next(iter(node))
    if name == "if" and ("then" in node or "else" in node):
        logger.debug("Parsing legacy sibling-key 'if'")
        return _parse_flat_if(node)
    if name == "let" and LET_BODY_KEY in node:
        logger.debug("Parsing legacy sibling-key 'let'")
        return _parse_flat_let(node)

    parser = _PARSERS.get(name) if isinstance(name, str) else None
    if parser is None:
        raise UnknownOperationError(str(name))
    return parser(node[name])
