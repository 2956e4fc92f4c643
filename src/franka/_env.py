"""Immutable variable environment.

Every operation returns a new Environment and leaves the original untouched,
so a ``let`` scope can never leak bindings into the caller's environment.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from types import MappingProxyType
from typing import Any

from ._errors import UndefinedVariableError
from ._values import variable_name


class Environment(Mapping[str, Any]):
    """Read-only mapping from variable name to value."""

    __slots__ = ("_bindings",)

    def __init__(self, bindings: Mapping[str, Any] | None = None) -> None:
        self._bindings = MappingProxyType(dict(bindings) if bindings else {})

    def __getitem__(self, name: str) -> Any:
        return self._bindings[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._bindings)

    def __len__(self) -> int:
        return len(self._bindings)

    def __repr__(self) -> str:
        return f"Environment({dict(self._bindings)!r})"

    def extend(self, name: str, value: Any) -> Environment:
        """Return a new environment with ``name`` bound (or shadowed) to ``value``."""
        new_bindings = dict(self._bindings)
        new_bindings[name] = value
        return Environment(new_bindings)

    def extend_many(self, bindings: Iterable[tuple[str, Any]]) -> Environment:
        new_bindings = dict(self._bindings)
        new_bindings.update(bindings)
        return Environment(new_bindings)

    def lookup(self, name: str) -> Any:
        """Look up a binding.

        Raises:
            UndefinedVariableError: If ``name`` is not bound.

        """
        try:
            return self._bindings[name]
        except KeyError:
            raise UndefinedVariableError(name) from None

    def resolve(self, reference: str) -> Any:
        """Resolve a ``$name`` variable reference."""
        return self.lookup(variable_name(reference))


def as_environment(env: Mapping[str, Any] | None) -> Environment:
    if isinstance(env, Environment):
        return env
    return Environment(env)
