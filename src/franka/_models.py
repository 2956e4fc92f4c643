from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, TypeAlias

from pydantic import BaseModel, ConfigDict, Field

from ._env import Environment

if TYPE_CHECKING:
    from collections.abc import Mapping

logger = logging.getLogger(__name__)

Scalar: TypeAlias = bool | int | float | str | None


class ProgramInfo(BaseModel):
    model_config = ConfigDict(extra="allow")

    name: str
    description: str | None = None


class Program(BaseModel):
    """A program document: metadata, initial variables and one expression."""

    model_config = ConfigDict(extra="ignore")

    program: ProgramInfo
    variables: dict[str, Scalar] = Field(default_factory=dict)
    expression: Any

    @property
    def name(self) -> str:
        return self.program.name

    def environment(self, overrides: Mapping[str, Any] | None = None) -> Environment:
        """Build the initial environment, with ``overrides`` taking precedence."""
        env = Environment(self.variables)
        if overrides:
            logger.debug(f"Overriding variables: {sorted(overrides)}")
            env = env.extend_many(overrides.items())
        return env
