from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from ._eval_engine import (
    CoverageResult,
    DisplayNode,
    EvalOptions,
    build_display_tree,
    evaluate,
    evaluate_with_coverage,
)
from ._io import load_program

if TYPE_CHECKING:
    from collections.abc import Mapping
    from pathlib import Path

    from ._models import Program

logger = logging.getLogger(__name__)


def execute_program(
    program: Program,
    *,
    overrides: Mapping[str, Any] | None = None,
    options: EvalOptions | None = None,
) -> Any:
    """Evaluate a program's expression strictly under its initial variables."""
    env = program.environment(overrides)
    logger.debug(f"Executing program '{program.name}' with variables {sorted(env)}")
    return evaluate(program.expression, env, options=options)


def execute_file(
    path: Path | str,
    *,
    overrides: Mapping[str, Any] | None = None,
    options: EvalOptions | None = None,
) -> Any:
    return execute_program(load_program(path), overrides=overrides, options=options)


@dataclass(frozen=True, slots=True)
class ProgramCoverage:
    """Coverage pass over a program together with the annotated display tree."""

    result: CoverageResult
    tree: DisplayNode


def cover_program(
    program: Program,
    *,
    overrides: Mapping[str, Any] | None = None,
    options: EvalOptions | None = None,
) -> ProgramCoverage:
    """Run a coverage pass over a program and build its annotated display tree."""
    env = program.environment(overrides)
    logger.debug(f"Running coverage pass over program '{program.name}'")
    result = evaluate_with_coverage(program.expression, env, options=options)
    logger.debug(f"  {len(result.coverage)} nodes visited, {len(result.errors)} placeholders")
    tree = build_display_tree(program.expression, env, result.coverage, options=options)
    return ProgramCoverage(result=result, tree=tree)
