"""Logic expressions: evaluation and coverage."""

__all__ = [
    "PLACEHOLDER",
    "CoverageResult",
    "CoverageSummary",
    "DisplayNode",
    "Environment",
    "ErrorCode",
    "EvalOptions",
    "EvaluationDepthExceededError",
    "FrankaError",
    "InvalidExpressionError",
    "MalformedOperationArgsError",
    "NodePath",
    "Program",
    "ProgramCoverage",
    "ProgramInfo",
    "ProgramLoadError",
    "UndefinedVariableError",
    "UnknownOperationError",
    "ValueKind",
    "build_display_tree",
    "classify",
    "cover_program",
    "coverage_summary",
    "evaluate",
    "evaluate_with_coverage",
    "execute_file",
    "execute_program",
    "export_coverage_to_toml",
    "load_program",
    "path_id",
]

from ._env import Environment
from ._errors import (
    ErrorCode,
    EvaluationDepthExceededError,
    FrankaError,
    InvalidExpressionError,
    MalformedOperationArgsError,
    UndefinedVariableError,
    UnknownOperationError,
)
from ._eval import ProgramCoverage, cover_program, execute_file, execute_program
from ._eval_engine import (
    PLACEHOLDER,
    CoverageResult,
    CoverageSummary,
    DisplayNode,
    EvalOptions,
    build_display_tree,
    coverage_summary,
    evaluate,
    evaluate_with_coverage,
)
from ._io import ProgramLoadError, export_coverage_to_toml, load_program
from ._models import Program, ProgramInfo
from ._path import NodePath, path_id
from ._values import ValueKind, classify
