"""Evaluation engine module for franka.

This module provides pure functions for evaluating logic expressions.
The strict evaluator and the coverage evaluator share one set of reduction
rules and differ only at each node boundary: the strict evaluator lets
failures propagate, the coverage evaluator records the node and substitutes
a placeholder for failures.

Key types:
- EvalOptions: Depth limit and placeholder value
- CoverageResult: Value and visited path identifiers of a coverage pass
- DisplayNode: A node in the display tree (label, type, value, coverage flag)
- evaluate / evaluate_with_coverage / build_display_tree: Entry points
"""

from ._coverage import CoverageEvaluator, CoverageResult, evaluate_leniently, evaluate_with_coverage
from ._engine import DEFAULT_MAX_DEPTH, PLACEHOLDER, EvalOptions, Evaluator, evaluate
from ._tree import CoverageSummary, DisplayNode, build_display_tree, coverage_summary

__all__ = [
    "DEFAULT_MAX_DEPTH",
    "PLACEHOLDER",
    "CoverageEvaluator",
    "CoverageResult",
    "CoverageSummary",
    "DisplayNode",
    "EvalOptions",
    "Evaluator",
    "build_display_tree",
    "coverage_summary",
    "evaluate",
    "evaluate_leniently",
    "evaluate_with_coverage",
]
