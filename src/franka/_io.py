from __future__ import annotations

import json
import logging
import re
import tomllib
from pathlib import Path
from typing import TYPE_CHECKING, Any

import tomli_w
import yaml
from pydantic import ValidationError

from ._eval_engine import coverage_summary
from ._models import Program
from ._values import format_display_value

if TYPE_CHECKING:
    from ._eval_engine import CoverageResult, DisplayNode

logger = logging.getLogger(__name__)

YAML_SUFFIXES = frozenset({".yaml", ".yml"})

_BOOL_TAG = "tag:yaml.org,2002:bool"
_INT_TAG = "tag:yaml.org,2002:int"
_FLOAT_TAG = "tag:yaml.org,2002:float"
_TIMESTAMP_TAG = "tag:yaml.org,2002:timestamp"


class CoreSchemaLoader(yaml.SafeLoader):
    """Safe YAML loader resolving plain scalars with the YAML 1.2 core schema.

    Only ``true``/``false`` are booleans, integers are decimal, ``0o`` octal or
    ``0x`` hex, and timestamps stay strings. ``yes``, ``no``, ``on``, ``off``
    and ``2024-01-01`` are therefore plain strings.
    """


CoreSchemaLoader.yaml_implicit_resolvers = {
    first: [(tag, regexp) for tag, regexp in resolvers if tag not in {_BOOL_TAG, _INT_TAG, _FLOAT_TAG, _TIMESTAMP_TAG}]
    for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}
CoreSchemaLoader.add_implicit_resolver(
    _BOOL_TAG,
    re.compile(r"^(?:true|True|TRUE|false|False|FALSE)$"),
    list("tTfF"),
)
CoreSchemaLoader.add_implicit_resolver(
    _INT_TAG,
    re.compile(r"^(?:[-+]?[0-9]+|0o[0-7]+|0x[0-9a-fA-F]+)$"),
    list("-+0123456789"),
)
CoreSchemaLoader.add_implicit_resolver(
    _FLOAT_TAG,
    re.compile(
        r"^(?:[-+]?(?:\.[0-9]+|[0-9]+(?:\.[0-9]*)?)(?:[eE][-+]?[0-9]+)?"
        r"|[-+]?\.(?:inf|Inf|INF)|\.(?:nan|NaN|NAN))$",
    ),
    list("-+.0123456789"),
)


def _construct_core_int(loader: CoreSchemaLoader, node: yaml.ScalarNode) -> int:
    value = loader.construct_scalar(node)
    if value.startswith(("0o", "0x")):
        return int(value, 0)
    # Leading zeros are decimal in the core schema
    return int(value, 10)


CoreSchemaLoader.add_constructor(_INT_TAG, _construct_core_int)


class ProgramLoadError(Exception):
    """A program document could not be read or is invalid."""


def program_from_dict(data: Any, source: str = "<data>") -> Program:
    """Validate raw document contents into a Program.

    Raises:
        ProgramLoadError: If the contents do not form a valid program document.

    """
    if not isinstance(data, dict):
        msg = f"Invalid program document in {source}: expected a mapping at the top level"
        raise ProgramLoadError(msg)
    try:
        return Program.model_validate(data)
    except ValidationError as e:
        msg = f"Invalid program document in {source}:\n{e}"
        raise ProgramLoadError(msg) from e


def _read_document(path: Path) -> Any:
    suffix = path.suffix.lower()
    if suffix in YAML_SUFFIXES:
        with path.open(encoding="utf-8") as f:
            return yaml.load(f, Loader=CoreSchemaLoader)  # noqa: S506
    if suffix == ".json":
        with path.open(encoding="utf-8") as f:
            return json.load(f)
    if suffix == ".toml":
        with path.open("rb") as f:
            return tomllib.load(f)
    msg = f"Unsupported program file type '{path.suffix}' (expected .yaml, .yml, .json or .toml)"
    raise ProgramLoadError(msg)


def load_program(path: Path | str) -> Program:
    """Load a program document from a YAML, JSON or TOML file.

    Args:
        path: Path to the program file. The format is chosen by suffix.

    Returns:
        The validated Program.

    Raises:
        ProgramLoadError: If the file cannot be read or parsed, or its
            contents are not a valid program document.

    """
    path = Path(path)
    try:
        data = _read_document(path)
    except OSError as e:
        msg = f"Cannot read program file {path}: {e}"
        raise ProgramLoadError(msg) from e
    except (yaml.YAMLError, json.JSONDecodeError, tomllib.TOMLDecodeError) as e:
        msg = f"Cannot parse program file {path}: {e}"
        raise ProgramLoadError(msg) from e

    program = program_from_dict(data, str(path))
    logger.debug(f"Loaded program '{program.name}' from {path}")
    return program


def coverage_report_to_dict(program: Program, result: CoverageResult, tree: DisplayNode) -> dict[str, Any]:
    """Convert a coverage pass into a nested dictionary suitable for TOML export.

    ``None`` has no TOML representation, so the result value is stored in its
    display form.
    """
    summary = coverage_summary(tree)
    all_ids = [node.path_id for node in tree.iter_nodes()]
    report: dict[str, Any] = {
        "program": {"name": program.name},
        "result": {"value": format_display_value(result.value), "success": result.success},
        "summary": {
            "total": summary.total,
            "covered": summary.covered,
            "percentage": summary.percentage,
        },
        "coverage": {
            "covered": sorted(pid for pid in all_ids if pid in result.coverage),
            "not_covered": sorted(pid for pid in all_ids if pid not in result.coverage),
        },
    }
    if program.program.description is not None:
        report["program"]["description"] = program.program.description
    if result.errors:
        report["errors"] = [{"path": pid, "message": message} for pid, message in result.errors]
    return report


def export_coverage_to_toml(
    program: Program,
    result: CoverageResult,
    tree: DisplayNode,
    output_path: Path | str,
) -> None:
    """Export a coverage report to a TOML file.

    Args:
        program: The program that was evaluated
        result: The coverage pass result
        tree: The display tree built from the same coverage
        output_path: Path to the output TOML file

    """
    report = coverage_report_to_dict(program, result, tree)

    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with output_path.open("wb") as f:
        tomli_w.dump(report, f)

    logger.debug(f"Exported coverage report to {output_path}")
