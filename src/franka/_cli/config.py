"""Configuration loading from pyproject.toml."""

import tomllib
from dataclasses import dataclass
from pathlib import Path


class ConfigError(Exception):
    """Error in franka configuration."""


@dataclass(slots=True, frozen=True)
class FrankaConfig:
    """Configuration loaded from the ``[tool.franka]`` table of pyproject.toml.

    All relative paths are resolved from the project root (directory containing pyproject.toml).
    """

    program: Path | None = None
    max_depth: int | None = None
    project_root: Path | None = None


def find_pyproject_toml(start_dir: Path | None = None) -> Path | None:
    """Find pyproject.toml by walking up from start_dir.

    Args:
        start_dir: Starting directory. Defaults to current working directory.

    Returns:
        Path to pyproject.toml if found, None otherwise.

    """
    if start_dir is None:
        start_dir = Path.cwd()

    current = start_dir.resolve()

    while True:
        candidate = current / "pyproject.toml"
        if candidate.is_file():
            return candidate
        parent = current.parent
        if parent == current:
            # Reached filesystem root
            return None
        current = parent


def _parse_program_path(value: object, project_root: Path) -> Path:
    if not isinstance(value, str):
        msg = "Invalid [tool.franka].program: expected string path"
        raise ConfigError(msg)
    program_path = Path(value)
    if not program_path.is_absolute():
        program_path = project_root / program_path
    return program_path


def _parse_max_depth(value: object) -> int:
    # bool is an int subclass but never a valid depth
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        msg = "Invalid [tool.franka].max_depth: expected a positive integer"
        raise ConfigError(msg)
    return value


def load_config(pyproject_path: Path) -> FrankaConfig:
    """Load and validate [tool.franka] config from pyproject.toml.

    Args:
        pyproject_path: Path to pyproject.toml

    Returns:
        Parsed FrankaConfig

    Raises:
        ConfigError: If the configuration is invalid

    """
    project_root = pyproject_path.parent

    with pyproject_path.open("rb") as f:
        try:
            data = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            msg = f"Invalid TOML in {pyproject_path}: {e}"
            raise ConfigError(msg) from e

    tool_section = data.get("tool", {})
    franka_section = tool_section.get("franka", {})

    if not franka_section:
        # No [tool.franka] section - return empty config
        return FrankaConfig(project_root=project_root)

    program_path: Path | None = None
    if "program" in franka_section:
        program_path = _parse_program_path(franka_section["program"], project_root)

    max_depth: int | None = None
    if "max_depth" in franka_section:
        max_depth = _parse_max_depth(franka_section["max_depth"])

    return FrankaConfig(
        program=program_path,
        max_depth=max_depth,
        project_root=project_root,
    )


def get_config() -> FrankaConfig:
    """Get config from pyproject.toml in current directory or parents.

    Returns:
        FrankaConfig (may be empty if no pyproject.toml or no [tool.franka] section)

    """
    pyproject_path = find_pyproject_toml()
    if pyproject_path is None:
        return FrankaConfig()
    return load_config(pyproject_path)
