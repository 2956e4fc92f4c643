import json
import logging
from pathlib import Path
from typing import Annotated, Any

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from franka._errors import FrankaError
from franka._eval import cover_program, execute_program
from franka._eval_engine import EvalOptions, build_display_tree, coverage_summary
from franka._io import ProgramLoadError, export_coverage_to_toml, load_program
from franka._models import Program
from franka._values import format_display_value

from .config import ConfigError, FrankaConfig, get_config
from .render_tree import render_coverage_summary, render_display_tree

app = typer.Typer()

logger = logging.getLogger(__name__)
# Console for stderr (info/errors)
err_console = Console(stderr=True)
# Console for stdout (results)
out_console = Console()

ProgramArgument = Annotated[
    Path | None,
    typer.Argument(help="Path to a program file (.yaml, .yml, .json or .toml). Defaults to [tool.franka].program"),
]
VarOption = Annotated[
    list[str] | None,
    typer.Option("--var", help="Override a variable as name=value (value parsed as JSON when possible)"),
]
MaxDepthOption = Annotated[
    int | None,
    typer.Option("--max-depth", min=1, help="Maximum expression nesting depth"),
]


@app.callback()
def callback(
    *,
    verbose: bool = typer.Option(default=False, help="Enable verbose output"),
) -> None:
    """Franka logic expression CLI."""
    log_level = logging.DEBUG if verbose else logging.INFO

    # Configure rich logging handler to output to stderr
    logging.basicConfig(
        level=log_level,
        format="%(message)s",
        handlers=[
            RichHandler(
                console=err_console,
                show_time=False,
                show_path=verbose,
                rich_tracebacks=True,
            ),
        ],
    )


def parse_var(assignment: str) -> tuple[str, Any]:
    """Parse a ``name=value`` override. The value is decoded as JSON, else kept as a string."""
    name, sep, raw = assignment.partition("=")
    if not sep or not name:
        msg = f"Invalid variable override '{assignment}'. Expected format: name=value"
        raise typer.BadParameter(msg)
    try:
        value = json.loads(raw)
    except json.JSONDecodeError:
        value = raw
    return name, value


def _load_config() -> FrankaConfig:
    try:
        return get_config()
    except ConfigError as e:
        err_console.print(f"[red]Configuration error: {escape(str(e))}[/red]")
        raise typer.Exit(code=1) from e


def _load_program(path: Path | None, config: FrankaConfig) -> Program:
    """Load program from CLI path or config."""
    effective_path = path if path is not None else config.program
    if effective_path is None:
        err_console.print(
            "[red]Error: No program specified. Provide a path argument or configure \\[tool.franka].program[/red]",
        )
        raise typer.Exit(code=1)

    err_console.print(f"[cyan]Loading program from:[/cyan] {effective_path}")
    try:
        program = load_program(effective_path)
    except ProgramLoadError as e:
        err_console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(code=1) from e

    err_console.print(f"[cyan]Program:[/cyan] [bold]{escape(program.name)}[/bold]")
    return program


def _eval_options(max_depth: int | None, config: FrankaConfig) -> EvalOptions:
    effective_depth = max_depth if max_depth is not None else config.max_depth
    if effective_depth is None:
        return EvalOptions()
    return EvalOptions(max_depth=effective_depth)


def _overrides(var: list[str] | None) -> dict[str, Any]:
    return dict(parse_var(assignment) for assignment in var or [])


@app.command()
def run(
    path: ProgramArgument = None,
    *,
    var: VarOption = None,
    max_depth: MaxDepthOption = None,
) -> None:
    """Evaluate a program and print its result as JSON."""
    err_console.print()
    config = _load_config()
    program = _load_program(path, config)
    options = _eval_options(max_depth, config)

    err_console.print("[cyan]Evaluating expression...[/cyan]")
    try:
        value = execute_program(program, overrides=_overrides(var), options=options)
    except FrankaError as e:
        err_console.print(f"[red]✗ {e.code}: {escape(e.message)}[/red]")
        raise typer.Exit(code=1) from e

    err_console.print("[green]✓ Evaluation complete[/green]")
    err_console.print()
    typer.echo(json.dumps(value, ensure_ascii=False))


@app.command()
def tree(
    path: ProgramArgument = None,
    *,
    var: VarOption = None,
    max_depth: MaxDepthOption = None,
    show_paths: Annotated[
        bool,
        typer.Option("--show-paths", help="Show each node's route in the tree"),
    ] = False,
) -> None:
    """Show the display tree of a program's expression."""
    err_console.print()
    config = _load_config()
    program = _load_program(path, config)
    options = _eval_options(max_depth, config)
    err_console.print()

    env = program.environment(_overrides(var))
    display_tree = build_display_tree(program.expression, env, options=options)
    render_display_tree(display_tree, out_console, show_paths=show_paths)


@app.command()
def coverage(  # noqa: PLR0913
    path: ProgramArgument = None,
    *,
    var: VarOption = None,
    max_depth: MaxDepthOption = None,
    output: Annotated[
        Path | None,
        typer.Option("-o", "--output", help="Path to output TOML coverage report"),
    ] = None,
    show_paths: Annotated[
        bool,
        typer.Option("--show-paths", help="Show each node's route in the tree"),
    ] = False,
    fail_under: Annotated[
        int | None,
        typer.Option("--fail-under", min=0, max=100, help="Exit non-zero if coverage is below this percentage"),
    ] = None,
) -> None:
    """Evaluate a program leniently and show which sub-expressions were visited."""
    err_console.print()
    config = _load_config()
    program = _load_program(path, config)
    options = _eval_options(max_depth, config)

    err_console.print("[cyan]Running coverage pass...[/cyan]")
    program_coverage = cover_program(program, overrides=_overrides(var), options=options)
    result = program_coverage.result
    err_console.print()

    render_display_tree(program_coverage.tree, out_console, show_paths=show_paths)
    out_console.print(f"[bold]Result:[/bold] {escape(format_display_value(result.value))}")
    summary = coverage_summary(program_coverage.tree)
    render_coverage_summary(summary, out_console)

    if result.errors:
        err_console.print()
        err_console.print("[yellow]⚠ Sub-expressions replaced by a placeholder:[/yellow]")
        for pid, message in result.errors:
            err_console.print(f"  [yellow]•[/yellow] {escape(pid)}")
            err_console.print(f"    [dim]{escape(message)}[/dim]")

    if output is not None:
        err_console.print()
        err_console.print(f"[cyan]Exporting coverage report to:[/cyan] {output}")
        export_coverage_to_toml(program, result, program_coverage.tree, output)

    err_console.print()
    if fail_under is not None and summary.percentage < fail_under:
        err_console.print(f"[red]✗ Coverage {summary.percentage}% is below {fail_under}%[/red]")
        raise typer.Exit(code=1)


def main() -> None:
    app()
