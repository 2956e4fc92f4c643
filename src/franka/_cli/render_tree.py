"""Rich rendering of display trees and coverage summaries."""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.markup import escape
from rich.panel import Panel
from rich.tree import Tree

if TYPE_CHECKING:
    from rich.console import Console

    from franka._eval_engine import CoverageSummary, DisplayNode


def _coverage_style(covered: bool | None) -> str:
    """Get Rich style for a coverage flag."""
    match covered:
        case True:
            return "green"
        case False:
            return "red"
        case None:
            return "white"


def _coverage_symbol(covered: bool | None) -> str:
    match covered:
        case True:
            return "✓"
        case False:
            return "✗"
        case None:
            return "?"


def _format_node(node: DisplayNode, *, show_paths: bool) -> str:
    """Format one display node as a Rich markup label."""
    label = f"[bold]{escape(node.label)}[/bold] [dim]{escape(node.type)}[/dim] = {escape(node.value)}"
    if show_paths:
        label += f" [dim]({escape(str(node.path))})[/dim]"
    if node.covered is None:
        return label
    style = _coverage_style(node.covered)
    return f"[{style}]{_coverage_symbol(node.covered)}[/{style}] {label}"


def render_display_tree(
    node: DisplayNode,
    console: Console,
    *,
    show_paths: bool = False,
) -> None:
    """Render a display tree using Rich Tree.

    Args:
        node: Root DisplayNode to render.
        console: Rich Console to output to.
        show_paths: If True, append each node's route to its label.

    """
    rich_tree = Tree(_format_node(node, show_paths=show_paths))
    _add_tree_children(rich_tree, node.children, show_paths=show_paths)
    console.print(rich_tree)


def _add_tree_children(parent: Tree, children: tuple[DisplayNode, ...], *, show_paths: bool) -> None:
    """Recursively add children to a Rich Tree."""
    for child in children:
        child_tree = parent.add(_format_node(child, show_paths=show_paths))
        _add_tree_children(child_tree, child.children, show_paths=show_paths)


def render_coverage_summary(summary: CoverageSummary, console: Console) -> None:
    """Render coverage statistics panel."""
    style = "green" if summary.covered == summary.total else "yellow"
    summary_lines = [
        f"Nodes: {summary.total}",
        f"[green]✓ Covered:[/green] {summary.covered}",
        f"[red]✗ Not covered:[/red] {summary.total - summary.covered}",
        f"[{style}]Coverage: {summary.percentage}%[/{style}]",
    ]
    console.print(Panel("\n".join(summary_lines), title="Coverage", border_style="cyan"))
