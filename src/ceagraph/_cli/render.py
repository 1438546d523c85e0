"""Rich rendering utilities for CLI commands."""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.tree import Tree

from ceagraph._format import format_node_value, format_signed_percentage
from ceagraph._model import NodeKind

if TYPE_CHECKING:
    from rich.console import Console

    from ceagraph._model import CEAModel, Node
    from ceagraph._sensitivity import SensitivityRow
    from ceagraph._session import OverrideChange

    from .query import NodeDetail, SectionRows, TreeNode


def render_model_table(models: list[CEAModel], default_id: str, console: Console) -> None:
    """Render the available models as a Rich table.

    Args:
        models: Models to list.
        default_id: Id of the model used when none is given.
        console: Rich Console to output to.

    """
    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("Model", style="bold")
    table.add_column("Title")
    table.add_column("Nodes", justify="right")
    table.add_column("Regions")

    for model in models:
        name = f"{model.id} [dim](default)[/dim]" if model.id == default_id else model.id
        regions = ", ".join(region.id for region in model.regions)
        table.add_row(name, escape(model.title), str(len(model.nodes)), regions)

    console.print(table)


def render_value_sections(sections: list[SectionRows], console: Console, *, show_base: bool) -> None:
    """Render evaluated values grouped by layout section.

    Args:
        sections: Rows grouped by section.
        console: Rich Console to output to.
        show_base: Whether to add a base value column and mark overrides.

    """
    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("Node", style="dim")
    table.add_column("Label")
    if show_base:
        table.add_column("Base", justify="right")
    table.add_column("Value", justify="right")

    for section in sections:
        table.add_section()
        table.add_row(f"[bold]{escape(section.label)}[/bold]")
        for row in section.rows:
            value = format_node_value(row.node, row.value)
            if row.node.kind == NodeKind.OUTPUT:
                value = f"[bold green]{value}[/bold green]"
            elif row.overridden:
                value = f"[yellow]{value}[/yellow]"
            cells = [row.node.id, escape(row.node.display_label)]
            if show_base:
                cells.append(format_node_value(row.node, row.base_value))
            cells.append(value)
            table.add_row(*cells)

    console.print(table)


def render_changes(changes: list[OverrideChange], console: Console) -> None:
    """Render the active overrides against their base values."""
    if not changes:
        return

    table = Table(show_header=True, header_style="bold cyan", box=None)
    table.add_column("Override", style="dim")
    table.add_column("Base", justify="right")
    table.add_column("Value", justify="right")

    for change in changes:
        table.add_row(
            change.node.id,
            format_node_value(change.node, change.base_value),
            f"[yellow]{format_node_value(change.node, change.value)}[/yellow]",
        )

    console.print(Panel(table, title="[bold]Overrides[/bold]", border_style="yellow"))


def render_node_detail(detail: NodeDetail, console: Console) -> None:
    """Render detailed node information.

    Args:
        detail: NodeDetail to render.
        console: Rich Console to output to.

    """
    node = detail.node
    console.print(f"[bold]Node:[/bold] {node.id}")
    console.print()

    kind_style = get_kind_style(node.kind)
    console.print(f"[cyan]Kind:[/cyan]         [{kind_style}]{node.kind.upper()}[/{kind_style}]")
    console.print(f"[cyan]Label:[/cyan]        {escape(node.display_label)}")
    console.print(f"[cyan]Format:[/cyan]       {node.format}")
    console.print(f"[cyan]Editable:[/cyan]     {'yes' if node.editable else 'no'}")
    console.print(f"[cyan]Value:[/cyan]        {format_node_value(node, detail.value)}")
    if detail.value != detail.base_value:
        console.print(f"[cyan]Base value:[/cyan]   {format_node_value(node, detail.base_value)}")
    if node.formula:
        console.print(f"[cyan]Formula:[/cyan]      {escape(node.formula)}")
    if node.description:
        console.print(f"[cyan]Description:[/cyan]  {escape(node.description)}")
    console.print()

    if detail.direct_dependencies:
        console.print(f"[cyan]Dependencies ({len(detail.direct_dependencies)} direct):[/cyan]")
        for dep in detail.direct_dependencies:
            operator = node.dependency_operators.get(dep)
            suffix = f" [dim]{escape(operator)}[/dim]" if operator else ""
            console.print(f"  {dep}{suffix}")
    else:
        console.print("[cyan]Dependencies:[/cyan] [dim]None[/dim]")
    console.print()

    if detail.direct_dependents:
        console.print(f"[cyan]Dependents ({len(detail.direct_dependents)} direct):[/cyan]")
        for dep in detail.direct_dependents:
            console.print(f"  {dep}")
        if detail.downstream_count > len(detail.direct_dependents):
            console.print(f"  [dim]({detail.downstream_count} downstream in total)[/dim]")
    else:
        console.print("[cyan]Dependents:[/cyan] [dim]None[/dim]")

    if detail.unresolved_dependencies:
        console.print()
        names = ", ".join(detail.unresolved_dependencies)
        console.print(f"[yellow]Unresolved dependencies:[/yellow] {names}")


def render_tree(tree_node: TreeNode, console: Console) -> None:
    """Render a dependency tree using Rich Tree."""
    rich_tree = Tree(f"[bold]{tree_node.node_id}[/bold]")
    _add_tree_children(rich_tree, tree_node.children)
    console.print(rich_tree)


def _add_tree_children(parent: Tree, children: list[TreeNode]) -> None:
    for child in children:
        child_tree = parent.add(child.node_id)
        _add_tree_children(child_tree, child.children)


def render_sensitivity(rows: list[SensitivityRow], target: Node, console: Console) -> None:
    """Render sensitivity rows, largest swing first."""
    if not rows:
        console.print("[dim]No editable inputs affect this node[/dim]")
        return

    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("Input", style="dim")
    table.add_column("Low input", justify="right")
    table.add_column("High input", justify="right")
    table.add_column(f"{escape(target.display_label)} (low)", justify="right")
    table.add_column(f"{escape(target.display_label)} (high)", justify="right")
    table.add_column("Swing", justify="right", style="bold")

    for row in rows:
        table.add_row(
            row.node.id,
            format_node_value(row.node, row.low_input),
            format_node_value(row.node, row.high_input),
            format_node_value(target, row.low),
            format_node_value(target, row.high),
            format_node_value(target, row.swing),
        )

    console.print(table)


def render_narrative(text: str, console: Console) -> None:
    console.print(Panel(escape(text), title="[bold]Summary[/bold]", border_style="cyan"))


def format_relative_change(change: float) -> str:
    """Format an output's relative change, e.g. ``+12.5% vs base``."""
    return f"{format_signed_percentage(change)} vs base"


def get_kind_style(kind: NodeKind) -> str:
    """Get Rich style string for a node kind."""
    match kind:
        case NodeKind.INPUT:
            return "blue"
        case NodeKind.CALCULATION:
            return "green"
        case NodeKind.ADJUSTMENT:
            return "magenta"
        case NodeKind.OUTPUT:
            return "yellow"
