"""Rich output formatting for the querygraph CLI.

All functions write to a :class:`rich.console.Console` instance (typically
bound to *stderr*) so that machine-readable output on *stdout* is never
polluted with human-readable decoration.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.tree import Tree

if TYPE_CHECKING:
    from querygraph.graph import ProjectGraph
    from querygraph.registry import RegistrationReport


def display_registration_report(console: Console, report: RegistrationReport) -> None:
    """Render the outcome of a registration batch."""
    header_lines = [
        f"[bold]Registered:[/bold]  {len(report.registered)}",
        f"[bold]Replaced:[/bold]    {len(report.replaced)}",
        f"[bold]New tables:[/bold]  {len(report.discovered_tables)}",
        f"[bold]Failed:[/bold]      {len(report.failures)}",
    ]
    console.print(
        Panel(
            "\n".join(header_lines),
            title="Query Registration",
            border_style="green" if report.ok else "red",
        )
    )

    if report.failures:
        table = Table(title="Failures", show_lines=False)
        table.add_column("Query", style="bold")
        table.add_column("Reason")
        for name, exc in sorted(report.failures.items()):
            table.add_row(name, f"[red]{exc.reason}[/red]")
        console.print(table)

    for name, refs in sorted(report.unresolved_refs.items()):
        console.print(f"[yellow]{name}[/yellow] refs undefined queries: {', '.join(refs)}")


def display_graph_summary(console: Console, project_graph: ProjectGraph) -> None:
    """Render the root resources and the execution order of a graph."""
    roots = project_graph.root_names()
    console.print(
        Panel(
            ", ".join(roots) if roots else "(none)",
            title=f"Roots ({len(roots)})",
            border_style="blue",
        )
    )

    groups = project_graph.parallel_groups()
    table = Table(title=f"Execution Order ({len(groups)})", pad_edge=True, expand=False)
    table.add_column("#", justify="right")
    table.add_column("Name", style="bold")
    table.add_column("Kind")
    table.add_column("Group", justify="right")

    for position, name in enumerate(project_graph.execution_order(), start=1):
        entry = project_graph.collection.get(name)
        kind = "[magenta]table[/magenta]" if entry is not None and entry.is_table else "[cyan]query[/cyan]"
        table.add_row(str(position), name, kind, str(groups[name]))

    console.print(table)


def display_lineage(
    console: Console,
    name: str,
    upstream: list[str],
    downstream: list[str],
) -> None:
    """Render upstream and downstream resources as a tree."""
    tree = Tree(f"[bold]{name}[/bold]")
    up_branch = tree.add(f"[cyan]Upstream ({len(upstream)})[/cyan]")
    for item in upstream:
        up_branch.add(item)
    down_branch = tree.add(f"[magenta]Downstream ({len(downstream)})[/magenta]")
    for item in downstream:
        down_branch.add(item)
    console.print(tree)
