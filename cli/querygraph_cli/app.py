"""querygraph CLI application -- Typer-based developer interface.

Provides commands to check a project's queries, build its dependency graph
and inspect the lineage of a single resource.  Human-readable output goes to
*stderr* via Rich; machine-readable JSON goes to *stdout* so that pipelines
can compose cleanly.
"""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any

import typer
from rich.console import Console

from querygraph.config import Settings, load_settings
from querygraph.graph import GraphConstructionError, ProjectGraph
from querygraph.loader import ProjectLoadError, discover_queries, discover_seeds, load_project
from querygraph.logging_config import configure_logging
from querygraph.registry import QueryCollection, RegistrationError, RegistrationReport
from querygraph_cli.display import (
    display_graph_summary,
    display_lineage,
    display_registration_report,
)

# ---------------------------------------------------------------------------
# App & global state
# ---------------------------------------------------------------------------

app = typer.Typer(
    name="querygraph",
    help="querygraph - build and inspect query dependency graphs",
    no_args_is_help=True,
)
console = Console(stderr=True)

# Mutable global options populated by the Typer callback.
_json_output: bool = False
_settings: Settings | None = None

EXIT_REGISTRATION_FAILED = 1
EXIT_GRAPH_FAILED = 2
EXIT_PROJECT_FAILED = 3


# ---------------------------------------------------------------------------
# Callback -- global options
# ---------------------------------------------------------------------------


@app.callback()
def _global_options(
    json_mode: bool = typer.Option(
        False,
        "--json/--no-json",
        help="Emit structured JSON to stdout instead of human-readable output.",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable debug logging.",
    ),
) -> None:
    """Global options applied to every command."""
    global _json_output, _settings  # noqa: PLW0603
    _json_output = json_mode
    _settings = load_settings(debug=True) if verbose else load_settings()
    configure_logging(_settings)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _get_settings() -> Settings:
    return _settings if _settings is not None else load_settings()


def _emit_json(payload: Any) -> None:
    sys.stdout.write(json.dumps(payload, indent=2, sort_keys=True) + "\n")


def _register_project(project_file: Path, *, strict: bool) -> tuple[QueryCollection, RegistrationReport]:
    """Load *project_file* and register every discovered query."""
    settings = _get_settings()
    try:
        project = load_project(project_file)
        raw_queries = discover_queries(project)
    except ProjectLoadError as exc:
        console.print(f"[red]Failed to load project: {exc}[/red]")
        raise typer.Exit(code=EXIT_PROJECT_FAILED) from exc

    collection = QueryCollection(dialect=settings.source_dialect, variables=project.vars)
    try:
        report = collection.register(raw_queries, strict=strict)
    except RegistrationError as exc:
        console.print(f"[red]{exc}[/red]")
        for name, failure in sorted(exc.failures.items()):
            console.print(f"  [red]{name}[/red]: {failure.reason}")
        raise typer.Exit(code=EXIT_REGISTRATION_FAILED) from exc

    seeds = set(discover_seeds(project))
    unknown_seeds = sorted(t.name for t in collection.tables() if seeds and t.name not in seeds)
    if unknown_seeds and not _json_output:
        console.print(f"[dim]Tables without a seed file: {', '.join(unknown_seeds)}[/dim]")

    return collection, report


def _build_graph(collection: QueryCollection) -> ProjectGraph:
    try:
        return ProjectGraph.build(collection, max_nodes=_get_settings().max_graph_nodes)
    except GraphConstructionError as exc:
        console.print(f"[red]Could not build the query graph: {exc}[/red]")
        raise typer.Exit(code=EXIT_GRAPH_FAILED) from exc


# ---------------------------------------------------------------------------
# check
# ---------------------------------------------------------------------------


@app.command()
def check(
    project_file: Path = typer.Argument(
        ...,
        help="Path to querygraph.yml or the directory containing it.",
        exists=True,
        resolve_path=True,
    ),
) -> None:
    """Parse every query in the project and report front-end failures."""
    _, report = _register_project(project_file, strict=False)

    if _json_output:
        _emit_json(
            {
                "registered": sorted(report.registered),
                "discovered_tables": sorted(report.discovered_tables),
                "failures": {name: exc.reason for name, exc in sorted(report.failures.items())},
                "unresolved_refs": dict(sorted(report.unresolved_refs.items())),
            }
        )
    else:
        display_registration_report(console, report)

    if not report.ok:
        raise typer.Exit(code=EXIT_REGISTRATION_FAILED)


# ---------------------------------------------------------------------------
# graph
# ---------------------------------------------------------------------------


@app.command()
def graph(
    project_file: Path = typer.Argument(
        ...,
        help="Path to querygraph.yml or the directory containing it.",
        exists=True,
        resolve_path=True,
    ),
    strict: bool = typer.Option(
        False,
        "--strict",
        help="Abort if any query fails to parse (also enabled by QUERYGRAPH_STRICT_REGISTRATION).",
    ),
) -> None:
    """Build the dependency graph and print its roots and execution order."""
    use_strict = strict or _get_settings().strict_registration
    collection, report = _register_project(project_file, strict=use_strict)
    if report.failures and not _json_output:
        display_registration_report(console, report)

    project_graph = _build_graph(collection)

    if _json_output:
        _emit_json(
            {
                "roots": project_graph.root_names(),
                "execution_order": project_graph.execution_order(),
                "parallel_groups": project_graph.parallel_groups(),
            }
        )
    else:
        display_graph_summary(console, project_graph)


# ---------------------------------------------------------------------------
# lineage
# ---------------------------------------------------------------------------


@app.command()
def lineage(
    project_file: Path = typer.Argument(
        ...,
        help="Path to querygraph.yml or the directory containing it.",
        exists=True,
        resolve_path=True,
    ),
    name: str = typer.Option(
        ...,
        "--name",
        "-n",
        help="Query or table name to trace.",
    ),
) -> None:
    """Display upstream and downstream resources for a single query or table."""
    collection, _ = _register_project(project_file, strict=False)
    project_graph = _build_graph(collection)

    node_id = collection.get_id(name)
    if node_id is None or node_id not in project_graph.graph:
        console.print(f"[red]'{name}' is not part of the query graph.[/red]")
        raise typer.Exit(code=EXIT_GRAPH_FAILED)

    upstream = sorted(project_graph.name_of(i) for i in project_graph.graph.get_upstream(node_id))
    downstream = sorted(project_graph.name_of(i) for i in project_graph.graph.get_downstream(node_id))

    if _json_output:
        _emit_json({"name": name, "upstream": upstream, "downstream": downstream})
    else:
        display_lineage(console, name, upstream, downstream)
