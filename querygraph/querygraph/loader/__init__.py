"""Project descriptor loading, query discovery and template rendering."""

from querygraph.loader.project_loader import (
    DEFAULT_PROJECT_FILE,
    ProjectLoadError,
    discover_queries,
    discover_seeds,
    load_project,
)
from querygraph.loader.template import (
    UnresolvedVariableError,
    extract_ref_names,
    render_template,
)

__all__ = [
    "DEFAULT_PROJECT_FILE",
    "ProjectLoadError",
    "UnresolvedVariableError",
    "discover_queries",
    "discover_seeds",
    "extract_ref_names",
    "load_project",
    "render_template",
]
