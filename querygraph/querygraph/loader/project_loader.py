"""Load a project descriptor and discover its query and seed files.

A project is described by a YAML file (conventionally ``querygraph.yml``)::

    name: arcane_analytics
    version: 0.1.0
    model_path: models
    seed_path: seeds
    vars:
      min_price: "10"
    models:
      - name: legacy_rituals
        enabled: false
        database: warehouse
        schema: analytics

Every ``.sql`` file under ``model_path`` becomes a query named after its
file stem; every ``.csv`` file under ``seed_path`` names a seed table.

Typical usage::

    project = load_project(Path("querygraph.yml"))
    queries = discover_queries(project)
"""

from __future__ import annotations

import logging
from pathlib import Path

import yaml  # type: ignore[import-untyped]
from pydantic import ValidationError

from querygraph.models.project import Project
from querygraph.models.resource import RawQuery

logger = logging.getLogger(__name__)

DEFAULT_PROJECT_FILE = "querygraph.yml"


class ProjectLoadError(Exception):
    """Raised when a project descriptor or one of its files cannot be read."""


def load_project(path: Path) -> Project:
    """Parse and validate the project descriptor at *path*.

    *path* may be the YAML file itself or a directory containing
    ``querygraph.yml``.  Relative paths inside the descriptor are resolved
    against the descriptor's directory.

    Raises
    ------
    ProjectLoadError
        If the file is missing, is not valid YAML, is not a mapping, or does
        not satisfy the project schema.
    """
    if path.is_dir():
        path = path / DEFAULT_PROJECT_FILE
    if not path.is_file():
        raise ProjectLoadError(f"Project file not found: {path}")

    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise ProjectLoadError(f"Failed to parse {path}: {exc}") from exc

    if not isinstance(data, dict):
        raise ProjectLoadError(f"Project file {path} must contain a mapping at the top level.")

    try:
        project = Project.model_validate(data)
    except ValidationError as exc:
        raise ProjectLoadError(f"Invalid project file {path}: {exc}") from exc

    logger.debug("Loaded project '%s' v%s from %s", project.name, project.version, path)
    return project.resolve_paths(path.parent)


def discover_queries(project: Project) -> list[RawQuery]:
    """Read every ``.sql`` file under the project's model path.

    Files are visited in sorted path order.  Models switched off in the
    project's ``models`` list are skipped.  A missing model directory yields
    no queries.

    Raises
    ------
    ProjectLoadError
        If two files share a stem, or a file cannot be read.
    """
    model_dir = project.model_path
    if not model_dir.is_dir():
        logger.warning("Model directory %s does not exist", model_dir)
        return []

    disabled = project.disabled_models()
    seen: dict[str, Path] = {}
    queries: list[RawQuery] = []
    skip_count = 0

    for sql_file in sorted(model_dir.rglob("*.sql")):
        name = sql_file.stem
        if name in disabled:
            skip_count += 1
            continue
        if name in seen:
            raise ProjectLoadError(f"Duplicate model name '{name}': {seen[name]} and {sql_file}")
        seen[name] = sql_file
        try:
            text = sql_file.read_text(encoding="utf-8")
        except OSError as exc:
            raise ProjectLoadError(f"Failed to read {sql_file}: {exc}") from exc
        queries.append(RawQuery(name=name, text=text))

    logger.info(
        "Discovered %d queries in %s (skipped %d disabled)",
        len(queries),
        model_dir,
        skip_count,
    )
    return queries


def discover_seeds(project: Project) -> list[str]:
    """Return the table names of every ``.csv`` seed, sorted."""
    seed_dir = project.seed_path
    if not seed_dir.is_dir():
        return []
    return sorted({f.stem for f in seed_dir.rglob("*.csv")})
