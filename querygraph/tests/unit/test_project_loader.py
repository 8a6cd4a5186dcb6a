"""Unit tests for querygraph.loader.project_loader."""

from __future__ import annotations

from pathlib import Path

import pytest

from querygraph.loader.project_loader import (
    ProjectLoadError,
    discover_queries,
    discover_seeds,
    load_project,
)

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

_PROJECT_YAML = """\
name: arcane_analytics
version: 0.1.0
vars:
  min_price: 10
models:
  - name: legacy_rituals
    enabled: false
    database: warehouse
    schema: analytics
"""


def _write_project(root: Path, body: str = _PROJECT_YAML) -> Path:
    project_file = root / "querygraph.yml"
    project_file.write_text(body, encoding="utf-8")
    return project_file


def _write_model(root: Path, relative: str, sql: str) -> None:
    path = root / "models" / relative
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(sql, encoding="utf-8")


# ---------------------------------------------------------------------------
# load_project
# ---------------------------------------------------------------------------


class TestLoadProject:
    def test_load_from_file(self, tmp_path: Path):
        project = load_project(_write_project(tmp_path))
        assert project.name == "arcane_analytics"
        assert project.version == "0.1.0"
        assert project.vars == {"min_price": "10"}

    def test_load_from_directory(self, tmp_path: Path):
        _write_project(tmp_path)
        assert load_project(tmp_path).name == "arcane_analytics"

    def test_paths_anchored_at_project_dir(self, tmp_path: Path):
        project = load_project(_write_project(tmp_path))
        assert project.model_path == tmp_path / "models"
        assert project.seed_path == tmp_path / "seeds"

    def test_disabled_models(self, tmp_path: Path):
        project = load_project(_write_project(tmp_path))
        assert project.disabled_models() == {"legacy_rituals"}
        assert project.models[0].schema_ == "analytics"

    def test_missing_file(self, tmp_path: Path):
        with pytest.raises(ProjectLoadError, match="not found"):
            load_project(tmp_path / "nope.yml")

    def test_invalid_yaml(self, tmp_path: Path):
        with pytest.raises(ProjectLoadError, match="Failed to parse"):
            load_project(_write_project(tmp_path, "name: [unterminated\n"))

    def test_top_level_not_mapping(self, tmp_path: Path):
        with pytest.raises(ProjectLoadError, match="mapping"):
            load_project(_write_project(tmp_path, "- just\n- a list\n"))

    def test_bad_version(self, tmp_path: Path):
        with pytest.raises(ProjectLoadError, match="Invalid project file"):
            load_project(_write_project(tmp_path, "name: p\nversion: latest\n"))

    def test_blank_name(self, tmp_path: Path):
        with pytest.raises(ProjectLoadError):
            load_project(_write_project(tmp_path, "name: '  '\nversion: 1.2.3\n"))


# ---------------------------------------------------------------------------
# discover_queries / discover_seeds
# ---------------------------------------------------------------------------


class TestDiscoverQueries:
    def test_reads_sql_files_by_stem(self, tmp_path: Path):
        _write_model(tmp_path, "q1.sql", "SELECT * FROM arcana")
        _write_model(tmp_path, "staging/q2.sql", "SELECT * FROM q1")
        project = load_project(_write_project(tmp_path))

        queries = discover_queries(project)
        assert [q.name for q in queries] == ["q1", "q2"]
        assert queries[0].text == "SELECT * FROM arcana"

    def test_skips_disabled_models(self, tmp_path: Path):
        _write_model(tmp_path, "q1.sql", "SELECT 1")
        _write_model(tmp_path, "legacy_rituals.sql", "SELECT 2")
        project = load_project(_write_project(tmp_path))
        assert [q.name for q in discover_queries(project)] == ["q1"]

    def test_duplicate_stem_rejected(self, tmp_path: Path):
        _write_model(tmp_path, "a/q1.sql", "SELECT 1")
        _write_model(tmp_path, "b/q1.sql", "SELECT 2")
        project = load_project(_write_project(tmp_path))
        with pytest.raises(ProjectLoadError, match="Duplicate model name 'q1'"):
            discover_queries(project)

    def test_missing_model_dir(self, tmp_path: Path):
        project = load_project(_write_project(tmp_path))
        assert discover_queries(project) == []


class TestDiscoverSeeds:
    def test_csv_stems_sorted(self, tmp_path: Path):
        seeds = tmp_path / "seeds"
        seeds.mkdir()
        (seeds / "rituals.csv").write_text("id\n1\n", encoding="utf-8")
        (seeds / "arcana.csv").write_text("id\n1\n", encoding="utf-8")
        (seeds / "notes.txt").write_text("ignored", encoding="utf-8")
        project = load_project(_write_project(tmp_path))
        assert discover_seeds(project) == ["arcana", "rituals"]

    def test_missing_seed_dir(self, tmp_path: Path):
        assert discover_seeds(load_project(_write_project(tmp_path))) == []
