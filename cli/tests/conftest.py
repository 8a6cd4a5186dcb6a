"""Shared fixtures for CLI tests.

Every test gets a small on-disk project and runs with root logger
configuration disabled, so the CLI callback cannot replace pytest's own
log capture handlers.
"""

from __future__ import annotations

from pathlib import Path

import pytest

_PROJECT_YAML = """\
name: arcane_analytics
version: 0.1.0
vars:
  excluded_source: necronomicon
"""

_MODELS = {
    "q1.sql": "SELECT * FROM arcana WHERE source <> '{{ var('excluded_source') }}'",
    "q2.sql": "SELECT * FROM rituals JOIN q1 ON rituals.source = q1.source",
    "reports/q3.sql": "SELECT * FROM q2 WHERE something = 'blah'",
}


@pytest.fixture(autouse=True)
def _no_logging_setup(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr("querygraph_cli.app.configure_logging", lambda settings: None)


@pytest.fixture()
def project_dir(tmp_path: Path) -> Path:
    """A project with three chained queries over two source tables."""
    (tmp_path / "querygraph.yml").write_text(_PROJECT_YAML, encoding="utf-8")
    for relative, sql in _MODELS.items():
        path = tmp_path / "models" / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(sql, encoding="utf-8")
    return tmp_path


@pytest.fixture()
def add_model(project_dir: Path):
    """Write an extra model file into ``project_dir``."""

    def _add(name: str, sql: str) -> None:
        (project_dir / "models" / f"{name}.sql").write_text(sql, encoding="utf-8")

    return _add
