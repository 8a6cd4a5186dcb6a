"""Project descriptor schema.

A project file declares where queries and seeds live, which resources are
enabled, and the freshness thresholds a scheduler would monitor.  The graph
core only reads the paths, the enabled flags and ``vars``; everything else
is carried through untouched for downstream consumers.
"""

from __future__ import annotations

import re
from enum import Enum
from pathlib import Path
from typing import Annotated

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, field_validator

from querygraph.models.resource import validate_resource_name

ResourceName = Annotated[str, AfterValidator(validate_resource_name)]
ResourceMetadata = dict[str, str]

_VERSION_PATTERN = re.compile(r"^\d+\.\d+\.\d+$")


class FreshnessPeriod(str, Enum):
    """Unit of a freshness threshold."""

    HOUR = "hour"
    DAY = "day"
    MONTH = "month"


class FreshnessThreshold(BaseModel):
    """``count`` units of ``period`` after which a threshold trips."""

    model_config = ConfigDict(frozen=True)

    count: int = Field(..., ge=0)
    period: FreshnessPeriod


class FullyQualifiedTable(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    database: ResourceName
    schema_: ResourceName = Field(..., alias="schema")
    table: ResourceName

    @property
    def qualified_name(self) -> str:
        return f"{self.database}.{self.schema_}.{self.table}"


class FullyQualifiedColumn(BaseModel):
    model_config = ConfigDict(frozen=True)

    table: FullyQualifiedTable
    column: ResourceName

    @property
    def qualified_name(self) -> str:
        return f"{self.table.qualified_name}.{self.column}"


class Freshness(BaseModel):
    """Freshness monitoring for a single loaded-at column.

    ``filter`` is an optional SQL predicate restricting which rows are
    inspected.
    """

    loaded_at_field: FullyQualifiedColumn
    warn_after: FreshnessThreshold
    error_after: FreshnessThreshold
    filter: str | None = None


class ResourceConfig(BaseModel):
    """Per-model or per-seed configuration block."""

    model_config = ConfigDict(populate_by_name=True)

    name: ResourceName
    enabled: bool = True
    database: ResourceName
    schema_: ResourceName = Field(..., alias="schema")
    exclude_full_refresh: bool = False
    metadata: ResourceMetadata | None = None


class ColumnMetadata(BaseModel):
    name: ResourceName
    description: str | None = None
    quote: bool = False


class ResourceProperties(BaseModel):
    name: ResourceName
    description: str | None = None
    config: ResourceConfig
    columns: list[ColumnMetadata] = Field(default_factory=list)


class SourceConfig(BaseModel):
    name: ResourceName
    enabled: bool = True


class SourceProperties(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: ResourceName
    database: ResourceName
    schema_: ResourceName = Field(..., alias="schema")
    meta: ResourceMetadata | None = None
    freshness: Freshness | None = None


class Project(BaseModel):
    """Top-level project descriptor, usually loaded from ``querygraph.yml``."""

    name: ResourceName
    version: str
    model_path: Path = Path("models")
    seed_path: Path = Path("seeds")
    clean_targets: Path = Path("target")
    log_path: Path = Path("logs")
    models: list[ResourceConfig] = Field(default_factory=list)
    seeds: list[ResourceConfig] = Field(default_factory=list)
    sources: list[SourceConfig] = Field(default_factory=list)
    vars: dict[str, str] | None = None

    @field_validator("vars", mode="before")
    @classmethod
    def stringify_vars(cls, value: object) -> object:
        if isinstance(value, dict):
            return {str(k): str(v) for k, v in value.items()}
        return value

    @field_validator("version")
    @classmethod
    def validate_version(cls, value: str) -> str:
        if not _VERSION_PATTERN.match(value):
            raise ValueError(f"Project version '{value}' is not of the form MAJOR.MINOR.PATCH.")
        return value

    def disabled_models(self) -> set[str]:
        """Names of models explicitly switched off in the project file."""
        return {m.name for m in self.models if not m.enabled}

    def resolve_paths(self, root: Path) -> Project:
        """Return a copy with every relative path anchored at *root*."""

        def _anchor(p: Path) -> Path:
            return p if p.is_absolute() else root / p

        return self.model_copy(
            update={
                "model_path": _anchor(self.model_path),
                "seed_path": _anchor(self.seed_path),
                "clean_targets": _anchor(self.clean_targets),
                "log_path": _anchor(self.log_path),
            }
        )
