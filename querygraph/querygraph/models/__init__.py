"""Domain models for the querygraph engine."""

from querygraph.models.project import (
    ColumnMetadata,
    Freshness,
    FreshnessPeriod,
    FreshnessThreshold,
    FullyQualifiedColumn,
    FullyQualifiedTable,
    Project,
    ResourceConfig,
    ResourceProperties,
    SourceConfig,
    SourceProperties,
)
from querygraph.models.resource import (
    MAX_NODE_ID,
    NodeId,
    Query,
    QueryKind,
    RawQuery,
    TableQuery,
    resource_id,
    validate_resource_name,
)

__all__ = [
    "ColumnMetadata",
    "Freshness",
    "FreshnessPeriod",
    "FreshnessThreshold",
    "FullyQualifiedColumn",
    "FullyQualifiedTable",
    "MAX_NODE_ID",
    "NodeId",
    "Project",
    "Query",
    "QueryKind",
    "RawQuery",
    "ResourceConfig",
    "ResourceProperties",
    "SourceConfig",
    "SourceProperties",
    "TableQuery",
    "resource_id",
    "validate_resource_name",
]
