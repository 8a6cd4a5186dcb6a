"""Clean candidate node and edge sets before DAG construction.

Validation enforces three rules:

1. Every edge endpoint must be a declared node.  Violations abort.
2. Declared nodes that take part in no edge (orphans) are dropped.
3. The surviving node set must not be empty.

The node list is deduplicated and sorted ascending so that internal graph
indices, and everything derived from their order, are a deterministic
function of the dependency structure.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from querygraph.models.resource import NodeId

logger = logging.getLogger(__name__)

Edge = tuple[NodeId, NodeId]


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class GraphConstructionError(Exception):
    """Base class for every reason a query graph could not be produced."""


class DanglingEdgeError(GraphConstructionError):
    """Raised when edges reference nodes absent from the declared node set.

    Attributes
    ----------
    node_ids:
        The undeclared ids, sorted ascending.
    """

    def __init__(self, node_ids: Iterable[NodeId]) -> None:
        self.node_ids = sorted(node_ids)
        super().__init__(f"Edges refer to undeclared nodes: {self.node_ids}")


class EmptyGraphError(GraphConstructionError):
    """Raised when no nodes remain once orphans are removed."""

    def __init__(self, reason: str = "No connected nodes remain after validation.") -> None:
        super().__init__(reason)


# ---------------------------------------------------------------------------
# Data model
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class ValidatedGraphData:
    """Node and edge sets that are safe to build a graph from.

    ``nodes`` is sorted ascending with no duplicates and every node appears
    in at least one edge.  ``edges`` is the caller's edge list, unchanged.
    """

    nodes: tuple[NodeId, ...]
    edges: tuple[Edge, ...]


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def _edge_endpoints(edges: Sequence[Edge]) -> set[NodeId]:
    endpoints: set[NodeId] = set()
    for src, dest in edges:
        endpoints.add(src)
        endpoints.add(dest)
    return endpoints


def validate_graph_data(node_ids: Iterable[NodeId], edges: Iterable[Edge]) -> ValidatedGraphData:
    """Validate a declared node set against an edge list.

    Parameters
    ----------
    node_ids:
        Candidate node identities.  Duplicates are tolerated.
    edges:
        ``(source, destination)`` pairs, source being the dependency.

    Returns
    -------
    ValidatedGraphData
        Sorted connected nodes and the caller's edges.

    Raises
    ------
    DanglingEdgeError
        If any edge endpoint is not in *node_ids*.
    EmptyGraphError
        If no node survives orphan removal.
    """
    edge_list = [(src, dest) for src, dest in edges]
    declared = set(node_ids)
    endpoints = _edge_endpoints(edge_list)

    undeclared = endpoints - declared
    if undeclared:
        raise DanglingEdgeError(undeclared)

    orphans = declared - endpoints
    if orphans:
        logger.warning("Orphan nodes detected, removing: %s", sorted(orphans))

    valid_nodes = sorted(declared - orphans)
    if not valid_nodes:
        raise EmptyGraphError()

    return ValidatedGraphData(nodes=tuple(valid_nodes), edges=tuple(edge_list))


def validate_edges(edges: Iterable[Edge]) -> ValidatedGraphData:
    """Validate an edge list, deriving the node set from its endpoints."""
    edge_list = [(src, dest) for src, dest in edges]
    if not edge_list:
        raise EmptyGraphError("No edges supplied.")
    return validate_graph_data(_edge_endpoints(edge_list), edge_list)
