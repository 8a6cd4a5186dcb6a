"""Materialise validated graph data as a NetworkX directed graph.

Graph nodes are keyed by a dense internal *index* (``0..n-1``, assigned in
ascending id order) and carry the resource id under the ``"node_id"``
attribute.  Directed edges point **from** a dependency **to** its dependent.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

import networkx as nx

from querygraph.graph.validation import GraphConstructionError, ValidatedGraphData
from querygraph.models.resource import NodeId

logger = logging.getLogger(__name__)

DEFAULT_MAX_NODES = 1 << 32
"""Default ceiling on graph size; internal indices must fit in 32 bits."""


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


def _format_cycle(cycle: list[NodeId]) -> str:
    # Close the loop so a self-reference reads "5 -> 5".
    return " -> ".join(map(str, [*cycle, cycle[0]]))


class CyclicDependencyError(GraphConstructionError):
    """At least one resource transitively depends on itself.

    ``cycles`` holds each loop as resource ids in traversal order, sorted so
    that the same graph always reports the same cycles.
    """

    def __init__(self, cycles: list[list[NodeId]]) -> None:
        self.cycles = [c for c in cycles if c]
        loops = " | ".join(_format_cycle(c) for c in self.cycles)
        super().__init__(f"Cyclic dependencies detected ({len(self.cycles)} loop(s)): {loops}")


class GraphCapacityError(GraphConstructionError):
    """Raised when the node count exceeds the configured index width."""

    def __init__(self, node_count: int, max_nodes: int) -> None:
        self.node_count = node_count
        self.max_nodes = max_nodes
        super().__init__(f"Graph has {node_count} nodes but at most {max_nodes} are addressable.")


# ---------------------------------------------------------------------------
# Construction
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class BuiltGraph:
    """A freshly built graph and its id -> index lookup table."""

    graph: nx.DiGraph
    index_of: dict[NodeId, int]


def build_dag(data: ValidatedGraphData, *, max_nodes: int = DEFAULT_MAX_NODES) -> BuiltGraph:
    """Build a directed graph from validated data.

    One node is added per entry of ``data.nodes`` (in order, so index ``i``
    holds the ``i``-th smallest id) and one edge per pair.  Adding an edge
    that already exists is a no-op.

    Raises
    ------
    GraphCapacityError
        If ``len(data.nodes)`` exceeds *max_nodes*.
    """
    if len(data.nodes) > max_nodes:
        raise GraphCapacityError(len(data.nodes), max_nodes)

    graph = nx.DiGraph()
    index_of: dict[NodeId, int] = {}
    for index, node_id in enumerate(data.nodes):
        graph.add_node(index, node_id=node_id)
        index_of[node_id] = index

    for src, dest in data.edges:
        graph.add_edge(index_of[src], index_of[dest])

    logger.debug(
        "Built graph with %d nodes and %d edges",
        graph.number_of_nodes(),
        graph.number_of_edges(),
    )
    return BuiltGraph(graph=graph, index_of=index_of)


def detect_cycles(graph: nx.DiGraph) -> None:
    """Raise :class:`CyclicDependencyError` if *graph* is not acyclic.

    Reported cycles are expressed in resource ids, not internal indices.
    """
    if nx.is_directed_acyclic_graph(graph):
        return
    cycles = [[graph.nodes[i]["node_id"] for i in cycle] for cycle in nx.simple_cycles(graph)]
    raise CyclicDependencyError(sorted(cycles))
