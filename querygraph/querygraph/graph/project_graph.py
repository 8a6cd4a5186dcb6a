"""Build the query graph for a whole registry snapshot.

The graph is never updated in place: every call recomputes it from the
collection's current contents.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from querygraph.graph.dag_builder import DEFAULT_MAX_NODES
from querygraph.graph.query_graph import QueryGraph
from querygraph.graph.validation import Edge, GraphConstructionError
from querygraph.models.resource import NodeId
from querygraph.registry.collection import QueryCollection

logger = logging.getLogger(__name__)


def generate_edge_pairs(node_id: NodeId, dependency_ids: Sequence[NodeId]) -> list[Edge]:
    """Return ``(dependency, node_id)`` for every dependency of *node_id*."""
    return [(dep, node_id) for dep in dependency_ids]


def build_query_graph(collection: QueryCollection, *, max_nodes: int = DEFAULT_MAX_NODES) -> QueryGraph:
    """Build the dependency DAG for every entry in *collection*.

    Raises
    ------
    GraphConstructionError
        If the registry's edges do not form a valid, acyclic graph.
    """
    edges: list[Edge] = []
    for name, entry in sorted(collection.items()):
        edges.extend(generate_edge_pairs(entry.id, collection.get_query_dependencies(name)))

    try:
        return QueryGraph.from_ids_and_edges(collection.ids(), edges, max_nodes=max_nodes)
    except GraphConstructionError as exc:
        logger.error("Could not build the query graph: %s", exc)
        raise


class ProjectGraph:
    """A registry snapshot paired with the DAG built from it."""

    def __init__(self, collection: QueryCollection, graph: QueryGraph) -> None:
        self.collection = collection
        self.graph = graph

    @classmethod
    def build(cls, collection: QueryCollection, *, max_nodes: int = DEFAULT_MAX_NODES) -> ProjectGraph:
        return cls(collection, build_query_graph(collection, max_nodes=max_nodes))

    def name_of(self, node_id: NodeId) -> str:
        name = self.collection.get_name(node_id)
        if name is None:
            raise KeyError(node_id)
        return name

    def root_names(self) -> list[str]:
        """Names of the resources with no dependencies, in ascending id order."""
        return [self.name_of(i) for i in self.graph.get_root_nodes()]

    def execution_order(self) -> list[str]:
        """Names in an order that builds every dependency before its dependents."""
        return [self.name_of(i) for i in self.graph.topological_order()]

    def parallel_groups(self) -> dict[str, int]:
        return {self.name_of(i): group for i, group in self.graph.parallel_groups().items()}
