"""Public, id-oriented façade over the validated dependency DAG.

A :class:`QueryGraph` only ever exists in an acyclic state: every
constructor validates the input, builds the graph and checks for cycles,
raising a :class:`~querygraph.graph.validation.GraphConstructionError`
subclass instead of returning an instance if any step fails.  Once built the
underlying NetworkX graph is frozen, so instances may be shared freely
between readers.
"""

from __future__ import annotations

import heapq
from collections.abc import Iterable

import networkx as nx

from querygraph.graph.dag_builder import DEFAULT_MAX_NODES, build_dag, detect_cycles
from querygraph.graph.validation import (
    Edge,
    ValidatedGraphData,
    validate_edges,
    validate_graph_data,
)
from querygraph.models.resource import NodeId


class QueryGraph:
    """Dependency DAG addressed by resource id.

    An edge ``(a, b)`` means *a* must be built before *b*.  Prefer one of the
    ``from_*`` constructors; direct construction applies the same acyclicity
    check.

    Raises
    ------
    CyclicDependencyError
        If *graph* contains a cycle.
    ValueError
        If *index_of* does not map onto the graph's indices ``0..n-1``.
    """

    def __init__(self, graph: nx.DiGraph, index_of: dict[NodeId, int]) -> None:
        indices = list(range(graph.number_of_nodes()))
        if sorted(index_of.values()) != indices or sorted(graph.nodes) != indices:
            raise ValueError("index_of must map one id to each graph index 0..n-1")
        detect_cycles(graph)
        self._graph = nx.freeze(graph)
        self._index_of = dict(index_of)
        self._id_of: list[NodeId] = [0] * len(self._index_of)
        for node_id, index in self._index_of.items():
            self._id_of[index] = node_id

    # -- construction --

    @classmethod
    def from_valid_data(cls, data: ValidatedGraphData, *, max_nodes: int = DEFAULT_MAX_NODES) -> QueryGraph:
        """Build the graph and reject it if it contains a cycle.

        Raises
        ------
        GraphCapacityError
            If the node count exceeds *max_nodes*.
        CyclicDependencyError
            If any cycle exists.  No partial graph is kept.
        """
        built = build_dag(data, max_nodes=max_nodes)
        return cls(built.graph, built.index_of)

    @classmethod
    def from_edges(cls, edges: Iterable[Edge], *, max_nodes: int = DEFAULT_MAX_NODES) -> QueryGraph:
        """Validate *edges*, deriving nodes from their endpoints, then build."""
        return cls.from_valid_data(validate_edges(edges), max_nodes=max_nodes)

    @classmethod
    def from_ids_and_edges(
        cls,
        node_ids: Iterable[NodeId],
        edges: Iterable[Edge],
        *,
        max_nodes: int = DEFAULT_MAX_NODES,
    ) -> QueryGraph:
        """Validate *edges* against the declared *node_ids*, then build."""
        return cls.from_valid_data(validate_graph_data(node_ids, edges), max_nodes=max_nodes)

    # -- lookups --

    @property
    def graph(self) -> nx.DiGraph:
        """The frozen underlying graph, keyed by internal index."""
        return self._graph

    @property
    def node_ids(self) -> list[NodeId]:
        """All node ids in ascending order."""
        return list(self._id_of)

    @property
    def edges(self) -> list[Edge]:
        return [(self._id_of[a], self._id_of[b]) for a, b in self._graph.edges]

    def get_index(self, node_id: NodeId) -> int | None:
        return self._index_of.get(node_id)

    def get_id(self, index: int) -> NodeId | None:
        if 0 <= index < len(self._id_of):
            return self._id_of[index]
        return None

    def get_root_nodes(self) -> list[NodeId]:
        """Return ids with no incoming edge, ascending.

        These are the resources a build starts from: they depend on nothing
        else in the graph.
        """
        return [self._id_of[i] for i in range(len(self._id_of)) if self._graph.in_degree(i) == 0]

    # -- traversal --

    def topological_order(self) -> list[NodeId]:
        """Return every id in dependency order.

        Kahn's algorithm with a min-heap: among nodes with no ordering
        constraint between them the smaller id comes first, so the result is
        reproducible across runs.
        """
        in_degree = dict(self._graph.in_degree())
        heap = [i for i, d in in_degree.items() if d == 0]
        heapq.heapify(heap)
        order: list[NodeId] = []
        while heap:
            index = heapq.heappop(heap)
            order.append(self._id_of[index])
            for successor in self._graph.successors(index):
                in_degree[successor] -= 1
                if in_degree[successor] == 0:
                    heapq.heappush(heap, successor)
        return order

    def _reachable(self, node_id: NodeId, *, forward: bool) -> set[NodeId]:
        index = self._index_of.get(node_id)
        if index is None:
            return set()
        reached = nx.descendants(self._graph, index) if forward else nx.ancestors(self._graph, index)
        return {self._id_of[i] for i in reached}

    def get_downstream(self, node_id: NodeId) -> set[NodeId]:
        """Return every id transitively depending on *node_id* (exclusive)."""
        return self._reachable(node_id, forward=True)

    def get_upstream(self, node_id: NodeId) -> set[NodeId]:
        """Return every id *node_id* transitively depends on (exclusive)."""
        return self._reachable(node_id, forward=False)

    def parallel_groups(self) -> dict[NodeId, int]:
        """Assign each id a 1-based group by longest-path depth.

        Nodes in the same group have no dependencies on one another and may
        run concurrently once every earlier group has finished.
        """
        depth: dict[NodeId, int] = {}
        for node_id in self.topological_order():
            index = self._index_of[node_id]
            preds = [self._id_of[p] for p in self._graph.predecessors(index)]
            depth[node_id] = max((depth[p] for p in preds), default=0) + 1
        return depth

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._index_of

    def __len__(self) -> int:
        return len(self._id_of)

    def __repr__(self) -> str:
        return f"QueryGraph({len(self)} nodes, {self._graph.number_of_edges()} edges)"
