"""Graph validation, DAG construction and the query graph façade."""

from querygraph.graph.dag_builder import (
    DEFAULT_MAX_NODES,
    BuiltGraph,
    CyclicDependencyError,
    GraphCapacityError,
    build_dag,
    detect_cycles,
)
from querygraph.graph.project_graph import (
    ProjectGraph,
    build_query_graph,
    generate_edge_pairs,
)
from querygraph.graph.query_graph import QueryGraph
from querygraph.graph.validation import (
    DanglingEdgeError,
    EmptyGraphError,
    GraphConstructionError,
    ValidatedGraphData,
    validate_edges,
    validate_graph_data,
)

__all__ = [
    # Validation
    "DanglingEdgeError",
    "EmptyGraphError",
    "GraphConstructionError",
    "ValidatedGraphData",
    "validate_edges",
    "validate_graph_data",
    # DAG construction
    "BuiltGraph",
    "CyclicDependencyError",
    "DEFAULT_MAX_NODES",
    "GraphCapacityError",
    "build_dag",
    "detect_cycles",
    # Façade
    "ProjectGraph",
    "QueryGraph",
    "build_query_graph",
    "generate_edge_pairs",
]
