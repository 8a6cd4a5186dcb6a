"""Unit tests for querygraph.graph.validation."""

from __future__ import annotations

import logging

import pytest

from querygraph.graph.validation import (
    DanglingEdgeError,
    EmptyGraphError,
    GraphConstructionError,
    ValidatedGraphData,
    validate_edges,
    validate_graph_data,
)

_ACYCLIC_EDGES = [(0, 1), (0, 2), (3, 2), (2, 4), (4, 5), (7, 5)]


# ---------------------------------------------------------------------------
# validate_graph_data
# ---------------------------------------------------------------------------


class TestValidateGraphData:
    def test_accepts_matching_nodes_and_edges(self):
        data = validate_graph_data([0, 1, 2, 3], [(0, 1), (0, 2), (1, 3)])
        assert data.nodes == (0, 1, 2, 3)
        assert data.edges == ((0, 1), (0, 2), (1, 3))

    def test_rejects_edge_to_undeclared_node(self):
        with pytest.raises(DanglingEdgeError) as exc_info:
            validate_graph_data([0, 1, 2], [(0, 1), (0, 2), (1, 3)])
        assert exc_info.value.node_ids == [3]

    def test_dangling_error_lists_every_offender_sorted(self):
        with pytest.raises(DanglingEdgeError) as exc_info:
            validate_graph_data([1], [(9, 1), (1, 4)])
        assert exc_info.value.node_ids == [4, 9]
        assert isinstance(exc_info.value, GraphConstructionError)

    def test_removes_orphan_nodes(self):
        data = validate_graph_data([0, 1, 2, 3, 4, 5, 6, 7], [(0, 1), (0, 2), (1, 3)])
        assert data.nodes == (0, 1, 2, 3)

    def test_orphans_are_logged(self, caplog: pytest.LogCaptureFixture):
        with caplog.at_level(logging.WARNING, logger="querygraph.graph.validation"):
            validate_graph_data([0, 1, 2, 6, 5], [(0, 1), (1, 2)])
        assert "Orphan nodes detected" in caplog.text
        assert "[5, 6]" in caplog.text

    def test_nodes_sorted_and_deduplicated(self):
        data = validate_graph_data([31, 9, 9, 18, 31], [(31, 18), (31, 9)])
        assert data.nodes == (9, 18, 31)

    def test_edges_kept_unchanged(self):
        edges = [(5, 1), (5, 1), (1, 2)]
        data = validate_graph_data([1, 2, 5], edges)
        assert data.edges == ((5, 1), (5, 1), (1, 2))

    def test_all_orphans_is_empty(self):
        with pytest.raises(EmptyGraphError):
            validate_graph_data([1, 2, 3], [])

    def test_no_nodes_no_edges_is_empty(self):
        with pytest.raises(EmptyGraphError):
            validate_graph_data([], [])

    def test_result_is_immutable(self):
        data = validate_graph_data([0, 1], [(0, 1)])
        assert isinstance(data, ValidatedGraphData)
        with pytest.raises(AttributeError):
            data.nodes = (5,)  # type: ignore[misc]


# ---------------------------------------------------------------------------
# validate_edges
# ---------------------------------------------------------------------------


class TestValidateEdges:
    def test_valid_edge_pairs(self):
        data = validate_edges(_ACYCLIC_EDGES)
        assert data.nodes == (0, 1, 2, 3, 4, 5, 7)

    def test_empty_edges_rejected(self):
        with pytest.raises(EmptyGraphError):
            validate_edges([])

    def test_node_list_equals_sorted_endpoints(self):
        edges = [(243, 9), (31, 18), (109, 86)]
        data = validate_edges(edges)
        assert list(data.nodes) == sorted({n for edge in edges for n in edge})

    def test_accepts_generator(self):
        data = validate_edges((a, a + 1) for a in range(3))
        assert data.nodes == (0, 1, 2, 3)
