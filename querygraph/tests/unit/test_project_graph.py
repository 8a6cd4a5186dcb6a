"""Unit tests for querygraph.graph.project_graph."""

from __future__ import annotations

import logging

import pytest

from querygraph.graph.dag_builder import CyclicDependencyError, GraphCapacityError
from querygraph.graph.project_graph import ProjectGraph, build_query_graph, generate_edge_pairs
from querygraph.graph.validation import EmptyGraphError
from querygraph.models.resource import RawQuery, resource_id
from querygraph.registry.collection import QueryCollection

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _collection(queries: dict[str, str]) -> QueryCollection:
    collection = QueryCollection()
    collection.register([RawQuery(name, text) for name, text in queries.items()])
    return collection


_GRIMOIRE = {
    "q1": "SELECT * FROM arcana WHERE source <> 'necronomicon'",
    "q2": "SELECT * FROM rituals JOIN q1 ON rituals.source = q1.source",
    "q3": "SELECT * FROM q2 WHERE something = 'blah'",
    "q4": (
        "SELECT * FROM q3 JOIN rituals ON q3.source = rituals.source "
        "JOIN q1 ON q3.other = q1.other"
    ),
}


# ---------------------------------------------------------------------------
# generate_edge_pairs
# ---------------------------------------------------------------------------


class TestGenerateEdgePairs:
    def test_dependency_is_source(self):
        assert generate_edge_pairs(10, [1, 2]) == [(1, 10), (2, 10)]

    def test_no_dependencies(self):
        assert generate_edge_pairs(10, []) == []


# ---------------------------------------------------------------------------
# build_query_graph
# ---------------------------------------------------------------------------


class TestBuildQueryGraph:
    def test_graph_from_queries(self):
        graph = build_query_graph(_collection(_GRIMOIRE))
        assert len(graph) == 6
        assert resource_id("q4") in graph

    def test_roots_are_source_tables(self):
        graph = build_query_graph(_collection(_GRIMOIRE))
        assert set(graph.get_root_nodes()) == {resource_id("arcana"), resource_id("rituals")}

    def test_cycle_between_queries(self, caplog: pytest.LogCaptureFixture):
        collection = _collection({"qa": "SELECT * FROM qb", "qb": "SELECT * FROM qa"})
        with caplog.at_level(logging.ERROR, logger="querygraph.graph.project_graph"):
            with pytest.raises(CyclicDependencyError):
                build_query_graph(collection)
        assert "Could not build the query graph" in caplog.text

    def test_self_reference_is_cycle(self):
        with pytest.raises(CyclicDependencyError):
            build_query_graph(_collection({"loop": "SELECT * FROM loop"}))

    def test_queries_without_dependencies_only(self):
        with pytest.raises(EmptyGraphError):
            build_query_graph(_collection({"one": "SELECT 1"}))

    def test_orphan_query_dropped(self):
        collection = _collection({**_GRIMOIRE, "constant": "SELECT 1 AS x"})
        graph = build_query_graph(collection)
        assert resource_id("constant") not in graph
        assert len(graph) == 6

    def test_max_nodes_forwarded(self):
        with pytest.raises(GraphCapacityError):
            build_query_graph(_collection(_GRIMOIRE), max_nodes=3)

    def test_rebuild_reflects_new_registrations(self):
        collection = _collection({"q1": _GRIMOIRE["q1"]})
        assert len(build_query_graph(collection)) == 2
        collection.register([RawQuery("q2", _GRIMOIRE["q2"])])
        assert len(build_query_graph(collection)) == 4


# ---------------------------------------------------------------------------
# ProjectGraph
# ---------------------------------------------------------------------------


class TestProjectGraph:
    def test_root_names(self):
        project_graph = ProjectGraph.build(_collection(_GRIMOIRE))
        expected = sorted(["arcana", "rituals"], key=resource_id)
        assert project_graph.root_names() == expected

    def test_execution_order_respects_dependencies(self):
        order = ProjectGraph.build(_collection(_GRIMOIRE)).execution_order()
        assert sorted(order) == ["arcana", "q1", "q2", "q3", "q4", "rituals"]
        assert order.index("arcana") < order.index("q1")
        assert order.index("q1") < order.index("q2")
        assert order.index("rituals") < order.index("q2")
        assert order.index("q2") < order.index("q3") < order.index("q4")

    def test_parallel_groups_by_name(self):
        groups = ProjectGraph.build(_collection(_GRIMOIRE)).parallel_groups()
        assert groups == {"arcana": 1, "rituals": 1, "q1": 2, "q2": 3, "q3": 4, "q4": 5}

    def test_name_of_unknown_id(self):
        project_graph = ProjectGraph.build(_collection(_GRIMOIRE))
        with pytest.raises(KeyError):
            project_graph.name_of(12345)
