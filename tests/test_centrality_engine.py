"""
Tests for the centrality engine: reference network scenarios, credit
policies, raw sums, edge cases, worker pool and cancellation.
"""

import threading

import pytest

from graph_analysis.core.exceptions import AnalysisCancelledError, ConfigurationError
from graph_analysis.tools.centrality_analysis import centrality_calculators
from graph_analysis.tools.centrality_analysis import (
    CentralityConfig, CentralityEngine, ParallelEdgeCredit, build_graph
)
from graph_fixtures import make_table, reference_table as build_reference_table

TOL = 1e-12


def analyze(table, orientation, weight_field=None, **options):
    graph = build_graph(table, orientation, weight_field)
    return CentralityEngine(CentralityConfig(**options)).compute(graph)


def vertex_betweenness(result):
    return {metric.id: metric.betweenness for metric in result.vertices}


def vertex_closeness(result):
    return {metric.id: metric.closeness for metric in result.vertices}


def edge_betweenness(result):
    return {metric.id: metric.betweenness for metric in result.edges}


class TestReferenceUnweighted:
    """Reference network without weights, normalized, merged credit"""

    def test_directed(self, reference_table):
        result = analyze(reference_table, "directed")

        assert vertex_betweenness(result) == pytest.approx(
            {1: 1.0, 2: 0.0, 3: 1.0, 4: 0.0, 5: 0.0, 6: 0.6666666666666666}, abs=TOL)
        assert vertex_closeness(result) == pytest.approx(
            {1: 0.0, 2: 5 / 12, 3: 0.0, 4: 0.0, 5: 0.0, 6: 0.0}, abs=TOL)
        assert edge_betweenness(result) == pytest.approx(
            {1: 0.75, 2: 0.0, 3: 1.0, 4: 0.25, 5: 0.25, 6: 0.5}, abs=TOL)

    def test_reversed(self, reference_table):
        result = analyze(reference_table, "directed_reversed")

        assert vertex_betweenness(result) == pytest.approx(
            {1: 0.375, 2: 0.0, 3: 1.0, 4: 0.0, 5: 0.0, 6: 1.0}, abs=TOL)
        assert all(metric.closeness == 0.0 for metric in result.vertices)
        assert edge_betweenness(result) == pytest.approx(
            {1: 0.75, 2: 0.0, 3: 1.0, 4: 0.25, 5: 0.25, 6: 0.5}, abs=TOL)

    def test_undirected(self, reference_table):
        result = analyze(reference_table, "undirected")

        assert vertex_betweenness(result) == pytest.approx(
            {1: 0.5, 2: 0.0, 3: 1.0, 4: 0.0, 5: 0.0, 6: 0.75}, abs=TOL)
        assert vertex_closeness(result) == pytest.approx(
            {1: 0.5, 2: 5 / 12, 3: 0.625, 4: 5 / 14, 5: 5 / 12, 6: 0.625}, abs=TOL)
        assert edge_betweenness(result) == pytest.approx(
            {1: 0.2, 2: 0.2, 3: 1.0, 4: 0.0, 5: 0.0, 6: 0.2}, abs=TOL)


class TestReferenceWeighted:
    """Reference network weighted by length"""

    WEIGHTED_EDGES = {1: 5 / 6, 2: 1 / 3, 3: 1.0, 4: 1.0, 5: 0.0, 6: 2 / 3}

    def test_directed(self, reference_table):
        result = analyze(reference_table, "directed", "length")

        assert vertex_betweenness(result) == pytest.approx(
            {1: 0.75, 2: 0.0, 3: 1.0, 4: 0.0, 5: 0.0, 6: 1.0}, abs=TOL)
        closeness = vertex_closeness(result)
        assert closeness[2] == pytest.approx(0.0035327735482214143, rel=1e-9)
        assert [closeness[v] for v in (1, 3, 4, 5, 6)] == [0.0] * 5
        assert edge_betweenness(result) == pytest.approx(self.WEIGHTED_EDGES, abs=TOL)

    def test_reversed(self, reference_table):
        result = analyze(reference_table, "directed_reversed", "length")

        assert vertex_betweenness(result) == pytest.approx(
            {1: 0.75, 2: 0.0, 3: 1.0, 4: 0.0, 5: 0.0, 6: 1.0}, abs=TOL)
        assert all(metric.closeness == 0.0 for metric in result.vertices)
        assert edge_betweenness(result) == pytest.approx(self.WEIGHTED_EDGES, abs=TOL)

    def test_undirected(self, reference_table):
        result = analyze(reference_table, "undirected", "length")

        assert vertex_betweenness(result) == pytest.approx(
            {1: 0.5714285714285714, 2: 0.0, 3: 1.0, 4: 0.0, 5: 0.0, 6: 0.8571428571428571}, abs=TOL)
        assert vertex_closeness(result) == pytest.approx({
            1: 0.003787491035823884,
            2: 0.0035327735482214143,
            3: 0.0055753940798198886,
            4: 0.0032353723348164448,
            5: 0.003495002741097083,
            6: 0.0055753940798198886,
        }, rel=1e-9)
        assert edge_betweenness(result) == pytest.approx(
            {1: 5 / 9, 2: 5 / 9, 3: 1.0, 4: 8 / 9, 5: 0.0, 6: 5 / 9}, abs=TOL)


class TestReferenceShape:

    @pytest.mark.parametrize("orientation", ["directed", "directed_reversed", "undirected",
                                             "directed - edge_orientation"])
    @pytest.mark.parametrize("weight_field", [None, "length"])
    def test_one_row_per_vertex_and_edge(self, reference_table, orientation, weight_field):
        result = analyze(reference_table, orientation, weight_field)
        assert [metric.id for metric in result.vertices] == [1, 2, 3, 4, 5, 6]
        assert [metric.id for metric in result.edges] == [1, 2, 3, 4, 5, 6]

    @pytest.mark.parametrize("weight_field", [None, "length"])
    def test_per_edge_codes_match_global_modes(self, weight_field):
        for code, orientation in ((1, "directed"), (-1, "directed_reversed"), (0, "undirected")):
            table = build_reference_table(code)
            per_edge = analyze(table, "directed - edge_orientation", weight_field)
            global_mode = analyze(table, orientation, weight_field)
            assert per_edge.vertices == global_mode.vertices
            assert per_edge.edges == global_mode.edges

    def test_reversed_per_edge_matches_reversed_mode(self, reference_table):
        per_edge = analyze(reference_table, "reversed - edge_orientation")
        reversed_mode = analyze(reference_table, "directed_reversed")
        assert per_edge.vertices == reversed_mode.vertices

    def test_metadata(self, reference_table):
        result = analyze(reference_table, "undirected", "length")
        assert result.metadata["orientation"] == "undirected"
        assert result.metadata["weighted"] is True
        assert result.metadata["normalized"] is True
        assert result.metadata["parallel_edge_credit"] == "merged"
        assert result.metadata["vertex_count"] == 6
        assert result.metadata["edge_count"] == 6


class TestCreditPolicies:
    """Merged versus split vertex credit over parallel edges"""

    def test_split_undirected(self, reference_table):
        result = analyze(reference_table, "undirected", parallel_edge_credit=ParallelEdgeCredit.SPLIT)
        assert vertex_betweenness(result) == pytest.approx(
            {1: 4 / 7, 2: 0.0, 3: 1.0, 4: 0.0, 5: 0.0, 6: 6 / 7}, abs=TOL)

    def test_split_restores_duality(self, reference_table):
        directed = analyze(reference_table, "directed", parallel_edge_credit="split", normalize=False)
        reversed_ = analyze(reference_table, "directed_reversed", parallel_edge_credit="split",
                            normalize=False)
        assert vertex_betweenness(directed) == pytest.approx({1: 3, 2: 0, 3: 4, 4: 0, 5: 0, 6: 4})
        assert vertex_betweenness(reversed_) == pytest.approx(vertex_betweenness(directed))

    def test_merged_raw_sums(self, reference_table):
        directed = analyze(reference_table, "directed", normalize=False)
        reversed_ = analyze(reference_table, "directed_reversed", normalize=False)
        assert vertex_betweenness(directed) == pytest.approx({1: 3, 2: 0, 3: 3, 4: 0, 5: 0, 6: 2})
        assert vertex_betweenness(reversed_) == pytest.approx({1: 1.5, 2: 0, 3: 4, 4: 0, 5: 0, 6: 4})

    def test_edge_credit_same_under_both_policies(self, reference_table):
        merged = analyze(reference_table, "undirected")
        split = analyze(reference_table, "undirected", parallel_edge_credit="split")
        assert merged.edges == split.edges

    def test_policies_agree_without_parallel_edges(self, path_table):
        merged = analyze(path_table, "undirected", normalize=False)
        split = analyze(path_table, "undirected", normalize=False, parallel_edge_credit="split")
        assert merged.vertices == split.vertices

    def test_unknown_policy_rejected(self):
        with pytest.raises(ConfigurationError):
            CentralityConfig(parallel_edge_credit="halved")


class TestRawSums:

    def test_directed_raw_edges(self, reference_table):
        result = analyze(reference_table, "directed", normalize=False)
        assert edge_betweenness(result) == pytest.approx({1: 5, 2: 2, 3: 6, 4: 3, 5: 3, 6: 4})

    def test_raw_identity_split(self, reference_table):
        result = analyze(reference_table, "directed", normalize=False, parallel_edge_credit="split")
        ordered_reachable_pairs = 5 + 4 + 2 + 1
        assert sum(edge_betweenness(result).values()) == pytest.approx(
            sum(vertex_betweenness(result).values()) + ordered_reachable_pairs)

    def test_path_counts_ordered_pairs(self, path_table):
        result = analyze(path_table, "undirected", normalize=False)
        assert vertex_betweenness(result) == pytest.approx({1: 0, 2: 4, 3: 4, 4: 0})
        assert edge_betweenness(result) == pytest.approx({1: 6, 2: 8, 3: 6})


class TestEdgeCases:

    def test_empty_graph(self):
        result = analyze(make_table([]), "undirected")
        assert result.vertices == []
        assert result.edges == []

    def test_single_vertex_self_loop(self):
        result = analyze(make_table([(7, 7)]), "directed")
        assert [(m.id, m.betweenness, m.closeness) for m in result.vertices] == [(7, 0.0, 0.0)]
        assert [(m.id, m.betweenness) for m in result.edges] == [(1, 0.0)]

    def test_self_loop_never_traversed(self):
        with_loop = analyze(make_table([(1, 2), (2, 2), (2, 3)]), "directed", normalize=False)
        assert edge_betweenness(with_loop)[2] == 0.0
        assert vertex_betweenness(with_loop) == pytest.approx({1: 0, 2: 1, 3: 0})

    def test_constant_scores_normalize_to_zero(self):
        result = analyze(make_table([(1, 2)]), "undirected")
        assert vertex_betweenness(result) == {1: 0.0, 2: 0.0}
        assert edge_betweenness(result) == {1: 0.0}
        assert vertex_closeness(result) == {1: 1.0, 2: 1.0}

    def test_disconnected_graph(self):
        result = analyze(make_table([(1, 2), (2, 3), (4, 5)]), "undirected", normalize=False)
        assert vertex_betweenness(result) == pytest.approx({1: 0, 2: 2, 3: 0, 4: 0, 5: 0})
        assert all(metric.closeness == 0.0 for metric in result.vertices)

    def test_zero_total_distance_gives_zero_closeness(self):
        table = make_table([(1, 2, 0.0)], ("start_node", "end_node", "w"))
        result = analyze(table, "undirected", "w")
        assert vertex_closeness(result) == {1: 0.0, 2: 0.0}

    def test_zero_weight_tie_credits_intermediate_vertex(self):
        rows = [(1, 2, 1.0), (1, 3, 1.0), (3, 2, 0.0)]
        table = make_table(rows, ("start_node", "end_node", "w"))
        result = analyze(table, "directed", "w", normalize=False)
        assert vertex_betweenness(result) == pytest.approx({1: 0.0, 2: 0.0, 3: 0.5})
        assert edge_betweenness(result) == pytest.approx({1: 0.5, 2: 1.5, 3: 1.5})

    def test_invalid_worker_count(self):
        with pytest.raises(ConfigurationError):
            CentralityConfig(workers=0)


class TestWorkersAndCancellation:

    @pytest.mark.parametrize("orientation", ["directed", "undirected"])
    def test_worker_pool_matches_sequential(self, reference_table, orientation):
        sequential = analyze(reference_table, orientation, "length", normalize=False)
        pooled = analyze(reference_table, orientation, "length", normalize=False, workers=3)
        assert vertex_betweenness(pooled) == pytest.approx(vertex_betweenness(sequential))
        assert vertex_closeness(pooled) == pytest.approx(vertex_closeness(sequential))
        assert edge_betweenness(pooled) == pytest.approx(edge_betweenness(sequential))
        assert pooled.metadata["workers"] == 3

    def test_workers_capped_by_vertex_count(self):
        result = analyze(make_table([(1, 2)]), "directed", workers=8)
        assert result.metadata["workers"] == 2

    def test_cancel_before_start(self, reference_table):
        graph = build_graph(reference_table, "undirected")
        with pytest.raises(AnalysisCancelledError) as excinfo:
            CentralityEngine().compute(graph, cancel_check=lambda: True)
        assert excinfo.value.processed_sources == 0
        assert excinfo.value.total_sources == 6

    def test_cancel_midway(self, reference_table):
        graph = build_graph(reference_table, "undirected")
        calls = []

        def cancel_after_two():
            calls.append(1)
            return len(calls) > 2

        with pytest.raises(AnalysisCancelledError) as excinfo:
            CentralityEngine().compute(graph, cancel_check=cancel_after_two)
        assert excinfo.value.processed_sources == 2

    def test_cancel_with_worker_pool(self, reference_table):
        graph = build_graph(reference_table, "undirected")
        with pytest.raises(AnalysisCancelledError):
            CentralityEngine(CentralityConfig(workers=2)).compute(graph, cancel_check=lambda: True)

    def test_progress_logging(self, reference_table, caplog):
        graph = build_graph(reference_table, "undirected")
        with caplog.at_level("INFO", logger="graph_analysis"):
            CentralityEngine(CentralityConfig(progress_interval=2)).compute(graph)
        assert any("2/6 sources processed" in record.getMessage() for record in caplog.records)

    def test_worker_failure_outranks_cancellation(self, path_table, monkeypatch):
        """A failing worker is reported even when another worker was cancelled first."""
        failed = threading.Event()
        real_tree = centrality_calculators.shortest_path_tree

        def tree_or_fail(graph, source):
            if source == 3:
                failed.set()
                raise RuntimeError("tree construction failed")
            failed.wait(timeout=5)
            return real_tree(graph, source)

        monkeypatch.setattr(centrality_calculators, "shortest_path_tree", tree_or_fail)
        graph = build_graph(path_table, "directed")
        engine = CentralityEngine(CentralityConfig(workers=2))
        with pytest.raises(RuntimeError, match="tree construction failed"):
            engine.compute(graph, cancel_check=failed.is_set)
