"""Centrality Calculation Algorithms

Brandes betweenness (vertex and edge) and closeness over an oriented
multigraph. One shortest-path tree is built per source vertex and its
dependencies are accumulated in reverse visiting order. Sources can be
processed by a thread pool; every worker keeps its own partial sums which
are merged once all workers finished.
"""

import threading
import time
from concurrent.futures import ThreadPoolExecutor, wait, FIRST_EXCEPTION
from datetime import datetime
from typing import Callable, Dict, List, Optional, Sequence

from .centrality_data_models import (
    AnalysisResult, CentralityConfig, EdgeMetric, ParallelEdgeCredit, VertexMetric
)
from .graph_builder import OrientedMultigraph
from .shortest_paths import ShortestPathTree, shortest_path_tree
from ...core.exceptions import AnalysisCancelledError
from ...core.logging_config import get_logger, log_operation_start, log_operation_end

logger = get_logger(__name__)

CancelCheck = Callable[[], bool]


class _PartialSums:
    """Betweenness and closeness accumulated over a subset of sources"""

    def __init__(self):
        self.vertex_betweenness: Dict[int, float] = {}
        self.edge_betweenness: Dict[int, float] = {}
        self.closeness: Dict[int, float] = {}

    def merge(self, other: '_PartialSums') -> None:
        for vertex, value in other.vertex_betweenness.items():
            self.vertex_betweenness[vertex] = self.vertex_betweenness.get(vertex, 0.0) + value
        for edge_id, value in other.edge_betweenness.items():
            self.edge_betweenness[edge_id] = self.edge_betweenness.get(edge_id, 0.0) + value
        self.closeness.update(other.closeness)


class _Progress:
    """Source counter shared by the workers of one run"""

    def __init__(self, total: int, interval: int):
        self.total = total
        self.interval = interval
        self.processed = 0
        self.stop = threading.Event()
        self._lock = threading.Lock()

    def advance(self) -> None:
        with self._lock:
            self.processed += 1
            processed = self.processed
        if processed % self.interval == 0 and processed < self.total:
            logger.info(f"Centrality progress: {processed}/{self.total} sources processed")


def _normalize_scores(scores: Dict[int, float]) -> Dict[int, float]:
    """Min-max normalize scores to [0, 1]; constant scores all become 0"""
    if not scores:
        return {}

    values = list(scores.values())
    min_val = min(values)
    max_val = max(values)

    if max_val == min_val:
        return {key: 0.0 for key in scores}

    return {
        key: (score - min_val) / (max_val - min_val)
        for key, score in scores.items()
    }


class CentralityEngine:
    """Calculate betweenness and closeness centrality of an oriented multigraph"""

    def __init__(self, config: Optional[CentralityConfig] = None):
        self.config = config or CentralityConfig()

    def compute(self, graph: OrientedMultigraph,
                cancel_check: Optional[CancelCheck] = None) -> AnalysisResult:
        """Run the full analysis.

        ``cancel_check`` is polled before every source; once it returns true
        the run raises ``AnalysisCancelledError`` and no result is produced.
        """
        sources = graph.vertex_ids
        workers = min(self.config.workers, max(len(sources), 1))

        log_operation_start(logger, "centrality analysis",
                            vertices=graph.number_of_vertices(), edges=graph.number_of_edges(),
                            weighted=graph.weighted, workers=workers)
        started = time.time()
        progress = _Progress(len(sources), self.config.progress_interval)

        try:
            if workers <= 1:
                sums = self._accumulate(graph, sources, progress, cancel_check)
            else:
                sums = self._accumulate_parallel(graph, sources, workers, progress, cancel_check)
        except AnalysisCancelledError:
            log_operation_end(logger, "centrality analysis", time.time() - started, success=False,
                              processed=progress.processed, total=len(sources))
            raise

        vertex_scores = {vertex: sums.vertex_betweenness.get(vertex, 0.0) for vertex in sources}
        edge_scores = {edge_id: sums.edge_betweenness.get(edge_id, 0.0) for edge_id in graph.edge_ids}
        if self.config.normalize:
            vertex_scores = _normalize_scores(vertex_scores)
            edge_scores = _normalize_scores(edge_scores)

        calculation_time = time.time() - started
        result = AnalysisResult(
            vertices=[
                VertexMetric(vertex, vertex_scores[vertex], sums.closeness.get(vertex, 0.0))
                for vertex in sources
            ],
            edges=[EdgeMetric(edge_id, edge_scores[edge_id]) for edge_id in graph.edge_ids],
            metadata={
                "orientation": graph.orientation.describe(),
                "weighted": graph.weighted,
                "normalized": self.config.normalize,
                "parallel_edge_credit": self.config.parallel_edge_credit.value,
                "workers": workers,
                "vertex_count": graph.number_of_vertices(),
                "edge_count": graph.number_of_edges(),
                "calculation_time": calculation_time,
                "calculated_at": datetime.now().isoformat()
            }
        )
        log_operation_end(logger, "centrality analysis", calculation_time,
                          vertices=len(result.vertices), edges=len(result.edges))
        return result

    def _accumulate_parallel(self, graph: OrientedMultigraph, sources: List[int], workers: int,
                             progress: _Progress, cancel_check: Optional[CancelCheck]) -> _PartialSums:
        chunk_size = -(-len(sources) // workers)
        chunks = [sources[i:i + chunk_size] for i in range(0, len(sources), chunk_size)]
        logger.debug(f"Split {len(sources)} sources into {len(chunks)} chunks")

        total = _PartialSums()
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="centrality") as executor:
            futures = [
                executor.submit(self._accumulate, graph, chunk, progress, cancel_check)
                for chunk in chunks
            ]
            _, pending = wait(futures, return_when=FIRST_EXCEPTION)
            if pending:
                progress.stop.set()
                for future in pending:
                    future.cancel()
                wait(futures)
            errors = [
                future.exception() for future in futures
                if not future.cancelled() and future.exception() is not None
            ]
            if errors:
                progress.stop.set()
                # a worker failure outranks the cancellations it triggered
                failures = [e for e in errors if not isinstance(e, AnalysisCancelledError)]
                raise (failures or errors)[0]
            for future in futures:
                total.merge(future.result())
        return total

    def _accumulate(self, graph: OrientedMultigraph, sources: Sequence[int], progress: _Progress,
                    cancel_check: Optional[CancelCheck]) -> _PartialSums:
        sums = _PartialSums()
        for source in sources:
            if progress.stop.is_set() or (cancel_check is not None and cancel_check()):
                progress.stop.set()
                raise AnalysisCancelledError(progress.processed, progress.total)
            tree = shortest_path_tree(graph, source)
            sums.closeness[source] = self._closeness(tree, graph.number_of_vertices())
            self._accumulate_dependencies(tree, sums)
            progress.advance()
        return sums

    @staticmethod
    def _closeness(tree: ShortestPathTree, vertex_count: int) -> float:
        """Reached vertices over total distance; 0 unless every other vertex is reached"""
        reachable = tree.reachable_count
        if vertex_count <= 1 or reachable < vertex_count - 1:
            return 0.0
        total_distance = sum(tree.distance[v] for v in tree.order if v != tree.source)
        if total_distance == 0:
            return 0.0
        return reachable / total_distance

    def _accumulate_dependencies(self, tree: ShortestPathTree, sums: _PartialSums) -> None:
        """Brandes back-propagation for one source.

        Edge credit always flows per predecessor edge. Under MERGED the vertex
        dependency flows once per distinct predecessor vertex, tracked in a
        separate accumulator.
        """
        merged = self.config.parallel_edge_credit is ParallelEdgeCredit.MERGED
        sigma = tree.sigma
        delta = dict.fromkeys(tree.order, 0.0)
        vertex_delta = dict.fromkeys(tree.order, 0.0) if merged else delta
        vertex_betweenness = sums.vertex_betweenness
        edge_betweenness = sums.edge_betweenness

        for w in reversed(tree.order):
            coefficient = (1.0 + delta[w]) / sigma[w]
            if merged:
                vertex_coefficient = (1.0 + vertex_delta[w]) / sigma[w]
                credited = set()
            for u, edge_id in tree.predecessors[w]:
                credit = sigma[u] * coefficient
                edge_betweenness[edge_id] = edge_betweenness.get(edge_id, 0.0) + credit
                delta[u] += credit
                if merged and u not in credited:
                    vertex_delta[u] += sigma[u] * vertex_coefficient
                    credited.add(u)
            if w != tree.source:
                vertex_betweenness[w] = vertex_betweenness.get(w, 0.0) + vertex_delta[w]
