"""Single-source shortest-path trees

BFS for unweighted graphs and binary-heap Dijkstra for weighted graphs. Both
record, per reached vertex, the distance, the number of shortest paths
(``sigma``) and the predecessor edges. Parallel edges each count as a
distinct continuation.
"""

import heapq
from collections import deque
from dataclasses import dataclass, field
from itertools import count
from typing import Dict, List, Tuple

from .graph_builder import OrientedMultigraph


@dataclass
class ShortestPathTree:
    """Shortest-path DAG rooted at ``source``; ``order`` is by non-decreasing distance"""
    source: int
    order: List[int] = field(default_factory=list)
    distance: Dict[int, float] = field(default_factory=dict)
    sigma: Dict[int, float] = field(default_factory=dict)
    predecessors: Dict[int, List[Tuple[int, int]]] = field(default_factory=dict)

    @property
    def reachable_count(self) -> int:
        """Vertices reached from the source, excluding the source"""
        return len(self.order) - 1


def bfs_tree(graph: OrientedMultigraph, source: int) -> ShortestPathTree:
    """Hop-count shortest paths from ``source``."""
    tree = ShortestPathTree(source)
    distance = tree.distance
    sigma = tree.sigma
    predecessors = tree.predecessors

    distance[source] = 0
    sigma[source] = 1.0
    predecessors[source] = []
    queue = deque([source])

    while queue:
        v = queue.popleft()
        tree.order.append(v)
        next_distance = distance[v] + 1
        for w, edge_id, _ in graph.neighbors(v):
            if w not in distance:
                distance[w] = next_distance
                sigma[w] = 0.0
                predecessors[w] = []
                queue.append(w)
            if distance[w] == next_distance:
                sigma[w] += sigma[v]
                predecessors[w].append((v, edge_id))

    return tree


def dijkstra_tree(graph: OrientedMultigraph, source: int) -> ShortestPathTree:
    """Weighted shortest paths from ``source``; weights are assumed non-negative.

    A zero-weight edge between two vertices at the same distance is a
    shortest-path edge even when its head was settled first, so ``order``
    and ``sigma`` are derived from the finished predecessor DAG rather than
    from the settling sequence. An edge that would close a zero-weight cycle
    is left out of the DAG.
    """
    tree = ShortestPathTree(source)
    settled = tree.distance
    predecessors = tree.predecessors
    settle_rank: Dict[int, int] = {}

    tentative = {source: 0.0}
    predecessors[source] = []
    counter = count()
    heap = [(0.0, next(counter), source)]

    while heap:
        dist, _, v = heapq.heappop(heap)
        if v in settled:
            continue
        settled[v] = dist
        settle_rank[v] = len(settle_rank)

        for w, edge_id, weight in graph.neighbors(v):
            candidate = dist + weight
            if w in settled:
                if candidate == settled[w] and not _is_zero_weight_ancestor(tree, w, v):
                    predecessors[w].append((v, edge_id))
                continue
            current = tentative.get(w)
            if current is None or candidate < current:
                tentative[w] = candidate
                predecessors[w] = [(v, edge_id)]
                heapq.heappush(heap, (candidate, next(counter), w))
            elif candidate == current:
                predecessors[w].append((v, edge_id))

    tree.order = _dag_order(tree, settle_rank)
    sigma = tree.sigma
    sigma[source] = 1.0
    for v in tree.order[1:]:
        sigma[v] = sum(sigma[u] for u, _ in predecessors[v])
    return tree


def _is_zero_weight_ancestor(tree: ShortestPathTree, ancestor: int, vertex: int) -> bool:
    """Whether ``ancestor`` precedes ``vertex`` through same-distance predecessors"""
    level = tree.distance[vertex]
    stack = [vertex]
    seen = {vertex}
    while stack:
        for u, _ in tree.predecessors[stack.pop()]:
            if u == ancestor:
                return True
            if u not in seen and tree.distance[u] == level:
                seen.add(u)
                stack.append(u)
    return False


def _dag_order(tree: ShortestPathTree, settle_rank: Dict[int, int]) -> List[int]:
    """Topological order of the predecessor DAG by non-decreasing distance"""
    successors: Dict[int, List[int]] = {v: [] for v in tree.distance}
    waiting: Dict[int, int] = {}
    for w, edges in tree.predecessors.items():
        waiting[w] = len(edges)
        for u, _ in edges:
            successors[u].append(w)

    ready = [(tree.distance[v], settle_rank[v], v) for v, n in waiting.items() if n == 0]
    heapq.heapify(ready)
    order = []
    while ready:
        _, _, v = heapq.heappop(ready)
        order.append(v)
        for w in successors[v]:
            waiting[w] -= 1
            if waiting[w] == 0:
                heapq.heappush(ready, (tree.distance[w], settle_rank[w], w))
    return order


def shortest_path_tree(graph: OrientedMultigraph, source: int) -> ShortestPathTree:
    """BFS tree for unweighted graphs, Dijkstra tree for weighted ones."""
    if graph.weighted:
        return dijkstra_tree(graph, source)
    return bfs_tree(graph, source)
