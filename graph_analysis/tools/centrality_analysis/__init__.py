"""Centrality Analysis Components

Graph construction and betweenness/closeness analysis of oriented multigraphs.
"""

from .centrality_data_models import (
    OrientationMode, OrientationConfig, OrientedPair, ParallelEdgeCredit,
    CentralityConfig, VertexMetric, EdgeMetric, AnalysisResult,
    DIRECTED_EDGE, REVERSED_EDGE, UNDIRECTED_EDGE
)
from .orientation import parse_orientation, resolve_orientation
from .weights import resolve_weight, check_weight_field
from .edge_tables import EdgeTable, MemoryEdgeTable, DataFrameEdgeTable, read_edge_csv
from .graph_builder import OrientedMultigraph, build_graph
from .shortest_paths import ShortestPathTree, shortest_path_tree
from .centrality_calculators import CentralityEngine
from .centrality_aggregator import CentralityResultsAggregator

__all__ = [
    'OrientationMode',
    'OrientationConfig',
    'OrientedPair',
    'ParallelEdgeCredit',
    'CentralityConfig',
    'VertexMetric',
    'EdgeMetric',
    'AnalysisResult',
    'DIRECTED_EDGE',
    'REVERSED_EDGE',
    'UNDIRECTED_EDGE',
    'parse_orientation',
    'resolve_orientation',
    'resolve_weight',
    'check_weight_field',
    'EdgeTable',
    'MemoryEdgeTable',
    'DataFrameEdgeTable',
    'read_edge_csv',
    'OrientedMultigraph',
    'build_graph',
    'ShortestPathTree',
    'shortest_path_tree',
    'CentralityEngine',
    'CentralityResultsAggregator'
]
