"""Centrality Analysis Data Models

Data structures shared by the graph builder, the centrality engine and the
result aggregator.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from ...core.config_manager import AnalysisConfig
from ...core.exceptions import ConfigurationError


class OrientationMode(Enum):
    """How raw (source, target) rows become traversable edges"""
    DIRECTED = "directed"
    REVERSED = "directed_reversed"
    UNDIRECTED = "undirected"
    PER_EDGE = "per_edge"


# Per-row orientation codes read from the orientation field
DIRECTED_EDGE = 1
REVERSED_EDGE = -1
UNDIRECTED_EDGE = 0


class ParallelEdgeCredit(Enum):
    """How vertex dependency flows back over parallel edges"""
    MERGED = "merged"  # once per distinct predecessor vertex
    SPLIT = "split"    # once per predecessor edge


@dataclass(frozen=True)
class OrientationConfig:
    """Orientation policy for one run"""
    mode: OrientationMode
    orientation_field: Optional[str] = None
    reverse: bool = False

    def describe(self) -> str:
        if self.mode is OrientationMode.PER_EDGE:
            base = "reversed" if self.reverse else "per_edge"
            return f"{base} - {self.orientation_field}"
        return self.mode.value


@dataclass(frozen=True)
class OrientedPair:
    """Endpoints of one edge after the orientation policy was applied"""
    source: int
    target: int
    undirected: bool = False


@dataclass(frozen=True)
class VertexMetric:
    """Centrality scores of one vertex"""
    id: int
    betweenness: float
    closeness: float

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "betweenness": self.betweenness, "closeness": self.closeness}


@dataclass(frozen=True)
class EdgeMetric:
    """Betweenness of one edge"""
    id: int
    betweenness: float

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "betweenness": self.betweenness}


@dataclass
class CentralityConfig:
    """Configuration for centrality calculations"""
    normalize: bool = True
    parallel_edge_credit: ParallelEdgeCredit = ParallelEdgeCredit.MERGED
    workers: int = 1
    progress_interval: int = 1000

    def __post_init__(self):
        if isinstance(self.parallel_edge_credit, str):
            try:
                self.parallel_edge_credit = ParallelEdgeCredit(self.parallel_edge_credit.lower())
            except ValueError:
                raise ConfigurationError(
                    f"Unknown parallel edge credit policy: {self.parallel_edge_credit!r}"
                )
        if self.workers < 1:
            raise ConfigurationError(f"workers must be at least 1, got {self.workers}")
        if self.progress_interval < 1:
            raise ConfigurationError(
                f"progress_interval must be at least 1, got {self.progress_interval}"
            )

    @classmethod
    def from_settings(cls, settings: AnalysisConfig, **overrides) -> 'CentralityConfig':
        """Build from the ``analysis`` configuration section, applying non-None overrides"""
        values = {
            "normalize": settings.normalize,
            "parallel_edge_credit": settings.parallel_edge_credit,
            "workers": settings.workers,
            "progress_interval": settings.progress_interval,
        }
        values.update({key: value for key, value in overrides.items() if value is not None})
        return cls(**values)


@dataclass(frozen=True)
class AnalysisResult:
    """Vertex and edge metrics of one centrality run, sorted by id"""
    vertices: List[VertexMetric]
    edges: List[EdgeMetric]
    metadata: Dict[str, Any] = field(default_factory=dict)

    def vertex(self, vertex_id: int) -> VertexMetric:
        for metric in self.vertices:
            if metric.id == vertex_id:
                return metric
        raise KeyError(vertex_id)

    def edge(self, edge_id: int) -> EdgeMetric:
        for metric in self.edges:
            if metric.id == edge_id:
                return metric
        raise KeyError(edge_id)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation"""
        return {
            "vertices": [metric.to_dict() for metric in self.vertices],
            "edges": [metric.to_dict() for metric in self.edges],
            "metadata": self.metadata
        }
