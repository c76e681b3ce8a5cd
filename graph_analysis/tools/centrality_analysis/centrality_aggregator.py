"""Centrality Results Aggregator

Turns an analysis result into pandas frames, CSV relations and summary
statistics.
"""

from pathlib import Path
from typing import Any, Dict, List, Tuple, Union

import numpy as np
import pandas as pd

from .centrality_data_models import AnalysisResult
from ...core.logging_config import get_logger

logger = get_logger(__name__)

NODE_TABLE = "node_centrality.csv"
EDGE_TABLE = "edge_centrality.csv"

VERTEX_COLUMNS = ["id", "betweenness", "closeness"]
EDGE_COLUMNS = ["id", "betweenness"]


class CentralityResultsAggregator:
    """Aggregate and format centrality analysis results"""

    def __init__(self, top_k: int = 5):
        self.top_k = top_k

    def to_frames(self, result: AnalysisResult) -> Tuple[pd.DataFrame, pd.DataFrame]:
        """Vertex and edge relations, one row per vertex / edge, sorted by id"""
        vertex_df = pd.DataFrame(
            [metric.to_dict() for metric in result.vertices], columns=VERTEX_COLUMNS
        )
        edge_df = pd.DataFrame(
            [metric.to_dict() for metric in result.edges], columns=EDGE_COLUMNS
        )
        vertex_df = vertex_df.astype({"id": "int64", "betweenness": "float64", "closeness": "float64"})
        edge_df = edge_df.astype({"id": "int64", "betweenness": "float64"})
        return (vertex_df.sort_values("id").reset_index(drop=True),
                edge_df.sort_values("id").reset_index(drop=True))

    def write_csv(self, result: AnalysisResult, directory: Union[str, Path]) -> Dict[str, Path]:
        """Write node_centrality.csv and edge_centrality.csv into ``directory``"""
        output_dir = Path(directory)
        output_dir.mkdir(parents=True, exist_ok=True)

        vertex_df, edge_df = self.to_frames(result)
        paths = {
            "nodes": output_dir / NODE_TABLE,
            "edges": output_dir / EDGE_TABLE,
        }
        vertex_df.to_csv(paths["nodes"], index=False)
        edge_df.to_csv(paths["edges"], index=False)

        logger.info(f"Wrote {len(vertex_df)} vertex rows to {paths['nodes']} "
                    f"and {len(edge_df)} edge rows to {paths['edges']}")
        return paths

    def summarize(self, result: AnalysisResult) -> Dict[str, Any]:
        """Distribution statistics per metric and the top-ranked vertices and edges"""
        vertex_df, edge_df = self.to_frames(result)

        return {
            "vertex_count": len(vertex_df),
            "edge_count": len(edge_df),
            "vertex_betweenness": self._describe(vertex_df["betweenness"].to_numpy()),
            "vertex_closeness": self._describe(vertex_df["closeness"].to_numpy()),
            "edge_betweenness": self._describe(edge_df["betweenness"].to_numpy()),
            "top_vertices_by_betweenness": self._top(vertex_df, "betweenness"),
            "top_vertices_by_closeness": self._top(vertex_df, "closeness"),
            "top_edges_by_betweenness": self._top(edge_df, "betweenness"),
            "metadata": dict(result.metadata),
        }

    def _describe(self, values: np.ndarray) -> Dict[str, float]:
        if values.size == 0:
            return {"min": 0.0, "max": 0.0, "mean": 0.0, "std": 0.0}
        return {
            "min": float(np.min(values)),
            "max": float(np.max(values)),
            "mean": float(np.mean(values)),
            "std": float(np.std(values)),
        }

    def _top(self, frame: pd.DataFrame, column: str) -> List[Tuple[int, float]]:
        # Stable sort keeps ties in id order
        ranked = frame.sort_values(column, ascending=False, kind="mergesort").head(self.top_k)
        return [(int(row_id), float(score)) for row_id, score in zip(ranked["id"], ranked[column])]
