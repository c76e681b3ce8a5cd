"""Oriented Multigraph Builder

Builds an immutable oriented, optionally weighted multigraph from edge rows.
Construction is all-or-nothing: the first bad row aborts the build.
"""

import math
import numbers
import time
from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, Mapping, Optional, Tuple, Union

import networkx as nx

from .centrality_data_models import OrientationConfig, OrientationMode
from .edge_tables import EdgeTable
from .orientation import as_orientation_config, resolve_orientation
from .weights import check_weight_field, resolve_weight
from ...core.exceptions import (
    EdgeLoadError, GraphAnalysisError, MetadataAccessError, MissingFieldError
)
from ...core.logging_config import get_logger, log_operation_start, log_operation_end

logger = get_logger(__name__)

START_NODE = "start_node"
END_NODE = "end_node"


@dataclass(frozen=True)
class EdgeRecord:
    """One stored edge"""
    id: int
    source: int
    target: int
    weight: float
    undirected: bool


class OrientedMultigraph:
    """Read-only multigraph over a frozen ``networkx.MultiDiGraph``.

    Edge keys are edge ids. An undirected edge is stored once with
    ``undirected=True`` and traversed both ways. Self-loops are stored but
    never appear in the traversal adjacency.
    """

    def __init__(self, graph: nx.MultiDiGraph, orientation: OrientationConfig, weighted: bool):
        self.graph = nx.freeze(graph)
        self.orientation = orientation
        self.weighted = weighted

        self._edges: Dict[int, EdgeRecord] = {}
        adjacency: Dict[int, List[Tuple[int, int, float]]] = {node: [] for node in graph.nodes}
        for u, v, key, data in graph.edges(keys=True, data=True):
            record = EdgeRecord(key, u, v, data["weight"], data["undirected"])
            self._edges[key] = record
            if u == v:
                continue
            adjacency[u].append((v, key, record.weight))
            if record.undirected:
                adjacency[v].append((u, key, record.weight))

        self._adjacency = {
            node: tuple(sorted(neighbors, key=lambda item: item[1]))
            for node, neighbors in adjacency.items()
        }
        self._vertex_ids = sorted(graph.nodes)
        self._edge_ids = sorted(self._edges)

    @property
    def vertex_ids(self) -> List[int]:
        return list(self._vertex_ids)

    @property
    def edge_ids(self) -> List[int]:
        return list(self._edge_ids)

    def number_of_vertices(self) -> int:
        return len(self._vertex_ids)

    def number_of_edges(self) -> int:
        return len(self._edge_ids)

    def edge(self, edge_id: int) -> EdgeRecord:
        return self._edges[edge_id]

    def neighbors(self, vertex: int) -> Tuple[Tuple[int, int, float], ...]:
        """Traversable ``(neighbor, edge_id, weight)`` triples leaving ``vertex``, by edge id"""
        return self._adjacency[vertex]


def _vertex_id(value: Any, field_name: str, row_number: int) -> int:
    if isinstance(value, bool):
        raise EdgeLoadError(f"{field_name} is not an integer: {value!r}", row_number)
    if isinstance(value, numbers.Integral):
        return int(value)
    if isinstance(value, numbers.Real):
        if math.isnan(value) or not float(value).is_integer():
            raise EdgeLoadError(f"{field_name} is not an integer: {value!r}", row_number)
        return int(value)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            pass
    raise EdgeLoadError(f"{field_name} is not an integer: {value!r}", row_number)


def _numbered_rows(table: EdgeTable) -> Iterator[Tuple[int, Mapping[str, Any]]]:
    """Yield (1-based row number, row), turning read failures into EdgeLoadError."""
    row_number = 1
    try:
        rows = iter(table.rows())
    except GraphAnalysisError:
        raise
    except Exception as e:
        raise EdgeLoadError(f"cannot open rows: {e}", row_number) from e

    while True:
        try:
            row = next(rows)
        except StopIteration:
            return
        except GraphAnalysisError:
            raise
        except Exception as e:
            raise EdgeLoadError(str(e), row_number) from e
        yield row_number, row
        row_number += 1


def _read_schema(table: EdgeTable) -> List[str]:
    try:
        return list(table.fields())
    except GraphAnalysisError:
        raise
    except Exception as e:
        raise MetadataAccessError(f"Cannot access the metadata of the input table: {e}") from e


def build_graph(table: EdgeTable,
                orientation: Union[str, OrientationConfig, OrientationMode],
                weight_field: Optional[str] = None,
                start_field: str = START_NODE,
                end_field: str = END_NODE) -> OrientedMultigraph:
    """Build the oriented multigraph of an edge table.

    Every required field is resolved against the table schema before any
    row is read. Edge ids are the 1-based row positions.

    Raises:
        InvalidOrientationError: bad orientation option or per-row code
        MissingFieldError: a required or configured field is absent
        MetadataAccessError: the schema cannot be introspected
        EdgeLoadError: a row cannot be read or converted
    """
    config = as_orientation_config(orientation)
    schema = _read_schema(table)

    required = [start_field, end_field]
    if config.mode is OrientationMode.PER_EDGE:
        required.append(config.orientation_field)
    for field_name in required:
        if field_name not in schema:
            raise MissingFieldError(field_name)
    check_weight_field(weight_field, schema)

    log_operation_start(logger, "graph construction",
                        orientation=config.describe(), weight=weight_field or "none")
    started = time.time()

    graph = nx.MultiDiGraph()
    for row_number, row in _numbered_rows(table):
        try:
            raw_source = row[start_field]
            raw_target = row[end_field]
            code = row[config.orientation_field] if config.mode is OrientationMode.PER_EDGE else None
        except KeyError as e:
            raise EdgeLoadError(f"missing value for field {e}", row_number) from e

        source = _vertex_id(raw_source, start_field, row_number)
        target = _vertex_id(raw_target, end_field, row_number)
        pair = resolve_orientation(config, source, target, code, edge_id=row_number)
        weight = resolve_weight(weight_field, row, row_number)
        graph.add_edge(pair.source, pair.target, key=row_number,
                       weight=weight, undirected=pair.undirected)

    result = OrientedMultigraph(graph, config, weighted=weight_field is not None)
    log_operation_end(logger, "graph construction", time.time() - started,
                      vertices=result.number_of_vertices(), edges=result.number_of_edges())
    return result
