"""Graph Analysis Tool - Main Interface

Builds the oriented multigraph of an edge table and computes vertex and edge
betweenness and vertex closeness, returning a standardized ToolResult.
"""

import time
from datetime import datetime
from typing import Any, Dict, Optional

from .base_tool import BaseTool, ToolContract, ToolErrorCode, ToolRequest, ToolResult, ToolStatus
from .centrality_analysis import (
    CentralityConfig,
    CentralityEngine,
    CentralityResultsAggregator,
    MemoryEdgeTable,
    EdgeTable,
    build_graph
)
from ..core.config_manager import ConfigurationManager, get_config
from ..core.exceptions import (
    GraphAnalysisError, MissingFieldError, InvalidOrientationError, EdgeLoadError,
    AnalysisCancelledError
)
from ..core.logging_config import get_logger

logger = get_logger(__name__)


class GraphAnalysisTool(BaseTool):
    """Centrality analysis of an oriented, optionally weighted multigraph

    Components:
    - build_graph: edge rows to an immutable oriented multigraph
    - CentralityEngine: Brandes betweenness and closeness
    - CentralityResultsAggregator: summary statistics of the result

    Every failure becomes an error ToolResult; no partial result is returned.
    """

    def __init__(self, config: Optional[ConfigurationManager] = None):
        super().__init__()
        self.tool_id = "GRAPH_ANALYSIS"
        self.name = "Oriented Multigraph Centrality"
        self.version = "0.1.0"
        self.config = config or get_config()
        self.aggregator = CentralityResultsAggregator()
        self.execution_count = 0

    def get_contract(self) -> ToolContract:
        """Return tool contract specification"""
        return ToolContract(
            tool_id=self.tool_id,
            name=self.name,
            description="Vertex/edge betweenness and vertex closeness of an edge table",
            category="graph",
            input_schema={
                "type": "object",
                "properties": {
                    "table": {"description": "EdgeTable with start and end node fields"},
                    "orientation": {
                        "type": "string",
                        "description": "directed, directed_reversed, undirected or '<base> - <orientation field>'"
                    },
                    "weight_field": {
                        "type": ["string", "null"],
                        "description": "Numeric field holding edge weights; unweighted when omitted"
                    }
                },
                "required": ["table"]
            },
            output_schema={
                "type": "object",
                "properties": {
                    "vertices": {"type": "array"},
                    "edges": {"type": "array"},
                    "metadata": {"type": "object"}
                }
            },
            dependencies=["networkx", "numpy", "pandas"],
            error_conditions=[code.value for code in ToolErrorCode]
        )

    def execute(self, request: ToolRequest) -> ToolResult:
        """Build the graph and run the centrality analysis"""
        self._start_execution()

        if not self.validate_input(request.input_data):
            return self._error(request, ToolErrorCode.INVALID_INPUT.value,
                               "Input must be a mapping with an edge 'table'")
        table = request.input_data["table"]
        if not isinstance(table, EdgeTable):
            return self._error(request, ToolErrorCode.INVALID_INPUT.value,
                               f"'table' must be an EdgeTable, got {type(table).__name__}")

        graph_settings = self.config.graph
        orientation = request.input_data.get("orientation", graph_settings.orientation)
        weight_field = request.input_data.get("weight_field", graph_settings.weight_field)
        parameters = request.parameters or {}

        try:
            centrality_config = CentralityConfig.from_settings(
                self.config.analysis,
                normalize=parameters.get("normalize"),
                parallel_edge_credit=parameters.get("parallel_edge_credit"),
                workers=parameters.get("workers"),
                progress_interval=parameters.get("progress_interval")
            )
            graph = build_graph(
                table, orientation, weight_field,
                start_field=graph_settings.start_node_field,
                end_field=graph_settings.end_node_field
            )
            result = CentralityEngine(centrality_config).compute(
                graph, cancel_check=parameters.get("cancel_check")
            )
        except GraphAnalysisError as e:
            return self._error(request, e.error_code, str(e), **self._error_context(e, orientation))
        except Exception as e:
            logger.error(f"Graph analysis failed unexpectedly: {e}", exc_info=True)
            return self._error(request, ToolErrorCode.UNEXPECTED_ERROR.value,
                               f"Graph analysis failed: {e}", error_type=type(e).__name__)

        execution_time, memory_used = self._end_execution()
        self.execution_count += 1
        logger.info(f"Graph analysis completed in {execution_time:.2f}s: "
                    f"{len(result.vertices)} vertices, {len(result.edges)} edges")

        return ToolResult(
            tool_id=self.tool_id,
            status="success",
            data=result,
            metadata={
                "operation": request.operation,
                "orientation": result.metadata["orientation"],
                "weight_field": weight_field,
                "summary": self.aggregator.summarize(result),
                "tool_version": self.version,
                "timestamp": datetime.now().isoformat()
            },
            execution_time=execution_time,
            memory_used=memory_used
        )

    def _error(self, request: ToolRequest, error_code: str, message: str, **context) -> ToolResult:
        logger.error(f"{self.tool_id} {error_code}: {message}")
        return self._create_error_result(request, error_code, message, **context)

    @staticmethod
    def _error_context(error: GraphAnalysisError, orientation: Any) -> Dict[str, Any]:
        context: Dict[str, Any] = {"orientation": str(orientation)}
        if isinstance(error, MissingFieldError):
            context["field_name"] = error.field_name
        elif isinstance(error, InvalidOrientationError):
            context["orientation_value"] = repr(error.value)
            if error.edge_id is not None:
                context["edge_id"] = error.edge_id
        elif isinstance(error, EdgeLoadError) and error.row_number is not None:
            context["row_number"] = error.row_number
        elif isinstance(error, AnalysisCancelledError):
            context["processed_sources"] = error.processed_sources
            context["total_sources"] = error.total_sources
        return context

    def health_check(self) -> ToolResult:
        """Run the analysis on a three-vertex path"""
        started = time.time()
        table = MemoryEdgeTable(["start_node", "end_node"], [(1, 2), (2, 3)])
        try:
            graph = build_graph(table, "undirected")
            result = CentralityEngine(CentralityConfig()).compute(graph)
        except GraphAnalysisError as e:
            self.status = ToolStatus.ERROR
            return ToolResult(
                tool_id=self.tool_id, status="error",
                data={"healthy": False, "error": str(e)},
                error_code=ToolErrorCode.UNEXPECTED_ERROR.value,
                error_message=str(e),
                execution_time=time.time() - started
            )

        healthy = result.vertex(2).betweenness == 1.0
        return ToolResult(
            tool_id=self.tool_id,
            status="success" if healthy else "error",
            data={
                "healthy": healthy,
                "status": self.status.value,
                "test_results": {
                    "vertices": len(result.vertices),
                    "edges": len(result.edges)
                }
            },
            metadata={"timestamp": datetime.now().isoformat()},
            execution_time=time.time() - started
        )
