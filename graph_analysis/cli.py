#!/usr/bin/env python3
"""Command line interface for graph centrality analysis

Example usage::

    graph-analysis edges.csv --orientation undirected
    graph-analysis edges.csv --orientation directed --weight length --output-dir out/
    graph-analysis edges.csv --orientation "reversed - edge_orientation" --raw
"""
from __future__ import annotations

import argparse
import sys

from .core.config_manager import load_config
from .core.exceptions import GraphAnalysisError
from .core.logging_config import get_logger, setup_logging
from .tools.base_tool import ToolRequest
from .tools.centrality_analysis import CentralityResultsAggregator, read_edge_csv
from .tools.graph_analysis_tool import GraphAnalysisTool

logger = get_logger("cli")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="graph-analysis",
        description="Betweenness and closeness centrality of an edge table"
    )
    parser.add_argument("edges", help="CSV file with start_node and end_node columns")
    parser.add_argument("--orientation",
                        help="directed, directed_reversed, undirected or '<base> - <orientation field>' "
                             "(default from configuration)")
    parser.add_argument("--weight", dest="weight_field",
                        help="numeric column holding edge weights (unweighted when omitted)")
    parser.add_argument("--output-dir", default=".",
                        help="directory for node_centrality.csv and edge_centrality.csv")
    parser.add_argument("--raw", action="store_true",
                        help="report raw betweenness sums instead of min-max normalized scores")
    parser.add_argument("--split-parallel", action="store_true",
                        help="pass vertex dependency once per parallel edge instead of once per vertex")
    parser.add_argument("--workers", type=int, help="number of worker threads")
    parser.add_argument("--config", help="YAML configuration file")
    parser.add_argument("--log-level", choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
                        help="logging level (default from configuration)")
    return parser


def _print_summary(summary: dict) -> None:
    print(f"Vertices: {summary['vertex_count']}  Edges: {summary['edge_count']}")
    for label, key in (("Vertex betweenness", "vertex_betweenness"),
                       ("Vertex closeness", "vertex_closeness"),
                       ("Edge betweenness", "edge_betweenness")):
        stats = summary[key]
        print(f"{label}: min={stats['min']:.6g} max={stats['max']:.6g} "
              f"mean={stats['mean']:.6g} std={stats['std']:.6g}")
    top = ", ".join(f"{vertex_id} ({score:.4g})"
                    for vertex_id, score in summary["top_vertices_by_betweenness"])
    if top:
        print(f"Top vertices by betweenness: {top}")


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)

    try:
        config = load_config(args.config, force_reload=True)
    except GraphAnalysisError as e:
        print(f"Error [{e.error_code}]: {e}", file=sys.stderr)
        return 1

    setup_logging(
        log_level=args.log_level or config.system.log_level,
        log_file=config.system.log_file,
        console_output=config.system.console_output
    )
    logger.debug(f"Arguments: {vars(args)}")

    try:
        table = read_edge_csv(args.edges)
    except GraphAnalysisError as e:
        print(f"Error [{e.error_code}]: {e}", file=sys.stderr)
        return 1

    input_data = {"table": table}
    if args.orientation is not None:
        input_data["orientation"] = args.orientation
    if args.weight_field is not None:
        input_data["weight_field"] = args.weight_field

    parameters = {"workers": args.workers}
    if args.raw:
        parameters["normalize"] = False
    if args.split_parallel:
        parameters["parallel_edge_credit"] = "split"

    tool = GraphAnalysisTool(config)
    result = tool.execute(ToolRequest(
        tool_id=tool.tool_id,
        operation="analyze",
        input_data=input_data,
        parameters=parameters
    ))
    if result.status != "success":
        print(f"Error [{result.error_code}]: {result.error_message}", file=sys.stderr)
        return 1

    aggregator = CentralityResultsAggregator()
    paths = aggregator.write_csv(result.data, args.output_dir)
    _print_summary(result.metadata["summary"])
    print(f"Wrote {paths['nodes']} and {paths['edges']}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
