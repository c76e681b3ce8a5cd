"""Betweenness and closeness centrality of oriented, optionally weighted multigraphs."""

__version__ = "0.1.0"
