"""
Custom exceptions for graph construction and centrality analysis.

Every error carries an ``error_code`` so the tool layer can turn it into a
standardized error result without inspecting message text.
"""

from typing import Any, Optional


class GraphAnalysisError(Exception):
    """Base exception for all graph analysis errors."""
    error_code = "UNEXPECTED_ERROR"


class InvalidOrientationError(GraphAnalysisError):
    """Raised when an orientation mode or a per-row orientation code is not recognized."""
    error_code = "INVALID_ORIENTATION"

    def __init__(self, value: Any, edge_id: Optional[int] = None, message: str = None):
        self.value = value
        self.edge_id = edge_id
        if message is None:
            if edge_id is None:
                message = (f"Unrecognized graph orientation {value!r}. Use 'directed', "
                           f"'directed_reversed', 'undirected' or '<base> - <orientation field>'.")
            else:
                message = f"Edge {edge_id} has an unrecognized orientation code {value!r}."
        super().__init__(message)


class MissingFieldError(GraphAnalysisError):
    """Raised when a required or configured field is absent from the input table."""
    error_code = "MISSING_FIELD"

    def __init__(self, field_name: str):
        self.field_name = field_name
        super().__init__(f"The input table must contain the field '{field_name}'.")


class MetadataAccessError(GraphAnalysisError):
    """Raised when the input table schema cannot be introspected."""
    error_code = "METADATA_ACCESS"


class EdgeLoadError(GraphAnalysisError):
    """Raised when an edge row cannot be read or converted."""
    error_code = "EDGE_LOAD"

    def __init__(self, message: str, row_number: Optional[int] = None):
        self.row_number = row_number
        if row_number is not None:
            message = f"Cannot load edge at row {row_number}: {message}"
        super().__init__(message)


class AnalysisCancelledError(GraphAnalysisError):
    """Raised when the caller cancels a centrality run."""
    error_code = "CANCELLED"

    def __init__(self, processed_sources: int = 0, total_sources: int = 0):
        self.processed_sources = processed_sources
        self.total_sources = total_sources
        super().__init__(
            f"Centrality analysis cancelled after {processed_sources} of {total_sources} sources"
        )


class ConfigurationError(GraphAnalysisError):
    """Configuration-related error."""
    error_code = "CONFIGURATION_ERROR"
