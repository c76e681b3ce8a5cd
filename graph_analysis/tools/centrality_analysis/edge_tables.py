"""Edge Table Adapters

Schema introspection and row iteration over the supported edge sources:
in-memory rows, pandas DataFrames and CSV files.
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Iterator, List, Mapping, Sequence, Union

import pandas as pd

from ...core.exceptions import MetadataAccessError
from ...core.logging_config import get_logger

logger = get_logger(__name__)


class EdgeTable(ABC):
    """Read-only edge relation"""

    @abstractmethod
    def fields(self) -> List[str]:
        """Return the field names of the relation"""
        pass

    @abstractmethod
    def rows(self) -> Iterator[Mapping[str, Any]]:
        """Iterate over rows in stored order, each as a field -> value mapping"""
        pass

    def __len__(self) -> int:
        return sum(1 for _ in self.rows())


class MemoryEdgeTable(EdgeTable):
    """Edge table over Python rows, given as sequences aligned with ``fields`` or as mappings"""

    def __init__(self, fields: Sequence[str], rows: Sequence[Union[Sequence[Any], Mapping[str, Any]]]):
        self._fields = list(fields)
        self._rows = list(rows)

    def fields(self) -> List[str]:
        return list(self._fields)

    def rows(self) -> Iterator[Mapping[str, Any]]:
        for row in self._rows:
            if isinstance(row, Mapping):
                yield row
            else:
                yield dict(zip(self._fields, row))

    def __len__(self) -> int:
        return len(self._rows)


class DataFrameEdgeTable(EdgeTable):
    """Edge table over a pandas DataFrame; row order is the frame order"""

    def __init__(self, frame: pd.DataFrame):
        self.frame = frame

    def fields(self) -> List[str]:
        return [str(column) for column in self.frame.columns]

    def rows(self) -> Iterator[Dict[str, Any]]:
        columns = self.fields()
        for values in self.frame.itertuples(index=False, name=None):
            yield dict(zip(columns, values))

    def __len__(self) -> int:
        return len(self.frame)


def read_edge_csv(path: Union[str, Path], **read_options) -> DataFrameEdgeTable:
    """Read an edge relation from a CSV file with a header row.

    Raises:
        MetadataAccessError: the file cannot be opened or parsed.
    """
    try:
        frame = pd.read_csv(path, **read_options)
    except (OSError, UnicodeDecodeError, pd.errors.ParserError, pd.errors.EmptyDataError) as e:
        raise MetadataAccessError(f"Cannot read edge table {path}: {e}") from e

    logger.info(f"Read {len(frame)} edge rows from {path}")
    return DataFrameEdgeTable(frame)
