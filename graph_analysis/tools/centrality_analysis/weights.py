"""Edge weight resolution"""

import math
import numbers
from typing import Any, Collection, Mapping, Optional

from ...core.exceptions import EdgeLoadError, MissingFieldError

UNIT_WEIGHT = 1.0


def check_weight_field(weight_field: Optional[str], schema: Collection[str]) -> None:
    """Fail before any row is read when the configured weight field is absent."""
    if weight_field is not None and weight_field not in schema:
        raise MissingFieldError(weight_field)


def resolve_weight(weight_field: Optional[str], row: Mapping[str, Any],
                   row_number: Optional[int] = None) -> float:
    """Weight of one row: 1.0 when unweighted, else the field value as a float.

    Values are taken verbatim; negative weights are not rejected.
    """
    if weight_field is None:
        return UNIT_WEIGHT

    try:
        value = row[weight_field]
    except KeyError:
        raise EdgeLoadError(f"missing value for field {weight_field!r}", row_number)
    if isinstance(value, bool) or not isinstance(value, (numbers.Real, str)):
        raise EdgeLoadError(f"weight {weight_field!r} is not numeric: {value!r}", row_number)
    try:
        weight = float(value)
    except ValueError:
        raise EdgeLoadError(f"weight {weight_field!r} is not numeric: {value!r}", row_number)
    if math.isnan(weight):
        raise EdgeLoadError(f"weight {weight_field!r} is missing", row_number)
    return weight
