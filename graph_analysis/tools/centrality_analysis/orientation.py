"""Orientation Policy

Maps an orientation configuration and a raw (source, target, code) row to the
oriented pair that is inserted into the graph.
"""

import math
import numbers
from typing import Any, Optional, Union

from .centrality_data_models import (
    OrientationConfig, OrientationMode, OrientedPair,
    DIRECTED_EDGE, REVERSED_EDGE, UNDIRECTED_EDGE
)
from ...core.exceptions import InvalidOrientationError


_SIMPLE_MODES = {
    "directed": OrientationMode.DIRECTED,
    "directed_reversed": OrientationMode.REVERSED,
    "reversed": OrientationMode.REVERSED,
    "undirected": OrientationMode.UNDIRECTED,
}

# Bases accepted in "<base> - <orientation field>"; the value is the global reversal flag
_PER_EDGE_BASES = {
    "per_edge": False,
    "directed": False,
    "reversed": True,
    "directed_reversed": True,
}


def parse_orientation(text: str) -> OrientationConfig:
    """Parse an orientation option such as ``directed`` or ``reversed - edge_orientation``.

    Raises:
        InvalidOrientationError: unknown token, or a per-edge mode without a field name.
    """
    if not isinstance(text, str) or not text.strip():
        raise InvalidOrientationError(text)

    if "-" in text:
        base, orientation_field = (part.strip() for part in text.split("-", 1))
        base = base.lower()
        if base not in _PER_EDGE_BASES or not orientation_field:
            raise InvalidOrientationError(text)
        return OrientationConfig(
            mode=OrientationMode.PER_EDGE,
            orientation_field=orientation_field,
            reverse=_PER_EDGE_BASES[base]
        )

    mode = _SIMPLE_MODES.get(text.strip().lower())
    if mode is None:
        raise InvalidOrientationError(text)
    return OrientationConfig(mode=mode)


def as_orientation_config(value: Union[str, OrientationConfig, OrientationMode]) -> OrientationConfig:
    """Accept a parsed config, a bare mode or an option string."""
    if isinstance(value, OrientationConfig):
        if value.mode is OrientationMode.PER_EDGE and not value.orientation_field:
            raise InvalidOrientationError(
                value.mode.value,
                message="Per-edge orientation requires an orientation field name."
            )
        return value
    if isinstance(value, OrientationMode):
        return as_orientation_config(OrientationConfig(mode=value))
    return parse_orientation(value)


def _orientation_code(code: Any, edge_id: Optional[int]) -> int:
    if isinstance(code, bool) or code is None:
        raise InvalidOrientationError(code, edge_id=edge_id)
    if isinstance(code, numbers.Integral):
        value = int(code)
    elif isinstance(code, numbers.Real) and not math.isnan(code) and float(code).is_integer():
        value = int(code)
    else:
        raise InvalidOrientationError(code, edge_id=edge_id)
    if value not in (DIRECTED_EDGE, REVERSED_EDGE, UNDIRECTED_EDGE):
        raise InvalidOrientationError(code, edge_id=edge_id)
    return value


def resolve_orientation(config: OrientationConfig, source: int, target: int,
                        code: Any = None, edge_id: Optional[int] = None) -> OrientedPair:
    """Return the pair to insert for one row.

    ``code`` is only read in per-edge mode, where 1 keeps the row direction,
    -1 swaps it and 0 makes the edge undirected.
    """
    mode = config.mode
    if mode is OrientationMode.DIRECTED:
        return OrientedPair(source, target)
    if mode is OrientationMode.REVERSED:
        return OrientedPair(target, source)
    if mode is OrientationMode.UNDIRECTED:
        return OrientedPair(source, target, undirected=True)

    value = _orientation_code(code, edge_id)
    if value == UNDIRECTED_EDGE:
        return OrientedPair(source, target, undirected=True)
    forward = (value == DIRECTED_EDGE) != config.reverse
    if forward:
        return OrientedPair(source, target)
    return OrientedPair(target, source)
