"""
Bound encoding shared by columns (variables) and rows (constraints)
"""
import math
from enum import Enum
from typing import NamedTuple, Tuple

from .errors import ValidationError


class BoundType(Enum):
    """Which sides of an interval are finite"""
    FREE = 'free'        # -inf < x < +inf
    LOWER = 'lower'      # lb <= x < +inf
    UPPER = 'upper'      # -inf < x <= ub
    DOUBLE = 'double'    # lb <= x <= ub
    FIXED = 'fixed'      # x == lb == ub


class Bound(NamedTuple):
    """
    Bound representation handed to a solver engine.

    Unbounded sides are stored as 0.0; only ``type`` says whether a side
    is meaningful.
    """
    type: BoundType
    lower: float
    upper: float


def encode_bounds(lower: float, upper: float) -> Bound:
    """
    Map a ``(lower, upper)`` pair to a :class:`Bound`.

    The sign of an infinite value is ignored: any infinity means "no bound
    on this side". Equal finite bounds always encode as FIXED.

    Parameters
    ----------
    lower : float
        Lower bound, possibly infinite
    upper : float
        Upper bound, possibly infinite

    Returns
    -------
    Bound
        The encoded bound

    Raises
    ------
    ValidationError
        If either bound is NaN
    """
    lower = float(lower)
    upper = float(upper)
    if math.isnan(lower) or math.isnan(upper):
        raise ValidationError(f"bounds must not be NaN: ({lower}, {upper})")

    lower_inf = math.isinf(lower)
    upper_inf = math.isinf(upper)

    if lower_inf and upper_inf:
        return Bound(BoundType.FREE, 0.0, 0.0)
    if lower_inf:
        return Bound(BoundType.UPPER, 0.0, upper)
    if upper_inf:
        return Bound(BoundType.LOWER, lower, 0.0)
    if lower == upper:
        return Bound(BoundType.FIXED, lower, upper)
    return Bound(BoundType.DOUBLE, lower, upper)


def decode_bounds(bound_type: BoundType, lower: float, upper: float) -> Tuple[float, float]:
    """Return the semantic ``(lower, upper)`` for a stored bound, with infinities restored."""
    if bound_type in (BoundType.FREE, BoundType.UPPER):
        lower = -math.inf
    if bound_type in (BoundType.FREE, BoundType.LOWER):
        upper = math.inf
    if bound_type == BoundType.FIXED:
        upper = lower
    return float(lower), float(upper)
