"""
Tests for the bound encoding shared by columns and rows
"""
import math

import pytest

from lpbridge import Bound, BoundType, ValidationError, decode_bounds, encode_bounds

inf = math.inf


@pytest.mark.parametrize("lower, upper, expected", [
    (-inf, inf, Bound(BoundType.FREE, 0.0, 0.0)),
    (inf, -inf, Bound(BoundType.FREE, 0.0, 0.0)),
    (-inf, 5.0, Bound(BoundType.UPPER, 0.0, 5.0)),
    (inf, 5.0, Bound(BoundType.UPPER, 0.0, 5.0)),
    (2.0, inf, Bound(BoundType.LOWER, 2.0, 0.0)),
    (2.0, -inf, Bound(BoundType.LOWER, 2.0, 0.0)),
    (3.0, 3.0, Bound(BoundType.FIXED, 3.0, 3.0)),
    (-1.0, 1.0, Bound(BoundType.DOUBLE, -1.0, 1.0)),
])
def test_encode(lower, upper, expected):
    assert encode_bounds(lower, upper) == expected


def test_equal_bounds_are_fixed_by_value():
    a = float("0.1") + float("0.2")
    b = 0.30000000000000004
    assert a is not b
    assert encode_bounds(a, b).type == BoundType.FIXED


def test_integers_are_accepted():
    assert encode_bounds(0, 1) == Bound(BoundType.DOUBLE, 0.0, 1.0)


@pytest.mark.parametrize("lower, upper", [(math.nan, 1.0), (0.0, math.nan)])
def test_nan_is_rejected(lower, upper):
    with pytest.raises(ValidationError):
        encode_bounds(lower, upper)


def test_nan_error_is_value_error():
    with pytest.raises(ValueError):
        encode_bounds(math.nan, math.nan)


@pytest.mark.parametrize("lower, upper", [
    (-inf, inf), (-inf, -7.5), (0.0, inf), (4.0, 4.0), (-2.0, 9.0),
])
def test_decode_restores_semantic_bounds(lower, upper):
    assert decode_bounds(*encode_bounds(lower, upper)) == (lower, upper)


def test_decode_ignores_stored_value_of_unbounded_side():
    assert decode_bounds(BoundType.LOWER, 1.0, 123.0) == (1.0, inf)
    assert decode_bounds(BoundType.UPPER, -123.0, 1.0) == (-inf, 1.0)
    assert decode_bounds(BoundType.FREE, -1e30, 1e30) == (-inf, inf)
