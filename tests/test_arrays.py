# tests/test_arrays.py
"""
Tests for nested array helpers in inferhelpers.core.arrays
"""

import numpy as np
import pytest

from inferhelpers.core.arrays import (
    build_nested,
    double_range,
    flatten,
    map_nested,
    normalize_shape,
    rank,
    require_same_length,
    uniform,
    vector_zeros,
    zeros,
)
from inferhelpers.errors import InvalidOperationError

# ------------------------------------------------------------------------------
# Shapes
# ------------------------------------------------------------------------------


def test_normalize_shape():
    assert normalize_shape(3) == (3,)
    assert normalize_shape([2, 3]) == (2, 3)
    assert normalize_shape((2, [1, 2])) == (2, [1, 2])


@pytest.mark.parametrize("shape", [(), (1, 1, 1, 1, 1), ([1, 2], 3)])
def test_normalize_shape_rejects_bad_shapes(shape):
    with pytest.raises(InvalidOperationError):
        normalize_shape(shape)


def test_build_nested_calls_factory_per_leaf():
    counter = iter(range(100))
    array = build_nested((2, 3), lambda: next(counter))
    assert array == [[0, 1, 2], [3, 4, 5]]


def test_build_nested_ragged():
    array = build_nested((3, [1, 0, 2]), lambda: "x")
    assert array == [["x"], [], ["x", "x"]]


def test_build_nested_rank_four():
    array = build_nested((1, 2, 1, 3), lambda: 0)
    assert rank(array) == 4
    assert len(flatten(array)) == 6


# ------------------------------------------------------------------------------
# Traversal
# ------------------------------------------------------------------------------


def test_map_nested_preserves_none():
    assert map_nested(lambda x: x + 1, None) is None
    assert map_nested(lambda x: x + 1, [[1, 2], None, [3]]) == [[2, 3], None, [4]]


def test_require_same_length():
    require_same_length([1], [2])
    with pytest.raises(InvalidOperationError):
        require_same_length([1], [1, 2])
    with pytest.raises(InvalidOperationError):
        require_same_length(None, [1])


# ------------------------------------------------------------------------------
# Plain value arrays
# ------------------------------------------------------------------------------


def test_uniform_and_zeros():
    assert uniform((2, [1, 3]), 0) == [[0], [0, 0, 0]]
    assert zeros(3) == [0.0, 0.0, 0.0]
    assert zeros((2, 2)) == [[0.0, 0.0], [0.0, 0.0]]


def test_rows_do_not_alias():
    array = zeros((2, 2))
    array[0][0] = 1.0
    assert array[1][0] == 0.0

    vectors = vector_zeros(2, 3)
    vectors[0][0] = 1.0
    assert vectors[1][0] == 0.0
    assert vectors[0].shape == (3,)


def test_double_range():
    values = double_range(2, 3)
    assert values.dtype == np.float64
    np.testing.assert_array_equal(values, [2.0, 3.0, 4.0])
