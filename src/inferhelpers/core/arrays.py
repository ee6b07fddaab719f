"""
Nested (jagged) array helpers.

A belief array is a plain Python list whose elements are either beliefs or
further lists, up to ``MAX_RANK`` levels deep. Rows may have different
lengths. The helpers here build such arrays and walk them; everything in
``inferhelpers.core.algebra`` and ``inferhelpers.core.diagnostics`` is defined
recursively on top of ``map_nested``.

Shapes
------
A shape is a tuple with one entry per dimension. Each entry is either an
``int`` (every row at that level has that length) or a sequence of ints, in
which case row ``i`` of the enclosing level has length ``entry[i]``. The first
dimension has no enclosing level and must be an ``int``.
"""

from typing import Any, Callable, List, Sequence, Union

import numpy as np

from ..errors import InvalidOperationError

MAX_RANK = 4

Shape = Union[int, Sequence[Union[int, Sequence[int]]]]

# ==============================================================================
# Shape handling
# ==============================================================================


def normalize_shape(shape: Shape) -> tuple:
    """Turn an ``int`` or sequence shape into a tuple and check its rank."""
    if isinstance(shape, (int, np.integer)):
        shape = (int(shape),)
    shape = tuple(shape)
    if not 1 <= len(shape) <= MAX_RANK:
        raise InvalidOperationError(
            f"Arrays of rank 1 to {MAX_RANK} are supported, got shape {shape}"
        )
    if not isinstance(shape[0], (int, np.integer)):
        raise InvalidOperationError(
            "The first dimension of a shape must be an int, got "
            f"{shape[0]!r}"
        )
    return shape


# ------------------------------------------------------------------------------


def build_nested(shape: Shape, make: Callable[[], Any]) -> list:
    """
    Build a nested list of the given shape, calling ``make()`` once per leaf.

    Parameters
    ----------
    shape : int or sequence
        Array shape, see the module docstring for ragged dimensions.
    make : Callable[[], Any]
        Zero-argument factory invoked for every element, in row-major order.

    Returns
    -------
    list
        A fresh nested list. No two rows share storage.
    """
    return _build(normalize_shape(shape), make, 0)


def _build(shape: tuple, make: Callable[[], Any], parent_index: int) -> list:
    size = shape[0]
    if not isinstance(size, (int, np.integer)):
        size = size[parent_index]
    if len(shape) == 1:
        return [make() for _ in range(size)]
    return [_build(shape[1:], make, i) for i in range(size)]


# ==============================================================================
# Traversal
# ==============================================================================


def is_nested(value) -> bool:
    """True for the list/tuple containers that make up a belief array."""
    return isinstance(value, (list, tuple))


# ------------------------------------------------------------------------------


def map_nested(fn: Callable[[Any], Any], array):
    """
    Apply ``fn`` to every leaf of a nested array, preserving its structure.

    ``None`` at any level (the whole array, a row, or an element) maps to
    ``None``.
    """
    if array is None:
        return None
    if is_nested(array):
        return [map_nested(fn, item) for item in array]
    return fn(array)


# ------------------------------------------------------------------------------


def rank(array) -> int:
    """Nesting depth of an array, taken along its first elements."""
    depth = 0
    while is_nested(array):
        depth += 1
        if len(array) == 0:
            break
        array = array[0]
    return depth


# ------------------------------------------------------------------------------


def flatten(array) -> list:
    """All leaves of a nested array in row-major order."""
    if not is_nested(array):
        return [array]
    leaves = []
    for item in array:
        leaves.extend(flatten(item))
    return leaves


# ------------------------------------------------------------------------------


def require_same_length(a, b, what: str = "arrays") -> None:
    """
    Check two sibling arrays are both present and of equal length.

    Raises
    ------
    InvalidOperationError
        If either is None or the lengths differ.
    """
    if a is None or b is None:
        raise InvalidOperationError(f"{what} must not be None")
    if len(a) != len(b):
        raise InvalidOperationError(
            f"{what} must have the same length, got {len(a)} and {len(b)}"
        )


# ==============================================================================
# Plain value arrays
# ==============================================================================


def uniform(shape: Shape, value) -> list:
    """
    Nested array of the given shape with every element equal to ``value``.

    >>> uniform((2, 3), 1.5)
    [[1.5, 1.5, 1.5], [1.5, 1.5, 1.5]]
    >>> uniform((2, [1, 3]), 0)
    [[0], [0, 0, 0]]
    """
    return build_nested(shape, lambda: value)


# ------------------------------------------------------------------------------


def zeros(shape: Shape) -> list:
    """Nested array of ``0.0`` of the given shape."""
    return uniform(shape, 0.0)


# ------------------------------------------------------------------------------


def vector_zeros(m: int, n: int) -> List[np.ndarray]:
    """``m`` independent zero vectors of length ``n``."""
    return [np.zeros(n) for _ in range(m)]


# ------------------------------------------------------------------------------


def double_range(start: int, count: int) -> np.ndarray:
    """Float version of ``range(start, start + count)``."""
    return np.arange(start, start + count, dtype=np.float64)
