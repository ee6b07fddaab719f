"""
Element-wise algebra over nested belief arrays.

All functions here are shape-preserving transforms. They follow one null
policy: ``None`` in, ``None`` out, at every nesting level. Reductions that
collapse an array to a statistic live in ``inferhelpers.core.diagnostics``
and raise on ``None`` instead.
"""

import math
from typing import Optional

import numpy as np

from ..errors import InvalidOperationError
from ..stats.distributions import (
    Gaussian,
    HasPrecision,
    VectorGaussian,
)
from .arrays import is_nested, map_nested

# ==============================================================================
# Copy
# ==============================================================================


def copy(array):
    """
    Deep, independent clone of a belief array.

    The returned lists share nothing with the input, so assigning into the
    copy never changes the original. ``None`` is preserved wherever it
    appears.
    """
    return map_nested(lambda belief: belief.copy(), array)


# ==============================================================================
# Moment projections
# ==============================================================================


def get_means(array):
    """Means of every belief, as a nested list of the same shape."""
    return map_nested(lambda belief: belief.get_mean(), array)


# ------------------------------------------------------------------------------


def get_variances(array):
    """Variances of every belief, as a nested list of the same shape."""
    return map_nested(lambda belief: belief.get_variance(), array)


# ------------------------------------------------------------------------------


def get_standard_deviations(array):
    """Standard deviations of every (scalar) belief."""
    return map_nested(lambda belief: math.sqrt(belief.get_variance()), array)


# ------------------------------------------------------------------------------


def get_precisions(array):
    """Precisions of every belief that has one (e.g. Gaussian)."""

    def _precision(belief: HasPrecision):
        if not isinstance(belief, HasPrecision):
            raise InvalidOperationError(
                f"{type(belief).__name__} has no precision"
            )
        return belief.get_precision()

    return map_nested(_precision, array)


# ------------------------------------------------------------------------------


def get_plus_minus_sigma(array):
    """``[mean - std, mean + std]`` for a Gaussian or an array of them."""
    return map_nested(lambda belief: belief.get_plus_minus_sigma(), array)


# ==============================================================================
# Log-probability of observed booleans
# ==============================================================================


def get_log_probability_of_truth(beliefs, truth):
    """
    Log-probability of observed booleans under Bernoulli beliefs.

    Parameters
    ----------
    beliefs : nested list of Bernoulli
        Predicted beliefs.
    truth : nested list of bool
        Observed values, same shape as ``beliefs``.

    Returns
    -------
    nested list of float or None
        None if either argument is None.

    Raises
    ------
    InvalidOperationError
        If the two arrays differ in length at any level.
    """
    if beliefs is None or truth is None:
        return None
    if not is_nested(beliefs):
        return beliefs.get_log_prob(bool(truth))
    if len(beliefs) != len(truth):
        raise InvalidOperationError(
            "beliefs and truth should be the same length, got "
            f"{len(beliefs)} and {len(truth)}"
        )
    return [
        get_log_probability_of_truth(belief, value)
        for belief, value in zip(beliefs, truth)
    ]


# ==============================================================================
# Independent (mean-field) approximation
# ==============================================================================


def independent_approximation(belief: Optional[VectorGaussian]):
    """
    Approximate a multivariate Gaussian by independent scalar Gaussians.

    Element ``i`` of the result has mean ``mu[i]`` and precision
    ``Lambda[i, i]``. Off-diagonal precision entries are discarded.

    Parameters
    ----------
    belief : VectorGaussian or None
        The joint belief.

    Returns
    -------
    list of Gaussian or None
        One Gaussian per dimension.
    """
    if belief is None:
        return None
    mean = np.asarray(belief.get_mean(), dtype=np.float64)
    precision = np.diag(np.asarray(belief.get_precision(), dtype=np.float64))
    return [
        Gaussian.from_mean_and_precision(float(m), float(p))
        for m, p in zip(mean, precision)
    ]


# ------------------------------------------------------------------------------


def independent_approximations(array):
    """``independent_approximation`` applied to every VectorGaussian."""
    return map_nested(independent_approximation, array)


# ==============================================================================
# Products
# ==============================================================================


def multiply(a, b):
    """
    Element-wise product of two belief arrays of the same shape.

    Products of beliefs from one family stay in that family, so this is the
    combination step of a message-passing update.
    """
    if a is None or b is None:
        return None
    if not is_nested(a):
        return a * b
    if len(a) != len(b):
        raise InvalidOperationError(
            f"Arrays must have the same length, got {len(a)} and {len(b)}"
        )
    return [multiply(x, y) for x, y in zip(a, b)]


# ------------------------------------------------------------------------------


def divide(a, b):
    """Element-wise ratio of two belief arrays of the same shape."""
    if a is None or b is None:
        return None
    if not is_nested(a):
        return a / b
    if len(a) != len(b):
        raise InvalidOperationError(
            f"Arrays must have the same length, got {len(a)} and {len(b)}"
        )
    return [divide(x, y) for x, y in zip(a, b)]
