"""Difference metrics between pairs of beliefs.

These are the per-element metrics consumed by
``inferhelpers.core.diagnostics.max_diff``. Any callable ``metric(a, b) ->
float`` can be substituted.

Moment metrics work on scalar and vector beliefs alike: for a
``VectorGaussian`` they return the largest per-component difference, with
standard deviations taken from the diagonal of the covariance.
"""

import math

import numpy as np
from numpyro.distributions.kl import kl_divergence
from multipledispatch import dispatch

from ..config.enums import DiffMetric
from ..errors import InvalidOperationError
from ..utils.core import to_numpyro
from .distributions import (
    Bernoulli,
    Gamma,
    Gaussian,
    HasMean,
    HasVariance,
    VectorGaussian,
)

# ==============================================================================
# Moment metrics
# ==============================================================================


def _abs_diff(x, y) -> float:
    """Largest component-wise ``|x - y|``; 0.0 for empty moments."""
    x = np.asarray(x, dtype=np.float64)
    y = np.asarray(y, dtype=np.float64)
    if x.shape != y.shape:
        raise InvalidOperationError(
            f"Cannot compare moments of shape {x.shape} and {y.shape}"
        )
    with np.errstate(invalid="ignore"):
        diff = np.abs(x - y)
    # Two infinite moments of the same sign have not changed
    diff = np.where(np.isinf(x) & (x == y), 0.0, diff)
    if diff.size == 0:
        return 0.0
    return float(np.max(diff))


# ------------------------------------------------------------------------------


def _std(belief: HasVariance):
    variance = np.asarray(belief.get_variance(), dtype=np.float64)
    if variance.ndim == 2:
        variance = np.diag(variance)
    return np.sqrt(variance)


# ------------------------------------------------------------------------------


def mean_abs_diff(a: HasMean, b: HasMean) -> float:
    """Absolute difference between the means of two beliefs."""
    return _abs_diff(a.get_mean(), b.get_mean())


# ------------------------------------------------------------------------------


def std_abs_diff(a: HasVariance, b: HasVariance) -> float:
    """Absolute difference between the standard deviations of two beliefs."""
    return _abs_diff(_std(a), _std(b))


# ==============================================================================
# Symmetric KL divergence
# ==============================================================================


@dispatch(Gaussian, Gaussian)
def symmetric_kl(p, q):
    """
    Compute the symmetrised KL divergence 0.5 * (KL(p||q) + KL(q||p)).

    Both beliefs must be proper; the numpyro KL registry does the work.
    """
    _require_proper(p, q)
    p, q = to_numpyro(p), to_numpyro(q)
    return 0.5 * float(kl_divergence(p, q) + kl_divergence(q, p))


# ------------------------------------------------------------------------------


@dispatch(Gamma, Gamma)
def symmetric_kl(p, q):
    _require_proper(p, q)
    p, q = to_numpyro(p), to_numpyro(q)
    return 0.5 * float(kl_divergence(p, q) + kl_divergence(q, p))


# ------------------------------------------------------------------------------


@dispatch(VectorGaussian, VectorGaussian)
def symmetric_kl(p, q):
    if p.dimension != q.dimension:
        raise InvalidOperationError(
            f"Cannot compare beliefs of dimension {p.dimension} and {q.dimension}"
        )
    _require_proper(p, q)
    p, q = to_numpyro(p), to_numpyro(q)
    return 0.5 * float(kl_divergence(p, q) + kl_divergence(q, p))


# ------------------------------------------------------------------------------


@dispatch(Bernoulli, Bernoulli)
def symmetric_kl(p, q):
    # KL(p||q) + KL(q||p) = (p - q) * (logit(p) - logit(q))
    a, b = p.probability, q.probability
    if a == b:
        return 0.0
    if a in (0.0, 1.0) or b in (0.0, 1.0):
        return math.inf
    logit_a = math.log(a) - math.log1p(-a)
    logit_b = math.log(b) - math.log1p(-b)
    return 0.5 * (a - b) * (logit_a - logit_b)


# ------------------------------------------------------------------------------


def _require_proper(*beliefs):
    for belief in beliefs:
        point_mass = getattr(belief, "is_point_mass", lambda: False)()
        if belief.is_uniform() or point_mass:
            raise InvalidOperationError(
                f"KL divergence is undefined for improper belief {belief}"
            )


# ==============================================================================
# Metric lookup
# ==============================================================================


def get_metric(name):
    """
    Resolve a metric keyword ("mean", "std", "kl") to its function.

    Raises
    ------
    InvalidOperationError
        If the keyword is not recognised.
    """
    try:
        key = DiffMetric(name)
    except ValueError:
        raise InvalidOperationError(
            f"Unknown diff metric: {name!r}. Must be one of "
            f"{[m.value for m in DiffMetric]}"
        ) from None
    return {
        DiffMetric.MEAN: mean_abs_diff,
        DiffMetric.STD: std_abs_diff,
        DiffMetric.KL: symmetric_kl,
    }[key]
