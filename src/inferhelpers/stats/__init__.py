"""Belief distributions and difference metrics for inferhelpers."""

# Belief value types and capability protocols
from .distributions import (
    Gaussian,
    Gamma,
    VectorGaussian,
    Bernoulli,
    Beta,
    HasMean,
    HasVariance,
    HasPrecision,
    ClosedUnderProduct,
)

# Difference metrics
from .divergences import (
    mean_abs_diff,
    std_abs_diff,
    symmetric_kl,
    get_metric,
)

__all__ = [
    # Beliefs
    "Gaussian",
    "Gamma",
    "VectorGaussian",
    "Bernoulli",
    "Beta",
    # Protocols
    "HasMean",
    "HasVariance",
    "HasPrecision",
    "ClosedUnderProduct",
    # Metrics
    "mean_abs_diff",
    "std_abs_diff",
    "symmetric_kl",
    "get_metric",
]
