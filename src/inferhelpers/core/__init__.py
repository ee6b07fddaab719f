"""
Core belief-array components for inferhelpers.

This package builds arrays of independent beliefs, transforms them element by
element, and computes the diagnostics an iterative inference loop needs
between iterations.
"""

from .arrays import (
    MAX_RANK,
    build_nested,
    map_nested,
    rank,
    flatten,
    uniform,
    zeros,
    vector_zeros,
    double_range,
)
from .factory import (
    create_array,
    create_uniform_gaussians,
    create_gaussian_array,
    create_uniform_gammas,
    create_gamma_array,
    create_vector_gaussian_array,
)
from .algebra import (
    copy,
    get_means,
    get_variances,
    get_standard_deviations,
    get_precisions,
    get_plus_minus_sigma,
    get_log_probability_of_truth,
    independent_approximation,
    independent_approximations,
    multiply,
    divide,
)
from .diagnostics import (
    max_diff,
    sparsity,
    row_sparsity,
    normalize,
    scale_gaussian,
    ConvergenceTracker,
)

__all__ = [
    # Arrays
    "MAX_RANK",
    "build_nested",
    "map_nested",
    "rank",
    "flatten",
    "uniform",
    "zeros",
    "vector_zeros",
    "double_range",
    # Factory
    "create_array",
    "create_uniform_gaussians",
    "create_gaussian_array",
    "create_uniform_gammas",
    "create_gamma_array",
    "create_vector_gaussian_array",
    # Algebra
    "copy",
    "get_means",
    "get_variances",
    "get_standard_deviations",
    "get_precisions",
    "get_plus_minus_sigma",
    "get_log_probability_of_truth",
    "independent_approximation",
    "independent_approximations",
    "multiply",
    "divide",
    # Diagnostics
    "max_diff",
    "sparsity",
    "row_sparsity",
    "normalize",
    "scale_gaussian",
    "ConvergenceTracker",
]
