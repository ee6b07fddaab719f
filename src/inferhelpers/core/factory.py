"""
Factory functions for arrays of independent beliefs.

Every parameter argument is a *parameter source*: either a constant or a
zero-argument callable invoked once per element. Callables make randomized or
index-dependent initialization possible; the callable is not passed the index,
so callers close over whatever state they need::

    >>> rng = np.random.default_rng(0)
    >>> create_gaussian_array(3, mean=lambda: rng.normal(), variance=1.0)

Shapes follow ``inferhelpers.core.arrays`` (1 to 4 dimensions, ragged
dimensions given as a per-row sequence of lengths). Shape values are a
precondition: negative sizes or ragged sequences that are too short are not
checked here and surface as whatever Python raises.
"""

import logging
from typing import Any, Callable, Optional, Union

from ..config.enums import BeliefKind
from ..errors import InvalidOperationError
from ..stats.distributions import Gamma, Gaussian, VectorGaussian
from .arrays import Shape, build_nested, normalize_shape

logger = logging.getLogger(__name__)

ParameterSource = Union[float, Callable[[], float]]

# ==============================================================================
# Parameter sources
# ==============================================================================


def resolve(source: ParameterSource):
    """Evaluate a parameter source: call it if callable, else return it."""
    return source() if callable(source) else source


# ==============================================================================
# Gaussian arrays
# ==============================================================================


def create_uniform_gaussians(*shape) -> list:
    """
    Array of improper uniform Gaussians.

    This is the starting state for message-passing beliefs before any
    evidence has been incorporated.

    >>> create_uniform_gaussians(2, 3)  # 2 rows of 3
    """
    return build_nested(shape, Gaussian.uniform)


# ------------------------------------------------------------------------------


def create_gaussian_array(
    shape: Shape,
    mean: ParameterSource = 0.0,
    variance: Optional[ParameterSource] = None,
    precision: Optional[ParameterSource] = None,
) -> list:
    """
    Array of Gaussians parameterised by mean and variance (or precision).

    Parameters
    ----------
    shape : int or sequence
        Array shape.
    mean : float or Callable[[], float]
        Mean source.
    variance : float or Callable[[], float], optional
        Variance source. Exactly one of ``variance`` and ``precision`` may be
        given; if neither is, the beliefs are uniform.
    precision : float or Callable[[], float], optional
        Precision source.

    Returns
    -------
    list
        Nested list of ``Gaussian``.
    """
    if variance is not None and precision is not None:
        raise InvalidOperationError(
            "Specify either variance or precision, not both"
        )
    if variance is None and precision is None:
        return create_uniform_gaussians(*normalize_shape(shape))
    if precision is not None:
        return build_nested(
            shape,
            lambda: Gaussian.from_mean_and_precision(
                resolve(mean), resolve(precision)
            ),
        )
    return build_nested(
        shape,
        lambda: Gaussian.from_mean_and_variance(
            resolve(mean), resolve(variance)
        ),
    )


# ==============================================================================
# Gamma arrays
# ==============================================================================


def create_uniform_gammas(*shape) -> list:
    """Array of uniform ``Gamma(1, 0)`` beliefs."""
    return build_nested(shape, Gamma.uniform)


# ------------------------------------------------------------------------------


def create_gamma_array(
    shape: Shape,
    gamma_shape: ParameterSource = 1.0,
    rate: ParameterSource = 1.0,
) -> list:
    """Array of Gamma beliefs from shape and rate sources."""
    return build_nested(
        shape,
        lambda: Gamma.from_shape_and_rate(resolve(gamma_shape), resolve(rate)),
    )


# ==============================================================================
# Vector Gaussian arrays
# ==============================================================================


def create_vector_gaussian_array(
    shape: Shape,
    dimension: int,
    mean: ParameterSource = 0.0,
    variance: Optional[ParameterSource] = 1.0,
) -> list:
    """
    Array of isotropic multivariate Gaussians.

    Each element has mean vector ``[mean] * dimension`` and precision matrix
    ``I / variance``. A ``variance`` of None gives uniform beliefs.
    """
    if variance is None:
        return build_nested(shape, lambda: VectorGaussian.uniform(dimension))
    return build_nested(
        shape,
        lambda: VectorGaussian.from_mean_and_variance(
            resolve(mean), resolve(variance), dimension
        ),
    )


# ==============================================================================
# Generic entry point
# ==============================================================================


def create_array(
    shape: Shape, kind: Union[BeliefKind, str], **sources: Any
) -> list:
    """
    Build a belief array of any supported kind.

    Parameters
    ----------
    shape : int or sequence
        Array shape.
    kind : BeliefKind or str
        "gaussian", "gamma" or "vector_gaussian".
    **sources
        Keyword parameter sources forwarded to the matching ``create_*``
        function. With no sources, the uniform array of that kind is built
        (``vector_gaussian`` still needs ``dimension``).

    Raises
    ------
    InvalidOperationError
        If ``kind`` is not a supported belief kind.
    """
    try:
        kind = BeliefKind(kind)
    except ValueError:
        raise InvalidOperationError(
            f"Unsupported belief kind: {kind!r}. Must be one of "
            f"{[k.value for k in BeliefKind]}"
        ) from None

    logger.debug("Creating %s array of shape %s", kind.value, shape)
    if kind is BeliefKind.GAUSSIAN:
        return create_gaussian_array(shape, **sources)
    if kind is BeliefKind.GAMMA:
        if not sources:
            return create_uniform_gammas(*normalize_shape(shape))
        return create_gamma_array(shape, **sources)
    if "dimension" not in sources:
        raise InvalidOperationError(
            "vector_gaussian arrays need a 'dimension' argument"
        )
    if set(sources) == {"dimension"}:
        sources["variance"] = None
    return create_vector_gaussian_array(shape, **sources)

