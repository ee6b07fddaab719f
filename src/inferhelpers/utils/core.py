"""
Conversions between inferhelpers beliefs and library distributions.
"""

import math

import numpy as np
import jax.numpy as jnp
import numpyro.distributions as dist
import scipy.stats as stats
from multipledispatch import dispatch
from numpyro.distributions import constraints

from ..stats.distributions import (
    Bernoulli,
    Beta,
    Gamma,
    Gaussian,
    VectorGaussian,
)

# ==============================================================================
# NumPyro conversions
# ==============================================================================


@dispatch(Gaussian)
def to_numpyro(belief):
    """
    Get the numpyro distribution matching a belief.

    The uniform Gaussian maps to ``ImproperUniform`` over the real line and a
    point mass maps to ``Delta``.
    """
    if belief.is_uniform():
        return dist.ImproperUniform(constraints.real, (), ())
    if belief.is_point_mass():
        return dist.Delta(jnp.asarray(belief.mean))
    return dist.Normal(belief.mean, math.sqrt(belief.get_variance()))


# ------------------------------------------------------------------------------


@dispatch(Gamma)
def to_numpyro(belief):
    if belief.is_point_mass():
        return dist.Delta(jnp.asarray(belief.point))
    if belief.is_uniform():
        return dist.ImproperUniform(constraints.positive, (), ())
    return dist.Gamma(belief.shape, belief.rate)


# ------------------------------------------------------------------------------


@dispatch(VectorGaussian)
def to_numpyro(belief):
    if belief.is_uniform():
        return dist.ImproperUniform(
            constraints.real_vector, (), (belief.dimension,)
        )
    return dist.MultivariateNormal(
        loc=jnp.asarray(belief.mean),
        precision_matrix=jnp.asarray(belief.precision),
    )


# ------------------------------------------------------------------------------


@dispatch(Bernoulli)
def to_numpyro(belief):
    return dist.Bernoulli(probs=belief.probability)


# ------------------------------------------------------------------------------


@dispatch(Beta)
def to_numpyro(belief):
    return dist.Beta(belief.true_count, belief.false_count)


# ==============================================================================
# SciPy conversions
# ==============================================================================


def to_scipy(belief):
    """
    Get the corresponding scipy.stats distribution for a belief.

    Parameters
    ----------
    belief : Gaussian, Gamma, VectorGaussian, Bernoulli or Beta
        The belief to convert. Improper (uniform) beliefs and point masses
        have no scipy counterpart.

    Returns
    -------
    scipy.stats frozen distribution
        The corresponding scipy.stats distribution

    Raises
    ------
    ValueError
        If the belief is improper or of an unsupported type.
    """
    if getattr(belief, "is_uniform", lambda: False)():
        raise ValueError(f"Improper belief has no scipy form: {belief}")
    if isinstance(belief, Gaussian):
        if belief.is_point_mass():
            raise ValueError(f"Point mass has no scipy form: {belief}")
        return stats.norm(loc=belief.mean, scale=math.sqrt(belief.get_variance()))
    elif isinstance(belief, Gamma):
        if belief.is_point_mass():
            raise ValueError(f"Point mass has no scipy form: {belief}")
        # scipy parameterises by scale = 1 / rate
        return stats.gamma(belief.shape, scale=1.0 / belief.rate)
    elif isinstance(belief, VectorGaussian):
        return stats.multivariate_normal(
            mean=np.asarray(belief.mean), cov=belief.get_variance()
        )
    elif isinstance(belief, Bernoulli):
        return stats.bernoulli(belief.probability)
    elif isinstance(belief, Beta):
        return stats.beta(belief.true_count, belief.false_count)
    else:
        raise ValueError(f"Unsupported belief: {belief}")
