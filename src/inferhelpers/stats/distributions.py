"""Parametric belief distributions used by inferhelpers.

Beliefs are small immutable value types. Two beliefs are equal when their
parameters are equal. Scalar beliefs hold plain floats; ``VectorGaussian``
holds numpy arrays and compares them by value.

The generic array operations in ``inferhelpers.core`` are written against the
capability protocols defined here (``HasMean``, ``HasVariance``,
``HasPrecision``, ``ClosedUnderProduct``) rather than against concrete
classes.
"""

import math
from dataclasses import dataclass, field, replace
from typing import Optional, Protocol, runtime_checkable

import numpy as np

# ==============================================================================
# Capability protocols
# ==============================================================================


@runtime_checkable
class HasMean(Protocol):
    """Anything with a gettable mean."""

    def get_mean(self): ...


@runtime_checkable
class HasVariance(Protocol):
    """Anything with a gettable variance."""

    def get_variance(self): ...


@runtime_checkable
class HasPrecision(Protocol):
    """Anything with a gettable precision (inverse variance)."""

    def get_precision(self): ...


@runtime_checkable
class ClosedUnderProduct(Protocol):
    """Beliefs whose product and ratio stay in the same family."""

    def __mul__(self, other): ...

    def __truediv__(self, other): ...


# ==============================================================================
# Gaussian
# ==============================================================================


@dataclass(frozen=True)
class Gaussian:
    """
    Univariate Gaussian belief stored as (mean, precision).

    A precision of zero is the improper uniform belief used to initialise
    messages before any evidence is seen; its mean is always stored as 0 so
    that all uniform Gaussians compare equal. An infinite precision is a point
    mass at ``mean``.

    Parameters
    ----------
    mean : float
        Location of the belief.
    precision : float
        Inverse variance, in [0, inf].
    """

    mean: float = 0.0
    precision: float = 0.0

    def __post_init__(self):
        precision = float(self.precision)
        if precision < 0 or math.isnan(precision):
            raise ValueError(f"Precision must be non-negative, got {precision}")
        mean = 0.0 if precision == 0 else float(self.mean)
        object.__setattr__(self, "mean", mean)
        object.__setattr__(self, "precision", precision)

    # --------------------------------------------------------------------------
    # Constructors
    # --------------------------------------------------------------------------

    @classmethod
    def from_mean_and_variance(cls, mean: float, variance: float) -> "Gaussian":
        """Create a Gaussian from its mean and variance."""
        variance = float(variance)
        if variance < 0:
            raise ValueError(f"Variance must be non-negative, got {variance}")
        if variance == 0:
            return cls(mean, math.inf)
        return cls(mean, 1.0 / variance)

    @classmethod
    def from_mean_and_precision(
        cls, mean: float, precision: float
    ) -> "Gaussian":
        """Create a Gaussian from its mean and precision."""
        return cls(mean, precision)

    @classmethod
    def uniform(cls) -> "Gaussian":
        """The improper uniform Gaussian (zero precision)."""
        return cls(0.0, 0.0)

    @classmethod
    def point_mass(cls, value: float) -> "Gaussian":
        """A Gaussian concentrated on a known value."""
        return cls(value, math.inf)

    # --------------------------------------------------------------------------
    # Moments
    # --------------------------------------------------------------------------

    def get_mean(self) -> float:
        return self.mean

    def get_variance(self) -> float:
        if self.precision == 0:
            return math.inf
        return 1.0 / self.precision

    def get_precision(self) -> float:
        return self.precision

    def is_uniform(self) -> bool:
        return self.precision == 0

    def is_point_mass(self) -> bool:
        return math.isinf(self.precision)

    # --------------------------------------------------------------------------

    def get_log_prob(self, x: float) -> float:
        """
        Log density at ``x``.

        The uniform belief has log density 0 everywhere; a point mass has 0 at
        its location and -inf elsewhere.
        """
        if self.is_uniform():
            return 0.0
        if self.is_point_mass():
            return 0.0 if x == self.mean else -math.inf
        diff = x - self.mean
        return 0.5 * (
            math.log(self.precision)
            - math.log(2 * math.pi)
            - self.precision * diff * diff
        )

    # --------------------------------------------------------------------------

    def get_plus_minus_sigma(self):
        """Return ``[mean - std, mean + std]``."""
        std = math.sqrt(self.get_variance())
        return [self.mean - std, self.mean + std]

    # --------------------------------------------------------------------------
    # Message algebra
    # --------------------------------------------------------------------------

    def __mul__(self, other: "Gaussian") -> "Gaussian":
        if not isinstance(other, Gaussian):
            return NotImplemented
        if self.is_point_mass():
            return self
        if other.is_point_mass():
            return other
        precision = self.precision + other.precision
        if precision == 0:
            return Gaussian.uniform()
        mean_times_precision = (
            self.mean * self.precision + other.mean * other.precision
        )
        return Gaussian(mean_times_precision / precision, precision)

    def __truediv__(self, other: "Gaussian") -> "Gaussian":
        if not isinstance(other, Gaussian):
            return NotImplemented
        if self.is_point_mass():
            return self
        precision = self.precision - other.precision
        if precision < 0:
            raise ValueError(
                "Ratio of Gaussians has negative precision "
                f"({self.precision} / {other.precision})"
            )
        if precision == 0:
            return Gaussian.uniform()
        mean_times_precision = (
            self.mean * self.precision - other.mean * other.precision
        )
        return Gaussian(mean_times_precision / precision, precision)

    def copy(self) -> "Gaussian":
        return replace(self)


# ==============================================================================
# Gamma
# ==============================================================================


@dataclass(frozen=True)
class Gamma:
    """
    Gamma belief over a positive scalar, parameterised by shape and rate.

    The uniform belief is ``Gamma(1, 0)``. A point mass stores its location in
    ``point`` and ignores shape and rate.
    """

    shape: float = 1.0
    rate: float = 0.0
    point: Optional[float] = None

    def __post_init__(self):
        object.__setattr__(self, "shape", float(self.shape))
        object.__setattr__(self, "rate", float(self.rate))
        if self.point is not None:
            object.__setattr__(self, "point", float(self.point))

    @classmethod
    def from_shape_and_rate(cls, shape: float, rate: float) -> "Gamma":
        return cls(shape, rate)

    @classmethod
    def from_shape_and_scale(cls, shape: float, scale: float) -> "Gamma":
        return cls(shape, 1.0 / scale)

    @classmethod
    def from_mean_and_variance(cls, mean: float, variance: float) -> "Gamma":
        """Moment-match a Gamma: shape = m^2 / v, rate = m / v."""
        if variance == 0:
            return cls.point_mass(mean)
        return cls(mean * mean / variance, mean / variance)

    @classmethod
    def uniform(cls) -> "Gamma":
        return cls(1.0, 0.0)

    @classmethod
    def point_mass(cls, value: float) -> "Gamma":
        return cls(math.inf, math.inf, point=value)

    # --------------------------------------------------------------------------

    def is_uniform(self) -> bool:
        return self.point is None and self.shape == 1 and self.rate == 0

    def is_point_mass(self) -> bool:
        return self.point is not None

    def get_mean(self) -> float:
        if self.point is not None:
            return self.point
        if self.rate == 0:
            return math.inf
        return self.shape / self.rate

    def get_variance(self) -> float:
        if self.point is not None:
            return 0.0
        if self.rate == 0:
            return math.inf
        return self.shape / (self.rate * self.rate)

    def get_log_prob(self, x: float) -> float:
        if self.point is not None:
            return 0.0 if x == self.point else -math.inf
        if self.is_uniform():
            return 0.0
        if x <= 0:
            return -math.inf
        return (
            self.shape * math.log(self.rate)
            - math.lgamma(self.shape)
            + (self.shape - 1) * math.log(x)
            - self.rate * x
        )

    # --------------------------------------------------------------------------

    def __mul__(self, other: "Gamma") -> "Gamma":
        if not isinstance(other, Gamma):
            return NotImplemented
        if self.is_point_mass():
            return self
        if other.is_point_mass():
            return other
        return Gamma(self.shape + other.shape - 1, self.rate + other.rate)

    def __truediv__(self, other: "Gamma") -> "Gamma":
        if not isinstance(other, Gamma):
            return NotImplemented
        if self.is_point_mass():
            return self
        return Gamma(self.shape - other.shape + 1, self.rate - other.rate)

    def copy(self) -> "Gamma":
        return replace(self)


# ==============================================================================
# Multivariate Gaussian
# ==============================================================================


@dataclass(frozen=True, eq=False)
class VectorGaussian:
    """
    Multivariate Gaussian belief stored as a mean vector and precision matrix.

    Parameters
    ----------
    mean : array-like, shape (d,)
        Mean vector.
    precision : array-like, shape (d, d)
        Precision (inverse covariance) matrix. All zeros is the improper
        uniform belief.
    """

    mean: np.ndarray = field(default_factory=lambda: np.zeros(0))
    precision: np.ndarray = field(default_factory=lambda: np.zeros((0, 0)))

    def __post_init__(self):
        mean = np.array(self.mean, dtype=np.float64).reshape(-1)
        precision = np.array(self.precision, dtype=np.float64)
        if precision.shape != (mean.size, mean.size):
            raise ValueError(
                f"Precision shape {precision.shape} does not match mean "
                f"dimension {mean.size}"
            )
        mean.setflags(write=False)
        precision.setflags(write=False)
        object.__setattr__(self, "mean", mean)
        object.__setattr__(self, "precision", precision)

    # --------------------------------------------------------------------------

    @classmethod
    def from_mean_and_precision(cls, mean, precision) -> "VectorGaussian":
        return cls(mean, precision)

    @classmethod
    def from_mean_and_variance(
        cls, mean: float, variance: float, dimension: int
    ) -> "VectorGaussian":
        """
        Isotropic belief: ``mean`` is broadcast to every dimension and the
        precision is ``I / variance``. The variance must be positive; a
        point mass has no finite precision matrix.
        """
        variance = float(variance)
        if not variance > 0:
            raise ValueError(f"Variance must be positive, got {variance}")
        return cls(
            np.full(dimension, float(mean)),
            np.eye(dimension) / variance,
        )

    @classmethod
    def uniform(cls, dimension: int) -> "VectorGaussian":
        return cls(np.zeros(dimension), np.zeros((dimension, dimension)))

    # --------------------------------------------------------------------------

    @property
    def dimension(self) -> int:
        return self.mean.size

    def is_uniform(self) -> bool:
        return not np.any(self.precision)

    def get_mean(self) -> np.ndarray:
        return np.array(self.mean)

    def get_precision(self) -> np.ndarray:
        return np.array(self.precision)

    def get_variance(self) -> np.ndarray:
        """Covariance matrix; infinite on the diagonal when uniform."""
        if self.is_uniform():
            variance = np.zeros((self.dimension, self.dimension))
            np.fill_diagonal(variance, np.inf)
            return variance
        return np.linalg.inv(self.precision)

    # --------------------------------------------------------------------------

    def __mul__(self, other: "VectorGaussian") -> "VectorGaussian":
        if not isinstance(other, VectorGaussian):
            return NotImplemented
        precision = self.precision + other.precision
        if not np.any(precision):
            return VectorGaussian.uniform(self.dimension)
        mean = np.linalg.solve(
            precision, self.precision @ self.mean + other.precision @ other.mean
        )
        return VectorGaussian(mean, precision)

    def __truediv__(self, other: "VectorGaussian") -> "VectorGaussian":
        if not isinstance(other, VectorGaussian):
            return NotImplemented
        precision = self.precision - other.precision
        if not np.any(precision):
            return VectorGaussian.uniform(self.dimension)
        mean = np.linalg.solve(
            precision, self.precision @ self.mean - other.precision @ other.mean
        )
        return VectorGaussian(mean, precision)

    def __eq__(self, other) -> bool:
        if not isinstance(other, VectorGaussian):
            return NotImplemented
        return np.array_equal(self.mean, other.mean) and np.array_equal(
            self.precision, other.precision
        )

    __hash__ = None

    def copy(self) -> "VectorGaussian":
        return VectorGaussian(self.mean.copy(), self.precision.copy())


# ==============================================================================
# Binary beliefs
# ==============================================================================


@dataclass(frozen=True)
class Bernoulli:
    """Belief over a boolean: ``probability`` is P(true)."""

    probability: float = 0.5

    def __post_init__(self):
        object.__setattr__(self, "probability", float(self.probability))

    def get_mean(self) -> float:
        return self.probability

    def get_variance(self) -> float:
        return self.probability * (1.0 - self.probability)

    def get_log_prob(self, value: bool) -> float:
        p = self.probability if value else 1.0 - self.probability
        return math.log(p) if p > 0 else -math.inf

    def copy(self) -> "Bernoulli":
        return replace(self)


# ------------------------------------------------------------------------------


@dataclass(frozen=True)
class Beta:
    """Belief over a probability, parameterised by pseudo-counts."""

    true_count: float = 1.0
    false_count: float = 1.0

    def __post_init__(self):
        object.__setattr__(self, "true_count", float(self.true_count))
        object.__setattr__(self, "false_count", float(self.false_count))

    def get_mean(self) -> float:
        return self.true_count / (self.true_count + self.false_count)

    def get_variance(self) -> float:
        total = self.true_count + self.false_count
        return (
            self.true_count * self.false_count / (total * total * (total + 1))
        )

    def copy(self) -> "Beta":
        return replace(self)
