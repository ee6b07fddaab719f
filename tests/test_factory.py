# tests/test_factory.py
"""
Tests for the distribution factory in inferhelpers.core.factory
"""

import math

import numpy as np
import pytest

from inferhelpers.config import BeliefKind
from inferhelpers.core import (
    create_array,
    create_gamma_array,
    create_gaussian_array,
    create_uniform_gammas,
    create_uniform_gaussians,
    create_vector_gaussian_array,
    flatten,
    get_means,
)
from inferhelpers.errors import InvalidOperationError
from inferhelpers.stats import Gamma, Gaussian, VectorGaussian

# ------------------------------------------------------------------------------
# Uniform entry points
# ------------------------------------------------------------------------------


def test_uniform_gaussians_are_improper():
    array = create_uniform_gaussians(2, 3)
    assert len(array) == 2
    assert all(len(row) == 3 for row in array)
    assert all(g.is_uniform() for g in flatten(array))
    assert all(math.isinf(g.get_variance()) for g in flatten(array))


def test_uniform_gammas():
    array = create_uniform_gammas(4)
    assert array == [Gamma.uniform()] * 4


# ------------------------------------------------------------------------------
# Parameter sources
# ------------------------------------------------------------------------------


def test_constant_sources():
    array = create_gaussian_array((2, 2), mean=1.0, variance=2.0)
    for g in flatten(array):
        assert g == Gaussian.from_mean_and_variance(1.0, 2.0)


def test_generator_called_once_per_element():
    calls = []

    def next_mean():
        calls.append(None)
        return float(len(calls))

    array = create_gaussian_array((2, [1, 2]), mean=next_mean, precision=1.0)
    assert len(calls) == 3
    assert get_means(array) == [[1.0], [2.0, 3.0]]


def test_randomized_initialization():
    rng = np.random.default_rng(0)
    array = create_gaussian_array(5, mean=lambda: rng.normal(), variance=1.0)
    means = get_means(array)
    assert len(set(means)) == 5


def test_variance_and_precision_are_exclusive():
    with pytest.raises(InvalidOperationError):
        create_gaussian_array(2, variance=1.0, precision=1.0)


def test_no_variance_gives_uniform():
    assert all(g.is_uniform() for g in create_gaussian_array(3, mean=2.0))


def test_gamma_array():
    array = create_gamma_array((1, 2), gamma_shape=2.0, rate=4.0)
    assert array == [[Gamma(2.0, 4.0), Gamma(2.0, 4.0)]]


# ------------------------------------------------------------------------------
# Vector Gaussians
# ------------------------------------------------------------------------------


def test_vector_gaussian_array_is_isotropic():
    array = create_vector_gaussian_array(2, dimension=3, mean=0.5, variance=4.0)
    for vg in array:
        np.testing.assert_allclose(vg.get_mean(), np.full(3, 0.5))
        np.testing.assert_allclose(vg.get_precision(), np.eye(3) / 4.0)


def test_vector_gaussian_array_uniform():
    array = create_vector_gaussian_array(2, dimension=2, variance=None)
    assert all(vg == VectorGaussian.uniform(2) for vg in array)


# ------------------------------------------------------------------------------
# Generic entry point
# ------------------------------------------------------------------------------


@pytest.mark.parametrize(
    "shape",
    [3, (2, 3), (2, [1, 2]), (2, 1, 3), (1, 2, 2, 2)],
)
def test_create_array_shapes(shape):
    array = create_array(shape, BeliefKind.GAUSSIAN, mean=1.0, variance=1.0)
    leaves = flatten(array)
    assert all(isinstance(g, Gaussian) for g in leaves)
    assert all(g.get_mean() == 1.0 for g in leaves)


def test_create_array_by_keyword():
    assert all(g.is_uniform() for g in create_array(2, "gamma"))
    vectors = create_array(2, "vector_gaussian", dimension=4)
    assert all(vg.is_uniform() and vg.dimension == 4 for vg in vectors)


def test_create_array_numpy_integer_shapes():
    array = create_gaussian_array(np.int64(3), mean=1.0)
    assert len(array) == 3
    assert all(g.is_uniform() for g in array)
    gammas = create_array(np.int64(3), "gamma")
    assert len(gammas) == 3
    rows = create_array((np.int64(2), np.int32(2)), BeliefKind.GAMMA)
    assert [len(row) for row in rows] == [2, 2]


def test_create_array_errors():
    with pytest.raises(InvalidOperationError):
        create_array(2, "wishart")
    with pytest.raises(InvalidOperationError):
        create_array(2, "vector_gaussian")
