"""
Shared test fixtures and configuration for inferhelpers tests.
"""

import os

import pytest


def pytest_addoption(parser):
    parser.addoption(
        "--device",
        default="cpu",
        choices=["cpu", "gpu"],
        help="Device to run numpyro graph tests on: cpu or gpu",
    )


def pytest_configure(config):
    """Configure JAX device before any imports happen."""
    device = config.getoption("--device")
    if device == "cpu":
        os.environ["JAX_PLATFORM_NAME"] = "cpu"
    elif "JAX_PLATFORM_NAME" in os.environ:
        # Let JAX pick the GPU
        del os.environ["JAX_PLATFORM_NAME"]


@pytest.fixture(scope="session")
def rng_key():
    """Provide a consistent random key for tests."""
    # Import JAX here to ensure environment is configured first
    from jax import random

    return random.PRNGKey(42)


@pytest.fixture
def gaussian_rows():
    """Two rows of Gaussians with known means and variances."""
    from inferhelpers.stats import Gaussian

    return [
        [Gaussian.from_mean_and_variance(m, 4.0) for m in (1.0, 2.0, 3.0)],
        [Gaussian.from_mean_and_variance(m, 1.0) for m in (0.0, -1.0)],
    ]
