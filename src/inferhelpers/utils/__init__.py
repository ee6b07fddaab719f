"""
Utility functions for inferhelpers.

Conversions from belief value types to numpyro and scipy.stats distributions.
"""

from .core import to_numpyro, to_scipy

__all__ = [
    "to_numpyro",
    "to_scipy",
]
