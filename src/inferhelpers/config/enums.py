"""
Enums for inferhelpers configuration.

Each enum is a ``str`` subclass so that configuration files and keyword
arguments can pass the plain string value ("gaussian", "hard", "mean", ...)
and still validate against the fixed set of choices.
"""

from enum import Enum

# ==============================================================================
# Enums for configuration
# ==============================================================================


class BeliefKind(str, Enum):
    """Belief families the distribution factory can build."""

    GAUSSIAN = "gaussian"
    GAMMA = "gamma"
    VECTOR_GAUSSIAN = "vector_gaussian"


# ------------------------------------------------------------------------------


class ConstraintMode(str, Enum):
    """How a numpyro graph scores a strict inequality constraint."""

    # 0 when satisfied, -inf otherwise
    HARD = "hard"
    # log_sigmoid(diff / softness)
    SOFT = "soft"


# ------------------------------------------------------------------------------


class DiffMetric(str, Enum):
    """Per-element metrics available to convergence diagnostics."""

    MEAN = "mean"
    STD = "std"
    KL = "kl"
