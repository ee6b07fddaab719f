"""Configuration classes using Pydantic.

All configs are immutable and reject unknown fields, so a typo in a keyword
fails at construction time instead of being silently ignored.
"""

from typing import Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator

from .enums import ConstraintMode, DiffMetric

# ==============================================================================
# Classifier Configuration
# ==============================================================================


class ClassifierConfig(BaseModel):
    """
    Options for the classifier score and argmax constraint builders.

    Parameters
    ----------
    prefix : str
        Prefix for every variable name the builders declare. Two classifiers
        in one model need distinct prefixes.
    noise_precision : float
        Precision of the Gaussian noise added to each class score when the
        caller does not pass one explicitly.
    factorized_scores : bool
        If True, dense scores are built as per-feature products followed by a
        sum instead of a single inner product. Both give the same numbers;
        the factorized form exposes one node per feature to the graph.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    prefix: str = Field("activity", description="Variable name prefix")
    noise_precision: float = Field(
        1.0, gt=0, description="Score noise precision"
    )
    factorized_scores: bool = Field(
        False, description="Build dense scores as product-then-sum"
    )

    # --------------------------------------------------------------------------

    @field_validator("prefix")
    @classmethod
    def validate_prefix(cls, v: str) -> str:
        """Prefix must be a non-empty identifier-like string."""
        if not v or not v.replace("_", "").isalnum():
            raise ValueError(
                f"Prefix must be a non-empty alphanumeric string, got {v!r}"
            )
        return v


# ==============================================================================
# Graph Configuration
# ==============================================================================


class GraphConfig(BaseModel):
    """
    Options for the numpyro model-graph backend.

    Parameters
    ----------
    constraint_mode : ConstraintMode
        ``HARD`` scores an inequality as 0 / -inf. ``SOFT`` uses
        ``log_sigmoid(diff / softness)``, which keeps gradients finite for
        gradient-based inference.
    softness : float
        Temperature of the soft constraint. Ignored in hard mode.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    constraint_mode: ConstraintMode = Field(
        ConstraintMode.HARD, description="Inequality scoring mode"
    )
    softness: float = Field(
        0.01, gt=0, description="Soft constraint temperature"
    )


# ==============================================================================
# Diagnostics Configuration
# ==============================================================================


class DiagnosticsConfig(BaseModel):
    """
    Options for convergence and sparsity diagnostics.

    Parameters
    ----------
    tolerance : float
        A tracked belief array is converged once ``max_diff`` between two
        consecutive iterations is at or below this value.
    sparsity_threshold : float
        Fraction of the squared-mean norm below which an element counts as
        zeroed out.
    metric : DiffMetric
        Per-element metric used by ``max_diff``.
    max_history : int, optional
        Keep only the most recent diffs. None keeps all of them.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    tolerance: float = Field(1e-4, ge=0, description="Convergence tolerance")
    sparsity_threshold: float = Field(
        0.1, ge=0, le=1, description="Norm-relative sparsity cutoff"
    )
    metric: DiffMetric = Field(DiffMetric.MEAN, description="Diff metric")
    max_history: Optional[int] = Field(
        None, gt=0, description="Number of diffs to retain"
    )
