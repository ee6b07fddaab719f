# tests/test_config.py
"""
Tests for the pydantic configuration classes
"""

import pytest
from pydantic import ValidationError

from inferhelpers.config import (
    ClassifierConfig,
    ConstraintMode,
    DiagnosticsConfig,
    DiffMetric,
    GraphConfig,
)

# ------------------------------------------------------------------------------
# Defaults
# ------------------------------------------------------------------------------


def test_defaults():
    classifier = ClassifierConfig()
    assert classifier.prefix == "activity"
    assert classifier.noise_precision == 1.0
    assert classifier.factorized_scores is False

    graph = GraphConfig()
    assert graph.constraint_mode is ConstraintMode.HARD

    diagnostics = DiagnosticsConfig()
    assert diagnostics.metric is DiffMetric.MEAN
    assert diagnostics.max_history is None


def test_enum_values_from_strings():
    assert GraphConfig(constraint_mode="soft").constraint_mode is ConstraintMode.SOFT
    assert DiagnosticsConfig(metric="kl").metric is DiffMetric.KL


# ------------------------------------------------------------------------------
# Validation
# ------------------------------------------------------------------------------


@pytest.mark.parametrize(
    "cls, kwargs",
    [
        (ClassifierConfig, {"prefix": ""}),
        (ClassifierConfig, {"prefix": "my prefix"}),
        (ClassifierConfig, {"noise_precision": 0.0}),
        (ClassifierConfig, {"unknown": 1}),
        (GraphConfig, {"softness": -1.0}),
        (GraphConfig, {"constraint_mode": "fuzzy"}),
        (DiagnosticsConfig, {"tolerance": -1.0}),
        (DiagnosticsConfig, {"sparsity_threshold": 1.5}),
        (DiagnosticsConfig, {"max_history": 0}),
        (DiagnosticsConfig, {"metric": "l2"}),
    ],
)
def test_invalid_configs(cls, kwargs):
    with pytest.raises(ValidationError):
        cls(**kwargs)


def test_configs_are_frozen():
    config = ClassifierConfig(prefix="resident_1")
    with pytest.raises(ValidationError):
        config.prefix = "other"
