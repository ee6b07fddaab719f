"""
Configuration system for inferhelpers.

Uses Pydantic for validation and enums for type safety. All configs are
immutable.
"""

from .enums import BeliefKind, ConstraintMode, DiffMetric
from .base import ClassifierConfig, GraphConfig, DiagnosticsConfig

__all__ = [
    # Enums
    "BeliefKind",
    "ConstraintMode",
    "DiffMetric",
    # Configs
    "ClassifierConfig",
    "GraphConfig",
    "DiagnosticsConfig",
]
