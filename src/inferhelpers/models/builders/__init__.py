"""Builders that declare classifier structure on a model graph."""

from .classifier import (
    SparseFeatures,
    compute_class_scores,
    compute_sparse_class_scores,
    constrain_arg_max,
    constrain_maximum,
)

__all__ = [
    "SparseFeatures",
    "compute_class_scores",
    "compute_sparse_class_scores",
    "constrain_arg_max",
    "constrain_maximum",
]
