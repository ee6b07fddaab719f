"""
Model construction for inferhelpers.

``graph`` defines the model-graph interface and its recording and numpyro
backends; ``builders`` declares classifier scores and argmax constraints on
any of them.
"""

from .graph import IndexSet, ModelGraph, NumPyroGraph, RecordingGraph
from .builders import (
    SparseFeatures,
    compute_class_scores,
    compute_sparse_class_scores,
    constrain_arg_max,
    constrain_maximum,
)

__all__ = [
    "IndexSet",
    "ModelGraph",
    "NumPyroGraph",
    "RecordingGraph",
    "SparseFeatures",
    "compute_class_scores",
    "compute_sparse_class_scores",
    "constrain_arg_max",
    "constrain_maximum",
]
