"""
inferhelpers: helpers for building and diagnosing belief-propagation models.

Beliefs (``Gaussian``, ``Gamma``, ``VectorGaussian``) are arranged in nested
arrays, initialised by the distribution factory and inspected between
iterations of an external inference loop with the diagnostics in
``inferhelpers.core``. Classifier scores and argmax constraints are declared
on a model graph with the builders in ``inferhelpers.models``.
"""

__version__ = "0.1.0"

# Import order matters: stats before core and models
from . import stats
from . import utils
from . import config
from . import core
from . import models

from .errors import InferHelpersError, InvalidOperationError, ModelScopeError
from .stats import Gaussian, Gamma, VectorGaussian, Bernoulli, Beta
from .config import ClassifierConfig, GraphConfig, DiagnosticsConfig
from .models import (
    RecordingGraph,
    NumPyroGraph,
    SparseFeatures,
    compute_class_scores,
    constrain_arg_max,
    constrain_maximum,
)

__all__ = [
    "__version__",
    # Errors
    "InferHelpersError",
    "InvalidOperationError",
    "ModelScopeError",
    # Beliefs
    "Gaussian",
    "Gamma",
    "VectorGaussian",
    "Bernoulli",
    "Beta",
    # Configs
    "ClassifierConfig",
    "GraphConfig",
    "DiagnosticsConfig",
    # Models
    "RecordingGraph",
    "NumPyroGraph",
    "SparseFeatures",
    "compute_class_scores",
    "constrain_arg_max",
    "constrain_maximum",
    # Subpackages
    "stats",
    "utils",
    "config",
    "core",
    "models",
]
