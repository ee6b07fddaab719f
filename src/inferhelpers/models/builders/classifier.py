"""Class score and argmax constraint builders for Bayesian classifiers.

A multiclass classifier scores every class as a noisy linear function of the
features and then states, as continuous constraints, that the observed (or
latent) class has the largest score:

    score_c      = w_c . x
    noisy_c      ~ Normal(score_c, 1 / noise_precision)
    noisy_k - noisy_j > 0   for every j != k, where k is the chosen class

The discrete "k is the argmax" fact therefore becomes ``n_classes - 1``
pairwise strict inequalities. ``constrain_maximum`` goes one step further and
declares one guarded branch per candidate class, so that the argmax can be a
random variable.

All builders are pure graph construction: they declare sites on the
``ModelGraph`` they are given and return immediately.

Functions
---------
compute_class_scores
    Noisy per-class scores for dense or sparse features.
compute_sparse_class_scores
    Noisy per-class scores restricted to the active feature dimensions.
constrain_arg_max
    Pairwise dominance constraints for a chosen class.
constrain_maximum
    One guarded ``constrain_arg_max`` branch per candidate class.
"""

import logging
import numbers
from dataclasses import dataclass
from typing import Any, Optional

from ...config import ClassifierConfig
from ..graph.base import IndexSet, ModelGraph

logger = logging.getLogger(__name__)

# ==============================================================================
# Sparse features
# ==============================================================================


@dataclass(frozen=True)
class SparseFeatures:
    """
    A sparse observation: the non-zero feature ``values`` and their
    ``indices`` into the full feature dimension.

    Attributes
    ----------
    values : array-like, shape (n_active,)
        Feature values present in the observation.
    indices : array-like of int, shape (n_active,)
        Positions of those values in the dense feature vector. Indices outside
        the weight dimension are not checked here.
    active : IndexSet
        Index set over the ``n_active`` present dimensions.
    """

    values: Any
    indices: Any
    active: IndexSet


# ==============================================================================
# Class scores
# ==============================================================================


def compute_class_scores(
    graph: ModelGraph,
    weights,
    features,
    n_classes: int,
    noise_precision=None,
    config: Optional[ClassifierConfig] = None,
):
    """
    Declare one noisy score per class.

    Parameters
    ----------
    graph : ModelGraph
        Open model graph to declare on.
    weights : graph handle, shape (n_classes, n_features)
        Per-class weight vectors.
    features : graph handle or SparseFeatures
        Dense feature vector of length ``n_features``, or a sparse
        observation, in which case ``compute_sparse_class_scores`` is used.
    n_classes : int
        Number of classes.
    noise_precision : float or graph handle, optional
        Precision of the score noise. Defaults to
        ``config.noise_precision``.
    config : ClassifierConfig, optional
        Variable name prefix and score form.

    Returns
    -------
    graph handle, shape (n_classes,)
        The noisy scores, tagged for marginal query under
        ``f"{prefix}NoisyScore"``.
    """
    config = config or ClassifierConfig()
    if isinstance(features, SparseFeatures):
        return compute_sparse_class_scores(
            graph, weights, features, n_classes, noise_precision, config
        )

    prefix = config.prefix
    classes = graph.index_set(f"{prefix}Class", n_classes)
    if config.factorized_scores:
        # One product per (class, feature), then a sum per class
        products = graph.multiply(
            f"{prefix}Products", weights, features, index_sets=(classes,)
        )
        score = graph.sum(f"{prefix}Score", products, index_sets=(classes,))
    else:
        score = graph.inner_product(
            f"{prefix}Score", weights, features, index_sets=(classes,)
        )
    return _add_score_noise(graph, score, classes, noise_precision, config)


# ------------------------------------------------------------------------------


def compute_sparse_class_scores(
    graph: ModelGraph,
    weights,
    features: SparseFeatures,
    n_classes: int,
    noise_precision=None,
    config: Optional[ClassifierConfig] = None,
):
    """
    Declare one noisy score per class from a sparse observation.

    Each class's weight vector is first restricted to the dimensions present
    in ``features`` (a gather over ``features.indices``); the score is then
    the sum over the active dimensions of ``value * weight``. The full dense
    product is never formed.

    Parameters
    ----------
    graph : ModelGraph
        Open model graph to declare on.
    weights : graph handle, shape (n_classes, n_features)
        Per-class weight vectors over the full feature dimension.
    features : SparseFeatures
        Present values, their indices and the active index set.
    n_classes : int
        Number of classes.
    noise_precision : float or graph handle, optional
        Defaults to ``config.noise_precision``.
    config : ClassifierConfig, optional
        Variable name prefix.

    Returns
    -------
    graph handle, shape (n_classes,)
        The noisy scores, tagged for marginal query.
    """
    config = config or ClassifierConfig()
    prefix = config.prefix
    classes = graph.index_set(f"{prefix}Class", n_classes)
    index_sets = (classes, features.active)

    sparse_weights = graph.subarray(
        f"{prefix}SparseWeights", weights, features.indices, index_sets
    )
    product = graph.multiply(
        f"{prefix}Product", features.values, sparse_weights, index_sets
    )
    score = graph.sum(f"{prefix}Score", product, index_sets=(classes,))
    return _add_score_noise(graph, score, classes, noise_precision, config)


# ------------------------------------------------------------------------------


def _add_score_noise(graph, score, classes, noise_precision, config):
    if noise_precision is None:
        noise_precision = config.noise_precision
    name = f"{config.prefix}NoisyScore"
    noisy = graph.gaussian_from_mean_and_precision(
        name, score, noise_precision, index_set=classes
    )
    graph.mark_marginal(name)
    logger.debug("Declared %d noisy class scores '%s'", classes.size, name)
    return noisy


# ==============================================================================
# Argmax constraints
# ==============================================================================


def constrain_arg_max(
    graph: ModelGraph,
    chosen,
    scores,
    n_classes: int,
    prefix: str = "activity",
) -> None:
    """
    Constrain the chosen class's score to be strictly larger than every other.

    For every class ``j`` other than ``chosen`` this declares
    ``scores[chosen] - scores[j] > 0``. No constraint compares ``chosen``
    with itself, so one class yields no constraints at all.

    Parameters
    ----------
    graph : ModelGraph
        Open model graph to declare on.
    chosen : int or discrete graph handle
        The winning class. With an ``int`` the skipped index is known at
        build time; with a discrete variable each comparison is declared
        inside a block guarded by ``chosen != j``.
    scores : graph handle, shape (n_classes,)
        Class scores, e.g. from ``compute_class_scores``.
    n_classes : int
        Number of classes.
    prefix : str, default="activity"
        Variable name prefix.
    """
    if isinstance(chosen, numbers.Integral):
        chosen = int(chosen)
        for j in range(n_classes):
            if j == chosen:
                continue
            _constrain_dominates(graph, chosen, j, scores, prefix, f"{chosen}_{j}")
        logger.debug(
            "Constrained class %d to dominate %d others", chosen, n_classes - 1
        )
        return

    for j in range(n_classes):
        is_arg_max = graph.equals(f"{prefix}IsArgMax_{j}", chosen, j)
        with graph.conditional(is_arg_max, negate=True):
            _constrain_dominates(graph, chosen, j, scores, prefix, str(j))


# ------------------------------------------------------------------------------


def _constrain_dominates(graph, chosen, j, scores, prefix, tag):
    diff = graph.difference(
        f"{prefix}ScoreDiff_{tag}",
        graph.element(scores, chosen),
        graph.element(scores, j),
    )
    graph.constrain_positive(f"{prefix}PosDiff_{tag}", diff)


# ------------------------------------------------------------------------------


def constrain_maximum(
    graph: ModelGraph,
    argmax,
    scores,
    n_classes: int,
    prefix: str = "activity",
    current=None,
) -> None:
    """
    Build a multiclass switch on ``argmax``.

    For every candidate class ``k`` a block guarded by ``argmax == k``
    declares ``constrain_arg_max(graph, k, scores)``. The guards partition
    the values of ``argmax``, so exactly one branch applies to any
    assignment.

    Parameters
    ----------
    graph : ModelGraph
        Open model graph to declare on.
    argmax : discrete graph handle
        The class whose score is largest.
    scores : graph handle, shape (n_classes,)
        Class scores.
    n_classes : int
        Number of classes.
    prefix : str, default="activity"
        Variable name prefix.
    current : discrete graph handle, optional
        If given, each branch also constrains ``current == k``, tying a
        second discrete variable (e.g. the current activity or resident) to
        the argmax.
    """
    for k in range(n_classes):
        is_max = graph.equals(f"{prefix}IsMax_{k}", argmax, k)
        with graph.conditional(is_max):
            constrain_arg_max(graph, k, scores, n_classes, prefix)
            if current is not None:
                graph.constrain_equal(f"{prefix}Current_{k}", k, current)
    logger.debug("Built %d-way argmax switch '%s'", n_classes, prefix)
