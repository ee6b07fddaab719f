# tests/test_classifier.py
"""
Tests for the class score and argmax constraint builders, on RecordingGraph
"""

import pytest

from inferhelpers.config import ClassifierConfig
from inferhelpers.errors import ModelScopeError
from inferhelpers.models import (
    RecordingGraph,
    SparseFeatures,
    compute_class_scores,
    compute_sparse_class_scores,
    constrain_arg_max,
    constrain_maximum,
)

# ------------------------------------------------------------------------------
# Test fixtures
# ------------------------------------------------------------------------------


def _declare_scores(graph, n_classes):
    classes = graph.index_set("class", n_classes)
    return graph.variable_array("score", classes)


def _pairs(constraints):
    """(chosen, other) index pairs of recorded dominance constraints."""
    pairs = []
    for constraint in constraints:
        diff = constraint.inputs[0]
        left, right = diff.inputs
        pairs.append((left.inputs[1].value, right.inputs[1].value))
    return pairs


# ------------------------------------------------------------------------------
# Class scores
# ------------------------------------------------------------------------------


def test_dense_scores():
    with RecordingGraph() as graph:
        classes = graph.index_set("class", 3)
        features = graph.index_set("feature", 4)
        w = graph.variable_array("w", classes, features)
        x = graph.variable_array("x", features)
        noisy = compute_class_scores(graph, w, x, n_classes=3)

    score = graph.nodes["activityScore"]
    assert score.op == "inner_product"
    assert score.inputs == (w, x)
    assert noisy.name == "activityNoisyScore"
    assert noisy.op == "gaussian"
    assert noisy.inputs[0] is score
    # Default noise precision comes from the config
    assert noisy.inputs[1].value == 1.0
    assert noisy.index_sets[0].size == 3
    assert graph.marginals == ["activityNoisyScore"]


def test_factorized_scores_and_prefix():
    config = ClassifierConfig(prefix="resident", factorized_scores=True)
    with RecordingGraph() as graph:
        classes = graph.index_set("class", 2)
        w = graph.variable_array("w", classes, graph.index_set("f", 3))
        x = graph.constant("x", [1.0, 0.0, 2.0])
        compute_class_scores(graph, w, x, 2, noise_precision=10.0, config=config)

    assert graph.nodes["residentProducts"].op == "multiply"
    assert graph.nodes["residentScore"].op == "sum"
    assert graph.nodes["residentNoisyScore"].inputs[1].value == 10.0
    assert "residentClass" in graph.index_sets


def test_sparse_scores_dispatch():
    with RecordingGraph() as graph:
        classes = graph.index_set("class", 3)
        w = graph.variable_array("w", classes, graph.index_set("feature", 100))
        active = graph.index_set("active", 2)
        features = SparseFeatures([0.5, 2.0], [7, 42], active)
        compute_class_scores(graph, w, features, n_classes=3)

    sparse_weights = graph.nodes["activitySparseWeights"]
    assert sparse_weights.op == "subarray"
    assert sparse_weights.inputs[0] is w
    assert sparse_weights.inputs[1].value == [7, 42]
    assert active in sparse_weights.index_sets
    product = graph.nodes["activityProduct"]
    assert product.inputs[1] is sparse_weights
    assert graph.nodes["activityScore"].inputs == (product,)
    assert graph.marginals == ["activityNoisyScore"]


def test_sparse_scores_direct_call():
    with RecordingGraph() as graph:
        w = graph.variable_array("w")
        features = SparseFeatures([1.0], [0], graph.index_set("active", 1))
        noisy = compute_sparse_class_scores(graph, w, features, 4)
    assert noisy.index_sets[0].size == 4


def test_two_classifiers_need_distinct_prefixes():
    with RecordingGraph() as graph:
        w = graph.variable_array("w")
        x = graph.variable_array("x")
        compute_class_scores(graph, w, x, 2, config=ClassifierConfig(prefix="a"))
        compute_class_scores(graph, w, x, 2, config=ClassifierConfig(prefix="b"))
    assert graph.marginals == ["aNoisyScore", "bNoisyScore"]


def test_builder_outside_scope_raises():
    graph = RecordingGraph()
    with pytest.raises(ModelScopeError):
        compute_class_scores(graph, None, None, 2)


# ------------------------------------------------------------------------------
# constrain_arg_max
# ------------------------------------------------------------------------------


@pytest.mark.parametrize("n_classes", [2, 3, 5])
def test_arg_max_constraint_count(n_classes):
    chosen = n_classes - 1
    with RecordingGraph() as graph:
        scores = _declare_scores(graph, n_classes)
        constrain_arg_max(graph, chosen, scores, n_classes)

    assert len(graph.constraints) == n_classes - 1
    pairs = _pairs(graph.constraints)
    # Every other class appears exactly once, the chosen class never
    assert sorted(other for _, other in pairs) == [
        j for j in range(n_classes) if j != chosen
    ]
    assert all(left == chosen for left, _ in pairs)
    assert all(c.kind == "positive" for c in graph.constraints)


def test_arg_max_describes_strict_inequalities():
    with RecordingGraph() as graph:
        scores = _declare_scores(graph, 3)
        constrain_arg_max(graph, 1, scores, 3)
    assert [c.describe() for c in graph.constraints] == [
        "score[1] - score[0] > 0",
        "score[1] - score[2] > 0",
    ]


def test_single_class_yields_no_constraints():
    with RecordingGraph() as graph:
        scores = _declare_scores(graph, 1)
        constrain_arg_max(graph, 0, scores, 1)
        constrain_maximum(graph, graph.categorical("k", [1.0]), scores, 1)
    assert graph.constraints == []
    assert len(graph.branches) == 1


def test_arg_max_with_discrete_choice():
    with RecordingGraph() as graph:
        scores = _declare_scores(graph, 3)
        label = graph.categorical("label", [1 / 3] * 3)
        constrain_arg_max(graph, label, scores, 3)

    assert len(graph.constraints) == 3
    for j, constraint in enumerate(graph.constraints):
        (guard,) = constraint.guards
        assert guard.negate
        assert guard.describe() == f"not (label == {j})"
        assert constraint.describe() == f"score[label] - score[{j}] > 0"


# ------------------------------------------------------------------------------
# constrain_maximum
# ------------------------------------------------------------------------------


def test_maximum_branches_partition_argmax():
    n_classes = 4
    with RecordingGraph() as graph:
        scores = _declare_scores(graph, n_classes)
        argmax = graph.categorical("argmax", [0.25] * n_classes)
        constrain_maximum(graph, argmax, scores, n_classes)

    assert len(graph.branches) == n_classes
    assert graph.unconditional_constraints == []
    for k, branch in enumerate(graph.branches):
        assert branch.guard.describe() == f"argmax == {k}"
        assert not branch.guard.negate
        assert len(branch.constraints) == n_classes - 1
        assert all(left == k for left, _ in _pairs(branch.constraints))
    assert len(graph.constraints) == n_classes * (n_classes - 1)


def test_maximum_links_current():
    with RecordingGraph() as graph:
        scores = _declare_scores(graph, 3)
        argmax = graph.categorical("argmax", [1 / 3] * 3)
        current = graph.categorical("current", [1 / 3] * 3)
        constrain_maximum(
            graph, argmax, scores, 3, prefix="resident", current=current
        )

    for k, branch in enumerate(graph.branches):
        equalities = [c for c in branch.constraints if c.kind == "equal"]
        (link,) = equalities
        assert link.name == f"residentCurrent_{k}"
        assert link.describe() == f"{k} == current"
        assert link.guards == (branch.guard,)
