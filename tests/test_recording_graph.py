# tests/test_recording_graph.py
"""
Tests for the symbolic RecordingGraph backend and the model scope
"""

import pytest

from inferhelpers.errors import InvalidOperationError, ModelScopeError
from inferhelpers.models.graph import ModelGraph, RecordingGraph
from inferhelpers.stats import Gaussian

# ------------------------------------------------------------------------------
# Model scope
# ------------------------------------------------------------------------------


def test_calls_outside_scope_raise():
    graph = RecordingGraph("m")
    with pytest.raises(ModelScopeError):
        graph.index_set("k", 3)

    with graph:
        graph.index_set("k", 3)

    # The scope is closed for good once exited
    with pytest.raises(ModelScopeError):
        graph.variable_array("w")
    assert not graph.is_open


def test_graph_cannot_be_reopened():
    graph = RecordingGraph()
    with graph:
        pass
    with pytest.raises(ModelScopeError):
        with graph:
            pass


def test_scope_closes_on_error():
    graph = RecordingGraph()
    with pytest.raises(RuntimeError):
        with graph:
            raise RuntimeError("boom")
    assert not graph.is_open


def test_model_graph_is_abstract():
    with pytest.raises(TypeError):
        ModelGraph()


# ------------------------------------------------------------------------------
# Declarations
# ------------------------------------------------------------------------------


def test_variables_and_factors_are_recorded():
    prior = Gaussian(0.0, 1.0)
    with RecordingGraph() as graph:
        classes = graph.index_set("class", 2)
        features = graph.index_set("feature", 3)
        w = graph.variable_array("w", classes, features, prior=prior)
        x = graph.constant("x", [1.0, 2.0, 3.0])
        score = graph.inner_product("score", w, x, index_sets=(classes,))

    assert list(graph.nodes) == ["w", "x", "score"]
    assert w.prior == prior
    assert w.index_sets == (classes, features)
    assert score.op == "inner_product"
    assert score.inputs == (w, x)


def test_index_set_redeclaration():
    with RecordingGraph() as graph:
        first = graph.index_set("k", 3)
        assert graph.index_set("k", 3) is first
        with pytest.raises(InvalidOperationError):
            graph.index_set("k", 4)


def test_duplicate_names_raise():
    with RecordingGraph() as graph:
        a = graph.variable_array("a")
        with pytest.raises(InvalidOperationError):
            graph.constant("a", 1.0)
        graph.constrain_positive("c", a)
        with pytest.raises(InvalidOperationError):
            graph.constrain_equal("c", a, 0)


def test_mark_marginal():
    with RecordingGraph() as graph:
        graph.variable_array("a")
        graph.mark_marginal("a")
        with pytest.raises(InvalidOperationError):
            graph.mark_marginal("b")
    assert graph.marginals == ["a"]


def test_element_and_difference_describe():
    with RecordingGraph() as graph:
        s = graph.variable_array("s", graph.index_set("k", 2))
        diff = graph.difference("d", graph.element(s, 1), graph.element(s, 0))
        constraint = graph.constrain_positive("p", diff)
    assert constraint.describe() == "s[1] - s[0] > 0"
    assert constraint.guards == ()


# ------------------------------------------------------------------------------
# Conditional blocks
# ------------------------------------------------------------------------------


def test_conditional_records_guards_and_nesting():
    with RecordingGraph() as graph:
        k = graph.categorical("k", [0.5, 0.5])
        x = graph.variable_array("x")
        outer = graph.equals("is0", k, 0)
        with graph.conditional(outer) as branch:
            inner = graph.equals("is1", k, 1)
            with graph.conditional(inner, negate=True) as nested:
                c = graph.constrain_positive("c", x)
        after = graph.constrain_positive("after", x)

    assert [g.describe() for g in c.guards] == ["k == 0", "not (k == 1)"]
    assert nested.parent is branch
    assert nested.depth == 1
    assert nested.constraints == [c]
    assert branch.constraints == []
    assert after.guards == ()
    assert graph.unconditional_constraints == [after]


def test_conditional_closes_on_exception():
    with RecordingGraph() as graph:
        guard = graph.equals("g", graph.variable_array("v"), 1)
        with pytest.raises(KeyError):
            with graph.conditional(guard):
                raise KeyError("early exit")
        c = graph.constrain_positive("c", 1.0)
    assert c.guards == ()
