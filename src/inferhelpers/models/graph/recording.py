"""Symbolic model graph that records declarations instead of executing them.

``RecordingGraph`` is the reference backend for inspecting what a builder
declares: every variable and factor becomes a ``Node``, every constraint a
``Constraint`` carrying the guards it was declared under, and every
conditional block a ``Branch``.

Examples
--------
>>> from inferhelpers.models.builders import constrain_arg_max
>>> with RecordingGraph() as graph:
...     classes = graph.index_set("k", 3)
...     scores = graph.variable_array("score", classes)
...     constrain_arg_max(graph, 1, scores, n_classes=3)
>>> [c.describe() for c in graph.constraints]
['score[1] - score[0] > 0', 'score[1] - score[2] > 0']
"""

import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from ...errors import InvalidOperationError
from .base import IndexSet, ModelGraph, requires_scope

logger = logging.getLogger(__name__)

# ==============================================================================
# Graph records
# ==============================================================================


@dataclass(frozen=True, eq=False)
class Node:
    """
    A symbolic value in a recorded graph.

    Attributes
    ----------
    name : str
        Declared name, or a derived label for unnamed nodes.
    op : str
        Operation that produced the node ("variable", "constant", "element",
        "inner_product", "subarray", "multiply", "sum", "difference",
        "equals", "gaussian", "categorical").
    inputs : tuple
        Parent nodes.
    value : Any
        Constant value or observation, if any.
    index_sets : tuple of IndexSet
        Index sets the node ranges over.
    prior : belief, optional
        Prior of a declared variable array.
    """

    name: str
    op: str
    inputs: Tuple["Node", ...] = ()
    value: Any = None
    index_sets: Tuple[IndexSet, ...] = ()
    prior: Any = None

    def describe(self) -> str:
        """Human-readable expression for this node."""
        if self.op == "element":
            array, index = self.inputs
            return f"{array.describe()}[{index.describe()}]"
        if self.op == "difference":
            a, b = self.inputs
            return f"{a.describe()} - {b.describe()}"
        if self.op == "equals":
            a, b = self.inputs
            return f"{a.describe()} == {b.describe()}"
        return self.name


# ------------------------------------------------------------------------------


@dataclass(frozen=True)
class Guard:
    """Condition of a conditional block."""

    condition: Node
    negate: bool = False

    def describe(self) -> str:
        text = self.condition.describe()
        return f"not ({text})" if self.negate else text


# ------------------------------------------------------------------------------


@dataclass(frozen=True)
class Constraint:
    """
    A boolean constraint together with the guards it was declared under.

    ``kind`` is "positive" (``inputs[0] > 0``) or "equal"
    (``inputs[0] == inputs[1]``).
    """

    name: str
    kind: str
    inputs: Tuple[Node, ...]
    guards: Tuple[Guard, ...] = ()

    def describe(self) -> str:
        if self.kind == "positive":
            return f"{self.inputs[0].describe()} > 0"
        a, b = self.inputs
        return f"{a.describe()} == {b.describe()}"


# ------------------------------------------------------------------------------


@dataclass
class Branch:
    """A conditional block and the constraints declared directly inside it."""

    guard: Guard
    parent: Optional["Branch"] = None
    constraints: List[Constraint] = field(default_factory=list)

    @property
    def depth(self) -> int:
        return 0 if self.parent is None else self.parent.depth + 1


# ==============================================================================
# RecordingGraph
# ==============================================================================


class RecordingGraph(ModelGraph):
    """
    Model graph that records a declarative description of the model.

    Attributes
    ----------
    nodes : Dict[str, Node]
        Named nodes in declaration order.
    index_sets : Dict[str, IndexSet]
        Declared index sets.
    constraints : List[Constraint]
        All constraints in declaration order.
    branches : List[Branch]
        All conditional blocks in the order they were opened.
    marginals : List[str]
        Names tagged for marginal query.
    """

    def __init__(self, name: str = "model"):
        super().__init__(name)
        self.nodes: Dict[str, Node] = {}
        self.index_sets: Dict[str, IndexSet] = {}
        self.constraints: List[Constraint] = []
        self.branches: List[Branch] = []
        self.marginals: List[str] = []
        self._constraint_names = set()
        self._open_branches: List[Branch] = []

    # --------------------------------------------------------------------------
    # Helpers
    # --------------------------------------------------------------------------

    def _register(self, node: Node) -> Node:
        self._claim_name(node.name)
        self.nodes[node.name] = node
        logger.debug("%s: declared %s '%s'", self.name, node.op, node.name)
        return node

    def _claim_name(self, name: str) -> None:
        if name in self.nodes or name in self._constraint_names:
            raise InvalidOperationError(
                f"Name '{name}' is already declared in model '{self.name}'"
            )

    @staticmethod
    def _as_node(value) -> Node:
        if isinstance(value, Node):
            return value
        return Node(str(value), "constant", value=value)

    @property
    def current_guards(self) -> Tuple[Guard, ...]:
        return tuple(branch.guard for branch in self._open_branches)

    @property
    def unconditional_constraints(self) -> List[Constraint]:
        return [c for c in self.constraints if not c.guards]

    # --------------------------------------------------------------------------
    # Declarations
    # --------------------------------------------------------------------------

    @requires_scope
    def index_set(self, name: str, size: int) -> IndexSet:
        existing = self.index_sets.get(name)
        if existing is not None:
            if existing.size != size:
                raise InvalidOperationError(
                    f"Index set '{name}' already declared with size "
                    f"{existing.size}, not {size}"
                )
            return existing
        index_set = IndexSet(name, int(size))
        self.index_sets[name] = index_set
        return index_set

    @requires_scope
    def variable_array(self, name: str, *index_sets, prior=None, obs=None):
        node = Node(
            name,
            "variable",
            value=obs,
            index_sets=tuple(index_sets),
            prior=prior,
        )
        return self._register(node)

    @requires_scope
    def constant(self, name: str, value):
        return self._register(Node(name, "constant", value=value))

    @requires_scope
    def element(self, array, index):
        array, index = self._as_node(array), self._as_node(index)
        label = f"{array.name}[{index.describe()}]"
        return Node(label, "element", inputs=(array, index))

    # --------------------------------------------------------------------------
    # Deterministic factors
    # --------------------------------------------------------------------------

    @requires_scope
    def inner_product(self, name: str, weights, features, index_sets=()):
        return self._register(
            Node(
                name,
                "inner_product",
                inputs=(self._as_node(weights), self._as_node(features)),
                index_sets=tuple(index_sets),
            )
        )

    @requires_scope
    def subarray(self, name: str, array, indices, index_sets=()):
        return self._register(
            Node(
                name,
                "subarray",
                inputs=(self._as_node(array), self._as_node(indices)),
                index_sets=tuple(index_sets),
            )
        )

    @requires_scope
    def multiply(self, name: str, a, b, index_sets=()):
        return self._register(
            Node(
                name,
                "multiply",
                inputs=(self._as_node(a), self._as_node(b)),
                index_sets=tuple(index_sets),
            )
        )

    @requires_scope
    def sum(self, name: str, array, index_sets=()):
        return self._register(
            Node(
                name,
                "sum",
                inputs=(self._as_node(array),),
                index_sets=tuple(index_sets),
            )
        )

    @requires_scope
    def difference(self, name: str, a, b):
        return self._register(
            Node(name, "difference", inputs=(self._as_node(a), self._as_node(b)))
        )

    @requires_scope
    def equals(self, name: str, a, b):
        return self._register(
            Node(name, "equals", inputs=(self._as_node(a), self._as_node(b)))
        )

    # --------------------------------------------------------------------------
    # Stochastic factors
    # --------------------------------------------------------------------------

    @requires_scope
    def gaussian_from_mean_and_precision(
        self, name: str, mean, precision, index_set=None, obs=None
    ):
        return self._register(
            Node(
                name,
                "gaussian",
                inputs=(self._as_node(mean), self._as_node(precision)),
                value=obs,
                index_sets=() if index_set is None else (index_set,),
            )
        )

    @requires_scope
    def categorical(self, name: str, probs, obs=None):
        return self._register(
            Node(
                name,
                "categorical",
                inputs=(self._as_node(tuple(probs)),),
                value=obs,
            )
        )

    # --------------------------------------------------------------------------
    # Conditionals and constraints
    # --------------------------------------------------------------------------

    @requires_scope
    @contextmanager
    def conditional(self, guard, negate: bool = False):
        parent = self._open_branches[-1] if self._open_branches else None
        branch = Branch(Guard(self._as_node(guard), negate), parent)
        self.branches.append(branch)
        self._open_branches.append(branch)
        logger.debug("%s: open branch %s", self.name, branch.guard.describe())
        try:
            yield branch
        finally:
            self._open_branches.pop()

    def _add_constraint(self, constraint: Constraint) -> Constraint:
        self._claim_name(constraint.name)
        self._constraint_names.add(constraint.name)
        self.constraints.append(constraint)
        if self._open_branches:
            self._open_branches[-1].constraints.append(constraint)
        logger.debug("%s: constrain %s", self.name, constraint.describe())
        return constraint

    @requires_scope
    def constrain_positive(self, name: str, expression):
        return self._add_constraint(
            Constraint(
                name,
                "positive",
                (self._as_node(expression),),
                self.current_guards,
            )
        )

    @requires_scope
    def constrain_equal(self, name: str, a, b):
        return self._add_constraint(
            Constraint(
                name,
                "equal",
                (self._as_node(a), self._as_node(b)),
                self.current_guards,
            )
        )

    @requires_scope
    def mark_marginal(self, name: str) -> None:
        if name not in self.nodes:
            raise InvalidOperationError(
                f"Cannot query unknown variable '{name}'"
            )
        self.marginals.append(name)
