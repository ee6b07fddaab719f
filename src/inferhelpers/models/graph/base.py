"""Abstract model-graph building interface.

Builders in ``inferhelpers.models.builders`` never touch an inference library
directly. They declare variables, factors and constraints through a
``ModelGraph``, which is passed explicitly to every builder call. Two
backends implement it:

- ``RecordingGraph`` keeps a symbolic record of everything declared, for
  inspection and testing.
- ``NumPyroGraph`` turns the same calls into numpyro sites inside a model
  function.

A graph is a one-shot context manager. Entering it opens the model scope,
leaving it closes the scope for good; calls made outside the scope raise
``ModelScopeError``::

    with RecordingGraph("classifier") as graph:
        scores = compute_class_scores(graph, weights, features, n_classes=3)
"""

import functools
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass

from ...errors import ModelScopeError

logger = logging.getLogger(__name__)

# ==============================================================================
# Index sets
# ==============================================================================


@dataclass(frozen=True)
class IndexSet:
    """A named range ``0 .. size - 1`` that variable arrays are indexed by."""

    name: str
    size: int


# ==============================================================================
# Scope enforcement
# ==============================================================================


def requires_scope(method):
    """Decorate a graph method so it fails unless the model scope is open."""

    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        if not self.is_open:
            raise ModelScopeError(
                f"{type(self).__name__} '{self.name}': {method.__name__}() "
                "called outside an open model scope"
            )
        return method(self, *args, **kwargs)

    return wrapper


# ==============================================================================
# ModelGraph
# ==============================================================================


class ModelGraph(ABC):
    """
    Interface for incrementally declaring a probabilistic model.

    Handles returned by one method (variables, expressions, guards) are only
    meaningful to the graph that produced them.

    Parameters
    ----------
    name : str
        Name of the model, used in log and error messages.
    """

    def __init__(self, name: str = "model"):
        self.name = name
        self._opened = False
        self._closed = False

    # --------------------------------------------------------------------------
    # Model scope
    # --------------------------------------------------------------------------

    @property
    def is_open(self) -> bool:
        return self._opened and not self._closed

    def __enter__(self):
        if self._opened:
            raise ModelScopeError(
                f"Model '{self.name}' has already been opened; create a new "
                "graph for each model definition"
            )
        self._opened = True
        logger.debug("Begin model '%s'", self.name)
        return self

    def __exit__(self, exc_type, exc, tb):
        self._closed = True
        logger.debug("End model '%s'", self.name)
        return False

    # --------------------------------------------------------------------------
    # Declarations
    # --------------------------------------------------------------------------

    @abstractmethod
    def index_set(self, name: str, size: int) -> IndexSet:
        """Declare a named index range."""

    @abstractmethod
    def variable_array(self, name: str, *index_sets, prior=None, obs=None):
        """
        Declare an array of random variables over one or more index sets.

        Parameters
        ----------
        name : str
            Variable name.
        *index_sets : IndexSet
            Outer to inner dimensions.
        prior : belief, optional
            Prior of every element. Uniform Gaussian if omitted.
        obs : array-like, optional
            Observed values.
        """

    @abstractmethod
    def constant(self, name: str, value):
        """Declare a known value."""

    @abstractmethod
    def element(self, array, index):
        """Element ``index`` (an int or a discrete variable) of ``array``."""

    # --------------------------------------------------------------------------
    # Deterministic factors
    # --------------------------------------------------------------------------

    @abstractmethod
    def inner_product(self, name: str, weights, features, index_sets=()):
        """Per-row inner product of ``weights`` with ``features``."""

    @abstractmethod
    def subarray(self, name: str, array, indices, index_sets=()):
        """Gather ``array[..., indices]`` along the last dimension."""

    @abstractmethod
    def multiply(self, name: str, a, b, index_sets=()):
        """Element-wise product, broadcasting over leading dimensions."""

    @abstractmethod
    def sum(self, name: str, array, index_sets=()):
        """Sum over the last dimension."""

    @abstractmethod
    def difference(self, name: str, a, b):
        """``a - b``."""

    @abstractmethod
    def equals(self, name: str, a, b):
        """Boolean ``a == b``, usable as a guard."""

    # --------------------------------------------------------------------------
    # Stochastic factors
    # --------------------------------------------------------------------------

    @abstractmethod
    def gaussian_from_mean_and_precision(
        self, name: str, mean, precision, index_set=None, obs=None
    ):
        """Declare ``Normal(mean, 1 / precision)`` over ``index_set``."""

    @abstractmethod
    def categorical(self, name: str, probs, obs=None):
        """Declare a discrete variable over ``range(len(probs))``."""

    # --------------------------------------------------------------------------
    # Conditionals and constraints
    # --------------------------------------------------------------------------

    @abstractmethod
    def conditional(self, guard, negate: bool = False):
        """
        Context manager for a guarded block.

        Everything declared inside only applies when ``guard`` holds (or does
        not hold, if ``negate``). The block is closed on every exit path.
        """

    @abstractmethod
    def constrain_positive(self, name: str, expression):
        """Constrain ``expression > 0`` (strict)."""

    @abstractmethod
    def constrain_equal(self, name: str, a, b):
        """Constrain ``a == b``."""

    @abstractmethod
    def mark_marginal(self, name: str) -> None:
        """Tag a variable for marginal query by the inference engine."""
