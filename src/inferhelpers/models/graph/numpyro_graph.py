"""NumPyro backend for the model-graph interface.

``NumPyroGraph`` is opened inside a numpyro model function. Each declaration
becomes a numpyro site:

- index sets become ``numpyro.plate``;
- stochastic factors become ``numpyro.sample``;
- named deterministic factors become ``numpyro.deterministic``;
- constraints become ``numpyro.factor`` terms that are 0 when satisfied;
- conditional blocks become ``numpyro.handlers.mask``, so a factor declared
  inside a block only contributes when the guard holds.

Examples
--------
>>> def model(weights, features, label):
...     with NumPyroGraph("classifier") as graph:
...         scores = compute_class_scores(graph, weights, features, n_classes=3)
...         chosen = graph.categorical("label", jnp.ones(3) / 3, obs=label)
...         constrain_arg_max(graph, chosen, scores, n_classes=3)
"""

import logging
from contextlib import ExitStack, contextmanager
from typing import List, Optional

import jax
import jax.numpy as jnp
import numpyro
import numpyro.distributions as dist
from numpyro import handlers

from ...config import ConstraintMode, GraphConfig
from ...stats.distributions import Gaussian
from ...utils.core import to_numpyro
from .base import IndexSet, ModelGraph, requires_scope

logger = logging.getLogger(__name__)

# ==============================================================================
# NumPyroGraph
# ==============================================================================


class NumPyroGraph(ModelGraph):
    """
    Model graph that declares numpyro sites.

    Parameters
    ----------
    name : str
        Model name, used in log and error messages.
    config : GraphConfig, optional
        How inequality constraints are scored. Defaults to hard constraints.

    Attributes
    ----------
    query_sites : List[str]
        Site names tagged with ``mark_marginal``, for the caller to pass on
        to whatever inference routine it runs.
    """

    def __init__(self, name: str = "model", config: Optional[GraphConfig] = None):
        super().__init__(name)
        self.config = config or GraphConfig()
        self.query_sites: List[str] = []

    # --------------------------------------------------------------------------
    # Declarations
    # --------------------------------------------------------------------------

    @requires_scope
    def index_set(self, name: str, size: int) -> IndexSet:
        return IndexSet(name, int(size))

    @requires_scope
    def variable_array(self, name: str, *index_sets, prior=None, obs=None):
        fn = to_numpyro(prior if prior is not None else Gaussian.uniform())
        with ExitStack() as stack:
            # Outer index set maps to the leftmost batch dimension
            n_dims = len(index_sets)
            for i, index_set in enumerate(index_sets):
                stack.enter_context(
                    numpyro.plate(index_set.name, index_set.size, dim=i - n_dims)
                )
            return numpyro.sample(name, fn, obs=obs)

    @requires_scope
    def constant(self, name: str, value):
        return jnp.asarray(value)

    @requires_scope
    def element(self, array, index):
        return jnp.asarray(array)[..., index]

    # --------------------------------------------------------------------------
    # Deterministic factors
    # --------------------------------------------------------------------------

    @requires_scope
    def inner_product(self, name: str, weights, features, index_sets=()):
        return numpyro.deterministic(
            name, jnp.sum(jnp.asarray(weights) * jnp.asarray(features), axis=-1)
        )

    @requires_scope
    def subarray(self, name: str, array, indices, index_sets=()):
        return numpyro.deterministic(
            name, jnp.take(jnp.asarray(array), jnp.asarray(indices), axis=-1)
        )

    @requires_scope
    def multiply(self, name: str, a, b, index_sets=()):
        return numpyro.deterministic(name, jnp.asarray(a) * jnp.asarray(b))

    @requires_scope
    def sum(self, name: str, array, index_sets=()):
        return numpyro.deterministic(name, jnp.sum(jnp.asarray(array), axis=-1))

    @requires_scope
    def difference(self, name: str, a, b):
        return numpyro.deterministic(name, jnp.asarray(a) - jnp.asarray(b))

    @requires_scope
    def equals(self, name: str, a, b):
        return jnp.equal(a, b)

    # --------------------------------------------------------------------------
    # Stochastic factors
    # --------------------------------------------------------------------------

    @requires_scope
    def gaussian_from_mean_and_precision(
        self, name: str, mean, precision, index_set=None, obs=None
    ):
        fn = dist.Normal(mean, 1.0 / jnp.sqrt(precision))
        if index_set is None:
            return numpyro.sample(name, fn, obs=obs)
        with numpyro.plate(index_set.name, index_set.size, dim=-1):
            return numpyro.sample(name, fn, obs=obs)

    @requires_scope
    def categorical(self, name: str, probs, obs=None):
        if obs is not None:
            obs = jnp.asarray(obs)
        return numpyro.sample(
            name, dist.Categorical(probs=jnp.asarray(probs)), obs=obs
        )

    # --------------------------------------------------------------------------
    # Conditionals and constraints
    # --------------------------------------------------------------------------

    @requires_scope
    @contextmanager
    def conditional(self, guard, negate: bool = False):
        guard = jnp.asarray(guard, dtype=bool)
        mask = jnp.logical_not(guard) if negate else guard
        with handlers.mask(mask=mask):
            yield

    @requires_scope
    def constrain_positive(self, name: str, expression):
        expression = jnp.asarray(expression)
        if self.config.constraint_mode is ConstraintMode.SOFT:
            log_factor = jax.nn.log_sigmoid(expression / self.config.softness)
        else:
            log_factor = jnp.where(expression > 0, 0.0, -jnp.inf)
        numpyro.factor(name, log_factor)

    @requires_scope
    def constrain_equal(self, name: str, a, b):
        numpyro.factor(name, jnp.where(jnp.equal(a, b), 0.0, -jnp.inf))

    @requires_scope
    def mark_marginal(self, name: str) -> None:
        self.query_sites.append(name)
        logger.debug("%s: marked '%s' for marginal query", self.name, name)
