"""
Convergence, sparsity and normalization diagnostics for belief arrays.

An external iterative inference loop calls ``max_diff`` between successive
iterations to decide when to stop, and reports ``sparsity`` or ``normalize``
on weight posteriors. None of these functions run inference themselves.

Null policy
-----------
Reductions to a statistic (``max_diff``, ``sparsity``, ``row_sparsity``)
raise ``InvalidOperationError`` when handed ``None``. ``normalize`` is a
shape-preserving transform and, like ``inferhelpers.core.algebra``, maps
``None`` to ``None``.
"""

import logging
import math
from typing import Callable, List, Optional, Union

import numpy as np
from rich.console import Console
from rich.table import Table

from ..config import DiagnosticsConfig
from ..config.enums import DiffMetric
from ..errors import InvalidOperationError
from ..stats.distributions import Gaussian
from ..stats.divergences import get_metric, mean_abs_diff
from .algebra import copy, get_means
from .arrays import is_nested, require_same_length

logger = logging.getLogger(__name__)

Metric = Callable[[object, object], float]

# ==============================================================================
# Convergence
# ==============================================================================


def max_diff(a, b, metric: Union[Metric, DiffMetric, str] = mean_abs_diff):
    """
    Largest element-wise difference between two belief arrays.

    Parameters
    ----------
    a, b : nested list of beliefs
        Arrays of the same shape, e.g. the same beliefs at two consecutive
        iterations.
    metric : Callable or str, default=mean_abs_diff
        ``metric(a_i, b_i) -> float``, or one of the keywords "mean", "std",
        "kl".

    Returns
    -------
    float
        The maximum of ``metric`` over all leaves; 0.0 for empty arrays.

    Raises
    ------
    InvalidOperationError
        If either array is None, or lengths differ at any level.
    """
    if not callable(metric):
        metric = get_metric(metric)
    return _max_diff(a, b, metric)


def _max_diff(a, b, metric: Metric) -> float:
    require_same_length(a, b, "Arrays passed to max_diff")
    diff = 0.0
    for x, y in zip(a, b):
        if is_nested(x) or is_nested(y):
            if not (is_nested(x) and is_nested(y)):
                raise InvalidOperationError(
                    "Arrays passed to max_diff have different ranks"
                )
            value = _max_diff(x, y, metric)
        else:
            if x is None or y is None:
                raise InvalidOperationError(
                    "Arrays passed to max_diff must not contain None"
                )
            value = metric(x, y)
        # nan poisons the whole comparison
        if math.isnan(value):
            return value
        diff = max(diff, value)
    return diff


# ==============================================================================
# Sparsity
# ==============================================================================


def sparsity(row, threshold: Optional[float] = None) -> float:
    """
    Fraction of a row's beliefs whose mean is effectively zero.

    With ``norm = sum(mean_i ** 2)`` and ``cutoff = threshold * norm``, an
    element counts as zeroed out when ``|mean_i| <= cutoff``.

    Parameters
    ----------
    row : list of beliefs
        A one-dimensional belief array.
    threshold : float, optional
        Norm-relative cutoff. Defaults to
        ``DiagnosticsConfig().sparsity_threshold``.

    Returns
    -------
    float
        Sparsity in [0, 1].

    Raises
    ------
    InvalidOperationError
        If ``row`` is None or empty.
    """
    if row is None:
        raise InvalidOperationError("Cannot compute sparsity of None")
    if len(row) == 0:
        raise InvalidOperationError("Cannot compute sparsity of an empty row")
    if threshold is None:
        threshold = DiagnosticsConfig().sparsity_threshold
    means = np.asarray(get_means(row), dtype=np.float64)
    norm = np.sum(means**2)
    cutoff = threshold * norm
    return float(np.mean(np.abs(means) <= cutoff))


# ------------------------------------------------------------------------------


def row_sparsity(array, threshold: Optional[float] = None) -> List[float]:
    """``sparsity`` of every row of a two-dimensional belief array."""
    if array is None:
        raise InvalidOperationError("Cannot compute sparsity of None")
    return [sparsity(row, threshold) for row in array]


# ==============================================================================
# Normalization
# ==============================================================================


def scale_gaussian(belief: Gaussian, norm: float) -> Gaussian:
    """Rescale a Gaussian: mean -> mean / norm, std -> std / norm."""
    std = math.sqrt(belief.get_variance()) / norm
    return Gaussian.from_mean_and_variance(belief.get_mean() / norm, std**2)


# ------------------------------------------------------------------------------


def normalize(
    array,
    scale: Callable[[object, float], object] = scale_gaussian,
):
    """
    Rescale every row of a two-dimensional belief array by its norm.

    For each row, ``norm = sum(mean_i ** 2)`` and every element is replaced
    by ``scale(element, norm)``. Note that ``norm`` is the sum of squared
    means, not its square root, so the rescaling is quadratic in the
    magnitude of the row.

    Parameters
    ----------
    array : nested list of beliefs, rank 2
        Rows to rescale, e.g. one weight vector posterior per class.
    scale : Callable, default=scale_gaussian
        ``scale(belief, norm) -> belief``.

    Returns
    -------
    nested list of beliefs or None
        None if ``array`` is None; rows that are None stay None.

    Raises
    ------
    InvalidOperationError
        If a row has zero norm.
    """
    if array is None:
        return None
    normalized = []
    for i, row in enumerate(array):
        if row is None:
            normalized.append(None)
            continue
        norm = float(np.sum(np.asarray(get_means(row), dtype=np.float64) ** 2))
        if norm == 0:
            raise InvalidOperationError(f"Row {i} has zero norm")
        normalized.append([scale(belief, norm) for belief in row])
    return normalized


# ==============================================================================
# Convergence tracking
# ==============================================================================


class ConvergenceTracker:
    """
    Track how much a belief array changes between iterations.

    The tracker keeps a copy of the last array it was given. Each call to
    ``update`` returns ``max_diff`` against that copy and records it. The
    caller owns the loop and decides what to do with ``converged``.

    Parameters
    ----------
    config : DiagnosticsConfig, optional
        Tolerance, metric and history length. Defaults to
        ``DiagnosticsConfig()``.

    Examples
    --------
    >>> tracker = ConvergenceTracker(DiagnosticsConfig(tolerance=1e-3))
    >>> while not tracker.converged:
    ...     beliefs = engine.step()
    ...     tracker.update(beliefs)
    """

    def __init__(self, config: Optional[DiagnosticsConfig] = None):
        self.config = config or DiagnosticsConfig()
        self.metric = get_metric(self.config.metric)
        self.history: List[float] = []
        self.iteration = 0
        self._previous = None

    # --------------------------------------------------------------------------

    def update(self, beliefs) -> float:
        """
        Record a new iteration's beliefs.

        Returns
        -------
        float
            ``max_diff`` against the previous beliefs; ``inf`` on the first
            call, when there is nothing to compare against.
        """
        self.iteration += 1
        if self._previous is None:
            diff = math.inf
        else:
            diff = max_diff(self._previous, beliefs, self.metric)
            self.history.append(diff)
            if (
                self.config.max_history is not None
                and len(self.history) > self.config.max_history
            ):
                del self.history[: -self.config.max_history]
        self._previous = copy(beliefs)
        logger.debug("Iteration %d: max diff %g", self.iteration, diff)
        return diff

    # --------------------------------------------------------------------------

    @property
    def converged(self) -> bool:
        """True once the latest diff is at or below the tolerance."""
        return bool(self.history) and self.history[-1] <= self.config.tolerance

    # --------------------------------------------------------------------------

    def reset(self) -> None:
        self.history = []
        self._previous = None
        self.iteration = 0

    # --------------------------------------------------------------------------

    def report(self, console: Optional[Console] = None) -> Table:
        """Print the diff history as a rich table and return the table."""
        table = Table(title=f"Convergence ({self.config.metric.value} diff)")
        table.add_column("Iteration", justify="right")
        table.add_column("Max diff", justify="right")
        first = self.iteration - len(self.history) + 1
        for offset, diff in enumerate(self.history):
            table.add_row(str(first + offset), f"{diff:.3e}")
        (console or Console()).print(table)
        return table
