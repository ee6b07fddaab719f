"""
Exception hierarchy for inferhelpers.

Precondition failures (mismatched array lengths, missing data handed to a
reduction, unknown keywords) are raised as ``InvalidOperationError``, which is
also a ``ValueError`` so existing ``except ValueError`` handlers keep working.
Builder calls made outside an open model scope raise ``ModelScopeError``.
"""

# ==============================================================================
# Exceptions
# ==============================================================================


class InferHelpersError(Exception):
    """Base class for all errors raised by inferhelpers."""


# ------------------------------------------------------------------------------


class InvalidOperationError(InferHelpersError, ValueError):
    """An operation was called with arguments that violate its contract."""


# ------------------------------------------------------------------------------


class ModelScopeError(InferHelpersError, RuntimeError):
    """A model-graph call was made while no model scope was open."""
