"""Model-graph building interface and its backends."""

from .base import IndexSet, ModelGraph, requires_scope
from .recording import Branch, Constraint, Guard, Node, RecordingGraph
from .numpyro_graph import NumPyroGraph

__all__ = [
    "IndexSet",
    "ModelGraph",
    "requires_scope",
    # Recording backend
    "RecordingGraph",
    "Node",
    "Guard",
    "Constraint",
    "Branch",
    # NumPyro backend
    "NumPyroGraph",
]
