"""Scalar reverse-mode autodifferentiation."""

from .backward import backward_pass, topological_sort, zero_grad
from .backward_config import BackwardConfig, TraversalOrder, backward_config
from .grad_funcs import check_gradient, grad, value_and_grad
from .graph import (
    Graph,
    add,
    get_current_graph,
    get_default_graph,
    leaf,
    multiply,
    negate,
    power,
    reset_default_graph,
    subtract,
)
from .node import Node

__all__ = [
    # Core classes
    "Node",
    "Graph",

    # Graph construction
    "leaf",
    "add",
    "multiply",
    "negate",
    "power",
    "subtract",
    "get_current_graph",
    "get_default_graph",
    "reset_default_graph",

    # Backward pass
    "backward_pass",
    "topological_sort",
    "zero_grad",
    "BackwardConfig",
    "TraversalOrder",
    "backward_config",

    # Gradient functions
    "grad",
    "value_and_grad",
    "check_gradient",
]
