# MIT License
# See LICENSE file in the project root for full license text.
"""
ScalarGrad: scalar reverse-mode automatic differentiation.

Nodes hold eagerly evaluated float64 values and are owned by a Graph arena.
A single backward pass in topological order fills in the gradient of an
output with respect to every node it depends on.
"""

__version__ = "0.1.0"

from .autodiff import (
    BackwardConfig,
    Graph,
    Node,
    TraversalOrder,
    add,
    backward_config,
    backward_pass,
    check_gradient,
    get_current_graph,
    get_default_graph,
    grad,
    leaf,
    multiply,
    negate,
    power,
    reset_default_graph,
    subtract,
    topological_sort,
    value_and_grad,
    zero_grad,
)
from .core import (
    DetachedNodeError,
    GraphMismatchError,
    Operation,
    OpType,
    PrecisionConfig,
    PrecisionMode,
    ScalarGradError,
    precision_context,
)
from .utils import configure_logging, get_logger

__all__ = [
    # Version info
    "__version__",
    # Graph and nodes
    "Graph",
    "Node",
    "leaf",
    "add",
    "multiply",
    "negate",
    "power",
    "subtract",
    "get_current_graph",
    "get_default_graph",
    "reset_default_graph",
    # Operation catalog
    "OpType",
    "Operation",
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
    # Precision
    "PrecisionConfig",
    "PrecisionMode",
    "precision_context",
    # Errors
    "ScalarGradError",
    "GraphMismatchError",
    "DetachedNodeError",
    # Logging
    "get_logger",
    "configure_logging",
]
