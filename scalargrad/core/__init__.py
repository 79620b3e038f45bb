"""Operation catalog, precision configuration and error types."""

from .errors import DetachedNodeError, GraphMismatchError, ScalarGradError
from .operation import Operation, OpType, forward, local_derivative
from .precision_config import PrecisionConfig, PrecisionMode, precision_context

__all__ = [
    # Operation catalog
    "OpType",
    "Operation",
    "forward",
    "local_derivative",

    # Precision
    "PrecisionConfig",
    "PrecisionMode",
    "precision_context",

    # Errors
    "ScalarGradError",
    "GraphMismatchError",
    "DetachedNodeError",
]
