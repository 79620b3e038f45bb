"""Exceptions raised for structural misuse of a computation graph.

Numeric problems are never reported here; they surface as NaN or inf in
node values and gradients.
"""


class ScalarGradError(Exception):
    """Base class for scalargrad errors."""


class GraphMismatchError(ScalarGradError, ValueError):
    """Raised when nodes owned by different graphs are combined."""


class DetachedNodeError(ScalarGradError, RuntimeError):
    """Raised when a node is used after its owning graph was cleared."""
