"""
Computation graph vertex.

A Node carries an immutable forward value, a mutable gradient accumulator
and, for non-leaf nodes, the indices of its operands inside the owning
:class:`~scalargrad.autodiff.graph.Graph`. Nodes are created only through a
graph; they never own their operands.
"""

from typing import Any, Optional, Tuple

from ..core.operation import Operation, OpType
from ..utils.bridge import is_scalar_number


class Node:
    """A scalar value in a computation graph."""

    __slots__ = ("_graph", "_index", "_generation", "_value", "_op", "_operands", "grad", "name")

    def __init__(self, graph, index: int, generation: int, value: float,
                 op: Operation, operands: Tuple[int, ...] = (), name: Optional[str] = None):
        self._graph = graph
        self._index = index
        self._generation = generation
        self._value = value
        self._op = op
        self._operands = operands
        self.grad = 0.0
        self.name = name

    # Read-only structure

    @property
    def value(self) -> float:
        """Forward value, fixed at construction."""
        return self._value

    @property
    def op(self) -> Operation:
        return self._op

    @property
    def graph(self):
        return self._graph

    @property
    def index(self) -> int:
        """Stable position of this node in its graph."""
        return self._index

    @property
    def operand_indices(self) -> Tuple[int, ...]:
        return self._operands

    @property
    def operands(self) -> Tuple["Node", ...]:
        self._graph._check_attached(self)
        return tuple(self._graph.node(i) for i in self._operands)

    @property
    def operand_a(self) -> Optional["Node"]:
        ops = self.operands
        return ops[0] if ops else None

    @property
    def operand_b(self) -> Optional["Node"]:
        ops = self.operands
        return ops[1] if len(ops) > 1 else None

    @property
    def is_leaf(self) -> bool:
        return self._op.op_type == OpType.IDENTITY

    @property
    def is_detached(self) -> bool:
        """True once the owning graph has been cleared."""
        return self._generation != self._graph.generation

    # Gradients

    def backward(self, reset: Optional[bool] = None) -> None:
        """Populate ``grad`` on every node reachable from this one."""
        from .backward import backward_pass
        backward_pass(self, reset=reset)

    def zero_grad(self) -> None:
        self.grad = 0.0

    # Operator sugar; numbers are lifted into leaves of this node's graph

    def _lift(self, other: Any) -> Optional["Node"]:
        self._graph._check_attached(self)
        if isinstance(other, Node):
            return other
        if is_scalar_number(other):
            return self._graph.leaf(other)
        return None

    def __add__(self, other):
        other = self._lift(other)
        if other is None:
            return NotImplemented
        return self._graph.add(self, other)

    def __radd__(self, other):
        other = self._lift(other)
        if other is None:
            return NotImplemented
        return self._graph.add(other, self)

    def __mul__(self, other):
        other = self._lift(other)
        if other is None:
            return NotImplemented
        return self._graph.multiply(self, other)

    def __rmul__(self, other):
        other = self._lift(other)
        if other is None:
            return NotImplemented
        return self._graph.multiply(other, self)

    def __neg__(self):
        return self._graph.negate(self)

    def __sub__(self, other):
        other = self._lift(other)
        if other is None:
            return NotImplemented
        return self._graph.subtract(self, other)

    def __rsub__(self, other):
        other = self._lift(other)
        if other is None:
            return NotImplemented
        return self._graph.subtract(other, self)

    def __pow__(self, exponent):
        if isinstance(exponent, Node):
            raise TypeError("Exponent must be a constant number, not a Node")
        if not is_scalar_number(exponent):
            return NotImplemented
        return self._graph.power(self, exponent)

    def __float__(self) -> float:
        return self._value

    def __repr__(self) -> str:
        label = f"{self.name}, " if self.name else ""
        op = "" if self.is_leaf else f", op={self._op}"
        return f"Node({label}value={self._value:.6g}, grad={self.grad:.6g}{op})"
