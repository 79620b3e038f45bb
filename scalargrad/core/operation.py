"""
Operation catalog for scalar reverse-mode autodiff.

The catalog is a closed set of plain-data variants. Each variant knows how to
evaluate its forward value and its local derivative through the two
dispatchers :func:`forward` and :func:`local_derivative`.

Arithmetic follows IEEE-754 float64 semantics: domain-invalid inputs produce
NaN, overflow and zero-base negative powers produce infinities, and neither
dispatcher raises for float inputs.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

import numpy as np


class OpType(Enum):
    """Supported operation tags."""
    IDENTITY = "identity"
    ADD = "add"
    NEG = "neg"
    MUL = "mul"
    POW = "pow"


_ARITY = {
    OpType.IDENTITY: 0,
    OpType.ADD: 2,
    OpType.NEG: 1,
    OpType.MUL: 2,
    OpType.POW: 1,
}


@dataclass(frozen=True)
class Operation:
    """
    A tagged operation variant.

    ``exponent`` is only meaningful for ``OpType.POW``; it is a constant
    captured at construction and never a differentiable operand.
    """

    op_type: OpType
    exponent: Optional[float] = None

    def __post_init__(self):
        if self.op_type == OpType.POW:
            if self.exponent is None:
                raise ValueError("Power operation requires an exponent")
            object.__setattr__(self, "exponent", float(self.exponent))
        elif self.exponent is not None:
            raise ValueError(f"{self.op_type.value} does not take an exponent")

    @classmethod
    def identity(cls) -> "Operation":
        return cls(OpType.IDENTITY)

    @classmethod
    def add(cls) -> "Operation":
        return cls(OpType.ADD)

    @classmethod
    def neg(cls) -> "Operation":
        return cls(OpType.NEG)

    @classmethod
    def mul(cls) -> "Operation":
        return cls(OpType.MUL)

    @classmethod
    def pow(cls, exponent: float) -> "Operation":
        return cls(OpType.POW, exponent)

    @property
    def arity(self) -> int:
        """Number of operands this operation consumes."""
        return _ARITY[self.op_type]

    @property
    def symbol(self) -> str:
        if self.op_type == OpType.POW:
            return f"**{self.exponent:g}"
        return {
            OpType.IDENTITY: "",
            OpType.ADD: "+",
            OpType.NEG: "neg",
            OpType.MUL: "*",
        }[self.op_type]

    def __str__(self) -> str:
        if self.op_type == OpType.POW:
            return f"pow({self.exponent:g})"
        return self.op_type.value


def _power(base: float, exponent: float) -> float:
    # Python's ** raises on 0.0 ** -1 and returns complex for (-8.0) ** 0.5;
    # route through float64 so both become inf / nan instead.
    with np.errstate(all="ignore"):
        return float(np.power(np.float64(base), np.float64(exponent)))


def forward(op: Operation, a: float, b: Optional[float] = None) -> float:
    """
    Evaluate the forward value of ``op`` applied to operand values.

    Args:
        op: Operation to evaluate (not Identity)
        a: Value of the first operand
        b: Value of the second operand, for binary operations

    Returns:
        The result as a Python float

    Raises:
        ValueError: If ``op`` is Identity or a required operand is missing
    """
    t = op.op_type
    if t == OpType.ADD:
        _require_b(op, b)
        return a + b
    if t == OpType.NEG:
        return -a
    if t == OpType.MUL:
        _require_b(op, b)
        return a * b
    if t == OpType.POW:
        return _power(a, op.exponent)
    raise ValueError("Identity has no forward function; its value is fixed at construction")


def local_derivative(op: Operation, position: int, a: float, b: Optional[float] = None) -> float:
    """
    Partial derivative of ``op`` with respect to the operand at ``position``.

    Args:
        op: Operation whose derivative is requested (not Identity)
        position: 0 for the first operand, 1 for the second
        a: Value of the first operand
        b: Value of the second operand, for binary operations

    Returns:
        The local derivative evaluated at the given operand values

    Raises:
        ValueError: If ``op`` is Identity or ``position`` exceeds its arity
    """
    if not 0 <= position < op.arity:
        raise ValueError(f"Operand position {position} out of range for {op}")

    t = op.op_type
    if t == OpType.ADD:
        return 1.0
    if t == OpType.NEG:
        return -1.0
    if t == OpType.MUL:
        _require_b(op, b)
        return b if position == 0 else a
    # POW is the only remaining variant with operands
    p = op.exponent
    return p * _power(a, p - 1.0)


def _require_b(op: Operation, b: Optional[float]) -> None:
    if b is None:
        raise ValueError(f"{op} requires two operands")
