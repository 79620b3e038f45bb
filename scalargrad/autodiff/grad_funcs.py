"""
Function-level gradient helpers.

These wrap graph construction and the backward pass so a plain Python
function of scalars can be differentiated directly:

    def f(x, y):
        return x * x + y * y + x * y

    dfdx, dfdy = grad(f, argnums=(0, 1))(2.0, 3.0)  # (7.0, 8.0)

Every call evaluates ``f`` inside a fresh :class:`Graph`, so nothing
accumulates in the default graph.
"""

from typing import Any, Callable, Sequence, Tuple, Union

from ..utils.bridge import is_scalar_number, to_float
from .backward import backward_pass
from .graph import Graph
from .node import Node

ArgNums = Union[int, Sequence[int]]


def _normalize_argnums(argnums: ArgNums, nargs: int) -> Tuple[int, ...]:
    single = isinstance(argnums, int)
    nums = (argnums,) if single else tuple(argnums)
    for i in nums:
        if not -nargs <= i < nargs:
            raise ValueError(f"argnums {i} out of range for {nargs} arguments")
    return tuple(i % nargs for i in nums)


def _input_value(arg: Any) -> float:
    if isinstance(arg, Node):
        return arg.value
    return to_float(arg)


def _evaluate(f: Callable, argnums: ArgNums, args: Tuple[Any, ...]):
    nums = _normalize_argnums(argnums, len(args))

    with Graph(name="grad") as graph:
        inputs = list(args)
        for i in nums:
            inputs[i] = graph.leaf(_input_value(args[i]))
        out = f(*inputs)

        if isinstance(out, Node):
            graph._check_attached(out)
            backward_pass(out)
            value = out.value
            grads = tuple(inputs[i].grad for i in nums)
        elif is_scalar_number(out):
            # f ignored its inputs entirely
            value = to_float(out)
            grads = tuple(0.0 for _ in nums)
        else:
            raise TypeError(f"Function must return a Node or a number, got {type(out).__name__}")

    if isinstance(argnums, int):
        return value, grads[0]
    return value, grads


def grad(f: Callable, argnums: ArgNums = 0) -> Callable:
    """
    Create a function computing the gradient of ``f``.

    Args:
        f: Function of scalars returning a Node (or a number)
        argnums: Index or indices of the arguments to differentiate

    Returns:
        Function returning a float for an int ``argnums`` or a tuple of
        floats for a sequence
    """
    def grad_f(*args):
        _, grads = _evaluate(f, argnums, args)
        return grads

    return grad_f


def value_and_grad(f: Callable, argnums: ArgNums = 0) -> Callable:
    """Like :func:`grad` but also returns ``f``'s value as ``(value, grads)``."""
    def value_and_grad_f(*args):
        return _evaluate(f, argnums, args)

    return value_and_grad_f


def check_gradient(f: Callable, x: Any, eps: float = 1e-5) -> Tuple[float, float, float]:
    """
    Compare the backward-pass gradient of a single-argument ``f`` with a
    central finite difference.

    Args:
        f: Function of one scalar
        x: Point at which to check
        eps: Finite difference step

    Returns:
        Tuple of (analytical, numerical, relative error). The error is
        scaled by ``max(1, |analytical|, |numerical|)``.
    """
    x_val = _input_value(x)
    analytical = grad(f)(x_val)

    f_plus, _ = _evaluate(f, 0, (x_val + eps,))
    f_minus, _ = _evaluate(f, 0, (x_val - eps,))
    numerical = (f_plus - f_minus) / (2.0 * eps)

    scale = max(1.0, abs(analytical), abs(numerical))
    error = abs(analytical - numerical) / scale
    return analytical, numerical, error
