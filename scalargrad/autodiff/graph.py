"""
Graph arena and graph construction.

A :class:`Graph` owns every node of one computation in a list and hands out
:class:`Node` handles addressed by stable integer indices. Operands are
always earlier entries of the same arena, so the graph is acyclic by
construction and an operand can never be released before a node that uses
it. The arena is torn down as a whole with :meth:`Graph.clear`.

Factories evaluate the forward value eagerly:

    with Graph() as g:
        a = leaf(4.0)
        x = leaf(3.0)
        t = add(multiply(a, x), leaf(10.0))
        t.backward()
        # x.grad == 4.0, a.grad == 3.0
"""

import threading
from typing import Any, Iterator, List, Optional, Tuple

from ..core.errors import DetachedNodeError, GraphMismatchError
from ..core.operation import Operation, forward
from ..utils.bridge import is_scalar_number, to_float, to_value
from ..utils.logging import get_logger
from .node import Node

logger = get_logger(__name__)


class Graph:
    """Arena owning the nodes of one computation graph."""

    def __init__(self, name: Optional[str] = None):
        self.name = name
        self._nodes: List[Node] = []
        self._generation = 0

    # Arena access

    @property
    def generation(self) -> int:
        """Incremented by every :meth:`clear`; nodes from older generations are detached."""
        return self._generation

    @property
    def nodes(self) -> Tuple[Node, ...]:
        return tuple(self._nodes)

    def node(self, index: int) -> Node:
        return self._nodes[index]

    def __len__(self) -> int:
        return len(self._nodes)

    def __iter__(self) -> Iterator[Node]:
        return iter(list(self._nodes))

    def __contains__(self, node: Any) -> bool:
        return isinstance(node, Node) and node.graph is self and not node.is_detached

    def __repr__(self) -> str:
        label = f"{self.name!r}, " if self.name else ""
        return f"Graph({label}nodes={len(self._nodes)})"

    def _check_attached(self, node: Node) -> None:
        if node.graph is not self:
            raise GraphMismatchError(
                f"{node!r} belongs to {node.graph!r}, not {self!r}"
            )
        if node.is_detached:
            raise DetachedNodeError(f"{node!r} was detached when its graph was cleared")

    def _append(self, value: float, op: Operation, operands: Tuple[Node, ...] = (),
                name: Optional[str] = None) -> Node:
        for operand in operands:
            self._check_attached(operand)
        node = Node(
            self,
            len(self._nodes),
            self._generation,
            value,
            op,
            tuple(operand.index for operand in operands),
            name=name,
        )
        self._nodes.append(node)
        return node

    # Construction

    def leaf(self, value: Any, name: Optional[str] = None) -> Node:
        """Create an input node holding ``value``."""
        return self._append(to_value(value), Operation.identity(), name=name)

    def add(self, x: Node, y: Node, name: Optional[str] = None) -> Node:
        op = Operation.add()
        return self._combine(op, (x, y), name)

    def multiply(self, x: Node, y: Node, name: Optional[str] = None) -> Node:
        op = Operation.mul()
        return self._combine(op, (x, y), name)

    def negate(self, x: Node, name: Optional[str] = None) -> Node:
        op = Operation.neg()
        return self._combine(op, (x,), name)

    def power(self, x: Node, exponent: Any, name: Optional[str] = None) -> Node:
        """Raise ``x`` to a constant ``exponent``; the exponent is not differentiated."""
        if isinstance(exponent, Node):
            raise TypeError("Exponent must be a constant number, not a Node")
        if not is_scalar_number(exponent):
            raise TypeError(f"Unsupported exponent type: {type(exponent).__name__}")
        op = Operation.pow(to_float(exponent))
        return self._combine(op, (x,), name)

    def subtract(self, x: Node, y: Node, name: Optional[str] = None) -> Node:
        """``x + (-y)``, built from the Add and Negate operations."""
        return self.add(x, self.negate(y), name=name)

    def _combine(self, op: Operation, operands: Tuple[Node, ...], name: Optional[str]) -> Node:
        for operand in operands:
            if not isinstance(operand, Node):
                raise TypeError(f"Operands must be Node instances, got {type(operand).__name__}")
        value = forward(op, *(operand.value for operand in operands))
        return self._append(value, op, operands, name=name)

    # Lifecycle

    def zero_grad(self) -> None:
        """Reset every gradient accumulator in the arena to 0."""
        for node in self._nodes:
            node.grad = 0.0

    def clear(self) -> None:
        """Tear down all nodes at once; outstanding handles become detached."""
        logger.debug(
            "clearing graph",
            extra={"fields": {"graph": self.name, "nodes": len(self._nodes)}},
        )
        self._nodes = []
        self._generation += 1

    def __enter__(self) -> "Graph":
        _graph_stack().append(self)
        return self

    def __exit__(self, _exc_type, _exc_val, _exc_tb):
        stack = _graph_stack()
        if stack and stack[-1] is self:
            stack.pop()
        elif self in stack:
            stack.remove(self)


# Current graph tracking (per thread)

_state = threading.local()


def _graph_stack() -> List[Graph]:
    stack = getattr(_state, "stack", None)
    if stack is None:
        stack = _state.stack = []
    return stack


def get_default_graph() -> Graph:
    """Graph used when no ``with Graph():`` block is active in this thread."""
    graph = getattr(_state, "default", None)
    if graph is None:
        graph = _state.default = Graph(name="default")
    return graph


def reset_default_graph() -> Graph:
    """Clear the current thread's default graph and return it."""
    graph = get_default_graph()
    graph.clear()
    return graph


def get_current_graph() -> Graph:
    stack = _graph_stack()
    return stack[-1] if stack else get_default_graph()


def _owning_graph(*operands: Any) -> Graph:
    graphs = [o.graph for o in operands if isinstance(o, Node)]
    if not graphs:
        raise TypeError("At least one operand must be a Node")
    first = graphs[0]
    for other in graphs[1:]:
        if other is not first:
            raise GraphMismatchError("Cannot combine nodes from different graphs")
    # detached operands fail before a number is lifted into the graph
    for operand in operands:
        if isinstance(operand, Node):
            first._check_attached(operand)
    return first


def _as_node(graph: Graph, x: Any) -> Node:
    if isinstance(x, Node):
        return x
    if is_scalar_number(x):
        return graph.leaf(x)
    raise TypeError(f"Unsupported operand type: {type(x).__name__}")


# Module-level factories

def leaf(value: Any, name: Optional[str] = None, graph: Optional[Graph] = None) -> Node:
    """Create a leaf in ``graph`` or, if omitted, in the current graph."""
    if graph is None:
        graph = get_current_graph()
    return graph.leaf(value, name=name)


def add(x: Any, y: Any) -> Node:
    g = _owning_graph(x, y)
    return g.add(_as_node(g, x), _as_node(g, y))


def multiply(x: Any, y: Any) -> Node:
    g = _owning_graph(x, y)
    return g.multiply(_as_node(g, x), _as_node(g, y))


def negate(x: Node) -> Node:
    return _owning_graph(x).negate(x)


def power(x: Node, exponent: Any) -> Node:
    return _owning_graph(x).power(x, exponent)


def subtract(x: Any, y: Any) -> Node:
    g = _owning_graph(x, y)
    return g.subtract(_as_node(g, x), _as_node(g, y))
