"""
Backward pass for scalar reverse-mode autodiff.

The pass orders the subgraph reachable from the root so that every node is
processed only after all of its parents have pushed their contributions into
it. A node shared by several parents (a diamond) therefore has its gradient
fully summed before it propagates to its own operands.
"""

from collections import deque
from typing import Dict, Iterable, List, Optional, Union

from ..core.operation import local_derivative
from ..utils.logging import get_logger
from .backward_config import BackwardConfig, TraversalOrder
from .node import Node

logger = get_logger(__name__)


def topological_sort(root: Node,
                     order: Optional[Union[TraversalOrder, str]] = None) -> List[Node]:
    """
    Order the nodes reachable from ``root`` for gradient propagation.

    Args:
        root: Output node of the computation
        order: Traversal strategy; defaults to ``BackwardConfig.get_order()``

    Returns:
        Reachable nodes, root first, each node before all of its operands
    """
    strategy = BackwardConfig.resolve_order(order)
    graph = root.graph
    graph._check_attached(root)

    if strategy == TraversalOrder.KAHN:
        indices = _kahn_order(graph, root.index)
    else:
        indices = _dfs_order(graph, root.index)
    return [graph.node(i) for i in indices]


def _count_parent_edges(graph, root_index: int) -> Dict[int, int]:
    # Number of parent->operand edges pointing at each reachable node.
    # add(y, y) contributes two edges into y.
    pending = {root_index: 0}
    stack = [root_index]
    while stack:
        index = stack.pop()
        for operand in graph.node(index).operand_indices:
            if operand not in pending:
                pending[operand] = 0
                stack.append(operand)
            pending[operand] += 1
    return pending


def _kahn_order(graph, root_index: int) -> List[int]:
    pending = _count_parent_edges(graph, root_index)
    ready = deque([root_index])
    ordered = []
    while ready:
        index = ready.popleft()
        ordered.append(index)
        for operand in graph.node(index).operand_indices:
            pending[operand] -= 1
            if pending[operand] == 0:
                ready.append(operand)
    return ordered


def _dfs_order(graph, root_index: int) -> List[int]:
    # Iterative post-order; reversing it puts every parent before its operands.
    visited = set()
    post_order = []
    stack = [(root_index, False)]
    while stack:
        index, expanded = stack.pop()
        if expanded:
            post_order.append(index)
            continue
        if index in visited:
            continue
        visited.add(index)
        stack.append((index, True))
        for operand in reversed(graph.node(index).operand_indices):
            if operand not in visited:
                stack.append((operand, False))
    post_order.reverse()
    return post_order


def backward_pass(root: Node, reset: Optional[bool] = None,
                  order: Optional[Union[TraversalOrder, str]] = None) -> None:
    """
    Compute d(root)/d(node) for every node reachable from ``root``.

    Results are accumulated into each node's ``grad``. Every parent->operand
    edge contributes exactly once.

    Args:
        root: Output node; its gradient is seeded with 1.0
        reset: Zero the reachable gradients first; defaults to
            ``BackwardConfig.resets_grads()``. When False, the caller is
            responsible for the reachable gradients starting at 0.
        order: Traversal strategy; defaults to ``BackwardConfig.get_order()``
    """
    if reset is None:
        reset = BackwardConfig.resets_grads()

    graph = root.graph
    ordered = topological_sort(root, order=order)

    if reset:
        for node in ordered:
            node.grad = 0.0

    root.grad = 1.0

    edges = 0
    for node in ordered:
        operand_indices = node.operand_indices
        if not operand_indices:
            continue
        operands = [graph.node(i) for i in operand_indices]
        a = operands[0].value
        b = operands[1].value if len(operands) > 1 else None
        for position, operand in enumerate(operands):
            operand.grad += node.grad * local_derivative(node.op, position, a, b)
            edges += 1

    logger.debug(
        "backward pass complete",
        extra={"fields": {
            "root": root.index,
            "nodes": len(ordered),
            "edges": edges,
            "order": BackwardConfig.resolve_order(order).value,
        }},
    )


def zero_grad(nodes: Iterable[Node]) -> None:
    """Reset the gradient accumulator of each node to 0."""
    for node in nodes:
        node.grad = 0.0
