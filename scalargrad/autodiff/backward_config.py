"""
Configuration of the backward pass.

Controls which topological ordering strategy ``backward_pass`` uses and
whether it zeroes the reachable gradients before seeding the root.
"""

from enum import Enum
from typing import Optional, Union


class TraversalOrder(Enum):
    """Strategies for ordering the reachable subgraph, root first."""
    KAHN = "kahn"  # release a node once every parent edge has propagated
    DFS = "dfs"  # reversed depth-first post-order


class BackwardConfig:
    """Global backward pass configuration."""

    _order: TraversalOrder = TraversalOrder.KAHN
    _reset_grads: bool = True

    @classmethod
    def set_order(cls, order: Union[TraversalOrder, str]) -> None:
        """
        Set the default traversal order.

        Args:
            order: TraversalOrder enum or string ('kahn', 'dfs')

        Raises:
            ValueError: If order is not supported
        """
        cls._order = cls.resolve_order(order)

    @classmethod
    def get_order(cls) -> TraversalOrder:
        return cls._order

    @classmethod
    def resolve_order(cls, order: Optional[Union[TraversalOrder, str]]) -> TraversalOrder:
        """Map ``None`` to the configured default and strings to enum members."""
        if order is None:
            return cls._order
        if isinstance(order, TraversalOrder):
            return order
        if isinstance(order, str):
            try:
                return TraversalOrder(order.lower())
            except ValueError:
                pass
        raise ValueError(f"Unsupported traversal order: {order!r}")

    @classmethod
    def set_reset_grads(cls, reset: bool) -> None:
        cls._reset_grads = bool(reset)

    @classmethod
    def resets_grads(cls) -> bool:
        return cls._reset_grads

    @classmethod
    def reset(cls) -> None:
        cls._order = TraversalOrder.KAHN
        cls._reset_grads = True


class backward_config:
    """
    Context manager for temporary backward pass settings.

    Example:
        with backward_config(order="dfs", reset_grads=False):
            loss.backward()
    """

    def __init__(self, order: Optional[Union[TraversalOrder, str]] = None,
                 reset_grads: Optional[bool] = None):
        # Resolve eagerly so a bad value fails before entering the block
        self.new_order = BackwardConfig.resolve_order(order) if order is not None else None
        self.new_reset = reset_grads
        self.old_order = None
        self.old_reset = None

    def __enter__(self):
        self.old_order = BackwardConfig.get_order()
        self.old_reset = BackwardConfig.resets_grads()
        if self.new_order is not None:
            BackwardConfig.set_order(self.new_order)
        if self.new_reset is not None:
            BackwardConfig.set_reset_grads(self.new_reset)
        return self

    def __exit__(self, _exc_type, _exc_val, _exc_tb):
        BackwardConfig.set_order(self.old_order)
        BackwardConfig.set_reset_grads(self.old_reset)
