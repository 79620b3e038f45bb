"""Unit tests for the graph arena and graph construction."""

import math
import threading

import numpy as np
import pytest

from scalargrad import (
    DetachedNodeError,
    Graph,
    GraphMismatchError,
    Node,
    OpType,
    add,
    get_current_graph,
    get_default_graph,
    leaf,
    multiply,
    negate,
    power,
    subtract,
)
from scalargrad.core import forward


class TestLeaf:
    """Test leaf construction."""

    def test_leaf_creation(self):
        g = Graph()
        x = g.leaf(3.5, name="x")
        assert x.value == 3.5
        assert x.grad == 0.0
        assert x.is_leaf
        assert x.op.op_type == OpType.IDENTITY
        assert x.operands == ()
        assert x.operand_a is None
        assert x.operand_b is None
        assert x.name == "x"
        assert x.graph is g
        assert x.index == 0

    def test_leaf_accepts_ints_and_numpy_scalars(self):
        g = Graph()
        assert g.leaf(2).value == 2.0
        assert isinstance(g.leaf(2).value, float)
        assert g.leaf(np.float32(1.5)).value == 1.5
        assert g.leaf(np.array(4.0)).value == 4.0
        assert g.leaf(np.array([7.0])).value == 7.0

    def test_leaf_rejects_non_numbers(self):
        g = Graph()
        with pytest.raises(TypeError):
            g.leaf("1.0")
        with pytest.raises(TypeError):
            g.leaf(np.array([1.0, 2.0]))
        with pytest.raises(TypeError):
            g.leaf(1 + 2j)

    def test_value_is_read_only(self):
        x = Graph().leaf(1.0)
        with pytest.raises(AttributeError):
            x.value = 2.0


class TestCombinators:
    """Test eager forward evaluation and operand recording."""

    def test_binary_combinators(self):
        g = Graph()
        x = g.leaf(3.0)
        y = g.leaf(4.0)

        s = g.add(x, y)
        assert s.value == 7.0
        assert s.grad == 0.0
        assert s.operand_a is x
        assert s.operand_b is y

        p = g.multiply(x, y)
        assert p.value == 12.0
        assert p.op.op_type == OpType.MUL
        assert p.operands == (x, y)

    def test_unary_combinators(self):
        g = Graph()
        x = g.leaf(3.0)

        n = g.negate(x)
        assert n.value == -3.0
        assert n.operands == (x,)
        assert n.operand_b is None

        p = g.power(x, 2)
        assert p.value == 9.0
        assert p.op.exponent == 2.0
        assert p.operands == (x,)

    def test_operands_are_earlier_arena_entries(self):
        g = Graph()
        x = g.leaf(1.0)
        y = g.leaf(2.0)
        z = g.multiply(g.add(x, y), y)
        for node in g:
            assert all(i < node.index for i in node.operand_indices)
        assert len(g) == 4
        assert g.node(z.index) is z

    def test_shared_operand_is_not_copied(self):
        g = Graph()
        y = g.leaf(2.0)
        s = g.add(y, y)
        assert s.operand_a is y
        assert s.operand_b is y
        assert s.value == 4.0

    def test_power_rejects_node_exponent(self):
        g = Graph()
        x = g.leaf(2.0)
        with pytest.raises(TypeError):
            g.power(x, g.leaf(3.0))

    def test_power_rejects_non_numeric_exponent(self):
        g = Graph()
        with pytest.raises(TypeError):
            g.power(g.leaf(2.0), "3")

    def test_combinators_reject_raw_numbers(self):
        g = Graph()
        with pytest.raises(TypeError):
            g.add(g.leaf(1.0), 2.0)

    def test_nan_propagates_through_construction(self):
        g = Graph()
        r = g.power(g.leaf(-8.0), 1.0 / 3.0)
        assert math.isnan(r.value)
        out = g.add(g.multiply(r, g.leaf(0.0)), g.leaf(1.0))
        assert math.isnan(out.value)

    def test_value_matches_catalog_after_later_operations(self):
        g = Graph()
        x = g.leaf(1.5)
        y = g.leaf(-2.0)
        z = g.multiply(x, y)
        w = g.power(z, 2)
        g.add(w, x).backward()
        assert z.value == forward(z.op, x.value, y.value)
        assert w.value == forward(w.op, z.value)


class TestOperatorSugar:
    """Test Python operator overloads on Node."""

    def test_arithmetic_operators(self):
        g = Graph()
        x = g.leaf(3.0)
        y = g.leaf(2.0)
        assert (x + y).value == 5.0
        assert (x * y).value == 6.0
        assert (-x).value == -3.0
        assert (x - y).value == 1.0
        assert (x ** 2).value == 9.0

    def test_numbers_are_lifted_into_the_same_graph(self):
        g = Graph()
        x = g.leaf(3.0)
        before = len(g)
        y = 2 * x + 1
        assert y.value == 7.0
        assert y.graph is g
        # two constant leaves, one product, one sum
        assert len(g) == before + 4

    def test_reflected_subtraction(self):
        g = Graph()
        x = g.leaf(3.0)
        assert (10 - x).value == 7.0

    def test_subtraction_uses_add_and_negate(self):
        g = Graph()
        x = g.leaf(5.0)
        y = g.leaf(2.0)
        d = x - y
        assert d.op.op_type == OpType.ADD
        assert d.operand_b.op.op_type == OpType.NEG
        assert d.operand_b.operand_a is y

    def test_division_is_not_supported(self):
        g = Graph()
        x = g.leaf(3.0)
        with pytest.raises(TypeError):
            x / 2
        with pytest.raises(TypeError):
            2 / x

    def test_node_exponent_is_rejected(self):
        g = Graph()
        x = g.leaf(2.0)
        with pytest.raises(TypeError):
            x ** g.leaf(2.0)
        with pytest.raises(TypeError):
            2 ** x

    def test_unsupported_operand_type(self):
        x = Graph().leaf(1.0)
        with pytest.raises(TypeError):
            x + "a"

    def test_float_conversion_and_repr(self):
        x = Graph().leaf(2.5, name="x")
        assert float(x) == 2.5
        assert "x" in repr(x)
        assert "value=2.5" in repr(x)


class TestModuleFactories:
    """Test module-level construction functions and the current graph."""

    def test_leaf_uses_default_graph(self):
        x = leaf(1.0)
        assert x.graph is get_default_graph()
        assert get_current_graph() is get_default_graph()

    def test_graph_context_sets_current_graph(self):
        with Graph(name="outer") as outer:
            assert get_current_graph() is outer
            a = leaf(1.0)
            with Graph(name="inner") as inner:
                b = leaf(2.0)
                assert get_current_graph() is inner
            assert get_current_graph() is outer
        assert a.graph is outer
        assert b.graph is inner
        assert get_current_graph() is get_default_graph()

    def test_default_graph_is_per_thread(self):
        main_default = get_default_graph()
        seen = []

        def worker():
            seen.append((get_default_graph(), leaf(1.0).graph))

        thread = threading.Thread(target=worker)
        thread.start()
        thread.join()

        other_default, leaf_graph = seen[0]
        assert other_default is not main_default
        assert leaf_graph is other_default
        assert len(main_default) == 0

    def test_factories_follow_operand_graph(self):
        g = Graph()
        x = g.leaf(4.0)
        y = g.leaf(3.0)
        # default graph is current, but operands live in g
        t = add(multiply(x, y), 10.0)
        assert t.graph is g
        assert t.value == 22.0
        assert negate(x).value == -4.0
        assert power(x, 0.5).value == 2.0
        assert subtract(x, y).value == 1.0
        assert subtract(10, x).value == 6.0

    def test_factories_require_a_node(self):
        with pytest.raises(TypeError):
            add(1.0, 2.0)

    def test_explicit_graph_argument(self):
        g = Graph()
        x = leaf(1.0, graph=g)
        assert x.graph is g


class TestArenaOwnership:
    """Test cross-graph and teardown protections."""

    def test_mixing_graphs_raises(self):
        g1 = Graph()
        g2 = Graph()
        x = g1.leaf(1.0)
        y = g2.leaf(2.0)
        with pytest.raises(GraphMismatchError):
            g1.add(x, y)
        with pytest.raises(GraphMismatchError):
            x * y
        with pytest.raises(GraphMismatchError):
            add(x, y)

    def test_graph_mismatch_is_a_value_error(self):
        assert issubclass(GraphMismatchError, ValueError)

    def test_clear_detaches_all_nodes(self):
        g = Graph()
        x = g.leaf(1.0)
        y = g.add(x, x)
        g.clear()
        assert len(g) == 0
        assert x.is_detached
        assert y.is_detached
        assert x not in g
        # values stay readable on the stale handle
        assert y.value == 2.0

    def test_detached_nodes_cannot_be_used(self):
        g = Graph()
        x = g.leaf(1.0)
        y = g.add(x, x)
        g.clear()
        with pytest.raises(DetachedNodeError):
            g.negate(x)
        with pytest.raises(DetachedNodeError):
            y.backward()
        with pytest.raises(DetachedNodeError):
            y.operands

    def test_detached_node_with_number_leaves_graph_untouched(self):
        g = Graph()
        x = g.leaf(1.0)
        g.clear()
        with pytest.raises(DetachedNodeError):
            x + 2.0
        with pytest.raises(DetachedNodeError):
            3.0 * x
        with pytest.raises(DetachedNodeError):
            1.0 - x
        with pytest.raises(DetachedNodeError):
            add(x, 2.0)
        with pytest.raises(DetachedNodeError):
            subtract(2.0, x)
        assert len(g) == 0

    def test_graph_is_reusable_after_clear(self):
        g = Graph()
        g.leaf(1.0)
        g.clear()
        x = g.leaf(2.0)
        assert x.index == 0
        assert not x.is_detached
        assert x in g

    def test_zero_grad_resets_every_node(self):
        g = Graph()
        x = g.leaf(2.0)
        y = x * x
        y.backward()
        assert x.grad != 0.0
        g.zero_grad()
        assert all(node.grad == 0.0 for node in g)

    def test_nodes_snapshot(self):
        g = Graph()
        x = g.leaf(1.0)
        assert g.nodes == (x,)
        assert isinstance(x, Node)
