"""
Demonstration of scalar reverse-mode autodifferentiation.

This example shows eager graph construction, gradient accumulation through
shared nodes, NaN propagation, and a small gradient descent loop.
"""

import sys
import os
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

import scalargrad as sg
from scalargrad import Graph, grad, value_and_grad, check_gradient


def demonstrate_basic_autodiff():
    """Show the product rule on t = a*x + b."""
    print("=== Basic Autodiff ===\n")

    with Graph(name="basic") as g:
        a = g.leaf(4.0, name="a")
        x = g.leaf(3.0, name="x")
        b = g.leaf(10.0, name="b")
        t = a * x + b
        t.backward()

    print(f"t = a*x + b = {t.value}")
    print(f"dt/dx = a = {x.grad}")
    print(f"dt/da = x = {a.grad}")
    print(f"dt/db = 1 = {b.grad}")


def demonstrate_shared_nodes():
    """Show that a node used by several parents receives every contribution."""
    print("\n=== Shared Nodes ===\n")

    g = Graph(name="diamond")
    y = g.leaf(2.0, name="y")
    s = g.add(y, y)
    s.backward()
    print(f"s = y + y, ds/dy = {y.grad} (both edges counted)")

    x = g.leaf(1.5, name="x")
    u = x * x
    f = (u + u) * (x + 1) + u
    f.backward()
    print(f"f = 2x^3 + 3x^2 at x=1.5, df/dx = {x.grad} (expected {6 * 1.5**2 + 6 * 1.5})")


def demonstrate_nan_propagation():
    """Show that domain errors produce NaN instead of raising."""
    print("\n=== NaN Propagation ===\n")

    g = Graph(name="nan")
    x = g.leaf(-8.0, name="x")
    r = x ** 0.5
    out = r + 1
    out.backward()
    print(f"sqrt(-8) + 1 = {out.value}, d/dx = {x.grad}")


def demonstrate_gradient_functions():
    """Show function-level helpers."""
    print("\n=== Gradient Functions ===\n")

    def f(x, y):
        return x * x + y * y + x * y

    value, (dfdx, dfdy) = value_and_grad(f, argnums=(0, 1))(2.0, 3.0)
    print(f"f(2, 3) = {value}, df/dx = {dfdx}, df/dy = {dfdy}")

    analytical, numerical, error = check_gradient(lambda x: x ** 3 - 2 * x, 2.0)
    print(f"check_gradient: analytical={analytical}, numerical={numerical:.6f}, error={error:.2e}")


def demonstrate_gradient_descent():
    """Fit y = a*x + b to two points with plain gradient descent."""
    print("\n=== Gradient Descent ===\n")

    xs = [1.0, 3.0]
    ys = [3.0, 7.0]
    a_val, b_val = 1.0, 1.0
    lr = 0.05

    def loss(a, b):
        total = 0.0
        for x, y in zip(xs, ys):
            diff = a * x + b - y
            total = diff * diff + total
        return total

    loss_grad = value_and_grad(loss, argnums=(0, 1))
    for epoch in range(200):
        value, (da, db) = loss_grad(a_val, b_val)
        a_val -= lr * da
        b_val -= lr * db
        if epoch % 50 == 0:
            print(f"Epoch {epoch}: loss={value:.6f} a={a_val:.4f} b={b_val:.4f}")
    print(f"Final model: y = {a_val:.4f} * x + {b_val:.4f}")


if __name__ == "__main__":
    sg.configure_logging("INFO")
    demonstrate_basic_autodiff()
    demonstrate_shared_nodes()
    demonstrate_nan_propagation()
    demonstrate_gradient_functions()
    demonstrate_gradient_descent()
