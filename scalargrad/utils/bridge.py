"""Coercion of Python/NumPy numerics into node values.

Centralizes the numeric checks used by leaf construction, operator
overloads and power exponents.
"""

import numbers
from typing import Any

import numpy as np

from ..core.precision_config import PrecisionConfig


def is_scalar_number(x: Any) -> bool:
	"""True for real Python numbers, NumPy scalars and 0-d/size-1 arrays.

	Booleans are accepted like Python does in arithmetic; complex numbers
	are not.
	"""
	if isinstance(x, (numbers.Real, np.integer, np.floating, np.bool_)):
		return True
	if isinstance(x, np.ndarray):
		return x.size == 1 and np.issubdtype(x.dtype, np.number) and not np.iscomplexobj(x)
	return False


def to_float(x: Any) -> float:
	"""Coerce a scalar numeric into a Python float.

	- Python int/float/bool and NumPy scalars convert via float()
	- NumPy arrays with a single element convert that element
	- Anything else raises TypeError
	"""
	if not is_scalar_number(x):
		raise TypeError(f"Unsupported type for a scalar value: {type(x).__name__}")
	if isinstance(x, np.ndarray):
		return float(x.reshape(()))
	return float(x)


def to_value(x: Any) -> float:
	"""Coerce ``x`` to float and apply the configured precision."""
	return PrecisionConfig.enforce_precision(to_float(x))
