"""
Numeric precision of leaf values.

Node values and gradients are Python floats (float64). With a lower
precision mode active, values entering the graph as leaves are rounded
through the mode's NumPy dtype; operation results are then computed in
float64 from those rounded inputs.
"""

from enum import Enum
from typing import Union

import numpy as np


class PrecisionMode(Enum):
    """Dtype used to round leaf values."""
    FLOAT16 = "float16"
    FLOAT32 = "float32"
    FLOAT64 = "float64"

    @property
    def numpy_dtype(self):
        return np.dtype(self.value).type


def _as_mode(mode: Union[PrecisionMode, str]) -> PrecisionMode:
    if isinstance(mode, PrecisionMode):
        return mode
    if isinstance(mode, str):
        try:
            return PrecisionMode(mode.lower())
        except ValueError:
            pass
    raise ValueError(f"Unsupported precision mode: {mode!r}")


class PrecisionConfig:
    """Process-wide precision settings."""

    _mode: PrecisionMode = PrecisionMode.FLOAT64
    _enforce: bool = True

    @classmethod
    def set_precision(cls, mode: Union[PrecisionMode, str]) -> None:
        cls._mode = _as_mode(mode)

    @classmethod
    def get_precision(cls) -> PrecisionMode:
        return cls._mode

    @classmethod
    def set_enforcement(cls, enforce: bool) -> None:
        cls._enforce = bool(enforce)

    @classmethod
    def is_enforcing(cls) -> bool:
        return cls._enforce

    @classmethod
    def enforce_precision(cls, value: float) -> float:
        """Round ``value`` through the active dtype; overflow gives ``inf``."""
        if not cls._enforce or cls._mode is PrecisionMode.FLOAT64:
            return float(value)
        with np.errstate(over="ignore"):
            return float(cls._mode.numpy_dtype(value))

    @classmethod
    def reset(cls) -> None:
        cls._mode = PrecisionMode.FLOAT64
        cls._enforce = True


class precision_context:
    """
    Temporarily switch precision mode.

    Example:
        with precision_context("float32"):
            x = leaf(0.1)  # stored as float(np.float32(0.1))
    """

    def __init__(self, mode: Union[PrecisionMode, str], enforce: bool = True):
        self.mode = _as_mode(mode)
        self.enforce = enforce
        self._saved = None

    def __enter__(self):
        self._saved = (PrecisionConfig.get_precision(), PrecisionConfig.is_enforcing())
        PrecisionConfig.set_precision(self.mode)
        PrecisionConfig.set_enforcement(self.enforce)
        return self

    def __exit__(self, _exc_type, _exc_val, _exc_tb):
        mode, enforce = self._saved
        PrecisionConfig.set_precision(mode)
        PrecisionConfig.set_enforcement(enforce)
