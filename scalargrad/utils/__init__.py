"""Utility helpers: logging and numeric coercion."""

from .bridge import is_scalar_number, to_float, to_value
from .logging import KeyValueFormatter, configure_logging, get_logger

__all__ = [
    "get_logger",
    "configure_logging",
    "KeyValueFormatter",
    "is_scalar_number",
    "to_float",
    "to_value",
]
