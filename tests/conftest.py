"""Global test configuration and fixtures.

Seeds RNGs for deterministic behavior, restores global configuration after
every test and auto-marks property tests.
"""

import os
import random
from pathlib import Path

import numpy as np
import pytest

from scalargrad import BackwardConfig, PrecisionConfig, reset_default_graph


def pytest_sessionstart(session: pytest.Session) -> None:
    """Seed common RNGs to improve test determinism."""
    seed = int(os.environ.get("SCALARGRAD_TEST_SEED", "12345"))
    random.seed(seed)
    np.random.seed(seed)


@pytest.fixture(autouse=True)
def _restore_global_state():
    """Give every test default configuration and an empty default graph."""
    BackwardConfig.reset()
    PrecisionConfig.reset()
    reset_default_graph()
    yield
    BackwardConfig.reset()
    PrecisionConfig.reset()
    reset_default_graph()


def pytest_collection_modifyitems(session: pytest.Session, config: pytest.Config, items: list) -> None:
    """Auto-mark tests under tests/property with the 'property' marker."""
    for item in items:
        parts = Path(str(item.fspath)).parts
        if "property" in parts and "tests" in parts:
            item.add_marker(pytest.mark.property)
