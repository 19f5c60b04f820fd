"""
pytest configuration and shared fixtures.
"""

import pytest
import numpy as np

from pyprobability import NumpyRandomSource


@pytest.fixture
def rng():
    """Seeded numpy generator for building test inputs."""
    return np.random.default_rng(42)


@pytest.fixture
def source():
    """Seeded random source for reproducible simulations."""
    return NumpyRandomSource(42)


@pytest.fixture
def two_state_chain():
    """Transition matrix with stationary distribution [0.375, 0.625]."""
    return np.array([
        [0.5, 0.5],
        [0.3, 0.7],
    ])
