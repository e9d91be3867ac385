"""
pytest configuration and shared fixtures.
"""

import pytest
import numpy as np

from pymatrix.core.config import use_backend
from pymatrix.core import rng as package_rng


@pytest.fixture
def rng():
    """Seeded random number generator for reproducible tests."""
    return np.random.default_rng(42)


@pytest.fixture(params=['reference', 'native'])
def backend(request):
    """Run the test once per backend."""
    with use_backend(request.param) as active:
        yield active


@pytest.fixture
def seeded():
    """Seed the package generator used by rand/randn and permutations."""
    package_rng.seed(1234)
    yield
    package_rng.seed(None)


@pytest.fixture
def spd_matrix(rng):
    """Well-conditioned 4x4 symmetric positive definite matrix (numpy)."""
    a = rng.standard_normal((4, 4))
    return a @ a.T + 4 * np.eye(4)


@pytest.fixture
def symmetric_matrix(rng):
    """4x4 symmetric indefinite matrix (numpy)."""
    a = rng.standard_normal((4, 4))
    return (a + a.T) / 2
