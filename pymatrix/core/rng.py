"""
Package-wide random number generator.

Matrix.rand/randn and the permutation helpers draw from one
numpy Generator so a single seed() call makes a session reproducible.
"""

import numpy as np


_generator = np.random.default_rng()


def seed(value: int | None) -> None:
    """Reseed the package generator (None draws fresh OS entropy)."""
    global _generator
    _generator = np.random.default_rng(value)


def generator() -> np.random.Generator:
    """The current package generator."""
    return _generator
