"""
Random permutations and permutation matrices.

Randomness comes from the package generator (pymatrix.core.rng), so
seeding it makes these reproducible.
"""

import numpy as np

from pymatrix.core import rng
from pymatrix.core.exceptions import ValidationError
from pymatrix.matrix.real import DoubleMatrix


def random_permutation(size: int) -> np.ndarray:
    """A uniformly random permutation of 0..size-1."""
    if size < 0:
        raise ValidationError(f"size: must be non-negative, got {size}")
    return rng.generator().permutation(size)


def random_subset(k: int, n: int) -> np.ndarray:
    """
    A uniformly random k-element subset of 0..n-1, in increasing order.

    Raises:
        ValidationError: Unless 0 < k <= n
    """
    if not 0 < k <= n:
        raise ValidationError(f"k: subset size must satisfy 0 < k <= n, got k={k}, n={n}")
    return np.sort(rng.generator().choice(n, size=k, replace=False))


def permutation_matrix_from_pivot_indices(size: int, ipiv, cls=DoubleMatrix):
    """
    Permutation matrix P of an LU factorization with A = P L U.

    Args:
        size: Number of rows of the factorized matrix
        ipiv: 0-based pivots as returned by getrf; row i was exchanged
            with row ipiv[i], in order
        cls: Matrix class of the result
    """
    indices = np.arange(size)
    for i, p in enumerate(ipiv):
        indices[i], indices[p] = indices[p], indices[i]
    result = cls(size, size)
    for i in range(size):
        result.put(int(indices[i]), i, 1)
    return result


__all__ = ['random_permutation', 'random_subset', 'permutation_matrix_from_pivot_indices']
