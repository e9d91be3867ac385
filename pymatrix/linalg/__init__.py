"""
Linear algebra on pymatrix matrices.

Solvers, decompositions, eigenproblems and the SVD, built on the
matrix-level wrappers in pymatrix.core.compute.blas. Inputs are copied
before they reach LAPACK, so no function here modifies its arguments.
"""

from pymatrix.linalg.decompose import (
    LUDecomposition,
    QRDecomposition,
    cholesky,
    lu,
    qr,
)
from pymatrix.linalg.eigen import (
    eigenvalues,
    eigenvectors,
    symmetric_eigenvalues,
    symmetric_eigenvectors,
    symmetric_generalized_eigenvalues,
    symmetric_generalized_eigenvectors,
)
from pymatrix.linalg.singular import full_svd, sparse_svd, svd_values
from pymatrix.linalg.solve import (
    pinv,
    solve,
    solve_least_squares,
    solve_positive,
    solve_symmetric,
)

__all__ = [
    # Solvers
    'solve',
    'solve_symmetric',
    'solve_positive',
    'solve_least_squares',
    'pinv',
    # Decompositions
    'LUDecomposition',
    'QRDecomposition',
    'lu',
    'cholesky',
    'qr',
    # Eigenproblems
    'symmetric_eigenvalues',
    'symmetric_eigenvectors',
    'eigenvalues',
    'eigenvectors',
    'symmetric_generalized_eigenvalues',
    'symmetric_generalized_eigenvectors',
    # Singular value decomposition
    'full_svd',
    'sparse_svd',
    'svd_values',
]
