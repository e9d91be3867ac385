"""
PyMatrix: dense matrices over BLAS/LAPACK for Python.

Column-major matrices of doubles, floats, complex doubles and complex
floats with chainable in-place arithmetic, backed by a swappable
BLAS/LAPACK backend (scipy by default, pure numpy as a reference).

Submodules:
    matrix: DoubleMatrix, FloatMatrix, ComplexDoubleMatrix, ComplexFloatMatrix
    linalg: Solvers, decompositions, eigenproblems, SVD
    functions: Elementwise functions and the matrix exponential
    geometry: Centering, normalization, pairwise distances
    permutations: Random permutations and pivot permutation matrices
    core: Backends, the LAPACK call layer, configuration, exceptions
"""

__version__ = "0.1.0"

from pymatrix.matrix import (
    ComplexDoubleMatrix,
    ComplexFloatMatrix,
    DoubleMatrix,
    FloatMatrix,
    Matrix,
)
from pymatrix import core
from pymatrix import linalg
from pymatrix import functions
from pymatrix import geometry
from pymatrix import permutations

__all__ = [
    "__version__",
    "Matrix",
    "DoubleMatrix",
    "FloatMatrix",
    "ComplexDoubleMatrix",
    "ComplexFloatMatrix",
    "core",
    "linalg",
    "functions",
    "geometry",
    "permutations",
]
