"""
Core infrastructure for pymatrix.

Shared abstractions used by the matrix types and the linear-algebra
functions.

Key components:
    protocols: Backend protocol
    exceptions: Exception hierarchy
    validation: Shape contract checks
    config: Active backend selection
    backends: Scalar kinds, reference and native BLAS/LAPACK backends
    compute: LAPACK call layer (workspace protocol) and matrix-level wrappers
"""

from pymatrix.core.protocols import Backend
from pymatrix.core.config import get_backend, set_backend, use_backend
from pymatrix.core.exceptions import (
    PyMatrixError,
    ValidationError,
    SizeMismatchError,
    BackendError,
    UnsupportedRoutineError,
    BackendArgumentError,
    LapackError,
    LapackArgumentError,
    LapackConvergenceError,
    LapackPositivityError,
    LapackSingularityError,
    NoEigenResultError,
    MatrixFormatError,
)

__all__ = [
    # Protocols
    "Backend",
    # Configuration
    "get_backend",
    "set_backend",
    "use_backend",
    # Exceptions
    "PyMatrixError",
    "ValidationError",
    "SizeMismatchError",
    "BackendError",
    "UnsupportedRoutineError",
    "BackendArgumentError",
    "LapackError",
    "LapackArgumentError",
    "LapackConvergenceError",
    "LapackPositivityError",
    "LapackSingularityError",
    "NoEigenResultError",
    "MatrixFormatError",
]
