"""
Exception hierarchy for pymatrix.

All exceptions inherit from PyMatrixError to allow catching any
library-specific error. Shape violations, backend failures and LAPACK
status codes each get their own branch so callers can tell a programming
error from a numerical failure.

Design principles:
    - Exceptions carry diagnostic information as attributes
    - Error messages are actionable with actual vs expected values
    - Never catch and re-raise with less information
"""


class PyMatrixError(Exception):
    """Base exception for all pymatrix errors."""
    pass


class ValidationError(PyMatrixError, ValueError):
    """
    Input validation failed.

    Raised when caller-provided arguments fail validation checks.
    """
    pass


class SizeMismatchError(ValidationError):
    """
    Matrix shapes or lengths are incompatible.

    Raised by every shape contract (same size, same length, multiplies
    with, vector lengths for rank-one updates) and when an in-place
    operation would have to resize a result matrix that is also one of
    its operands.

    Attributes:
        expected: Expected size, shape or length, if known
        actual: Actual size, shape or length, if known
    """

    def __init__(
        self,
        message: str,
        expected: object = None,
        actual: object = None,
    ):
        super().__init__(message)
        self.expected = expected
        self.actual = actual


class BackendError(PyMatrixError):
    """Base class for problems raised by a linear-algebra backend."""
    pass


class UnsupportedRoutineError(BackendError):
    """
    Backend does not provide the requested routine.

    Attributes:
        backend: Name of the backend that was asked
        routine: Prefixed routine name, e.g. 'zsyev'
    """

    def __init__(self, backend: str, routine: str):
        super().__init__(f"backend '{backend}' does not provide routine '{routine}'")
        self.backend = backend
        self.routine = routine


class BackendArgumentError(BackendError, ValueError):
    """
    A BLAS routine was called with arguments it cannot honour.

    BLAS routines have no status code, so a negative count, a zero
    stride or an element range outside the buffer is raised directly.

    Attributes:
        routine: Prefixed routine name
        argument: Name of the offending argument
    """

    def __init__(self, message: str, routine: str, argument: str):
        super().__init__(f"{routine}: {message}")
        self.routine = routine
        self.argument = argument


class LapackError(PyMatrixError):
    """
    A LAPACK routine returned a non-zero status code.

    Attributes:
        routine: Routine family or prefixed name
        info: The status code returned by the routine
    """

    def __init__(self, message: str, routine: str, info: int):
        super().__init__(message)
        self.routine = routine
        self.info = info


class LapackArgumentError(LapackError):
    """
    A LAPACK routine rejected argument number -info.

    This always indicates a bug in the calling code, never a property of
    the data.
    """
    pass


class LapackConvergenceError(LapackError):
    """An iterative LAPACK algorithm did not converge."""
    pass


class LapackPositivityError(LapackError):
    """
    A matrix required to be positive definite is not.

    The leading minor of order ``order`` is not positive definite.
    """

    def __init__(self, message: str, routine: str, info: int, order: int | None = None):
        super().__init__(message, routine, info)
        self.order = order if order is not None else info


class LapackSingularityError(LapackError):
    """A triangular factor has an exact zero on its diagonal."""
    pass


class NoEigenResultError(LapackError):
    """A range-restricted eigenvalue query found no eigenvalues."""
    pass


class MatrixFormatError(PyMatrixError, OSError):
    """
    Persisted or textual matrix data is malformed.

    Raised on a type tag mismatch when loading the binary format, on
    inconsistent column counts in ASCII/CSV files, and on unparsable
    matrix literals.

    Attributes:
        path: File the data came from, if any
        line: 1-based line number of the offending row, if known
    """

    def __init__(self, message: str, path: str | None = None, line: int | None = None):
        super().__init__(message)
        self.path = path
        self.line = line
