"""
Eigenvalues and eigenvectors.

Symmetric and generalized symmetric-definite problems are solved for the
real kinds only and read the upper triangle. General problems (geev) work
for every kind and always return complex results.

Generalized problems solve A x = lambda B x with B positive definite.
Their range-restricted forms take either ``value_range=(vl, vu)``
(eigenvalues in the half-open interval (vl, vu]) or
``index_range=(il, iu)`` (the il-th through iu-th smallest eigenvalues,
0-based and inclusive).
"""

import logging
import warnings

import numpy as np

from pymatrix.core.backends.precision import complex_kind
from pymatrix.core.compute import blas
from pymatrix.core.exceptions import NoEigenResultError, ValidationError
from pymatrix.core.validation import check_real, check_same_size, check_square
from pymatrix.matrix.base import Matrix, matrix_class


logger = logging.getLogger(__name__)

# Absolute tolerance handed to sygvx for the range-restricted problems
RANGE_ABSTOL = 1e-9


# ═══════════════════════════════════════════════════════════════════════
# Symmetric
# ═══════════════════════════════════════════════════════════════════════


def symmetric_eigenvalues(a: Matrix) -> Matrix:
    """Eigenvalues of a symmetric matrix in ascending order, as a column vector."""
    check_square(a, "a")
    check_real(a, "symmetric_eigenvalues")
    cls = type(a)
    w = cls(a.rows, 1)
    blas.syevr('N', 'A', 'U', a.dup(), 0.0, 0.0, 0, 0, 0.0, w, cls(1, 1))
    return w


def symmetric_eigenvectors(a: Matrix) -> tuple[Matrix, Matrix]:
    """
    Eigen-decomposition of a symmetric matrix.

    Returns:
        (V, D) with orthonormal eigenvectors in the columns of V and the
        ascending eigenvalues on the diagonal of D, so that A V = V D
    """
    check_square(a, "a")
    check_real(a, "symmetric_eigenvectors")
    cls = type(a)
    w = cls(a.rows, 1)
    v = cls(a.rows, a.rows)
    blas.syevr('V', 'A', 'U', a.dup(), 0.0, 0.0, 0, 0, 0.0, w, v)
    return v, cls.diag(w)


# ═══════════════════════════════════════════════════════════════════════
# General
# ═══════════════════════════════════════════════════════════════════════


def eigenvalues(a: Matrix) -> Matrix:
    """Eigenvalues of a general square matrix as a complex column vector."""
    check_square(a, "a")
    cls = type(a)
    n = a.rows
    if a.kind.is_complex:
        e = cls(n, 1)
        blas.geev('N', 'N', a.dup(), e, None, cls(1, 1), cls(1, 1))
        return e
    wr, wi = cls(n, 1), cls(n, 1)
    blas.geev('N', 'N', a.dup(), wr, wi, cls(1, 1), cls(1, 1))
    return matrix_class(complex_kind(a.kind)).from_parts(wr, wi)


def _unpack_real_vectors(vr: Matrix, wi: Matrix, dtype) -> np.ndarray:
    # A conjugate pair occupies columns (re, im) with the positive
    # imaginary part first.
    packed = vr._grid()
    n = vr.columns
    vectors = np.zeros((vr.rows, n), dtype=dtype)
    i = 0
    while i < n:
        if wi.data[i] == 0 or i + 1 == n:
            vectors[:, i] = packed[:, i]
            i += 1
        else:
            vectors[:, i] = packed[:, i] + 1j * packed[:, i + 1]
            vectors[:, i + 1] = np.conj(vectors[:, i])
            i += 2
    return vectors


def eigenvectors(a: Matrix) -> tuple[Matrix, Matrix]:
    """
    Right eigenvectors of a general square matrix.

    Returns:
        (V, D), both complex, with A V = V D
    """
    check_square(a, "a")
    cls = type(a)
    n = a.rows
    if a.kind.is_complex:
        e = cls(n, 1)
        v = cls(n, n)
        blas.geev('N', 'V', a.dup(), e, None, cls(1, 1), v)
        return v, cls.diag(e)
    wr, wi = cls(n, 1), cls(n, 1)
    vr = cls(n, n)
    blas.geev('N', 'V', a.dup(), wr, wi, cls(1, 1), vr)
    complex_cls = matrix_class(complex_kind(a.kind))
    v = complex_cls._from_grid(_unpack_real_vectors(vr, wi, complex_cls.kind.dtype))
    return v, complex_cls.diag(complex_cls.from_parts(wr, wi))


# ═══════════════════════════════════════════════════════════════════════
# Generalized symmetric-definite
# ═══════════════════════════════════════════════════════════════════════


def _check_pair(a: Matrix, b: Matrix, operation: str) -> None:
    check_square(a, "a")
    check_same_size(a, b, "a", "b")
    check_real(a, operation)
    if b.kind != a.kind:
        raise ValidationError(f"b: expected a {a.kind.name} matrix, got {b.kind.name}")


def _range_arguments(n: int, value_range, index_range):
    """(range flag, vl, vu, 1-based il, 1-based iu, expected count or None)"""
    if value_range is not None and index_range is not None:
        raise ValidationError("give either value_range or index_range, not both")
    if value_range is not None:
        vl, vu = value_range
        if not vu > vl:
            raise ValidationError(
                f"value_range: upper bound must be greater than lower bound, got ({vl}, {vu})"
            )
        return 'V', float(vl), float(vu), 0, 0, None
    il, iu = index_range
    if not 0 <= il <= iu < n:
        raise ValidationError(
            f"index_range: need 0 <= il <= iu < {n}, got ({il}, {iu})"
        )
    return 'I', 0.0, 0.0, il + 1, iu + 1, iu - il + 1


def _selected(a: Matrix, b: Matrix, jobz: str, value_range, index_range):
    n = a.rows
    cls = type(a)
    range_, vl, vu, il, iu, expected = _range_arguments(n, value_range, index_range)
    w = cls(n, 1)
    z = cls(n, n if expected is None else expected) if jobz == 'V' else cls(1, 1)
    found = blas.sygvx(1, jobz, range_, 'U', a.dup(), b.dup(), vl, vu, il, iu,
                       RANGE_ABSTOL, w, z)
    if found == 0:
        raise NoEigenResultError(
            f"sygvx: no eigenvalues found in the requested range "
            f"({value_range if value_range is not None else index_range})",
            'sygvx', 0,
        )
    if expected is not None and found < expected:
        warnings.warn(
            f"sygvx: requested {expected} eigenvalues, found {found}",
            RuntimeWarning,
            stacklevel=3,
        )
    logger.debug("sygvx: %d eigenvalues in range %s", found, range_)
    values = w.get_range(0, found)
    if jobz == 'N':
        return values, None
    return values, z.get_range(0, n, 0, found)


def symmetric_generalized_eigenvalues(
    a: Matrix,
    b: Matrix,
    value_range: tuple[float, float] | None = None,
    index_range: tuple[int, int] | None = None,
) -> Matrix:
    """
    Eigenvalues of A x = lambda B x in ascending order.

    Without a range all n eigenvalues are computed (sygvd); with one,
    only the selected ones (sygvx).

    Raises:
        ValidationError: For an empty or out-of-bounds range
        NoEigenResultError: If no eigenvalue falls in ``value_range``
        LapackPositivityError: If B is not positive definite
    """
    _check_pair(a, b, "symmetric_generalized_eigenvalues")
    if value_range is None and index_range is None:
        w = type(a)(a.rows, 1)
        blas.sygvd(1, 'N', 'U', a.dup(), b.dup(), w)
        return w
    values, _ = _selected(a, b, 'N', value_range, index_range)
    return values


def symmetric_generalized_eigenvectors(
    a: Matrix,
    b: Matrix,
    value_range: tuple[float, float] | None = None,
    index_range: tuple[int, int] | None = None,
) -> tuple[Matrix, Matrix]:
    """
    Eigenvectors and eigenvalues of A x = lambda B x.

    Returns:
        (V, w): eigenvectors in the columns of V (B-orthonormal) and the
        matching eigenvalues as a column vector
    """
    _check_pair(a, b, "symmetric_generalized_eigenvectors")
    if value_range is None and index_range is None:
        v = a.dup()
        w = type(a)(a.rows, 1)
        blas.sygvd(1, 'V', 'U', v, b.dup(), w)
        return v, w
    values, vectors = _selected(a, b, 'V', value_range, index_range)
    return vectors, values


__all__ = [
    'symmetric_eigenvalues', 'symmetric_eigenvectors',
    'eigenvalues', 'eigenvectors',
    'symmetric_generalized_eigenvalues', 'symmetric_generalized_eigenvectors',
]
