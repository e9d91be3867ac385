"""
Elementwise mathematical functions and the matrix exponential.

Every function comes in two forms: ``expi(x)`` overwrites ``x`` and
returns it, ``exp(x)`` leaves ``x`` alone and returns a new matrix.
Results follow IEEE-754 (log(0) is -inf, sqrt(-1) is NaN for real
kinds) without warnings.

Example:
    >>> from pymatrix import DoubleMatrix, functions
    >>> print(functions.sqrt(DoubleMatrix.from_rows([[4, 9]])))
    [2.000000, 3.000000]
"""

import math
from typing import Callable

import numpy as np

from pymatrix.core.exceptions import ValidationError
from pymatrix.core.validation import check_square
from pymatrix.linalg.solve import solve
from pymatrix.matrix.base import Matrix


def _elementwise(ufunc: np.ufunc, real_only: bool = False) -> tuple[Callable, Callable]:
    name = ufunc.__name__

    def in_place(x: Matrix) -> Matrix:
        if real_only and x.kind.is_complex:
            raise ValidationError(f"{name}: not defined for {x.kind.name} matrices")
        with np.errstate(all='ignore'):
            ufunc(x.data, out=x.data)
        return x

    def allocating(x: Matrix) -> Matrix:
        return in_place(x.dup())

    in_place.__name__ = f"{name}i"
    in_place.__doc__ = f"Apply {name} to every element of x in place; returns x."
    allocating.__name__ = name
    allocating.__doc__ = f"New matrix with {name} applied to every element of x."
    return in_place, allocating


absi, abs = _elementwise(np.abs)
acosi, acos = _elementwise(np.arccos)
asini, asin = _elementwise(np.arcsin)
atani, atan = _elementwise(np.arctan)
cbrti, cbrt = _elementwise(np.cbrt, real_only=True)
ceili, ceil = _elementwise(np.ceil, real_only=True)
cosi, cos = _elementwise(np.cos)
coshi, cosh = _elementwise(np.cosh)
expi, exp = _elementwise(np.exp)
floori, floor = _elementwise(np.floor, real_only=True)
logi, log = _elementwise(np.log)
log10i, log10 = _elementwise(np.log10)
signumi, signum = _elementwise(np.sign)
sini, sin = _elementwise(np.sin)
sinhi, sinh = _elementwise(np.sinh)
sqrti, sqrt = _elementwise(np.sqrt)
tani, tan = _elementwise(np.tan)
tanhi, tanh = _elementwise(np.tanh)


def powi(x, e):
    """
    Raise elementwise, in place.

    ``powi(matrix, scalar)`` and ``powi(matrix, matrix)`` overwrite the
    base matrix; ``powi(scalar, matrix)`` overwrites the exponent matrix.

    Raises:
        SizeMismatchError: If two matrices differ in length
    """
    if not isinstance(x, Matrix):
        with np.errstate(all='ignore'):
            np.power(e._coerce(x), e.data, out=e.data)
        return e
    if isinstance(e, Matrix):
        x.check_length(e.length)
        exponent = e.data
    else:
        exponent = x._coerce(e)
    with np.errstate(all='ignore'):
        np.power(x.data, exponent, out=x.data)
    return x


def pow(x, e):
    """Elementwise power as a new matrix; see powi."""
    if isinstance(x, Matrix):
        return powi(x.dup(), e)
    return powi(x, e.dup())


# Pade coefficients for the scaled matrix exponential (Golub & Van Loan 11.3.1)
_PADE = (
    1.0, 0.5, 0.12, 0.01833333333333333, 0.0019927536231884053,
    1.630434782608695e-4, 1.0351966873706e-5, 5.175983436853e-7,
    2.0431513566525e-8, 6.306022705717593e-10, 1.4837700484041396e-11,
    2.5291534915979653e-13, 2.8101705462199615e-15, 1.5440497506703084e-17,
)


def _horner(coefficients, a2: Matrix, a4: Matrix, a6: Matrix) -> Matrix:
    # c0 I + c2 A^2 + c4 A^4 + (c6 I + c8 A^2 + c10 A^4 + c12 A^6) A^6
    c = coefficients
    eye = type(a2).eye(a2.rows)
    inner = eye.mul(c[3]).addi(a2.mul(c[4])).addi(a4.mul(c[5])).addi(a6.mul(c[6]))
    return eye.mul(c[0]).addi(a2.mul(c[1])).addi(a4.mul(c[2])).addi(inner.mmul(a6))


def expm(a: Matrix) -> Matrix:
    """
    Matrix exponential of a square matrix.

    A is scaled by 2**-j so that its largest element is below 1, the
    exponential of the scaled matrix is approximated by a Pade fraction
    D^-1 N, and the result is squared j times.

    Raises:
        SizeMismatchError: If A is not square
    """
    check_square(a, "a")
    norm = a.normmax()
    j = max(0, 1 + math.floor(math.log2(norm))) if norm > 0 else 0
    scaled = a.div(2.0 ** j)

    a2 = scaled.mmul(scaled)
    a4 = a2.mmul(a2)
    a6 = a4.mmul(a2)
    u = _horner(_PADE[0::2], a2, a4, a6)
    v = _horner(_PADE[1::2], a2, a4, a6)

    av = scaled.mmul(v)
    numerator = u.add(av)
    denominator = u.subi(av)
    f = solve(denominator, numerator)
    for _ in range(j):
        f = f.mmul(f)
    return f


__all__ = [
    'absi', 'abs', 'acosi', 'acos', 'asini', 'asin', 'atani', 'atan',
    'cbrti', 'cbrt', 'ceili', 'ceil', 'cosi', 'cos', 'coshi', 'cosh',
    'expi', 'exp', 'floori', 'floor', 'logi', 'log', 'log10i', 'log10',
    'powi', 'pow', 'signumi', 'signum', 'sini', 'sin', 'sinhi', 'sinh',
    'sqrti', 'sqrt', 'tani', 'tan', 'tanhi', 'tanh', 'expm',
]
