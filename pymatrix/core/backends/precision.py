"""
Scalar kinds and numerical precision constants.

A ScalarKind is the numeric-component trait shared by the matrix type,
the call layer and both backends: the numpy dtype of an element, the
dtype of one stored component, the BLAS/LAPACK routine prefix and the
tag used by the binary file format. One generic matrix implementation is
parameterized by these four kinds instead of four hand-written copies.
"""

from dataclasses import dataclass

import numpy as np
from numpy.typing import DTypeLike


# Machine epsilon for float64
EPSILON_64: float = np.finfo(np.float64).eps  # ~2.22e-16

# Machine epsilon for float32
EPSILON_32: float = np.finfo(np.float32).eps  # ~1.19e-7


@dataclass(frozen=True)
class ScalarKind:
    """
    Numeric-component trait for one matrix element type.

    Attributes:
        name: Human readable name ('double', 'float', 'complex double', ...)
        dtype: numpy dtype of one matrix element
        component_dtype: numpy dtype of one stored component
        prefix: BLAS/LAPACK routine prefix ('s', 'd', 'c', 'z')
        tag: Type tag written by the binary file format
    """
    name: str
    dtype: np.dtype
    component_dtype: np.dtype
    prefix: str
    tag: str

    @property
    def is_complex(self) -> bool:
        return self.dtype.kind == 'c'

    @property
    def components_per_element(self) -> int:
        return 2 if self.is_complex else 1

    @property
    def epsilon(self) -> float:
        return float(np.finfo(self.component_dtype).eps)

    @property
    def is_single(self) -> bool:
        return self.component_dtype == np.float32

    def routine(self, family: str) -> str:
        """Prefixed routine name for a family, e.g. 'd' + 'gemm'."""
        return self.prefix + family

    def zeros(self, n: int) -> np.ndarray:
        return np.zeros(n, dtype=self.dtype)

    def cast(self, value) -> np.generic:
        """Convert a Python or numpy scalar to this kind's element type."""
        return self.dtype.type(value)

    def __repr__(self) -> str:
        return f"ScalarKind({self.name!r})"


FLOAT32 = ScalarKind('float', np.dtype(np.float32), np.dtype(np.float32), 's', 'float')
FLOAT64 = ScalarKind('double', np.dtype(np.float64), np.dtype(np.float64), 'd', 'double')
COMPLEX64 = ScalarKind('complex float', np.dtype(np.complex64), np.dtype(np.float32), 'c', 'float')
COMPLEX128 = ScalarKind('complex double', np.dtype(np.complex128), np.dtype(np.float64), 'z', 'double')

ALL_KINDS = (FLOAT32, FLOAT64, COMPLEX64, COMPLEX128)

_BY_DTYPE = {kind.dtype: kind for kind in ALL_KINDS}
_BY_PREFIX = {kind.prefix: kind for kind in ALL_KINDS}
_REAL_TO_COMPLEX = {FLOAT32: COMPLEX64, FLOAT64: COMPLEX128}
_COMPLEX_TO_REAL = {COMPLEX64: FLOAT32, COMPLEX128: FLOAT64}


def kind_of(dtype: DTypeLike) -> ScalarKind:
    """
    Look up the scalar kind for a numpy dtype.

    Args:
        dtype: numpy dtype (or anything np.dtype accepts)

    Returns:
        The matching ScalarKind

    Raises:
        TypeError: If the dtype is not one of the four supported kinds
    """
    dt = np.dtype(dtype)
    try:
        return _BY_DTYPE[dt]
    except KeyError:
        raise TypeError(
            f"unsupported element dtype {dt}; expected one of "
            f"{', '.join(str(k.dtype) for k in ALL_KINDS)}"
        ) from None


def kind_for_prefix(prefix: str) -> ScalarKind:
    """Look up the scalar kind for a routine prefix ('s', 'd', 'c', 'z')."""
    return _BY_PREFIX[prefix]


def complex_kind(kind: ScalarKind) -> ScalarKind:
    """Complex kind with the same component precision."""
    return kind if kind.is_complex else _REAL_TO_COMPLEX[kind]


def real_kind(kind: ScalarKind) -> ScalarKind:
    """Real kind with the same component precision."""
    return _COMPLEX_TO_REAL[kind] if kind.is_complex else kind

