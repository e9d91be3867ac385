"""
Linear-algebra backends for pymatrix.

Submodules:
    precision: Scalar kinds (dtype, routine prefix, file tag) and epsilons
    reference: Pure numpy implementation of the routine set
    native: scipy.linalg.blas / scipy.linalg.lapack bindings
"""

from pymatrix.core.backends._base import BackendBase
from pymatrix.core.backends.native import NativeBackend
from pymatrix.core.backends.reference import ReferenceBackend
from pymatrix.core.exceptions import ValidationError
from pymatrix.core.protocols import Backend


BACKENDS: dict[str, type[BackendBase]] = {
    'reference': ReferenceBackend,
    'native': NativeBackend,
}


def create_backend(name: str) -> Backend:
    """
    Instantiate a backend by name.

    Args:
        name: 'reference' or 'native'

    Raises:
        ValidationError: If the name is unknown
    """
    try:
        return BACKENDS[name.lower()]()
    except KeyError:
        raise ValidationError(
            f"backend: unknown backend {name!r}, expected one of {sorted(BACKENDS)}"
        ) from None


__all__ = [
    "Backend",
    "BackendBase",
    "BACKENDS",
    "NativeBackend",
    "ReferenceBackend",
    "create_backend",
]
