"""
Process-wide configuration: which backend executes BLAS/LAPACK routines.

The active backend is chosen lazily on first use from the PYMATRIX_BACKEND
environment variable ('native' when unset). Matrices and the call layer
always ask get_backend() at call time, so switching backends takes
effect immediately for every subsequent operation.

Not thread-safe: like matrices themselves, the setting assumes a single
writer.
"""

import logging
import os
from contextlib import contextmanager
from typing import Iterator

from pymatrix.core.backends import create_backend
from pymatrix.core.protocols import Backend
from pymatrix.core.exceptions import ValidationError


logger = logging.getLogger(__name__)

BACKEND_ENV_VAR = 'PYMATRIX_BACKEND'
DEFAULT_BACKEND = 'native'

_active: Backend | None = None


def _resolve(backend: str | Backend) -> Backend:
    if isinstance(backend, str):
        return create_backend(backend)
    if not isinstance(backend, Backend):
        raise ValidationError(
            f"backend: expected a backend name or Backend instance, got {type(backend).__name__}"
        )
    return backend


def get_backend() -> Backend:
    """Return the active backend, creating it from the environment on first use."""
    global _active
    if _active is None:
        name = os.environ.get(BACKEND_ENV_VAR, DEFAULT_BACKEND)
        _active = create_backend(name)
        logger.debug("selected backend %r from %s", _active.name,
                     BACKEND_ENV_VAR if BACKEND_ENV_VAR in os.environ else "default")
    return _active


def set_backend(backend: str | Backend) -> Backend:
    """
    Replace the active backend.

    Args:
        backend: Backend name ('reference', 'native') or instance

    Returns:
        The backend that was active before the call

    Raises:
        ValidationError: If the name is unknown or the object is not a Backend
    """
    global _active
    previous = get_backend()
    _active = _resolve(backend)
    logger.debug("backend switched from %r to %r", previous.name, _active.name)
    return previous


@contextmanager
def use_backend(backend: str | Backend) -> Iterator[Backend]:
    """
    Temporarily activate a backend, restoring the previous one on exit.

    Example:
        >>> with use_backend('reference'):
        ...     DoubleMatrix.eye(3).mmul(DoubleMatrix.ones(3, 1))
    """
    global _active
    previous = set_backend(backend)
    try:
        yield _active
    finally:
        _active = previous
