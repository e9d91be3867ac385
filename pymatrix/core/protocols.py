"""
Core protocols for pymatrix.

The matrix type and the call layer never import a BLAS/LAPACK binding
directly. They talk to an injected Backend, so the same arithmetic can run
against the pure-numpy reference implementation in tests and against the
native scipy bindings in production.

Design Principles:
    - Minimal contracts: a backend is a name plus a routine lookup
    - Capability-driven: use supports() before asking for optional routines
    - Standard calling convention: every routine takes its arguments in
      BLAS/LAPACK order with (buffer, offset, stride) triples
"""

from typing import Any, Callable, Protocol, runtime_checkable


@runtime_checkable
class Backend(Protocol):
    """
    Protocol for a BLAS/LAPACK routine provider.

    Routines are looked up by their standard prefixed name ('daxpy',
    'zgesvd', 'dznrm2'); see pymatrix.core.capabilities for the full set.

    Calling convention:
        - Vectors are passed as ``buffer, offset, stride``; matrices as
          ``buffer, offset, leading_dimension`` over a flat column-major
          numpy buffer. Offsets and strides count elements, not bytes.
        - BLAS routines return their scalar result (dot, nrm2, asum,
          iamax) or None, and raise BackendArgumentError on invalid
          arguments.
        - LAPACK routines return the integer status code ``info``.
          Routines with caller-managed workspace take trailing
          ``work, work_offset, lwork`` arguments (and ``iwork, iwork_offset,
          liwork`` where LAPACK has an integer workspace); ``lwork == -1``
          only writes the required size into ``work[work_offset]``.
    """

    @property
    def name(self) -> str:
        """Backend identifier: 'reference', 'native', etc."""
        ...

    def supports(self, routine: str) -> bool:
        """
        Check if this backend provides a routine.

        Args:
            routine: Prefixed routine name, e.g. 'dsyev'

        Returns:
            True if the routine is available, False otherwise

        Note:
            Unknown routine names MUST return False, never raise.
        """
        ...

    def routine(self, routine: str) -> Callable[..., Any]:
        """
        Return the callable implementing a routine.

        Raises:
            UnsupportedRoutineError: If supports(routine) is False
        """
        ...
