"""
Routine name constants for pymatrix backends.

This module is the SINGLE SOURCE OF TRUTH for the BLAS/LAPACK routine
set a backend may provide. Routines are grouped into families ('axpy',
'gesvd', ...) and each family is available for a set of scalar prefixes.
The prefixed names ('daxpy', 'zgesvd') follow the standard BLAS/LAPACK
naming, including the irregular ones ('dznrm2', 'izamax', 'zdscal').

Usage:
    from pymatrix.core.capabilities import routine_name, ALL_ROUTINES

    name = routine_name('nrm2', 'z')   # 'dznrm2'
    if backend.supports(name):
        ...
"""

REAL_PREFIXES = ('s', 'd')
COMPLEX_PREFIXES = ('c', 'z')
ALL_PREFIXES = REAL_PREFIXES + COMPLEX_PREFIXES

# BLAS level 1
FAMILY_COPY = 'copy'
FAMILY_SWAP = 'swap'
FAMILY_AXPY = 'axpy'
FAMILY_SCAL = 'scal'
# Complex vector scaled by a real scalar (csscal, zdscal)
FAMILY_RSCAL = 'rscal'
FAMILY_DOT = 'dot'
FAMILY_DOTC = 'dotc'
FAMILY_DOTU = 'dotu'
FAMILY_NRM2 = 'nrm2'
FAMILY_ASUM = 'asum'
FAMILY_IAMAX = 'iamax'

# BLAS level 2 and 3
FAMILY_GEMV = 'gemv'
FAMILY_GER = 'ger'
FAMILY_GERU = 'geru'
FAMILY_GERC = 'gerc'
FAMILY_GEMM = 'gemm'

# LAPACK, no workspace
FAMILY_GESV = 'gesv'
FAMILY_GETRF = 'getrf'
FAMILY_POTRF = 'potrf'
FAMILY_POSV = 'posv'

# LAPACK, caller-managed workspace (lwork == -1 queries the size)
FAMILY_SYSV = 'sysv'
FAMILY_SYEV = 'syev'
FAMILY_SYEVD = 'syevd'
FAMILY_SYEVR = 'syevr'
FAMILY_SYGVD = 'sygvd'
FAMILY_SYGVX = 'sygvx'
FAMILY_GESVD = 'gesvd'
FAMILY_GELSD = 'gelsd'
FAMILY_GEQRF = 'geqrf'
FAMILY_ORMQR = 'ormqr'
FAMILY_ORGQR = 'orgqr'
FAMILY_GEEV = 'geev'

WORKSPACE_FAMILIES = frozenset({
    FAMILY_SYSV, FAMILY_SYEV, FAMILY_SYEVD, FAMILY_SYEVR, FAMILY_SYGVD,
    FAMILY_SYGVX, FAMILY_GESVD, FAMILY_GELSD, FAMILY_GEQRF, FAMILY_ORMQR,
    FAMILY_ORGQR, FAMILY_GEEV,
})

# Family -> prefixes it exists for
FAMILY_PREFIXES: dict[str, tuple[str, ...]] = {
    FAMILY_COPY: ALL_PREFIXES,
    FAMILY_SWAP: ALL_PREFIXES,
    FAMILY_AXPY: ALL_PREFIXES,
    FAMILY_SCAL: ALL_PREFIXES,
    FAMILY_RSCAL: COMPLEX_PREFIXES,
    FAMILY_DOT: REAL_PREFIXES,
    FAMILY_DOTC: COMPLEX_PREFIXES,
    FAMILY_DOTU: COMPLEX_PREFIXES,
    FAMILY_NRM2: ALL_PREFIXES,
    FAMILY_ASUM: ALL_PREFIXES,
    FAMILY_IAMAX: ALL_PREFIXES,
    FAMILY_GEMV: ALL_PREFIXES,
    FAMILY_GER: REAL_PREFIXES,
    FAMILY_GERU: COMPLEX_PREFIXES,
    FAMILY_GERC: COMPLEX_PREFIXES,
    FAMILY_GEMM: ALL_PREFIXES,
    FAMILY_GESV: ALL_PREFIXES,
    FAMILY_GETRF: ALL_PREFIXES,
    FAMILY_POTRF: ALL_PREFIXES,
    FAMILY_POSV: ALL_PREFIXES,
    FAMILY_SYSV: REAL_PREFIXES,
    FAMILY_SYEV: REAL_PREFIXES,
    FAMILY_SYEVD: REAL_PREFIXES,
    FAMILY_SYEVR: REAL_PREFIXES,
    FAMILY_SYGVD: REAL_PREFIXES,
    FAMILY_SYGVX: REAL_PREFIXES,
    FAMILY_GESVD: ALL_PREFIXES,
    FAMILY_GELSD: REAL_PREFIXES,
    FAMILY_GEQRF: REAL_PREFIXES,
    FAMILY_ORMQR: REAL_PREFIXES,
    FAMILY_ORGQR: REAL_PREFIXES,
    FAMILY_GEEV: ALL_PREFIXES,
}

# Names that do not follow prefix + family
_IRREGULAR_NAMES = {
    (FAMILY_NRM2, 'c'): 'scnrm2',
    (FAMILY_NRM2, 'z'): 'dznrm2',
    (FAMILY_ASUM, 'c'): 'scasum',
    (FAMILY_ASUM, 'z'): 'dzasum',
    (FAMILY_RSCAL, 'c'): 'csscal',
    (FAMILY_RSCAL, 'z'): 'zdscal',
    (FAMILY_IAMAX, 's'): 'isamax',
    (FAMILY_IAMAX, 'd'): 'idamax',
    (FAMILY_IAMAX, 'c'): 'icamax',
    (FAMILY_IAMAX, 'z'): 'izamax',
}


def routine_name(family: str, prefix: str) -> str:
    """
    Standard BLAS/LAPACK name of a family for a scalar prefix.

    Raises:
        KeyError: If the family does not exist for the prefix
    """
    if prefix not in FAMILY_PREFIXES[family]:
        raise KeyError(f"routine family '{family}' has no '{prefix}' variant")
    return _IRREGULAR_NAMES.get((family, prefix), prefix + family)


# Prefixed name -> (family, prefix)
ROUTINES: dict[str, tuple[str, str]] = {
    routine_name(family, prefix): (family, prefix)
    for family, prefixes in FAMILY_PREFIXES.items()
    for prefix in prefixes
}

# All routine names as a frozenset for validation
ALL_ROUTINES = frozenset(ROUTINES)

__all__ = [
    'REAL_PREFIXES',
    'COMPLEX_PREFIXES',
    'ALL_PREFIXES',
    'WORKSPACE_FAMILIES',
    'FAMILY_PREFIXES',
    'ROUTINES',
    'ALL_ROUTINES',
    'routine_name',
] + [name for name in dir() if name.startswith('FAMILY_') and name != 'FAMILY_PREFIXES']
