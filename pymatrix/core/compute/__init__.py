"""
Shared numeric infrastructure.

Submodules:
    lapack: Status-returning LAPACK call layer with the workspace protocol
    blas: Matrix-level BLAS/LAPACK wrappers that raise on failure
    tolerances: Per-kind tolerance tiers
"""
