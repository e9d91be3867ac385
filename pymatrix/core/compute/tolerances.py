"""
Default comparison tolerances per scalar kind.

Matrix.compare(other) without an explicit tolerance accepts two matrices
when the largest absolute elementwise difference, divided by the number
of elements, is below the tier's ``atol``.
"""

from dataclasses import dataclass

from pymatrix.core.backends.precision import ScalarKind


@dataclass(frozen=True)
class ToleranceTier:
    atol: float
    name: str


FP64 = ToleranceTier(atol=1e-12, name='fp64')
FP32 = ToleranceTier(atol=1e-5, name='fp32')


def select_tolerance(kind: ScalarKind) -> ToleranceTier:
    """Tier for a kind: complex kinds use the tier of their component precision."""
    return FP32 if kind.is_single else FP64
