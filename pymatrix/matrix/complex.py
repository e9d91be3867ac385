"""
Complex matrices: ComplexDoubleMatrix and ComplexFloatMatrix.

Complex elements have no ordering, so these classes provide no
min/max/sort operations. Real and imaginary parts are extracted by a
strided copy over the interleaved component buffer.
"""

import numpy as np

from pymatrix.core.backends.precision import COMPLEX64, COMPLEX128, real_kind
from pymatrix.core.compute import blas
from pymatrix.core.exceptions import ValidationError
from pymatrix.core.validation import check_same_size
from pymatrix.matrix.base import Matrix, matrix_class, register


class ComplexMatrix(Matrix):
    """Matrix over a complex scalar kind."""

    @classmethod
    def from_parts(cls, real: Matrix, imag: Matrix):
        """Combine real-kind matrices holding the real and imaginary parts."""
        part_kind = real_kind(cls.kind)
        for name, part in (("real", real), ("imag", imag)):
            if part.kind is not part_kind:
                raise ValidationError(
                    f"{name}: expected a {part_kind.name} matrix, got a {part.kind.name} matrix"
                )
        check_same_size(real, imag, "real", "imag")
        m = cls(real.rows, real.columns)
        m.put_real(real)
        m.put_imag(imag)
        return m

    def _components(self) -> np.ndarray:
        # Interleaved (re, im) view of the element buffer
        return self.data.view(self.kind.component_dtype)

    def _part(self, offset: int) -> Matrix:
        part_kind = real_kind(self.kind)
        result = matrix_class(part_kind)(self.rows, self.columns)
        blas.routine(part_kind, 'copy')(self.length, self._components(), offset, 2,
                                        result.data, 0, 1)
        return result

    def _put_part(self, offset: int, values: Matrix):
        values.check_length(self.length)
        blas.routine(values.kind, 'copy')(self.length, values.data, 0, 1,
                                          self._components(), offset, 2)
        return self

    def real(self) -> Matrix:
        """Real parts as a real matrix of the same precision."""
        return self._part(0)

    def imag(self) -> Matrix:
        """Imaginary parts as a real matrix of the same precision."""
        return self._part(1)

    def put_real(self, values: Matrix):
        return self._put_part(0, values)

    def put_imag(self, values: Matrix):
        return self._put_part(1, values)

    def conji(self):
        np.conjugate(self.data, out=self.data)
        return self

    def conj(self):
        return self.dup().conji()

    def hermitian(self):
        """Conjugate transpose."""
        return self.transpose().conji()

    def dotc(self, other: Matrix):
        """sum(conj(self) * other)"""
        return blas.dotc(self, self._operand(other))

    def dotu(self, other: Matrix):
        """sum(self * other) without conjugation."""
        return blas.dotu(self, self._operand(other))

    def _format(self, value) -> str:
        if value.imag >= 0:
            return f"{value.real:f} + {value.imag:f}i"
        return f"{value.real:f} - {-value.imag:f}i"


@register
class ComplexDoubleMatrix(ComplexMatrix):
    """Matrix of 128-bit complex numbers (two 64-bit floats)."""
    kind = COMPLEX128

    def to_float(self):
        return self._convert(COMPLEX64)

    def to_double(self):
        return self.dup()

    def to_complex(self):
        return self.dup()


@register
class ComplexFloatMatrix(ComplexMatrix):
    """Matrix of 64-bit complex numbers (two 32-bit floats)."""
    kind = COMPLEX64

    def to_float(self):
        return self.dup()

    def to_double(self):
        return self._convert(COMPLEX128)

    def to_complex(self):
        return self.dup()


__all__ = ['ComplexMatrix', 'ComplexDoubleMatrix', 'ComplexFloatMatrix']
