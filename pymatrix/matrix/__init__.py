"""
Dense matrix value types.

Classes:
    DoubleMatrix, FloatMatrix: real matrices (64 / 32 bit)
    ComplexDoubleMatrix, ComplexFloatMatrix: complex matrices
    Matrix: generic base shared by all four
"""

from pymatrix.matrix.base import Matrix, matrix_class
from pymatrix.matrix.real import RealMatrix, DoubleMatrix, FloatMatrix
from pymatrix.matrix.complex import ComplexMatrix, ComplexDoubleMatrix, ComplexFloatMatrix

__all__ = [
    "Matrix",
    "RealMatrix",
    "ComplexMatrix",
    "DoubleMatrix",
    "FloatMatrix",
    "ComplexDoubleMatrix",
    "ComplexFloatMatrix",
    "matrix_class",
]
