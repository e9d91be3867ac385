"""
Centering, normalization and pairwise distances.

The centering and normalizing functions work in place and return their
argument.
"""

from pymatrix.core.validation import check_rows
from pymatrix.matrix.base import Matrix


def pairwise_squared_distances(x: Matrix, y: Matrix) -> Matrix:
    """
    Squared Euclidean distances between the columns of x and of y.

    Computed as |x_i|^2 + |y_j|^2 - 2 x_i . y_j, so entries that should be
    zero can come out as tiny negative numbers.

    Returns:
        Matrix D with D[i, j] = |x_i - y_j|^2 (x.columns x y.columns)

    Raises:
        SizeMismatchError: If x and y have different row counts
    """
    check_rows(y, x.rows, "y")
    xx = x.mul(x).column_sums()
    yy = y.mul(y).column_sums()

    d = x.transpose().mmul(y)
    d.muli(-2.0)
    d.addi_column_vector(xx)
    d.addi_row_vector(yy)
    return d


def center(x: Matrix) -> Matrix:
    """Subtract the mean of all elements."""
    return x.subi(x.mean())


def center_rows(x: Matrix) -> Matrix:
    """Subtract each row's mean from that row."""
    return x.subi_column_vector(x.row_means())


def center_columns(x: Matrix) -> Matrix:
    """Subtract each column's mean from that column."""
    return x.subi_row_vector(x.column_means())


def normalize(x: Matrix) -> Matrix:
    """Scale to unit Euclidean norm."""
    return x.divi(x.norm2())


def normalize_rows(x: Matrix) -> Matrix:
    for r in range(x.rows):
        x.put_row(r, normalize(x.get_row(r)))
    return x


def normalize_columns(x: Matrix) -> Matrix:
    for c in range(x.columns):
        x.put_column(c, normalize(x.get_column(c)))
    return x


__all__ = [
    'pairwise_squared_distances',
    'center', 'center_rows', 'center_columns',
    'normalize', 'normalize_rows', 'normalize_columns',
]
