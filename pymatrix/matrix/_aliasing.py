"""
Aliasing resolution for in-place binary operations.

Every binary operator writes into a ``result`` matrix that may be the
left operand, the right operand, or a third matrix. The case is resolved
once, here, and the operator dispatches on the tagged outcome instead of
repeating identity comparisons.
"""

from enum import Enum

from pymatrix.core.exceptions import SizeMismatchError


class Aliasing(Enum):
    """Which operand, if any, shares its buffer with the result."""
    LHS = 'lhs'
    RHS = 'rhs'
    NEITHER = 'neither'


def resolve(result, lhs, rhs=None) -> Aliasing:
    """Classify ``result`` by identity against the operands."""
    if result is lhs:
        return Aliasing.LHS
    if rhs is not None and result is rhs:
        return Aliasing.RHS
    return Aliasing.NEITHER


def prepare_result(result, lhs, rhs, rows: int, columns: int,
                   exact_shape: bool = False) -> Aliasing:
    """
    Make ``result`` able to receive a ``rows x columns`` outcome.

    Elementwise operations only need a matching length (a 1x9 result may
    receive the sum of two 3x3 matrices); the matrix product needs the
    exact shape. A result that does not fit is resized, unless it is one
    of the operands: resizing would discard the data still to be read.

    Args:
        result: Destination matrix
        lhs: Left operand
        rhs: Right operand, or None for unary and scalar operations
        rows: Rows of the outcome
        columns: Columns of the outcome
        exact_shape: Require rows/columns to match instead of the length

    Returns:
        The aliasing case of ``result``

    Raises:
        SizeMismatchError: If the result needs resizing but is an operand
    """
    aliasing = resolve(result, lhs, rhs)
    if exact_shape:
        fits = result.rows == rows and result.columns == columns
    else:
        fits = result.length == rows * columns
    if not fits:
        if aliasing is not Aliasing.NEITHER:
            raise SizeMismatchError(
                f"result: cannot resize result matrix because it is used in-place "
                f"(needs {rows}x{columns}, is {result.rows}x{result.columns})",
                expected=(rows, columns),
                actual=(result.rows, result.columns),
            )
        result.resize(rows, columns)
    return aliasing
