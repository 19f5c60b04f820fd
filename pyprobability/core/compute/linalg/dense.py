"""
Dense small-matrix kernels.

Closed forms for 1x1 and 2x2, first-row cofactor expansion and the
adjugate inverse beyond that. Cofactor methods are factorial-time, so the
dimension is capped at MAX_COFACTOR_DIMENSION and larger inputs are
rejected rather than silently handed to a different algorithm.

Every function accepts an array-like and returns fresh float64 arrays.
"""

from __future__ import annotations

import math
from typing import Any, Sequence

import numpy as np
from numpy.typing import ArrayLike, NDArray

from pyprobability.core.exceptions import (
    DimensionError,
    NotPositiveDefiniteError,
    SingularMatrixError,
)
from pyprobability.core.validation import (
    check_2d,
    check_array,
    check_square,
)
from pyprobability.core.compute.tolerances import (
    DEFAULT_TOLERANCES,
    MAX_COFACTOR_DIMENSION,
)


def _as_square(M: ArrayLike, name: str) -> NDArray[np.floating[Any]]:
    A = check_array(M, name)
    check_square(A, name)
    return A


def _check_cofactor_size(n: int, name: str) -> None:
    if n > MAX_COFACTOR_DIMENSION:
        raise DimensionError(
            f"{name}: cofactor expansion is limited to {MAX_COFACTOR_DIMENSION}x"
            f"{MAX_COFACTOR_DIMENSION}, got {n}x{n}"
        )


def _minor(A: NDArray, row: int, col: int) -> NDArray:
    """A with one row and one column removed."""
    return np.delete(np.delete(A, row, axis=0), col, axis=1)


def _det(A: NDArray) -> float:
    n = A.shape[0]
    if n == 1:
        return float(A[0, 0])
    if n == 2:
        return float(A[0, 0] * A[1, 1] - A[0, 1] * A[1, 0])
    total = 0.0
    for j in range(n):
        if A[0, j] == 0.0:
            continue
        sign = -1.0 if j % 2 else 1.0
        total += sign * A[0, j] * _det(_minor(A, 0, j))
    return total


def determinant(M: ArrayLike) -> float:
    """
    Determinant of a square matrix.

    Args:
        M: Square matrix, at most MAX_COFACTOR_DIMENSION on a side

    Raises:
        DimensionError: If M is not square or is too large
    """
    A = _as_square(M, "M")
    _check_cofactor_size(A.shape[0], "M")
    return _det(A)


def transpose(M: ArrayLike) -> NDArray[np.floating[Any]]:
    """Transpose of a 2D matrix (returned as a fresh contiguous array)."""
    A = check_array(M, "M")
    check_2d(A, "M")
    return np.ascontiguousarray(A.T)


def cofactor_matrix(M: ArrayLike) -> NDArray[np.floating[Any]]:
    """Matrix of signed cofactors C[i, j] = (-1)^(i+j) * det(minor(i, j))."""
    A = _as_square(M, "M")
    n = A.shape[0]
    _check_cofactor_size(n, "M")
    if n == 1:
        return np.ones((1, 1))
    C = np.empty_like(A)
    for i in range(n):
        for j in range(n):
            sign = -1.0 if (i + j) % 2 else 1.0
            C[i, j] = sign * _det(_minor(A, i, j))
    return C


def invert(
    M: ArrayLike,
    epsilon: float = DEFAULT_TOLERANCES.singular_epsilon,
    name: str = "M",
) -> NDArray[np.floating[Any]]:
    """
    Inverse of a square matrix.

    1x1 and 2x2 use closed forms; larger matrices use adjugate / determinant.

    Args:
        M: Square matrix
        epsilon: |det| below this is treated as singular
        name: Matrix name used in error messages and on the exception

    Raises:
        DimensionError: If M is not square or is too large
        SingularMatrixError: If |det(M)| < epsilon
    """
    A = _as_square(M, name)
    n = A.shape[0]
    _check_cofactor_size(n, name)

    det = _det(A)
    if abs(det) < epsilon:
        raise SingularMatrixError(
            f"{name}: matrix is singular (|det| = {abs(det):.3g} < {epsilon:g})",
            matrix_name=name,
            determinant=det,
        )

    if n == 1:
        return np.array([[1.0 / A[0, 0]]])
    if n == 2:
        return np.array([
            [A[1, 1], -A[0, 1]],
            [-A[1, 0], A[0, 0]],
        ]) / det

    return cofactor_matrix(A).T / det


def cholesky(M: ArrayLike, name: str = "M") -> NDArray[np.floating[Any]]:
    """
    Lower-triangular Cholesky factor L with L @ L.T == M.

    Column-by-column (Cholesky-Banachiewicz) algorithm. Only the lower
    triangle of M is read.

    Raises:
        DimensionError: If M is not square
        NotPositiveDefiniteError: If a diagonal pivot is not positive
    """
    A = _as_square(M, name)
    n = A.shape[0]
    L = np.zeros_like(A)

    for j in range(n):
        pivot = A[j, j] - float(np.dot(L[j, :j], L[j, :j]))
        if not pivot > 0.0:
            raise NotPositiveDefiniteError(
                f"{name}: not positive definite (pivot {j} = {pivot:.3g})",
                matrix_name=name,
                min_pivot=pivot,
            )
        L[j, j] = math.sqrt(pivot)
        for i in range(j + 1, n):
            L[i, j] = (A[i, j] - float(np.dot(L[i, :j], L[j, :j]))) / L[j, j]

    return L


cholesky_decomposition = cholesky


def is_symmetric(M: ArrayLike, tol: float = DEFAULT_TOLERANCES.symmetry) -> bool:
    """True if M is square and max |M - M^T| <= tol."""
    A = check_array(M, "M")
    if A.ndim != 2 or A.shape[0] != A.shape[1]:
        return False
    return bool(np.max(np.abs(A - A.T), initial=0.0) <= tol)


def submatrix(
    M: ArrayLike,
    rows: Sequence[int],
    cols: Sequence[int],
) -> NDArray[np.floating[Any]]:
    """
    Extract M[rows][:, cols] as a fresh array.

    Raises:
        DimensionError: If any index is out of range
    """
    A = check_array(M, "M")
    check_2d(A, "M")
    r = [int(i) for i in rows]
    c = [int(j) for j in cols]
    for idx, limit, label in ((r, A.shape[0], "rows"), (c, A.shape[1], "cols")):
        bad = [i for i in idx if i < 0 or i >= limit]
        if bad:
            raise DimensionError(
                f"{label}: indices {bad} out of range for dimension {limit}"
            )
    return A[np.ix_(r, c)].copy()
