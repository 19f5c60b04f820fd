"""
Argument checks shared by the design factories.

Each check tests one property and raises InvalidParameterError (or
DimensionError for shapes) naming the argument and the value it got.
Array checks return float64 copies; scalar checks return plain Python
numbers so designs never hold numpy scalars.
"""

import math

import numpy as np
from numpy.typing import ArrayLike, NDArray
from typing import Any

from pyprobability.core.exceptions import (
    DimensionError,
    InvalidParameterError,
)
from pyprobability.core.compute.tolerances import DEFAULT_TOLERANCES


def check_array(
    array: ArrayLike,
    name: str,
) -> NDArray[np.floating[Any]]:
    """
    Validate and convert input to a float64 numpy array.

    Accepts any array-like. Rejects inputs that result in object dtype
    (ragged nesting, mixed types) or a non-numeric dtype.

    Args:
        array: Vector or matrix argument
        name: Argument name used in messages

    Returns:
        numpy.ndarray of float64 (always a fresh copy)

    Raises:
        InvalidParameterError: If input cannot be converted to numeric array
    """
    try:
        result = np.asarray(array)
    except (ValueError, TypeError) as e:
        raise InvalidParameterError(f"{name}: cannot convert to array: {e}") from e

    if result.dtype == object:
        raise InvalidParameterError(
            f"{name}: converted to object dtype, indicating ragged rows or non-numeric data"
        )

    if not (np.issubdtype(result.dtype, np.number) or result.dtype == np.bool_):
        raise InvalidParameterError(
            f"{name}: non-numeric dtype {result.dtype}, expected numeric data"
        )

    return np.array(result, dtype=np.float64)


def check_finite(array: NDArray[np.floating[Any]], name: str) -> None:
    """
    Reject NaN and Inf entries, reporting how many of each.

    Raises:
        InvalidParameterError: If array contains non-finite values
    """
    if not np.all(np.isfinite(array)):
        n_nan = int(np.sum(np.isnan(array)))
        n_inf = int(np.sum(np.isinf(array)))
        raise InvalidParameterError(
            f"{name}: contains non-finite values ({n_nan} NaN, {n_inf} Inf)"
        )


def check_ndim(array: NDArray[np.floating[Any]], ndim: int, name: str) -> None:
    """
    Verify array has exactly the specified number of dimensions.

    Raises:
        DimensionError: If array has wrong number of dimensions
    """
    if array.ndim != ndim:
        raise DimensionError(
            f"{name}: expected {ndim}D array, got {array.ndim}D with shape {array.shape}"
        )


def check_1d(array: NDArray[np.floating[Any]], name: str) -> None:
    """Verify array is 1-dimensional."""
    check_ndim(array, 1, name)


def check_2d(array: NDArray[np.floating[Any]], name: str) -> None:
    """Verify array is 2-dimensional."""
    check_ndim(array, 2, name)


def check_square(array: NDArray[np.floating[Any]], name: str) -> None:
    """
    Verify array is a non-empty square matrix.

    Raises:
        DimensionError: If array is not 2D or its sides differ
    """
    check_2d(array, name)
    rows, cols = array.shape
    if rows != cols or rows == 0:
        raise DimensionError(
            f"{name}: expected a non-empty square matrix, got shape {array.shape}"
        )


def check_symmetric(
    array: NDArray[np.floating[Any]],
    name: str,
    tol: float = DEFAULT_TOLERANCES.symmetry,
) -> None:
    """
    Verify a square matrix satisfies M[i, j] == M[j, i] within tol.

    Raises:
        InvalidParameterError: If the largest asymmetry exceeds tol
    """
    asym = float(np.max(np.abs(array - array.T))) if array.size else 0.0
    if asym > tol:
        raise InvalidParameterError(
            f"{name}: matrix is not symmetric (max |M - M^T| = {asym:.3g}, tol={tol:g})"
        )


def check_probability_vector(
    p: NDArray[np.floating[Any]],
    name: str,
    tol: float = DEFAULT_TOLERANCES.probability_sum,
) -> None:
    """
    Verify every entry lies in [0, 1] and the entries sum to 1 within tol.

    Raises:
        InvalidParameterError: On an out-of-range entry or a bad total
    """
    bad = np.where((p < 0.0) | (p > 1.0))[0]
    if len(bad) > 0:
        raise InvalidParameterError(
            f"{name}: entries {bad.tolist()} lie outside [0, 1] "
            f"(values {p[bad].tolist()})"
        )
    total = float(np.sum(p))
    if abs(total - 1.0) > tol:
        raise InvalidParameterError(
            f"{name}: probabilities must sum to 1 (within {tol:g}), got {total:.6g}"
        )


def check_scalar(value: Any, name: str) -> float:
    """
    Convert a scalar parameter to float, rejecting NaN, Inf and non-numbers.

    Raises:
        InvalidParameterError: If value is not a finite real number
    """
    if isinstance(value, (bool, np.bool_)):
        raise InvalidParameterError(f"{name}: expected a real number, got bool {value!r}")
    try:
        result = float(value)
    except (TypeError, ValueError) as e:
        raise InvalidParameterError(f"{name}: expected a real number, got {value!r}") from e
    if not math.isfinite(result):
        raise InvalidParameterError(f"{name}: must be finite, got {result}")
    return result


def check_positive(value: Any, name: str) -> float:
    """
    Verify a finite scalar is strictly positive.

    Raises:
        InvalidParameterError: If value <= 0 or not finite
    """
    result = check_scalar(value, name)
    if result <= 0.0:
        raise InvalidParameterError(f"{name}: must be > 0, got {result}")
    return result


def check_positive_integer(value: Any, name: str, minimum: int = 1) -> int:
    """
    Verify value is an integer >= minimum (integral floats are accepted).

    Raises:
        InvalidParameterError: If value is fractional or below minimum
    """
    result = check_scalar(value, name)
    if result != math.floor(result):
        raise InvalidParameterError(f"{name}: must be an integer, got {result}")
    if result < minimum:
        raise InvalidParameterError(f"{name}: must be >= {minimum}, got {int(result)}")
    return int(result)


def check_probability(value: Any, name: str) -> float:
    """
    Verify a scalar lies in the closed interval [0, 1].

    Raises:
        InvalidParameterError: If value is outside [0, 1]
    """
    result = check_scalar(value, name)
    if not (0.0 <= result <= 1.0):
        raise InvalidParameterError(f"{name}: must lie in [0, 1], got {result}")
    return result
