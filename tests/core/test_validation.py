"""
Tests for input validation utilities.

Validates every function in core/validation.py:
    - check_array: conversion, dtype coercion, object rejection
    - check_finite: NaN/Inf detection
    - check_ndim / check_1d / check_2d / check_square: shape checks
    - check_symmetric: asymmetry tolerance
    - check_probability_vector: range and sum
    - scalar checks: check_scalar, check_positive, check_positive_integer,
      check_probability
"""

import numpy as np
import pytest

from pyprobability.core.exceptions import DimensionError, InvalidParameterError
from pyprobability.core.validation import (
    check_1d,
    check_2d,
    check_array,
    check_finite,
    check_ndim,
    check_positive,
    check_positive_integer,
    check_probability,
    check_probability_vector,
    check_scalar,
    check_square,
    check_symmetric,
)


# ═══════════════════════════════════════════════════════════════════════
# check_array
# ═══════════════════════════════════════════════════════════════════════


class TestCheckArray:
    """check_array converts to a float64 copy and rejects non-numeric data."""

    def test_list_to_float_array(self):
        result = check_array([1, 2, 3], "x")
        assert result.dtype == np.float64
        np.testing.assert_array_equal(result, [1.0, 2.0, 3.0])

    def test_returns_copy(self):
        arr = np.array([1.0, 2.0])
        result = check_array(arr, "x")
        result[0] = 99.0
        assert arr[0] == 1.0

    def test_bool_accepted(self):
        np.testing.assert_array_equal(check_array([True, False], "x"), [1.0, 0.0])

    def test_ragged_rejected(self):
        with pytest.raises(InvalidParameterError):
            check_array([[1, 2], [3]], "x")

    def test_strings_rejected(self):
        with pytest.raises(InvalidParameterError, match="non-numeric"):
            check_array(["a", "b"], "x")


# ═══════════════════════════════════════════════════════════════════════
# check_finite / shape checks
# ═══════════════════════════════════════════════════════════════════════


class TestCheckFinite:
    """check_finite counts NaN and Inf entries."""

    def test_finite_passes(self):
        check_finite(np.array([1.0, -2.0]), "x")

    def test_nan_and_inf_reported(self):
        with pytest.raises(InvalidParameterError, match="1 NaN, 1 Inf"):
            check_finite(np.array([np.nan, np.inf, 0.0]), "x")


class TestShapeChecks:
    """Dimensionality checks raise DimensionError."""

    def test_check_ndim(self):
        check_ndim(np.zeros((2, 2)), 2, "M")
        with pytest.raises(DimensionError):
            check_ndim(np.zeros(3), 2, "M")

    def test_check_1d_and_2d(self):
        check_1d(np.zeros(3), "v")
        check_2d(np.zeros((2, 3)), "M")
        with pytest.raises(DimensionError):
            check_1d(np.zeros((2, 2)), "v")

    def test_check_square(self):
        check_square(np.eye(3), "M")
        with pytest.raises(DimensionError):
            check_square(np.zeros((2, 3)), "M")

    def test_empty_matrix_not_square(self):
        with pytest.raises(DimensionError):
            check_square(np.zeros((0, 0)), "M")

    def test_dimension_error_is_invalid_parameter(self):
        with pytest.raises(InvalidParameterError):
            check_square(np.zeros((2, 3)), "M")


class TestCheckSymmetric:
    """check_symmetric tolerates rounding noise only."""

    def test_symmetric_passes(self):
        check_symmetric(np.array([[2.0, 1.0], [1.0, 3.0]]), "cov")

    def test_within_tolerance(self):
        check_symmetric(np.array([[2.0, 1.0], [1.0 + 1e-12, 3.0]]), "cov")

    def test_asymmetric_rejected(self):
        with pytest.raises(InvalidParameterError, match="not symmetric"):
            check_symmetric(np.array([[2.0, 1.0], [0.5, 3.0]]), "cov")


# ═══════════════════════════════════════════════════════════════════════
# Probability checks
# ═══════════════════════════════════════════════════════════════════════


class TestCheckProbabilityVector:
    """Entries in [0, 1], total 1 within tolerance."""

    def test_valid(self):
        check_probability_vector(np.array([0.2, 0.3, 0.5]), "p")

    def test_loose_sum_tolerance(self):
        check_probability_vector(np.array([0.3333, 0.3333, 0.3333]), "p")

    def test_bad_sum(self):
        with pytest.raises(InvalidParameterError, match="sum to 1"):
            check_probability_vector(np.array([0.5, 0.6]), "p")

    def test_negative_entry(self):
        with pytest.raises(InvalidParameterError, match="outside"):
            check_probability_vector(np.array([-0.1, 1.1]), "p")


# ═══════════════════════════════════════════════════════════════════════
# Scalar checks
# ═══════════════════════════════════════════════════════════════════════


class TestScalarChecks:
    """Scalar converters return plain Python numbers."""

    def test_check_scalar(self):
        assert check_scalar(np.float32(2.5), "x") == 2.5
        assert isinstance(check_scalar(3, "x"), float)

    @pytest.mark.parametrize("bad", [float("nan"), float("inf"), "abc", None, True])
    def test_check_scalar_rejects(self, bad):
        with pytest.raises(InvalidParameterError):
            check_scalar(bad, "x")

    def test_check_positive(self):
        assert check_positive(0.1, "rate") == 0.1
        with pytest.raises(InvalidParameterError, match="> 0"):
            check_positive(0.0, "rate")

    def test_check_positive_integer(self):
        assert check_positive_integer(5.0, "n") == 5
        assert isinstance(check_positive_integer(5.0, "n"), int)
        assert check_positive_integer(0, "n", minimum=0) == 0

    def test_check_positive_integer_rejects(self):
        with pytest.raises(InvalidParameterError, match="integer"):
            check_positive_integer(2.5, "n")
        with pytest.raises(InvalidParameterError, match=">= 1"):
            check_positive_integer(0, "n")

    def test_check_probability(self):
        assert check_probability(1.0, "p") == 1.0
        assert check_probability(0.0, "p") == 0.0
        with pytest.raises(InvalidParameterError):
            check_probability(1.5, "p")
