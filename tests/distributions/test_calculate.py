"""
Tests for the calculate() entry point, DistributionSolution and curve().

Validates:
    - Expected failures come back as structured errors, never exceptions
    - Operation strings and Operation enums are interchangeable
    - Precision only affects display
    - Solution metadata (info, timing, backend_name, summary, repr)
    - DistributionSpec immutability and validation
    - curve() ranges, markers and monotone CDF
"""

from dataclasses import FrozenInstanceError

import numpy as np
import pytest

from pyprobability.core.exceptions import InvalidParameterError
from pyprobability.distributions import (
    DistributionKind,
    DistributionSpec,
    ErrorKind,
    Operation,
    calculate,
    calculate_gamma,
    calculate_normal,
    calculate_uniform,
    curve,
)


# ═══════════════════════════════════════════════════════════════════════
# Structured errors
# ═══════════════════════════════════════════════════════════════════════


class TestStructuredErrors:
    """calculate() reports failures as data."""

    def test_unknown_operation(self):
        sol = calculate_normal(0, 1, 'median', x=0)
        assert not sol.ok
        assert sol.kind == "error"
        assert sol.value is None
        assert sol.error.kind is ErrorKind.INVALID_PARAMETER
        assert "Unknown operation" in sol.error.message

    def test_operation_not_supported_for_distribution(self):
        sol = calculate_uniform(0, 1, 'mahalanobis', x=[0.5])
        assert sol.error.kind is ErrorKind.INVALID_PARAMETER
        assert "not supported" in sol.error.message

    def test_missing_operand(self):
        sol = calculate_normal(0, 1, 'cdf')
        assert sol.error.kind is ErrorKind.INVALID_PARAMETER
        assert "'x'" in sol.error.message

    def test_unknown_operand(self):
        sol = calculate_normal(0, 1, 'cdf', x=0, y=1)
        assert sol.error.kind is ErrorKind.INVALID_PARAMETER

    def test_nan_operand(self):
        sol = calculate_normal(0, 1, 'cdf', x=float('nan'))
        assert sol.error.kind is ErrorKind.INVALID_PARAMETER

    def test_domain_error_details(self):
        sol = calculate_gamma(2.0, 1.0, 'quantile', p=-0.5)
        assert sol.error.kind is ErrorKind.DOMAIN_ERROR
        assert sol.error.details["exception"] == "DomainError"

    def test_error_info_keeps_request(self):
        sol = calculate_normal(0, 1, 'quantile', p=2.0)
        assert sol.info["distribution"] == "normal"
        assert sol.info["operation"] == "quantile"

    def test_invalid_spec_has_no_distribution(self):
        sol = calculate_normal(0, -1, 'cdf', x=0)
        assert "distribution" not in sol.info
        assert sol.moments is None

    def test_spec_must_be_a_spec(self):
        sol = calculate("normal", 'cdf', x=0)
        assert sol.error.kind is ErrorKind.INVALID_PARAMETER

    def test_error_summary_and_repr(self):
        sol = calculate_normal(0, 1, 'between', k=-2)
        assert "error (domain_error)" in sol.summary()
        assert "error='domain_error'" in repr(sol)


# ═══════════════════════════════════════════════════════════════════════
# Solution
# ═══════════════════════════════════════════════════════════════════════


class TestSolution:
    """Successful solutions and their metadata."""

    def test_enum_and_string_operation_agree(self):
        spec = DistributionSpec.uniform(0, 4)
        assert calculate(spec, Operation.CDF, x=1).value == calculate(spec, 'CDF', x=1).value

    def test_metadata(self):
        sol = calculate_normal(0, 1, 'cdf', x=1.0)
        assert sol.backend_name == "cpu_distribution"
        assert sol.info["dimension"] == 1
        assert "total_seconds" in sol.timing
        assert "cdf" in sol.timing
        assert sol.warnings == ()

    def test_precision_is_display_only(self):
        full = calculate_normal(0, 1, 'cdf', x=1.0, precision=8).value
        sol = calculate_normal(0, 1, 'cdf', x=1.0, precision=2)
        assert sol.value == full
        assert sol.rounded() == 0.84
        assert sol.rounded(3) == 0.841

    def test_negative_precision_rejected(self):
        sol = calculate_normal(0, 1, 'cdf', x=1.0, precision=-1)
        assert sol.error.kind is ErrorKind.INVALID_PARAMETER

    def test_rounded_record(self):
        sol = calculate_gamma(2.5, 3.0, 'special', precision=1)
        assert sol.rounded() == {"special_case": "chi_square_family", "df": 5.0, "scale_factor": 6.0}

    def test_summary(self):
        text = calculate_normal(0, 1, 'cdf', x=1.959964).summary()
        assert text.splitlines()[0] == "normal cdf"
        assert "value:    0.9750" in text
        assert "kurtosis: 3.0000" in text

    def test_repr(self):
        assert repr(calculate_uniform(0, 10, 'pdf', x=1)) == "DistributionSolution(uniform.pdf, value=0.1)"


class TestDistributionSpec:
    """Specs are validated up front and immutable afterwards."""

    def test_frozen(self):
        spec = DistributionSpec.normal(0, 1)
        with pytest.raises(FrozenInstanceError):
            spec.kind = DistributionKind.UNIFORM

    def test_arrays_read_only(self):
        cov = np.eye(2)
        spec = DistributionSpec.multivariate_normal([0, 0], cov)
        cov[0, 0] = 5.0
        assert spec.cov[0, 0] == 1.0
        with pytest.raises(ValueError):
            spec.cov[0, 0] = 2.0

    def test_factory_raises(self):
        with pytest.raises(InvalidParameterError):
            DistributionSpec.exponential(0)

    def test_dimension(self):
        assert DistributionSpec.dirichlet([1, 2, 3]).dimension == 3
        assert DistributionSpec.gamma(2, 1).dimension == 1

    def test_repr(self):
        assert repr(DistributionSpec.exponential(2.0)) == "DistributionSpec.exponential(rate=2.0)"


# ═══════════════════════════════════════════════════════════════════════
# curve()
# ═══════════════════════════════════════════════════════════════════════


class TestCurve:
    """Plotting grids for univariate distributions."""

    def test_normal_range_and_markers(self):
        points = curve(DistributionSpec.normal(1.0, 2.0), n_points=101)
        assert points.x[0] == pytest.approx(-7.0)
        assert points.x[-1] == pytest.approx(9.0)
        assert len(points.pdf) == len(points.cdf) == 101
        assert points.markers["+1sd"] == 3.0
        assert points.markers["-3sd"] == -5.0

    def test_cdf_monotone(self):
        points = curve(DistributionSpec.gamma(2.0, 1.0))
        assert np.all(np.diff(points.cdf) >= 0)
        assert points.cdf[0] == 0.0

    def test_uniform_buffer(self):
        points = curve(DistributionSpec.uniform(0.0, 10.0), n_points=11)
        assert points.x[0] == pytest.approx(-2.0)
        assert points.x[-1] == pytest.approx(12.0)
        assert points.pdf[0] == 0.0

    def test_exponential_range(self):
        points = curve(DistributionSpec.exponential(0.5))
        assert points.x[-1] == pytest.approx(10.0)
        assert points.markers["mean"] == 2.0

    def test_small_shape_gamma_range(self):
        points = curve(DistributionSpec.gamma(0.5, 1.0))
        assert points.x[-1] == pytest.approx(20.0)
        assert "mode" not in points.markers

    def test_multivariate_rejected(self):
        with pytest.raises(InvalidParameterError):
            curve(DistributionSpec.dirichlet([1.0, 1.0]))

    def test_too_few_points(self):
        with pytest.raises(InvalidParameterError):
            curve(DistributionSpec.normal(0, 1), n_points=1)
