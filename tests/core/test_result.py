"""
Tests for the Result[P] envelope.

Validates:
    - Generic type parameter works with arbitrary payload types
    - Frozen immutability
    - Default warnings tuple
    - has_warning() method
"""

from dataclasses import FrozenInstanceError, dataclass

import pytest

from pyprobability.core.result import Result
from pyprobability.distributions._common import ComputationParams, Moments


# ═══════════════════════════════════════════════════════════════════════
# Test payload types
# ═══════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class FakeParams:
    """Minimal payload for testing."""
    value: float


def _result(**overrides):
    kwargs = dict(
        params=FakeParams(value=1.0),
        info={},
        timing=None,
        backend_name="cpu",
    )
    kwargs.update(overrides)
    return Result(**kwargs)


# ═══════════════════════════════════════════════════════════════════════
# Construction and field access
# ═══════════════════════════════════════════════════════════════════════


class TestResultConstruction:
    """Result can be created with any payload type."""

    def test_basic_creation(self):
        result = Result(
            params=FakeParams(value=42.0),
            info={"distribution": "normal"},
            timing={"total_seconds": 0.01},
            backend_name="cpu_distribution",
        )
        assert result.params.value == 42.0
        assert result.info["distribution"] == "normal"
        assert result.timing["total_seconds"] == 0.01
        assert result.backend_name == "cpu_distribution"

    def test_computation_params_payload(self):
        params = ComputationParams(
            kind="scalar",
            value=0.1,
            moments=Moments(mean=5.0, variance=100.0 / 12.0),
        )
        result = _result(params=params)
        assert result.params.kind == "scalar"
        assert result.params.moments.mean == 5.0
        assert result.params.error is None

    def test_timing_with_breakdown(self):
        result = _result(timing={"total_seconds": 1.0, "cholesky": 0.2, "draws": 0.8})
        assert result.timing["cholesky"] == 0.2
        assert result.timing["draws"] == 0.8

    def test_info_dict_arbitrary_keys(self):
        result = _result(info={"converged": True, "iterations": 23, "method": "series"})
        assert result.info["converged"] is True
        assert result.info["iterations"] == 23


# ═══════════════════════════════════════════════════════════════════════
# Defaults and immutability
# ═══════════════════════════════════════════════════════════════════════


class TestDefaults:
    """Default value for warnings."""

    def test_warnings_default_empty(self):
        result = _result()
        assert result.warnings == ()
        assert isinstance(result.warnings, tuple)

    def test_warnings_explicit(self):
        result = _result(warnings=("series truncated", "row never left"))
        assert len(result.warnings) == 2
        assert "series truncated" in result.warnings


class TestImmutability:
    """Result is frozen; no attribute mutation allowed."""

    def test_cannot_set_params(self):
        result = _result()
        with pytest.raises(FrozenInstanceError):
            result.params = FakeParams(value=2.0)

    def test_cannot_set_backend_name(self):
        result = _result()
        with pytest.raises(FrozenInstanceError):
            result.backend_name = "gpu"

    def test_cannot_set_warnings(self):
        result = _result()
        with pytest.raises(FrozenInstanceError):
            result.warnings = ("new warning",)


# ═══════════════════════════════════════════════════════════════════════
# has_warning()
# ═══════════════════════════════════════════════════════════════════════


class TestHasWarning:
    """has_warning() checks for substring in any warning."""

    def test_no_warnings_returns_false(self):
        assert _result().has_warning("anything") is False

    def test_substring_match(self):
        result = _result(warnings=("continued fraction did not converge after 100 iterations",))
        assert result.has_warning("converge") is True
        assert result.has_warning("100 iterations") is True

    def test_no_match(self):
        result = _result(warnings=("series truncated",))
        assert result.has_warning("divergence") is False
