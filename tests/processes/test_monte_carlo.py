"""
Tests for the Monte Carlo estimators: integration, European option
pricing and Value-at-Risk.

Estimates are compared with exact answers (closed-form integrals,
Black-Scholes via scipy.stats.norm) at a few standard errors.
"""

import math

import numpy as np
import pytest
from scipy import stats

from pyprobability import NumpyRandomSource
from pyprobability.core.exceptions import InvalidParameterError
from pyprobability.processes import (
    OptionType,
    ProcessKind,
    VaRMethod,
    combine_integrations,
    monte_carlo_integration,
    monte_carlo_option_price,
    simulate_random_walk,
    value_at_risk,
)


def black_scholes(option_type, spot, strike, rate, dividend, volatility, expiry):
    sqrt_t = math.sqrt(expiry)
    d1 = (math.log(spot / strike) + (rate - dividend + 0.5 * volatility ** 2) * expiry) / (
        volatility * sqrt_t
    )
    d2 = d1 - volatility * sqrt_t
    if option_type == 'call':
        return (spot * math.exp(-dividend * expiry) * stats.norm.cdf(d1)
                - strike * math.exp(-rate * expiry) * stats.norm.cdf(d2))
    return (strike * math.exp(-rate * expiry) * stats.norm.cdf(-d2)
            - spot * math.exp(-dividend * expiry) * stats.norm.cdf(-d1))


# ═══════════════════════════════════════════════════════════════════════
# Integration
# ═══════════════════════════════════════════════════════════════════════


class TestIntegration:
    """Sample-mean integration of f over [a, b]."""

    def test_square_scalar_integrand(self, source):
        sol = monte_carlo_integration(lambda x: x * x, 0.0, 1.0, 1000, source=source)
        assert sol.kind is ProcessKind.INTEGRATION
        assert sol.samples == 1000
        assert abs(sol.estimate - 1.0 / 3.0) < 4 * sol.standard_error
        assert sol.relative_error == pytest.approx(sol.standard_error / sol.estimate)

    def test_square_vectorized_million(self, source):
        sol = monte_carlo_integration(np.square, 0.0, 1.0, 1_000_000, source=source, vectorized=True)
        assert abs(sol.estimate - 1.0 / 3.0) < 4 * sol.standard_error
        assert sol.standard_error < 1e-3

    def test_wider_interval(self, source):
        sol = monte_carlo_integration(np.sin, 0.0, math.pi, 50_000, source=source, vectorized=True)
        assert abs(sol.estimate - 2.0) < 4 * sol.standard_error

    def test_standard_error_formula(self, source):
        sol = monte_carlo_integration(np.exp, -1.0, 1.0, 2000, source=source, vectorized=True)
        expected = 2.0 * math.sqrt(sol.stats.variance / 2000)
        assert sol.standard_error == pytest.approx(expected)

    def test_constant_integrand(self, source):
        sol = monte_carlo_integration(lambda x: 3.0, 1.0, 5.0, 100, source=source)
        assert sol.estimate == pytest.approx(12.0)
        assert sol.standard_error == 0.0
        assert sol.relative_error == 0.0

    def test_zero_estimate_warns(self, source):
        def alternating(x):
            return np.where(np.arange(len(x)) % 2 == 0, 1.0, -1.0)

        sol = monte_carlo_integration(alternating, 0.0, 2.0, 1000, source=source, vectorized=True)
        assert sol.estimate == 0.0
        assert sol.relative_error == math.inf
        assert len(sol.warnings) == 1

    def test_non_finite_integrand(self, source):
        with pytest.raises(InvalidParameterError, match="non-finite"):
            monte_carlo_integration(lambda x: float('nan'), 0.0, 1.0, 10, source=source)

    def test_vectorized_shape_checked(self, source):
        with pytest.raises(InvalidParameterError, match="shape"):
            monte_carlo_integration(lambda x: 1.0, 0.0, 1.0, 10, source=source, vectorized=True)

    def test_bounds_validated(self, source):
        with pytest.raises(InvalidParameterError):
            monte_carlo_integration(np.square, 1.0, 1.0, 10, source=source)

    def test_integrand_must_be_callable(self, source):
        with pytest.raises(InvalidParameterError):
            monte_carlo_integration("x**2", 0.0, 1.0, source=source)


class TestCombineIntegrations:
    """Batches merge into the single-run estimate."""

    def test_weighted_estimate(self):
        left, right = NumpyRandomSource(77).spawn(2)
        a = monte_carlo_integration(np.square, 0.0, 1.0, 4000, source=left, vectorized=True)
        b = monte_carlo_integration(np.square, 0.0, 1.0, 6000, source=right, vectorized=True)
        combined = combine_integrations(a, b)
        assert combined.samples == 10_000
        assert combined.estimate == pytest.approx(0.4 * a.estimate + 0.6 * b.estimate, rel=1e-12)
        assert combined.standard_error < min(a.standard_error, b.standard_error)
        assert combined.info['batches'] == 2
        assert combined.info['n'] == 10_000

    def test_single_solution(self, source):
        a = monte_carlo_integration(np.square, 0.0, 1.0, 100, source=source, vectorized=True)
        assert combine_integrations(a).estimate == pytest.approx(a.estimate)

    def test_interval_mismatch(self, source):
        a = monte_carlo_integration(np.square, 0.0, 1.0, 100, source=source, vectorized=True)
        b = monte_carlo_integration(np.square, 0.0, 2.0, 100, source=source, vectorized=True)
        with pytest.raises(InvalidParameterError, match="Cannot combine"):
            combine_integrations(a, b)

    def test_rejects_other_kinds(self, source):
        walk = simulate_random_walk(10, source=source)
        with pytest.raises(InvalidParameterError):
            combine_integrations(walk)

    def test_rejects_empty(self):
        with pytest.raises(InvalidParameterError):
            combine_integrations()


# ═══════════════════════════════════════════════════════════════════════
# Option pricing
# ═══════════════════════════════════════════════════════════════════════


class TestOptionPrice:
    """European options against Black-Scholes."""

    @pytest.mark.parametrize("option_type", ['call', 'put'])
    def test_against_black_scholes(self, source, option_type):
        sol = monte_carlo_option_price(
            option_type, strike=100.0, spot=100.0, volatility=0.2, rate=0.05,
            expiry=1.0, samples=100_000, source=source,
        )
        exact = black_scholes(option_type, 100.0, 100.0, 0.05, 0.0, 0.2, 1.0)
        assert abs(sol.price - exact) < 4 * sol.standard_error

    def test_with_dividend(self, source):
        sol = monte_carlo_option_price(
            'call', strike=95.0, spot=100.0, volatility=0.3, rate=0.03, dividend=0.02,
            expiry=0.5, samples=100_000, source=source,
        )
        exact = black_scholes('call', 100.0, 95.0, 0.03, 0.02, 0.3, 0.5)
        assert abs(sol.price - exact) < 4 * sol.standard_error

    def test_confidence_interval(self, source):
        sol = monte_carlo_option_price(samples=5000, source=source)
        assert sol.ci_lower < sol.price < sol.ci_upper
        assert sol.ci_upper - sol.price == pytest.approx(1.96 * sol.standard_error)

    def test_kept_paths(self, source):
        sol = monte_carlo_option_price(samples=5000, source=source)
        assert sol.final_prices.shape == (100,)
        np.testing.assert_allclose(sol.payoffs, np.maximum(0.0, sol.final_prices - 100.0))
        assert monte_carlo_option_price(samples=10, source=source).final_prices.shape == (10,)

    def test_option_type_parsing(self, source):
        sol = monte_carlo_option_price('PUT', samples=10, source=source)
        assert sol.option_type is OptionType.PUT
        assert sol.info['option_type'] == 'put'

    def test_unknown_option_type(self, source):
        with pytest.raises(InvalidParameterError, match="option_type"):
            monte_carlo_option_price('straddle', source=source)

    def test_invalid_strike(self, source):
        with pytest.raises(InvalidParameterError):
            monte_carlo_option_price(strike=0.0, source=source)


# ═══════════════════════════════════════════════════════════════════════
# Value-at-Risk
# ═══════════════════════════════════════════════════════════════════════


class TestValueAtRisk:
    """Historical, parametric and Monte Carlo VaR."""

    def test_parametric(self):
        sol = value_at_risk('parametric', portfolio=1e6, confidence=0.95, std_dev=0.01)
        assert sol.method is VaRMethod.PARAMETRIC
        assert sol.z == pytest.approx(stats.norm.ppf(0.05), rel=1e-9)
        assert sol.var_absolute == pytest.approx(1e6 * 0.01 * 1.6448536, rel=1e-6)
        assert sol.var_percent == pytest.approx(1.6448536, rel=1e-6)

    def test_parametric_horizon_scaling(self):
        one = value_at_risk('parametric', std_dev=0.02).var_absolute
        four = value_at_risk('parametric', std_dev=0.02, horizon=4.0).var_absolute
        assert four == pytest.approx(2.0 * one)

    def test_monte_carlo_matches_parametric(self, source):
        mc = value_at_risk('monte_carlo', std_dev=0.01, samples=100_000, source=source)
        exact = value_at_risk('parametric', std_dev=0.01)
        assert mc.var_absolute == pytest.approx(exact.var_absolute, rel=0.05)
        assert mc.histogram.counts.sum() == 100_000
        assert len(mc.histogram.counts) == 20

    def test_monte_carlo_horizon_shifts_by_daily_mean(self, source):
        # simulated horizon returns are mean + std_dev * sqrt(horizon) * Z
        mc = value_at_risk(
            'monte_carlo', mean=0.01, std_dev=0.01, horizon=4.0,
            samples=100_000, source=source,
        )
        z = stats.norm.ppf(0.05)
        loss = -(0.01 + z * 0.01 * 2.0)
        assert mc.var_percent == pytest.approx(loss * 100.0, rel=0.03)
        assert mc.var_percent == pytest.approx(
            value_at_risk('parametric', mean=0.01, std_dev=0.01, horizon=4.0).var_percent,
            rel=0.03,
        )
        for scaled_mean in (0.01 * 2.0, 0.01 * 4.0):
            wrong = -(scaled_mean + z * 0.01 * 2.0) * 100.0
            assert abs(mc.var_percent - wrong) > 0.2 * abs(loss * 100.0)

    def test_monte_carlo_spelling(self, source):
        sol = value_at_risk('monte-carlo', samples=100, source=source)
        assert sol.method is VaRMethod.MONTE_CARLO
        assert sol.info['method'] == 'monte_carlo'

    def test_historical(self):
        returns = np.linspace(-0.05, 0.05, 101)
        sol = value_at_risk('historical', portfolio=1e6, confidence=0.95, returns=returns)
        assert sol.var_percent == pytest.approx(4.5)
        assert sol.var_absolute == pytest.approx(45_000.0)
        assert sol.samples == 101
        assert sol.warnings == ()

    def test_historical_too_few_returns(self):
        sol = value_at_risk('historical', returns=[-0.01, 0.02, 0.0], confidence=0.95)
        assert sol.var_percent == pytest.approx(1.0)
        assert len(sol.warnings) == 1

    def test_historical_requires_returns(self):
        with pytest.raises(InvalidParameterError, match="returns"):
            value_at_risk('historical')

    def test_monte_carlo_requires_source(self):
        with pytest.raises(InvalidParameterError, match="source"):
            value_at_risk('monte_carlo')

    @pytest.mark.parametrize("confidence", [0.0, 1.0, 1.5])
    def test_confidence_range(self, confidence):
        with pytest.raises(InvalidParameterError):
            value_at_risk('parametric', confidence=confidence)

    def test_unknown_method(self):
        with pytest.raises(InvalidParameterError, match="method"):
            value_at_risk('garch')


class TestProcessSolution:
    """Shared solution wrapper behavior."""

    def test_metadata(self, source):
        sol = monte_carlo_integration(np.square, 0.0, 1.0, 100, source=source, vectorized=True)
        assert sol.backend_name == 'cpu_process'
        assert sol.info['process'] == 'integration'
        assert sol.info['n'] == 100
        assert 'simulation' in sol.timing
        assert repr(sol) == "ProcessSolution(integration, backend='cpu_process')"

    def test_unknown_field(self, source):
        sol = simulate_random_walk(5, source=source)
        with pytest.raises(AttributeError, match="no field"):
            sol.estimate
