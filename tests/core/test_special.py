"""
Tests for the scalar special functions.

Validates:
    - factorial / gamma_function exact branches and poles
    - Lanczos and half-integer gamma against scipy
    - Regularized lower incomplete gamma: limits, monotonicity, scipy
      agreement, non-convergence handling
    - normal_cdf symmetry, tails and accuracy
    - normal_quantile round-trip and accuracy
    - chi_square_quantile exact and approximate branches
"""

import math
import warnings

import numpy as np
import pytest
from scipy import special as sp
from scipy import stats

from pyprobability.core.compute.special import (
    beta_function,
    chi_square_quantile,
    factorial,
    gamma_function,
    incomplete_gamma_with_status,
    log_gamma,
    lower_incomplete_gamma_regularized,
    multinomial_coefficient,
    normal_cdf,
    normal_quantile,
)
from pyprobability.core.exceptions import (
    DomainError,
    NumericalDivergenceError,
    NumericalDivergenceWarning,
)


# ═══════════════════════════════════════════════════════════════════════
# Factorial and gamma
# ═══════════════════════════════════════════════════════════════════════


class TestFactorial:
    """Exact products up to 170, Stirling beyond."""

    def test_small_values(self):
        assert factorial(0) == 1.0
        assert factorial(1) == 1.0
        assert factorial(5) == 120.0
        assert factorial(10) == 3628800.0

    def test_matches_math_factorial(self):
        assert factorial(20) == float(math.factorial(20))

    def test_stirling_beyond_170_is_inf(self):
        assert factorial(171) == math.inf

    @pytest.mark.parametrize("bad", [-1, 2.5])
    def test_domain(self, bad):
        with pytest.raises(DomainError):
            factorial(bad)


class TestGammaFunction:
    """Integer, half-integer and Lanczos branches."""

    @pytest.mark.parametrize("n", range(1, 21))
    def test_integer_is_factorial(self, n):
        assert gamma_function(n) == pytest.approx(math.factorial(n - 1), rel=1e-12)

    def test_gamma_five(self):
        assert gamma_function(5) == 24.0

    def test_half(self):
        assert gamma_function(0.5) == pytest.approx(math.sqrt(math.pi), rel=1e-14)

    @pytest.mark.parametrize("x", [1.5, 2.5, 7.5, 20.5])
    def test_half_integers(self, x):
        assert gamma_function(x) == pytest.approx(math.gamma(x), rel=1e-12)

    @pytest.mark.parametrize("x", [0.1, 0.7, 1.3, 3.7, 12.2, 50.3])
    def test_lanczos_against_scipy(self, x):
        assert gamma_function(x) == pytest.approx(sp.gamma(x), rel=1e-10)

    @pytest.mark.parametrize("x", [-0.5, -1.5, -2.3])
    def test_reflection(self, x):
        assert gamma_function(x) == pytest.approx(sp.gamma(x), rel=1e-10)

    @pytest.mark.parametrize("pole", [0, -1, -4])
    def test_poles(self, pole):
        with pytest.raises(DomainError, match="pole"):
            gamma_function(pole)

    def test_nan_rejected(self):
        with pytest.raises(DomainError):
            gamma_function(float("nan"))

    def test_log_gamma(self):
        assert log_gamma(500.0) == pytest.approx(sp.gammaln(500.0), rel=1e-12)
        with pytest.raises(DomainError):
            log_gamma(0.0)


class TestBetaAndMultinomial:
    """Products of gamma functions and factorials."""

    def test_beta_two_components(self):
        assert beta_function([2.0, 3.0]) == pytest.approx(sp.beta(2.0, 3.0), rel=1e-12)

    def test_beta_three_components(self):
        # Gamma(1)Gamma(2)Gamma(3) / Gamma(6) = 2 / 120
        assert beta_function([1.0, 2.0, 3.0]) == pytest.approx(2.0 / 120.0)

    def test_beta_rejects_nonpositive(self):
        with pytest.raises(DomainError):
            beta_function([1.0, 0.0])

    def test_multinomial_coefficient(self):
        assert multinomial_coefficient(4, [2, 1, 1]) == 12.0

    def test_multinomial_coefficient_large_n(self):
        expected = math.exp(sp.gammaln(201) - 2 * sp.gammaln(101))
        assert multinomial_coefficient(200, [100, 100]) == pytest.approx(expected, rel=1e-9)

    def test_multinomial_coefficient_rejects_negative(self):
        with pytest.raises(DomainError):
            multinomial_coefficient(3, [4, -1])


# ═══════════════════════════════════════════════════════════════════════
# Incomplete gamma
# ═══════════════════════════════════════════════════════════════════════


class TestIncompleteGamma:
    """P(a, x) limits, branches and accuracy."""

    def test_limits(self):
        assert lower_incomplete_gamma_regularized(2.5, 0.0) == 0.0
        assert lower_incomplete_gamma_regularized(2.5, -1.0) == 0.0
        assert lower_incomplete_gamma_regularized(2.5, math.inf) == 1.0
        assert lower_incomplete_gamma_regularized(2.5, 200.0) == pytest.approx(1.0)

    def test_monotone_in_x(self):
        xs = np.linspace(0.0, 20.0, 81)
        values = [lower_incomplete_gamma_regularized(3.3, x) for x in xs]
        assert all(b >= a for a, b in zip(values, values[1:]))

    @pytest.mark.parametrize("a", [0.5, 1.0, 2.0, 3.7, 10.0, 25.5])
    @pytest.mark.parametrize("x", [0.1, 1.0, 4.0, 12.0, 30.0])
    def test_against_scipy(self, a, x):
        assert lower_incomplete_gamma_regularized(a, x) == pytest.approx(
            sp.gammainc(a, x), abs=1e-8
        )

    def test_branch_selection(self):
        assert incomplete_gamma_with_status(3, 2.0).method == 'finite_sum'
        assert incomplete_gamma_with_status(2.5, 1.0).method == 'series'
        assert incomplete_gamma_with_status(2.5, 6.0).method == 'continued_fraction'

    def test_exponential_cdf(self):
        # P(1, x) = 1 - exp(-x)
        assert lower_incomplete_gamma_regularized(1.0, 2.0) == pytest.approx(1 - math.exp(-2.0))

    def test_rejects_nonpositive_a(self):
        with pytest.raises(DomainError):
            lower_incomplete_gamma_regularized(0.0, 1.0)

    def test_non_convergence_warns(self):
        status = incomplete_gamma_with_status(1000.5, 1000.0)
        assert status.converged is False
        with pytest.warns(NumericalDivergenceWarning):
            value = lower_incomplete_gamma_regularized(1000.5, 1000.0)
        assert 0.0 <= value <= 1.0

    def test_non_convergence_strict_raises(self):
        with warnings.catch_warnings():
            warnings.simplefilter("error")
            with pytest.raises(NumericalDivergenceError) as exc_info:
                lower_incomplete_gamma_regularized(1000.5, 1000.0, strict=True)
        assert exc_info.value.iterations == 100
        assert exc_info.value.estimate is not None


# ═══════════════════════════════════════════════════════════════════════
# Normal CDF and quantile
# ═══════════════════════════════════════════════════════════════════════


class TestNormalCdf:
    """Accuracy, symmetry and clamping."""

    def test_center(self):
        assert normal_cdf(0.0) == pytest.approx(0.5, abs=1e-7)

    def test_975(self):
        assert normal_cdf(1.959964) == pytest.approx(0.975, abs=1e-6)

    @pytest.mark.parametrize("z", np.linspace(-6.0, 6.0, 49))
    def test_symmetry(self, z):
        assert normal_cdf(z) + normal_cdf(-z) == pytest.approx(1.0, abs=1e-6)

    @pytest.mark.parametrize("z", [-5.0, -2.5, -1.0, 0.3, 1.7, 2.9])
    def test_against_scipy(self, z):
        assert normal_cdf(z) == pytest.approx(stats.norm.cdf(z), abs=1e-7)

    @pytest.mark.parametrize("z", [-7.5, -5.0, -3.5])
    def test_tail_relative_accuracy(self, z):
        assert normal_cdf(z) == pytest.approx(stats.norm.cdf(z), rel=1e-6)

    def test_clamped(self):
        assert normal_cdf(-8.5) == 0.0
        assert normal_cdf(8.5) == 1.0
        assert normal_cdf(-math.inf) == 0.0


class TestNormalQuantile:
    """AS241 inverse."""

    def test_endpoints(self):
        assert normal_quantile(0.0) == -math.inf
        assert normal_quantile(1.0) == math.inf

    def test_center(self):
        assert normal_quantile(0.5) == 0.0

    @pytest.mark.parametrize("p", [1e-10, 1e-4, 0.025, 0.3, 0.8, 0.975, 1 - 1e-8])
    def test_against_scipy(self, p):
        assert normal_quantile(p) == pytest.approx(stats.norm.ppf(p), rel=1e-9)

    @pytest.mark.parametrize("z", np.linspace(-6.0, 6.0, 25))
    def test_round_trip(self, z):
        assert normal_quantile(normal_cdf(z)) == pytest.approx(z, abs=1e-4)

    @pytest.mark.parametrize("bad", [-0.1, 1.5])
    def test_domain(self, bad):
        with pytest.raises(DomainError):
            normal_quantile(bad)


class TestChiSquareQuantile:
    """Exact for df 1 and 2, Wilson-Hilferty otherwise."""

    def test_df1_exact(self):
        assert chi_square_quantile(1, 0.95) == pytest.approx(stats.chi2.ppf(0.95, 1), rel=1e-8)

    def test_df2_exact(self):
        assert chi_square_quantile(2, 0.95) == pytest.approx(-2 * math.log(0.05), rel=1e-12)

    @pytest.mark.parametrize("df", [3, 5, 10, 30])
    def test_wilson_hilferty(self, df):
        assert chi_square_quantile(df, 0.95) == pytest.approx(stats.chi2.ppf(0.95, df), rel=1e-2)

    def test_endpoints(self):
        assert chi_square_quantile(4, 0.0) == 0.0
        assert chi_square_quantile(4, 1.0) == math.inf

    def test_domain(self):
        with pytest.raises(DomainError):
            chi_square_quantile(0, 0.5)
        with pytest.raises(DomainError):
            chi_square_quantile(3, 1.5)
