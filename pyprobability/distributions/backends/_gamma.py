"""
Gamma distribution with shape alpha and rate lambda.

The CDF is the regularized lower incomplete gamma P(alpha, lambda * x).
Quantiles invert it with Newton steps safeguarded by a shrinking bracket,
started from the Wilson-Hilferty chi-square approximation.
"""

from __future__ import annotations

import math
import warnings
from typing import TYPE_CHECKING, Any

from pyprobability.core.exceptions import DomainError, NumericalDivergenceWarning
from pyprobability.core.compute.special import (
    chi_square_quantile,
    log_gamma,
    lower_incomplete_gamma_regularized,
    safe_exp,
)
from pyprobability.core.compute.tolerances import GAMMA_QUANTILE
from pyprobability.distributions._common import Moments, Operation
from pyprobability.distributions.backends._moments import moment_handlers

if TYPE_CHECKING:
    from pyprobability.distributions.design import DistributionDesign, DistributionSpec


def gamma_pdf(spec: DistributionSpec, x: float) -> float:
    alpha, rate = spec.shape, spec.rate
    if x < 0 or math.isinf(x):
        return 0.0
    if x == 0:
        if alpha < 1:
            return math.inf
        if alpha == 1:
            return rate
        return 0.0
    log_pdf = alpha * math.log(rate) + (alpha - 1.0) * math.log(x) - rate * x - log_gamma(alpha)
    return safe_exp(log_pdf)


def gamma_cdf(spec: DistributionSpec, x: float) -> float:
    if x <= 0:
        return 0.0
    return lower_incomplete_gamma_regularized(spec.shape, spec.rate * x)


def gamma_quantile(spec: DistributionSpec, p: float) -> float:
    """
    Smallest x with P(shape, rate * x) = p, for p in [0, 1].

    Solved on the standard scale y = rate * x.
    """
    alpha, rate = spec.shape, spec.rate
    if p == 0.0:
        return 0.0
    if p == 1.0:
        return math.inf

    lo, hi = 0.0, max(1.0, alpha)
    while lower_incomplete_gamma_regularized(alpha, hi) < p:
        lo, hi = hi, hi * 2.0

    y = chi_square_quantile(2.0 * alpha, p) / 2.0
    if not lo < y < hi:
        y = 0.5 * (lo + hi)

    log_norm = log_gamma(alpha)
    converged = False
    for _ in range(GAMMA_QUANTILE.max_iterations):
        f = lower_incomplete_gamma_regularized(alpha, y) - p
        if abs(f) <= GAMMA_QUANTILE.tol:
            converged = True
            break
        if f < 0:
            lo = y
        else:
            hi = y
        density = safe_exp((alpha - 1.0) * math.log(y) - y - log_norm)
        step = y - f / density if density > 0 else math.nan
        y = step if lo < step < hi else 0.5 * (lo + hi)
        if hi - lo <= GAMMA_QUANTILE.tol * max(1.0, y):
            converged = True
            break

    if not converged:
        warnings.warn(
            NumericalDivergenceWarning(
                f"gamma quantile for p={p} did not converge within "
                f"{GAMMA_QUANTILE.max_iterations} iterations",
                iterations=GAMMA_QUANTILE.max_iterations,
                estimate=y / rate,
            ),
            stacklevel=2,
        )
    return y / rate


def special_case(spec: DistributionSpec) -> dict[str, Any]:
    """
    Identify the named distribution this gamma coincides with, if any.

    Checked in order: exponential (alpha = 1), chi-square with one degree
    of freedom (alpha = lambda = 1/2), Erlang (integer alpha), chi-square
    family (half-integer alpha, where 2*lambda*X ~ chi-square(2*alpha)).
    """
    alpha, rate = spec.shape, spec.rate
    integer_shape = alpha == math.floor(alpha)
    half_integer_shape = (2.0 * alpha) == math.floor(2.0 * alpha) and not integer_shape

    if alpha == 1.0:
        return {"special_case": "exponential", "rate": rate}
    if alpha == 0.5 and rate == 0.5:
        return {"special_case": "chi_square", "df": 1.0}
    if integer_shape:
        return {"special_case": "erlang", "stages": int(alpha), "rate": rate}
    if half_integer_shape:
        return {"special_case": "chi_square_family", "df": 2.0 * alpha, "scale_factor": 2.0 * rate}
    return {"special_case": None}


def moments(spec: DistributionSpec) -> Moments:
    alpha, rate = spec.shape, spec.rate
    variance = alpha / rate ** 2
    return Moments(
        mean=alpha / rate,
        variance=variance,
        std_dev=math.sqrt(variance),
        skewness=2.0 / math.sqrt(alpha),
        kurtosis=3.0 + 6.0 / alpha,
    )


def raw_moment(spec: DistributionSpec, r: int) -> float:
    """alpha (alpha + 1) ... (alpha + r - 1) / lambda^r."""
    alpha, rate = spec.shape, spec.rate
    return math.prod(alpha + i for i in range(r)) / rate ** r


def mgf(spec: DistributionSpec, t: float) -> float:
    alpha, rate = spec.shape, spec.rate
    if t >= rate:
        raise DomainError(
            f"t: the moment generating function exists only for t < rate={rate}, got {t}"
        )
    return safe_exp(-alpha * math.log1p(-t / rate))


def _linear_family(
    spec: DistributionSpec, scale: float, shift: float,
) -> tuple[str, dict[str, Any]] | None:
    if scale < 0 or shift != 0.0:
        return None
    return "gamma", {"shape": spec.shape, "rate": spec.rate / scale}


def _pdf(design: DistributionDesign) -> tuple[str, Any]:
    return "scalar", gamma_pdf(design.spec, design.real("x"))


def _cdf(design: DistributionDesign) -> tuple[str, Any]:
    return "scalar", gamma_cdf(design.spec, design.real("x"))


def _interval(design: DistributionDesign) -> tuple[str, Any]:
    lower, upper = design.bounds()
    spec = design.spec
    return "scalar", max(0.0, gamma_cdf(spec, upper) - gamma_cdf(spec, lower))


def _quantile(design: DistributionDesign) -> tuple[str, Any]:
    return "scalar", gamma_quantile(design.spec, design.probability("p"))


def _mean(design: DistributionDesign) -> tuple[str, Any]:
    return "scalar", design.spec.shape / design.spec.rate


def _variance(design: DistributionDesign) -> tuple[str, Any]:
    return "scalar", design.spec.shape / design.spec.rate ** 2


def _special(design: DistributionDesign) -> tuple[str, Any]:
    return "record", special_case(design.spec)


HANDLERS = {
    Operation.PDF: _pdf,
    Operation.CDF: _cdf,
    Operation.INTERVAL: _interval,
    Operation.QUANTILE: _quantile,
    Operation.MEAN: _mean,
    Operation.VARIANCE: _variance,
    Operation.SPECIAL: _special,
    **moment_handlers(raw_moment, mgf, moments, linear_family=_linear_family),
}
