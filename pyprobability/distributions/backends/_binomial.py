"""
Bernoulli and binomial distributions.

Bernoulli(p) is evaluated as Binomial(1, p). The pmf is computed in log
space with xlogy/xlog1py so that p = 0 and p = 1 give exact point masses;
the CDF is the regularized incomplete beta I_{1-p}(n - k, k + 1).
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING

from scipy.special import betainc, gammaln, xlog1py, xlogy

from pyprobability.core.compute.special import safe_exp
from pyprobability.distributions._common import DistributionKind, Moments
from pyprobability.distributions.backends._discrete import discrete_handlers, falling
from pyprobability.distributions.backends._moments import moment_handlers, raw_from_factorial

if TYPE_CHECKING:
    from pyprobability.distributions.design import DistributionSpec


def _trials(spec: DistributionSpec) -> int:
    return 1 if spec.kind is DistributionKind.BERNOULLI else spec.n


def binomial_pmf(spec: DistributionSpec, k: int) -> float:
    n, p = _trials(spec), spec.p
    if k < 0 or k > n:
        return 0.0
    log_pmf = (
        gammaln(n + 1) - gammaln(k + 1) - gammaln(n - k + 1)
        + xlogy(k, p) + xlog1py(n - k, -p)
    )
    return math.exp(float(log_pmf))


def binomial_cdf(spec: DistributionSpec, x: float) -> float:
    n, p = _trials(spec), spec.p
    if x < 0:
        return 0.0
    if x >= n:
        return 1.0
    k = math.floor(x)
    if p == 0.0:
        return 1.0
    if p == 1.0:
        return 0.0
    return float(betainc(n - k, k + 1, 1.0 - p))


def moments(spec: DistributionSpec) -> Moments:
    n, p = _trials(spec), spec.p
    q = 1.0 - p
    variance = n * p * q
    skewness = kurtosis = None
    if variance > 0.0:
        skewness = (1.0 - 2.0 * p) / math.sqrt(variance)
        kurtosis = 3.0 + (1.0 - 6.0 * p * q) / variance
    return Moments(
        mean=n * p,
        variance=variance,
        std_dev=math.sqrt(variance),
        skewness=skewness,
        kurtosis=kurtosis,
    )


def raw_moment(spec: DistributionSpec, r: int) -> float:
    n, p = _trials(spec), spec.p
    return raw_from_factorial(lambda k: falling(n, k) * p ** k, r)


def mgf(spec: DistributionSpec, t: float) -> float:
    """(1 - p + p e^t)^n, evaluated in log space."""
    n, p = _trials(spec), spec.p
    if p == 0.0:
        return 1.0
    if p == 1.0:
        return safe_exp(n * t)
    if t > 0:
        log_base = t + math.log(p + (1.0 - p) * math.exp(-t))
    else:
        log_base = math.log1p(p * math.expm1(t))
    return safe_exp(n * log_base)


HANDLERS = {
    **discrete_handlers(binomial_pmf, binomial_cdf, moments),
    **moment_handlers(raw_moment, mgf, moments),
}
