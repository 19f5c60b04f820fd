"""
Negative binomial and geometric distributions.

Both are evaluated through the number of failures Y before the r-th
success (r = 1 for the geometric), then shifted onto the requested
support: X = Y + r counts trials, and the geometric may instead count the
failures themselves. The CDF of Y is the regularized incomplete beta
I_p(r, y + 1).
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING

from scipy.special import betainc, gammaln, xlog1py

from pyprobability.core.exceptions import DomainError
from pyprobability.core.compute.special import safe_exp
from pyprobability.distributions._common import DistributionKind, Moments
from pyprobability.distributions.backends._discrete import discrete_handlers, rising
from pyprobability.distributions.backends._moments import (
    moment_handlers,
    raw_from_factorial,
    shifted_raw,
)

if TYPE_CHECKING:
    from pyprobability.distributions.design import DistributionSpec


def _layout(spec: DistributionSpec) -> tuple[int, int]:
    """(successes r, offset of the support)."""
    if spec.kind is DistributionKind.GEOMETRIC:
        return 1, 1 if spec.first_success else 0
    return spec.successes, spec.successes


def negative_binomial_pmf(spec: DistributionSpec, k: int) -> float:
    r, offset = _layout(spec)
    y = k - offset
    if y < 0:
        return 0.0
    p = spec.p
    log_pmf = (
        gammaln(y + r) - gammaln(r) - gammaln(y + 1)
        + r * math.log(p) + xlog1py(y, -p)
    )
    return math.exp(float(log_pmf))


def negative_binomial_cdf(spec: DistributionSpec, x: float) -> float:
    r, offset = _layout(spec)
    if x == math.inf:
        return 1.0
    if x < offset:
        return 0.0
    if spec.p == 1.0:
        return 1.0
    y = math.floor(x) - offset
    return float(betainc(r, y + 1, spec.p))


def moments(spec: DistributionSpec) -> Moments:
    r, offset = _layout(spec)
    p = spec.p
    q = 1.0 - p
    variance = r * q / (p * p)
    skewness = kurtosis = None
    if q > 0.0:
        skewness = (2.0 - p) / math.sqrt(r * q)
        kurtosis = 3.0 + 6.0 / r + p * p / (r * q)
    return Moments(
        mean=r * q / p + offset,
        variance=variance,
        std_dev=math.sqrt(variance),
        skewness=skewness,
        kurtosis=kurtosis,
    )


def raw_moment(spec: DistributionSpec, r: int) -> float:
    successes, offset = _layout(spec)
    odds = (1.0 - spec.p) / spec.p

    def failures(j: int) -> float:
        return raw_from_factorial(lambda k: rising(successes, k) * odds ** k, j)

    return shifted_raw(failures, offset, r)


def mgf(spec: DistributionSpec, t: float) -> float:
    """
    e^(offset t) * (p / (1 - q e^t))^r, finite only for t < -log(q).
    """
    r, offset = _layout(spec)
    p = spec.p
    q = 1.0 - p
    if q == 0.0:
        return safe_exp(offset * t)
    limit = -math.log(q)
    if t >= limit:
        raise DomainError(
            f"t: the moment generating function exists only for t < {limit:.6g}, got {t}"
        )
    return safe_exp(r * (math.log(p) - math.log1p(-q * math.exp(t))) + offset * t)


HANDLERS = {
    **discrete_handlers(negative_binomial_pmf, negative_binomial_cdf, moments),
    **moment_handlers(raw_moment, mgf, moments),
}
