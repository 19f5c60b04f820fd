"""
Exponential distribution with rate lambda.
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING, Any

from pyprobability.core.exceptions import DomainError
from pyprobability.distributions._common import Moments, Operation
from pyprobability.distributions.backends._moments import (
    moment_handlers,
    sample_count,
    transformed,
)

if TYPE_CHECKING:
    from pyprobability.distributions.design import DistributionDesign, DistributionSpec


def exponential_pdf(spec: DistributionSpec, x: float) -> float:
    if x < 0:
        return 0.0
    return spec.rate * math.exp(-spec.rate * x)


def exponential_cdf(spec: DistributionSpec, x: float) -> float:
    if x <= 0:
        return 0.0
    return -math.expm1(-spec.rate * x)


def moments(spec: DistributionSpec) -> Moments:
    mean = 1.0 / spec.rate
    return Moments(
        mean=mean,
        variance=mean * mean,
        std_dev=mean,
        skewness=2.0,
        kurtosis=9.0,
    )


def raw_moment(spec: DistributionSpec, r: int) -> float:
    return math.factorial(r) / spec.rate ** r


def mgf(spec: DistributionSpec, t: float) -> float:
    rate = spec.rate
    if t >= rate:
        raise DomainError(
            f"t: the moment generating function exists only for t < rate={rate}, got {t}"
        )
    return rate / (rate - t)


def _linear_family(
    spec: DistributionSpec, scale: float, shift: float,
) -> tuple[str, dict[str, Any]] | None:
    if scale < 0:
        return None
    rate = spec.rate / scale
    if shift == 0.0:
        return "exponential", {"rate": rate}
    return "shifted_exponential", {"rate": rate, "shift": shift}


def _square(design: DistributionDesign) -> dict[str, Any]:
    """X^2 is Weibull with shape 1/2 and scale 1/rate^2."""
    rate = design.spec.rate
    return transformed(
        "weibull", {"shape": 0.5, "scale": 1.0 / rate ** 2},
        2.0 / rate ** 2, 20.0 / rate ** 4,
    )


def _exp(design: DistributionDesign) -> dict[str, Any]:
    """e^X is Pareto with index alpha = rate and minimum 1."""
    alpha = design.spec.rate
    mean = alpha / (alpha - 1.0) if alpha > 1.0 else math.inf
    variance = alpha / ((alpha - 1.0) ** 2 * (alpha - 2.0)) if alpha > 2.0 else math.inf
    return transformed("pareto", {"alpha": alpha, "minimum": 1.0}, mean, variance)


def _min(design: DistributionDesign) -> dict[str, Any]:
    """Minimum of n independent copies is exponential with rate n * rate."""
    rate = sample_count(design) * design.spec.rate
    return transformed("exponential", {"rate": rate}, 1.0 / rate, 1.0 / rate ** 2)


def _pdf(design: DistributionDesign) -> tuple[str, Any]:
    return "scalar", exponential_pdf(design.spec, design.real("x"))


def _cdf(design: DistributionDesign) -> tuple[str, Any]:
    return "scalar", exponential_cdf(design.spec, design.real("x"))


def _interval(design: DistributionDesign) -> tuple[str, Any]:
    lower, upper = design.bounds()
    spec = design.spec
    return "scalar", exponential_cdf(spec, upper) - exponential_cdf(spec, lower)


def _memoryless(design: DistributionDesign) -> tuple[str, Any]:
    """
    P(X > s + t | X > s) alongside P(X > t); both equal exp(-rate * t).
    """
    s = design.real("s")
    t = design.real("t")
    if s < 0 or t < 0:
        raise DomainError(f"s and t must be >= 0, got s={s}, t={t}")
    rate = design.spec.rate
    survival_t = math.exp(-rate * t)
    return "record", {
        "s": s,
        "t": t,
        "survival_s": math.exp(-rate * s),
        "survival_s_plus_t": math.exp(-rate * (s + t)),
        "conditional": survival_t,
        "survival_t": survival_t,
    }


def _quantile(design: DistributionDesign) -> tuple[str, Any]:
    p = design.probability("p")
    if p == 1.0:
        return "scalar", math.inf
    return "scalar", -math.log1p(-p) / design.spec.rate


def _mean(design: DistributionDesign) -> tuple[str, Any]:
    return "scalar", 1.0 / design.spec.rate


def _variance(design: DistributionDesign) -> tuple[str, Any]:
    return "scalar", 1.0 / design.spec.rate ** 2


HANDLERS = {
    Operation.PDF: _pdf,
    Operation.CDF: _cdf,
    Operation.INTERVAL: _interval,
    Operation.MEMORYLESS: _memoryless,
    Operation.QUANTILE: _quantile,
    Operation.MEAN: _mean,
    Operation.VARIANCE: _variance,
    **moment_handlers(
        raw_moment, mgf, moments,
        linear_family=_linear_family,
        transforms={"square": _square, "exp": _exp, "min": _min},
    ),
}
