"""
Continuous uniform distribution on [a, b].
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING, Any

from pyprobability.core.exceptions import DomainError
from pyprobability.core.compute.special import safe_exp
from pyprobability.distributions._common import Moments, Operation
from pyprobability.distributions.backends._moments import (
    moment_handlers,
    sample_count,
    transformed,
)

if TYPE_CHECKING:
    from pyprobability.distributions.design import DistributionDesign, DistributionSpec


def uniform_pdf(spec: DistributionSpec, x: float) -> float:
    a, b = spec.a, spec.b
    if x < a or x > b:
        return 0.0
    return 1.0 / (b - a)


def uniform_cdf(spec: DistributionSpec, x: float) -> float:
    a, b = spec.a, spec.b
    if x <= a:
        return 0.0
    if x >= b:
        return 1.0
    return (x - a) / (b - a)


def moments(spec: DistributionSpec) -> Moments:
    a, b = spec.a, spec.b
    variance = (b - a) ** 2 / 12.0
    return Moments(
        mean=(a + b) / 2.0,
        variance=variance,
        std_dev=math.sqrt(variance),
        skewness=0.0,
        kurtosis=9.0 / 5.0,
    )


def raw_moment(spec: DistributionSpec, r: int) -> float:
    a, b = spec.a, spec.b
    return (b ** (r + 1) - a ** (r + 1)) / ((r + 1) * (b - a))


def central_moment(spec: DistributionSpec, r: int) -> float:
    if r % 2:
        return 0.0
    half_width = (spec.b - spec.a) / 2.0
    return half_width ** r / (r + 1)


def mgf(spec: DistributionSpec, t: float) -> float:
    """(e^(tb) - e^(ta)) / (t (b - a)), with M(0) = 1."""
    a, b = spec.a, spec.b
    d = abs(t) * (b - a)
    if d == 0.0:
        return 1.0
    return safe_exp(max(t * a, t * b) + math.log(-math.expm1(-d)) - math.log(d))


def _linear_family(
    spec: DistributionSpec, scale: float, shift: float,
) -> tuple[str, dict[str, Any]]:
    ends = sorted((scale * spec.a + shift, scale * spec.b + shift))
    return "uniform", {"a": ends[0], "b": ends[1]}


def _square(design: DistributionDesign) -> dict[str, Any]:
    spec = design.spec
    a, b = spec.a, spec.b
    if a >= 0:
        lower, upper = a * a, b * b
    elif b <= 0:
        lower, upper = b * b, a * a
    else:
        lower, upper = 0.0, max(a * a, b * b)
    mean = raw_moment(spec, 2)
    return transformed(
        None, {"lower": lower, "upper": upper},
        mean, raw_moment(spec, 4) - mean * mean,
    )


def _log(design: DistributionDesign) -> dict[str, Any]:
    a, b = design.spec.a, design.spec.b
    if a <= 0:
        raise DomainError(f"log transform needs a > 0, got a={a}")
    log_a, log_b = math.log(a), math.log(b)
    mean = (b * log_b - a * log_a) / (b - a) - 1.0
    second = (
        b * (log_b * log_b - 2.0 * log_b + 2.0)
        - a * (log_a * log_a - 2.0 * log_a + 2.0)
    ) / (b - a)
    return transformed(None, {"lower": log_a, "upper": log_b}, mean, second - mean * mean)


def _order_statistic(design: DistributionDesign, largest: bool) -> dict[str, Any]:
    """min or max of n copies: a + (b - a) Beta(1, n) or Beta(n, 1)."""
    n = sample_count(design)
    a, b = design.spec.a, design.spec.b
    width = b - a
    alpha, beta = (n, 1) if largest else (1, n)
    variance = width * width * n / ((n + 1) ** 2 * (n + 2))
    return transformed(
        "beta", {"alpha": alpha, "beta": beta, "lower": a, "upper": b},
        a + width * alpha / (n + 1), variance,
    )


def _pdf(design: DistributionDesign) -> tuple[str, Any]:
    return "scalar", uniform_pdf(design.spec, design.real("x"))


def _cdf(design: DistributionDesign) -> tuple[str, Any]:
    return "scalar", uniform_cdf(design.spec, design.real("x"))


def _interval(design: DistributionDesign) -> tuple[str, Any]:
    lower, upper = design.bounds()
    spec = design.spec
    return "scalar", uniform_cdf(spec, upper) - uniform_cdf(spec, lower)


def _quantile(design: DistributionDesign) -> tuple[str, Any]:
    p = design.probability("p")
    spec = design.spec
    return "scalar", spec.a + p * (spec.b - spec.a)


def _mean(design: DistributionDesign) -> tuple[str, Any]:
    return "scalar", moments(design.spec).mean


def _variance(design: DistributionDesign) -> tuple[str, Any]:
    return "scalar", moments(design.spec).variance


HANDLERS = {
    Operation.PDF: _pdf,
    Operation.CDF: _cdf,
    Operation.INTERVAL: _interval,
    Operation.QUANTILE: _quantile,
    Operation.MEAN: _mean,
    Operation.VARIANCE: _variance,
    **moment_handlers(
        raw_moment, mgf, moments,
        central_moment=central_moment,
        linear_family=_linear_family,
        transforms={
            "square": _square,
            "log": _log,
            "min": lambda design: _order_statistic(design, largest=False),
            "max": lambda design: _order_statistic(design, largest=True),
        },
    ),
}
