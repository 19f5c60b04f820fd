"""
Moments, moment generating functions and transformations shared by the
univariate distributions.

Each univariate backend supplies raw_moment(spec, r) and mgf(spec, t).
Central moments follow from the raw ones by the binomial expansion

    E[(X - mu)^r] = sum_j C(r, j) E[X^j] (-mu)^(r - j)

unless the backend has a closed form. Discrete backends build their raw
moments from factorial moments E[X (X-1) ... (X-r+1)] and Stirling
numbers of the second kind.

The transform operation reports the distribution of Y = g(X). Linear maps
Y = scale * X + shift work for every distribution from its moments; a
backend may name the resulting family and register further maps (square,
exp, abs, log, min, max).
"""

from __future__ import annotations

import math
from functools import lru_cache
from typing import TYPE_CHECKING, Any, Callable

import numpy as np

from pyprobability.core.exceptions import DomainError, InvalidParameterError
from pyprobability.distributions._common import Moments, Operation

if TYPE_CHECKING:
    from pyprobability.distributions.design import DistributionDesign, DistributionSpec

RawMoment = Callable[['DistributionSpec', int], float]
CentralMoment = Callable[['DistributionSpec', int], float]
Mgf = Callable[['DistributionSpec', float], float]
LinearFamily = Callable[['DistributionSpec', float, float], 'tuple[str, dict[str, Any]] | None']
Transform = Callable[['DistributionDesign'], dict[str, Any]]

DEFAULT_MOMENTS_ORDER = 4


# =====================================================================
# Raw and central moments
# =====================================================================


@lru_cache(maxsize=None)
def stirling2(r: int, k: int) -> int:
    """Stirling number of the second kind S(r, k)."""
    if r == k:
        return 1
    if k == 0 or k > r:
        return 0
    return k * stirling2(r - 1, k) + stirling2(r - 1, k - 1)


def raw_from_factorial(factorial_moment: Callable[[int], float], r: int) -> float:
    """E[X^r] = sum_k S(r, k) E[(X)_k]."""
    if r == 0:
        return 1.0
    return math.fsum(stirling2(r, k) * factorial_moment(k) for k in range(1, r + 1))


def shifted_raw(raw: Callable[[int], float], shift: float, r: int) -> float:
    """E[(Y + shift)^r] from the raw moments of Y."""
    return math.fsum(
        math.comb(r, j) * raw(j) * shift ** (r - j) for j in range(r + 1)
    )


def central_from_raw(raw_moment: RawMoment, spec: DistributionSpec, r: int) -> float:
    if r == 1:
        return 0.0
    mean = raw_moment(spec, 1)
    return math.fsum(
        math.comb(r, j) * (raw_moment(spec, j) if j else 1.0) * (-mean) ** (r - j)
        for j in range(r + 1)
    )


def _standardized(central: float, variance: float, r: int) -> float:
    if variance <= 0.0:
        raise DomainError(
            "standardized moments are undefined for a distribution with zero variance"
        )
    return central / variance ** (r / 2.0)


# =====================================================================
# Handler factory
# =====================================================================


def moment_handlers(
    raw_moment: RawMoment,
    mgf: Mgf,
    moments: Callable[[DistributionSpec], Moments],
    *,
    central_moment: CentralMoment | None = None,
    linear_family: LinearFamily | None = None,
    transforms: dict[str, Transform] | None = None,
) -> dict[Operation, Callable[[DistributionDesign], tuple[str, Any]]]:
    """
    Handlers for RAW_MOMENT, CENTRAL_MOMENT, STANDARDIZED_MOMENT, MOMENTS,
    MGF and TRANSFORM built from one distribution's kernels.
    """
    def central(spec: DistributionSpec, r: int) -> float:
        if central_moment is not None:
            return central_moment(spec, r)
        return central_from_raw(raw_moment, spec, r)

    def _raw(design: DistributionDesign) -> tuple[str, Any]:
        return "scalar", raw_moment(design.spec, design.order())

    def _central(design: DistributionDesign) -> tuple[str, Any]:
        return "scalar", central(design.spec, design.order())

    def _standardized_moment(design: DistributionDesign) -> tuple[str, Any]:
        r = design.order()
        spec = design.spec
        return "scalar", _standardized(central(spec, r), central(spec, 2), r)

    def _table(design: DistributionDesign) -> tuple[str, Any]:
        """
        Raw, central and standardized moments of orders 1..order.

        standardized is None when the variance is zero. With operand t the
        record also carries the MGF at t.
        """
        order = design.order(default=DEFAULT_MOMENTS_ORDER)
        spec = design.spec
        orders = range(1, order + 1)
        raw = np.array([raw_moment(spec, r) for r in orders])
        cen = np.array([central(spec, r) for r in orders])
        variance = central(spec, 2)
        record: dict[str, Any] = {
            "order": order,
            "raw": raw,
            "central": cen,
            "standardized": None,
        }
        if variance > 0.0:
            record["standardized"] = np.array([
                _standardized(c, variance, r) for r, c in zip(orders, cen)
            ])
        if "t" in design.operands:
            t = design.real("t")
            record["t"] = t
            record["mgf"] = mgf(spec, t)
        return "record", record

    def _mgf(design: DistributionDesign) -> tuple[str, Any]:
        return "scalar", mgf(design.spec, design.real("t"))

    def _transform(design: DistributionDesign) -> tuple[str, Any]:
        name = str(design.require("transform")).lower()
        if name == "linear":
            return "record", linear_transform(design, moments, linear_family)
        extra = transforms or {}
        if name not in extra:
            valid = ", ".join(["linear", *extra])
            raise InvalidParameterError(
                f"transform {name!r} is not supported for {design.spec.kind.value}. "
                f"Supported: {valid}"
            )
        return "record", {"transform": name, **extra[name](design)}

    return {
        Operation.RAW_MOMENT: _raw,
        Operation.CENTRAL_MOMENT: _central,
        Operation.STANDARDIZED_MOMENT: _standardized_moment,
        Operation.MOMENTS: _table,
        Operation.MGF: _mgf,
        Operation.TRANSFORM: _transform,
    }


# =====================================================================
# Transformations
# =====================================================================


def linear_transform(
    design: DistributionDesign,
    moments: Callable[[DistributionSpec], Moments],
    linear_family: LinearFamily | None,
) -> dict[str, Any]:
    """
    Y = scale * X + shift.

    Mean and variance map as scale * mean + shift and scale^2 * variance;
    skewness changes sign with scale, kurtosis is unchanged.
    """
    scale = design.real("scale", 1.0)
    shift = design.real("shift", 0.0)
    if scale == 0.0 or not math.isfinite(scale) or not math.isfinite(shift):
        raise DomainError(
            f"linear transform needs a finite non-zero scale and finite shift, "
            f"got scale={scale}, shift={shift}"
        )
    m = moments(design.spec)
    family = linear_family(design.spec, scale, shift) if linear_family else None
    record: dict[str, Any] = {
        "transform": "linear",
        "scale": scale,
        "shift": shift,
        "distribution": family[0] if family else None,
        "parameters": family[1] if family else {},
        "mean": scale * m.mean + shift,
        "variance": scale * scale * m.variance,
    }
    if m.skewness is not None:
        record["skewness"] = math.copysign(1.0, scale) * m.skewness
    if m.kurtosis is not None:
        record["kurtosis"] = m.kurtosis
    return record


def transformed(
    distribution: str | None,
    parameters: dict[str, Any],
    mean: float,
    variance: float,
) -> dict[str, Any]:
    """Record body shared by the non-linear transforms."""
    return {
        "distribution": distribution,
        "parameters": parameters,
        "mean": mean,
        "variance": variance,
    }


def sample_count(design: DistributionDesign) -> int:
    """Number n of independent copies for the min and max transforms."""
    return design.integer("count", 2, default=2)

