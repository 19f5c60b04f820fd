"""
Monte Carlo estimators: integration, European option pricing, Value-at-Risk.
"""

from __future__ import annotations

import math
from typing import Any

import numpy as np
from numpy.typing import NDArray

from pyprobability.core.exceptions import InvalidParameterError
from pyprobability.core.compute.special import normal_quantile
from pyprobability.processes._common import (
    OPTION_PATHS_KEPT,
    VAR_HISTOGRAM_BINS,
    Z_95,
    IntegrationParams,
    OptionPriceParams,
    OptionType,
    ValueAtRiskParams,
    VaRMethod,
)
from pyprobability.processes.design import ProcessDesign
from pyprobability.sampling._common import RunningStats
from pyprobability.sampling._samplers import standard_normals
from pyprobability.sampling.solution import equal_width_histogram


# =====================================================================
# Integration
# =====================================================================

def integration_params(stats: RunningStats, a: float, b: float) -> tuple[IntegrationParams, list[str]]:
    """
    Estimate and standard error from running statistics of f(U).

    Shared by single runs and by the batch combiner, so a merged estimate
    is identical to one computed over all evaluations at once.
    """
    width = b - a
    estimate = width * float(stats.mean)
    standard_error = width * math.sqrt(float(stats.variance) / stats.count)
    warnings_list = []
    if estimate != 0.0:
        relative_error = abs(standard_error / estimate)
    elif standard_error == 0.0:
        relative_error = 0.0
    else:
        relative_error = math.inf
        warnings_list.append("Estimate is exactly zero; relative error is infinite")
    params = IntegrationParams(
        estimate=estimate,
        standard_error=standard_error,
        relative_error=relative_error,
        samples=stats.count,
        a=a,
        b=b,
        stats=stats,
    )
    return params, warnings_list


def integration(design: ProcessDesign) -> tuple[IntegrationParams, list[str]]:
    p = design.params
    a, b, f = p['a'], p['b'], p['f']
    x = a + (b - a) * design.source.uniforms(p['n'])
    if p['vectorized']:
        y = np.asarray(f(x), dtype=np.float64)
        if y.shape != x.shape:
            raise InvalidParameterError(
                f"f: vectorized integrand must return shape {x.shape}, got {y.shape}"
            )
    else:
        y = np.array([f(float(xi)) for xi in x], dtype=np.float64)
    bad = int(np.sum(~np.isfinite(y)))
    if bad:
        raise InvalidParameterError(
            f"f: returned {bad} non-finite value(s) on [{a}, {b}]"
        )
    return integration_params(RunningStats.from_values(y), a, b)


# =====================================================================
# Option pricing
# =====================================================================

def option_price(design: ProcessDesign) -> tuple[OptionPriceParams, list[str]]:
    """
    Discounted mean payoff of terminal prices

        S_T = S_0 exp((r - q - sigma**2 / 2) T + sigma sqrt(T) Z)

    with a normal-approximation 95% interval.
    """
    p = design.params
    n = p['samples']
    sigma, expiry = p['volatility'], p['expiry']
    z = standard_normals(n, source=design.source)

    drift = (p['rate'] - p['dividend'] - 0.5 * sigma ** 2) * expiry
    final_prices = p['spot'] * np.exp(drift + sigma * math.sqrt(expiry) * z)
    if p['option_type'] is OptionType.CALL:
        payoffs = np.maximum(0.0, final_prices - p['strike'])
    else:
        payoffs = np.maximum(0.0, p['strike'] - final_prices)
    discounted = payoffs * math.exp(-p['rate'] * expiry)

    stats = RunningStats.from_values(discounted)
    price = float(stats.mean)
    standard_error = math.sqrt(float(stats.variance) / n)
    half_width = Z_95 * standard_error
    kept = min(n, OPTION_PATHS_KEPT)

    params = OptionPriceParams(
        price=price,
        standard_error=standard_error,
        ci_lower=price - half_width,
        ci_upper=price + half_width,
        samples=n,
        final_prices=final_prices[:kept].copy(),
        payoffs=payoffs[:kept].copy(),
        discounted_payoffs=discounted[:kept].copy(),
        option_type=p['option_type'],
    )
    return params, []


# =====================================================================
# Value-at-Risk
# =====================================================================

def _lower_tail(returns: NDArray[np.floating[Any]], confidence: float) -> float:
    """Order statistic at floor(n (1 - confidence)) of the sorted returns."""
    ordered = np.sort(returns)
    index = min(len(ordered) - 1, int(math.floor(len(ordered) * (1.0 - confidence))))
    return float(ordered[index])


def value_at_risk(design: ProcessDesign) -> tuple[ValueAtRiskParams, list[str]]:
    """
    Loss not exceeded with probability ``confidence``.

    historical   -portfolio * (empirical lower-tail return); the returns
                 are taken as already measured over the horizon
    parametric   -(mean + z sigma sqrt(horizon)) with z = Phi^-1(1 - confidence)
    monte_carlo  lower-tail order statistic of simulated returns
                 mean + sigma sqrt(horizon) Z
    """
    p = design.params
    method = p['method']
    portfolio, confidence, horizon = p['portfolio'], p['confidence'], p['horizon']
    warnings_list: list[str] = []

    if method is VaRMethod.HISTORICAL:
        returns = p['returns']
        loss = -_lower_tail(returns, confidence)
        if len(returns) * (1.0 - confidence) < 1.0:
            warnings_list.append(
                f"Only {len(returns)} returns for confidence {confidence}; "
                f"the tail estimate is the sample minimum"
            )
        params = ValueAtRiskParams(
            method=method,
            var_absolute=portfolio * loss,
            var_percent=loss * 100.0,
            confidence=confidence,
            horizon=horizon,
            samples=len(returns),
        )
        return params, warnings_list

    mean, std_dev = p['mean'], p['std_dev']
    if method is VaRMethod.PARAMETRIC:
        z = normal_quantile(1.0 - confidence)
        loss = -(mean + z * std_dev * math.sqrt(horizon))
        params = ValueAtRiskParams(
            method=method,
            var_absolute=portfolio * loss,
            var_percent=loss * 100.0,
            confidence=confidence,
            horizon=horizon,
            mean=mean,
            std_dev=std_dev,
            z=z,
        )
        return params, warnings_list

    n = p['samples']
    simulated = mean + std_dev * math.sqrt(horizon) * standard_normals(n, source=design.source)
    loss = -_lower_tail(simulated, confidence)
    params = ValueAtRiskParams(
        method=method,
        var_absolute=portfolio * loss,
        var_percent=loss * 100.0,
        confidence=confidence,
        horizon=horizon,
        samples=n,
        mean=mean,
        std_dev=std_dev,
        histogram=equal_width_histogram(simulated, VAR_HISTOGRAM_BINS),
    )
    return params, warnings_list
