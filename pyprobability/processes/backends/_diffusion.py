"""
Euler-Maruyama simulation of Brownian motion and geometric Brownian motion.
"""

from __future__ import annotations

import math

import numpy as np

from pyprobability.processes._common import DiffusionParams
from pyprobability.processes.design import ProcessDesign
from pyprobability.sampling._samplers import standard_normals


def brownian_motion(design: ProcessDesign) -> tuple[DiffusionParams, list[str]]:
    """X[i] = X[i-1] + drift dt + volatility sqrt(dt) Z[i]."""
    p = design.params
    n = p['time_points']
    dt = p['horizon'] / n
    z = standard_normals(n, source=design.source)

    increments = p['drift'] * dt + p['volatility'] * math.sqrt(dt) * z
    trajectory = np.concatenate([[p['initial_value']], p['initial_value'] + np.cumsum(increments)])
    params = DiffusionParams(
        times=np.arange(n + 1) * dt,
        trajectory=trajectory,
        initial_value=p['initial_value'],
        final_value=float(trajectory[-1]),
        drift=p['drift'],
        volatility=p['volatility'],
        horizon=p['horizon'],
        time_points=n,
    )
    return params, []


def geometric_brownian_motion(design: ProcessDesign) -> tuple[DiffusionParams, list[str]]:
    """
    S[i] = S[i-1] exp((drift - volatility**2 / 2) dt + volatility sqrt(dt) Z[i]).

    The empirical volatility, sqrt(var(log returns) / dt), recovers the
    input volatility for long paths and serves as a calibration check.
    """
    p = design.params
    n = p['time_points']
    dt = p['horizon'] / n
    drift, volatility, s0 = p['drift'], p['volatility'], p['initial_value']
    z = standard_normals(n, source=design.source)

    log_returns = (drift - 0.5 * volatility ** 2) * dt + volatility * math.sqrt(dt) * z
    trajectory = s0 * np.exp(np.concatenate([[0.0], np.cumsum(log_returns)]))
    final_value = float(trajectory[-1])
    empirical = math.sqrt(float(np.var(log_returns)) / dt)

    params = DiffusionParams(
        times=np.arange(n + 1) * dt,
        trajectory=trajectory,
        initial_value=s0,
        final_value=final_value,
        drift=drift,
        volatility=volatility,
        horizon=p['horizon'],
        time_points=n,
        log_returns=log_returns,
        total_return=(final_value - s0) / s0,
        empirical_volatility=empirical,
    )
    return params, []
