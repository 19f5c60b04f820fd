"""
Common types for stochastic process simulation.

Each simulator produces one frozen parameter payload, wrapped in
Result[P] by the backend and exposed through ProcessSolution.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

import numpy as np
from numpy.typing import NDArray

from pyprobability.sampling._common import Histogram, RunningStats


class ProcessKind(Enum):
    """Simulator selected by a ProcessDesign."""
    RANDOM_WALK = "random_walk"
    POISSON_PROCESS = "poisson_process"
    MARKOV_CHAIN = "markov_chain"
    BROWNIAN_MOTION = "brownian_motion"
    GEOMETRIC_BROWNIAN_MOTION = "geometric_brownian_motion"
    INTEGRATION = "integration"
    OPTION_PRICE = "option_price"
    VALUE_AT_RISK = "value_at_risk"


class OptionType(Enum):
    CALL = "call"
    PUT = "put"


class VaRMethod(Enum):
    """Value-at-Risk estimation method."""
    HISTORICAL = "historical"
    PARAMETRIC = "parametric"
    MONTE_CARLO = "monte_carlo"


@dataclass(frozen=True)
class RandomWalkParams:
    """
    Random walk trajectory and summary.

    Attributes:
        trajectory: Positions, shape (steps + 1,) in 1-D or (steps + 1, d)
        final_position: Last position (float in 1-D, vector otherwise)
        displacement: Euclidean distance from start to final position
        max_distance: Largest distance from start along the path
        steps: Number of steps taken
        dimension: 1, 2 or 3
        start: Starting point (float in 1-D, vector otherwise)
    """
    trajectory: NDArray[np.floating[Any]]
    final_position: float | NDArray[np.floating[Any]]
    displacement: float
    max_distance: float
    steps: int
    dimension: int
    start: float | NDArray[np.floating[Any]]


@dataclass(frozen=True)
class PoissonProcessParams:
    """
    Arrivals of a homogeneous Poisson process on [0, time].

    Attributes:
        arrival_times: Sorted arrival times, all <= time
        times: Integer times 0, 1, ..., floor(time)
        counts: Number of arrivals up to and including each of ``times``
        total_arrivals: len(arrival_times)
        rate: Intensity
        time: Horizon
    """
    arrival_times: NDArray[np.floating[Any]]
    times: NDArray[np.integer[Any]]
    counts: NDArray[np.integer[Any]]
    total_arrivals: int
    rate: float
    time: float


@dataclass(frozen=True)
class MarkovChainParams:
    """
    Simulated Markov chain path and empirical frequencies.

    Attributes:
        states: Visited states, length steps + 1 (includes the initial state)
        frequencies: Visits per state
        proportions: frequencies / (steps + 1)
        transition_counts: Observed i -> j transitions
        empirical_matrix: Row-normalized transition_counts (zero rows for
            states never left)
        n_states: Number of states
        steps: Number of transitions simulated
    """
    states: NDArray[np.integer[Any]]
    frequencies: NDArray[np.integer[Any]]
    proportions: NDArray[np.floating[Any]]
    transition_counts: NDArray[np.integer[Any]]
    empirical_matrix: NDArray[np.floating[Any]]
    n_states: int
    steps: int


@dataclass(frozen=True)
class DiffusionParams:
    """
    Euler-Maruyama path of (geometric) Brownian motion.

    The GBM-only fields are None for arithmetic Brownian motion.

    Attributes:
        times: Grid 0, dt, ..., horizon
        trajectory: Process values on the grid
        initial_value: Value at time 0
        final_value: Value at the horizon
        drift: Drift per unit time
        volatility: Volatility per unit time
        horizon: Total time
        time_points: Number of increments
        log_returns: Per-step log returns (GBM)
        total_return: (final - initial) / initial (GBM)
        empirical_volatility: sqrt(population variance of log returns / dt) (GBM)
    """
    times: NDArray[np.floating[Any]]
    trajectory: NDArray[np.floating[Any]]
    initial_value: float
    final_value: float
    drift: float
    volatility: float
    horizon: float
    time_points: int
    log_returns: NDArray[np.floating[Any]] | None = None
    total_return: float | None = None
    empirical_volatility: float | None = None


@dataclass(frozen=True)
class IntegrationParams:
    """
    Monte Carlo estimate of the integral of f over [a, b].

    Attributes:
        estimate: (b - a) * mean f(U)
        standard_error: (b - a) * sqrt(population variance / n)
        relative_error: |standard_error / estimate|
        samples: Total number of evaluations
        a, b: Integration bounds
        stats: Running statistics of f(U), mergeable across batches
    """
    estimate: float
    standard_error: float
    relative_error: float
    samples: int
    a: float
    b: float
    stats: RunningStats


@dataclass(frozen=True)
class OptionPriceParams:
    """
    Monte Carlo price of a European option under risk-neutral GBM.

    Attributes:
        price: Mean discounted payoff
        standard_error: sqrt(population variance of discounted payoffs / n)
        ci_lower, ci_upper: price -/+ 1.96 standard_error
        samples: Number of simulated terminal prices
        final_prices: Terminal prices of the first (at most 100) paths
        payoffs: Undiscounted payoffs of those paths
        discounted_payoffs: Discounted payoffs of those paths
        option_type: Call or put
    """
    price: float
    standard_error: float
    ci_lower: float
    ci_upper: float
    samples: int
    final_prices: NDArray[np.floating[Any]]
    payoffs: NDArray[np.floating[Any]]
    discounted_payoffs: NDArray[np.floating[Any]]
    option_type: OptionType


@dataclass(frozen=True)
class ValueAtRiskParams:
    """
    Value-at-Risk estimate.

    Attributes:
        method: Estimation method
        var_absolute: Loss in currency units (portfolio * loss return)
        var_percent: Loss as a percentage of the portfolio
        confidence: Confidence level in (0, 1)
        horizon: Holding period in days
        samples: Returns used (historical, monte_carlo) or None
        mean, std_dev: Return distribution (parametric, monte_carlo)
        z: Normal quantile at 1 - confidence (parametric)
        histogram: 20-bin histogram of simulated returns (monte_carlo)
    """
    method: VaRMethod
    var_absolute: float
    var_percent: float
    confidence: float
    horizon: float
    samples: int | None = None
    mean: float | None = None
    std_dev: float | None = None
    z: float | None = None
    histogram: Histogram | None = None


# Number of option paths kept for inspection
OPTION_PATHS_KEPT = 100

# Two-sided 95% normal critical value used for option price intervals
Z_95 = 1.96

# Bin count of the Monte Carlo VaR return histogram
VAR_HISTOGRAM_BINS = 20
