"""
Entry points for stochastic process simulation.

Every simulator validates its inputs eagerly (InvalidParameterError on bad
parameters), consumes only the RandomSource passed in, and returns a
ProcessSolution.
"""

from __future__ import annotations

from typing import Any, Callable

import numpy as np
from numpy.typing import ArrayLike

from pyprobability.core.exceptions import InvalidParameterError
from pyprobability.core.protocols import RandomSource
from pyprobability.core.result import Result
from pyprobability.core.compute.timing import Timer
from pyprobability.processes._common import (
    IntegrationParams,
    MarkovChainParams,
    OptionType,
    ProcessKind,
    VaRMethod,
)
from pyprobability.processes.design import ProcessDesign
from pyprobability.processes.solution import ProcessSolution
from pyprobability.processes.backends.cpu import CPUProcessBackend
from pyprobability.processes.backends._monte_carlo import integration_params
from pyprobability.processes.backends._walks import (
    merge_markov_chains,
    stationary_distribution,
)


def _get_backend(backend: str = 'cpu') -> CPUProcessBackend:
    if backend in ('cpu', 'auto'):
        return CPUProcessBackend()
    raise InvalidParameterError(f"Unknown backend: {backend!r}. Use 'cpu'.")


def _run(design: ProcessDesign, backend: str) -> ProcessSolution:
    result = _get_backend(backend).solve(design)
    return ProcessSolution(_result=result, _design=design)


def simulate_random_walk(
    steps: int = 1000,
    step_size: float = 1.0,
    dimension: int = 1,
    start: float | ArrayLike = 0.0,
    step_distribution: Callable[[RandomSource], float] | None = None,
    *,
    source: RandomSource,
    backend: str = 'cpu',
) -> ProcessSolution:
    """
    Random walk in 1, 2 or 3 dimensions.

    Default steps are +/- step_size in 1-D and a move of step_size along
    one of the 2d lattice directions otherwise. With step_distribution,
    each coordinate of each step is step_distribution(source) * step_size.

    A vector start (length dimension) continues an earlier walk from its
    final_position, so a long walk can be simulated in segments.

    Returns:
        ProcessSolution with trajectory, final_position, displacement and
        max_distance (distances measured from the start point)
    """
    design = ProcessDesign.for_random_walk(
        steps, step_size, dimension, start, step_distribution, source=source,
    )
    return _run(design, backend)


def simulate_poisson_process(
    rate: float = 1.0,
    time: float = 10.0,
    *,
    source: RandomSource,
    backend: str = 'cpu',
) -> ProcessSolution:
    """
    Homogeneous Poisson process on [0, time].

    Returns:
        ProcessSolution with arrival_times, integer times 0..floor(time),
        the cumulative counts at those times and total_arrivals
    """
    design = ProcessDesign.for_poisson_process(rate, time, source=source)
    return _run(design, backend)


def simulate_markov_chain(
    transition_matrix: ArrayLike,
    steps: int = 100,
    initial_state: int = 0,
    *,
    source: RandomSource,
    backend: str = 'cpu',
) -> ProcessSolution:
    """
    Discrete-time Markov chain.

    Returns:
        ProcessSolution with states (length steps + 1), frequencies,
        proportions, transition_counts and empirical_matrix

    Raises:
        InvalidParameterError: If transition_matrix is not square, has
            entries outside [0, 1] or rows not summing to 1 within 1e-6,
            or initial_state is out of range

    Examples:
        >>> sol = simulate_markov_chain([[0.5, 0.5], [0.3, 0.7]], 10_000,
        ...                             source=NumpyRandomSource(1))
        >>> sol.proportions          # close to [0.375, 0.625]
    """
    design = ProcessDesign.for_markov_chain(
        transition_matrix, steps, initial_state, source=source,
    )
    return _run(design, backend)


def combine_markov_chains(*solutions: ProcessSolution) -> ProcessSolution:
    """
    Pool Markov chain runs that share a transition matrix.

    Transition counts and visit frequencies add; proportions and the
    empirical matrix are recomputed from the pooled counts. A run that
    starts where the previous one ended (initial_state set to the earlier
    final state) continues it, so segments combine into one long chain.

    Raises:
        InvalidParameterError: If no solutions are given, a solution is
            not a Markov chain, or the transition matrices differ

    Examples:
        >>> P = [[0.9, 0.1], [0.5, 0.5]]
        >>> a = simulate_markov_chain(P, 500, source=src)
        >>> b = simulate_markov_chain(P, 500, int(a.states[-1]), source=src)
        >>> combine_markov_chains(a, b).steps
        1000
    """
    if not solutions:
        raise InvalidParameterError("combine_markov_chains() needs at least one solution")
    for sol in solutions:
        if not isinstance(sol, ProcessSolution) or sol.kind is not ProcessKind.MARKOV_CHAIN:
            raise InvalidParameterError(
                f"combine_markov_chains() accepts Markov chain solutions only, got {sol!r}"
            )
    matrix = solutions[0]._design.params['transition_matrix']
    for sol in solutions[1:]:
        if not np.array_equal(sol._design.params['transition_matrix'], matrix):
            raise InvalidParameterError(
                "Cannot combine Markov chains with different transition matrices"
            )

    timer = Timer()
    timer.start()
    with timer.section('merge'):
        combined: MarkovChainParams = solutions[0].params
        warnings_list = list(solutions[0].warnings)
        for sol in solutions[1:]:
            combined, warnings_list = merge_markov_chains(combined, sol.params)
    timer.stop()

    info = dict(solutions[0].info)
    info['steps'] = combined.steps
    info['batches'] = sum(sol.info.get('batches', 1) for sol in solutions)
    result = Result(
        params=combined,
        info=info,
        timing=timer.result(),
        backend_name=solutions[0].backend_name,
        warnings=tuple(warnings_list),
    )
    return ProcessSolution(_result=result, _design=solutions[0]._design)


def simulate_brownian_motion(
    drift: float = 0.0,
    volatility: float = 1.0,
    time_points: int = 1000,
    horizon: float = 1.0,
    initial_value: float = 0.0,
    *,
    source: RandomSource,
    backend: str = 'cpu',
) -> ProcessSolution:
    """Arithmetic Brownian motion, Euler-Maruyama with dt = horizon / time_points."""
    design = ProcessDesign.for_brownian_motion(
        drift, volatility, time_points, horizon, initial_value, source=source,
    )
    return _run(design, backend)


def simulate_geometric_brownian_motion(
    drift: float = 0.05,
    volatility: float = 0.2,
    time_points: int = 1000,
    horizon: float = 1.0,
    initial_value: float = 100.0,
    *,
    source: RandomSource,
    backend: str = 'cpu',
) -> ProcessSolution:
    """
    Geometric Brownian motion with exact log-normal steps on the grid.

    Returns:
        ProcessSolution with trajectory, log_returns, total_return and
        empirical_volatility
    """
    design = ProcessDesign.for_geometric_brownian_motion(
        drift, volatility, time_points, horizon, initial_value, source=source,
    )
    return _run(design, backend)


def monte_carlo_integration(
    f: Callable[[Any], Any],
    a: float,
    b: float,
    n: int = 10_000,
    *,
    source: RandomSource,
    vectorized: bool = False,
    backend: str = 'cpu',
) -> ProcessSolution:
    """
    Sample-mean estimate (b - a) * mean f(U), U ~ Uniform(a, b).

    standard_error = (b - a) * sqrt(var f(U) / n) with the population
    variance. Batches run on separate sources combine exactly with
    combine_integrations().

    Examples:
        >>> sol = monte_carlo_integration(np.square, 0, 1, 100_000,
        ...                               source=NumpyRandomSource(0),
        ...                               vectorized=True)
        >>> abs(sol.estimate - 1 / 3) < 3 * sol.standard_error
        True
    """
    design = ProcessDesign.for_integration(
        f, a, b, n, source=source, vectorized=vectorized,
    )
    return _run(design, backend)


def combine_integrations(*solutions: ProcessSolution) -> ProcessSolution:
    """
    Pool Monte Carlo integration batches over the same interval.

    The running statistics of f(U) are merged (weighted mean, pooled M2),
    so the result equals a single run over all evaluations.

    Raises:
        InvalidParameterError: If no solutions are given, a solution is
            not an integration, or the intervals differ
    """
    if not solutions:
        raise InvalidParameterError("combine_integrations() needs at least one solution")
    for sol in solutions:
        if not isinstance(sol, ProcessSolution) or sol.kind is not ProcessKind.INTEGRATION:
            raise InvalidParameterError(
                f"combine_integrations() accepts integration solutions only, got {sol!r}"
            )
    first: IntegrationParams = solutions[0].params
    stats = first.stats
    for sol in solutions[1:]:
        params: IntegrationParams = sol.params
        if (params.a, params.b) != (first.a, first.b):
            raise InvalidParameterError(
                f"Cannot combine integrals over [{first.a}, {first.b}] "
                f"and [{params.a}, {params.b}]"
            )
        stats = stats.merge(params.stats)

    timer = Timer()
    timer.start()
    with timer.section('merge'):
        combined, warnings_list = integration_params(stats, first.a, first.b)
    timer.stop()

    info = dict(solutions[0].info)
    info['n'] = combined.samples
    info['batches'] = sum(sol.info.get('batches', 1) for sol in solutions)
    result = Result(
        params=combined,
        info=info,
        timing=timer.result(),
        backend_name=solutions[0].backend_name,
        warnings=tuple(warnings_list),
    )
    return ProcessSolution(_result=result, _design=solutions[0]._design)


def monte_carlo_option_price(
    option_type: OptionType | str = 'call',
    strike: float = 100.0,
    spot: float = 100.0,
    volatility: float = 0.2,
    rate: float = 0.05,
    dividend: float = 0.0,
    expiry: float = 1.0,
    samples: int = 10_000,
    *,
    source: RandomSource,
    backend: str = 'cpu',
) -> ProcessSolution:
    """
    European call or put priced by simulating terminal prices.

    Returns:
        ProcessSolution with price, standard_error, the 95% interval
        (ci_lower, ci_upper) and the first 100 simulated paths
    """
    design = ProcessDesign.for_option_price(
        option_type, strike, spot, volatility, rate, dividend, expiry, samples,
        source=source,
    )
    return _run(design, backend)


def value_at_risk(
    method: VaRMethod | str = 'monte_carlo',
    portfolio: float = 1_000_000.0,
    confidence: float = 0.95,
    horizon: float = 1.0,
    returns: ArrayLike | None = None,
    mean: float = 0.0,
    std_dev: float = 0.01,
    samples: int = 10_000,
    *,
    source: RandomSource | None = None,
    backend: str = 'cpu',
) -> ProcessSolution:
    """
    Value-at-Risk of a portfolio.

    Parameters
    ----------
    method : {'historical', 'parametric', 'monte_carlo'}
    portfolio : float
        Portfolio value.
    confidence : float
        Level in (0, 1), e.g. 0.95 or 0.99.
    horizon : float
        Holding period in days; scales the return volatility by sqrt(horizon)
        for the parametric and Monte Carlo methods.
    returns : array-like
        Historical returns (historical method only).
    mean, std_dev : float
        Daily return distribution (parametric and Monte Carlo).
    samples : int
        Simulated returns (Monte Carlo).
    source : RandomSource
        Required for the Monte Carlo method.

    Returns
    -------
    ProcessSolution
        var_absolute and var_percent; the Monte Carlo method also carries
        a 20-bin histogram of simulated returns.
    """
    design = ProcessDesign.for_value_at_risk(
        method, portfolio, confidence, horizon, returns, mean, std_dev, samples,
        source=source,
    )
    return _run(design, backend)


__all__ = [
    "simulate_random_walk",
    "simulate_poisson_process",
    "simulate_markov_chain",
    "combine_markov_chains",
    "stationary_distribution",
    "simulate_brownian_motion",
    "simulate_geometric_brownian_motion",
    "monte_carlo_integration",
    "combine_integrations",
    "monte_carlo_option_price",
    "value_at_risk",
]
