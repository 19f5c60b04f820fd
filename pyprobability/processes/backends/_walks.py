"""
Discrete-state simulators: random walk, Poisson process, Markov chain.

Each simulator takes a validated ProcessDesign and returns
(params, warnings_list).
"""

from __future__ import annotations

import math
from typing import Any

import numpy as np
from numpy.typing import ArrayLike, NDArray

from pyprobability.core.exceptions import SingularMatrixError
from pyprobability.core.validation import check_scalar
from pyprobability.processes._common import (
    MarkovChainParams,
    PoissonProcessParams,
    RandomWalkParams,
)
from pyprobability.processes.design import ProcessDesign, check_transition_matrix


def _lattice_steps(u: NDArray[np.floating[Any]], dimension: int) -> NDArray[np.floating[Any]]:
    """
    Unit lattice steps from uniforms.

    1-D: +1 when u < 0.5, else -1. d-D: direction floor(u * 2d) picks
    +e_k for even codes and -e_k for odd codes, k = code // 2.
    """
    if dimension == 1:
        return np.where(u < 0.5, 1.0, -1.0)
    code = np.minimum(np.floor(u * 2 * dimension).astype(np.int64), 2 * dimension - 1)
    steps = np.zeros((len(u), dimension))
    axis = code // 2
    sign = np.where(code % 2 == 0, 1.0, -1.0)
    steps[np.arange(len(u)), axis] = sign
    return steps


def random_walk(design: ProcessDesign) -> tuple[RandomWalkParams, list[str]]:
    p = design.params
    source = design.source
    steps, dimension = p['steps'], p['dimension']
    step_size, start = p['step_size'], p['start']
    step_distribution = p['step_distribution']

    if step_distribution is None:
        increments = _lattice_steps(source.uniforms(steps), dimension) * step_size
    else:
        increments = np.empty((steps, dimension))
        for i in range(steps):
            for k in range(dimension):
                increments[i, k] = check_scalar(
                    step_distribution(source), "step_distribution(source)",
                ) * step_size
        if dimension == 1:
            increments = increments[:, 0]

    if dimension == 1:
        trajectory = np.concatenate([[start], start + np.cumsum(increments)])
        distances = np.abs(trajectory - start)
        final_position: float | NDArray = float(trajectory[-1])
    else:
        origin = np.array(start)
        trajectory = np.vstack([origin, origin + np.cumsum(increments, axis=0)])
        distances = np.sqrt(np.sum((trajectory - origin) ** 2, axis=1))
        final_position = trajectory[-1].copy()

    params = RandomWalkParams(
        trajectory=trajectory,
        final_position=final_position,
        displacement=float(distances[-1]),
        max_distance=float(np.max(distances)),
        steps=steps,
        dimension=dimension,
        start=start,
    )
    return params, []


def poisson_process(design: ProcessDesign) -> tuple[PoissonProcessParams, list[str]]:
    """Arrivals from successive Exponential(rate) gaps until the horizon."""
    rate, horizon = design.params['rate'], design.params['time']
    source = design.source

    arrivals: list[float] = []
    current = 0.0
    while True:
        current += -math.log(source.uniform()) / rate
        if current > horizon:
            break
        arrivals.append(current)

    arrival_times = np.array(arrivals, dtype=np.float64)
    times = np.arange(int(math.floor(horizon)) + 1)
    counts = np.searchsorted(arrival_times, times, side='right')
    params = PoissonProcessParams(
        arrival_times=arrival_times,
        times=times,
        counts=counts,
        total_arrivals=len(arrival_times),
        rate=rate,
        time=horizon,
    )
    return params, []


def markov_chain(design: ProcessDesign) -> tuple[MarkovChainParams, list[str]]:
    """
    Simulate by inverting each row's cumulative distribution.

    The next state is the first j with u < cumsum(row)[j]; a draw falling
    past a row total just below 1 goes to the last state with positive
    probability.
    """
    P = design.params['transition_matrix']
    steps = design.params['steps']
    state = design.params['initial_state']
    n_states = P.shape[0]

    cumulative = np.cumsum(P, axis=1)
    last_positive = np.array([np.flatnonzero(row > 0.0)[-1] for row in P])

    states = np.empty(steps + 1, dtype=np.int64)
    states[0] = state
    u = design.source.uniforms(steps)
    for i in range(steps):
        nxt = int(np.searchsorted(cumulative[state], u[i], side='right'))
        if nxt >= n_states or P[state, nxt] == 0.0:
            nxt = int(last_positive[state])
        state = nxt
        states[i + 1] = state

    frequencies = np.bincount(states, minlength=n_states)
    transition_counts = np.zeros((n_states, n_states), dtype=np.int64)
    np.add.at(transition_counts, (states[:-1], states[1:]), 1)
    return _chain_params(states, frequencies, transition_counts, steps)


def _chain_params(
    states: NDArray[np.integer[Any]],
    frequencies: NDArray[np.integer[Any]],
    transition_counts: NDArray[np.integer[Any]],
    steps: int,
) -> tuple[MarkovChainParams, list[str]]:
    n_states = len(frequencies)
    row_totals = transition_counts.sum(axis=1)
    empirical = np.zeros((n_states, n_states))
    visited = row_totals > 0
    empirical[visited] = transition_counts[visited] / row_totals[visited, None]

    warnings_list = []
    never_left = np.flatnonzero(~visited).tolist()
    if steps > 0 and never_left:
        warnings_list.append(
            f"States {never_left} were never left; their empirical transition rows are zero"
        )

    params = MarkovChainParams(
        states=states,
        frequencies=frequencies,
        proportions=frequencies / frequencies.sum(),
        transition_counts=transition_counts,
        empirical_matrix=empirical,
        n_states=n_states,
        steps=steps,
    )
    return params, warnings_list


def merge_markov_chains(
    first: MarkovChainParams,
    second: MarkovChainParams,
) -> tuple[MarkovChainParams, list[str]]:
    """
    Pool two runs of the same chain.

    When second starts in the state where first ended it is treated as the
    continuation of first: the shared state is counted once and the pooled
    result equals one run of first.steps + second.steps transitions.
    Otherwise the runs are independent; visits and transitions add, and no
    transition is counted across the boundary.
    """
    continues = int(second.states[0]) == int(first.states[-1])
    frequencies = first.frequencies + second.frequencies
    if continues:
        frequencies[int(second.states[0])] -= 1
        states = np.concatenate([first.states, second.states[1:]])
    else:
        states = np.concatenate([first.states, second.states])
    transition_counts = first.transition_counts + second.transition_counts
    return _chain_params(states, frequencies, transition_counts, first.steps + second.steps)


def stationary_distribution(transition_matrix: ArrayLike) -> NDArray[np.floating[Any]]:
    """
    Solve pi P = pi with sum(pi) = 1.

    The system (P^T - I) pi = 0 is stacked with the normalization row and
    solved in the least-squares sense.

    Raises:
        InvalidParameterError: If transition_matrix is not row-stochastic
        SingularMatrixError: If the stationary distribution is not unique
            (reducible chain with several closed classes)
    """
    P = check_transition_matrix(transition_matrix)
    n = P.shape[0]
    A = np.vstack([P.T - np.eye(n), np.ones((1, n))])
    rhs = np.zeros(n + 1)
    rhs[-1] = 1.0
    pi, _, rank, _ = np.linalg.lstsq(A, rhs, rcond=None)
    if rank < n:
        raise SingularMatrixError(
            f"transition_matrix: stationary distribution is not unique "
            f"(rank {rank} < {n} states)",
            matrix_name="transition_matrix",
            determinant=0.0,
        )
    pi = np.clip(pi, 0.0, None)
    return pi / pi.sum()
