"""
Stochastic process simulation module.

Public API:
    simulate_random_walk(steps, step_size, dimension, start, ...)
    simulate_poisson_process(rate, time)
    simulate_markov_chain(transition_matrix, steps, initial_state)
    combine_markov_chains(*solutions)
    stationary_distribution(transition_matrix)
    simulate_brownian_motion(drift, volatility, time_points, horizon, ...)
    simulate_geometric_brownian_motion(...)
    monte_carlo_integration(f, a, b, n), combine_integrations(*solutions)
    monte_carlo_option_price(option_type, strike, spot, ...)
    value_at_risk(method, portfolio, confidence, horizon, ...)

Every simulator takes a keyword-only ``source`` (RandomSource).
"""

from pyprobability.processes.solvers import (
    simulate_random_walk,
    simulate_poisson_process,
    simulate_markov_chain,
    combine_markov_chains,
    stationary_distribution,
    simulate_brownian_motion,
    simulate_geometric_brownian_motion,
    monte_carlo_integration,
    combine_integrations,
    monte_carlo_option_price,
    value_at_risk,
)
from pyprobability.processes.design import ProcessDesign, check_transition_matrix
from pyprobability.processes.solution import ProcessSolution
from pyprobability.processes._common import (
    ProcessKind,
    OptionType,
    VaRMethod,
    RandomWalkParams,
    PoissonProcessParams,
    MarkovChainParams,
    DiffusionParams,
    IntegrationParams,
    OptionPriceParams,
    ValueAtRiskParams,
)

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
    "ProcessDesign",
    "check_transition_matrix",
    "ProcessSolution",
    "ProcessKind",
    "OptionType",
    "VaRMethod",
    "RandomWalkParams",
    "PoissonProcessParams",
    "MarkovChainParams",
    "DiffusionParams",
    "IntegrationParams",
    "OptionPriceParams",
    "ValueAtRiskParams",
]
