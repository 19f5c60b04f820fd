"""
Design class for stochastic process simulation.

ProcessDesign encapsulates everything a backend needs to run one
simulation: the process kind, its validated parameters, and the
RandomSource to consume. Immutable, validated at construction; invalid
inputs raise InvalidParameterError before any random number is drawn.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable

import numpy as np
from numpy.typing import ArrayLike, NDArray

from pyprobability.core.exceptions import InvalidParameterError
from pyprobability.core.protocols import RandomSource
from pyprobability.core.validation import (
    check_1d,
    check_array,
    check_finite,
    check_positive,
    check_positive_integer,
    check_scalar,
    check_square,
)
from pyprobability.core.compute.tolerances import DEFAULT_TOLERANCES
from pyprobability.processes._common import OptionType, ProcessKind, VaRMethod


def _check_source(source: Any) -> RandomSource:
    if not isinstance(source, RandomSource):
        raise InvalidParameterError(
            f"source: expected a RandomSource (uniform/uniforms/spawn), "
            f"got {type(source).__name__}"
        )
    return source


def _check_callable(fn: Any, name: str) -> Callable:
    if not callable(fn):
        raise InvalidParameterError(f"{name}: expected a callable, got {type(fn).__name__}")
    return fn


def _check_start(start: Any, dimension: int) -> float | NDArray[np.floating[Any]]:
    """Scalar start in 1-D; a read-only vector of length dimension otherwise."""
    if np.ndim(start) == 0:
        value = check_scalar(start, "start")
        if dimension == 1:
            return value
        point = np.full(dimension, value)
    else:
        point = check_array(start, "start")
        check_1d(point, "start")
        check_finite(point, "start")
        if len(point) != dimension:
            raise InvalidParameterError(
                f"start: expected {dimension} coordinates, got {len(point)}"
            )
        if dimension == 1:
            return float(point[0])
    point.setflags(write=False)
    return point


def check_transition_matrix(
    transition_matrix: ArrayLike,
    tol: float = DEFAULT_TOLERANCES.markov_row_sum,
) -> NDArray[np.floating[Any]]:
    """
    Validate a row-stochastic matrix.

    Returns:
        float64 copy of the matrix

    Raises:
        InvalidParameterError: If the matrix is not square, has entries
            outside [0, 1], or a row whose sum differs from 1 by more
            than tol
    """
    P = check_array(transition_matrix, "transition_matrix")
    check_square(P, "transition_matrix")
    check_finite(P, "transition_matrix")
    bad = np.argwhere((P < 0.0) | (P > 1.0))
    if len(bad) > 0:
        i, j = bad[0]
        raise InvalidParameterError(
            f"transition_matrix: entry ({i}, {j}) = {P[i, j]} lies outside [0, 1]"
        )
    sums = P.sum(axis=1)
    for i, total in enumerate(sums):
        if abs(total - 1.0) > tol:
            raise InvalidParameterError(
                f"transition_matrix: row {i} does not sum to 1 (sum = {total:.10g})"
            )
    return P


@dataclass(frozen=True)
class ProcessDesign:
    """
    Frozen design for one simulation.

    Attributes:
        kind: Which simulator to run
        params: Validated parameters (plain floats, ints, arrays, callables)
        source: Uniform stream to consume; None for deterministic requests
            (historical and parametric Value-at-Risk)
    """
    kind: ProcessKind
    params: dict[str, Any]
    source: RandomSource | None

    # --- Random walks and counting processes ---

    @classmethod
    def for_random_walk(
        cls,
        steps: int = 1000,
        step_size: float = 1.0,
        dimension: int = 1,
        start: float | ArrayLike = 0.0,
        step_distribution: Callable[[RandomSource], float] | None = None,
        *,
        source: RandomSource,
    ) -> ProcessDesign:
        """
        Random walk on the line, plane or space.

        Args:
            steps: Number of steps (>= 0)
            step_size: Multiplier applied to every step (> 0)
            dimension: 1, 2 or 3
            start: Starting point. A scalar is used on every axis; a
                vector of length dimension (e.g. the final_position of a
                previous walk) continues from that point
            step_distribution: Optional callable (source) -> float drawn
                once per coordinate per step; replaces the lattice steps
            source: RandomSource
        """
        steps = check_positive_integer(steps, "steps", minimum=0)
        step_size = check_positive(step_size, "step_size")
        dimension = check_positive_integer(dimension, "dimension")
        if dimension not in (1, 2, 3):
            raise InvalidParameterError(f"dimension: must be 1, 2 or 3, got {dimension}")
        start = _check_start(start, dimension)
        if step_distribution is not None:
            _check_callable(step_distribution, "step_distribution")
        return cls(
            kind=ProcessKind.RANDOM_WALK,
            params=dict(
                steps=steps,
                step_size=step_size,
                dimension=dimension,
                start=start,
                step_distribution=step_distribution,
            ),
            source=_check_source(source),
        )

    @classmethod
    def for_poisson_process(
        cls,
        rate: float = 1.0,
        time: float = 10.0,
        *,
        source: RandomSource,
    ) -> ProcessDesign:
        rate = check_positive(rate, "rate")
        time = check_positive(time, "time")
        return cls(
            kind=ProcessKind.POISSON_PROCESS,
            params=dict(rate=rate, time=time),
            source=_check_source(source),
        )

    @classmethod
    def for_markov_chain(
        cls,
        transition_matrix: ArrayLike,
        steps: int = 100,
        initial_state: int = 0,
        *,
        source: RandomSource,
    ) -> ProcessDesign:
        """
        Discrete-time Markov chain.

        Raises:
            InvalidParameterError: Non-square matrix, entries outside
                [0, 1], a row not summing to 1 within 1e-6, or an initial
                state outside 0 .. n_states - 1
        """
        P = check_transition_matrix(transition_matrix)
        steps = check_positive_integer(steps, "steps", minimum=0)
        initial_state = check_positive_integer(initial_state, "initial_state", minimum=0)
        if initial_state >= P.shape[0]:
            raise InvalidParameterError(
                f"initial_state: must be between 0 and {P.shape[0] - 1}, got {initial_state}"
            )
        return cls(
            kind=ProcessKind.MARKOV_CHAIN,
            params=dict(transition_matrix=P, steps=steps, initial_state=initial_state),
            source=_check_source(source),
        )

    # --- Diffusions ---

    @classmethod
    def for_brownian_motion(
        cls,
        drift: float = 0.0,
        volatility: float = 1.0,
        time_points: int = 1000,
        horizon: float = 1.0,
        initial_value: float = 0.0,
        *,
        source: RandomSource,
    ) -> ProcessDesign:
        return cls(
            kind=ProcessKind.BROWNIAN_MOTION,
            params=cls._diffusion_params(drift, volatility, time_points, horizon, initial_value),
            source=_check_source(source),
        )

    @classmethod
    def for_geometric_brownian_motion(
        cls,
        drift: float = 0.05,
        volatility: float = 0.2,
        time_points: int = 1000,
        horizon: float = 1.0,
        initial_value: float = 100.0,
        *,
        source: RandomSource,
    ) -> ProcessDesign:
        params = cls._diffusion_params(drift, volatility, time_points, horizon, initial_value)
        if params['initial_value'] <= 0.0:
            raise InvalidParameterError(
                f"initial_value: must be > 0 for geometric Brownian motion, "
                f"got {params['initial_value']}"
            )
        return cls(
            kind=ProcessKind.GEOMETRIC_BROWNIAN_MOTION,
            params=params,
            source=_check_source(source),
        )

    @staticmethod
    def _diffusion_params(drift, volatility, time_points, horizon, initial_value) -> dict[str, Any]:
        return dict(
            drift=check_scalar(drift, "drift"),
            volatility=check_positive(volatility, "volatility"),
            time_points=check_positive_integer(time_points, "time_points"),
            horizon=check_positive(horizon, "horizon"),
            initial_value=check_scalar(initial_value, "initial_value"),
        )

    # --- Monte Carlo estimators ---

    @classmethod
    def for_integration(
        cls,
        f: Callable[[Any], Any],
        a: float,
        b: float,
        n: int = 10_000,
        *,
        source: RandomSource,
        vectorized: bool = False,
    ) -> ProcessDesign:
        """
        Sample-mean estimate of the integral of f over [a, b].

        Args:
            f: Integrand. Called once per point, or once on the whole
                array of points when vectorized=True
            a, b: Bounds with a < b
            n: Number of evaluation points (>= 1)
            source: RandomSource
            vectorized: Whether f accepts and returns arrays
        """
        _check_callable(f, "f")
        a = check_scalar(a, "a")
        b = check_scalar(b, "b")
        if a >= b:
            raise InvalidParameterError(f"a must be < b, got a={a}, b={b}")
        n = check_positive_integer(n, "n")
        return cls(
            kind=ProcessKind.INTEGRATION,
            params=dict(f=f, a=a, b=b, n=n, vectorized=bool(vectorized)),
            source=_check_source(source),
        )

    @classmethod
    def for_option_price(
        cls,
        option_type: OptionType | str = OptionType.CALL,
        strike: float = 100.0,
        spot: float = 100.0,
        volatility: float = 0.2,
        rate: float = 0.05,
        dividend: float = 0.0,
        expiry: float = 1.0,
        samples: int = 10_000,
        *,
        source: RandomSource,
    ) -> ProcessDesign:
        """
        European option under risk-neutral geometric Brownian motion.

        rate and dividend are continuously compounded annual rates;
        volatility is annualized; expiry is in years.
        """
        if isinstance(option_type, str):
            try:
                option_type = OptionType(option_type.lower())
            except ValueError:
                raise InvalidParameterError(
                    f"option_type: must be 'call' or 'put', got {option_type!r}"
                ) from None
        elif not isinstance(option_type, OptionType):
            raise InvalidParameterError(
                f"option_type: must be 'call' or 'put', got {option_type!r}"
            )
        return cls(
            kind=ProcessKind.OPTION_PRICE,
            params=dict(
                option_type=option_type,
                strike=check_positive(strike, "strike"),
                spot=check_positive(spot, "spot"),
                volatility=check_positive(volatility, "volatility"),
                rate=check_scalar(rate, "rate"),
                dividend=check_scalar(dividend, "dividend"),
                expiry=check_positive(expiry, "expiry"),
                samples=check_positive_integer(samples, "samples"),
            ),
            source=_check_source(source),
        )

    @classmethod
    def for_value_at_risk(
        cls,
        method: VaRMethod | str = VaRMethod.MONTE_CARLO,
        portfolio: float = 1_000_000.0,
        confidence: float = 0.95,
        horizon: float = 1.0,
        returns: ArrayLike | None = None,
        mean: float = 0.0,
        std_dev: float = 0.01,
        samples: int = 10_000,
        *,
        source: RandomSource | None = None,
    ) -> ProcessDesign:
        """
        Value-at-Risk by historical, parametric or Monte Carlo estimation.

        'historical' needs ``returns``; 'monte_carlo' needs ``source``.
        'monte-carlo' is accepted as a spelling of 'monte_carlo'.
        """
        if isinstance(method, str):
            try:
                method = VaRMethod(method.lower().replace('-', '_'))
            except ValueError:
                raise InvalidParameterError(
                    f"method: must be 'historical', 'parametric' or 'monte_carlo', "
                    f"got {method!r}"
                ) from None
        elif not isinstance(method, VaRMethod):
            raise InvalidParameterError(f"method: unknown VaR method {method!r}")

        confidence = check_scalar(confidence, "confidence")
        if not (0.0 < confidence < 1.0):
            raise InvalidParameterError(f"confidence: must lie in (0, 1), got {confidence}")
        params: dict[str, Any] = dict(
            method=method,
            portfolio=check_positive(portfolio, "portfolio"),
            confidence=confidence,
            horizon=check_positive(horizon, "horizon"),
        )

        if method is VaRMethod.HISTORICAL:
            if returns is None:
                raise InvalidParameterError("returns: required for historical VaR")
            r = check_array(returns, "returns")
            check_1d(r, "returns")
            check_finite(r, "returns")
            if len(r) == 0:
                raise InvalidParameterError("returns: must contain at least one value")
            params['returns'] = r
        else:
            params['mean'] = check_scalar(mean, "mean")
            params['std_dev'] = check_positive(std_dev, "std_dev")

        if method is VaRMethod.MONTE_CARLO:
            params['samples'] = check_positive_integer(samples, "samples")
            source = _check_source(source)
        else:
            source = None

        return cls(kind=ProcessKind.VALUE_AT_RISK, params=params, source=source)
