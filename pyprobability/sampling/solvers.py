"""
Sampling entry points.

draw() runs any registered sampler n times on a caller-supplied
RandomSource and returns a SampleSet. Chunked sampling is draw() on
several batches (or spawned sources) followed by SampleSet.merge().
"""

from __future__ import annotations

from typing import Any, Callable

import numpy as np
from numpy.typing import ArrayLike

from pyprobability.core.exceptions import InvalidParameterError
from pyprobability.core.protocols import RandomSource
from pyprobability.core.result import Result
from pyprobability.core.validation import check_array, check_finite, check_positive_integer
from pyprobability.core.compute.timing import Timer
from pyprobability.sampling._common import RunningStats
from pyprobability.sampling._samplers import (
    DISCRETE_SAMPLERS,
    SAMPLERS,
    _mvn_from_factor,
    multivariate_normal_factor,
)
from pyprobability.sampling.solution import SampleParams, SampleSet


BACKEND_NAME = 'cpu_sampling'


def _check_source(source: Any) -> RandomSource:
    if not isinstance(source, RandomSource):
        raise InvalidParameterError(
            f"source: expected a RandomSource (uniform/uniforms/spawn), "
            f"got {type(source).__name__}"
        )
    return source


def _resolve(sampler: str | Callable[..., Any]) -> tuple[str, Callable[..., Any]]:
    if callable(sampler):
        return getattr(sampler, '__name__', 'custom'), sampler
    try:
        return sampler, SAMPLERS[sampler]
    except KeyError:
        raise InvalidParameterError(
            f"Unknown sampler: {sampler!r}. Available: {sorted(SAMPLERS)}"
        ) from None


def _build(
    name: str,
    draws: np.ndarray,
    params: dict[str, Any],
    timer: Timer,
) -> SampleSet:
    with timer.section('statistics'):
        stats = RunningStats.from_values(draws)
    timer.stop()
    discrete = name in DISCRETE_SAMPLERS
    result = Result(
        params=SampleParams(
            draws=draws,
            stats=stats,
            sampler=name,
            params=params,
            discrete=discrete,
        ),
        info={'sampler': name, 'n': len(draws), 'batches': 1},
        timing=timer.result(),
        backend_name=BACKEND_NAME,
    )
    return SampleSet(_result=result)


def draw(
    sampler: str | Callable[..., Any],
    n: int,
    source: RandomSource,
    /,
    **params: Any,
) -> SampleSet:
    """
    Draw n values from a sampler.

    Parameters
    ----------
    sampler : str or callable
        A registry name ('uniform', 'normal', 'exponential', 'bernoulli',
        'binomial', 'poisson', 'geometric', 'gamma', 'beta', 'weibull',
        'lognormal', 'chisquare', 'cauchy', 'discrete_uniform', 'custom',
        'multivariate_normal') or any callable accepting ``source=`` plus
        the given parameters.
    n : int
        Number of draws (0 allowed). Positional-only, as is ``source``,
        so sampler parameters named ``n`` (binomial) pass through.

    source : RandomSource
        Uniform stream consumed by the sampler.
    **params
        Sampler parameters, e.g. ``mean=0, std_dev=2`` or ``fn=...`` for
        'custom'.

    Returns
    -------
    SampleSet

    Raises
    ------
    InvalidParameterError
        Unknown sampler, invalid n, invalid sampler parameters.

    Examples
    --------
    >>> src = NumpyRandomSource(42)
    >>> s = draw('gamma', 10_000, src, shape=2.5, scale=2.0)
    >>> s.describe().mean
    """
    n = check_positive_integer(n, "n", minimum=0)
    source = _check_source(source)
    name, fn = _resolve(sampler)

    if name == 'multivariate_normal':
        return draw_multivariate_normal(n, source, **params)

    timer = Timer()
    timer.start()
    with timer.section('draws'):
        values = [fn(source=source, **params) for _ in range(n)]
        draws = np.array(values, dtype=np.float64)
    return _build(name, draws, params, timer)


def draw_multivariate_normal(
    n: int,
    source: RandomSource,
    mean: ArrayLike,
    cov: ArrayLike,
) -> SampleSet:
    """
    n draws of mean + L z; the Cholesky factor is computed once.

    Returns a SampleSet with draws of shape (n, k) and componentwise
    running statistics.
    """
    n = check_positive_integer(n, "n", minimum=0)
    source = _check_source(source)
    mu = check_array(mean, "mean")
    if mu.ndim != 1:
        raise InvalidParameterError(f"mean: expected a 1D vector, got shape {mu.shape}")
    check_finite(mu, "mean")

    timer = Timer()
    timer.start()
    with timer.section('cholesky'):
        L = multivariate_normal_factor(cov, len(mu))
    with timer.section('draws'):
        draws = np.empty((n, len(mu)))
        for i in range(n):
            draws[i] = _mvn_from_factor(mu, L, source)
    return _build(
        'multivariate_normal', draws, {'mean': mu, 'cov': L @ L.T}, timer,
    )
