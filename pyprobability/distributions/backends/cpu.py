"""
CPU reference backend for distribution evaluation.

Dispatches on (design.spec.kind, design.operation) through an exhaustive
table. A pair that is not in the table is an invalid request, not a
fall-through.
"""

from __future__ import annotations

import warnings
from typing import Any, Callable

from pyprobability.core.exceptions import InvalidParameterError
from pyprobability.core.result import Result
from pyprobability.core.compute.timing import Timer
from pyprobability.distributions._common import (
    ComputationParams,
    DistributionKind,
    Moments,
    Operation,
)
from pyprobability.distributions.design import DistributionDesign, DistributionSpec
from pyprobability.distributions.backends import (
    _binomial,
    _dirichlet,
    _exponential,
    _gamma,
    _multinomial,
    _multivariate_normal,
    _negative_binomial,
    _normal,
    _poisson,
    _uniform,
    _wishart,
)

Handler = Callable[[DistributionDesign], tuple[str, Any]]

DISPATCH: dict[
    DistributionKind,
    tuple[dict[Operation, Handler], Callable[[DistributionSpec], Moments]],
] = {
    DistributionKind.UNIFORM: (_uniform.HANDLERS, _uniform.moments),
    DistributionKind.NORMAL: (_normal.HANDLERS, _normal.moments),
    DistributionKind.EXPONENTIAL: (_exponential.HANDLERS, _exponential.moments),
    DistributionKind.GAMMA: (_gamma.HANDLERS, _gamma.moments),
    DistributionKind.BERNOULLI: (_binomial.HANDLERS, _binomial.moments),
    DistributionKind.BINOMIAL: (_binomial.HANDLERS, _binomial.moments),
    DistributionKind.GEOMETRIC: (_negative_binomial.HANDLERS, _negative_binomial.moments),
    DistributionKind.POISSON: (_poisson.HANDLERS, _poisson.moments),
    DistributionKind.NEGATIVE_BINOMIAL: (
        _negative_binomial.HANDLERS, _negative_binomial.moments,
    ),
    DistributionKind.MULTIVARIATE_NORMAL: (
        _multivariate_normal.HANDLERS, _multivariate_normal.moments,
    ),
    DistributionKind.MULTINOMIAL: (_multinomial.HANDLERS, _multinomial.moments),
    DistributionKind.DIRICHLET: (_dirichlet.HANDLERS, _dirichlet.moments),
    DistributionKind.WISHART: (_wishart.HANDLERS, _wishart.moments),
}


def supported_operations(kind: DistributionKind) -> tuple[Operation, ...]:
    """Operations available for a distribution kind, in declaration order."""
    handlers, _ = DISPATCH[kind]
    return tuple(op for op in Operation if op in handlers)


class CPUDistributionBackend:
    """CPU reference backend for distribution evaluation."""

    @property
    def name(self) -> str:
        return 'cpu_distribution'

    def solve(self, design: DistributionDesign) -> Result[ComputationParams]:
        """
        Evaluate one operation.

        Warnings raised by the numeric kernels (e.g. incomplete gamma
        non-convergence) are re-emitted to the caller and also recorded on
        the Result.
        """
        timer = Timer()
        timer.start()

        spec = design.spec
        operation = design.operation
        handlers, moments_fn = DISPATCH[spec.kind]
        handler = handlers.get(operation)
        if handler is None:
            valid = ", ".join(op.value for op in supported_operations(spec.kind))
            raise InvalidParameterError(
                f"operation {operation.value!r} is not supported for "
                f"{spec.kind.value}. Supported: {valid}"
            )

        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter("always")
            with timer.section(operation.value):
                kind, value = handler(design)
            with timer.section('moments'):
                moments = moments_fn(spec)

        warnings_list: list[str] = []
        for w in caught:
            warnings_list.append(str(w.message))
            warnings.warn_explicit(w.message, w.category, w.filename, w.lineno)

        timer.stop()

        return Result(
            params=ComputationParams(kind=kind, value=value, moments=moments),
            info={
                'distribution': spec.kind.value,
                'operation': operation.value,
                'dimension': spec.dimension,
                'precision': design.precision,
            },
            timing=timer.result(),
            backend_name=self.name,
            warnings=tuple(warnings_list),
        )
