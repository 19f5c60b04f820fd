"""
CPU backend for stochastic process simulation.

One backend serves every ProcessKind through a dispatch table; each
simulator returns (params, warnings_list).
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Callable

from pyprobability.core.result import Result
from pyprobability.core.compute.timing import Timer
from pyprobability.processes._common import ProcessKind
from pyprobability.processes.design import ProcessDesign
from pyprobability.processes.backends import _diffusion, _monte_carlo, _walks

Simulator = Callable[[ProcessDesign], tuple[Any, list[str]]]

DISPATCH: dict[ProcessKind, Simulator] = {
    ProcessKind.RANDOM_WALK: _walks.random_walk,
    ProcessKind.POISSON_PROCESS: _walks.poisson_process,
    ProcessKind.MARKOV_CHAIN: _walks.markov_chain,
    ProcessKind.BROWNIAN_MOTION: _diffusion.brownian_motion,
    ProcessKind.GEOMETRIC_BROWNIAN_MOTION: _diffusion.geometric_brownian_motion,
    ProcessKind.INTEGRATION: _monte_carlo.integration,
    ProcessKind.OPTION_PRICE: _monte_carlo.option_price,
    ProcessKind.VALUE_AT_RISK: _monte_carlo.value_at_risk,
}


class CPUProcessBackend:
    """CPU reference backend for process simulation."""

    @property
    def name(self) -> str:
        return 'cpu_process'

    def solve(self, design: ProcessDesign) -> Result[Any]:
        """Run one simulation and return Result[<kind>Params]."""
        timer = Timer()
        timer.start()

        simulate = DISPATCH[design.kind]
        with timer.section('simulation'):
            params, warnings_list = simulate(design)

        timer.stop()

        info: dict[str, Any] = {'process': design.kind.value}
        for key, value in design.params.items():
            if isinstance(value, (int, float, str)) and not isinstance(value, bool):
                info[key] = value
            elif isinstance(value, Enum):
                info[key] = value.value

        return Result(
            params=params,
            info=info,
            timing=timer.result(),
            backend_name=self.name,
            warnings=tuple(warnings_list),
        )
