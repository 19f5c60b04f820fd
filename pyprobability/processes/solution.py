"""
Solution wrapper for process simulations.

ProcessSolution wraps Result[P] for every ProcessKind. Fields of the
payload (trajectory, final_position, estimate, var_absolute, ...) are
readable directly on the solution.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from enum import Enum
from typing import Any, TYPE_CHECKING

import numpy as np

from pyprobability.core.result import Result
from pyprobability.processes._common import ProcessKind

if TYPE_CHECKING:
    from pyprobability.processes.design import ProcessDesign


@dataclass
class ProcessSolution:
    """
    User-facing simulation result.

    ``sol.params`` is the typed payload (RandomWalkParams,
    MarkovChainParams, ...); its fields are also exposed as attributes.
    """
    _result: Result[Any]
    _design: 'ProcessDesign'

    def __getattr__(self, name: str) -> Any:
        if name.startswith('_'):
            raise AttributeError(name)
        params = self._result.params
        try:
            return getattr(params, name)
        except AttributeError:
            raise AttributeError(
                f"{type(params).__name__} has no field {name!r}"
            ) from None

    @property
    def params(self) -> Any:
        return self._result.params

    @property
    def kind(self) -> ProcessKind:
        return self._design.kind

    @property
    def info(self) -> dict[str, Any]:
        return self._result.info

    @property
    def timing(self) -> dict[str, float] | None:
        return self._result.timing

    @property
    def backend_name(self) -> str:
        return self._result.backend_name

    @property
    def warnings(self) -> tuple[str, ...]:
        return self._result.warnings

    def summary(self) -> str:
        """
        Plain-text report of the scalar outputs.

        Produces output like:
            random_walk
            final_position: 4.0000
            displacement:   4.0000
            max_distance:   17.0000
            steps:          1000
            dimension:      1
            start:          0.0000
        """
        lines = [self.kind.value]
        items = []
        for f in fields(self.params):
            value = getattr(self.params, f.name)
            if isinstance(value, Enum):
                items.append((f.name, value.value))
            elif isinstance(value, (bool, np.bool_)):
                items.append((f.name, str(value)))
            elif isinstance(value, (int, np.integer)):
                items.append((f.name, str(int(value))))
            elif isinstance(value, (float, np.floating)):
                items.append((f.name, f"{float(value):.4f}"))
            elif isinstance(value, np.ndarray) and value.ndim == 1 and len(value) <= 10:
                items.append((f.name, np.array2string(value, precision=4, suppress_small=True)))
        width = max((len(name) for name, _ in items), default=0) + 1
        for name, text in items:
            lines.append(f"{name + ':':<{width}} {text}")
        for w in self.warnings:
            lines.append(f"warning: {w}")
        return "\n".join(lines)

    def __repr__(self) -> str:
        return f"ProcessSolution({self.kind.value}, backend={self.backend_name!r})"
