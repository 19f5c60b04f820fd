"""
Distribution computation solution type.

DistributionSolution wraps Result[ComputationParams]. The stored value is
always full precision; the display-precision hint only affects rounded()
and summary().
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, TYPE_CHECKING

import numpy as np

from pyprobability.core.result import Result
from pyprobability.core.compute.tolerances import DEFAULT_PRECISION
from pyprobability.distributions._common import (
    ComputationError,
    ComputationParams,
    Moments,
)

if TYPE_CHECKING:
    from pyprobability.distributions.design import DistributionDesign


def round_value(value: Any, precision: int) -> Any:
    """Round floats, arrays and (recursively) record fields; leave the rest."""
    if isinstance(value, (bool, np.bool_)) or value is None or isinstance(value, str):
        return value
    if isinstance(value, dict):
        return {k: round_value(v, precision) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return type(value)(round_value(v, precision) for v in value)
    if isinstance(value, np.ndarray):
        if np.issubdtype(value.dtype, np.floating):
            return np.round(value, precision)
        return value.copy()
    if isinstance(value, (float, np.floating)):
        if not math.isfinite(value):
            return float(value)
        return round(float(value), precision)
    return value


def _format_value(value: Any, precision: int) -> str:
    if isinstance(value, np.ndarray):
        return np.array2string(np.round(value, precision), precision=precision, suppress_small=True)
    if isinstance(value, float):
        if math.isinf(value):
            return "-Inf" if value < 0 else "Inf"
        return f"{value:.{precision}f}"
    return str(value)


@dataclass
class DistributionSolution:
    """
    User-facing result of one distribution computation.

    Check ``ok`` before reading ``value``: a failed request carries a
    ComputationError in ``error`` and a value of None.
    """
    _result: Result[ComputationParams]
    _design: 'DistributionDesign | None'

    # --- Outcome ---

    @property
    def ok(self) -> bool:
        return self._result.params.error is None

    @property
    def error(self) -> ComputationError | None:
        return self._result.params.error

    @property
    def kind(self) -> str:
        """'scalar', 'vector', 'matrix', 'record' or 'error'."""
        return self._result.params.kind

    @property
    def value(self) -> Any:
        """Full-precision computed value (None on error)."""
        return self._result.params.value

    # --- Moments ---

    @property
    def moments(self) -> Moments | None:
        return self._result.params.moments

    @property
    def mean(self) -> Any:
        m = self._result.params.moments
        return m.mean if m else None

    @property
    def variance(self) -> Any:
        m = self._result.params.moments
        return m.variance if m else None

    @property
    def std_dev(self) -> Any:
        m = self._result.params.moments
        return m.std_dev if m else None

    @property
    def skewness(self) -> float | None:
        m = self._result.params.moments
        return m.skewness if m else None

    @property
    def kurtosis(self) -> float | None:
        m = self._result.params.moments
        return m.kurtosis if m else None

    # --- Metadata ---

    @property
    def precision(self) -> int:
        return self._result.info.get('precision', DEFAULT_PRECISION)

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

    # --- Formatting ---

    def rounded(self, precision: int | None = None) -> Any:
        """Value rounded to `precision` decimals (default: the request's hint)."""
        digits = self.precision if precision is None else precision
        return round_value(self.value, digits)

    def summary(self) -> str:
        """
        Plain-text report of the computation.

        Produces output like:
            normal cdf
            value:    0.9750
            mean:     0.0000
            variance: 1.0000
            std_dev:  1.0000
            skewness: 0.0000
            kurtosis: 3.0000
        """
        digits = self.precision
        title = f"{self.info.get('distribution', '?')} {self.info.get('operation', '?')}"
        lines = [title]

        if not self.ok:
            lines.append(f"error ({self.error.kind.value}): {self.error.message}")
            return "\n".join(lines)

        value = self.value
        if isinstance(value, dict):
            lines.append("value:")
            for key, item in value.items():
                lines.append(f"  {key}: {_format_value(item, digits)}")
        else:
            lines.append(f"value:    {_format_value(value, digits)}")

        m = self.moments
        if m is not None:
            for label in ('mean', 'variance', 'std_dev', 'skewness', 'kurtosis'):
                item = getattr(m, label)
                if item is None:
                    continue
                text = _format_value(item, digits)
                if '\n' in text:
                    lines.append(f"{label}:")
                    lines.extend(f"  {row}" for row in text.splitlines())
                else:
                    lines.append(f"{label + ':':<9} {text}")

        for w in self.warnings:
            lines.append(f"warning: {w}")
        return "\n".join(lines)

    def __repr__(self) -> str:
        dist = self.info.get('distribution', '?')
        op = self.info.get('operation', '?')
        if not self.ok:
            return (
                f"DistributionSolution({dist}.{op}, "
                f"error={self.error.kind.value!r})"
            )
        value = self.value
        if isinstance(value, (float, int)):
            shown = f"{value:.{self.precision}g}"
        else:
            shown = self.kind
        return f"DistributionSolution({dist}.{op}, value={shown})"
