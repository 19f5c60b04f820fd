"""
DistributionSpec: tagged union of supported distributions.

Uses factory classmethods per distribution. The `kind` field identifies
which fields are populated. Every factory validates before building, so an
invalid specification raises InvalidParameterError and no partially-built
object ever exists. Arrays are copied and made read-only.

DistributionDesign bundles a spec with one operation request and its
operands; it is what the backend consumes.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Sequence

import numpy as np
from numpy.typing import ArrayLike, NDArray

from pyprobability.core.exceptions import (
    DimensionError,
    DomainError,
    InvalidParameterError,
    NotPositiveDefiniteError,
)
from pyprobability.core.validation import (
    check_1d,
    check_array,
    check_finite,
    check_positive,
    check_positive_integer,
    check_probability,
    check_probability_vector,
    check_scalar,
    check_square,
    check_symmetric,
)
from pyprobability.core.compute.linalg import cholesky
from pyprobability.core.compute.tolerances import (
    DEFAULT_PRECISION,
    MAX_COFACTOR_DIMENSION,
    MAX_MOMENT_ORDER,
)
from pyprobability.distributions._common import DistributionKind, Operation


def _frozen(arr: NDArray) -> NDArray:
    out = np.array(arr, dtype=np.float64, copy=True)
    out.setflags(write=False)
    return out


def _vector(values: ArrayLike, name: str) -> NDArray[np.floating[Any]]:
    arr = check_array(values, name)
    check_1d(arr, name)
    if arr.shape[0] == 0:
        raise DimensionError(f"{name}: must have at least one element")
    check_finite(arr, name)
    return arr


def _success_probability(p: Any) -> float:
    value = check_probability(p, "p")
    if value == 0.0:
        raise InvalidParameterError("p: success probability must be > 0")
    return value


def _covariance(matrix: ArrayLike, name: str, dim: int | None) -> NDArray[np.floating[Any]]:
    """Square, finite, symmetric and positive-definite (checked by Cholesky)."""
    arr = check_array(matrix, name)
    check_square(arr, name)
    check_finite(arr, name)
    if dim is not None and arr.shape[0] != dim:
        raise DimensionError(
            f"{name}: expected {dim}x{dim} to match the mean vector, got {arr.shape}"
        )
    if arr.shape[0] > MAX_COFACTOR_DIMENSION:
        raise DimensionError(
            f"{name}: dimension {arr.shape[0]} exceeds the supported maximum "
            f"of {MAX_COFACTOR_DIMENSION}"
        )
    check_symmetric(arr, name)
    try:
        cholesky(arr, name=name)
    except NotPositiveDefiniteError as e:
        raise InvalidParameterError(f"{name}: must be positive definite ({e})") from e
    return arr


@dataclass(frozen=True)
class DistributionSpec:
    """
    Validated, immutable distribution specification.

    Do not construct directly; use the factory classmethods.
    """
    kind: DistributionKind

    # Univariate parameters
    _a: float | None = None
    _b: float | None = None
    _mean: float | None = None
    _std_dev: float | None = None
    _rate: float | None = None
    _shape: float | None = None
    _prob: float | None = None
    _successes: int | None = None
    _first_success: bool = True

    # Multivariate parameters
    _mean_vector: NDArray[np.floating[Any]] | None = None
    _cov: NDArray[np.floating[Any]] | None = None
    _n: int | None = None
    _p: NDArray[np.floating[Any]] | None = None
    _alpha: NDArray[np.floating[Any]] | None = None
    _scale: NDArray[np.floating[Any]] | None = None
    _df: float | None = None

    # --- Properties ---

    @property
    def a(self) -> float | None:
        return self._a

    @property
    def b(self) -> float | None:
        return self._b

    @property
    def mean(self) -> float | NDArray[np.floating[Any]] | None:
        """Scalar mean (normal) or mean vector (multivariate normal)."""
        if self.kind is DistributionKind.MULTIVARIATE_NORMAL:
            return self._mean_vector
        return self._mean

    @property
    def std_dev(self) -> float | None:
        return self._std_dev

    @property
    def rate(self) -> float | None:
        return self._rate

    @property
    def shape(self) -> float | None:
        return self._shape

    @property
    def cov(self) -> NDArray[np.floating[Any]] | None:
        return self._cov

    @property
    def n(self) -> int | None:
        return self._n

    @property
    def p(self) -> float | NDArray[np.floating[Any]] | None:
        """Category probabilities (multinomial) or success probability (discrete kinds)."""
        if self.kind is DistributionKind.MULTINOMIAL:
            return self._p
        return self._prob

    @property
    def successes(self) -> int | None:
        return self._successes

    @property
    def first_success(self) -> bool:
        """Geometric support: trials up to the first success (True) or failures before it."""
        return self._first_success

    @property
    def alpha(self) -> NDArray[np.floating[Any]] | None:
        return self._alpha

    @property
    def scale(self) -> NDArray[np.floating[Any]] | None:
        return self._scale

    @property
    def df(self) -> float | None:
        return self._df

    @property
    def dimension(self) -> int:
        """Number of components (1 for univariate distributions)."""
        if self.kind is DistributionKind.MULTIVARIATE_NORMAL:
            return int(self._mean_vector.shape[0])
        if self.kind is DistributionKind.MULTINOMIAL:
            return int(self._p.shape[0])
        if self.kind is DistributionKind.DIRICHLET:
            return int(self._alpha.shape[0])
        if self.kind is DistributionKind.WISHART:
            return int(self._scale.shape[0])
        return 1

    # --- Factory classmethods ---

    @classmethod
    def uniform(cls, a: float, b: float) -> DistributionSpec:
        """Continuous uniform on [a, b]; requires a < b."""
        a = check_scalar(a, "a")
        b = check_scalar(b, "b")
        if not a < b:
            raise InvalidParameterError(f"a must be less than b, got a={a}, b={b}")
        return cls(kind=DistributionKind.UNIFORM, _a=a, _b=b)

    @classmethod
    def normal(cls, mean: float, std_dev: float) -> DistributionSpec:
        """Normal with the given mean and standard deviation (> 0)."""
        return cls(
            kind=DistributionKind.NORMAL,
            _mean=check_scalar(mean, "mean"),
            _std_dev=check_positive(std_dev, "std_dev"),
        )

    @classmethod
    def exponential(cls, rate: float) -> DistributionSpec:
        """Exponential with rate lambda > 0 (mean 1/lambda)."""
        return cls(kind=DistributionKind.EXPONENTIAL, _rate=check_positive(rate, "rate"))

    @classmethod
    def gamma(cls, shape: float, rate: float) -> DistributionSpec:
        """Gamma with shape alpha > 0 and rate lambda > 0."""
        return cls(
            kind=DistributionKind.GAMMA,
            _shape=check_positive(shape, "shape"),
            _rate=check_positive(rate, "rate"),
        )

    @classmethod
    def bernoulli(cls, p: float) -> DistributionSpec:
        """Bernoulli with success probability p in [0, 1]."""
        return cls(kind=DistributionKind.BERNOULLI, _prob=check_probability(p, "p"))

    @classmethod
    def binomial(cls, n: int, p: float) -> DistributionSpec:
        """Number of successes in n >= 1 independent Bernoulli(p) trials."""
        return cls(
            kind=DistributionKind.BINOMIAL,
            _n=check_positive_integer(n, "n"),
            _prob=check_probability(p, "p"),
        )

    @classmethod
    def geometric(cls, p: float, first_success: bool = True) -> DistributionSpec:
        """
        Geometric with success probability p in (0, 1].

        With first_success=True X counts the trials up to and including the
        first success (support 1, 2, ...); otherwise it counts the failures
        before it (support 0, 1, ...).
        """
        return cls(
            kind=DistributionKind.GEOMETRIC,
            _prob=_success_probability(p),
            _first_success=bool(first_success),
        )

    @classmethod
    def poisson(cls, rate: float) -> DistributionSpec:
        """Poisson with rate lambda > 0."""
        return cls(kind=DistributionKind.POISSON, _rate=check_positive(rate, "rate"))

    @classmethod
    def negative_binomial(cls, successes: int, p: float) -> DistributionSpec:
        """Number of trials needed for r >= 1 successes (support r, r + 1, ...)."""
        return cls(
            kind=DistributionKind.NEGATIVE_BINOMIAL,
            _successes=check_positive_integer(successes, "successes"),
            _prob=_success_probability(p),
        )

    @classmethod
    def multivariate_normal(cls, mean: ArrayLike, cov: ArrayLike) -> DistributionSpec:
        """
        Multivariate normal N(mean, cov).

        cov must be square with the same dimension as mean, symmetric and
        positive definite.
        """
        mean_arr = _vector(mean, "mean")
        cov_arr = _covariance(cov, "cov", mean_arr.shape[0])
        return cls(
            kind=DistributionKind.MULTIVARIATE_NORMAL,
            _mean_vector=_frozen(mean_arr),
            _cov=_frozen(cov_arr),
        )

    @classmethod
    def multinomial(cls, n: int, p: ArrayLike) -> DistributionSpec:
        """Multinomial with n trials and category probabilities p (sum 1 within 1e-3)."""
        n_int = check_positive_integer(n, "n")
        p_arr = _vector(p, "p")
        check_probability_vector(p_arr, "p")
        return cls(kind=DistributionKind.MULTINOMIAL, _n=n_int, _p=_frozen(p_arr))

    @classmethod
    def dirichlet(cls, alpha: ArrayLike) -> DistributionSpec:
        """Dirichlet with concentration parameters alpha (all > 0, at least two)."""
        alpha_arr = _vector(alpha, "alpha")
        if alpha_arr.shape[0] < 2:
            raise DimensionError(
                f"alpha: Dirichlet needs at least 2 components, got {alpha_arr.shape[0]}"
            )
        bad = np.where(alpha_arr <= 0)[0]
        if len(bad) > 0:
            raise InvalidParameterError(
                f"alpha: all components must be > 0, got {alpha_arr[bad].tolist()} "
                f"at positions {bad.tolist()}"
            )
        return cls(kind=DistributionKind.DIRICHLET, _alpha=_frozen(alpha_arr))

    @classmethod
    def wishart(cls, scale: ArrayLike, df: float) -> DistributionSpec:
        """Wishart with p x p scale matrix V and df >= p degrees of freedom."""
        scale_arr = _covariance(scale, "scale", None)
        df_val = check_scalar(df, "df")
        dim = scale_arr.shape[0]
        if df_val < dim:
            raise InvalidParameterError(
                f"df: degrees of freedom must be >= dimension {dim}, got {df_val}"
            )
        return cls(kind=DistributionKind.WISHART, _scale=_frozen(scale_arr), _df=df_val)

    def __repr__(self) -> str:
        k = self.kind
        if k is DistributionKind.UNIFORM:
            body = f"a={self._a}, b={self._b}"
        elif k is DistributionKind.NORMAL:
            body = f"mean={self._mean}, std_dev={self._std_dev}"
        elif k is DistributionKind.EXPONENTIAL:
            body = f"rate={self._rate}"
        elif k is DistributionKind.GAMMA:
            body = f"shape={self._shape}, rate={self._rate}"
        elif k is DistributionKind.BERNOULLI:
            body = f"p={self._prob}"
        elif k is DistributionKind.BINOMIAL:
            body = f"n={self._n}, p={self._prob}"
        elif k is DistributionKind.GEOMETRIC:
            body = f"p={self._prob}, first_success={self._first_success}"
        elif k is DistributionKind.POISSON:
            body = f"rate={self._rate}"
        elif k is DistributionKind.NEGATIVE_BINOMIAL:
            body = f"successes={self._successes}, p={self._prob}"
        elif k is DistributionKind.MULTINOMIAL:
            body = f"n={self._n}, p={self._p.tolist()}"
        elif k is DistributionKind.DIRICHLET:
            body = f"alpha={self._alpha.tolist()}"
        elif k is DistributionKind.WISHART:
            body = f"df={self._df}, dimension={self.dimension}"
        else:
            body = f"dimension={self.dimension}"
        return f"DistributionSpec.{k.value}({body})"


VALID_OPERANDS = (
    "x", "lower", "upper", "p", "k", "s", "t",
    "indices", "given_indices", "given_values", "confidence",
    "order", "transform", "scale", "shift", "count",
)


def coerce_operation(operation: Operation | str) -> Operation:
    """Accept an Operation or its string value."""
    if isinstance(operation, Operation):
        return operation
    try:
        return Operation(str(operation).lower())
    except ValueError as e:
        valid = ", ".join(op.value for op in Operation)
        raise InvalidParameterError(
            f"Unknown operation {operation!r}. Valid operations: {valid}"
        ) from e


@dataclass(frozen=True)
class DistributionDesign:
    """
    One distribution request: spec + operation + operands + display precision.

    Operands are stored as given; each operation validates the ones it
    needs through the accessor methods, which raise DomainError for query
    arguments outside their domain and InvalidParameterError for missing
    or malformed ones.
    """
    spec: DistributionSpec
    operation: Operation
    operands: dict[str, Any] = field(default_factory=dict)
    precision: int = DEFAULT_PRECISION

    @classmethod
    def for_request(
        cls,
        spec: DistributionSpec,
        operation: Operation | str,
        *,
        precision: int = DEFAULT_PRECISION,
        **operands: Any,
    ) -> DistributionDesign:
        """Build and validate a request."""
        if not isinstance(spec, DistributionSpec):
            raise InvalidParameterError(
                f"spec: expected DistributionSpec, got {type(spec).__name__}"
            )
        op = coerce_operation(operation)
        unknown = sorted(set(operands) - set(VALID_OPERANDS))
        if unknown:
            raise InvalidParameterError(
                f"Unknown operands {unknown}. Valid operands: {list(VALID_OPERANDS)}"
            )
        if isinstance(precision, bool) or not isinstance(precision, (int, np.integer)) or precision < 0:
            raise InvalidParameterError(
                f"precision: must be a non-negative integer, got {precision!r}"
            )
        present = {k: v for k, v in operands.items() if v is not None}
        return cls(spec=spec, operation=op, operands=present, precision=int(precision))

    # --- Operand accessors ---

    def require(self, name: str) -> Any:
        """Raw operand value; raises if it was not supplied."""
        if name not in self.operands:
            raise InvalidParameterError(
                f"operation {self.operation.value!r} requires operand {name!r}"
            )
        return self.operands[name]

    def real(self, name: str, default: float | None = None) -> float:
        """
        Scalar operand as float. Infinite values are allowed (they have exact
        limiting answers); NaN is not.
        """
        if name not in self.operands and default is not None:
            return default
        raw = self.require(name)
        try:
            value = float(raw)
        except (TypeError, ValueError) as e:
            raise InvalidParameterError(f"{name}: expected a real number, got {raw!r}") from e
        if math.isnan(value):
            raise InvalidParameterError(f"{name}: must not be NaN")
        return value

    def probability(self, name: str = "p") -> float:
        """Scalar operand restricted to [0, 1]."""
        value = self.real(name)
        if not (0.0 <= value <= 1.0):
            raise DomainError(f"{name}: probability must lie in [0, 1], got {value}")
        return value

    def bounds(self) -> tuple[float, float]:
        """(lower, upper) with lower <= upper."""
        lower = self.real("lower")
        upper = self.real("upper")
        if lower > upper:
            raise InvalidParameterError(
                f"lower must not exceed upper, got lower={lower}, upper={upper}"
            )
        return lower, upper

    def vector(self, name: str, length: int) -> NDArray[np.floating[Any]]:
        """Finite 1D operand of the given length."""
        arr = check_array(self.require(name), name)
        check_1d(arr, name)
        check_finite(arr, name)
        if arr.shape[0] != length:
            raise DimensionError(
                f"{name}: expected length {length}, got {arr.shape[0]}"
            )
        return arr

    def indices(self, name: str, dimension: int) -> list[int]:
        """Distinct, in-range component indices."""
        raw = self.require(name)
        if np.isscalar(raw):
            raw = [raw]
        values: Sequence[Any] = list(raw)
        if not values:
            raise InvalidParameterError(f"{name}: must select at least one index")
        out: list[int] = []
        for v in values:
            try:
                fv = float(v)
            except (TypeError, ValueError) as e:
                raise InvalidParameterError(f"{name}: indices must be integers, got {v!r}") from e
            if isinstance(v, (bool, np.bool_)) or not math.isfinite(fv) or fv != math.floor(fv):
                raise InvalidParameterError(f"{name}: indices must be integers, got {v!r}")
            i = int(fv)
            if not 0 <= i < dimension:
                raise DimensionError(
                    f"{name}: index {i} out of range for dimension {dimension}"
                )
            out.append(i)
        if len(set(out)) != len(out):
            raise InvalidParameterError(f"{name}: indices must be distinct, got {out}")
        return out

    def integer(
        self,
        name: str,
        minimum: int,
        maximum: int | None = None,
        default: int | None = None,
    ) -> int:
        """Integer operand in [minimum, maximum]."""
        if name not in self.operands and default is not None:
            return default
        raw = self.require(name)
        value = self.real(name)
        if isinstance(raw, (bool, np.bool_)) or not math.isfinite(value) or value != math.floor(value):
            raise InvalidParameterError(f"{name}: must be an integer, got {raw!r}")
        if value < minimum or (maximum is not None and value > maximum):
            upper = "" if maximum is None else f" and <= {maximum}"
            raise DomainError(f"{name}: must be >= {minimum}{upper}, got {int(value)}")
        return int(value)

    def order(self, default: int | None = None) -> int:
        """Moment order r in [1, MAX_MOMENT_ORDER]."""
        return self.integer("order", 1, MAX_MOMENT_ORDER, default)
