"""Cumulative distribution interface consumed by the expectation and fit code.

The histogram never knows which distribution family it is compared against.
It only evaluates ``F(x)`` (and, for Q-Q tables, ``F^-1(p)``) through a
:class:`CumulativeDistribution`. Callers can implement the interface directly,
wrap a plain ``cdf(x, params)`` function with :class:`ParametricCDF`, or wrap
a frozen ``scipy.stats`` distribution with :class:`ScipyDistribution`.

Example:
    >>> from scipy import stats
    >>> dist = as_distribution(stats.expon(loc=0.0, scale=2.0))
    >>> round(dist.evaluate(2.0), 4)
    0.6321

    >>> def gumbel_cdf(x, params):
    ...     mu, lam = params
    ...     return math.exp(-math.exp(-lam * (x - mu)))
    >>> dist = as_distribution(gumbel_cdf, params=(0.0, 1.0))
"""

from abc import ABC, abstractmethod
import math
from typing import Any, Callable, Iterable, Optional

import numpy as np


class CumulativeDistribution(ABC):
    """Abstract base class for a distribution evaluated through its CDF."""

    @abstractmethod
    def cdf(self, x: float) -> float:
        """Evaluate ``P(X <= x)``.

        Args:
            x: Finite point at which to evaluate.

        Returns:
            Probability in ``[0, 1]``.
        """

    def invcdf(self, p: float) -> float:
        """Evaluate the quantile function.

        Args:
            p: Probability in ``(0, 1)``.

        Returns:
            Value ``x`` with ``F(x) = p``.

        Raises:
            NotImplementedError: If the distribution has no inverse CDF.
        """
        raise NotImplementedError(f"{type(self).__name__} does not provide an inverse CDF")

    def evaluate(self, x: float) -> float:
        """Evaluate the CDF, answering infinite arguments without a call."""
        if x == -math.inf:
            return 0.0
        if x == math.inf:
            return 1.0
        return float(self.cdf(x))

    def evaluate_many(self, xs: Iterable[float]) -> np.ndarray:
        """Evaluate the CDF at each point of ``xs``."""
        return np.array([self.evaluate(float(x)) for x in xs], dtype=float)


class ParametricCDF(CumulativeDistribution):
    """A caller's ``cdf(x, params)`` function bound to its parameter block.

    ``params`` belongs to the caller; it is passed through untouched on
    every evaluation and is never inspected, copied, or released here.
    """

    def __init__(
        self,
        cdf: Callable[[float, Any], float],
        params: Any = None,
        invcdf: Optional[Callable[[float, Any], float]] = None,
    ):
        """Bind the evaluator functions to their parameters.

        Args:
            cdf: Function returning ``F(x)`` given ``(x, params)``.
            params: Opaque parameter block handed back to ``cdf``.
            invcdf: Optional quantile function taking ``(p, params)``.

        Raises:
            TypeError: If ``cdf`` is not callable.
        """
        if not callable(cdf):
            raise TypeError(f"cdf must be callable, got {type(cdf).__name__}")
        self._cdf = cdf
        self._invcdf = invcdf
        self.params = params

    def cdf(self, x: float) -> float:
        return self._cdf(x, self.params)

    def invcdf(self, p: float) -> float:
        if self._invcdf is None:
            return super().invcdf(p)
        return self._invcdf(p, self.params)


class ScipyDistribution(CumulativeDistribution):
    """Adapter for a frozen ``scipy.stats`` distribution (or anything with ``cdf``/``ppf``)."""

    def __init__(self, frozen: Any):
        """Wrap a frozen distribution.

        Args:
            frozen: Object exposing ``cdf(x)`` and, optionally, ``ppf(p)``.
        """
        self.frozen = frozen

    def cdf(self, x: float) -> float:
        return float(self.frozen.cdf(x))

    def invcdf(self, p: float) -> float:
        if not hasattr(self.frozen, "ppf"):
            return super().invcdf(p)
        return float(self.frozen.ppf(p))

    def evaluate_many(self, xs: Iterable[float]) -> np.ndarray:
        return np.asarray(self.frozen.cdf(np.asarray(list(xs), dtype=float)), dtype=float)


class EmpiricalCDF(CumulativeDistribution):
    """Step-function CDF of a sample: ``F(x) = #{x_i <= x} / n``."""

    def __init__(self, values: Iterable[float]):
        """Build the CDF from sample values.

        Raises:
            ValueError: If no values are given.
        """
        self._sorted = np.sort(np.asarray(list(values), dtype=float))
        if len(self._sorted) == 0:
            raise ValueError("EmpiricalCDF needs at least one value")

    def cdf(self, x: float) -> float:
        return float(np.searchsorted(self._sorted, x, side="right")) / len(self._sorted)

    def invcdf(self, p: float) -> float:
        n = len(self._sorted)
        idx = min(n - 1, max(0, int(math.ceil(p * n)) - 1))
        return float(self._sorted[idx])


def as_distribution(obj: Any, params: Any = None) -> CumulativeDistribution:
    """Coerce a distribution-like object into a :class:`CumulativeDistribution`.

    Args:
        obj: A :class:`CumulativeDistribution`, an object with a ``cdf``
            method (e.g. a frozen ``scipy.stats`` distribution), or a plain
            ``cdf(x, params)`` callable.
        params: Parameter block for a plain callable.

    Returns:
        A distribution usable by the histogram.

    Raises:
        ValueError: If ``params`` is given for an object that carries its own.
        TypeError: If ``obj`` cannot be evaluated as a CDF.
    """
    if isinstance(obj, CumulativeDistribution):
        if params is not None:
            raise ValueError("params can only accompany a plain cdf(x, params) function")
        return obj
    if callable(getattr(obj, "cdf", None)):
        if params is not None:
            raise ValueError("params can only accompany a plain cdf(x, params) function")
        return ScipyDistribution(obj)
    if callable(obj):
        return ParametricCDF(obj, params)
    raise TypeError(f"Cannot use {type(obj).__name__} as a cumulative distribution")
