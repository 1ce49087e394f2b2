"""Incrementally built score histogram with censoring bookkeeping.

A :class:`Histogram` counts samples into fixed-width bins, optionally keeping
every raw sample as well. Once all samples are in, the caller may declare how
the data are censored (once), whether fitted distributions describe only the
tail, and then compare the data against a fitted distribution.

Example:
    >>> import numpy as np
    >>> from scipy import stats
    >>> rng = np.random.default_rng(42)
    >>> hist = Histogram.create_full(bmin=0.0, bmax=10.0, w=0.5)
    >>> hist.add_many(rng.exponential(scale=2.0, size=5000))
    >>> hist.virt_censor_by_mass(0.2)
    >>> hist.set_tailfitting()
    >>> result = hist.goodness(stats.expon(loc=hist.phi, scale=2.0), nfitted=0)
    >>> print(result.summary())
"""

import logging
import math
from typing import Any, Iterable, Optional, Tuple
import warnings

import numpy as np

from ._warnings import DataQualityWarning
from .binning import BinStore, bin_lower_bound, bin_upper_bound, score_to_bin
from .distributions import as_distribution
from .exceptions import (
    CensoringAlreadySetError,
    FullModeRequiredError,
    IngestionClosedError,
    InsufficientDataError,
)
from .expectation import expected_counts, plan_expectation
from .goodness import GoodnessOfFitResult, evaluate_goodness
from .regimes import (
    CompleteData,
    Dataset,
    DatasetKind,
    FitDescription,
    Scenario,
    TrueCensoring,
    VirtualCensoring,
    resolve_scenario,
)
from .samples import RawSampleStore

logger = logging.getLogger(__name__)

# Absorbs rounding in tfrac * n so that e.g. 0.29 * 100 keeps a tail of 29
_RANK_EPS = 1e-9


class Histogram:
    """Histogram of real-valued samples in bins ``(w*b + bmin, w*(b+1) + bmin]``.

    The lifecycle is: create, :meth:`add` samples, optionally fix censoring
    with exactly one of :meth:`true_censoring`, :meth:`virt_censor_by_value`
    or :meth:`virt_censor_by_mass` (after which no more samples are
    accepted), optionally :meth:`set_tailfitting`, then :meth:`set_expect`
    and :meth:`goodness` as often as needed.
    """

    def __init__(self, bmin: float, bmax: float, w: float, full: bool = False):
        """Initialize an empty histogram.

        Args:
            bmin: Initial guess at the lower bound of the data.
            bmax: Initial guess at the upper bound of the data.
            w: Bin width.
            full: Also keep every raw sample, enabling rank queries,
                censoring by mass and unbinned goodness of fit.

        Raises:
            ValueError: If ``w <= 0`` or ``bmin >= bmax``.
        """
        self._bins = BinStore(bmin, bmax, w)
        self._raw: Optional[RawSampleStore] = RawSampleStore() if full else None
        self._n = 0
        self.xmin = math.inf
        self.xmax = -math.inf

        self._dataset: Dataset = CompleteData()
        self._cmin: Optional[int] = None
        self.fit_describes = FitDescription.COMPLETE_FIT

        self.expect: Optional[np.ndarray] = None
        self._expect_grid: Optional[Tuple[float, int, Scenario]] = None

    @classmethod
    def create(cls, bmin: float, bmax: float, w: float) -> "Histogram":
        """Create a histogram that keeps bin counts only."""
        return cls(bmin, bmax, w, full=False)

    @classmethod
    def create_full(cls, bmin: float, bmax: float, w: float) -> "Histogram":
        """Create a histogram that also keeps every raw sample."""
        return cls(bmin, bmax, w, full=True)

    def __len__(self) -> int:
        return self._n

    def __repr__(self) -> str:
        return (
            f"Histogram(bmin={self.bmin:g}, bmax={self.bmax:g}, w={self.w:g}, nb={self.nb}, "
            f"n={self.n}, dataset={self.dataset_is.value}, fit={self.fit_describes.value})"
        )

    # ------------------------------------------------------------------
    # Grid and counts
    # ------------------------------------------------------------------
    @property
    def n(self) -> int:
        """Number of samples added."""
        return self._n

    @property
    def bmin(self) -> float:
        return self._bins.bmin

    @property
    def bmax(self) -> float:
        return self._bins.bmax

    @property
    def w(self) -> float:
        return self._bins.w

    @property
    def nb(self) -> int:
        return self._bins.nb

    @property
    def imin(self) -> int:
        """Smallest bin with a non-zero count (``nb`` while empty)."""
        return self._bins.imin

    @property
    def imax(self) -> int:
        """Largest bin with a non-zero count (``-1`` while empty)."""
        return self._bins.imax

    @property
    def obs(self) -> np.ndarray:
        """Read-only view of the per-bin counts."""
        view = self._bins.obs.view()
        view.flags.writeable = False
        return view

    @property
    def is_full(self) -> bool:
        return self._raw is not None

    @property
    def is_sorted(self) -> bool:
        return self._raw is not None and self._raw.is_sorted

    @property
    def x(self) -> Optional[np.ndarray]:
        """Read-only view of the raw samples, or None for a bin-only histogram."""
        return None if self._raw is None else self._raw.values

    def bin_lower_bound(self, b: int) -> float:
        """Lower (exclusive) edge of bin ``b``."""
        return bin_lower_bound(self.bmin, self.w, b)

    def bin_upper_bound(self, b: int) -> float:
        """Upper (inclusive) edge of bin ``b``."""
        return bin_upper_bound(self.bmin, self.w, b)

    def score_to_bin(self, x: float) -> int:
        """Index of the bin that holds ``x`` on the current grid."""
        return score_to_bin(self.bmin, self.w, x)

    def bin_edges(self) -> np.ndarray:
        """All ``nb + 1`` bin edges, lowest first."""
        return self._bins.edges()

    # ------------------------------------------------------------------
    # Ingestion
    # ------------------------------------------------------------------
    def add(self, x: float) -> None:
        """Record one sample.

        Args:
            x: Finite sample value. The grid grows as needed to hold it.

        Raises:
            IngestionClosedError: If censoring has already been fixed.
            ValueError: If ``x`` is not finite.
        """
        if self.is_done:
            raise IngestionClosedError(self._n)
        x = float(x)
        if not math.isfinite(x):
            raise ValueError(f"Samples must be finite, got {x}")
        self._ingest(x)

    def add_many(self, values: Iterable[float]) -> None:
        """Record a batch of samples; all are validated before any is added.

        Raises:
            IngestionClosedError: If censoring has already been fixed.
            ValueError: If any value is not finite.
        """
        if self.is_done:
            raise IngestionClosedError(self._n)
        arr = np.asarray(list(values), dtype=float)
        if not np.all(np.isfinite(arr)):
            bad = int(np.sum(~np.isfinite(arr)))
            raise ValueError(f"Samples must be finite, got {bad} that are not")
        for x in arr:
            self._ingest(float(x))

    def _ingest(self, x: float) -> None:
        self._bins.add(x)
        if self._raw is not None:
            self._raw.append(x)
        self._n += 1
        if x < self.xmin:
            self.xmin = x
        if x > self.xmax:
            self.xmax = x

    # ------------------------------------------------------------------
    # Rank queries
    # ------------------------------------------------------------------
    def sort(self) -> None:
        """Sort the raw samples ascending (no-op if already sorted).

        Raises:
            FullModeRequiredError: If raw samples are not kept.
        """
        if self._raw is None:
            raise FullModeRequiredError("sort()")
        self._raw.sort()

    def score_at_rank(self, rank: int) -> float:
        """Return the ``rank``-th smallest sample, 1 being the smallest.

        Raises:
            FullModeRequiredError: If raw samples are not kept.
            RankOutOfRangeError: If ``rank`` is outside ``[1, n]``.
        """
        if self._raw is None:
            raise FullModeRequiredError("score_at_rank()")
        return self._raw.at_rank(rank)

    # ------------------------------------------------------------------
    # Censoring
    # ------------------------------------------------------------------
    @property
    def dataset(self) -> Dataset:
        """Current censoring regime variant."""
        return self._dataset

    @property
    def dataset_is(self) -> DatasetKind:
        return self._dataset.kind

    @property
    def is_done(self) -> bool:
        """Whether censoring is fixed and ingestion therefore closed."""
        return not isinstance(self._dataset, CompleteData)

    @property
    def phi(self) -> Optional[float]:
        """Censoring threshold, or None for complete data."""
        if isinstance(self._dataset, CompleteData):
            return None
        return self._dataset.phi

    @property
    def z(self) -> int:
        """Number of censored samples at or below ``phi``."""
        if isinstance(self._dataset, CompleteData):
            return 0
        return self._dataset.z

    @property
    def cmin(self) -> int:
        """Smallest bin holding only uncensored data (``imin`` for complete data)."""
        if self._cmin is None:
            return self.imin
        return self._cmin

    @property
    def Nc(self) -> int:  # pylint: disable=invalid-name
        """Sample count of the complete data, observed plus unobserved."""
        if isinstance(self._dataset, TrueCensoring):
            return self._n + self._dataset.z
        return self._n

    @property
    def No(self) -> int:  # pylint: disable=invalid-name
        """Sample count of the observed data."""
        if isinstance(self._dataset, VirtualCensoring):
            return self._n - self._dataset.z
        return self._n

    @property
    def Nx(self) -> int:  # pylint: disable=invalid-name
        """Sample count modeled by a fitted distribution in the current scenario."""
        return plan_expectation(self).n_modeled

    @property
    def scenario(self) -> Scenario:
        return resolve_scenario(self._dataset, self.fit_describes)

    def _check_censoring_open(self) -> None:
        if self.is_done:
            raise CensoringAlreadySetError(self.dataset_is.value)

    def _first_bin_above(self, phi: float) -> int:
        return min(max(self.score_to_bin(phi) + 1, 0), self.nb)

    def true_censoring(self, z: int, phi: float) -> None:
        """Declare that ``z`` more samples at or below ``phi`` exist but were never added.

        Args:
            z: Number of unobserved samples.
            phi: Censoring threshold; every added sample should exceed it.

        Raises:
            CensoringAlreadySetError: If censoring was already fixed.
            ValueError: If ``z < 1`` or ``phi`` is not finite.
        """
        self._check_censoring_open()
        if z < 1:
            raise ValueError(f"Censored count z must be positive, got {z}")
        if not math.isfinite(phi):
            raise ValueError(f"Censoring threshold must be finite, got {phi}")

        if self._n > 0 and self.xmin <= phi:
            warnings.warn(
                f"Stored samples go down to {self.xmin:g}, at or below the declared "
                f"censoring threshold {phi:g}",
                DataQualityWarning,
                stacklevel=2,
            )
        self._cmin = self._first_bin_above(phi)
        self._dataset = TrueCensoring(phi=float(phi), z=int(z))
        logger.info("True censoring at phi=%g: No=%d, Nc=%d", phi, self.No, self.Nc)

    def virt_censor_by_value(self, phi: float) -> None:
        """Treat stored samples at or below ``phi`` as unobserved.

        On a bin-only histogram the threshold is raised to the next bin edge,
        the finest resolution at which censored samples can be counted.

        Args:
            phi: Censoring threshold.

        Raises:
            CensoringAlreadySetError: If censoring was already fixed.
            ValueError: If ``phi`` is not finite or no stored sample lies at
                or below it.
        """
        self._check_censoring_open()
        if not math.isfinite(phi):
            raise ValueError(f"Censoring threshold must be finite, got {phi}")

        cmin = self._first_bin_above(phi)
        if self._raw is not None:
            z = self._raw.count_at_or_below(phi)
        else:
            z = self._bins.count_below(cmin)
        if z == 0:
            raise ValueError(f"No stored samples lie at or below phi={phi:g}; nothing to censor")

        if self._raw is None:
            snapped = self.bin_lower_bound(cmin)
            if snapped != phi:
                logger.debug("Snapped phi=%g up to bin edge %g", phi, snapped)
            phi = snapped

        self._cmin = cmin
        self._dataset = VirtualCensoring(phi=float(phi), z=int(z))
        logger.info("Virtual censoring at phi=%g: z=%d, No=%d", phi, z, self.No)

    def virt_censor_by_mass(self, tfrac: float) -> None:
        """Censor so that about a fraction ``tfrac`` of samples form the observed tail.

        The target tail size ``floor(tfrac * n)`` is rounded down, ``phi`` is
        the sample at rank ``n - ntail``, and every sample tied with ``phi``
        is censored, so the observed tail is never larger than the target.

        Args:
            tfrac: Target tail fraction in ``(0, 1)``.

        Raises:
            CensoringAlreadySetError: If censoring was already fixed.
            FullModeRequiredError: If raw samples are not kept.
            ValueError: If ``tfrac`` is not in ``(0, 1)``.
            InsufficientDataError: If no samples were added.
        """
        self._check_censoring_open()
        if self._raw is None:
            raise FullModeRequiredError("virt_censor_by_mass()")
        if not 0.0 < tfrac < 1.0:
            raise ValueError(f"Tail fraction must be in (0, 1), got {tfrac}")
        if self._n == 0:
            raise InsufficientDataError(0, 1, "samples")

        ntail = min(int(math.floor(tfrac * self._n + _RANK_EPS)), self._n - 1)
        rank = self._n - ntail
        phi = self.score_at_rank(rank)
        logger.debug("Tail fraction %g of %d samples: rank %d, phi=%g", tfrac, self._n, rank, phi)
        self.virt_censor_by_value(phi)

    def set_tailfitting(self) -> None:
        """Declare that fitted distributions describe only the tail above ``phi``."""
        self.fit_describes = FitDescription.TAIL_FIT

    # ------------------------------------------------------------------
    # Expectation and goodness of fit
    # ------------------------------------------------------------------
    @property
    def expect_is_stale(self) -> bool:
        """Whether the grid or the scenario changed since :meth:`set_expect` filled ``expect``."""
        return self.expect is not None and self._expect_grid != self._expect_key()

    def _expect_key(self) -> Tuple[float, int, Scenario]:
        return (self.bmin, self.nb, self.scenario)

    def set_expect(self, distribution: Any, params: Any = None) -> np.ndarray:
        """Fill ``expect`` with expected per-bin counts under ``distribution``.

        Can be called again, e.g. after refitting parameters. The array
        matches the grid at call time and is not resized if the grid grows.

        Args:
            distribution: A :class:`~scorehist.distributions.CumulativeDistribution`,
                a frozen ``scipy.stats`` distribution, or a ``cdf(x, params)`` function.
            params: Parameter block for a plain ``cdf`` function.

        Returns:
            The new expectation array.
        """
        dist = as_distribution(distribution, params)
        self.expect = expected_counts(self, dist)
        self._expect_grid = self._expect_key()
        return self.expect

    def goodness(
        self,
        distribution: Any,
        nfitted: int,
        use_bindata: bool = True,
        params: Any = None,
    ) -> GoodnessOfFitResult:
        """Evaluate G and X^2 goodness of fit on the observed data.

        Args:
            distribution: Fitted distribution (see :meth:`set_expect`).
            nfitted: Number of parameters fitted to these data.
            use_bindata: Compare bin counts; if False, compare the raw samples.
            params: Parameter block for a plain ``cdf`` function.

        Returns:
            Statistics and their chi-squared p-values.
        """
        dist = as_distribution(distribution, params)
        return evaluate_goodness(self, dist, nfitted, use_bindata=use_bindata)
