"""G-test and Pearson X^2 goodness of fit on (possibly censored) histogram data.

Goodness of fit is always evaluated on the observed data only: all bins for
complete data, and only bins lying wholly above the censoring threshold for
censored data. Both statistics are referred to a chi-squared distribution
with ``nbins - nfitted - 1`` degrees of freedom.

Example:
    >>> from scipy import stats
    >>> result = hist.goodness(stats.norm(loc=0.0, scale=1.0), nfitted=2)
    >>> result.X2_pvalue > 0.01
    True
"""

from dataclasses import dataclass
import logging
from typing import TYPE_CHECKING, List, Tuple

import numpy as np
from scipy import stats

from .distributions import CumulativeDistribution
from .exceptions import FullModeRequiredError, InsufficientDataError
from .expectation import ExpectationPlan, interval_expectation, plan_expectation
from .regimes import Scenario

if TYPE_CHECKING:
    from .histogram import Histogram

logger = logging.getLogger(__name__)


@dataclass
class GoodnessOfFitResult:  # pylint: disable=invalid-name
    """Container for goodness-of-fit results."""

    nbins: int
    G: float
    G_pvalue: float
    X2: float
    X2_pvalue: float
    dof: int
    nfitted: int
    method: str
    scenario: Scenario

    def summary(self) -> str:
        """Generate human-readable summary of the fit.

        Returns:
            Formatted string with both statistics and their p-values.
        """
        lines = [
            "Goodness of Fit",
            f"{'=' * 40}",
            f"Scenario: {self.scenario.value} ({self.scenario.name.lower()})",
            f"Method: {self.method}",
            f"Bins compared: {self.nbins}",
            f"Parameters fitted: {self.nfitted}",
            f"Degrees of freedom: {self.dof}",
            f"G statistic: {self.G:.6f}  (p = {self.G_pvalue:.4f})",
            f"X^2 statistic: {self.X2:.6f}  (p = {self.X2_pvalue:.4f})",
        ]
        return "\n".join(lines)


def _binned_counts(
    hist: "Histogram", dist: CumulativeDistribution, plan: ExpectationPlan
) -> Tuple[np.ndarray, np.ndarray]:
    """Observed and expected counts for bins in the observed region with expect > 0."""
    first = min(plan.first_bin, hist.nb)
    edges = hist.bin_edges()[first:]
    expect = interval_expectation(dist, plan, edges[:-1], edges[1:])
    observed = hist.obs[first:].astype(float)
    keep = expect > 0.0
    return observed[keep], expect[keep]


def _partition_sorted(values: np.ndarray) -> Tuple[List[int], List[float]]:
    """Split sorted samples into groups of roughly equal size.

    Each group holds at least ``minc`` samples and never splits a run of
    tied values; a short trailing group is merged into its predecessor.

    Returns:
        Group sizes and the largest value in each group.
    """
    n = len(values)
    nb = 2 * int(n**0.4)
    minc = 1 + n // (2 * nb)

    counts: List[int] = []
    topx: List[float] = []
    i = 0
    while i < n:
        j = min(i + minc, n)
        while j < n and values[j] == values[j - 1]:
            j += 1
        counts.append(j - i)
        topx.append(float(values[j - 1]))
        i = j

    if len(counts) > 1 and counts[-1] < minc:
        counts[-2] += counts.pop()
        topx.pop()
        topx[-1] = float(values[-1])
    return counts, topx


def _raw_counts(
    hist: "Histogram", dist: CumulativeDistribution, plan: ExpectationPlan
) -> Tuple[np.ndarray, np.ndarray]:
    """Observed and expected counts for equal-count groups of raw samples."""
    values = np.sort(hist.x)
    lowest = -np.inf
    if plan.scenario.is_censored:
        lowest = hist.phi
        values = values[values > lowest]
    if len(values) == 0:
        return np.zeros(0), np.zeros(0)

    counts, topx = _partition_sorted(values)
    lower = np.array([lowest] + topx[:-1], dtype=float)
    upper = np.array(topx[:-1] + [np.inf], dtype=float)
    expect = interval_expectation(dist, plan, lower, upper)
    observed = np.array(counts, dtype=float)
    keep = expect > 0.0
    return observed[keep], expect[keep]


def _statistics(
    observed: np.ndarray,
    expect: np.ndarray,
    nfitted: int,
    method: str,
    scenario: Scenario,
) -> GoodnessOfFitResult:
    nbins = len(observed)
    if nbins < nfitted + 2:
        raise InsufficientDataError(nbins, nfitted + 2)
    dof = nbins - nfitted - 1

    nonzero = observed > 0.0
    g_stat = 2.0 * float(np.sum(observed[nonzero] * np.log(observed[nonzero] / expect[nonzero])))
    x2_stat = float(np.sum((observed - expect) ** 2 / expect))

    return GoodnessOfFitResult(
        nbins=nbins,
        G=g_stat,
        G_pvalue=float(stats.chi2.sf(g_stat, dof)),
        X2=x2_stat,
        X2_pvalue=float(stats.chi2.sf(x2_stat, dof)),
        dof=dof,
        nfitted=nfitted,
        method=method,
        scenario=scenario,
    )


def evaluate_goodness(
    hist: "Histogram",
    dist: CumulativeDistribution,
    nfitted: int,
    use_bindata: bool = True,
) -> GoodnessOfFitResult:
    """Compare the observed data of ``hist`` against ``dist``.

    Bins (or raw-sample groups) with zero expected count are skipped and do
    not count towards the degrees of freedom. The histogram is not modified.

    Args:
        hist: Histogram whose censoring state is final.
        dist: Fitted distribution.
        nfitted: Number of distribution parameters fitted to these data.
        use_bindata: Compare bin counts; if False, partition the sorted raw
            samples into groups of roughly equal size and compare those.

    Returns:
        G and X^2 statistics with their right-tail chi-squared p-values.

    Raises:
        ValueError: If ``nfitted`` is negative.
        FullModeRequiredError: If raw samples are requested but not kept.
        InsufficientDataError: If fewer than ``nfitted + 2`` bins remain.
    """
    if nfitted < 0:
        raise ValueError(f"nfitted must be non-negative, got {nfitted}")
    if not use_bindata and not hist.is_full:
        raise FullModeRequiredError("Unbinned goodness of fit")

    plan = plan_expectation(hist)
    if use_bindata:
        observed, expect = _binned_counts(hist, dist, plan)
        method = "binned"
    else:
        observed, expect = _raw_counts(hist, dist, plan)
        method = "raw"

    result = _statistics(observed, expect, nfitted, method, plan.scenario)
    logger.info(
        "Goodness of fit (%s, scenario %s): %d bins, G=%.4g (p=%.3g), X2=%.4g (p=%.3g)",
        method,
        plan.scenario.value,
        result.nbins,
        result.G,
        result.G_pvalue,
        result.X2,
        result.X2_pvalue,
    )
    return result
