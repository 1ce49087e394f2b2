"""Expected counts under a fitted distribution, per censoring scenario.

Which count a distribution is scaled to, and which bins it is compared
against, depends on the data regime and on what the distribution describes:

======  =================  ============  =============  ===========
Case    Data               Fit           Scaled to      First bin
======  =================  ============  =============  ===========
1a      complete           complete      ``n``          0
1b      complete           tail          ``No == n``    0
2a, 3a  censored           complete      ``Nc``         ``cmin``
2b, 3b  censored           tail          ``No``         ``cmin``
======  =================  ============  =============  ===========

Tail fits are renormalized so that ``phi`` acts as the origin of the tail
distribution: an interval ``(a, b]`` above ``phi`` expects
``No * (F(b) - F(a)) / (1 - F(phi))``. A distribution that already models
only the tail has ``F(phi) = 0`` and is unaffected.
"""

from dataclasses import dataclass
import logging
from typing import TYPE_CHECKING, Optional
import warnings

import numpy as np

from ._warnings import DataQualityWarning
from .distributions import CumulativeDistribution
from .regimes import Scenario

if TYPE_CHECKING:
    from .histogram import Histogram

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExpectationPlan:
    """How expected counts are derived for one scenario.

    Attributes:
        scenario: Data regime and fit description in force.
        n_modeled: Sample count the distribution is scaled to (``Nx``).
        first_bin: Lowest bin compared against the distribution.
        origin: Threshold a tail fit is renormalized at, or None.
    """

    scenario: Scenario
    n_modeled: int
    first_bin: int
    origin: Optional[float] = None


def plan_expectation(hist: "Histogram") -> ExpectationPlan:
    """Choose ``Nx``, the first compared bin and the tail origin for ``hist``.

    Raises:
        TypeError: If the histogram reports an unknown scenario.
    """
    scenario = hist.scenario
    if scenario in (Scenario.COMPLETE_DATA_COMPLETE_FIT, Scenario.COMPLETE_DATA_TAIL_FIT):
        plan = ExpectationPlan(scenario, hist.n, 0)
    elif scenario in (
        Scenario.VIRTUAL_CENSORED_COMPLETE_FIT,
        Scenario.TRUE_CENSORED_COMPLETE_FIT,
    ):
        plan = ExpectationPlan(scenario, hist.Nc, hist.cmin)
    elif scenario in (Scenario.VIRTUAL_CENSORED_TAIL_FIT, Scenario.TRUE_CENSORED_TAIL_FIT):
        plan = ExpectationPlan(scenario, hist.No, hist.cmin, hist.phi)
    else:
        raise TypeError(f"Unknown scenario: {scenario!r}")

    logger.debug(
        "Scenario %s: Nx=%d, first bin %d, origin %s",
        scenario.value,
        plan.n_modeled,
        plan.first_bin,
        plan.origin,
    )
    return plan


def interval_expectation(
    dist: CumulativeDistribution,
    plan: ExpectationPlan,
    lower: np.ndarray,
    upper: np.ndarray,
) -> np.ndarray:
    """Expected counts in the intervals ``(lower[i], upper[i]]``.

    Args:
        dist: Distribution to evaluate.
        plan: Scaling and tail origin from :func:`plan_expectation`.
        lower: Lower interval edges (may contain ``-inf``).
        upper: Upper interval edges (may contain ``+inf``).

    Returns:
        Array of non-negative expected counts.
    """
    lower = np.asarray(lower, dtype=float)
    upper = np.asarray(upper, dtype=float)
    scale = 1.0
    if plan.origin is not None:
        lower = np.maximum(lower, plan.origin)
        upper = np.maximum(upper, plan.origin)
        scale = 1.0 - dist.evaluate(plan.origin)
        if scale <= 0.0:
            return np.zeros(len(lower))

    mass = dist.evaluate_many(upper) - dist.evaluate_many(lower)
    if np.any(mass < 0.0):
        warnings.warn(
            f"CDF decreased across {int(np.sum(mass < 0.0))} intervals; "
            "their expected counts are set to 0",
            DataQualityWarning,
            stacklevel=3,
        )
        mass = np.clip(mass, 0.0, None)
    return plan.n_modeled * mass / scale


def expected_counts(hist: "Histogram", dist: CumulativeDistribution) -> np.ndarray:
    """Expected count in every bin of ``hist`` under ``dist``.

    Bins below the first compared bin are left at 0.

    Returns:
        Array of length ``hist.nb``.
    """
    plan = plan_expectation(hist)
    expect = np.zeros(hist.nb)
    first = min(plan.first_bin, hist.nb)
    if first < hist.nb:
        edges = hist.bin_edges()[first:]
        expect[first:] = interval_expectation(dist, plan, edges[:-1], edges[1:])
    return expect
