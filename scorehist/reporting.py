"""Read-only tables and plots of a finished histogram.

Everything here only reads the histogram: bin counts, grid, expectation
array and censoring state. Nothing sorts, resizes or recomputes it in place.

Example:
    >>> table = bin_table(hist)
    >>> print(format_histogram(hist))
    >>> fig = plot_survival(hist, stats.gumbel_r(loc=mu, scale=1 / lam))
"""

from typing import TYPE_CHECKING, Any, Callable, Optional, Tuple
import warnings

from matplotlib.axes import Axes
from matplotlib.figure import Figure
import matplotlib.pyplot as plt
import numpy as np
import pandas as pd

from ._warnings import DataQualityWarning
from .distributions import CumulativeDistribution, as_distribution
from .expectation import plan_expectation

if TYPE_CHECKING:
    from .histogram import Histogram

BIN_TABLE_COLUMNS = ["bin", "lower", "upper", "observed", "cumulative", "expected", "censored"]

# Width of the longest bar in format_histogram()
_BAR_WIDTH = 58


def _usable_expect(hist: "Histogram") -> Optional[np.ndarray]:
    if hist.expect is None:
        return None
    if hist.expect_is_stale:
        warnings.warn(
            "Expected counts were computed for a different grid or scenario; "
            "call set_expect() again",
            DataQualityWarning,
            stacklevel=3,
        )
        return None
    return hist.expect


def bin_table(hist: "Histogram") -> pd.DataFrame:
    """Tabulate every bin from the lowest to the highest occupied one.

    Args:
        hist: Histogram to tabulate.

    Returns:
        DataFrame with columns ``bin``, ``lower``, ``upper``, ``observed``,
        ``cumulative`` (count up to and including the bin), ``expected``
        (NaN when no current expectation exists) and ``censored`` (bin lies
        below the first bin compared in goodness of fit).
    """
    if hist.imax < 0:
        return pd.DataFrame(columns=BIN_TABLE_COLUMNS)

    bins = np.arange(hist.imin, hist.imax + 1)
    observed = hist.obs[hist.imin : hist.imax + 1]
    expect = _usable_expect(hist)
    first = plan_expectation(hist).first_bin

    return pd.DataFrame(
        {
            "bin": bins,
            "lower": hist.bmin + hist.w * bins,
            "upper": hist.bmin + hist.w * (bins + 1),
            "observed": observed,
            "cumulative": np.cumsum(observed),
            "expected": expect[bins] if expect is not None else np.full(len(bins), np.nan),
            "censored": bins < first,
        }
    )


def format_histogram(hist: "Histogram") -> str:
    """Render the histogram as a plain-text table with bars.

    Each line shows the bin's upper bound, observed count, expected count
    (when available) and a bar of ``=`` proportional to the observed count.
    Censored bins are marked with ``*``.
    """
    table = bin_table(hist)
    if table.empty:
        return "(empty histogram)"

    peak = max(int(table["observed"].max()), 1)
    has_expect = bool(table["expected"].notna().any())
    lines = []
    for row in table.itertuples(index=False):
        bar = "=" * int(round(_BAR_WIDTH * row.observed / peak))
        expected = f"{row.expected:10.1f} " if has_expect else ""
        marker = "*" if row.censored else " "
        lines.append(f"{row.upper:10.3f} {row.observed:8d} {expected}{marker}|{bar}")

    lines.append("")
    lines.append(f"n = {hist.n}, observed = {hist.No}, complete = {hist.Nc}")
    if hist.phi is not None:
        lines.append(f"censored at phi = {hist.phi:g} (z = {hist.z})")
    return "\n".join(lines)


def survival_table(hist: "Histogram") -> pd.DataFrame:
    """Empirical survival ``P(X >= x)`` of the observed data, scaled to ``Nc``.

    Exact at every observed raw sample when raw samples are kept; otherwise
    evaluated at the lower bound of each occupied bin in the observed region.

    Returns:
        DataFrame with columns ``x`` and ``survival``, ``x`` descending.
    """
    if hist.Nc == 0:
        return pd.DataFrame(columns=["x", "survival"])

    if hist.is_full:
        values = np.sort(hist.x)[::-1]
        if hist.phi is not None:
            values = values[values > hist.phi]
        survival = np.arange(1, len(values) + 1) / hist.Nc
        return pd.DataFrame({"x": values, "survival": survival})

    first = max(hist.cmin, hist.imin)
    bins = np.arange(hist.imax, first - 1, -1)
    occupied = bins[hist.obs[bins] > 0]
    counts = np.cumsum(hist.obs[bins])[hist.obs[bins] > 0]
    return pd.DataFrame(
        {
            "x": hist.bmin + hist.w * occupied,
            "survival": counts / hist.Nc,
        }
    )


def theory_table(
    hist: "Histogram",
    fx: Callable[[float, Any], float],
    params: Any = None,
) -> pd.DataFrame:
    """Evaluate ``fx(x, params)`` at bin upper bounds over the observed region.

    ``fx`` can be any function of the score: a density, a CDF or a
    survival function. ``params`` is passed through untouched.

    Returns:
        DataFrame with columns ``x`` and ``value``.
    """
    if hist.imax < 0:
        return pd.DataFrame(columns=["x", "value"])
    first = max(hist.cmin, hist.imin)
    xs = hist.bmin + hist.w * (np.arange(first, hist.imax + 1) + 1)
    return pd.DataFrame({"x": xs, "value": [float(fx(x, params)) for x in xs]})


def qq_table(hist: "Histogram", distribution: Any, params: Any = None) -> pd.DataFrame:
    """Quantile-quantile pairs of observed bin bounds and fitted quantiles.

    For each bin in the observed region, the cumulative fraction of the
    modeled data at its upper bound is mapped through the fitted inverse
    CDF. Tail fits are mapped through the part of the distribution above
    ``phi``. The last point, at cumulative fraction 1, is omitted.

    Args:
        hist: Histogram to compare.
        distribution: Fitted distribution providing ``invcdf``.
        params: Parameter block for a plain ``cdf`` function.

    Returns:
        DataFrame with columns ``observed`` and ``expected``.

    Raises:
        NotImplementedError: If the distribution has no inverse CDF.
    """
    dist = as_distribution(distribution, params)
    plan = plan_expectation(hist)
    if hist.imax < 0 or plan.n_modeled == 0:
        return pd.DataFrame(columns=["observed", "expected"])

    first = min(plan.first_bin, hist.nb)
    counted = plan.n_modeled - int(hist.obs[first:].sum())
    base, scale = 0.0, 1.0
    if plan.origin is not None:
        base = dist.evaluate(plan.origin)
        scale = 1.0 - base

    observed, expected = [], []
    for b in range(first, hist.imax + 1):
        counted += int(hist.obs[b])
        p = counted / plan.n_modeled
        if p >= 1.0:
            break
        if p <= 0.0:
            continue
        observed.append(hist.bin_upper_bound(b))
        expected.append(dist.invcdf(base + p * scale))
    return pd.DataFrame({"observed": observed, "expected": expected})


def _theoretical_survival(
    hist: "Histogram", dist: CumulativeDistribution, xs: np.ndarray
) -> np.ndarray:
    """Survival of the fitted distribution on the same ``Nc`` scale as the data."""
    plan = plan_expectation(hist)
    survival = 1.0 - dist.evaluate_many(xs)
    if plan.origin is None:
        return survival
    tail = 1.0 - dist.evaluate(plan.origin)
    if tail <= 0.0:
        return np.zeros(len(xs))
    return (hist.No / hist.Nc) * survival / tail


def _axes(ax: Optional[Axes], figsize: Tuple[int, int]) -> Tuple[Figure, Axes]:
    if ax is None:
        fig, ax = plt.subplots(figsize=figsize)
        return fig, ax
    return ax.get_figure(), ax


def plot_histogram(
    hist: "Histogram",
    ax: Optional[Axes] = None,
    title: str = "Score Histogram",
    figsize: Tuple[int, int] = (10, 6),
) -> Figure:
    """Bar chart of observed counts with the expected counts overlaid.

    Args:
        hist: Histogram to plot.
        ax: Existing axes to draw on; a new figure is created if None.
        title: Plot title.
        figsize: Figure size when a new figure is created.

    Returns:
        Matplotlib figure containing the plot.
    """
    fig, ax = _axes(ax, figsize)
    table = bin_table(hist)
    if not table.empty:
        ax.bar(
            table["lower"],
            table["observed"],
            width=hist.w,
            align="edge",
            color="#0080C6",
            alpha=0.7,
            label="Observed",
        )
        if table["expected"].notna().any():
            ax.step(
                table["upper"],
                table["expected"],
                where="pre",
                color="#D32F2F",
                linewidth=1.5,
                label="Expected",
            )
        if hist.phi is not None:
            ax.axvline(hist.phi, color="gray", linestyle="--", linewidth=1, label="phi")
        ax.legend()

    ax.set_xlabel("Score")
    ax.set_ylabel("Count")
    ax.set_title(title)
    return fig


def plot_survival(
    hist: "Histogram",
    distribution: Any = None,
    params: Any = None,
    ax: Optional[Axes] = None,
    title: str = "Survival Plot",
    figsize: Tuple[int, int] = (10, 6),
) -> Figure:
    """Empirical survival curve on a log scale, optionally against a fit.

    Args:
        hist: Histogram to plot.
        distribution: Fitted distribution to overlay, or None.
        params: Parameter block for a plain ``cdf`` function.
        ax: Existing axes to draw on; a new figure is created if None.
        title: Plot title.
        figsize: Figure size when a new figure is created.

    Returns:
        Matplotlib figure containing the plot.
    """
    fig, ax = _axes(ax, figsize)
    table = survival_table(hist)
    if not table.empty:
        ax.step(table["x"], table["survival"], where="post", color="#0080C6", label="Observed")
        if distribution is not None:
            dist = as_distribution(distribution, params)
            xs = np.sort(table["x"].to_numpy(dtype=float))
            ax.plot(xs, _theoretical_survival(hist, dist, xs), color="#D32F2F", label="Fit")
        ax.set_yscale("log")
        ax.legend()

    ax.set_xlabel("Score")
    ax.set_ylabel("P(X >= x)")
    ax.set_title(title)
    return fig
