"""Tests for histogram tables, text rendering and plots."""

import matplotlib

matplotlib.use("Agg")  # pylint: disable=wrong-import-position

import matplotlib.pyplot as plt
from matplotlib.figure import Figure
import numpy as np
import pytest
from scipy import stats

from scorehist._warnings import DataQualityWarning
from scorehist.histogram import Histogram
from scorehist.reporting import (
    BIN_TABLE_COLUMNS,
    bin_table,
    format_histogram,
    plot_histogram,
    plot_survival,
    qq_table,
    survival_table,
    theory_table,
)


class TestBinTable:
    """Test the per-bin table."""

    def test_columns_and_counts(self, small_hist):
        """Rows span the occupied range with counts and bounds."""
        table = bin_table(small_hist)
        assert list(table.columns) == BIN_TABLE_COLUMNS
        assert len(table) == 10
        np.testing.assert_array_equal(table["observed"], [2, 0, 2, 0, 0, 0, 0, 0, 0, 1])
        np.testing.assert_allclose(table["lower"], np.arange(10.0))
        np.testing.assert_allclose(table["upper"], np.arange(1.0, 11.0))
        assert table["cumulative"].iloc[-1] == 5
        assert table["expected"].isna().all()
        assert not table["censored"].any()

    def test_empty(self):
        """An empty histogram gives an empty table."""
        table = bin_table(Histogram.create(0.0, 10.0, 1.0))
        assert table.empty
        assert list(table.columns) == BIN_TABLE_COLUMNS

    def test_expected_and_censored(self, full_midpoints):
        """Expected counts and censored bins are reported."""
        full_midpoints.virt_censor_by_value(3.0)
        full_midpoints.set_expect(stats.uniform(loc=0.0, scale=10.0))
        table = bin_table(full_midpoints)
        np.testing.assert_array_equal(table["censored"], [True] * 3 + [False] * 7)
        np.testing.assert_allclose(table["expected"], [0.0] * 3 + [1.0] * 7)

    def test_stale_expectation_warns(self, small_hist):
        """An expectation from a smaller grid is not reported."""
        small_hist.set_expect(stats.uniform(loc=0.0, scale=10.0))
        small_hist.add(25.0)
        with pytest.warns(DataQualityWarning, match="different grid"):
            table = bin_table(small_hist)
        assert table["expected"].isna().all()

    def test_expectation_from_before_censoring_warns(self, full_midpoints):
        """An expectation computed before censoring is not reported."""
        full_midpoints.set_expect(stats.uniform(loc=0.0, scale=10.0))
        full_midpoints.virt_censor_by_value(3.0)
        with pytest.warns(DataQualityWarning, match="scenario"):
            table = bin_table(full_midpoints)
        assert table["expected"].isna().all()


class TestFormatHistogram:
    """Test the plain-text rendering."""

    def test_layout(self, small_hist):
        """One line per bin plus a footer with the counts."""
        text = format_histogram(small_hist)
        lines = text.splitlines()
        assert lines[0].endswith("|" + "=" * 58)
        assert lines[1].endswith("|")
        assert lines[-1] == "n = 5, observed = 5, complete = 5"

    def test_censored(self, full_midpoints):
        """Censored bins are marked and phi is reported."""
        full_midpoints.virt_censor_by_value(3.0)
        text = format_histogram(full_midpoints)
        lines = text.splitlines()
        assert "*|" in lines[0]
        assert "*|" not in lines[3]
        assert "n = 10, observed = 7, complete = 10" in text
        assert lines[-1] == "censored at phi = 3 (z = 3)"

    def test_empty(self):
        """An empty histogram says so."""
        assert format_histogram(Histogram.create(0.0, 10.0, 1.0)) == "(empty histogram)"


class TestSurvivalTable:
    """Test the empirical survival function."""

    def test_full(self, full_midpoints):
        """Full mode is exact at every raw sample."""
        table = survival_table(full_midpoints)
        assert len(table) == 10
        assert table["x"].iloc[0] == 9.5
        assert table["survival"].iloc[0] == pytest.approx(0.1)
        assert table["survival"].iloc[-1] == pytest.approx(1.0)

    def test_bin_only(self, midpoints):
        """Bin-only mode uses the lower bounds of occupied bins."""
        hist = Histogram.create(0.0, 10.0, 1.0)
        hist.add_many(midpoints)
        table = survival_table(hist)
        assert table["x"].iloc[0] == 9.0
        assert table["survival"].iloc[0] == pytest.approx(0.1)
        assert len(table) == 10

    def test_censored(self, full_midpoints):
        """Only observed samples appear; survival is on the Nc scale."""
        full_midpoints.virt_censor_by_value(3.0)
        table = survival_table(full_midpoints)
        assert len(table) == 7
        assert table["x"].min() == 3.5
        assert table["survival"].iloc[-1] == pytest.approx(0.7)


class TestTheoryTable:
    """Test evaluating an arbitrary function over the observed region."""

    def test_values(self, full_midpoints):
        """The function is called at each upper bound with the given params."""
        table = theory_table(full_midpoints, lambda x, p: p * x, params=2.0)
        np.testing.assert_allclose(table["x"], np.arange(1.0, 11.0))
        np.testing.assert_allclose(table["value"], 2.0 * np.arange(1.0, 11.0))

    def test_starts_at_cmin(self, full_midpoints):
        """Censored bins are left out."""
        full_midpoints.virt_censor_by_value(3.0)
        table = theory_table(full_midpoints, lambda x, p: x)
        assert table["x"].iloc[0] == 4.0


class TestQQTable:
    """Test quantile-quantile pairs."""

    def test_uniform(self, full_midpoints):
        """Matching data and distribution lie on the diagonal."""
        table = qq_table(full_midpoints, stats.uniform(loc=0.0, scale=10.0))
        assert len(table) == 9
        np.testing.assert_allclose(table["observed"], np.arange(1.0, 10.0))
        np.testing.assert_allclose(table["expected"], np.arange(1.0, 10.0))

    def test_tail_fit(self, full_midpoints):
        """Tail fits map through the part of the distribution above phi."""
        full_midpoints.virt_censor_by_value(5.0)
        full_midpoints.set_tailfitting()
        table = qq_table(full_midpoints, stats.uniform(loc=0.0, scale=10.0))
        np.testing.assert_allclose(table["observed"], [6.0, 7.0, 8.0, 9.0])
        np.testing.assert_allclose(table["expected"], [6.0, 7.0, 8.0, 9.0])


class TestPlots:
    """Test that plots render."""

    def test_plot_histogram(self, full_midpoints):
        """The histogram plot returns a figure."""
        full_midpoints.set_expect(stats.uniform(loc=0.0, scale=10.0))
        fig = plot_histogram(full_midpoints)
        assert isinstance(fig, Figure)
        plt.close(fig)

    def test_plot_survival(self, full_midpoints):
        """The survival plot uses a log scale and can overlay a fit."""
        full_midpoints.virt_censor_by_value(3.0)
        full_midpoints.set_tailfitting()
        fig = plot_survival(full_midpoints, stats.uniform(loc=0.0, scale=10.0))
        assert isinstance(fig, Figure)
        assert fig.axes[0].get_yscale() == "log"
        plt.close(fig)

    def test_existing_axes(self, small_hist):
        """Plots draw on axes supplied by the caller."""
        fig, ax = plt.subplots()
        assert plot_histogram(small_hist, ax=ax) is fig
        plt.close(fig)
