"""Score histograms with censoring and goodness-of-fit evaluation"""

from ._version import __version__

# Use lazy imports so that importing the package does not pull in matplotlib
# and pandas until reporting is actually used

__all__ = [
    "__version__",
    "CensoringAlreadySetError",
    "CompleteData",
    "Config",
    "CumulativeDistribution",
    "DatasetKind",
    "EmpiricalCDF",
    "FitDescription",
    "FullModeRequiredError",
    "GoodnessOfFitResult",
    "Histogram",
    "HistogramError",
    "IngestionClosedError",
    "InsufficientDataError",
    "ParametricCDF",
    "RankOutOfRangeError",
    "Scenario",
    "ScipyDistribution",
    "TrueCensoring",
    "VirtualCensoring",
    "bin_table",
    "format_histogram",
]


def __getattr__(name):
    """Lazy import modules on first attribute access."""
    if name == "Histogram":
        from .histogram import Histogram

        return Histogram
    elif name == "GoodnessOfFitResult":
        from .goodness import GoodnessOfFitResult

        return GoodnessOfFitResult
    elif name == "Config":
        from .config import Config

        return Config
    elif name in [
        "CumulativeDistribution",
        "EmpiricalCDF",
        "ParametricCDF",
        "ScipyDistribution",
    ]:
        from .distributions import (
            CumulativeDistribution,
            EmpiricalCDF,
            ParametricCDF,
            ScipyDistribution,
        )

        return locals()[name]
    elif name in [
        "CompleteData",
        "DatasetKind",
        "FitDescription",
        "Scenario",
        "TrueCensoring",
        "VirtualCensoring",
    ]:
        from .regimes import (
            CompleteData,
            DatasetKind,
            FitDescription,
            Scenario,
            TrueCensoring,
            VirtualCensoring,
        )

        return locals()[name]
    elif name in [
        "CensoringAlreadySetError",
        "FullModeRequiredError",
        "HistogramError",
        "IngestionClosedError",
        "InsufficientDataError",
        "RankOutOfRangeError",
    ]:
        from .exceptions import (
            CensoringAlreadySetError,
            FullModeRequiredError,
            HistogramError,
            IngestionClosedError,
            InsufficientDataError,
            RankOutOfRangeError,
        )

        return locals()[name]
    elif name == "bin_table" or name == "format_histogram":
        from .reporting import bin_table, format_histogram

        return locals()[name]
    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")
