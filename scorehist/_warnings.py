"""Custom warning classes for the scorehist package.

These warning classes allow users to programmatically filter, suppress,
or capture warnings using Python's standard ``warnings`` module.

Example:
    Suppress data-quality warnings during a batch of fits::

        import warnings
        from scorehist._warnings import DataQualityWarning

        warnings.filterwarnings("ignore", category=DataQualityWarning)

    Capture them instead::

        with warnings.catch_warnings(record=True) as w:
            warnings.simplefilter("always", DataQualityWarning)
            hist.true_censoring(z=10, phi=2.0)
            issues = [x for x in w if issubclass(x.category, DataQualityWarning)]
"""


class ScoreHistWarning(UserWarning):
    """Base class for all scorehist warnings."""


class DataQualityWarning(ScoreHistWarning):
    """Runtime data-quality observations.

    Raised when stored samples contradict a declared censoring threshold,
    when a caller-supplied CDF decreases between bin edges, or when an
    expectation array no longer matches a grid that has since grown.
    """
