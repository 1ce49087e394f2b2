"""Exceptions raised by histogram operations.

Every operation validates its preconditions before it writes anything, so a
raised exception always leaves the histogram exactly as it was before the call.

Examples:
    Catching a rejected ingestion::

        try:
            hist.add(3.2)
        except IngestionClosedError as e:
            print(e)
"""


class HistogramError(Exception):
    """Base class for precondition failures on a :class:`Histogram`."""


class IngestionClosedError(HistogramError):
    """Raised when a sample is added after the censoring state was fixed.

    Censoring must be declared only after all data are collated; otherwise
    ``n`` would mix samples from before and after the censoring threshold
    was applied.
    """

    def __init__(self, n: int) -> None:
        self.n = n
        super().__init__(
            f"Cannot add samples: censoring is already fixed on a histogram of {n} samples"
        )


class CensoringAlreadySetError(HistogramError):
    """Raised when a second censoring call is made on the same histogram.

    Attributes:
        current: Name of the regime already in force.
    """

    def __init__(self, current: str) -> None:
        self.current = current
        super().__init__(f"Censoring is one-shot and is already set to {current}")


class FullModeRequiredError(HistogramError):
    """Raised when an operation needs raw samples on a bin-only histogram."""

    def __init__(self, operation: str) -> None:
        self.operation = operation
        super().__init__(
            f"{operation} requires raw samples; create the histogram with create_full()"
        )


class RankOutOfRangeError(HistogramError, IndexError):
    """Raised when an order statistic is requested outside ``[1, n]``."""

    def __init__(self, rank: int, n: int) -> None:
        self.rank = rank
        self.n = n
        super().__init__(f"Rank {rank} is outside [1, {n}]")


class InsufficientDataError(HistogramError):
    """Raised when too few bins or samples remain for a computation.

    Attributes:
        available: Number of bins or samples that could be used.
        required: Minimum number needed.
    """

    def __init__(self, available: int, required: int, what: str = "bins") -> None:
        self.available = available
        self.required = required
        super().__init__(f"Need at least {required} {what}, only {available} available")
