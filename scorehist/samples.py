"""Growable buffer of raw sample values with order-statistic queries."""

import logging

import numpy as np

from .exceptions import RankOutOfRangeError

logger = logging.getLogger(__name__)

_INITIAL_CAPACITY = 128


class RawSampleStore:
    """Raw sample buffer whose capacity doubles as it fills.

    Samples are kept in insertion order until :meth:`sort` is called; any
    later :meth:`append` clears the sortedness flag again.
    """

    def __init__(self, capacity: int = _INITIAL_CAPACITY):
        """Initialize an empty buffer.

        Args:
            capacity: Initial number of slots.
        """
        self._data = np.empty(max(1, capacity), dtype=float)
        self.n = 0
        self.is_sorted = True

    @property
    def capacity(self) -> int:
        """Number of allocated slots."""
        return len(self._data)

    @property
    def values(self) -> np.ndarray:
        """Read-only view of the ``n`` stored samples."""
        view = self._data[: self.n]
        view.flags.writeable = False
        return view

    def append(self, x: float) -> None:
        """Store one sample, doubling capacity when full."""
        if self.n == len(self._data):
            grown = np.empty(2 * len(self._data), dtype=float)
            grown[: self.n] = self._data[: self.n]
            self._data = grown
        self._data[self.n] = x
        self.n += 1
        self.is_sorted = False

    def sort(self) -> None:
        """Sort samples ascending; a no-op when already sorted."""
        if self.is_sorted:
            return
        self._data[: self.n].sort()
        self.is_sorted = True
        logger.debug("Sorted %d raw samples", self.n)

    def at_rank(self, rank: int) -> float:
        """Return the ``rank``-th smallest sample (1 = smallest).

        Raises:
            RankOutOfRangeError: If ``rank`` is outside ``[1, n]``.
        """
        if rank < 1 or rank > self.n:
            raise RankOutOfRangeError(rank, self.n)
        self.sort()
        return float(self._data[rank - 1])

    def count_at_or_below(self, phi: float) -> int:
        """Number of stored samples ``<= phi``."""
        if self.is_sorted:
            return int(np.searchsorted(self._data[: self.n], phi, side="right"))
        return int(np.count_nonzero(self._data[: self.n] <= phi))
