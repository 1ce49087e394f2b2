"""Fixed-width bin grid arithmetic and the growable bin-count store.

Bins are left-open and right-closed: bin ``b`` holds samples ``x`` with
``w*b + bmin < x <= w*(b+1) + bmin``. A sample lying exactly on a bin edge is
therefore counted in the lower-numbered bin.

Example:
    >>> store = BinStore(bmin=0.0, bmax=10.0, w=1.0)
    >>> store.add(1.0)
    0
    >>> store.add(-3.0)   # grows the grid downward
    4
    >>> store.bmin
    -8.0
"""

import logging
import math

import numpy as np

logger = logging.getLogger(__name__)

# Relative slack used when (bmax - bmin) / w is an integer up to rounding error
_GRID_RTOL = 1e-9


def bin_lower_bound(bmin: float, w: float, b: int) -> float:
    """Lower (exclusive) edge of bin ``b``."""
    return w * b + bmin


def bin_upper_bound(bmin: float, w: float, b: int) -> float:
    """Upper (inclusive) edge of bin ``b``."""
    return w * (b + 1) + bmin


def score_to_bin(bmin: float, w: float, x: float) -> int:
    """Index of the bin that holds ``x``.

    The index may be negative or beyond the current number of bins; the
    caller decides whether to grow the grid.
    """
    return int(math.ceil((x - bmin) / w - 1.0))


def _initial_bin_count(bmin: float, bmax: float, w: float) -> int:
    span = (bmax - bmin) / w
    nearest = round(span)
    if abs(span - nearest) <= _GRID_RTOL * max(1.0, abs(span)):
        return max(1, int(nearest))
    return max(1, int(math.ceil(span)))


class BinStore:
    """Per-bin integer counts on a grid that only ever grows outward.

    Attributes:
        w: Fixed bin width.
        bmin: Lower edge of bin 0.
        nb: Number of bins.
        obs: Count array of length ``nb``.
        imin: Smallest bin with a non-zero count (``nb`` while empty).
        imax: Largest bin with a non-zero count (``-1`` while empty).
    """

    def __init__(self, bmin: float, bmax: float, w: float):
        """Initialize an empty grid covering at least ``(bmin, bmax]``.

        Args:
            bmin: Initial lower bound of the grid.
            bmax: Initial upper bound of the grid.
            w: Bin width.

        Raises:
            ValueError: If the bounds are not finite, ``w <= 0`` or ``bmin >= bmax``.
        """
        if not (math.isfinite(bmin) and math.isfinite(bmax) and math.isfinite(w)):
            raise ValueError(f"Grid bounds and width must be finite, got ({bmin}, {bmax}, {w})")
        if w <= 0:
            raise ValueError(f"Bin width must be positive, got {w}")
        if bmin >= bmax:
            raise ValueError(f"bmin must be below bmax, got bmin={bmin}, bmax={bmax}")

        self.w = float(w)
        self.bmin = float(bmin)
        self.nb = _initial_bin_count(self.bmin, float(bmax), self.w)
        self.obs = np.zeros(self.nb, dtype=np.int64)
        self.imin = self.nb
        self.imax = -1

    @property
    def bmax(self) -> float:
        """Upper edge of the last bin."""
        return bin_upper_bound(self.bmin, self.w, self.nb - 1)

    @property
    def total(self) -> int:
        """Sum of all bin counts."""
        return int(self.obs.sum())

    @property
    def is_empty(self) -> bool:
        """Whether no sample has been counted yet."""
        return self.imax < 0

    def lower_bound(self, b: int) -> float:
        """Lower edge of bin ``b`` on the current grid."""
        return bin_lower_bound(self.bmin, self.w, b)

    def upper_bound(self, b: int) -> float:
        """Upper edge of bin ``b`` on the current grid."""
        return bin_upper_bound(self.bmin, self.w, b)

    def bin_of(self, x: float) -> int:
        """Bin index of ``x`` on the current grid, without growing it."""
        return score_to_bin(self.bmin, self.w, x)

    def edges(self) -> np.ndarray:
        """All ``nb + 1`` bin edges, lowest first."""
        return self.bmin + self.w * np.arange(self.nb + 1, dtype=float)

    def add(self, x: float) -> int:
        """Count one sample, growing the grid if ``x`` falls outside it.

        Args:
            x: Finite sample value.

        Returns:
            Index of the bin that received the sample, on the grown grid.
        """
        bi = self.bin_of(x)
        if bi < 0:
            bi += self._grow_below(2 * -bi)
        elif bi >= self.nb:
            self._grow_above(2 * (bi - self.nb + 1))

        self.obs[bi] += 1
        if bi > self.imax:
            self.imax = bi
        if bi < self.imin:
            self.imin = bi
        return bi

    def count_below(self, b: int) -> int:
        """Total count in bins ``0..b-1``."""
        if b <= 0:
            return 0
        return int(self.obs[: min(b, self.nb)].sum())

    def _grow_below(self, nnew: int) -> int:
        """Prepend ``nnew`` empty bins; return the index shift of old bins."""
        grown = np.zeros(self.nb + nnew, dtype=np.int64)
        grown[nnew:] = self.obs
        was_empty = self.is_empty

        self.obs = grown
        self.nb += nnew
        self.bmin -= nnew * self.w
        if was_empty:
            self.imin = self.nb
        else:
            self.imin += nnew
            self.imax += nnew
        logger.debug("Grew grid by %d bins below; bmin is now %g", nnew, self.bmin)
        return nnew

    def _grow_above(self, nnew: int) -> None:
        """Append ``nnew`` empty bins."""
        grown = np.zeros(self.nb + nnew, dtype=np.int64)
        grown[: self.nb] = self.obs
        was_empty = self.is_empty

        self.obs = grown
        self.nb += nnew
        if was_empty:
            self.imin = self.nb
        logger.debug("Grew grid by %d bins above; bmax is now %g", nnew, self.bmax)
