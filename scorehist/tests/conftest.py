"""Pytest configuration and shared fixtures."""

import numpy as np
import pytest

from scorehist.histogram import Histogram


@pytest.fixture
def rng():
    """Seeded random generator."""
    return np.random.default_rng(42)


@pytest.fixture
def small_hist():
    """Bin-only histogram on (0, 10] with unit bins and five samples.

    Counts are bin 0: 2, bin 2: 2, bin 9: 1.
    """
    hist = Histogram.create(0.0, 10.0, 1.0)
    for x in [0.5, 1.0, 2.5, 2.7, 9.9]:
        hist.add(x)
    return hist


@pytest.fixture
def midpoints():
    """Ten samples at the midpoints of the unit bins on (0, 10]."""
    return [b + 0.5 for b in range(10)]


@pytest.fixture
def full_midpoints(midpoints):
    """Full histogram holding one sample in the middle of each unit bin."""
    hist = Histogram.create_full(0.0, 10.0, 1.0)
    hist.add_many(midpoints)
    return hist


@pytest.fixture
def normal_samples(rng):
    """Two thousand standard normal samples."""
    return rng.normal(loc=0.0, scale=1.0, size=2000)
