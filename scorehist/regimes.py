"""Censoring regimes and fit descriptions.

A histogram's data are in exactly one of three states:

1. Complete data: every sample was observed and stored.
2. Virtually censored data: every sample is stored, but only those above a
   threshold ``phi`` are treated as observed.
3. Truly censored data: only samples above ``phi`` were stored; ``z`` more
   are known to exist at or below it.

A fitted distribution describes either the complete data or only the tail
above ``phi``. Goodness of fit is always evaluated on the observed data, which
gives the scenarios enumerated by :class:`Scenario`.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Union


class DatasetKind(Enum):
    """Which of the three data regimes is in force."""

    COMPLETE = "complete"
    VIRTUAL_CENSORED = "virtual_censored"
    TRUE_CENSORED = "true_censored"


class FitDescription(Enum):
    """What a fitted distribution is meant to model."""

    COMPLETE_FIT = "complete_fit"
    TAIL_FIT = "tail_fit"


@dataclass(frozen=True)
class CompleteData:
    """No censoring: every sample is observed."""

    kind = DatasetKind.COMPLETE


@dataclass(frozen=True)
class VirtualCensoring:
    """All samples stored; the ``z`` at or below ``phi`` are treated as unobserved."""

    phi: float
    z: int

    kind = DatasetKind.VIRTUAL_CENSORED


@dataclass(frozen=True)
class TrueCensoring:
    """Only samples above ``phi`` were stored; ``z`` more lie at or below it."""

    phi: float
    z: int

    kind = DatasetKind.TRUE_CENSORED


Dataset = Union[CompleteData, VirtualCensoring, TrueCensoring]


class Scenario(Enum):
    """Legal combinations of data regime and fit description.

    Values follow the usual numbering: 1 = complete, 2 = virtual censoring,
    3 = true censoring; a = complete fit, b = tail fit.
    """

    COMPLETE_DATA_COMPLETE_FIT = "1a"
    COMPLETE_DATA_TAIL_FIT = "1b"
    VIRTUAL_CENSORED_COMPLETE_FIT = "2a"
    VIRTUAL_CENSORED_TAIL_FIT = "2b"
    TRUE_CENSORED_COMPLETE_FIT = "3a"
    TRUE_CENSORED_TAIL_FIT = "3b"

    @property
    def is_censored(self) -> bool:
        """Whether goodness of fit is restricted to the tail above ``phi``."""
        return self.value[0] != "1"

    @property
    def is_tail_fit(self) -> bool:
        """Whether the distribution models only the tail."""
        return self.value[1] == "b"


def resolve_scenario(dataset: Dataset, fit: FitDescription) -> Scenario:
    """Map a data regime and fit description onto its :class:`Scenario`.

    Args:
        dataset: Current censoring regime.
        fit: Current fit description.

    Returns:
        The matching scenario.

    Raises:
        TypeError: If ``dataset`` is not one of the three regime variants.
    """
    tail = fit is FitDescription.TAIL_FIT
    if isinstance(dataset, CompleteData):
        return Scenario.COMPLETE_DATA_TAIL_FIT if tail else Scenario.COMPLETE_DATA_COMPLETE_FIT
    if isinstance(dataset, VirtualCensoring):
        return (
            Scenario.VIRTUAL_CENSORED_TAIL_FIT if tail else Scenario.VIRTUAL_CENSORED_COMPLETE_FIT
        )
    if isinstance(dataset, TrueCensoring):
        return Scenario.TRUE_CENSORED_TAIL_FIT if tail else Scenario.TRUE_CENSORED_COMPLETE_FIT
    raise TypeError(f"Unknown dataset regime: {dataset!r}")
