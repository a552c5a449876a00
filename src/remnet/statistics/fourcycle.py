"""
Four-cycle statistics.

A four-cycle statistic counts three-paths s - j - k - r through two distinct
intermediaries j and k (neither equal to s or r). The event s -> r would
close such a path into a four-cycle. Edge directions along the path define
the cycle type:

- out_out: s -> j <- k -> r
- in_in:   s <- j -> k <- r
- out_in:  s -> j -> k -> r
- in_out:  s <- j <- k <- r
"""

from dataclasses import dataclass
from typing import ClassVar, FrozenSet, Optional, Tuple

from .base import CycleType, Statistic, StatisticFamily, coerce_option, geometric_weight
from ..common.exceptions import require_positive
from ..network.state import NetworkState

Dyad = Tuple[int, int]


def _neighbors(state: NetworkState, actor: int, outgoing: bool) -> FrozenSet[int]:
    return state.out_neighbors(actor) if outgoing else state.in_neighbors(actor)


def _dyad(a: int, b: int, a_sends: bool) -> Dyad:
    return (a, b) if a_sends else (b, a)


# For each pattern: direction of the s-j, j-k and k-r links, each True when
# the first actor of the link is the sender
_PATTERNS = {
    CycleType.OUT_OUT: (True, False, True),
    CycleType.IN_IN: (False, True, False),
    CycleType.OUT_IN: (True, True, True),
    CycleType.IN_OUT: (False, False, False),
}


def _count_pattern(
    state: NetworkState, cycle_type: CycleType, sender: int, receiver: int, weighted: bool
) -> float:
    sj_out, jk_out, kr_out = _PATTERNS[cycle_type]
    focal = {sender, receiver}
    # k -> r means k is an in-neighbour of r, and r -> k an out-neighbour
    closing = _neighbors(state, receiver, not kr_out)

    total = 0.0
    for j in _neighbors(state, sender, sj_out) - focal:
        for k in _neighbors(state, j, jk_out):
            if k in focal or k == j or k not in closing:
                continue
            if not weighted:
                total += 1.0
                continue
            # A three-path is as strong as its weakest dyad
            total += min(
                state.dyad_count(*_dyad(sender, j, sj_out)),
                state.dyad_count(*_dyad(j, k, jk_out)),
                state.dyad_count(*_dyad(k, receiver, kr_out)),
            )
    return total


def count_four_cycles(
    state: NetworkState,
    cycle_type: CycleType,
    sender: int,
    receiver: int,
    weighted: bool = False
) -> float:
    """
    Count (or weight) the three-paths of ``cycle_type`` from sender to receiver.

    ``CycleType.MIXED`` sums the four directed patterns.
    """
    if cycle_type == CycleType.MIXED:
        return sum(_count_pattern(state, pattern, sender, receiver, weighted)
                   for pattern in _PATTERNS)
    return _count_pattern(state, cycle_type, sender, receiver, weighted)


@dataclass(frozen=True)
class FourCycle(Statistic):
    """
    Number of three-paths that the candidate event would close into a four-cycle.

    Parameters
    ----------
    cycle_type : CycleType or str, default "out_out"
        ``"out_out"``, ``"in_in"``, ``"out_in"``, ``"in_out"`` or ``"mixed"``
    weighted : bool, default False
        If True each path contributes the minimum of its three dyad counts
    stat_name : str, optional
        Custom statistic name

    Raises
    ------
    ConfigurationError
        If cycle_type is unknown

    Examples
    --------
    >>> state = NetworkState()
    >>> for s, r, t in [(1, 3, 1.0), (4, 3, 2.0), (4, 2, 3.0)]:
    ...     state.record(Event(s, r, t))
    >>> FourCycle().compute(state, 1, 2)
    1.0
    """
    cycle_type: CycleType = CycleType.OUT_OUT
    weighted: bool = False
    stat_name: Optional[str] = None

    family: ClassVar[StatisticFamily] = StatisticFamily.FOUR_CYCLE

    def __post_init__(self) -> None:
        object.__setattr__(self, "cycle_type",
                           coerce_option(CycleType, self.cycle_type, "cycle_type"))

    def compute(self, state: NetworkState, sender: int, receiver: int) -> float:
        return count_four_cycles(state, self.cycle_type, sender, receiver, self.weighted)

    def default_name(self) -> str:
        return f"four_cycle_{self.cycle_type.value}"


@dataclass(frozen=True)
class GeometricWeightedFourCycles(Statistic):
    """Geometrically weighted number of unweighted four-cycle paths."""
    cycle_type: CycleType = CycleType.OUT_OUT
    alpha: float = 0.5
    stat_name: Optional[str] = None

    family: ClassVar[StatisticFamily] = StatisticFamily.FOUR_CYCLE

    def __post_init__(self) -> None:
        object.__setattr__(self, "cycle_type",
                           coerce_option(CycleType, self.cycle_type, "cycle_type"))
        require_positive(self.alpha, "alpha")

    def compute(self, state: NetworkState, sender: int, receiver: int) -> float:
        n = count_four_cycles(state, self.cycle_type, sender, receiver)
        return geometric_weight(n, self.alpha)

    def default_name(self) -> str:
        return f"gw_four_cycle_{self.cycle_type.value}"
