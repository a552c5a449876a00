"""
Triadic closure statistics.

Each statistic counts third actors k that connect the focal sender s and
receiver r through a two-path of a given shape:

- transitive closure: s -> k -> r
- cyclic closure: r -> k -> s
- shared sender: k -> s and k -> r
- shared receiver: s -> k and r -> k

Neighbourhoods come from the recorded history, so a partner counts once it
has interacted at all. The focal actors are never their own partners.
"""

from dataclasses import dataclass
from typing import Callable, ClassVar, Dict, FrozenSet, Optional, Tuple

from .base import ClosureType, Statistic, StatisticFamily, coerce_option, geometric_weight
from ..common.exceptions import require_positive
from ..network.state import NetworkState


def _two_path_partners(
    state: NetworkState, closure_type: ClosureType, sender: int, receiver: int
) -> FrozenSet[int]:
    """Third actors forming a two-path of the given shape, focal actors excluded."""
    if closure_type == ClosureType.TRANSITIVE:
        partners = state.out_neighbors(sender) & state.in_neighbors(receiver)
    elif closure_type == ClosureType.CYCLIC:
        partners = state.out_neighbors(receiver) & state.in_neighbors(sender)
    elif closure_type == ClosureType.SHARED_SENDER:
        partners = state.in_neighbors(sender) & state.in_neighbors(receiver)
    else:
        partners = state.out_neighbors(sender) & state.out_neighbors(receiver)
    return partners - {sender, receiver}


# The two dyads forming each two-path, as functions of (s, r, k)
_TWO_PATH_DYADS: Dict[ClosureType, Callable[[int, int, int], Tuple[Tuple[int, int], Tuple[int, int]]]] = {
    ClosureType.TRANSITIVE: lambda s, r, k: ((s, k), (k, r)),
    ClosureType.CYCLIC: lambda s, r, k: ((r, k), (k, s)),
    ClosureType.SHARED_SENDER: lambda s, r, k: ((k, s), (k, r)),
    ClosureType.SHARED_RECEIVER: lambda s, r, k: ((s, k), (r, k)),
}


def _closure_value(
    state: NetworkState, closure_type: ClosureType, sender: int, receiver: int, weighted: bool
) -> float:
    partners = _two_path_partners(state, closure_type, sender, receiver)
    if not weighted:
        return float(len(partners))

    # Each two-path is as strong as its weaker dyad
    dyads = _TWO_PATH_DYADS[closure_type]
    total = 0.0
    for k in partners:
        first, second = dyads(sender, receiver, k)
        total += min(state.dyad_count(*first), state.dyad_count(*second))
    return total


@dataclass(frozen=True)
class TransitiveClosure(Statistic):
    """
    Number of actors k with s -> k and k -> r.

    With ``weighted=True`` each k contributes
    ``min(count(s, k), count(k, r))`` instead of 1.

    Examples
    --------
    >>> state = NetworkState()
    >>> state.record(Event(1, 3, 1.0))
    >>> state.record(Event(3, 2, 2.0))
    >>> TransitiveClosure().compute(state, 1, 2)
    1.0
    """
    weighted: bool = False
    stat_name: Optional[str] = None

    family: ClassVar[StatisticFamily] = StatisticFamily.TRIADIC

    def compute(self, state: NetworkState, sender: int, receiver: int) -> float:
        return _closure_value(state, ClosureType.TRANSITIVE, sender, receiver, self.weighted)

    def default_name(self) -> str:
        return "transitive_closure"


@dataclass(frozen=True)
class CyclicClosure(Statistic):
    """Number of actors k with r -> k and k -> s."""
    weighted: bool = False
    stat_name: Optional[str] = None

    family: ClassVar[StatisticFamily] = StatisticFamily.TRIADIC

    def compute(self, state: NetworkState, sender: int, receiver: int) -> float:
        return _closure_value(state, ClosureType.CYCLIC, sender, receiver, self.weighted)

    def default_name(self) -> str:
        return "cyclic_closure"


@dataclass(frozen=True)
class SharedSender(Statistic):
    """Number of actors k that have sent to both s and r."""
    weighted: bool = False
    stat_name: Optional[str] = None

    family: ClassVar[StatisticFamily] = StatisticFamily.TRIADIC

    def compute(self, state: NetworkState, sender: int, receiver: int) -> float:
        return _closure_value(state, ClosureType.SHARED_SENDER, sender, receiver, self.weighted)

    def default_name(self) -> str:
        return "shared_sender"


@dataclass(frozen=True)
class SharedReceiver(Statistic):
    """Number of actors k that have received from both s and r."""
    weighted: bool = False
    stat_name: Optional[str] = None

    family: ClassVar[StatisticFamily] = StatisticFamily.TRIADIC

    def compute(self, state: NetworkState, sender: int, receiver: int) -> float:
        return _closure_value(state, ClosureType.SHARED_RECEIVER, sender, receiver, self.weighted)

    def default_name(self) -> str:
        return "shared_receiver"


@dataclass(frozen=True)
class CommonNeighbors(Statistic):
    """Number of actors that have interacted, in any direction, with both s and r."""
    stat_name: Optional[str] = None

    family: ClassVar[StatisticFamily] = StatisticFamily.TRIADIC

    def compute(self, state: NetworkState, sender: int, receiver: int) -> float:
        sender_nbrs = state.out_neighbors(sender) | state.in_neighbors(sender)
        receiver_nbrs = state.out_neighbors(receiver) | state.in_neighbors(receiver)
        return float(len((sender_nbrs & receiver_nbrs) - {sender, receiver}))

    def default_name(self) -> str:
        return "common_neighbors"


@dataclass(frozen=True)
class GeometricWeightedTriads(Statistic):
    """
    Geometrically weighted count of two-path partners.

    Applies :func:`~remnet.statistics.base.geometric_weight` to the number
    of partners for the chosen closure shape, so that the first shared
    partner matters most.

    Parameters
    ----------
    closure_type : ClosureType or str, default "transitive"
        ``"transitive"``, ``"cyclic"``, ``"shared_sender"`` or ``"shared_receiver"``
    alpha : float, default 0.5
        Positive down-weighting parameter
    stat_name : str, optional
        Custom statistic name

    Raises
    ------
    ConfigurationError
        If closure_type is unknown or alpha is not positive
    """
    closure_type: ClosureType = ClosureType.TRANSITIVE
    alpha: float = 0.5
    stat_name: Optional[str] = None

    family: ClassVar[StatisticFamily] = StatisticFamily.TRIADIC

    def __post_init__(self) -> None:
        object.__setattr__(self, "closure_type",
                           coerce_option(ClosureType, self.closure_type, "closure_type"))
        require_positive(self.alpha, "alpha")

    def compute(self, state: NetworkState, sender: int, receiver: int) -> float:
        n = len(_two_path_partners(state, self.closure_type, sender, receiver))
        return geometric_weight(n, self.alpha)

    def default_name(self) -> str:
        return f"gw_{self.closure_type.value}"
