"""
Dyad history statistics.

These statistics read the past events on the focal dyad itself: how often the
sender has addressed the receiver, whether the receiver has addressed the
sender, and how recently either happened.
"""

from dataclasses import dataclass, field
import math
from types import MappingProxyType
from typing import ClassVar, Mapping, Optional, Tuple

from .base import RecencyTransform, Statistic, StatisticFamily, coerce_option
from ..common.exceptions import ComputationError, require_positive
from ..common.timeutils import seconds_between
from ..network.state import NetworkState


@dataclass(frozen=True)
class Repetition(Statistic):
    """
    Weighted count of past events from sender to receiver.

    With ``directed=False`` events in both directions are counted.
    """
    directed: bool = True
    stat_name: Optional[str] = None

    family: ClassVar[StatisticFamily] = StatisticFamily.DYAD

    def compute(self, state: NetworkState, sender: int, receiver: int) -> float:
        if self.directed:
            return state.dyad_count(sender, receiver)
        return state.undirected_count(sender, receiver)

    def default_name(self) -> str:
        return "repetition" if self.directed else "undirected_repetition"


@dataclass(frozen=True)
class Reciprocity(Statistic):
    """Weighted count of past events from receiver back to sender."""
    stat_name: Optional[str] = None

    family: ClassVar[StatisticFamily] = StatisticFamily.DYAD

    def compute(self, state: NetworkState, sender: int, receiver: int) -> float:
        return state.dyad_count(receiver, sender)

    def default_name(self) -> str:
        return "reciprocity"


@dataclass(frozen=True)
class Inertia(Statistic):
    """
    Weighted combination of repetition and reciprocity.

    ``repetition_weight * count(s, r) + reciprocity_weight * count(r, s)``
    """
    repetition_weight: float = 1.0
    reciprocity_weight: float = 1.0
    stat_name: Optional[str] = None

    family: ClassVar[StatisticFamily] = StatisticFamily.DYAD

    def compute(self, state: NetworkState, sender: int, receiver: int) -> float:
        return (self.repetition_weight * state.dyad_count(sender, receiver)
                + self.reciprocity_weight * state.dyad_count(receiver, sender))

    def default_name(self) -> str:
        return "inertia"


@dataclass(frozen=True)
class Recency(Statistic):
    """
    How recently the focal dyad was last active.

    The elapsed time ``dt`` (seconds) between the current state time and the
    last event on the dyad is transformed into a value that is larger for
    more recent activity. The value is 0 when the dyad has no prior event or
    ``dt`` is not positive.

    Parameters
    ----------
    directed : bool, default True
        If False, the most recent event in either direction is used
    transform : RecencyTransform or str, default "inverse"
        ``"inverse"`` gives ``1 / dt``, ``"log"`` gives ``1 / log(1 + dt)``
        and ``"exp_decay"`` gives ``exp(-decay * dt)``
    decay : float, default 1.0
        Rate for the ``"exp_decay"`` transform
    stat_name : str, optional
        Custom statistic name

    Raises
    ------
    ConfigurationError
        If the transform is unknown or decay is negative

    Examples
    --------
    >>> state = NetworkState()
    >>> state.record(Event(1, 2, 0.0))
    >>> state.advance(4.0)
    >>> Recency().compute(state, 1, 2)
    0.25
    """
    directed: bool = True
    transform: RecencyTransform = RecencyTransform.INVERSE
    decay: float = 1.0
    stat_name: Optional[str] = None

    family: ClassVar[StatisticFamily] = StatisticFamily.DYAD

    def __post_init__(self) -> None:
        object.__setattr__(self, "transform",
                           coerce_option(RecencyTransform, self.transform, "transform"))
        require_positive(self.decay, "decay", allow_zero=True)

    def compute(self, state: NetworkState, sender: int, receiver: int) -> float:
        last = state.last_event_time(sender, receiver)
        if not self.directed:
            reverse = state.last_event_time(receiver, sender)
            if last is None or (reverse is not None and reverse > last):
                last = reverse
        if last is None:
            return 0.0

        dt = seconds_between(state.current_time, last)
        if dt <= 0:
            return 0.0

        if self.transform == RecencyTransform.INVERSE:
            return 1.0 / dt
        if self.transform == RecencyTransform.LOG:
            return 1.0 / math.log1p(dt)
        if self.transform == RecencyTransform.EXP_DECAY:
            return math.exp(-self.decay * dt)
        raise ComputationError(
            f"Unknown recency transform {self.transform!r}",
            operation="Recency.compute",
            error_type="dispatch"
        )

    def default_name(self) -> str:
        return f"recency_{RecencyTransform(self.transform).value}"


@dataclass(frozen=True)
class DyadCovariate(Statistic):
    """
    Exogenous dyad-level covariate looked up by ``(sender, receiver)``.

    Dyads missing from ``values`` take ``default``.

    Examples
    --------
    >>> distance = DyadCovariate({(1, 2): 3.5}, stat_name="distance")
    >>> distance.compute(NetworkState(), 1, 2)
    3.5
    >>> distance.compute(NetworkState(), 2, 1)
    0.0
    """
    values: Mapping[Tuple[int, int], float] = field(default_factory=dict, hash=False)
    default: float = 0.0
    stat_name: Optional[str] = None

    family: ClassVar[StatisticFamily] = StatisticFamily.DYAD

    def __post_init__(self) -> None:
        object.__setattr__(self, "values", MappingProxyType(
            {tuple(k): float(v) for k, v in dict(self.values).items()}))
        object.__setattr__(self, "default", float(self.default))

    def compute(self, state: NetworkState, sender: int, receiver: int) -> float:
        return self.values.get((sender, receiver), self.default)

    def default_name(self) -> str:
        return "dyad_covariate"
