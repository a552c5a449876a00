"""
Degree statistics: activity and popularity of the focal actors.

Activity is the weighted out-degree (events sent), popularity the weighted
in-degree (events received). Both decay with the network state.
"""

from dataclasses import dataclass
import math
from typing import ClassVar, Optional

from .base import ActorRole, DegreeType, Statistic, StatisticFamily, coerce_option
from ..network.state import NetworkState


def _degree(state: NetworkState, actor: int, degree_type: DegreeType) -> float:
    if degree_type == DegreeType.OUT:
        return state.out_degree(actor)
    if degree_type == DegreeType.IN:
        return state.in_degree(actor)
    return state.out_degree(actor) + state.in_degree(actor)


@dataclass(frozen=True)
class SenderActivity(Statistic):
    """Out-degree of the sender."""
    stat_name: Optional[str] = None

    family: ClassVar[StatisticFamily] = StatisticFamily.DEGREE

    def compute(self, state: NetworkState, sender: int, receiver: int) -> float:
        return state.out_degree(sender)

    def default_name(self) -> str:
        return "sender_activity"


@dataclass(frozen=True)
class ReceiverActivity(Statistic):
    """Out-degree of the receiver."""
    stat_name: Optional[str] = None

    family: ClassVar[StatisticFamily] = StatisticFamily.DEGREE

    def compute(self, state: NetworkState, sender: int, receiver: int) -> float:
        return state.out_degree(receiver)

    def default_name(self) -> str:
        return "receiver_activity"


@dataclass(frozen=True)
class SenderPopularity(Statistic):
    """In-degree of the sender."""
    stat_name: Optional[str] = None

    family: ClassVar[StatisticFamily] = StatisticFamily.DEGREE

    def compute(self, state: NetworkState, sender: int, receiver: int) -> float:
        return state.in_degree(sender)

    def default_name(self) -> str:
        return "sender_popularity"


@dataclass(frozen=True)
class ReceiverPopularity(Statistic):
    """In-degree of the receiver."""
    stat_name: Optional[str] = None

    family: ClassVar[StatisticFamily] = StatisticFamily.DEGREE

    def compute(self, state: NetworkState, sender: int, receiver: int) -> float:
        return state.in_degree(receiver)

    def default_name(self) -> str:
        return "receiver_popularity"


@dataclass(frozen=True)
class TotalDegree(Statistic):
    """
    In-degree plus out-degree of the sender or the receiver.

    Parameters
    ----------
    role : ActorRole or str, default "sender"
        Whose degree to use
    stat_name : str, optional
        Custom statistic name

    Raises
    ------
    ConfigurationError
        If role is not "sender" or "receiver"
    """
    role: ActorRole = ActorRole.SENDER
    stat_name: Optional[str] = None

    family: ClassVar[StatisticFamily] = StatisticFamily.DEGREE

    def __post_init__(self) -> None:
        object.__setattr__(self, "role", coerce_option(ActorRole, self.role, "role"))

    def compute(self, state: NetworkState, sender: int, receiver: int) -> float:
        actor = sender if self.role == ActorRole.SENDER else receiver
        return _degree(state, actor, DegreeType.TOTAL)

    def default_name(self) -> str:
        return f"{self.role.value}_total_degree"


@dataclass(frozen=True)
class DegreeDifference(Statistic):
    """
    Sender degree minus receiver degree.

    Parameters
    ----------
    degree_type : DegreeType or str, default "out"
        ``"out"``, ``"in"`` or ``"total"``
    absolute : bool, default False
        Return the absolute difference
    stat_name : str, optional
        Custom statistic name
    """
    degree_type: DegreeType = DegreeType.OUT
    absolute: bool = False
    stat_name: Optional[str] = None

    family: ClassVar[StatisticFamily] = StatisticFamily.DEGREE

    def __post_init__(self) -> None:
        object.__setattr__(self, "degree_type",
                           coerce_option(DegreeType, self.degree_type, "degree_type"))

    def compute(self, state: NetworkState, sender: int, receiver: int) -> float:
        diff = (_degree(state, sender, self.degree_type)
                - _degree(state, receiver, self.degree_type))
        return abs(diff) if self.absolute else diff

    def default_name(self) -> str:
        suffix = "_abs" if self.absolute else ""
        return f"degree_diff_{self.degree_type.value}{suffix}"


@dataclass(frozen=True)
class LogDegree(Statistic):
    """``log(1 + degree)`` of the sender or the receiver."""
    role: ActorRole = ActorRole.SENDER
    degree_type: DegreeType = DegreeType.OUT
    stat_name: Optional[str] = None

    family: ClassVar[StatisticFamily] = StatisticFamily.DEGREE

    def __post_init__(self) -> None:
        object.__setattr__(self, "role", coerce_option(ActorRole, self.role, "role"))
        object.__setattr__(self, "degree_type",
                           coerce_option(DegreeType, self.degree_type, "degree_type"))

    def compute(self, state: NetworkState, sender: int, receiver: int) -> float:
        actor = sender if self.role == ActorRole.SENDER else receiver
        return math.log1p(_degree(state, actor, self.degree_type))

    def default_name(self) -> str:
        return f"log_{self.role.value}_{self.degree_type.value}_degree"
