"""
Statistic interface and shared building blocks.

A statistic maps a candidate event ``(sender, receiver)`` and the current
network state to a single float. Statistics are immutable dataclasses: their
configuration is validated once at construction and ``compute`` never changes
the state it reads.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
import math
from typing import ClassVar, Iterable, Iterator, List, Sequence, Type, TypeVar, Union

from ..common.exceptions import ConfigurationError, require_positive, validate_parameter
from ..network.state import NetworkState


class StatisticFamily(Enum):
    """Groups of statistics by the structure they read."""
    DYAD = "dyad"
    DEGREE = "degree"
    TRIADIC = "triadic"
    FOUR_CYCLE = "four_cycle"
    NODE = "node"


class RecencyTransform(str, Enum):
    """How elapsed time since the last dyad event is turned into a value."""
    INVERSE = "inverse"
    LOG = "log"
    EXP_DECAY = "exp_decay"


class ActorRole(str, Enum):
    SENDER = "sender"
    RECEIVER = "receiver"


class DegreeType(str, Enum):
    OUT = "out"
    IN = "in"
    TOTAL = "total"


class ClosureType(str, Enum):
    """Two-path patterns between sender and receiver through a third actor k."""
    TRANSITIVE = "transitive"            # s -> k -> r
    CYCLIC = "cyclic"                    # r -> k -> s
    SHARED_SENDER = "shared_sender"      # k -> s, k -> r
    SHARED_RECEIVER = "shared_receiver"  # s -> k, r -> k


class CycleType(str, Enum):
    """Three-path patterns through two intermediaries j and k."""
    OUT_OUT = "out_out"  # s -> j <- k -> r
    IN_IN = "in_in"      # s <- j -> k <- r
    OUT_IN = "out_in"    # s -> j -> k -> r
    IN_OUT = "in_out"    # s <- j <- k <- r
    MIXED = "mixed"      # sum of the four patterns


E = TypeVar("E", bound=Enum)


def coerce_option(enum_cls: Type[E], value: Union[E, str], parameter: str) -> E:
    """
    Convert a string (or enum member) to a member of ``enum_cls``.

    Raises
    ------
    ConfigurationError
        If the value is not one of the enum's values
    """
    if isinstance(value, enum_cls):
        return value
    validate_parameter(value, [member.value for member in enum_cls], parameter)
    return enum_cls(value)


def geometric_weight(n: float, alpha: float) -> float:
    """
    Geometrically down-weighted count ``exp(alpha) * (1 - (1 - exp(-alpha))**n)``.

    Each additional structure adds less than the previous one; the value
    starts at 0 for ``n = 0`` and approaches ``exp(alpha)`` as ``n`` grows.

    Parameters
    ----------
    n : float
        Non-negative count of structures (shared partners, four-cycles)
    alpha : float
        Positive down-weighting parameter. Larger values down-weight less

    Returns
    -------
    float
        Weighted count in ``[0, exp(alpha)]``

    Raises
    ------
    ConfigurationError
        If alpha is not positive

    Examples
    --------
    >>> geometric_weight(0, 0.5)
    0.0
    >>> round(geometric_weight(1, 0.5), 6)
    1.0
    """
    require_positive(alpha, "alpha")
    if n <= 0:
        return 0.0
    return math.exp(alpha) * (1.0 - (1.0 - math.exp(-alpha)) ** n)


@dataclass(frozen=True)
class Statistic(ABC):
    """
    Base class for relational event statistics.

    Subclasses are frozen dataclasses that declare a ``family``, implement
    :meth:`compute` and :meth:`default_name`, and end their field list with
    ``stat_name: Optional[str] = None``, which overrides the default name.
    """

    family: ClassVar[StatisticFamily]

    @abstractmethod
    def compute(self, state: NetworkState, sender: int, receiver: int) -> float:
        """Value of the statistic for a candidate event from sender to receiver."""

    @abstractmethod
    def default_name(self) -> str:
        """Name derived from the statistic's configuration."""

    def name(self) -> str:
        """Column name of this statistic in observation tables."""
        custom = getattr(self, "stat_name", None)
        return custom if custom else self.default_name()


def compute_all(
    statistics: Iterable[Statistic],
    state: NetworkState,
    sender: int,
    receiver: int
) -> List[float]:
    """Compute every statistic for one candidate event, in order."""
    return [float(stat.compute(state, sender, receiver)) for stat in statistics]


class StatisticSet:
    """
    Ordered collection of statistics with unique names.

    Parameters
    ----------
    statistics : Sequence[Statistic]
        Statistics to compute together

    Raises
    ------
    ConfigurationError
        If the set is empty, contains something that is not a Statistic, or
        two statistics share a name

    Examples
    --------
    >>> from remnet.statistics import Repetition, Reciprocity
    >>> stats = StatisticSet([Repetition(), Reciprocity()])
    >>> stats.names
    ['repetition', 'reciprocity']
    """

    def __init__(self, statistics: Sequence[Statistic]) -> None:
        statistics = tuple(statistics)
        if not statistics:
            raise ConfigurationError("At least one statistic is required", parameter="statistics")

        for stat in statistics:
            if not isinstance(stat, Statistic):
                raise ConfigurationError(
                    f"Expected a Statistic, got {type(stat).__name__}",
                    parameter="statistics"
                )

        names = [stat.name() for stat in statistics]
        duplicates = sorted({n for n in names if names.count(n) > 1})
        if duplicates:
            raise ConfigurationError(
                f"Duplicate statistic names: {duplicates}. Pass stat_name= to disambiguate",
                parameter="statistics",
                details={"duplicates": duplicates}
            )

        self._statistics = statistics
        self._names = names

    @property
    def names(self) -> List[str]:
        return list(self._names)

    def compute(self, state: NetworkState, sender: int, receiver: int) -> List[float]:
        return compute_all(self._statistics, state, sender, receiver)

    def __len__(self) -> int:
        return len(self._statistics)

    def __iter__(self) -> Iterator[Statistic]:
        return iter(self._statistics)

    def __getitem__(self, index: int) -> Statistic:
        return self._statistics[index]

    def __repr__(self) -> str:
        return f"StatisticSet({self._names})"
