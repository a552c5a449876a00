"""
Node attribute statistics.

These statistics ignore the event history and read exogenous actor
attributes instead: homophily (matching values), mixing between categories,
and numeric main effects and interactions. Attributes are held in a
:class:`NodeAttribute`, which falls back to a default for actors it does not
list.
"""

from dataclasses import dataclass, field
import numbers
from types import MappingProxyType
from typing import Any, ClassVar, Mapping, Optional

from .base import Statistic, StatisticFamily
from ..common.exceptions import ConfigurationError
from ..network.state import NetworkState


@dataclass(frozen=True)
class NodeAttribute:
    """
    Named actor attribute with a default for unlisted actors.

    Parameters
    ----------
    name : str
        Attribute name, used in default statistic names
    values : Mapping[int, Any]
        Attribute value per actor id, stored as a read-only copy
    default : Any, default None
        Value for actors missing from ``values``

    Examples
    --------
    >>> age = NodeAttribute("age", {1: 30, 2: 45}, default=0)
    >>> age[1], age[99]
    (30, 0)
    """
    name: str
    values: Mapping[int, Any] = field(default_factory=dict, hash=False)
    default: Any = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "values", MappingProxyType(dict(self.values)))

    def __getitem__(self, actor: int) -> Any:
        return self.values.get(actor, self.default)

    def is_numeric(self) -> bool:
        """True if every listed value and the default are real numbers."""
        return all(isinstance(v, numbers.Real)
                   for v in list(self.values.values()) + [self.default])


def _require_numeric(attribute: NodeAttribute, statistic: str) -> None:
    if not attribute.is_numeric():
        raise ConfigurationError(
            f"{statistic} requires a numeric attribute, but '{attribute.name}' "
            "has non-numeric values or default",
            parameter="attribute",
            value=attribute.name,
            function=statistic
        )


@dataclass(frozen=True)
class NodeMatch(Statistic):
    """1.0 if sender and receiver have the same attribute value, else 0.0."""
    attribute: NodeAttribute
    stat_name: Optional[str] = None

    family: ClassVar[StatisticFamily] = StatisticFamily.NODE

    def compute(self, state: NetworkState, sender: int, receiver: int) -> float:
        return 1.0 if self.attribute[sender] == self.attribute[receiver] else 0.0

    def default_name(self) -> str:
        return f"match_{self.attribute.name}"


@dataclass(frozen=True)
class NodeMix(Statistic):
    """
    Indicator for one sender-category to receiver-category combination.

    Examples
    --------
    >>> dept = NodeAttribute("dept", {1: "sales", 2: "it"})
    >>> NodeMix(dept, "sales", "it").compute(NetworkState(), 1, 2)
    1.0
    """
    attribute: NodeAttribute
    sender_value: Any
    receiver_value: Any
    stat_name: Optional[str] = None

    family: ClassVar[StatisticFamily] = StatisticFamily.NODE

    def compute(self, state: NetworkState, sender: int, receiver: int) -> float:
        matches = (self.attribute[sender] == self.sender_value
                   and self.attribute[receiver] == self.receiver_value)
        return 1.0 if matches else 0.0

    def default_name(self) -> str:
        return f"mix_{self.attribute.name}_{self.sender_value}_{self.receiver_value}"


@dataclass(frozen=True)
class NodeDifference(Statistic):
    """
    Sender value minus receiver value of a numeric attribute.

    Raises
    ------
    ConfigurationError
        If the attribute is not numeric
    """
    attribute: NodeAttribute
    absolute: bool = False
    stat_name: Optional[str] = None

    family: ClassVar[StatisticFamily] = StatisticFamily.NODE

    def __post_init__(self) -> None:
        _require_numeric(self.attribute, type(self).__name__)

    def compute(self, state: NetworkState, sender: int, receiver: int) -> float:
        diff = float(self.attribute[sender]) - float(self.attribute[receiver])
        return abs(diff) if self.absolute else diff

    def default_name(self) -> str:
        suffix = "_abs" if self.absolute else ""
        return f"diff_{self.attribute.name}{suffix}"


@dataclass(frozen=True)
class NodeSum(Statistic):
    """Sum of a numeric attribute over sender and receiver."""
    attribute: NodeAttribute
    stat_name: Optional[str] = None

    family: ClassVar[StatisticFamily] = StatisticFamily.NODE

    def __post_init__(self) -> None:
        _require_numeric(self.attribute, type(self).__name__)

    def compute(self, state: NetworkState, sender: int, receiver: int) -> float:
        return float(self.attribute[sender]) + float(self.attribute[receiver])

    def default_name(self) -> str:
        return f"sum_{self.attribute.name}"


@dataclass(frozen=True)
class NodeProduct(Statistic):
    """Product of a numeric attribute over sender and receiver."""
    attribute: NodeAttribute
    stat_name: Optional[str] = None

    family: ClassVar[StatisticFamily] = StatisticFamily.NODE

    def __post_init__(self) -> None:
        _require_numeric(self.attribute, type(self).__name__)

    def compute(self, state: NetworkState, sender: int, receiver: int) -> float:
        return float(self.attribute[sender]) * float(self.attribute[receiver])

    def default_name(self) -> str:
        return f"product_{self.attribute.name}"


@dataclass(frozen=True)
class SenderAttribute(Statistic):
    """Numeric attribute of the sender as a main effect."""
    attribute: NodeAttribute
    stat_name: Optional[str] = None

    family: ClassVar[StatisticFamily] = StatisticFamily.NODE

    def __post_init__(self) -> None:
        _require_numeric(self.attribute, type(self).__name__)

    def compute(self, state: NetworkState, sender: int, receiver: int) -> float:
        return float(self.attribute[sender])

    def default_name(self) -> str:
        return f"sender_{self.attribute.name}"


@dataclass(frozen=True)
class ReceiverAttribute(Statistic):
    """Numeric attribute of the receiver as a main effect."""
    attribute: NodeAttribute
    stat_name: Optional[str] = None

    family: ClassVar[StatisticFamily] = StatisticFamily.NODE

    def __post_init__(self) -> None:
        _require_numeric(self.attribute, type(self).__name__)

    def compute(self, state: NetworkState, sender: int, receiver: int) -> float:
        return float(self.attribute[receiver])

    def default_name(self) -> str:
        return f"receiver_{self.attribute.name}"


@dataclass(frozen=True)
class SenderCategorical(Statistic):
    """1.0 if the sender's attribute equals ``value``."""
    attribute: NodeAttribute
    value: Any
    stat_name: Optional[str] = None

    family: ClassVar[StatisticFamily] = StatisticFamily.NODE

    def compute(self, state: NetworkState, sender: int, receiver: int) -> float:
        return 1.0 if self.attribute[sender] == self.value else 0.0

    def default_name(self) -> str:
        return f"sender_{self.attribute.name}_{self.value}"


@dataclass(frozen=True)
class ReceiverCategorical(Statistic):
    """1.0 if the receiver's attribute equals ``value``."""
    attribute: NodeAttribute
    value: Any
    stat_name: Optional[str] = None

    family: ClassVar[StatisticFamily] = StatisticFamily.NODE

    def compute(self, state: NetworkState, sender: int, receiver: int) -> float:
        return 1.0 if self.attribute[receiver] == self.value else 0.0

    def default_name(self) -> str:
        return f"receiver_{self.attribute.name}_{self.value}"
