"""
Relational events and time-ordered event logs.

An Event is one directed, time-stamped interaction between two actors. An
EventLog keeps events sorted by time and tracks the actors and event types
seen so far. Both are plain in-memory containers: reading tables into them
lives in :mod:`remnet.events.loading`.
"""

from bisect import bisect_right
from dataclasses import dataclass
import math
from typing import Any, FrozenSet, Iterable, Iterator, List, Optional, Set

from ..common.exceptions import ValidationError
from ..common.timeutils import elapsed_seconds


@dataclass(frozen=True)
class Event:
    """
    A single relational event: ``sender`` acted towards ``receiver`` at ``time``.

    Parameters
    ----------
    sender : int
        Actor id of the event source
    receiver : int
        Actor id of the event target
    time : Any
        Event time; any totally ordered value whose differences are numbers,
        ``timedelta`` or ``numpy.timedelta64``
    event_type : str, default "event"
        Type or category of the event
    weight : float, default 1.0
        Non-negative magnitude of the event

    Raises
    ------
    ValidationError
        If the weight is negative or not finite

    Examples
    --------
    >>> Event(1, 2, 3.0)
    Event(sender=1, receiver=2, time=3.0, event_type='event', weight=1.0)
    """
    sender: int
    receiver: int
    time: Any
    event_type: str = "event"
    weight: float = 1.0

    def __post_init__(self) -> None:
        try:
            weight = float(self.weight)
        except (TypeError, ValueError) as e:
            raise ValidationError(
                "Event weight must be a number",
                field="weight",
                value=self.weight,
                expected="finite non-negative number",
                cause=e
            ) from e
        if not math.isfinite(weight) or weight < 0:
            raise ValidationError(
                "Event weight must be finite and non-negative",
                field="weight",
                value=self.weight
            )
        object.__setattr__(self, "weight", weight)

    @property
    def dyad(self) -> tuple:
        return (self.sender, self.receiver)

    @property
    def is_self_loop(self) -> bool:
        return self.sender == self.receiver


class EventLog:
    """
    Time-sorted sequence of relational events.

    Events with equal times keep their arrival order. The log only grows
    through :meth:`insert`, which preserves time order.

    Parameters
    ----------
    events : Iterable[Event], optional
        Initial events, in any order

    Examples
    --------
    >>> log = EventLog([Event(2, 1, 2.0), Event(1, 2, 1.0)])
    >>> [e.time for e in log]
    [1.0, 2.0]
    >>> sorted(log.actors)
    [1, 2]
    """

    def __init__(self, events: Optional[Iterable[Event]] = None) -> None:
        # sorted() is stable, so ties keep their input order
        self._events: List[Event] = sorted(events or [], key=lambda e: e.time)
        self._times: List[Any] = [e.time for e in self._events]
        self._actors: Set[int] = set()
        self._event_types: Set[str] = set()
        for event in self._events:
            self._register(event)

    def _register(self, event: Event) -> None:
        self._actors.add(event.sender)
        self._actors.add(event.receiver)
        self._event_types.add(event.event_type)

    def insert(self, event: Event) -> int:
        """
        Insert an event, keeping the log sorted by time.

        The event is placed after any existing events with the same time.

        Returns
        -------
        int
            Position at which the event was inserted
        """
        position = bisect_right(self._times, event.time)
        self._events.insert(position, event)
        self._times.insert(position, event.time)
        self._register(event)
        return position

    @property
    def actors(self) -> FrozenSet[int]:
        return frozenset(self._actors)

    @property
    def n_actors(self) -> int:
        return len(self._actors)

    @property
    def event_types(self) -> FrozenSet[str]:
        return frozenset(self._event_types)

    @property
    def events(self) -> List[Event]:
        return list(self._events)

    def events_before(self, index: int) -> List[Event]:
        """Return the events strictly before position ``index``."""
        return self._events[:max(index, 0)]

    def events_in_window(self, index: int, window: float) -> List[Event]:
        """
        Return the events preceding position ``index`` within ``window`` seconds.

        Events are returned most recent first, matching a backwards scan from
        the focal event.
        """
        if index <= 0:
            return []
        current_time = self._events[index].time
        result = []
        for i in range(index - 1, -1, -1):
            if elapsed_seconds(current_time - self._events[i].time) <= window:
                result.append(self._events[i])
            else:
                break
        return result

    def __len__(self) -> int:
        return len(self._events)

    def __iter__(self) -> Iterator[Event]:
        return iter(self._events)

    def __getitem__(self, index):
        return self._events[index]

    def __repr__(self) -> str:
        return f"EventLog(events={len(self)}, actors={self.n_actors})"
