"""
Incremental network state for relational event replay.

NetworkState accumulates the events of a time-sorted log one at a time and
answers the queries statistics need: weighted dyad counts, degrees, the time
of the last event on a dyad and the neighbourhoods of actors. With a positive
decay rate every stored count fades as ``exp(-decay * elapsed_seconds)``
whenever the state moves forward in time.

The state is owned by a single replay driver. Statistics only read it.
"""

from collections import defaultdict
import math
from typing import Any, Dict, FrozenSet, List, Optional, Set, Tuple

from ..common.exceptions import StateError, require_positive
from ..common.logging_config import get_logger
from ..common.timeutils import seconds_between
from ..events.event import Event, EventLog

logger = get_logger(__name__)

Dyad = Tuple[int, int]


def _undirected_key(a: int, b: int) -> Dyad:
    return (a, b) if a <= b else (b, a)


class NetworkState:
    """
    Weighted, optionally decaying summary of the events seen so far.

    Parameters
    ----------
    decay : float, default 0.0
        Exponential decay rate per second. 0 disables decay

    Attributes
    ----------
    decay : float
        Decay rate
    current_time : Any
        Time the state has been advanced to; None before the first advance

    Raises
    ------
    ConfigurationError
        If decay is negative

    Examples
    --------
    >>> state = NetworkState()
    >>> state.record(Event(1, 2, 1.0))
    >>> state.record(Event(1, 2, 2.0))
    >>> state.dyad_count(1, 2)
    2.0
    >>> state.undirected_count(2, 1)
    2.0
    >>> state.out_neighbors(1)
    frozenset({2})
    """

    def __init__(self, decay: float = 0.0) -> None:
        require_positive(decay, "decay", allow_zero=True)
        self.decay = float(decay)
        self.current_time: Any = None

        self._dyad_counts: Dict[Dyad, float] = {}
        self._undirected_counts: Dict[Dyad, float] = {}
        self._out_degree: Dict[int, float] = {}
        self._in_degree: Dict[int, float] = {}
        self._last_event_time: Dict[Dyad, Any] = {}
        self._history: List[Event] = []
        self._actors: Set[int] = set()
        self._out_neighbors: Dict[int, Set[int]] = defaultdict(set)
        self._in_neighbors: Dict[int, Set[int]] = defaultdict(set)

    @classmethod
    def from_event_log(cls, log: EventLog, decay: float = 0.0) -> "NetworkState":
        """
        Create an empty state whose actor set is taken from ``log``.

        No events are recorded; the log only seeds the known actors.
        """
        state = cls(decay=decay)
        state._actors.update(log.actors)
        logger.debug(f"Initialized network state for {state.n_actors} actors (decay={state.decay})")
        return state

    def reset(self) -> None:
        """Forget every recorded event and return to the initial time."""
        self.current_time = None
        self._dyad_counts.clear()
        self._undirected_counts.clear()
        self._out_degree.clear()
        self._in_degree.clear()
        self._last_event_time.clear()
        self._history.clear()
        self._out_neighbors.clear()
        self._in_neighbors.clear()

    def advance(self, time: Any) -> None:
        """
        Move the state forward to ``time``.

        With a positive decay rate, every count and degree is multiplied by
        ``exp(-decay * dt)``, where ``dt`` is the elapsed time in seconds.
        Advancing to the current time does nothing.

        Raises
        ------
        StateError
            If ``time`` is earlier than the current time, or the time
            difference cannot be converted to seconds
        """
        if self.current_time is None:
            self.current_time = time
            return

        try:
            backwards = time < self.current_time
            forwards = time > self.current_time
        except TypeError as e:
            raise StateError(
                f"Cannot compare time of type {type(time).__name__} with current time "
                f"of type {type(self.current_time).__name__}",
                current_time=self.current_time,
                requested_time=time,
                cause=e
            ) from e

        if backwards:
            raise StateError(
                "Cannot move network state backwards in time",
                current_time=self.current_time,
                requested_time=time
            )

        if forwards and self.decay > 0:
            dt = seconds_between(time, self.current_time)
            self._apply_decay(math.exp(-self.decay * dt))

        self.current_time = time

    def _apply_decay(self, factor: float) -> None:
        for counts in (self._dyad_counts, self._undirected_counts,
                       self._out_degree, self._in_degree):
            for key in counts:
                counts[key] *= factor

    def record(self, event: Event) -> None:
        """
        Advance to the event time and add the event to every aggregate.

        Raises
        ------
        StateError
            If the event is earlier than the current time
        """
        self.advance(event.time)

        s, r, w = event.sender, event.receiver, event.weight
        dyad = (s, r)
        undirected = _undirected_key(s, r)

        self._dyad_counts[dyad] = self._dyad_counts.get(dyad, 0.0) + w
        self._undirected_counts[undirected] = self._undirected_counts.get(undirected, 0.0) + w
        self._out_degree[s] = self._out_degree.get(s, 0.0) + w
        self._in_degree[r] = self._in_degree.get(r, 0.0) + w
        self._last_event_time[dyad] = event.time

        self._history.append(event)
        self._actors.add(s)
        self._actors.add(r)
        self._out_neighbors[s].add(r)
        self._in_neighbors[r].add(s)

    # Queries

    def dyad_count(self, sender: int, receiver: int) -> float:
        """Weighted (decayed) count of events from sender to receiver."""
        return self._dyad_counts.get((sender, receiver), 0.0)

    def undirected_count(self, actor1: int, actor2: int) -> float:
        """Weighted (decayed) count of events between two actors in either direction."""
        return self._undirected_counts.get(_undirected_key(actor1, actor2), 0.0)

    def out_degree(self, actor: int) -> float:
        return self._out_degree.get(actor, 0.0)

    def in_degree(self, actor: int) -> float:
        return self._in_degree.get(actor, 0.0)

    def last_event_time(self, sender: int, receiver: int) -> Optional[Any]:
        """Time of the most recent event from sender to receiver, or None."""
        return self._last_event_time.get((sender, receiver))

    def has_edge(self, sender: int, receiver: int) -> bool:
        """True if the (decayed) count from sender to receiver is positive."""
        return self.dyad_count(sender, receiver) > 0

    def out_neighbors(self, actor: int) -> FrozenSet[int]:
        """
        Actors that ``actor`` has ever sent an event to.

        Neighbourhoods follow the recorded history and do not fade with decay.
        """
        return frozenset(self._out_neighbors.get(actor, ()))

    def in_neighbors(self, actor: int) -> FrozenSet[int]:
        """Actors that have ever sent an event to ``actor``."""
        return frozenset(self._in_neighbors.get(actor, ()))

    def common_senders(self, actor1: int, actor2: int) -> FrozenSet[int]:
        """Actors that have sent events to both actor1 and actor2."""
        return self.in_neighbors(actor1) & self.in_neighbors(actor2)

    def common_receivers(self, actor1: int, actor2: int) -> FrozenSet[int]:
        """Actors that have received events from both actor1 and actor2."""
        return self.out_neighbors(actor1) & self.out_neighbors(actor2)

    @property
    def history(self) -> List[Event]:
        """Recorded events in replay order (a copy)."""
        return list(self._history)

    @property
    def actors(self) -> FrozenSet[int]:
        return frozenset(self._actors)

    @property
    def n_actors(self) -> int:
        return len(self._actors)

    @property
    def n_events(self) -> int:
        return len(self._history)

    def __repr__(self) -> str:
        return (f"NetworkState(events={self.n_events}, actors={self.n_actors}, "
                f"decay={self.decay}, current_time={self.current_time!r})")
