"""
Case-control sampling of relational event logs.

For every observed event (the case) the sampler draws a set of dyads that
could have produced an event at the same moment but did not (the controls).
Case and controls are evaluated against the same network state, the one
just before the case event, and form one stratum of the resulting
observation table. The table feeds the stratified estimator in
:mod:`remnet.estimation`.
"""

from dataclasses import dataclass
from typing import Any, Iterable, Iterator, List, Optional, Sequence, Set, Tuple, Union
import warnings

import numpy as np
import polars as pl

from ..common.exceptions import (
    ConfigurationError,
    SamplingExhaustionWarning,
    ValidationError,
    require_positive
)
from ..common.logging_config import get_logger, LoggingTimer
from ..events.event import EventLog
from ..network.state import NetworkState
from ..statistics.base import Statistic, StatisticSet

logger = get_logger(__name__)

Dyad = Tuple[int, int]

# Columns every observation table carries besides the statistics
OBSERVATION_COLUMNS = ["stratum", "event_index", "sender", "receiver", "is_event"]


@dataclass(frozen=True)
class Observation:
    """
    One row of an observation table.

    Attributes
    ----------
    stratum : int
        Stratum id, equal to the index of the case event in the log
    event_index : int
        Index of the case event in the log
    sender, receiver : int
        Candidate dyad
    statistics : Tuple[float, ...]
        Statistic values, in the order of the statistic set
    is_event : bool
        True for the case row, False for controls
    """
    stratum: int
    event_index: int
    sender: int
    receiver: int
    statistics: Tuple[float, ...]
    is_event: bool


class CaseControlSampler:
    """
    Configuration and control drawing for case-control sampling.

    Controls are drawn uniformly from all ordered pairs of risk-set actors.
    A draw is rejected if it is a self-loop (when excluded), the case dyad
    itself, or a control already drawn for the same stratum. Drawing stops
    once ``n_controls`` controls are accepted or after
    ``max_rejections_factor * n_controls`` rejections, whichever comes first;
    in the second case the stratum is exhausted and keeps fewer controls.

    Parameters
    ----------
    n_controls : int, default 100
        Number of controls per case
    exclude_self_loops : bool, default True
        Never draw dyads with sender == receiver
    seed : int, optional
        Seed for the random generator; equal seeds give equal samples
    max_rejections_factor : int, default 10
        Rejection budget per stratum, in multiples of ``n_controls``

    Raises
    ------
    ConfigurationError
        If n_controls or max_rejections_factor is not a positive integer

    Examples
    --------
    >>> sampler = CaseControlSampler(n_controls=5, seed=42)
    >>> rng = sampler.rng()
    >>> controls, rejections = sampler.sample_controls(rng, [1, 2, 3, 4], (1, 2))
    >>> len(controls)
    5
    """

    def __init__(
        self,
        n_controls: int = 100,
        exclude_self_loops: bool = True,
        seed: Optional[int] = None,
        max_rejections_factor: int = 10
    ) -> None:
        for name, value in [("n_controls", n_controls),
                            ("max_rejections_factor", max_rejections_factor)]:
            if isinstance(value, bool) or not isinstance(value, (int, np.integer)):
                raise ConfigurationError(
                    f"Parameter '{name}' must be an integer, got {type(value).__name__}",
                    parameter=name,
                    value=value
                )
            require_positive(value, name)

        self.n_controls = int(n_controls)
        self.exclude_self_loops = exclude_self_loops
        self.seed = seed
        self.max_rejections_factor = int(max_rejections_factor)

    @property
    def max_rejections(self) -> int:
        return self.max_rejections_factor * self.n_controls

    def rng(self) -> np.random.Generator:
        """Fresh random generator seeded with this sampler's seed."""
        return np.random.default_rng(self.seed)

    def sample_controls(
        self,
        rng: np.random.Generator,
        actors: Sequence[int],
        case: Dyad
    ) -> Tuple[List[Dyad], int]:
        """
        Draw distinct control dyads for one stratum.

        Parameters
        ----------
        rng : np.random.Generator
            Random generator, shared across the strata of one run
        actors : Sequence[int]
            Risk-set actors; pairs are drawn from their ordered product
        case : Tuple[int, int]
            The case dyad, which is never drawn as a control

        Returns
        -------
        Tuple[List[Tuple[int, int]], int]
            Accepted control dyads in draw order, and the number of rejected draws
        """
        controls: List[Dyad] = []
        drawn: Set[Dyad] = set()
        rejections = 0
        n_actors = len(actors)
        if n_actors == 0:
            return controls, rejections

        while len(controls) < self.n_controls and rejections < self.max_rejections:
            i, j = rng.integers(0, n_actors, size=2)
            dyad = (int(actors[i]), int(actors[j]))
            if ((self.exclude_self_loops and dyad[0] == dyad[1])
                    or dyad == case or dyad in drawn):
                rejections += 1
                continue
            drawn.add(dyad)
            controls.append(dyad)

        return controls, rejections

    def __repr__(self) -> str:
        return (f"CaseControlSampler(n_controls={self.n_controls}, "
                f"exclude_self_loops={self.exclude_self_loops}, seed={self.seed}, "
                f"max_rejections_factor={self.max_rejections_factor})")


@dataclass
class ObservationSet:
    """
    Stratified observation table produced by :func:`generate_observations`.

    Attributes
    ----------
    data : pl.DataFrame
        One row per case or control with columns ``stratum``,
        ``event_index``, ``sender``, ``receiver``, ``is_event`` and one
        Float64 column per statistic
    strata : pl.DataFrame
        One row per stratum with columns ``stratum``, ``n_controls``
        (controls achieved), ``rejections`` and ``exhausted``
    stat_names : List[str]
        Statistic column names, in model order
    exhausted_strata : List[int]
        Strata that received fewer controls than requested
    """
    data: pl.DataFrame
    strata: pl.DataFrame
    stat_names: List[str]
    exhausted_strata: List[int]

    @property
    def n_strata(self) -> int:
        return self.strata.height

    @property
    def n_observations(self) -> int:
        return self.data.height

    @property
    def n_exhausted(self) -> int:
        return len(self.exhausted_strata)

    def iter_observations(self) -> Iterator[Observation]:
        """Yield the rows of :attr:`data` as Observation records."""
        for row in self.data.iter_rows(named=True):
            yield Observation(
                stratum=row["stratum"],
                event_index=row["event_index"],
                sender=row["sender"],
                receiver=row["receiver"],
                statistics=tuple(row[name] for name in self.stat_names),
                is_event=row["is_event"]
            )

    def __repr__(self) -> str:
        return (f"ObservationSet(strata={self.n_strata}, observations={self.n_observations}, "
                f"statistics={self.stat_names}, exhausted={self.n_exhausted})")


def _as_statistic_set(statistics: Union[StatisticSet, Sequence[Statistic]]) -> StatisticSet:
    stats = statistics if isinstance(statistics, StatisticSet) else StatisticSet(statistics)
    clashes = [name for name in stats.names if name in OBSERVATION_COLUMNS + ["time"]]
    if clashes:
        raise ConfigurationError(
            f"Statistic names {clashes} clash with reserved observation columns",
            parameter="statistics",
            details={"reserved": OBSERVATION_COLUMNS + ["time"]}
        )
    return stats


def generate_observations(
    log: EventLog,
    statistics: Union[StatisticSet, Sequence[Statistic]],
    sampler: CaseControlSampler,
    start_index: int = 0,
    end_index: Optional[int] = None,
    decay: float = 0.0,
    at_risk: Optional[Iterable[int]] = None
) -> ObservationSet:
    """
    Replay an event log and build a case-control observation table.

    Events before ``start_index`` only build up the network state. Each
    event from ``start_index`` to ``end_index`` (inclusive) becomes one
    stratum: its dyad is the case, and controls are drawn from the risk set.
    All rows of a stratum are computed after the state has advanced to the
    event time but before the event itself is recorded.

    Parameters
    ----------
    log : EventLog
        Time-sorted events to replay
    statistics : StatisticSet or Sequence[Statistic]
        Statistics to compute for every row; names must be unique
    sampler : CaseControlSampler
        Control sampling configuration
    start_index : int, default 0
        Index of the first event that forms a stratum
    end_index : int, optional
        Index of the last event that forms a stratum; defaults to the last event
    decay : float, default 0.0
        Exponential decay rate of the network state, per second
    at_risk : Iterable[int], optional
        Actors eligible as control senders and receivers; defaults to every
        actor in the log

    Returns
    -------
    ObservationSet
        Observation table, per-stratum sampling summary and exhausted strata

    Raises
    ------
    ValidationError
        If the log is empty
    ConfigurationError
        If the index range is invalid or statistic names are not unique

    Warns
    -----
    SamplingExhaustionWarning
        Once per call, if any stratum received fewer controls than requested

    Examples
    --------
    >>> log = EventLog([Event(1, 2, 1.0), Event(2, 1, 2.0), Event(1, 3, 3.0)])
    >>> sampler = CaseControlSampler(n_controls=2, seed=1)
    >>> obs = generate_observations(log, [Repetition(), Reciprocity()], sampler)
    >>> obs.n_strata
    3
    """
    if len(log) == 0:
        raise ValidationError("Event log is empty", field="log")

    stats = _as_statistic_set(statistics)
    if end_index is None:
        end_index = len(log) - 1
    if not 0 <= start_index <= end_index < len(log):
        raise ConfigurationError(
            f"Invalid event range [{start_index}, {end_index}] for a log of {len(log)} events",
            parameter="start_index/end_index",
            value=(start_index, end_index)
        )

    actors = sorted(set(at_risk) if at_risk is not None else log.actors)
    rng = sampler.rng()
    state = NetworkState.from_event_log(log, decay=decay)
    for i in range(start_index):
        state.record(log[i])

    columns: dict = {name: [] for name in OBSERVATION_COLUMNS}
    stat_columns: List[List[float]] = [[] for _ in range(len(stats))]
    strata_rows: dict = {"stratum": [], "n_controls": [], "rejections": [], "exhausted": []}
    exhausted: List[int] = []

    def add_row(stratum: int, sender: int, receiver: int, is_event: bool) -> None:
        columns["stratum"].append(stratum)
        columns["event_index"].append(stratum)
        columns["sender"].append(sender)
        columns["receiver"].append(receiver)
        columns["is_event"].append(is_event)
        for column, value in zip(stat_columns, stats.compute(state, sender, receiver)):
            column.append(value)

    n_strata = end_index - start_index + 1
    logger.info(f"Sampling {sampler.n_controls} controls for {n_strata} events "
                f"from {len(actors)} actors at risk")

    with LoggingTimer("case_control_sampling", {"strata": n_strata, "controls": sampler.n_controls}):
        for index in range(start_index, end_index + 1):
            event = log[index]
            state.advance(event.time)

            add_row(index, event.sender, event.receiver, True)
            controls, rejections = sampler.sample_controls(rng, actors, event.dyad)
            for sender, receiver in controls:
                add_row(index, sender, receiver, False)

            is_exhausted = len(controls) < sampler.n_controls
            if is_exhausted:
                exhausted.append(index)
                logger.debug(f"Stratum {index} exhausted after {rejections} rejections "
                             f"with {len(controls)}/{sampler.n_controls} controls")
            strata_rows["stratum"].append(index)
            strata_rows["n_controls"].append(len(controls))
            strata_rows["rejections"].append(rejections)
            strata_rows["exhausted"].append(is_exhausted)

            state.record(event)

    if exhausted:
        message = (f"{len(exhausted)} of {n_strata} strata received fewer than "
                   f"{sampler.n_controls} controls")
        logger.warning(message)
        warnings.warn(message, SamplingExhaustionWarning)

    data = pl.DataFrame(
        {
            "stratum": pl.Series(columns["stratum"], dtype=pl.Int64),
            "event_index": pl.Series(columns["event_index"], dtype=pl.Int64),
            "sender": pl.Series(columns["sender"], dtype=pl.Int64),
            "receiver": pl.Series(columns["receiver"], dtype=pl.Int64),
            "is_event": pl.Series(columns["is_event"], dtype=pl.Boolean),
            **{name: pl.Series(values, dtype=pl.Float64)
               for name, values in zip(stats.names, stat_columns)},
        }
    )
    strata = pl.DataFrame(
        {
            "stratum": pl.Series(strata_rows["stratum"], dtype=pl.Int64),
            "n_controls": pl.Series(strata_rows["n_controls"], dtype=pl.Int64),
            "rejections": pl.Series(strata_rows["rejections"], dtype=pl.Int64),
            "exhausted": pl.Series(strata_rows["exhausted"], dtype=pl.Boolean),
        }
    )

    logger.info(f"Generated {data.height} observations in {n_strata} strata")
    return ObservationSet(data=data, strata=strata, stat_names=stats.names,
                          exhausted_strata=exhausted)


def compute_statistics(
    log: EventLog,
    statistics: Union[StatisticSet, Sequence[Statistic]],
    decay: float = 0.0
) -> pl.DataFrame:
    """
    Compute statistics for every observed event, without controls.

    Each event is evaluated against the network state just before it is
    recorded.

    Returns
    -------
    pl.DataFrame
        One row per event with columns ``sender``, ``receiver``, ``time`` and
        one Float64 column per statistic
    """
    stats = _as_statistic_set(statistics)
    state = NetworkState.from_event_log(log, decay=decay)

    senders: List[int] = []
    receivers: List[int] = []
    times: List[Any] = []
    values: List[List[float]] = [[] for _ in range(len(stats))]

    for event in log:
        state.advance(event.time)
        for column, value in zip(values, stats.compute(state, event.sender, event.receiver)):
            column.append(value)
        senders.append(event.sender)
        receivers.append(event.receiver)
        times.append(event.time)
        state.record(event)

    return pl.DataFrame(
        {
            "sender": pl.Series(senders, dtype=pl.Int64),
            "receiver": pl.Series(receivers, dtype=pl.Int64),
            "time": pl.Series(times),
            **{name: pl.Series(column, dtype=pl.Float64)
               for name, column in zip(stats.names, values)},
        }
    )
