"""
Loading event logs from tables.

Event tables arrive as polars DataFrames or CSV files with one row per event.
This module validates them, maps actor labels to integer ids when asked to,
parses string timestamps and builds a time-sorted EventLog.
"""

from pathlib import Path
from typing import Any, List, Optional, Union

import polars as pl

from .event import Event, EventLog
from ..common.exceptions import DataFormatError
from ..common.id_mapper import ActorMapper
from ..common.validators import validate_event_dataframe
from ..common.logging_config import get_logger

logger = get_logger(__name__)


def load_events(
    source: Union[str, Path, pl.DataFrame],
    sender_col: str = "sender",
    receiver_col: str = "receiver",
    time_col: str = "time",
    type_col: Optional[str] = None,
    weight_col: Optional[str] = None,
    actor_names: bool = False,
    id_mapper: Optional[ActorMapper] = None,
    allow_self_loops: bool = True
) -> EventLog:
    """
    Build an EventLog from a polars DataFrame or a CSV file.

    Parameters
    ----------
    source : Union[str, Path, pl.DataFrame]
        Event table, or path to a CSV file holding one
    sender_col, receiver_col, time_col : str
        Column names for the sender, receiver and event time
    type_col : str, optional
        Column holding the event type; every event is "event" if omitted
    weight_col : str, optional
        Column holding event weights; every weight is 1.0 if omitted
    actor_names : bool, default False
        If True, sender and receiver values are labels that are mapped to
        consecutive integer ids through ``id_mapper``
    id_mapper : ActorMapper, optional
        Mapper to use (and extend) when ``actor_names`` is True. Pass one in
        to read the assigned ids back or to keep ids consistent across
        several tables
    allow_self_loops : bool, default True
        If False, self-loop rows are rejected instead of producing a warning

    Returns
    -------
    EventLog
        Time-sorted event log

    Raises
    ------
    DataFormatError
        If the CSV file cannot be read or the time column cannot be parsed
    ValidationError
        If the table fails validation

    Examples
    --------
    >>> df = pl.DataFrame({
    ...     "sender": ["alice", "bob"],
    ...     "receiver": ["bob", "alice"],
    ...     "time": [1.0, 2.0],
    ... })
    >>> mapper = ActorMapper()
    >>> log = load_events(df, actor_names=True, id_mapper=mapper)
    >>> mapper.get_label(log[0].sender)
    'alice'
    """
    df = _read_source(source)

    validate_event_dataframe(
        df,
        sender_col=sender_col,
        receiver_col=receiver_col,
        time_col=time_col,
        type_col=type_col,
        weight_col=weight_col,
        actor_names=actor_names,
        allow_self_loops=allow_self_loops
    )

    times = _parse_times(df[time_col], time_col)

    if actor_names:
        mapper = id_mapper if id_mapper is not None else ActorMapper()
        senders = []
        receivers = []
        # Assign ids row by row so that ids follow first appearance in the table
        for s, r in zip(df[sender_col].to_list(), df[receiver_col].to_list()):
            senders.append(mapper.get_or_assign(s))
            receivers.append(mapper.get_or_assign(r))
    else:
        senders = [int(s) for s in df[sender_col].to_list()]
        receivers = [int(r) for r in df[receiver_col].to_list()]

    if type_col is not None:
        event_types = [str(t) for t in df[type_col].to_list()]
    else:
        event_types = ["event"] * len(df)

    if weight_col is not None:
        weights = df[weight_col].cast(pl.Float64).to_list()
    else:
        weights = [1.0] * len(df)

    events = [
        Event(s, r, t, event_type=et, weight=w)
        for s, r, t, et, w in zip(senders, receivers, times, event_types, weights)
    ]
    log = EventLog(events)

    logger.info(f"Loaded {len(log)} events between {log.n_actors} actors "
                f"({len(log.event_types)} event types)")
    return log


def _read_source(source: Union[str, Path, pl.DataFrame]) -> pl.DataFrame:
    """Return the event table, reading it from CSV when given a path."""
    if isinstance(source, pl.DataFrame):
        return source

    path = Path(source)
    try:
        return pl.read_csv(path, try_parse_dates=True)
    except (OSError, pl.exceptions.PolarsError) as e:
        raise DataFormatError(
            f"Failed to read event table: {e}",
            format_type="CSV",
            file_path=str(path),
            cause=e
        )


def _parse_times(series: pl.Series, column_name: str) -> List[Any]:
    """Convert a time column to Python values; strings are parsed as datetimes."""
    if series.dtype == pl.Utf8:
        try:
            series = series.str.to_datetime()
        except pl.exceptions.PolarsError as e:
            raise DataFormatError(
                "Failed to parse event times. Expected numbers, dates or datetime strings",
                field=column_name,
                details={"sample_values": series.head(5).to_list()},
                cause=e
            )
    elif not (series.dtype.is_numeric() or series.dtype.is_temporal()):
        raise DataFormatError(
            f"Unsupported time column type {series.dtype}",
            field=column_name
        )
    return series.to_list()
