"""
Time and decay helpers shared by the event log, network state and statistics.

Event times may be plain numbers (interpreted as seconds), ``datetime`` or
``date`` values, or numpy ``datetime64`` scalars. Every elapsed time is
normalized to seconds before it enters a decay or recency computation, so a
decay rate always means "per second" regardless of the time representation.
"""

import math
import numbers
from datetime import timedelta
from typing import Any

import numpy as np

from .exceptions import StateError, require_positive


def elapsed_seconds(difference: Any) -> float:
    """
    Convert a time difference to seconds.

    Parameters
    ----------
    difference : Any
        Result of subtracting two event times: a real number, a
        ``datetime.timedelta`` or a ``numpy.timedelta64``

    Returns
    -------
    float
        Elapsed time in seconds

    Raises
    ------
    StateError
        If the difference type cannot be converted to seconds

    Examples
    --------
    >>> elapsed_seconds(2.5)
    2.5
    >>> elapsed_seconds(timedelta(hours=1))
    3600.0
    """
    if isinstance(difference, bool):
        raise StateError(f"Unsupported time difference type {type(difference).__name__}")
    # timedelta64 subclasses np.signedinteger, so it must be tested before Real
    if isinstance(difference, np.timedelta64):
        return float(difference / np.timedelta64(1, "s"))
    if isinstance(difference, timedelta):
        return difference.total_seconds()
    if isinstance(difference, numbers.Real):
        return float(difference)
    raise StateError(
        f"Unsupported time difference type {type(difference).__name__}",
        details={"value": repr(difference)}
    )


def seconds_between(later: Any, earlier: Any) -> float:
    """
    Seconds from ``earlier`` to ``later``.

    Raises
    ------
    StateError
        If the two times cannot be subtracted, or their difference cannot be
        converted to seconds

    Examples
    --------
    >>> seconds_between(90, 30)
    60.0
    """
    try:
        difference = later - earlier
    except TypeError as e:
        raise StateError(
            f"Cannot subtract times of type {type(earlier).__name__} and {type(later).__name__}",
            current_time=earlier,
            requested_time=later,
            cause=e
        ) from e
    return elapsed_seconds(difference)


def halflife_to_decay(halflife: float) -> float:
    """
    Convert a half-life (in seconds) to an exponential decay rate.

    The decay rate is chosen so that ``exp(-decay * halflife) == 0.5``.

    Raises
    ------
    ConfigurationError
        If halflife is not positive
    """
    require_positive(halflife, "halflife")
    return math.log(2) / halflife


def decay_to_halflife(decay: float) -> float:
    """
    Convert an exponential decay rate to a half-life (in seconds).

    Inverse of :func:`halflife_to_decay`.

    Raises
    ------
    ConfigurationError
        If decay is not positive
    """
    require_positive(decay, "decay")
    return math.log(2) / decay


def compute_decay_weight(elapsed: float, decay: float) -> float:
    """
    Weight ``exp(-decay * elapsed)`` of an event ``elapsed`` seconds in the past.

    Raises
    ------
    ConfigurationError
        If elapsed or decay is negative
    """
    require_positive(elapsed, "elapsed", allow_zero=True)
    require_positive(decay, "decay", allow_zero=True)
    return math.exp(-decay * elapsed)
