"""
Relational events, event logs and table loading.
"""

from .event import Event, EventLog
from .loading import load_events

__all__ = [
    "Event",
    "EventLog",
    "load_events",
]
