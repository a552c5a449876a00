"""
Network state tracking for relational event replay.
"""

from .state import NetworkState

__all__ = ["NetworkState"]
