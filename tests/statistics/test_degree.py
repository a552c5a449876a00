"""
Tests for degree statistics.
"""

import math

import pytest

from remnet.common.exceptions import ConfigurationError
from remnet.events import Event
from remnet.network import NetworkState
from remnet.statistics import (
    ActorRole,
    DegreeDifference,
    DegreeType,
    LogDegree,
    ReceiverActivity,
    ReceiverPopularity,
    SenderActivity,
    SenderPopularity,
    TotalDegree,
)


@pytest.fixture
def state():
    # out-degrees: 1 -> 3, 2 -> 1, 3 -> 0; in-degrees: 1 -> 1, 2 -> 2, 3 -> 1
    state = NetworkState()
    for t, (s, r) in enumerate([(1, 2), (1, 3), (2, 1), (1, 2)]):
        state.record(Event(s, r, float(t)))
    return state


class TestActivityAndPopularity:
    """Test the four single-degree statistics."""

    def test_activity(self, state):
        """Test sender and receiver out-degrees."""
        assert SenderActivity().compute(state, 1, 3) == 3.0
        assert ReceiverActivity().compute(state, 3, 2) == 1.0
        assert ReceiverActivity().compute(state, 1, 3) == 0.0

    def test_popularity(self, state):
        """Test sender and receiver in-degrees."""
        assert SenderPopularity().compute(state, 2, 1) == 2.0
        assert ReceiverPopularity().compute(state, 2, 1) == 1.0

    def test_names(self):
        """Test default names."""
        assert SenderActivity().name() == "sender_activity"
        assert ReceiverActivity().name() == "receiver_activity"
        assert SenderPopularity().name() == "sender_popularity"
        assert ReceiverPopularity().name() == "receiver_popularity"

    def test_decayed_degree(self):
        """Test that degrees fade with the state."""
        state = NetworkState(decay=1.0)
        state.record(Event(1, 2, 0.0))
        state.advance(1.0)
        assert SenderActivity().compute(state, 1, 2) == pytest.approx(math.exp(-1.0))


class TestTotalDegree:
    """Test total degree."""

    def test_roles(self, state):
        """Test in plus out degree for either focal actor."""
        assert TotalDegree().compute(state, 1, 2) == 4.0
        assert TotalDegree(role="receiver").compute(state, 1, 2) == 3.0
        assert TotalDegree(ActorRole.RECEIVER).name() == "receiver_total_degree"

    def test_invalid_role(self):
        """Test that unknown roles are rejected."""
        with pytest.raises(ConfigurationError):
            TotalDegree(role="bystander")


class TestDegreeDifference:
    """Test degree differences."""

    @pytest.mark.parametrize("degree_type, expected", [
        ("out", 3.0 - 1.0),
        ("in", 1.0 - 2.0),
        ("total", 4.0 - 3.0),
    ])
    def test_types(self, state, degree_type, expected):
        """Test sender minus receiver degree for each degree type."""
        assert DegreeDifference(degree_type).compute(state, 1, 2) == expected

    def test_absolute(self, state):
        """Test the absolute difference."""
        stat = DegreeDifference(DegreeType.IN, absolute=True)
        assert stat.compute(state, 1, 2) == 1.0
        assert stat.name() == "degree_diff_in_abs"
        assert DegreeDifference().name() == "degree_diff_out"

    def test_invalid_type(self):
        """Test that unknown degree types are rejected."""
        with pytest.raises(ConfigurationError):
            DegreeDifference(degree_type="sideways")


class TestLogDegree:
    """Test log-transformed degrees."""

    def test_log1p(self, state):
        """Test log(1 + degree) for sender and receiver."""
        assert LogDegree().compute(state, 1, 2) == pytest.approx(math.log(4.0))
        assert LogDegree("receiver", "in").compute(state, 1, 2) == pytest.approx(math.log(3.0))
        assert LogDegree("sender", "total").compute(state, 3, 1) == pytest.approx(math.log(2.0))

    def test_zero_degree(self):
        """Test that an inactive actor scores zero."""
        assert LogDegree().compute(NetworkState(), 1, 2) == 0.0

    def test_name(self):
        """Test the default name."""
        assert LogDegree("receiver", "total").name() == "log_receiver_total_degree"
