"""
Tests for dyad history statistics.
"""

import math
from datetime import datetime, timedelta

import pytest

from remnet.common.exceptions import ComputationError, ConfigurationError
from remnet.events import Event
from remnet.network import NetworkState
from remnet.statistics import (
    DyadCovariate,
    Inertia,
    Recency,
    RecencyTransform,
    Reciprocity,
    Repetition,
)


@pytest.fixture
def state():
    state = NetworkState()
    state.record(Event(1, 2, 1.0))
    state.record(Event(1, 2, 2.0, weight=2.0))
    state.record(Event(2, 1, 6.0))
    state.advance(10.0)
    return state


class TestRepetition:
    """Test repetition counts."""

    def test_directed(self, state):
        """Test the weighted count from sender to receiver."""
        assert Repetition().compute(state, 1, 2) == 3.0
        assert Repetition().compute(state, 2, 1) == 1.0
        assert Repetition().compute(state, 1, 3) == 0.0

    def test_undirected(self, state):
        """Test that the undirected variant counts both directions."""
        stat = Repetition(directed=False)
        assert stat.compute(state, 1, 2) == 4.0
        assert stat.compute(state, 2, 1) == 4.0
        assert stat.name() == "undirected_repetition"


class TestReciprocityAndInertia:
    """Test reciprocity and inertia."""

    def test_reciprocity(self, state):
        """Test the count from receiver back to sender."""
        assert Reciprocity().compute(state, 1, 2) == 1.0
        assert Reciprocity().compute(state, 2, 1) == 3.0

    def test_inertia_weights(self, state):
        """Test the weighted combination of both directions."""
        stat = Inertia(repetition_weight=2.0, reciprocity_weight=-1.0)
        assert stat.compute(state, 1, 2) == 2.0 * 3.0 - 1.0
        assert Inertia().compute(state, 1, 2) == 4.0
        assert stat.name() == "inertia"


class TestRecency:
    """Test recency transforms."""

    def test_inverse(self, state):
        """Test 1 / elapsed seconds since the last dyad event."""
        assert Recency().compute(state, 1, 2) == pytest.approx(1 / 8.0)
        assert Recency().name() == "recency_inverse"

    def test_log(self, state):
        """Test 1 / log(1 + elapsed)."""
        stat = Recency(transform="log")
        assert stat.compute(state, 1, 2) == pytest.approx(1 / math.log1p(8.0))
        assert stat.name() == "recency_log"

    def test_exp_decay(self, state):
        """Test exp(-decay * elapsed)."""
        stat = Recency(transform=RecencyTransform.EXP_DECAY, decay=0.25)
        assert stat.compute(state, 1, 2) == pytest.approx(math.exp(-2.0))
        assert stat.name() == "recency_exp_decay"

    def test_no_prior_event(self, state):
        """Test that an inactive dyad scores zero."""
        assert Recency().compute(state, 1, 3) == 0.0

    def test_zero_elapsed(self):
        """Test that an event at the current time scores zero."""
        state = NetworkState()
        state.record(Event(1, 2, 5.0))
        assert Recency().compute(state, 1, 2) == 0.0

    def test_undirected_uses_most_recent(self, state):
        """Test that undirected recency takes the latest event in either direction."""
        stat = Recency(directed=False)
        assert stat.compute(state, 1, 2) == pytest.approx(1 / 4.0)
        assert stat.compute(state, 2, 1) == pytest.approx(1 / 4.0)
        assert Recency().compute(state, 2, 1) == pytest.approx(1 / 4.0)

    def test_datetime_times(self):
        """Test that datetime differences are measured in seconds."""
        start = datetime(2024, 1, 1)
        state = NetworkState()
        state.record(Event(1, 2, start))
        state.advance(start + timedelta(minutes=1))
        assert Recency().compute(state, 1, 2) == pytest.approx(1 / 60.0)

    def test_invalid_configuration(self):
        """Test unknown transforms and negative decay."""
        with pytest.raises(ConfigurationError):
            Recency(transform="square")
        with pytest.raises(ConfigurationError):
            Recency(transform="exp_decay", decay=-1.0)

    def test_unknown_transform_at_compute_time(self, state):
        """Test that a corrupted transform raises ComputationError."""
        stat = Recency()
        object.__setattr__(stat, "transform", "bogus")
        with pytest.raises(ComputationError, match="Unknown recency transform"):
            stat.compute(state, 1, 2)


class TestDyadCovariate:
    """Test exogenous dyad covariates."""

    def test_lookup_and_default(self):
        """Test values, defaults and directedness."""
        stat = DyadCovariate({(1, 2): 3.5, (2, 1): -1}, default=0.25)
        state = NetworkState()
        assert stat.compute(state, 1, 2) == 3.5
        assert stat.compute(state, 2, 1) == -1.0
        assert stat.compute(state, 3, 1) == 0.25
        assert stat.name() == "dyad_covariate"

    def test_values_are_copied(self):
        """Test that later changes to the input dict have no effect."""
        values = {(1, 2): 1.0}
        stat = DyadCovariate(values)
        values[(1, 2)] = 9.0
        assert stat.compute(NetworkState(), 1, 2) == 1.0

    def test_read_only_and_hashable(self):
        """Test that the stored values cannot be changed and the statistic can be hashed."""
        stat = DyadCovariate({(1, 2): 1.0})
        with pytest.raises(TypeError):
            stat.values[(1, 2)] = 9.0
        assert stat == DyadCovariate({(1, 2): 1.0})
        assert len({stat, DyadCovariate({(1, 2): 1.0})}) == 1
