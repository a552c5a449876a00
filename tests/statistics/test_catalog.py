"""
Tests for the statistic catalog.
"""

import pytest

from remnet.common.exceptions import ConfigurationError
from remnet.statistics import (
    STATISTIC_TYPES,
    GeometricWeightedFourCycles,
    Recency,
    RecencyTransform,
    Repetition,
    Statistic,
    StatisticFamily,
    create_statistic,
    statistics_in_family,
)


class TestCatalog:
    """Test the fixed catalog of statistic types."""

    def test_contents(self):
        """Test that the catalog lists every concrete statistic."""
        assert STATISTIC_TYPES["Repetition"] is Repetition
        assert STATISTIC_TYPES["GeometricWeightedFourCycles"] is GeometricWeightedFourCycles
        assert "Statistic" not in STATISTIC_TYPES
        assert "NodeAttribute" not in STATISTIC_TYPES
        assert all(issubclass(cls, Statistic) for cls in STATISTIC_TYPES.values())
        assert len(STATISTIC_TYPES) == 29

    @pytest.mark.parametrize("family, size", [
        (StatisticFamily.DYAD, 5),
        (StatisticFamily.DEGREE, 7),
        (StatisticFamily.TRIADIC, 6),
        (StatisticFamily.FOUR_CYCLE, 2),
        (StatisticFamily.NODE, 9),
    ])
    def test_families(self, family, size):
        """Test the number of statistic types per family."""
        names = statistics_in_family(family)
        assert len(names) == size
        assert all(STATISTIC_TYPES[name].family is family for name in names)


class TestCreateStatistic:
    """Test building statistics by type name."""

    def test_create(self):
        """Test that parameters reach the constructor."""
        stat = create_statistic("Recency", transform="exp_decay", decay=0.5)
        assert stat == Recency(transform=RecencyTransform.EXP_DECAY, decay=0.5)

    def test_unknown_type(self):
        """Test that unknown type names list the catalog."""
        with pytest.raises(ConfigurationError) as exc_info:
            create_statistic("Popularity")
        assert "Repetition" in exc_info.value.valid_options

    def test_unknown_parameter(self):
        """Test that unexpected keywords become configuration errors."""
        with pytest.raises(ConfigurationError, match="Invalid parameters for Repetition"):
            create_statistic("Repetition", window=3)

    def test_invalid_option_value(self):
        """Test that option validation still applies."""
        with pytest.raises(ConfigurationError):
            create_statistic("FourCycle", cycle_type="diagonal")
