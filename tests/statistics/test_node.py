"""
Tests for node attribute statistics.
"""

import pytest

from remnet.common.exceptions import ConfigurationError
from remnet.network import NetworkState
from remnet.statistics import (
    NodeAttribute,
    NodeDifference,
    NodeMatch,
    NodeMix,
    NodeProduct,
    NodeSum,
    ReceiverAttribute,
    ReceiverCategorical,
    SenderAttribute,
    SenderCategorical,
)


@pytest.fixture
def state():
    return NetworkState()


@pytest.fixture
def age():
    return NodeAttribute("age", {1: 30, 2: 45, 3: 30.5}, default=0)


@pytest.fixture
def dept():
    return NodeAttribute("dept", {1: "sales", 2: "it", 3: "sales"}, default="none")


class TestNodeAttribute:
    """Test attribute lookup."""

    def test_lookup_and_default(self, age):
        """Test listed values and the default."""
        assert age[2] == 45
        assert age[99] == 0

    def test_is_numeric(self, age, dept):
        """Test numeric detection over values and default."""
        assert age.is_numeric()
        assert not dept.is_numeric()
        assert not NodeAttribute("x", {1: 1.0}, default=None).is_numeric()

    def test_values_are_copied(self):
        """Test that later changes to the input dict have no effect."""
        values = {1: 1.0}
        attr = NodeAttribute("x", values, default=0.0)
        values[1] = 5.0
        assert attr[1] == 1.0

    def test_read_only_and_hashable(self, age):
        """Test that the stored values cannot be changed and attributes can be hashed."""
        with pytest.raises(TypeError):
            age.values[1] = 99
        assert age == NodeAttribute("age", {1: 30, 2: 45, 3: 30.5}, default=0)
        assert {NodeMatch(age): "age_match"}[NodeMatch(age)] == "age_match"


class TestCategoricalStatistics:
    """Test match, mix and categorical main effects."""

    def test_match(self, state, dept):
        """Test homophily on a categorical attribute."""
        stat = NodeMatch(dept)
        assert stat.compute(state, 1, 3) == 1.0
        assert stat.compute(state, 1, 2) == 0.0
        assert stat.compute(state, 98, 99) == 1.0
        assert stat.name() == "match_dept"

    def test_mix(self, state, dept):
        """Test that mixing is directed."""
        stat = NodeMix(dept, "sales", "it")
        assert stat.compute(state, 1, 2) == 1.0
        assert stat.compute(state, 2, 1) == 0.0
        assert stat.name() == "mix_dept_sales_it"

    def test_sender_and_receiver_categorical(self, state, dept):
        """Test category indicators for either focal actor."""
        assert SenderCategorical(dept, "it").compute(state, 2, 1) == 1.0
        assert SenderCategorical(dept, "it").compute(state, 1, 2) == 0.0
        assert ReceiverCategorical(dept, "it").compute(state, 1, 2) == 1.0
        assert SenderCategorical(dept, "it").name() == "sender_dept_it"
        assert ReceiverCategorical(dept, "sales").name() == "receiver_dept_sales"

    def test_categorical_accepts_non_numeric(self, dept):
        """Test that categorical statistics take non-numeric attributes."""
        NodeMatch(dept)
        NodeMix(dept, "sales", "sales")


class TestNumericStatistics:
    """Test numeric differences, sums, products and main effects."""

    def test_difference(self, state, age):
        """Test signed and absolute differences."""
        assert NodeDifference(age).compute(state, 1, 2) == -15.0
        assert NodeDifference(age, absolute=True).compute(state, 1, 2) == 15.0
        assert NodeDifference(age).name() == "diff_age"
        assert NodeDifference(age, absolute=True).name() == "diff_age_abs"

    def test_sum_and_product(self, state, age):
        """Test sums and products, with defaults for unknown actors."""
        assert NodeSum(age).compute(state, 1, 3) == pytest.approx(60.5)
        assert NodeProduct(age).compute(state, 1, 2) == 1350.0
        assert NodeProduct(age).compute(state, 1, 99) == 0.0
        assert NodeSum(age).name() == "sum_age"
        assert NodeProduct(age).name() == "product_age"

    def test_main_effects(self, state, age):
        """Test sender and receiver attribute values."""
        assert SenderAttribute(age).compute(state, 2, 1) == 45.0
        assert ReceiverAttribute(age).compute(state, 2, 1) == 30.0
        assert SenderAttribute(age).name() == "sender_age"
        assert ReceiverAttribute(age).name() == "receiver_age"

    @pytest.mark.parametrize("stat_cls", [
        NodeDifference, NodeSum, NodeProduct, SenderAttribute, ReceiverAttribute,
    ])
    def test_non_numeric_rejected(self, dept, stat_cls):
        """Test that numeric statistics reject categorical attributes."""
        with pytest.raises(ConfigurationError, match="requires a numeric attribute"):
            stat_cls(dept)
