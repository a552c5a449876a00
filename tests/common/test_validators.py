"""
Tests for event table validation.
"""

import math
import warnings

import polars as pl
import pytest

from remnet.common.exceptions import ValidationError
from remnet.common.validators import validate_event_dataframe


def _events(**overrides):
    data = {"sender": [1, 2, 3], "receiver": [2, 3, 1], "time": [1.0, 2.0, 3.0]}
    data.update(overrides)
    return pl.DataFrame(data)


class TestValidateEventDataframe:
    """Test event DataFrame validation."""

    def test_valid_basic_table(self):
        """Test that a valid table passes without warnings."""
        with warnings.catch_warnings():
            warnings.simplefilter("error")
            assert validate_event_dataframe(_events()) == 0

    def test_valid_with_optional_columns(self):
        """Test validation of type and weight columns."""
        df = _events(kind=["email", "call", "email"], w=[1.0, 0.0, 2.5])
        assert validate_event_dataframe(df, type_col="kind", weight_col="w") == 0

    def test_custom_column_names(self):
        """Test validation with custom column names."""
        df = pl.DataFrame({"from": [1], "to": [2], "ts": [0.5]})
        validate_event_dataframe(df, sender_col="from", receiver_col="to", time_col="ts")

    def test_empty_dataframe(self):
        """Test that an empty table is rejected."""
        with pytest.raises(ValidationError, match="DataFrame is empty"):
            validate_event_dataframe(pl.DataFrame())

    def test_missing_columns(self):
        """Test that missing required or optional columns are reported."""
        with pytest.raises(ValidationError, match="Missing required columns") as exc_info:
            validate_event_dataframe(_events(), weight_col="weight")
        assert exc_info.value.details["missing"] == ["weight"]

    def test_null_values(self):
        """Test that nulls in required columns are rejected."""
        df = _events(receiver=[2, None, 1])
        with pytest.raises(ValidationError, match="null values"):
            validate_event_dataframe(df)

    def test_string_actors_need_actor_names(self):
        """Test that labelled actors require actor_names=True."""
        df = _events(sender=["a", "b", "c"], receiver=["b", "c", "a"])
        with pytest.raises(ValidationError, match="integer ids"):
            validate_event_dataframe(df)
        validate_event_dataframe(df, actor_names=True)

    def test_non_numeric_weights(self):
        """Test that weights must be numeric."""
        with pytest.raises(ValidationError, match="must be numeric"):
            validate_event_dataframe(_events(w=["1", "2", "3"]), weight_col="w")

    @pytest.mark.parametrize("bad_weight", [-1.0, math.inf, math.nan])
    def test_invalid_weights(self, bad_weight):
        """Test that negative and non-finite weights are rejected."""
        df = _events(w=[1.0, bad_weight, 1.0])
        with pytest.raises(ValidationError, match="negative or non-finite"):
            validate_event_dataframe(df, weight_col="w")

    def test_self_loops_warn(self):
        """Test that self-loops produce a warning and are counted."""
        df = _events(receiver=[1, 3, 3])
        with pytest.warns(UserWarning, match="2 self-loops"):
            assert validate_event_dataframe(df) == 2

    def test_self_loops_rejected(self):
        """Test that self-loops can be rejected instead."""
        df = _events(receiver=[1, 3, 1])
        with pytest.raises(ValidationError, match="self-loops"):
            validate_event_dataframe(df, allow_self_loops=False)
