"""
Input validation for event tables.

These checks run at the ingestion boundary, before any row becomes an
Event, so that the core entities never have to warn or coerce.
"""

from typing import Optional
import warnings

import polars as pl

from .exceptions import ValidationError


def validate_event_dataframe(
    df: pl.DataFrame,
    sender_col: str = "sender",
    receiver_col: str = "receiver",
    time_col: str = "time",
    type_col: Optional[str] = None,
    weight_col: Optional[str] = None,
    actor_names: bool = False,
    allow_self_loops: bool = True
) -> int:
    """
    Validate an event table before it is turned into an EventLog.

    Parameters
    ----------
    df : pl.DataFrame
        Event table to validate
    sender_col, receiver_col, time_col : str
        Names of the required columns
    type_col, weight_col : str, optional
        Names of the optional event type and weight columns
    actor_names : bool, default False
        If False, sender and receiver columns must hold integers
    allow_self_loops : bool, default True
        If False, rows with sender == receiver are rejected; otherwise they
        produce a warning

    Returns
    -------
    int
        Number of self-loop rows found

    Raises
    ------
    ValidationError
        If required columns are missing, contain nulls, have the wrong type,
        or weights are negative or non-finite

    Examples
    --------
    >>> df = pl.DataFrame({"sender": [1, 2], "receiver": [2, 1], "time": [1.0, 2.0]})
    >>> validate_event_dataframe(df)
    0
    """
    if df.is_empty():
        raise ValidationError("DataFrame is empty", field="dataframe")

    required_cols = [sender_col, receiver_col, time_col]
    optional_cols = [col for col in [type_col, weight_col] if col is not None]

    missing_cols = [col for col in required_cols + optional_cols if col not in df.columns]
    if missing_cols:
        raise ValidationError(
            f"Missing required columns: {missing_cols}",
            field="columns",
            details={"available_columns": df.columns, "missing": missing_cols}
        )

    for col in required_cols:
        null_count = df[col].null_count()
        if null_count > 0:
            raise ValidationError(
                f"Column contains {null_count} null values",
                field=col,
                details={"null_count": null_count, "total_rows": len(df)}
            )

    if not actor_names:
        for col in [sender_col, receiver_col]:
            if not df[col].dtype.is_integer():
                raise ValidationError(
                    f"Actor column must hold integer ids, got {df[col].dtype}. "
                    "Pass actor_names=True to map labels to ids",
                    field=col,
                    details={"dtype": str(df[col].dtype)}
                )

    if weight_col is not None:
        weights = df[weight_col]
        if not weights.dtype.is_numeric():
            raise ValidationError(
                f"Weight column must be numeric, got {weights.dtype}",
                field=weight_col,
                details={"dtype": str(weights.dtype)}
            )
        if weights.null_count() > 0:
            raise ValidationError(
                f"Weight column contains {weights.null_count()} null values",
                field=weight_col
            )
        weights = weights.cast(pl.Float64)
        bad_count = int((weights < 0).sum()) + int(weights.is_nan().sum()) + int(weights.is_infinite().sum())
        if bad_count > 0:
            raise ValidationError(
                f"Weight column contains {bad_count} negative or non-finite values",
                field=weight_col,
                details={"min_weight": weights.min(), "invalid_count": bad_count}
            )

    self_loop_count = int((df[sender_col] == df[receiver_col]).sum())
    if self_loop_count > 0:
        if not allow_self_loops:
            raise ValidationError(
                f"Found {self_loop_count} self-loops (events from an actor to itself)",
                field="events",
                details={"self_loop_count": self_loop_count, "allow_self_loops": False}
            )
        warnings.warn(
            f"Event table contains {self_loop_count} self-loops (sender == receiver)"
        )

    return self_loop_count
