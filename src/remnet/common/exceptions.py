"""
Exceptions raised by remnet.

Errors fall into two groups. Fatal errors propagate to the caller and abort
the run: a bad event table (ValidationError, DataFormatError), a bad
statistic or sampler setting (ConfigurationError) and a replay that moves
backwards in time (StateError). Recoverable conditions are handled where
they occur: the estimator catches NumericalError and returns a result
flagged as not converged, and the sampler reports short strata with
SamplingExhaustionWarning.

Every error carries structured ``details`` (what was wrong) and ``context``
(where it happened) in addition to its message.
"""

from typing import Any, Dict, List, Optional, Union
import traceback

# Collections whose repr is longer than this are summarized in messages
_MAX_DETAIL_LENGTH = 100


def _with_fields(target: Optional[Dict[str, Any]], **fields: Any) -> Dict[str, Any]:
    """Copy of ``target`` extended with every field that is not None."""
    merged = dict(target or {})
    merged.update({key: value for key, value in fields.items() if value is not None})
    return merged


def _describe(value: Any) -> str:
    if isinstance(value, (list, dict)) and len(str(value)) > _MAX_DETAIL_LENGTH:
        return f"<{type(value).__name__} with {len(value)} items>"
    return str(value)


class RelationalEventError(Exception):
    """
    Base class of every remnet error.

    Parameters
    ----------
    message : str
        What went wrong
    details : Dict[str, Any], optional
        Structured description of the offending input
    cause : Exception, optional
        Lower-level exception this error wraps; also set as ``__cause__``
    context : Dict[str, Any], optional
        Where the error happened (replay time, stratum, operation)

    Examples
    --------
    >>> str(RelationalEventError("Empty risk set", details={"actors": 0}))
    'Empty risk set (Details: actors=0)'
    """

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None,
        context: Optional[Dict[str, Any]] = None
    ) -> None:
        self.message = message
        self.details = details or {}
        self.cause = cause
        self.context = context or {}
        super().__init__(self._render())
        if cause is not None:
            self.__cause__ = cause

    def _render(self) -> str:
        text = self.message
        if self.details:
            text += " (Details: " + ", ".join(
                f"{key}={_describe(value)}" for key, value in self.details.items()) + ")"
        if self.context:
            text += " (Context: " + ", ".join(
                f"{key}={value}" for key, value in self.context.items()) + ")"
        return text

    def add_context(self, **kwargs: Any) -> 'RelationalEventError':
        """Record where the error happened; returns self so it can be re-raised inline."""
        self.context.update(kwargs)
        return self

    def get_debug_info(self) -> Dict[str, Any]:
        """Message, details, context, cause and traceback as one dictionary."""
        return {
            "exception_type": type(self).__name__,
            "message": self.message,
            "details": self.details,
            "context": self.context,
            "cause": str(self.cause) if self.cause else None,
            "traceback": traceback.format_exc() if self.__traceback__ is not None else None
        }


class ValidationError(RelationalEventError):
    """
    Input data that cannot be replayed.

    Raised for event tables with missing columns or nulls, negative or
    non-finite weights, empty logs and malformed design matrices.

    Parameters
    ----------
    message : str
        What is wrong with the input
    field : str, optional
        Column, attribute or argument that failed validation
    value : Any, optional
        Offending value
    expected : str, optional
        What a valid value looks like
    """

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        value: Optional[Any] = None,
        expected: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        **kwargs
    ) -> None:
        self.field = field
        self.value = value
        self.expected = expected

        prefix = f"Validation error in field '{field}'" if field else "Validation error"
        super().__init__(
            f"{prefix}: {message}",
            details=_with_fields(details, field=field, invalid_value=value, expected=expected),
            **kwargs
        )


class DataFormatError(ValidationError):
    """
    Event table that cannot be read, or a column with an unusable type.

    Parameters
    ----------
    format_type : str, optional
        Source format, e.g. "CSV"
    file_path : str, optional
        File that failed to load
    """

    def __init__(
        self,
        message: str,
        format_type: Optional[str] = None,
        file_path: Optional[str] = None,
        **kwargs
    ) -> None:
        kwargs["details"] = _with_fields(kwargs.get("details"), format_type=format_type,
                                         file_path=file_path)
        super().__init__(message, **kwargs)


class ConfigurationError(RelationalEventError):
    """
    Invalid setting of a statistic, sampler or estimator.

    Settings are checked when objects are built, so this error always comes
    before any replay or fitting work.

    Parameters
    ----------
    parameter : str, optional
        Name of the setting
    value : Any, optional
        Rejected value
    valid_options : List[Any], optional
        Accepted values for enumerated settings; appended to the message
    function : str, optional
        Class or function that rejected the setting

    Examples
    --------
    >>> error = ConfigurationError(
    ...     "Invalid closure type",
    ...     parameter="closure_type",
    ...     value="square",
    ...     valid_options=["transitive", "cyclic"]
    ... )
    >>> error.valid_options
    ['transitive', 'cyclic']
    """

    def __init__(
        self,
        message: str,
        parameter: Optional[str] = None,
        value: Optional[Any] = None,
        valid_options: Optional[List[Any]] = None,
        function: Optional[str] = None,
        **kwargs
    ) -> None:
        self.parameter = parameter
        self.value = value
        self.valid_options = valid_options
        self.function = function

        if parameter and valid_options:
            message += f". Valid options for '{parameter}': {valid_options}"
        kwargs["details"] = _with_fields(
            kwargs.get("details"),
            parameter=parameter or None,
            invalid_value=value,
            valid_options=valid_options or None,
            function=function or None
        )
        super().__init__(message, **kwargs)


class StateError(RelationalEventError):
    """
    Network state asked to move backwards in time, or to measure a time
    difference it cannot convert to seconds.

    The requested and current times are kept as context.
    """

    def __init__(
        self,
        message: str,
        current_time: Optional[Any] = None,
        requested_time: Optional[Any] = None,
        **kwargs
    ) -> None:
        self.current_time = current_time
        self.requested_time = requested_time
        kwargs["context"] = _with_fields(kwargs.get("context"), current_time=current_time,
                                         requested_time=requested_time)
        super().__init__(message, **kwargs)


class NumericalError(RelationalEventError):
    """
    Singular or ill-conditioned information matrix during Newton-Raphson.

    Raised while solving for a step and caught by the iteration loop, which
    then stops and returns the last stable coefficients.

    Parameters
    ----------
    iteration : int, optional
        Iteration at which the solve failed
    condition_number : float, optional
        Condition number of the information matrix
    """

    def __init__(
        self,
        message: str,
        iteration: Optional[int] = None,
        condition_number: Optional[float] = None,
        **kwargs
    ) -> None:
        self.iteration = iteration
        self.condition_number = condition_number
        kwargs["details"] = _with_fields(kwargs.get("details"), iteration=iteration,
                                         condition_number=condition_number)
        super().__init__(message, **kwargs)


class ComputationError(RelationalEventError):
    """
    Statistic or model computation that failed for an unexpected reason,
    such as a statistic option that has no implementation.
    """

    def __init__(
        self,
        message: str,
        operation: Optional[str] = None,
        error_type: Optional[str] = None,
        **kwargs
    ) -> None:
        self.operation = operation
        self.error_type = error_type
        kwargs["context"] = _with_fields(kwargs.get("context"), operation=operation or None,
                                         error_type=error_type or None)
        super().__init__(message, **kwargs)


class SamplingExhaustionWarning(UserWarning):
    """
    One or more strata received fewer controls than requested.

    The affected strata are listed on the observation set. The warning is
    issued once per sampling run.
    """


def validate_parameter(
    value: Any,
    valid_options: List[Any],
    parameter_name: str,
    function_name: Optional[str] = None
) -> None:
    """
    Check that an enumerated setting is one of ``valid_options``.

    Raises
    ------
    ConfigurationError
        If value is not in valid_options
    """
    if value in valid_options:
        return
    raise ConfigurationError(
        f"Invalid value for parameter '{parameter_name}': {value!r}",
        parameter=parameter_name,
        value=value,
        valid_options=valid_options,
        function=function_name
    )


def require_positive(
    value: Union[int, float],
    parameter_name: str,
    allow_zero: bool = False
) -> None:
    """
    Check that a numeric setting is positive, or non-negative with ``allow_zero``.

    NaN is always rejected.

    Raises
    ------
    ConfigurationError
        If the check fails
    """
    valid = value >= 0 if allow_zero else value > 0
    if not valid:
        bound = "non-negative" if allow_zero else "positive"
        raise ConfigurationError(
            f"Parameter '{parameter_name}' must be {bound}, got {value}",
            parameter=parameter_name,
            value=value
        )
