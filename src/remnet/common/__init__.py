"""
Common utilities for the remnet library.

This module provides shared functionality used across all other modules:
- Custom exception hierarchy
- Logging configuration
- Actor id mapping for labelled input data
- Input validation for event tables
- Time normalization and decay helpers
"""

from .exceptions import (
    RelationalEventError,
    ValidationError,
    DataFormatError,
    ConfigurationError,
    StateError,
    NumericalError,
    ComputationError,
    SamplingExhaustionWarning,
    validate_parameter,
    require_positive
)

from .id_mapper import ActorMapper
from .validators import validate_event_dataframe

from .logging_config import (
    setup_logging,
    get_logger,
    log_performance_metric,
    LoggingTimer,
    JSONFormatter
)

from .timeutils import (
    elapsed_seconds,
    seconds_between,
    halflife_to_decay,
    decay_to_halflife,
    compute_decay_weight
)
