"""
remnet - Relational event modeling for time-stamped interaction networks.

This package replays sequences of directed, time-stamped events between
actors, computes network statistics for observed and sampled non-observed
events, and estimates relational event models by stratified conditional
logistic regression.

Modules:
    common: Exceptions, logging, actor id mapping, validation, time helpers
    events: Events, event logs and table loading
    network: Incremental network state with exponential decay
    statistics: Dyad, degree, triadic, four-cycle and node attribute statistics
    sampling: Case-control sampling into stratified observation tables
    estimation: Newton-Raphson fitting of the stratified partial likelihood
"""

__version__ = "0.1.0"

from .common import (
    ActorMapper,
    ComputationError,
    ConfigurationError,
    DataFormatError,
    NumericalError,
    RelationalEventError,
    SamplingExhaustionWarning,
    StateError,
    ValidationError,
    decay_to_halflife,
    halflife_to_decay,
    setup_logging,
)
from .events import Event, EventLog, load_events
from .network import NetworkState
from .statistics import *  # noqa: F401,F403
from .statistics import __all__ as _statistics_all
from .sampling import (
    CaseControlSampler,
    Observation,
    ObservationSet,
    compute_statistics,
    generate_observations,
)
from .estimation import FitResult, fit_event_log, fit_rem, fit_stratified_clogit

__all__ = [
    "__version__",
    "ActorMapper",
    "ComputationError",
    "ConfigurationError",
    "DataFormatError",
    "NumericalError",
    "RelationalEventError",
    "SamplingExhaustionWarning",
    "StateError",
    "ValidationError",
    "decay_to_halflife",
    "halflife_to_decay",
    "setup_logging",
    "Event",
    "EventLog",
    "load_events",
    "NetworkState",
    "CaseControlSampler",
    "Observation",
    "ObservationSet",
    "compute_statistics",
    "generate_observations",
    "FitResult",
    "fit_event_log",
    "fit_rem",
    "fit_stratified_clogit",
] + list(_statistics_all)
