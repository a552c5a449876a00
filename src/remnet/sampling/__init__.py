"""
Case-control sampling of event logs into stratified observation tables.
"""

from .sampler import (
    OBSERVATION_COLUMNS,
    CaseControlSampler,
    Observation,
    ObservationSet,
    compute_statistics,
    generate_observations,
)

__all__ = [
    "OBSERVATION_COLUMNS",
    "CaseControlSampler",
    "Observation",
    "ObservationSet",
    "compute_statistics",
    "generate_observations",
]
