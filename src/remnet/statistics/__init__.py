"""
Relational event statistics.

Statistics are grouped into five families: dyad history, degree, triadic
closure, four-cycles and node attributes. All of them implement the
:class:`Statistic` interface and can be combined in a :class:`StatisticSet`.
"""

from .base import (
    ActorRole,
    ClosureType,
    CycleType,
    DegreeType,
    RecencyTransform,
    Statistic,
    StatisticFamily,
    StatisticSet,
    compute_all,
    geometric_weight,
)
from .dyad import DyadCovariate, Inertia, Recency, Reciprocity, Repetition
from .degree import (
    DegreeDifference,
    LogDegree,
    ReceiverActivity,
    ReceiverPopularity,
    SenderActivity,
    SenderPopularity,
    TotalDegree,
)
from .triangle import (
    CommonNeighbors,
    CyclicClosure,
    GeometricWeightedTriads,
    SharedReceiver,
    SharedSender,
    TransitiveClosure,
)
from .fourcycle import FourCycle, GeometricWeightedFourCycles, count_four_cycles
from .node import (
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
from .catalog import STATISTIC_TYPES, create_statistic, statistics_in_family

__all__ = [
    # Interface
    "Statistic",
    "StatisticFamily",
    "StatisticSet",
    "STATISTIC_TYPES",
    "create_statistic",
    "statistics_in_family",
    "compute_all",
    "geometric_weight",
    "count_four_cycles",
    # Options
    "ActorRole",
    "ClosureType",
    "CycleType",
    "DegreeType",
    "RecencyTransform",
    # Dyad
    "Repetition",
    "Reciprocity",
    "Inertia",
    "Recency",
    "DyadCovariate",
    # Degree
    "SenderActivity",
    "ReceiverActivity",
    "SenderPopularity",
    "ReceiverPopularity",
    "TotalDegree",
    "DegreeDifference",
    "LogDegree",
    # Triadic
    "TransitiveClosure",
    "CyclicClosure",
    "SharedSender",
    "SharedReceiver",
    "CommonNeighbors",
    "GeometricWeightedTriads",
    # Four-cycle
    "FourCycle",
    "GeometricWeightedFourCycles",
    # Node
    "NodeAttribute",
    "NodeMatch",
    "NodeMix",
    "NodeDifference",
    "NodeSum",
    "NodeProduct",
    "SenderAttribute",
    "ReceiverAttribute",
    "SenderCategorical",
    "ReceiverCategorical",
]
