"""
Catalog of the available statistics.

The catalog is a fixed, explicit registry: a statistic is only available by
name once it is listed in ``STATISTIC_TYPES``.
"""

from typing import Any, Dict, List, Type

from .base import Statistic, StatisticFamily
from .degree import (
    DegreeDifference,
    LogDegree,
    ReceiverActivity,
    ReceiverPopularity,
    SenderActivity,
    SenderPopularity,
    TotalDegree,
)
from .dyad import DyadCovariate, Inertia, Recency, Reciprocity, Repetition
from .fourcycle import FourCycle, GeometricWeightedFourCycles
from .node import (
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
from .triangle import (
    CommonNeighbors,
    CyclicClosure,
    GeometricWeightedTriads,
    SharedReceiver,
    SharedSender,
    TransitiveClosure,
)
from ..common.exceptions import ConfigurationError

STATISTIC_TYPES: Dict[str, Type[Statistic]] = {
    cls.__name__: cls
    for cls in [
        # Dyad
        Repetition,
        Reciprocity,
        Inertia,
        Recency,
        DyadCovariate,
        # Degree
        SenderActivity,
        ReceiverActivity,
        SenderPopularity,
        ReceiverPopularity,
        TotalDegree,
        DegreeDifference,
        LogDegree,
        # Triadic
        TransitiveClosure,
        CyclicClosure,
        SharedSender,
        SharedReceiver,
        CommonNeighbors,
        GeometricWeightedTriads,
        # Four-cycle
        FourCycle,
        GeometricWeightedFourCycles,
        # Node
        NodeMatch,
        NodeMix,
        NodeDifference,
        NodeSum,
        NodeProduct,
        SenderAttribute,
        ReceiverAttribute,
        SenderCategorical,
        ReceiverCategorical,
    ]
}


def statistics_in_family(family: StatisticFamily) -> List[str]:
    """Names of the catalogued statistic types in one family, in catalog order."""
    return [name for name, cls in STATISTIC_TYPES.items() if cls.family == family]


def create_statistic(type_name: str, **params: Any) -> Statistic:
    """
    Build a statistic from its type name and configuration.

    Parameters
    ----------
    type_name : str
        Class name of a catalogued statistic, e.g. ``"Recency"``
    **params
        Keyword configuration passed to the statistic's constructor

    Returns
    -------
    Statistic
        Configured statistic

    Raises
    ------
    ConfigurationError
        If type_name is not in the catalog or the parameters are invalid

    Examples
    --------
    >>> create_statistic("Recency", transform="log").name()
    'recency_log'
    """
    if type_name not in STATISTIC_TYPES:
        raise ConfigurationError(
            f"Unknown statistic type: {type_name}",
            parameter="type_name",
            value=type_name,
            valid_options=list(STATISTIC_TYPES)
        )

    try:
        return STATISTIC_TYPES[type_name](**params)
    except TypeError as e:
        raise ConfigurationError(
            f"Invalid parameters for {type_name}: {e}",
            parameter="params",
            value=params,
            function="create_statistic"
        ) from e
