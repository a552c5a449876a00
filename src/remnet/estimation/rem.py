"""
Fitting relational event models from observation tables or event logs.
"""

from typing import List, Optional, Sequence, Union

import numpy as np
import polars as pl

from .clogit import fit_stratified_clogit
from .results import FitResult
from ..common.exceptions import ValidationError
from ..common.logging_config import get_logger
from ..events.event import EventLog
from ..sampling.sampler import (
    OBSERVATION_COLUMNS,
    CaseControlSampler,
    ObservationSet,
    generate_observations
)
from ..statistics.base import Statistic, StatisticSet

logger = get_logger(__name__)


def fit_rem(
    observations: Union[ObservationSet, pl.DataFrame],
    stat_names: Optional[List[str]] = None,
    max_iter: int = 100,
    tol: float = 1e-8
) -> FitResult:
    """
    Fit a relational event model to a case-control observation table.

    Parameters
    ----------
    observations : ObservationSet or pl.DataFrame
        Output of :func:`~remnet.sampling.generate_observations`, or a table
        with ``stratum`` and ``is_event`` columns plus statistic columns
    stat_names : List[str], optional
        Statistic columns to use as covariates. Defaults to the statistics
        of the observation set, or to every column of a DataFrame that is
        not a bookkeeping column
    max_iter : int, default 100
        Maximum Newton-Raphson iterations
    tol : float, default 1e-8
        Convergence tolerance on the log-likelihood change

    Returns
    -------
    FitResult
        Coefficients, standard errors and model diagnostics

    Raises
    ------
    ValidationError
        If required columns are missing or no statistic column is selected

    Examples
    --------
    >>> obs = generate_observations(log, [Repetition()], CaseControlSampler(seed=1))
    >>> result = fit_rem(obs)
    >>> result.coeftable()
    """
    if isinstance(observations, ObservationSet):
        data = observations.data
        if stat_names is None:
            stat_names = observations.stat_names
    else:
        data = observations
        if stat_names is None:
            stat_names = [col for col in data.columns
                          if col not in OBSERVATION_COLUMNS and col != "time"]

    stat_names = list(stat_names)
    if not stat_names:
        raise ValidationError("No statistic columns selected", field="stat_names")

    missing = [col for col in ["stratum", "is_event"] + stat_names if col not in data.columns]
    if missing:
        raise ValidationError(
            f"Missing required columns: {missing}",
            field="columns",
            details={"available_columns": data.columns, "missing": missing}
        )

    X = data.select([pl.col(col).cast(pl.Float64) for col in stat_names]).to_numpy()
    is_event = data["is_event"].cast(pl.Boolean).to_numpy()
    strata = data["stratum"].to_numpy()

    estimate = fit_stratified_clogit(X, is_event, strata, max_iter=max_iter, tol=tol)

    return FitResult(
        coefficients=estimate.coefficients,
        std_errors=estimate.std_errors,
        z_values=estimate.z_values,
        p_values=estimate.p_values,
        stat_names=stat_names,
        n_events=int(np.sum(is_event)),
        n_observations=data.height,
        log_likelihood=estimate.log_likelihood,
        converged=estimate.converged,
        n_iterations=estimate.n_iterations,
        n_skipped_strata=estimate.n_skipped_strata
    )


def fit_event_log(
    log: EventLog,
    statistics: Union[StatisticSet, Sequence[Statistic]],
    n_controls: int = 100,
    decay: float = 0.0,
    exclude_self_loops: bool = True,
    seed: Optional[int] = None,
    max_iter: int = 100,
    tol: float = 1e-8
) -> FitResult:
    """
    Sample controls for every event in ``log`` and fit the model.

    Convenience wrapper around :class:`~remnet.sampling.CaseControlSampler`,
    :func:`~remnet.sampling.generate_observations` and :func:`fit_rem`.

    Examples
    --------
    >>> result = fit_event_log(log, [Repetition(), Reciprocity()], n_controls=20, seed=7)
    >>> print(result)
    """
    sampler = CaseControlSampler(
        n_controls=n_controls,
        exclude_self_loops=exclude_self_loops,
        seed=seed
    )
    observations = generate_observations(log, statistics, sampler, decay=decay)
    return fit_rem(observations, max_iter=max_iter, tol=tol)
