"""
Stratified conditional logistic regression by Newton-Raphson.

Each stratum holds one case row and any number of control rows. The
partial log-likelihood of coefficients ``beta`` is

    ll(beta) = sum over strata of [eta_case - log(sum_i exp(eta_i))]

with ``eta_i = x_i . beta``. It is concave, and its gradient and Hessian
have closed forms: the gradient of a stratum is ``x_case - E[x]`` and its
information (negative Hessian) is ``E[x x'] - E[x] E[x]'``, where the
expectations use the softmax of ``eta`` within the stratum.
"""

from dataclasses import dataclass
from typing import List, Optional, Tuple
import warnings

import numpy as np
from scipy import linalg, stats

from ..common.exceptions import NumericalError, ValidationError, require_positive
from ..common.logging_config import get_logger, LoggingTimer

logger = get_logger(__name__)

# Newton steps that lower the log-likelihood are halved at most this many times
MAX_STEP_HALVINGS = 20

# (position of the case row within the stratum, row indices of the stratum)
StratumRows = Tuple[int, np.ndarray]


@dataclass
class ClogitEstimate:
    """
    Raw output of :func:`fit_stratified_clogit`.

    Attributes
    ----------
    coefficients, std_errors, z_values, p_values : np.ndarray
        Per-parameter estimates; standard errors and everything derived
        from them are NaN when the information matrix is singular
    log_likelihood : float
        Partial log-likelihood at the returned coefficients
    converged : bool
        True if the log-likelihood change fell below the tolerance
    n_iterations : int
        Newton-Raphson iterations performed
    n_strata : int
        Strata used in the fit
    n_skipped_strata : int
        Strata without a case row, which were left out
    """
    coefficients: np.ndarray
    std_errors: np.ndarray
    z_values: np.ndarray
    p_values: np.ndarray
    log_likelihood: float
    converged: bool
    n_iterations: int
    n_strata: int
    n_skipped_strata: int


def _group_strata(is_event: np.ndarray, strata: np.ndarray) -> Tuple[List[StratumRows], int]:
    """Split row indices by stratum, dropping strata without a case row."""
    _, inverse = np.unique(strata, return_inverse=True)
    inverse = np.asarray(inverse).ravel()
    order = np.argsort(inverse, kind="stable")
    boundaries = np.flatnonzero(np.diff(inverse[order])) + 1

    groups: List[StratumRows] = []
    skipped = 0
    for rows in np.split(order, boundaries):
        cases = np.flatnonzero(is_event[rows])
        if cases.size == 0:
            skipped += 1
            continue
        groups.append((int(cases[0]), rows))
    return groups, skipped


def _clogit_derivatives(
    X: np.ndarray, groups: List[StratumRows], beta: np.ndarray
) -> Tuple[float, np.ndarray, np.ndarray]:
    """Log-likelihood, gradient and information matrix at ``beta``."""
    n_params = X.shape[1]
    ll = 0.0
    grad = np.zeros(n_params)
    info = np.zeros((n_params, n_params))

    for case_pos, rows in groups:
        X_s = X[rows]
        eta = X_s @ beta

        # Center by the maximum so that exp never overflows
        eta_max = eta.max()
        weights = np.exp(eta - eta_max)
        total = weights.sum()
        probs = weights / total

        ll += eta[case_pos] - eta_max - np.log(total)

        x_mean = X_s.T @ probs
        grad += X_s[case_pos] - x_mean
        info += (X_s.T * probs) @ X_s - np.outer(x_mean, x_mean)

    return ll, grad, info


def _log_likelihood(X: np.ndarray, groups: List[StratumRows], beta: np.ndarray) -> float:
    ll = 0.0
    for case_pos, rows in groups:
        eta = X[rows] @ beta
        eta_max = eta.max()
        ll += eta[case_pos] - eta_max - np.log(np.exp(eta - eta_max).sum())
    return float(ll)


def _damped_step(
    X: np.ndarray,
    groups: List[StratumRows],
    beta: np.ndarray,
    step: np.ndarray,
    ll: float,
    tol: float
) -> Tuple[Optional[np.ndarray], float]:
    """
    Take the Newton step, halving it until the log-likelihood does not drop.

    A decrease smaller than ``tol`` is accepted as rounding noise near the
    maximum. Returns ``(None, ll)`` if no candidate within
    ``MAX_STEP_HALVINGS`` halvings qualifies.
    """
    for halvings in range(MAX_STEP_HALVINGS + 1):
        candidate = beta + step
        with np.errstate(over="ignore", invalid="ignore"):
            ll_candidate = _log_likelihood(X, groups, candidate)
        if np.isfinite(ll_candidate) and ll_candidate > ll - tol:
            if halvings:
                logger.debug(f"Newton step halved {halvings} times")
            return candidate, ll_candidate
        step = step / 2.0
    return None, ll


def _condition_number(matrix: np.ndarray) -> float:
    if not np.all(np.isfinite(matrix)):
        return float("nan")
    return float(np.linalg.cond(matrix))


def _solve_newton_step(info: np.ndarray, grad: np.ndarray, iteration: int) -> np.ndarray:
    """
    Solve ``info @ step = grad``.

    Raises
    ------
    NumericalError
        If the information matrix is singular or ill-conditioned, or the
        step is not finite
    """
    with warnings.catch_warnings():
        warnings.simplefilter("error", linalg.LinAlgWarning)
        try:
            step = linalg.solve(info, grad)
        except (linalg.LinAlgError, linalg.LinAlgWarning, ValueError) as e:
            raise NumericalError(
                "Information matrix is singular or ill-conditioned",
                iteration=iteration,
                condition_number=_condition_number(info),
                cause=e
            )

    if not np.all(np.isfinite(step)):
        raise NumericalError("Newton-Raphson step is not finite", iteration=iteration)
    return step


def _standard_errors(info: np.ndarray) -> np.ndarray:
    """Square roots of the diagonal of the inverse information; NaN if singular."""
    n_params = info.shape[0]
    with warnings.catch_warnings():
        warnings.simplefilter("error", linalg.LinAlgWarning)
        try:
            covariance = linalg.inv(info)
        except (linalg.LinAlgError, linalg.LinAlgWarning, ValueError) as e:
            logger.warning(f"Information matrix is not invertible, standard errors are NaN: {e}")
            return np.full(n_params, np.nan)

    variances = np.diag(covariance)
    if not np.all(np.isfinite(variances)) or np.any(variances <= 0):
        logger.warning("Information matrix has non-positive variances, standard errors are NaN")
        return np.full(n_params, np.nan)
    return np.sqrt(variances)


def fit_stratified_clogit(
    X: np.ndarray,
    is_event: np.ndarray,
    strata: np.ndarray,
    max_iter: int = 100,
    tol: float = 1e-8
) -> ClogitEstimate:
    """
    Fit a stratified conditional logistic regression by Newton-Raphson.

    Starting from ``beta = 0``, each iteration evaluates the log-likelihood,
    gradient and information matrix and moves ``beta`` by the solution of
    ``info @ step = grad``. A step that lowers the log-likelihood is halved
    until it does not, up to ``MAX_STEP_HALVINGS`` times. The fit has
    converged when the log-likelihood changes by less than ``tol`` between
    consecutive iterations.

    If the information matrix cannot be solved, or no halved step improves
    the log-likelihood, the iteration stops and the last stable coefficients
    are returned with ``converged=False``. The returned log-likelihood is
    therefore never below its value at ``beta = 0``.

    Parameters
    ----------
    X : np.ndarray
        Design matrix, one row per observation and one column per statistic
    is_event : np.ndarray
        Boolean case indicator per row
    strata : np.ndarray
        Stratum id per row
    max_iter : int, default 100
        Maximum number of Newton-Raphson iterations
    tol : float, default 1e-8
        Convergence tolerance on the log-likelihood change

    Returns
    -------
    ClogitEstimate
        Coefficients, standard errors, z-values, two-sided p-values and
        convergence information

    Raises
    ------
    ValidationError
        If the inputs have inconsistent shapes, X has no columns or non-finite
        values, or no stratum has a case row
    ConfigurationError
        If max_iter or tol is not positive

    Examples
    --------
    >>> X = np.array([[1.0], [0.0], [0.0], [1.0], [0.0], [0.0], [0.0], [1.0], [0.0]])
    >>> is_event = np.array([True, False, False] * 3)
    >>> strata = np.array([0, 0, 0, 1, 1, 1, 2, 2, 2])
    >>> estimate = fit_stratified_clogit(X, is_event, strata)
    >>> bool(estimate.coefficients[0] > 0)
    True
    """
    require_positive(max_iter, "max_iter")
    require_positive(tol, "tol")

    X = np.asarray(X, dtype=float)
    if X.ndim == 1:
        X = X.reshape(-1, 1)
    is_event = np.asarray(is_event, dtype=bool).ravel()
    strata = np.asarray(strata).ravel()

    if X.ndim != 2 or X.shape[1] == 0:
        raise ValidationError("Design matrix must have at least one column", field="X",
                              details={"shape": X.shape})
    if not (X.shape[0] == is_event.shape[0] == strata.shape[0]):
        raise ValidationError(
            "X, is_event and strata must have the same number of rows",
            field="X",
            details={"X_rows": X.shape[0], "is_event_rows": is_event.shape[0],
                     "strata_rows": strata.shape[0]}
        )
    if not np.all(np.isfinite(X)):
        raise ValidationError("Design matrix contains NaN or infinite values", field="X")

    groups, skipped = _group_strata(is_event, strata)
    if skipped:
        logger.warning(f"Skipped {skipped} strata without a case row")
    if not groups:
        raise ValidationError("No stratum contains a case row", field="is_event")

    n_params = X.shape[1]
    beta = np.zeros(n_params)
    converged = False
    n_iterations = 0

    logger.info(f"Fitting {n_params} parameters on {len(groups)} strata ({X.shape[0]} rows)")

    with LoggingTimer("stratified_clogit_fit", {"parameters": n_params, "strata": len(groups)}):
        ll, grad, info = _clogit_derivatives(X, groups, beta)
        for iteration in range(1, max_iter + 1):
            n_iterations = iteration
            logger.debug(f"Iteration {iteration}: log-likelihood = {ll:.6f}")

            try:
                step = _solve_newton_step(info, grad, iteration)
            except NumericalError as e:
                logger.warning(f"Stopping Newton-Raphson at iteration {iteration}: {e}")
                break

            candidate, ll_candidate = _damped_step(X, groups, beta, step, ll, tol)
            if candidate is None:
                logger.warning(f"Stopping Newton-Raphson at iteration {iteration}: no step "
                               f"improves the log-likelihood after {MAX_STEP_HALVINGS} halvings")
                break

            beta = candidate
            if abs(ll_candidate - ll) < tol:
                converged = True
                break
            ll, grad, info = _clogit_derivatives(X, groups, beta)

    ll, _, info = _clogit_derivatives(X, groups, beta)
    std_errors = _standard_errors(info)
    with np.errstate(divide="ignore", invalid="ignore"):
        z_values = beta / std_errors
    p_values = 2.0 * stats.norm.sf(np.abs(z_values))

    if converged:
        logger.info(f"Converged after {n_iterations} iterations, log-likelihood = {ll:.4f}")
    else:
        logger.warning(f"Did not converge after {n_iterations} iterations, "
                       f"log-likelihood = {ll:.4f}")
        warnings.warn(
            f"Newton-Raphson did not converge after {n_iterations} iterations; "
            "estimates may be unreliable"
        )

    return ClogitEstimate(
        coefficients=beta,
        std_errors=std_errors,
        z_values=z_values,
        p_values=p_values,
        log_likelihood=float(ll),
        converged=converged,
        n_iterations=n_iterations,
        n_strata=len(groups),
        n_skipped_strata=skipped
    )
