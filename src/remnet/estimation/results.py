"""
Fitted relational event model results.
"""

from dataclasses import dataclass
from typing import Dict, List

import numpy as np
import polars as pl


def _significance_code(p_value: float) -> str:
    if not np.isfinite(p_value):
        return ""
    if p_value < 0.001:
        return "***"
    if p_value < 0.01:
        return "**"
    if p_value < 0.05:
        return "*"
    if p_value < 0.1:
        return "."
    return ""


@dataclass
class FitResult:
    """
    Result of fitting a relational event model.

    Attributes
    ----------
    coefficients : np.ndarray
        Estimated coefficient per statistic
    std_errors : np.ndarray
        Standard errors; NaN when the information matrix is singular
    z_values : np.ndarray
        ``coefficients / std_errors``
    p_values : np.ndarray
        Two-sided p-values of the z-values
    stat_names : List[str]
        Statistic names, in coefficient order
    n_events : int
        Number of case rows
    n_observations : int
        Number of rows (cases plus controls)
    log_likelihood : float
        Partial log-likelihood at the estimates
    converged : bool
        Whether Newton-Raphson converged
    n_iterations : int
        Newton-Raphson iterations performed
    n_skipped_strata : int
        Strata left out because they had no case row
    """
    coefficients: np.ndarray
    std_errors: np.ndarray
    z_values: np.ndarray
    p_values: np.ndarray
    stat_names: List[str]
    n_events: int
    n_observations: int
    log_likelihood: float
    converged: bool
    n_iterations: int = 0
    n_skipped_strata: int = 0

    def coef(self) -> np.ndarray:
        return self.coefficients

    def stderror(self) -> np.ndarray:
        return self.std_errors

    def coef_dict(self) -> Dict[str, float]:
        """Coefficients keyed by statistic name."""
        return {name: float(value) for name, value in zip(self.stat_names, self.coefficients)}

    def coeftable(self) -> pl.DataFrame:
        """
        Coefficient table with one row per statistic.

        Returns
        -------
        pl.DataFrame
            Columns ``statistic``, ``coefficient``, ``std_error``, ``z_value``
            and ``p_value``
        """
        return pl.DataFrame(
            {
                "statistic": pl.Series(self.stat_names, dtype=pl.Utf8),
                "coefficient": pl.Series(np.asarray(self.coefficients, dtype=float)),
                "std_error": pl.Series(np.asarray(self.std_errors, dtype=float)),
                "z_value": pl.Series(np.asarray(self.z_values, dtype=float)),
                "p_value": pl.Series(np.asarray(self.p_values, dtype=float)),
            }
        )

    def summary(self) -> str:
        """Human-readable summary with significance codes."""
        rule = "-" * 68
        lines = [
            "Relational Event Model Results",
            "=" * 68,
            f"Events: {self.n_events}, Observations: {self.n_observations}",
            f"Log-likelihood: {self.log_likelihood:.4f}",
            f"Converged: {self.converged} ({self.n_iterations} iterations)",
        ]
        if self.n_skipped_strata:
            lines.append(f"Skipped strata: {self.n_skipped_strata}")
        lines += [
            "",
            rule,
            f"{'Statistic':<24} {'Coef':>10} {'Std.Err':>10} {'z':>10} {'P>|z|':>10}",
            rule,
        ]
        for name, b, se, z, p in zip(self.stat_names, self.coefficients, self.std_errors,
                                     self.z_values, self.p_values):
            lines.append(f"{name[:24]:<24} {b:>10.4f} {se:>10.4f} {z:>10.4f} {p:>10.4f} "
                         f"{_significance_code(p)}".rstrip())
        lines += [rule, "Signif. codes: 0 '***' 0.001 '**' 0.01 '*' 0.05 '.' 0.1 ' ' 1"]
        return "\n".join(lines)

    def __str__(self) -> str:
        return self.summary()
