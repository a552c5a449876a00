"""
Estimation of relational event models by stratified conditional logistic regression.
"""

from .clogit import ClogitEstimate, fit_stratified_clogit
from .results import FitResult
from .rem import fit_event_log, fit_rem

__all__ = [
    "ClogitEstimate",
    "FitResult",
    "fit_event_log",
    "fit_rem",
    "fit_stratified_clogit",
]
