"""
Dose-response (Hill curve) fitting for ion-channel and enzyme assays.

Summarises a compound's potency from a handful of concentration /
percent-inhibition measurements: IC50, and optionally the Hill coefficient,
fitted by a penalised least-squares Nelder-Mead search.

Validates against: ApPredict DoseResponseFitter reference cases.
"""

from pyhillfit.doseresponse._common import (
    DEFAULT_PENALTY,
    HillLimits,
    HillFitResult,
    BatchHillFitResult,
)
from pyhillfit.doseresponse._models import hill_inhibition, HillObjective
from pyhillfit.doseresponse._fit import IC50_CAP, HillFitter, fit_hill
from pyhillfit.doseresponse._batch import fit_hill_batch
from pyhillfit.doseresponse._potency import pic50_from_ic50, ic50_from_pic50, block_at

__all__ = [
    "DEFAULT_PENALTY",
    "IC50_CAP",
    "HillLimits",
    "HillFitResult",
    "BatchHillFitResult",
    "hill_inhibition",
    "HillObjective",
    "HillFitter",
    "fit_hill",
    "fit_hill_batch",
    "pic50_from_ic50",
    "ic50_from_pic50",
    "block_at",
]
