"""Hill-curve fitting for many compounds.

Each compound is fit independently with :class:`HillFitter`; nothing is
shared between fits, so the loop is a plain sequential pass.  Compounds may
have different numbers of data points.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

import numpy as np
from numpy.typing import ArrayLike

from pyhillfit.doseresponse._common import (
    DEFAULT_MAX_HILL,
    DEFAULT_MIN_HILL,
    BatchHillFitResult,
    HillLimits,
    _check_n_params,
)
from pyhillfit.doseresponse._fit import HillFitter
from pyhillfit.optimize import SimplexOptions

logger = logging.getLogger(__name__)


def fit_hill_batch(
    dose_sets: Sequence[ArrayLike],
    response_sets: Sequence[ArrayLike],
    *,
    n_params: int = 1,
    round_values: bool = False,
    hill_limits: tuple[float, float] = (DEFAULT_MIN_HILL, DEFAULT_MAX_HILL),
    options: SimplexOptions | None = None,
) -> BatchHillFitResult:
    """Fit a Hill curve to each compound in turn.

    Parameters
    ----------
    dose_sets : sequence of arrays
        Concentrations for each compound.  A 2-D array with one row per
        compound also works.
    response_sets : sequence of arrays
        Percent inhibitions for each compound, matching *dose_sets*.
    n_params : int
        ``1`` or ``2`` parameters per compound.
    round_values : bool
        Cap inactive compounds' IC50 (see :class:`HillFitter`).
    hill_limits : tuple of float
        Hill-coefficient interval applied to every compound.
    options : SimplexOptions or None
        Minimizer tunables.

    Returns
    -------
    BatchHillFitResult
        Compounds whose data fail validation are reported with NaN estimates
        and ``success = False`` rather than aborting the batch.  The Hill
        entry is ``1.0`` for compounds fit with IC50 only.
    """
    if len(dose_sets) != len(response_sets):
        raise ValueError(
            "dose_sets and response_sets must have the same number of compounds, "
            f"got {len(dose_sets)} and {len(response_sets)}"
        )
    n_params = _check_n_params(n_params)
    limits = HillLimits(*hill_limits)

    K = len(dose_sets)
    ic50 = np.empty(K)
    hill = np.empty(K)
    n_evaluations = np.zeros(K, dtype=np.int_)
    success = np.zeros(K, dtype=bool)

    for i in range(K):
        try:
            fitter = HillFitter(
                dose_sets[i],
                response_sets[i],
                n_params,
                round_values=round_values,
                options=options,
            )
        except ValueError as exc:
            logger.warning("Compound %d skipped: %s", i, exc)
            ic50[i] = hill[i] = np.nan
            continue

        fitter.set_hill_limits(limits.low, limits.high)
        params = fitter.run()
        ic50[i] = params[0]
        hill[i] = params[1] if params.size > 1 else 1.0
        n_evaluations[i] = fitter.n_evaluations
        success[i] = True

    return BatchHillFitResult(
        ic50=ic50,
        hill=hill,
        n_evaluations=n_evaluations,
        success=success,
        n_compounds=K,
    )
