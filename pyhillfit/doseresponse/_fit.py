"""Single-compound Hill curve fitting.

Fits ``[ic50]`` or ``[ic50, hill]`` by minimizing :class:`HillObjective` with
the Nelder-Mead simplex (:func:`pyhillfit.optimize.nelder_mead`).

Two-parameter fits are staged: IC50 is first fitted on its own with the Hill
coefficient fixed at 1, and that estimate seeds the joint fit.  This keeps
the simplex away from poor local optima when the data barely constrain the
slope.

Data measured at a single concentration level cannot identify a Hill
coefficient, so such fits are always reduced to IC50 only.
"""

from __future__ import annotations

import logging

import numpy as np
from numpy.typing import ArrayLike, NDArray

from pyhillfit.doseresponse._common import (
    DEFAULT_MAX_HILL,
    DEFAULT_MIN_HILL,
    DEFAULT_PENALTY,
    HillFitResult,
    HillLimits,
    _check_n_params,
    _validate_samples,
)
from pyhillfit.doseresponse._models import HillObjective
from pyhillfit.doseresponse._potency import block_at
from pyhillfit.optimize import SimplexOptions, nelder_mead

logger = logging.getLogger(__name__)

# uM.  Corresponds to a pIC50 of 0: even at 100 uM a compound with this IC50
# (and Hill = 1) blocks less than 0.01 %.
IC50_CAP = 1e6


# ---------------------------------------------------------------------------
# Orchestrator
# ---------------------------------------------------------------------------

class HillFitter:
    """Fit a Hill curve to one compound's concentration/inhibition data.

    Parameters
    ----------
    concentrations : array
        Concentrations (uM by convention), strictly positive.
    inhibitions : array
        Percent inhibition at each concentration.
    n_params : int
        ``1`` fits IC50 only, ``2`` fits IC50 and the Hill coefficient.
    round_values : bool
        Cap IC50 values at or above :data:`IC50_CAP` (and reset the Hill
        coefficient to 1) so compounds with no measurable activity give a
        sensible result instead of an arbitrarily large number.
    penalty : float
        Weight of the objective's boundary penalties.
    options : SimplexOptions or None
        Minimizer tunables.

    Examples
    --------
    >>> fitter = HillFitter([0.37, 1.11, 3.33, 10], [27.49, 51.45, 74.8, 88.49], 2)
    >>> ic50, hill = fitter.run()
    >>> round(float(ic50), 1), round(float(hill), 1)
    (1.0, 0.9)
    """

    def __init__(
        self,
        concentrations: ArrayLike,
        inhibitions: ArrayLike,
        n_params: int = 1,
        *,
        round_values: bool = False,
        penalty: float = DEFAULT_PENALTY,
        options: SimplexOptions | None = None,
    ) -> None:
        self._conc, self._inhib = _validate_samples(concentrations, inhibitions)
        self.n_params = _check_n_params(n_params)
        self.round_values = bool(round_values)
        self.penalty = float(penalty)
        self.options = options
        self._limits = HillLimits(DEFAULT_MIN_HILL, DEFAULT_MAX_HILL)
        self._n_evaluations = 0
        self._capped = False

    @property
    def hill_limits(self) -> HillLimits:
        """Interval the Hill coefficient is constrained to."""
        return self._limits

    @property
    def n_evaluations(self) -> int:
        """Objective evaluations spent by the last :meth:`run`."""
        return self._n_evaluations

    @property
    def capped(self) -> bool:
        """Whether the last :meth:`run` capped the IC50."""
        return self._capped

    def set_hill_limits(self, low: float, high: float) -> None:
        """Set the interval the Hill coefficient is constrained to.

        Raises
        ------
        ValueError
            If ``high <= low``.
        """
        self._limits = HillLimits(float(low), float(high))

    def _single_concentration(self) -> bool:
        return bool(np.all(self._conc == self._conc[0]))

    def _fit_n_params(
        self,
        n_params: int,
        initial_guess: NDArray[np.floating] | None = None,
    ) -> NDArray[np.floating]:
        """Run one simplex minimization; returns ``[ic50]`` or ``[ic50, hill]``."""
        if self._single_concentration():
            n_params = 1

        # Starting IC50: the concentration whose response is closest to 50 %.
        start_ic50 = float(self._conc[np.argmin(np.abs(50.0 - self._inhib))])

        if n_params > 1:
            if initial_guess is None:
                x0 = np.array([start_ic50, 1.0])
            else:
                x0 = np.asarray(initial_guess, dtype=np.float64)
        elif initial_guess is None:
            x0 = np.array([start_ic50])
        else:
            x0 = np.array([initial_guess[0]], dtype=np.float64)

        objective = HillObjective(
            self._conc, self._inhib, limits=self._limits, penalty=self.penalty,
        )
        result = nelder_mead(objective, x0, options=self.options)
        self._n_evaluations += result.n_evaluations

        if not result.converged:
            logger.warning(
                "Simplex hit the iteration cap after %d evaluations; "
                "returning best point found",
                result.n_evaluations,
            )
        return result.x

    def run(self) -> NDArray[np.floating]:
        """Fit the curve.

        Returns
        -------
        NDArray
            ``[ic50]`` or ``[ic50, hill]``.  A two-parameter request returns
            a single value when all concentrations are identical.
        """
        self._n_evaluations = 0
        self._capped = False

        params = None
        if self.n_params == 2:
            params = np.append(self._fit_n_params(1), 1.0)
        params = self._fit_n_params(self.n_params, params)

        logger.info(
            "Minimization complete: total number of function evaluations = %d",
            self._n_evaluations,
        )

        if self.round_values and params[0] >= IC50_CAP:
            logger.warning(
                "IC50 that was fitted = %g uM, this is outside measurable range. "
                "Capping the fitted value to %g uM (even at 100 uM this is only "
                "%.2g%% block) and setting the Hill coefficient to 1.",
                params[0], IC50_CAP, 100.0 * block_at(100.0, IC50_CAP),
            )
            params[0] = IC50_CAP
            if params.size == 2:
                params[1] = 1.0
            self._capped = True

        return params

    def fit(self) -> HillFitResult:
        """Fit the curve and wrap the parameters in a :class:`HillFitResult`."""
        params = self.run()
        return HillFitResult(
            params=params,
            ic50=float(params[0]),
            hill=float(params[1]) if params.size > 1 else 1.0,
            n_params=int(params.size),
            n_evaluations=self._n_evaluations,
            capped=self._capped,
            limits=self._limits,
            concentrations=self._conc.copy(),
            inhibitions=self._inhib.copy(),
        )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def fit_hill(
    concentrations: ArrayLike,
    inhibitions: ArrayLike,
    *,
    n_params: int = 1,
    round_values: bool = False,
    hill_limits: tuple[float, float] = (DEFAULT_MIN_HILL, DEFAULT_MAX_HILL),
    penalty: float = DEFAULT_PENALTY,
    options: SimplexOptions | None = None,
) -> HillFitResult:
    """Fit a Hill dose-response curve to percent-inhibition data.

    Parameters
    ----------
    concentrations : array
        Concentrations (uM by convention), strictly positive.
    inhibitions : array
        Percent inhibition at each concentration.
    n_params : int
        ``1`` (IC50) or ``2`` (IC50 and Hill coefficient).
    round_values : bool
        Cap IC50 at :data:`IC50_CAP` for inactive compounds.
    hill_limits : tuple of float
        ``(low, high)`` interval for the Hill coefficient.
    penalty : float
        Boundary penalty weight.
    options : SimplexOptions or None
        Minimizer tunables.

    Returns
    -------
    HillFitResult

    Examples
    --------
    >>> r = fit_hill([10.0], [50.0])
    >>> r.ic50
    10.0
    """
    fitter = HillFitter(
        concentrations,
        inhibitions,
        n_params,
        round_values=round_values,
        penalty=penalty,
        options=options,
    )
    fitter.set_hill_limits(*hill_limits)
    return fitter.fit()
