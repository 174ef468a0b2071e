"""Hill dose-response model and the penalised least-squares objective.

The model gives percent inhibition as a function of concentration for a
compound with potency ``ic50`` and slope ``hill``:

.. math::
    I(x) = \\frac{100}{1 + (\\mathrm{IC50} / x)^h}

so that inhibition is 50 % at ``x = IC50`` and tends to 100 % at high
concentration for ``h > 0``.

The objective adds linear penalties when the search strays to negative IC50
values or outside the configured Hill-coefficient limits.  Penalising rather
than clamping keeps the function defined everywhere, which is what the
derivative-free simplex search needs.

A negative ``IC50 / x`` ratio raised to a non-integer Hill coefficient has no
real value; it evaluates to NaN (IEEE 754) without a warning, and the simplex
never prefers a NaN error over a finite one.
"""

from __future__ import annotations

import numpy as np
from numpy.typing import ArrayLike, NDArray

from pyhillfit.doseresponse._common import (
    DEFAULT_PENALTY,
    HillLimits,
    _validate_samples,
)


def hill_inhibition(
    concentration: ArrayLike,
    ic50: float,
    hill: float = 1.0,
) -> NDArray[np.floating]:
    """Percent inhibition predicted by a Hill curve.

    Parameters
    ----------
    concentration : array
        Concentrations, in the same units as *ic50*.  Must be nonzero.
    ic50 : float
        Concentration giving 50 % inhibition.
    hill : float
        Hill coefficient (slope).  ``1.0`` gives the one-parameter form.

    Returns
    -------
    NDArray
        Predicted inhibition in percent.
    """
    concentration = np.asarray(concentration, dtype=np.float64)
    with np.errstate(invalid="ignore", over="ignore", divide="ignore"):
        return 100.0 / (1.0 + np.power(ic50 / concentration, hill))


class HillObjective:
    """Penalised sum of squared residuals between a Hill curve and data.

    Called with ``[ic50]`` it evaluates the one-parameter curve (Hill fixed
    at 1); called with ``[ic50, hill]`` it also penalises Hill coefficients
    outside *limits*.

    Parameters
    ----------
    concentrations, inhibitions : array
        The sample set.  Validated and copied once; it does not change for
        the lifetime of the objective.
    limits : HillLimits
        Allowed Hill-coefficient interval.
    penalty : float
        Weight of the linear boundary penalties.
    """

    def __init__(
        self,
        concentrations: ArrayLike,
        inhibitions: ArrayLike,
        *,
        limits: HillLimits | None = None,
        penalty: float = DEFAULT_PENALTY,
    ) -> None:
        self._conc, self._inhib = _validate_samples(concentrations, inhibitions)
        self.limits = limits if limits is not None else HillLimits()
        self.penalty = float(penalty)

    @property
    def concentrations(self) -> NDArray[np.floating]:
        """Copy of the validated concentrations."""
        return self._conc.copy()

    @property
    def inhibitions(self) -> NDArray[np.floating]:
        """Copy of the validated percent inhibitions."""
        return self._inhib.copy()

    def residual_sum_of_squares(self, ic50: float, hill: float = 1.0) -> float:
        """Unpenalised sum of squared residuals."""
        err = hill_inhibition(self._conc, ic50, hill) - self._inhib
        return float(np.sum(err * err))

    def __call__(self, params: ArrayLike) -> float:
        params = np.asarray(params, dtype=np.float64)
        if params.ndim != 1 or params.size not in (1, 2):
            raise ValueError(
                f"parameter vector must be [ic50] or [ic50, hill], got shape {params.shape}"
            )

        ic50 = float(params[0])
        fit_hill = params.size > 1
        hill = float(params[1]) if fit_hill else 1.0

        error = self.residual_sum_of_squares(ic50, hill)

        if ic50 < 0:
            error -= self.penalty * ic50

        if fit_hill:
            if hill < self.limits.low:
                error += self.penalty * (self.limits.low - hill)
            if hill > self.limits.high:
                error += self.penalty * (hill - self.limits.high)

        return error

    def __repr__(self) -> str:
        return (
            f"HillObjective(n={self._conc.size}, limits=[{self.limits.low:g}, "
            f"{self.limits.high:g}], penalty={self.penalty:g})"
        )
