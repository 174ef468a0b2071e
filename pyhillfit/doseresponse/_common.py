"""Shared configuration, result types and input validation for Hill fitting."""

from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np
from numpy.typing import ArrayLike, NDArray

DEFAULT_PENALTY = 1e10

# 5 is widely used as an upper limit for Hill coefficients in safety pharmacology.
DEFAULT_MIN_HILL = 0.0
DEFAULT_MAX_HILL = 5.0


@dataclass(frozen=True)
class HillLimits:
    """Closed interval ``[low, high]`` the Hill coefficient is penalised to stay in."""

    low: float = DEFAULT_MIN_HILL
    high: float = DEFAULT_MAX_HILL

    def __post_init__(self) -> None:
        if not (math.isfinite(self.low) and math.isfinite(self.high)):
            raise ValueError(f"Hill limits must be finite, got ({self.low}, {self.high})")
        if self.high <= self.low:
            raise ValueError(
                f"Hill limits need high > low, got low={self.low}, high={self.high}"
            )


# ---------------------------------------------------------------------------
# Shared validation
# ---------------------------------------------------------------------------

def _validate_samples(
    concentrations: ArrayLike,
    inhibitions: ArrayLike,
) -> tuple[NDArray[np.floating], NDArray[np.floating]]:
    """Coerce and check a concentration/inhibition sample set.

    Returns
    -------
    tuple of NDArray
        ``(concentrations, inhibitions)`` as float64 copies.

    Raises
    ------
    ValueError
        If the arrays are not 1-D, differ in length, are empty, contain
        non-finite values, or any concentration is not strictly positive.
    """
    conc = np.array(concentrations, dtype=np.float64)
    inhib = np.array(inhibitions, dtype=np.float64)

    if conc.ndim != 1 or inhib.ndim != 1:
        raise ValueError("concentrations and inhibitions must be 1-D arrays")
    if conc.shape != inhib.shape:
        raise ValueError(
            "concentrations and inhibitions must have same length, "
            f"got {conc.size} and {inhib.size}"
        )
    if conc.size == 0:
        raise ValueError("need at least one concentration/inhibition pair")
    if not (np.all(np.isfinite(conc)) and np.all(np.isfinite(inhib))):
        raise ValueError("concentrations and inhibitions must be finite")
    if np.any(conc <= 0):
        raise ValueError("concentrations must be strictly positive")

    return conc, inhib


def _check_n_params(n_params: int) -> int:
    if n_params not in (1, 2):
        raise ValueError(f"Can only fit 1 or 2 parameters, not {n_params}")
    return int(n_params)


# ---------------------------------------------------------------------------
# Result types
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class HillFitResult:
    """Result of fitting a Hill curve to one compound.

    ``params`` is ``[ic50]`` or ``[ic50, hill]`` exactly as the fitter
    returned it; ``hill`` is ``1.0`` when only the IC50 was fitted.
    Concentrations and IC50 share the same units (conventionally uM).
    """

    params: NDArray[np.floating]
    ic50: float
    hill: float
    n_params: int
    n_evaluations: int
    capped: bool
    limits: HillLimits
    concentrations: NDArray[np.floating]
    inhibitions: NDArray[np.floating]

    @property
    def pic50(self) -> float:
        """pIC50 in log molar units, assuming IC50 is in uM; NaN if IC50 <= 0."""
        from pyhillfit.doseresponse._potency import pic50_from_ic50

        if self.ic50 <= 0:
            return float("nan")
        return pic50_from_ic50(self.ic50)

    @property
    def residuals(self) -> NDArray[np.floating]:
        """Observed minus predicted inhibition at the fitted concentrations."""
        return self.inhibitions - self.predict()

    @property
    def rss(self) -> float:
        """Residual sum of squares (no boundary penalties)."""
        return float(np.sum(self.residuals**2))

    def predict(self, concentrations: ArrayLike | None = None) -> NDArray[np.floating]:
        """Predicted % inhibition.  If *concentrations* is ``None``, use the fitted ones."""
        from pyhillfit.doseresponse._models import hill_inhibition

        if concentrations is None:
            concentrations = self.concentrations
        return hill_inhibition(concentrations, self.ic50, self.hill)

    def summary(self) -> str:
        """Human-readable summary of the fit."""
        hill_note = "" if self.n_params == 2 else " (fixed)"
        lines = [
            f"Hill curve fit ({self.n_params} parameter{'s' if self.n_params > 1 else ''})",
            "",
            f"  IC50  = {self.ic50:.6g} uM",
            f"  pIC50 = {self.pic50:.4f} (log M)",
            f"  Hill  = {self.hill:.6g}{hill_note}",
            "",
            f"  RSS   = {self.rss:.6f}",
            f"  n     = {self.concentrations.size}",
            f"  Hill limits: [{self.limits.low:g}, {self.limits.high:g}]",
            f"  Function evaluations: {self.n_evaluations}",
        ]
        if self.capped:
            lines.append("  IC50 capped at the measurable limit")
        return "\n".join(lines)


@dataclass(frozen=True)
class BatchHillFitResult:
    """Result of fitting Hill curves to many compounds.

    Each array has length n_compounds.  Compounds whose data could not be
    fitted carry NaN estimates and ``success = False``.
    """

    ic50: NDArray[np.floating]
    hill: NDArray[np.floating]
    n_evaluations: NDArray[np.int_]
    success: NDArray[np.bool_]
    n_compounds: int

    @property
    def pic50(self) -> NDArray[np.floating]:
        """pIC50 per compound (log M, IC50 in uM); NaN where the fit failed or IC50 <= 0."""
        positive = self.ic50 > 0
        with np.errstate(invalid="ignore", divide="ignore"):
            return np.where(positive, -np.log10(1e-6 * self.ic50), np.nan)
