"""Potency unit conversions (IC50 <-> pIC50) and fractional block.

pIC50 is ``-log10(IC50)`` with IC50 expressed in molar units.  Fitted IC50
values carry the units of the input concentrations, conventionally uM.
"""

from __future__ import annotations

import math

import numpy as np
from numpy.typing import ArrayLike, NDArray

_UNIT_SCALE = {
    "M": 1.0,
    "mM": 1e-3,
    "uM": 1e-6,
    "nM": 1e-9,
}


def _scale(units: str) -> float:
    try:
        return _UNIT_SCALE[units]
    except KeyError:
        raise ValueError(
            f"units must be one of {tuple(_UNIT_SCALE)}, got {units!r}"
        ) from None


def pic50_from_ic50(ic50: float, units: str = "uM") -> float:
    """Convert an IC50 to pIC50 (log molar).

    Examples
    --------
    >>> pic50_from_ic50(1.0)
    6.0
    """
    if not ic50 > 0:
        raise ValueError(f"ic50 must be positive, got {ic50}")
    return -math.log10(ic50 * _scale(units))


def ic50_from_pic50(pic50: float, units: str = "uM") -> float:
    """Convert a pIC50 (log molar) back to an IC50 in *units*."""
    return 10.0 ** (-pic50) / _scale(units)


def block_at(
    concentration: ArrayLike,
    ic50: float,
    hill: float = 1.0,
) -> float | NDArray[np.floating]:
    """Fractional block (0 to 1) at *concentration* for a Hill curve.

    Same units for *concentration* and *ic50*.
    """
    conc = np.asarray(concentration, dtype=np.float64)
    block = 1.0 / (1.0 + np.power(ic50 / conc, hill))
    if block.ndim == 0:
        return float(block)
    return block
