"""
Derivative-free numerical optimization.

A Nelder-Mead simplex minimizer with ``fminsearch``-style initialization and
stopping rule.  It drives the Hill-curve fits in :mod:`pyhillfit.doseresponse`
but accepts any scalar objective over a 1-D parameter vector.

Validates against: scipy.optimize.minimize(method="Nelder-Mead")
"""

from pyhillfit.optimize._common import SimplexOptions, SimplexResult
from pyhillfit.optimize._nelder_mead import nelder_mead

__all__ = [
    "SimplexOptions",
    "SimplexResult",
    "nelder_mead",
]
