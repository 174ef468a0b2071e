"""
PyHillFit: dose-response curve fitting for safety pharmacology.

Fits Hill curves to concentration / percent-inhibition data and reports IC50
(pIC50) and Hill coefficients, using a derivative-free Nelder-Mead simplex
search on a penalised least-squares objective.

Usage:
    from pyhillfit import doseresponse, optimize
"""

__version__ = "0.1.0"

from pyhillfit import optimize
from pyhillfit import doseresponse

__all__ = [
    "__version__",
    "optimize",
    "doseresponse",
]
