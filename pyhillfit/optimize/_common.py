"""Shared option and result types for the simplex minimizer."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np
from numpy.typing import NDArray


@dataclass(frozen=True)
class SimplexOptions:
    """Tunables for :func:`nelder_mead`.

    The iteration cap is a safety bound rather than a tuning knob: the
    default is large enough that the tolerance test is what stops the search
    in practice.
    """

    max_iter: int = 100_000_000
    tol: float = 1e-8
    reflection: float = 1.0
    expansion: float = 2.0
    contraction: float = 0.5
    shrink: float = 0.5
    display_iterations: bool = False

    def __post_init__(self) -> None:
        if self.max_iter < 1:
            raise ValueError(f"max_iter must be >= 1, got {self.max_iter}")
        if not self.tol >= 0:
            raise ValueError(f"tol must be >= 0, got {self.tol}")
        if not self.reflection > 0:
            raise ValueError(f"reflection must be > 0, got {self.reflection}")
        if not self.expansion > 1:
            raise ValueError(f"expansion must be > 1, got {self.expansion}")
        if not (0.0 < self.contraction < 1.0):
            raise ValueError(f"contraction must be in (0, 1), got {self.contraction}")
        if not (0.0 < self.shrink < 1.0):
            raise ValueError(f"shrink must be in (0, 1), got {self.shrink}")


@dataclass(frozen=True)
class SimplexResult:
    """Outcome of a simplex minimization.

    ``converged`` is ``False`` when the iteration cap was reached before the
    tolerance test passed; ``x`` is still the best vertex found.
    """

    x: NDArray[np.floating]
    fun: float
    n_evaluations: int
    n_iter: int
    converged: bool

    def summary(self) -> str:
        """Human-readable summary."""
        coords = ", ".join(f"{v:.6g}" for v in self.x)
        lines = [
            "Nelder-Mead simplex minimization",
            "",
            f"  x           = [{coords}]",
            f"  f(x)        = {self.fun:.6g}",
            f"  iterations  = {self.n_iter}",
            f"  evaluations = {self.n_evaluations}",
            f"  Converged: {self.converged}",
        ]
        return "\n".join(lines)
