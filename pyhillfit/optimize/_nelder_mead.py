"""Derivative-free minimization with the Nelder-Mead simplex method.

The simplex of ``n + 1`` vertices is built from the starting point with the
Pfeffer scheme used by MATLAB's ``fminsearch``: each coordinate is perturbed
by 5 %, or set to a small absolute value when it is exactly zero.  This copes
with starting points whose coordinates differ by orders of magnitude.

Every iteration re-evaluates the whole simplex, orders it, and replaces the
worst vertex by a reflection, expansion or contraction point, or shrinks the
simplex towards the best vertex.  The search stops once both the function
values and the vertex coordinates agree to within ``tol`` (the ``fminsearch``
stopping rule), or when ``max_iter`` iterations have run.

Reference: Lagarias, Reeds, Wright & Wright (1998), SIAM J. Optim. 9(1).
"""

from __future__ import annotations

import logging
from typing import Callable

import numpy as np
from numpy.typing import ArrayLike, NDArray

from pyhillfit.optimize._common import SimplexOptions, SimplexResult

logger = logging.getLogger(__name__)

_DELTA_NONZERO = 0.05
_DELTA_ZERO = 0.00025


# ---------------------------------------------------------------------------
# Simplex construction and ordering
# ---------------------------------------------------------------------------

def _initial_simplex(x0: NDArray[np.floating]) -> NDArray[np.floating]:
    """Pfeffer initial simplex: row 0 is ``x0``, row ``j + 1`` perturbs coordinate ``j``."""
    n = len(x0)
    vertices = np.tile(x0, (n + 1, 1))
    for j in range(n):
        if x0[j] != 0:
            vertices[j + 1, j] = (1.0 + _DELTA_NONZERO) * x0[j]
        else:
            vertices[j + 1, j] = _DELTA_ZERO
    return vertices


def _order(fvals: NDArray[np.floating]) -> tuple[int, int, int]:
    """Return ``(best, next_worst, worst)`` vertex indices.

    Ties resolve to the first index found.  ``next_worst`` is the largest
    value strictly between best and worst; when no vertex qualifies (e.g. a
    two-vertex simplex) it coincides with ``best``.
    """
    worst = 0
    for j in range(len(fvals)):
        if fvals[j] > fvals[worst]:
            worst = j

    best = 0
    for j in range(len(fvals)):
        if fvals[j] < fvals[best]:
            best = j

    next_worst = best
    for j in range(len(fvals)):
        if fvals[next_worst] < fvals[j] < fvals[worst]:
            next_worst = j

    return best, next_worst, worst


def _has_converged(
    vertices: NDArray[np.floating],
    fvals: NDArray[np.floating],
    best: int,
    next_worst: int,
    worst: int,
    tol: float,
) -> bool:
    """``fminsearch`` stopping rule on function values and vertex coordinates."""
    if not (abs(fvals[worst] - fvals[best]) <= tol
            and abs(fvals[next_worst] - fvals[best]) <= tol):
        return False
    spread = np.max(np.abs(vertices[[worst, next_worst]] - vertices[best]))
    return bool(spread <= tol)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def nelder_mead(
    func: Callable[[NDArray[np.floating]], float],
    x0: ArrayLike,
    *,
    options: SimplexOptions | None = None,
) -> SimplexResult:
    """Minimize *func* starting from *x0* with the Nelder-Mead simplex method.

    Parameters
    ----------
    func : callable
        Objective ``f(x) -> float`` where ``x`` is a 1-D float array.  Each
        call receives a fresh array, so *func* may keep a reference to it.
    x0 : array-like
        Starting point, 1-D with at least one coordinate.
    options : SimplexOptions or None
        Iteration cap, tolerance and the reflection, expansion, contraction
        and shrink coefficients.  Defaults to ``SimplexOptions()``.

    Returns
    -------
    SimplexResult
        Best vertex of the final simplex.  Reaching the iteration cap is not
        an error: ``converged`` is ``False`` and ``n_evaluations`` tells how
        much work was spent.

    Examples
    --------
    >>> r = nelder_mead(lambda x: (x[0] - 3.0) ** 2, [1.0])
    >>> round(float(r.x[0]), 4)
    3.0
    """
    opts = options if options is not None else SimplexOptions()

    x0 = np.asarray(x0, dtype=np.float64)
    if x0.ndim != 1:
        raise ValueError(f"x0 must be a 1-D array, got shape {x0.shape}")
    if x0.size == 0:
        raise ValueError("x0 must have at least one coordinate")

    n = x0.size
    a = opts.reflection
    g = opts.expansion
    b = opts.contraction
    s = opts.shrink

    n_evaluations = 0

    def evaluate(point: NDArray[np.floating]) -> float:
        nonlocal n_evaluations
        n_evaluations += 1
        return float(func(point.copy()))

    vertices = _initial_simplex(x0)
    fvals = np.empty(n + 1, dtype=np.float64)
    best = 0
    n_iter = 0
    converged = False

    for iteration in range(opts.max_iter):
        if iteration > 0 and opts.display_iterations:
            logger.debug(
                "Iteration = %d, FuncEvals = %d, min f(x) = %.10g",
                iteration, n_evaluations, fvals[best],
            )
        n_iter = iteration + 1

        for j in range(n + 1):
            fvals[j] = evaluate(vertices[j])

        best, next_worst, worst = _order(fvals)
        x_worst = vertices[worst]

        centroid = np.delete(vertices, worst, axis=0).sum(axis=0) / n

        reflection = (1.0 + a) * centroid - a * x_worst
        f_reflection = evaluate(reflection)

        shrink = False
        if f_reflection < fvals[best]:
            expansion = (1.0 + a * g) * centroid - (a * g) * x_worst
            f_expansion = evaluate(expansion)
            if f_expansion < f_reflection:
                vertices[worst] = expansion
                fvals[worst] = f_expansion
            else:
                vertices[worst] = reflection
                fvals[worst] = f_reflection
        elif f_reflection < fvals[next_worst]:
            vertices[worst] = reflection
            fvals[worst] = f_reflection
        elif f_reflection < fvals[worst]:
            outside = (1.0 + a * b) * centroid - (a * b) * x_worst
            f_outside = evaluate(outside)
            if f_outside <= f_reflection:
                vertices[worst] = outside
                fvals[worst] = f_outside
            else:
                shrink = True
        else:
            inside = (1.0 - b) * centroid + b * x_worst
            f_inside = evaluate(inside)
            if f_inside < fvals[worst]:
                vertices[worst] = inside
                fvals[worst] = f_inside
            else:
                shrink = True

        if shrink:
            x_best = vertices[best]
            vertices[next_worst] = x_best + s * (vertices[next_worst] - x_best)
            vertices[worst] = x_best + s * (vertices[worst] - x_best)
            fvals[next_worst] = evaluate(vertices[next_worst])
            fvals[worst] = evaluate(vertices[worst])

        if _has_converged(vertices, fvals, best, next_worst, worst, opts.tol):
            converged = True
            break

    if not converged:
        logger.debug(
            "Simplex reached max_iter=%d without meeting tol=%g", opts.max_iter, opts.tol,
        )
    logger.debug(
        "Simplex minimisation complete: %d iterations, %d function evaluations",
        n_iter, n_evaluations,
    )

    return SimplexResult(
        x=vertices[best].copy(),
        fun=float(fvals[best]),
        n_evaluations=n_evaluations,
        n_iter=n_iter,
        converged=converged,
    )
