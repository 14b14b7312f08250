"""Numba kernel for single knot insertion (Boehm's algorithm).

Curves and surfaces share the same kernel: control points are laid out as a
2D array whose first axis runs along the direction of insertion, and the
remaining coordinates (point dimension, and for surfaces the other
parametric direction) are flattened into the second axis.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np
import numpy.typing as npt

from ._knots_impl import nb_jit


@nb_jit(
    nopython=True,
    cache=True,
    parallel=False,
)
def _insert_knot_impl(
    knots: npt.NDArray[np.float32 | np.float64],
    degree: int,
    ctrl_pts: npt.NDArray[np.float32 | np.float64],
    u: float,
    span: int,
) -> tuple[npt.NDArray[np.float32 | np.float64], npt.NDArray[np.float32 | np.float64]]:
    """Insert ``u`` once into ``knots`` and compute the refined control points.

    With ``P`` the old and ``Q`` the new control points, and ``k = span``:

    - ``Q[i] = P[i]`` for ``i <= k - degree``,
    - ``Q[i] = (1 - a_i) P[i-1] + a_i P[i]`` for ``k - degree < i <= k``,
      with ``a_i = (u - knots[i]) / (knots[i + degree] - knots[i])``,
    - ``Q[i] = P[i-1]`` for ``i > k``.

    All reads come from the old arrays, the results are written to fresh
    buffers.

    Args:
        knots (npt.NDArray[np.float32 | np.float64]): Knot vector before insertion.
        degree (int): Degree along the insertion direction.
        ctrl_pts (npt.NDArray[np.float32 | np.float64]): Control points of
            shape ``(knots.size - degree - 1, m)``.
        u (float): Knot value to insert, of the knot dtype.
        span (int): Span index of ``u``.

    Returns:
        tuple[npt.NDArray[np.float32 | np.float64], npt.NDArray[np.float32 | np.float64]]:
            New knot vector (one entry longer) and new control points of
            shape ``(ctrl_pts.shape[0] + 1, m)``.

    Note:
        Inputs are assumed to be correct (no validation performed). In
        particular, every denominator in the blended window must be non-zero.
    """
    num_ctrl_pts, m = ctrl_pts.shape

    new_knots = np.empty(knots.size + 1, dtype=knots.dtype)
    new_knots[: span + 1] = knots[: span + 1]
    new_knots[span + 1] = u
    new_knots[span + 2 :] = knots[span + 1 :]

    new_ctrl_pts = np.empty((num_ctrl_pts + 1, m), dtype=ctrl_pts.dtype)
    first = span - degree + 1
    new_ctrl_pts[:first, :] = ctrl_pts[:first, :]
    new_ctrl_pts[span + 1 :, :] = ctrl_pts[span:, :]

    for i in range(first, span + 1):
        alpha = (u - knots[i]) / (knots[i + degree] - knots[i])
        for c in range(m):
            new_ctrl_pts[i, c] = (1.0 - alpha) * ctrl_pts[i - 1, c] + alpha * ctrl_pts[i, c]

    return new_knots, new_ctrl_pts


def _warmup_numba_functions() -> None:
    """Precompile the insertion kernel with float64 signatures."""
    knots_dummy = np.array([0.0, 0.0, 0.0, 0.5, 1.0, 1.0, 1.0], dtype=np.float64)
    ctrl_dummy = np.zeros((4, 2), dtype=np.float64)
    _insert_knot_impl(knots_dummy, 2, ctrl_dummy, np.float64(0.25), 2)


# Precompile numba functions on module import (skip during type checking)
if not TYPE_CHECKING:
    _warmup_numba_functions()
