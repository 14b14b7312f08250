"""Knot insertion for B-spline curves and surfaces (Boehm's algorithm).

Inserting a knot refines the representation of a B-spline without changing
its shape: the knot vector and the control net both grow by one entry and a
window of ``degree`` control points is replaced by convex blends of their
old neighbours.

The functions in this module are pure: they validate their input, compute
the refined knots and control points into new arrays and return them. The
input arrays are never modified, so a failed insertion leaves no trace.
In-place refinement of curve and surface objects is available through
:class:`knotr.bspline.BsplineCurve` and :class:`knotr.bspline.BsplineSurface`.
"""

import logging
from enum import Enum
from typing import Any

import numpy as np
import numpy.typing as npt

from ._insertion_impl import _insert_knot_impl
from ._knots_impl import _find_span_impl, _get_multiplicity_impl
from ._utils import _as_control_array
from .errors import DegenerateSpanError, InvalidStateError, OutOfDomainError
from .knots import check_knot_vector
from .tolerance import resolve_tolerance

logger = logging.getLogger(__name__)


class ParametricDirection(Enum):
    """Parametric direction of a surface."""

    U = "u"
    V = "v"


def _find_insertion_span(
    knots: npt.NDArray[np.float32 | np.float64],
    degree: int,
    u: np.floating[Any],
    tol: float,
) -> int:
    """Locate the span for inserting ``u`` and check it can be refined.

    Args:
        knots (npt.NDArray[np.float32 | np.float64]): Validated knot vector.
        degree (int): Degree along the insertion direction.
        u (np.floating): Knot value, already cast to the knot dtype.
        tol (float): Tolerance for knot comparisons.

    Returns:
        int: Span index of ``u``.

    Raises:
        OutOfDomainError: If ``u`` is outside ``[knots[degree], knots[-degree - 1]]``.
        DegenerateSpanError: If ``u`` already has multiplicity ``degree`` (at least
            one for degree 0), or if a blend denominator vanishes.
    """
    start, end = knots[degree], knots[-degree - 1]
    if not start <= u <= end:
        raise OutOfDomainError(f"Cannot insert knot {u} outside the domain [{start}, {end}]")

    multiplicity = int(_get_multiplicity_impl(knots, u, tol))
    if multiplicity >= max(degree, 1):
        raise DegenerateSpanError(
            f"Knot {u} already has multiplicity {multiplicity}; "
            f"inserting it again would exceed the degree {degree}."
        )

    num_ctrl_pts = knots.size - degree - 1
    span = int(_find_span_impl(knots, degree, num_ctrl_pts, u))

    window = np.arange(span - degree + 1, span + 1)
    denominators = knots[window + degree] - knots[window]
    if np.any(denominators <= tol):
        raise DegenerateSpanError(
            f"Knot span {span} around {u} is degenerate: zero-width blend denominator."
        )

    return span


def _insert_along_first_axis(
    degree: int,
    knots: npt.NDArray[np.float32 | np.float64],
    ctrl_pts: npt.NDArray[np.float32 | np.float64],
    u: float,
    tol: float | None,
) -> tuple[npt.NDArray[np.float32 | np.float64], npt.NDArray[np.float32 | np.float64]]:
    """Insert ``u`` along the first axis of an arbitrary-rank control array.

    Returns:
        tuple[npt.NDArray[np.float32 | np.float64], npt.NDArray[np.float32 | np.float64]]:
            New knots and new control points with the first axis grown by one.
    """
    tol = resolve_tolerance(knots.dtype, tol)
    u_value = knots.dtype.type(u)
    span = _find_insertion_span(knots, degree, u_value, tol)

    trailing_shape = ctrl_pts.shape[1:]
    flat = np.ascontiguousarray(ctrl_pts.reshape(ctrl_pts.shape[0], -1))
    new_knots, new_flat = _insert_knot_impl(knots, degree, flat, u_value, span)

    logger.debug(
        "Inserted knot %s at span %d (degree %d): %d -> %d control points",
        u_value,
        span,
        degree,
        ctrl_pts.shape[0],
        new_flat.shape[0],
    )
    return new_knots, new_flat.reshape(new_flat.shape[0], *trailing_shape)


def insert_knot_curve(
    degree: int,
    knots: npt.ArrayLike,
    ctrl_pts: npt.ArrayLike,
    u: float,
    tol: float | None = None,
) -> tuple[npt.NDArray[np.float32 | np.float64], npt.NDArray[np.float32 | np.float64]]:
    """Insert a knot into a B-spline curve.

    Args:
        degree (int): Curve degree.
        knots (npt.ArrayLike): Knot vector with ``len(ctrl_pts) + degree + 1`` entries.
        ctrl_pts (npt.ArrayLike): Control points, of shape ``(n,)`` for scalar
            curves or ``(n, N)`` for curves in an ``N``-dimensional space.
            Homogeneous (weighted) points are treated as plain vectors.
        u (float): Knot value to insert. Must lie in the curve domain.
        tol (float | None): Tolerance for knot comparisons. Defaults to the
            default tolerance of the knot dtype.

    Returns:
        tuple[npt.NDArray[np.float32 | np.float64], npt.NDArray[np.float32 | np.float64]]:
            The new knot vector (one knot longer) and the new control points
            (one point more, same trailing shape). The inputs are not modified.

    Raises:
        InvalidStateError: If knots, degree and control points are inconsistent.
        OutOfDomainError: If ``u`` is outside the domain.
        DegenerateSpanError: If ``u`` already has full multiplicity or the
            span is degenerate.

    Example:
        >>> knots, pts = insert_knot_curve(
        ...     2, [0, 0, 0, 0.5, 1, 1, 1], [[0, 0], [1, 2], [3, 3], [4, 0]], 0.5
        ... )
        >>> knots
        array([0. , 0. , 0. , 0.5, 0.5, 1. , 1. , 1. ])
        >>> pts
        array([[0. , 0. ],
               [1. , 2. ],
               [2. , 2.5],
               [3. , 3. ],
               [4. , 0. ]])
    """
    knots_arr = check_knot_vector(degree, knots)
    ctrl_arr = _as_control_array(ctrl_pts, knots_arr.dtype)

    if ctrl_arr.ndim not in (1, 2):
        raise InvalidStateError(
            f"Curve control points must be a 1D or 2D array, got {ctrl_arr.ndim} dimensions."
        )
    check_knot_vector(degree, knots_arr, ctrl_arr.shape[0])

    return _insert_along_first_axis(degree, knots_arr, ctrl_arr, u, tol)


def insert_knot_surface(
    degrees: tuple[int, int],
    knots: tuple[npt.ArrayLike, npt.ArrayLike],
    ctrl_pts: npt.ArrayLike,
    u: float,
    direction: ParametricDirection | str,
    tol: float | None = None,
) -> tuple[
    npt.NDArray[np.float32 | np.float64],
    npt.NDArray[np.float32 | np.float64],
    npt.NDArray[np.float32 | np.float64],
]:
    """Insert a knot into one parametric direction of a B-spline surface.

    The knot vector of the chosen direction is refined once, and every
    column (direction U) or row (direction V) of the control grid is refined
    with the curve algorithm using that shared knot vector.

    Args:
        degrees (tuple[int, int]): Degrees ``(p, q)`` along U and V.
        knots (tuple[npt.ArrayLike, npt.ArrayLike]): Knot vectors ``(U, V)``.
        ctrl_pts (npt.ArrayLike): Control grid of shape ``(n_u, n_v)`` or
            ``(n_u, n_v, N)``, where ``len(U) = n_u + p + 1`` and
            ``len(V) = n_v + q + 1``.
        u (float): Knot value to insert.
        direction (ParametricDirection | str): Direction to refine, ``"u"`` or ``"v"``.
        tol (float | None): Tolerance for knot comparisons. Defaults to the
            default tolerance of the knot dtype.

    Returns:
        tuple[npt.NDArray, npt.NDArray, npt.NDArray]: New U knots, new V knots
            and new control grid. Only the refined direction changes.

    Raises:
        InvalidStateError: If the knots, degrees or grid are inconsistent, or
            the direction is unknown.
        OutOfDomainError: If ``u`` is outside the domain of the chosen direction.
        DegenerateSpanError: If ``u`` already has full multiplicity or the
            span is degenerate.
    """
    if isinstance(direction, str):
        direction = direction.lower()
    try:
        direction = ParametricDirection(direction)
    except ValueError as exc:
        raise InvalidStateError(f"Unknown parametric direction: {direction!r}") from exc

    degree_u, degree_v = degrees
    knots_u = check_knot_vector(degree_u, knots[0])
    knots_v = check_knot_vector(degree_v, knots[1])
    if knots_u.dtype != knots_v.dtype:
        raise InvalidStateError("U and V knot vectors must have the same dtype")

    ctrl_arr = _as_control_array(ctrl_pts, knots_u.dtype)
    if ctrl_arr.ndim not in (2, 3):
        raise InvalidStateError(
            f"Surface control points must be a 2D or 3D array, got {ctrl_arr.ndim} dimensions."
        )
    check_knot_vector(degree_u, knots_u, ctrl_arr.shape[0])
    check_knot_vector(degree_v, knots_v, ctrl_arr.shape[1])

    if direction is ParametricDirection.U:
        new_knots_u, new_ctrl = _insert_along_first_axis(degree_u, knots_u, ctrl_arr, u, tol)
        return new_knots_u, knots_v.copy(), new_ctrl

    swapped = np.swapaxes(ctrl_arr, 0, 1)
    new_knots_v, new_swapped = _insert_along_first_axis(degree_v, knots_v, swapped, u, tol)
    return knots_u.copy(), new_knots_v, np.ascontiguousarray(np.swapaxes(new_swapped, 0, 1))
