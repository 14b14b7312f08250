"""Knot vector construction, clamping and validation.

This module provides functions to build uniform and clamped uniform knot
vectors from a degree and a number of control points, to force the ends of
an existing knot vector to open (clamped) form, and to query its properties:
monotonicity, closedness, clamping, knot multiplicities and the span that
contains a given parameter value.
"""

import logging
from collections.abc import MutableSequence
from typing import Any

import numpy as np
import numpy.typing as npt

from ._knots_impl import (
    _find_span_impl,
    _get_ends_and_type,
    _get_multiplicity_impl,
    _is_closed_impl,
    _is_monotonic_impl,
    _validate_builder_input,
)
from ._utils import _as_knot_array
from .errors import InvalidStateError, OutOfDomainError
from .tolerance import resolve_tolerance

logger = logging.getLogger(__name__)


def create_uniform_knot_vector(
    degree: int,
    num_ctrl_pts: int,
    domain: tuple[float | np.floating[Any], float | np.floating[Any]] | None = None,
    dtype: npt.DTypeLike | None = None,
) -> npt.NDArray[np.float32 | np.float64]:
    """Create a uniform knot vector.

    All ``num_ctrl_pts + degree + 1`` knots are evenly spaced over the domain,
    the first one being the domain start and the last one the domain end.
    Knots are interpolated from their index, so both the count and the
    endpoints are exact.

    Args:
        degree (int): B-spline degree. Must be non-negative.
        num_ctrl_pts (int): Number of control points. Must be at least ``degree + 1``.
        domain (Optional[tuple[float | np.floating, float | np.floating]]):
            Range spanned by the knots as (start, end). Defaults to (0.0, 1.0).
        dtype (Optional[npt.DTypeLike]): Data type for the knot vector (float32 or
            float64). If None, inferred from the domain or defaults to float64.

    Returns:
        npt.NDArray[np.float32 | np.float64]: Uniform knot vector.

    Raises:
        InvalidControlPointCountError: If ``num_ctrl_pts < degree + 1`` or the
            degree is negative.
        ValueError: If the domain or dtype are invalid.

    Example:
        >>> create_uniform_knot_vector(2, 3)
        array([0.  , 0.2, 0.4, 0.6, 0.8, 1.  ])
    """
    start, end, dtype_obj = _get_ends_and_type(domain, dtype)
    _validate_builder_input(degree, num_ctrl_pts, dtype_obj)

    num_knots = num_ctrl_pts + degree + 1
    knots = np.linspace(start, end, num_knots, dtype=dtype_obj)

    logger.debug("Created uniform knot vector: degree=%d, %d knots", degree, num_knots)
    return knots


def create_clamped_uniform_knot_vector(
    degree: int,
    num_ctrl_pts: int,
    domain: tuple[float | np.floating[Any], float | np.floating[Any]] | None = None,
    dtype: npt.DTypeLike | None = None,
) -> npt.NDArray[np.float32 | np.float64]:
    """Create a clamped (open) uniform knot vector.

    The vector consists of ``degree`` copies of the domain start, then
    ``num_knots - 2 * degree`` evenly spaced knots from start to end
    (both included), then ``degree`` copies of the domain end. The
    resulting B-spline interpolates its first and last control points.

    Args:
        degree (int): B-spline degree. Must be non-negative.
        num_ctrl_pts (int): Number of control points. Must be at least ``degree + 1``.
        domain (Optional[tuple[float | np.floating, float | np.floating]]):
            Domain boundaries as (start, end). Defaults to (0.0, 1.0).
        dtype (Optional[npt.DTypeLike]): Data type for the knot vector (float32 or
            float64). If None, inferred from the domain or defaults to float64.

    Returns:
        npt.NDArray[np.float32 | np.float64]: Clamped uniform knot vector.

    Raises:
        InvalidControlPointCountError: If ``num_ctrl_pts < degree + 1`` or the
            degree is negative.
        ValueError: If the domain or dtype are invalid.

    Example:
        >>> create_clamped_uniform_knot_vector(2, 4)
        array([0. , 0. , 0. , 0.5, 1. , 1. , 1. ])
    """
    start, end, dtype_obj = _get_ends_and_type(domain, dtype)
    _validate_builder_input(degree, num_ctrl_pts, dtype_obj)

    num_knots = num_ctrl_pts + degree + 1
    num_interior = max(num_knots - 2 * degree, 0)

    knots = np.concatenate(
        (
            np.full(degree, start, dtype=dtype_obj),
            np.linspace(start, end, num_interior, dtype=dtype_obj),
            np.full(degree, end, dtype=dtype_obj),
        )
    )

    logger.debug("Created clamped uniform knot vector: degree=%d, %d knots", degree, num_knots)
    return knots


def _check_clamp_input(degree: int, knots: MutableSequence[Any] | npt.NDArray[Any]) -> None:
    if degree < 0:
        raise InvalidStateError("degree must be non-negative")
    if len(knots) <= 2 * degree:
        raise InvalidStateError(
            f"knots must have more than 2*degree={2 * degree} elements, got {len(knots)}"
        )


def clamp_knot_vector_left(degree: int, knots: MutableSequence[Any] | npt.NDArray[Any]) -> None:
    """Clamp the left end of a knot vector in place.

    The first ``degree`` knots are overwritten with ``knots[degree]``, the
    start of the domain, so that the first ``degree + 1`` knots are equal.

    Args:
        degree (int): B-spline degree.
        knots (MutableSequence | npt.NDArray): Knot vector, modified in place.

    Raises:
        InvalidStateError: If the degree is negative or ``len(knots) <= 2 * degree``.
            The knots are not modified in that case.
    """
    _check_clamp_input(degree, knots)
    start = knots[degree]
    for i in range(degree):
        knots[i] = start


def clamp_knot_vector_right(degree: int, knots: MutableSequence[Any] | npt.NDArray[Any]) -> None:
    """Clamp the right end of a knot vector in place.

    The last ``degree`` knots are overwritten with ``knots[-degree - 1]``,
    the end of the domain, so that the last ``degree + 1`` knots are equal.

    Args:
        degree (int): B-spline degree.
        knots (MutableSequence | npt.NDArray): Knot vector, modified in place.

    Raises:
        InvalidStateError: If the degree is negative or ``len(knots) <= 2 * degree``.
            The knots are not modified in that case.
    """
    _check_clamp_input(degree, knots)
    size = len(knots)
    end = knots[size - degree - 1]
    for i in range(degree):
        knots[size - 1 - i] = end


def clamp_knot_vector(degree: int, knots: MutableSequence[Any] | npt.NDArray[Any]) -> None:
    """Clamp both ends of a knot vector in place.

    Args:
        degree (int): B-spline degree.
        knots (MutableSequence | npt.NDArray): Knot vector, modified in place.

    Raises:
        InvalidStateError: If the degree is negative or ``len(knots) <= 2 * degree``.
    """
    _check_clamp_input(degree, knots)
    clamp_knot_vector_left(degree, knots)
    clamp_knot_vector_right(degree, knots)


def is_knot_vector_monotonic(knots: npt.ArrayLike) -> bool:
    """Check whether a knot vector is non-decreasing.

    Args:
        knots (npt.ArrayLike): Knot vector.

    Returns:
        bool: True if every knot is greater than or equal to the previous one.

    Raises:
        InvalidStateError: If the knots are not a 1D numeric sequence.
    """
    return bool(_is_monotonic_impl(_as_knot_array(knots)))


def is_knot_vector_closed(degree: int, knots: npt.ArrayLike, tol: float | None = None) -> bool:
    """Check whether a knot vector is compatible with a periodic boundary.

    A closed (periodic) curve wraps around: the knot pattern at the end of
    the vector repeats the one at its start. For ``i`` in ``[0, degree]``,
    the spacing ``knots[i+1] - knots[i]`` must match the spacing
    ``knots[j+1] - knots[j]`` with ``j = len(knots) - degree - 2 + i``.

    Args:
        degree (int): B-spline degree. Must be non-negative.
        knots (npt.ArrayLike): Knot vector.
        tol (float | None): Absolute tolerance for comparing spacings.
            Defaults to the default tolerance of the knot dtype.

    Returns:
        bool: True if the knot vector is closed. Vectors with fewer than
            ``degree + 2`` knots are never closed.

    Raises:
        InvalidStateError: If the degree is negative or the knots are not a
            1D numeric sequence.
    """
    if degree < 0:
        raise InvalidStateError("degree must be non-negative")
    knots_arr = _as_knot_array(knots)
    if knots_arr.size < degree + 2:
        return False
    tol = resolve_tolerance(knots_arr.dtype, tol)
    return bool(_is_closed_impl(knots_arr, degree, tol))


def is_knot_vector_clamped(degree: int, knots: npt.ArrayLike, tol: float | None = None) -> bool:
    """Check whether both ends of a knot vector are clamped (open).

    Args:
        degree (int): B-spline degree.
        knots (npt.ArrayLike): Knot vector.
        tol (float | None): Absolute tolerance. Defaults to the default
            tolerance of the knot dtype.

    Returns:
        bool: True if the first ``degree + 1`` knots are equal and the last
            ``degree + 1`` knots are equal.

    Raises:
        InvalidStateError: If the knot vector fails basic validation.
    """
    knots_arr = check_knot_vector(degree, knots)
    tol = resolve_tolerance(knots_arr.dtype, tol)
    left = knots_arr[degree] - knots_arr[0]
    right = knots_arr[-1] - knots_arr[-degree - 1]
    return bool(left <= tol and right <= tol)


def check_knot_vector(
    degree: int,
    knots: npt.ArrayLike,
    num_ctrl_pts: int | None = None,
) -> npt.NDArray[np.float32 | np.float64]:
    """Validate a knot vector against its degree and control point count.

    Args:
        degree (int): B-spline degree. Must be non-negative.
        knots (npt.ArrayLike): Knot vector.
        num_ctrl_pts (int | None): Number of control points. If given, it must
            satisfy ``len(knots) == num_ctrl_pts + degree + 1``.

    Returns:
        npt.NDArray[np.float32 | np.float64]: The knots as a 1D float array.

    Raises:
        InvalidStateError: If the degree is negative, there are fewer than
            ``2 * degree + 2`` knots, the knots are not non-decreasing, or the
            control point count does not match.
    """
    if degree < 0:
        raise InvalidStateError("degree must be non-negative")

    knots_arr = _as_knot_array(knots)

    if knots_arr.size < 2 * degree + 2:
        raise InvalidStateError("knots must have at least 2*degree+2 elements")
    if not _is_monotonic_impl(knots_arr):
        raise InvalidStateError("knots must be non-decreasing")
    if num_ctrl_pts is not None and knots_arr.size != num_ctrl_pts + degree + 1:
        raise InvalidStateError(
            f"Expected {num_ctrl_pts + degree + 1} knots for {num_ctrl_pts} control points "
            f"of degree {degree}, got {knots_arr.size}."
        )
    if not knots_arr[-degree - 1] > knots_arr[degree]:
        raise InvalidStateError("knots must define a non-empty domain")

    return knots_arr


def get_knot_vector_domain(
    degree: int, knots: npt.ArrayLike
) -> tuple[np.float32 | np.float64, np.float32 | np.float64]:
    """Get the parametric domain ``[knots[degree], knots[-degree - 1]]``.

    Example:
        >>> get_knot_vector_domain(2, [0, 0, 0, 1, 2, 2, 2])
        (0.0, 2.0)
    """
    knots_arr = check_knot_vector(degree, knots)
    return knots_arr[degree], knots_arr[-degree - 1]


def _check_in_domain(
    degree: int, knots: npt.NDArray[np.float32 | np.float64], u: np.floating[Any]
) -> None:
    start, end = knots[degree], knots[-degree - 1]
    if not start <= u <= end:
        raise OutOfDomainError(f"Parameter {u} is outside the knot vector domain [{start}, {end}]")


def find_span(degree: int, knots: npt.ArrayLike, u: float) -> int:
    """Find the index of the knot span containing ``u``.

    The returned index ``k`` satisfies ``knots[k] <= u < knots[k + 1]`` and
    lies in ``[degree, len(knots) - degree - 2]``. If ``u`` is the end of
    the domain, the last non-empty span is returned.

    Args:
        degree (int): B-spline degree.
        knots (npt.ArrayLike): Knot vector.
        u (float): Parameter value.

    Returns:
        int: Span index.

    Raises:
        InvalidStateError: If the knot vector fails basic validation.
        OutOfDomainError: If ``u`` is outside ``[knots[degree], knots[-degree - 1]]``.

    Example:
        >>> find_span(2, [0, 0, 0, 0.5, 1, 1, 1], 0.5)
        3
        >>> find_span(2, [0, 0, 0, 0.5, 1, 1, 1], 1.0)
        3
    """
    knots_arr = check_knot_vector(degree, knots)
    u_value = knots_arr.dtype.type(u)
    _check_in_domain(degree, knots_arr, u_value)
    num_ctrl_pts = knots_arr.size - degree - 1
    return int(_find_span_impl(knots_arr, degree, num_ctrl_pts, u_value))


def get_knot_multiplicity(knots: npt.ArrayLike, u: float, tol: float | None = None) -> int:
    """Get the number of knots equal to ``u``.

    Args:
        knots (npt.ArrayLike): Knot vector.
        u (float): Parameter value.
        tol (float | None): Absolute tolerance. Defaults to the default
            tolerance of the knot dtype.

    Returns:
        int: Multiplicity of ``u`` (0 if ``u`` is not a knot).

    Raises:
        InvalidStateError: If the knots are not a 1D numeric sequence.
    """
    knots_arr = _as_knot_array(knots)
    tol = resolve_tolerance(knots_arr.dtype, tol)
    return int(_get_multiplicity_impl(knots_arr, knots_arr.dtype.type(u), tol))
