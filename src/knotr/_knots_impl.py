"""Low-level knot vector kernels.

Numba-compiled implementations of the knot vector queries used by the public
modules: monotonicity and closedness checks, multiplicity counting, span
finding and Cox-de Boor basis evaluation. Endpoint and dtype resolution for
the knot vector builders also lives here.

Note:
    Kernels assume validated inputs (no checks performed). The public
    wrappers in :mod:`knotr.knots` do the validation.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Any, TypeVar, cast

import numba as nb
import numpy as np
import numpy.typing as npt

from .errors import InvalidControlPointCountError

F = TypeVar("F", bound=Callable[..., Any])

if TYPE_CHECKING:
    # During type-checking, make the decorator a no-op that preserves types.
    def nb_jit(*args: object, **kwargs: object) -> Callable[[F], F]:
        def decorator(func: F) -> F:
            return func

        return decorator
else:
    # At runtime, use the real Numba decorator.
    nb_jit = nb.jit  # type: ignore[attr-defined]


@nb_jit(
    nopython=True,
    cache=True,
    parallel=False,
)
def _is_monotonic_impl(knots: npt.NDArray[np.float32 | np.float64]) -> bool:
    """Check that the knots are non-decreasing, stopping at the first violation.

    Args:
        knots (npt.NDArray[np.float32 | np.float64]): Knot vector.

    Returns:
        bool: True if every knot is greater than or equal to its predecessor.
    """
    for i in range(knots.size - 1):
        if not knots[i] <= knots[i + 1]:
            return False
    return True


@nb_jit(
    nopython=True,
    cache=True,
    parallel=False,
)
def _is_closed_impl(
    knots: npt.NDArray[np.float32 | np.float64],
    degree: int,
    tol: float,
) -> bool:
    """Check periodic-boundary compatibility of a knot vector.

    The spacing between knots ``i`` and ``i+1`` at the start of the vector is
    compared with the spacing between knots ``j`` and ``j+1``, where
    ``j = size - degree - 2 + i``, for ``i`` in ``[0, degree]``.

    Args:
        knots (npt.NDArray[np.float32 | np.float64]): Knot vector with at least
            ``degree + 2`` entries.
        degree (int): B-spline degree.
        tol (float): Absolute tolerance for the spacing comparison.

    Returns:
        bool: True if all compared spacings agree up to ``tol``.
    """
    offset = knots.size - degree - 2
    for i in range(degree + 1):
        j = offset + i
        left = knots[i + 1] - knots[i]
        right = knots[j + 1] - knots[j]
        if abs(left - right) > tol:
            return False
    return True


@nb_jit(
    nopython=True,
    cache=True,
    parallel=False,
)
def _get_multiplicity_impl(
    knots: npt.NDArray[np.float32 | np.float64],
    u: float,
    tol: float,
) -> int:
    """Count the knots equal to ``u`` up to ``tol``.

    Args:
        knots (npt.NDArray[np.float32 | np.float64]): Knot vector.
        u (float): Parameter value.
        tol (float): Absolute tolerance.

    Returns:
        int: Multiplicity of ``u`` in the knot vector (0 if absent).
    """
    count = 0
    for knot in knots:
        if abs(knot - u) <= tol:
            count += 1
    return count


@nb_jit(
    nopython=True,
    cache=True,
    parallel=False,
)
def _find_span_impl(
    knots: npt.NDArray[np.float32 | np.float64],
    degree: int,
    num_ctrl_pts: int,
    u: float,
) -> int:
    """Find the knot span index containing ``u``.

    Returns ``k`` in ``[degree, num_ctrl_pts - 1]`` such that
    ``knots[k] <= u < knots[k+1]``. When ``u`` equals the end of the domain,
    ``knots[num_ctrl_pts]``, the last non-empty span is returned.

    Args:
        knots (npt.NDArray[np.float32 | np.float64]): Non-decreasing knot vector.
        degree (int): B-spline degree.
        num_ctrl_pts (int): Number of control points,
            i.e. ``knots.size - degree - 1``.
        u (float): Parameter value inside the domain.

    Returns:
        int: Span index.
    """
    if u >= knots[num_ctrl_pts]:
        span = num_ctrl_pts - 1
        while span > degree and knots[span] >= knots[span + 1]:
            span -= 1
        return span

    span = int(np.searchsorted(knots, u, side="right")) - 1
    return max(span, degree)


@nb_jit(
    nopython=True,
    cache=True,
    parallel=False,
)
def _eval_basis_impl(
    knots: npt.NDArray[np.float32 | np.float64],
    degree: int,
    span: int,
    u: float,
) -> npt.NDArray[np.float32 | np.float64]:
    """Evaluate the ``degree + 1`` non-zero basis functions at ``u``.

    Cox-de Boor triangle, The NURBS Book (2nd Ed.), Algorithm A2.2.

    Args:
        knots (npt.NDArray[np.float32 | np.float64]): Knot vector.
        degree (int): B-spline degree.
        span (int): Span index of ``u`` as returned by :func:`_find_span_impl`.
        u (float): Parameter value.

    Returns:
        npt.NDArray[np.float32 | np.float64]: Values of the basis functions
            ``span - degree, ..., span`` at ``u``.
    """
    basis = np.zeros(degree + 1, dtype=knots.dtype)
    left = np.zeros(degree + 1, dtype=knots.dtype)
    right = np.zeros(degree + 1, dtype=knots.dtype)
    basis[0] = 1.0

    for j in range(1, degree + 1):
        left[j] = u - knots[span + 1 - j]
        right[j] = knots[span + j] - u
        saved = 0.0
        for r in range(j):
            temp = basis[r] / (right[r + 1] + left[j - r])
            basis[r] = saved + right[r + 1] * temp
            saved = left[j - r] * temp
        basis[j] = saved

    return basis


@nb_jit(
    nopython=True,
    cache=True,
    parallel=False,
)
def _eval_curve_impl(
    knots: npt.NDArray[np.float32 | np.float64],
    degree: int,
    ctrl_pts: npt.NDArray[np.float32 | np.float64],
    pts: npt.NDArray[np.float32 | np.float64],
) -> npt.NDArray[np.float32 | np.float64]:
    """Evaluate a B-spline with control points ``ctrl_pts`` at ``pts``.

    Args:
        knots (npt.NDArray[np.float32 | np.float64]): Knot vector.
        degree (int): B-spline degree.
        ctrl_pts (npt.NDArray[np.float32 | np.float64]): 2D array of shape
            ``(num_ctrl_pts, m)``.
        pts (npt.NDArray[np.float32 | np.float64]): 1D array of parameter
            values inside the domain.

    Returns:
        npt.NDArray[np.float32 | np.float64]: Array of shape ``(pts.size, m)``.
    """
    num_ctrl_pts = ctrl_pts.shape[0]
    out = np.zeros((pts.size, ctrl_pts.shape[1]), dtype=ctrl_pts.dtype)

    for pt_id in range(pts.size):
        u = pts[pt_id]
        span = _find_span_impl(knots, degree, num_ctrl_pts, u)
        basis = _eval_basis_impl(knots, degree, span, u)
        first = span - degree
        for r in range(degree + 1):
            for c in range(ctrl_pts.shape[1]):
                out[pt_id, c] += basis[r] * ctrl_pts[first + r, c]

    return out


def _validate_builder_input(
    degree: int,
    num_ctrl_pts: int,
    dtype: npt.DTypeLike,
) -> None:
    """Validate input parameters for knot vector generation.

    Args:
        degree (int): B-spline degree.
        num_ctrl_pts (int): Number of control points.
        dtype (npt.DTypeLike): Data type for the knot vector.

    Raises:
        InvalidControlPointCountError: If the degree is negative or fewer than
            ``degree + 1`` control points are requested.
        ValueError: If dtype is not float32 or float64.
    """
    if degree < 0:
        raise InvalidControlPointCountError("degree must be non-negative")

    if num_ctrl_pts < degree + 1:
        raise InvalidControlPointCountError(
            f"A B-spline of degree {degree} needs at least {degree + 1} control points, "
            f"got {num_ctrl_pts}."
        )

    if np.dtype(dtype) not in (np.dtype(np.float64), np.dtype(np.float32)):
        raise ValueError("dtype must be float64 or float32")


def _get_ends_and_type(
    domain: tuple[float | np.floating[Any], float | np.floating[Any]] | None = None,
    dtype: npt.DTypeLike | None = None,
) -> tuple[np.floating[Any], np.floating[Any], np.dtype[np.floating[Any]]]:
    """Get the start, end, and dtype for a knot vector.

    NumPy floating endpoints fix the dtype. Python numbers take the requested
    dtype, or float64 if none is requested.

    Args:
        domain (Optional[tuple[float | np.floating, float | np.floating]]):
            Domain boundaries as (start, end). Defaults to (0.0, 1.0).
        dtype (Optional[npt.DTypeLike]): Data type for the knot vector.
            If None, inferred from the domain or defaults to float64.

    Returns:
        tuple[np.floating, np.floating, np.dtype]: Tuple of (start, end, dtype).

    Raises:
        ValueError: If the endpoints are not scalars, have incompatible dtypes,
            or if end <= start.
    """
    start, end = (0.0, 1.0) if domain is None else domain
    for name, value in (("start", start), ("end", end)):
        if np.ndim(value) != 0:
            raise ValueError(f"{name} must be a scalar value")

    typed = {np.dtype(type(value)) for value in (start, end) if isinstance(value, np.floating)}
    if len(typed) > 1:
        raise ValueError("start and end must have the same dtype")

    if dtype is None:
        dtype_obj = typed.pop() if typed else np.dtype(np.float64)
    else:
        dtype_obj = np.dtype(dtype)
        if dtype_obj.kind != "f":
            raise ValueError("dtype must be a floating-point type")
        if typed and dtype_obj not in typed:
            raise ValueError(f"domain endpoints must be of type dtype {dtype_obj}")

    start_value = dtype_obj.type(start)
    end_value = dtype_obj.type(end)
    if not end_value > start_value:
        raise ValueError("end must be greater than start")

    return start_value, end_value, cast(np.dtype[np.floating[Any]], dtype_obj)


def _warmup_numba_functions() -> None:
    """Precompile numba functions with float64 signatures for faster first call."""
    knots_dummy = np.array([0.0, 0.0, 0.0, 0.5, 1.0, 1.0, 1.0], dtype=np.float64)
    ctrl_dummy = np.zeros((4, 2), dtype=np.float64)
    pts_dummy = np.array([0.25], dtype=np.float64)
    u_dummy = np.float64(0.25)
    tol_dummy = 1e-12
    degree_dummy = 2

    _is_monotonic_impl(knots_dummy)
    _is_closed_impl(knots_dummy, degree_dummy, tol_dummy)
    _get_multiplicity_impl(knots_dummy, u_dummy, tol_dummy)
    _find_span_impl(knots_dummy, degree_dummy, 4, u_dummy)
    _eval_basis_impl(knots_dummy, degree_dummy, 2, u_dummy)
    _eval_curve_impl(knots_dummy, degree_dummy, ctrl_dummy, pts_dummy)


# Precompile numba functions on module import (skip during type checking)
if not TYPE_CHECKING:
    _warmup_numba_functions()
