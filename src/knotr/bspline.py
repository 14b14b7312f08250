"""B-spline curve and surface classes."""

from __future__ import annotations

import functools
from collections.abc import Iterable

import numpy as np
from numpy import typing as npt

from ._knots_impl import _eval_curve_impl
from ._utils import _as_control_array, _normalize_points_1D
from .errors import InvalidStateError, OutOfDomainError
from .insertion import ParametricDirection, insert_knot_curve, insert_knot_surface
from .knots import check_knot_vector, is_knot_vector_closed


def _evaluate_along_first_axis(
    knots: npt.NDArray[np.float32 | np.float64],
    degree: int,
    ctrl_pts: npt.NDArray[np.float32 | np.float64],
    pts: npt.NDArray[np.float32 | np.float64],
) -> npt.NDArray[np.float32 | np.float64]:
    """Contract the first axis of ``ctrl_pts`` with the basis values at ``pts``.

    Returns:
        npt.NDArray[np.float32 | np.float64]: Array of shape
            ``(pts.size, *ctrl_pts.shape[1:])``.
    """
    start, end = knots[degree], knots[-degree - 1]
    if not np.all((start <= pts) & (pts <= end)):
        raise OutOfDomainError(
            f"One or more evaluation points are outside the domain [{start}, {end}]"
        )

    flat = np.ascontiguousarray(ctrl_pts.reshape(ctrl_pts.shape[0], -1))
    values = _eval_curve_impl(knots, degree, flat, pts)
    return values.reshape(pts.size, *ctrl_pts.shape[1:])


class BsplineCurve:
    """A B-spline curve with a degree, a knot vector and control points.

    The curve owns copies of its knots and control points. Knot insertion
    replaces both arrays at once, so a failed insertion leaves the curve
    untouched.

    Attributes:
        _degree (int): Polynomial degree of the curve.
        _knots (npt.NDArray[np.float32 | np.float64]): Knot vector.
        _control_points (npt.NDArray[np.float32 | np.float64]): Control points of
            shape ``(num_control_points, dim)``.
    """

    _degree: int
    _knots: npt.NDArray[np.float32 | np.float64]
    _control_points: npt.NDArray[np.float32 | np.float64]

    def __init__(self, degree: int, knots: npt.ArrayLike, control_points: npt.ArrayLike) -> None:
        """Initialize a B-spline curve.

        Args:
            degree (int): Polynomial degree. Must be non-negative.
            knots (npt.ArrayLike): Non-decreasing knot vector with
                ``len(control_points) + degree + 1`` entries.
            control_points (npt.ArrayLike): Control points of shape ``(n,)`` or
                ``(n, dim)``. A 1D array describes a scalar-valued curve.

        Raises:
            InvalidStateError: If the knots are invalid or their number does not
                match the number of control points and the degree.
        """
        knots_arr = check_knot_vector(degree, knots)
        ctrl_arr = _as_control_array(control_points, knots_arr.dtype)

        if ctrl_arr.ndim == 1:
            ctrl_arr = ctrl_arr.reshape(-1, 1)
        elif ctrl_arr.ndim != 2:  # noqa: PLR2004
            raise InvalidStateError(
                f"Control points must be a 1D or 2D array, got {ctrl_arr.ndim} dimensions."
            )
        check_knot_vector(degree, knots_arr, ctrl_arr.shape[0])

        self._degree = int(degree)
        self._knots = knots_arr.copy()
        self._control_points = ctrl_arr.copy()

    @property
    def degree(self) -> int:
        """The polynomial degree of the curve."""
        return self._degree

    @property
    def knots(self) -> npt.NDArray[np.float32 | np.float64]:
        """The knot vector (read-only view)."""
        view = self._knots.view()
        view.flags.writeable = False
        return view

    @property
    def control_points(self) -> npt.NDArray[np.float32 | np.float64]:
        """The control points, shape ``(num_control_points, dim)`` (read-only view)."""
        view = self._control_points.view()
        view.flags.writeable = False
        return view

    @property
    def num_control_points(self) -> int:
        """The number of control points."""
        return int(self._control_points.shape[0])

    @property
    def dim(self) -> int:
        """The dimension of the space the control points live in."""
        return int(self._control_points.shape[1])

    @property
    def dtype(self) -> npt.DTypeLike:
        """The floating-point type of knots and control points."""
        return self._knots.dtype

    @property
    def domain(self) -> tuple[np.float32 | np.float64, np.float32 | np.float64]:
        """The parametric domain ``(knots[degree], knots[-degree - 1])``."""
        return (self._knots[self._degree], self._knots[-self._degree - 1])

    def is_closed(self, tol: float | None = None) -> bool:
        """Check whether the knot vector allows wrap-around continuity.

        Args:
            tol (float | None): Tolerance for comparing knot spacings.

        Returns:
            bool: True if the knot vector is closed.
        """
        return is_knot_vector_closed(self._degree, self._knots, tol)

    def evaluate(self, pts: npt.ArrayLike) -> npt.NDArray[np.float32 | np.float64]:
        """Evaluate the curve at the given parameter values.

        Args:
            pts (npt.ArrayLike): Parameter value(s) inside the domain.

        Returns:
            npt.NDArray[np.float32 | np.float64]: Curve points of shape
                ``(*pts.shape, dim)``.

        Raises:
            OutOfDomainError: If any parameter is outside the domain.
        """
        flat_pts, input_shape = _normalize_points_1D(pts, self._knots.dtype)
        values = _evaluate_along_first_axis(
            self._knots, self._degree, self._control_points, flat_pts
        )
        return values.reshape(*input_shape, self.dim)

    def insert_knot(self, u: float, tol: float | None = None) -> None:
        """Insert the knot ``u`` in place, keeping the shape of the curve.

        Args:
            u (float): Knot value inside the domain.
            tol (float | None): Tolerance for knot comparisons.

        Raises:
            OutOfDomainError: If ``u`` is outside the domain.
            DegenerateSpanError: If ``u`` already has full multiplicity.
        """
        self._knots, self._control_points = insert_knot_curve(
            self._degree, self._knots, self._control_points, u, tol
        )

    def refine(self, values: Iterable[float], tol: float | None = None) -> None:
        """Insert several knots, one after the other.

        Either all knots are inserted or, if any insertion fails, the curve
        is left unchanged.

        Args:
            values (Iterable[float]): Knot values to insert.
            tol (float | None): Tolerance for knot comparisons.

        Raises:
            OutOfDomainError: If a value is outside the domain.
            DegenerateSpanError: If a value would exceed full multiplicity.
        """
        knots, ctrl_pts = self._knots, self._control_points
        for u in values:
            knots, ctrl_pts = insert_knot_curve(self._degree, knots, ctrl_pts, u, tol)
        self._knots, self._control_points = knots, ctrl_pts


class BsplineSurface:
    """A tensor-product B-spline surface.

    Attributes:
        _degrees (tuple[int, int]): Degrees along U and V.
        _knots (tuple[npt.NDArray, npt.NDArray]): Knot vectors along U and V.
        _control_points (npt.NDArray[np.float32 | np.float64]): Control grid of
            shape ``(n_u, n_v, dim)``.
    """

    _degrees: tuple[int, int]
    _knots: tuple[npt.NDArray[np.float32 | np.float64], npt.NDArray[np.float32 | np.float64]]
    _control_points: npt.NDArray[np.float32 | np.float64]

    def __init__(
        self,
        degrees: tuple[int, int],
        knots: tuple[npt.ArrayLike, npt.ArrayLike],
        control_points: npt.ArrayLike,
    ) -> None:
        """Initialize a B-spline surface.

        Args:
            degrees (tuple[int, int]): Degrees ``(p, q)`` along U and V.
            knots (tuple[npt.ArrayLike, npt.ArrayLike]): Knot vectors ``(U, V)``.
            control_points (npt.ArrayLike): Control grid of shape ``(n_u, n_v)``
                or ``(n_u, n_v, dim)``, with ``len(U) = n_u + p + 1`` and
                ``len(V) = n_v + q + 1``.

        Raises:
            InvalidStateError: If the knots are invalid, have different dtypes, or
                do not match the control grid.
        """
        degree_u, degree_v = (int(degree) for degree in degrees)
        knots_u = check_knot_vector(degree_u, knots[0])
        knots_v = check_knot_vector(degree_v, knots[1])
        if knots_u.dtype != knots_v.dtype:
            raise InvalidStateError("U and V knot vectors must have the same dtype")

        ctrl_arr = _as_control_array(control_points, knots_u.dtype)
        if ctrl_arr.ndim == 2:  # noqa: PLR2004
            ctrl_arr = ctrl_arr[:, :, np.newaxis]
        elif ctrl_arr.ndim != 3:  # noqa: PLR2004
            raise InvalidStateError(
                f"Control points must be a 2D or 3D array, got {ctrl_arr.ndim} dimensions."
            )
        check_knot_vector(degree_u, knots_u, ctrl_arr.shape[0])
        check_knot_vector(degree_v, knots_v, ctrl_arr.shape[1])

        self._degrees = (degree_u, degree_v)
        self._knots = (knots_u.copy(), knots_v.copy())
        self._control_points = np.ascontiguousarray(ctrl_arr).copy()

    @property
    def degrees(self) -> tuple[int, int]:
        """The degrees along U and V."""
        return self._degrees

    @property
    def knots(
        self,
    ) -> tuple[npt.NDArray[np.float32 | np.float64], npt.NDArray[np.float32 | np.float64]]:
        """The knot vectors along U and V (read-only views)."""
        views = tuple(knots.view() for knots in self._knots)
        for view in views:
            view.flags.writeable = False
        return views[0], views[1]

    @property
    def control_points(self) -> npt.NDArray[np.float32 | np.float64]:
        """The control grid, shape ``(n_u, n_v, dim)`` (read-only view)."""
        view = self._control_points.view()
        view.flags.writeable = False
        return view

    @functools.cached_property
    def dim(self) -> int:
        """The dimension of the space the control points live in."""
        return int(self._control_points.shape[2])

    @property
    def num_control_points(self) -> tuple[int, int]:
        """The number of control points along U and V."""
        return int(self._control_points.shape[0]), int(self._control_points.shape[1])

    @property
    def dtype(self) -> npt.DTypeLike:
        """The floating-point type of knots and control points."""
        return self._knots[0].dtype

    @property
    def domain(
        self,
    ) -> tuple[
        tuple[np.float32 | np.float64, np.float32 | np.float64],
        tuple[np.float32 | np.float64, np.float32 | np.float64],
    ]:
        """The parametric domains along U and V."""
        (knots_u, knots_v), (p, q) = self._knots, self._degrees
        return (knots_u[p], knots_u[-p - 1]), (knots_v[q], knots_v[-q - 1])

    def evaluate(
        self, u_pts: npt.ArrayLike, v_pts: npt.ArrayLike
    ) -> npt.NDArray[np.float32 | np.float64]:
        """Evaluate the surface on the tensor grid ``u_pts x v_pts``.

        Args:
            u_pts (npt.ArrayLike): Parameter values along U.
            v_pts (npt.ArrayLike): Parameter values along V.

        Returns:
            npt.NDArray[np.float32 | np.float64]: Surface points of shape
                ``(len(u_pts), len(v_pts), dim)`` (scalars count as length 1).

        Raises:
            OutOfDomainError: If any parameter is outside its domain.
        """
        (knots_u, knots_v), (p, q) = self._knots, self._degrees
        u_flat, _ = _normalize_points_1D(u_pts, knots_u.dtype)
        v_flat, _ = _normalize_points_1D(v_pts, knots_v.dtype)

        # (n_u, n_v, dim) -> (len(u), n_v, dim) -> (n_v, len(u), dim) -> (len(v), len(u), dim)
        along_u = _evaluate_along_first_axis(knots_u, p, self._control_points, u_flat)
        along_v = _evaluate_along_first_axis(knots_v, q, np.swapaxes(along_u, 0, 1), v_flat)
        return np.ascontiguousarray(np.swapaxes(along_v, 0, 1))

    def insert_knot(
        self,
        u: float,
        direction: ParametricDirection | str,
        tol: float | None = None,
    ) -> None:
        """Insert the knot ``u`` along one direction in place.

        Args:
            u (float): Knot value inside the domain of ``direction``.
            direction (ParametricDirection | str): Direction to refine, ``"u"`` or ``"v"``.
            tol (float | None): Tolerance for knot comparisons.

        Raises:
            InvalidStateError: If the direction is unknown.
            OutOfDomainError: If ``u`` is outside the domain.
            DegenerateSpanError: If ``u`` already has full multiplicity.
        """
        knots_u, knots_v, ctrl_pts = insert_knot_surface(
            self._degrees, self._knots, self._control_points, u, direction, tol
        )
        self._knots, self._control_points = (knots_u, knots_v), ctrl_pts

    def refine(
        self,
        values: Iterable[float],
        direction: ParametricDirection | str,
        tol: float | None = None,
    ) -> None:
        """Insert several knots along one direction, all or nothing.

        Args:
            values (Iterable[float]): Knot values to insert.
            direction (ParametricDirection | str): Direction to refine.
            tol (float | None): Tolerance for knot comparisons.

        Raises:
            InvalidStateError: If the direction is unknown.
            OutOfDomainError: If a value is outside the domain.
            DegenerateSpanError: If a value would exceed full multiplicity.
        """
        knots, ctrl_pts = self._knots, self._control_points
        for u in values:
            knots_u, knots_v, ctrl_pts = insert_knot_surface(
                self._degrees, knots, ctrl_pts, u, direction, tol
            )
            knots = (knots_u, knots_v)
        self._knots, self._control_points = knots, ctrl_pts
