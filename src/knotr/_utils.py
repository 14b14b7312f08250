"""Array normalization helpers shared by the public modules."""

from typing import Any

import numpy as np
from numpy import typing as npt

from .errors import InvalidStateError


def _as_knot_array(knots: npt.ArrayLike) -> npt.NDArray[np.float32 | np.float64]:
    """Convert a knot vector to a contiguous 1D float array.

    Integer (and boolean) input is promoted to float64; float32 and float64
    input keeps its dtype. Other floating types are converted to float64.

    Args:
        knots (npt.ArrayLike): Knot vector as a list or array.

    Returns:
        npt.NDArray[np.float32 | np.float64]: The knot vector. A new array is
            returned unless the input is already a contiguous float32/float64
            array.

    Raises:
        InvalidStateError: If the knots cannot be converted to a 1D numeric array.
    """
    try:
        arr = np.asarray(knots)
    except (TypeError, ValueError) as exc:
        raise InvalidStateError(f"knots cannot be converted to an array: {exc}") from exc

    if arr.dtype.kind not in "biuf":
        raise InvalidStateError(f"knots must be numeric, got dtype {arr.dtype}")
    if arr.dtype not in (np.float32, np.float64):
        arr = arr.astype(np.float64)
    if arr.ndim != 1:
        raise InvalidStateError("knots must be a 1D array")

    return np.ascontiguousarray(arr)


def _as_control_array(
    control_points: npt.ArrayLike,
    dtype: np.dtype[np.floating[Any]],
) -> npt.NDArray[np.float32 | np.float64]:
    """Convert control points to a contiguous array of the knot dtype.

    Integer input and sequences without a dtype of their own (lists, tuples)
    are cast to ``dtype``. Floating arrays must already match it.

    Raises:
        InvalidStateError: If the points are not numeric or the dtype of a
            floating array differs from the knot dtype.
    """
    arr = np.asarray(control_points)
    if arr.dtype.kind in "biu" or (
        arr.dtype.kind == "f" and not isinstance(control_points, (np.ndarray, np.generic))
    ):
        arr = arr.astype(dtype)
    elif arr.dtype.kind != "f":
        raise InvalidStateError(f"control points must be numeric, got dtype {arr.dtype}")
    elif arr.dtype != dtype:
        raise InvalidStateError(
            f"control points must have the same dtype as the knots. "
            f"Got {arr.dtype} control points and {dtype} knots."
        )
    return np.ascontiguousarray(arr)


def _normalize_points_1D(
    pts: npt.ArrayLike, dtype: np.dtype[np.floating[Any]]
) -> tuple[npt.NDArray[np.float32 | np.float64], tuple[int, ...]]:
    """Flatten evaluation points to a 1D array of the knot dtype.

    Returns:
        tuple[npt.NDArray[np.float32 | np.float64], tuple[int, ...]]: The
            flattened points and the shape of the input (``()`` for scalars).
    """
    arr = np.asarray(pts)
    input_shape = arr.shape
    return np.ascontiguousarray(arr.astype(dtype, copy=False).ravel()), input_shape
