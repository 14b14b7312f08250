"""Dtype-aware tolerances for comparing knot values.

Knot vectors are stored either in single or double precision. Comparisons
between knots (multiplicity counting, closedness checks, degenerate span
detection) use an absolute tolerance that depends on that precision.
"""

from functools import cache
from typing import Any, NamedTuple, cast

import numpy as np
from numpy import typing as npt


@cache
def _ensure_knot_dtype_by_name(name: str) -> np.dtype[np.floating[Any]]:
    """Cached validator returning a knot dtype from its canonical name.

    Args:
        name (str): Canonical NumPy dtype name (e.g., "float64").

    Returns:
        np.dtype[np.floating[Any]]: Validated floating-point dtype.

    Raises:
        ValueError: If dtype is neither float32 nor float64.
    """
    dtype_obj = np.dtype(name)
    if dtype_obj.type not in (np.float32, np.float64):
        raise ValueError(f"Unsupported knot dtype: {name}")
    return cast(np.dtype[np.floating[Any]], dtype_obj)


def _ensure_knot_dtype(dtype: npt.DTypeLike) -> np.dtype[np.floating[Any]]:
    """Normalize and validate a dtype-like into a knot dtype."""
    return _ensure_knot_dtype_by_name(np.dtype(dtype).name)


class _TolerancePreset(NamedTuple):
    """Tolerance values for single and double precision knots."""

    float32: float
    float64: float


_TOLERANCE_PRESETS = {
    "default": _TolerancePreset(1e-6, 1e-12),
    "strict": _TolerancePreset(5e-7, 1e-15),
    "conservative": _TolerancePreset(1e-5, 1e-10),
}


def _get_tolerance(dtype: npt.DTypeLike, preset: _TolerancePreset) -> float:
    dtype_obj = _ensure_knot_dtype(dtype)
    if dtype_obj.type == np.float32:
        return preset.float32
    return preset.float64


def get_default_tolerance(dtype: npt.DTypeLike) -> float:
    """Get the tolerance used by default when comparing knot values.

    Args:
        dtype (npt.DTypeLike): Knot dtype (float32 or float64).

    Returns:
        float: Absolute tolerance for the given dtype.

    Raises:
        ValueError: If dtype is not float32 or float64.

    Example:
        >>> get_default_tolerance(np.float32)
        1e-06
        >>> get_default_tolerance("float64")
        1e-12
    """
    return _get_tolerance(dtype, _TOLERANCE_PRESETS["default"])


def get_strict_tolerance(dtype: npt.DTypeLike) -> float:
    """Get a strict tolerance, a few ulps above machine epsilon.

    Args:
        dtype (npt.DTypeLike): Knot dtype (float32 or float64).

    Returns:
        float: Strict tolerance value for the given dtype.

    Raises:
        ValueError: If dtype is not float32 or float64.
    """
    return _get_tolerance(dtype, _TOLERANCE_PRESETS["strict"])


def get_conservative_tolerance(dtype: npt.DTypeLike) -> float:
    """Get a loose tolerance for knots produced by inexact computations.

    Args:
        dtype (npt.DTypeLike): Knot dtype (float32 or float64).

    Returns:
        float: Conservative tolerance value for the given dtype.

    Raises:
        ValueError: If dtype is not float32 or float64.
    """
    return _get_tolerance(dtype, _TOLERANCE_PRESETS["conservative"])


def get_machine_epsilon(dtype: npt.DTypeLike) -> float:
    """Get machine epsilon for a knot dtype.

    Args:
        dtype (npt.DTypeLike): Knot dtype (float32 or float64).

    Returns:
        float: Machine epsilon for the given dtype.

    Raises:
        ValueError: If dtype is not float32 or float64.
    """
    return float(np.finfo(_ensure_knot_dtype(dtype)).eps)


def resolve_tolerance(dtype: npt.DTypeLike, tol: float | None = None) -> float:
    """Return ``tol`` if given, otherwise the default tolerance of ``dtype``.

    Args:
        dtype (npt.DTypeLike): Knot dtype (float32 or float64).
        tol (float | None): Explicit tolerance. Must be non-negative.

    Returns:
        float: Tolerance to use.

    Raises:
        ValueError: If ``tol`` is negative or dtype is unsupported.
    """
    if tol is None:
        return get_default_tolerance(dtype)
    if tol < 0:
        raise ValueError("tol must be non-negative")
    return float(tol)
