"""Pytest configuration and shared fixtures.

Makes `src` importable without installing the package.
"""

from __future__ import annotations

import sys
from collections.abc import Callable
from pathlib import Path

import numpy as np
import numpy.typing as npt
import pytest


def _ensure_src_on_sys_path() -> None:
    """Prepend the repository `src` directory to `sys.path` if missing."""
    repo_root: Path = Path(__file__).resolve().parents[1]
    src_path: Path = repo_root / "src"
    if str(src_path) not in sys.path:
        sys.path.insert(0, str(src_path))


_ensure_src_on_sys_path()


@pytest.fixture
def quadratic_knots() -> npt.NDArray[np.float64]:
    """Clamped uniform knot vector of degree 2 with 4 control points."""
    return np.array([0.0, 0.0, 0.0, 0.5, 1.0, 1.0, 1.0], dtype=np.float64)


@pytest.fixture
def quadratic_ctrl_pts() -> npt.NDArray[np.float64]:
    """Planar control polygon matching `quadratic_knots`."""
    return np.array([[0.0, 0.0], [1.0, 2.0], [3.0, 3.0], [4.0, 0.0]], dtype=np.float64)


@pytest.fixture
def sample_params() -> npt.NDArray[np.float64]:
    """Parameters in [0, 1] avoiding knots, used to compare shapes."""
    return np.array([0.1, 0.25, 0.33, 0.6, 0.75, 0.9], dtype=np.float64)


def _reference_basis(knots: npt.NDArray[np.float64], degree: int, i: int, u: float) -> float:
    """Cox-de Boor recursion, written directly from its definition."""
    if degree == 0:
        return 1.0 if knots[i] <= u < knots[i + 1] else 0.0

    value = 0.0
    left_den = knots[i + degree] - knots[i]
    if left_den > 0.0:
        value += (u - knots[i]) / left_den * _reference_basis(knots, degree - 1, i, u)
    right_den = knots[i + degree + 1] - knots[i + 1]
    if right_den > 0.0:
        value += (
            (knots[i + degree + 1] - u) / right_den * _reference_basis(knots, degree - 1, i + 1, u)
        )
    return value


def _reference_basis_matrix(
    knots: npt.ArrayLike, degree: int, params: npt.ArrayLike
) -> npt.NDArray[np.float64]:
    """Matrix of all basis functions (columns) at all parameters (rows)."""
    knots_arr = np.asarray(knots, dtype=np.float64)
    num_basis = knots_arr.size - degree - 1
    return np.array(
        [
            [_reference_basis(knots_arr, degree, i, float(u)) for i in range(num_basis)]
            for u in np.atleast_1d(params)
        ]
    )


@pytest.fixture
def reference_curve() -> Callable[..., npt.NDArray[np.float64]]:
    """Evaluate a B-spline curve by brute force (parameters must avoid the domain end)."""

    def evaluate(
        degree: int, knots: npt.ArrayLike, ctrl_pts: npt.ArrayLike, params: npt.ArrayLike
    ) -> npt.NDArray[np.float64]:
        ctrl = np.asarray(ctrl_pts, dtype=np.float64)
        ctrl = ctrl.reshape(ctrl.shape[0], -1)
        return _reference_basis_matrix(knots, degree, params) @ ctrl

    return evaluate


@pytest.fixture
def reference_surface() -> Callable[..., npt.NDArray[np.float64]]:
    """Evaluate a B-spline surface on a parameter grid by brute force."""

    def evaluate(
        degrees: tuple[int, int],
        knots: tuple[npt.ArrayLike, npt.ArrayLike],
        ctrl_pts: npt.ArrayLike,
        u_params: npt.ArrayLike,
        v_params: npt.ArrayLike,
    ) -> npt.NDArray[np.float64]:
        ctrl = np.asarray(ctrl_pts, dtype=np.float64)
        if ctrl.ndim == 2:
            ctrl = ctrl[:, :, np.newaxis]
        basis_u = _reference_basis_matrix(knots[0], degrees[0], u_params)
        basis_v = _reference_basis_matrix(knots[1], degrees[1], v_params)
        return np.einsum("ai,bj,ijk->abk", basis_u, basis_v, ctrl)

    return evaluate
