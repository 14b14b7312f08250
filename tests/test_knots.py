"""Tests for knot vector construction, clamping and validation."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import numpy as np
import numpy.testing as nptest
import pytest

from knotr.errors import (
    InvalidControlPointCountError,
    InvalidStateError,
    KnotErrorKind,
    OutOfDomainError,
)
from knotr.knots import (
    check_knot_vector,
    clamp_knot_vector,
    clamp_knot_vector_left,
    clamp_knot_vector_right,
    create_clamped_uniform_knot_vector,
    create_uniform_knot_vector,
    find_span,
    get_knot_multiplicity,
    get_knot_vector_domain,
    is_knot_vector_clamped,
    is_knot_vector_closed,
    is_knot_vector_monotonic,
)

DEGREES_AND_COUNTS = [(d, n) for d in range(5) for n in range(d + 1, d + 6)]


class TestCreateUniformKnotVector:
    """Tests for `create_uniform_knot_vector`."""

    def test_basic_functionality(self) -> None:
        """Spread all knots evenly over [0, 1]."""
        result = create_uniform_knot_vector(2, 4)
        assert result.dtype == np.float64
        nptest.assert_allclose(result, np.arange(7) / 6.0)

    @pytest.mark.parametrize(("degree", "num_ctrl_pts"), DEGREES_AND_COUNTS)
    def test_count_endpoints_and_monotonicity(self, degree: int, num_ctrl_pts: int) -> None:
        """Produce exactly n + d + 1 monotonic knots ending exactly at 0 and 1."""
        result = create_uniform_knot_vector(degree, num_ctrl_pts)
        assert result.size == num_ctrl_pts + degree + 1
        assert result[0] == 0.0
        assert result[-1] == 1.0
        assert is_knot_vector_monotonic(result)

    def test_many_knots_keep_exact_end(self) -> None:
        """Do not lose or overshoot the last knot for long vectors."""
        result = create_uniform_knot_vector(3, 1000)
        assert result.size == 1004
        assert result[-1] == 1.0
        assert np.all(np.diff(result) > 0.0)

    def test_custom_domain(self) -> None:
        """Respect the requested domain."""
        result = create_uniform_knot_vector(1, 2, domain=(2.0, 5.0))
        nptest.assert_allclose(result, [2.0, 3.0, 4.0, 5.0])

        result = create_uniform_knot_vector(1, 3, domain=(2.0, 5.0))
        nptest.assert_allclose(result, [2.0, 2.75, 3.5, 4.25, 5.0])

    def test_float32(self) -> None:
        """Honor an explicit float32 request."""
        result = create_uniform_knot_vector(2, 3, dtype=np.float32)
        assert result.dtype == np.float32
        assert result[-1] == np.float32(1.0)

    def test_dtype_inferred_from_domain(self) -> None:
        """Infer the dtype from NumPy scalar endpoints."""
        result = create_uniform_knot_vector(1, 2, domain=(np.float32(0.0), np.float32(1.0)))
        assert result.dtype == np.float32

    @pytest.mark.parametrize(("degree", "num_ctrl_pts"), [(2, 2), (3, 0), (1, 1)])
    def test_too_few_control_points(self, degree: int, num_ctrl_pts: int) -> None:
        """Fail when fewer than degree + 1 control points are requested."""
        with pytest.raises(InvalidControlPointCountError, match="needs at least") as info:
            create_uniform_knot_vector(degree, num_ctrl_pts)
        assert info.value.kind is KnotErrorKind.INVALID_CONTROL_POINT_COUNT

    def test_negative_degree(self) -> None:
        """Reject negative degrees."""
        with pytest.raises(InvalidControlPointCountError, match="degree must be non-negative"):
            create_uniform_knot_vector(-1, 3)

    def test_decreasing_domain(self) -> None:
        """Reject domains whose end is not greater than the start."""
        with pytest.raises(ValueError, match="end must be greater than start"):
            create_uniform_knot_vector(2, 4, domain=(1.0, 1.0))

    def test_invalid_dtype(self) -> None:
        """Reject non-floating dtypes."""
        with pytest.raises(ValueError, match="dtype must be a floating-point type"):
            create_uniform_knot_vector(2, 4, dtype=np.int32)

    def test_inconsistent_domain_dtypes(self) -> None:
        """Reject endpoints with different floating dtypes."""
        with pytest.raises(ValueError, match="start and end must have the same dtype"):
            create_uniform_knot_vector(2, 4, domain=(np.float32(0.0), np.float64(1.0)))

    def test_python_domain_takes_requested_dtype(self) -> None:
        """Cast plain Python endpoints to the requested dtype."""
        result = create_uniform_knot_vector(1, 2, domain=(0.0, 2.0), dtype=np.float32)
        assert result.dtype == np.float32
        assert result[0] == np.float32(0.0)
        assert result[-1] == np.float32(2.0)

    def test_domain_conflicts_with_dtype(self) -> None:
        """Reject NumPy endpoints whose dtype differs from the requested one."""
        with pytest.raises(ValueError, match="must be of type dtype float32"):
            create_uniform_knot_vector(
                2, 4, domain=(np.float64(0.0), np.float64(1.0)), dtype=np.float32
            )

    def test_non_scalar_domain(self) -> None:
        """Reject array-valued endpoints."""
        with pytest.raises(ValueError, match="start must be a scalar value"):
            create_uniform_knot_vector(2, 4, domain=([0.0, 1.0], 2.0))  # type: ignore[arg-type]


class TestCreateClampedUniformKnotVector:
    """Tests for `create_clamped_uniform_knot_vector`."""

    def test_basic_functionality(self) -> None:
        """Create the classic quadratic clamped vector."""
        result = create_clamped_uniform_knot_vector(2, 4)
        nptest.assert_array_equal(result, [0.0, 0.0, 0.0, 0.5, 1.0, 1.0, 1.0])

    def test_cubic(self) -> None:
        """Create a cubic clamped vector with two interior knots."""
        result = create_clamped_uniform_knot_vector(3, 6)
        nptest.assert_allclose(
            result, [0.0, 0.0, 0.0, 0.0, 1.0 / 3.0, 2.0 / 3.0, 1.0, 1.0, 1.0, 1.0]
        )

    @pytest.mark.parametrize(("degree", "num_ctrl_pts"), DEGREES_AND_COUNTS)
    def test_clamped_structure(self, degree: int, num_ctrl_pts: int) -> None:
        """Repeat the ends and keep the interior strictly increasing."""
        result = create_clamped_uniform_knot_vector(degree, num_ctrl_pts)
        size = num_ctrl_pts + degree + 1

        assert result.size == size
        assert is_knot_vector_monotonic(result)
        assert np.all(result[: degree + 1] == 0.0)
        assert np.all(result[size - degree - 1 :] == 1.0)

        interior = result[degree : size - degree]
        if interior.size > 1:
            assert np.all(np.diff(interior) > 0.0)

    def test_degree_zero(self) -> None:
        """Degree zero has no repeated ends."""
        result = create_clamped_uniform_knot_vector(0, 4)
        nptest.assert_allclose(result, [0.0, 0.25, 0.5, 0.75, 1.0])

    def test_custom_domain_and_dtype(self) -> None:
        """Respect domain and dtype together."""
        result = create_clamped_uniform_knot_vector(1, 3, domain=(-1.0, 1.0), dtype=np.float32)
        assert result.dtype == np.float32
        nptest.assert_allclose(result, [-1.0, -1.0, 0.0, 1.0, 1.0])

    def test_is_clamped(self) -> None:
        """The builder output passes the clamping check."""
        assert is_knot_vector_clamped(3, create_clamped_uniform_knot_vector(3, 7))

    def test_too_few_control_points(self) -> None:
        """Fail without producing a knot vector."""
        result = None
        with pytest.raises(InvalidControlPointCountError):
            result = create_clamped_uniform_knot_vector(3, 3)
        assert result is None

    def test_error_is_value_error(self) -> None:
        """Construction errors can be caught as ValueError."""
        with pytest.raises(ValueError, match="needs at least 3 control points"):
            create_clamped_uniform_knot_vector(2, 1)


class TestClampKnotVector:
    """Tests for the in-place clamping functions."""

    def test_clamp_left(self) -> None:
        """Make the first degree + 1 knots equal without touching the rest."""
        knots = create_uniform_knot_vector(2, 5)
        original = knots.copy()

        clamp_knot_vector_left(2, knots)

        assert np.all(knots[:3] == original[2])
        nptest.assert_array_equal(knots[2:], original[2:])
        assert is_knot_vector_monotonic(knots)

    def test_clamp_right(self) -> None:
        """Make the last degree + 1 knots equal without touching the rest."""
        knots = create_uniform_knot_vector(3, 5)
        original = knots.copy()

        clamp_knot_vector_right(3, knots)

        assert np.all(knots[-4:] == original[-4])
        nptest.assert_array_equal(knots[:-3], original[:-3])

    def test_clamp_both_on_list(self) -> None:
        """Clamp a plain Python list in place."""
        knots = [0.0, 1.0, 2.0, 3.0, 4.0, 5.0, 6.0]
        clamp_knot_vector(2, knots)
        assert knots == [2.0, 2.0, 2.0, 3.0, 4.0, 4.0, 4.0]

    def test_clamped_result_passes_check(self) -> None:
        """A clamped uniform vector is reported as clamped."""
        knots = create_uniform_knot_vector(2, 6)
        assert not is_knot_vector_clamped(2, knots)
        clamp_knot_vector(2, knots)
        assert is_knot_vector_clamped(2, knots)

    def test_degree_zero_is_noop(self) -> None:
        """Nothing to clamp for degree zero."""
        knots = np.array([0.0, 0.5, 1.0])
        clamp_knot_vector(0, knots)
        nptest.assert_array_equal(knots, [0.0, 0.5, 1.0])

    @pytest.mark.parametrize(
        "clamp", [clamp_knot_vector, clamp_knot_vector_left, clamp_knot_vector_right]
    )
    def test_too_short(self, clamp: Callable[[int, Any], None]) -> None:
        """Reject vectors with at most 2*degree knots and leave them unchanged."""
        knots = np.array([0.0, 1.0, 2.0, 3.0, 4.0, 5.0])
        with pytest.raises(InvalidStateError, match="more than 2\\*degree"):
            clamp(3, knots)
        nptest.assert_array_equal(knots, [0.0, 1.0, 2.0, 3.0, 4.0, 5.0])

    def test_negative_degree(self) -> None:
        """Reject negative degrees."""
        with pytest.raises(InvalidStateError, match="degree must be non-negative"):
            clamp_knot_vector(-1, [0.0, 1.0])


class TestIsKnotVectorMonotonic:
    """Tests for `is_knot_vector_monotonic`."""

    def test_non_decreasing(self) -> None:
        """Accept repeated knots."""
        assert is_knot_vector_monotonic([0, 0, 0, 0.5, 0.5, 1, 1, 1])

    def test_decreasing_pair(self) -> None:
        """Detect a single decreasing pair."""
        assert not is_knot_vector_monotonic([0.0, 0.5, 0.4, 1.0])

    def test_trivial_vectors(self) -> None:
        """Empty and single-knot vectors are monotonic."""
        assert is_knot_vector_monotonic([])
        assert is_knot_vector_monotonic([3.0])

    def test_nan(self) -> None:
        """NaN breaks monotonicity."""
        assert not is_knot_vector_monotonic([0.0, np.nan, 1.0])

    def test_float32(self) -> None:
        """Work on single precision vectors."""
        assert is_knot_vector_monotonic(np.array([0.0, 0.25, 1.0], dtype=np.float32))

    def test_not_1D(self) -> None:
        """Reject multi-dimensional input."""
        with pytest.raises(InvalidStateError, match="knots must be a 1D array"):
            is_knot_vector_monotonic([[0.0, 1.0], [2.0, 3.0]])


class TestIsKnotVectorClosed:
    """Tests for `is_knot_vector_closed`."""

    def test_uniform_vector(self) -> None:
        """A uniform vector has the same spacing at both ends."""
        assert is_knot_vector_closed(2, create_uniform_knot_vector(2, 5))

    def test_periodic_vector(self) -> None:
        """A uniform periodic vector extending past the domain is closed."""
        knots = [-1.0, -0.5, 0.0, 0.5, 1.0, 1.5, 2.0]
        assert is_knot_vector_closed(2, knots)

    def test_symmetric_non_uniform_periodic_vector(self) -> None:
        """The boundary spacing pattern repeats after one period."""
        knots = [0.0, 0.1, 0.3, 0.6, 1.0, 1.1, 1.3, 1.6]
        assert is_knot_vector_closed(2, knots)

    def test_clamped_vector_is_open(self) -> None:
        """A clamped vector is not closed."""
        assert not is_knot_vector_closed(2, [0.0, 0.0, 0.0, 0.5, 1.0, 1.0, 1.0])

    def test_perturbed_boundary_knot(self) -> None:
        """Perturbing a boundary knot beyond the tolerance opens the vector."""
        knots = create_uniform_knot_vector(2, 5)
        knots[0] -= 1e-3
        assert not is_knot_vector_closed(2, knots)

    def test_perturbation_below_tolerance(self) -> None:
        """Perturbations smaller than the tolerance are ignored."""
        knots = create_uniform_knot_vector(2, 5)
        knots[-1] += 1e-14
        assert is_knot_vector_closed(2, knots)

    def test_explicit_tolerance(self) -> None:
        """A looser tolerance accepts larger perturbations."""
        knots = create_uniform_knot_vector(2, 5)
        knots[0] -= 1e-3
        assert is_knot_vector_closed(2, knots, tol=1e-2)

    def test_too_short(self) -> None:
        """Vectors with fewer than degree + 2 knots are not closed."""
        assert not is_knot_vector_closed(3, [0.0, 1.0, 2.0, 3.0])

    def test_negative_degree(self) -> None:
        """Reject negative degrees."""
        with pytest.raises(InvalidStateError):
            is_knot_vector_closed(-1, [0.0, 1.0])

    def test_negative_tolerance(self) -> None:
        """Reject negative tolerances."""
        with pytest.raises(ValueError, match="tol must be non-negative"):
            is_knot_vector_closed(1, [0.0, 1.0, 2.0], tol=-1.0)


class TestCheckKnotVector:
    """Tests for `check_knot_vector`."""

    def test_integer_knots_promoted(self) -> None:
        """Return float64 knots for integer input."""
        result = check_knot_vector(2, [0, 0, 0, 1, 2, 2, 2])
        assert result.dtype == np.float64
        nptest.assert_array_equal(result, [0.0, 0.0, 0.0, 1.0, 2.0, 2.0, 2.0])

    def test_float32_preserved(self) -> None:
        """Keep float32 knots as they are."""
        knots = np.array([0.0, 0.0, 1.0, 1.0], dtype=np.float32)
        assert check_knot_vector(1, knots).dtype == np.float32

    def test_non_monotonic(self) -> None:
        """Reject decreasing knots."""
        with pytest.raises(InvalidStateError, match="knots must be non-decreasing"):
            check_knot_vector(1, [0.0, 0.0, 0.7, 0.3, 1.0, 1.0])

    def test_too_few_knots(self) -> None:
        """Require at least 2*degree + 2 knots."""
        with pytest.raises(InvalidStateError, match="at least 2\\*degree\\+2"):
            check_knot_vector(2, [0.0, 0.0, 1.0, 1.0, 1.0])

    def test_count_mismatch(self) -> None:
        """Reject knot vectors that do not match the control point count."""
        with pytest.raises(InvalidStateError, match="Expected 6 knots for 3 control points"):
            check_knot_vector(2, [0.0, 0.0, 0.0, 0.5, 1.0, 1.0, 1.0], num_ctrl_pts=3)

    def test_empty_domain(self) -> None:
        """Reject vectors whose domain has zero length."""
        with pytest.raises(InvalidStateError, match="non-empty domain"):
            check_knot_vector(1, [0.0, 0.0, 0.0, 0.0])

    def test_non_numeric(self) -> None:
        """Reject non-numeric input."""
        with pytest.raises(InvalidStateError, match="knots must be numeric"):
            check_knot_vector(1, ["a", "b", "c", "d"])

    def test_domain(self) -> None:
        """Report the domain between knots[degree] and knots[-degree - 1]."""
        assert get_knot_vector_domain(2, [0, 0, 0, 1, 2, 2, 2]) == (0.0, 2.0)
        assert get_knot_vector_domain(2, [0, 1, 2, 3, 4, 5]) == (2.0, 3.0)


class TestFindSpan:
    """Tests for `find_span`."""

    @pytest.mark.parametrize(
        ("u", "expected"),
        [(0.0, 2), (0.25, 2), (0.5, 3), (0.75, 3), (1.0, 3)],
    )
    def test_clamped_quadratic(self, u: float, expected: int) -> None:
        """Locate spans, including the domain end."""
        assert find_span(2, [0.0, 0.0, 0.0, 0.5, 1.0, 1.0, 1.0], u) == expected

    def test_end_skips_empty_spans(self) -> None:
        """At the domain end, return the last non-empty span."""
        knots = [0.0, 0.0, 0.0, 0.5, 1.0, 1.0, 1.0, 1.0]
        span = find_span(2, knots, 1.0)
        assert span == 3
        assert knots[span] < knots[span + 1]

    def test_unclamped_vector(self) -> None:
        """Restrict spans to the domain of an unclamped vector."""
        knots = [0.0, 0.2, 0.4, 0.6, 0.8, 1.0]
        assert find_span(2, knots, 0.4) == 2
        assert find_span(2, knots, 0.5) == 2
        assert find_span(2, knots, 0.6) == 2

    def test_span_contains_parameter(self) -> None:
        """Every returned span brackets its parameter."""
        knots = np.array([0.0, 0.0, 0.0, 0.2, 0.2, 0.7, 1.0, 1.0, 1.0])
        for u in np.linspace(0.0, 0.999, 57):
            span = find_span(2, knots, u)
            assert knots[span] <= u < knots[span + 1]

    @pytest.mark.parametrize("u", [-0.1, 1.1, np.nan])
    def test_out_of_domain(self, u: float) -> None:
        """Reject parameters outside the domain."""
        with pytest.raises(OutOfDomainError, match="outside the knot vector domain") as info:
            find_span(2, [0.0, 0.0, 0.0, 0.5, 1.0, 1.0, 1.0], u)
        assert info.value.kind is KnotErrorKind.OUT_OF_DOMAIN

    def test_outside_unclamped_domain(self) -> None:
        """Knots before knots[degree] are outside the domain."""
        with pytest.raises(OutOfDomainError):
            find_span(2, [0.0, 0.2, 0.4, 0.6, 0.8, 1.0], 0.2)


class TestGetKnotMultiplicity:
    """Tests for `get_knot_multiplicity`."""

    @pytest.mark.parametrize(("u", "expected"), [(0.0, 3), (0.5, 2), (1.0, 3), (0.3, 0)])
    def test_multiplicities(self, u: float, expected: int) -> None:
        """Count repeated knots."""
        knots = [0.0, 0.0, 0.0, 0.5, 0.5, 1.0, 1.0, 1.0]
        assert get_knot_multiplicity(knots, u) == expected

    def test_within_tolerance(self) -> None:
        """Count knots closer than the tolerance."""
        knots = [0.0, 0.0, 0.0, 0.5, 0.5, 1.0, 1.0, 1.0]
        assert get_knot_multiplicity(knots, 0.5 + 1e-14) == 2
        assert get_knot_multiplicity(knots, 0.5 + 1e-14, tol=0.0) == 0
