"""Error taxonomy for knot vector construction, clamping and insertion.

Every error raised by this package is a :class:`KnotError`, which derives from
:class:`ValueError` so that callers used to NumPy-style argument errors can
keep catching ``ValueError``. The concrete failure category is available
through the ``kind`` attribute.
"""

from enum import Enum


class KnotErrorKind(Enum):
    """Categories of recoverable failures."""

    INVALID_CONTROL_POINT_COUNT = "invalid_control_point_count"
    DEGENERATE_SPAN = "degenerate_span"
    OUT_OF_DOMAIN = "out_of_domain"
    INVALID_STATE = "invalid_state"


class KnotError(ValueError):
    """Base class for all knot vector errors.

    Attributes:
        kind (KnotErrorKind): Category of the failure.
    """

    kind: KnotErrorKind = KnotErrorKind.INVALID_STATE


class InvalidControlPointCountError(KnotError):
    """Fewer than ``degree + 1`` control points were requested."""

    kind = KnotErrorKind.INVALID_CONTROL_POINT_COUNT


class DegenerateSpanError(KnotError):
    """The insertion span has zero width or the knot is already full."""

    kind = KnotErrorKind.DEGENERATE_SPAN


class OutOfDomainError(KnotError):
    """A parameter value lies outside the knot vector domain."""

    kind = KnotErrorKind.OUT_OF_DOMAIN


class InvalidStateError(KnotError):
    """Knots, degree and control points are inconsistent."""

    kind = KnotErrorKind.INVALID_STATE
