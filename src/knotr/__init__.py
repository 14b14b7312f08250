"""Public API surface for knotr.

Defines package metadata and exported interfaces.
"""

from typing import Final

# Private API imports (accessible but not in __all__)
# Users can access private functions via: knotr._knots_impl._function_name, etc.
from . import (
    _insertion_impl,  # noqa: F401
    _knots_impl,  # noqa: F401
)

# Public API imports
from .bspline import BsplineCurve, BsplineSurface
from .errors import (
    DegenerateSpanError,
    InvalidControlPointCountError,
    InvalidStateError,
    KnotError,
    KnotErrorKind,
    OutOfDomainError,
)
from .insertion import ParametricDirection, insert_knot_curve, insert_knot_surface
from .knots import (
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
from .tolerance import (
    get_conservative_tolerance,
    get_default_tolerance,
    get_machine_epsilon,
    get_strict_tolerance,
)

# Package metadata
__version__: Final[str] = "0.1.0"
__license__: Final[str] = "MIT"
__author__: Final[str] = "Pablo Antolin <pablo.antolin@epfl.ch>"

# Public interface: only functions/classes that don't start with _
__all__ = [
    "BsplineCurve",
    "BsplineSurface",
    "DegenerateSpanError",
    "InvalidControlPointCountError",
    "InvalidStateError",
    "KnotError",
    "KnotErrorKind",
    "OutOfDomainError",
    "ParametricDirection",
    "__author__",
    "__license__",
    "__version__",
    "check_knot_vector",
    "clamp_knot_vector",
    "clamp_knot_vector_left",
    "clamp_knot_vector_right",
    "create_clamped_uniform_knot_vector",
    "create_uniform_knot_vector",
    "find_span",
    "get_conservative_tolerance",
    "get_default_tolerance",
    "get_knot_multiplicity",
    "get_knot_vector_domain",
    "get_machine_epsilon",
    "get_strict_tolerance",
    "insert_knot_curve",
    "insert_knot_surface",
    "is_knot_vector_clamped",
    "is_knot_vector_closed",
    "is_knot_vector_monotonic",
]
