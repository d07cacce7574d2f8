from ternmera.config import ASSERT_TOL, __version__, config
from ternmera.mera import (
    InvalidScaleRange,
    StructuralInvariantViolation,
    TernaryMERA,
    UnknownAlignment,
    ascend_twosite,
    descend_twosite,
    iterate_minimization,
    minimize_expectation,
)
from ternmera.vector_space import TrivialSpace, U1_Space, get_vector_space_type

__all__ = [
    "ASSERT_TOL",
    "InvalidScaleRange",
    "StructuralInvariantViolation",
    "TernaryMERA",
    "TrivialSpace",
    "U1_Space",
    "UnknownAlignment",
    "__version__",
    "ascend_twosite",
    "config",
    "descend_twosite",
    "get_vector_space_type",
    "iterate_minimization",
    "minimize_expectation",
]
