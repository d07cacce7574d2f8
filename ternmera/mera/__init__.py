from .environments import environment_u, environment_w, minimize_expectation_uw
from .mera_tools import (
    InvalidScaleRange,
    StructuralInvariantViolation,
    UnknownAlignment,
)
from .optimization import (
    OptimizationState,
    iterate_minimization,
    minimize_expectation,
)
from .superoperators import ascend_twosite, descend_twosite
from .ternary_mera import TernaryMERA

__all__ = [
    "InvalidScaleRange",
    "OptimizationState",
    "StructuralInvariantViolation",
    "TernaryMERA",
    "UnknownAlignment",
    "ascend_twosite",
    "descend_twosite",
    "environment_u",
    "environment_w",
    "iterate_minimization",
    "minimize_expectation",
    "minimize_expectation_uw",
]
