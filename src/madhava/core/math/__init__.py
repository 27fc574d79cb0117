"""
Core math modules для madhava

Члены ряда Мадхавы–Лейбница, частичные суммы, редукция и метрики сходимости.
"""

# Series
from madhava.core.math.series import (
    MAX_EXACT_DENOMINATOR,
    MAX_TERM_INDEX,
    PI_SCALE,
    denominator_vectors,
    estimate_from_denominator_sum,
    estimate_from_term_sum,
    reduce_partials,
    sum_denominator_window,
    sum_terms,
    term_value,
)

# Convergence
from madhava.core.math.convergence import (
    EPS_FLOAT_COMPARE_ABS,
    EPS_FLOAT_COMPARE_REL,
    ConvergenceStep,
    alternating_error_bound,
    convergence_profile,
    difference_from_pi,
    improvement_ratio,
    is_close,
    is_valid_float,
    within_error_bound,
)

__all__ = [
    # Series — Constants
    "MAX_EXACT_DENOMINATOR",
    "MAX_TERM_INDEX",
    "PI_SCALE",
    # Series — Functions
    "term_value",
    "sum_terms",
    "denominator_vectors",
    "sum_denominator_window",
    "reduce_partials",
    "estimate_from_term_sum",
    "estimate_from_denominator_sum",
    # Convergence — Constants
    "EPS_FLOAT_COMPARE_ABS",
    "EPS_FLOAT_COMPARE_REL",
    # Convergence — Types
    "ConvergenceStep",
    # Convergence — Functions
    "is_valid_float",
    "is_close",
    "difference_from_pi",
    "alternating_error_bound",
    "within_error_bound",
    "convergence_profile",
    "improvement_ratio",
]
