"""
Domain models and value objects.

Contains configuration, work units (TermRange, DenominatorWindow) and the
SeriesEstimate result.
"""

from madhava.core.domain.configuration import (
    DEFAULT_MAGNITUDE,
    FIXED_WORKER_COUNT_DEFAULT,
    MAX_MAGNITUDE,
    EngineConfig,
    ExecutorKind,
    InvalidMagnitude,
    RemainderPolicy,
    SeriesVariant,
    TermCountRule,
    WorkerStrategy,
    resolve_worker_count,
    total_terms_for,
    validate_magnitude,
)
from madhava.core.domain.estimate import REPORT_SCHEMA_VERSION, SeriesEstimate
from madhava.core.domain.term_range import DenominatorWindow, TermRange

__all__ = [
    # Configuration
    "DEFAULT_MAGNITUDE",
    "FIXED_WORKER_COUNT_DEFAULT",
    "MAX_MAGNITUDE",
    "EngineConfig",
    "ExecutorKind",
    "InvalidMagnitude",
    "RemainderPolicy",
    "SeriesVariant",
    "TermCountRule",
    "WorkerStrategy",
    "resolve_worker_count",
    "total_terms_for",
    "validate_magnitude",
    # Work units
    "TermRange",
    "DenominatorWindow",
    # Result
    "REPORT_SCHEMA_VERSION",
    "SeriesEstimate",
]
