"""
Contract Validation Module

Контракт JSON отчёта madhava.
"""

from .validators import (
    REPORT_SCHEMA_PATH,
    load_report_schema,
    report_errors,
    validate_series_estimate,
)

__all__ = [
    "REPORT_SCHEMA_PATH",
    "load_report_schema",
    "report_errors",
    "validate_series_estimate",
]
