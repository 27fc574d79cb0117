"""
madhava — параллельное вычисление π рядом Мадхавы–Лейбница.

Partition → compute → reduce:
- engine.partitioner: непересекающиеся смежные окна индексов
- engine.worker: частичная сумма окна
- engine.dispatcher: fork-join и редукция 4·Σ
"""

from madhava.core.domain import (
    MAX_MAGNITUDE,
    EngineConfig,
    InvalidMagnitude,
    SeriesEstimate,
    TermRange,
)
from madhava.core.math import term_value
from madhava.engine import (
    Dispatcher,
    InvalidPartition,
    WorkerFailure,
    WorkerTimeout,
    compute_pi,
    partition,
)

__version__ = "0.1.0"

__all__ = [
    "MAX_MAGNITUDE",
    "EngineConfig",
    "InvalidMagnitude",
    "SeriesEstimate",
    "TermRange",
    "term_value",
    "Dispatcher",
    "InvalidPartition",
    "WorkerFailure",
    "WorkerTimeout",
    "compute_pi",
    "partition",
]
