"""Engine — parallel partition-compute-reduce.

Партиционер окон, воркеры частичных сумм и fork-join диспетчер.
"""

from .dispatcher import (
    DispatchPlan,
    Dispatcher,
    WorkerFailure,
    WorkerTimeout,
    compute_pi,
)
from .partitioner import InvalidPartition, covered_terms, partition, slice_denominators

__all__ = [
    "DispatchPlan",
    "Dispatcher",
    "WorkerFailure",
    "WorkerTimeout",
    "compute_pi",
    "InvalidPartition",
    "covered_terms",
    "partition",
    "slice_denominators",
]
