"""Dispatcher / Reducer — fork-join вычисление π.

Поток управления:
1. Конфигурация уже валидна (EngineConfig), определяется worker_count
2. total_terms из magnitude по TermCountRule
3. Партиционер строит окна (InvalidPartition до запуска воркеров)
4. Fork: один воркер на окно (ProcessPoolExecutor / ThreadPoolExecutor)
5. Join: ожидание ВСЕХ воркеров (единственная точка блокировки)
6. Reduce: сумма частичных результатов в порядке партиций, масштаб 4

Отказ любого воркера прерывает всю оценку (WorkerFailure): частичная
редукция с меньшим числом членов не производится. Оставшиеся процессы
пула завершаются сразу, не дожидаясь своих окон.
"""

import dataclasses
import time
from concurrent.futures import Executor, Future, ProcessPoolExecutor, ThreadPoolExecutor, wait
from dataclasses import dataclass
from typing import Callable, Optional, Sequence, Union

from madhava.core.domain.configuration import (
    EngineConfig,
    ExecutorKind,
    SeriesVariant,
    resolve_worker_count,
    total_terms_for,
)
from madhava.core.domain.estimate import SeriesEstimate
from madhava.core.domain.term_range import DenominatorWindow, TermRange
from madhava.core.math.convergence import is_valid_float
from madhava.core.math.series import (
    denominator_vectors,
    estimate_from_denominator_sum,
    estimate_from_term_sum,
    reduce_partials,
)
from madhava.engine import worker
from madhava.engine.partitioner import covered_terms, partition, slice_denominators
from madhava.logging_config import get_logger

logger = get_logger(__name__)

WorkUnit = Union[TermRange, DenominatorWindow]
WorkerFn = Callable[[WorkUnit], float]


# =============================================================================
# EXCEPTIONS
# =============================================================================


class WorkerFailure(RuntimeError):
    """Воркер завершился аварийно или вернул невалидный результат.

    Исходное исключение доступно через __cause__.
    """

    def __init__(self, worker_index: int, work_unit: WorkUnit, reason: str):
        self.worker_index = worker_index
        self.work_unit = work_unit
        self.reason = reason
        super().__init__(
            f"worker {worker_index} failed on {describe_work_unit(work_unit)}: {reason}"
        )


class WorkerTimeout(WorkerFailure):
    """Воркер не завершился до истечения timeout_s."""
    pass


def _is_partial_sum(result: object) -> bool:
    """Конечное вещественное число (bool не считается)."""
    if isinstance(result, bool) or not isinstance(result, (int, float)):
        return False
    return is_valid_float(float(result))


def describe_work_unit(work_unit: WorkUnit) -> str:
    """Краткое описание окна для диагностики."""
    if isinstance(work_unit, TermRange):
        return f"terms [{work_unit.start}, {work_unit.end})"
    return (
        f"denominator window ({len(work_unit.positive)} positive, "
        f"{len(work_unit.negative)} negative)"
    )


def _abort(executor: Executor) -> None:
    """Остановка пула после отказа: ожидающие окна отменяются,
    процессы воркеров завершаются без ожидания результата.

    Потоки ThreadPoolExecutor прервать нельзя: они дорабатывают окно.
    """
    if isinstance(executor, ProcessPoolExecutor):
        # shutdown() обнуляет _processes, terminate до него
        processes = executor._processes or {}
        for process in list(processes.values()):
            process.terminate()
        logger.debug("terminated %d worker processes", len(processes))
    executor.shutdown(wait=False, cancel_futures=True)


# =============================================================================
# PLAN
# =============================================================================


@dataclass(frozen=True)
class DispatchPlan:
    """Окна работы одного запуска, вычисленные до fork."""

    requested_terms: int
    summed_terms: int
    worker_count: int
    work_units: tuple[WorkUnit, ...]


# =============================================================================
# DISPATCHER
# =============================================================================


class Dispatcher:
    """Fork-join диспетчер: партиции → воркеры → барьер → редукция.

    Порядок этапов:
    1. plan(): worker_count, total_terms, окна (без запуска воркеров)
    2. run(): fork, join всех futures, проверка результатов, редукция
    """

    def __init__(self, config: EngineConfig, worker_fn: Optional[WorkerFn] = None):
        """
        Args:
            config: валидная конфигурация запуска
            worker_fn: функция воркера (default: по варианту ряда);
                для PROCESS должна быть picklable
        """
        self.config = config
        if worker_fn is None:
            worker_fn = (
                worker.run_denominator_window
                if config.variant == SeriesVariant.DENOMINATOR_LIST
                else worker.run
            )
        self.worker_fn = worker_fn

    def plan(self) -> DispatchPlan:
        """Построение окон работы.

        Raises:
            InvalidPartition: worker_count == 0 (воркеры не запускаются)
        """
        worker_count = resolve_worker_count(self.config)
        requested_terms = total_terms_for(self.config, worker_count)
        policy = self.config.remainder_policy

        if self.config.variant == SeriesVariant.DENOMINATOR_LIST:
            # Член k=0 (равный 1) учитывается в редукции 4·(1 - S)
            denominator_count = max(requested_terms - 1, 0)
            ranges = partition(denominator_count // 2, worker_count, policy)
            positive, negative = denominator_vectors(denominator_count)
            windows = slice_denominators(positive, negative, ranges, policy)
            summed_terms = 1 + sum(w.size for w in windows)
            work_units: Sequence[WorkUnit] = windows
        else:
            ranges = partition(requested_terms, worker_count, policy)
            summed_terms = covered_terms(ranges)
            work_units = ranges

        logger.debug(
            "plan: variant=%s requested_terms=%d summed_terms=%d workers=%d policy=%s",
            self.config.variant.value, requested_terms, summed_terms,
            worker_count, policy.value,
        )

        return DispatchPlan(
            requested_terms=requested_terms,
            summed_terms=summed_terms,
            worker_count=worker_count,
            work_units=tuple(work_units),
        )

    def run(self) -> SeriesEstimate:
        """Полный цикл partition → fork → join → reduce.

        Raises:
            InvalidPartition: некорректное разбиение (до запуска воркеров)
            WorkerFailure: отказ любого воркера
            WorkerTimeout: превышен timeout_s
        """
        plan = self.plan()

        beginning = time.perf_counter()
        partials = self._fork_join(plan.work_units)
        series_sum = reduce_partials(partials)

        if self.config.variant == SeriesVariant.DENOMINATOR_LIST:
            value = estimate_from_denominator_sum(series_sum)
        else:
            value = estimate_from_term_sum(series_sum)
        elapsed_ms = (time.perf_counter() - beginning) * 1000.0

        estimate = SeriesEstimate(
            value=value,
            requested_terms=plan.requested_terms,
            total_terms=plan.summed_terms,
            worker_count=plan.worker_count,
            variant=self.config.variant,
            remainder_policy=self.config.remainder_policy,
            partial_sums=tuple(partials),
            elapsed_ms=elapsed_ms,
        )

        logger.info(
            "pi=%r (diff %+.3e) from %d terms on %d workers in %.1f ms",
            estimate.value, estimate.difference_from_pi, estimate.total_terms,
            estimate.worker_count, estimate.elapsed_ms,
        )
        return estimate

    def _make_executor(self, worker_count: int) -> Executor:
        if self.config.executor == ExecutorKind.THREAD:
            return ThreadPoolExecutor(max_workers=worker_count, thread_name_prefix="madhava")
        return ProcessPoolExecutor(max_workers=worker_count)

    def _fork_join(self, work_units: Sequence[WorkUnit]) -> list[float]:
        """Один воркер на окно; возврат только после завершения всех."""
        executor = self._make_executor(len(work_units))
        futures: dict[Future, int] = {}
        completed = False

        try:
            for index, work_unit in enumerate(work_units):
                futures[executor.submit(self.worker_fn, work_unit)] = index

            done, not_done = wait(futures, timeout=self.config.timeout_s)

            if not_done:
                index = min(futures[future] for future in not_done)
                logger.error(
                    "%d of %d workers did not finish within %.3fs",
                    len(not_done), len(futures), self.config.timeout_s,
                )
                raise WorkerTimeout(
                    index, work_units[index],
                    f"did not finish within {self.config.timeout_s}s",
                )

            partials: list[float] = [0.0] * len(work_units)
            for future in sorted(done, key=futures.__getitem__):
                index = futures[future]
                partials[index] = self._collect(index, work_units[index], future)

            completed = True
            return partials
        finally:
            if completed:
                executor.shutdown(wait=True)
            else:
                _abort(executor)

    def _collect(self, index: int, work_unit: WorkUnit, future: Future) -> float:
        """Результат одного воркера или WorkerFailure."""
        try:
            result = future.result()
        except Exception as e:
            logger.error("worker %d raised %r", index, e)
            raise WorkerFailure(index, work_unit, repr(e)) from e

        if not _is_partial_sum(result):
            logger.error("worker %d returned invalid partial sum %r", index, result)
            raise WorkerFailure(index, work_unit, f"invalid partial sum {result!r}")

        logger.debug("worker %d finished %s: partial=%r",
                     index, describe_work_unit(work_unit), result)
        return float(result)


# =============================================================================
# ENTRY POINT
# =============================================================================


def compute_pi(magnitude: int, config: Optional[EngineConfig] = None) -> SeriesEstimate:
    """Оценка π рядом Мадхавы–Лейбница для заданного magnitude.

    Args:
        magnitude: порядок количества членов, (0, MAX_MAGNITUDE]
        config: политики движка (magnitude в ней заменяется аргументом)

    Returns:
        SeriesEstimate

    Raises:
        InvalidMagnitude: magnitude вне диапазона (вычисление не начинается)
        InvalidPartition: worker_count == 0
        WorkerFailure: отказ любого воркера
    """
    if config is None:
        config = EngineConfig(magnitude=magnitude)
    else:
        config = dataclasses.replace(config, magnitude=magnitude)

    return Dispatcher(config).run()
