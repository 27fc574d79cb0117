"""
Тесты для Dispatcher / Reducer

Проверяемые инварианты:
1. magnitude=1 → ровно один член → 4.0
2. magnitude=7, 4 воркера → |π - оценка| в пределах границы знакочередующегося ряда
3. worker_count=0 → InvalidPartition, воркеры не запускаются
4. magnitude=0 / MAX_MAGNITUDE+1 → InvalidMagnitude, вычисление не начинается
5. Отказ воркера → WorkerFailure (не нулевой вклад)
6. Превышение timeout → WorkerTimeout
7. Оба варианта ряда согласованы
8. Сходимость: больше членов → меньше ошибка
"""

import math
import multiprocessing
import os
import pickle
import threading
import time
from concurrent.futures.process import BrokenProcessPool

import pytest

from madhava.core.domain.configuration import (
    MAX_MAGNITUDE,
    EngineConfig,
    ExecutorKind,
    InvalidMagnitude,
    RemainderPolicy,
    SeriesVariant,
    TermCountRule,
    WorkerStrategy,
)
from madhava.core.domain.term_range import TermRange
from madhava.core.math.convergence import (
    alternating_error_bound,
    convergence_profile,
    improvement_ratio,
)
from madhava.core.math.series import reduce_partials
from madhava.engine import worker
from madhava.engine.dispatcher import (
    Dispatcher,
    WorkerFailure,
    WorkerTimeout,
    compute_pi,
)
from madhava.engine.partitioner import InvalidPartition


# =============================================================================
# FIXTURES
# =============================================================================


def thread_config(magnitude: int = 3, workers: int = 4, **overrides) -> EngineConfig:
    """Конфигурация с ThreadPoolExecutor и фиксированным числом воркеров."""
    params = dict(
        magnitude=magnitude,
        worker_strategy=WorkerStrategy.FIXED,
        fixed_worker_count=workers,
        executor=ExecutorKind.THREAD,
    )
    params.update(overrides)
    return EngineConfig(**params)


def process_config(magnitude: int = 3, workers: int = 2, **overrides) -> EngineConfig:
    """Конфигурация с ProcessPoolExecutor."""
    return thread_config(magnitude, workers, executor=ExecutorKind.PROCESS, **overrides)


def crashing_worker(term_range):
    """Аварийное завершение процесса воркера без исключения."""
    os._exit(1)


def sleeping_worker(term_range):
    time.sleep(60)
    return 0.0


@pytest.fixture
def no_executor(monkeypatch):
    """Запрет на создание пула: fork не должен произойти."""
    def forbidden(self, worker_count):
        raise AssertionError("executor must not be created")

    monkeypatch.setattr(Dispatcher, "_make_executor", forbidden)


# =============================================================================
# ТЕСТЫ: Scenarios
# =============================================================================


class TestScenarios:
    """Основные сценарии вычисления."""

    def test_single_term_is_four(self):
        """magnitude=1 → total_terms=1 (k=0) → 4.0."""
        estimate = compute_pi(1, thread_config())

        assert estimate.value == 4.0
        assert estimate.requested_terms == 1
        assert estimate.total_terms == 1
        assert estimate.partial_sums == (0.0, 0.0, 0.0, 1.0)

    def test_million_terms_four_workers(self):
        """magnitude=7, 4 воркера (процессы) → 10^6 членов, ошибка ~1/n."""
        config = EngineConfig(
            magnitude=7,
            worker_strategy=WorkerStrategy.FIXED,
            fixed_worker_count=4,
            executor=ExecutorKind.PROCESS,
        )

        estimate = compute_pi(7, config)

        assert estimate.total_terms == 10**6
        assert estimate.worker_count == 4
        assert abs(estimate.value - math.pi) <= alternating_error_bound(10**6)
        # Чётное число членов заканчивается отрицательным → недооценка
        assert estimate.value < math.pi
        assert abs(estimate.difference_from_pi) == pytest.approx(1.0 / 10**6, rel=1e-3)

    def test_zero_workers_is_invalid_partition(self, no_executor):
        calls = []

        def recording_worker(term_range):
            calls.append(term_range)
            return 0.0

        dispatcher = Dispatcher(thread_config(workers=0), worker_fn=recording_worker)

        with pytest.raises(InvalidPartition):
            dispatcher.run()
        assert calls == []

    def test_invalid_magnitude(self, no_executor):
        with pytest.raises(InvalidMagnitude):
            compute_pi(0)

        with pytest.raises(InvalidMagnitude):
            compute_pi(MAX_MAGNITUDE + 1, thread_config())

    def test_empty_range_worker_returns_zero(self):
        """Воркеры с пустыми окнами дают ровно 0.0."""
        estimate = compute_pi(1, thread_config(workers=3))
        assert estimate.partial_sums[:2] == (0.0, 0.0)

    def test_default_config_uses_process_pool(self):
        """Конфигурация по умолчанию: процесс на CPU."""
        estimate = compute_pi(3)

        assert estimate.total_terms == 100
        assert estimate.value == pytest.approx(4 * sum((-1) ** k / (2 * k + 1) for k in range(100)))


# =============================================================================
# ТЕСТЫ: Plan
# =============================================================================


class TestPlan:
    """Тесты Dispatcher.plan: окна строятся до fork."""

    def test_term_index_plan(self, no_executor):
        plan = Dispatcher(thread_config(magnitude=4, workers=3)).plan()

        assert plan.requested_terms == 1000
        assert plan.summed_terms == 1000
        assert plan.worker_count == 3
        assert plan.work_units == (
            TermRange(start=0, end=333),
            TermRange(start=333, end=666),
            TermRange(start=666, end=1000),
        )

    def test_truncate_plan_drops_remainder(self, no_executor):
        config = thread_config(magnitude=4, workers=3, remainder_policy=RemainderPolicy.TRUNCATE)
        plan = Dispatcher(config).plan()

        assert plan.summed_terms == 999
        assert plan.work_units[-1] == TermRange(start=666, end=999)

    def test_per_worker_rule(self, no_executor):
        config = thread_config(magnitude=3, workers=4, term_count_rule=TermCountRule.PER_WORKER)
        plan = Dispatcher(config).plan()

        assert plan.requested_terms == 400
        assert [unit.size for unit in plan.work_units] == [100, 100, 100, 100]

    def test_denominator_plan(self, no_executor):
        config = thread_config(magnitude=2, workers=2, variant=SeriesVariant.DENOMINATOR_LIST)
        plan = Dispatcher(config).plan()

        # 10 членов: k=0 в редукции + 9 знаменателей (5 положительных, 4 отрицательных)
        assert plan.requested_terms == 10
        assert plan.summed_terms == 10
        assert list(plan.work_units[0].positive) == [3, 7]
        assert list(plan.work_units[0].negative) == [5, 9]
        assert list(plan.work_units[1].positive) == [11, 15, 19]
        assert list(plan.work_units[1].negative) == [13, 17]

    @pytest.mark.parametrize("term_count_rule, requested", [
        (TermCountRule.MAGNITUDE_MINUS_ONE, 10**9),
        (TermCountRule.MAGNITUDE, 10**10),
    ])
    def test_denominator_plan_at_max_magnitude(self, no_executor, term_count_rule, requested):
        """MAX_MAGNITUDE: окна знаменателей не материализуются."""
        config = thread_config(
            magnitude=MAX_MAGNITUDE, workers=4,
            variant=SeriesVariant.DENOMINATOR_LIST, term_count_rule=term_count_rule,
        )
        plan = Dispatcher(config).plan()

        assert plan.requested_terms == requested
        assert plan.summed_terms == requested
        for window in plan.work_units:
            assert isinstance(window.positive, range)
            assert isinstance(window.negative, range)
        assert len(pickle.dumps(plan.work_units)) < 4096


# =============================================================================
# ТЕСТЫ: Remainder policy
# =============================================================================


class TestRemainderPolicy:
    """TRUNCATE отбрасывает хвост, DISTRIBUTE покрывает весь диапазон."""

    def test_truncate_single_term_many_workers(self):
        config = thread_config(magnitude=1, workers=4, remainder_policy=RemainderPolicy.TRUNCATE)

        estimate = Dispatcher(config).run()

        assert estimate.total_terms == 0
        assert estimate.dropped_terms == 1
        assert estimate.value == 0.0

    def test_truncate_denominator_variant(self):
        config = thread_config(
            magnitude=5, workers=5,
            variant=SeriesVariant.DENOMINATOR_LIST,
            remainder_policy=RemainderPolicy.TRUNCATE,
        )

        estimate = Dispatcher(config).run()

        # 9999 знаменателей → 4999 пар → 5 окон по 999 пар
        assert estimate.total_terms == 1 + 2 * 5 * 999
        assert estimate.dropped_terms == 10**4 - estimate.total_terms

    def test_policies_agree_on_even_division(self):
        truncate = Dispatcher(thread_config(
            magnitude=5, workers=4, remainder_policy=RemainderPolicy.TRUNCATE,
        )).run()
        distribute = Dispatcher(thread_config(
            magnitude=5, workers=4, remainder_policy=RemainderPolicy.DISTRIBUTE,
        )).run()

        assert truncate.value == distribute.value
        assert truncate.total_terms == distribute.total_terms == 10**4


# =============================================================================
# ТЕСТЫ: Variants & reduction
# =============================================================================


class TestVariantsAndReduction:
    """Согласованность вариантов и порядок редукции."""

    def test_variants_agree(self):
        by_index = Dispatcher(thread_config(magnitude=5, workers=3)).run()
        by_denominators = Dispatcher(thread_config(
            magnitude=5, workers=3, variant=SeriesVariant.DENOMINATOR_LIST,
        )).run()

        assert by_index.total_terms == by_denominators.total_terms == 10**4
        assert math.isclose(by_index.value, by_denominators.value, rel_tol=1e-9)

    def test_reduction_order_insensitive(self):
        estimate = Dispatcher(thread_config(magnitude=5, workers=7)).run()

        forward = 4.0 * reduce_partials(estimate.partial_sums)
        backward = 4.0 * reduce_partials(reversed(estimate.partial_sums))

        assert forward == estimate.value
        assert math.isclose(forward, backward, rel_tol=1e-9)

    def test_worker_count_does_not_change_estimate(self):
        """Разное число воркеров — та же оценка в пределах округления."""
        values = [
            Dispatcher(thread_config(magnitude=5, workers=workers)).run().value
            for workers in (1, 2, 3, 8)
        ]
        for value in values[1:]:
            assert math.isclose(value, values[0], rel_tol=1e-9)

    def test_partial_sums_in_partition_order(self):
        estimate = Dispatcher(thread_config(magnitude=3, workers=2)).run()

        assert estimate.partial_sums[0] == worker.run(TermRange(start=0, end=50))
        assert estimate.partial_sums[1] == worker.run(TermRange(start=50, end=100))

    def test_elapsed_reported(self):
        estimate = Dispatcher(thread_config(magnitude=4)).run()
        assert estimate.elapsed_ms >= 0.0


# =============================================================================
# ТЕСТЫ: Convergence
# =============================================================================


class TestConvergence:
    """Больше членов → меньше ошибка."""

    def test_error_decreases_with_magnitude(self):
        points = []
        for magnitude in range(1, 7):
            estimate = compute_pi(magnitude, thread_config(workers=2))
            points.append((magnitude, estimate.total_terms, estimate.value))

        steps = convergence_profile(points)

        assert improvement_ratio(steps) >= 0.95
        for step in steps:
            assert step.abs_error <= alternating_error_bound(step.total_terms)


# =============================================================================
# ТЕСТЫ: Worker failures
# =============================================================================


class TestWorkerFailure:
    """Отказ воркера прерывает всю оценку."""

    def test_raising_worker_surfaces_failure(self):
        def flaky(term_range):
            if term_range.start == 50:
                raise RuntimeError("boom")
            return worker.run(term_range)

        dispatcher = Dispatcher(thread_config(magnitude=3, workers=4), worker_fn=flaky)

        with pytest.raises(WorkerFailure, match="worker 2 failed on terms \\[50, 75\\)") as exc_info:
            dispatcher.run()

        assert exc_info.value.worker_index == 2
        assert exc_info.value.work_unit == TermRange(start=50, end=75)
        assert isinstance(exc_info.value.__cause__, RuntimeError)

    def test_lowest_failing_worker_reported(self):
        def always_fails(term_range):
            raise ValueError(f"bad window {term_range.start}")

        dispatcher = Dispatcher(thread_config(magnitude=3, workers=4), worker_fn=always_fails)

        with pytest.raises(WorkerFailure) as exc_info:
            dispatcher.run()

        assert exc_info.value.worker_index == 0

    def test_nan_partial_is_failure(self):
        def nan_worker(term_range):
            return float("nan")

        dispatcher = Dispatcher(thread_config(workers=2), worker_fn=nan_worker)

        with pytest.raises(WorkerFailure, match="invalid partial sum"):
            dispatcher.run()

    def test_missing_partial_is_failure(self):
        """None не считается нулевым вкладом."""
        def silent_worker(term_range):
            return None

        dispatcher = Dispatcher(thread_config(workers=2), worker_fn=silent_worker)

        with pytest.raises(WorkerFailure, match="invalid partial sum None"):
            dispatcher.run()

    def test_timeout(self):
        release = threading.Event()

        def stuck_first(term_range):
            if term_range.start == 0:
                release.wait(10)
            return worker.run(term_range)

        dispatcher = Dispatcher(
            thread_config(magnitude=3, workers=2, timeout_s=0.2), worker_fn=stuck_first,
        )

        try:
            with pytest.raises(WorkerTimeout, match="did not finish") as exc_info:
                dispatcher.run()
        finally:
            release.set()

        assert exc_info.value.worker_index == 0
        assert isinstance(exc_info.value, WorkerFailure)

    def test_crashed_process_surfaces_failure(self):
        """Аварийный выход процесса → WorkerFailure с BrokenProcessPool в __cause__."""
        dispatcher = Dispatcher(process_config(), worker_fn=crashing_worker)

        with pytest.raises(WorkerFailure, match="worker 0 failed") as exc_info:
            dispatcher.run()

        assert isinstance(exc_info.value.__cause__, BrokenProcessPool)
        assert not isinstance(exc_info.value, WorkerTimeout)

    def test_timeout_terminates_process_workers(self):
        """После timeout процессы пула не продолжают вычисление."""
        dispatcher = Dispatcher(
            process_config(timeout_s=0.5), worker_fn=sleeping_worker,
        )

        started = time.monotonic()
        with pytest.raises(WorkerTimeout):
            dispatcher.run()

        deadline = time.monotonic() + 10
        while multiprocessing.active_children() and time.monotonic() < deadline:
            time.sleep(0.05)

        assert multiprocessing.active_children() == []
        assert time.monotonic() - started < 30
