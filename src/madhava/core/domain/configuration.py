"""
Configuration — Параметры одного запуска вычисления π

Единственный вход от внешнего слоя (CLI/config) — magnitude, порядок
количества членов ряда. Остальные поля — политики движка, выбираемые
конфигурацией вместо параллельных копий кода:
- вариант ряда (TERM_INDEX / DENOMINATOR_LIST)
- правило количества членов (10^(m-1), 10^m, worker_count·10^(m-1))
- стратегия количества воркеров (CPU_COUNT / FIXED)
- политика остатка при неровном делении (TRUNCATE / DISTRIBUTE)
- тип пула (PROCESS / THREAD)

КРИТИЧЕСКИЕ ИНВАРИАНТЫ:
1. magnitude ∈ (0, MAX_MAGNITUDE], иначе InvalidMagnitude до любых вычислений
2. Конфигурация immutable на всё время запуска
"""

import os
from dataclasses import dataclass
from enum import Enum
from typing import Final, Optional

# =============================================================================
# КОНСТАНТЫ
# =============================================================================

# Верхняя граница magnitude (10^10 членов — предел по памяти/времени)
MAX_MAGNITUDE: Final[int] = 10

# magnitude по умолчанию (10^6 членов)
DEFAULT_MAGNITUDE: Final[int] = 6

# Количество воркеров для стратегии FIXED
FIXED_WORKER_COUNT_DEFAULT: Final[int] = 5


# =============================================================================
# EXCEPTIONS
# =============================================================================


class InvalidMagnitude(ValueError):
    """
    magnitude вне допустимого диапазона (0, MAX_MAGNITUDE].

    Обнаруживается до запуска воркеров; оценка не производится.
    """
    pass


# =============================================================================
# ENUMS
# =============================================================================


class SeriesVariant(str, Enum):
    """Формулировка ряда"""

    TERM_INDEX = "term_index"
    DENOMINATOR_LIST = "denominator_list"


class TermCountRule(str, Enum):
    """Правило перевода magnitude в количество членов"""

    MAGNITUDE_MINUS_ONE = "magnitude_minus_one"  # 10^(m-1)
    MAGNITUDE = "magnitude"  # 10^m
    PER_WORKER = "per_worker"  # worker_count * 10^(m-1)


class WorkerStrategy(str, Enum):
    """Стратегия выбора количества воркеров"""

    CPU_COUNT = "cpu_count"
    FIXED = "fixed"


class RemainderPolicy(str, Enum):
    """
    Обработка остатка total_terms % worker_count.

    TRUNCATE: хвостовые члены отбрасываются (историческое поведение)
    DISTRIBUTE: остаток получает последний воркер
    """

    TRUNCATE = "truncate"
    DISTRIBUTE = "distribute"


class ExecutorKind(str, Enum):
    """Тип пула воркеров"""

    PROCESS = "process"
    THREAD = "thread"


# =============================================================================
# VALIDATION
# =============================================================================


def validate_magnitude(magnitude: int, max_magnitude: int = MAX_MAGNITUDE) -> int:
    """
    Проверка magnitude ∈ (0, max_magnitude].

    Args:
        magnitude: Порядок количества членов
        max_magnitude: Верхняя граница (default: MAX_MAGNITUDE)

    Returns:
        magnitude без изменений

    Raises:
        InvalidMagnitude: если magnitude не int, <= 0 или > max_magnitude

    Examples:
        >>> validate_magnitude(6)
        6
        >>> validate_magnitude(0)  # doctest: +SKIP
        Traceback (most recent call last):
            ...
        InvalidMagnitude: ...
    """
    if isinstance(magnitude, bool) or not isinstance(magnitude, int):
        raise InvalidMagnitude(f"magnitude must be an integer, got {magnitude!r}")

    if magnitude <= 0 or magnitude > max_magnitude:
        raise InvalidMagnitude(
            f"magnitude must be within range (0-{max_magnitude}], got {magnitude}"
        )

    return magnitude


# =============================================================================
# CONFIG
# =============================================================================


@dataclass(frozen=True)
class EngineConfig:
    """Конфигурация движка partition-compute-reduce.

    magnitude валидируется при создании: невалидная конфигурация
    не может существовать.
    """

    magnitude: int = DEFAULT_MAGNITUDE
    variant: SeriesVariant = SeriesVariant.TERM_INDEX
    term_count_rule: TermCountRule = TermCountRule.MAGNITUDE_MINUS_ONE
    worker_strategy: WorkerStrategy = WorkerStrategy.CPU_COUNT
    fixed_worker_count: int = FIXED_WORKER_COUNT_DEFAULT
    remainder_policy: RemainderPolicy = RemainderPolicy.DISTRIBUTE
    executor: ExecutorKind = ExecutorKind.PROCESS
    timeout_s: Optional[float] = None

    def __post_init__(self):
        validate_magnitude(self.magnitude)

        if self.timeout_s is not None and self.timeout_s <= 0:
            raise ValueError(f"timeout_s must be positive, got {self.timeout_s}")


def resolve_worker_count(config: EngineConfig) -> int:
    """
    Количество воркеров согласно стратегии.

    CPU_COUNT: os.cpu_count() (1, если не определяется)
    FIXED: config.fixed_worker_count (0 отклоняется партиционером)
    """
    if config.worker_strategy == WorkerStrategy.FIXED:
        return config.fixed_worker_count
    return os.cpu_count() or 1


def total_terms_for(config: EngineConfig, worker_count: int) -> int:
    """
    Количество членов ряда для конфигурации.

    Examples:
        >>> total_terms_for(EngineConfig(magnitude=1), 4)
        1
        >>> total_terms_for(EngineConfig(magnitude=3, term_count_rule=TermCountRule.MAGNITUDE), 4)
        1000
        >>> total_terms_for(EngineConfig(magnitude=3, term_count_rule=TermCountRule.PER_WORKER), 4)
        400
    """
    if config.term_count_rule == TermCountRule.MAGNITUDE:
        return 10 ** config.magnitude

    decade = 10 ** (config.magnitude - 1)

    if config.term_count_rule == TermCountRule.PER_WORKER:
        return worker_count * decade

    return decade
