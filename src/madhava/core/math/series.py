"""
Series — Madhava–Leibniz Term Evaluator & Partial Sums

Математические примитивы ряда Мадхавы–Лейбница:

    π/4 = Σ_{k=0}^{∞} (-1)^k / (2k+1)

Два эквивалентных представления одного ряда:
- TERM_INDEX: знак вычисляется из чётности индекса k
- DENOMINATOR_LIST: явные векторы положительных/отрицательных знаменателей
  (3, 7, 11, … и 5, 9, 13, …), первый член 1 учитывается в редукции 4·(1 - S)

КРИТИЧЕСКИЕ ИНВАРИАНТЫ:
1. Вся арифметика в double precision (Python float)
2. Индекс k — Python int (произвольная разрядность), переполнение 2k+1 невозможно
3. Знаменатель 2k+1 обязан точно представляться во float (≤ 2^53),
   иначе OverflowError (не молчаливая потеря точности)
4. Все функции чистые и детерминированные
"""

from typing import Final, Iterable, Sequence

# =============================================================================
# КОНСТАНТЫ
# =============================================================================

# Максимальное целое, точно представимое в double (2^53)
MAX_EXACT_DENOMINATOR: Final[int] = 2**53

# Максимальный индекс члена, для которого 2k+1 ≤ 2^53
MAX_TERM_INDEX: Final[int] = (MAX_EXACT_DENOMINATOR - 1) // 2

# Множитель перехода от π/4 к π
PI_SCALE: Final[float] = 4.0


# =============================================================================
# TERM EVALUATOR
# =============================================================================


def term_value(k: int) -> float:
    """
    Знаковый вклад k-го члена ряда: (-1)^k / (2k+1).

    Args:
        k: Индекс члена (k >= 0)

    Returns:
        +1/(2k+1) для чётного k, -1/(2k+1) для нечётного k

    Raises:
        ValueError: если k < 0
        OverflowError: если 2k+1 > 2^53 (знаменатель не представим точно)

    Examples:
        >>> term_value(0)
        1.0
        >>> term_value(1)
        -0.3333333333333333
        >>> term_value(2)
        0.2
    """
    if k < 0:
        raise ValueError(f"term index must be non-negative, got {k}")

    if k > MAX_TERM_INDEX:
        raise OverflowError(
            f"term index {k} exceeds MAX_TERM_INDEX={MAX_TERM_INDEX}: "
            f"denominator 2k+1 is not exactly representable as float"
        )

    denominator = float(2 * k + 1)

    if k % 2 == 0:
        return 1.0 / denominator
    return -1.0 / denominator


def sum_terms(start: int, end: int) -> float:
    """
    Сумма вкладов членов с индексами [start, end).

    Пустой диапазон (start == end) возвращает ровно 0.0 без итераций.

    Raises:
        ValueError: если start > end или start < 0
        OverflowError: если end - 1 > MAX_TERM_INDEX
    """
    if start < 0 or start > end:
        raise ValueError(f"invalid term window [{start}, {end})")

    if start == end:
        return 0.0

    # Проверка верхней границы один раз, до цикла
    if end - 1 > MAX_TERM_INDEX:
        raise OverflowError(
            f"term window end {end} exceeds MAX_TERM_INDEX={MAX_TERM_INDEX}"
        )

    accum = 0.0
    for k in range(start, end):
        accum += term_value(k)
    return accum


# =============================================================================
# DENOMINATOR-LIST VARIANT
# =============================================================================


def denominator_vectors(n: int) -> tuple[range, range]:
    """
    Векторы знаменателей для членов k = 1..n.

    Положительные знаменатели (нечётные k, вычитаются в ряду): 3, 7, 11, …
    Отрицательные знаменатели (чётные k ≥ 2, прибавляются): 5, 9, 13, …

    Векторы возвращаются как range: память O(1) при любом n, срез range
    тоже range, pickle для ProcessPoolExecutor постоянного размера.

    Args:
        n: Количество членов после первого (n >= 0)

    Returns:
        (positive, negative); len(positive) - len(negative) ∈ {0, 1}

    Examples:
        >>> denominator_vectors(4)
        (range(3, 11, 4), range(5, 11, 4))
        >>> list(denominator_vectors(3)[1])
        [5]
    """
    if n < 0:
        raise ValueError(f"denominator count must be non-negative, got {n}")

    if 2 * n + 1 > MAX_EXACT_DENOMINATOR:
        raise OverflowError(f"denominator count {n} exceeds exact float range")

    last_denominator = 3 + 2 * n

    return range(3, last_denominator, 4), range(5, last_denominator, 4)


def sum_denominator_window(
    positive: Sequence[int],
    negative: Sequence[int],
) -> float:
    """
    Частичная сумма S_i = Σ 1/pos - Σ 1/neg для окна знаменателей.

    Окна могут быть разной длины (последнее окно может содержать
    непарный положительный знаменатель).
    """
    accum = 0.0
    for denominator in positive:
        accum += 1.0 / float(denominator)
    for denominator in negative:
        accum -= 1.0 / float(denominator)
    return accum


# =============================================================================
# REDUCTION
# =============================================================================


def reduce_partials(partials: Iterable[float]) -> float:
    """
    Сумма частичных результатов.

    Порядок суммирования не влияет на результат за пределами
    погрешности округления float.

    Examples:
        >>> reduce_partials([0.5, 0.25, 0.25])
        1.0
        >>> reduce_partials([])
        0.0
    """
    total = 0.0
    for partial in partials:
        total += partial
    return total


def estimate_from_term_sum(series_sum: float) -> float:
    """π ≈ 4·S для варианта TERM_INDEX."""
    return PI_SCALE * series_sum


def estimate_from_denominator_sum(series_sum: float) -> float:
    """π ≈ 4·(1 - S) для варианта DENOMINATOR_LIST (член k=0 равен 1)."""
    return PI_SCALE * (1.0 - series_sum)
