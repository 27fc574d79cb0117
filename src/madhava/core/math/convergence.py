"""
Convergence — Error Metrics & Float Tolerances

Метрики качества оценки π:
- Отклонение от константы math.pi
- Априорная граница ошибки знакочередующегося ряда
- Сравнения float с учётом машинной точности
- Профиль сходимости по последовательности magnitude

Ряд Мадхавы–Лейбница сходится медленно: после n членов
|π - 4·S_n| ≤ 4 / (2n + 1), на практике ≈ 1/n.
"""

import math
from typing import Final, NamedTuple, Sequence

# =============================================================================
# EPSILON-ПАРАМЕТРЫ
# =============================================================================

# Относительная толерантность сравнения float (редукция, сверка вариантов)
EPS_FLOAT_COMPARE_REL: Final[float] = 1e-9

# Абсолютная толерантность сравнения float
EPS_FLOAT_COMPARE_ABS: Final[float] = 1e-12


# =============================================================================
# FLOAT ПРОВЕРКИ
# =============================================================================


def is_valid_float(value: float) -> bool:
    """True если значение finite (не NaN, не Inf)."""
    return math.isfinite(value)


def is_close(
    a: float,
    b: float,
    rel_tol: float = EPS_FLOAT_COMPARE_REL,
    abs_tol: float = EPS_FLOAT_COMPARE_ABS,
) -> bool:
    """
    Сравнение float с учётом машинной точности.

    Examples:
        >>> is_close(1.0, 1.0 + 1e-12)
        True
        >>> is_close(1.0, 1.1)
        False
    """
    return math.isclose(a, b, rel_tol=rel_tol, abs_tol=abs_tol)


# =============================================================================
# ОШИБКА ОЦЕНКИ
# =============================================================================


def difference_from_pi(estimate: float) -> float:
    """
    Знаковое отклонение оценки от math.pi (estimate - π).

    Examples:
        >>> difference_from_pi(math.pi)
        0.0
    """
    if not is_valid_float(estimate):
        raise ValueError(f"estimate must be a valid float (not NaN/Inf), got {estimate}")
    return estimate - math.pi


def alternating_error_bound(total_terms: int) -> float:
    """
    Граница ошибки |π - 4·S_n| после total_terms членов.

    Для знакочередующегося ряда с убывающими членами ошибка не превосходит
    модуля первого отброшенного члена: 4 / (2n + 1).

    Args:
        total_terms: Количество просуммированных членов n (n >= 0)

    Returns:
        4 / (2n + 1)

    Examples:
        >>> alternating_error_bound(0)
        4.0
        >>> alternating_error_bound(1)
        1.3333333333333333
    """
    if total_terms < 0:
        raise ValueError(f"total_terms must be non-negative, got {total_terms}")
    return 4.0 / (2 * total_terms + 1)


def within_error_bound(estimate: float, total_terms: int) -> bool:
    """True если |estimate - π| не превышает alternating_error_bound(total_terms)."""
    return abs(difference_from_pi(estimate)) <= alternating_error_bound(total_terms)


# =============================================================================
# ПРОФИЛЬ СХОДИМОСТИ
# =============================================================================


class ConvergenceStep(NamedTuple):
    """Одна точка профиля сходимости."""
    magnitude: int
    total_terms: int
    estimate: float
    abs_error: float  # |estimate - π|


def convergence_profile(
    points: Sequence[tuple[int, int, float]],
) -> list[ConvergenceStep]:
    """
    Профиль сходимости, упорядоченный по magnitude.

    Args:
        points: Последовательность (magnitude, total_terms, estimate)

    Returns:
        Список ConvergenceStep по возрастанию magnitude
    """
    steps = [
        ConvergenceStep(
            magnitude=magnitude,
            total_terms=total_terms,
            estimate=estimate,
            abs_error=abs(difference_from_pi(estimate)),
        )
        for magnitude, total_terms, estimate in points
    ]
    return sorted(steps, key=lambda step: step.magnitude)


def improvement_ratio(steps: Sequence[ConvergenceStep]) -> float:
    """
    Доля последовательных шагов, на которых abs_error строго уменьшается.

    Ряд не монотонен почленно, поэтому метрика — доля, а не all().

    Raises:
        ValueError: если шагов меньше двух
    """
    if len(steps) < 2:
        raise ValueError("at least two convergence steps are required")

    improved = sum(
        1 for previous, current in zip(steps, steps[1:])
        if current.abs_error < previous.abs_error
    )
    return improved / (len(steps) - 1)
