"""Worker — вычисление частичной суммы одного окна.

Функции верхнего уровня модуля: должны сериализоваться (pickle) для
ProcessPoolExecutor. Без общего состояния, без блокировок; результат
возвращается диспетчеру ровно один раз через future.
"""

from madhava.core.domain.term_range import DenominatorWindow, TermRange
from madhava.core.math.series import sum_denominator_window, sum_terms


def run(term_range: TermRange) -> float:
    """Частичная сумма Σ (-1)^k / (2k+1) по k ∈ [start, end).

    Пустое окно возвращает ровно 0.0 без итераций.
    """
    if term_range.is_empty:
        return 0.0
    return sum_terms(term_range.start, term_range.end)


def run_denominator_window(window: DenominatorWindow) -> float:
    """Частичная сумма Σ 1/pos - Σ 1/neg по срезу знаменателей."""
    return sum_denominator_window(window.positive, window.negative)
