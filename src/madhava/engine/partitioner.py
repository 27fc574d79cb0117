"""Range Partitioner — разбиение диапазона индексов между воркерами.

Для total_terms и worker_count строит ровно worker_count окон:
    window_size = total_terms // worker_count
    окно i = [i * window_size, (i + 1) * window_size)

Остаток total_terms % worker_count (< worker_count):
- TRUNCATE: отбрасывается (последнее окно заканчивается на
  worker_count * window_size, а не на total_terms)
- DISTRIBUTE: добавляется к последнему окну, покрытие ровно [0, total_terms)

Окна попарно не пересекаются, смежны, упорядочены. Чистая функция.
"""

from madhava.core.domain.configuration import RemainderPolicy
from madhava.core.domain.term_range import DenominatorWindow, TermRange


class InvalidPartition(ValueError):
    """Невозможно разбиение: worker_count == 0 или некорректные входы.

    Обнаруживается до запуска воркеров.
    """
    pass


def partition(
    total_terms: int,
    worker_count: int,
    remainder_policy: RemainderPolicy = RemainderPolicy.TRUNCATE,
) -> list[TermRange]:
    """Разбиение [0, total_terms) на worker_count смежных окон.

    Args:
        total_terms: количество членов ряда (>= 0)
        worker_count: количество воркеров (> 0)
        remainder_policy: обработка остатка (default TRUNCATE)

    Returns:
        Упорядоченный список из worker_count TermRange

    Raises:
        InvalidPartition: worker_count <= 0, total_terms < 0 или не int
    """
    for name, value in (("total_terms", total_terms), ("worker_count", worker_count)):
        if isinstance(value, bool) or not isinstance(value, int):
            raise InvalidPartition(f"{name} must be an integer, got {value!r}")

    if worker_count <= 0:
        raise InvalidPartition(f"worker_count must be positive, got {worker_count}")

    if total_terms < 0:
        raise InvalidPartition(f"total_terms must be non-negative, got {total_terms}")

    window_size = total_terms // worker_count

    ranges = [
        TermRange(start=i * window_size, end=(i + 1) * window_size)
        for i in range(worker_count)
    ]

    if remainder_policy == RemainderPolicy.DISTRIBUTE and ranges[-1].end != total_terms:
        ranges[-1] = TermRange(start=ranges[-1].start, end=total_terms)

    return ranges


def covered_terms(ranges: list[TermRange]) -> int:
    """Количество индексов, покрытых окнами."""
    return sum(term_range.size for term_range in ranges)


def slice_denominators(
    positive: range,
    negative: range,
    ranges: list[TermRange],
    remainder_policy: RemainderPolicy = RemainderPolicy.TRUNCATE,
) -> list[DenominatorWindow]:
    """Срезы векторов знаменателей по окнам парных индексов.

    Каждый воркер получает одно и то же окно из обоих векторов. Непарный
    хвостовой положительный знаменатель (len(positive) = len(negative) + 1)
    достаётся последнему окну только при DISTRIBUTE.

    Args:
        positive: положительные знаменатели (3, 7, 11, …)
        negative: отрицательные знаменатели (5, 9, 13, …)
        ranges: результат partition(len(negative), ...)
        remainder_policy: обработка остатка

    Returns:
        Список DenominatorWindow той же длины, что ranges
    """
    windows = [
        DenominatorWindow(
            positive=positive[term_range.start:term_range.end],
            negative=negative[term_range.start:term_range.end],
        )
        for term_range in ranges
    ]

    if remainder_policy == RemainderPolicy.DISTRIBUTE and windows:
        last = ranges[-1]
        windows[-1] = DenominatorWindow(
            positive=positive[last.start:],
            negative=negative[last.start:],
        )

    return windows
