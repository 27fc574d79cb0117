"""
TermRange — Окно индексов членов ряда

Immutable модели единиц работы, передаваемых воркерам:
- TermRange: полуоткрытый диапазон индексов [start, end)
- DenominatorWindow: срез векторов знаменателей (вариант DENOMINATOR_LIST)

Создаются партиционером при dispatch, принадлежат одному воркеру,
не мутируют.
"""

from dataclasses import dataclass

from pydantic import BaseModel, Field, model_validator


class TermRange(BaseModel):
    """
    Полуоткрытый диапазон индексов членов [start, end).

    Инвариант: 0 <= start <= end
    """

    start: int = Field(..., ge=0, description="Первый индекс (включительно)")
    end: int = Field(..., ge=0, description="Последний индекс (исключительно)")

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def validate_bounds(self) -> "TermRange":
        """Проверка start <= end"""
        if self.start > self.end:
            raise ValueError(f"start {self.start} must be <= end {self.end}")
        return self

    @property
    def size(self) -> int:
        """Количество индексов в диапазоне."""
        return self.end - self.start

    @property
    def is_empty(self) -> bool:
        return self.start == self.end

    def indices(self) -> range:
        """Индексы диапазона в порядке возрастания."""
        return range(self.start, self.end)


@dataclass(frozen=True)
class DenominatorWindow:
    """Срез положительных и отрицательных знаменателей одного воркера.

    Поля: арифметические прогрессии с шагом 4, знаменатели не хранятся.
    """

    positive: range
    negative: range

    @property
    def size(self) -> int:
        return len(self.positive) + len(self.negative)
