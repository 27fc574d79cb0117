"""
SeriesEstimate — Результат вычисления π

Immutable Pydantic модель, возвращаемая диспетчером. Содержит оценку π и
метаданные запуска для слоя представления (форматирование — не здесь):
- количество запрошенных и фактически просуммированных членов
- частичные суммы воркеров в порядке партиций
- wall-clock время fork-join
"""

import math
from typing import Any, Dict, Final

from pydantic import BaseModel, Field, computed_field, field_validator, model_validator

from madhava.core.domain.configuration import RemainderPolicy, SeriesVariant

# Версия JSON-отчёта (series_estimate.json)
REPORT_SCHEMA_VERSION: Final[str] = "1"


class SeriesEstimate(BaseModel):
    """Оценка π = 4·Σ(partial_sums) (или 4·(1 - Σ) для DENOMINATOR_LIST)."""

    value: float = Field(..., description="Оценка π")
    requested_terms: int = Field(..., ge=0, description="Запрошенное количество членов")
    total_terms: int = Field(..., ge=0, description="Фактически просуммированные члены")
    worker_count: int = Field(..., gt=0, description="Количество воркеров")
    variant: SeriesVariant = Field(..., description="Формулировка ряда")
    remainder_policy: RemainderPolicy = Field(..., description="Политика остатка")
    partial_sums: tuple[float, ...] = Field(..., description="Частичные суммы по партициям")
    elapsed_ms: float = Field(..., ge=0, description="Время fork-join (мс)")

    model_config = {"frozen": True}

    @field_validator("value")
    @classmethod
    def validate_value_finite(cls, v: float) -> float:
        """Оценка не может быть NaN/Inf"""
        if not math.isfinite(v):
            raise ValueError(f"value must be finite, got {v}")
        return v

    @model_validator(mode="after")
    def validate_consistency(self) -> "SeriesEstimate":
        """Одна частичная сумма на воркер; просуммировано не больше запрошенного"""
        if len(self.partial_sums) != self.worker_count:
            raise ValueError(
                f"partial_sums has {len(self.partial_sums)} entries, "
                f"expected worker_count={self.worker_count}"
            )
        if self.total_terms > self.requested_terms:
            raise ValueError(
                f"total_terms {self.total_terms} exceeds requested_terms {self.requested_terms}"
            )
        return self

    @computed_field  # type: ignore[prop-decorator]
    @property
    def difference_from_pi(self) -> float:
        """value - math.pi"""
        return self.value - math.pi

    @property
    def dropped_terms(self) -> int:
        """Члены, отброшенные политикой TRUNCATE."""
        return self.requested_terms - self.total_terms

    def to_report(self) -> Dict[str, Any]:
        """
        JSON-сериализуемый отчёт для слоя представления.

        Соответствует контракту series_estimate.json.
        """
        report = self.model_dump(mode="json")
        report["schema_version"] = REPORT_SCHEMA_VERSION
        return report
