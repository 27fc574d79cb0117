"""
Report Contract

Контракт отчёта SeriesEstimate.to_report(), который CLI печатает с --json.
Схема: schema/series_estimate.json (JSON Schema Draft 2020-12).
"""

import json
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List

import jsonschema
from jsonschema import Draft202012Validator

REPORT_SCHEMA_PATH = Path(__file__).parent / "schema" / "series_estimate.json"


def load_report_schema(path: Path = REPORT_SCHEMA_PATH) -> Dict[str, Any]:
    """
    Загрузка схемы отчёта с meta-валидацией.

    Raises:
        FileNotFoundError: файл схемы не найден
        ValueError: файл не является валидной JSON Schema
    """
    with open(path, "r", encoding="utf-8") as f:
        schema = json.load(f)

    try:
        Draft202012Validator.check_schema(schema)
    except jsonschema.SchemaError as e:
        raise ValueError(f"Invalid JSON Schema in {path.name}: {e.message}") from e

    return schema


@lru_cache(maxsize=None)
def _report_validator() -> Draft202012Validator:
    return Draft202012Validator(load_report_schema())


def validate_series_estimate(report: Dict[str, Any]) -> None:
    """
    Raises:
        ValidationError: отчёт не соответствует схеме
    """
    _report_validator().validate(report)


def report_errors(report: Dict[str, Any]) -> List[str]:
    """Все нарушения контракта в виде "$.field: message", по пути поля."""
    errors = sorted(_report_validator().iter_errors(report), key=lambda e: e.json_path)
    return [f"{e.json_path}: {e.message}" for e in errors]
