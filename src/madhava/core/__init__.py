"""
madhava core — математика ряда, доменные модели и контракты.

Модули:
- math: члены ряда, частичные суммы, метрики сходимости
- domain: конфигурация, окна работы, результат
- contracts: JSON Schema контракт отчёта
"""
