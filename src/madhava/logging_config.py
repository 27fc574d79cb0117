"""Централизованная настройка logging для madhava."""

import logging
import logging.handlers
import os
from pathlib import Path


def setup_logging():
    """Настройка глобального logging приложения.

    Переменные окружения: LOG_LEVEL (default INFO), LOG_FORMAT, LOG_FILE
    (опционально, файл с ротацией).
    """

    # Конфигурация из переменных окружения
    log_level = os.getenv("LOG_LEVEL", "INFO").upper()
    log_format = os.getenv("LOG_FORMAT", "%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    log_file = os.getenv("LOG_FILE")

    handlers: list[logging.Handler] = [logging.StreamHandler()]

    if log_file:
        # Handler для файла с ротацией
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(
            logging.handlers.RotatingFileHandler(
                log_path,
                maxBytes=10*1024*1024,  # 10MB
                backupCount=5
            )
        )

    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        format=log_format,
        handlers=handlers,
        force=True,
    )

    # Уровни для отдельных модулей
    loggers_config = {
        'madhava': log_level,
        'concurrent.futures': 'WARNING',  # шум пула
    }

    for logger_name, level in loggers_config.items():
        logger = logging.getLogger(logger_name)
        logger.setLevel(getattr(logging, level, logging.INFO))


def get_logger(name: str) -> logging.Logger:
    """Логгер для указанного модуля."""
    return logging.getLogger(name)
