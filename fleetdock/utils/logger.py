"""Вспомогательные функции для настройки логирования."""

from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Dict, Final, Optional, TextIO, cast

LOG_FORMAT: Final[str] = "%(asctime)s | %(levelname)s | %(message)s"
FILE_LOG_FORMAT: Final[str] = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

RESET: Final[str] = "\033[0m"
LEVEL_STYLES: Final[Dict[int, str]] = {
    logging.DEBUG: "\033[7m",
    logging.INFO: "\033[1m",
    logging.WARNING: "\033[33m",
    logging.ERROR: "\033[31m",
    logging.CRITICAL: "\033[31;5m",
}


class ColorFormatter(logging.Formatter):
    """Подсвечивает имя уровня ANSI-кодами."""

    def format(self, record: logging.LogRecord) -> str:
        style = LEVEL_STYLES.get(record.levelno)
        if not style:
            return super().format(record)
        original = record.levelname
        record.levelname = f"{style}{original}{RESET}"
        try:
            return super().format(record)
        finally:
            record.levelname = original


def resolve_log_level(level_name: str) -> int:
    """Преобразует строковый уровень логирования в числовой."""

    level = getattr(logging, level_name.upper(), None)
    if not isinstance(level, int):
        raise ValueError(f"Unknown log level: {level_name}")
    return cast(int, level)


def configure_logging(
    level_name: str = "INFO",
    *,
    colorize: bool = True,
    stream: Optional[TextIO] = None,
    log_dir: Optional[Path] = None,
    log_file_name: str = "fleetdock.log",
    max_bytes: int = 10 * 1024 * 1024,
    backup_count: int = 5,
) -> None:
    """Настраивает вывод в консоль и, при необходимости, файл с ротацией."""

    log_level = resolve_log_level(level_name)
    target = stream or sys.stdout

    stream_handler = logging.StreamHandler(target)
    if colorize and target.isatty():
        stream_handler.setFormatter(ColorFormatter(LOG_FORMAT))
    else:
        stream_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handlers: list[logging.Handler] = [stream_handler]

    if log_dir is not None:
        log_dir.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            log_dir / log_file_name,
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8",
        )
        file_handler.setFormatter(logging.Formatter(FILE_LOG_FORMAT))
        handlers.append(file_handler)

    logging.basicConfig(level=log_level, handlers=handlers, force=True)

