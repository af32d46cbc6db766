# File: allergen_scout/logger.py
"""Логгер AllergenScout.

Консоль получает короткие строки о ходе обхода, файл (если задан в конфиге
или через ``--log-file``) получает полный формат с временем и ротацией::

    from allergen_scout.logger import logger
    logger.info("Checking sitemap...")
"""
from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Union

LOGGER_NAME = "AllergenScout"
CONSOLE_FORMAT = "%(levelname)-8s | %(message)s"
FILE_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"

# Сторонние логгеры, приглушаемые вне режима DEBUG.
_NOISY = ("aiohttp.access", "aiohttp.client", "asyncio")


def _file_handler(log_file: Path) -> RotatingFileHandler:
    log_file.parent.mkdir(parents=True, exist_ok=True)
    handler = RotatingFileHandler(log_file, maxBytes=5 * 1024 * 1024, backupCount=3, encoding="utf-8")
    handler.setFormatter(logging.Formatter(FILE_FORMAT))
    return handler


def configure(
    level: Union[int, str] = "INFO",
    log_file: Union[str, Path, None] = None,
) -> logging.Logger:
    """Переустановить обработчики логгера проекта.

    Повторный вызов заменяет обработчики, а не добавляет новые, поэтому CLI
    и тесты могут вызывать его сколько угодно раз.
    """
    lg = logging.getLogger(LOGGER_NAME)
    lg.setLevel(level)
    for handler in list(lg.handlers):
        lg.removeHandler(handler)
        handler.close()

    console = logging.StreamHandler(sys.stdout)
    console.setFormatter(logging.Formatter(CONSOLE_FORMAT))
    lg.addHandler(console)
    if log_file is not None:
        lg.addHandler(_file_handler(Path(log_file)))
    lg.propagate = False

    noisy_level = logging.DEBUG if lg.level <= logging.DEBUG else logging.WARNING
    for name in _NOISY:
        logging.getLogger(name).setLevel(noisy_level)
    return lg


logger: logging.Logger = configure()

__all__ = ["logger", "configure", "LOGGER_NAME"]
