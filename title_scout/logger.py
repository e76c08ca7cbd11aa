# === FILE: title_scout/logger.py ===
"""Логирование TitleScout.

Все модули пишут в дерево логгеров ``TitleScout``: сам краулер в корневой
логгер проекта, компоненты в дочерние (``TitleScout.settle``,
``TitleScout.frontier``, ...)::

    from title_scout.logger import get_logger
    logger = get_logger("settle")

Обработчики вешаются только на корень один раз, из CLI через
:func:`init_logging`; дочерние логгеры просто всплывают к нему.
"""
from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Final, Iterator, Optional, Union

DEFAULT_FORMAT: Final[str] = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
LOGGER_NAME: Final[str] = "TitleScout"

#: сторонние логгеры, которые на INFO/DEBUG забивают вывод обхода
NOISY_LOGGERS: Final[tuple] = ("asyncio", "aiohttp.access", "aiohttp.client")

_LevelT = Union[int, str]


def get_logger(component: Optional[str] = None) -> logging.Logger:
    """Логгер проекта или дочерний логгер компонента."""
    if not component:
        return logging.getLogger(LOGGER_NAME)
    return logging.getLogger(f"{LOGGER_NAME}.{component}")


def _handlers(log_file: Union[str, Path, None]) -> Iterator[logging.Handler]:
    yield logging.StreamHandler(sys.stdout)
    if log_file is not None:
        yield RotatingFileHandler(
            filename=str(log_file),
            maxBytes=5 * 1024 * 1024,
            backupCount=3,
            encoding="utf-8",
        )


def configure(
    *,
    level: _LevelT = "INFO",
    log_file: Union[str, Path, None] = None,
    log_format: str = DEFAULT_FORMAT,
    quiet_libraries: bool = True,
) -> logging.Logger:
    """(Пере)настраивает корневой логгер проекта.

    Прежние обработчики закрываются и снимаются, так что повторный вызов
    не дублирует вывод. При ``quiet_libraries`` шумные сторонние логгеры
    поднимаются до WARNING, если только сам проект не логирует на DEBUG.
    """
    root = get_logger()
    root.setLevel(level)

    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(log_format)
    for handler in _handlers(log_file):
        handler.setFormatter(formatter)
        root.addHandler(handler)
    root.propagate = False

    if quiet_libraries and root.getEffectiveLevel() > logging.DEBUG:
        for name in NOISY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)
    return root


def init_logging(
    level: _LevelT = "INFO",
    log_file: Union[str, Path, None] = None,
    log_format: str = DEFAULT_FORMAT,
) -> logging.Logger:
    """Точка входа для CLI: уровень приходит строкой из ``--log-level``."""
    if isinstance(level, str):
        level = level.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Неизвестный уровень логирования: {level}")
    return configure(level=level, log_file=log_file, log_format=log_format)


logger: logging.Logger = get_logger()

__all__ = ["logger", "get_logger", "configure", "init_logging", "LOGGER_NAME", "DEFAULT_FORMAT"]
