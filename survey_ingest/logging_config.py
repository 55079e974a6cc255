"""
Логирование для Survey Ingest.

Использует contextvars для маркировки всех событий одного документа единым emoji.
Маркер выбирается детерминированно по имени файла, чтобы повторная
обработка того же файла давала те же логи.
"""

import hashlib
import logging
import sys
from contextvars import ContextVar
from typing import Optional


# Контекстная переменная для хранения маркера текущего документа
file_marker: ContextVar[str] = ContextVar('file_marker', default='')

FILE_MARKERS = [
    "🍎", "🍊", "🍋", "🍇", "🍉", "🍓", "🫐", "🍑", "🥝", "🍍",
    "🥕", "🌽", "🥦", "🍆", "🥒", "🧄", "🧅", "🥔", "🍠", "🌸",
    "🌺", "🌻", "🌷", "🌹", "💐", "🌼", "⭐", "🌟", "💫", "✨",
    "🔮", "💎", "🎯", "🎲", "🎸", "🎺", "🐱", "🐶", "🐸", "🦊",
]


def marker_for(name: str) -> str:
    """Маркер, закреплённый за именем файла."""
    digest = hashlib.md5(name.encode("utf-8")).digest()
    return FILE_MARKERS[digest[0] % len(FILE_MARKERS)]


def set_file_marker(marker: Optional[str] = None, file_name: Optional[str] = None) -> str:
    """
    Установить маркер для текущего документа.

    Если marker не указан - берётся маркер имени файла (или первый из набора).
    Возвращает установленный маркер.
    """
    if marker is None:
        marker = marker_for(file_name) if file_name else FILE_MARKERS[0]
    file_marker.set(marker)
    return marker


def clear_file_marker() -> None:
    """Очистить маркер документа."""
    file_marker.set('')


def get_file_marker() -> str:
    """Получить текущий маркер документа."""
    return file_marker.get()


class MarkerFormatter(logging.Formatter):
    """Форматтер с поддержкой маркера документа из contextvars."""

    def format(self, record: logging.LogRecord) -> str:
        marker = file_marker.get()
        if marker:
            prefix = f"❌{marker}" if record.levelno >= logging.ERROR else marker
            record = logging.makeLogRecord(record.__dict__)
            record.msg = f"{prefix} {record.msg}"
        return super().format(record)


def setup_logging(level: str = "INFO") -> None:
    """Настроить логирование с поддержкой маркеров документов."""
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(MarkerFormatter(
        fmt='%(asctime)s | %(name)s | %(levelname)s | %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    ))
    root_logger.addHandler(handler)


def get_logger(name: str) -> logging.Logger:
    """Получить логгер по имени."""
    return logging.getLogger(name)
