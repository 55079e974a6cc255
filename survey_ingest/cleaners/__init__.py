"""
Клинеры для нормализации извлечённого текста.

Поддерживает последовательное применение клинеров через pipeline.
Все клинеры сохраняют sentinel-маркеры (`=== TITLE ===`, `• `, `Row N:`).
"""

from typing import Dict, List, Optional

from survey_ingest.contracts import Cleaner
from survey_ingest.logging_config import get_logger

from .page_numbers import page_numbers_cleaner
from .simple import simple_cleaner
from .typography import typography_cleaner

logger = get_logger("ingest.cleaner")


# Реестр доступных клинеров
CLEANERS: Dict[str, Cleaner] = {
    "typography": typography_cleaner,
    "page_numbers": page_numbers_cleaner,
    "simple": simple_cleaner,
}


def get_cleaner_pipeline(cleaner_names: List[str]) -> Cleaner:
    """
    Создаёт пайплайн клинеров для последовательного применения.

    Args:
        cleaner_names: Список имён клинеров в порядке применения

    Returns:
        Функция-клинер, применяющая все клинеры последовательно
    """
    cleaners = []
    for name in cleaner_names:
        if name in CLEANERS:
            cleaners.append(CLEANERS[name])
        else:
            logger.warning(f"Unknown cleaner: {name}, skipping")

    if not cleaners:
        logger.warning("No valid cleaners found, using simple cleaner")
        cleaners = [simple_cleaner]

    def pipeline(text: str) -> str:
        for cleaner in cleaners:
            text = cleaner(text)
        return text

    logger.debug(f"Cleaner pipeline created | cleaners={cleaner_names}")
    return pipeline


def build_cleaner(cleaner_names: Optional[List[str]] = None) -> Cleaner:
    """Создаёт клинер на основе настроек."""
    if cleaner_names is None:
        from survey_ingest.settings import settings
        cleaner_names = settings.CLEANER_PIPELINE
    return get_cleaner_pipeline(cleaner_names)


__all__ = [
    "simple_cleaner",
    "typography_cleaner",
    "page_numbers_cleaner",
    "get_cleaner_pipeline",
    "build_cleaner",
    "CLEANERS",
]
