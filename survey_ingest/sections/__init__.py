"""
Поиск логических секций документа.

=== СТРАТЕГИИ (в порядке приоритета) ===
- metadata — `=== TITLE ===` маркеры
- heading — заголовки (SECTION/CHAPTER, римская нумерация, ALL CAPS, баннеры `===`)
- numbered — `1.2 Title`
- structural — SHEET / TABLE / SECTION BREAK
- content-pattern — INTRODUCTION…APPENDIX, STEP N, Row N:

Побеждает стратегия с наибольшей оценкой, давшая больше одной секции.
При равенстве — раньше в списке. Иначе весь документ одной секцией.
"""

from typing import Callable, Dict, List, Optional

from survey_ingest.contracts import ChunkingConfig, Section, SectionType
from survey_ingest.logging_config import get_logger

from .scoring import score_sections
from .strategies import (
    by_content_patterns,
    by_headings,
    by_metadata_markers,
    by_numbered_sections,
    by_structural_markers,
)

logger = get_logger("ingest.sections")

# Стратегия: (text, min_size) -> sections
Strategy = Callable[[str, int], List[Section]]

# Реестр стратегий; порядок задаёт приоритет при равных оценках
STRATEGIES: Dict[str, Strategy] = {
    "metadata": by_metadata_markers,
    "heading": by_headings,
    "numbered": by_numbered_sections,
    "structural": by_structural_markers,
    "content-pattern": by_content_patterns,
}


def full_document_section(text: str) -> Section:
    return Section(title="Document", content=text, type=SectionType.FULL, strategy="full")


class SectionDetector:
    """Выбор лучшего разбиения текста на секции."""

    def __init__(self, config: Optional[ChunkingConfig] = None, strategies: Optional[Dict[str, Strategy]] = None):
        self.config = config or ChunkingConfig.from_settings()
        self.strategies = strategies if strategies is not None else STRATEGIES

    def detect(self, text: str) -> List[Section]:
        best_sections = [full_document_section(text)]
        best_score = 0
        best_name = "full"

        for name, strategy in self.strategies.items():
            try:
                sections = strategy(text, self.config.min_chunk_size)
            except Exception as e:
                logger.warning(f"Section strategy failed | strategy={name} error={type(e).__name__}: {e}")
                continue

            score = score_sections(sections, text, self.config)
            logger.debug(f"Section strategy evaluated | strategy={name} sections={len(sections)} score={score}")
            if score > best_score and len(sections) > 1:
                best_sections, best_score, best_name = sections, score, name

        logger.info(f"Sections detected | strategy={best_name} sections={len(best_sections)} score={best_score}")
        return best_sections


__all__ = [
    "SectionDetector",
    "STRATEGIES",
    "score_sections",
    "full_document_section",
]
