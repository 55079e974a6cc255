"""
Обогащение чанков метаданными.

Для каждого черновика вычисляются:
- keywords — до 30, с весами доменной терминологии опросов
- entities — до 25 (числа, даты, фразы, аббревиатуры, коды, листы, строки)
- content type, структурные флаги
- importance (1.0–4.0) и quality score (0–10)
- заголовок секции

Все вычисления детерминированы и не выполняют I/O.
"""

from typing import Optional

from survey_ingest.chunkers.units import count_words
from survey_ingest.contracts import Chunk, ChunkDraft
from survey_ingest.logging_config import get_logger

from .classify import content_type, importance, quality_score, structural_flags
from .entities import extract_entities
from .keywords import SURVEY_TERMS, extract_keywords, merge_keywords
from .titles import section_title

logger = get_logger("ingest.metaextractor")


class MetadataEnricher:
    """ChunkDraft → Chunk."""

    def __init__(
        self,
        domain_weight: Optional[float] = None,
        early_weight: Optional[float] = None,
        capitalized_weight: Optional[float] = None,
    ):
        from survey_ingest.settings import settings
        self.domain_weight = settings.KEYWORD_DOMAIN_WEIGHT if domain_weight is None else domain_weight
        self.early_weight = settings.KEYWORD_EARLY_WEIGHT if early_weight is None else early_weight
        self.capitalized_weight = (
            settings.KEYWORD_CAPITALIZED_WEIGHT if capitalized_weight is None else capitalized_weight
        )

    def keywords(self, text: str):
        return extract_keywords(
            text,
            domain_weight=self.domain_weight,
            early_weight=self.early_weight,
            capitalized_weight=self.capitalized_weight,
        )

    def enrich(self, draft: ChunkDraft) -> Chunk:
        content = draft.content.strip()
        keywords = self.keywords(content)
        structures = tuple(draft.structures)

        chunk = Chunk(
            id=draft.chunk_id,
            content=content,
            section_title=section_title(content, structures, keywords, draft.section_title),
            keywords=tuple(keywords),
            entities=tuple(extract_entities(content)),
            word_count=count_words(content),
            character_count=len(content),
            content_type=content_type(content, structures, draft.is_fallback),
            importance=importance(content, len(keywords), structures),
            quality_score=quality_score(content),
            flags=structural_flags(content),
            structures=structures,
            overlap_chars=draft.overlap_chars,
            is_fallback=draft.is_fallback,
        )
        logger.debug(
            f"Chunk enriched | id={chunk.id} type={chunk.content_type.value} "
            f"importance={chunk.importance} quality={chunk.quality_score}"
        )
        return chunk


__all__ = [
    "MetadataEnricher",
    "extract_keywords",
    "merge_keywords",
    "extract_entities",
    "content_type",
    "importance",
    "quality_score",
    "structural_flags",
    "section_title",
    "SURVEY_TERMS",
]
