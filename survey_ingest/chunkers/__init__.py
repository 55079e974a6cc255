"""
Чанкинг нормализованного текста.

=== РЕЖИМЫ ===
- по секциям — если SectionDetector нашёл больше одной секции
- по документу — абзацы всего текста со структурными подсказками
- fallback — ни одного чанка: начало текста одним чанком

Идентификаторы детерминированы: `<file>-chunk-<section>-<n>`.
"""

from typing import List, Optional

from survey_ingest.contracts import ChunkDraft, ChunkingConfig, Section, SectionType
from survey_ingest.logging_config import get_logger

from .content_aware import ContentAwareChunker
from .overlap import intelligent_overlap
from .units import count_words, split_sentences

logger = get_logger("ingest.chunker")


class Chunker:
    """Выбор режима чанкинга и гарантия непустого результата."""

    def __init__(self, config: Optional[ChunkingConfig] = None):
        self.config = config or ChunkingConfig.from_settings()
        self.splitter = ContentAwareChunker(self.config)

    def chunk(self, sections: List[Section], text: str, file_name: str) -> List[ChunkDraft]:
        drafts: List[ChunkDraft] = []
        usable = [s for s in sections if s.type != SectionType.FULL]

        if len(usable) > 1:
            for index, section in enumerate(usable):
                drafts.extend(self.splitter.chunk_section(section, file_name, index))
            mode = "sections"
        else:
            drafts = self.splitter.chunk_document(text, file_name)
            mode = "document"

        if not drafts:
            logger.warning(f"No chunks produced, using fallback | file={file_name}")
            drafts = [self.splitter.fallback(text, file_name)]
            mode = "fallback"

        logger.info(f"Chunking complete | file={file_name} mode={mode} chunks={len(drafts)}")
        return drafts


def build_chunker(config: Optional[ChunkingConfig] = None) -> Chunker:
    """Создаёт чанкер на основе настроек."""
    config = config or ChunkingConfig.from_settings()
    logger.info(
        f"Using content-aware chunker | size={config.max_chunk_size} "
        f"overlap={config.overlap_size} min={config.min_chunk_size}"
    )
    return Chunker(config)


__all__ = [
    "Chunker",
    "ContentAwareChunker",
    "build_chunker",
    "intelligent_overlap",
    "count_words",
    "split_sentences",
]
