"""
Content-aware чанкер.

Накопление единиц (абзацы → предложения → слова) в буфер до maxChunkSize,
сброс буфера с intelligent overlap, слияние короткого хвоста с предыдущим чанком.
"""

from typing import List, Optional

from survey_ingest.contracts import (
    ChunkDraft,
    ChunkingConfig,
    Section,
    SectionType,
    StructureKind,
)
from survey_ingest.logging_config import get_logger

from .overlap import intelligent_overlap
from .units import Unit, paragraph_units

logger = get_logger("ingest.chunker.content_aware")

OVERLAP_SEPARATOR = "\n\n"
DOCUMENT_SECTION = "doc"
FALLBACK_SECTION = "fallback"
MIN_DOCUMENT_PARAGRAPH = 30

_SECTION_STRUCTURES = {
    SectionType.METADATA: StructureKind.METADATA,
    SectionType.HEADING: StructureKind.HEADING,
}


def _merge_kinds(target: List[StructureKind], kinds: List[StructureKind]) -> None:
    for kind in kinds:
        if kind not in target:
            target.append(kind)


class ContentAwareChunker:
    """Разбиение секций (или всего документа) на черновики чанков."""

    def __init__(self, config: Optional[ChunkingConfig] = None):
        self.config = config or ChunkingConfig.from_settings()

    # === PUBLIC ===

    def chunk_section(self, section: Section, file_name: str, section_index: int) -> List[ChunkDraft]:
        """Секция ≤ maxChunkSize остаётся одним чанком, иначе накопление по единицам."""
        content = section.content.strip()
        if not content:
            return []

        kind = _SECTION_STRUCTURES.get(section.type, StructureKind.SECTION)
        if len(content) <= self.config.max_chunk_size:
            return [ChunkDraft(
                content=content,
                file_name=file_name,
                section_index=str(section_index),
                index=0,
                section_title=section.title,
                structures=[kind],
            )]

        units = paragraph_units(content, self.config.max_chunk_size)
        return self._accumulate(
            units,
            file_name=file_name,
            section_index=str(section_index),
            section_title=section.title,
            base_structures=[StructureKind.SECTION],
        )

    def chunk_document(self, text: str, file_name: str) -> List[ChunkDraft]:
        """Весь документ: абзацы длиннее 30 символов, структура по абзацам."""
        units = paragraph_units(
            text,
            self.config.max_chunk_size,
            min_fragment=MIN_DOCUMENT_PARAGRAPH,
            track_structures=True,
        )
        return self._accumulate(units, file_name=file_name, section_index=DOCUMENT_SECTION)

    def fallback(self, text: str, file_name: str) -> ChunkDraft:
        """Единственный чанк из начала текста (2 × maxChunkSize)."""
        return ChunkDraft(
            content=text[: self.config.max_chunk_size * 2].strip(),
            file_name=file_name,
            section_index=FALLBACK_SECTION,
            index=0,
            structures=[StructureKind.FALLBACK],
            is_fallback=True,
        )

    # === ACCUMULATION ===

    def _accumulate(
        self,
        units: List[Unit],
        file_name: str,
        section_index: str,
        section_title: Optional[str] = None,
        base_structures: Optional[List[StructureKind]] = None,
    ) -> List[ChunkDraft]:
        cfg = self.config
        drafts: List[ChunkDraft] = []
        buffer = ""
        overlap_chars = 0
        structures: List[StructureKind] = list(base_structures or [])

        def flush() -> None:
            drafts.append(ChunkDraft(
                content=buffer,
                file_name=file_name,
                section_index=section_index,
                index=len(drafts),
                section_title=section_title,
                structures=list(structures),
                overlap_chars=overlap_chars,
            ))

        for unit in units:
            projected = len(buffer) + len(unit.separator) + len(unit.text)
            if buffer and projected > cfg.max_chunk_size and len(buffer) > cfg.min_chunk_size:
                flush()
                overlap = intelligent_overlap(buffer, cfg.overlap_size)
                if overlap and len(overlap) + len(OVERLAP_SEPARATOR) + len(unit.text) <= cfg.upper_bound:
                    buffer = overlap + OVERLAP_SEPARATOR + unit.text
                    overlap_chars = len(overlap)
                else:
                    buffer = unit.text
                    overlap_chars = 0
                structures = list(base_structures or [])
                _merge_kinds(structures, unit.structures)
            else:
                buffer = buffer + unit.separator + unit.text if buffer else unit.text
                _merge_kinds(structures, unit.structures)

        if buffer.strip():
            tail = buffer[overlap_chars + len(OVERLAP_SEPARATOR):] if overlap_chars else buffer
            tail = tail.strip()
            merged_size = len(drafts[-1].content) + 2 + len(tail) if drafts else 0
            if len(buffer) < cfg.min_chunk_size and drafts and merged_size <= cfg.upper_bound:
                previous = drafts[-1]
                previous.content = f"{previous.content}\n\n{tail}"
                _merge_kinds(previous.structures, structures)
                logger.debug(f"Short tail merged into previous chunk | chunk={previous.chunk_id} tail={len(tail)}")
            else:
                if len(buffer) < cfg.min_chunk_size and drafts:
                    logger.debug(
                        f"Short tail kept separate, merge would exceed upper bound | "
                        f"size={merged_size} upper={cfg.upper_bound}"
                    )
                flush()

        return drafts
