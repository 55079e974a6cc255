"""
Постобработка чанков: фильтрация бессодержательных и слияние мелких.

Чанки неизменяемы: слияние собирает новый Chunk через dataclasses.replace.
"""

import re
from dataclasses import replace
from typing import List, Optional

from survey_ingest.chunkers.units import count_words
from survey_ingest.contracts import Chunk, ChunkingConfig
from survey_ingest.logging_config import get_logger
from survey_ingest.metaextractors.classify import quality_score
from survey_ingest.metaextractors.entities import MAX_ENTITIES
from survey_ingest.metaextractors.keywords import MAX_KEYWORDS, merge_keywords

logger = get_logger("ingest.postprocess")

MIN_WORDS = 25
MIN_QUALITY = 2
MERGE_BELOW_WORDS = 75

# Буква любого алфавита
LETTER = re.compile(r'[^\W\d_]')


def is_substantive(chunk: Chunk) -> bool:
    """Достаточно слов, есть буквы (не только цифры и пунктуация), качество ≥ 2."""
    return (
        chunk.word_count >= MIN_WORDS
        and bool(LETTER.search(chunk.content))
        and chunk.quality_score >= MIN_QUALITY
    )


class ChunkPostProcessor:
    """Фильтрация и последовательное слияние чанков одного документа."""

    def __init__(self, config: Optional[ChunkingConfig] = None):
        self.config = config or ChunkingConfig.from_settings()

    @property
    def merge_word_limit(self) -> float:
        return self.config.max_chunk_size * 1.3

    def postprocess(self, chunks: List[Chunk]) -> List[Chunk]:
        if not chunks:
            return []

        kept = [chunk for chunk in chunks if is_substantive(chunk)]
        if not kept:
            best = max(chunks, key=lambda c: c.quality_score)
            logger.warning(
                f"All chunks filtered, keeping best original | id={best.id} quality={best.quality_score}"
            )
            return [best]

        merged: List[Chunk] = []
        for chunk in kept:
            if merged and chunk.word_count < MERGE_BELOW_WORDS:
                combined = self._merge(merged[-1], chunk)
                if combined is not None:
                    merged[-1] = combined
                    continue
            merged.append(chunk)

        logger.info(
            f"Post-processing complete | input={len(chunks)} filtered={len(chunks) - len(kept)} "
            f"merged={len(kept) - len(merged)} output={len(merged)}"
        )
        return merged

    def _merge(self, previous: Chunk, chunk: Chunk) -> Optional[Chunk]:
        """Слить chunk в previous, если укладываемся в пределы; иначе None."""
        body = chunk.content
        overlap = chunk.content[:chunk.overlap_chars] if chunk.overlap_chars else ""
        if overlap and previous.content.endswith(overlap):
            body = chunk.content[chunk.overlap_chars:].lstrip()

        content = f"{previous.content}\n\n{body}" if body else previous.content
        word_count = count_words(content)
        if previous.word_count + chunk.word_count > self.merge_word_limit:
            return None
        if len(content) > self.config.upper_bound:
            return None

        structures = tuple(dict.fromkeys(previous.structures + chunk.structures))
        return replace(
            previous,
            content=content,
            keywords=tuple(merge_keywords(previous.keywords, chunk.keywords, MAX_KEYWORDS)),
            entities=tuple(merge_keywords(previous.entities, chunk.entities, MAX_ENTITIES)),
            word_count=word_count,
            character_count=len(content),
            importance=max(previous.importance, chunk.importance),
            quality_score=quality_score(content),
            flags=previous.flags | chunk.flags,
            structures=structures,
        )


__all__ = ["ChunkPostProcessor", "is_substantive"]
