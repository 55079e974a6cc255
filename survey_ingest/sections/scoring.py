"""
Оценка качества набора секций.

Пороговые бонусы подобраны эмпирически и сохраняются как константы.
"""

from typing import List

from survey_ingest.contracts import ChunkingConfig, Section, SectionType

SIZE_BONUS = 15
TITLE_BONUS = 8
BALANCE_BONUS = 5
TYPE_BONUS = 10
COVERAGE_BONUS = 25

BALANCE_RANGE = (0.3, 3.0)
COVERAGE_THRESHOLD = 0.8


def score_sections(sections: List[Section], text: str, config: ChunkingConfig) -> int:
    """
    Сумма бонусов по секциям. Для одной секции (или пустого набора) 0.

    Средняя длина считается как длина текста, делённая на число секций.
    """
    if len(sections) <= 1 or not text:
        return 0

    score = 0
    mean_length = len(text) / len(sections)
    covered = 0

    for section in sections:
        length = len(section.content)
        covered += length

        if config.min_chunk_size <= length <= config.max_chunk_size * 2:
            score += SIZE_BONUS
        if section.title and 5 < len(section.title) < 100:
            score += TITLE_BONUS
        if BALANCE_RANGE[0] <= length / mean_length <= BALANCE_RANGE[1]:
            score += BALANCE_BONUS
        if section.type in (SectionType.METADATA, SectionType.HEADING):
            score += TYPE_BONUS

    if covered / len(text) > COVERAGE_THRESHOLD:
        score += COVERAGE_BONUS

    return score
