"""
Тип контента, структурные флаги, важность и качество контекста чанка.

Все функции чистые: результат зависит только от текста и структурных подсказок.
"""

import re
from typing import Iterable, Sequence

from survey_ingest.contracts import (
    ContentType,
    StructuralFlags,
    StructureKind,
    structure_priority,
)

PROCEDURE_TERMS = re.compile(r'\b(?:step|procedure|process|method|instruction)\b', re.IGNORECASE)
DEFINITION_TERMS = re.compile(r'\b(?:definition|means|refers to|defined as)\b', re.IGNORECASE)
FORM_TERMS = re.compile(r'\b(?:form|field|questionnaire|survey)\b', re.IGNORECASE)
EXAMPLE_TERMS = re.compile(r'\b(?:example|instance|case|sample)\b', re.IGNORECASE)
DATA_MARKERS = re.compile(r'sheet:|row \d+:', re.IGNORECASE)

METADATA_MARKER = re.compile(r'=== .+? ===')
LIST_MARKER = re.compile(r'^[ \t]*(?:[•*-]|\d+\.)[ \t]+', re.MULTILINE)
TABLE_ROW = re.compile(r'\t.*\t|\|.*\|')
DIGIT = re.compile(r'\d')

FLAG_PATTERNS = (
    (StructuralFlags.HAS_LISTS, LIST_MARKER),
    (StructuralFlags.HAS_TABLES, TABLE_ROW),
    (StructuralFlags.HAS_PROCEDURES, re.compile(
        r'\b(?:step|procedure|process|method|instruction|follow|complete|ensure|first|then|next|finally)\b',
        re.IGNORECASE,
    )),
    (StructuralFlags.HAS_DEFINITIONS, re.compile(
        r'\b(?:is|are|means|refers to|defined as|definition|term|called)\b',
        re.IGNORECASE,
    )),
    (StructuralFlags.HAS_METADATA, METADATA_MARKER),
    (StructuralFlags.HAS_NUMBERS, DIGIT),
    (StructuralFlags.HAS_QUESTIONS, re.compile(
        r'\b(?:question|ask|answer|response|survey|interview|what|how|when|where|why)\b',
        re.IGNORECASE,
    )),
    (StructuralFlags.HAS_FORM_FIELDS, re.compile(
        r'\b(?:field|form|block|section|data entry|input|select|choose|checkbox|radio)\b',
        re.IGNORECASE,
    )),
)

# Структурные подсказки в порядке приоритета типа контента
_STRUCTURE_TYPES = (
    (StructureKind.METADATA, ContentType.METADATA),
    (StructureKind.TABLE_ROW, ContentType.TABLE),
    (StructureKind.LIST_ITEM, ContentType.LIST),
    (StructureKind.CODE_BLOCK, ContentType.CODE),
)

_PATTERN_TYPES = (
    (PROCEDURE_TERMS, ContentType.PROCEDURE),
    (DEFINITION_TERMS, ContentType.DEFINITION),
    (FORM_TERMS, ContentType.FORM),
    (EXAMPLE_TERMS, ContentType.EXAMPLE),
    (DATA_MARKERS, ContentType.DATA),
)

QUALITY_TERMS = ('survey', 'data', 'form', 'field', 'procedure', 'instruction')
MAX_IMPORTANCE = 4.0
MAX_QUALITY = 10


def content_type(text: str, structures: Sequence[StructureKind], is_fallback: bool = False) -> ContentType:
    if is_fallback:
        return ContentType.FALLBACK
    for kind, ctype in _STRUCTURE_TYPES:
        if kind in structures:
            return ctype
    for pattern, ctype in _PATTERN_TYPES:
        if pattern.search(text):
            return ctype
    return ContentType.GENERAL


def structural_flags(text: str) -> StructuralFlags:
    flags = StructuralFlags.NONE
    for flag, pattern in FLAG_PATTERNS:
        if pattern.search(text):
            flags |= flag
    return flags


def importance(text: str, keyword_count: int, structures: Iterable[StructureKind]) -> float:
    """Базовая 1.0, потолок 4.0."""
    structures = list(structures)
    score = 1.0
    if structures:
        score += structure_priority(structures) * 0.15
    score += min(keyword_count * 0.08, 0.8)
    if PROCEDURE_TERMS.search(text):
        score += 0.4
    if DEFINITION_TERMS.search(text):
        score += 0.3
    if DIGIT.search(text):
        score += 0.15
    if METADATA_MARKER.search(text):
        score += 0.25
    return round(min(score, MAX_IMPORTANCE), 2)


def quality_score(text: str) -> int:
    """Качество контекста 0–10: длина, структура, число предложений, доменные термины."""
    quality = 0
    length = len(text)
    if 200 <= length <= 1000:
        quality += 2
    elif length > 100:
        quality += 1

    if METADATA_MARKER.search(text):
        quality += 2
    if LIST_MARKER.search(text):
        quality += 1
    if TABLE_ROW.search(text):
        quality += 1

    sentences = [s for s in re.split(r'[.!?]+', text) if len(s.strip()) > 10]
    if len(sentences) >= 3:
        quality += 1
    if len(sentences) >= 6:
        quality += 1

    lowered = text.lower()
    quality += min(sum(1 for term in QUALITY_TERMS if term in lowered), 3)

    return min(quality, MAX_QUALITY)
