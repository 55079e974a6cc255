"""
Итоговые оценки обработанного документа.

Пороги и бонусы эмпирические; функции чистые и зависят только от
текста, чанков и изображений.
"""

import re
from typing import Any, Dict, List, Sequence

from survey_ingest.contracts import (
    MIME_PDF,
    MIME_TEXT,
    Chunk,
    Image,
    StructuralFlags,
)

METADATA_MARKER = re.compile(r'=== .+? ===')
CAPS_LINE = re.compile(r'\n\s*[A-Z][A-Z \t]{5,50}\n')
NUMBERED_LINE = re.compile(r'\n\s*\d+\.\s+')

SIZE_UNITS = ('Bytes', 'KB', 'MB', 'GB')


def _rating(score: float, thresholds: Sequence[float]) -> str:
    for label, threshold in zip(("Excellent", "High", "Good", "Fair"), thresholds):
        if score >= threshold:
            return label
    return "Basic"


def _average(values: List[float]) -> float:
    return sum(values) / len(values) if values else 0.0


def has_structure(text: str) -> bool:
    return bool(METADATA_MARKER.search(text) or CAPS_LINE.search(text) or NUMBERED_LINE.search(text))


def processing_quality(text: str, chunks: Sequence[Chunk], images: Sequence[Image]) -> str:
    score = 0.0
    if len(text) > 1000:
        score += 25
    elif len(text) > 500:
        score += 15
    elif len(text) > 200:
        score += 10

    if has_structure(text):
        score += 20
    if chunks:
        score += min(_average([c.quality_score for c in chunks]) * 3, 25)
    if any(len(c.keywords) > 5 for c in chunks):
        score += 10
    if any(len(c.entities) > 3 for c in chunks):
        score += 10
    if images:
        score += 10

    return _rating(score, (80, 60, 40, 20))


def context_richness(chunks: Sequence[Chunk]) -> int:
    if not chunks:
        return 0

    score = 10.0 * len({c.content_type for c in chunks})
    score += min(_average([len(c.keywords) for c in chunks]) * 5, 25)
    score += min(_average([len(c.entities) for c in chunks]) * 3, 20)

    combined = StructuralFlags.NONE
    for chunk in chunks:
        combined |= chunk.flags
    if combined & StructuralFlags.HAS_LISTS:
        score += 5
    if combined & StructuralFlags.HAS_TABLES:
        score += 5
    if combined & StructuralFlags.HAS_PROCEDURES:
        score += 10
    if combined & StructuralFlags.HAS_DEFINITIONS:
        score += 10

    score += (_average([c.importance for c in chunks]) - 1) * 15
    return min(int(round(score)), 100)


def extraction_confidence(text: str, mime_type: str) -> int:
    confidence = 50
    if mime_type == MIME_TEXT:
        confidence += 30
    elif "word" in mime_type:
        confidence += 25
    elif "sheet" in mime_type:
        confidence += 20
    elif mime_type == MIME_PDF:
        confidence += 15

    if len(text) > 5000:
        confidence += 15
    elif len(text) > 2000:
        confidence += 10
    elif len(text) > 1000:
        confidence += 5

    sentences = [s for s in re.split(r'[.!?]+', text) if len(s.strip()) > 10]
    if len(sentences) > 10:
        confidence += 10

    words = [w for w in text.split() if len(w) > 2]
    if words and 4 < _average([len(w) for w in words]) < 8:
        confidence += 5

    if CAPS_LINE.search(text):
        confidence += 5
    if NUMBERED_LINE.search(text):
        confidence += 5
    if METADATA_MARKER.search(text):
        confidence += 10

    return min(confidence, 100)


def ai_readiness(chunks: Sequence[Chunk], images: Sequence[Image]) -> str:
    score = 0.0
    if len(chunks) >= 5:
        score += 20
    elif len(chunks) >= 3:
        score += 15
    elif len(chunks) >= 1:
        score += 10

    score += min(len({c.content_type for c in chunks}) * 5, 20)
    if any(len(c.keywords) > 10 for c in chunks):
        score += 15
    if any(len(c.entities) > 5 for c in chunks):
        score += 10
    if any(c.structures for c in chunks):
        score += 10
    if any(c.has_metadata for c in chunks):
        score += 10
    if images:
        score += 10
    if len(images) > 2:
        score += 5
    if chunks:
        score += min(_average([c.quality_score for c in chunks]) * 2, 15)

    return _rating(score, (85, 70, 55, 40))


def format_file_size(size: int) -> str:
    """Человекочитаемый размер: `0 Bytes`, `1.5 KB`, `50 MB`."""
    if size <= 0:
        return "0 Bytes"
    index = 0
    while index < len(SIZE_UNITS) - 1 and size >= 1024 ** (index + 1):
        index += 1
    value = ("%.2f" % (size / 1024 ** index)).rstrip("0").rstrip(".")
    return f"{value} {SIZE_UNITS[index]}"


def supported_formats() -> List[Dict[str, Any]]:
    return [
        {
            "type": "PDF",
            "extensions": [".pdf"],
            "description": "Portable Document Format with text and structure extraction",
            "features": ["Text extraction", "Structure preservation", "Embedded images", "OCR fallback"],
        },
        {
            "type": "Word",
            "extensions": [".doc", ".docx"],
            "description": "Microsoft Word Document with heading, list and table markers",
            "features": ["Rich text extraction", "Structure preservation", "Legacy .doc conversion"],
        },
        {
            "type": "Excel",
            "extensions": [".xls", ".xlsx"],
            "description": "Microsoft Excel Spreadsheet with data structure analysis",
            "features": ["Multi-sheet processing", "Header detection", "Sheet summaries"],
        },
        {
            "type": "Text",
            "extensions": [".txt"],
            "description": "Plain Text File with structure detection",
            "features": ["Encoding detection", "Structure detection", "Keyword extraction"],
        },
    ]
