"""
Извлечение сущностей регулярными выражениями.
"""

import re
from typing import List, Tuple

MIN_TEXT_LENGTH = 50
MAX_ENTITIES = 25

# (шаблон, лимит совпадений)
ENTITY_PATTERNS: Tuple[Tuple[re.Pattern, int], ...] = (
    (re.compile(r'\b\d+(?:\.\d+)?(?:[ \t]*%|[ \t]*percent\b)?'), 10),
    (re.compile(r'\b\d{1,2}[/\-]\d{1,2}[/\-]\d{2,4}\b'), 8),
    (re.compile(r'\b[A-Z][a-z]+(?:[ \t]+[A-Z][a-z]+)+\b'), 15),
    (re.compile(r'\b[A-Z]{2,}\b'), 10),
    (re.compile(r'\b[A-Z]\d+\b|\b\d+[A-Z]\b'), 8),
    (re.compile(r'\bSheet:[ \t]*([^\n=]+)', re.IGNORECASE), 5),
    (re.compile(r'\bRow \d+:'), 8),
)


def _entity(match: re.Match) -> str:
    if match.groups():
        return f"Sheet: {match.group(1).strip()}"
    return match.group(0).strip()


def extract_entities(text: str) -> List[str]:
    """Числа, даты, фразы с заглавных, аббревиатуры, коды, листы и строки."""
    if not text or len(text) < MIN_TEXT_LENGTH:
        return []

    entities: List[str] = []
    for pattern, limit in ENTITY_PATTERNS:
        matches = [_entity(m) for m in pattern.finditer(text)]
        entities.extend(m for m in matches[:limit] if m)

    return list(dict.fromkeys(entities))[:MAX_ENTITIES]
