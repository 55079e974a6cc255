"""
Единицы накопления чанка: абзацы, предложения, слова.
"""

import re
from dataclasses import dataclass, field
from typing import List, Tuple

from survey_ingest.contracts import StructureKind

PARAGRAPH_BREAK = re.compile(r'\n\s*\n')
SENTENCE_BOUNDARY = re.compile(r'(?<=[.!?])\s+')
LINE_BREAK = re.compile(r'[ \t]*\n\s*')
LINE_ITEM = re.compile(r'[ \t]*(?:Row \d+:|(?:[•*-]|\d+\.)[ \t]|[^\n]*\t|[^\n]*\|[^\n]*\|)')

# Порядок проверки не важен: виды сортируются по позиции первого вхождения
STRUCTURE_PATTERNS: Tuple[Tuple[StructureKind, re.Pattern], ...] = (
    (StructureKind.METADATA, re.compile(r'=== .+? ===')),
    (StructureKind.CODE_BLOCK, re.compile(r'```[\s\S]*?```')),
    (StructureKind.HEADING, re.compile(r'^(?:#{1,6}[ \t]+\S.*|[A-Z][A-Z \t]{5,50})$', re.MULTILINE)),
    (StructureKind.TABLE_ROW, re.compile(r'^(?:.+\t.+\t.+|.*\|.*\|.*)$', re.MULTILINE)),
    (StructureKind.LIST_ITEM, re.compile(r'^[ \t]*(?:[•*-]|\d+\.)[ \t]+\S.*$', re.MULTILINE)),
)


@dataclass
class Unit:
    """Кусок текста и разделитель, с которым он дописывается в буфер."""

    text: str
    separator: str = "\n\n"
    structures: List[StructureKind] = field(default_factory=list)


def count_words(text: str) -> int:
    return len(text.split())


def split_sentences(text: str) -> List[str]:
    return [s.strip() for s in SENTENCE_BOUNDARY.split(text) if s.strip()]


def sentence_starts(text: str) -> List[int]:
    """Смещения начала каждого предложения в `text`."""
    return [0] + [m.end() for m in SENTENCE_BOUNDARY.finditer(text)]


def detect_structures(paragraph: str) -> List[StructureKind]:
    """Структурные элементы абзаца в порядке первого появления."""
    found = []
    for kind, pattern in STRUCTURE_PATTERNS:
        match = pattern.search(paragraph)
        if match:
            found.append((match.start(), kind))
    return [kind for _, kind in sorted(found, key=lambda item: item[0])]


def split_words(text: str, max_size: int) -> List[str]:
    """Разбить по пробелам на куски ≤ max_size; слишком длинное слово режется."""
    pieces: List[str] = []
    current = ""
    for word in text.split():
        while len(word) > max_size:
            if current:
                pieces.append(current)
                current = ""
            pieces.append(word[:max_size])
            word = word[max_size:]
        if current and len(current) + 1 + len(word) > max_size:
            pieces.append(current)
            current = word
        else:
            current = f"{current} {word}" if current else word
    if current:
        pieces.append(current)
    return pieces


def split_keeping_breaks(text: str, boundary: re.Pattern) -> List[Tuple[str, str]]:
    """
    Куски между границами и разделитель перед каждым: `\\n`, если граница
    содержала перевод строки, иначе пробел. У первого куска разделитель пустой.
    """
    pieces: List[Tuple[str, str]] = []
    separator = ""
    position = 0
    for match in boundary.finditer(text):
        piece = text[position:match.start()].strip()
        if piece:
            pieces.append((separator, piece))
            separator = ""
        if "\n" in match.group():
            separator = "\n"
        elif not separator and pieces:
            separator = " "
        position = match.end()
    tail = text[position:].strip()
    if tail:
        pieces.append((separator, tail))
    return pieces


def is_line_structured(text: str) -> bool:
    """Построчный блок: не меньше половины строк - `Row N:`, пункты списка или строки таблицы."""
    lines = [line for line in text.split("\n") if line.strip()]
    if len(lines) < 3:
        return False
    structured = sum(1 for line in lines if LINE_ITEM.match(line))
    return structured * 2 >= len(lines)


def line_starts(text: str) -> List[int]:
    """Смещения начала каждой строки в `text`."""
    return [0] + [m.end() for m in LINE_BREAK.finditer(text)]


def paragraph_units(
    text: str,
    max_size: int,
    min_fragment: int = 0,
    track_structures: bool = False,
) -> List[Unit]:
    """
    Абзацы как единицы. Абзац длиннее max_size делится:

    - построчный блок (строки листа, списки, таблицы) по строкам, слишком
      длинная строка по предложениям
    - проза по предложениям, слишком длинное предложение по строкам
    - то, что всё ещё длиннее max_size, по словам

    Разделители исходного текста (`\\n` или пробел) сохраняются.
    Абзацы не длиннее min_fragment отбрасываются.
    """
    units: List[Unit] = []
    for raw in PARAGRAPH_BREAK.split(text):
        paragraph = raw.strip()
        if not paragraph or len(paragraph) <= min_fragment:
            continue

        structures = detect_structures(paragraph) if track_structures else []
        if len(paragraph) <= max_size:
            units.append(Unit(paragraph, "\n\n", structures))
            continue

        if is_line_structured(paragraph):
            boundaries = (LINE_BREAK, SENTENCE_BOUNDARY)
        else:
            boundaries = (SENTENCE_BOUNDARY, LINE_BREAK)

        pieces = _split_to_size(paragraph, max_size, boundaries)
        for index, (separator, piece) in enumerate(pieces):
            units.append(Unit(piece, "\n\n" if index == 0 else separator, structures))
    return units


def _split_to_size(text: str, max_size: int, boundaries) -> List[Tuple[str, str]]:
    """Рекурсивное деление по границам, последняя ступень по словам."""
    if len(text) <= max_size:
        return [("", text)]
    if not boundaries:
        return [("" if i == 0 else " ", piece) for i, piece in enumerate(split_words(text, max_size))]

    result: List[Tuple[str, str]] = []
    for separator, piece in split_keeping_breaks(text, boundaries[0]):
        for i, (inner_separator, inner) in enumerate(_split_to_size(piece, max_size, boundaries[1:])):
            result.append((separator if i == 0 else inner_separator, inner))
    return result
