"""
Стратегии поиска границ секций.

Каждая стратегия — функция `(text, min_size) -> List[Section]`.
Стратегия режет текст по совпадениям своего регулярного выражения;
куски короче `min_size` сливаются с соседней секцией.
"""

import re
from typing import Callable, Iterable, List, Optional, Tuple

from survey_ingest.contracts import Section, SectionType

# (заголовок, текст): кандидат в секцию до слияния коротких кусков
Span = Tuple[Optional[str], str]
TitleFunc = Callable[[re.Match, str, int], Optional[str]]

METADATA_PATTERN = re.compile(r'=== (.+?) ===')

HEADING_PATTERNS: Tuple[re.Pattern, ...] = (
    re.compile(r'\n\s*(?:SECTION|CHAPTER|PART|HEADING)\s*[:\-]?\s*([^\n]{5,80})\n', re.IGNORECASE),
    re.compile(r'\n\s*([IVX\d]+)\.\s+([A-Z][^\n]{10,60})\n'),
    re.compile(r'\n\s*(\d+\.\d+)\s+([A-Z][^\n]{5,50})\n'),
    re.compile(r'\n\s*([A-Z][A-Z \t]{8,50})\n(?=\s*[A-Z])'),
    re.compile(r'\n\s*={3,}\s*\n\s*([^\n]{10,60})\s*\n\s*={3,}\s*\n'),
)

NUMBERED_PATTERN = re.compile(r'\n\s*(\d+(?:\.\d+)*)\s+([^\n]{10,80})\n')

STRUCTURAL_PATTERNS: Tuple[re.Pattern, ...] = (
    re.compile(r'\n\s*(?:=== )?SHEET:\s*([^\n=]+?)(?: ===)?[ \t]*\n'),
    re.compile(r'\n\s*(?:=== )?TABLE\b[ \t]*[:\-]?[ \t]*([^\n=]*?)(?: ===)?[ \t]*\n'),
    re.compile(r'\n\s*(?:=== )?SECTION BREAK(?: ===)?[ \t]*\n'),
)

CONTENT_PATTERNS: Tuple[re.Pattern, ...] = (
    re.compile(
        r'\n\s*(?:INTRODUCTION|OVERVIEW|BACKGROUND|METHODOLOGY|PROCEDURE|RESULTS|CONCLUSION|SUMMARY|APPENDIX)\s*\n',
        re.IGNORECASE,
    ),
    re.compile(r'\n\s*(?:STEP|PHASE|STAGE)\s+\d+[:\s]', re.IGNORECASE),
    re.compile(r'\n\s*(?:Row \d+:|Sheet \d+:)', re.IGNORECASE),
)


def first_line_title(content: str) -> Optional[str]:
    """Первая непустая строка, если её длина в (5, 100)."""
    for line in content.split('\n'):
        line = line.strip()
        if line:
            return line if 5 < len(line) < 100 else None
    return None


def split_at_matches(text: str, matches: List[re.Match], title_for: TitleFunc) -> List[Span]:
    """Разрезать текст по началам совпадений. Текст до первого совпадения идёт отдельным куском."""
    spans: List[Span] = []
    if not matches:
        return spans

    preamble = text[:matches[0].start()]
    if preamble.strip():
        spans.append((first_line_title(preamble), preamble))

    for i, match in enumerate(matches):
        end = matches[i + 1].start() if i + 1 < len(matches) else len(text)
        content = text[match.start():end]
        spans.append((title_for(match, content, i), content))
    return spans


def fold_spans(
    spans: Iterable[Span],
    min_size: int,
    section_type: SectionType,
    strategy: str,
) -> List[Section]:
    """
    Куски длиннее `min_size` становятся секциями. Короткий кусок
    дописывается к предыдущей секции, ведущие короткие — к первой.
    """
    sections: List[Section] = []
    leading: List[str] = []

    for title, content in spans:
        content = content.strip()
        if not content:
            continue

        if len(content) > min_size:
            if not sections and leading:
                content = "\n\n".join(leading + [content])
                leading = []
            sections.append(Section(
                title=title or f"Section {len(sections) + 1}",
                content=content,
                type=section_type,
                strategy=strategy,
            ))
        elif sections:
            last = sections[-1]
            sections[-1] = Section(
                title=last.title,
                content=f"{last.content}\n\n{content}",
                type=last.type,
                strategy=last.strategy,
            )
        else:
            leading.append(content)

    return sections


# === STRATEGIES ===

def by_metadata_markers(text: str, min_size: int) -> List[Section]:
    """`=== TITLE ===` маркеры (нужно больше одного)."""
    matches = list(METADATA_PATTERN.finditer(text))
    if len(matches) <= 1:
        return []
    spans = split_at_matches(text, matches, lambda m, content, i: m.group(1).strip())
    return fold_spans(spans, min_size, SectionType.METADATA, "metadata")


def by_headings(text: str, min_size: int) -> List[Section]:
    """Лучший из шаблонов заголовков по числу совпадений (больше одного)."""
    best: List[re.Match] = []
    for pattern in HEADING_PATTERNS:
        matches = list(pattern.finditer(text))
        if len(matches) > len(best) and len(matches) > 1:
            best = matches

    if len(best) <= 1:
        return []

    def title_for(match: re.Match, content: str, index: int) -> Optional[str]:
        groups = [g.strip() for g in match.groups() if g and g.strip()]
        return first_line_title(content) or (groups[-1] if groups else None)

    return fold_spans(split_at_matches(text, best, title_for), min_size, SectionType.HEADING, "heading")


def by_numbered_sections(text: str, min_size: int) -> List[Section]:
    """Строки вида `1.2 Title` (нужно больше двух)."""
    matches = list(NUMBERED_PATTERN.finditer(text))
    if len(matches) <= 2:
        return []

    def title_for(match: re.Match, content: str, index: int) -> Optional[str]:
        return match.group(2).strip() or f"Section {match.group(1)}"

    return fold_spans(split_at_matches(text, matches, title_for), min_size, SectionType.NUMBERED, "numbered")


def by_structural_markers(text: str, min_size: int) -> List[Section]:
    """SHEET / TABLE / SECTION BREAK: первый шаблон, давший больше одной секции."""
    def title_for(match: re.Match, content: str, index: int) -> Optional[str]:
        group = match.group(1).strip() if match.groups() and match.group(1) else ""
        return group or f"Structural Section {index + 1}"

    for pattern in STRUCTURAL_PATTERNS:
        matches = list(pattern.finditer(text))
        if len(matches) <= 1:
            continue
        sections = fold_spans(
            split_at_matches(text, matches, title_for), min_size, SectionType.STRUCTURAL, "structural"
        )
        if len(sections) > 1:
            return sections
    return []


def by_content_patterns(text: str, min_size: int) -> List[Section]:
    """Канонические слова разделов, STEP/PHASE N, `Row N:` / `Sheet N:`."""
    def title_for(match: re.Match, content: str, index: int) -> Optional[str]:
        return match.group(0).strip()

    for pattern in CONTENT_PATTERNS:
        matches = list(pattern.finditer(text))
        if len(matches) <= 1:
            continue
        sections = fold_spans(
            split_at_matches(text, matches, title_for), min_size, SectionType.CONTENT_PATTERN, "content-pattern"
        )
        if len(sections) > 1:
            return sections
    return []
