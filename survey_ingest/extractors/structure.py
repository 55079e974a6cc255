"""
Структурные маркеры извлечённого текста.

Общие для всех экстракторов преобразования: sentinel-маркеры
(`=== TITLE ===`, `=== SECTION BREAK ===`, `• `), блок метаданных документа,
эвристики фрагментированности и объединения с OCR.
"""

import re
from dataclasses import dataclass
from typing import List, Optional

METADATA_MARKER = re.compile(r'=== .+? ===')
ALL_CAPS_LINE = re.compile(r'^([A-Z][A-Z \t]{5,50})$', re.MULTILINE)


# === PDF ===

def pdf_structure(text: str) -> str:
    """Разрывы секций на 3+ пустых строках, абзац после конца предложения."""
    text = re.sub(r'\n\s*\n\s*\n', '\n\n=== SECTION BREAK ===\n\n', text)
    text = re.sub(r'([.!?])[ \t]*\n\s*([A-Z])', r'\1\n\n\2', text)
    return text


def pdf_preamble(pages: int) -> str:
    return f"=== PDF DOCUMENT STRUCTURE ===\nPages: {pages}"


def is_text_fragmented(text: str, ratio: float = 0.6, short_line: int = 30) -> bool:
    """
    Текст «рваный»: слишком короткий, мало строк или доля коротких строк ≥ ratio.
    """
    if len(text) < 100:
        return True

    lines = [line.strip() for line in text.split('\n') if line.strip()]
    if len(lines) < 5:
        return True

    short_lines = sum(1 for line in lines if len(line) < short_line)
    return short_lines / len(lines) >= ratio


def combine_text_sources(primary: str, secondary: str) -> str:
    """Дописать OCR-текст к основному под маркером ENHANCED CONTENT."""
    primary = primary.strip()
    secondary = secondary.strip()

    if not secondary or len(secondary) < 100:
        return primary
    if not primary or len(primary) < 100:
        return secondary
    return f"{primary}\n\n=== ENHANCED CONTENT ===\n{secondary}"


# === WORD ===

def styled_paragraph(text: str, style_name: str) -> str:
    """Абзац python-docx по имени стиля: Heading/Title → `=== x ===`, List → `• x`."""
    if style_name.startswith(("Heading", "Title")):
        return f"=== {text} ==="
    if style_name.startswith("List"):
        return f"• {text}"
    return text


def markdown_to_structured_text(markdown: str) -> str:
    """Markdown (MarkItDown) → маркеры заголовков и списков."""
    text = re.sub(r'^#{1,6}\s+(.+)$', r'\n=== \1 ===\n', markdown, flags=re.MULTILINE)
    text = re.sub(r'^[*+-]\s+', '\n• ', text, flags=re.MULTILINE)
    text = re.sub(r'^(\d+\.\s+)', r'\n\1', text, flags=re.MULTILINE)
    return text.strip()


def mark_word_structure(text: str) -> str:
    """ALL-CAPS строки → `=== HEADING: x ===`, маркеры списков → `• `."""
    text = ALL_CAPS_LINE.sub(r'\n=== HEADING: \1 ===\n', text)
    text = re.sub(r'^[ \t]*[•*-][ \t]+', '\n• ', text, flags=re.MULTILINE)
    text = re.sub(r'^[ \t]*(\d+\.[ \t]+)', r'\n\1', text, flags=re.MULTILINE)
    return text


# === PLAIN TEXT ===

@dataclass(frozen=True)
class TextStructure:
    line_count: int
    has_headers: bool
    has_lists: bool
    has_sections: bool

    @property
    def has_structure(self) -> bool:
        return self.has_headers or self.has_lists or self.has_sections


def analyze_text_structure(text: str) -> TextStructure:
    return TextStructure(
        line_count=len(text.split('\n')),
        has_headers=bool(ALL_CAPS_LINE.search(text)),
        has_lists=bool(re.search(r'^[ \t]*(?:[•*-]|\d+\.)\s+', text, re.MULTILINE)),
        has_sections=bool(re.search(r'^(?:={3,}|-{3,}|#{1,6}\s)', text, re.MULTILINE)),
    )


def mark_text_structure(text: str, analysis: TextStructure) -> str:
    """ALL-CAPS строки → `=== x ===`, каждый пункт списка с новой строки."""
    if analysis.has_headers:
        text = ALL_CAPS_LINE.sub(r'\n=== \1 ===\n', text)
    if analysis.has_lists:
        text = re.sub(r'^[ \t]*([•*-])[ \t]+', r'\n\1 ', text, flags=re.MULTILINE)
        text = re.sub(r'^[ \t]*(\d+\.)[ \t]+', r'\n\1 ', text, flags=re.MULTILINE)
    return text


# === METADATA HEADER ===

@dataclass(frozen=True)
class SheetInfo:
    name: str
    rows: int
    columns: int
    has_headers: bool = False


def metadata_header(
    file_name: str,
    file_type: str,
    pages: Optional[int] = None,
    sheets: Optional[List[SheetInfo]] = None,
    lines: Optional[int] = None,
) -> str:
    """Блок `=== DOCUMENT METADATA === … === END METADATA ===`."""
    parts = [
        "=== DOCUMENT METADATA ===",
        f"File: {file_name}",
        f"Type: {file_type}",
    ]
    if pages:
        parts.append(f"Pages: {pages}")
    if sheets:
        parts.append(f"Sheets: {len(sheets)}")
        parts.extend(f"- {s.name}: {s.rows} rows, {s.columns} columns" for s in sheets)
    if lines:
        parts.append(f"Lines: {lines}")
    parts.append("Processing: Enhanced server-side extraction")
    parts.append("=== END METADATA ===")
    return "\n".join(parts)
