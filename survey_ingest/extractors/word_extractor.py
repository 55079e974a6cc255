"""
Word Document Extractor

Pipeline:
    .doc → LibreOffice → .docx
    .docx → python-docx (сырой текст + стили) + MarkItDown → лучший кандидат → маркеры

Кандидат со структурой (стили / Markdown) выбирается только если он длиннее
80% сырого текста и строго длиннее текущего лучшего.
"""

import os
import shutil
import tempfile
from pathlib import Path
from typing import List, Optional

from docx import Document as DocxDocument
from docx.oxml.table import CT_Tbl
from docx.oxml.text.paragraph import CT_P
from docx.table import Table
from docx.text.paragraph import Paragraph
from markitdown import MarkItDown

from survey_ingest.contracts import MIME_DOC, Document
from survey_ingest.exceptions import UnsupportedFormat

from .base_extractor import BaseExtractor, ExtractionResult
from .document_converter import convert_doc_to_docx
from .structure import mark_word_structure, markdown_to_structured_text, styled_paragraph

STRUCTURED_MIN_RATIO = 0.8


class WordExtractor(BaseExtractor):
    """Экстрактор Word документов (.doc через LibreOffice, .docx напрямую)."""

    def __init__(self, **kwargs):
        super().__init__("word", **kwargs)
        self.markitdown = MarkItDown()

    def _extract(self, document: Document, ocr=None) -> ExtractionResult:
        work_dir = tempfile.mkdtemp(prefix="survey_word_")
        converted_dir: Optional[str] = None
        try:
            source_path = os.path.join(work_dir, os.path.basename(document.file_name) or "document")
            with open(source_path, "wb") as f:
                f.write(document.content)

            if document.mime_type == MIME_DOC or document.extension == ".doc":
                self.logger.info("Legacy .doc detected, converting to .docx via LibreOffice")
                converted = convert_doc_to_docx(source_path)
                if not converted:
                    raise UnsupportedFormat("Cannot convert legacy .doc document")
                converted_dir = str(Path(converted).parent)
                source_path = converted

            text = self._best_candidate(source_path)
            return ExtractionResult(text=mark_word_structure(text), file_type="Word Document")
        finally:
            shutil.rmtree(work_dir, ignore_errors=True)
            if converted_dir:
                shutil.rmtree(converted_dir, ignore_errors=True)
                self.logger.debug(f"Cleaned up temp conversion directory | dir={converted_dir}")

    def _best_candidate(self, path: str) -> str:
        doc = DocxDocument(path)
        raw = self._docx_text(doc, styled=False)
        best, source = raw, "raw"

        candidates = (
            ("styled", self._docx_text(doc, styled=True)),
            ("markdown", self._markdown_text(path)),
        )
        for name, candidate in candidates:
            if len(candidate) > len(raw) * STRUCTURED_MIN_RATIO and len(candidate) > len(best):
                best, source = candidate, name

        self.logger.info(f"Word candidate selected | source={source} chars={len(best)} raw={len(raw)}")
        return best

    def _markdown_text(self, path: str) -> str:
        try:
            result = self.markitdown.convert(path)
        except Exception as e:
            self.logger.warning(f"Markitdown failed | error={type(e).__name__}: {e}")
            return ""
        return markdown_to_structured_text(getattr(result, "text_content", "") or "")

    @staticmethod
    def _docx_text(doc, styled: bool) -> str:
        """Абзацы и таблицы в порядке следования в теле документа."""
        parts: List[str] = []
        for element in doc.element.body.iterchildren():
            if isinstance(element, CT_P):
                paragraph = Paragraph(element, doc)
                text = paragraph.text.strip()
                if not text:
                    continue
                if styled:
                    style_name = paragraph.style.name if paragraph.style is not None else ""
                    text = styled_paragraph(text, style_name)
                parts.append(text)
            elif isinstance(element, CT_Tbl):
                table = Table(element, doc)
                if styled:
                    parts.append("=== TABLE ===")
                for row in table.rows:
                    parts.append(" | ".join(cell.text.strip() for cell in row.cells))
                if styled:
                    parts.append("=== END TABLE ===")
        return "\n\n".join(parts)
