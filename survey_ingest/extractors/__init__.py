"""
Коллекция экстракторов текста.

=== НАЗНАЧЕНИЕ ===
Извлечение нормализованного текста со структурными маркерами
из документов разных форматов.

=== ЭКСТРАКТОРЫ ===
- BaseExtractor — базовый класс (Template Method)
- PDFExtractor — application/pdf (PyMuPDF + pypdf, OCR fallback)
- WordExtractor — .doc, .docx (python-docx + MarkItDown, LibreOffice для .doc)
- ExcelExtractor — .xls, .xlsx (openpyxl / xlrd)
- TextExtractor — text/plain (chardet для кодировки)

=== ИСПОЛЬЗОВАНИЕ ===

    from survey_ingest.extractors import build_extractor_registry
    from survey_ingest.contracts import Document

    registry = build_extractor_registry()
    text = registry.extract(Document.from_path("survey.docx"))

=== СОЗДАНИЕ НОВОГО ЭКСТРАКТОРА ===

    from .base_extractor import BaseExtractor, ExtractionResult

    class RTFExtractor(BaseExtractor):
        def __init__(self, **kwargs):
            super().__init__("rtf", **kwargs)

        def _extract(self, document, ocr=None) -> ExtractionResult:
            return ExtractionResult(text=rtf_to_text(document.content), file_type="RTF")
"""

from typing import Dict, List, Optional, Tuple

from survey_ingest.contracts import (
    MIME_DOC,
    MIME_DOCX,
    MIME_PDF,
    MIME_TEXT,
    MIME_XLS,
    MIME_XLSX,
    Document,
)
from survey_ingest.exceptions import UnsupportedFormat

from .base_extractor import BaseExtractor, ExtractionResult
from .excel_extractor import ExcelExtractor
from .pdf_extractor import PDFExtractor
from .text_extractor import TextExtractor
from .word_extractor import WordExtractor


class ExtractorRegistry:
    """Реестр экстракторов по MIME-типам."""

    def __init__(self, extractors: Dict[Tuple[str, ...], BaseExtractor]):
        self._mime_map: Dict[str, BaseExtractor] = {}
        for mime_types, extractor in extractors.items():
            for mime_type in mime_types:
                self._mime_map[mime_type.lower()] = extractor

    def get_extractor(self, mime_type: str) -> Optional[BaseExtractor]:
        """Получить экстрактор по MIME-типу."""
        return self._mime_map.get((mime_type or "").lower())

    def supported_mime_types(self) -> List[str]:
        return list(self._mime_map.keys())

    def extract(self, document: Document, ocr=None) -> str:
        """Извлечение текста через соответствующий экстрактор."""
        extractor = self.get_extractor(document.mime_type)
        if extractor is None:
            raise UnsupportedFormat(
                f"Unsupported file type: {document.mime_type}",
                file_name=document.file_name,
            )
        return extractor.extract(document, ocr)


def build_extractor_registry() -> ExtractorRegistry:
    """Создать реестр экстракторов с настройками по умолчанию."""
    return ExtractorRegistry({
        (MIME_PDF,): PDFExtractor(),
        (MIME_DOC, MIME_DOCX): WordExtractor(),
        (MIME_XLS, MIME_XLSX): ExcelExtractor(),
        (MIME_TEXT,): TextExtractor(),
    })


__all__ = [
    "BaseExtractor",
    "ExtractionResult",
    "PDFExtractor",
    "WordExtractor",
    "ExcelExtractor",
    "TextExtractor",
    "ExtractorRegistry",
    "build_extractor_registry",
]
