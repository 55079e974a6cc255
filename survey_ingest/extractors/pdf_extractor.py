"""
PDF Extractor

Pipeline:
    .pdf → PyMuPDF (pypdf fallback) → структурные маркеры → OCR fallback

OCR запускается только для короткого или «рваного» текстового слоя
и дописывается под `=== ENHANCED CONTENT ===`, не заменяя основной текст.
"""

from io import BytesIO
from typing import List, Optional, Tuple

import fitz  # PyMuPDF
from pypdf import PdfReader

from survey_ingest.contracts import Document
from survey_ingest.exceptions import OCRUnavailable

from .base_extractor import BaseExtractor, ExtractionResult
from .structure import combine_text_sources, is_text_fragmented, pdf_preamble, pdf_structure


class PDFExtractor(BaseExtractor):
    """Экстрактор PDF с OCR fallback."""

    def __init__(
        self,
        enable_ocr: Optional[bool] = None,
        min_primary_chars: Optional[int] = None,
        min_gain_ratio: Optional[float] = None,
        fragmentation_ratio: Optional[float] = None,
        fragment_line_length: Optional[int] = None,
        **kwargs,
    ):
        super().__init__("pdf", **kwargs)
        from survey_ingest.settings import settings
        self.enable_ocr = settings.ENABLE_OCR if enable_ocr is None else enable_ocr
        self.min_primary_chars = settings.OCR_MIN_PRIMARY_CHARS if min_primary_chars is None else min_primary_chars
        self.min_gain_ratio = settings.OCR_MIN_GAIN_RATIO if min_gain_ratio is None else min_gain_ratio
        self.fragmentation_ratio = (
            settings.FRAGMENTATION_RATIO if fragmentation_ratio is None else fragmentation_ratio
        )
        self.fragment_line_length = (
            settings.FRAGMENT_LINE_LENGTH if fragment_line_length is None else fragment_line_length
        )

    def _extract(self, document: Document, ocr=None) -> ExtractionResult:
        self.logger.info(f"PDF extraction | file={document.file_name} size={document.size}")

        text, pages = self._read_with_pymupdf(document.content)
        if not text.strip():
            self.logger.info("PyMuPDF returned no text, trying pypdf")
            text, pages = self._read_with_pypdf(document.content)

        text = pdf_structure(text)

        if self._needs_ocr(text):
            text = self._apply_ocr(document, text, ocr)

        return ExtractionResult(
            text=text,
            file_type="PDF",
            preamble=pdf_preamble(pages),
            pages=pages,
        )

    def _read_with_pymupdf(self, data: bytes) -> Tuple[str, int]:
        try:
            with fitz.open(stream=data, filetype="pdf") as doc:
                page_texts: List[str] = [page.get_text() for page in doc]
                pages = doc.page_count
        except Exception as e:
            self.logger.warning(f"PyMuPDF failed | error={type(e).__name__}: {e}")
            return "", 0
        self.logger.debug(f"PyMuPDF | pages={pages}")
        return '\n'.join(page_texts), pages

    def _read_with_pypdf(self, data: bytes) -> Tuple[str, int]:
        reader = PdfReader(BytesIO(data))
        page_texts = [(page.extract_text() or '') for page in reader.pages]
        self.logger.debug(f"pypdf | pages={len(page_texts)}")
        return '\n'.join(page_texts), len(page_texts)

    def _needs_ocr(self, text: str) -> bool:
        if len(text.strip()) < self.min_primary_chars:
            return True
        return is_text_fragmented(text, self.fragmentation_ratio, self.fragment_line_length)

    def _apply_ocr(self, document: Document, text: str, ocr) -> str:
        if not self.enable_ocr or ocr is None:
            self.logger.debug("OCR disabled or unavailable, keeping text layer")
            return text

        self.logger.info(f"Weak text layer, trying OCR | chars={len(text.strip())}")
        try:
            ocr_text = ocr.recognize_pdf(document.content)
        except OCRUnavailable as e:
            self.logger.warning(f"OCR unavailable, continuing without it | error={e}")
            return text

        ocr_text = (ocr_text or '').strip()
        if len(ocr_text) > len(text.strip()) * self.min_gain_ratio:
            self.logger.info(f"OCR content accepted | chars={len(ocr_text)}")
            return combine_text_sources(text, ocr_text)

        self.logger.info(f"OCR content discarded | chars={len(ocr_text)}")
        return text
