"""
Text Extractor (.txt) с автоопределением кодировки.

Pipeline:
    bytes → chardet → str → ALL-CAPS заголовки и пункты списков в маркеры
"""

import chardet

from survey_ingest.contracts import Document
from survey_ingest.logging_config import get_logger

from .base_extractor import BaseExtractor, ExtractionResult
from .structure import analyze_text_structure, mark_text_structure

logger = get_logger("ingest.extractor.encoding")

ENCODING_SAMPLE_BYTES = 10240
MIN_ENCODING_CONFIDENCE = 0.7


def detect_encoding(data: bytes) -> str:
    """
    Определить кодировку по первым 10KB.

    При низкой уверенности chardet возвращается UTF-8.
    """
    sample = data[:ENCODING_SAMPLE_BYTES]
    if not sample:
        return 'utf-8'

    detected = chardet.detect(sample)
    encoding = detected.get('encoding') or 'utf-8'
    confidence = detected.get('confidence') or 0.0
    logger.debug(f"Encoding detection | encoding={encoding} confidence={confidence:.2f}")

    if confidence < MIN_ENCODING_CONFIDENCE:
        logger.warning(f"Low confidence in encoding detection | confidence={confidence:.2f} using_utf8=true")
        return 'utf-8'
    return encoding.lower()


class TextExtractor(BaseExtractor):
    """Экстрактор простого текста."""

    def __init__(self, **kwargs):
        if kwargs.get("min_chars") is None:
            from survey_ingest.settings import settings
            kwargs["min_chars"] = settings.MIN_PLAIN_TEXT_CHARS
        super().__init__("text", **kwargs)

    def _extract(self, document: Document, ocr=None) -> ExtractionResult:
        encoding = detect_encoding(document.content)
        try:
            content = document.content.decode(encoding, errors='replace')
        except LookupError:
            self.logger.warning(f"Unknown encoding, falling back to UTF-8 | encoding={encoding}")
            content = document.content.decode('utf-8', errors='replace')

        analysis = analyze_text_structure(content)
        self.logger.info(
            f"Text structure | lines={analysis.line_count} headers={analysis.has_headers} "
            f"lists={analysis.has_lists} sections={analysis.has_sections}"
        )
        if analysis.has_structure:
            content = mark_text_structure(content, analysis)

        return ExtractionResult(text=content, file_type="Plain Text", lines=analysis.line_count)
