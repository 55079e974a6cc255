"""
Base Extractor для Survey Ingest

Базовый класс для всех экстракторов текста с общей функциональностью.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional

from survey_ingest.contracts import Cleaner, Document
from survey_ingest.exceptions import DocumentProcessingError, InsufficientContent
from survey_ingest.logging_config import get_logger

from .structure import SheetInfo, metadata_header


@dataclass
class ExtractionResult:
    """Сырой результат `_extract` до очистки и добавления блока метаданных."""

    text: str
    file_type: str
    preamble: str = ""
    pages: Optional[int] = None
    sheets: Optional[List[SheetInfo]] = None
    lines: Optional[int] = None


class BaseExtractor(ABC):
    """Базовый класс. Реализует шаблон Template Method для извлечения текста."""

    def __init__(
        self,
        extractor_name: str,
        cleaner: Optional[Cleaner] = None,
        min_chars: Optional[int] = None,
    ):
        self.logger = get_logger(f"ingest.extractor.{extractor_name}")
        if cleaner is None:
            from survey_ingest.cleaners import build_cleaner
            cleaner = build_cleaner()
        if min_chars is None:
            from survey_ingest.settings import settings
            min_chars = settings.MIN_EXTRACTED_CHARS
        self.cleaner = cleaner
        self.min_chars = min_chars

    def extract(self, document: Document, ocr=None) -> str:
        """
        Финальный метод: `_extract` → очистка → проверка длины → блок метаданных.

        Минимальная длина проверяется по очищенному телу, без заголовка.
        """
        try:
            result = self._extract(document, ocr)
        except DocumentProcessingError as e:
            raise e.with_file(document.file_name)
        except Exception as e:
            self.logger.error(
                f"Extraction failed | file={document.file_name} error={type(e).__name__}: {e}"
            )
            raise InsufficientContent(
                f"Failed to extract text: {type(e).__name__}: {e}",
                file_name=document.file_name,
            ) from e

        body = self.cleaner(result.text or "")
        if len(body) < self.min_chars:
            self.logger.warning(
                f"Extracted text too short | file={document.file_name} "
                f"chars={len(body)} min={self.min_chars}"
            )
            raise InsufficientContent(
                f"Extracted text too short ({len(body)} < {self.min_chars} chars)",
                file_name=document.file_name,
            )

        header = metadata_header(
            file_name=document.file_name,
            file_type=result.file_type,
            pages=result.pages,
            sheets=result.sheets,
            lines=result.lines,
        )
        parts = [header]
        if result.preamble:
            parts.append(result.preamble)
        parts.append(body)

        text = "\n\n".join(parts)
        self.logger.info(f"Text extracted | file={document.file_name} chars={len(text)}")
        return text

    @abstractmethod
    def _extract(self, document: Document, ocr=None) -> ExtractionResult:
        """Реализация извлечения в наследнике."""
        raise NotImplementedError
