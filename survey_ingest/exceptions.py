"""
Таксономия ошибок обработки документов.

Каждая ошибка знает своё имя вида (kind) и исходное имя файла,
чтобы вызывающий слой мог вернуть структурированный ответ.
"""

from enum import Enum
from typing import Any, Dict, Optional


class ErrorKind(str, Enum):
    """Виды отказов при обработке документа."""
    UNSUPPORTED_FORMAT = "UnsupportedFormat"
    FILE_TOO_LARGE = "FileTooLarge"
    FILE_EMPTY = "FileEmpty"
    INSUFFICIENT_CONTENT = "InsufficientContent"
    CHUNKING_FAILURE = "ChunkingFailure"
    OCR_UNAVAILABLE = "OCRUnavailable"
    BATCH_TOO_LARGE = "BatchTooLarge"
    PROCESSING_ERROR = "ProcessingError"


class DocumentProcessingError(Exception):
    """Базовая ошибка обработки одного документа."""

    kind: ErrorKind = ErrorKind.PROCESSING_ERROR

    def __init__(self, message: str, file_name: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.file_name = file_name

    def with_file(self, file_name: str) -> "DocumentProcessingError":
        """Привязать имя файла, если оно ещё не задано."""
        if not self.file_name:
            self.file_name = file_name
        return self

    def to_dict(self) -> Dict[str, Any]:
        return {
            "fileName": self.file_name,
            "kind": self.kind.value,
            "error": self.message,
        }

    def __str__(self) -> str:
        if self.file_name:
            return f"{self.kind.value}: {self.message} | file={self.file_name}"
        return f"{self.kind.value}: {self.message}"


class UnsupportedFormat(DocumentProcessingError):
    kind = ErrorKind.UNSUPPORTED_FORMAT


class FileTooLarge(DocumentProcessingError):
    kind = ErrorKind.FILE_TOO_LARGE


class FileEmpty(DocumentProcessingError):
    kind = ErrorKind.FILE_EMPTY


class InsufficientContent(DocumentProcessingError):
    kind = ErrorKind.INSUFFICIENT_CONTENT


class ChunkingFailure(DocumentProcessingError):
    kind = ErrorKind.CHUNKING_FAILURE


class OCRUnavailable(DocumentProcessingError):
    """OCR недоступен. Не фатально: экстрактор продолжает без OCR."""
    kind = ErrorKind.OCR_UNAVAILABLE


class ProcessingError(DocumentProcessingError):
    """Непредвиденная ошибка внутри обработки документа."""
    kind = ErrorKind.PROCESSING_ERROR


class BatchTooLarge(DocumentProcessingError):
    kind = ErrorKind.BATCH_TOO_LARGE


__all__ = [
    "ErrorKind",
    "DocumentProcessingError",
    "UnsupportedFormat",
    "FileTooLarge",
    "FileEmpty",
    "InsufficientContent",
    "ChunkingFailure",
    "OCRUnavailable",
    "BatchTooLarge",
    "ProcessingError",
]
