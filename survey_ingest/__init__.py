"""
Survey Ingest - извлечение текста и чанкинг документов опросов.

    from survey_ingest import build_document_processor, Document

    with build_document_processor() as processor:
        result = processor.process(Document.from_path("manual.pdf"), survey_id="census-2024")
"""

from survey_ingest.contracts import ChunkingConfig, Document, ProcessedDocument
from survey_ingest.exceptions import DocumentProcessingError
from survey_ingest.pipeline import BatchProcessor, DocumentProcessor, build_document_processor

__version__ = "0.1.0"

__all__ = [
    "ChunkingConfig",
    "Document",
    "ProcessedDocument",
    "DocumentProcessingError",
    "DocumentProcessor",
    "BatchProcessor",
    "build_document_processor",
]
