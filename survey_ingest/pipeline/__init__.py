# Pipeline package
from survey_ingest.pipeline.assess import format_file_size, supported_formats
from survey_ingest.pipeline.batch import BatchProcessor
from survey_ingest.pipeline.process import DocumentProcessor, build_document_processor
from survey_ingest.pipeline.uploads import staged_upload

__all__ = [
    "DocumentProcessor",
    "BatchProcessor",
    "build_document_processor",
    "staged_upload",
    "format_file_size",
    "supported_formats",
]
