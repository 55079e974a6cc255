"""
DocumentProcessor - полный пайплайн обработки одного документа.

Состояния:
    Validated → Extracted → Chunked → Enriched → Assembled
Из Validated / Extracted / Chunked возможен переход в Failed(kind).

Шаги:
1. Validate - MIME-тип и размер файла
2. Extract - нормализованный текст (OCR fallback для PDF)
3. Images - побочный канал, ошибки понижаются до warning
4. Sections + Chunk - секции и черновики чанков
5. Enrich + PostProcess - метаданные, фильтрация, слияние
6. Assemble - ProcessedDocument с итоговыми оценками
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

from survey_ingest.chunkers import Chunker
from survey_ingest.chunkers.units import count_words
from survey_ingest.contracts import (
    SUPPORTED_MIME_TYPES,
    Chunk,
    ChunkingConfig,
    Document,
    DocumentMetadata,
    Image,
    ImageExtractor,
    ProcessedDocument,
)
from survey_ingest.exceptions import (
    ChunkingFailure,
    DocumentProcessingError,
    FileEmpty,
    FileTooLarge,
    ProcessingError,
    UnsupportedFormat,
)
from survey_ingest.extractors import ExtractorRegistry, build_extractor_registry
from survey_ingest.images import build_image_extractor
from survey_ingest.logging_config import clear_file_marker, get_logger, set_file_marker
from survey_ingest.metaextractors import MetadataEnricher
from survey_ingest.ocr import OcrHandle
from survey_ingest.postprocess import ChunkPostProcessor
from survey_ingest.sections import SectionDetector
from survey_ingest.settings import settings

from .assess import (
    ai_readiness,
    context_richness,
    extraction_confidence,
    format_file_size,
    processing_quality,
)


@dataclass
class DocumentProcessor:
    """Use-case обработки одного документа."""

    # Обязательные компоненты
    extractors: ExtractorRegistry
    section_detector: SectionDetector
    chunker: Chunker
    enricher: MetadataEnricher
    postprocessor: ChunkPostProcessor

    # Опциональные компоненты
    image_extractor: Optional[ImageExtractor] = None
    ocr: Optional[OcrHandle] = None
    max_file_size: int = field(default_factory=lambda: settings.MAX_FILE_SIZE)
    min_file_size: int = field(default_factory=lambda: settings.MIN_FILE_SIZE)
    logger_name: str = field(default="ingest.pipeline")

    def __post_init__(self):
        self.logger = get_logger(self.logger_name)

    def __call__(self, document: Document, survey_id: str) -> ProcessedDocument:
        return self.process(document, survey_id)

    def process(
        self,
        document: Document,
        survey_id: str,
        upload_date: Optional[datetime] = None,
    ) -> ProcessedDocument:
        """
        Обработка документа через весь пайплайн.

        Raises:
            DocumentProcessingError: с видом отказа и именем файла
        """
        upload_date = upload_date or datetime.now()
        set_file_marker(file_name=document.file_name)
        self.logger.info(
            f"Start | file={document.file_name} mime={document.mime_type} size={format_file_size(document.size)}"
        )

        try:
            # 1. Validate
            self.validate(document)
            self.logger.debug("State | state=validated")

            # 2. Extract
            text = self.extractors.extract(document, self.ocr)
            self.logger.info(f"State | state=extracted chars={len(text)}")

            # 3. Images
            images = self._extract_images(document)

            # 4. Sections + Chunk
            sections = self.section_detector.detect(text)
            drafts = self.chunker.chunk(sections, text, document.file_name)
            self.logger.info(f"State | state=chunked sections={len(sections)} drafts={len(drafts)}")

            # 5. Enrich + PostProcess
            chunks = self.postprocessor.postprocess([self.enricher.enrich(d) for d in drafts])
            if not chunks:
                raise ChunkingFailure("Failed to create content chunks from extracted text")
            self.logger.info(f"State | state=enriched chunks={len(chunks)}")

            # 6. Assemble
            result = self._assemble(document, survey_id, text, chunks, images, upload_date)
            self.logger.info(
                f"Done | chunks={result.metadata.chunk_count} images={result.metadata.image_count} "
                f"quality={result.metadata.processing_quality} readiness={result.metadata.ai_readiness}"
            )
            return result

        except DocumentProcessingError as e:
            e.with_file(document.file_name)
            self.logger.error(f"Failed | kind={e.kind.value} error={e.message}")
            raise
        except Exception as e:
            self.logger.error(f"Failed | kind=ProcessingError error={type(e).__name__}: {e}")
            raise ProcessingError(
                f"Failed to process document: {type(e).__name__}: {e}",
                file_name=document.file_name,
            ) from e
        finally:
            clear_file_marker()

    def validate(self, document: Document) -> None:
        """MIME-тип из списка поддерживаемых, размер в [min_file_size, max_file_size]."""
        if document.mime_type not in SUPPORTED_MIME_TYPES:
            raise UnsupportedFormat(
                f"Unsupported file type: {document.mime_type}. "
                f"Supported types: {', '.join(SUPPORTED_MIME_TYPES)}",
                file_name=document.file_name,
            )
        if document.size > self.max_file_size:
            raise FileTooLarge(
                f"File size ({format_file_size(document.size)}) exceeds maximum limit "
                f"of {format_file_size(self.max_file_size)}",
                file_name=document.file_name,
            )
        if document.size < self.min_file_size:
            raise FileEmpty(
                f"File appears to be empty or corrupted ({format_file_size(document.size)})",
                file_name=document.file_name,
            )

    def _extract_images(self, document: Document) -> List[Image]:
        if self.image_extractor is None:
            return []
        try:
            return list(self.image_extractor.extract_images(document))
        except Exception as e:
            self.logger.warning(f"Image extraction failed, continuing without images | error={type(e).__name__}: {e}")
            return []

    def _assemble(
        self,
        document: Document,
        survey_id: str,
        text: str,
        chunks: List[Chunk],
        images: List[Image],
        upload_date: datetime,
    ) -> ProcessedDocument:
        metadata = DocumentMetadata(
            file_type=document.mime_type,
            original_size=document.size,
            upload_date=upload_date,
            processed_date=datetime.now(),
            word_count=count_words(text),
            character_count=len(text),
            chunk_count=len(chunks),
            image_count=len(images),
            processing_quality=processing_quality(text, chunks, images),
            context_richness=context_richness(chunks),
            extraction_confidence=extraction_confidence(text, document.mime_type),
            ai_readiness=ai_readiness(chunks, images),
        )
        return ProcessedDocument(
            id=str(uuid.uuid4()),
            file_name=document.file_name,
            survey_id=survey_id,
            content=text,
            chunks=tuple(chunks),
            images=tuple(images),
            metadata=metadata,
        )

    def close(self) -> None:
        """Освободить OCR-движок."""
        if self.ocr is not None:
            self.ocr.close()

    def __enter__(self) -> "DocumentProcessor":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


def build_document_processor(
    config: Optional[ChunkingConfig] = None,
    ocr: Optional[OcrHandle] = None,
) -> DocumentProcessor:
    """Собрать процессор с компонентами по умолчанию из настроек."""
    config = config or ChunkingConfig.from_settings()
    if ocr is None and settings.ENABLE_OCR:
        ocr = OcrHandle(backend=settings.OCR_BACKEND)

    return DocumentProcessor(
        extractors=build_extractor_registry(),
        section_detector=SectionDetector(config),
        chunker=Chunker(config),
        enricher=MetadataEnricher(),
        postprocessor=ChunkPostProcessor(config),
        image_extractor=build_image_extractor(),
        ocr=ocr,
    )
