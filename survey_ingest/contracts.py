"""
Контракты Survey Ingest.

Модель данных пайплайна (документ, секция, чанк, результат обработки)
и Protocol'ы внешних коллабораторов (OCR, изображения).
"""

from __future__ import annotations

import mimetypes
import os
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum, IntFlag
from typing import Any, Callable, Dict, List, Optional, Protocol, Tuple, runtime_checkable


# === MIME TYPES ===

MIME_PDF = "application/pdf"
MIME_DOC = "application/msword"
MIME_DOCX = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
MIME_XLS = "application/vnd.ms-excel"
MIME_XLSX = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
MIME_TEXT = "text/plain"

SUPPORTED_MIME_TYPES: Tuple[str, ...] = (
    MIME_PDF, MIME_DOC, MIME_DOCX, MIME_XLS, MIME_XLSX, MIME_TEXT,
)

_EXTENSION_MIME = {
    ".pdf": MIME_PDF,
    ".doc": MIME_DOC,
    ".docx": MIME_DOCX,
    ".xls": MIME_XLS,
    ".xlsx": MIME_XLSX,
    ".txt": MIME_TEXT,
}


def guess_mime_type(file_name: str) -> str:
    """MIME по расширению файла; неизвестные расширения через mimetypes."""
    ext = os.path.splitext(file_name)[1].lower()
    if ext in _EXTENSION_MIME:
        return _EXTENSION_MIME[ext]
    guessed, _ = mimetypes.guess_type(file_name)
    return guessed or "application/octet-stream"


@dataclass(frozen=True)
class Document:
    """Загруженный документ. Неизменяемый вход пайплайна."""

    content: bytes
    mime_type: str
    file_name: str
    size: int = -1

    def __post_init__(self):
        if self.size < 0:
            object.__setattr__(self, "size", len(self.content))

    @property
    def extension(self) -> str:
        return os.path.splitext(self.file_name)[1].lower()

    @classmethod
    def from_path(
        cls,
        path: str,
        mime_type: Optional[str] = None,
        file_name: Optional[str] = None,
    ) -> "Document":
        """Прочитать документ с диска."""
        with open(path, "rb") as f:
            content = f.read()
        name = file_name or os.path.basename(path)
        return cls(
            content=content,
            mime_type=mime_type or guess_mime_type(name),
            file_name=name,
            size=len(content),
        )


# === CONFIG ===

@dataclass(frozen=True)
class ChunkingConfig:
    """Размеры чанков. Передаётся явно во все компоненты чанкинга."""

    max_chunk_size: int = 1200
    overlap_size: int = 200
    min_chunk_size: int = 150

    def __post_init__(self):
        if self.min_chunk_size <= 0 or self.max_chunk_size <= 0:
            raise ValueError("Chunk sizes must be positive")
        if self.min_chunk_size >= self.max_chunk_size:
            raise ValueError(
                f"min_chunk_size must be below max_chunk_size | "
                f"min={self.min_chunk_size} max={self.max_chunk_size}"
            )
        if not 0 <= self.overlap_size < self.max_chunk_size:
            raise ValueError(
                f"overlap_size must be in [0, max_chunk_size) | overlap={self.overlap_size}"
            )
        # Буфер не сбрасывается, пока он ≤ min_chunk_size: следующая единица
        # (≤ max_chunk_size, через "\n\n") не должна выводить его за upper_bound
        if self.min_chunk_size + 2 + self.max_chunk_size > self.upper_bound:
            raise ValueError(
                f"min_chunk_size too large for upper bound | "
                f"min={self.min_chunk_size} max={self.max_chunk_size} upper={self.upper_bound}"
            )

    @property
    def upper_bound(self) -> int:
        """Жёсткий верхний предел длины чанка (maxChunkSize × 1.3)."""
        return int(self.max_chunk_size * 1.3)

    @classmethod
    def from_settings(cls) -> "ChunkingConfig":
        from survey_ingest.settings import settings
        return cls(
            max_chunk_size=settings.MAX_CHUNK_SIZE,
            overlap_size=settings.OVERLAP_SIZE,
            min_chunk_size=settings.MIN_CHUNK_SIZE,
        )


# === SECTIONS ===

class SectionType(str, Enum):
    """Тип секции по стратегии, которая её нашла."""
    METADATA = "metadata"
    HEADING = "heading"
    NUMBERED = "numbered"
    STRUCTURAL = "structural"
    CONTENT_PATTERN = "content-pattern"
    FULL = "full"


@dataclass(frozen=True)
class Section:
    """Логическая часть документа."""

    title: str
    content: str
    type: SectionType
    strategy: str


# === CHUNKS ===

class ContentType(str, Enum):
    METADATA = "metadata"
    TABLE = "table"
    LIST = "list"
    CODE = "code"
    PROCEDURE = "procedure"
    DEFINITION = "definition"
    FORM = "form"
    EXAMPLE = "example"
    DATA = "data"
    GENERAL = "general"
    FALLBACK = "fallback"


class StructuralFlags(IntFlag):
    """Битовый набор структурных признаков чанка."""
    NONE = 0
    HAS_LISTS = 1
    HAS_TABLES = 2
    HAS_PROCEDURES = 4
    HAS_DEFINITIONS = 8
    HAS_METADATA = 16
    HAS_NUMBERS = 32
    HAS_QUESTIONS = 64
    HAS_FORM_FIELDS = 128


class StructureKind(str, Enum):
    """Структурные элементы внутри абзаца (подсказки для заголовка и важности)."""
    METADATA = "metadata"
    CODE_BLOCK = "code_block"
    HEADING = "heading"
    TABLE_ROW = "table_row"
    LIST_ITEM = "list_item"
    SECTION = "section"
    FALLBACK = "fallback"


STRUCTURE_PRIORITIES: Dict[StructureKind, int] = {
    StructureKind.METADATA: 12,
    StructureKind.CODE_BLOCK: 10,
    StructureKind.HEADING: 9,
    StructureKind.TABLE_ROW: 8,
    StructureKind.LIST_ITEM: 6,
}


def structure_priority(kinds) -> int:
    """Максимальный приоритет среди структурных элементов (1 по умолчанию)."""
    return max((STRUCTURE_PRIORITIES.get(kind, 1) for kind in kinds), default=1)


@dataclass
class ChunkDraft:
    """Черновик чанка: текст и структурные подсказки до обогащения."""

    content: str
    file_name: str
    section_index: str
    index: int
    section_title: Optional[str] = None
    structures: List[StructureKind] = field(default_factory=list)
    overlap_chars: int = 0
    is_fallback: bool = False

    @property
    def chunk_id(self) -> str:
        return f"{self.file_name}-chunk-{self.section_index}-{self.index}"


@dataclass(frozen=True)
class Chunk:
    """Обогащённый чанк. Неизменяем после выхода из пайплайна."""

    id: str
    content: str
    section_title: str
    keywords: Tuple[str, ...]
    entities: Tuple[str, ...]
    word_count: int
    character_count: int
    content_type: ContentType
    importance: float
    quality_score: int
    flags: StructuralFlags
    structures: Tuple[StructureKind, ...] = ()
    overlap_chars: int = 0
    is_fallback: bool = False

    @property
    def structure_priority(self) -> int:
        return structure_priority(self.structures)

    @property
    def has_lists(self) -> bool:
        return bool(self.flags & StructuralFlags.HAS_LISTS)

    @property
    def has_tables(self) -> bool:
        return bool(self.flags & StructuralFlags.HAS_TABLES)

    @property
    def has_procedures(self) -> bool:
        return bool(self.flags & StructuralFlags.HAS_PROCEDURES)

    @property
    def has_definitions(self) -> bool:
        return bool(self.flags & StructuralFlags.HAS_DEFINITIONS)

    @property
    def has_metadata(self) -> bool:
        return bool(self.flags & StructuralFlags.HAS_METADATA)

    @property
    def has_numbers(self) -> bool:
        return bool(self.flags & StructuralFlags.HAS_NUMBERS)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "content": self.content,
            "metadata": {
                "section": self.section_title,
                "keywords": list(self.keywords),
                "entities": list(self.entities),
                "wordCount": self.word_count,
                "characterCount": self.character_count,
                "contentType": self.content_type.value,
                "importance": self.importance,
                "contextQuality": self.quality_score,
                "structures": [kind.value for kind in self.structures],
                "structurePriority": self.structure_priority,
                "hasLists": self.has_lists,
                "hasTables": self.has_tables,
                "hasProcedures": self.has_procedures,
                "hasDefinitions": self.has_definitions,
                "hasMetadata": self.has_metadata,
                "hasNumbers": self.has_numbers,
                "hasQuestions": bool(self.flags & StructuralFlags.HAS_QUESTIONS),
                "hasFormFields": bool(self.flags & StructuralFlags.HAS_FORM_FIELDS),
            },
        }


# === IMAGES ===

@dataclass(frozen=True)
class Image:
    """Изображение документа (побочный канал, не влияет на чанки)."""

    id: str
    file_name: str
    description: str
    data_url: str
    type: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "fileName": self.file_name,
            "description": self.description,
            "dataUrl": self.data_url,
            "type": self.type,
        }


# === RESULT ===

@dataclass(frozen=True)
class DocumentMetadata:
    file_type: str
    original_size: int
    upload_date: datetime
    processed_date: datetime
    word_count: int
    character_count: int
    chunk_count: int
    image_count: int
    processing_quality: str
    context_richness: int
    extraction_confidence: int
    ai_readiness: str
    processing_method: str = "server-side-enhanced"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "fileType": self.file_type,
            "originalSize": self.original_size,
            "uploadDate": self.upload_date.isoformat(),
            "processedDate": self.processed_date.isoformat(),
            "wordCount": self.word_count,
            "characterCount": self.character_count,
            "chunkCount": self.chunk_count,
            "imageCount": self.image_count,
            "processingMethod": self.processing_method,
            "processingQuality": self.processing_quality,
            "contextRichness": self.context_richness,
            "extractionConfidence": self.extraction_confidence,
            "aiReadiness": self.ai_readiness,
        }


@dataclass(frozen=True)
class ProcessedDocument:
    id: str
    file_name: str
    survey_id: str
    content: str
    chunks: Tuple[Chunk, ...]
    images: Tuple[Image, ...]
    metadata: DocumentMetadata

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "fileName": self.file_name,
            "surveyId": self.survey_id,
            "content": self.content,
            "chunks": [chunk.to_dict() for chunk in self.chunks],
            "images": [image.to_dict() for image in self.images],
            "metadata": self.metadata.to_dict(),
        }


@dataclass
class BatchResult:
    """Итог пакетной обработки: частичные успехи и список отказов."""

    successful: List[ProcessedDocument] = field(default_factory=list)
    failed: List[Dict[str, Any]] = field(default_factory=list)

    @property
    def summary(self) -> Dict[str, int]:
        return {
            "total": len(self.successful) + len(self.failed),
            "successful": len(self.successful),
            "failed": len(self.failed),
        }

    def to_dict(self) -> Dict[str, Any]:
        return {
            "successful": [doc.to_dict() for doc in self.successful],
            "failed": list(self.failed),
            "summary": self.summary,
        }


# === Collaborator Contracts ===

# Cleaner: (text) -> cleaned_text
Cleaner = Callable[[str], str]


@runtime_checkable
class OcrEngine(Protocol):
    """Движок OCR: распознаёт текст PDF-документа."""

    def recognize_pdf(self, data: bytes) -> str:
        ...


@runtime_checkable
class ImageExtractor(Protocol):
    """Коллаборатор извлечения изображений. Ошибки гасит оркестратор."""

    def extract_images(self, document: Document) -> List[Image]:
        ...
