"""
Извлечение встроенных изображений (побочный канал обработки).

- PDF — PyMuPDF (`page.get_images` / `doc.extract_image`)
- DOCX — связи документа python-docx (`doc.part.rels`)
- остальные форматы — пустой список

Ошибки не гасятся здесь: оркестратор понижает их до warning.
"""

import base64
from io import BytesIO
from typing import List, Optional

import fitz  # PyMuPDF
from docx import Document as DocxDocument

from survey_ingest.contracts import MIME_DOCX, MIME_PDF, Document, Image
from survey_ingest.logging_config import get_logger

logger = get_logger("ingest.images")


def to_data_url(data: bytes, mime_type: str) -> str:
    return f"data:{mime_type};base64,{base64.b64encode(data).decode('ascii')}"


class EmbeddedImageExtractor:
    """Встроенные изображения PDF и DOCX как base64 data URL."""

    def __init__(self, max_count: Optional[int] = None):
        if max_count is None:
            from survey_ingest.settings import settings
            max_count = settings.IMAGE_MAX_COUNT
        self.max_count = max_count

    def extract_images(self, document: Document) -> List[Image]:
        if document.mime_type == MIME_PDF:
            images = self._from_pdf(document)
        elif document.mime_type == MIME_DOCX:
            images = self._from_docx(document)
        else:
            images = []
        logger.info(f"Images extracted | file={document.file_name} count={len(images)}")
        return images

    def _image(self, document: Document, index: int, data: bytes, mime_type: str, where: str) -> Image:
        return Image(
            id=f"{document.file_name}-image-{index}",
            file_name=f"{document.file_name} - Image {index}",
            description=f"Image {index} embedded in {document.file_name} ({where})",
            data_url=to_data_url(data, mime_type),
            type="embedded",
        )

    def _from_pdf(self, document: Document) -> List[Image]:
        images: List[Image] = []
        seen = set()
        with fitz.open(stream=document.content, filetype="pdf") as doc:
            for page_number, page in enumerate(doc, start=1):
                for info in page.get_images(full=True):
                    xref = info[0]
                    if xref in seen:
                        continue
                    seen.add(xref)
                    extracted = doc.extract_image(xref)
                    if not extracted or not extracted.get("image"):
                        continue
                    images.append(self._image(
                        document,
                        len(images) + 1,
                        extracted["image"],
                        f"image/{extracted.get('ext', 'png')}",
                        f"page {page_number}",
                    ))
                    if len(images) >= self.max_count:
                        return images
        return images

    def _from_docx(self, document: Document) -> List[Image]:
        images: List[Image] = []
        doc = DocxDocument(BytesIO(document.content))
        for rel in doc.part.rels.values():
            if rel.is_external or "image" not in rel.reltype:
                continue
            blob = rel.target_part.blob
            if not blob:
                logger.warning(f"Empty image data | rel={rel.rId}")
                continue
            images.append(self._image(
                document, len(images) + 1, blob, rel.target_part.content_type, rel.target_ref
            ))
            if len(images) >= self.max_count:
                break
        return images


class NullImageExtractor:
    """Отключённое извлечение изображений."""

    def extract_images(self, document: Document) -> List[Image]:
        return []


def build_image_extractor():
    """Коллаборатор изображений по настройкам."""
    from survey_ingest.settings import settings
    if not settings.ENABLE_IMAGES:
        return NullImageExtractor()
    return EmbeddedImageExtractor(max_count=settings.IMAGE_MAX_COUNT)


__all__ = ["EmbeddedImageExtractor", "NullImageExtractor", "build_image_extractor", "to_data_url"]
