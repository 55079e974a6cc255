"""
Pytest fixtures для Survey Ingest.
"""
import logging
from io import BytesIO

import pytest

from survey_ingest.contracts import (
    MIME_DOCX,
    MIME_PDF,
    MIME_TEXT,
    MIME_XLSX,
    ChunkDraft,
    ChunkingConfig,
    Document,
)
from survey_ingest.metaextractors import MetadataEnricher


@pytest.fixture(scope="session", autouse=True)
def setup_test_logging():
    """Настройка логирования для тестов - только ошибки."""
    root_logger = logging.getLogger()
    root_logger.handlers.clear()

    handler = logging.StreamHandler()
    handler.setLevel(logging.ERROR)
    handler.setFormatter(logging.Formatter('%(asctime)s | %(levelname)-8s | %(name)s - %(message)s'))
    root_logger.addHandler(handler)
    root_logger.setLevel(logging.ERROR)

    yield


@pytest.fixture
def config() -> ChunkingConfig:
    """Размеры чанков по умолчанию: 1200 / 200 / 150."""
    return ChunkingConfig(max_chunk_size=1200, overlap_size=200, min_chunk_size=150)


@pytest.fixture
def enricher() -> MetadataEnricher:
    return MetadataEnricher(domain_weight=4.0, early_weight=1.5, capitalized_weight=1.3)


@pytest.fixture
def make_chunk(enricher):
    """Фабрика обогащённых чанков из текста."""
    def _make(content, index=0, overlap_chars=0, structures=None, file_name="test.txt"):
        draft = ChunkDraft(
            content=content,
            file_name=file_name,
            section_index="doc",
            index=index,
            structures=list(structures or []),
            overlap_chars=overlap_chars,
        )
        return enricher.enrich(draft)
    return _make


@pytest.fixture
def survey_sentences():
    """Фабрика предложений ~95 символов о полевом опросе."""
    def _make(count: int, start: int = 1):
        return [
            f"Sentence number {i:02d} describes how the enumerator records household answers in the field form."
            for i in range(start, start + count)
        ]
    return _make


@pytest.fixture
def text_document():
    """Фабрика text/plain документов."""
    def _make(text: str, file_name: str = "notes.txt") -> Document:
        return Document(content=text.encode("utf-8"), mime_type=MIME_TEXT, file_name=file_name)
    return _make


@pytest.fixture
def pdf_document():
    """Фабрика PDF документов через PyMuPDF (по строке на insert_text)."""
    import fitz

    def _make(lines, file_name: str = "manual.pdf") -> Document:
        doc = fitz.open()
        page = doc.new_page()
        y = 72
        for line in lines:
            if y > 800:
                page = doc.new_page()
                y = 72
            page.insert_text((72, y), line, fontsize=10)
            y += 14
        data = doc.tobytes()
        doc.close()
        return Document(content=data, mime_type=MIME_PDF, file_name=file_name)
    return _make


@pytest.fixture
def docx_document():
    """Фабрика DOCX документов через python-docx."""
    from docx import Document as DocxDocument

    def _make(heading: str, paragraphs, file_name: str = "guide.docx") -> Document:
        doc = DocxDocument()
        doc.add_heading(heading, level=1)
        for paragraph in paragraphs:
            doc.add_paragraph(paragraph)
        buffer = BytesIO()
        doc.save(buffer)
        return Document(content=buffer.getvalue(), mime_type=MIME_DOCX, file_name=file_name)
    return _make


@pytest.fixture
def xlsx_document():
    """Фабрика XLSX документов через openpyxl."""
    from openpyxl import Workbook

    def _make(sheets, file_name: str = "answers.xlsx") -> Document:
        workbook = Workbook()
        workbook.remove(workbook.active)
        for title, rows in sheets.items():
            sheet = workbook.create_sheet(title)
            for row in rows:
                sheet.append(row)
        buffer = BytesIO()
        workbook.save(buffer)
        return Document(content=buffer.getvalue(), mime_type=MIME_XLSX, file_name=file_name)
    return _make
