"""
OCR — подключаемый fallback для PDF без текстового слоя.

=== НАЗНАЧЕНИЕ ===
OcrHandle — явный дескриптор OCR-движка, которым владеет оркестратор:
- движок создаётся лениво при первом вызове
- доступ сериализован через Lock (движки не потокобезопасны)
- освобождение через close() / контекстный менеджер

=== ДВИЖКИ ===
- tesseract — локально: pdf2image → pytesseract
- unstructured — Unstructured API (hi_res)

=== ИСПОЛЬЗОВАНИЕ ===

    with OcrHandle(backend="tesseract") as ocr:
        text = ocr.recognize_pdf(pdf_bytes)

Любая ошибка движка превращается в OCRUnavailable: вызывающий код
понижает её до warning.
"""

import threading
from typing import Callable, Dict, List, Optional

import pytesseract
import requests
from pdf2image import convert_from_bytes

from survey_ingest.contracts import OcrEngine
from survey_ingest.exceptions import OCRUnavailable
from survey_ingest.logging_config import get_logger

logger = get_logger("ingest.ocr")


class TesseractOcr:
    """Локальный OCR: рендер страниц через pdf2image и распознавание tesseract."""

    def __init__(self, lang: str = "eng", dpi: int = 220):
        self.lang = lang
        self.dpi = dpi

    def recognize_pdf(self, data: bytes) -> str:
        images = convert_from_bytes(data, dpi=self.dpi)
        if not images:
            logger.debug("pdf2image returned no pages")
            return ""

        text_parts: List[str] = []
        total_pages = len(images)
        for idx, img in enumerate(images, start=1):
            page_text = pytesseract.image_to_string(img, lang=self.lang, config='--psm 6').strip()
            if not page_text:
                continue
            logger.debug(f"OCR page {idx}/{total_pages} | chars={len(page_text)}")
            text_parts.append(page_text)

        return '\n\n'.join(text_parts)


class UnstructuredOcr:
    """OCR через Unstructured API (стратегия hi_res)."""

    def __init__(self, api_url: str, lang: str = "eng", timeout: int = 120):
        self.api_url = api_url
        self.lang = lang
        self.timeout = timeout
        self.session = requests.Session()

    def recognize_pdf(self, data: bytes) -> str:
        response = self.session.post(
            self.api_url,
            files={'files': ('document.pdf', data, 'application/pdf')},
            data={
                'strategy': 'hi_res',
                'languages': self.lang,
                'pdf_infer_table_structure': 'true',
            },
            timeout=self.timeout,
        )
        if response.status_code != 200:
            raise OCRUnavailable(f"Unstructured API error | status={response.status_code}")

        elements = response.json()
        text_parts = [
            elem.get('text', '').strip()
            for elem in elements
            if elem.get('type') != 'Image' and elem.get('text', '').strip()
        ]
        logger.debug(f"Unstructured | elements={len(elements)} parts={len(text_parts)}")
        return '\n\n'.join(text_parts)

    def close(self) -> None:
        self.session.close()


def _tesseract_factory() -> OcrEngine:
    from survey_ingest.settings import settings
    return TesseractOcr(lang=settings.OCR_LANG, dpi=settings.OCR_DPI)


def _unstructured_factory() -> OcrEngine:
    from survey_ingest.settings import settings
    return UnstructuredOcr(api_url=settings.UNSTRUCTURED_API_URL, lang=settings.OCR_LANG)


# Реестр OCR-движков
OCR_ENGINES: Dict[str, Callable[[], OcrEngine]] = {
    "tesseract": _tesseract_factory,
    "unstructured": _unstructured_factory,
}


class OcrHandle:
    """Ленивый, сериализованный доступ к одному OCR-движку."""

    def __init__(
        self,
        backend: Optional[str] = None,
        factory: Optional[Callable[[], OcrEngine]] = None,
    ):
        if factory is None:
            if backend is None:
                from survey_ingest.settings import settings
                backend = settings.OCR_BACKEND
            if backend not in OCR_ENGINES:
                raise ValueError(f"Unknown OCR backend: {backend}")
            factory = OCR_ENGINES[backend]
        self.backend = backend or "custom"
        self._factory = factory
        self._engine: Optional[OcrEngine] = None
        self._lock = threading.Lock()

    @property
    def initialized(self) -> bool:
        return self._engine is not None

    def recognize_pdf(self, data: bytes) -> str:
        """Распознать PDF. Ошибки движка → OCRUnavailable."""
        with self._lock:
            try:
                if self._engine is None:
                    logger.info(f"Initializing OCR engine | backend={self.backend}")
                    self._engine = self._factory()
                return self._engine.recognize_pdf(data)
            except OCRUnavailable:
                raise
            except Exception as e:
                raise OCRUnavailable(f"OCR failed | backend={self.backend} error={type(e).__name__}: {e}") from e

    def close(self) -> None:
        """Освободить движок. Повторный вызов безопасен."""
        with self._lock:
            engine, self._engine = self._engine, None
        if engine is None:
            return
        close = getattr(engine, "close", None)
        if callable(close):
            close()
        logger.info(f"OCR engine released | backend={self.backend}")

    def __enter__(self) -> "OcrHandle":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


__all__ = ["OcrHandle", "TesseractOcr", "UnstructuredOcr", "OCR_ENGINES"]
