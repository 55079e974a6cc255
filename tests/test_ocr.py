"""
Тесты для OCR дескриптора и движков.
"""
from unittest.mock import MagicMock, patch

import pytest

from survey_ingest.contracts import OcrEngine
from survey_ingest.exceptions import OCRUnavailable
from survey_ingest.ocr import OCR_ENGINES, OcrHandle, TesseractOcr, UnstructuredOcr


class TestOcrHandle:
    """Тесты OcrHandle."""

    def test_engine_created_lazily_once(self):
        engine = MagicMock()
        engine.recognize_pdf.return_value = "recognized"
        factory = MagicMock(return_value=engine)

        handle = OcrHandle(factory=factory)
        assert not handle.initialized
        factory.assert_not_called()

        assert handle.recognize_pdf(b"%PDF") == "recognized"
        assert handle.recognize_pdf(b"%PDF") == "recognized"

        factory.assert_called_once()
        assert handle.initialized

    def test_engine_errors_become_ocr_unavailable(self):
        engine = MagicMock()
        engine.recognize_pdf.side_effect = RuntimeError("tesseract not installed")

        handle = OcrHandle(factory=lambda: engine)

        with pytest.raises(OCRUnavailable) as exc_info:
            handle.recognize_pdf(b"%PDF")
        assert "tesseract not installed" in exc_info.value.message

    def test_factory_errors_become_ocr_unavailable(self):
        def broken():
            raise OSError("no engine")

        with pytest.raises(OCRUnavailable):
            OcrHandle(factory=broken).recognize_pdf(b"%PDF")

    def test_close_releases_engine(self):
        engine = MagicMock()
        handle = OcrHandle(factory=lambda: engine)
        handle.recognize_pdf(b"%PDF")

        handle.close()
        handle.close()

        engine.close.assert_called_once()
        assert not handle.initialized

    def test_context_manager(self):
        engine = MagicMock()

        with OcrHandle(factory=lambda: engine) as handle:
            handle.recognize_pdf(b"%PDF")

        engine.close.assert_called_once()

    def test_unknown_backend(self):
        with pytest.raises(ValueError):
            OcrHandle(backend="magic")

    def test_registry(self):
        assert set(OCR_ENGINES) == {"tesseract", "unstructured"}


class TestTesseractOcr:
    """Тесты TesseractOcr."""

    def test_joins_recognized_pages(self):
        with patch("survey_ingest.ocr.convert_from_bytes", return_value=["page1", "page2", "page3"]), \
                patch("survey_ingest.ocr.pytesseract.image_to_string", side_effect=["First page", "  ", "Third page"]):
            text = TesseractOcr(lang="eng").recognize_pdf(b"%PDF")

        assert text == "First page\n\nThird page"

    def test_no_pages(self):
        with patch("survey_ingest.ocr.convert_from_bytes", return_value=[]):
            assert TesseractOcr().recognize_pdf(b"%PDF") == ""

    def test_satisfies_protocol(self):
        assert isinstance(TesseractOcr(), OcrEngine)


class TestUnstructuredOcr:
    """Тесты UnstructuredOcr."""

    def test_collects_text_elements(self):
        response = MagicMock(status_code=200)
        response.json.return_value = [
            {"type": "Title", "text": "Household Questionnaire"},
            {"type": "Image", "text": "logo"},
            {"type": "NarrativeText", "text": "  "},
            {"type": "NarrativeText", "text": "Answer every question."},
        ]
        ocr = UnstructuredOcr(api_url="http://unstructured.test/general")

        with patch.object(ocr.session, "post", return_value=response) as post:
            text = ocr.recognize_pdf(b"%PDF")

        assert text == "Household Questionnaire\n\nAnswer every question."
        assert post.call_args.kwargs["data"]["strategy"] == "hi_res"

    def test_error_status(self):
        ocr = UnstructuredOcr(api_url="http://unstructured.test/general")

        with patch.object(ocr.session, "post", return_value=MagicMock(status_code=503)):
            with pytest.raises(OCRUnavailable):
                ocr.recognize_pdf(b"%PDF")

    def test_handle_passes_api_errors_through(self):
        ocr = UnstructuredOcr(api_url="http://unstructured.test/general")
        handle = OcrHandle(factory=lambda: ocr)

        with patch.object(ocr.session, "post", return_value=MagicMock(status_code=500)):
            with pytest.raises(OCRUnavailable) as exc_info:
                handle.recognize_pdf(b"%PDF")

        assert "status=500" in exc_info.value.message
