"""
BatchProcessor - пакетная обработка документов в пуле потоков.

Ошибка одного документа не прерывает остальные: результат содержит
успешные документы и список отказов `{fileName, kind, error}`.
"""

from concurrent.futures import ThreadPoolExecutor
from typing import Any, Dict, List, Optional, Sequence, Tuple

from survey_ingest.contracts import BatchResult, Document, ProcessedDocument
from survey_ingest.exceptions import BatchTooLarge, DocumentProcessingError, ErrorKind
from survey_ingest.logging_config import get_logger

from .process import DocumentProcessor
from .uploads import staged_upload

logger = get_logger("ingest.batch")

# (имя файла, содержимое)
Upload = Tuple[str, bytes]


def failure_entry(file_name: str, error: Exception) -> Dict[str, Any]:
    if isinstance(error, DocumentProcessingError):
        return error.with_file(file_name).to_dict()
    return {
        "fileName": file_name,
        "kind": ErrorKind.PROCESSING_ERROR.value,
        "error": f"{type(error).__name__}: {error}",
    }


class BatchProcessor:
    """Менеджер параллельной обработки пакета документов."""

    def __init__(
        self,
        processor: DocumentProcessor,
        max_files: Optional[int] = None,
        max_workers: Optional[int] = None,
        upload_dir: Optional[str] = None,
    ):
        from survey_ingest.settings import settings
        self.processor = processor
        self.max_files = settings.BATCH_MAX_FILES if max_files is None else max_files
        self.max_workers = settings.BATCH_MAX_WORKERS if max_workers is None else max_workers
        self.upload_dir = upload_dir

    def process(self, documents: Sequence[Document], survey_id: str) -> BatchResult:
        """Обработать уже прочитанные документы."""
        self._check_size(len(documents))
        return self._run(
            [(doc.file_name, self._process_document, (doc, survey_id)) for doc in documents]
        )

    def process_uploads(self, uploads: Sequence[Upload], survey_id: str) -> BatchResult:
        """Обработать загрузки: каждая пишется во временный файл и удаляется после обработки."""
        self._check_size(len(uploads))
        return self._run(
            [(name, self._process_upload, (name, data, survey_id)) for name, data in uploads]
        )

    def _check_size(self, count: int) -> None:
        if count > self.max_files:
            raise BatchTooLarge(f"Too many files in batch ({count} > {self.max_files})")

    def _process_document(self, document: Document, survey_id: str) -> ProcessedDocument:
        return self.processor.process(document, survey_id)

    def _process_upload(self, file_name: str, data: bytes, survey_id: str) -> ProcessedDocument:
        with staged_upload(data, file_name, self.upload_dir) as path:
            document = Document.from_path(path, file_name=file_name)
            return self.processor.process(document, survey_id)

    def _run(self, tasks) -> BatchResult:
        result = BatchResult()
        if not tasks:
            return result

        logger.info(f"Batch start | files={len(tasks)} max_workers={self.max_workers}")
        with ThreadPoolExecutor(max_workers=self.max_workers, thread_name_prefix="ingest") as executor:
            futures = [
                (file_name, executor.submit(func, *args))
                for file_name, func, args in tasks
            ]
            # Порядок результатов совпадает с порядком входа
            for file_name, future in futures:
                try:
                    result.successful.append(future.result())
                except Exception as e:
                    logger.error(f"Task failed | file={file_name} error={e}")
                    result.failed.append(failure_entry(file_name, e))

        logger.info(
            f"Batch done | total={result.summary['total']} successful={result.summary['successful']} "
            f"failed={result.summary['failed']}"
        )
        return result
