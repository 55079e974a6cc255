"""
Временное размещение загруженных файлов.

Каждая загрузка пишется под уникальным именем в TMP_UPLOAD_PATH
и удаляется при выходе из контекста на любом пути выполнения.
"""

import os
import tempfile
from contextlib import contextmanager
from typing import Iterator, Optional

from survey_ingest.logging_config import get_logger

logger = get_logger("ingest.uploads")


@contextmanager
def staged_upload(data: bytes, file_name: str, directory: Optional[str] = None) -> Iterator[str]:
    """Записать байты загрузки во временный файл и вернуть его путь."""
    if directory is None:
        from survey_ingest.settings import settings
        directory = settings.TMP_UPLOAD_PATH
    os.makedirs(directory, exist_ok=True)

    suffix = os.path.splitext(file_name)[1].lower()
    fd, path = tempfile.mkstemp(prefix="survey_upload_", suffix=suffix, dir=directory)
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
        logger.debug(f"Upload staged | file={file_name} path={path} size={len(data)}")
        yield path
    finally:
        try:
            os.remove(path)
            logger.debug(f"Upload removed | path={path}")
        except FileNotFoundError:
            pass
