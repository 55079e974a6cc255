"""
Document Converter - конвертация старых офисных форматов

Сейчас поддерживает:
- .doc → .docx
"""

import shutil
import subprocess
import tempfile
import threading
from pathlib import Path
from typing import Optional

from survey_ingest.logging_config import get_logger

logger = get_logger("ingest.extractor.document_converter")

CONVERT_TIMEOUT = 60

# LibreOffice не поддерживает параллельные вызовы с одним профилем
_libreoffice_lock = threading.Lock()


def convert_doc_to_docx(doc_path: str) -> Optional[str]:
    """Конвертация .doc в .docx через LibreOffice headless"""
    return _convert_with_libreoffice(
        source_path=doc_path,
        target_ext="docx",
        temp_prefix="survey_doc_convert_",
        log_label=".doc → .docx",
    )


def _convert_with_libreoffice(
    source_path: str,
    target_ext: str,
    temp_prefix: str,
    log_label: str,
) -> Optional[str]:
    """
    Конвертация через LibreOffice во временную директорию.

    Returns:
        Путь к сконвертированному файлу или None. Директорию результата
        удаляет вызывающий код; при неудаче она удаляется здесь.
    """
    temp_dir = tempfile.mkdtemp(prefix=temp_prefix)
    logger.info(f"Converting {log_label} via LibreOffice | source={source_path} temp_dir={temp_dir}")

    try:
        with _libreoffice_lock:
            result = subprocess.run(
                [
                    'libreoffice',
                    '--headless',
                    '--convert-to', target_ext,
                    '--outdir', temp_dir,
                    source_path,
                ],
                capture_output=True,
                text=True,
                timeout=CONVERT_TIMEOUT,
            )
    except subprocess.TimeoutExpired:
        logger.error(f"LibreOffice conversion timeout | file={source_path} limit={CONVERT_TIMEOUT}s")
        shutil.rmtree(temp_dir, ignore_errors=True)
        return None
    except OSError as e:
        logger.error(f"LibreOffice is not available | error={type(e).__name__}: {e}")
        shutil.rmtree(temp_dir, ignore_errors=True)
        return None

    if result.returncode != 0:
        logger.error(f"LibreOffice conversion failed | returncode={result.returncode} stderr={result.stderr}")
        shutil.rmtree(temp_dir, ignore_errors=True)
        return None

    converted_file = Path(temp_dir) / f"{Path(source_path).stem}.{target_ext}"
    if not converted_file.exists():
        logger.error(f"Converted file not found | expected={converted_file}")
        shutil.rmtree(temp_dir, ignore_errors=True)
        return None

    logger.info(f"Conversion successful | output={converted_file} size={converted_file.stat().st_size}")
    return str(converted_file)
