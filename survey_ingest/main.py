"""
Survey Ingest - точка входа CLI.

Обработка анкет и сопроводительных документов опросов:
- Извлечение текста (PDF, Word, Excel, TXT) со структурными маркерами
- Поиск секций и content-aware чанкинг с overlap
- Метаданные чанков (keywords, entities, importance, quality)

    survey-ingest form.pdf manual.docx --survey-id census-2024 --output result.json
"""

import argparse
import json
import sys
from typing import List, Optional

from survey_ingest.contracts import ChunkingConfig, Document
from survey_ingest.exceptions import DocumentProcessingError
from survey_ingest.logging_config import get_logger, setup_logging
from survey_ingest.pipeline import BatchProcessor, build_document_processor
from survey_ingest.settings import settings


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="survey-ingest",
        description="Извлечение текста и чанкинг документов опросов",
    )
    parser.add_argument("files", nargs="+", help="Файлы для обработки")
    parser.add_argument("--survey-id", default="default", help="Идентификатор опроса")
    parser.add_argument("--output", "-o", help="Файл для JSON результата (по умолчанию stdout)")
    parser.add_argument("--log-level", default=settings.LOG_LEVEL, help="Уровень логирования")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Главная функция CLI."""
    args = build_parser().parse_args(argv)

    # 1. Настройка логирования
    setup_logging(args.log_level)
    logger = get_logger("ingest.main")

    # 2. Сборка пайплайна
    config = ChunkingConfig.from_settings()
    logger.info(
        f"Starting Survey Ingest | files={len(args.files)} chunk_size={config.max_chunk_size} "
        f"overlap={config.overlap_size} ocr={settings.ENABLE_OCR}"
    )

    documents = [Document.from_path(path) for path in args.files]

    # 3. Пакетная обработка; OCR освобождается на выходе
    with build_document_processor(config) as processor:
        batch = BatchProcessor(processor)
        try:
            result = batch.process(documents, args.survey_id)
        except DocumentProcessingError as e:
            logger.error(f"Batch rejected | error={e}")
            print(json.dumps(e.to_dict(), ensure_ascii=False), file=sys.stderr)
            return 2

    payload = json.dumps(result.to_dict(), ensure_ascii=False, indent=2)
    if args.output:
        with open(args.output, "w", encoding="utf-8") as f:
            f.write(payload)
        logger.info(f"Result written | path={args.output}")
    else:
        print(payload)

    return 0 if not result.failed else 1


if __name__ == "__main__":
    sys.exit(main())
