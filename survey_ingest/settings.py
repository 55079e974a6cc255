"""
Конфигурация Survey Ingest.

Все настройки берутся из переменных окружения (или .env).
Значения по умолчанию соответствуют боевому профилю обработки анкет.
"""

import json
from typing import List

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Настройки пайплайна из ENV."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # === CHUNKING ===
    MAX_CHUNK_SIZE: int = 1200
    OVERLAP_SIZE: int = 200
    MIN_CHUNK_SIZE: int = 150

    # === VALIDATION ===
    MAX_FILE_SIZE: int = 50 * 1024 * 1024  # 50MB
    MIN_FILE_SIZE: int = 100
    MIN_EXTRACTED_CHARS: int = 100  # PDF / Word / Excel
    MIN_PLAIN_TEXT_CHARS: int = 20

    # === BATCH ===
    BATCH_MAX_FILES: int = 10
    BATCH_MAX_WORKERS: int = 4
    TMP_UPLOAD_PATH: str = "/tmp/survey_uploads"

    # === OCR ===
    ENABLE_OCR: bool = True
    OCR_BACKEND: str = "tesseract"  # "tesseract" | "unstructured"
    OCR_LANG: str = "eng"
    OCR_DPI: int = 220
    UNSTRUCTURED_API_URL: str = "http://unstructured:8000/general/v0/general"
    OCR_MIN_PRIMARY_CHARS: int = 200  # короче пробуем OCR
    OCR_MIN_GAIN_RATIO: float = 0.5  # OCR берём если длиннее 50% основного текста
    FRAGMENTATION_RATIO: float = 0.6
    FRAGMENT_LINE_LENGTH: int = 30

    # === IMAGES ===
    ENABLE_IMAGES: bool = True
    IMAGE_MAX_COUNT: int = 20

    # === CLEANERS ===
    CLEANER_PIPELINE: List[str] = ["typography", "page_numbers", "simple"]  # порядок важен

    # === KEYWORDS ===
    KEYWORD_DOMAIN_WEIGHT: float = 4.0
    KEYWORD_EARLY_WEIGHT: float = 1.5
    KEYWORD_CAPITALIZED_WEIGHT: float = 1.3

    # === LOGGING ===
    LOG_LEVEL: str = "INFO"

    @field_validator('CLEANER_PIPELINE', mode='before')
    @classmethod
    def parse_json_list(cls, v):
        """Парсинг JSON строки в список."""
        if isinstance(v, str):
            try:
                return json.loads(v)
            except json.JSONDecodeError:
                return [x.strip() for x in v.split(',') if x.strip()]
        return v


settings = Settings()
