"""
Simple Cleaner - нормализация пробелов.

Схлопываются только пробелы. Табы не схлопываются: пара табов в строке
`Row N:` означает пустую ячейку, и её позиция должна сохраниться.
Пробелы вокруг таба убираются.
"""

import re

from survey_ingest.logging_config import get_logger

logger = get_logger("ingest.cleaner.simple")


def simple_cleaner(text: str) -> str:
    """
    Базовый клинер: control chars, пробелы, пустые строки (не больше двух подряд).

    Маркеры вида `=== TITLE ===` содержат одиночные пробелы и не затрагиваются.
    """
    if not text:
        return ""

    original_len = len(text)

    # 1. Удаляем управляющие символы (кроме \n и \t)
    text = re.sub(r'[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]', '', text)

    # 2. Схлопываем пробелы; таб остаётся разделителем ячеек (`Row N:` строки)
    text = re.sub(r' +', ' ', text)
    text = re.sub(r' ?\t ?', '\t', text)

    # 3. Удаляем пробелы в начале/конце строк
    text = '\n'.join(line.strip() for line in text.split('\n'))

    # 4. Не больше двух пустых строк подряд
    text = re.sub(r'\n{4,}', '\n\n\n', text)

    text = text.strip()

    cleaned_len = len(text)
    reduction = ((original_len - cleaned_len) / original_len * 100) if original_len > 0 else 0
    logger.debug(f"Simple cleaner | {original_len} → {cleaned_len} chars ({reduction:.1f}% reduced)")

    return text
