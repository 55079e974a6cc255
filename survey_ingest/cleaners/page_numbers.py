"""
Page Numbers Cleaner - удаление колонтитулов с номерами страниц.
"""

import re

from survey_ingest.logging_config import get_logger

logger = get_logger("ingest.cleaner.page_numbers")

STANDALONE_NUMBER = re.compile(r'^[ \t]*\d+[ \t]*$', re.MULTILINE)
PAGE_X_OF_Y = re.compile(r'^[ \t]*Page \d+ of \d+[ \t]*$', re.MULTILINE | re.IGNORECASE)


def page_numbers_cleaner(text: str) -> str:
    """
    Удаляет строки, состоящие только из номера страницы, и строки `Page X of Y`.

    Нумерованные пункты (`1. Текст`) не трогаются.
    """
    if not text:
        return ""

    text, standalone = STANDALONE_NUMBER.subn('', text)
    text, paged = PAGE_X_OF_Y.subn('', text)

    if standalone or paged:
        logger.debug(f"Page numbers removed | standalone={standalone} page_of={paged}")

    return text
