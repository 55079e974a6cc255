"""
Typography Cleaner - переводы строк и типографские символы в ASCII.
"""

import re

from survey_ingest.logging_config import get_logger

logger = get_logger("ingest.cleaner.typography")

REPLACEMENTS = (
    ('\N{NO-BREAK SPACE}', ' '),
    ('\N{EN DASH}', '-'),
    ('\N{EM DASH}', '--'),
    ('\N{LEFT DOUBLE QUOTATION MARK}', '"'),
    ('\N{RIGHT DOUBLE QUOTATION MARK}', '"'),
    ('\N{DOUBLE LOW-9 QUOTATION MARK}', '"'),
    ('\N{LEFT SINGLE QUOTATION MARK}', "'"),
    ('\N{RIGHT SINGLE QUOTATION MARK}', "'"),
    ('\N{HORIZONTAL ELLIPSIS}', '...'),
)

UNICODE_SPACES = re.compile(
    '[\N{EN QUAD}-\N{HAIR SPACE}\N{NARROW NO-BREAK SPACE}'
    '\N{MEDIUM MATHEMATICAL SPACE}\N{IDEOGRAPHIC SPACE}]'
)
ZERO_WIDTH = re.compile('[\N{ZERO WIDTH SPACE}\N{ZERO WIDTH NO-BREAK SPACE}]')


def typography_cleaner(text: str) -> str:
    """
    CRLF/CR → LF, form feed → перевод строки, NBSP → пробел,
    тире и «умные» кавычки → ASCII эквиваленты. Маркер списка `•` сохраняется.
    """
    if not text:
        return ""

    text = text.replace('\r\n', '\n').replace('\r', '\n')
    text = text.replace('\f', '\n')

    for source, target in REPLACEMENTS:
        text = text.replace(source, target)

    text = UNICODE_SPACES.sub(' ', text)
    text = ZERO_WIDTH.sub('', text)

    logger.debug(f"Typography cleaner | length={len(text)}")
    return text
