"""
Intelligent overlap между соседними чанками.
"""

from .units import is_line_structured, line_starts, sentence_starts

MIN_OVERLAP_SENTENCE = 15


def intelligent_overlap(chunk: str, overlap_size: int) -> str:
    """
    Хвост чанка для начала следующего.

    - чанк не длиннее overlap_size → целиком
    - иначе самый длинный непрерывный хвост из целых предложений
      (у построчных блоков из целых строк), не длиннее overlap_size,
      начинающийся с предложения или строки ≥ 15 символов
    - подходящего хвоста нет → пустая строка
    """
    chunk = chunk.strip()
    if overlap_size <= 0 or not chunk:
        return ""
    if len(chunk) <= overlap_size:
        return chunk

    starts = line_starts(chunk) if is_line_structured(chunk) else sentence_starts(chunk)
    for i, start in enumerate(starts):
        tail = chunk[start:].strip()
        if len(tail) > overlap_size:
            continue
        end = starts[i + 1] if i + 1 < len(starts) else len(chunk)
        if len(chunk[start:end].strip()) >= MIN_OVERLAP_SENTENCE:
            return tail
    return ""
