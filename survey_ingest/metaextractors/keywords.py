"""
Ключевые слова чанка с весами доменной терминологии.
"""

import re
from typing import Dict, List

STOPWORDS = frozenset({
    'the', 'a', 'an', 'and', 'or', 'but', 'in', 'on', 'at', 'to', 'for', 'of', 'with', 'by',
    'is', 'are', 'was', 'were', 'be', 'been', 'have', 'has', 'had', 'do', 'does', 'did',
    'will', 'would', 'could', 'should', 'may', 'might', 'can', 'this', 'that', 'these', 'those',
    'from', 'they', 'them', 'their', 'there', 'where', 'when', 'what', 'who', 'how', 'why',
    'all', 'any', 'both', 'each', 'few', 'more', 'most', 'other', 'some', 'such', 'only', 'own',
    'same', 'so', 'than', 'too', 'very', 'just', 'now', 'also', 'here', 'then', 'well', 'back',
})

# Терминология переписей и опросов; порядок определяет порядок дописывания
SURVEY_TERMS = (
    'capi', 'cati', 'cawi', 'papi', 'survey', 'questionnaire', 'enumeration', 'enumerator',
    'supervisor', 'respondent', 'household', 'interview', 'data', 'collection', 'field',
    'sampling', 'population', 'census', 'block', 'form', 'procedure', 'instruction',
    'validation', 'quality', 'control', 'training', 'manual', 'guide', 'protocol',
    'methodology', 'analysis', 'reporting', 'documentation', 'sheet', 'row', 'column',
)
_SURVEY_TERM_SET = frozenset(SURVEY_TERMS)

MAX_RANKED = 25
MAX_KEYWORDS = 30
EARLY_FRACTION = 0.1


def tokenize(text: str) -> List[str]:
    """Токены длиннее двух символов в исходном регистре."""
    return [token for token in re.sub(r'[^\w\s]', ' ', text).split() if len(token) > 2]


def extract_keywords(
    text: str,
    domain_weight: float = 4.0,
    early_weight: float = 1.5,
    capitalized_weight: float = 1.3,
) -> List[str]:
    """
    Топ-25 токенов по сумме весов, затем доменные термины из текста (до 30).

    При равном весе раньше идёт токен, встретившийся первым.
    """
    tokens = tokenize(text)
    total = len(tokens)
    weights: Dict[str, float] = {}

    for i, original in enumerate(tokens):
        word = original.lower()
        is_domain = word in _SURVEY_TERM_SET
        if word in STOPWORDS and not is_domain:
            continue

        weight = domain_weight if is_domain else 1.0
        if i < total * EARLY_FRACTION:
            weight *= early_weight
        if original[0].isupper():
            weight *= capitalized_weight
        weights[word] = weights.get(word, 0.0) + weight

    ranked = sorted(weights.items(), key=lambda item: item[1], reverse=True)
    keywords = [word for word, _ in ranked[:MAX_RANKED]]

    present = set(weights)
    for term in SURVEY_TERMS:
        if len(keywords) >= MAX_KEYWORDS:
            break
        if term in present and term not in keywords:
            keywords.append(term)

    return keywords[:MAX_KEYWORDS]


def merge_keywords(first, second, limit: int = MAX_KEYWORDS) -> List[str]:
    """Объединение с сохранением порядка первого появления."""
    merged = list(dict.fromkeys(list(first) + list(second)))
    return merged[:limit]
