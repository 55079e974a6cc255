"""
Заголовок секции для чанка.
"""

import re
from typing import Optional, Sequence

from survey_ingest.contracts import StructureKind

MARKER_TITLE = re.compile(r'=== (.+?) ===')

STRUCTURE_TITLES = {
    StructureKind.METADATA: "Document Metadata",
    StructureKind.TABLE_ROW: "Data Table",
    StructureKind.LIST_ITEM: "List Items",
    StructureKind.CODE_BLOCK: "Code Section",
}


def looks_like_title(line: str) -> bool:
    return 5 < len(line) < 100 and not line.endswith('.') and line[0].isupper()


def section_title(
    content: str,
    structures: Sequence[StructureKind],
    keywords: Sequence[str],
    detected_title: Optional[str] = None,
) -> str:
    if detected_title:
        return detected_title

    first_line = next((line.strip() for line in content.split('\n') if line.strip()), "")
    if first_line:
        if looks_like_title(first_line):
            return first_line
        marker = MARKER_TITLE.search(first_line)
        if marker:
            return marker.group(1)

    if structures:
        return STRUCTURE_TITLES.get(structures[0], "Structured Content")
    if keywords:
        return "Section: " + ", ".join(keywords[:3])
    return "Document Section"
