"""
Excel Extractor (.xlsx через openpyxl, .xls через xlrd).

Формат листа:

    === SHEET: Answers ===
    Sheet 1 of 2 | Dimensions: 12 rows × 4 columns

    HEADERS: Question | Answer
    ==================================================
    Row 1: Q1\tYes
    ...
    Sheet Summary: 11 data rows, 4 columns
    ================================================================================
"""

from datetime import date, datetime, time
from io import BytesIO
from typing import Any, List, Optional, Sequence, Tuple

import xlrd
from openpyxl import load_workbook

from survey_ingest.contracts import MIME_XLS, Document

from .base_extractor import BaseExtractor, ExtractionResult
from .structure import SheetInfo

# (имя листа, строки с типизированными значениями ячеек)
RawSheet = Tuple[str, List[List[Any]]]


class ExcelExtractor(BaseExtractor):
    """Экстрактор Excel: лист → строки `Row N:` с табами между ячейками."""

    def __init__(self, **kwargs):
        super().__init__("excel", **kwargs)

    def _extract(self, document: Document, ocr=None) -> ExtractionResult:
        if document.mime_type == MIME_XLS or document.extension == ".xls":
            sheets = self._read_xls(document.content)
        else:
            sheets = self._read_xlsx(document.content)

        blocks: List[str] = []
        infos: List[SheetInfo] = []
        for index, (name, rows) in enumerate(sheets, start=1):
            block, info = self._render_sheet(name, rows, index, len(sheets))
            blocks.append(block)
            infos.append(info)

        self.logger.info(f"Excel extraction complete | sheets={len(infos)}")
        return ExtractionResult(text="\n\n".join(blocks), file_type="Excel Spreadsheet", sheets=infos)

    # === READERS ===

    def _read_xlsx(self, data: bytes) -> List[RawSheet]:
        workbook = load_workbook(BytesIO(data), data_only=True, read_only=True)
        try:
            return [
                (sheet.title or "Sheet", [list(row) for row in sheet.iter_rows(values_only=True)])
                for sheet in workbook.worksheets
            ]
        finally:
            workbook.close()

    def _read_xls(self, data: bytes) -> List[RawSheet]:
        workbook = xlrd.open_workbook(file_contents=data, formatting_info=False)
        try:
            sheets: List[RawSheet] = []
            for sheet in workbook.sheets():
                rows = [
                    [
                        self._xlrd_value(sheet.cell_value(r, c), sheet.cell_type(r, c), workbook.datemode)
                        for c in range(sheet.ncols)
                    ]
                    for r in range(sheet.nrows)
                ]
                sheets.append((sheet.name or "Sheet", rows))
            return sheets
        finally:
            workbook.release_resources()

    def _xlrd_value(self, value: Any, cell_type: int, datemode: int) -> Any:
        """Ячейка xlrd → значение Python того же вида, что отдаёт openpyxl."""
        if cell_type in (xlrd.XL_CELL_EMPTY, xlrd.XL_CELL_BLANK):
            return None
        if cell_type == xlrd.XL_CELL_BOOLEAN:
            return bool(value)
        if cell_type == xlrd.XL_CELL_ERROR:
            return "#ERROR"
        if cell_type == xlrd.XL_CELL_DATE:
            try:
                y, m, d, hh, mm, ss = xlrd.xldate_as_tuple(value, datemode)
            except xlrd.XLDateError:
                return value
            if (y, m, d) == (0, 0, 0):
                return time(hh, mm, ss)
            if (hh, mm, ss) == (0, 0, 0):
                return date(y, m, d)
            return datetime(y, m, d, hh, mm, ss)
        return value

    # === RENDERING ===

    def _render_sheet(self, name: str, rows: List[List[Any]], index: int, total: int) -> Tuple[str, SheetInfo]:
        row_count = len(rows)
        col_count = max((len(row) for row in rows), default=0)

        rows = [row for row in rows if any(self._format_cell(v) for v in row)]
        has_headers = self._detect_header(rows)
        data_rows = rows[1:] if has_headers else rows

        lines = [
            f"=== SHEET: {name} ===",
            f"Sheet {index} of {total} | Dimensions: {row_count} rows × {col_count} columns",
            "",
        ]
        if has_headers:
            lines.append("HEADERS: " + " | ".join(self._format_cell(v) for v in self._trim(rows[0])))
            lines.append("=" * 50)

        for number, row in enumerate(data_rows, start=1):
            cells = [self._format_cell(v) for v in self._trim(row)]
            lines.append(f"Row {number}: " + "\t".join(cells))

        lines.append("")
        lines.append(f"Sheet Summary: {len(data_rows)} data rows, {col_count} columns")
        lines.append("=" * 80)

        return "\n".join(lines), SheetInfo(
            name=name, rows=len(data_rows), columns=col_count, has_headers=has_headers
        )

    @staticmethod
    def _trim(row: Sequence[Any]) -> List[Any]:
        """Убрать пустые ячейки в конце строки."""
        values = list(row)
        while values and (values[-1] is None or values[-1] == ""):
            values.pop()
        return values

    def _detect_header(self, rows: List[List[Any]]) -> bool:
        """
        Первая строка — заголовок, если все её непустые ячейки строковые,
        а типы второй строки отличаются хотя бы в одной колонке.
        """
        if len(rows) < 2:
            return False
        first, second = rows[0], rows[1]
        filled = [v for v in first if v not in (None, "")]
        if not filled or not all(isinstance(v, str) for v in filled):
            return False

        width = max(len(first), len(second))
        for col in range(width):
            a = first[col] if col < len(first) else None
            b = second[col] if col < len(second) else None
            if type(a) is not type(b):
                return True
        return False

    def _format_cell(self, value: Optional[Any]) -> str:
        if value is None:
            return ""
        if isinstance(value, bool):
            return "TRUE" if value else "FALSE"
        if isinstance(value, datetime):
            if value.time() == time(0, 0):
                return value.strftime("%Y-%m-%d")
            return value.isoformat(sep=" ")
        if isinstance(value, date):
            return value.strftime("%Y-%m-%d")
        if isinstance(value, time):
            return value.strftime("%H:%M:%S")
        if isinstance(value, float):
            if value.is_integer():
                return str(int(value))
            return ("%.6f" % value).rstrip("0").rstrip(".")
        return " ".join(str(value).split())
