"""
Spreadsheet reading and writing (xlsx via openpyxl, csv via the csv module)
"""
import csv
import io
from datetime import datetime
from io import BytesIO
from typing import Any, Dict, Iterable, List, Sequence

from openpyxl import Workbook, load_workbook
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter
from openpyxl.worksheet.worksheet import Worksheet

HEADER_FILL = PatternFill(fill_type="solid", fgColor="0B4F73")
HEADER_FONT = Font(bold=True, color="FFFFFF")
THIN_SIDE = Side(style="thin", color="D5E2EC")
THIN_BORDER = Border(left=THIN_SIDE, right=THIN_SIDE, top=THIN_SIDE, bottom=THIN_SIDE)

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def _style_header(ws: Worksheet, row: int = 1) -> None:
    for cell in ws[row]:
        cell.font = HEADER_FONT
        cell.fill = HEADER_FILL
        cell.alignment = Alignment(horizontal="center", vertical="center", wrap_text=True)
        cell.border = THIN_BORDER


def _auto_width(ws: Worksheet) -> None:
    for column_cells in ws.iter_cols(min_row=1, max_row=ws.max_row, min_col=1, max_col=ws.max_column):
        max_len = 0
        col_letter = get_column_letter(column_cells[0].column)
        for cell in column_cells:
            value = "" if cell.value is None else str(cell.value)
            max_len = max(max_len, len(value))
        ws.column_dimensions[col_letter].width = min(max_len + 2, 45)


def build_xlsx_bytes(
    headers: Sequence[str],
    rows: Iterable[Dict[str, Any]],
    sheet_title: str = "Sheet1",
    right_to_left: bool = False,
) -> bytes:
    """Write one sheet with a styled header row and return the workbook bytes"""
    wb = Workbook()
    ws = wb.active
    ws.title = sheet_title[:31]
    ws.sheet_view.rightToLeft = right_to_left

    ws.append(list(headers))
    for row in rows:
        ws.append([row.get(header) for header in headers])

    _style_header(ws)
    ws.freeze_panes = "A2"
    _auto_width(ws)

    stream = BytesIO()
    wb.save(stream)
    return stream.getvalue()


def _cell_value(value: Any) -> Any:
    # Spreadsheet dates come back as datetimes at midnight
    if isinstance(value, datetime) and value.time() == datetime.min.time():
        return value.date()
    return value


def read_xlsx_rows(content: bytes) -> List[Dict[str, Any]]:
    """
    Read the first sheet as a list of dicts keyed by the header row

    Fully empty rows are skipped; columns without a header are ignored.

    Raises:
        ValueError: If the content is not a readable xlsx workbook
    """
    try:
        wb = load_workbook(BytesIO(content), read_only=True, data_only=True)
    except Exception as e:
        raise ValueError(f"Could not read spreadsheet: {e}") from e

    try:
        ws = wb.worksheets[0]
        rows = ws.iter_rows(values_only=True)
        header_row = next(rows, None)
        if header_row is None:
            return []
        headers = ["" if h is None else str(h).strip() for h in header_row]

        result = []
        for values in rows:
            if values is None or all(v is None or (isinstance(v, str) and not v.strip()) for v in values):
                continue
            record = {}
            for header, value in zip(headers, values):
                if header:
                    record[header] = _cell_value(value)
            result.append(record)
        return result
    finally:
        wb.close()


def read_csv_rows(content: bytes) -> List[Dict[str, Any]]:
    """Read a UTF-8 (optionally BOM-prefixed) CSV file as a list of dicts"""
    try:
        text = content.decode("utf-8-sig")
    except UnicodeDecodeError as e:
        raise ValueError("CSV file must be UTF-8 encoded") from e
    reader = csv.DictReader(io.StringIO(text))
    return [
        {k: v for k, v in row.items() if k}
        for row in reader
        if any((v or "").strip() for v in row.values() if isinstance(v, str))
    ]


def read_rows(filename: str, content: bytes) -> List[Dict[str, Any]]:
    """Dispatch on the file extension"""
    name = (filename or "").lower()
    if name.endswith(".csv"):
        return read_csv_rows(content)
    if name.endswith(".xlsx"):
        return read_xlsx_rows(content)
    raise ValueError("Unsupported file type. Upload an .xlsx or .csv file")
