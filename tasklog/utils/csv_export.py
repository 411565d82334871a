"""
CSV export utilities
"""
import csv
import io
from typing import Iterable, Dict, List
from fastapi.responses import StreamingResponse


def stream_csv(headers: List[str], rows: Iterable[Dict], filename: str = "export.csv") -> StreamingResponse:
    """
    Stream CSV data as HTTP response

    A UTF-8 byte order mark is written first so spreadsheet programs open
    Arabic headers and descriptions correctly.

    Args:
        headers: List of column headers
        rows: Iterable of dictionaries with data rows
        filename: Filename for Content-Disposition header

    Returns:
        StreamingResponse with CSV content
    """
    def generate():
        output = io.StringIO()
        writer = csv.DictWriter(output, fieldnames=headers, quoting=csv.QUOTE_MINIMAL)

        writer.writeheader()
        content = "\ufeff" + output.getvalue()
        output.seek(0)
        output.truncate(0)
        yield content

        for row in rows:
            # Missing columns are written as empty strings
            row_data = {
                header: "" if row.get(header) is None else str(row.get(header))
                for header in headers
            }
            writer.writerow(row_data)
            content = output.getvalue()
            output.seek(0)
            output.truncate(0)
            yield content

    return StreamingResponse(
        generate(),
        media_type="text/csv; charset=utf-8",
        headers={
            "Content-Disposition": f'attachment; filename="{filename}"'
        }
    )
