"""Shared helpers for chunking, paging and CSV export of backend rows.

Rows come back from PostgREST as plain dictionaries; these helpers keep the
slicing and CSV conventions in one place for the item, lead and report
services and for the download views.
"""

from __future__ import annotations

import csv
import io
from typing import Any, Callable, Iterable, Iterator, List, Sequence, Tuple

from django.http import HttpResponse

UTF8_BOM = "\ufeff"


def chunked(values: Sequence[Any], size: int) -> Iterator[List[Any]]:
    """Yield consecutive slices of ``values`` holding at most ``size`` items."""

    if size < 1:
        raise ValueError("chunk size must be positive")
    for start in range(0, len(values), size):
        yield list(values[start : start + size])


def page_range(page: int, limit: int) -> Tuple[int, int]:
    """Return the inclusive ``(start, end)`` row offsets for a 1-based page."""

    page = max(int(page), 1)
    limit = max(int(limit), 1)
    start = (page - 1) * limit
    return start, start + limit - 1


def rows_to_csv(
    rows: Iterable[Any],
    headers: Sequence[str],
    row_builder: Callable[[Any], Sequence[Any]],
    *,
    quote_all: bool = False,
    bom: bool = False,
) -> str:
    """Render ``rows`` as CSV text with ``headers`` as the first line.

    With ``quote_all`` every data field is quoted while the header line is
    left bare, matching the spreadsheet exports users already import.
    """

    buffer = io.StringIO()
    if bom:
        buffer.write(UTF8_BOM)
    csv.writer(buffer, lineterminator="\n").writerow(list(headers))
    writer = csv.writer(
        buffer,
        lineterminator="\n",
        quoting=csv.QUOTE_ALL if quote_all else csv.QUOTE_MINIMAL,
    )
    for obj in rows:
        writer.writerow(["" if v is None else str(v) for v in row_builder(obj)])
    return buffer.getvalue().rstrip("\n")


def csv_response(content: str, filename: str) -> HttpResponse:
    """Return ``HttpResponse`` delivering ``content`` as a CSV attachment."""

    response = HttpResponse(content, content_type="text/csv; charset=utf-8")
    response["Content-Disposition"] = f'attachment; filename="{filename}"'
    return response
