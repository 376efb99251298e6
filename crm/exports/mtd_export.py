"""CSV and Excel downloads of the MTD sales report.

The Excel file is an HTML workbook, which Excel opens directly; pandas
renders the tables so number formatting stays consistent between the
summary and the daily rows.
"""

from __future__ import annotations

import html
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List

import pandas as pd
from django.utils import timezone

from crm.services.list_utils import UTF8_BOM
from crm.services.mtd_service import MTDReport

DAILY_COLUMNS = [
    ("day_of_month", "Day"),
    ("weekday_name", "Weekday"),
    ("current_year_sales", "Current Year Sales"),
    ("previous_year_sales", "Previous Year Sales"),
    ("running_total_current_year", "Running Total Current"),
    ("running_total_previous_year", "Running Total Previous"),
    ("variance_percent", "Variance %"),
    ("is_weekend", "Is Weekend"),
    ("is_holiday", "Is Holiday"),
]

AMOUNT_COLUMNS = (
    "current_year_sales",
    "previous_year_sales",
    "running_total_current_year",
    "running_total_previous_year",
)

EXCEL_FLAG_HEADERS = {"is_weekend": "Weekend", "is_holiday": "Holiday"}

EXCEL_STYLE = """
table { border-collapse: collapse; width: 100%; }
th, td { border: 1px solid #ddd; padding: 8px; text-align: left; }
th { background-color: #f2f2f2; font-weight: bold; }
"""


@dataclass
class ExportMetadata:
    year: int
    month: int
    salesperson: str
    include_delivery_fees: bool = False
    include_credit_memos: bool = True
    generated_at: datetime = field(default_factory=timezone.now)

    @property
    def salesperson_label(self) -> str:
        return "All Salespersons" if self.salesperson == "all" else self.salesperson

    @property
    def month_name(self) -> str:
        return datetime(self.year, self.month, 1).strftime("%B")

    @property
    def title(self) -> str:
        return f"MTD Sales Report - {self.month_name} {self.year}"

    def file_name(self, extension: str) -> str:
        return f"MTD_Report_{self.year}_{self.month:02d}_{self.salesperson}.{extension}"


def _yes_no(value: bool) -> str:
    return "Yes" if value else "No"


def _number(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else repr(float(value))


def _grouped(value: float) -> str:
    """Thousands-separated amount with at most three decimals."""

    return f"{float(value):,.3f}".rstrip("0").rstrip(".")


def _metadata_rows(meta: ExportMetadata) -> List[List[str]]:
    return [
        ["Salesperson", meta.salesperson_label],
        ["Generated", timezone.localtime(meta.generated_at).strftime("%Y-%m-%d %H:%M:%S")],
        ["Include Delivery Fees", _yes_no(meta.include_delivery_fees)],
        ["Include Credit Memos", _yes_no(meta.include_credit_memos)],
    ]


def _summary_rows(report: MTDReport, excel: bool = False) -> List[List[str]]:
    s = report.summary
    amount = _grouped if excel else _number
    suffix = "%" if excel else ""
    return [
        ["Current Year Total", amount(s.current_year_total)],
        ["Previous Year Total", amount(s.previous_year_total)],
        ["Variance %", f"{s.total_variance_percent:.2f}{suffix}"],
        ["Current Year Daily Average", amount(s.current_year_avg_daily)],
        ["Previous Year Daily Average", amount(s.previous_year_avg_daily)],
        ["Working Days Passed", str(s.working_days_passed)],
        ["Total Working Days", str(s.total_working_days)],
        ["Target Amount", amount(s.target_amount)],
        ["Target Achievement %", f"{s.target_achievement_percent:.2f}{suffix}"],
    ]


def daily_frame(report: MTDReport, excel: bool = False) -> pd.DataFrame:
    """Return the daily rows as a DataFrame with display column names.

    The CSV layout keeps plain numbers; the Excel layout groups thousands,
    suffixes the variance with ``%`` and uses the short flag headers.
    """

    frame = pd.DataFrame(report.data, columns=[key for key, _ in DAILY_COLUMNS])
    amount = _grouped if excel else _number
    for column in AMOUNT_COLUMNS:
        frame[column] = frame[column].map(amount)
    suffix = "%" if excel else ""
    frame["variance_percent"] = frame["variance_percent"].map(lambda v: f"{v:.2f}{suffix}")
    for flag in ("is_weekend", "is_holiday"):
        frame[flag] = frame[flag].map(_yes_no)
    headers = dict(DAILY_COLUMNS)
    if excel:
        headers.update(EXCEL_FLAG_HEADERS)
    return frame.rename(columns=headers)


def render_csv(report: MTDReport, meta: ExportMetadata) -> str:
    lines = [meta.title]
    lines += [f"{label}: {value}" for label, value in _metadata_rows(meta)]
    lines += ["", "SUMMARY"]
    lines += [f"{label},{value}" for label, value in _summary_rows(report)]
    lines += ["", "DAILY DATA"]
    frame = daily_frame(report)
    lines.append(frame.to_csv(index=False, lineterminator="\n").rstrip("\n"))
    return UTF8_BOM + "\n".join(lines)


def _pairs_table(rows: List[List[str]]) -> str:
    frame = pd.DataFrame(rows, columns=["Field", "Value"]).set_index("Field")
    frame.index.name = None
    return frame.to_html(header=False, border=0)


def render_excel(report: MTDReport, meta: ExportMetadata) -> str:
    daily = daily_frame(report, excel=True).to_html(index=False, border=0)
    body = "\n".join(
        [
            f"<h1>{html.escape(meta.title)}</h1>",
            _pairs_table(_metadata_rows(meta)),
            "<br>",
            "<h2>Summary</h2>",
            _pairs_table(_summary_rows(report, excel=True)),
            "<br>",
            "<h2>Daily Data</h2>",
            daily,
        ]
    )
    return (
        UTF8_BOM
        + '<html><head><meta charset="UTF-8"><style>'
        + EXCEL_STYLE
        + "</style></head><body>\n"
        + body
        + "\n</body></html>"
    )


def export_payload(report: MTDReport, meta: ExportMetadata, fmt: str) -> Dict[str, Any]:
    """Return ``content``, ``content_type`` and ``filename`` for ``fmt``."""

    if fmt == "csv":
        return {
            "content": render_csv(report, meta),
            "content_type": "text/csv; charset=utf-8",
            "filename": meta.file_name("csv"),
        }
    if fmt in ("xls", "excel"):
        return {
            "content": render_excel(report, meta),
            "content_type": "application/vnd.ms-excel; charset=utf-8",
            "filename": meta.file_name("xls"),
        }
    raise ValueError(f"Unsupported export format: {fmt}")
