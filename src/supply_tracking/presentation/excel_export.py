# src/supply_tracking/presentation/excel_export.py
"""
Spreadsheet exports for the project analytics screens.

- Detail workbook:      Summary + one "Machine N" sheet per machine
- Comparative workbook: Summary + "Machine Comparison"

Percentages are written as text with two decimals ("12.50%").
"""

from __future__ import annotations

from datetime import date
from pathlib import Path
from typing import List, Optional

import pandas as pd
from openpyxl.styles import Font
from openpyxl.utils import get_column_letter

from supply_tracking.project_reporting.analytics_models import (
    ProjectSummary,
    format_eta,
    part_status,
)
from supply_tracking.project_reporting.comparative.comparative_models import (
    ComparativeDashboard,
)
from supply_tracking.utils.logger import get_logger

logger = get_logger(__name__)

PART_HEADERS = [
    "Part Number",
    "Description",
    "Qty Required",
    "Qty Available",
    "Qty Used",
    "Qty In Backorder",
    "Qty In Transit",
    "Qty Missing",
    "Latest ETA",
    "Status",
]

COMPARISON_HEADERS = [
    "Machine",
    "End date",
    "Status",
    "Days delayed",
    "Availability %",
    "Usage %",
    "In Backorder %",
    "In Transit %",
    "Missing %",
    "Total parts",
]


def _pct(value: float) -> str:
    return f"{value:.2f}%"


def _safe_name(name: str) -> str:
    cleaned = "".join(c if c.isalnum() or c in "-_" else "-" for c in (name or "").strip())
    return cleaned.strip("-") or "project"


def _autosize_columns(ws):
    """
    Autosize Excel columns based on content length.
    """
    for col in ws.columns:
        max_len = 0
        col_letter = get_column_letter(col[0].column)
        for cell in col:
            if cell.value is not None:
                max_len = max(max_len, len(str(cell.value)))
        ws.column_dimensions[col_letter].width = min(max_len + 2, 40)


def _bold_rows(ws, row_numbers):
    for r in row_numbers:
        for c in range(1, ws.max_column + 1):
            ws.cell(row=r, column=c).font = Font(bold=True)


def _write_sheet(writer, sheet_name: str, rows: List[list], bold_rows=(), freeze: Optional[str] = None):
    pd.DataFrame(rows).to_excel(writer, sheet_name=sheet_name, header=False, index=False)
    ws = writer.book[sheet_name]
    _bold_rows(ws, bold_rows)
    if freeze:
        ws.freeze_panes = freeze
    _autosize_columns(ws)


def _summary_rows(summary: ProjectSummary) -> List[list]:
    return [
        ["Project", summary.project_name],
        ["Total machines", summary.total_machines],
        ["Unique parts", summary.total_unique_parts],
        [""],
        ["Global Statistics"],
        ["Overall Availability", _pct(summary.overall_availability)],
        ["Overall Usage", _pct(summary.overall_usage)],
        ["Overall In Backorder", _pct(summary.overall_transit)],
        ["Overall In Transit", _pct(summary.overall_invoiced)],
        ["Overall Missing", _pct(summary.overall_missing)],
    ]


def write_project_analytics_workbook(
    summary: ProjectSummary,
    output_dir: Path,
    export_date: Optional[date] = None,
) -> Path:
    """
    Write the detail workbook: Summary + one sheet per machine with its parts.
    """
    export_date = export_date or date.today()
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    file_path = output_dir / f"analyse-projet-{_safe_name(summary.project_name)}-{export_date.isoformat()}.xlsx"

    with pd.ExcelWriter(file_path, engine="openpyxl") as writer:
        _write_sheet(writer, "Summary", _summary_rows(summary), bold_rows=(1, 5))

        for index, machine in enumerate(summary.machines, start=1):
            rows = [
                ["Machine", machine.machine_name],
                ["Total parts", machine.total_parts],
                ["Availability", _pct(machine.availability_percentage)],
                ["Usage", _pct(machine.usage_percentage)],
                ["In Backorder", _pct(machine.transit_percentage)],
                ["In Transit", _pct(machine.invoiced_percentage)],
                ["Missing", _pct(machine.missing_percentage)],
                [""],
                PART_HEADERS,
            ]
            header_row = len(rows)
            for p in machine.parts_details:
                rows.append([
                    p.part_number,
                    p.description,
                    p.quantity_required,
                    p.quantity_available,
                    p.quantity_used,
                    p.quantity_in_transit,
                    p.quantity_invoiced,
                    p.quantity_missing,
                    format_eta(p.latest_eta),
                    part_status(p),
                ])
            _write_sheet(
                writer,
                f"Machine {index}",
                rows,
                bold_rows=(1, header_row),
                freeze=f"A{header_row + 1}",
            )

    logger.info("Project analytics workbook written: %s", file_path)
    return file_path


def write_comparative_workbook(
    dash: ComparativeDashboard,
    output_dir: Path,
) -> Path:
    """
    Write the comparative workbook: Summary + Machine Comparison.
    """
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    file_path = output_dir / f"comparative-dashboard-{_safe_name(dash.project_name)}-{dash.as_of.isoformat()}.xlsx"

    summary_rows = [
        ["Comparative Dashboard - Project", dash.project_name],
        ["Export date", dash.as_of.isoformat()],
        [""],
        ["Overview"],
        ["Total machines", dash.total_machines],
        ["Machines on time", dash.on_time_machines],
        ["Delayed machines", dash.delayed_machines],
        [""],
        ["Global Statistics"],
        ["Overall Availability", _pct(dash.overall_availability)],
        ["Overall Usage", _pct(dash.overall_usage)],
        ["Overall In Backorder", _pct(dash.overall_transit)],
        ["Overall In Transit", _pct(dash.overall_invoiced)],
        ["Overall Missing", _pct(dash.overall_missing)],
    ]

    comparison_rows: List[list] = [COMPARISON_HEADERS]
    for r in dash.rows:
        comparison_rows.append([
            r.machine_name,
            r.end_date.isoformat() if r.end_date else "Not set",
            "Delayed" if r.delay_days > 0 else "On time",
            r.delay_days,
            f"{r.availability_percentage:.2f}",
            f"{r.usage_percentage:.2f}",
            f"{r.transit_percentage:.2f}",
            f"{r.invoiced_percentage:.2f}",
            f"{r.missing_percentage:.2f}",
            r.total_parts,
        ])

    with pd.ExcelWriter(file_path, engine="openpyxl") as writer:
        _write_sheet(writer, "Summary", summary_rows, bold_rows=(1, 4, 9))
        _write_sheet(writer, "Machine Comparison", comparison_rows, bold_rows=(1,), freeze="B2")

    logger.info("Comparative workbook written: %s", file_path)
    return file_path
