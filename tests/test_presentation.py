from datetime import date, datetime

import pytest
from openpyxl import load_workbook

from conftest import part
from supply_tracking.presentation.console import (
    render_comparative_dashboard,
    render_project_analytics,
)
from supply_tracking.presentation.excel_export import (
    write_comparative_workbook,
    write_project_analytics_workbook,
)
from supply_tracking.project_reporting.aggregation import summarize_project
from supply_tracking.project_reporting.analytics_models import (
    ProjectAnalyticsResult,
    ProjectMachine,
    format_eta,
    part_status,
)
from supply_tracking.project_reporting.comparative.comparative_usecase import (
    build_comparative_dashboard,
)


@pytest.fixture
def summary():
    machines = [
        ProjectMachine(id="m1", name="Loader 1", end_date=date(2026, 1, 10)),
        ProjectMachine(id="m2", name="Loader 2"),
    ]
    records = [
        part("m1", "P1", 10, available=5, used=5, description="Filter"),
        part("m2", "P2", 4, latest_eta="2026-02-01"),
    ]
    return summarize_project("p1", "Mine Expansion", machines, records)


def test_console_detail(summary):
    result = ProjectAnalyticsResult(
        summary=summary,
        refresh_ok=False,
        warnings=["Analytics view refresh failed; showing cached data."],
        generated_at=datetime(2026, 2, 1, 8, 30),
    )
    text = render_project_analytics(result)

    assert "PROJECT ANALYTICS - Mine Expansion" in text
    assert "Overall Availability: 25.0%" in text
    assert "Overall Missing:      50.0%" in text
    assert "WARNING: Analytics view refresh failed" in text
    assert "Loader 1" in text
    assert "01-02-2026" in text
    assert "Available" in text


def test_console_detail_no_machines():
    empty = summarize_project("p9", "Empty", [], [])
    text = render_project_analytics(ProjectAnalyticsResult(summary=empty))

    assert "No machines in this project." in text


def test_console_comparative(summary):
    dash = build_comparative_dashboard(summary, today=date(2026, 2, 1))
    text = render_comparative_dashboard(dash)

    assert "COMPARATIVE DASHBOARD - Mine Expansion" in text
    assert "Most Delayed:  Loader 1 (22 days)" in text
    assert "Not set" in text


def test_detail_workbook(summary, tmp_path):
    path = write_project_analytics_workbook(summary, tmp_path, export_date=date(2026, 2, 1))

    assert path.name == "analyse-projet-Mine-Expansion-2026-02-01.xlsx"
    wb = load_workbook(path)
    assert wb.sheetnames == ["Summary", "Machine 1", "Machine 2"]

    ws = wb["Summary"]
    values = {ws.cell(row=r, column=1).value: ws.cell(row=r, column=2).value for r in range(1, ws.max_row + 1)}
    assert values["Project"] == "Mine Expansion"
    assert values["Total machines"] == 2
    assert values["Overall Availability"] == "25.00%"

    m1 = wb["Machine 1"]
    assert m1["B1"].value == "Loader 1"
    assert m1["A9"].value == "Part Number"
    assert m1["A10"].value == "P1"
    assert m1["C10"].value == 10
    assert m1["I9"].value == "Latest ETA"
    assert m1["J9"].value == "Status"
    assert m1["I10"].value == "-"
    assert m1["J10"].value == "Available"

    m2 = wb["Machine 2"]
    assert m2["I10"].value == "01-02-2026"
    assert m2["J10"].value == "Missing"


def test_comparative_workbook(summary, tmp_path):
    dash = build_comparative_dashboard(summary, today=date(2026, 2, 1))
    path = write_comparative_workbook(dash, tmp_path)

    assert path.name == "comparative-dashboard-Mine-Expansion-2026-02-01.xlsx"
    wb = load_workbook(path)
    assert wb.sheetnames == ["Summary", "Machine Comparison"]

    ws = wb["Machine Comparison"]
    assert ws["A1"].value == "Machine"
    assert ws["A2"].value == "Loader 1"
    assert ws["C2"].value == "Delayed"
    assert ws["D2"].value == 22
    assert ws["C3"].value == "On time"


# ------------------------------------------------------------
# Drill-down helpers
# ------------------------------------------------------------
@pytest.mark.parametrize(
    "raw, expected",
    [
        ("5/3/2026", "05-03-2026"),
        ("15/12/2025", "15-12-2025"),
        ("2026-02-01", "01-02-2026"),
        ("2026-02-01 00:00:00", "01-02-2026"),
        ("31/2/2026", "-"),
        ("5/3/26", "-"),
        ("garbage", "-"),
        ("", "-"),
        (None, "-"),
    ],
)
def test_format_eta(raw, expected):
    assert format_eta(raw) == expected


@pytest.mark.parametrize(
    "record, expected",
    [
        (part("m1", "P1", 4), "Missing"),
        (part("m1", "P1", 4, used=4), "Complete"),
        (part("m1", "P1", 4, available=2, used=2), "Available"),
        (part("m1", "P1", 4, used=1, in_transit=3), "In progress"),
        (part("m1", "P1", 4, used=4, quantity_missing=1), "Missing"),
    ],
)
def test_part_status(record, expected):
    assert part_status(record) == expected


def test_invalid_eta_shown_as_dash(tmp_path):
    machines = [ProjectMachine(id="m1", name="Loader 1")]
    records = [part("m1", "P1", 2, latest_eta="garbage")]
    s = summarize_project("p1", "Site", machines, records)

    text = render_project_analytics(ProjectAnalyticsResult(summary=s))
    assert "garbage" not in text

    path = write_project_analytics_workbook(s, tmp_path, export_date=date(2026, 2, 1))
    assert load_workbook(path)["Machine 1"]["I10"].value == "-"
