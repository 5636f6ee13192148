from datetime import date

import pytest

from conftest import part
from supply_tracking.project_reporting.aggregation import summarize_project
from supply_tracking.project_reporting.analytics_models import ProjectMachine
from supply_tracking.project_reporting.comparative.comparative_usecase import (
    build_comparative_dashboard,
    delay_days,
    machine_status,
)

TODAY = date(2026, 2, 1)


@pytest.fixture
def summary():
    machines = [
        ProjectMachine(id="m1", name="Crusher", end_date=date(2026, 1, 22)),    # 10 days late
        ProjectMachine(id="m2", name="Conveyor", end_date=date(2026, 3, 1)),    # on time
        ProjectMachine(id="m3", name="Screen", end_date=date(2026, 1, 29)),     # 3 days late
        ProjectMachine(id="m4", name="Pump"),                                   # no end date
    ]
    records = [
        part("m1", "A", 10, used=2),
        part("m2", "B", 10, used=8, available=2),
        part("m3", "C", 10, used=8),
        part("m4", "D", 10, available=10),
    ]
    return summarize_project("p1", "Quarry", machines, records)


def test_delay_days():
    assert delay_days(None, TODAY) == 0
    assert delay_days(TODAY, TODAY) == 0
    assert delay_days(date(2026, 3, 1), TODAY) == 0
    assert delay_days(date(2026, 1, 30), TODAY) == 2


def test_machine_status():
    assert machine_status(date(2026, 1, 31), TODAY) == "delayed"
    assert machine_status(None, TODAY) == "on_time"


def test_dashboard_counts_and_leaders(summary):
    dash = build_comparative_dashboard(summary, today=TODAY)

    assert dash.total_machines == 4
    assert dash.on_time_machines == 2
    assert dash.delayed_machines == 2
    assert dash.on_time_percentage == pytest.approx(50.0)
    # first of the two 80% machines wins
    assert dash.most_advanced.machine_name == "Conveyor"
    assert dash.most_delayed.machine_name == "Crusher"
    assert dash.most_delayed.delay_days == 10


def test_dashboard_overall_figures_come_from_summary(summary):
    dash = build_comparative_dashboard(summary, today=TODAY)

    assert dash.overall_usage == summary.overall_usage
    assert dash.overall_availability == summary.overall_availability


def test_dashboard_filter_and_metric(summary):
    dash = build_comparative_dashboard(summary, today=TODAY, status_filter="on_time", metric="usage")

    assert [r.machine_name for r in dash.rows] == ["Conveyor", "Pump"]
    assert dash.delayed_machines == 0
    assert dash.on_time_percentage == pytest.approx(100.0)
    assert dash.most_delayed is None
    assert dash.rows[0].metric_value == pytest.approx(80.0)


def test_dashboard_without_machines():
    empty = summarize_project("p1", "Empty", [], [])
    dash = build_comparative_dashboard(empty, today=TODAY)

    assert dash.rows == []
    assert dash.on_time_percentage == 0.0
    assert dash.most_advanced is None
    assert dash.most_delayed is None


def test_dashboard_rejects_unknown_options(summary):
    with pytest.raises(ValueError):
        build_comparative_dashboard(summary, today=TODAY, status_filter="late")
    with pytest.raises(ValueError):
        build_comparative_dashboard(summary, today=TODAY, metric="cost")
