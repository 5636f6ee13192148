from __future__ import annotations

from datetime import date
from typing import List, Optional

from supply_tracking.project_reporting.analytics_models import (
    MachineSummary,
    ProjectSummary,
)
from supply_tracking.project_reporting.comparative.comparative_models import (
    ComparativeDashboard,
    MachineComparisonRow,
)

STATUS_ON_TIME = "on_time"
STATUS_DELAYED = "delayed"
STATUS_FILTERS = ("all", STATUS_ON_TIME, STATUS_DELAYED)

METRIC_ATTRS = {
    "availability": "availability_percentage",
    "usage": "usage_percentage",
    "transit": "transit_percentage",
    "invoiced": "invoiced_percentage",
    "missing": "missing_percentage",
}


def delay_days(end_date: date | None, today: date) -> int:
    """Whole days past the machine end date, 0 when not overdue or no end date."""
    if end_date is None or end_date >= today:
        return 0
    return (today - end_date).days


def machine_status(end_date: date | None, today: date) -> str:
    return STATUS_DELAYED if delay_days(end_date, today) > 0 else STATUS_ON_TIME


def _comparison_row(machine: MachineSummary, today: date, metric: str) -> MachineComparisonRow:
    delay = delay_days(machine.end_date, today)
    return MachineComparisonRow(
        machine_id=machine.machine_id,
        machine_name=machine.machine_name,
        end_date=machine.end_date,
        status=machine_status(machine.end_date, today),
        delay_days=delay,
        metric_value=getattr(machine, METRIC_ATTRS[metric]),
        availability_percentage=machine.availability_percentage,
        usage_percentage=machine.usage_percentage,
        transit_percentage=machine.transit_percentage,
        invoiced_percentage=machine.invoiced_percentage,
        missing_percentage=machine.missing_percentage,
        total_parts=machine.total_parts,
    )


def build_comparative_dashboard(
    summary: ProjectSummary,
    today: Optional[date] = None,
    status_filter: str = "all",
    metric: str = "availability",
) -> ComparativeDashboard:
    """
    Machine-vs-machine view over an already computed ProjectSummary.

    Rules:
    - DOES NOT recompute the five percentages
    - Overall figures are the project summary's, never re-averaged
    - Most advanced = highest usage over ALL machines (first wins on ties)
    - Most delayed  = highest delay over the filtered machines, None if none late
    """
    if status_filter not in STATUS_FILTERS:
        raise ValueError(f"Unknown status filter: {status_filter!r}")
    if metric not in METRIC_ATTRS:
        raise ValueError(f"Unknown metric: {metric!r}")

    today = today or date.today()

    all_rows = [_comparison_row(m, today, metric) for m in summary.machines]
    rows: List[MachineComparisonRow] = [
        r for r in all_rows if status_filter == "all" or r.status == status_filter
    ]

    on_time = sum(1 for r in rows if r.status == STATUS_ON_TIME)
    delayed = sum(1 for r in rows if r.status == STATUS_DELAYED)
    on_time_pct = (on_time / len(rows)) * 100 if rows else 0.0

    most_advanced = None
    for r in all_rows:
        if most_advanced is None or r.usage_percentage > most_advanced.usage_percentage:
            most_advanced = r

    most_delayed = None
    for r in rows:
        if r.delay_days > 0 and (most_delayed is None or r.delay_days > most_delayed.delay_days):
            most_delayed = r

    return ComparativeDashboard(
        project_id=summary.project_id,
        project_name=summary.project_name,
        as_of=today,
        status_filter=status_filter,
        metric=metric,
        total_machines=summary.total_machines,
        on_time_machines=on_time,
        delayed_machines=delayed,
        on_time_percentage=on_time_pct,
        overall_availability=summary.overall_availability,
        overall_usage=summary.overall_usage,
        overall_transit=summary.overall_transit,
        overall_invoiced=summary.overall_invoiced,
        overall_missing=summary.overall_missing,
        most_advanced=most_advanced,
        most_delayed=most_delayed,
        rows=rows,
    )
