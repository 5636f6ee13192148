"""
Analytics fetcher.

Loads everything the aggregation needs for ONE project:
- project header (name)
- machines, creation order
- (machine, part) rows from the analytics view

The view refresh is best-effort: a failure is logged and reported back through
`refresh_ok`, the reads still run against whatever the view holds.
A failure on any read is fatal: nothing partial is returned.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, List

import pandas as pd

from supply_tracking.data import projects as project_data
from supply_tracking.project_reporting.aggregation import normalize_id, record_from_row
from supply_tracking.project_reporting.analytics_models import (
    MachinePartRecord,
    ProjectMachine,
)
from supply_tracking.utils.logger import get_logger

logger = get_logger(__name__)


class AnalyticsFetchError(RuntimeError):
    """Machines or analytics rows could not be read."""


class ProjectNotFoundError(AnalyticsFetchError):
    """No project with the requested id."""


@dataclass
class ProjectAnalyticsData:
    project_id: str
    project_name: str
    machines: List[ProjectMachine] = field(default_factory=list)
    records: List[MachinePartRecord] = field(default_factory=list)
    refresh_ok: bool = True


def _to_date(value: Any):
    if value is None:
        return None
    ts = pd.to_datetime(value, errors="coerce")
    if pd.isna(ts):
        return None
    return ts.date()


def machine_from_row(row) -> ProjectMachine:
    return ProjectMachine(
        id=normalize_id(row.get("id")) or "",
        name=str(row.get("name") or ""),
        start_date=_to_date(row.get("start_date")),
        end_date=_to_date(row.get("end_date")),
    )


def refresh_views() -> bool:
    """Run the view refresh. Returns False (never raises) when it fails."""
    try:
        project_data.refresh_analytics_views()
        return True
    except Exception:
        logger.warning("Analytics view refresh failed; continuing with cached data", exc_info=True)
        return False


def fetch_project_analytics(project_id: str, refresh: bool = True) -> ProjectAnalyticsData:
    if project_id is None or not str(project_id).strip():
        raise ValueError("project_id is required")
    project_id = str(project_id).strip()

    # Refresh strictly before any read
    refresh_ok = refresh_views() if refresh else True

    try:
        df_project = project_data.get_project(project_id)
        df_machines = project_data.get_project_machines(project_id)
        df_rows = project_data.get_project_analytics_rows(project_id)
    except Exception as exc:
        logger.error("Failed to load analytics for project=%s", project_id, exc_info=True)
        raise AnalyticsFetchError(f"Could not load analytics for project {project_id}: {exc}") from exc

    if df_project is None or df_project.empty:
        raise ProjectNotFoundError(f"Project {project_id} not found")

    project_name = str(df_project.iloc[0].get("name") or "")

    machines: List[ProjectMachine] = []
    if df_machines is not None and not df_machines.empty:
        machines = [
            machine_from_row(r)
            for _, r in df_machines.iterrows()
            if normalize_id(r.get("id")) is not None
        ]

    machine_ids = {m.id for m in machines}
    records: List[MachinePartRecord] = []
    if df_rows is not None and not df_rows.empty:
        skipped = 0
        for _, r in df_rows.iterrows():
            if normalize_id(r.get("machine_id")) is None:
                skipped += 1
                continue
            record = record_from_row(r)
            if record.machine_id in machine_ids:
                records.append(record)
        if skipped:
            logger.warning("Skipped %d analytics rows with no machine_id | project=%s", skipped, project_id)

    logger.info(
        "Loaded project=%s | machines=%d | part rows=%d | refresh_ok=%s",
        project_id,
        len(machines),
        len(records),
        refresh_ok,
    )

    return ProjectAnalyticsData(
        project_id=project_id,
        project_name=project_name,
        machines=machines,
        records=records,
        refresh_ok=refresh_ok,
    )
