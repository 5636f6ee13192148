# src/supply_tracking/data/projects.py
"""
Project data access layer.

Sources:
- dbo.projects                          (project header)
- dbo.project_machines                  (machines, creation order)
- dbo.mv_project_analytics_complete     (per machine x part quantities)
- dbo.refresh_project_analytics_views   (recomputes the view)
"""

from __future__ import annotations

from contextlib import contextmanager

import pandas as pd

from supply_tracking.utils.config import config


MACHINE_COLUMNS = [
    "id",
    "project_id",
    "name",
    "description",
    "start_date",
    "end_date",
    "created_at",
]

ANALYTICS_COLUMNS = [
    "project_id",
    "machine_id",
    "part_number",
    "description",
    "quantity_required",
    "quantity_available",
    "quantity_used",
    "quantity_in_transit",
    "quantity_invoiced",
    "quantity_missing",
    "latest_eta",
]


@contextmanager
def get_connection():
    # Driver import deferred: unixODBC is only needed once a query runs
    import pyodbc

    conn = pyodbc.connect(config.DATABASE_CONNECTION_STRING)
    try:
        yield conn
    finally:
        conn.close()


def get_project(project_id: str) -> pd.DataFrame:
    """Single project header row (empty frame when the project does not exist)."""
    sql = """
        SELECT id, name, description, status, start_date, end_date
        FROM dbo.projects
        WHERE id = ?
    """
    with get_connection() as conn:
        return pd.read_sql(sql, conn, params=[project_id])


def get_project_machines(project_id: str) -> pd.DataFrame:
    """Machines of a project in creation order."""
    sql = f"""
        SELECT {", ".join(MACHINE_COLUMNS)}
        FROM dbo.project_machines
        WHERE project_id = ?
        ORDER BY created_at ASC
    """
    with get_connection() as conn:
        return pd.read_sql(sql, conn, params=[project_id])


def get_project_analytics_rows(project_id: str) -> pd.DataFrame:
    """
    Flattened (machine, part) rows from the precomputed analytics view.

    quantity_in_transit = backorder quantity
    quantity_invoiced   = invoiced, shipped, not yet received
    """
    sql = f"""
        SELECT {", ".join(ANALYTICS_COLUMNS)}
        FROM {config.ANALYTICS_VIEW}
        WHERE project_id = ?
    """
    with get_connection() as conn:
        return pd.read_sql(sql, conn, params=[project_id])


def refresh_analytics_views() -> None:
    """Recompute the materialized analytics data. Raises on driver failure."""
    with get_connection() as conn:
        cursor = conn.cursor()
        cursor.execute(f"EXEC {config.ANALYTICS_REFRESH_PROC}")
        conn.commit()
