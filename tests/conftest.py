from datetime import date

import pandas as pd
import pytest

from supply_tracking.data import projects as project_data
from supply_tracking.project_reporting.analytics_models import (
    MachinePartRecord,
    ProjectMachine,
)


def part(machine_id, part_number, required, available=0, used=0, in_transit=0, invoiced=0, **kwargs):
    return MachinePartRecord(
        machine_id=machine_id,
        part_number=part_number,
        quantity_required=required,
        quantity_available=available,
        quantity_used=used,
        quantity_in_transit=in_transit,
        quantity_invoiced=invoiced,
        **kwargs,
    )


@pytest.fixture
def machines():
    return [
        ProjectMachine(id="m1", name="Loader 1", end_date=date(2026, 1, 10)),
        ProjectMachine(id="m2", name="Loader 2", end_date=date(2026, 3, 1)),
    ]


@pytest.fixture
def fake_store(monkeypatch):
    """
    In-memory stand-in for the database functions in supply_tracking.data.projects.

    Tests fill `store` then call the fetcher/use case; `calls` records order.
    """
    store = {
        "project": pd.DataFrame([{"id": "p1", "name": "Mine Expansion"}]),
        "machines": pd.DataFrame(
            [
                {"id": "m1", "project_id": "p1", "name": "Loader 1", "start_date": None, "end_date": "2026-01-10"},
                {"id": "m2", "project_id": "p1", "name": "Loader 2", "start_date": None, "end_date": None},
            ]
        ),
        "rows": pd.DataFrame(
            [
                {"machine_id": "m1", "part_number": "P1", "description": "Filter",
                 "quantity_required": 10, "quantity_available": 5, "quantity_used": 5,
                 "quantity_in_transit": 0, "quantity_invoiced": 0, "quantity_missing": 0,
                 "latest_eta": None},
                {"machine_id": "m2", "part_number": "P2", "description": None,
                 "quantity_required": 4, "quantity_available": 0, "quantity_used": 0,
                 "quantity_in_transit": 0, "quantity_invoiced": 0, "quantity_missing": 4,
                 "latest_eta": "2026-02-01"},
            ]
        ),
        "refresh_error": None,
        "read_error": None,
        "calls": [],
    }

    def refresh():
        store["calls"].append("refresh")
        if store["refresh_error"]:
            raise store["refresh_error"]

    def reader(key):
        def _read(project_id):
            store["calls"].append(key)
            if store["read_error"]:
                raise store["read_error"]
            return store[key]
        return _read

    monkeypatch.setattr(project_data, "refresh_analytics_views", refresh)
    monkeypatch.setattr(project_data, "get_project", reader("project"))
    monkeypatch.setattr(project_data, "get_project_machines", reader("machines"))
    monkeypatch.setattr(project_data, "get_project_analytics_rows", reader("rows"))

    return store
