from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import List, Optional


@dataclass(frozen=True)
class MachineComparisonRow:
    machine_id: str
    machine_name: str
    end_date: date | None
    status: str            # "on_time" | "delayed"
    delay_days: int
    metric_value: float    # selected metric, percent

    availability_percentage: float
    usage_percentage: float
    transit_percentage: float
    invoiced_percentage: float
    missing_percentage: float
    total_parts: int


@dataclass(frozen=True)
class ComparativeDashboard:
    project_id: str
    project_name: str
    as_of: date
    status_filter: str
    metric: str

    total_machines: int
    on_time_machines: int
    delayed_machines: int
    on_time_percentage: float

    overall_availability: float
    overall_usage: float
    overall_transit: float
    overall_invoiced: float
    overall_missing: float

    most_advanced: Optional[MachineComparisonRow]
    most_delayed: Optional[MachineComparisonRow]

    rows: List[MachineComparisonRow]
