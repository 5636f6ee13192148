from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import List, Optional


# ------------------------------------------------------------
# Machine header (from dbo.project_machines)
# ------------------------------------------------------------
@dataclass(frozen=True)
class ProjectMachine:
    id: str
    name: str
    start_date: Optional[date] = None
    end_date: Optional[date] = None


# ------------------------------------------------------------
# One row per machine x part (from the analytics view)
# ------------------------------------------------------------
@dataclass
class MachinePartRecord:
    machine_id: str
    part_number: str
    description: str = ""
    quantity_required: float = 0.0
    quantity_available: float = 0.0
    quantity_used: float = 0.0
    quantity_in_transit: float = 0.0   # backorders
    quantity_invoiced: float = 0.0     # shipped, not yet received
    quantity_missing: Optional[float] = None
    latest_eta: Optional[str] = None

    def __post_init__(self) -> None:
        # Rows without a sourced shortfall get the derived one
        if self.quantity_missing is None:
            self.quantity_missing = max(
                0.0,
                self.quantity_required
                - self.quantity_available
                - self.quantity_used
                - self.quantity_in_transit
                - self.quantity_invoiced,
            )


# ------------------------------------------------------------
# Drill-down display helpers
# ------------------------------------------------------------
PART_STATUS_MISSING = "Missing"
PART_STATUS_COMPLETE = "Complete"
PART_STATUS_AVAILABLE = "Available"
PART_STATUS_IN_PROGRESS = "In progress"


def part_status(record: MachinePartRecord) -> str:
    """Missing > Complete > Available > In progress, first match wins."""
    if (record.quantity_missing or 0) > 0:
        return PART_STATUS_MISSING
    if record.quantity_used >= record.quantity_required:
        return PART_STATUS_COMPLETE
    if record.quantity_available > 0:
        return PART_STATUS_AVAILABLE
    return PART_STATUS_IN_PROGRESS


def format_eta(text: Optional[str]) -> str:
    """
    ETA as DD-MM-YYYY, "-" when absent or not a real date.

    Accepts D/M/YYYY (as typed in the order sheets) and YYYY-MM-DD
    (date columns read back from the database).
    """
    if not text:
        return "-"
    text = str(text).strip()

    parts = text.split("/")
    if len(parts) == 3:
        day, month, year = (p.strip() for p in parts)
    else:
        iso = text[:10].split("-")
        if len(iso) != 3 or len(iso[0]) != 4:
            return "-"
        year, month, day = iso

    if len(year) != 4:
        return "-"

    try:
        parsed = date(int(year), int(month), int(day))
    except ValueError:
        return "-"

    return f"{parsed.day:02d}-{parsed.month:02d}-{parsed.year:04d}"


# ------------------------------------------------------------
# Project-wide merged quantities for one part number
# ------------------------------------------------------------
@dataclass
class ProjectPartRollup:
    part_number: str
    description: str
    quantity_required: float
    quantity_available: float
    quantity_used: float
    quantity_in_transit: float
    quantity_invoiced: float
    quantity_missing: float = 0.0
    machine_count: int = 1


# ------------------------------------------------------------
# Per-machine summary
# ------------------------------------------------------------
@dataclass
class MachineSummary:
    machine_id: str
    machine_name: str
    total_parts: int

    availability_percentage: float
    usage_percentage: float
    transit_percentage: float
    invoiced_percentage: float
    missing_percentage: float

    parts_details: List[MachinePartRecord] = field(default_factory=list)

    # Schedule metadata (comparative view only)
    start_date: Optional[date] = None
    end_date: Optional[date] = None


# ------------------------------------------------------------
# Project-wide summary
# ------------------------------------------------------------
@dataclass
class ProjectSummary:
    project_id: str
    project_name: str
    total_machines: int

    overall_availability: float
    overall_usage: float
    overall_transit: float
    overall_invoiced: float
    overall_missing: float

    machines: List[MachineSummary] = field(default_factory=list)

    total_unique_parts: int = 0
    parts: List[ProjectPartRollup] = field(default_factory=list)


# ------------------------------------------------------------
# Use case output (summary + non-fatal warnings)
# ------------------------------------------------------------
@dataclass
class ProjectAnalyticsResult:
    summary: ProjectSummary
    refresh_ok: bool = True
    warnings: List[str] = field(default_factory=list)

    # Metadata (not KPIs)
    generated_at: Optional[datetime] = None
