"""
Project analytics aggregation.

Two folds:
- machine rows    -> MachineSummary  (mean of per-part capped ratios)
- machine summary -> ProjectSummary  (parts de-duplicated by part_number,
                                      then the same capped mean)

Rules:
- Each part contributes at most 100 points to any metric
- Parts with quantity_required == 0 are left out of numerator AND denominator
- No I/O, no state: same input, same output
"""

from __future__ import annotations

import math
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

import pandas as pd

from supply_tracking.project_reporting.analytics_models import (
    MachinePartRecord,
    MachineSummary,
    ProjectMachine,
    ProjectPartRollup,
    ProjectSummary,
)


# metric name -> quantity field
METRIC_FIELDS: Dict[str, str] = {
    "availability": "quantity_available",
    "usage": "quantity_used",
    "transit": "quantity_in_transit",
    "invoiced": "quantity_invoiced",
    "missing": "quantity_missing",
}

MERGE_FIRST = "first"
MERGE_MAX = "max"

# Quantities that are not additive across machines sharing a part
_SHARED_STOCK_FIELDS = ("quantity_available", "quantity_in_transit", "quantity_invoiced")


# ------------------------------------------------------------
# Row coercion
# ------------------------------------------------------------
def to_quantity(value: Any) -> float:
    """Null-safe, non-negative numeric cast. Anything unusable becomes 0."""
    if value is None:
        return 0.0
    try:
        if pd.isna(value):
            return 0.0
    except (TypeError, ValueError):
        return 0.0
    try:
        qty = float(value)
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(qty) or qty < 0:
        return 0.0
    return qty


def _optional_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    try:
        if pd.isna(value):
            return None
    except (TypeError, ValueError):
        pass
    text = str(value).strip()
    return text or None


def normalize_id(value: Any) -> Optional[str]:
    """
    Stable string form of a database id, None when the id is NULL.

    Integer ids read back as float64 (a NULL anywhere in the column) map to
    the same string as the int: 5.0 -> "5".
    """
    # numpy.float64 is a float subclass; NaN is not integral
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return _optional_text(value)


def record_from_row(row: Mapping[str, Any]) -> MachinePartRecord:
    """Build a MachinePartRecord from a view row (dict or pandas Series)."""
    missing = row.get("quantity_missing")
    sourced_missing = None if _optional_text(missing) is None else to_quantity(missing)

    return MachinePartRecord(
        machine_id=normalize_id(row.get("machine_id")) or "",
        part_number=str(row.get("part_number") or "").strip(),
        description=_optional_text(row.get("description")) or "",
        quantity_required=to_quantity(row.get("quantity_required")),
        quantity_available=to_quantity(row.get("quantity_available")),
        quantity_used=to_quantity(row.get("quantity_used")),
        quantity_in_transit=to_quantity(row.get("quantity_in_transit")),
        quantity_invoiced=to_quantity(row.get("quantity_invoiced")),
        quantity_missing=sourced_missing,
        latest_eta=_optional_text(row.get("latest_eta")),
    )


# ------------------------------------------------------------
# Capped ratio + mean
# ------------------------------------------------------------
def capped_ratio(quantity: float, required: float) -> float:
    """Percent of `required` covered by `quantity`, clamped to [0, 100]."""
    if required <= 0:
        return 0.0
    return max(0.0, min(100.0, (quantity / required) * 100))


def capped_means(parts: Iterable[Any]) -> Dict[str, float]:
    """
    Mean of per-part capped ratios for every metric.

    `parts` only needs the quantity_* attributes, so both MachinePartRecord
    and ProjectPartRollup are accepted.
    """
    totals = {metric: 0.0 for metric in METRIC_FIELDS}
    demand_bearing = 0

    for part in parts:
        required = part.quantity_required
        if required <= 0:
            continue
        demand_bearing += 1
        for metric, attr in METRIC_FIELDS.items():
            totals[metric] += capped_ratio(getattr(part, attr), required)

    if demand_bearing == 0:
        return {metric: 0.0 for metric in METRIC_FIELDS}

    return {metric: total / demand_bearing for metric, total in totals.items()}


# ------------------------------------------------------------
# Per-machine fold
# ------------------------------------------------------------
def summarize_machine(
    machine: ProjectMachine,
    records: Sequence[MachinePartRecord],
) -> MachineSummary:
    means = capped_means(records)

    return MachineSummary(
        machine_id=machine.id,
        machine_name=machine.name,
        total_parts=len(records),
        availability_percentage=means["availability"],
        usage_percentage=means["usage"],
        transit_percentage=means["transit"],
        invoiced_percentage=means["invoiced"],
        missing_percentage=means["missing"],
        parts_details=list(records),
        start_date=machine.start_date,
        end_date=machine.end_date,
    )


# ------------------------------------------------------------
# Cross-machine fold
# ------------------------------------------------------------
def merge_project_parts(
    machines: Sequence[MachineSummary],
    strategy: str = MERGE_FIRST,
) -> List[ProjectPartRollup]:
    """
    De-duplicate parts across machines.

    required / used are summed. available / in_transit / invoiced are shared
    stock: 'first' keeps the first record seen (machine order, then row order),
    'max' keeps the largest. missing is recomputed from the merged values.
    """
    if strategy not in (MERGE_FIRST, MERGE_MAX):
        raise ValueError(f"Unknown merge strategy: {strategy!r}")

    merged: Dict[str, ProjectPartRollup] = {}

    for machine in machines:
        for part in machine.parts_details:
            existing = merged.get(part.part_number)
            if existing is None:
                merged[part.part_number] = ProjectPartRollup(
                    part_number=part.part_number,
                    description=part.description,
                    quantity_required=part.quantity_required,
                    quantity_available=part.quantity_available,
                    quantity_used=part.quantity_used,
                    quantity_in_transit=part.quantity_in_transit,
                    quantity_invoiced=part.quantity_invoiced,
                )
                continue

            existing.quantity_required += part.quantity_required
            existing.quantity_used += part.quantity_used
            existing.machine_count += 1
            if not existing.description:
                existing.description = part.description

            if strategy == MERGE_MAX:
                for attr in _SHARED_STOCK_FIELDS:
                    setattr(existing, attr, max(getattr(existing, attr), getattr(part, attr)))

    for rollup in merged.values():
        rollup.quantity_missing = max(
            0.0,
            rollup.quantity_required
            - rollup.quantity_available
            - rollup.quantity_used
            - rollup.quantity_in_transit
            - rollup.quantity_invoiced,
        )

    return list(merged.values())


def summarize_project(
    project_id: str,
    project_name: str,
    machines: Sequence[ProjectMachine],
    records: Sequence[MachinePartRecord],
    merge_strategy: str = MERGE_FIRST,
) -> ProjectSummary:
    """
    Build the full ProjectSummary from machines + flattened view rows.

    Rows whose machine_id is not one of `machines` are ignored.
    """
    by_machine: Dict[str, List[MachinePartRecord]] = {m.id: [] for m in machines}
    for record in records:
        if record.machine_id in by_machine:
            by_machine[record.machine_id].append(record)

    machine_summaries = [summarize_machine(m, by_machine[m.id]) for m in machines]

    parts = merge_project_parts(machine_summaries, strategy=merge_strategy)
    means = capped_means(parts)

    return ProjectSummary(
        project_id=project_id,
        project_name=project_name,
        total_machines=len(machines),
        overall_availability=means["availability"],
        overall_usage=means["usage"],
        overall_transit=means["transit"],
        overall_invoiced=means["invoiced"],
        overall_missing=means["missing"],
        machines=machine_summaries,
        total_unique_parts=len(parts),
        parts=parts,
    )
