from __future__ import annotations

import io
from typing import List, Sequence

from supply_tracking.project_reporting.analytics_models import (
    ProjectAnalyticsResult,
    format_eta,
    part_status,
)
from supply_tracking.project_reporting.comparative.comparative_models import (
    ComparativeDashboard,
)


def _format_table(rows: Sequence[Sequence[object]], headers: List[str], max_rows: int | None = None) -> str:
    output = io.StringIO()
    rows = list(rows)

    if max_rows is not None and len(rows) > max_rows:
        shown = rows[:max_rows]
        omitted = len(rows) - max_rows
    else:
        shown = rows
        omitted = 0

    widths = [len(h) for h in headers]
    for row in shown:
        for i, v in enumerate(row):
            widths[i] = max(widths[i], len(str(v)))

    def fmt(r):
        return " ".join(str(r[i]).ljust(widths[i]) for i in range(len(headers)))

    print(fmt(headers), file=output)
    print(" ".join("-" * w for w in widths), file=output)
    for row in shown:
        print(fmt(row), file=output)

    if omitted:
        print(f"... ({omitted} more rows omitted) ...", file=output)

    return output.getvalue()


def _pct(value: float) -> str:
    return f"{value:.1f}%"


def _qty(value: float) -> str:
    return f"{value:g}"


def render_project_analytics(result: ProjectAnalyticsResult, show_parts: bool = True) -> str:
    s = result.summary

    out = io.StringIO()

    print("\n" + "=" * 80, file=out)
    print(f"PROJECT ANALYTICS - {s.project_name or s.project_id}", file=out)
    print("=" * 80, file=out)
    if result.generated_at:
        print(f"Generated: {result.generated_at:%Y-%m-%d %H:%M}", file=out)
    print(f"Total Machines:     {s.total_machines}", file=out)
    print(f"Unique Parts:       {s.total_unique_parts}", file=out)
    for warning in result.warnings:
        print(f"WARNING: {warning}", file=out)
    print(file=out)

    print(f"Overall Availability: {_pct(s.overall_availability)}", file=out)
    print(f"Overall Usage:        {_pct(s.overall_usage)}", file=out)
    print(f"Overall In Backorder: {_pct(s.overall_transit)}", file=out)
    print(f"Overall In Transit:   {_pct(s.overall_invoiced)}", file=out)
    print(f"Overall Missing:      {_pct(s.overall_missing)}", file=out)
    print(file=out)

    if not s.machines:
        print("No machines in this project.", file=out)
        return out.getvalue()

    print("== Machines ==\n", file=out)
    machine_rows = [
        (
            m.machine_name,
            m.total_parts,
            _pct(m.availability_percentage),
            _pct(m.usage_percentage),
            _pct(m.transit_percentage),
            _pct(m.invoiced_percentage),
            _pct(m.missing_percentage),
        )
        for m in s.machines
    ]
    print(
        _format_table(
            machine_rows,
            ["Machine", "Parts", "Avail", "Used", "Backorder", "Transit", "Missing"],
        ),
        file=out,
    )

    if show_parts:
        for m in s.machines:
            print(f"\n-- {m.machine_name} --\n", file=out)
            if not m.parts_details:
                print("No parts.", file=out)
                continue
            part_rows = [
                (
                    p.part_number,
                    p.description,
                    _qty(p.quantity_required),
                    _qty(p.quantity_available),
                    _qty(p.quantity_used),
                    _qty(p.quantity_in_transit),
                    _qty(p.quantity_invoiced),
                    _qty(p.quantity_missing),
                    format_eta(p.latest_eta),
                    part_status(p),
                )
                for p in m.parts_details
            ]
            print(
                _format_table(
                    part_rows,
                    ["Part", "Description", "Req", "Avail", "Used", "Backorder", "Transit", "Missing", "ETA", "Status"],
                    max_rows=50,
                ),
                file=out,
            )

    return out.getvalue()


def render_comparative_dashboard(dash: ComparativeDashboard) -> str:
    out = io.StringIO()

    print("\n" + "=" * 80, file=out)
    print(f"COMPARATIVE DASHBOARD - {dash.project_name or dash.project_id}", file=out)
    print("=" * 80, file=out)
    print(f"As Of:            {dash.as_of.isoformat()}", file=out)
    print(f"Filter:           {dash.status_filter}", file=out)
    print(f"Total Machines:   {dash.total_machines}", file=out)
    print(f"On Time:          {dash.on_time_machines} ({_pct(dash.on_time_percentage)})", file=out)
    print(f"Delayed:          {dash.delayed_machines}", file=out)
    print(file=out)

    print(f"Overall Availability: {_pct(dash.overall_availability)}", file=out)
    print(f"Overall Usage:        {_pct(dash.overall_usage)}", file=out)
    print(f"Overall In Backorder: {_pct(dash.overall_transit)}", file=out)
    print(f"Overall In Transit:   {_pct(dash.overall_invoiced)}", file=out)
    print(f"Overall Missing:      {_pct(dash.overall_missing)}", file=out)
    print(file=out)

    if dash.most_advanced:
        print(
            f"Most Advanced: {dash.most_advanced.machine_name} "
            f"({_pct(dash.most_advanced.usage_percentage)} used)",
            file=out,
        )
    if dash.most_delayed:
        print(
            f"Most Delayed:  {dash.most_delayed.machine_name} "
            f"({dash.most_delayed.delay_days} days)",
            file=out,
        )
    print(file=out)

    rows = [
        (
            r.machine_name,
            r.end_date.isoformat() if r.end_date else "Not set",
            "Delayed" if r.delay_days > 0 else "On time",
            r.delay_days,
            _pct(r.metric_value),
            r.total_parts,
        )
        for r in dash.rows
    ]
    print(
        _format_table(
            rows,
            ["Machine", "End Date", "Status", "Days Late", dash.metric.title(), "Parts"],
        ),
        file=out,
    )

    return out.getvalue()
