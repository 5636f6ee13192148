from __future__ import annotations

import argparse
import sys
from pathlib import Path

from supply_tracking.presentation.console import (
    render_comparative_dashboard,
    render_project_analytics,
)
from supply_tracking.presentation.excel_export import (
    write_comparative_workbook,
    write_project_analytics_workbook,
)
from supply_tracking.project_reporting.analytics_fetcher import AnalyticsFetchError
from supply_tracking.project_reporting.comparative.comparative_usecase import (
    METRIC_ATTRS,
    STATUS_FILTERS,
    build_comparative_dashboard,
)
from supply_tracking.project_reporting.project_analytics_usecase import (
    run_project_analytics,
)
from supply_tracking.utils.config import MERGE_STRATEGIES, config


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Project Analytics (availability / usage / transit / missing)"
    )

    parser.add_argument(
        "--project-id",
        type=str,
        required=True,
        help="Project identifier.",
    )

    parser.add_argument(
        "--no-refresh",
        action="store_true",
        help="Skip the analytics view refresh and read the view as-is.",
    )

    parser.add_argument(
        "--view",
        choices=["detail", "comparative"],
        default="detail",
        help="Detail (per machine + parts) or comparative (machine vs machine).",
    )

    parser.add_argument(
        "--status",
        choices=list(STATUS_FILTERS),
        default="all",
        help="Comparative view only: filter machines by schedule status.",
    )

    parser.add_argument(
        "--metric",
        choices=list(METRIC_ATTRS),
        default="availability",
        help="Comparative view only: metric shown per machine.",
    )

    parser.add_argument(
        "--merge-strategy",
        choices=list(MERGE_STRATEGIES),
        default=None,
        help="How shared-stock quantities merge across machines. Defaults to PART_MERGE_STRATEGY.",
    )

    parser.add_argument(
        "--export",
        action="store_true",
        help="Write the Excel workbook for the selected view.",
    )

    parser.add_argument(
        "--output-dir",
        type=str,
        default=None,
        help="Export directory. Defaults to EXPORT_DIR.",
    )

    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        result = run_project_analytics(
            args.project_id,
            refresh=not args.no_refresh,
            merge_strategy=args.merge_strategy,
        )
    except (AnalyticsFetchError, ValueError) as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return 1

    output_dir = Path(args.output_dir) if args.output_dir else config.EXPORT_DIR

    if args.view == "comparative":
        dash = build_comparative_dashboard(
            result.summary,
            status_filter=args.status,
            metric=args.metric,
        )
        for warning in result.warnings:
            print(f"WARNING: {warning}")
        print(render_comparative_dashboard(dash))
        if args.export:
            path = write_comparative_workbook(dash, output_dir)
            print(f"Exported: {path}")
    else:
        print(render_project_analytics(result))
        if args.export:
            path = write_project_analytics_workbook(result.summary, output_dir)
            print(f"Exported: {path}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
