"""
Project Analytics Use Case

Purpose:
- Refresh (best-effort) and load one project's machines + part rows
- Fold rows into machine summaries, then a de-duplicated project summary
- Hand back a value; the caller owns caching and display

Important:
- Refresh failure is a WARNING, not an error
- Fetch failure raises AnalyticsFetchError, no partial summary
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from supply_tracking.project_reporting.aggregation import summarize_project
from supply_tracking.project_reporting.analytics_fetcher import fetch_project_analytics
from supply_tracking.project_reporting.analytics_models import ProjectAnalyticsResult
from supply_tracking.utils.config import config
from supply_tracking.utils.logger import get_logger

logger = get_logger(__name__)

REFRESH_FAILED_WARNING = "Analytics view refresh failed; showing cached data."


def run_project_analytics(
    project_id: str,
    refresh: bool = True,
    merge_strategy: Optional[str] = None,
) -> ProjectAnalyticsResult:
    """
    Run project analytics for a single project.
    """
    strategy = merge_strategy or config.merge_strategy

    logger.info("Running Project Analytics | project=%s | merge=%s", project_id, strategy)

    data = fetch_project_analytics(project_id, refresh=refresh)

    summary = summarize_project(
        project_id=data.project_id,
        project_name=data.project_name,
        machines=data.machines,
        records=data.records,
        merge_strategy=strategy,
    )

    warnings: List[str] = []
    if not data.refresh_ok:
        warnings.append(REFRESH_FAILED_WARNING)

    if summary.total_machines == 0:
        logger.warning("Project %s has no machines", data.project_id)

    return ProjectAnalyticsResult(
        summary=summary,
        refresh_ok=data.refresh_ok,
        warnings=warnings,
        generated_at=datetime.now(),
    )
