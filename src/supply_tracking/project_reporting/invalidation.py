"""
Explicit change signal for project analytics.

Callers that edit machines or parts call `invalidate(project_id)` instead of
re-polling on a timer. Subscribers receive the recomputed result.

LatestResultCache keeps one result per project. Each computation takes a
generation token first; storing a result whose token is older than the newest
issued token is a no-op (last write wins).
"""

from __future__ import annotations

import threading
from typing import Callable, Dict, List, Optional

from supply_tracking.project_reporting.analytics_models import ProjectAnalyticsResult
from supply_tracking.project_reporting.project_analytics_usecase import run_project_analytics
from supply_tracking.utils.logger import get_logger

logger = get_logger(__name__)

Subscriber = Callable[[ProjectAnalyticsResult], None]


class LatestResultCache:
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._generations: Dict[str, int] = {}
        self._results: Dict[str, ProjectAnalyticsResult] = {}

    def next_generation(self, project_id: str) -> int:
        with self._lock:
            gen = self._generations.get(project_id, 0) + 1
            self._generations[project_id] = gen
            return gen

    def store(self, project_id: str, generation: int, result: ProjectAnalyticsResult) -> bool:
        """Keep `result` unless a newer computation was started. Returns True if kept."""
        with self._lock:
            if generation < self._generations.get(project_id, 0):
                logger.debug("Discarding stale analytics | project=%s gen=%d", project_id, generation)
                return False
            self._results[project_id] = result
            return True

    def get(self, project_id: str) -> Optional[ProjectAnalyticsResult]:
        with self._lock:
            return self._results.get(project_id)

    def clear(self, project_id: str) -> None:
        with self._lock:
            self._results.pop(project_id, None)


class AnalyticsInvalidator:
    def __init__(
        self,
        compute: Callable[[str], ProjectAnalyticsResult] = run_project_analytics,
        cache: Optional[LatestResultCache] = None,
    ) -> None:
        self._compute = compute
        self.cache = cache or LatestResultCache()
        self._lock = threading.Lock()
        self._subscribers: Dict[str, List[Subscriber]] = {}

    def subscribe(self, project_id: str, callback: Subscriber) -> None:
        with self._lock:
            self._subscribers.setdefault(project_id, []).append(callback)

    def unsubscribe(self, project_id: str, callback: Subscriber) -> None:
        with self._lock:
            callbacks = self._subscribers.get(project_id, [])
            if callback in callbacks:
                callbacks.remove(callback)
            if not callbacks:
                self._subscribers.pop(project_id, None)

    def invalidate(self, project_id: str) -> Optional[ProjectAnalyticsResult]:
        """
        Recompute analytics for `project_id` and notify subscribers.

        Returns None when a newer invalidation for the same project started
        meanwhile; fetch errors propagate to the caller.
        """
        generation = self.cache.next_generation(project_id)
        result = self._compute(project_id)

        if not self.cache.store(project_id, generation, result):
            return None

        with self._lock:
            callbacks = list(self._subscribers.get(project_id, []))

        for callback in callbacks:
            callback(result)

        logger.info("Analytics invalidated | project=%s | subscribers=%d", project_id, len(callbacks))
        return result
