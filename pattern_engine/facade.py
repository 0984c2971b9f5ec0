"""Pattern engine facade: single entry point for non-HTTP consumers.

The CLI (scripts/run_analysis.py) and any scheduler should use this
instead of wiring up services directly. Wiring lives in
:class:`~pattern_engine.container.AppContainer`; the facade only owns
the container's lifecycle.

Usage::

    facade = PatternEngineFacade()     # uses Settings() from .env
    result = facade.run_pattern_analysis()
    trending = facade.get_trending_patterns(5)
    facade.close()
"""

import logging
from typing import Any, Dict, List, Optional

from pattern_engine.config import Settings
from pattern_engine.container import AppContainer
from pattern_engine.errors import PatternNotFoundError
from pattern_engine.schemas.analysis import RunResult, RunType

logger = logging.getLogger(__name__)


class PatternEngineFacade:
    """High-level API for the pattern detection engine.

    Hides all internal wiring (repos, engines, services). Returns only
    Pydantic schemas and plain dicts, never ORM models.
    """

    def __init__(self, settings: Optional[Settings] = None):
        self._container = AppContainer()
        if settings is not None:
            self._container.settings.override(settings)
        self._container.init_resources()
        self._settings = self._container.settings()

    # ══════════════════════════════════════════════════════════════════
    # ANALYSIS
    # ══════════════════════════════════════════════════════════════════

    def run_pattern_analysis(self, run_type: RunType = RunType.FULL) -> RunResult:
        """Run all detectors, reconcile, sweep stale patterns."""
        return self._container.analysis_service().run(run_type=run_type, started_by="cli")

    # ══════════════════════════════════════════════════════════════════
    # READ-ONLY QUERIES
    # ══════════════════════════════════════════════════════════════════

    def get_trending_patterns(self, limit: int = 5) -> List[Dict[str, Any]]:
        return [
            p.model_dump(mode="json")
            for p in self._container.query_service().get_trending_patterns(limit)
        ]

    def get_nearby_patterns(
        self, lat: float, lng: float, radius_km: Optional[float] = None
    ) -> List[Dict[str, Any]]:
        return [
            p.model_dump(mode="json")
            for p in self._container.query_service().get_nearby_patterns(lat, lng, radius_km)
        ]

    def list_patterns(
        self,
        pattern_type: Optional[str] = None,
        status: Optional[str] = None,
        limit: int = 20,
        offset: int = 0,
    ) -> Dict[str, Any]:
        page = self._container.query_service().list_patterns(
            pattern_type=pattern_type, status=status, limit=limit, offset=offset,
        )
        return page.model_dump(mode="json")

    def get_pattern(self, pattern_id: int) -> Optional[Dict[str, Any]]:
        """Pattern detail, or None if it does not exist."""
        try:
            detail = self._container.query_service().get_pattern(pattern_id)
        except PatternNotFoundError:
            return None
        return detail.model_dump(mode="json")

    def list_runs(self, limit: int = 20) -> List[Dict[str, Any]]:
        return [r.model_dump(mode="json") for r in self._container.query_service().list_runs(limit)]

    def get_run(self, run_id: int) -> Optional[Dict[str, Any]]:
        run = self._container.query_service().get_run(run_id)
        return run.model_dump(mode="json") if run else None

    # ── lifecycle ─────────────────────────────────────────────────────

    def close(self) -> None:
        """Close the database session."""
        self._container.shutdown_resources()
        self._container.settings.reset_override()

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()
