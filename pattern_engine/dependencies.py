"""Dependency injection / factory functions for FastAPI.

Every service is constructed here with its full dependency tree, bound
to the request's database session.
"""

import hmac
from functools import lru_cache
from typing import Optional

from fastapi import Depends, Header, HTTPException
from sqlalchemy.orm import Session

from pattern_engine.config import Settings
from pattern_engine.engines.geo_clusterer import GeospatialClusterer
from pattern_engine.engines.lifecycle_manager import LifecycleManager
from pattern_engine.engines.reconciler import PatternReconciler
from pattern_engine.engines.seasonal_analyzer import SeasonalAnalyzer
from pattern_engine.engines.temporal_detector import TemporalAnomalyDetector
from pattern_engine.repositories.analysis_run_repo import AnalysisRunRepository
from pattern_engine.repositories.pattern_insight_repo import PatternInsightRepository
from pattern_engine.repositories.pattern_repo import PatternRepository
from pattern_engine.repositories.pattern_report_repo import PatternReportRepository
from pattern_engine.repositories.report_repo import ReportRepository
from pattern_engine.services.analysis_service import PatternAnalysisService
from pattern_engine.services.pattern_query_service import PatternQueryService


@lru_cache
def get_settings() -> Settings:
    return Settings()


# ── Per-request (need a DB session) ─────────────────────────────────────

def get_analysis_service(db: Session, settings: Optional[Settings] = None) -> PatternAnalysisService:
    s = settings or get_settings()
    reports = ReportRepository(db)
    patterns = PatternRepository(db)
    return PatternAnalysisService(
        db=db,
        report_repo=reports,
        run_repo=AnalysisRunRepository(db),
        geo_clusterer=GeospatialClusterer(
            reports, eps_km=s.geo_eps_km, min_points=s.geo_min_points,
            lookback_days=s.geo_lookback_days,
        ),
        temporal_detector=TemporalAnomalyDetector(
            reports, lookback_weeks=s.temporal_lookback_weeks, z_threshold=s.z_threshold,
        ),
        seasonal_analyzer=SeasonalAnalyzer(reports, history_years=s.seasonal_history_years),
        reconciler=PatternReconciler(
            patterns, PatternReportRepository(db), PatternInsightRepository(db),
            eps_km=s.geo_eps_km,
        ),
        lifecycle=LifecycleManager(patterns),
        settings=s,
    )


def get_query_service(db: Session, settings: Optional[Settings] = None) -> PatternQueryService:
    return PatternQueryService(
        pattern_repo=PatternRepository(db),
        link_repo=PatternReportRepository(db),
        insight_repo=PatternInsightRepository(db),
        run_repo=AnalysisRunRepository(db),
        settings=settings or get_settings(),
    )


# ── Admin gate ──────────────────────────────────────────────────────────

def require_admin(
    authorization: Optional[str] = Header(default=None),
    settings: Settings = Depends(get_settings),
) -> None:
    """Accept ``Authorization: Bearer <admin_secret>``.

    With no secret configured the trigger is only open in debug mode.
    """
    if not settings.admin_secret:
        if settings.debug:
            return
        raise HTTPException(status_code=401, detail="Unauthorized")

    expected = f"Bearer {settings.admin_secret}"
    if not authorization or not hmac.compare_digest(authorization, expected):
        raise HTTPException(status_code=401, detail="Unauthorized")
