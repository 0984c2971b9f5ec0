"""Dependency Injection Container.

Centralized definition of all engine dependencies using dependency-injector.

Usage::

    from pattern_engine.container import AppContainer

    container = AppContainer()
    container.init_resources()  # create tables, open the session

    result = container.analysis_service().run()
    trending = container.query_service().get_trending_patterns(5)

    container.shutdown_resources()
"""

from dependency_injector import containers, providers

from pattern_engine.config import Settings
from pattern_engine.database import Base, build_engine, build_session_factory
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

import pattern_engine.models  # noqa: F401  (registers models with Base.metadata)


def _init_database(engine):
    """Create missing tables."""
    Base.metadata.create_all(bind=engine)
    return engine


def _open_session(factory):
    """Session resource, closed on ``shutdown_resources()``."""
    session = factory()
    try:
        yield session
    finally:
        session.close()


class AppContainer(containers.DeclarativeContainer):
    """Wires configuration, storage, repositories, engines and services.

    Layers:
    - Configuration (Settings)
    - Database (engine, one session per container)
    - Repositories (data access)
    - Engines (detection, reconciliation, lifecycle)
    - Services (run orchestration, read queries)
    """

    # ══════════════════════════════════════════════════════════════════
    # CONFIGURATION
    # ══════════════════════════════════════════════════════════════════

    settings = providers.Singleton(Settings)

    # ══════════════════════════════════════════════════════════════════
    # DATABASE
    # ══════════════════════════════════════════════════════════════════

    db_engine = providers.Singleton(
        build_engine,
        database_url=settings.provided.database_url,
        echo=False,
    )

    db_initialized = providers.Resource(
        _init_database,
        engine=db_engine,
    )

    session_factory = providers.Singleton(
        build_session_factory,
        engine=db_engine,
    )

    db_session = providers.Resource(
        _open_session,
        factory=session_factory,
    )

    # ══════════════════════════════════════════════════════════════════
    # REPOSITORIES
    # ══════════════════════════════════════════════════════════════════

    report_repo = providers.Factory(ReportRepository, db=db_session)
    pattern_repo = providers.Factory(PatternRepository, db=db_session)
    pattern_report_repo = providers.Factory(PatternReportRepository, db=db_session)
    pattern_insight_repo = providers.Factory(PatternInsightRepository, db=db_session)
    analysis_run_repo = providers.Factory(AnalysisRunRepository, db=db_session)

    # ══════════════════════════════════════════════════════════════════
    # ENGINES
    # ══════════════════════════════════════════════════════════════════

    geo_clusterer = providers.Factory(
        GeospatialClusterer,
        report_repo=report_repo,
        eps_km=settings.provided.geo_eps_km,
        min_points=settings.provided.geo_min_points,
        lookback_days=settings.provided.geo_lookback_days,
    )

    temporal_detector = providers.Factory(
        TemporalAnomalyDetector,
        report_repo=report_repo,
        lookback_weeks=settings.provided.temporal_lookback_weeks,
        z_threshold=settings.provided.z_threshold,
    )

    seasonal_analyzer = providers.Factory(
        SeasonalAnalyzer,
        report_repo=report_repo,
        history_years=settings.provided.seasonal_history_years,
    )

    reconciler = providers.Factory(
        PatternReconciler,
        pattern_repo=pattern_repo,
        link_repo=pattern_report_repo,
        insight_repo=pattern_insight_repo,
        eps_km=settings.provided.geo_eps_km,
    )

    lifecycle = providers.Factory(
        LifecycleManager,
        pattern_repo=pattern_repo,
    )

    # ══════════════════════════════════════════════════════════════════
    # SERVICES
    # ══════════════════════════════════════════════════════════════════

    analysis_service = providers.Factory(
        PatternAnalysisService,
        db=db_session,
        report_repo=report_repo,
        run_repo=analysis_run_repo,
        geo_clusterer=geo_clusterer,
        temporal_detector=temporal_detector,
        seasonal_analyzer=seasonal_analyzer,
        reconciler=reconciler,
        lifecycle=lifecycle,
        settings=settings,
    )

    query_service = providers.Factory(
        PatternQueryService,
        pattern_repo=pattern_repo,
        link_repo=pattern_report_repo,
        insight_repo=pattern_insight_repo,
        run_repo=analysis_run_repo,
        settings=settings,
    )
