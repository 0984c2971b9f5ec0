"""Read-side queries over detected patterns and analysis runs."""

from typing import List, Optional

from pattern_engine.config import Settings
from pattern_engine.errors import PatternNotFoundError
from pattern_engine.repositories.analysis_run_repo import AnalysisRunRepository
from pattern_engine.repositories.pattern_insight_repo import PatternInsightRepository
from pattern_engine.repositories.pattern_repo import VISIBLE_STATUSES, PatternRepository
from pattern_engine.repositories.pattern_report_repo import PatternReportRepository
from pattern_engine.schemas.analysis import AnalysisRun
from pattern_engine.schemas.pattern import (
    LinkedReport,
    NearbyPattern,
    Pattern,
    PatternDetail,
    PatternInsight,
    PatternList,
    PatternStatus,
    TrendingPattern,
)

MAX_LINKED_REPORTS = 20


class PatternQueryService:
    def __init__(
        self,
        pattern_repo: PatternRepository,
        link_repo: PatternReportRepository,
        insight_repo: PatternInsightRepository,
        run_repo: AnalysisRunRepository,
        settings: Optional[Settings] = None,
    ):
        self.patterns = pattern_repo
        self.links = link_repo
        self.insights = insight_repo
        self.runs = run_repo
        self.settings = settings or Settings()

    def get_trending_patterns(self, limit: int = 5) -> List[TrendingPattern]:
        """Active and emerging patterns, most significant then most recent first."""
        limit = max(1, min(limit, self.settings.trending_limit_max))
        return [
            TrendingPattern(
                **Pattern.model_validate(p).model_dump(),
                trend="rising" if p.status == PatternStatus.EMERGING.value else "stable",
            )
            for p in self.patterns.get_trending(limit)
        ]

    def get_nearby_patterns(
        self, lat: float, lng: float, radius_km: Optional[float] = None
    ) -> List[NearbyPattern]:
        radius_km = self.settings.nearby_default_radius_km if radius_km is None else radius_km
        hits = self.patterns.find_nearby(
            lat, lng, radius_km,
            limit=self.settings.nearby_limit,
            statuses=VISIBLE_STATUSES,
        )
        return [
            NearbyPattern(**Pattern.model_validate(p).model_dump(), distance_km=round(d, 3))
            for p, d in hits
        ]

    def list_patterns(
        self,
        pattern_type: Optional[str] = None,
        status: Optional[str] = None,
        limit: int = 20,
        offset: int = 0,
    ) -> PatternList:
        rows, total = self.patterns.list_filtered(
            pattern_type=pattern_type, status=status, limit=limit, offset=offset,
        )
        return PatternList(patterns=[Pattern.model_validate(p) for p in rows], total=total)

    def get_pattern(self, pattern_id: int) -> PatternDetail:
        """A pattern with its strongest linked reports and cached narrative."""
        pattern = self.patterns.get(pattern_id)
        if pattern is None:
            raise PatternNotFoundError(pattern_id)

        reports = [
            LinkedReport(
                id=r.id,
                title=r.title,
                category=r.category,
                event_date=r.event_date,
                latitude=r.latitude,
                longitude=r.longitude,
                relevance_score=link.relevance_score,
            )
            for link, r in self.links.get_linked_reports(pattern_id, limit=MAX_LINKED_REPORTS)
        ]
        insight = self.insights.get_latest_for_pattern(pattern_id)
        return PatternDetail(
            pattern=Pattern.model_validate(pattern),
            reports=reports,
            insight=PatternInsight.model_validate(insight) if insight else None,
        )

    def list_runs(self, limit: int = 20) -> List[AnalysisRun]:
        return [AnalysisRun.model_validate(r) for r in self.runs.get_recent(limit)]

    def get_run(self, run_id: int) -> Optional[AnalysisRun]:
        run = self.runs.get(run_id)
        return AnalysisRun.model_validate(run) if run else None
