"""Geographic cluster detection over recent approved reports."""

import logging
from datetime import date, timedelta
from typing import List, Optional

from pattern_engine.engines.spatial import cluster_points
from pattern_engine.repositories.report_repo import ReportRepository
from pattern_engine.schemas.candidates import ClusterCandidate

logger = logging.getLogger(__name__)


class GeospatialClusterer:
    """Turn density-based clusters of report coordinates into candidates."""

    def __init__(
        self,
        report_repo: ReportRepository,
        eps_km: float = 50.0,
        min_points: int = 5,
        lookback_days: int = 365,
    ):
        self.reports = report_repo
        self.eps_km = eps_km
        self.min_points = min_points
        self.lookback_days = lookback_days

    def cluster(
        self,
        lookback_days: Optional[int] = None,
        eps_km: Optional[float] = None,
        min_points: Optional[int] = None,
        today: Optional[date] = None,
    ) -> List[ClusterCandidate]:
        lookback_days = self.lookback_days if lookback_days is None else lookback_days
        eps_km = self.eps_km if eps_km is None else eps_km
        min_points = self.min_points if min_points is None else min_points
        today = today or date.today()

        points = self.reports.get_geolocated_since(today - timedelta(days=lookback_days))
        clusters = cluster_points(points, eps_km=eps_km, min_points=min_points)
        logger.info(
            "Clustered %d geolocated reports into %d clusters (eps=%.1fkm, min=%d)",
            len(points), len(clusters), eps_km, min_points,
        )

        return [
            ClusterCandidate(
                report_ids=c.report_ids,
                center_lat=c.center_lat,
                center_lng=c.center_lng,
                report_count=c.count,
                density=c.density,
                categories=c.categories,
                first_date=c.first_date,
                last_date=c.last_date,
            )
            for c in clusters
        ]
