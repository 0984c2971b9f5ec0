"""Pydantic schemas for request/response validation and domain types."""

from pattern_engine.schemas.analysis import (
    AnalysisRun,
    AnalysisRunRequest,
    RunResult,
    RunStatus,
    RunType,
)
from pattern_engine.schemas.candidates import (
    AnomalyCandidate,
    ClusterCandidate,
    GeoPoint,
    MonthlyStat,
    SeasonalCandidate,
    SpatialCluster,
    WeeklyCount,
)
from pattern_engine.schemas.pattern import (
    AnomalyMeta,
    ClusterMeta,
    LinkedReport,
    NearbyPattern,
    Pattern,
    PatternDetail,
    PatternInsight,
    PatternList,
    PatternStatus,
    PatternType,
    SeasonalMeta,
    TrendingPattern,
)

__all__ = [
    "AnalysisRun", "AnalysisRunRequest", "RunResult", "RunStatus", "RunType",
    "GeoPoint", "SpatialCluster", "WeeklyCount", "MonthlyStat",
    "ClusterCandidate", "AnomalyCandidate", "SeasonalCandidate",
    "Pattern", "PatternDetail", "PatternList", "PatternInsight", "LinkedReport",
    "TrendingPattern", "NearbyPattern",
    "PatternType", "PatternStatus", "ClusterMeta", "AnomalyMeta", "SeasonalMeta",
]
