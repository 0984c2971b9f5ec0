"""Detector outputs awaiting reconciliation, plus the aggregate rows detectors consume."""

from datetime import date
from typing import Optional

from pydantic import BaseModel


# ── aggregate inputs ─────────────────────────────────────────────────────

class GeoPoint(BaseModel):
    report_id: int
    latitude: float
    longitude: float
    category: Optional[str] = None
    event_date: date


class SpatialCluster(BaseModel):
    """One density-based group of points, before it is scored."""

    label: int
    report_ids: list[int]
    center_lat: float
    center_lng: float
    count: int
    density: float
    categories: list[str]
    first_date: date
    last_date: date


class WeeklyCount(BaseModel):
    week_start: date
    count: int
    category_breakdown: dict[str, int] = {}


class MonthlyStat(BaseModel):
    month: int
    count: int
    seasonal_index: float
    top_category: Optional[str] = None


# ── candidates ───────────────────────────────────────────────────────────

class ClusterCandidate(BaseModel):
    report_ids: list[int]
    center_lat: float
    center_lng: float
    report_count: int
    density: float
    categories: list[str]
    first_date: date
    last_date: date

    @property
    def key(self) -> tuple:
        return ("geographic_cluster", round(self.center_lat, 4), round(self.center_lng, 4))


class AnomalyCandidate(BaseModel):
    week_start: date
    report_count: int
    z_score: float
    is_spike: bool
    mean_baseline: float
    std_deviation: float
    category_breakdown: dict[str, int] = {}

    @property
    def key(self) -> tuple:
        return ("temporal_anomaly", self.week_start)


class SeasonalCandidate(BaseModel):
    month: int
    month_name: str
    report_count: int
    seasonal_index: float
    is_peak: bool
    top_category: Optional[str] = None

    @property
    def key(self) -> tuple:
        return ("seasonal_pattern", self.month)
