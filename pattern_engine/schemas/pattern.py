"""Pattern schemas, lifecycle enums and the per-type metadata variants."""

from datetime import date, datetime
from enum import Enum
from typing import Annotated, Literal, Optional, Union

from pydantic import AliasChoices, BaseModel, Field, TypeAdapter


class PatternType(str, Enum):
    GEOGRAPHIC_CLUSTER = "geographic_cluster"
    TEMPORAL_ANOMALY = "temporal_anomaly"
    SEASONAL_PATTERN = "seasonal_pattern"
    # Representable but not produced by any detector yet
    FLAP_WAVE = "flap_wave"
    CHARACTERISTIC_CORRELATION = "characteristic_correlation"
    REGIONAL_CONCENTRATION = "regional_concentration"
    TIME_OF_DAY_PATTERN = "time_of_day_pattern"
    DATE_CORRELATION = "date_correlation"


class PatternStatus(str, Enum):
    EMERGING = "emerging"
    ACTIVE = "active"
    DECLINING = "declining"
    HISTORICAL = "historical"


# ── metadata variants ────────────────────────────────────────────────────

class ClusterMeta(BaseModel):
    kind: Literal["cluster"] = "cluster"
    density: float
    first_date: date
    last_date: date


class AnomalyMeta(BaseModel):
    kind: Literal["anomaly"] = "anomaly"
    z_score: float
    is_spike: bool
    mean_baseline: float
    std_deviation: float
    week_start: date
    category_breakdown: dict[str, int] = {}


class SeasonalMeta(BaseModel):
    kind: Literal["seasonal"] = "seasonal"
    month: int = Field(ge=1, le=12)
    month_name: str
    seasonal_index: float
    is_peak: bool
    top_category: Optional[str] = None


PatternMeta = Annotated[
    Union[ClusterMeta, AnomalyMeta, SeasonalMeta],
    Field(discriminator="kind"),
]

_meta_adapter: TypeAdapter = TypeAdapter(PatternMeta)


def parse_metadata(data: dict) -> Union[ClusterMeta, AnomalyMeta, SeasonalMeta]:
    """Validate a stored metadata dict into its typed variant."""
    return _meta_adapter.validate_python(data)


def dump_metadata(meta: Union[ClusterMeta, AnomalyMeta, SeasonalMeta]) -> dict:
    """JSON-safe dict for the metadata column."""
    return meta.model_dump(mode="json")


# ── API / facade shapes ──────────────────────────────────────────────────

class Pattern(BaseModel):
    id: int
    pattern_type: PatternType
    status: PatternStatus
    confidence_score: float
    significance_score: float
    report_count: int

    center_lat: Optional[float] = None
    center_lng: Optional[float] = None
    radius_km: Optional[float] = None
    pattern_start_date: Optional[date] = None
    pattern_end_date: Optional[date] = None

    categories: list[str] = []
    metadata: dict = Field(
        default_factory=dict, validation_alias=AliasChoices("meta", "metadata")
    )

    ai_title: Optional[str] = None
    ai_summary: Optional[str] = None

    first_detected_at: datetime
    last_updated_at: datetime

    model_config = {"from_attributes": True}


class TrendingPattern(Pattern):
    trend: Literal["rising", "stable"]


class NearbyPattern(Pattern):
    distance_km: float


class LinkedReport(BaseModel):
    id: int
    title: str
    category: Optional[str] = None
    event_date: date
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    relevance_score: float


class PatternInsight(BaseModel):
    id: int
    insight_type: str
    title: Optional[str] = None
    content: str
    summary: Optional[str] = None
    generated_at: datetime

    model_config = {"from_attributes": True}


class PatternDetail(BaseModel):
    pattern: Pattern
    reports: list[LinkedReport]
    insight: Optional[PatternInsight] = None


class PatternList(BaseModel):
    patterns: list[Pattern]
    total: int
