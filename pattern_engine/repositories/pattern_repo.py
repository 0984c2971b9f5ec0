"""Detected pattern repository."""

from datetime import date, datetime
from typing import Iterable, List, Optional, Tuple

from sqlalchemy.orm import Session

from pattern_engine.domain.geo import bounding_box, haversine_km
from pattern_engine.models.pattern import PatternModel
from pattern_engine.repositories.base import BaseRepository
from pattern_engine.schemas.pattern import PatternStatus, PatternType

VISIBLE_STATUSES = (PatternStatus.ACTIVE.value, PatternStatus.EMERGING.value)


class PatternRepository(BaseRepository[PatternModel]):
    def __init__(self, db: Session):
        super().__init__(db, PatternModel)

    # ── matching lookups used by the reconciler ──────────────────────

    def find_nearby(
        self,
        lat: float,
        lng: float,
        radius_km: float,
        *,
        limit: int = 10,
        pattern_type: Optional[PatternType] = None,
        statuses: Optional[Iterable[str]] = None,
    ) -> List[Tuple[PatternModel, float]]:
        """Patterns whose center lies within ``radius_km``, nearest first.

        Returns ``(pattern, distance_km)`` pairs. A bounding box narrows the
        candidates in SQL; the exact great-circle distance is checked here.
        """
        min_lat, max_lat, min_lng, max_lng = bounding_box(lat, lng, radius_km)
        q = self.query().filter(
            self.model.center_lat.isnot(None),
            self.model.center_lng.isnot(None),
            self.model.center_lat.between(min_lat, max_lat),
        )
        if min_lng >= -180.0 and max_lng <= 180.0:
            q = q.filter(self.model.center_lng.between(min_lng, max_lng))
        if pattern_type is not None:
            q = q.filter(self.model.pattern_type == pattern_type.value)
        if statuses is not None:
            q = q.filter(self.model.status.in_(list(statuses)))

        hits = []
        for p in q.all():
            d = haversine_km(lat, lng, p.center_lat, p.center_lng)
            if d <= radius_km:
                hits.append((p, d))
        hits.sort(key=lambda pd: (pd[1], pd[0].id))
        return hits[:limit]

    def find_temporal_covering(self, day: date) -> Optional[PatternModel]:
        """First temporal anomaly whose stored date range contains ``day``."""
        return (
            self.query()
            .filter(
                self.model.pattern_type == PatternType.TEMPORAL_ANOMALY.value,
                self.model.pattern_start_date <= day,
                self.model.pattern_end_date >= day,
            )
            .order_by(self.model.id)
            .first()
        )

    def find_seasonal_for_month(self, month: int) -> Optional[PatternModel]:
        """First seasonal pattern recorded for calendar ``month``."""
        seasonal = (
            self.query()
            .filter(self.model.pattern_type == PatternType.SEASONAL_PATTERN.value)
            .order_by(self.model.id)
            .all()
        )
        for p in seasonal:
            if (p.meta or {}).get("month") == month:
                return p
        return None

    # ── lifecycle ────────────────────────────────────────────────────

    def archive_active_before(self, cutoff: datetime) -> int:
        """Set every active pattern last updated before ``cutoff`` to historical."""
        return (
            self.query()
            .filter(
                self.model.status == PatternStatus.ACTIVE.value,
                self.model.last_updated_at < cutoff,
            )
            .update(
                {self.model.status: PatternStatus.HISTORICAL.value},
                synchronize_session="fetch",
            )
        )

    def get_by_type(
        self, pattern_type: PatternType, *, exclude_status: Optional[str] = None
    ) -> List[PatternModel]:
        q = self.query().filter(self.model.pattern_type == pattern_type.value)
        if exclude_status is not None:
            q = q.filter(self.model.status != exclude_status)
        return q.order_by(self.model.id).all()

    # ── read models ──────────────────────────────────────────────────

    def get_trending(self, limit: int) -> List[PatternModel]:
        return (
            self.query()
            .filter(self.model.status.in_(VISIBLE_STATUSES))
            .order_by(
                self.model.significance_score.desc(),
                self.model.last_updated_at.desc(),
                self.model.id.desc(),
            )
            .limit(limit)
            .all()
        )

    def list_filtered(
        self,
        *,
        pattern_type: Optional[str] = None,
        status: Optional[str] = None,
        limit: int = 20,
        offset: int = 0,
    ) -> Tuple[List[PatternModel], int]:
        q = self.query()
        if pattern_type:
            q = q.filter(self.model.pattern_type == pattern_type)
        if status:
            q = q.filter(self.model.status == status)
        total = q.count()
        rows = (
            q.order_by(self.model.significance_score.desc(), self.model.id)
            .offset(offset)
            .limit(limit)
            .all()
        )
        return rows, total
