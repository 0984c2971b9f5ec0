"""Match-or-create reconciliation of detector candidates onto pattern records.

Each candidate type has its own identity rule:

- geographic clusters match the nearest geographic pattern within half the
  clustering radius of the candidate's centroid;
- temporal anomalies match the first temporal pattern whose date range
  contains the candidate's week start;
- seasonal candidates match the first seasonal pattern recorded for the
  same calendar month.

A match is overwritten with the candidate's figures. When those figures
are identical to what is stored the pattern keeps its ``last_updated_at``,
so re-running an unchanged window is a no-op. Candidates of one type must
be reconciled sequentially on a single session; the lookup and the write
are not atomic.
"""

import logging
from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Dict, Optional, Union

from pattern_engine.domain import scoring
from pattern_engine.domain.lifecycle import classify_status
from pattern_engine.models.pattern import PatternModel
from pattern_engine.repositories.pattern_insight_repo import PatternInsightRepository
from pattern_engine.repositories.pattern_repo import PatternRepository
from pattern_engine.repositories.pattern_report_repo import PatternReportRepository
from pattern_engine.schemas.candidates import (
    AnomalyCandidate,
    ClusterCandidate,
    SeasonalCandidate,
)
from pattern_engine.schemas.pattern import (
    AnomalyMeta,
    ClusterMeta,
    PatternStatus,
    PatternType,
    SeasonalMeta,
    dump_metadata,
)
from pattern_engine.utils.timeutil import utcnow

logger = logging.getLogger(__name__)

Candidate = Union[ClusterCandidate, AnomalyCandidate, SeasonalCandidate]

DEFAULT_RELEVANCE = 1.0


@dataclass
class ReconcileOutcome:
    pattern: PatternModel
    created: bool
    changed: bool = True


class PatternReconciler:
    def __init__(
        self,
        pattern_repo: PatternRepository,
        link_repo: PatternReportRepository,
        insight_repo: Optional[PatternInsightRepository] = None,
        eps_km: float = 50.0,
    ):
        self.patterns = pattern_repo
        self.links = link_repo
        self.insights = insight_repo
        self.eps_km = eps_km
        self._seen: set = set()

    def reset(self) -> None:
        """Forget which candidates were reconciled; call once at the start of a run."""
        self._seen.clear()

    def reconcile(self, candidate: Candidate, now=None) -> Optional[ReconcileOutcome]:
        """Create or update the pattern for ``candidate``.

        Returns None when an identical candidate was already reconciled
        since the last :meth:`reset`. Writes are flushed, not committed.
        """
        if isinstance(candidate, ClusterCandidate):
            handler = self._reconcile_cluster
        elif isinstance(candidate, AnomalyCandidate):
            handler = self._reconcile_anomaly
        elif isinstance(candidate, SeasonalCandidate):
            handler = self._reconcile_seasonal
        else:
            raise TypeError(f"Unsupported candidate type: {type(candidate).__name__}")

        if candidate.key in self._seen:
            logger.debug("Skipping duplicate candidate %s", candidate.key)
            return None

        outcome = handler(candidate, now or utcnow())
        self._seen.add(candidate.key)
        return outcome

    # ── per-type rules ───────────────────────────────────────────────

    def _reconcile_cluster(self, c: ClusterCandidate, now) -> ReconcileOutcome:
        fields = {
            "confidence_score": scoring.cluster_confidence(c.report_count, c.density),
            "significance_score": scoring.cluster_significance(c.report_count, len(c.categories)),
            "report_count": c.report_count,
            "center_lat": c.center_lat,
            "center_lng": c.center_lng,
            "radius_km": self.eps_km,
            "categories": sorted(c.categories),
            "meta": dump_metadata(ClusterMeta(
                density=c.density, first_date=c.first_date, last_date=c.last_date,
            )),
        }
        status = classify_status(c.last_date, now)

        nearby = self.patterns.find_nearby(
            c.center_lat, c.center_lng, self.eps_km / 2,
            limit=1, pattern_type=PatternType.GEOGRAPHIC_CLUSTER,
        )
        if not nearby:
            pattern = self._create(PatternType.GEOGRAPHIC_CLUSTER, status, fields, now)
            self.links.replace_for_pattern(pattern.id, c.report_ids, DEFAULT_RELEVANCE)
            logger.info(
                "Created geographic pattern %d (%d reports at %.3f,%.3f)",
                pattern.id, c.report_count, c.center_lat, c.center_lng,
            )
            return ReconcileOutcome(pattern, created=True)

        pattern, distance = nearby[0]
        membership_changed = self.links.report_ids_for_pattern(pattern.id) != set(c.report_ids)
        changed = self._apply(pattern, fields) or membership_changed
        # Status tracks elapsed time, so it is refreshed even when the data is not
        pattern.status = status.value
        if changed:
            self._touch(pattern, now)
            if membership_changed:
                self.links.replace_for_pattern(pattern.id, c.report_ids, DEFAULT_RELEVANCE)
        self.patterns.update(pattern)
        logger.info(
            "Matched geographic candidate to pattern %d (%.1fkm away, changed=%s)",
            pattern.id, distance, changed,
        )
        return ReconcileOutcome(pattern, created=False, changed=changed)

    def _reconcile_anomaly(self, c: AnomalyCandidate, now) -> ReconcileOutcome:
        fields = {
            "confidence_score": scoring.anomaly_confidence(c.z_score),
            "significance_score": scoring.anomaly_significance(c.report_count),
            "report_count": c.report_count,
            "pattern_start_date": c.week_start,
            "pattern_end_date": c.week_start + timedelta(days=6),
            "categories": sorted(c.category_breakdown),
            "meta": dump_metadata(AnomalyMeta(
                z_score=c.z_score,
                is_spike=c.is_spike,
                mean_baseline=c.mean_baseline,
                std_deviation=c.std_deviation,
                week_start=c.week_start,
                category_breakdown=c.category_breakdown,
            )),
        }
        existing = self.patterns.find_temporal_covering(c.week_start)
        return self._upsert(PatternType.TEMPORAL_ANOMALY, existing, fields, now)

    def _reconcile_seasonal(self, c: SeasonalCandidate, now) -> ReconcileOutcome:
        fields = {
            "confidence_score": scoring.seasonal_confidence(),
            "significance_score": scoring.seasonal_significance(c.seasonal_index),
            "report_count": c.report_count,
            "categories": [c.top_category] if c.top_category else [],
            "meta": dump_metadata(SeasonalMeta(
                month=c.month,
                month_name=c.month_name,
                seasonal_index=c.seasonal_index,
                is_peak=c.is_peak,
                top_category=c.top_category,
            )),
        }
        existing = self.patterns.find_seasonal_for_month(c.month)
        return self._upsert(PatternType.SEASONAL_PATTERN, existing, fields, now)

    # ── helpers ──────────────────────────────────────────────────────

    def _upsert(
        self,
        pattern_type: PatternType,
        existing: Optional[PatternModel],
        fields: Dict[str, Any],
        now,
    ) -> ReconcileOutcome:
        """Shared path for temporal and seasonal patterns, which start out active."""
        if existing is None:
            pattern = self._create(pattern_type, PatternStatus.ACTIVE, fields, now)
            logger.info("Created %s pattern %d", pattern_type.value, pattern.id)
            return ReconcileOutcome(pattern, created=True)

        changed = self._apply(existing, fields)
        if changed:
            existing.status = PatternStatus.ACTIVE.value
            self._touch(existing, now)
        self.patterns.update(existing)
        logger.info(
            "Matched %s candidate to pattern %d (changed=%s)",
            pattern_type.value, existing.id, changed,
        )
        return ReconcileOutcome(existing, created=False, changed=changed)

    def _create(
        self, pattern_type: PatternType, status: PatternStatus, fields: Dict[str, Any], now
    ) -> PatternModel:
        return self.patterns.create(PatternModel(
            pattern_type=pattern_type.value,
            status=status.value,
            first_detected_at=now,
            last_updated_at=now,
            **fields,
        ))

    def _touch(self, pattern: PatternModel, now) -> None:
        pattern.last_updated_at = now
        if self.insights is not None:
            stale = self.insights.mark_stale_for_pattern(pattern.id)
            if stale:
                logger.info("Marked %d cached narratives stale for pattern %d", stale, pattern.id)

    @staticmethod
    def _apply(pattern: PatternModel, fields: Dict[str, Any]) -> bool:
        """Copy ``fields`` onto the pattern; True if any value differed."""
        changed = False
        for name, value in fields.items():
            if getattr(pattern, name) != value:
                setattr(pattern, name, value)
                changed = True
        return changed
