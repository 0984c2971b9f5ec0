"""Time-driven pattern status maintenance."""

import logging
from datetime import date, datetime, timedelta
from typing import Optional

from pattern_engine.domain.lifecycle import classify_status
from pattern_engine.repositories.pattern_repo import PatternRepository
from pattern_engine.schemas.pattern import PatternStatus, PatternType
from pattern_engine.utils.timeutil import utcnow

logger = logging.getLogger(__name__)


class LifecycleManager:
    def __init__(self, pattern_repo: PatternRepository):
        self.patterns = pattern_repo

    def archive_stale(self, staleness_days: int = 30, now: Optional[datetime] = None) -> int:
        """Demote active patterns not updated within ``staleness_days`` to historical.

        Emerging and declining patterns are left alone. Returns the number
        archived; the caller commits.
        """
        now = now or utcnow()
        archived = self.patterns.archive_active_before(now - timedelta(days=staleness_days))
        logger.info("Archived %d stale patterns (older than %d days)", archived, staleness_days)
        return archived

    def reclassify(self, now: Optional[datetime] = None) -> int:
        """Re-apply the recency state machine to non-historical patterns.

        Geographic patterns age from their latest contributing report,
        temporal anomalies from the end of their week. Seasonal patterns
        have no recency and are skipped. ``last_updated_at`` is untouched.
        """
        now = now or utcnow()
        moved = 0
        for pattern_type in (PatternType.GEOGRAPHIC_CLUSTER, PatternType.TEMPORAL_ANOMALY):
            for p in self.patterns.get_by_type(
                pattern_type, exclude_status=PatternStatus.HISTORICAL.value
            ):
                last = self._last_activity(p)
                if last is None:
                    continue
                status = classify_status(last, now).value
                if status != p.status:
                    logger.debug("Pattern %d: %s -> %s", p.id, p.status, status)
                    p.status = status
                    moved += 1
        self.patterns.db.flush()
        logger.info("Reclassified %d patterns", moved)
        return moved

    @staticmethod
    def _last_activity(pattern) -> Optional[date]:
        if pattern.pattern_type == PatternType.TEMPORAL_ANOMALY.value:
            return pattern.pattern_end_date
        raw = (pattern.meta or {}).get("last_date")
        return date.fromisoformat(raw) if raw else None
