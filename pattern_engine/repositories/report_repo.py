"""Report repository: read-only aggregate queries feeding the detectors."""

from collections import Counter, defaultdict
from datetime import date, timedelta
from typing import List

from sqlalchemy.orm import Session

from pattern_engine.models.report import ReportModel
from pattern_engine.repositories.base import BaseRepository
from pattern_engine.schemas.candidates import GeoPoint, MonthlyStat, WeeklyCount
from pattern_engine.utils.timeutil import week_start

APPROVED = "approved"
UNKNOWN_CATEGORY = "unknown"


class ReportRepository(BaseRepository[ReportModel]):
    def __init__(self, db: Session):
        super().__init__(db, ReportModel)

    def _approved(self):
        return self.query().filter(self.model.status == APPROVED)

    def count_approved(self) -> int:
        return self._approved().count()

    def get_geolocated_since(self, since: date) -> List[GeoPoint]:
        """Approved reports with coordinates whose event falls on or after ``since``."""
        rows = (
            self.db.query(
                self.model.id,
                self.model.latitude,
                self.model.longitude,
                self.model.category,
                self.model.event_date,
            )
            .filter(
                self.model.status == APPROVED,
                self.model.latitude.isnot(None),
                self.model.longitude.isnot(None),
                self.model.event_date >= since,
            )
            .order_by(self.model.id)
            .all()
        )
        return [
            GeoPoint(
                report_id=r.id,
                latitude=r.latitude,
                longitude=r.longitude,
                category=r.category,
                event_date=r.event_date,
            )
            for r in rows
        ]

    def weekly_counts(self, lookback_weeks: int, today: date) -> List[WeeklyCount]:
        """Approved report counts per week (Monday start) over the lookback window.

        Weeks without reports between the first non-empty week and the
        current week are returned with a zero count so quiet weeks weigh
        into the baseline.
        """
        since = today - timedelta(days=7 * lookback_weeks)
        rows = (
            self.db.query(self.model.event_date, self.model.category)
            .filter(
                self.model.status == APPROVED,
                self.model.event_date >= since,
                self.model.event_date <= today,
            )
            .all()
        )
        if not rows:
            return []

        by_week: dict[date, Counter] = defaultdict(Counter)
        for event_date, category in rows:
            by_week[week_start(event_date)][category or UNKNOWN_CATEGORY] += 1

        weeks: List[WeeklyCount] = []
        cursor = min(by_week)
        last = week_start(today)
        while cursor <= last:
            cats = by_week.get(cursor, Counter())
            weeks.append(WeeklyCount(
                week_start=cursor,
                count=sum(cats.values()),
                category_breakdown=dict(cats),
            ))
            cursor += timedelta(days=7)
        return weeks

    def seasonal_stats(self, history_years: int, today: date) -> List[MonthlyStat]:
        """Per calendar month counts and seasonal index over recent history.

        The index is the month's count divided by the mean count of the
        months that have any reports at all.
        """
        since = today - timedelta(days=365 * history_years)
        rows = (
            self.db.query(self.model.event_date, self.model.category)
            .filter(self.model.status == APPROVED, self.model.event_date >= since)
            .all()
        )
        if not rows:
            return []

        by_month: dict[int, Counter] = defaultdict(Counter)
        for event_date, category in rows:
            by_month[event_date.month][category or UNKNOWN_CATEGORY] += 1

        totals = {m: sum(c.values()) for m, c in by_month.items()}
        avg_monthly = sum(totals.values()) / len(totals)

        stats: List[MonthlyStat] = []
        for month in sorted(by_month):
            cats = by_month[month]
            # Most common category; ties go to the alphabetically first
            top = min(cats.items(), key=lambda kv: (-kv[1], kv[0]))[0]
            stats.append(MonthlyStat(
                month=month,
                count=totals[month],
                seasonal_index=totals[month] / avg_monthly if avg_monthly > 0 else 1.0,
                top_category=top,
            ))
        return stats
