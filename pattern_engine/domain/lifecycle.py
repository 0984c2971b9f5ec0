"""Recency-based pattern status classification."""

from datetime import date, datetime

from pattern_engine.schemas.pattern import PatternStatus
from pattern_engine.utils.timeutil import days_between

EMERGING_DAYS = 7
ACTIVE_DAYS = 30
DECLINING_DAYS = 90


def classify_status(last_report: date | datetime, now: datetime) -> PatternStatus:
    """Status implied by the age of a pattern's most recent contributing report.

    <7 days emerging, <30 active, <90 declining, otherwise historical.
    """
    age = days_between(last_report, now)
    if age < EMERGING_DAYS:
        return PatternStatus.EMERGING
    if age < ACTIVE_DAYS:
        return PatternStatus.ACTIVE
    if age < DECLINING_DAYS:
        return PatternStatus.DECLINING
    return PatternStatus.HISTORICAL
