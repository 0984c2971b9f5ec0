"""Calendar-month concentration analysis."""

import logging
from datetime import date
from typing import List, Optional

from pattern_engine.repositories.report_repo import ReportRepository
from pattern_engine.schemas.candidates import MonthlyStat, SeasonalCandidate

logger = logging.getLogger(__name__)

PEAK_INDEX = 1.5
TROUGH_INDEX = 0.5

# Stored in pattern metadata, so independent of the host locale
MONTH_NAMES = (
    "", "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
)


def find_seasonal_candidates(stats: List[MonthlyStat]) -> List[SeasonalCandidate]:
    """Months whose seasonal index is strictly above 1.5 or strictly below 0.5."""
    candidates: List[SeasonalCandidate] = []
    for m in stats:
        if not (m.seasonal_index > PEAK_INDEX or m.seasonal_index < TROUGH_INDEX):
            continue
        candidates.append(SeasonalCandidate(
            month=m.month,
            month_name=MONTH_NAMES[m.month],
            report_count=m.count,
            seasonal_index=m.seasonal_index,
            is_peak=m.seasonal_index > 1,
            top_category=m.top_category,
        ))
    return candidates


class SeasonalAnalyzer:
    def __init__(self, report_repo: ReportRepository, history_years: int = 3):
        self.reports = report_repo
        self.history_years = history_years

    def analyze(self, today: Optional[date] = None) -> List[SeasonalCandidate]:
        stats = self.reports.seasonal_stats(self.history_years, today or date.today())
        candidates = find_seasonal_candidates(stats)
        logger.info("%d of %d months show a seasonal effect", len(candidates), len(stats))
        return candidates
