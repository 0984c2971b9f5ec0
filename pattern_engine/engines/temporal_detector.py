"""Weekly report-volume anomaly detection (two-sided z-score test)."""

import logging
from datetime import date
from typing import List, Optional

import numpy as np

from pattern_engine.repositories.report_repo import ReportRepository
from pattern_engine.schemas.candidates import AnomalyCandidate, WeeklyCount

logger = logging.getLogger(__name__)


def find_anomalies(weeks: List[WeeklyCount], z_threshold: float) -> List[AnomalyCandidate]:
    """Flag weeks whose count sits ``z_threshold`` or more population std devs from the mean.

    Fewer than two weeks, or a perfectly flat series, yields nothing.
    """
    if len(weeks) < 2:
        return []

    counts = np.array([w.count for w in weeks], dtype=float)
    mean = float(counts.mean())
    std = float(counts.std())  # population (ddof=0)
    if std == 0:
        return []

    anomalies: List[AnomalyCandidate] = []
    for week in weeks:
        z = (week.count - mean) / std
        if abs(z) >= z_threshold:
            anomalies.append(AnomalyCandidate(
                week_start=week.week_start,
                report_count=week.count,
                z_score=z,
                is_spike=z > 0,
                mean_baseline=mean,
                std_deviation=std,
                category_breakdown=week.category_breakdown,
            ))
    return anomalies


class TemporalAnomalyDetector:
    def __init__(
        self,
        report_repo: ReportRepository,
        lookback_weeks: int = 52,
        z_threshold: float = 2.5,
    ):
        self.reports = report_repo
        self.lookback_weeks = lookback_weeks
        self.z_threshold = z_threshold

    def detect(
        self,
        lookback_weeks: Optional[int] = None,
        z_threshold: Optional[float] = None,
        today: Optional[date] = None,
    ) -> List[AnomalyCandidate]:
        lookback_weeks = self.lookback_weeks if lookback_weeks is None else lookback_weeks
        z_threshold = self.z_threshold if z_threshold is None else z_threshold

        weeks = self.reports.weekly_counts(lookback_weeks, today or date.today())
        anomalies = find_anomalies(weeks, z_threshold)
        logger.info(
            "Found %d anomalous weeks out of %d (|z| >= %.2f)",
            len(anomalies), len(weeks), z_threshold,
        )
        return anomalies
