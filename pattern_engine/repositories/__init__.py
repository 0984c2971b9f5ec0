"""Data access repositories."""

from pattern_engine.repositories.analysis_run_repo import AnalysisRunRepository
from pattern_engine.repositories.base import BaseRepository
from pattern_engine.repositories.pattern_insight_repo import PatternInsightRepository
from pattern_engine.repositories.pattern_repo import PatternRepository
from pattern_engine.repositories.pattern_report_repo import PatternReportRepository
from pattern_engine.repositories.report_repo import ReportRepository

__all__ = [
    "BaseRepository",
    "ReportRepository",
    "PatternRepository",
    "PatternReportRepository",
    "PatternInsightRepository",
    "AnalysisRunRepository",
]
