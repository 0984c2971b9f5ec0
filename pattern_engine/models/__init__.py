"""SQLAlchemy ORM models, imported here so Base.metadata sees them."""

from pattern_engine.models.analysis_run import AnalysisRunModel
from pattern_engine.models.pattern import PatternModel
from pattern_engine.models.pattern_insight import PatternInsightModel
from pattern_engine.models.pattern_report import PatternReportModel
from pattern_engine.models.report import ReportModel

__all__ = [
    "ReportModel",
    "PatternModel",
    "PatternReportModel",
    "PatternInsightModel",
    "AnalysisRunModel",
]
