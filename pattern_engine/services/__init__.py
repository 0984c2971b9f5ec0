"""Service-layer orchestration modules."""

from pattern_engine.services.analysis_service import PatternAnalysisService
from pattern_engine.services.pattern_query_service import PatternQueryService

__all__ = [
    "PatternAnalysisService",
    "PatternQueryService",
]
