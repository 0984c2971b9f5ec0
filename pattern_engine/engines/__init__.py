"""Detection, reconciliation and lifecycle engines."""

from pattern_engine.engines.geo_clusterer import GeospatialClusterer
from pattern_engine.engines.lifecycle_manager import LifecycleManager
from pattern_engine.engines.reconciler import PatternReconciler, ReconcileOutcome
from pattern_engine.engines.seasonal_analyzer import SeasonalAnalyzer
from pattern_engine.engines.temporal_detector import TemporalAnomalyDetector

__all__ = [
    "GeospatialClusterer",
    "TemporalAnomalyDetector",
    "SeasonalAnalyzer",
    "PatternReconciler",
    "ReconcileOutcome",
    "LifecycleManager",
]
