"""Confidence and significance formulas for every detector.

Confidence answers "how sure are we this grouping is real"; significance
answers "how noteworthy is it". Both land in [0.0, 1.0] and are pure
functions of their inputs.

Usage:
    from pattern_engine.domain.scoring import cluster_confidence

    cluster_confidence(report_count=20, density=10.0)  # 1.0
"""

SEASONAL_CONFIDENCE = 0.8


def _saturate(value: float, ceiling: float) -> float:
    """Scale ``value`` into [0, 1], capping at ``ceiling``."""
    return max(0.0, min(value / ceiling, 1.0))


def cluster_confidence(report_count: int, density: float) -> float:
    """Confidence of a geographic cluster.

    Formula:
        0.6 * min(report_count / 20, 1) + 0.4 * min(density / 10, 1)

    Examples:
        >>> cluster_confidence(20, 10.0)
        1.0
        >>> cluster_confidence(10, 0.0)
        0.3
    """
    return 0.6 * _saturate(report_count, 20) + 0.4 * _saturate(density, 10)


def cluster_significance(report_count: int, category_count: int) -> float:
    """Significance of a geographic cluster.

    Formula:
        0.7 * min(report_count / 50, 1) + 0.3 * min(distinct_categories / 5, 1)

    Examples:
        >>> cluster_significance(50, 5)
        1.0
    """
    return 0.7 * _saturate(report_count, 50) + 0.3 * _saturate(category_count, 5)


def anomaly_confidence(z_score: float) -> float:
    """min(|z| / 5, 1); spikes and dips score alike."""
    return _saturate(abs(z_score), 5)


def anomaly_significance(report_count: int) -> float:
    """min(report_count / 100, 1)."""
    return _saturate(report_count, 100)


def seasonal_confidence() -> float:
    """Seasonal effects are structurally steadier than single clusters."""
    return SEASONAL_CONFIDENCE


def seasonal_significance(seasonal_index: float) -> float:
    """|index - 1| / 2, capped at 1.

    Examples:
        >>> round(seasonal_significance(1.8), 4)
        0.4
    """
    return min(abs(seasonal_index - 1.0) / 2.0, 1.0)
