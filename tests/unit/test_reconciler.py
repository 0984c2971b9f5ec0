"""Tests for match-or-create reconciliation of detector candidates."""

from datetime import date, timedelta

import pytest

from pattern_engine.domain import scoring
from pattern_engine.engines.reconciler import PatternReconciler
from pattern_engine.models.pattern import PatternModel
from pattern_engine.models.pattern_insight import PatternInsightModel
from pattern_engine.repositories.pattern_insight_repo import PatternInsightRepository
from pattern_engine.repositories.pattern_report_repo import PatternReportRepository
from pattern_engine.repositories.pattern_repo import PatternRepository
from pattern_engine.schemas.candidates import AnomalyCandidate, ClusterCandidate, SeasonalCandidate

from tests.fixtures import NOW


@pytest.fixture()
def reconciler(db):
    return PatternReconciler(
        PatternRepository(db),
        PatternReportRepository(db),
        PatternInsightRepository(db),
        eps_km=50.0,
    )


def _cluster(report_ids, lat=39.75, lng=-105.0, last_date=date(2025, 6, 15)):
    return ClusterCandidate(
        report_ids=report_ids,
        center_lat=lat,
        center_lng=lng,
        report_count=len(report_ids),
        density=120.0,
        categories=["ufo", "orb"],
        first_date=date(2025, 6, 10),
        last_date=last_date,
    )


def _anomaly(week_start=date(2025, 6, 9), count=40):
    return AnomalyCandidate(
        week_start=week_start,
        report_count=count,
        z_score=3.1,
        is_spike=True,
        mean_baseline=10.0,
        std_deviation=9.6,
        category_breakdown={"ufo": count - 10, "orb": 10},
    )


def _seasonal(month=10, index=1.8, count=120):
    return SeasonalCandidate(
        month=month,
        month_name="October",
        report_count=count,
        seasonal_index=index,
        is_peak=index > 1,
        top_category="ufo",
    )


def _reconcile(reconciler, db, candidate, now=NOW, reset=True):
    if reset:
        reconciler.reset()
    outcome = reconciler.reconcile(candidate, now)
    db.commit()
    return outcome


class TestGeographicClusters:
    def test_creates_pattern_with_links(self, db, reconciler, denver_reports):
        ids = [r.id for r in denver_reports]
        outcome = _reconcile(reconciler, db, _cluster(ids))

        p = outcome.pattern
        assert outcome.created is True
        assert p.pattern_type == "geographic_cluster"
        assert p.status == "emerging"
        assert p.radius_km == 50.0
        assert p.report_count == 6
        assert p.categories == ["orb", "ufo"]
        assert p.confidence_score == pytest.approx(scoring.cluster_confidence(6, 120.0))
        assert p.significance_score == pytest.approx(scoring.cluster_significance(6, 2))
        assert p.meta == {
            "kind": "cluster",
            "density": 120.0,
            "first_date": "2025-06-10",
            "last_date": "2025-06-15",
        }
        assert p.first_detected_at == NOW
        assert PatternReportRepository(db).report_ids_for_pattern(p.id) == set(ids)

    def test_matches_within_half_radius(self, db, reconciler, denver_reports):
        ids = [r.id for r in denver_reports]
        first = _reconcile(reconciler, db, _cluster(ids)).pattern

        # ~24.5 km north: inside eps/2
        outcome = _reconcile(reconciler, db, _cluster(ids, lat=39.97), now=NOW + timedelta(hours=1))

        assert outcome.created is False
        assert outcome.pattern.id == first.id
        assert outcome.pattern.center_lat == 39.97
        assert db.query(PatternModel).count() == 1

    def test_creates_new_pattern_just_outside_half_radius(self, db, reconciler, denver_reports):
        ids = [r.id for r in denver_reports]
        _reconcile(reconciler, db, _cluster(ids))

        # ~26.7 km north: outside eps/2
        outcome = _reconcile(reconciler, db, _cluster(ids, lat=39.99))

        assert outcome.created is True
        assert db.query(PatternModel).count() == 2

    def test_identical_candidate_is_a_no_op(self, db, reconciler, denver_reports):
        ids = [r.id for r in denver_reports]
        _reconcile(reconciler, db, _cluster(ids))

        later = NOW + timedelta(days=1)
        outcome = _reconcile(reconciler, db, _cluster(ids), now=later)

        assert outcome.created is False
        assert outcome.changed is False
        assert outcome.pattern.last_updated_at == NOW

    def test_status_refreshed_even_without_data_change(self, db, reconciler, denver_reports):
        ids = [r.id for r in denver_reports]
        _reconcile(reconciler, db, _cluster(ids))

        outcome = _reconcile(reconciler, db, _cluster(ids), now=NOW + timedelta(days=10))

        assert outcome.changed is False
        assert outcome.pattern.status == "active"
        assert outcome.pattern.last_updated_at == NOW

    def test_membership_change_replaces_links(self, db, reconciler, denver_reports):
        ids = [r.id for r in denver_reports]
        _reconcile(reconciler, db, _cluster(ids))

        later = NOW + timedelta(hours=6)
        outcome = _reconcile(reconciler, db, _cluster(ids[:5]), now=later)

        assert outcome.changed is True
        assert outcome.pattern.report_count == 5
        assert outcome.pattern.last_updated_at == later
        assert PatternReportRepository(db).report_ids_for_pattern(outcome.pattern.id) == set(ids[:5])

    def test_change_marks_cached_narrative_stale(self, db, reconciler, denver_reports):
        ids = [r.id for r in denver_reports]
        pattern = _reconcile(reconciler, db, _cluster(ids)).pattern
        insight = PatternInsightModel(pattern_id=pattern.id, content="A cluster of lights.")
        db.add(insight)
        db.commit()

        _reconcile(reconciler, db, _cluster(ids))
        db.refresh(insight)
        assert insight.is_stale is False

        _reconcile(reconciler, db, _cluster(ids[:5]))
        db.refresh(insight)
        assert insight.is_stale is True

    def test_duplicate_candidate_in_one_run_is_skipped(self, db, reconciler, denver_reports):
        ids = [r.id for r in denver_reports]
        assert _reconcile(reconciler, db, _cluster(ids)) is not None
        assert _reconcile(reconciler, db, _cluster(ids), reset=False) is None
        assert db.query(PatternModel).count() == 1


class TestTemporalAnomalies:
    def test_creates_active_pattern_covering_the_week(self, db, reconciler):
        outcome = _reconcile(reconciler, db, _anomaly())

        p = outcome.pattern
        assert outcome.created is True
        assert p.pattern_type == "temporal_anomaly"
        assert p.status == "active"
        assert p.pattern_start_date == date(2025, 6, 9)
        assert p.pattern_end_date == date(2025, 6, 15)
        assert p.categories == ["orb", "ufo"]
        assert p.confidence_score == pytest.approx(0.62)
        assert p.significance_score == pytest.approx(0.4)
        assert p.meta["kind"] == "anomaly"
        assert p.meta["is_spike"] is True
        assert p.center_lat is None

    def test_same_week_updates_and_reactivates(self, db, reconciler):
        first = _reconcile(reconciler, db, _anomaly()).pattern
        first.status = "historical"
        db.commit()

        later = NOW + timedelta(days=1)
        outcome = _reconcile(reconciler, db, _anomaly(count=45), now=later)

        assert outcome.created is False
        assert outcome.pattern.id == first.id
        assert outcome.pattern.report_count == 45
        assert outcome.pattern.status == "active"
        assert outcome.pattern.last_updated_at == later

    def test_following_week_is_a_new_pattern(self, db, reconciler):
        _reconcile(reconciler, db, _anomaly())
        outcome = _reconcile(reconciler, db, _anomaly(week_start=date(2025, 6, 16)))

        assert outcome.created is True
        assert db.query(PatternModel).count() == 2


class TestSeasonalPatterns:
    def test_creates_and_matches_by_month(self, db, reconciler):
        created = _reconcile(reconciler, db, _seasonal())
        p = created.pattern
        assert created.created is True
        assert p.status == "active"
        assert p.confidence_score == 0.8
        assert p.significance_score == pytest.approx(0.4)
        assert p.categories == ["ufo"]
        assert p.meta["month"] == 10
        assert p.meta["month_name"] == "October"

        matched = _reconcile(reconciler, db, _seasonal(index=2.0, count=130))
        assert matched.created is False
        assert matched.pattern.id == p.id
        assert matched.pattern.significance_score == pytest.approx(0.5)

    def test_unchanged_month_keeps_timestamp(self, db, reconciler):
        _reconcile(reconciler, db, _seasonal())
        outcome = _reconcile(reconciler, db, _seasonal(), now=NOW + timedelta(days=3))
        assert outcome.changed is False
        assert outcome.pattern.last_updated_at == NOW


def test_unsupported_candidate_type(reconciler):
    with pytest.raises(TypeError):
        reconciler.reconcile(object(), NOW)
