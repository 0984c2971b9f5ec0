"""Unit tests for PatternAnalysisService: run orchestration and auditing."""

import threading
from datetime import date, timedelta

import pytest
from sqlalchemy.exc import IntegrityError

from pattern_engine.database import Base, build_engine, build_session_factory
from pattern_engine.dependencies import get_analysis_service
from pattern_engine.errors import AnalysisInProgressError
from pattern_engine.models.analysis_run import AnalysisRunModel
from pattern_engine.models.pattern import PatternModel
from pattern_engine.models.pattern_report import PatternReportModel
from pattern_engine.repositories.analysis_run_repo import AnalysisRunRepository
from pattern_engine.schemas.analysis import RunStatus, RunType

from tests.fixtures import NOW


@pytest.fixture()
def service(db, settings):
    return get_analysis_service(db, settings)


@pytest.fixture()
def mixed_corpus(make_report, denver_reports):
    """One geographic, one temporal and one seasonal candidate.

    A quiet ungeolocated baseline of one report every Monday from March to
    May, then the Denver cluster plus six more reports in the week of
    2025-06-09: a weekly spike and a June peak.
    """
    for week in range(13):
        make_report(event_date=date(2025, 3, 3) + timedelta(weeks=week), category="ghost")
    for _ in range(6):
        make_report(event_date=date(2025, 6, 12), category="ufo")


def _snapshot(db):
    db.expire_all()
    patterns = [
        (
            p.id, p.pattern_type, p.status, p.report_count,
            p.confidence_score, p.significance_score, p.categories, p.meta,
            p.center_lat, p.center_lng, p.pattern_start_date, p.pattern_end_date,
            p.first_detected_at, p.last_updated_at,
        )
        for p in db.query(PatternModel).order_by(PatternModel.id)
    ]
    links = sorted(db.query(PatternReportModel.pattern_id, PatternReportModel.report_id).all())
    return patterns, links


class TestSuccessfulRun:
    def test_run_detects_cluster_and_records_audit_row(self, db, service, denver_reports, make_report):
        make_report(status="pending")

        result = service.run(now=NOW)

        assert result.status == RunStatus.COMPLETED
        assert result.run_type == RunType.FULL
        assert result.reports_analyzed == 6
        assert result.patterns_detected == 1
        assert result.patterns_updated == 0
        assert result.patterns_archived == 0
        assert result.errors == []

        run = db.get(AnalysisRunModel, result.run_id)
        assert run.status == "completed"
        assert run.completed_at is not None
        assert run.patterns_detected == 1
        assert run.meta["started_by"] == "system"
        assert run.meta["candidates"] == 1
        assert run.meta["errors"] == []

        pattern = db.query(PatternModel).one()
        assert pattern.pattern_type == "geographic_cluster"
        assert pattern.status == "emerging"

    def test_second_run_creates_no_new_patterns(self, db, service, denver_reports):
        first = service.run(now=NOW)
        second = service.run(now=NOW + timedelta(minutes=5))

        assert first.patterns_detected == 1
        assert second.patterns_detected == 0
        assert second.patterns_updated == 1
        assert db.query(PatternModel).count() == 1

    def test_rerun_over_unchanged_corpus_leaves_every_pattern_untouched(self, db, service, mixed_corpus):
        first = service.run(now=NOW)
        before = _snapshot(db)

        second = service.run(now=NOW + timedelta(minutes=5))
        after = _snapshot(db)

        assert first.patterns_detected == 3
        assert sorted(p[1] for p in before[0]) == [
            "geographic_cluster",
            "seasonal_pattern",
            "temporal_anomaly",
        ]
        assert second.patterns_detected == 0
        assert second.patterns_updated == 3
        assert second.errors == []
        assert after == before

    def test_empty_corpus(self, db, service):
        result = service.run(run_type=RunType.INCREMENTAL, now=NOW)

        assert result.status == RunStatus.COMPLETED
        assert result.run_type == RunType.INCREMENTAL
        assert result.reports_analyzed == 0
        assert result.patterns_detected == 0

    def test_sweep_archives_stale_active_patterns(self, db, service, make_pattern):
        stale = make_pattern(status="active", last_updated_at=NOW - timedelta(days=45))

        result = service.run(now=NOW)

        db.refresh(stale)
        assert result.patterns_archived == 1
        assert stale.status == "historical"

    def test_sweep_leaves_emerging_patterns_alone_by_default(self, db, service, make_pattern):
        p = make_pattern(
            status="emerging",
            last_updated_at=NOW - timedelta(days=45),
            meta={"kind": "cluster", "density": 1.0, "first_date": "2025-01-01", "last_date": "2025-01-02"},
        )

        service.run(now=NOW)
        db.refresh(p)
        assert p.status == "emerging"

    def test_reclassify_on_sweep_when_enabled(self, db, settings, make_pattern):
        settings.reclassify_on_sweep = True
        p = make_pattern(
            status="emerging",
            meta={"kind": "cluster", "density": 1.0, "first_date": "2025-01-01", "last_date": "2025-01-02"},
        )

        result = get_analysis_service(db, settings).run(now=NOW)

        db.refresh(p)
        assert p.status == "historical"
        assert db.get(AnalysisRunModel, result.run_id).meta["patterns_reclassified"] == 1


class TestPartialFailures:
    def test_failing_detector_is_isolated(self, db, service, denver_reports, monkeypatch):
        def boom(**kwargs):
            raise RuntimeError("weekly aggregation failed")

        monkeypatch.setattr(service.temporal, "detect", boom)

        result = service.run(now=NOW)

        assert result.status == RunStatus.COMPLETED
        assert result.patterns_detected == 1
        assert len(result.errors) == 1
        assert "temporal detector" in result.errors[0]
        assert "weekly aggregation failed" in result.errors[0]

    def test_failing_candidate_is_skipped(self, db, service, denver_reports, monkeypatch):
        def boom(candidate, now=None):
            raise ValueError("bad candidate")

        monkeypatch.setattr(service.reconciler, "reconcile", boom)

        result = service.run(now=NOW)

        assert result.status == RunStatus.COMPLETED
        assert result.patterns_detected == 0
        assert any("bad candidate" in e for e in result.errors)
        assert db.query(PatternModel).count() == 0


class TestRunFailure:
    def test_unexpected_error_marks_run_failed_and_propagates(self, db, service, monkeypatch):
        def boom(*args, **kwargs):
            raise RuntimeError("database went away")

        monkeypatch.setattr(service.lifecycle, "archive_stale", boom)

        with pytest.raises(RuntimeError, match="database went away"):
            service.run(now=NOW)

        run = db.query(AnalysisRunModel).one()
        assert run.status == "failed"
        assert run.error_message == "database went away"
        assert "RuntimeError" in run.error_stack
        assert run.completed_at is not None


class TestOverlapGuard:
    def test_refuses_while_another_run_is_in_progress(self, db, service):
        active = AnalysisRunModel(status="running", started_at=NOW - timedelta(minutes=5))
        db.add(active)
        db.commit()

        with pytest.raises(AnalysisInProgressError) as exc_info:
            service.run(now=NOW)

        assert exc_info.value.run_id == active.id
        assert db.query(AnalysisRunModel).count() == 1

    def test_abandoned_run_is_closed_and_new_run_proceeds(self, db, service):
        abandoned = AnalysisRunModel(status="running", started_at=NOW - timedelta(hours=2))
        db.add(abandoned)
        db.commit()

        result = service.run(now=NOW)

        db.refresh(abandoned)
        assert result.status == RunStatus.COMPLETED
        assert abandoned.status == "failed"
        assert "Abandoned" in abandoned.error_message

    def test_completed_runs_do_not_block(self, db, service):
        db.add(AnalysisRunModel(status="completed", started_at=NOW - timedelta(minutes=1)))
        db.commit()

        assert service.run(now=NOW).status == RunStatus.COMPLETED

    def test_database_admits_a_single_running_row(self, db):
        db.add(AnalysisRunModel(status="running", started_at=NOW - timedelta(minutes=1)))
        db.commit()

        db.add(AnalysisRunModel(status="running", started_at=NOW))
        with pytest.raises(IntegrityError):
            db.commit()
        db.rollback()

        db.add(AnalysisRunModel(status="completed", started_at=NOW))
        db.add(AnalysisRunModel(status="completed", started_at=NOW))
        db.commit()
        assert db.query(AnalysisRunModel).count() == 3

    def test_lost_claim_is_refused_even_when_the_check_passed(self, db, service, monkeypatch):
        # Another trigger claimed the slot between our check and our insert
        active = AnalysisRunModel(status="running", started_at=NOW - timedelta(minutes=1))
        db.add(active)
        db.commit()
        monkeypatch.setattr(AnalysisRunRepository, "get_running", lambda self: [])

        with pytest.raises(AnalysisInProgressError) as exc_info:
            service.run(now=NOW)

        assert exc_info.value.run_id == active.id
        assert db.query(AnalysisRunModel).count() == 1

    def test_concurrent_triggers_admit_exactly_one_run(self, tmp_path, settings, monkeypatch):
        engine = build_engine(f"sqlite:///{tmp_path / 'runs.db'}")
        Base.metadata.create_all(engine)
        session_factory = build_session_factory(engine)

        both_checked = threading.Barrier(2)
        checked = set()
        original_get_running = AnalysisRunRepository.get_running

        def get_running_then_wait(self):
            running = original_get_running(self)
            # Neither thread inserts until both have seen an empty table
            if threading.get_ident() not in checked:
                checked.add(threading.get_ident())
                both_checked.wait(timeout=10)
            return running

        monkeypatch.setattr(AnalysisRunRepository, "get_running", get_running_then_wait)

        admitted, refused, failed = [], [], []

        def trigger():
            session = session_factory()
            try:
                admitted.append(get_analysis_service(session, settings).run(now=NOW).run_id)
            except AnalysisInProgressError:
                refused.append(True)
            except Exception as exc:
                failed.append(exc)
            finally:
                session.close()

        threads = [threading.Thread(target=trigger) for _ in range(2)]
        for t in threads:
            t.start()
        for t in threads:
            t.join(timeout=30)
        engine.dispose()

        assert failed == []
        assert len(admitted) == 1
        assert len(refused) == 1
