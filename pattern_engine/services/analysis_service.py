"""Runs one auditable pattern analysis over the report corpus.

Sequence: guard against overlapping runs → open the run record → run the
geographic, temporal and seasonal detectors → reconcile every candidate →
archive stale patterns → close the run record.

A failing detector contributes no candidates and a failing candidate is
skipped; both are logged and listed in the run's errors. Anything else
marks the run failed and propagates.
"""

import time
import traceback
from datetime import timedelta
from typing import Callable, List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from pattern_engine.config import Settings
from pattern_engine.engines.geo_clusterer import GeospatialClusterer
from pattern_engine.engines.lifecycle_manager import LifecycleManager
from pattern_engine.engines.reconciler import PatternReconciler
from pattern_engine.engines.seasonal_analyzer import SeasonalAnalyzer
from pattern_engine.engines.temporal_detector import TemporalAnomalyDetector
from pattern_engine.errors import AnalysisInProgressError
from pattern_engine.logging_config import bind_run_context, clear_run_context, get_logger
from pattern_engine.models.analysis_run import AnalysisRunModel
from pattern_engine.repositories.analysis_run_repo import AnalysisRunRepository
from pattern_engine.repositories.report_repo import ReportRepository
from pattern_engine.schemas.analysis import RunResult, RunStatus, RunType
from pattern_engine.utils.timeutil import utcnow

logger = get_logger(__name__)


class PatternAnalysisService:
    def __init__(
        self,
        db: Session,
        report_repo: ReportRepository,
        run_repo: AnalysisRunRepository,
        geo_clusterer: GeospatialClusterer,
        temporal_detector: TemporalAnomalyDetector,
        seasonal_analyzer: SeasonalAnalyzer,
        reconciler: PatternReconciler,
        lifecycle: LifecycleManager,
        settings: Optional[Settings] = None,
    ):
        self.db = db
        self.reports = report_repo
        self.runs = run_repo
        self.geo = geo_clusterer
        self.temporal = temporal_detector
        self.seasonal = seasonal_analyzer
        self.reconciler = reconciler
        self.lifecycle = lifecycle
        self.settings = settings or Settings()

    def run(
        self,
        run_type: RunType = RunType.FULL,
        now=None,
        started_by: str = "system",
    ) -> RunResult:
        now = now or utcnow()
        t0 = time.monotonic()

        self._guard_against_overlap(now)
        run = self._claim_run(run_type, now, started_by)
        bind_run_context(run.id, run_type.value)
        logger.info("analysis_run_started", started_by=started_by)

        errors: List[str] = []
        try:
            reports_analyzed = self.reports.count_approved()
            today = now.date()

            candidates = (
                self._detect("geographic", lambda: self.geo.cluster(today=today), errors)
                + self._detect("temporal", lambda: self.temporal.detect(today=today), errors)
                + self._detect("seasonal", lambda: self.seasonal.analyze(today=today), errors)
            )

            detected = updated = 0
            self.reconciler.reset()
            for candidate in candidates:
                try:
                    outcome = self.reconciler.reconcile(candidate, now)
                    self.db.commit()
                except Exception as exc:
                    self.db.rollback()
                    logger.exception("candidate_reconcile_failed", key=str(candidate.key))
                    errors.append(f"reconcile {candidate.key}: {exc}")
                    continue
                if outcome is None:
                    continue
                if outcome.created:
                    detected += 1
                else:
                    updated += 1

            archived = self.lifecycle.archive_stale(self.settings.staleness_days, now)
            reclassified = 0
            if self.settings.reclassify_on_sweep:
                reclassified = self.lifecycle.reclassify(now)
            self.db.commit()

            duration_ms = int((time.monotonic() - t0) * 1000)
            run.status = RunStatus.COMPLETED.value
            run.completed_at = utcnow()
            run.reports_analyzed = reports_analyzed
            run.patterns_detected = detected
            run.patterns_updated = updated
            run.patterns_archived = archived
            run.meta = {
                **(run.meta or {}),
                "candidates": len(candidates),
                "patterns_reclassified": reclassified,
                "duration_ms": duration_ms,
                "errors": errors,
            }
            self.db.commit()

            logger.info(
                "analysis_run_completed",
                reports_analyzed=reports_analyzed,
                patterns_detected=detected,
                patterns_updated=updated,
                patterns_archived=archived,
                errors=len(errors),
                duration_ms=duration_ms,
            )
            return RunResult(
                run_id=run.id,
                run_type=run_type,
                status=RunStatus.COMPLETED,
                reports_analyzed=reports_analyzed,
                patterns_detected=detected,
                patterns_updated=updated,
                patterns_archived=archived,
                duration_ms=duration_ms,
                errors=errors,
            )
        except Exception as exc:
            self.db.rollback()
            logger.exception("analysis_run_failed", error=str(exc))
            run.status = RunStatus.FAILED.value
            run.completed_at = utcnow()
            run.error_message = str(exc) or type(exc).__name__
            run.error_stack = traceback.format_exc()
            run.meta = {**(run.meta or {}), "errors": errors}
            self.db.commit()
            raise
        finally:
            clear_run_context()

    # ── helpers ──────────────────────────────────────────────────────

    def _detect(self, name: str, detector: Callable[[], list], errors: List[str]) -> list:
        """Run one detector; a failure yields no candidates instead of aborting the run."""
        try:
            found = detector()
        except Exception as exc:
            self.db.rollback()
            logger.exception("detector_failed", detector=name)
            errors.append(f"{name} detector: {exc}")
            return []
        logger.info("detector_completed", detector=name, candidates=len(found))
        return found

    def _guard_against_overlap(self, now) -> None:
        """Refuse to start while another run is in progress.

        Runs left ``running`` longer than the configured timeout are
        assumed abandoned (e.g. the process was killed) and marked failed.
        """
        timeout = timedelta(minutes=self.settings.run_timeout_minutes)
        for active in self.runs.get_running():
            if now - active.started_at < timeout:
                raise AnalysisInProgressError(active.id)
            logger.warning("abandoned_run_closed", abandoned_run_id=active.id)
            active.status = RunStatus.FAILED.value
            active.completed_at = now
            active.error_message = (
                f"Abandoned: still running after {self.settings.run_timeout_minutes} minutes"
            )
        self.db.commit()

    def _claim_run(self, run_type: RunType, now, started_by: str) -> AnalysisRunModel:
        """Insert this run's ``running`` row.

        The overlap check above is advisory; two callers can both pass it.
        The partial unique index on running rows lets only one insert
        commit, and the loser is refused here.
        """
        try:
            run = self.runs.create(AnalysisRunModel(
                run_type=run_type.value,
                status=RunStatus.RUNNING.value,
                started_at=now,
                meta={"started_by": started_by},
            ))
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            winner = self.runs.get_latest_running()
            logger.warning("analysis_run_claim_lost", running_run_id=winner.id if winner else None)
            raise AnalysisInProgressError(winner.id if winner else None)
        return run
