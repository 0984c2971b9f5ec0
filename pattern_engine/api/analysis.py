"""Analysis endpoints: trigger a detection run and inspect past runs.

Triggering a run is an administrative action guarded by the shared
admin secret. Run history is readable without it.
"""

from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from pattern_engine.config import Settings
from pattern_engine.database import get_db
from pattern_engine.dependencies import (
    get_analysis_service,
    get_query_service,
    get_settings,
    require_admin,
)
from pattern_engine.errors import AnalysisInProgressError
from pattern_engine.logging_config import get_logger
from pattern_engine.schemas.analysis import AnalysisRun, AnalysisRunRequest, RunResult

logger = get_logger(__name__)
router = APIRouter()


@router.post("/run", response_model=RunResult, dependencies=[Depends(require_admin)])
def trigger_analysis(
    request: AnalysisRunRequest = AnalysisRunRequest(),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> RunResult:
    """Run geographic, temporal and seasonal detection over all reports.

    Raises:
        HTTPException: 409 if another run is in progress, 500 if the run failed.
    """
    logger.info("analysis_trigger_requested", run_type=request.run_type.value)

    try:
        svc = get_analysis_service(db, settings)
        result = svc.run(run_type=request.run_type, started_by="api")
    except AnalysisInProgressError as e:
        logger.warning("analysis_trigger_rejected", running_run_id=e.run_id)
        raise HTTPException(status_code=409, detail=str(e))
    except Exception as e:
        logger.error("analysis_trigger_failed", error=str(e))
        raise HTTPException(status_code=500, detail=f"Analysis failed: {str(e)}")

    return result


@router.get("/runs", response_model=List[AnalysisRun])
def list_runs(
    limit: int = Query(default=20, ge=1, le=100),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> List[AnalysisRun]:
    """Most recent analysis runs first."""
    return get_query_service(db, settings).list_runs(limit)


@router.get("/runs/{run_id}", response_model=AnalysisRun)
def get_run(
    run_id: int,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> AnalysisRun:
    run = get_query_service(db, settings).get_run(run_id)
    if run is None:
        logger.warning("analysis_run_not_found", run_id=run_id)
        raise HTTPException(status_code=404, detail=f"Analysis run {run_id} not found")
    return run
