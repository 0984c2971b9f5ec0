"""Analysis run schemas."""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class RunType(str, Enum):
    FULL = "full"
    INCREMENTAL = "incremental"


class RunStatus(str, Enum):
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


class AnalysisRunRequest(BaseModel):
    run_type: RunType = Field(RunType.FULL, description="Run label recorded on the audit record")


class RunResult(BaseModel):
    """Outcome of one completed analysis run."""

    run_id: int
    run_type: RunType
    status: RunStatus
    reports_analyzed: int
    patterns_detected: int
    patterns_updated: int
    patterns_archived: int
    duration_ms: int
    errors: list[str] = []


class AnalysisRun(BaseModel):
    id: int
    run_type: RunType
    status: RunStatus
    reports_analyzed: int
    patterns_detected: int
    patterns_updated: int
    patterns_archived: int
    error_message: Optional[str] = None
    started_at: datetime
    completed_at: Optional[datetime] = None

    model_config = {"from_attributes": True}
