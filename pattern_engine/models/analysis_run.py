"""Analysis run ORM model: one audit row per orchestrator invocation."""

from sqlalchemy import Column, DateTime, Index, Integer, String, Text, text
from sqlalchemy.types import JSON

from pattern_engine.database import Base
from pattern_engine.utils.timeutil import utcnow

RUNNING = "running"


class AnalysisRunModel(Base):
    __tablename__ = "pattern_analysis_runs"
    __table_args__ = (
        # Partial unique index: at most one row may be running at any time
        Index(
            "uq_pattern_analysis_runs_running",
            "status",
            unique=True,
            sqlite_where=text(f"status = '{RUNNING}'"),
            postgresql_where=text(f"status = '{RUNNING}'"),
        ),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    run_type = Column(String, nullable=False, default="full")  # RunType enum value
    status = Column(String, nullable=False, default=RUNNING, index=True)  # RunStatus enum value

    reports_analyzed = Column(Integer, nullable=False, default=0)
    patterns_detected = Column(Integer, nullable=False, default=0)
    patterns_updated = Column(Integer, nullable=False, default=0)
    patterns_archived = Column(Integer, nullable=False, default=0)

    error_message = Column(Text)
    error_stack = Column(Text)
    meta = Column("metadata", JSON, nullable=False, default=dict)

    started_at = Column(DateTime, nullable=False, default=utcnow, index=True)
    completed_at = Column(DateTime)

    def __repr__(self) -> str:
        return f"<AnalysisRun id={self.id} type={self.run_type} status={self.status}>"
