"""Pattern ↔ report association."""

from sqlalchemy import Column, DateTime, Float, ForeignKey, Integer, UniqueConstraint
from sqlalchemy.orm import relationship

from pattern_engine.database import Base
from pattern_engine.utils.timeutil import utcnow


class PatternReportModel(Base):
    __tablename__ = "pattern_reports"
    __table_args__ = (
        UniqueConstraint("pattern_id", "report_id", name="uq_pattern_report"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    pattern_id = Column(Integer, ForeignKey("detected_patterns.id"), nullable=False, index=True)
    report_id = Column(Integer, ForeignKey("reports.id"), nullable=False, index=True)
    relevance_score = Column(Float, nullable=False, default=1.0)
    added_at = Column(DateTime, nullable=False, default=utcnow)

    # Relationships
    pattern = relationship("PatternModel", back_populates="report_links")
    report = relationship("ReportModel")

    def __repr__(self) -> str:
        return f"<PatternReport pattern_id={self.pattern_id} report_id={self.report_id}>"
