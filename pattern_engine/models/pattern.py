"""Detected pattern ORM model."""

from sqlalchemy import Column, Date, DateTime, Float, Integer, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.types import JSON

from pattern_engine.database import Base
from pattern_engine.utils.timeutil import utcnow


class PatternModel(Base):
    __tablename__ = "detected_patterns"
    # AUTOINCREMENT keeps SQLite from ever handing out a previously used id
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column(Integer, primary_key=True, autoincrement=True)

    pattern_type = Column(String, nullable=False, index=True)  # PatternType enum value
    status = Column(String, nullable=False, default="emerging", index=True)  # PatternStatus enum value
    confidence_score = Column(Float, nullable=False, default=0.0)
    significance_score = Column(Float, nullable=False, default=0.0, index=True)
    report_count = Column(Integer, nullable=False, default=0)

    # Geographic patterns only
    center_lat = Column(Float)
    center_lng = Column(Float)
    radius_km = Column(Float)

    # Temporal patterns only
    pattern_start_date = Column(Date)
    pattern_end_date = Column(Date)

    categories = Column(JSON, nullable=False, default=list)
    # "metadata" is reserved on declarative classes
    meta = Column("metadata", JSON, nullable=False, default=dict)

    # Narrative fields are written by the insight generator, never by the engine
    ai_title = Column(String)
    ai_summary = Column(String)
    ai_narrative = Column(Text)

    first_detected_at = Column(DateTime, nullable=False, default=utcnow)
    last_updated_at = Column(DateTime, nullable=False, default=utcnow, index=True)

    # Relationships
    report_links = relationship(
        "PatternReportModel", back_populates="pattern", cascade="all, delete-orphan"
    )
    insights = relationship(
        "PatternInsightModel", back_populates="pattern", cascade="all, delete-orphan"
    )

    def __repr__(self) -> str:
        return f"<Pattern id={self.id} type={self.pattern_type} status={self.status}>"
