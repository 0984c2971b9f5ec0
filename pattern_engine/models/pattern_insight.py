"""Cached AI narratives for patterns."""

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from pattern_engine.database import Base
from pattern_engine.utils.timeutil import utcnow


class PatternInsightModel(Base):
    __tablename__ = "pattern_insights"

    id = Column(Integer, primary_key=True, autoincrement=True)
    pattern_id = Column(Integer, ForeignKey("detected_patterns.id"), nullable=False, index=True)
    insight_type = Column(String, nullable=False, default="pattern_narrative")
    title = Column(String)
    content = Column(Text, nullable=False)
    summary = Column(String)
    model_used = Column(String)
    is_stale = Column(Boolean, nullable=False, default=False)
    generated_at = Column(DateTime, nullable=False, default=utcnow)

    # Relationships
    pattern = relationship("PatternModel", back_populates="insights")

    def __repr__(self) -> str:
        return f"<PatternInsight pattern_id={self.pattern_id} stale={self.is_stale}>"
