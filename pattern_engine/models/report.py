"""Report ORM model for submitted incident reports, read-only to the engine."""

from sqlalchemy import Column, Date, DateTime, Float, Integer, String, Text

from pattern_engine.database import Base
from pattern_engine.utils.timeutil import utcnow


class ReportModel(Base):
    __tablename__ = "reports"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String, nullable=False)
    status = Column(String, nullable=False, default="pending", index=True)  # only "approved" is analysed
    category = Column(String, index=True)

    event_date = Column(Date, nullable=False, index=True)
    latitude = Column(Float)
    longitude = Column(Float)

    location_description = Column(String)
    description = Column(Text)

    created_at = Column(DateTime, nullable=False, default=utcnow)

    def __repr__(self) -> str:
        return f"<Report id={self.id} status={self.status} category={self.category}>"
