"""Shared test fixtures.

Every test gets a fresh in-memory SQLite database so tests are fully isolated.
Time-dependent tests run against the fixed clock in tests.fixtures.
"""

from datetime import date

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from pattern_engine.config import Settings
from pattern_engine.database import Base
from pattern_engine.models.pattern import PatternModel
from pattern_engine.models.report import ReportModel

import pattern_engine.models  # noqa: F401

from tests.fixtures import DENVER_POINTS, NOW, TODAY


@pytest.fixture()
def db_engine():
    engine = create_engine("sqlite:///:memory:")
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def db(db_engine) -> Session:
    session = sessionmaker(bind=db_engine)()
    yield session
    session.close()


@pytest.fixture()
def settings() -> Settings:
    return Settings(database_url="sqlite:///:memory:", admin_secret="", debug=False)


# ── Convenience fixtures ─────────────────────────────────────────────────

@pytest.fixture()
def make_report(db: Session):
    """Factory inserting an approved report; override any column by keyword."""

    def _make(
        event_date: date = TODAY,
        latitude=None,
        longitude=None,
        category="ufo",
        status="approved",
        **kwargs,
    ) -> ReportModel:
        report = ReportModel(
            title=kwargs.pop("title", f"Sighting on {event_date.isoformat()}"),
            status=status,
            category=category,
            event_date=event_date,
            latitude=latitude,
            longitude=longitude,
            **kwargs,
        )
        db.add(report)
        db.commit()
        db.refresh(report)
        return report

    return _make


@pytest.fixture()
def make_pattern(db: Session):
    """Factory inserting a detected pattern with sensible defaults."""

    def _make(**kwargs) -> PatternModel:
        values = {
            "pattern_type": "geographic_cluster",
            "status": "active",
            "confidence_score": 0.5,
            "significance_score": 0.5,
            "report_count": 5,
            "categories": [],
            "meta": {},
            "first_detected_at": NOW,
            "last_updated_at": NOW,
        }
        values.update(kwargs)
        pattern = PatternModel(**values)
        db.add(pattern)
        db.commit()
        db.refresh(pattern)
        return pattern

    return _make


@pytest.fixture()
def denver_reports(make_report):
    """Six approved, geolocated reports dated 2025-06-10 .. 2025-06-15."""
    return [
        make_report(
            event_date=date(2025, 6, 10 + i),
            latitude=lat,
            longitude=lng,
            category="ufo" if i % 2 == 0 else "orb",
        )
        for i, (lat, lng) in enumerate(DENVER_POINTS)
    ]
