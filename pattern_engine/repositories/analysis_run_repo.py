"""Analysis run repository."""

from typing import List, Optional

from sqlalchemy.orm import Session

from pattern_engine.models.analysis_run import AnalysisRunModel
from pattern_engine.repositories.base import BaseRepository
from pattern_engine.schemas.analysis import RunStatus


class AnalysisRunRepository(BaseRepository[AnalysisRunModel]):
    def __init__(self, db: Session):
        super().__init__(db, AnalysisRunModel)

    def get_running(self) -> List[AnalysisRunModel]:
        return (
            self.query()
            .filter(self.model.status == RunStatus.RUNNING.value)
            .order_by(self.model.started_at.desc())
            .all()
        )

    def get_latest_running(self) -> Optional[AnalysisRunModel]:
        return (
            self.query()
            .filter(self.model.status == RunStatus.RUNNING.value)
            .order_by(self.model.started_at.desc())
            .first()
        )

    def get_recent(self, limit: int = 20) -> List[AnalysisRunModel]:
        return (
            self.query()
            .order_by(self.model.started_at.desc(), self.model.id.desc())
            .limit(limit)
            .all()
        )
