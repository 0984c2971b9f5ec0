"""Pattern ↔ report link repository."""

from typing import Iterable, List, Set, Tuple

from sqlalchemy.orm import Session

from pattern_engine.models.pattern_report import PatternReportModel
from pattern_engine.models.report import ReportModel
from pattern_engine.repositories.base import BaseRepository


class PatternReportRepository(BaseRepository[PatternReportModel]):
    def __init__(self, db: Session):
        super().__init__(db, PatternReportModel)

    def report_ids_for_pattern(self, pattern_id: int) -> Set[int]:
        rows = (
            self.db.query(self.model.report_id)
            .filter(self.model.pattern_id == pattern_id)
            .all()
        )
        return {r.report_id for r in rows}

    def delete_for_pattern(self, pattern_id: int) -> int:
        count = (
            self.query()
            .filter(self.model.pattern_id == pattern_id)
            .delete(synchronize_session="fetch")
        )
        self.db.flush()
        return count

    def replace_for_pattern(
        self, pattern_id: int, report_ids: Iterable[int], relevance_score: float = 1.0
    ) -> int:
        """Drop every existing link for the pattern and insert the new membership."""
        self.delete_for_pattern(pattern_id)
        links = [
            PatternReportModel(pattern_id=pattern_id, report_id=rid, relevance_score=relevance_score)
            for rid in sorted(set(report_ids))
        ]
        self.create_many(links)
        return len(links)

    def get_linked_reports(
        self, pattern_id: int, *, limit: int = 20
    ) -> List[Tuple[PatternReportModel, ReportModel]]:
        return (
            self.db.query(self.model, ReportModel)
            .join(ReportModel, ReportModel.id == self.model.report_id)
            .filter(self.model.pattern_id == pattern_id)
            .order_by(self.model.relevance_score.desc(), ReportModel.event_date.desc())
            .limit(limit)
            .all()
        )
