"""Cached narrative repository."""

from typing import Optional

from sqlalchemy.orm import Session

from pattern_engine.models.pattern_insight import PatternInsightModel
from pattern_engine.repositories.base import BaseRepository

NARRATIVE = "pattern_narrative"


class PatternInsightRepository(BaseRepository[PatternInsightModel]):
    def __init__(self, db: Session):
        super().__init__(db, PatternInsightModel)

    def get_latest_for_pattern(
        self, pattern_id: int, insight_type: str = NARRATIVE
    ) -> Optional[PatternInsightModel]:
        return (
            self.query()
            .filter(
                self.model.pattern_id == pattern_id,
                self.model.insight_type == insight_type,
                self.model.is_stale.is_(False),
            )
            .order_by(self.model.generated_at.desc(), self.model.id.desc())
            .first()
        )

    def mark_stale_for_pattern(self, pattern_id: int) -> int:
        """Flag every fresh insight of the pattern as stale (caller must commit)."""
        return (
            self.query()
            .filter(self.model.pattern_id == pattern_id, self.model.is_stale.is_(False))
            .update({self.model.is_stale: True}, synchronize_session="fetch")
        )
