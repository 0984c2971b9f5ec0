"""Generic base repository with reusable CRUD operations."""

from typing import Generic, Iterable, List, Optional, Type, TypeVar

from sqlalchemy.orm import Query, Session

from pattern_engine.database import Base

T = TypeVar("T", bound=Base)


class BaseRepository(Generic[T]):
    """Thin data-access layer over SQLAlchemy.

    Subclasses add domain-specific queries.
    Repositories only modify the session (add/delete/flush) - the caller
    controls when to commit or rollback, so each reconciled pattern can
    be its own transaction.
    """

    def __init__(self, db: Session, model: Type[T]):
        self.db = db
        self.model = model

    def query(self) -> Query:
        return self.db.query(self.model)

    # ── reads ────────────────────────────────────────────────────────

    def get(self, id: int) -> Optional[T]:
        return self.query().filter(self.model.id == id).first()

    def get_many(self, ids: Iterable[int]) -> List[T]:
        ids = list(ids)
        if not ids:
            return []
        return self.query().filter(self.model.id.in_(ids)).all()

    def get_all(self, *, skip: int = 0, limit: int = 100) -> List[T]:
        return self.query().order_by(self.model.id).offset(skip).limit(limit).all()

    def count(self) -> int:
        return self.query().count()

    # ── writes ───────────────────────────────────────────────────────

    def create(self, obj: T) -> T:
        """Add object to session and flush so it gets an id (caller must commit)."""
        self.db.add(obj)
        self.db.flush()
        return obj

    def create_many(self, objs: List[T]) -> List[T]:
        self.db.add_all(objs)
        self.db.flush()
        return objs

    def update(self, obj: T) -> T:
        """Flush pending attribute changes on an attached object (caller must commit)."""
        self.db.flush()
        return obj

    def delete(self, id: int) -> bool:
        obj = self.get(id)
        if obj:
            self.db.delete(obj)
            self.db.flush()
            return True
        return False
