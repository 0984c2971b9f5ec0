"""Engine, sessions and schema creation for the pattern store.

The application engine is built on first use from ``Settings`` so that
importing models or repositories never touches the database. Tests and
the container build their own engines with :func:`build_engine`.
"""

from pathlib import Path

from sqlalchemy import create_engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from pattern_engine.config import Settings

SQLITE_FILE_PREFIX = "sqlite:///"


class Base(DeclarativeBase):
    pass


def _sqlite_connect_args(database_url: str) -> dict:
    """Connection options for SQLite URLs; empty for any other backend.

    Sessions are handed across FastAPI's worker threads, hence
    ``check_same_thread=False``. A file database's directory is created
    if missing so a fresh checkout can run an analysis straight away.
    """
    if not database_url.startswith("sqlite"):
        return {}
    if database_url.startswith(SQLITE_FILE_PREFIX):
        db_path = database_url[len(SQLITE_FILE_PREFIX):]
        if db_path and db_path != ":memory:":
            Path(db_path).parent.mkdir(parents=True, exist_ok=True)
    return {"check_same_thread": False}


def build_engine(database_url: str, echo: bool = False):
    return create_engine(database_url, echo=echo, connect_args=_sqlite_connect_args(database_url))


def build_session_factory(engine) -> sessionmaker[Session]:
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


# Process-wide engine and session factory used by the HTTP app
_engine = None
_session_factory = None


def _app_engine():
    global _engine
    if _engine is None:
        settings = Settings()
        _engine = build_engine(settings.database_url, echo=settings.debug)
    return _engine


def _app_session_factory():
    global _session_factory
    if _session_factory is None:
        _session_factory = build_session_factory(_app_engine())
    return _session_factory


def get_db():
    """Request-scoped session; closed when the response is sent."""
    session = _app_session_factory()()
    try:
        yield session
    finally:
        session.close()


def init_db():
    """Create the report, pattern, link, insight and run tables if absent."""
    import pattern_engine.models  # noqa: F401  (registers the tables on Base.metadata)
    Base.metadata.create_all(bind=_app_engine())
