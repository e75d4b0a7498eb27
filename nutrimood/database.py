"""Database engine and session plumbing for the log store."""

from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from nutrimood.config import settings

connect_args = (
    {"check_same_thread": False} if settings.database_url.startswith("sqlite") else {}
)

engine = create_engine(settings.database_url, connect_args=connect_args)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    """FastAPI dependency yielding a session that is closed after the request."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db() -> None:
    """Create all tables on the configured engine."""
    import nutrimood.models  # noqa: F401  (register models on Base)

    Base.metadata.create_all(bind=engine)
