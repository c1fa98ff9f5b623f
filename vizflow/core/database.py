from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel

from vizflow.core.config import settings

# Import all models to register them with SQLModel metadata
from vizflow.models import Chart, Dashboard, GenerationJob  # noqa: F401


def _engine_kwargs(url: str) -> dict:
    if url.startswith("sqlite"):
        # In-memory SQLite must share one connection across threads
        return {"connect_args": {"check_same_thread": False}, "poolclass": StaticPool}
    return {"pool_pre_ping": True}


# Create database engine
engine = create_engine(settings.CHARTS_DB_URL, future=True, **_engine_kwargs(settings.CHARTS_DB_URL))

# Create session factory
SessionLocal = sessionmaker(bind=engine, class_=Session, autoflush=False, autocommit=False, future=True)


def get_db():
    """Dependency for getting database session"""
    with SessionLocal() as session:
        yield session


def get_session_factory():
    """Dependency for background work that must open its own session"""
    return SessionLocal


def init_db():
    """Initialize database tables"""
    SQLModel.metadata.create_all(engine)
