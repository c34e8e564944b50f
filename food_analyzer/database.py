"""SQLAlchemy engine and session factory for the local store."""

from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from food_analyzer.config import settings

connect_args = {}
if settings.database_url.startswith("sqlite"):
    connect_args = {"check_same_thread": False}

engine = create_engine(settings.database_url, connect_args=connect_args)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def init_db(bind=None) -> None:
    """Create all tables that do not exist yet."""
    import food_analyzer.models  # noqa: F401

    Base.metadata.create_all(bind=bind or engine)
