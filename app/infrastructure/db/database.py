"""
Database configuration and session management.
"""

from typing import Generator
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, Session, declarative_base
from sqlalchemy.pool import NullPool

from app.config import settings


def create_db_engine(database_url: str, echo: bool = False) -> Engine:
    """Create an engine; SQLite connections are shared across request threads."""
    if database_url.startswith("sqlite"):
        return create_engine(
            database_url,
            connect_args={"check_same_thread": False},
            echo=echo,
        )
    return create_engine(
        database_url,
        poolclass=NullPool,
        echo=echo,
    )


# Create SQLAlchemy engine
engine = create_db_engine(settings.database_url, echo=settings.debug)

# Create SessionLocal class
SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
)

# Create declarative base
Base = declarative_base()


def get_db() -> Generator[Session, None, None]:
    """
    Dependency function to get database session.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def create_tables(bind: Engine = engine) -> None:
    """Create every table known to the metadata."""
    from app.infrastructure.db import models  # noqa: F401 registers tables
    Base.metadata.create_all(bind=bind)


def drop_tables(bind: Engine = engine) -> None:
    from app.infrastructure.db import models  # noqa: F401
    Base.metadata.drop_all(bind=bind)
