"""
Database engine, session management, and initialization.
"""

import logging
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool
from contextlib import contextmanager
from typing import Callable, Generator

from config.settings import settings
from db.models import Base

logger = logging.getLogger(__name__)


def build_engine(url: str = settings.DATABASE_URL) -> Engine:
    if url in ("sqlite://", "sqlite:///:memory:"):
        # one shared connection, otherwise each session sees an empty database
        return create_engine(
            url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
            echo=settings.DEBUG,
        )
    return create_engine(
        url,
        connect_args={"check_same_thread": False} if "sqlite" in url else {},
        echo=settings.DEBUG,
    )


engine = build_engine()

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_db(bind: Engine = engine) -> None:
    """Create all tables."""
    Base.metadata.create_all(bind=bind)
    logger.info("Catalog database initialized.")


def make_session_factory(url: str) -> Callable[[], Session]:
    """Fresh engine + session factory with tables created (tests, scripts)."""
    new_engine = build_engine(url)
    init_db(new_engine)
    return sessionmaker(autocommit=False, autoflush=False, bind=new_engine)


@contextmanager
def get_db(factory: Callable[[], Session] = SessionLocal) -> Generator[Session, None, None]:
    """Context manager for database sessions."""
    db = factory()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()
