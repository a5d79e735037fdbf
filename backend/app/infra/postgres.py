# app/infra/postgres.py

import logging
import math
from contextlib import contextmanager

from fastapi import Request
from sqlalchemy import create_engine, text
from sqlalchemy.engine import make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.config import Settings
from app.models.base import Base

logger = logging.getLogger(__name__)

# =========================
# ENGINE CONFIGURATION
# =========================

def create_store_engine(settings: Settings):
    """
    Build the engine for the configured store.
    Every store call is bounded by settings.store_timeout_seconds so a hung
    database cannot stall a request forever.
    """
    url = make_url(settings.database_url)
    timeout = settings.store_timeout_seconds

    if url.get_backend_name() == "sqlite":
        kwargs = {
            "connect_args": {"check_same_thread": False, "timeout": timeout},
        }
        if url.database in (None, "", ":memory:"):
            # One shared connection, otherwise every session sees an empty db
            kwargs["poolclass"] = StaticPool
        return create_engine(url, echo=False, **kwargs)

    return create_engine(
        url,
        pool_pre_ping=True,   # Check connections before using them
        pool_size=5,
        max_overflow=10,
        pool_recycle=3600,
        pool_timeout=timeout,
        connect_args={
            "connect_timeout": max(1, math.ceil(timeout)),
            "options": f"-c statement_timeout={int(timeout * 1000)}",
        },
        echo=False,
    )


def make_session_factory(engine):
    return sessionmaker(
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
        bind=engine,
    )

# =========================
# DATABASE FUNCTIONS
# =========================

def get_db(request: Request):
    """
    FastAPI dependency to provide a DB session to routes.
    Usage:
        def my_route(db: Session = Depends(get_db)):
            ...
    """
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def db_session(session_factory):
    """
    Context manager for standalone DB operations (maintenance commands).
    Usage:
        with db_session(factory) as db:
            purge_expired(db)
    """
    session = session_factory()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def init_db(engine):
    """Create all tables based on registered models."""
    # Import models here to register them with Base
    from app.models.message import Message  # noqa: F401

    Base.metadata.create_all(bind=engine)
    logger.info("Database tables ready")


def test_connection(engine) -> bool:
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return True
    except SQLAlchemyError as e:
        logger.error("Database connection failed: %s", e)
        return False
