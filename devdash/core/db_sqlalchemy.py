"""SQLAlchemy engine / session layer for devdash.

Key concepts:
1. Engine & Session management (DATABASE_URL from settings)
2. FastAPI dependency (`get_db`)
3. `session_scope()` for scripts / collectors (commit or rollback per unit of work)

Collectors receive a session factory explicitly, so tests and scripts can
hand in their own engine instead of the module-level one.

    from devdash.core.db_sqlalchemy import session_scope
    from devdash.core import store

    with session_scope() as s:
        store.record_metric(s, source="docker", metric_name="cpu_percent", value=12.5)
"""
from __future__ import annotations

from contextlib import contextmanager
from typing import Callable, Iterator, Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, Session

from devdash.config.settings import settings
from devdash.core.persistence_models import Base

SessionFactory = Callable[[], Session]

# ---------------------------------------------------------------------------
# Engine / Session setup
# ---------------------------------------------------------------------------

def make_engine(url: str) -> Engine:
    connect_args = {}
    if url.startswith("sqlite"):
        # FastAPI sync 엔드포인트는 threadpool에서 실행됨
        connect_args["check_same_thread"] = False
    return create_engine(
        url,
        pool_pre_ping=True,      # Detect stale connections
        future=True,
        connect_args=connect_args,
    )


def make_session_factory(bind: Engine) -> sessionmaker:
    return sessionmaker(
        bind=bind,
        autoflush=False,
        autocommit=False,
        expire_on_commit=False,
        future=True,
    )


engine = make_engine(settings.DATABASE_URL)
SessionLocal = make_session_factory(engine)

# ---------------------------------------------------------------------------
# Dependency / Context managers
# ---------------------------------------------------------------------------

def get_db() -> Iterator[Session]:
    """FastAPI dependency style session provider."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_session_factory() -> SessionFactory:
    """FastAPI dependency: collectors open their own short sessions per record."""
    return SessionLocal


@contextmanager
def session_scope(factory: Optional[SessionFactory] = None) -> Iterator[Session]:
    """Context manager for scripts / background jobs."""
    session = (factory or SessionLocal)()
    try:
        yield session
        session.commit()
    except Exception:  # noqa: BLE001
        session.rollback()
        raise
    finally:
        session.close()

# ---------------------------------------------------------------------------
# Metadata initialization
# ---------------------------------------------------------------------------

def init_metadata(bind: Optional[Engine] = None) -> None:
    """Create tables if they do not exist."""
    Base.metadata.create_all(bind=bind or engine)
