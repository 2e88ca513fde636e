from contextlib import contextmanager
from threading import Lock
from typing import Generator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from services.scheduling.models.base import Base as Base
from services.scheduling.models.base import utc_now as utc_now
from services.scheduling.models.bookings import Booking as Booking
from services.scheduling.models.bookings import BookingStatus as BookingStatus
from services.scheduling.models.bookings import EventType as EventType
from services.scheduling.models.bookings import LocationKind as LocationKind
from services.scheduling.models.schedules import Schedule as Schedule
from services.scheduling.models.schedules import ScheduleSlot as ScheduleSlot
from services.scheduling.models.users import User as User
from services.scheduling.settings import get_settings

# Shared engine and session factory, created once and reused
_engine: Engine | None = None
_session_maker: sessionmaker | None = None

_engine_lock = Lock()
_session_maker_lock = Lock()


def _create_engine(db_url: str) -> Engine:
    if db_url.startswith("sqlite"):
        # SQLite serialises writers itself; give blocked writers time to wait
        return create_engine(
            db_url,
            echo=False,
            future=True,
            connect_args={"check_same_thread": False, "timeout": 30},
        )
    return create_engine(
        db_url,
        echo=False,
        future=True,
        pool_size=10,
        max_overflow=20,
        pool_timeout=30,
        pool_recycle=3600,
        pool_pre_ping=True,
    )


def get_engine() -> Engine:
    """Get or create the shared database engine in a thread-safe manner."""
    global _engine
    if _engine is None:
        with _engine_lock:
            if _engine is None:
                _engine = _create_engine(get_settings().db_url_scheduling)
    return _engine


def get_sessionmaker() -> sessionmaker:
    """Get or create the shared session maker in a thread-safe manner."""
    global _session_maker
    if _session_maker is None:
        with _session_maker_lock:
            if _session_maker is None:
                _session_maker = sessionmaker(
                    bind=get_engine(),
                    autoflush=False,
                    expire_on_commit=False,
                    future=True,
                )
    return _session_maker


@contextmanager
def get_session() -> Generator[Session, None, None]:
    session = get_sessionmaker()()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def create_all_tables_for_testing() -> None:
    """Create all database tables for testing only. Use Alembic migrations in production."""
    Base.metadata.create_all(get_engine())


def close_db() -> None:
    """Dispose the engine and forget the session factory."""
    global _engine, _session_maker
    engine_to_dispose: Engine | None = None
    with _session_maker_lock:
        _session_maker = None
        with _engine_lock:
            engine_to_dispose = _engine
            _engine = None
    if engine_to_dispose is not None:
        engine_to_dispose.dispose()


def reset_db() -> None:
    """Forget the engine and session factory without disposing (useful for testing)."""
    global _engine, _session_maker
    with _session_maker_lock:
        with _engine_lock:
            _session_maker = None
            _engine = None
