"""
Database access for the scheduling service.

``SchedulingStore`` owns the SQLAlchemy session factory. Services open a unit
of work with ``store.session()`` and pass the session to the query helpers, so
that a check and the write that depends on it share one transaction.
"""

import uuid
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime
from typing import Generator, List, Optional

from sqlalchemy import func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload, sessionmaker

from services.common.http_errors import ErrorCode, ServiceError
from services.common.logging_config import get_logger
from services.scheduling.models import (
    Booking,
    BookingStatus,
    EventType,
    Schedule,
    User,
)

logger = get_logger(__name__)


@dataclass
class BookingFilters:
    status: Optional[BookingStatus] = None
    # Case-insensitive substrings
    attendee_name: Optional[str] = None
    attendee_email: Optional[str] = None
    event_type_id: Optional[uuid.UUID] = None
    start_from: Optional[datetime] = None
    start_to: Optional[datetime] = None
    booking_id: Optional[uuid.UUID] = None


class SchedulingStore:
    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory

    @contextmanager
    def session(self) -> Generator[Session, None, None]:
        """Unit of work: commit on success, roll back on any error."""
        session = self._session_factory()
        try:
            yield session
            session.commit()
        except SQLAlchemyError as e:
            session.rollback()
            logger.error("Database error", error=str(e))
            raise ServiceError(
                "Database operation failed",
                details={"error": type(e).__name__},
                code=ErrorCode.DATABASE_ERROR,
            ) from e
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    # Users

    def lock_user(self, session: Session, user_id: uuid.UUID) -> bool:
        """
        Bump the user's booking version inside the current transaction.

        The UPDATE holds the user's row lock (or the SQLite write lock) until
        the session commits, so booking writers for one user run one at a time.
        Returns False when the user does not exist.
        """
        result = session.execute(
            update(User)
            .where(User.id == user_id)
            .values(booking_version=User.booking_version + 1)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount > 0

    def get_user(self, session: Session, user_id: uuid.UUID) -> Optional[User]:
        return session.get(User, user_id)

    def get_user_by_username(self, session: Session, username: str) -> Optional[User]:
        return session.scalars(select(User).where(User.username == username)).first()

    def get_user_by_email(self, session: Session, email: str) -> Optional[User]:
        return session.scalars(
            select(User).where(func.lower(User.email) == email.lower())
        ).first()

    # Schedules

    def get_schedule(
        self, session: Session, schedule_id: uuid.UUID
    ) -> Optional[Schedule]:
        return session.scalars(
            select(Schedule)
            .options(selectinload(Schedule.slots))
            .where(Schedule.id == schedule_id)
        ).first()

    def list_schedules(self, session: Session, user_id: uuid.UUID) -> List[Schedule]:
        return list(
            session.scalars(
                select(Schedule)
                .options(selectinload(Schedule.slots))
                .where(Schedule.user_id == user_id)
                .order_by(Schedule.is_default.desc(), Schedule.created_at.asc())
            )
        )

    def get_default_schedule(
        self, session: Session, user_id: uuid.UUID
    ) -> Optional[Schedule]:
        return session.scalars(
            select(Schedule)
            .options(selectinload(Schedule.slots))
            .where(Schedule.user_id == user_id, Schedule.is_default.is_(True))
        ).first()

    def clear_default_schedules(
        self,
        session: Session,
        user_id: uuid.UUID,
        keep_id: Optional[uuid.UUID] = None,
    ) -> None:
        stmt = update(Schedule).where(
            Schedule.user_id == user_id, Schedule.is_default.is_(True)
        )
        if keep_id is not None:
            stmt = stmt.where(Schedule.id != keep_id)
        session.execute(
            stmt.values(is_default=False).execution_options(synchronize_session=False)
        )

    # Event types

    def unlink_schedule(self, session: Session, schedule_id: uuid.UUID) -> None:
        session.execute(
            update(EventType)
            .where(EventType.schedule_id == schedule_id)
            .values(schedule_id=None)
            .execution_options(synchronize_session=False)
        )

    def get_event_type(
        self, session: Session, event_type_id: uuid.UUID
    ) -> Optional[EventType]:
        return session.get(EventType, event_type_id)

    def get_event_type_by_slug(
        self, session: Session, user_id: uuid.UUID, slug: str
    ) -> Optional[EventType]:
        return session.scalars(
            select(EventType).where(EventType.user_id == user_id, EventType.slug == slug)
        ).first()

    def list_event_types(
        self, session: Session, user_id: uuid.UUID
    ) -> List[EventType]:
        return list(
            session.scalars(
                select(EventType)
                .where(EventType.user_id == user_id)
                .order_by(EventType.created_at.desc())
            )
        )

    def count_upcoming_confirmed(
        self, session: Session, event_type_id: uuid.UUID, now: datetime
    ) -> int:
        return session.scalar(
            select(func.count())
            .select_from(Booking)
            .where(
                Booking.event_type_id == event_type_id,
                Booking.status == BookingStatus.confirmed,
                Booking.start_time >= now,
            )
        ) or 0

    # Bookings

    def get_booking(self, session: Session, booking_id: uuid.UUID) -> Optional[Booking]:
        return session.scalars(
            select(Booking)
            .options(selectinload(Booking.event_type))
            .where(Booking.id == booking_id)
        ).first()

    def get_booking_owner(
        self, session: Session, booking_id: uuid.UUID
    ) -> Optional[uuid.UUID]:
        return session.scalar(select(Booking.user_id).where(Booking.id == booking_id))

    def add(self, session: Session, instance: object) -> None:
        session.add(instance)
        session.flush()

    def confirmed_starting_between(
        self,
        session: Session,
        user_id: uuid.UUID,
        start: datetime,
        end: datetime,
    ) -> List[Booking]:
        """Confirmed bookings of the user whose start lies in ``[start, end]``."""
        return list(
            session.scalars(
                select(Booking)
                .where(
                    Booking.user_id == user_id,
                    Booking.status == BookingStatus.confirmed,
                    Booking.start_time >= start,
                    Booking.start_time <= end,
                )
                .order_by(Booking.start_time)
            )
        )

    def find_overlapping_confirmed(
        self,
        session: Session,
        start: datetime,
        end: datetime,
        *,
        user_id: Optional[uuid.UUID] = None,
        event_type_id: Optional[uuid.UUID] = None,
        exclude_booking_id: Optional[uuid.UUID] = None,
    ) -> Optional[Booking]:
        """First confirmed booking strictly intersecting ``[start, end)``."""
        stmt = select(Booking).where(
            Booking.status == BookingStatus.confirmed,
            Booking.start_time < end,
            Booking.end_time > start,
        )
        if user_id is not None:
            stmt = stmt.where(Booking.user_id == user_id)
        if event_type_id is not None:
            stmt = stmt.where(Booking.event_type_id == event_type_id)
        if exclude_booking_id is not None:
            stmt = stmt.where(Booking.id != exclude_booking_id)
        return session.scalars(stmt.order_by(Booking.start_time).limit(1)).first()

    def count_confirmed_for_event_type(
        self,
        session: Session,
        event_type_id: uuid.UUID,
        start: datetime,
        end: datetime,
    ) -> int:
        return session.scalar(
            select(func.count())
            .select_from(Booking)
            .where(
                Booking.event_type_id == event_type_id,
                Booking.status == BookingStatus.confirmed,
                Booking.start_time >= start,
                Booking.start_time <= end,
            )
        ) or 0

    def list_bookings(
        self,
        session: Session,
        user_id: uuid.UUID,
        filters: Optional[BookingFilters] = None,
    ) -> List[Booking]:
        filters = filters or BookingFilters()
        stmt = (
            select(Booking)
            .options(selectinload(Booking.event_type))
            .where(Booking.user_id == user_id)
        )
        if filters.status is not None:
            stmt = stmt.where(Booking.status == filters.status)
        if filters.attendee_name:
            stmt = stmt.where(Booking.booker_name.ilike(f"%{filters.attendee_name}%"))
        if filters.attendee_email:
            stmt = stmt.where(Booking.booker_email.ilike(f"%{filters.attendee_email}%"))
        if filters.event_type_id is not None:
            stmt = stmt.where(Booking.event_type_id == filters.event_type_id)
        if filters.start_from is not None:
            stmt = stmt.where(Booking.start_time >= filters.start_from)
        if filters.start_to is not None:
            stmt = stmt.where(Booking.start_time <= filters.start_to)
        if filters.booking_id is not None:
            stmt = stmt.where(Booking.id == filters.booking_id)
        return list(session.scalars(stmt.order_by(Booking.start_time.desc())))

    def list_upcoming(
        self, session: Session, user_id: uuid.UUID, now: datetime
    ) -> List[Booking]:
        return list(
            session.scalars(
                select(Booking)
                .options(selectinload(Booking.event_type))
                .where(
                    Booking.user_id == user_id,
                    Booking.status == BookingStatus.confirmed,
                    Booking.start_time >= now,
                )
                .order_by(Booking.start_time.asc())
            )
        )

    def list_past(
        self, session: Session, user_id: uuid.UUID, now: datetime
    ) -> List[Booking]:
        return list(
            session.scalars(
                select(Booking)
                .options(selectinload(Booking.event_type))
                .where(Booking.user_id == user_id, Booking.start_time < now)
                .order_by(Booking.start_time.desc())
            )
        )
