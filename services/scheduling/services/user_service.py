import uuid

from services.common.http_errors import ConflictError, NotFoundError
from services.common.logging_config import get_logger
from services.scheduling.models import User
from services.scheduling.schemas.users import CreateUserRequest, UpdateUserRequest
from services.scheduling.services.repository import SchedulingStore
from services.scheduling.services.schedule_service import (
    ScheduleService,
    default_working_hours,
)
from services.scheduling.utils.validation import validate_timezone

logger = get_logger(__name__)

DEFAULT_SCHEDULE_NAME = "Working Hours"


class UserService:
    def __init__(self, store: SchedulingStore, schedules: ScheduleService):
        self._store = store
        self._schedules = schedules

    def create_user(self, data: CreateUserRequest) -> User:
        """Create a user together with a default Mon-Fri working hours schedule."""
        timezone = validate_timezone(data.timezone)
        with self._store.session() as session:
            if self._store.get_user_by_username(session, data.username):
                raise ConflictError(
                    "Username is already taken", details={"username": data.username}
                )
            if self._store.get_user_by_email(session, str(data.email)):
                raise ConflictError(
                    "Email is already registered", details={"email": str(data.email)}
                )

            user = User(username=data.username, email=str(data.email), timezone=timezone)
            self._store.add(session, user)
            self._schedules.add_schedule(
                session,
                user.id,
                name=DEFAULT_SCHEDULE_NAME,
                timezone=timezone,
                is_default=True,
                slots=default_working_hours(),
            )
            logger.info("User created", user_id=str(user.id), username=user.username)
            return user

    def get_user(self, user_id: uuid.UUID) -> User:
        with self._store.session() as session:
            user = self._store.get_user(session, user_id)
            if user is None:
                raise NotFoundError("User", str(user_id))
            return user

    def get_user_by_username(self, username: str) -> User:
        with self._store.session() as session:
            user = self._store.get_user_by_username(session, username)
            if user is None:
                raise NotFoundError("User", username)
            return user

    def update_user(self, user_id: uuid.UUID, data: UpdateUserRequest) -> User:
        timezone = validate_timezone(data.timezone)
        with self._store.session() as session:
            user = self._store.get_user(session, user_id)
            if user is None:
                raise NotFoundError("User", str(user_id))
            user.timezone = timezone
            session.flush()
            logger.info("User timezone updated", user_id=str(user_id), timezone=timezone)
            return user
