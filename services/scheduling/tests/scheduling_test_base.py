"""
Base classes for Scheduling Service tests.

Provides common setup and teardown for all scheduling service tests: a
temporary SQLite database, an in-memory booking cache, a fixed clock and a
service container installed on the application.
"""

import os
import tempfile
from datetime import datetime, timedelta

from services.scheduling.schemas import (
    CreateEventTypeRequest,
    CreateScheduleRequest,
    CreateUserRequest,
    ScheduleSlotIn,
)
from services.scheduling.services.cache import InMemoryBookingCache

# Monday morning; the next day is a Tuesday
FIXED_NOW = datetime(2025, 1, 6, 8, 0)
TOMORROW = FIXED_NOW.date() + timedelta(days=1)


def at(hour: int, minute: int = 0, day=TOMORROW) -> datetime:
    return datetime(day.year, day.month, day.day, hour, minute)


class BaseSchedulingTest:
    """Base class for Scheduling Service tests working on real services."""

    def setup_method(self, method):
        """Set up a fresh database and service container for each test."""
        import services.scheduling.settings as settings_module
        from services.scheduling.models import (
            create_all_tables_for_testing,
            get_sessionmaker,
            reset_db,
        )

        # Reset any existing database connections to ensure clean state
        reset_db()
        settings_module._settings = None

        # Use a unique temp file for each test
        self._db_fd, self._db_path = tempfile.mkstemp(suffix=".sqlite3")
        os.environ["DB_URL_SCHEDULING"] = f"sqlite:///{self._db_path}"
        os.environ["LOG_LEVEL"] = "INFO"
        os.environ["LOG_FORMAT"] = "json"

        create_all_tables_for_testing()

        from services.scheduling.container import build_container

        self.now = FIXED_NOW
        self.cache = InMemoryBookingCache()
        self.container = build_container(
            settings_module.get_settings(),
            session_factory=get_sessionmaker(),
            cache=self.cache,
            clock=lambda: self.now,
        )

    def teardown_method(self, method):
        """Clean up test environment."""
        import services.scheduling.settings as settings_module
        from services.scheduling.models import close_db

        close_db()
        settings_module._settings = None

        for var in ("DB_URL_SCHEDULING", "LOG_LEVEL", "LOG_FORMAT"):
            os.environ.pop(var, None)

        # Remove the temp DB file
        if hasattr(self, "_db_fd"):
            os.close(self._db_fd)
        if hasattr(self, "_db_path") and os.path.exists(self._db_path):
            os.unlink(self._db_path)

    # Data helpers

    def create_user(self, username="alice", email=None, timezone="UTC"):
        return self.container.users.create_user(
            CreateUserRequest(
                username=username,
                email=email or f"{username}@example.com",
                timezone=timezone,
            )
        )

    def create_schedule(self, user, name="Custom", slots=None, is_default=False):
        slots = slots or [("09:00", "17:00", 2)]
        return self.container.schedules.create_schedule(
            user.id,
            CreateScheduleRequest(
                name=name,
                is_default=is_default,
                slots=[
                    ScheduleSlotIn(day_of_week=day, start_time=start, end_time=end)
                    for start, end, day in slots
                ],
            ),
        )

    def create_event_type(self, user, slug="intro", **overrides):
        values = {"title": "Intro call", "slug": slug, "duration": 30}
        values.update(overrides)
        return self.container.event_types.create_event_type(
            user.id, CreateEventTypeRequest(**values)
        )


class BaseSchedulingIntegrationTest(BaseSchedulingTest):
    """Base class for Scheduling Service HTTP tests with the full app."""

    def setup_method(self, method):
        super().setup_method(method)

        from fastapi.testclient import TestClient

        from services.scheduling.main import app

        app.state.container = self.container
        self.app = app
        self.client = TestClient(app)

    def teardown_method(self, method):
        self.app.state.container = None
        super().teardown_method(method)

    def headers_for(self, user):
        return {"X-User-Id": str(user.id)}
