from services.scheduling.api.bookings import router as bookings_router  # noqa: F401
from services.scheduling.api.event_types import (  # noqa: F401
    router as event_types_router,
)
from services.scheduling.api.schedules import router as schedules_router  # noqa: F401
from services.scheduling.api.users import router as users_router  # noqa: F401
