from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from services.common.http_errors import register_cadence_exception_handlers
from services.common.logging_config import (
    create_request_logging_middleware,
    get_logger,
    log_service_shutdown,
    log_service_startup,
    setup_service_logging,
)
from services.scheduling.api import (
    bookings_router,
    event_types_router,
    schedules_router,
    users_router,
)
from services.scheduling.container import build_container
from services.scheduling.models import close_db
from services.scheduling.settings import get_settings

# Set up centralized logging - will be initialized in lifespan
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    settings = get_settings()

    setup_service_logging(
        service_name="scheduling",
        log_level=settings.log_level,
        log_format=settings.log_format,
    )

    log_service_startup(
        "scheduling",
        version="0.1.0",
        cache="redis" if settings.redis_url else "memory",
        slot_step_minutes=settings.slot_step_minutes,
    )

    # Tests install their own container before the app starts
    if getattr(app.state, "container", None) is None:
        app.state.container = build_container(settings)
    yield

    log_service_shutdown("scheduling")
    close_db()


app = FastAPI(
    title="Cadence Scheduling Service",
    version="0.1.0",
    description="Event types, availability schedules and bookings.",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Add request logging middleware
app.middleware("http")(create_request_logging_middleware())

# Register standardized exception handlers
register_cadence_exception_handlers(app)

app.include_router(users_router, prefix="/api/v1/users", tags=["users"])
app.include_router(schedules_router, prefix="/api/v1/schedules", tags=["schedules"])
app.include_router(
    event_types_router, prefix="/api/v1/event-types", tags=["event-types"]
)
app.include_router(bookings_router, prefix="/api/v1/bookings", tags=["bookings"])


@app.get("/")
def root() -> dict:
    logger.info("Root endpoint accessed")
    return {"message": "Welcome to the Cadence Scheduling Service"}


@app.get("/health")
def health() -> dict:
    return {"status": "ok", "service": "scheduling"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "services.scheduling.main:app",
        host="0.0.0.0",
        port=8004,
        log_level=get_settings().log_level.lower(),
        access_log=False,
    )
