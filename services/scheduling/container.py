"""
Service wiring for the scheduling service.

The store and cache are created once per process and passed into every
service that needs them. The FastAPI lifespan keeps the container on
``app.state.container``; routers read it through ``get_container``.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional

from fastapi import Request
from sqlalchemy.orm import sessionmaker

from services.scheduling.models import get_sessionmaker, utc_now
from services.scheduling.services.availability import AvailabilityResolver
from services.scheduling.services.booking_service import BookingService
from services.scheduling.services.booking_validator import BookingConflictValidator
from services.scheduling.services.cache import BookingCache, build_cache
from services.scheduling.services.event_type_service import EventTypeService
from services.scheduling.services.repository import SchedulingStore
from services.scheduling.services.schedule_service import ScheduleService
from services.scheduling.services.user_service import UserService
from services.scheduling.settings import Settings


@dataclass
class ServiceContainer:
    store: SchedulingStore
    cache: BookingCache
    clock: Callable[[], datetime]
    resolver: AvailabilityResolver
    validator: BookingConflictValidator
    bookings: BookingService
    schedules: ScheduleService
    event_types: EventTypeService
    users: UserService


def build_container(
    settings: Settings,
    *,
    session_factory: Optional[sessionmaker] = None,
    cache: Optional[BookingCache] = None,
    clock: Callable[[], datetime] = utc_now,
) -> ServiceContainer:
    store = SchedulingStore(session_factory or get_sessionmaker())
    cache = cache if cache is not None else build_cache(settings.redis_url)
    schedules = ScheduleService(store)
    return ServiceContainer(
        store=store,
        cache=cache,
        clock=clock,
        resolver=AvailabilityResolver(
            store, clock=clock, slot_step_minutes=settings.slot_step_minutes
        ),
        validator=BookingConflictValidator(
            store,
            cache,
            clock=clock,
            duration_tolerance_minutes=settings.duration_tolerance_minutes,
        ),
        bookings=BookingService(
            store, cache, clock=clock, cache_ttl_seconds=settings.cache_ttl_seconds
        ),
        schedules=schedules,
        event_types=EventTypeService(store, clock=clock),
        users=UserService(store, schedules),
    )


def get_container(request: Request) -> ServiceContainer:
    return request.app.state.container
