import uuid
from typing import List, Optional

from fastapi import APIRouter, Body, Depends

from services.scheduling.api.auth import get_user_id_from_request
from services.scheduling.container import ServiceContainer, get_container
from services.scheduling.schemas import (
    CreateScheduleRequest,
    DataResponse,
    DuplicateScheduleRequest,
    MessageResponse,
    ScheduleResponse,
    UpdateScheduleRequest,
)

router = APIRouter()


@router.get("", response_model=DataResponse[List[ScheduleResponse]])
def list_schedules(
    user_id: uuid.UUID = Depends(get_user_id_from_request),
    container: ServiceContainer = Depends(get_container),
) -> DataResponse[List[ScheduleResponse]]:
    """List the caller's schedules, default first."""
    schedules = container.schedules.list_schedules(user_id)
    return DataResponse(data=[ScheduleResponse.model_validate(s) for s in schedules])


@router.post("", response_model=DataResponse[ScheduleResponse], status_code=201)
def create_schedule(
    data: CreateScheduleRequest,
    user_id: uuid.UUID = Depends(get_user_id_from_request),
    container: ServiceContainer = Depends(get_container),
) -> DataResponse[ScheduleResponse]:
    schedule = container.schedules.create_schedule(user_id, data)
    return DataResponse(
        data=ScheduleResponse.model_validate(schedule),
        message="Schedule created successfully",
    )


@router.get("/{schedule_id}", response_model=DataResponse[ScheduleResponse])
def get_schedule(
    schedule_id: uuid.UUID,
    user_id: uuid.UUID = Depends(get_user_id_from_request),
    container: ServiceContainer = Depends(get_container),
) -> DataResponse[ScheduleResponse]:
    schedule = container.schedules.get_schedule(user_id, schedule_id)
    return DataResponse(data=ScheduleResponse.model_validate(schedule))


@router.put("/{schedule_id}", response_model=DataResponse[ScheduleResponse])
def update_schedule(
    schedule_id: uuid.UUID,
    data: UpdateScheduleRequest,
    user_id: uuid.UUID = Depends(get_user_id_from_request),
    container: ServiceContainer = Depends(get_container),
) -> DataResponse[ScheduleResponse]:
    schedule = container.schedules.update_schedule(user_id, schedule_id, data)
    return DataResponse(
        data=ScheduleResponse.model_validate(schedule),
        message="Schedule updated successfully",
    )


@router.delete("/{schedule_id}", response_model=MessageResponse)
def delete_schedule(
    schedule_id: uuid.UUID,
    user_id: uuid.UUID = Depends(get_user_id_from_request),
    container: ServiceContainer = Depends(get_container),
) -> MessageResponse:
    container.schedules.delete_schedule(user_id, schedule_id)
    return MessageResponse(message="Schedule deleted successfully")


@router.post(
    "/{schedule_id}/duplicate",
    response_model=DataResponse[ScheduleResponse],
    status_code=201,
)
def duplicate_schedule(
    schedule_id: uuid.UUID,
    data: Optional[DuplicateScheduleRequest] = Body(None),
    user_id: uuid.UUID = Depends(get_user_id_from_request),
    container: ServiceContainer = Depends(get_container),
) -> DataResponse[ScheduleResponse]:
    schedule = container.schedules.duplicate_schedule(
        user_id, schedule_id, data.name if data else None
    )
    return DataResponse(
        data=ScheduleResponse.model_validate(schedule),
        message="Schedule duplicated successfully",
    )


@router.put("/{schedule_id}/default", response_model=DataResponse[ScheduleResponse])
def set_default_schedule(
    schedule_id: uuid.UUID,
    user_id: uuid.UUID = Depends(get_user_id_from_request),
    container: ServiceContainer = Depends(get_container),
) -> DataResponse[ScheduleResponse]:
    schedule = container.schedules.set_default(user_id, schedule_id)
    return DataResponse(
        data=ScheduleResponse.model_validate(schedule),
        message="Default schedule updated",
    )
