import uuid
from typing import List

from fastapi import APIRouter, Depends

from services.scheduling.api.auth import get_user_id_from_request
from services.scheduling.container import ServiceContainer, get_container
from services.scheduling.schemas import (
    CreateEventTypeRequest,
    DataResponse,
    EventTypeResponse,
    MessageResponse,
    UpdateEventTypeRequest,
)

router = APIRouter()


@router.get("", response_model=DataResponse[List[EventTypeResponse]])
def list_event_types(
    user_id: uuid.UUID = Depends(get_user_id_from_request),
    container: ServiceContainer = Depends(get_container),
) -> DataResponse[List[EventTypeResponse]]:
    event_types = container.event_types.list_event_types(user_id)
    return DataResponse(
        data=[EventTypeResponse.model_validate(e) for e in event_types]
    )


@router.post("", response_model=DataResponse[EventTypeResponse], status_code=201)
def create_event_type(
    data: CreateEventTypeRequest,
    user_id: uuid.UUID = Depends(get_user_id_from_request),
    container: ServiceContainer = Depends(get_container),
) -> DataResponse[EventTypeResponse]:
    event_type = container.event_types.create_event_type(user_id, data)
    return DataResponse(
        data=EventTypeResponse.model_validate(event_type),
        message="Event type created successfully",
    )


@router.get(
    "/public/{username}/{slug}", response_model=DataResponse[EventTypeResponse]
)
def get_public_event_type(
    username: str,
    slug: str,
    container: ServiceContainer = Depends(get_container),
) -> DataResponse[EventTypeResponse]:
    """Event type details shown on the public booking page."""
    event_type = container.event_types.get_public_event_type(username, slug)
    return DataResponse(data=EventTypeResponse.model_validate(event_type))


@router.get("/{event_type_id}", response_model=DataResponse[EventTypeResponse])
def get_event_type(
    event_type_id: uuid.UUID,
    user_id: uuid.UUID = Depends(get_user_id_from_request),
    container: ServiceContainer = Depends(get_container),
) -> DataResponse[EventTypeResponse]:
    event_type = container.event_types.get_event_type(user_id, event_type_id)
    return DataResponse(data=EventTypeResponse.model_validate(event_type))


@router.put("/{event_type_id}", response_model=DataResponse[EventTypeResponse])
def update_event_type(
    event_type_id: uuid.UUID,
    data: UpdateEventTypeRequest,
    user_id: uuid.UUID = Depends(get_user_id_from_request),
    container: ServiceContainer = Depends(get_container),
) -> DataResponse[EventTypeResponse]:
    event_type = container.event_types.update_event_type(user_id, event_type_id, data)
    return DataResponse(
        data=EventTypeResponse.model_validate(event_type),
        message="Event type updated successfully",
    )


@router.delete("/{event_type_id}", response_model=MessageResponse)
def delete_event_type(
    event_type_id: uuid.UUID,
    user_id: uuid.UUID = Depends(get_user_id_from_request),
    container: ServiceContainer = Depends(get_container),
) -> MessageResponse:
    container.event_types.delete_event_type(user_id, event_type_id)
    return MessageResponse(message="Event type deleted successfully")
