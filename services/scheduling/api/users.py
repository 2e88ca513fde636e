import uuid

from fastapi import APIRouter, Depends

from services.scheduling.api.auth import get_user_id_from_request
from services.scheduling.container import ServiceContainer, get_container
from services.scheduling.schemas import (
    CreateUserRequest,
    DataResponse,
    UpdateUserRequest,
    UserResponse,
)

router = APIRouter()


@router.post("", response_model=DataResponse[UserResponse], status_code=201)
def create_user(
    data: CreateUserRequest,
    container: ServiceContainer = Depends(get_container),
) -> DataResponse[UserResponse]:
    """Create a user with a default working hours schedule."""
    user = container.users.create_user(data)
    return DataResponse(
        data=UserResponse.model_validate(user), message="User created successfully"
    )


@router.get("/me", response_model=DataResponse[UserResponse])
def get_current_user(
    user_id: uuid.UUID = Depends(get_user_id_from_request),
    container: ServiceContainer = Depends(get_container),
) -> DataResponse[UserResponse]:
    user = container.users.get_user(user_id)
    return DataResponse(data=UserResponse.model_validate(user))


@router.put("/me", response_model=DataResponse[UserResponse])
def update_current_user(
    data: UpdateUserRequest,
    user_id: uuid.UUID = Depends(get_user_id_from_request),
    container: ServiceContainer = Depends(get_container),
) -> DataResponse[UserResponse]:
    user = container.users.update_user(user_id, data)
    return DataResponse(
        data=UserResponse.model_validate(user), message="User updated successfully"
    )


@router.get("/{username}", response_model=DataResponse[UserResponse])
def get_user_by_username(
    username: str,
    container: ServiceContainer = Depends(get_container),
) -> DataResponse[UserResponse]:
    user = container.users.get_user_by_username(username)
    return DataResponse(data=UserResponse.model_validate(user))
