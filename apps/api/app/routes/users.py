"""User routes."""

from typing import Annotated

from fastapi import APIRouter, Depends, status

from app.routes.dependencies import get_authenticated_principal, get_user_service
from app.schemas.auth import AuthPrincipal
from app.schemas.error import ConflictError, ErrorResponse
from app.schemas.user import CreateUserRequest, UpdateUserProfileRequest, User
from app.services.users import UserService

router = APIRouter(prefix="/users", tags=["Users"])


@router.post(
    "",
    response_model=User,
    status_code=status.HTTP_201_CREATED,
    responses={409: {"model": ConflictError}},
)
def create_user(
    payload: CreateUserRequest,
    service: Annotated[UserService, Depends(get_user_service)],
) -> User:
    # Bootstrap route: intentionally unauthenticated.
    return service.create_user(payload)


@router.get(
    "/me",
    response_model=User,
    responses={401: {"model": ErrorResponse}},
)
def read_me(
    principal: Annotated[AuthPrincipal, Depends(get_authenticated_principal)],
) -> User:
    return principal.user


@router.patch(
    "/me",
    response_model=User,
    responses={401: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
def update_me(
    payload: UpdateUserProfileRequest,
    principal: Annotated[AuthPrincipal, Depends(get_authenticated_principal)],
    service: Annotated[UserService, Depends(get_user_service)],
) -> User:
    return service.update_profile(user_id=principal.user_id, oen=payload.oen, school_id=payload.school_id)
