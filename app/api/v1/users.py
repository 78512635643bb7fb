"""User CRUD endpoints: validate request shape, call the gateway, map outcomes to status codes."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status

from app.core.database import get_user_gateway
from app.schemas.user import (
    CreateUserRequest,
    ErrorResponse,
    MessageResponse,
    UpdateUserRequest,
    UserResponse,
    UsersListResponse,
)
from app.services.errors import (
    ConflictError,
    NotFoundError,
    UserServiceError,
    ValidationError,
)
from app.services.user_gateway import UserGateway

logger = logging.getLogger(__name__)

# Documented in OpenAPI; every error body is {"error": "..."}.
ERROR_RESPONSES: dict[int | str, dict] = {
    code: {"model": ErrorResponse} for code in (400, 404, 409, 500)
}
router = APIRouter(responses=ERROR_RESPONSES)

GatewayDep = Annotated[UserGateway, Depends(get_user_gateway)]


def _http_error(e: UserServiceError) -> HTTPException:
    """Map a classified gateway error to an HTTPException. Only store failures are logged."""
    if isinstance(e, ValidationError):
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)
    if isinstance(e, NotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    if isinstance(e, ConflictError):
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=e.message)
    logger.error("User store failure: %s", e.message)
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=e.message)


def find_by_user_id(gateway: UserGateway, user_id: str) -> UserResponse:
    """Natural-key lookup; a missing user becomes 404."""
    try:
        user = gateway.get_by_user_id(user_id)
    except UserServiceError as e:
        raise _http_error(e) from e
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return UserResponse.from_entity(user)


def find_by_email(gateway: UserGateway, email: str) -> UserResponse:
    """Email lookup; a missing user becomes 404."""
    try:
        user = gateway.get_by_email(email)
    except UserServiceError as e:
        raise _http_error(e) from e
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return UserResponse.from_entity(user)


@router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
def create_user(body: CreateUserRequest, gateway: GatewayDep) -> UserResponse:
    """
    Create a user. user_id and email must not belong to any existing user (409 otherwise).
    The password is hashed before storage and never returned.
    """
    try:
        user = gateway.create(body)
    except UserServiceError as e:
        raise _http_error(e) from e
    return UserResponse.from_entity(user)


@router.get("", response_model=UsersListResponse)
def list_users(gateway: GatewayDep) -> UsersListResponse:
    """List all users with their count."""
    try:
        users = gateway.list_all()
    except UserServiceError as e:
        raise _http_error(e) from e
    return UsersListResponse(
        users=[UserResponse.from_entity(u) for u in users],
        count=len(users),
    )


# Search routes are declared before /{id} so "search" is never taken for an id.
@router.get("/search", response_model=UserResponse)
def search_users(
    gateway: GatewayDep,
    user_id: str | None = None,
    email: str | None = None,
) -> UserResponse:
    """
    Look a user up by ?user_id= or ?email=.

    user_id wins when both are given; with neither, 400.
    """
    if user_id:
        return find_by_user_id(gateway, user_id)
    if email:
        return find_by_email(gateway, email)
    raise HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail="Missing search parameter: user_id or email is required",
    )


@router.get("/search/email", response_model=UserResponse)
def get_user_by_email(gateway: GatewayDep, email: str | None = None) -> UserResponse:
    if not email:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="email query parameter is required",
        )
    return find_by_email(gateway, email)


@router.get("/{id}", response_model=UserResponse)
def get_user(id: str, gateway: GatewayDep) -> UserResponse:
    """Fetch a user by its hex ObjectId (400 if malformed, 404 if absent)."""
    try:
        user = gateway.get_by_id(id)
    except UserServiceError as e:
        raise _http_error(e) from e
    return UserResponse.from_entity(user)


@router.put("/{id}", response_model=UserResponse)
def update_user(id: str, body: UpdateUserRequest, gateway: GatewayDep) -> UserResponse:
    """
    Partially update a user. Omitted fields are left unchanged; updated_at always advances.
    Taking another user's user_id or email is a 409.
    """
    try:
        user = gateway.update(id, body)
    except UserServiceError as e:
        raise _http_error(e) from e
    return UserResponse.from_entity(user)


@router.delete("/{id}", response_model=MessageResponse)
def delete_user(id: str, gateway: GatewayDep) -> MessageResponse:
    try:
        gateway.delete(id)
    except UserServiceError as e:
        raise _http_error(e) from e
    return MessageResponse(message="User deleted successfully")
