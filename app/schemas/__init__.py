"""Pydantic request/response schemas."""

from app.schemas.health import HealthResponse
from app.schemas.user import (
    CreateUserRequest,
    ErrorResponse,
    MessageResponse,
    UpdateUserRequest,
    UserResponse,
    UsersListResponse,
)

__all__ = [
    "CreateUserRequest",
    "ErrorResponse",
    "HealthResponse",
    "MessageResponse",
    "UpdateUserRequest",
    "UserResponse",
    "UsersListResponse",
]
