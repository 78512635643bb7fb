"""Request/response schemas for user endpoints."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.models.user import User


class CreateUserRequest(BaseModel):
    """Body for POST /users. All three fields are required and non-empty."""

    user_id: str = Field(..., min_length=1, description="Caller-chosen natural key")
    email: str = Field(..., min_length=1, description="Unique email address")
    password: str = Field(..., min_length=1, description="Plain-text password (hashed before storage)")


class UpdateUserRequest(BaseModel):
    """
    Body for PUT /users/{id}: any subset of user_id, email, password.

    A field that is absent is left untouched; a field that is present must be a
    non-empty string. Presence is read from model_fields_set, so "absent" and
    "present" never collapse into the same None.
    """

    model_config = ConfigDict(extra="ignore")

    user_id: str | None = Field(default=None, description="New natural key")
    email: str | None = Field(default=None, description="New email address")
    password: str | None = Field(default=None, description="New plain-text password")

    @field_validator("user_id", "email", "password", mode="before")
    @classmethod
    def reject_null_or_empty(cls, v: Any) -> Any:
        # Only runs for fields the caller actually sent.
        if v is None:
            raise ValueError("may be omitted but not null")
        if isinstance(v, str) and not v:
            raise ValueError("must not be empty")
        return v

    def changes(self) -> dict[str, str]:
        """Fields the caller sent, keyed by name."""
        return {name: getattr(self, name) for name in self.model_fields_set}


class UserResponse(BaseModel):
    """Outbound user representation. There is no password field to leak."""

    id: str = Field(..., description="Hex-encoded ObjectId")
    user_id: str
    email: str
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_entity(cls, user: User) -> "UserResponse":
        return cls(
            id=str(user.id),
            user_id=user.user_id,
            email=user.email,
            created_at=user.created_at,
            updated_at=user.updated_at,
        )


class UsersListResponse(BaseModel):
    """Response for GET /users."""

    users: list[UserResponse]
    count: int


class MessageResponse(BaseModel):
    message: str


class ErrorResponse(BaseModel):
    """Body of every 4xx/5xx response."""

    error: str
