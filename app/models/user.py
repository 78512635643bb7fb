"""User entity as stored in the users collection."""

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any

from bson import ObjectId

from app.core.security import hash_password, verify_password
from app.services.errors import ValidationError


def utc_now() -> datetime:
    """Current UTC time truncated to milliseconds, the precision BSON dates keep."""
    now = datetime.now(timezone.utc)
    return now.replace(microsecond=now.microsecond // 1000 * 1000)


def next_timestamp(previous: datetime | None) -> datetime:
    """Return a timestamp strictly after `previous` (by at least 1 ms)."""
    now = utc_now()
    if previous is not None and now <= previous:
        return previous + timedelta(milliseconds=1)
    return now


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


@dataclass
class User:
    """
    A stored user account.

    id is None until the gateway inserts the user. password_hash never leaves the
    service: responses are built from UserResponse, which has no password field.
    """

    user_id: str
    email: str
    password_hash: str = ""
    created_at: datetime = field(default_factory=utc_now)
    updated_at: datetime = field(default_factory=utc_now)
    id: ObjectId | None = None

    def hash_password(self, plain_password: str) -> None:
        """Hash plain_password and store it on the entity."""
        try:
            self.password_hash = hash_password(plain_password)
        except ValueError as e:
            raise ValidationError(str(e)) from e

    def check_password(self, candidate: str) -> bool:
        """True if candidate matches the stored hash; False on mismatch or a malformed hash."""
        return verify_password(candidate, self.password_hash)

    def to_document(self) -> dict[str, Any]:
        """Persisted representation; `_id` is omitted until assigned."""
        doc: dict[str, Any] = {
            "user_id": self.user_id,
            "email": self.email,
            "password": self.password_hash,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }
        if self.id is not None:
            doc["_id"] = self.id
        return doc

    @classmethod
    def from_document(cls, doc: dict[str, Any]) -> "User":
        return cls(
            id=doc["_id"],
            user_id=doc["user_id"],
            email=doc["email"],
            password_hash=doc.get("password", ""),
            created_at=_as_utc(doc["created_at"]),
            updated_at=_as_utc(doc["updated_at"]),
        )
