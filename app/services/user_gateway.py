"""User persistence gateway: the only code that talks to the users collection.

Each operation builds its filter/update document here and converts driver
exceptions into the classification in app.services.errors.

Uniqueness of user_id and email is checked before every create/update so the
caller learns which field collided. The check and the write are separate calls,
so two concurrent requests can both pass it; the unique indexes created by
ensure_indexes() are what actually prevent a duplicate from being stored.
"""

import logging
from typing import Any, Protocol

from bson import ObjectId
from bson.errors import InvalidId
from pymongo import ReturnDocument
from pymongo.collection import Collection
from pymongo.errors import DuplicateKeyError, PyMongoError

from app.models.user import User, next_timestamp, utc_now
from app.schemas.user import CreateUserRequest, UpdateUserRequest
from app.services.errors import (
    ConflictError,
    InvalidIdError,
    NotFoundError,
    TransientStoreError,
)

logger = logging.getLogger(__name__)

# Natural keys in the order they are checked.
UNIQUE_FIELDS = ("user_id", "email")


class UserGateway(Protocol):
    """Operations the HTTP layer needs from user storage."""

    def create(self, req: CreateUserRequest) -> User:
        """Insert a new user. Raises ConflictError if user_id or email is taken."""
        ...

    def get_by_id(self, id: str) -> User:
        """Raises InvalidIdError for a malformed id and NotFoundError when absent."""
        ...

    def get_by_user_id(self, user_id: str) -> User | None:
        """Exact match on the natural key; None when absent."""
        ...

    def get_by_email(self, email: str) -> User | None:
        """Exact match on email; None when absent."""
        ...

    def update(self, id: str, req: UpdateUserRequest) -> User:
        """Apply the fields present in req and return the fresh user."""
        ...

    def delete(self, id: str) -> None:
        """Raises NotFoundError when nothing was removed."""
        ...

    def list_all(self) -> list[User]:
        """All users in storage order."""
        ...


def parse_object_id(raw: str) -> ObjectId:
    """Parse a hex ObjectId or raise InvalidIdError."""
    # ObjectId(None) would mint a fresh id instead of failing.
    if not isinstance(raw, str):
        raise InvalidIdError(str(raw))
    try:
        return ObjectId(raw)
    except (InvalidId, TypeError) as e:
        raise InvalidIdError(raw) from e


def _conflict_from_duplicate_key(err: DuplicateKeyError) -> ConflictError:
    """Name the colliding field from a duplicate-key error raised by a unique index."""
    details = err.details or {}
    key = details.get("keyValue") or details.get("keyPattern") or {}
    for field in UNIQUE_FIELDS:
        if field in key:
            return ConflictError(field)
    for field in UNIQUE_FIELDS:
        if field in str(err):
            return ConflictError(field)
    return ConflictError("user_id")


class MongoUserGateway:
    """UserGateway backed by a pymongo collection (thread-safe, shared per process)."""

    def __init__(self, collection: Collection) -> None:
        self._collection = collection

    def ensure_indexes(self) -> None:
        """Create unique indexes on the natural keys. Idempotent."""
        try:
            for field in UNIQUE_FIELDS:
                self._collection.create_index(field, unique=True, name=f"uniq_{field}")
        except PyMongoError as e:
            raise TransientStoreError(f"failed to create indexes: {e}", e) from e

    def _find_one(self, query: dict[str, Any]) -> User | None:
        try:
            doc = self._collection.find_one(query)
        except PyMongoError as e:
            raise TransientStoreError(f"failed to get user: {e}", e) from e
        if doc is None:
            return None
        try:
            return User.from_document(doc)
        except (KeyError, TypeError, AttributeError) as e:
            raise TransientStoreError(f"failed to decode user: {e}", e) from e

    def _ensure_unclaimed(self, field: str, value: str, owner: ObjectId | None = None) -> None:
        existing = self._find_one({field: value})
        if existing is not None and existing.id != owner:
            raise ConflictError(field)

    def create(self, req: CreateUserRequest) -> User:
        self._ensure_unclaimed("user_id", req.user_id)
        self._ensure_unclaimed("email", req.email)

        now = utc_now()
        user = User(user_id=req.user_id, email=req.email, created_at=now, updated_at=now)
        user.hash_password(req.password)
        try:
            result = self._collection.insert_one(user.to_document())
        except DuplicateKeyError as e:
            raise _conflict_from_duplicate_key(e) from e
        except PyMongoError as e:
            raise TransientStoreError(f"failed to create user: {e}", e) from e
        user.id = result.inserted_id
        logger.info("Created user id=%s user_id=%s", user.id, user.user_id)
        return user

    def get_by_id(self, id: str) -> User:
        object_id = parse_object_id(id)
        user = self._find_one({"_id": object_id})
        if user is None:
            raise NotFoundError()
        return user

    def get_by_user_id(self, user_id: str) -> User | None:
        return self._find_one({"user_id": user_id})

    def get_by_email(self, email: str) -> User | None:
        return self._find_one({"email": email})

    def update(self, id: str, req: UpdateUserRequest) -> User:
        object_id = parse_object_id(id)
        current = self._find_one({"_id": object_id})
        if current is None:
            raise NotFoundError()

        changes = req.changes()
        update_fields: dict[str, Any] = {}
        for field in UNIQUE_FIELDS:
            if field in changes:
                self._ensure_unclaimed(field, changes[field], owner=object_id)
                update_fields[field] = changes[field]
        if "password" in changes:
            current.hash_password(changes["password"])
            update_fields["password"] = current.password_hash
        update_fields["updated_at"] = next_timestamp(current.updated_at)

        try:
            doc = self._collection.find_one_and_update(
                {"_id": object_id},
                {"$set": update_fields},
                return_document=ReturnDocument.AFTER,
            )
        except DuplicateKeyError as e:
            raise _conflict_from_duplicate_key(e) from e
        except PyMongoError as e:
            raise TransientStoreError(f"failed to update user: {e}", e) from e
        # Deleted between the lookup and the write.
        if doc is None:
            raise NotFoundError()
        logger.info("Updated user id=%s fields=%s", object_id, sorted(changes))
        return User.from_document(doc)

    def delete(self, id: str) -> None:
        object_id = parse_object_id(id)
        try:
            result = self._collection.delete_one({"_id": object_id})
        except PyMongoError as e:
            raise TransientStoreError(f"failed to delete user: {e}", e) from e
        if result.deleted_count == 0:
            raise NotFoundError()
        logger.info("Deleted user id=%s", object_id)

    def list_all(self) -> list[User]:
        try:
            return [User.from_document(doc) for doc in self._collection.find({})]
        except PyMongoError as e:
            raise TransientStoreError(f"failed to get users: {e}", e) from e
        except (KeyError, TypeError, AttributeError) as e:
            raise TransientStoreError(f"failed to decode user: {e}", e) from e
