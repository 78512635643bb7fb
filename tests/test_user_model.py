"""Unit tests for app.models.user and app.schemas.user: entity, documents, request/response shapes."""

import unittest
from datetime import datetime, timedelta, timezone
from unittest.mock import patch

from bson import ObjectId
from pydantic import ValidationError as SchemaValidationError

from app.models.user import User, next_timestamp, utc_now
from app.schemas.user import CreateUserRequest, UpdateUserRequest, UserResponse
from app.services.errors import ValidationError


class TestUserPassword(unittest.TestCase):
    """User.hash_password / check_password."""

    def setUp(self) -> None:
        patcher = patch("app.core.security.BCRYPT_ROUNDS", 4)
        patcher.start()
        self.addCleanup(patcher.stop)

    def test_hash_then_check(self) -> None:
        user = User(user_id="alice", email="a@x.com")
        user.hash_password("secret1")
        self.assertNotEqual(user.password_hash, "secret1")
        self.assertTrue(user.check_password("secret1"))
        self.assertFalse(user.check_password("secret2"))

    def test_check_with_no_hash_is_false(self) -> None:
        user = User(user_id="alice", email="a@x.com")
        self.assertFalse(user.check_password(""))

    def test_too_long_password_is_a_validation_error(self) -> None:
        user = User(user_id="alice", email="a@x.com")
        with self.assertRaises(ValidationError):
            user.hash_password("x" * 73)
        self.assertEqual(user.password_hash, "")


class TestUserDocument(unittest.TestCase):
    """to_document / from_document."""

    def test_document_stores_hash_under_password(self) -> None:
        user = User(user_id="alice", email="a@x.com", password_hash="$2b$hash")
        doc = user.to_document()
        self.assertEqual(doc["password"], "$2b$hash")
        self.assertNotIn("_id", doc)
        self.assertEqual(
            set(doc), {"user_id", "email", "password", "created_at", "updated_at"}
        )

    def test_document_includes_assigned_id(self) -> None:
        oid = ObjectId()
        user = User(user_id="alice", email="a@x.com", id=oid)
        self.assertEqual(user.to_document()["_id"], oid)

    def test_from_document_makes_naive_datetimes_utc(self) -> None:
        naive = datetime(2024, 1, 2, 3, 4, 5)
        user = User.from_document(
            {
                "_id": ObjectId(),
                "user_id": "alice",
                "email": "a@x.com",
                "password": "$2b$hash",
                "created_at": naive,
                "updated_at": naive,
            }
        )
        self.assertEqual(user.created_at.tzinfo, timezone.utc)
        self.assertEqual(user.password_hash, "$2b$hash")


class TestTimestamps(unittest.TestCase):
    """utc_now / next_timestamp."""

    def test_utc_now_has_millisecond_precision(self) -> None:
        now = utc_now()
        self.assertEqual(now.microsecond % 1000, 0)
        self.assertEqual(now.tzinfo, timezone.utc)

    def test_next_timestamp_is_strictly_after_previous(self) -> None:
        future = utc_now() + timedelta(seconds=5)
        self.assertEqual(next_timestamp(future), future + timedelta(milliseconds=1))

    def test_next_timestamp_without_previous(self) -> None:
        self.assertIsNotNone(next_timestamp(None))


class TestRequestSchemas(unittest.TestCase):
    """CreateUserRequest requires all fields; UpdateUserRequest tracks presence."""

    def test_create_requires_all_fields(self) -> None:
        with self.assertRaises(SchemaValidationError):
            CreateUserRequest(user_id="alice", email="a@x.com")

    def test_create_rejects_empty_strings(self) -> None:
        with self.assertRaises(SchemaValidationError):
            CreateUserRequest(user_id="", email="a@x.com", password="secret1")

    def test_update_changes_only_present_fields(self) -> None:
        req = UpdateUserRequest.model_validate({"email": "new@x.com"})
        self.assertEqual(req.changes(), {"email": "new@x.com"})

    def test_update_with_nothing_present(self) -> None:
        self.assertEqual(UpdateUserRequest.model_validate({}).changes(), {})

    def test_update_rejects_explicit_null(self) -> None:
        with self.assertRaises(SchemaValidationError):
            UpdateUserRequest.model_validate({"user_id": None})

    def test_update_rejects_empty_string(self) -> None:
        with self.assertRaises(SchemaValidationError):
            UpdateUserRequest.model_validate({"email": ""})


class TestUserResponse(unittest.TestCase):
    """UserResponse never carries the password hash."""

    def test_from_entity(self) -> None:
        oid = ObjectId()
        user = User(user_id="alice", email="a@x.com", password_hash="$2b$hash", id=oid)
        body = UserResponse.from_entity(user).model_dump()
        self.assertEqual(body["id"], str(oid))
        self.assertEqual(body["user_id"], "alice")
        self.assertNotIn("password", body)
        self.assertNotIn("password_hash", body)


if __name__ == "__main__":
    unittest.main()
