"""In-process user storage for tests and for running without MongoDB (STORAGE_BACKEND=memory).

InMemoryCollection implements the handful of pymongo Collection calls that
MongoUserGateway makes, including unique-index enforcement, so the in-memory
gateway runs exactly the same filter/update and error-classification code as
production.
"""

import threading
from typing import Any

from bson import ObjectId
from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError
from pymongo.results import DeleteResult, InsertOneResult

from app.services.user_gateway import MongoUserGateway


def _matches(doc: dict[str, Any], query: dict[str, Any]) -> bool:
    """Top-level equality match, the only filter shape the gateway builds."""
    return all(doc.get(key) == value for key, value in query.items())


class InMemoryCollection:
    """Dict-backed stand-in for a pymongo Collection, in insertion order."""

    def __init__(self) -> None:
        self._docs: dict[ObjectId, dict[str, Any]] = {}
        self._unique_fields: list[str] = []
        self._lock = threading.Lock()

    def create_index(self, field: str, unique: bool = False, name: str | None = None) -> str:
        if unique and field not in self._unique_fields:
            self._unique_fields.append(field)
        return name or f"{field}_1"

    def _check_unique(self, doc: dict[str, Any], own_id: ObjectId) -> None:
        for field in self._unique_fields:
            for other_id, other in self._docs.items():
                if other_id != own_id and field in doc and other.get(field) == doc[field]:
                    raise DuplicateKeyError(
                        f"E11000 duplicate key error index: uniq_{field}",
                        code=11000,
                        details={"keyPattern": {field: 1}, "keyValue": {field: doc[field]}},
                    )

    def insert_one(self, document: dict[str, Any]) -> InsertOneResult:
        with self._lock:
            object_id = document.setdefault("_id", ObjectId())
            self._check_unique(document, object_id)
            self._docs[object_id] = dict(document)
        return InsertOneResult(object_id, True)

    def find_one(self, query: dict[str, Any]) -> dict[str, Any] | None:
        with self._lock:
            for doc in self._docs.values():
                if _matches(doc, query):
                    return dict(doc)
        return None

    def find(self, query: dict[str, Any] | None = None) -> list[dict[str, Any]]:
        with self._lock:
            return [dict(doc) for doc in self._docs.values() if _matches(doc, query or {})]

    def find_one_and_update(
        self,
        query: dict[str, Any],
        update: dict[str, Any],
        return_document: bool = ReturnDocument.BEFORE,
    ) -> dict[str, Any] | None:
        with self._lock:
            for object_id, doc in self._docs.items():
                if _matches(doc, query):
                    updated = {**doc, **update.get("$set", {})}
                    self._check_unique(updated, object_id)
                    self._docs[object_id] = updated
                    return dict(updated if return_document == ReturnDocument.AFTER else doc)
        return None

    def delete_one(self, query: dict[str, Any]) -> DeleteResult:
        with self._lock:
            for object_id, doc in self._docs.items():
                if _matches(doc, query):
                    del self._docs[object_id]
                    return DeleteResult({"n": 1}, True)
        return DeleteResult({"n": 0}, True)


class InMemoryUserGateway(MongoUserGateway):
    """MongoUserGateway over an InMemoryCollection, with unique indexes in place."""

    def __init__(self) -> None:
        super().__init__(InMemoryCollection())
        self.ensure_indexes()
