"""MongoDB client lifecycle and the user gateway dependency."""

import logging
from typing import TYPE_CHECKING

from fastapi import Request
from pymongo import MongoClient
from pymongo.errors import PyMongoError

from app.services.memory_gateway import InMemoryUserGateway
from app.services.user_gateway import MongoUserGateway, UserGateway

if TYPE_CHECKING:
    from app.core.config import Settings

logger = logging.getLogger(__name__)


class DatabaseConnectionError(Exception):
    """Raised when MongoDB cannot be reached at startup."""

    def __init__(self, message: str, cause: Exception | None = None) -> None:
        self.message = message
        self.cause = cause
        super().__init__(message)


def create_client(settings: "Settings") -> MongoClient:
    """
    Connect to MongoDB and verify the connection with a ping.

    The returned client is thread-safe and meant to live for the whole process.
    Raises DatabaseConnectionError if the server is unreachable within
    MONGODB_CONNECT_TIMEOUT_MS.
    """
    kwargs: dict[str, object] = {
        "tz_aware": True,
        "timeoutMS": settings.MONGODB_TIMEOUT_MS,
        "serverSelectionTimeoutMS": settings.MONGODB_CONNECT_TIMEOUT_MS,
        "connectTimeoutMS": settings.MONGODB_CONNECT_TIMEOUT_MS,
    }
    if settings.MONGODB_USER and settings.MONGODB_PASSWORD is not None:
        kwargs["username"] = settings.MONGODB_USER
        kwargs["password"] = settings.MONGODB_PASSWORD.get_secret_value()
        kwargs["authSource"] = settings.MONGODB_AUTH_SOURCE
    try:
        client: MongoClient = MongoClient(settings.MONGODB_URI, **kwargs)
    except (PyMongoError, ValueError) as e:
        raise DatabaseConnectionError(f"failed to connect to MongoDB: {e}", e) from e
    try:
        client.admin.command("ping")
    except PyMongoError as e:
        client.close()
        raise DatabaseConnectionError(f"failed to ping MongoDB: {e}", e) from e
    logger.info("Connected to MongoDB at %s (database=%s)", settings.MONGODB_URI, settings.DATABASE_NAME)
    return client


def build_user_gateway(
    settings: "Settings", client: MongoClient | None = None
) -> UserGateway:
    """Return the gateway selected by STORAGE_BACKEND; Mongo gateways get their unique indexes."""
    if settings.STORAGE_BACKEND == "memory":
        logger.warning("Using in-memory user storage; data is lost on restart.")
        return InMemoryUserGateway()
    if client is None:
        raise ValueError("a MongoClient is required when STORAGE_BACKEND is 'mongo'")
    collection = client[settings.DATABASE_NAME][settings.USERS_COLLECTION]
    gateway = MongoUserGateway(collection)
    gateway.ensure_indexes()
    return gateway


def get_user_gateway(request: Request) -> UserGateway:
    """Dependency returning the gateway built at startup."""
    return request.app.state.user_gateway
