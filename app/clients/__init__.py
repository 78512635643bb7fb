"""Clients for the user management API."""

from app.clients.user_api import ApiError, UserApiClient

__all__ = ["ApiError", "UserApiClient"]
