"""Domain entities."""

from app.models.user import User, next_timestamp, utc_now

__all__ = ["User", "next_timestamp", "utc_now"]
