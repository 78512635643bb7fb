"""Error classification shared by every user gateway implementation.

Handlers match on these types only; driver-specific exceptions never leave the gateway.
"""


class UserServiceError(Exception):
    """Base class for classified gateway failures."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class ValidationError(UserServiceError):
    """Input is missing or malformed; raised before any database call."""


class InvalidIdError(ValidationError):
    """The identifier is not a 24-character hex ObjectId."""

    def __init__(self, raw_id: str) -> None:
        self.raw_id = raw_id
        super().__init__(f"invalid user ID: {raw_id!r}")


class NotFoundError(UserServiceError):
    """No user matches the identifier."""

    def __init__(self, message: str = "User not found") -> None:
        super().__init__(message)


class ConflictError(UserServiceError):
    """A natural key (user_id or email) is already claimed by a different user."""

    def __init__(self, field: str) -> None:
        self.field = field
        super().__init__(f"user with this {field} already exists")


class TransientStoreError(UserServiceError):
    """The database call itself failed (connectivity, timeout, decode)."""

    def __init__(self, message: str, cause: Exception | None = None) -> None:
        self.cause = cause
        super().__init__(message)
