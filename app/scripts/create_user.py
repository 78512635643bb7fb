"""
Create a user directly in storage (e.g. to seed an environment). Run from project root:
  python -m app.scripts.create_user USER_ID EMAIL PASSWORD
Example:
  python -m app.scripts.create_user alice alice@example.com your-secure-password
"""
import argparse
import sys

from pydantic import ValidationError as SchemaValidationError

from app.core.config import get_settings
from app.core.database import DatabaseConnectionError, build_user_gateway, create_client
from app.schemas.user import CreateUserRequest
from app.services.errors import UserServiceError


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Create a user (same uniqueness rules as POST /users).")
    parser.add_argument("user_id", help="Natural key, unique across users")
    parser.add_argument("email", help="Email, unique across users")
    parser.add_argument("password", help="Plain-text password (hashed before storage)")
    args = parser.parse_args(argv)

    try:
        req = CreateUserRequest(
            user_id=args.user_id.strip(),
            email=args.email.strip(),
            password=args.password,
        )
    except SchemaValidationError:
        print("user_id, email, and password are required.", file=sys.stderr)
        return 1

    settings = get_settings()
    client = None
    try:
        if settings.STORAGE_BACKEND == "mongo":
            client = create_client(settings)
        gateway = build_user_gateway(settings, client)
        user = gateway.create(req)
    except DatabaseConnectionError as e:
        print(e.message, file=sys.stderr)
        return 1
    except UserServiceError as e:
        print(f"Could not create user '{req.user_id}': {e.message}", file=sys.stderr)
        return 1
    finally:
        if client is not None:
            client.close()
    print(f"Created user '{user.user_id}' with id {user.id}.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
