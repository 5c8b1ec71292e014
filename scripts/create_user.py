"""Register a user and print a bearer token for the notification API."""

from __future__ import annotations

import argparse
from datetime import timedelta

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from notifyhub.domain.entities import ROLE_ADMIN, ROLE_CLIENT, User
from notifyhub.infrastructure.database import SessionLocal, initialize_database
from notifyhub.infrastructure.repositories import UserRepository
from notifyhub.infrastructure.security import create_access_token


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Create a user (or reuse an existing one) and print an access token.",
    )
    parser.add_argument("--email", default="admin@example.com", help="User email (default: admin@example.com)")
    parser.add_argument("--name", default="Administrator", help="Display name (default: Administrator)")
    parser.add_argument(
        "--role",
        choices=(ROLE_ADMIN, ROLE_CLIENT),
        default=ROLE_ADMIN,
        help="Role of the new user (default: admin)",
    )
    parser.add_argument(
        "--expires-minutes",
        type=int,
        default=None,
        help="Token lifetime; defaults to ACCESS_TOKEN_EXPIRE_MINUTES",
    )
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    initialize_database()

    session = SessionLocal()
    try:
        repository = UserRepository(session)
        user = repository.get_by_email(args.email)
        if user is None:
            user = repository.create(User(id=None, email=args.email, name=args.name, role=args.role))
            print(f"Created user {user.id} <{user.email}> with role {user.role}")
        else:
            print(f"Reusing user {user.id} <{user.email}> with role {user.role}")
    except IntegrityError as exc:
        session.rollback()
        raise SystemExit(f"Could not create the user: {exc}") from exc
    except SQLAlchemyError as exc:
        session.rollback()
        raise SystemExit(f"Database error while saving the user: {exc}") from exc
    finally:
        session.close()

    expires = timedelta(minutes=args.expires_minutes) if args.expires_minutes else None
    print(create_access_token({"sub": user.email}, expires_delta=expires))


if __name__ == "__main__":
    main()
