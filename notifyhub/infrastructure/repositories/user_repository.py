"""Persistence layer for user data."""

from __future__ import annotations

from sqlalchemy.orm import Session

from notifyhub.domain.entities import User
from notifyhub.infrastructure.database import store_errors
from notifyhub.infrastructure.models import UserModel


class UserRepository:
    """Look up and register caller identities."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get(self, user_id: int) -> User | None:
        with store_errors(self.session):
            model = self.session.get(UserModel, user_id)
        return self._to_entity(model) if model else None

    def get_by_email(self, email: str) -> User | None:
        with store_errors(self.session):
            model = (
                self.session.query(UserModel)
                .filter(UserModel.email == email.strip().lower())
                .one_or_none()
            )
        return self._to_entity(model) if model else None

    def create(self, user: User) -> User:
        model = UserModel(
            email=user.email.strip().lower(),
            name=user.name,
            role=user.role,
            is_active=user.is_active,
        )
        with store_errors(self.session):
            self.session.add(model)
            self.session.commit()
            self.session.refresh(model)
        return self._to_entity(model)

    @staticmethod
    def _to_entity(model: UserModel) -> User:
        return User(
            id=model.id,
            email=model.email,
            name=model.name,
            role=model.role,
            is_active=bool(model.is_active),
        )


__all__ = ["UserRepository"]
