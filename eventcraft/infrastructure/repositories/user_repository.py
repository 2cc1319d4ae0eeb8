"""Persistence layer for user data."""

from __future__ import annotations

from collections.abc import Sequence

from sqlalchemy.orm import Session

from eventcraft.domain.entities import User
from eventcraft.infrastructure.models import UserModel


class UserRepository:
    """Read users and maintain their notification preferences."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get(self, user_id: int) -> User | None:
        model = self.session.get(UserModel, user_id)
        return self._to_entity(model) if model else None

    def get_map_by_ids(self, user_ids: Sequence[int]) -> dict[int, User]:
        if not user_ids:
            return {}

        unique_ids = {int(user_id) for user_id in user_ids}
        models = self.session.query(UserModel).filter(UserModel.id.in_(unique_ids)).all()
        return {model.id: self._to_entity(model) for model in models}

    def create(self, user: User) -> User:
        model = UserModel()
        self._apply_entity_to_model(model, user)
        self.session.add(model)
        self.session.commit()
        self.session.refresh(model)
        return self._to_entity(model)

    def update_preferences(
        self,
        user_id: int,
        *,
        email: bool | None = None,
        sms: bool | None = None,
        event_categories: list[str] | None = None,
    ) -> User:
        model = self.session.get(UserModel, user_id)
        if model is None:
            msg = f"User with id {user_id} not found"
            raise ValueError(msg)
        if email is not None:
            model.notify_email = email
        if sms is not None:
            model.notify_sms = sms
        if event_categories is not None:
            model.event_categories = list(event_categories)
        self.session.add(model)
        self.session.commit()
        self.session.refresh(model)
        return self._to_entity(model)

    @staticmethod
    def _apply_entity_to_model(model: UserModel, user: User) -> None:
        model.name = user.name
        model.email = user.email
        model.phone = user.phone
        model.role = user.role
        model.notify_email = user.notify_email
        model.notify_sms = user.notify_sms
        model.event_categories = list(user.event_categories or [])

    @staticmethod
    def _to_entity(model: UserModel) -> User:
        return User(
            id=model.id,
            name=model.name,
            email=model.email,
            role=model.role,
            phone=model.phone,
            notify_email=bool(model.notify_email),
            notify_sms=bool(model.notify_sms),
            event_categories=list(model.event_categories or []),
            created_at=model.created_at,
            updated_at=model.updated_at,
        )


__all__ = ["UserRepository"]
